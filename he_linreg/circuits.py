"""Circuit definitions and their compilation into CKKS parameters.

Compiling traces every circuit with DepthProbe operands to find how many
multiplications the longest chain needs, following fit outputs into
predict, and then picks the smallest parameter set with that many primes.
"""

import functools
import logging
from dataclasses import dataclass

from he_linreg import stats
from he_linreg.config import VEC_SIZE, select_parameters
from he_linreg.encoding import EncodingKind
from he_linreg.exceptions import CircuitCompilationError, CircuitError
from he_linreg.numeric import DepthProbe, FixedPointCipher, RationalCipher, depth_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operand:
    name: str
    vector: bool = False
    # (circuit name, output index) when the operand is another circuit's result
    source: tuple = None


@dataclass(frozen=True)
class Circuit:
    name: str
    function: object
    operands: tuple
    outputs: int = 1


def _vector(name):
    return Operand(name, vector=True)


def circuits_for(encoding):
    encoding = EncodingKind(encoding)
    fit_operands = (_vector("x"), _vector("y"), Operand("divisor"))
    if encoding is EncodingKind.FIXED_POINT:
        fit_operands += (Operand("var_x_inverse"),)
    return (
        Circuit("mean", stats.mean, (_vector("x"), Operand("divisor"))),
        Circuit("variance", stats.variance, (_vector("x"), Operand("divisor"))),
        Circuit("covariance", stats.covariance, (_vector("x"), _vector("y"), Operand("divisor"))),
        Circuit(
            "mean_absolute_error",
            stats.mean_absolute_error,
            (_vector("y_pred"), _vector("y_test"), Operand("divisor")),
        ),
        Circuit(
            "mean_squared_error",
            stats.mean_squared_error,
            (_vector("y_pred"), _vector("y_test"), Operand("divisor")),
        ),
        Circuit("fit", stats.fit, fit_operands, outputs=2),
        Circuit(
            "predict",
            stats.predict,
            (
                Operand("intercept", source=("fit", 0)),
                Operand("coefficient", source=("fit", 1)),
                Operand("x"),
            ),
        ),
    )


def wrap(encoding, value):
    if encoding is EncodingKind.FIXED_POINT:
        return FixedPointCipher(value)
    return RationalCipher(value)


@dataclass(frozen=True)
class CompiledProgram:
    encoding: EncodingKind
    circuits: tuple
    depths: dict
    parameters: object

    def circuit(self, name):
        for circuit in self.circuits:
            if circuit.name == name:
                return circuit
        raise CircuitError(f"no circuit named '{name}' in the compiled program")

    @property
    def names(self):
        return tuple(circuit.name for circuit in self.circuits)


def _trace(encoding, circuit, traced):
    arguments = []
    for operand in circuit.operands:
        if operand.source is not None:
            source, index = operand.source
            if source not in traced:
                raise CircuitCompilationError(
                    f"circuit '{circuit.name}' reads '{source}' which is not defined before it"
                )
            arguments.append(traced[source][index])
        elif operand.vector:
            arguments.append(tuple(wrap(encoding, DepthProbe()) for _ in range(VEC_SIZE)))
        else:
            arguments.append(wrap(encoding, DepthProbe()))
    try:
        outputs = circuit.function(*arguments)
    except (TypeError, ArithmeticError, CircuitError) as exc:
        raise CircuitCompilationError(f"circuit '{circuit.name}' does not compile: {exc}") from exc
    if circuit.outputs == 1:
        outputs = (outputs,)
    if not isinstance(outputs, tuple) or len(outputs) != circuit.outputs:
        raise CircuitCompilationError(
            f"circuit '{circuit.name}' should return {circuit.outputs} value(s)"
        )
    return outputs


def compile_circuits(encoding, circuits):
    encoding = EncodingKind(encoding)
    traced = {}
    depths = {}
    for circuit in circuits:
        if circuit.name in traced:
            raise CircuitCompilationError(f"circuit '{circuit.name}' is defined twice")
        outputs = _trace(encoding, circuit, traced)
        traced[circuit.name] = outputs
        depths[circuit.name] = max(depth_of(output) for output in outputs)

    depth = max(depths.values(), default=0)
    parameters = select_parameters(depth)
    if parameters is None:
        raise CircuitCompilationError(
            f"no CKKS parameter set supports a multiplicative depth of {depth}"
        )
    logger.info(
        f"compiled {len(circuits)} {encoding.value} circuits: depth {depth}, "
        f"poly_modulus_degree {parameters.poly_modulus_degree}, "
        f"coeff_mod_bit_sizes {list(parameters.coeff_mod_bit_sizes)}"
    )
    return CompiledProgram(encoding, tuple(circuits), depths, parameters)


@functools.lru_cache(maxsize=None)
def compile_program(encoding=EncodingKind.RATIONAL):
    """Compile the regression circuits once per process and encoding."""
    encoding = EncodingKind(encoding)
    return compile_circuits(encoding, circuits_for(encoding))
