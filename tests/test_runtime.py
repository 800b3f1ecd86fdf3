import pytest
import tenseal as ts

from he_linreg import stats
from he_linreg.config import CONTEXT_CACHE_SIZE, VEC_SIZE
from he_linreg.encoding import EncodingKind
from he_linreg.exceptions import CircuitError, ShapeError
from he_linreg.numeric import FixedPointCipher, RationalCipher
from he_linreg.runtime import EncryptedVector, Runtime

X = [1.0, 2.0, 3.0, 4.0, 5.0]
Y = [0.5, 1.0, 2.5, 3.0, 3.25]
DIVISOR = 1.0 / VEC_SIZE

PLAIN_VECTORS = {"x": X, "y": Y, "y_pred": X, "y_test": Y}
PLAIN_SCALARS = {
    "divisor": DIVISOR,
    "var_x_inverse": 1.0 / stats.variance(X, DIVISOR),
    "x": 2.0,
}


@pytest.fixture(params=list(EncodingKind), ids=lambda kind: kind.value)
def client(request):
    if request.param is EncodingKind.RATIONAL:
        return request.getfixturevalue("rational_client")
    return request.getfixturevalue("fixed_point_client")


def test_every_circuit_matches_plain_on_ciphertexts(client) -> None:
    # a runtime of its own that only ever sees the public key
    runtime = Runtime(client.program)
    public_key = client.public_key
    encrypted_outputs = {}
    plain_outputs = {}

    for circuit in client.program.circuits:
        arguments = []
        plain_arguments = []
        for operand in circuit.operands:
            if operand.source is not None:
                source, index = operand.source
                arguments.append(encrypted_outputs[source][index])
                plain_arguments.append(plain_outputs[source][index])
            elif operand.vector:
                values = PLAIN_VECTORS[operand.name]
                arguments.append(client.encrypt_vector(values))
                plain_arguments.append(values)
            else:
                value = PLAIN_SCALARS[operand.name]
                arguments.append(client.encrypt(value))
                plain_arguments.append(value)

        outputs = runtime.run(circuit.name, arguments, public_key)
        expected = circuit.function(*plain_arguments)
        if circuit.outputs == 1:
            expected = (expected,)
        assert len(outputs) == circuit.outputs
        encrypted_outputs[circuit.name] = outputs
        plain_outputs[circuit.name] = expected

        decrypted = [client.decrypt(output) for output in outputs]
        assert decrypted == pytest.approx(list(expected), abs=1e-5), circuit.name


def test_circuits_reach_compiled_depth(client) -> None:
    depths = client.program.depths
    assert depths["predict"] == max(depths.values())
    assert client.program.parameters.depth == depths["predict"]


@pytest.fixture(scope="module")
def context(rational_program):
    parameters = rational_program.parameters
    context = ts.context(
        ts.SCHEME_TYPE.CKKS,
        poly_modulus_degree=parameters.poly_modulus_degree,
        coeff_mod_bit_sizes=list(parameters.coeff_mod_bit_sizes),
    )
    context.global_scale = parameters.global_scale
    context.generate_relin_keys()
    return context


def _power(base, exponent):
    result = base
    for _ in range(exponent - 1):
        result = result * base
    return result


@pytest.mark.parametrize("wrap", [FixedPointCipher, RationalCipher])
def test_shared_operand_keeps_its_level(context, rational_program, wrap) -> None:
    levels = rational_program.parameters.depth + rational_program.parameters.spare_levels
    shared = wrap(ts.ckks_vector(context, [1.1]))
    deep = _power(shared, levels + 1)
    # adding a fresh operand to the deepest value must not drag the operand down
    total = deep + shared
    again = _power(shared, levels + 1)

    def plain(value):
        if isinstance(value, FixedPointCipher):
            return value.value.decrypt()[0]
        return value.numerator.decrypt()[0]

    assert plain(total) == pytest.approx(1.1 ** (levels + 1) + 1.1, abs=1e-5)
    assert plain(again) == pytest.approx(1.1 ** (levels + 1), abs=1e-5)


def test_context_cache_is_bounded(rational_program) -> None:
    runtime = Runtime(rational_program)
    keys = [runtime.generate_keys() for _ in range(CONTEXT_CACHE_SIZE + 1)]
    for pair in keys:
        runtime.encrypt(runtime.encoding.encode(1.0), pair.public_key)

    assert len(runtime._contexts) == CONTEXT_CACHE_SIZE
    assert keys[0].public_key.key_id not in runtime._contexts
    assert keys[-1].public_key.key_id in runtime._contexts

    # an evicted key is simply loaded again
    first = keys[0]
    ciphertext = runtime.encrypt(runtime.encoding.encode(3.0), first.public_key)
    assert runtime.decrypt(ciphertext, first.private_key).value == pytest.approx(3.0, abs=1e-5)
    assert len(runtime._contexts) == CONTEXT_CACHE_SIZE
    assert keys[1].public_key.key_id not in runtime._contexts


def test_vector_where_a_scalar_belongs(rational_client) -> None:
    runtime = Runtime(rational_client.program)
    enc_x = rational_client.encrypt_vector(X)
    assert isinstance(enc_x, EncryptedVector)
    with pytest.raises(CircuitError) as excinfo:
        runtime.run("mean", [enc_x, enc_x], rational_client.public_key)
    assert not isinstance(excinfo.value, ShapeError)
