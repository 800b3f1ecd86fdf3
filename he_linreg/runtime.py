"""TenSEAL-backed evaluation of compiled circuits.

Ciphertexts cross the client/server boundary serialized. The server only
ever deserializes them into a context that holds no secret key.
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from time import time

import tenseal as ts

from he_linreg.circuits import wrap
from he_linreg.config import CONTEXT_CACHE_SIZE, VEC_SIZE
from he_linreg.encoding import EncodingKind, encoding_for
from he_linreg.exceptions import (
    CircuitError,
    CircuitEvaluationError,
    DecryptionError,
    EncodingError,
    KeyMismatchError,
    ShapeError,
)
from he_linreg.numeric import FixedPointCipher, RationalCipher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptedScalar:
    encoding: EncodingKind
    key_id: str
    components: tuple = field(repr=False)

    def __post_init__(self):
        if self.encoding is EncodingKind.FIXED_POINT and len(self.components) != 1:
            raise CircuitError("a fixed-point ciphertext has exactly one component")
        if self.encoding is EncodingKind.RATIONAL and len(self.components) not in (1, 2):
            raise CircuitError("a rational ciphertext has a numerator and an optional denominator")


@dataclass(frozen=True)
class EncryptedVector:
    elements: tuple

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))
        if len(self.elements) != VEC_SIZE:
            raise ShapeError(
                f"an encrypted vector holds exactly {VEC_SIZE} elements, got {len(self.elements)}"
            )
        for element in self.elements:
            if not isinstance(element, EncryptedScalar):
                raise CircuitError(f"vector element {element!r} is not an EncryptedScalar")

    def __len__(self):
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)

    def __getitem__(self, index):
        return self.elements[index]


@dataclass(frozen=True)
class PublicKey:
    key_id: str
    encoding: EncodingKind
    parameters: object
    context: bytes = field(repr=False)


@dataclass(frozen=True)
class PrivateKey:
    key_id: str
    context: object = field(repr=False)

    def __repr__(self):
        return f"PrivateKey(key_id={self.key_id!r}, <redacted>)"


@dataclass(frozen=True)
class KeyPair:
    public_key: PublicKey
    private_key: PrivateKey


class Runtime:
    """Runs one compiled program against TenSEAL CKKS ciphertexts."""

    def __init__(self, program):
        self.program = program
        self.encoding = encoding_for(program.encoding)
        # public contexts already deserialized, by key id
        self._contexts = OrderedDict()

    @property
    def parameters(self):
        return self.program.parameters

    def generate_keys(self):
        parameters = self.parameters
        t_start = time()
        context = ts.context(
            ts.SCHEME_TYPE.CKKS,
            poly_modulus_degree=parameters.poly_modulus_degree,
            coeff_mod_bit_sizes=list(parameters.coeff_mod_bit_sizes),
        )
        context.global_scale = parameters.global_scale
        # relinearization keys are needed for ciphertext-ciphertext multiplication
        context.generate_relin_keys()
        public_context = context.serialize(
            save_public_key=True,
            save_secret_key=False,
            save_galois_keys=False,
            save_relin_keys=True,
        )
        key_id = uuid.uuid4().hex
        t_end = time()
        logger.info(
            f"generated key pair {key_id} (poly_modulus_degree {parameters.poly_modulus_degree}) "
            f"in {t_end - t_start:.2f} seconds"
        )
        return KeyPair(
            PublicKey(key_id, self.program.encoding, parameters, public_context),
            PrivateKey(key_id, context),
        )

    def _context_for(self, public_key):
        if public_key.encoding is not self.program.encoding:
            raise KeyMismatchError(
                f"key {public_key.key_id} was made for {public_key.encoding.value} values, "
                f"the program runs {self.program.encoding.value}"
            )
        if public_key.parameters != self.parameters:
            raise KeyMismatchError(
                f"key {public_key.key_id} does not match the compiled encryption parameters"
            )
        context = self._contexts.get(public_key.key_id)
        if context is not None:
            self._contexts.move_to_end(public_key.key_id)
            return context
        context = ts.context_from(public_key.context)
        if context.is_private():
            raise KeyMismatchError("a public key must not carry the secret key")
        context.global_scale = self.parameters.global_scale
        self._contexts[public_key.key_id] = context
        if len(self._contexts) > CONTEXT_CACHE_SIZE:
            evicted, _ = self._contexts.popitem(last=False)
            logger.debug(f"dropped cached context of key {evicted}")
        return context

    def encrypt(self, encoded, public_key):
        if encoded.kind is not self.program.encoding:
            raise EncodingError(
                f"cannot encrypt a {encoded.kind.value} value with a {self.program.encoding.value} program"
            )
        context = self._context_for(public_key)
        components = tuple(
            ts.ckks_vector(context, [component]).serialize() for component in encoded.components
        )
        return EncryptedScalar(self.program.encoding, public_key.key_id, components)

    def decrypt(self, scalar, private_key):
        if scalar.key_id != private_key.key_id:
            raise KeyMismatchError(
                f"ciphertext was encrypted under key {scalar.key_id}, not {private_key.key_id}"
            )
        if scalar.encoding is not self.program.encoding:
            raise DecryptionError(
                f"ciphertext holds a {scalar.encoding.value} value, expected {self.program.encoding.value}"
            )
        try:
            components = [
                ts.ckks_vector_from(private_key.context, data).decrypt()[0]
                for data in scalar.components
            ]
        except (ValueError, RuntimeError, TypeError) as exc:
            raise DecryptionError(f"malformed ciphertext: {exc}") from exc
        return self.encoding.decode(components)

    def _load(self, context, scalar, public_key, name):
        if not isinstance(scalar, EncryptedScalar):
            raise CircuitError(f"operand '{name}' expects an encrypted scalar, got {type(scalar).__name__}")
        if scalar.key_id != public_key.key_id:
            raise KeyMismatchError(
                f"operand '{name}' was encrypted under key {scalar.key_id}, not {public_key.key_id}"
            )
        if scalar.encoding is not self.program.encoding:
            raise CircuitError(
                f"operand '{name}' holds a {scalar.encoding.value} value, "
                f"the program runs {self.program.encoding.value}"
            )
        try:
            vectors = [ts.ckks_vector_from(context, data) for data in scalar.components]
        except (ValueError, RuntimeError, TypeError) as exc:
            raise CircuitError(f"operand '{name}' is not a valid ciphertext: {exc}") from exc
        if len(vectors) == 1:
            return wrap(self.program.encoding, vectors[0])
        return RationalCipher(vectors[0], vectors[1])

    def _store(self, value, public_key):
        if isinstance(value, FixedPointCipher):
            components = (value.value.serialize(),)
        elif value.denominator is None:
            components = (value.numerator.serialize(),)
        else:
            components = (value.numerator.serialize(), value.denominator.serialize())
        return EncryptedScalar(self.program.encoding, public_key.key_id, components)

    def run(self, name, arguments, public_key):
        circuit = self.program.circuit(name)
        if len(arguments) != len(circuit.operands):
            raise CircuitError(
                f"circuit '{name}' takes {len(circuit.operands)} operands, got {len(arguments)}"
            )
        context = self._context_for(public_key)

        loaded = []
        for operand, argument in zip(circuit.operands, arguments):
            if operand.vector:
                if not isinstance(argument, EncryptedVector):
                    raise ShapeError(f"operand '{operand.name}' of '{name}' expects an encrypted vector")
                loaded.append(
                    tuple(self._load(context, s, public_key, operand.name) for s in argument)
                )
            else:
                loaded.append(self._load(context, argument, public_key, operand.name))

        t_start = time()
        try:
            outputs = circuit.function(*loaded)
        except (ValueError, RuntimeError) as exc:
            raise CircuitEvaluationError(f"circuit '{name}' failed: {exc}") from exc
        t_end = time()
        logger.debug(f"circuit '{name}' evaluated in {t_end - t_start:.3f} seconds")

        if circuit.outputs == 1:
            outputs = (outputs,)
        return [self._store(output, public_key) for output in outputs]
