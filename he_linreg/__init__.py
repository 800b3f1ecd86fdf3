"""Linear regression on homomorphically encrypted data.

The client encrypts its data under CKKS (through TenSEAL), the server fits
and evaluates the model on ciphertexts only, and the client decrypts.
"""

from he_linreg.circuits import CompiledProgram, compile_program
from he_linreg.client import Client
from he_linreg.config import VEC_SIZE
from he_linreg.encoding import EncodingKind, FixedPoint, Rational
from he_linreg.exceptions import (
    CircuitCompilationError,
    CircuitError,
    CircuitEvaluationError,
    DecryptionError,
    EncodingError,
    HELinRegError,
    KeyMismatchError,
    ShapeError,
)
from he_linreg.model import EncryptedModel, LinearRegression
from he_linreg.runtime import EncryptedScalar, EncryptedVector, KeyPair, PublicKey, Runtime
from he_linreg.server import Server

__all__ = [
    "VEC_SIZE",
    "CircuitCompilationError",
    "CircuitError",
    "CircuitEvaluationError",
    "Client",
    "CompiledProgram",
    "DecryptionError",
    "EncodingError",
    "EncodingKind",
    "EncryptedModel",
    "EncryptedScalar",
    "EncryptedVector",
    "FixedPoint",
    "HELinRegError",
    "KeyMismatchError",
    "KeyPair",
    "LinearRegression",
    "PublicKey",
    "Rational",
    "Runtime",
    "Server",
    "ShapeError",
    "compile_program",
]
