"""Errors raised by the encrypted regression pipeline."""


class HELinRegError(Exception):
    """Base exception for the project."""


class EncodingError(HELinRegError):
    """Raised when a value cannot be represented under the chosen encoding."""


class DecryptionError(HELinRegError):
    """Raised when a ciphertext cannot be decrypted to a meaningful value."""


class CircuitError(HELinRegError):
    """Raised when a circuit invocation receives malformed operands."""


class ShapeError(CircuitError):
    """Raised when a vector does not hold exactly VEC_SIZE elements."""


class KeyMismatchError(DecryptionError, CircuitError):
    """Raised when a ciphertext was produced under a different key pair."""


class CircuitCompilationError(CircuitError):
    """Raised when the circuit set cannot be compiled into a program."""


class CircuitEvaluationError(CircuitError):
    """Raised when the encryption library fails while evaluating a circuit."""
