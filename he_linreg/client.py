import logging

import numpy as np
from sklearn.metrics import mean_squared_error

from he_linreg import stats
from he_linreg.circuits import compile_program
from he_linreg.config import VEC_SIZE
from he_linreg.encoding import EncodingKind
from he_linreg.exceptions import DecryptionError, EncodingError
from he_linreg.runtime import EncryptedVector, Runtime

logger = logging.getLogger(__name__)


def root_mean_squared_error(y_test, y_pred):
    return float(np.sqrt(mean_squared_error(y_test, y_pred)))


class Client:
    """Owner of the key pair: encrypts inputs and decrypts results.

    The private key stays inside the client, only ``public_key`` is meant to
    be handed to a Server.
    """

    def __init__(self, encoding=EncodingKind.RATIONAL, program=None):
        self.program = program or compile_program(EncodingKind(encoding))
        self.runtime = Runtime(self.program)
        self._keys = self.runtime.generate_keys()

    @property
    def public_key(self):
        return self._keys.public_key

    @property
    def encoding(self):
        return self.runtime.encoding

    def encrypt(self, value):
        encoded = self.encoding.encode(value)
        return self.runtime.encrypt(encoded, self.public_key)

    def encrypt_vector(self, values):
        values = list(values)
        stats.check_width(values, "input")
        encoded = [self.encoding.encode(value) for value in values]
        return EncryptedVector(
            tuple(self.runtime.encrypt(number, self.public_key) for number in encoded)
        )

    def decrypt(self, ciphertext):
        encoded = self.runtime.decrypt(ciphertext, self._keys.private_key)
        try:
            return encoded.value
        except EncodingError as exc:
            raise DecryptionError(f"decrypted value is not representable: {exc}") from exc

    def decrypt_vector(self, ciphertexts):
        return [self.decrypt(ciphertext) for ciphertext in ciphertexts]

    def decrypt_model(self, model):
        return self.decrypt(model.intercept), self.decrypt(model.coefficient)

    def variance_inverse(self, values):
        """Encrypted 1 / variance(values), for fitting with fixed-point values."""
        values = [float(value) for value in stats.check_width(list(values), "input")]
        var = stats.variance(values, 1.0 / VEC_SIZE)
        if var == 0:
            raise EncodingError("the inputs have zero variance, a regression line is undefined")
        return self.encrypt(1.0 / var)

    def invert(self, ciphertext):
        # second round trip of the fixed-point fit: the server's variance comes back inverted
        value = self.decrypt(ciphertext)
        if value == 0:
            raise EncodingError("cannot invert an encrypted zero")
        return self.encrypt(1.0 / value)

    def evaluate(self, y_test, y_pred):
        rmse = root_mean_squared_error(y_test, y_pred)
        logger.info(f"RMSE on {len(y_test)} predictions: {rmse}")
        return rmse
