import logging
from dataclasses import dataclass
from time import time

from he_linreg.config import VEC_SIZE
from he_linreg.encoding import EncodingKind
from he_linreg.exceptions import CircuitError
from he_linreg.runtime import EncryptedScalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncryptedModel:
    intercept: EncryptedScalar
    coefficient: EncryptedScalar


class LinearRegression:
    """Closed-form linear regression fitted and evaluated on ciphertexts.

    Only the client's public key is known here; nothing is ever decrypted.
    """

    def __init__(self, runtime, public_key):
        self.runtime = runtime
        self.public_key = public_key

    def divisor(self):
        # 1 / VEC_SIZE is public, the server encrypts it under the client's key
        encoded = self.runtime.encoding.encode(1.0 / VEC_SIZE)
        return self.runtime.encrypt(encoded, self.public_key)

    def fit(self, x_values, y_values, var_x_inverse=None):
        arguments = [x_values, y_values, self.divisor()]
        if var_x_inverse is not None:
            arguments.append(var_x_inverse)
        elif self.runtime.program.encoding is EncodingKind.FIXED_POINT:
            raise CircuitError(
                "fixed-point values cannot be divided, fit needs the client's var_x_inverse"
            )

        t_start = time()
        intercept, coefficient = self.runtime.run("fit", arguments, self.public_key)
        t_end = time()
        logger.info(f"fitted encrypted model in {t_end - t_start:.2f} seconds")
        return EncryptedModel(intercept, coefficient)

    def predict(self, model, x):
        arguments = [model.intercept, model.coefficient, x]
        return self.runtime.run("predict", arguments, self.public_key)[0]

    def predict_list(self, model, x_values):
        # one circuit call per input, no batching
        t_start = time()
        predictions = [self.predict(model, x) for x in x_values]
        t_end = time()
        logger.info(f"predicted {len(predictions)} encrypted values in {t_end - t_start:.2f} seconds")
        return predictions
