import logging

from he_linreg.circuits import compile_program
from he_linreg.exceptions import CircuitCompilationError
from he_linreg.model import LinearRegression
from he_linreg.runtime import Runtime

logger = logging.getLogger(__name__)


class Server:
    """Evaluates the compiled circuits for one client, holding its public key only."""

    def __init__(self, public_key, program=None):
        self.program = program or compile_program(public_key.encoding)
        if self.program.encoding is not public_key.encoding:
            raise CircuitCompilationError(
                f"the program was compiled for {self.program.encoding.value} values, "
                f"the client's key for {public_key.encoding.value}"
            )
        if self.program.parameters != public_key.parameters:
            raise CircuitCompilationError(
                "the compiled program and the client's key use different encryption parameters"
            )
        self.client_public_key = public_key
        self.runtime = Runtime(self.program)
        self.regression = LinearRegression(self.runtime, public_key)

    def _statistic(self, name, *vectors):
        arguments = list(vectors) + [self.regression.divisor()]
        return self.runtime.run(name, arguments, self.client_public_key)[0]

    def mean(self, x_values):
        return self._statistic("mean", x_values)

    def variance(self, x_values):
        return self._statistic("variance", x_values)

    def covariance(self, x_values, y_values):
        return self._statistic("covariance", x_values, y_values)

    def mean_absolute_error(self, y_pred, y_test):
        # signed: see he_linreg.stats.mean_absolute_error
        return self._statistic("mean_absolute_error", y_pred, y_test)

    def mean_squared_error(self, y_pred, y_test):
        return self._statistic("mean_squared_error", y_pred, y_test)

    def fit(self, x_values, y_values, var_x_inverse=None):
        return self.regression.fit(x_values, y_values, var_x_inverse)

    def predict(self, model, x_value):
        return self.regression.predict(model, x_value)

    def predict_list(self, model, x_values):
        return self.regression.predict_list(model, x_values)
