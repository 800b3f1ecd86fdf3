"""Statistics and closed-form least squares, written once for any numeric type.

Each function only uses ``+``, ``-`` and ``*`` on its operands (``fit`` also
uses ``/`` unless a precomputed inverse is given), so the same code runs on
plain floats, on encrypted fixed-point values and on encrypted rationals.
No function divides by the vector length: the caller supplies ``divisor``,
which stands for ``1 / VEC_SIZE``.
"""

from he_linreg.config import VEC_SIZE
from he_linreg.exceptions import ShapeError


def check_width(values, name="vector"):
    if len(values) != VEC_SIZE:
        raise ShapeError(f"{name} must hold exactly {VEC_SIZE} elements, got {len(values)}")
    return values


def _total(values):
    # start from the first element, circuits have no encrypted zero to add to
    total = values[0]
    for value in values[1:]:
        total = total + value
    return total


def mean(x, divisor):
    check_width(x, "x")
    return _total(x) * divisor


def variance(x, divisor):
    check_width(x, "x")
    m = mean(x, divisor)
    return _total([(value - m) * (value - m) for value in x]) * divisor


def covariance(x, y, divisor):
    check_width(x, "x")
    check_width(y, "y")
    mean_x = mean(x, divisor)
    mean_y = mean(y, divisor)
    return _total([(a - mean_x) * (b - mean_y) for a, b in zip(x, y)]) * divisor


def mean_absolute_error(y_pred, y_test, divisor):
    """Mean *signed* error of the predictions.

    There is no absolute value under encryption, so the differences are
    accumulated with their sign and positive and negative errors cancel out.
    Use mean_squared_error when that matters.
    """
    check_width(y_pred, "y_pred")
    check_width(y_test, "y_test")
    return _total([p - t for p, t in zip(y_pred, y_test)]) * divisor


def mean_squared_error(y_pred, y_test, divisor):
    check_width(y_pred, "y_pred")
    check_width(y_test, "y_test")
    return _total([(p - t) * (p - t) for p, t in zip(y_pred, y_test)]) * divisor


def fit(x, y, divisor, var_x_inverse=None):
    """Ordinary least squares for one feature.

    Returns ``(intercept, coefficient)``. With ``var_x_inverse`` the slope is
    a multiplication, which is how the fixed-point encoding gets by without
    division.
    """
    if var_x_inverse is None:
        coefficient = covariance(x, y, divisor) / variance(x, divisor)
    else:
        coefficient = covariance(x, y, divisor) * var_x_inverse
    intercept = mean(y, divisor) - coefficient * mean(x, divisor)
    return intercept, coefficient


def predict(intercept, coefficient, x):
    return intercept + coefficient * x
