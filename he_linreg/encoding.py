"""Numeric encodings for values that go through the CKKS scheme.

Two strategies are available and a deployment uses exactly one of them:

- Rational: a numerator/denominator pair. Division between two encrypted
  rationals is a pair of multiplications, so a divisor can itself be a
  ciphertext. Fresh values carry a unit denominator which is never
  encrypted; only division introduces an encrypted denominator.
- FixedPoint: a single scaled integer (the CKKS scale). It supports
  addition, subtraction and multiplication, but no division by a
  ciphertext. Divisors have to be inverted by the client beforehand.
"""

import math
from dataclasses import dataclass
from enum import Enum

from he_linreg.config import HEADROOM_BITS, INTEGER_BITS, NOISE_FLOOR, SCALE_BITS
from he_linreg.exceptions import EncodingError


class EncodingKind(str, Enum):
    RATIONAL = "rational"
    FIXED_POINT = "fixed_point"


@dataclass(frozen=True)
class Rational:
    numerator: float
    denominator: float = 1.0

    kind = EncodingKind.RATIONAL

    @classmethod
    def of(cls, numerator, denominator):
        if denominator == 0:
            raise EncodingError("rational denominator must be non-zero")
        return cls(float(numerator), float(denominator))

    @property
    def unit(self):
        return self.denominator == 1.0

    @property
    def components(self):
        if self.unit:
            return (self.numerator,)
        return (self.numerator, self.denominator)

    @property
    def value(self):
        if abs(self.denominator) < NOISE_FLOOR:
            raise EncodingError(
                f"denominator {self.denominator!r} is indistinguishable from zero"
            )
        if abs(self.numerator) >= abs(self.denominator) * 2 ** HEADROOM_BITS:
            raise EncodingError(
                f"{self.numerator!r} / {self.denominator!r} overflows the encrypted range"
            )
        return self.numerator / self.denominator


@dataclass(frozen=True)
class FixedPoint:
    mantissa: int
    scale_bits: int = SCALE_BITS

    kind = EncodingKind.FIXED_POINT

    @property
    def components(self):
        return (self.value,)

    @property
    def value(self):
        return self.mantissa / 2 ** self.scale_bits


def _check_magnitude(value, integer_bits):
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"{value!r} is not a real number") from exc
    if not math.isfinite(value):
        raise EncodingError(f"{value!r} is not finite")
    if abs(value) >= 2 ** integer_bits:
        raise EncodingError(
            f"{value!r} overflows the {integer_bits}-bit integer part of the encoding"
        )
    return value


class RationalEncoding:
    kind = EncodingKind.RATIONAL

    def __init__(self, integer_bits=INTEGER_BITS):
        self.integer_bits = integer_bits

    def encode(self, value):
        return Rational(_check_magnitude(value, self.integer_bits))

    def decode(self, components):
        if len(components) == 1:
            return Rational(float(components[0]))
        numerator, denominator = components
        return Rational(float(numerator), float(denominator))


class FixedPointEncoding:
    kind = EncodingKind.FIXED_POINT

    def __init__(self, scale_bits=SCALE_BITS, integer_bits=INTEGER_BITS):
        self.scale_bits = scale_bits
        self.integer_bits = integer_bits

    def encode(self, value):
        value = _check_magnitude(value, self.integer_bits)
        return FixedPoint(round(value * 2 ** self.scale_bits), self.scale_bits)

    def decode(self, components):
        (value,) = components
        return FixedPoint(round(float(value) * 2 ** self.scale_bits), self.scale_bits)


def encoding_for(kind, **kwargs):
    kind = EncodingKind(kind)
    if kind is EncodingKind.RATIONAL:
        return RationalEncoding(**kwargs)
    return FixedPointEncoding(**kwargs)
