"""Operand types the statistical circuits are evaluated on.

The circuit library only relies on ``+``, ``-``, ``*`` and, when the
encoding allows it, ``/``. The classes below give encrypted values exactly
that capability set. They wrap whatever the evaluation layer hands them: a
TenSEAL CKKSVector at run time, or a DepthProbe while a circuit is compiled.
"""

import numbers


class DepthProbe:
    """Stand-in ciphertext counting multiplicative depth.

    Every multiplication in CKKS consumes one prime of the coefficient
    modulus, including multiplication by a plaintext constant.
    """

    __slots__ = ("level",)

    def __init__(self, level=0):
        self.level = level

    def _level_of(self, other):
        if isinstance(other, DepthProbe):
            return other.level
        if isinstance(other, numbers.Real):
            return None
        return NotImplemented

    def __add__(self, other):
        level = self._level_of(other)
        if level is NotImplemented:
            return NotImplemented
        return DepthProbe(max(self.level, level or 0))

    __radd__ = __add__
    __sub__ = __add__
    __rsub__ = __add__

    def __mul__(self, other):
        level = self._level_of(other)
        if level is NotImplemented:
            return NotImplemented
        return DepthProbe(max(self.level, level or 0) + 1)

    __rmul__ = __mul__

    def __repr__(self):
        return f"DepthProbe(level={self.level})"


def _detached(value):
    # TenSEAL switches the right-hand ciphertext down to the left one's level
    # in place, so shared operands would sink a level on every use
    if isinstance(value, (numbers.Real, DepthProbe)):
        return value
    return value.copy()


def depth_of(value):
    if isinstance(value, FixedPointCipher):
        return depth_of(value.value)
    if isinstance(value, RationalCipher):
        if value.denominator is None:
            return depth_of(value.numerator)
        return max(depth_of(value.numerator), depth_of(value.denominator))
    if isinstance(value, DepthProbe):
        return value.level
    return 0


class FixedPointCipher:
    """Single scaled ciphertext: add, subtract and multiply only."""

    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    @staticmethod
    def _operand(other):
        if isinstance(other, FixedPointCipher):
            return _detached(other.value)
        if isinstance(other, numbers.Real):
            return float(other)
        return NotImplemented

    def __add__(self, other):
        other = self._operand(other)
        if other is NotImplemented:
            return NotImplemented
        return FixedPointCipher(self.value + other)

    def __radd__(self, other):
        other = self._operand(other)
        if other is NotImplemented:
            return NotImplemented
        return FixedPointCipher(self.value + other)

    def __sub__(self, other):
        other = self._operand(other)
        if other is NotImplemented:
            return NotImplemented
        return FixedPointCipher(self.value - other)

    def __rsub__(self, other):
        other = self._operand(other)
        if other is NotImplemented:
            return NotImplemented
        return FixedPointCipher(other - self.value)

    def __mul__(self, other):
        other = self._operand(other)
        if other is NotImplemented:
            return NotImplemented
        return FixedPointCipher(self.value * other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        raise TypeError(
            "fixed-point ciphertexts cannot be divided, multiply by a precomputed inverse instead"
        )

    __rtruediv__ = __truediv__


def _times(a, b):
    # None stands for an exact denominator of one
    if a is None:
        return b
    if b is None:
        return a
    return a * _detached(b)


class RationalCipher:
    """Numerator/denominator pair of ciphertexts.

    A denominator of None is exactly one and is never encrypted, so values
    that never went through a division cost the same as a fixed-point one.
    """

    __slots__ = ("numerator", "denominator")

    def __init__(self, numerator, denominator=None):
        self.numerator = numerator
        self.denominator = denominator

    @staticmethod
    def _coerce(other):
        if isinstance(other, RationalCipher):
            return other
        if isinstance(other, numbers.Real):
            return RationalCipher(float(other))
        return NotImplemented

    def _combine(self, other, sign):
        if self.denominator is None and other.denominator is None:
            if sign > 0:
                return RationalCipher(self.numerator + _detached(other.numerator))
            return RationalCipher(self.numerator - _detached(other.numerator))
        left = _times(self.numerator, other.denominator)
        right = _times(other.numerator, self.denominator)
        right = _detached(right)
        numerator = left + right if sign > 0 else left - right
        return RationalCipher(numerator, _times(self.denominator, other.denominator))

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._combine(other, 1)

    def __radd__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._combine(self, 1)

    def __sub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._combine(other, -1)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._combine(self, -1)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return RationalCipher(
            _times(self.numerator, other.numerator),
            _times(self.denominator, other.denominator),
        )

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return RationalCipher(
            _times(self.numerator, other.denominator),
            _times(self.denominator, other.numerator),
        )

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other.__truediv__(self)
