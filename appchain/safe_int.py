"""Checked integer arithmetic for ledger amounts, weights and block heights.

Everything the runtime computes is an unsigned integer. SafeInt wraps an
int so that the two ways such a computation can go wrong are reported as
named errors instead of producing a plausible-looking number:

- floor division by zero raises DivisionByZero
- a subtraction that would go below zero raises Underflow

Values are checked against the uint256 range only at the boundary, via
to_uint256().

Usage pattern:
    from appchain.safe_int import S

    def amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        numerator = S(amount_in) * reserve_out
        return (numerator // (S(reserve_in) + amount_in)).value
"""

from __future__ import annotations

UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    code = "ArithmeticError"


class DivisionByZero(SafeIntError):
    """Division by zero."""

    code = "DivisionByZero"


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    code = "Underflow"


class Uint256Overflow(SafeIntError):
    """Value does not fit in an unsigned 256-bit integer."""

    code = "Uint256Overflow"


class SafeInt:
    """Integer with checked arithmetic.

    Mixed expressions with plain ints are supported on either side of
    the operator; the result is always a SafeInt.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _unwrap(other))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(other + self._value)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract, raising Underflow if the result would be negative."""
        return _checked_sub(self._value, _unwrap(other))

    def __rsub__(self, other: int) -> SafeInt:
        return _checked_sub(other, self._value)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _unwrap(other))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(other * self._value)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Truncating division, raising DivisionByZero on a zero divisor."""
        return _checked_floordiv(self._value, _unwrap(other))

    def __rfloordiv__(self, other: int) -> SafeInt:
        return _checked_floordiv(other, self._value)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _unwrap(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _unwrap(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _unwrap(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _unwrap(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Named operations ---

    def mul_div(self, numerator: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute self * numerator // denominator with a single truncation.

        Raises:
            DivisionByZero: If denominator is zero
        """
        return _checked_floordiv(self._value * _unwrap(numerator), _unwrap(denominator))

    def min(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(min(self._value, _unwrap(other)))

    def max(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(max(self._value, _unwrap(other)))

    def clamp(self, low: SafeInt | int, high: SafeInt | int) -> SafeInt:
        """Clamp value to the closed range [low, high]."""
        return SafeInt(max(_unwrap(low), min(self._value, _unwrap(high))))

    def to_uint256(self) -> int:
        """Return the value, validating it fits in uint256.

        Raises:
            Uint256Overflow: If value is negative or exceeds 2^256-1
        """
        if not 0 <= self._value <= UINT256_MAX:
            raise Uint256Overflow(f"Value outside uint256 range: {self._value}")
        return self._value


def _unwrap(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    return x


def _checked_sub(left: int, right: int) -> SafeInt:
    result = left - right
    if result < 0:
        raise Underflow(f"Underflow: {left} - {right} = {result}")
    return SafeInt(result)


def _checked_floordiv(left: int, right: int) -> SafeInt:
    if right == 0:
        raise DivisionByZero(f"Division by zero: {left} // 0")
    return SafeInt(left // right)


# Convenience alias for concise code
S = SafeInt
