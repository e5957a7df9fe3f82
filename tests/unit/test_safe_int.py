"""Tests for SafeInt checked arithmetic."""

import pytest

from appchain.safe_int import (
    UINT256_MAX,
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Uint256Overflow,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        assert SafeInt(SafeInt(42)).value == 42

    def test_rejects_bool_and_float(self):
        """Only real ints are accepted."""
        with pytest.raises(TypeError):
            SafeInt(True)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore[arg-type]

    def test_alias_s(self):
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add_mixed(self):
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        assert (S(10) - 3).value == 7
        assert (10 - S(3)).value == 7

    def test_sub_to_zero(self):
        assert (S(5) - 5).value == 0

    def test_sub_underflow_raises(self):
        with pytest.raises(Underflow):
            S(3) - 5
        with pytest.raises(Underflow):
            3 - S(5)

    def test_floordiv_truncates(self):
        assert (S(99) // 10).value == 9

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(10) // 0
        with pytest.raises(DivisionByZero):
            10 // S(0)

    def test_mul_div_single_truncation(self):
        """mul_div truncates once, after the multiplication."""
        assert S(99).mul_div(20_600_000, 79_400_000).value == 25
        with pytest.raises(DivisionByZero):
            S(1).mul_div(1, 0)

    def test_errors_share_base(self):
        assert issubclass(DivisionByZero, SafeIntError)
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(SafeIntError, ArithmeticError)

    def test_error_codes(self):
        assert DivisionByZero.code == "DivisionByZero"
        assert Underflow.code == "Underflow"


class TestSafeIntHelpers:
    """Tests for min/max/clamp and range checks."""

    def test_min_max(self):
        assert S(3).min(5).value == 3
        assert S(3).max(5).value == 5

    @pytest.mark.parametrize(
        "value,expected",
        [(5, 10), (10, 10), (15, 15), (20, 20), (25, 20)],
    )
    def test_clamp(self, value, expected):
        assert S(value).clamp(10, 20).value == expected

    def test_to_uint256(self):
        assert S(UINT256_MAX).to_uint256() == UINT256_MAX
        with pytest.raises(Uint256Overflow):
            S(UINT256_MAX + 1).to_uint256()
        with pytest.raises(Uint256Overflow):
            S(-1).to_uint256()

    def test_comparisons(self):
        assert S(3) < 5
        assert S(5) >= S(5)
        assert S(5) == 5
        assert not S(0)
