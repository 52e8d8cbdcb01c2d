"""
Unit tests for fixed_point.py - checked arithmetic, rpow and Ray.
"""

import pytest
from decimal import Decimal

from creditvault import (
    ONE, MAX_UINT256,
    ArithmeticOverflow,
    Ray, Rounding, checked_add, checked_sub, checked_mul, mul_div, rpow,
)


class TestCheckedArithmetic:
    """Integer primitives never wrap."""

    def test_add_within_range(self):
        assert checked_add(2, 3) == 5

    def test_add_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            checked_add(MAX_UINT256, 1)

    def test_sub_underflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            checked_sub(1, 2)

    def test_mul_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            checked_mul(2 ** 200, 2 ** 60)


class TestMulDiv:
    """mul_div rounding modes."""

    def test_rounds_down_by_default(self):
        assert mul_div(10, 10, 3) == 33

    def test_rounds_up(self):
        assert mul_div(10, 10, 3, Rounding.UP) == 34

    def test_round_up_exact_division_is_exact(self):
        assert mul_div(10, 9, 3, Rounding.UP) == 30

    def test_half_up(self):
        assert mul_div(5, 1, 2, Rounding.HALF_UP) == 3
        assert mul_div(4, 1, 3, Rounding.HALF_UP) == 1

    def test_zero_denominator_raises(self):
        with pytest.raises(ZeroDivisionError):
            mul_div(1, 1, 0)

    def test_product_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div(MAX_UINT256, 2, 2)


class TestRpow:
    """Exponentiation by squaring at a fixed-point scale."""

    def test_integer_powers(self):
        assert rpow(2 * ONE, 10, ONE) == 1024 * ONE

    def test_zero_exponent_is_one(self):
        assert rpow(5 * ONE, 0, ONE) == ONE
        assert rpow(0, 0, ONE) == ONE

    def test_zero_base(self):
        assert rpow(0, 7, ONE) == 0

    def test_one_is_fixed_point(self):
        assert rpow(ONE, 31_536_000, ONE) == ONE

    def test_fractional_base(self):
        # 0.5 ** 3
        assert rpow(ONE // 2, 3, ONE) == ONE // 8

    def test_small_scale_rounds_half_up(self):
        # 1.5 ** 2 = 2.25 at scale 10 -> 22.5 rounds to 23 (2.3)
        assert rpow(15, 2, 10) == 23

    def test_negative_exponent_rejected(self):
        with pytest.raises(ValueError):
            rpow(ONE, -1, ONE)


class TestRay:
    """Ray is an immutable, range-checked fixed-point value."""

    def test_constants(self):
        assert Ray.ONE.raw == ONE
        assert Ray.ZERO.raw == 0
        assert not Ray.ZERO
        assert Ray.ONE

    def test_rejects_negative(self):
        with pytest.raises(ArithmeticOverflow):
            Ray(-1)

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            Ray(1.5)
        with pytest.raises(TypeError):
            Ray(True)

    def test_multiplication_is_scaled(self):
        assert Ray(2 * ONE) * Ray(3 * ONE) == Ray(6 * ONE)

    def test_power(self):
        assert Ray(2 * ONE) ** 3 == Ray(8 * ONE)

    def test_apply_and_rescale(self):
        growth = Ray(ONE + ONE // 10)
        assert growth.apply(1_000) == 1_100
        assert Ray(3 * ONE).rescale(10, Ray(2 * ONE)) == 15

    def test_apply_rounding(self):
        assert Ray(ONE // 3).apply(10) == 3
        assert Ray(ONE // 3).apply(10, Rounding.UP) == 4

    def test_subtraction_underflow(self):
        with pytest.raises(ArithmeticOverflow):
            Ray.ZERO - Ray.ONE

    def test_ordering(self):
        assert Ray(1) < Ray(2)
        assert max(Ray(5), Ray(3)) == Ray(5)

    def test_decimal_conversion(self):
        assert Ray(ONE + ONE // 4).to_decimal() == Decimal("1.25")
        assert str(Ray(ONE // 2)) == "0.5"

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Ray.ONE.raw = 5
