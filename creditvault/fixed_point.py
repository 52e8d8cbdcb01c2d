"""
fixed_point.py - Fixed-point arithmetic for interest accrual

All interest math runs on integers scaled by ONE (10**27). Every operation
is checked against the uint256 range: leaving it raises ArithmeticOverflow
instead of wrapping. Rounding direction is always explicit.

Provides:
- Rounding: rounding modes used by mul_div
- checked_add, checked_sub, checked_mul, mul_div: checked integer primitives
- rpow: exponentiation by squaring with half-up rounding at every step
- Ray: immutable fixed-point number used for accumulators and rates
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from .core import ONE, MAX_UINT256, ArithmeticOverflow


class Rounding(Enum):
    """Rounding direction of a division."""
    DOWN = "down"
    UP = "up"
    HALF_UP = "half_up"


def _check(value: int) -> int:
    if value < 0:
        raise ArithmeticOverflow(f"underflow: {value} < 0")
    if value > MAX_UINT256:
        raise ArithmeticOverflow(f"overflow: {value} > MAX_UINT256")
    return value


def checked_add(a: int, b: int) -> int:
    return _check(a + b)


def checked_sub(a: int, b: int) -> int:
    return _check(a - b)


def checked_mul(a: int, b: int) -> int:
    return _check(a * b)


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    Compute a * b / denominator with an explicit rounding direction.

    The intermediate product must fit in uint256, as it would on chain.

    Raises:
        ZeroDivisionError: If denominator is zero
        ArithmeticOverflow: If the product or the result leaves uint256
    """
    if denominator == 0:
        raise ZeroDivisionError("mul_div by zero")
    product = checked_mul(a, b)
    if rounding is Rounding.DOWN:
        return product // denominator
    if rounding is Rounding.UP:
        return -(-product // denominator)
    return checked_add(product, denominator // 2) // denominator


def rpow(x: int, n: int, scale: int) -> int:
    """
    Raise the fixed-point number x (scaled by `scale`) to the integer power n.

    Exponentiation by squaring; every intermediate product is rounded half
    up back to `scale`. rpow(0, 0, s) is s, rpow(0, n, s) is 0.

    Example:
        # (1 + r) ** seconds for a per-second rate r
        growth = rpow(ONE + rate, 86400, ONE)
    """
    if n < 0:
        raise ValueError(f"exponent must be non-negative, got {n}")
    if x == 0:
        return scale if n == 0 else 0

    z = x if n % 2 else scale
    half = scale // 2
    n //= 2
    while n:
        x = checked_add(checked_mul(x, x), half) // scale
        if n % 2:
            z = checked_add(checked_mul(z, x), half) // scale
        n //= 2
    return z


@dataclass(frozen=True, slots=True, order=True)
class Ray:
    """
    Immutable fixed-point number scaled by 10**27.

    Used for the interest accumulator and for per-second interest rates.
    The raw integer is always within [0, MAX_UINT256].

    Example:
        rate = Ray(3170979198376458650)          # 10% APR per second
        growth = (Ray.ONE + rate) ** 86400       # one day of compounding
        debt = growth.apply(10 ** 18)            # 1e18 * growth / ONE
    """
    raw: int

    ONE: ClassVar["Ray"]
    ZERO: ClassVar["Ray"]

    def __post_init__(self):
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"Ray requires an int, got {type(self.raw).__name__}")
        _check(self.raw)

    def __add__(self, other: Ray) -> Ray:
        return Ray(checked_add(self.raw, other.raw))

    def __sub__(self, other: Ray) -> Ray:
        return Ray(checked_sub(self.raw, other.raw))

    def __mul__(self, other: Ray) -> Ray:
        return Ray(mul_div(self.raw, other.raw, ONE))

    def __pow__(self, n: int) -> Ray:
        return Ray(rpow(self.raw, n, ONE))

    def __bool__(self) -> bool:
        return self.raw != 0

    def apply(self, amount: int, rounding: Rounding = Rounding.DOWN) -> int:
        """Return amount * self / ONE."""
        return mul_div(amount, self.raw, ONE, rounding)

    def rescale(self, amount: int, base: Ray, rounding: Rounding = Rounding.DOWN) -> int:
        """Return amount * self / base, the growth of amount from `base` to `self`."""
        return mul_div(amount, self.raw, base.raw, rounding)

    def to_decimal(self) -> Decimal:
        return Decimal(self.raw) / Decimal(ONE)

    def __str__(self) -> str:
        return f"{self.to_decimal():f}"

    def __repr__(self) -> str:
        return f"Ray({self.raw})"


Ray.ONE = Ray(ONE)
Ray.ZERO = Ray(0)
