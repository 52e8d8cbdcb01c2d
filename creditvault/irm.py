"""
irm.py - Interest rate models

An interest rate model maps the vault's utilisation (a fraction scaled to
the uint32 range) to a per-second borrow rate scaled by ONE.

Provides:
- FixedRateModel: constant rate, independent of utilisation
- LinearKinkModel: piecewise linear rate with a steeper slope above the kink
- apr_to_rate / rate_to_apy: conversions between annual figures and per-second rates
- rate_curve: vectorised tabulation of a model over utilisation
"""

from decimal import Decimal, ROUND_DOWN
from typing import Tuple

import numpy as np

from .core import ONE, MAX_UINT32, SECONDS_PER_YEAR
from .fixed_point import rpow


def apr_to_rate(apr: Decimal) -> int:
    """
    Convert a nominal annual rate to a per-second rate scaled by ONE.

    Example:
        apr_to_rate(Decimal("0.10"))  # 3170979198376458650
    """
    if not isinstance(apr, Decimal):
        apr = Decimal(str(apr))
    if apr < 0:
        raise ValueError(f"apr cannot be negative, got {apr}")
    per_second = apr * ONE / SECONDS_PER_YEAR
    return int(per_second.to_integral_value(rounding=ROUND_DOWN))


def rate_to_apy(rate: int) -> Decimal:
    """Annual yield of a per-second rate compounded every second for a year."""
    growth = rpow(ONE + rate, SECONDS_PER_YEAR, ONE)
    return Decimal(growth - ONE) / Decimal(ONE)


def utilisation_to_fraction(utilisation: int) -> Decimal:
    return Decimal(utilisation) / Decimal(MAX_UINT32)


def fraction_to_utilisation(fraction: Decimal) -> int:
    fraction = Decimal(str(fraction))
    if not Decimal("0") <= fraction <= Decimal("1"):
        raise ValueError(f"utilisation fraction must be in [0, 1], got {fraction}")
    return int((fraction * MAX_UINT32).to_integral_value(rounding=ROUND_DOWN))


class FixedRateModel:
    """Returns the same per-second rate at every utilisation."""

    def __init__(self, rate: int):
        if rate < 0:
            raise ValueError(f"rate cannot be negative, got {rate}")
        self.rate = rate

    @classmethod
    def from_apr(cls, apr: Decimal) -> "FixedRateModel":
        return cls(apr_to_rate(apr))

    def compute_interest_rate(self, vault: str, asset: str, utilisation: int) -> int:
        return self.rate

    def __repr__(self):
        return f"FixedRateModel(rate={self.rate})"


class LinearKinkModel:
    """
    Piecewise linear rate model.

        rate = base + slope1 * min(u, kink) + slope2 * max(u - kink, 0)

    where u and kink are uint32-scaled utilisations and the slopes are
    per-second rate increments per unit of utilisation.
    """

    def __init__(self, base_rate: int, slope1: int, slope2: int, kink: int):
        if not 0 <= kink <= MAX_UINT32:
            raise ValueError(f"kink must be in [0, {MAX_UINT32}], got {kink}")
        if base_rate < 0 or slope1 < 0 or slope2 < 0:
            raise ValueError("base_rate and slopes cannot be negative")
        self.base_rate = base_rate
        self.slope1 = slope1
        self.slope2 = slope2
        self.kink = kink

    @classmethod
    def from_aprs(
        cls,
        base_apr: Decimal,
        kink_apr: Decimal,
        max_apr: Decimal,
        kink_fraction: Decimal,
    ) -> "LinearKinkModel":
        """
        Build a model from the APR at 0% utilisation, at the kink and at 100%.

        Example:
            irm = LinearKinkModel.from_aprs(
                Decimal("0"), Decimal("0.04"), Decimal("1.00"), Decimal("0.8"))
        """
        kink = fraction_to_utilisation(kink_fraction)
        base_rate = apr_to_rate(base_apr)
        kink_rate = apr_to_rate(kink_apr)
        max_rate = apr_to_rate(max_apr)
        if not base_rate <= kink_rate <= max_rate:
            raise ValueError("APRs must be non-decreasing: base <= kink <= max")
        slope1 = (kink_rate - base_rate) // kink if kink else 0
        slope2 = (max_rate - kink_rate) // (MAX_UINT32 - kink) if kink < MAX_UINT32 else 0
        return cls(base_rate, slope1, slope2, kink)

    def compute_interest_rate(self, vault: str, asset: str, utilisation: int) -> int:
        if not 0 <= utilisation <= MAX_UINT32:
            raise ValueError(f"utilisation out of range: {utilisation}")
        rate = self.base_rate + self.slope1 * min(utilisation, self.kink)
        if utilisation > self.kink:
            rate += self.slope2 * (utilisation - self.kink)
        return rate

    def __repr__(self):
        return (f"LinearKinkModel(base={self.base_rate}, slope1={self.slope1}, "
                f"slope2={self.slope2}, kink={self.kink})")


def rate_curve(model, n_points: int = 101) -> Tuple[np.ndarray, np.ndarray]:
    """
    Tabulate a model's APR over utilisation.

    Returns:
        (utilisation fractions in [0, 1], nominal APRs as floats)
    """
    fractions = np.linspace(0.0, 1.0, n_points)
    utilisations = np.floor(fractions * MAX_UINT32).astype(np.int64)
    rates = np.array([
        model.compute_interest_rate("", "", int(u)) for u in utilisations
    ], dtype=object)
    aprs = (rates * SECONDS_PER_YEAR).astype(np.float64) / float(ONE)
    return fractions, aprs
