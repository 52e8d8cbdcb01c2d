"""
valuation.py - Valuation Engine

Aggregates an account's liability value and risk-adjusted collateral value
in units of the reference asset.

    liability_value  = quote(debt, borrowed_asset, reference)
    collateral_value = sum(quote(balance, c, reference) * cf[c] / 100)

Collaterals with a zero factor are worthless for solvency and are skipped
before their balance is read. Zero balances contribute nothing and are never
quoted. A failing quote aborts the whole valuation; nothing is retried.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Optional

from .core import COLLATERAL_FACTOR_SCALE, PriceOracle
from .fixed_point import checked_add, mul_div


@dataclass(frozen=True, slots=True)
class Valuation:
    """
    Result of valuing an account.

    Attributes:
        liability_assets: Live debt in units of the borrowed asset
        liability_value: Debt in units of the reference asset
        collateral_value: Risk-adjusted collateral in units of the reference asset
    """
    liability_assets: int
    liability_value: int
    collateral_value: int

    @property
    def is_healthy(self) -> bool:
        return self.liability_value <= self.collateral_value

    @property
    def health_factor(self) -> Optional[Decimal]:
        """collateral_value / liability_value, or None without liability."""
        if self.liability_value == 0:
            return None
        return Decimal(self.collateral_value) / Decimal(self.liability_value)


EMPTY_VALUATION = Valuation(0, 0, 0)


def calculate_collateral_value(
    oracle: PriceOracle,
    collaterals: Iterable[str],
    balance_of: Callable[[str], int],
    collateral_factors: Mapping[str, int],
    reference_asset: str,
) -> int:
    """
    Sum the risk-adjusted value of an account's collaterals.

    Args:
        oracle: Price oracle used to quote each balance
        collaterals: Enabled collateral asset symbols
        balance_of: Account balance lookup for a collateral symbol
        collateral_factors: Symbol -> factor in [0, 100]; missing means 0
        reference_asset: Unit of account

    Returns:
        Total collateral value (order of `collaterals` does not matter)
    """
    total = 0
    for collateral in collaterals:
        factor = collateral_factors.get(collateral, 0)
        if factor == 0:
            continue
        balance = balance_of(collateral)
        if balance == 0:
            continue
        value = oracle.quote(balance, collateral, reference_asset)
        total = checked_add(total, mul_div(value, factor, COLLATERAL_FACTOR_SCALE))
    return total


def valuate(
    oracle: PriceOracle,
    liability_assets: int,
    borrowed_asset: str,
    collaterals: Iterable[str],
    balance_of: Callable[[str], int],
    collateral_factors: Mapping[str, int],
    reference_asset: str,
    skip_collateral_if_no_liability: bool,
) -> Valuation:
    """
    Value an account's liability and collateral.

    PURE FUNCTION apart from oracle queries.

    With no liability the liability value is zero without an oracle call;
    if `skip_collateral_if_no_liability` is set the collateral is not
    valued either and EMPTY_VALUATION is returned.
    """
    if liability_assets == 0 and skip_collateral_if_no_liability:
        return EMPTY_VALUATION

    liability_value = 0
    if liability_assets > 0:
        liability_value = oracle.quote(liability_assets, borrowed_asset, reference_asset)

    collateral_value = calculate_collateral_value(
        oracle, collaterals, balance_of, collateral_factors, reference_asset,
    )
    return Valuation(liability_assets, liability_value, collateral_value)


__all__ = [
    'Valuation', 'EMPTY_VALUATION',
    'calculate_collateral_value', 'valuate',
]
