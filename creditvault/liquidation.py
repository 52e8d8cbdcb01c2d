"""
liquidation.py - Liquidation Engine

Decides whether a position can be liquidated and how much collateral a
liquidator receives for repaying part of the violator's debt.

INCENTIVE:
    The bonus grows with the shortfall and is capped:

        incentive = min(100 - 100 * collateral_value / liability_value, 20)

TARGET HEALTH BOUND:
    The largest repay value that brings the violator back to a 125% health
    factor, given that seizing collateral removes both debt and
    risk-adjusted collateral:

        max_repay = (125 * lv - 100 * cv) / (125 - cf * (100 + incentive) / 100)

    A repay above max_repay is rejected while max_repay is below half the
    liability value. Past that point the position is too far gone for a
    partial liquidation to help and any repay up to the full debt is allowed.

SEIZE:
    seize_value  = repay_value * (100 + incentive) / 100
    seize_assets = seize_value * 10**decimals / quote(10**decimals, collateral, reference)

All divisions round down. Every rejection is a distinct error.
"""

from __future__ import annotations
from dataclasses import dataclass

from .core import (
    MAX_LIQUIDATION_INCENTIVE, TARGET_HEALTH_FACTOR,
    PriceOracle,
    CollateralDisabled, NoLiquidationOpportunity, OracleError,
    RepayAssetsExceeded, RepayAssetsInsufficient,
)
from .fixed_point import checked_mul, checked_sub, mul_div
from .valuation import Valuation


# ============================================================================
# RESULT TYPES
# ============================================================================

@dataclass(frozen=True, slots=True)
class SeizeQuote:
    """
    Outcome of sizing a liquidation.

    Attributes:
        incentive: Liquidation bonus in percent
        max_repay_value: Target-health repay bound in reference units
        repay_value: Value of the repaid debt in reference units
        seize_value: Value of the seized collateral in reference units
        seize_assets: Collateral amount transferred to the liquidator
    """
    incentive: int
    max_repay_value: int
    repay_value: int
    seize_value: int
    seize_assets: int


@dataclass(frozen=True, slots=True)
class LiquidationOpportunity:
    """
    Read-only sizing hint for a violator/collateral pair.

    All fields are zero when the position cannot be liquidated with this
    collateral.
    """
    incentive: int
    max_repay_assets: int
    max_yield_assets: int

    @property
    def exists(self) -> bool:
        return self.max_repay_assets > 0


NO_OPPORTUNITY = LiquidationOpportunity(0, 0, 0)


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_liquidation_incentive(collateral_value: int, liability_value: int) -> int:
    """
    Liquidation bonus in percent for an unhealthy position.

    Example:
        calculate_liquidation_incentive(80, 100)  # 20
        calculate_liquidation_incentive(95, 100)  # 5
    """
    if collateral_value >= liability_value:
        raise NoLiquidationOpportunity(
            f"collateral value {collateral_value} covers liability value {liability_value}"
        )
    shortfall = 100 - mul_div(100, collateral_value, liability_value)
    return min(shortfall, MAX_LIQUIDATION_INCENTIVE)


def calculate_max_repay_value(
    liability_value: int,
    collateral_value: int,
    collateral_factor: int,
    incentive: int,
) -> int:
    """Repay value that restores the target health factor (rounded down)."""
    numerator = checked_sub(
        checked_mul(TARGET_HEALTH_FACTOR, liability_value),
        checked_mul(100, collateral_value),
    )
    denominator = TARGET_HEALTH_FACTOR - collateral_factor * (100 + incentive) // 100
    return numerator // denominator


def is_excessive_repay(repay_value: int, max_repay_value: int, liability_value: int) -> bool:
    """True when the repay overshoots the target and the position is still recoverable."""
    return repay_value > max_repay_value and max_repay_value < liability_value // 2


def calculate_seize_assets(
    oracle: PriceOracle,
    seize_value: int,
    collateral: str,
    collateral_decimals: int,
    reference_asset: str,
) -> int:
    """Convert a reference value into collateral units at the collateral's own granularity."""
    unit = 10 ** collateral_decimals
    unit_value = oracle.quote(unit, collateral, reference_asset)
    if unit_value == 0:
        raise OracleError(f"{collateral} is quoted at zero")
    return mul_div(seize_value, unit, unit_value)


def calculate_assets_to_seize(
    oracle: PriceOracle,
    valuation: Valuation,
    repay_assets: int,
    borrowed_asset: str,
    collateral: str,
    collateral_factor: int,
    collateral_decimals: int,
    reference_asset: str,
) -> SeizeQuote:
    """
    Size a liquidation of `repay_assets` of debt against `collateral`.

    `valuation` must be the violator's full, non-skipping valuation.

    Raises (checked in this order):
        CollateralDisabled: Collateral factor is zero
        RepayAssetsExceeded: Repay is larger than the live debt
        NoLiquidationOpportunity: Position is healthy
        RepayAssetsExceeded: Repay overshoots the target health bound
        RepayAssetsInsufficient: Repay is too small to seize anything
        OracleError: Propagated from the oracle
    """
    if collateral_factor == 0:
        raise CollateralDisabled(f"{collateral} is not a recognized collateral")
    if repay_assets > valuation.liability_assets:
        raise RepayAssetsExceeded(
            f"repay {repay_assets} exceeds debt {valuation.liability_assets}"
        )

    liability_value = valuation.liability_value
    collateral_value = valuation.collateral_value
    incentive = calculate_liquidation_incentive(collateral_value, liability_value)
    max_repay_value = calculate_max_repay_value(
        liability_value, collateral_value, collateral_factor, incentive,
    )

    repay_value = oracle.quote(repay_assets, borrowed_asset, reference_asset)
    if is_excessive_repay(repay_value, max_repay_value, liability_value):
        raise RepayAssetsExceeded(
            f"repay value {repay_value} exceeds max repay value {max_repay_value}"
        )

    seize_value = mul_div(repay_value, 100 + incentive, 100)
    seize_assets = calculate_seize_assets(
        oracle, seize_value, collateral, collateral_decimals, reference_asset,
    )
    if seize_assets == 0:
        raise RepayAssetsInsufficient(f"repay {repay_assets} seizes no {collateral}")

    return SeizeQuote(incentive, max_repay_value, repay_value, seize_value, seize_assets)


def check_liquidation(
    oracle: PriceOracle,
    valuation: Valuation,
    collateral: str,
    collateral_factor: int,
    collateral_decimals: int,
    collateral_balance: int,
    reference_asset: str,
) -> LiquidationOpportunity:
    """
    Largest repay a liquidator may request against `collateral`, and what it yields.

    When max_repay_value reaches half the liability value the whole debt may
    be repaid. When the violator holds less collateral than that repay would
    seize, the repay is scaled down to what the balance covers.
    """
    if collateral_factor == 0 or valuation.is_healthy or valuation.liability_assets == 0:
        return NO_OPPORTUNITY

    liability_value = valuation.liability_value
    incentive = calculate_liquidation_incentive(valuation.collateral_value, liability_value)
    max_repay_value = calculate_max_repay_value(
        liability_value, valuation.collateral_value, collateral_factor, incentive,
    )

    if max_repay_value >= liability_value // 2:
        max_repay_value = liability_value
    max_repay_assets = mul_div(valuation.liability_assets, max_repay_value, liability_value)

    seize_value = mul_div(max_repay_value, 100 + incentive, 100)
    max_yield = calculate_seize_assets(
        oracle, seize_value, collateral, collateral_decimals, reference_asset,
    )
    if max_yield > collateral_balance:
        max_repay_assets = mul_div(max_repay_assets, collateral_balance, max_yield)
        max_yield = collateral_balance
    if max_repay_assets == 0:
        return NO_OPPORTUNITY
    return LiquidationOpportunity(incentive, max_repay_assets, max_yield)


__all__ = [
    'SeizeQuote', 'LiquidationOpportunity', 'NO_OPPORTUNITY',
    'calculate_liquidation_incentive', 'calculate_max_repay_value',
    'is_excessive_repay', 'calculate_seize_assets',
    'calculate_assets_to_seize', 'check_liquidation',
]
