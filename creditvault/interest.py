"""
interest.py - Interest Accrual Engine

Interest is tracked with a single global accumulator instead of per-account
updates. Every accrual compounds the accumulator and scales total borrows by
the same ratio; an account's debt is recomputed lazily from the ratio of the
current accumulator to the accumulator recorded when its balance last changed:

    debt = owed * current_accumulator / user_accumulator

ARCHITECTURE (Pure Function Pattern):
=====================================

1. FROZEN DATACLASSES (explicit inputs):
   - MarketState: total borrows, accumulator, last update, current rate
   - AccrualResult: outcome of an accrual computed without persisting it

2. PURE CALCULATION FUNCTIONS (calculate_*):
   - Take all inputs explicitly as parameters
   - Used both by mutating vault operations and by read-only views

3. STATE TRANSITIONS (apply_*, with_*):
   - Return a new MarketState; the input is never modified
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from .core import ONE, MAX_UINT32, ArithmeticOverflow
from .fixed_point import Ray, Rounding, checked_add, checked_sub, mul_div


# ============================================================================
# FROZEN DATACLASSES
# ============================================================================

@dataclass(frozen=True, slots=True)
class MarketState:
    """
    Immutable snapshot of the vault-wide interest state.

    Attributes:
        total_borrows: Sum of all live debt as of last_interest_update
        interest_accumulator: Cumulative growth since inception (starts at ONE)
        last_interest_update: Time of the last persisted accrual
        interest_rate: Per-second rate used by the next accrual
    """
    total_borrows: int
    interest_accumulator: Ray
    last_interest_update: datetime
    interest_rate: Ray

    @classmethod
    def initial(cls, now: datetime) -> MarketState:
        return cls(
            total_borrows=0,
            interest_accumulator=Ray.ONE,
            last_interest_update=now,
            interest_rate=Ray.ZERO,
        )


@dataclass(frozen=True, slots=True)
class AccrualResult:
    """Accrued totals at a point in time; `updated` is False when no time elapsed."""
    total_borrows: int
    interest_accumulator: Ray
    updated: bool


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def elapsed_seconds(since: datetime, now: datetime) -> int:
    """Whole seconds between two times; the clock never runs backwards."""
    seconds = int((now - since).total_seconds())
    if seconds < 0:
        raise ValueError(f"Cannot accrue backwards: {now} < {since}")
    return seconds


def calculate_accrual(state: MarketState, now: datetime) -> AccrualResult:
    """
    Compound the accumulator from the last update to `now`.

    PURE FUNCTION - does not modify `state`.

        growth = (ONE + rate) ** dt           (rpow, half-up rounding)
        accumulator' = growth * accumulator / ONE
        total_borrows' = total_borrows * accumulator' / accumulator

    Returns the current values unchanged (updated=False) when no time has
    elapsed, so accruing twice at the same instant is harmless.
    """
    dt = elapsed_seconds(state.last_interest_update, now)
    if dt == 0:
        return AccrualResult(state.total_borrows, state.interest_accumulator, False)

    growth = (Ray.ONE + state.interest_rate) ** dt
    accumulator = growth * state.interest_accumulator
    total_borrows = accumulator.rescale(state.total_borrows, state.interest_accumulator)
    return AccrualResult(total_borrows, accumulator, True)


def calculate_debt(owed: int, user_accumulator: Ray, current_accumulator: Ray) -> int:
    """
    Live debt of an account.

    Zero owed is zero debt and is never divided. A nonzero balance always
    has a nonzero snapshot; a zero snapshot is an internal error.
    """
    if owed == 0:
        return 0
    if not user_accumulator:
        raise ArithmeticOverflow("account has debt but no accumulator snapshot")
    return current_accumulator.rescale(owed, user_accumulator)


def calculate_utilisation(total_borrows: int, cash: int) -> int:
    """
    Borrowed share of the pool, scaled to [0, MAX_UINT32].

    An empty pool has zero utilisation.
    """
    pool_assets = checked_add(total_borrows, cash)
    if pool_assets == 0:
        return 0
    return mul_div(total_borrows, MAX_UINT32, pool_assets, Rounding.DOWN)


# ============================================================================
# STATE TRANSITIONS
# ============================================================================

def apply_accrual(state: MarketState, now: datetime) -> MarketState:
    """
    Persist an accrual.

    Returns `state` itself when no time elapsed; otherwise a new state with
    the compounded accumulator and scaled total borrows. The last update
    advances by the whole seconds accrued, so a sub-second remainder is
    carried into the next accrual.
    """
    result = calculate_accrual(state, now)
    if not result.updated:
        return state
    dt = elapsed_seconds(state.last_interest_update, now)
    return replace(
        state,
        total_borrows=result.total_borrows,
        interest_accumulator=result.interest_accumulator,
        last_interest_update=state.last_interest_update + timedelta(seconds=dt),
    )


def with_borrows_increased(state: MarketState, assets: int) -> MarketState:
    return replace(state, total_borrows=checked_add(state.total_borrows, assets))


def with_borrows_decreased(state: MarketState, assets: int) -> MarketState:
    """Rounding in per-account debt can exceed the total by a unit; floor at zero."""
    total = state.total_borrows
    return replace(state, total_borrows=checked_sub(total, assets) if total >= assets else 0)


def with_interest_rate(state: MarketState, rate: int) -> MarketState:
    return replace(state, interest_rate=Ray(rate))


__all__ = [
    'ONE',
    'MarketState', 'AccrualResult',
    'elapsed_seconds', 'calculate_accrual', 'calculate_debt', 'calculate_utilisation',
    'apply_accrual', 'with_borrows_increased', 'with_borrows_decreased', 'with_interest_rate',
]
