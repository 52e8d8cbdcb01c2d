"""
Core types and constants for the credit vault system.

This module provides the foundational pieces shared by every other module:
1. Constants: fixed-point scale, collateral factor scale, liquidation policy
2. Exceptions: VaultError and the domain-specific error types
3. Protocols: PriceOracle, InterestRateModel, Clock for external collaborators
4. Type aliases: Balances, CollateralFactors

Nothing in this module holds state.
"""

from __future__ import annotations
from datetime import datetime
from decimal import ROUND_HALF_EVEN, getcontext
from typing import Dict, List, Protocol, runtime_checkable


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Oracle prices are Decimals. Quotes are converted to integer amounts with
# explicit rounding, so the context only has to be wide enough to hold
# prices multiplied by 10**36.
#
_VAULT_DECIMAL_CONTEXT = getcontext()
_VAULT_DECIMAL_CONTEXT.prec = 80
_VAULT_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved wallet for issuance and redemption of tokens and vault shares.
SYSTEM_WALLET = "system"

# Fixed-point scale of the interest accumulator and per-second rates.
ONE = 10 ** 27

MAX_UINT256 = 2 ** 256 - 1
MAX_UINT32 = 2 ** 32 - 1

SECONDS_PER_YEAR = 365 * 86400

# Collateral factors are whole percentages.
COLLATERAL_FACTOR_SCALE = 100

# Liquidation policy.
MAX_LIQUIDATION_INCENTIVE = 20
TARGET_HEALTH_FACTOR = 125

# Upper bound on the per-second rate accepted from an interest rate model
# (about 1,000,000% APY).
MAX_ALLOWED_INTEREST_RATE = 291867278914945094175


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from wallet ID to raw token amount.
Balances = Dict[str, int]

# Mapping from collateral asset symbol to collateral factor in [0, 100].
CollateralFactors = Dict[str, int]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class VaultError(Exception):
    """Base exception for all vault-related errors."""
    pass


class NotAuthorized(VaultError):
    """Raised when a governor-only operation is called by another account."""
    pass


class Reentrancy(VaultError):
    """Raised when a guarded vault method is entered while the vault is locked."""
    pass


class ZeroAmount(VaultError):
    """Raised when an operation is requested for a zero amount."""
    pass


class InsufficientBalance(VaultError):
    """Raised when a move would take a wallet balance below zero."""
    pass


class AssetNotRegistered(VaultError):
    """Raised when operating on an asset that has not been registered with the ledger."""
    pass


class ArithmeticOverflow(VaultError):
    """Raised when a checked uint256 operation leaves the representable range."""
    pass


class OracleError(VaultError):
    """Raised when the oracle cannot quote the requested pair."""
    pass


class InvalidCollateralFactor(VaultError):
    """Raised when a collateral factor outside [0, 100] is configured."""
    pass


class ControllerDisabled(VaultError):
    """Raised when an account has not enabled the vault as its controller."""
    pass


class ControllerViolation(VaultError):
    """Raised when an account's status is checked while it has more than one controller."""
    pass


class CollateralDisabled(VaultError):
    """Raised when collateral is not recognized (zero factor) or not enabled for the account."""
    pass


class OutstandingDebt(VaultError):
    """Raised when an account with debt tries to release its controller."""
    pass


class AccountUnhealthy(VaultError):
    """Raised by the account status check when liability value exceeds collateral value."""
    pass


class SupplyCapExceeded(VaultError):
    """Raised by the vault status check when total supply grew above the supply cap."""
    pass


class BorrowCapExceeded(VaultError):
    """Raised by the vault status check when total borrows grew above the borrow cap."""
    pass


class SnapshotNotTaken(VaultError):
    """Raised when a vault status check runs without a snapshot taken for it."""
    pass


class VaultStatusCheckDeferred(VaultError):
    """Raised when state-dependent data is read while the vault check is pending."""
    pass


class SelfLiquidation(VaultError):
    """Raised when a liquidator tries to liquidate its own account."""
    pass


class ViolatorStatusCheckDeferred(VaultError):
    """Raised when the violator's account check is pending at liquidation time."""
    pass


class NoLiquidationOpportunity(VaultError):
    """Raised when the violator's collateral value covers its liability value."""
    pass


class RepayAssetsInsufficient(VaultError):
    """Raised when the repay amount is zero or too small to seize anything."""
    pass


class RepayAssetsExceeded(VaultError):
    """Raised when the repay amount exceeds the debt or the excessive-liquidation bound."""
    pass


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class Clock(Protocol):
    """Anything exposing the current logical time (the Ledger does)."""

    @property
    def current_time(self) -> datetime:
        ...


@runtime_checkable
class PriceOracle(Protocol):
    """
    Converts an amount of one asset into the equivalent amount of another.

    Amounts are raw integers in each asset's smallest unit. Implementations
    raise OracleError for pairs they cannot price; callers never retry.
    """

    def quote(self, amount: int, base: str, quote: str) -> int:
        ...


@runtime_checkable
class InterestRateModel(Protocol):
    """
    Computes the per-second borrow rate (scaled by ONE) for a vault.

    Utilisation is a fraction scaled to the uint32 range: 0 means no
    borrows, MAX_UINT32 means every asset in the pool is borrowed.
    """

    def compute_interest_rate(self, vault: str, asset: str, utilisation: int) -> int:
        ...


@runtime_checkable
class AccountStatusCheck(Protocol):
    """Implemented by controller vaults; raises when the account is unhealthy."""

    def check_account_status(self, account: str, collaterals: List[str]) -> None:
        ...
