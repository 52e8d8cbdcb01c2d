"""
vault.py - Share accounting vault and borrowable credit vault

Vault:
    Holds one underlying asset and issues shares for it. Shares are a ledger
    asset named by the vault's share symbol, which is also the vault's
    address: its cash sits in the ledger wallet of that name.

        shares = assets * (total_supply + 1) / (total_assets + 1)

    Share holders can enable the vault as collateral with the Controller.
    Withdrawals and share transfers request an account check for the owner,
    so a borrower cannot move collateral out from under its debt.

CreditVault:
    A Vault that lends its cash to accounts that enabled it as controller.

        total_assets = cash + total_borrows

    Every mutating operation runs in the same order:
        1. enter a controller call context and take the reentrancy lock
        2. accrue interest and take the status snapshot
        3. mutate debt and balances
        4. request account/vault checks (deferred to the end of the context)

    The vault check updates the interest rate from utilisation and enforces
    the caps; the account check rejects liability value above risk-adjusted
    collateral value.

Configuration (governor only):
    set_oracle, set_interest_rate_model, set_reference_asset,
    set_collateral_factor, set_caps
"""

from __future__ import annotations
import functools
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .core import (
    COLLATERAL_FACTOR_SCALE, MAX_ALLOWED_INTEREST_RATE,
    CollateralFactors, InterestRateModel, PriceOracle,
    CollateralDisabled, ControllerDisabled, InvalidCollateralFactor, NotAuthorized,
    OutstandingDebt, Reentrancy, RepayAssetsExceeded, RepayAssetsInsufficient,
    SelfLiquidation, VaultStatusCheckDeferred, ViolatorStatusCheckDeferred, ZeroAmount,
)
from .controller import Controller
from .fixed_point import Ray, Rounding, checked_add, mul_div
from .interest import (
    MarketState, apply_accrual, calculate_accrual, calculate_debt,
    calculate_utilisation, with_borrows_decreased, with_borrows_increased,
    with_interest_rate,
)
from .ledger import Asset
from .liquidation import (
    LiquidationOpportunity, NO_OPPORTUNITY, SeizeQuote,
    calculate_assets_to_seize, check_liquidation,
)
from .status import (
    CLEAN_TOKEN, OperationToken, VaultSnapshot,
    begin_operation, check_account_status, check_vault_status,
    checked, defer_check, end_operation,
)
from .valuation import Valuation, valuate


# ============================================================================
# EVENTS AND STATE
# ============================================================================

@dataclass(frozen=True, slots=True)
class VaultEvent:
    """One entry of a vault's event log."""
    name: str
    timestamp: datetime
    account: str
    data: Tuple[Tuple[str, Any], ...] = ()

    def get(self, key: str, default: Any = None) -> Any:
        return dict(self.data).get(key, default)


@dataclass(frozen=True, slots=True)
class VaultState:
    """Restorable copy of a vault's mutable state."""
    token: OperationToken
    event_count: int
    market: Optional[MarketState] = None
    owed: Tuple[Tuple[str, int], ...] = ()
    user_interest_accumulator: Tuple[Tuple[str, Ray], ...] = ()


@dataclass(frozen=True, slots=True)
class VaultConfig:
    """
    Governor-controlled configuration. Replaced, never mutated.

    A cap of None means no cap.
    """
    governor: str
    oracle: Optional[PriceOracle] = None
    interest_rate_model: Optional[InterestRateModel] = None
    reference_asset: Optional[str] = None
    collateral_factors: CollateralFactors = field(default_factory=dict)
    supply_cap: Optional[int] = None
    borrow_cap: Optional[int] = None


# ============================================================================
# GUARDS
# ============================================================================

def operation(method):
    """Run a mutating method inside a controller call context, under the lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.controller.call():
            self._require_not_locked()
            self._locked = True
            try:
                return method(self, *args, **kwargs)
            finally:
                self._locked = False
    return wrapper


def guarded_view(method):
    """Reject reads while a mutating method of the same vault is running."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        self._require_not_locked()
        return method(self, *args, **kwargs)
    return wrapper


# ============================================================================
# VAULT
# ============================================================================

class Vault:
    """
    Share accounting vault over one underlying asset.

    Example:
        weth_vault = Vault(controller, "WETH", "eWETH", governor="dao")
        weth_vault.deposit("alice", 10 * 10**18, "alice")
        weth_vault.balance_of("alice")  # 10 * 10**18 shares
    """

    def __init__(
        self,
        controller: Controller,
        asset: str,
        share_symbol: str,
        governor: str,
        supply_cap: Optional[int] = None,
        verbose: Optional[bool] = None,
    ):
        self.controller = controller
        self.ledger = controller.ledger
        self.asset = asset
        self.share_symbol = share_symbol
        self.address = share_symbol
        self.verbose = controller.verbose if verbose is None else verbose
        self.config = VaultConfig(governor=governor, supply_cap=supply_cap)
        self.events: List[VaultEvent] = []
        self._token: OperationToken = CLEAN_TOKEN
        self._locked = False

        underlying = self.ledger.get_asset(asset)
        self.ledger.register_asset(Asset(
            symbol=share_symbol,
            name=f"{underlying.name} vault share",
            decimals=underlying.decimals,
        ))
        controller.register_vault(self)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _require_not_locked(self) -> None:
        if self._locked:
            raise Reentrancy(f"{self.address} is locked")

    def _require_governor(self, caller: str) -> None:
        if caller != self.config.governor:
            raise NotAuthorized(f"{caller} is not the governor of {self.address}")

    def _emit(self, name: str, account: str, **data) -> None:
        self.events.append(VaultEvent(
            name=name,
            timestamp=self.ledger.current_time,
            account=account,
            data=tuple(sorted(data.items())),
        ))
        if self.verbose:
            details = ", ".join(f"{k}={v}" for k, v in sorted(data.items()))
            print(f"✓ {self.address} {name}: {account} ({details})")

    def _aggregates(self) -> VaultSnapshot:
        return VaultSnapshot(total_supply_assets=self.convert_to_assets(self.total_supply()))

    def _begin(self) -> None:
        self._token = begin_operation(self._token, self._aggregates())

    def _require_vault_status_check(self) -> None:
        self.controller.require_vault_status_check(self.address)
        if self.controller.is_vault_status_check_deferred(self.address):
            self._token = defer_check(self._token)

    def _require_account_and_vault_status_check(self, account: str) -> None:
        self.controller.require_account_status_check(account)
        self._require_vault_status_check()

    def _after_vault_check(self) -> None:
        pass

    def snapshot_state(self) -> VaultState:
        return VaultState(token=self._token, event_count=len(self.events))

    def restore_state(self, state: VaultState) -> None:
        self._token = state.token
        del self.events[state.event_count:]
        self._locked = False

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def cash(self) -> int:
        return self.ledger.get_balance(self.address, self.asset)

    def total_assets(self) -> int:
        return self.cash()

    def total_supply(self) -> int:
        return self.ledger.total_supply(self.share_symbol)

    def balance_of(self, account: str) -> int:
        return self.ledger.get_balance(account, self.share_symbol)

    def convert_to_shares(self, assets: int, rounding: Rounding = Rounding.DOWN) -> int:
        return mul_div(assets, self.total_supply() + 1, self.total_assets() + 1, rounding)

    def convert_to_assets(self, shares: int, rounding: Rounding = Rounding.DOWN) -> int:
        return mul_div(shares, self.total_assets() + 1, self.total_supply() + 1, rounding)

    @guarded_view
    def max_withdraw(self, owner: str) -> int:
        """Assets `owner` can withdraw, limited by the vault's cash."""
        return min(self.convert_to_assets(self.balance_of(owner)), self.cash())

    @guarded_view
    def max_redeem(self, owner: str) -> int:
        return min(self.balance_of(owner), self.convert_to_shares(self.cash()))

    # ========================================================================
    # CONFIGURATION
    # ========================================================================

    def set_supply_cap(self, caller: str, supply_cap: Optional[int]) -> None:
        self._require_governor(caller)
        if supply_cap is not None and supply_cap < 0:
            raise ValueError(f"supply cap cannot be negative, got {supply_cap}")
        self.config = replace(self.config, supply_cap=supply_cap)

    # ========================================================================
    # SHARE OPERATIONS
    # ========================================================================

    @operation
    def deposit(self, caller: str, assets: int, receiver: str) -> int:
        """Deposit `assets` from `caller` and mint shares to `receiver`."""
        self._begin()
        shares = self.convert_to_shares(assets)
        if shares == 0:
            raise ZeroAmount(f"deposit of {assets} {self.asset} mints no shares")
        self.ledger.transfer(self.asset, caller, self.address, assets, "deposit")
        self.ledger.mint(self.share_symbol, receiver, shares, "deposit")
        self._emit("Deposit", receiver, caller=caller, assets=assets, shares=shares)
        self._require_vault_status_check()
        return shares

    @operation
    def mint(self, caller: str, shares: int, receiver: str) -> int:
        """Mint exactly `shares` to `receiver`, pulling the assets (rounded up) from `caller`."""
        self._begin()
        if shares == 0:
            raise ZeroAmount("mint of zero shares")
        assets = self.convert_to_assets(shares, Rounding.UP)
        self.ledger.transfer(self.asset, caller, self.address, assets, "deposit")
        self.ledger.mint(self.share_symbol, receiver, shares, "deposit")
        self._emit("Deposit", receiver, caller=caller, assets=assets, shares=shares)
        self._require_vault_status_check()
        return assets

    @operation
    def withdraw(self, caller: str, assets: int, receiver: str, owner: str) -> int:
        """Burn `owner`'s shares (rounded up) and send `assets` to `receiver`."""
        self._begin()
        self._require_owner(caller, owner)
        if assets == 0:
            raise ZeroAmount("withdraw of zero assets")
        shares = self.convert_to_shares(assets, Rounding.UP)
        self._exit(owner, receiver, assets, shares)
        return shares

    @operation
    def redeem(self, caller: str, shares: int, receiver: str, owner: str) -> int:
        """Burn `shares` of `owner` and send the assets (rounded down) to `receiver`."""
        self._begin()
        self._require_owner(caller, owner)
        assets = self.convert_to_assets(shares)
        if assets == 0:
            raise ZeroAmount(f"redeem of {shares} shares returns no assets")
        self._exit(owner, receiver, assets, shares)
        return assets

    @operation
    def transfer(self, caller: str, to: str, shares: int) -> None:
        """Move shares; the sender's account check is requested."""
        self.ledger.transfer(self.share_symbol, caller, to, shares, "share_transfer")
        self._emit("Transfer", caller, to=to, shares=shares)
        self.controller.require_account_status_check(caller)

    def _require_owner(self, caller: str, owner: str) -> None:
        if caller != owner:
            raise NotAuthorized(f"{caller} cannot withdraw for {owner}")

    def _exit(self, owner: str, receiver: str, assets: int, shares: int) -> None:
        self.ledger.burn(self.share_symbol, owner, shares, "withdraw")
        self.ledger.transfer(self.asset, self.address, receiver, assets, "withdraw")
        self._emit("Withdraw", owner, receiver=receiver, assets=assets, shares=shares)
        self._require_account_and_vault_status_check(owner)

    # ========================================================================
    # STATUS CHECKS
    # ========================================================================

    def check_vault_status(self) -> None:
        """
        Compare the aggregates against the snapshot taken by the first operation.

        Called by the Controller; consumes the operation token.
        """
        initial = end_operation(self._token)
        self._token = checked(self._token)
        self._after_vault_check()
        final = self._aggregates()
        check_vault_status(initial, final, self.config.supply_cap, self._borrow_cap())

    def _borrow_cap(self) -> Optional[int]:
        return None

    def __repr__(self):
        return f"{type(self).__name__}({self.address}, asset={self.asset})"


# ============================================================================
# CREDIT VAULT
# ============================================================================

class CreditVault(Vault):
    """
    Borrowable vault with accumulator-based interest and liquidations.

    Example:
        usdc = CreditVault(controller, "USDC", "eUSDC", governor="dao",
                           oracle=oracle, interest_rate_model=irm,
                           reference_asset="USD")
        usdc.set_collateral_factor("dao", "eWETH", 80)
    """

    def __init__(
        self,
        controller: Controller,
        asset: str,
        share_symbol: str,
        governor: str,
        oracle: PriceOracle,
        interest_rate_model: InterestRateModel,
        reference_asset: str,
        collateral_factors: Optional[CollateralFactors] = None,
        supply_cap: Optional[int] = None,
        borrow_cap: Optional[int] = None,
        verbose: Optional[bool] = None,
    ):
        for factor in (collateral_factors or {}).values():
            _validate_collateral_factor(factor)
        self.market = MarketState.initial(controller.ledger.current_time)
        self.owed: Dict[str, int] = {}
        self.user_interest_accumulator: Dict[str, Ray] = {}
        super().__init__(controller, asset, share_symbol, governor, supply_cap, verbose)
        self.config = replace(
            self.config,
            oracle=oracle,
            interest_rate_model=interest_rate_model,
            reference_asset=reference_asset,
            collateral_factors=dict(collateral_factors or {}),
            borrow_cap=borrow_cap,
        )

    # ========================================================================
    # INTEREST
    # ========================================================================

    def _accrue_interest(self) -> None:
        before = self.market
        self.market = apply_accrual(before, self.ledger.current_time)
        if self.verbose and self.market is not before:
            print(f"✓ {self.address} accrued: borrows {before.total_borrows} → "
                  f"{self.market.total_borrows}, accumulator {self.market.interest_accumulator}")

    def _update_interest_rate(self) -> None:
        self._accrue_interest()
        utilisation = calculate_utilisation(self.market.total_borrows, self.cash())
        rate = self.config.interest_rate_model.compute_interest_rate(
            self.address, self.asset, utilisation,
        )
        self.market = with_interest_rate(self.market, min(rate, MAX_ALLOWED_INTEREST_RATE))

    def _current_accumulator(self) -> Ray:
        return calculate_accrual(self.market, self.ledger.current_time).interest_accumulator

    def _debt_of(self, account: str) -> int:
        return calculate_debt(
            self.owed.get(account, 0),
            self.user_interest_accumulator.get(account, Ray.ZERO),
            self._current_accumulator(),
        )

    def _increase_owed(self, account: str, assets: int) -> None:
        self.owed[account] = checked_add(self._debt_of(account), assets)
        self.user_interest_accumulator[account] = self.market.interest_accumulator
        self.market = with_borrows_increased(self.market, assets)

    def _decrease_owed(self, account: str, assets: int) -> None:
        debt = self._debt_of(account)
        if assets > debt:
            raise RepayAssetsExceeded(f"{account} owes {debt}, cannot repay {assets}")
        self.owed[account] = debt - assets
        self.user_interest_accumulator[account] = self.market.interest_accumulator
        self.market = with_borrows_decreased(self.market, assets)

    # ========================================================================
    # VALUATION
    # ========================================================================

    def _valuate(self, account: str, collaterals: List[str], skip_if_no_liability: bool) -> Valuation:
        config = self.config
        return valuate(
            oracle=config.oracle,
            liability_assets=self._debt_of(account),
            borrowed_asset=self.asset,
            collaterals=collaterals,
            balance_of=lambda collateral: self.ledger.get_balance(account, collateral),
            collateral_factors=config.collateral_factors,
            reference_asset=config.reference_asset,
            skip_collateral_if_no_liability=skip_if_no_liability,
        )

    def _calculate_assets_to_seize(self, violator: str, collateral: str, repay_assets: int) -> SeizeQuote:
        factor = self.config.collateral_factors.get(collateral, 0)
        if factor == 0:
            raise CollateralDisabled(f"{collateral} is not a recognized collateral")
        valuation = self._valuate(violator, self.controller.get_collaterals(violator), False)
        return calculate_assets_to_seize(
            oracle=self.config.oracle,
            valuation=valuation,
            repay_assets=repay_assets,
            borrowed_asset=self.asset,
            collateral=collateral,
            collateral_factor=factor,
            collateral_decimals=self.ledger.decimals(collateral),
            reference_asset=self.config.reference_asset,
        )

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def total_borrows(self) -> int:
        """Total debt including interest accrued up to now."""
        return calculate_accrual(self.market, self.ledger.current_time).total_borrows

    def total_assets(self) -> int:
        return self.cash() + self.total_borrows()

    def interest_accumulator(self) -> Ray:
        return self._current_accumulator()

    @guarded_view
    def debt_of(self, account: str) -> int:
        """Live debt of `account`, without persisting any accrual."""
        return self._debt_of(account)

    @guarded_view
    def interest_rate(self) -> int:
        """
        Per-second rate for the next accrual, scaled by ONE.

        Raises:
            VaultStatusCheckDeferred: While this vault's check is pending
        """
        if self.controller.is_vault_status_check_deferred(self.address):
            raise VaultStatusCheckDeferred(f"{self.address} status check is pending")
        return self.market.interest_rate.raw

    @guarded_view
    def account_liquidity(self, account: str) -> Valuation:
        """Full valuation of `account` against its enabled collaterals."""
        return self._valuate(account, self.controller.get_collaterals(account), False)

    @guarded_view
    def check_liquidation(self, liquidator: str, violator: str, collateral: str) -> LiquidationOpportunity:
        """How much of `violator`'s debt `liquidator` may repay against `collateral`."""
        if liquidator == violator or not self.controller.is_collateral_enabled(violator, collateral):
            return NO_OPPORTUNITY
        if self.controller.is_account_status_check_deferred(violator):
            return NO_OPPORTUNITY
        valuation = self._valuate(violator, self.controller.get_collaterals(violator), False)
        return check_liquidation(
            oracle=self.config.oracle,
            valuation=valuation,
            collateral=collateral,
            collateral_factor=self.config.collateral_factors.get(collateral, 0),
            collateral_decimals=self.ledger.decimals(collateral),
            collateral_balance=self.ledger.get_balance(violator, collateral),
            reference_asset=self.config.reference_asset,
        )

    def get_collateral_factor(self, collateral: str) -> int:
        return self.config.collateral_factors.get(collateral, 0)

    # ========================================================================
    # CONFIGURATION
    # ========================================================================

    def set_oracle(self, caller: str, oracle: PriceOracle) -> None:
        self._require_governor(caller)
        self.config = replace(self.config, oracle=oracle)

    def set_interest_rate_model(self, caller: str, interest_rate_model: InterestRateModel) -> None:
        self._require_governor(caller)
        self.config = replace(self.config, interest_rate_model=interest_rate_model)

    def set_reference_asset(self, caller: str, reference_asset: str) -> None:
        self._require_governor(caller)
        self.config = replace(self.config, reference_asset=reference_asset)

    def set_collateral_factor(self, caller: str, collateral: str, factor: int) -> None:
        """
        Set the share of `collateral`'s value recognized for solvency.

        Raises:
            NotAuthorized: If caller is not the governor
            InvalidCollateralFactor: If factor is outside [0, 100]
        """
        self._require_governor(caller)
        _validate_collateral_factor(factor)
        factors = dict(self.config.collateral_factors)
        factors[collateral] = factor
        self.config = replace(self.config, collateral_factors=factors)
        if self.verbose:
            print(f"✓ {self.address} collateral factor {collateral} = {factor}")

    def set_caps(self, caller: str, supply_cap: Optional[int], borrow_cap: Optional[int]) -> None:
        self._require_governor(caller)
        for cap in (supply_cap, borrow_cap):
            if cap is not None and cap < 0:
                raise ValueError(f"caps cannot be negative, got {cap}")
        self.config = replace(self.config, supply_cap=supply_cap, borrow_cap=borrow_cap)

    # ========================================================================
    # STATE
    # ========================================================================

    def _aggregates(self) -> VaultSnapshot:
        return VaultSnapshot(
            total_supply_assets=self.convert_to_assets(self.total_supply()),
            total_borrows=self.market.total_borrows,
        )

    def _begin(self) -> None:
        self._accrue_interest()
        super()._begin()

    def _after_vault_check(self) -> None:
        self._update_interest_rate()

    def _borrow_cap(self) -> Optional[int]:
        return self.config.borrow_cap

    def snapshot_state(self) -> VaultState:
        return VaultState(
            token=self._token,
            event_count=len(self.events),
            market=self.market,
            owed=tuple(self.owed.items()),
            user_interest_accumulator=tuple(self.user_interest_accumulator.items()),
        )

    def restore_state(self, state: VaultState) -> None:
        super().restore_state(state)
        self.market = state.market
        self.owed = dict(state.owed)
        self.user_interest_accumulator = dict(state.user_interest_accumulator)

    # ========================================================================
    # BORROWING
    # ========================================================================

    def _require_controller(self, account: str) -> None:
        if not self.controller.is_controller_enabled(account, self.address):
            raise ControllerDisabled(f"{account} has not enabled {self.address} as controller")

    @operation
    def borrow(self, caller: str, assets: int, receiver: str) -> None:
        """Lend `assets` of cash to `receiver`; the debt is recorded on `caller`."""
        self._require_controller(caller)
        self._begin()
        if assets == 0:
            raise ZeroAmount("borrow of zero assets")
        self._increase_owed(caller, assets)
        self.ledger.transfer(self.asset, self.address, receiver, assets, "borrow")
        self._emit("Borrow", caller, receiver=receiver, assets=assets)
        self._require_account_and_vault_status_check(caller)

    @operation
    def repay(self, caller: str, assets: int, receiver: str) -> None:
        """Pay down `receiver`'s debt with `assets` from `caller`."""
        self._require_controller(receiver)
        self._begin()
        if assets == 0:
            raise ZeroAmount("repay of zero assets")
        self.ledger.transfer(self.asset, caller, self.address, assets, "repay")
        self._decrease_owed(receiver, assets)
        self._emit("Repay", receiver, caller=caller, assets=assets)
        self._require_vault_status_check()

    @operation
    def pull_debt(self, caller: str, from_account: str, assets: int) -> None:
        """Take over `assets` of `from_account`'s debt."""
        self._require_controller(caller)
        self._begin()
        if assets == 0:
            raise ZeroAmount("pull of zero debt")
        self._decrease_owed(from_account, assets)
        self._increase_owed(caller, assets)
        self._emit("PullDebt", caller, from_account=from_account, assets=assets)
        self._require_account_and_vault_status_check(caller)

    @operation
    def liquidate(self, liquidator: str, violator: str, collateral: str, repay_assets: int) -> SeizeQuote:
        """
        Take over `repay_assets` of `violator`'s debt in exchange for collateral.

        The debt moves to the liquidator, the seized collateral moves from
        the violator to the liquidator. When the collateral is another vault
        the violator's account check requested by that transfer is forgiven: a
        liquidation may leave it unhealthy.

        Raises:
            SelfLiquidation, RepayAssetsInsufficient, ViolatorStatusCheckDeferred,
            CollateralDisabled, RepayAssetsExceeded, NoLiquidationOpportunity
        """
        self._require_controller(liquidator)
        if liquidator == violator:
            raise SelfLiquidation(f"{liquidator} cannot liquidate itself")
        if repay_assets == 0:
            raise RepayAssetsInsufficient("repay of zero assets")
        if self.controller.is_account_status_check_deferred(violator):
            raise ViolatorStatusCheckDeferred(f"{violator} status check is pending")

        self._begin()
        seize = self._calculate_assets_to_seize(violator, collateral, repay_assets)

        self._decrease_owed(violator, repay_assets)
        self._increase_owed(liquidator, repay_assets)

        if collateral == self.address:
            if not self.controller.is_collateral_enabled(violator, self.address):
                raise CollateralDisabled(f"{violator} has not enabled {self.address} as collateral")
            self.ledger.transfer(self.share_symbol, violator, liquidator,
                                 seize.seize_assets, "liquidation")
        else:
            self.controller.control_collateral(
                self.address, violator, collateral, liquidator, seize.seize_assets,
            )
            self.controller.forgive_account_status_check(self.address, violator)

        self._emit(
            "Liquidate", violator,
            liquidator=liquidator, collateral=collateral,
            repay_assets=repay_assets, seize_assets=seize.seize_assets,
            incentive=seize.incentive,
        )
        self._require_account_and_vault_status_check(liquidator)
        return seize

    @operation
    def touch(self, caller: str) -> None:
        """Accrue interest and refresh the rate without other changes."""
        self._begin()
        self._require_vault_status_check()

    def disable_controller(self, caller: str) -> None:
        """
        Release `caller` from this vault.

        Raises:
            OutstandingDebt: If caller still owes anything
        """
        self._require_not_locked()
        debt = self._debt_of(caller)
        if debt != 0:
            raise OutstandingDebt(f"{caller} owes {debt} {self.asset}")
        self.controller.disable_controller(self.address, caller)

    # ========================================================================
    # STATUS CHECKS
    # ========================================================================

    def check_account_status(self, account: str, collaterals: List[str]) -> None:
        """Called by the Controller for accounts this vault controls."""
        check_account_status(account, self._valuate(account, collaterals, True))


def _validate_collateral_factor(factor: int) -> None:
    if not isinstance(factor, int) or isinstance(factor, bool):
        raise InvalidCollateralFactor(f"collateral factor must be int, got {type(factor).__name__}")
    if not 0 <= factor <= COLLATERAL_FACTOR_SCALE:
        raise InvalidCollateralFactor(
            f"collateral factor must be in [0, {COLLATERAL_FACTOR_SCALE}], got {factor}"
        )
