"""
controller.py - Account registry and deferred status checks

The Controller is the authorization layer vaults call into:

    - Accounts enable collaterals (vault share symbols) and at most one
      controller (a borrowable vault) for themselves
    - Vaults request account and vault status checks; inside a call context
      the checks are deferred until the outermost context exits
    - A controller vault may move an account's collateral (liquidation) and
      forgive that account's pending check

Atomicity:
    Entering the outermost context snapshots the ledger, every registered
    vault and the controller's own registry. If the body or any deferred
    check raises, everything is restored before the error propagates, so a
    failed operation or batch leaves no trace.

Example:
    controller = Controller(ledger)
    with controller.batch():
        collateral_vault.deposit("alice", 10 * 10**18, "alice")
        controller.enable_collateral("alice", "eWETH")
        controller.enable_controller("alice", "eUSDC")
        usdc_vault.borrow("alice", 5_000 * 10**6, "alice")
    # checks ran here; on failure nothing above happened
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .core import (
    AccountStatusCheck,
    CollateralDisabled, ControllerDisabled, ControllerViolation, VaultError,
)
from .ledger import Ledger, LedgerSnapshot


@dataclass(frozen=True, slots=True)
class _ContextSnapshot:
    ledger: LedgerSnapshot
    vaults: Tuple[Tuple[str, Any], ...]
    collaterals: Tuple[Tuple[str, Tuple[str, ...]], ...]
    controllers: Tuple[Tuple[str, Tuple[str, ...]], ...]


class Controller:
    """
    Registry of vaults and per-account collaterals/controllers.

    Vaults are addressed by their share symbol. Checks requested outside a
    call context run immediately.
    """

    def __init__(self, ledger: Ledger, verbose: Optional[bool] = None):
        self.ledger = ledger
        self.verbose = ledger.verbose if verbose is None else verbose
        self.vaults: Dict[str, Any] = {}
        self._collaterals: Dict[str, List[str]] = {}
        self._controllers: Dict[str, List[str]] = {}
        self._depth = 0
        self._checks_in_progress = False
        self._account_checks: List[str] = []
        self._vault_checks: List[str] = []

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def register_vault(self, vault) -> None:
        if vault.address in self.vaults:
            raise ValueError(f"Vault {vault.address} already registered")
        self.vaults[vault.address] = vault
        if self.verbose:
            print(f"📝 Vault registered: {vault.address} ({vault.asset})")

    def get_vault(self, address: str):
        if address not in self.vaults:
            raise VaultError(f"Unknown vault {address}")
        return self.vaults[address]

    def get_collaterals(self, account: str) -> List[str]:
        return list(self._collaterals.get(account, ()))

    def get_controllers(self, account: str) -> List[str]:
        return list(self._controllers.get(account, ()))

    def is_collateral_enabled(self, account: str, vault: str) -> bool:
        return vault in self._collaterals.get(account, ())

    def is_controller_enabled(self, account: str, vault: str) -> bool:
        return vault in self._controllers.get(account, ())

    def enable_collateral(self, account: str, vault: str) -> None:
        """Enable a registered vault's shares as collateral for `account`."""
        self.get_vault(vault)
        collaterals = self._collaterals.setdefault(account, [])
        if vault not in collaterals:
            collaterals.append(vault)
            if self.verbose:
                print(f"✓ {account}: collateral {vault} enabled")

    def disable_collateral(self, account: str, vault: str) -> None:
        """Disable a collateral; the account must remain healthy without it."""
        with self.call():
            collaterals = self._collaterals.get(account, [])
            if vault in collaterals:
                collaterals.remove(vault)
                if self.verbose:
                    print(f"✓ {account}: collateral {vault} disabled")
            self.require_account_status_check(account)

    def enable_controller(self, account: str, vault: str) -> None:
        """
        Enable a borrowable vault as the controller of `account`.

        Raises:
            ControllerDisabled: If the vault cannot act as a controller
        """
        target = self.get_vault(vault)
        if not isinstance(target, AccountStatusCheck):
            raise ControllerDisabled(f"{vault} cannot be a controller")
        with self.call():
            controllers = self._controllers.setdefault(account, [])
            if vault not in controllers:
                controllers.append(vault)
                if self.verbose:
                    print(f"✓ {account}: controller {vault} enabled")
            self.require_account_status_check(account)

    def disable_controller(self, vault: str, account: str) -> None:
        """Called by a controller vault to release `account`."""
        controllers = self._controllers.get(account, [])
        if vault in controllers:
            controllers.remove(vault)
            if self.verbose:
                print(f"✓ {account}: controller {vault} disabled")

    # ========================================================================
    # CALL CONTEXT
    # ========================================================================

    @contextmanager
    def call(self) -> Iterator[None]:
        """
        Run a block with status checks deferred to the outermost exit.

        The outermost context restores all state if the block or a deferred
        check raises.
        """
        outermost = self._depth == 0
        snapshot = self._snapshot() if outermost else None
        self._depth += 1
        try:
            yield
            if outermost:
                self._run_deferred_checks()
        except Exception:
            if outermost:
                self._restore(snapshot)
                if self.verbose:
                    print("✗ Reverted: state restored to context entry")
            raise
        finally:
            self._depth -= 1
            if outermost:
                self._account_checks.clear()
                self._vault_checks.clear()

    def batch(self):
        """Group several operations so their checks run once, at the end."""
        return self.call()

    @property
    def checks_deferred(self) -> bool:
        return self._depth > 0 and not self._checks_in_progress

    def _snapshot(self) -> _ContextSnapshot:
        return _ContextSnapshot(
            ledger=self.ledger.snapshot(),
            vaults=tuple((a, v.snapshot_state()) for a, v in self.vaults.items()),
            collaterals=tuple((a, tuple(c)) for a, c in self._collaterals.items()),
            controllers=tuple((a, tuple(c)) for a, c in self._controllers.items()),
        )

    def _restore(self, snapshot: _ContextSnapshot) -> None:
        self.ledger.restore(snapshot.ledger)
        for address, state in snapshot.vaults:
            self.vaults[address].restore_state(state)
        self._collaterals = {a: list(c) for a, c in snapshot.collaterals}
        self._controllers = {a: list(c) for a, c in snapshot.controllers}

    # ========================================================================
    # STATUS CHECKS
    # ========================================================================

    def is_account_status_check_deferred(self, account: str) -> bool:
        return self.checks_deferred and account in self._account_checks

    def is_vault_status_check_deferred(self, vault: str) -> bool:
        return self.checks_deferred and vault in self._vault_checks

    def require_account_status_check(self, account: str) -> None:
        if self.checks_deferred:
            if account not in self._account_checks:
                self._account_checks.append(account)
        else:
            self._check_account(account)

    def require_vault_status_check(self, vault: str) -> None:
        if self.checks_deferred:
            if vault not in self._vault_checks:
                self._vault_checks.append(vault)
        else:
            self.get_vault(vault).check_vault_status()

    def require_account_and_vault_status_check(self, account: str, vault: str) -> None:
        self.require_account_status_check(account)
        self.require_vault_status_check(vault)

    def forgive_account_status_check(self, vault: str, account: str) -> None:
        """
        Drop a pending account check. Only the account's controller may do this.

        Raises:
            ControllerDisabled: If `vault` is not a controller of `account`
        """
        if not self.is_controller_enabled(account, vault):
            raise ControllerDisabled(f"{vault} is not a controller of {account}")
        if account in self._account_checks:
            self._account_checks.remove(account)

    def _check_account(self, account: str) -> None:
        controllers = self._controllers.get(account, [])
        if not controllers:
            return
        if len(controllers) > 1:
            raise ControllerViolation(f"{account} has {len(controllers)} controllers")
        vault = self.get_vault(controllers[0])
        vault.check_account_status(account, self.get_collaterals(account))

    def _run_deferred_checks(self) -> None:
        self._checks_in_progress = True
        try:
            while self._account_checks:
                self._check_account(self._account_checks.pop(0))
            while self._vault_checks:
                self.get_vault(self._vault_checks.pop(0)).check_vault_status()
        finally:
            self._checks_in_progress = False

    # ========================================================================
    # COLLATERAL CONTROL
    # ========================================================================

    def control_collateral(
        self,
        vault: str,
        account: str,
        collateral: str,
        receiver: str,
        shares: int,
    ) -> None:
        """
        Move `shares` of a collateral vault out of `account` on the controller's behalf.

        The transfer runs as `account`, so the collateral vault requests the
        usual account check for it.

        Raises:
            ControllerDisabled: If `vault` is not a controller of `account`
            CollateralDisabled: If `collateral` is not enabled for `account`
        """
        if not self.is_controller_enabled(account, vault):
            raise ControllerDisabled(f"{vault} is not a controller of {account}")
        if not self.is_collateral_enabled(account, collateral):
            raise CollateralDisabled(f"{collateral} is not enabled for {account}")
        self.get_vault(collateral).transfer(account, receiver, shares)

    def __repr__(self):
        return f"Controller({len(self.vaults)} vaults, depth={self._depth})"
