"""
status.py - Vault Status Checker

Every mutating vault operation follows the same sequence:

    begin_operation(snapshot)  ->  mutate  ->  end_operation(token)

The token carries the aggregate state taken before the first mutation and
moves through an explicit state machine:

    CLEAN -> SNAPSHOT_TAKEN -> { CHECKED | CHECK_DEFERRED }
                                                |
                           CHECK_DEFERRED ------+--> CHECKED

A deferred token keeps its original snapshot until the controller runs the
check at the end of the batch, so several operations in one batch are
checked against the state before the first of them.

The checks themselves are pure functions of the snapshot, the final state
and the configured caps.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .core import (
    AccountUnhealthy, BorrowCapExceeded, SnapshotNotTaken, SupplyCapExceeded,
)
from .valuation import Valuation


class StatusCheckState(Enum):
    CLEAN = "clean"
    SNAPSHOT_TAKEN = "snapshot_taken"
    CHECKED = "checked"
    CHECK_DEFERRED = "check_deferred"


@dataclass(frozen=True, slots=True)
class VaultSnapshot:
    """
    Vault aggregates before an operation.

    Attributes:
        total_supply_assets: Share supply expressed in underlying assets
        total_borrows: Total live debt
    """
    total_supply_assets: int
    total_borrows: int = 0


@dataclass(frozen=True, slots=True)
class OperationToken:
    """State token for one vault operation (or one batch of them)."""
    state: StatusCheckState
    snapshot: Optional[VaultSnapshot] = None

    @property
    def is_pending(self) -> bool:
        return self.state in (StatusCheckState.SNAPSHOT_TAKEN, StatusCheckState.CHECK_DEFERRED)


CLEAN_TOKEN = OperationToken(StatusCheckState.CLEAN)


# ============================================================================
# TOKEN TRANSITIONS
# ============================================================================

def begin_operation(token: OperationToken, snapshot: VaultSnapshot) -> OperationToken:
    """
    Start an operation.

    A token that is already pending keeps its snapshot: the check must
    compare against the state before the first operation of the batch.
    """
    if token.is_pending:
        return token
    return OperationToken(StatusCheckState.SNAPSHOT_TAKEN, snapshot)


def defer_check(token: OperationToken) -> OperationToken:
    if not token.is_pending:
        raise SnapshotNotTaken(f"cannot defer a check in state {token.state.value}")
    return replace(token, state=StatusCheckState.CHECK_DEFERRED)


def end_operation(token: OperationToken) -> VaultSnapshot:
    """
    Consume a token and return the snapshot the check compares against.

    Raises:
        SnapshotNotTaken: If the token was never started or already consumed
    """
    if not token.is_pending or token.snapshot is None:
        raise SnapshotNotTaken(f"no snapshot to check in state {token.state.value}")
    return token.snapshot


def checked(token: OperationToken) -> OperationToken:
    return OperationToken(StatusCheckState.CHECKED, token.snapshot)


# ============================================================================
# CHECKS
# ============================================================================

def check_vault_status(
    initial: VaultSnapshot,
    final: VaultSnapshot,
    supply_cap: Optional[int] = None,
    borrow_cap: Optional[int] = None,
) -> None:
    """
    Enforce the caps.

    A figure above its cap is only rejected if the operation increased it,
    so operations that reduce an over-cap vault remain possible.
    """
    if (supply_cap is not None
            and final.total_supply_assets > supply_cap
            and final.total_supply_assets > initial.total_supply_assets):
        raise SupplyCapExceeded(
            f"supply {final.total_supply_assets} exceeds cap {supply_cap}"
        )
    if (borrow_cap is not None
            and final.total_borrows > borrow_cap
            and final.total_borrows > initial.total_borrows):
        raise BorrowCapExceeded(
            f"borrows {final.total_borrows} exceed cap {borrow_cap}"
        )


def check_account_status(account: str, valuation: Valuation) -> None:
    if valuation.liability_value > valuation.collateral_value:
        raise AccountUnhealthy(
            f"{account}: liability value {valuation.liability_value} > "
            f"collateral value {valuation.collateral_value}"
        )


__all__ = [
    'StatusCheckState', 'VaultSnapshot', 'OperationToken', 'CLEAN_TOKEN',
    'begin_operation', 'defer_check', 'end_operation', 'checked',
    'check_vault_status', 'check_account_status',
]
