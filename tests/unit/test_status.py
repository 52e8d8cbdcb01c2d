"""
Unit tests for status.py - operation tokens and the vault/account checks.
"""

import pytest

from creditvault import (
    StatusCheckState, VaultSnapshot, CLEAN_TOKEN, Valuation,
    begin_operation, defer_check, end_operation,
    check_vault_status, check_account_status,
    AccountUnhealthy, BorrowCapExceeded, SnapshotNotTaken, SupplyCapExceeded,
)
from creditvault.status import checked


class TestOperationToken:
    """CLEAN -> SNAPSHOT_TAKEN -> {CHECKED | CHECK_DEFERRED}"""

    def test_begin_takes_snapshot(self):
        token = begin_operation(CLEAN_TOKEN, VaultSnapshot(10, 5))
        assert token.state is StatusCheckState.SNAPSHOT_TAKEN
        assert token.snapshot == VaultSnapshot(10, 5)

    def test_pending_token_keeps_first_snapshot(self):
        first = begin_operation(CLEAN_TOKEN, VaultSnapshot(10, 5))
        deferred = defer_check(first)
        again = begin_operation(deferred, VaultSnapshot(99, 99))
        assert again.state is StatusCheckState.CHECK_DEFERRED
        assert again.snapshot == VaultSnapshot(10, 5)

    def test_end_returns_snapshot(self):
        token = begin_operation(CLEAN_TOKEN, VaultSnapshot(1, 2))
        assert end_operation(token) == VaultSnapshot(1, 2)
        assert end_operation(defer_check(token)) == VaultSnapshot(1, 2)

    def test_end_on_clean_token_rejected(self):
        with pytest.raises(SnapshotNotTaken):
            end_operation(CLEAN_TOKEN)

    def test_consumed_token_rejected(self):
        token = checked(begin_operation(CLEAN_TOKEN, VaultSnapshot(1, 2)))
        assert token.state is StatusCheckState.CHECKED
        with pytest.raises(SnapshotNotTaken):
            end_operation(token)

    def test_checked_token_starts_fresh(self):
        token = checked(begin_operation(CLEAN_TOKEN, VaultSnapshot(1, 2)))
        fresh = begin_operation(token, VaultSnapshot(3, 4))
        assert fresh.snapshot == VaultSnapshot(3, 4)

    def test_cannot_defer_clean_token(self):
        with pytest.raises(SnapshotNotTaken):
            defer_check(CLEAN_TOKEN)

    def test_tokens_are_immutable(self):
        with pytest.raises(AttributeError):
            CLEAN_TOKEN.state = StatusCheckState.CHECKED


class TestVaultStatus:
    """Caps reject only growth above the cap."""

    def test_no_caps(self):
        check_vault_status(VaultSnapshot(0, 0), VaultSnapshot(10**30, 10**30))

    def test_supply_cap_exceeded(self):
        with pytest.raises(SupplyCapExceeded):
            check_vault_status(VaultSnapshot(90, 0), VaultSnapshot(101, 0), supply_cap=100)

    def test_supply_above_cap_may_shrink(self):
        check_vault_status(VaultSnapshot(150, 0), VaultSnapshot(120, 0), supply_cap=100)

    def test_borrow_cap_exceeded(self):
        with pytest.raises(BorrowCapExceeded):
            check_vault_status(VaultSnapshot(0, 90), VaultSnapshot(0, 101), borrow_cap=100)

    def test_borrows_at_cap_allowed(self):
        check_vault_status(VaultSnapshot(0, 90), VaultSnapshot(0, 100), borrow_cap=100)

    def test_zero_cap_blocks_growth(self):
        with pytest.raises(BorrowCapExceeded):
            check_vault_status(VaultSnapshot(0, 0), VaultSnapshot(0, 1), borrow_cap=0)


class TestAccountStatus:

    def test_healthy(self):
        check_account_status("alice", Valuation(10, 100, 100))

    def test_unhealthy(self):
        with pytest.raises(AccountUnhealthy, match="alice"):
            check_account_status("alice", Valuation(10, 101, 100))
