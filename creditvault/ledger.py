"""
ledger.py - Token Balance Ledger

The Ledger holds every token balance the vaults operate on: underlying
assets, collateral tokens and vault shares. It is the single place where
balances change, and it owns the logical clock the vaults accrue against.

Key responsibilities:
    - Registers assets with their decimal precision
    - Applies lists of moves atomically (all succeed or none do)
    - Keeps an audit log of executed transactions
    - Takes and restores snapshots so a failed operation leaves no trace
    - Tracks logical time (advance_time only moves forward)
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Set, Tuple, Any

from .core import (
    SYSTEM_WALLET, MAX_UINT256,
    Balances,
    AssetNotRegistered, InsufficientBalance,
)


# ============================================================================
# ASSETS AND MOVES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Asset:
    """
    Definition of a token tracked by the ledger.

    Attributes:
        symbol: Short identifier (e.g., "USDC", "eWETH").
        name: Human-readable name.
        decimals: Number of decimals; balances are integers in units of 10**-decimals.
    """
    symbol: str
    name: str
    decimals: int = 18

    def __post_init__(self):
        if not self.symbol or not self.symbol.strip():
            raise ValueError("Asset symbol cannot be empty")
        if not 0 <= self.decimals <= 36:
            raise ValueError(f"Asset decimals must be in [0, 36], got {self.decimals}")

    @property
    def unit(self) -> int:
        """Raw amount of one whole token."""
        return 10 ** self.decimals


def token(symbol: str, name: str, decimals: int = 18) -> Asset:
    """
    Create a token asset.

    Args:
        symbol: Token symbol (e.g., "USDC").
        name: Full name (e.g., "USD Coin").
        decimals: Token decimals (default: 18).
    """
    return Asset(symbol=symbol, name=name, decimals=decimals)


@dataclass(frozen=True, slots=True)
class Move:
    """
    A single transfer of a raw token amount between two wallets.

    This class is immutable; all fields are validated in __post_init__.
    """
    quantity: int
    asset: str
    source: str
    dest: str
    contract_id: str

    def __post_init__(self):
        if not self.source or not self.source.strip():
            raise ValueError("Move source cannot be empty")
        if not self.dest or not self.dest.strip():
            raise ValueError("Move dest cannot be empty")
        if not self.contract_id or not self.contract_id.strip():
            raise ValueError("Move contract_id cannot be empty")
        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            raise ValueError(f"Move quantity must be int, got {type(self.quantity)}")
        if self.quantity <= 0:
            raise ValueError(f"Move quantity must be positive, got {self.quantity}")
        if self.source == self.dest:
            raise ValueError("Source and dest must be different")

    def __repr__(self) -> str:
        return f"Move({self.quantity} {self.asset}: {self.source}→{self.dest})"


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    An executed, immutable record of balance changes.

    Attributes:
        moves: The moves applied, in order
        timestamp: Ledger time at execution
        exec_id: Unique execution identifier (ledger + sequence)
        sequence_number: Monotonic sequence within the ledger
        contract_ids: Set of contract IDs from moves (auto-populated)
    """
    moves: Tuple[Move, ...]
    timestamp: datetime
    exec_id: str
    sequence_number: int
    contract_ids: FrozenSet[str] = None

    def __post_init__(self):
        if not self.moves:
            raise ValueError("Transaction must have moves")
        if self.contract_ids is None:
            object.__setattr__(
                self, 'contract_ids',
                frozenset(m.contract_id for m in self.moves)
            )


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """Point-in-time copy of all balances, used to roll back failed operations."""
    balances: Tuple[Tuple[str, Tuple[Tuple[str, int], ...]], ...]
    log_length: int
    next_sequence: int


# ============================================================================
# LEDGER
# ============================================================================

class Ledger:
    """
    Token balance ledger with atomic execution and an audit trail.

    Wallets are created implicitly on first credit. Every wallet except
    SYSTEM_WALLET must stay non-negative; SYSTEM_WALLET is the issuance
    counterparty for mints and burns, so for every asset the sum of all
    balances (system wallet included) is always zero.

    Thread Safety:
        Not thread-safe. Each thread should maintain its own Ledger instance.

    Example:
        ledger = Ledger("main", datetime(2025, 1, 1))
        ledger.register_asset(token("USDC", "USD Coin", 6))
        ledger.mint("USDC", "alice", 1_000 * 10**6)
        ledger.transfer("USDC", "alice", "bob", 250 * 10**6)
    """

    def __init__(
        self,
        name: str,
        initial_time: Optional[datetime] = None,
        verbose: bool = False,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            initial_time: Starting time for the ledger (default: 1970-01-01)
            verbose: Print executed transactions (default: False)
        """
        self.name = name
        self.assets: Dict[str, Asset] = {}
        self.balances: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self.transaction_log: List[Transaction] = []
        self._current_time: datetime = initial_time or datetime(1970, 1, 1)
        self.verbose = verbose
        self._next_sequence: int = 0

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    def get_asset(self, symbol: str) -> Asset:
        if symbol not in self.assets:
            raise AssetNotRegistered(f"Asset {symbol} not registered")
        return self.assets[symbol]

    def decimals(self, symbol: str) -> int:
        return self.get_asset(symbol).decimals

    def is_registered(self, symbol: str) -> bool:
        return symbol in self.assets

    def list_assets(self) -> List[str]:
        return sorted(self.assets.keys())

    def list_wallets(self) -> Set[str]:
        return {w for w, bals in self.balances.items() if any(bals.values())}

    def get_balance(self, wallet_id: str, symbol: str) -> int:
        """
        Get the raw balance of an asset in a wallet.

        Returns 0 for wallets that never held the asset.

        Raises:
            AssetNotRegistered: If the asset is not registered
        """
        if symbol not in self.assets:
            raise AssetNotRegistered(f"Asset {symbol} not registered")
        wallet = self.balances.get(wallet_id)
        if wallet is None:
            return 0
        return wallet.get(symbol, 0)

    def get_positions(self, symbol: str) -> Balances:
        """Return all non-zero balances of an asset, system wallet excluded."""
        self.get_asset(symbol)
        return {
            w: bals[symbol]
            for w, bals in sorted(self.balances.items())
            if w != SYSTEM_WALLET and bals.get(symbol, 0) != 0
        }

    def total_supply(self, symbol: str) -> int:
        """Total amount of an asset held outside the system wallet."""
        return sum(self.get_positions(symbol).values())

    def verify_double_entry(self) -> Dict[str, Any]:
        """
        Verify that every asset nets to zero across all wallets.

        Returns:
            Dict with keys 'valid' (bool), 'supplies' (symbol -> supply) and
            'discrepancies' (list of symbols whose balances do not net to zero)
        """
        supplies = {}
        discrepancies = []
        for symbol in self.assets:
            net = sum(bals.get(symbol, 0) for bals in self.balances.values())
            supplies[symbol] = self.total_supply(symbol)
            if net != 0:
                discrepancies.append({'asset': symbol, 'net': net})
        return {
            'valid': not discrepancies,
            'supplies': supplies,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock to a new time.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def register_asset(self, asset: Asset) -> Asset:
        """
        Register a new asset.

        Raises:
            ValueError: If the symbol is already registered
        """
        if asset.symbol in self.assets:
            raise ValueError(f"Asset {asset.symbol} already registered")
        self.assets[asset.symbol] = asset
        if self.verbose:
            print(f"📝 Registered: {asset.symbol} ({asset.name}) [{asset.decimals} decimals]")
        return asset

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def execute(self, moves: List[Move]) -> Transaction:
        """
        Apply moves atomically.

        All moves are validated against the balances they would produce
        before any of them is applied.

        Raises:
            AssetNotRegistered: If a move references an unknown asset
            InsufficientBalance: If a non-system wallet would go negative
        """
        if not moves:
            raise ValueError("execute() requires at least one move")

        net: Dict[Tuple[str, str], int] = defaultdict(int)
        for move in moves:
            if move.asset not in self.assets:
                raise AssetNotRegistered(f"Asset {move.asset} not registered")
            net[(move.source, move.asset)] -= move.quantity
            net[(move.dest, move.asset)] += move.quantity

        for (wallet, symbol), delta in net.items():
            proposed = self.get_balance(wallet, symbol) + delta
            if wallet == SYSTEM_WALLET:
                continue
            if proposed < 0:
                if self.verbose:
                    print(f"✗ REJECTED: {wallet} {symbol}: {proposed} < 0")
                raise InsufficientBalance(
                    f"{wallet} has {self.get_balance(wallet, symbol)} {symbol}, "
                    f"needs {-delta}"
                )
            if proposed > MAX_UINT256:
                raise InsufficientBalance(f"{wallet} {symbol} balance overflow")

        for (wallet, symbol), delta in net.items():
            self.balances[wallet][symbol] += delta

        sequence = self._next_sequence
        self._next_sequence += 1
        tx = Transaction(
            moves=tuple(moves),
            timestamp=self._current_time,
            exec_id=f"exec:{self.name}:{sequence:012d}",
            sequence_number=sequence,
        )
        self.transaction_log.append(tx)

        if self.verbose:
            for move in tx.moves:
                print(f"✓ {move.contract_id}: {move.quantity} {move.asset} "
                      f"{move.source} → {move.dest}")
        return tx

    def transfer(
        self,
        symbol: str,
        source: str,
        dest: str,
        amount: int,
        contract_id: str = "transfer",
    ) -> Optional[Transaction]:
        """Move `amount` of an asset between wallets. A zero amount is a no-op."""
        if amount == 0 or source == dest:
            self.get_asset(symbol)
            return None
        return self.execute([Move(amount, symbol, source, dest, contract_id)])

    def mint(self, symbol: str, wallet_id: str, amount: int, contract_id: str = "mint") -> Optional[Transaction]:
        """Issue new tokens to a wallet (from SYSTEM_WALLET)."""
        return self.transfer(symbol, SYSTEM_WALLET, wallet_id, amount, contract_id)

    def burn(self, symbol: str, wallet_id: str, amount: int, contract_id: str = "burn") -> Optional[Transaction]:
        """Destroy tokens held by a wallet (returned to SYSTEM_WALLET)."""
        return self.transfer(symbol, wallet_id, SYSTEM_WALLET, amount, contract_id)

    # ========================================================================
    # SNAPSHOTS
    # ========================================================================

    def snapshot(self) -> LedgerSnapshot:
        """Capture all balances and the log position."""
        return LedgerSnapshot(
            balances=tuple(
                (wallet, tuple(sorted(bals.items())))
                for wallet, bals in sorted(self.balances.items())
            ),
            log_length=len(self.transaction_log),
            next_sequence=self._next_sequence,
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """
        Restore balances and the audit log to a snapshot.

        Transactions executed after the snapshot are dropped from the log;
        the clock is left untouched.
        """
        self.balances = defaultdict(lambda: defaultdict(int))
        for wallet, bals in snapshot.balances:
            self.balances[wallet] = defaultdict(int, bals)
        del self.transaction_log[snapshot.log_length:]
        self._next_sequence = snapshot.next_sequence
