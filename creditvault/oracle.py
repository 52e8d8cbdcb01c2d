"""
oracle.py - Price oracles for vault valuation

Converts raw token amounts between assets using prices quoted in a common
base currency. Decimals come from the ledger, so a quote is always expressed
in the smallest unit of the target asset.

Classes:
- StaticPriceOracle: Time-independent prices
- TimeSeriesPriceOracle: Time-varying prices read at the ledger clock

Both resolve vault shares registered with resolve_vault() into the vault's
underlying asset before pricing. Pairs without a price raise OracleError;
nothing is retried or defaulted.
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Any

from .core import Clock, OracleError
from .ledger import Ledger


class _QuotingOracle(ABC):
    """Shared quote() implementation; subclasses provide get_price()."""

    def __init__(self, ledger: Ledger, base_currency: str):
        self.ledger = ledger
        self.base_currency = base_currency
        self._vaults: Dict[str, Any] = {}

    @abstractmethod
    def get_price(self, symbol: str) -> Optional[Decimal]:
        """Price of `symbol` in the base currency, or None if unknown."""

    def resolve_vault(self, vault) -> None:
        """
        Price the shares of `vault` through its underlying asset.

        The vault must expose `share_symbol`, `asset` and `convert_to_assets()`.
        """
        self._vaults[vault.share_symbol] = vault

    def _require_price(self, symbol: str) -> Decimal:
        if symbol == self.base_currency:
            return Decimal("1")
        price = self.get_price(symbol)
        if price is None:
            raise OracleError(f"No price for {symbol}")
        if price <= 0:
            raise OracleError(f"Invalid price for {symbol}: {price}")
        return price

    def quote(self, amount: int, base: str, quote: str) -> int:
        """
        Convert `amount` of `base` into the equivalent amount of `quote`.

        Rounds down to the smallest unit of `quote`.

        Raises:
            OracleError: If either side cannot be priced
        """
        if quote in self._vaults:
            raise OracleError(f"Cannot quote into vault shares {quote}")
        vault = self._vaults.get(base)
        if vault is not None:
            amount = vault.convert_to_assets(amount)
            base = vault.asset

        if base == quote:
            return amount

        base_price = self._require_price(base)
        quote_price = self._require_price(quote)
        base_decimals = self.ledger.decimals(base)
        quote_decimals = self.ledger.decimals(quote)

        # exact rational arithmetic, rounded down once
        base_num, base_den = base_price.as_integer_ratio()
        quote_num, quote_den = quote_price.as_integer_ratio()
        return (
            amount * base_num * quote_den * 10 ** quote_decimals
            // (base_den * quote_num * 10 ** base_decimals)
        )


class StaticPriceOracle(_QuotingOracle):
    """
    Oracle with static prices (time-independent).

    Prices are per whole token, in the base currency. The base currency
    always has a price of 1.

    Example:
        oracle = StaticPriceOracle(ledger, {"WETH": Decimal("2000")}, "USD")
        oracle.quote(10**18, "WETH", "USD")  # 2000 * 10**USD_decimals
    """

    def __init__(self, ledger: Ledger, prices: Dict[str, Decimal], base_currency: str = "USD"):
        super().__init__(ledger, base_currency)
        self.prices = {k: Decimal(str(v)) for k, v in prices.items()}

    def get_price(self, symbol: str) -> Optional[Decimal]:
        return self.prices.get(symbol)

    def update_price(self, symbol: str, price: Decimal):
        """Update the price of an asset."""
        self.prices[symbol] = Decimal(str(price))

    def update_prices(self, prices: Dict[str, Decimal]):
        """Update multiple prices at once."""
        for symbol, price in prices.items():
            self.update_price(symbol, price)

    def __repr__(self):
        return f"StaticPriceOracle({len(self.prices)} prices, base={self.base_currency})"


class TimeSeriesPriceOracle(_QuotingOracle):
    """
    Oracle with time-varying prices.

    Uses the most recent price at or before the clock's current time.
    The clock is usually the ledger itself.

    Example:
        oracle = TimeSeriesPriceOracle(ledger, {
            'WETH': [(t0, Decimal("2000")), (t1, Decimal("1500"))],
        })
    """

    def __init__(
        self,
        ledger: Ledger,
        price_paths: Optional[Dict[str, List[Tuple[datetime, Decimal]]]] = None,
        base_currency: str = "USD",
        clock: Optional[Clock] = None,
    ):
        super().__init__(ledger, base_currency)
        self.clock = clock or ledger
        self.price_history: Dict[str, List[Tuple[datetime, Decimal]]] = {}

        if price_paths:
            for symbol, path in price_paths.items():
                if not path:
                    continue
                self.price_history[symbol] = sorted(
                    ((ts, Decimal(str(p))) for ts, p in path), key=lambda x: x[0]
                )

    def add_price(self, symbol: str, timestamp: datetime, price: Decimal):
        """Add a price observation for an asset at a specific time."""
        history = self.price_history.setdefault(symbol, [])
        history.append((timestamp, Decimal(str(price))))
        history.sort(key=lambda x: x[0])

    def get_price(self, symbol: str) -> Optional[Decimal]:
        """
        Get the price at or before the clock's current time.

        Returns None if no observation precedes it.
        """
        history = self.price_history.get(symbol)
        if not history:
            return None
        timestamps = [ts for ts, _ in history]
        idx = bisect_right(timestamps, self.clock.current_time)
        if idx == 0:
            return None
        return history[idx - 1][1]

    def __repr__(self):
        total_observations = sum(len(history) for history in self.price_history.values())
        return (f"TimeSeriesPriceOracle({len(self.price_history)} assets, "
                f"{total_observations} observations, base={self.base_currency})")
