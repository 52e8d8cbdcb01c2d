"""
fake_oracle.py - Test Helper for PriceOracle

Provides a minimal integer-priced oracle that records every quote, so tests
can assert which assets were (and were not) priced.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Set, Tuple

from creditvault import OracleError


class FakeOracle:
    """
    Oracle with integer prices per raw unit.

        quote(amount, base, quote) = amount * prices[base] // prices[quote]

    The reference asset is priced at 1 unless given.

    Example:
        oracle = FakeOracle({"WETH": 2000, "USDC": 1})
        oracle.quote(3, "WETH", "USD")   # 6000
        oracle.calls                     # [(3, "WETH", "USD")]
    """

    def __init__(
        self,
        prices: Dict[str, int],
        reference: str = "USD",
        failing: Optional[Set[str]] = None,
    ):
        self.prices = dict(prices)
        self.prices.setdefault(reference, 1)
        self.failing = set(failing or ())
        self.calls: List[Tuple[int, str, str]] = []

    def quote(self, amount: int, base: str, quote: str) -> int:
        self.calls.append((amount, base, quote))
        for symbol in (base, quote):
            if symbol in self.failing or symbol not in self.prices:
                raise OracleError(f"No price for {symbol}")
        return amount * self.prices[base] // self.prices[quote]

    def quoted_assets(self) -> Set[str]:
        return {base for _, base, _ in self.calls}
