"""
conftest.py - Shared pytest fixtures for creditvault tests

Provides common fixtures used across unit, conformance and functional tests:
- Bare ledgers with registered assets
- Fake and static oracles
- Complete markets (empty, funded, with an open position)
- Pure-function inputs (market states, valuations)
"""

import pytest
from decimal import Decimal

from creditvault import (
    Ledger, token, StaticPriceOracle,
    MarketState, Ray, Valuation,
)

from tests.fake_oracle import FakeOracle
from tests.market import (
    START, WETH, USDC, TEN_PERCENT_APR,
    build_market, supply, post_collateral, open_position,
)


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def ledger():
    """Ledger at START with USD (18), USDC (6), WETH (18) and DAI (18) registered."""
    ledger = Ledger("test", START, verbose=False)
    ledger.register_asset(token("USD", "US Dollar", 18))
    ledger.register_asset(token("USDC", "USD Coin", 6))
    ledger.register_asset(token("WETH", "Wrapped Ether", 18))
    ledger.register_asset(token("DAI", "Dai", 18))
    return ledger


@pytest.fixture
def funded_ledger(ledger):
    """Ledger with alice holding 1,000 USDC and 2 WETH."""
    ledger.mint("USDC", "alice", 1_000 * USDC)
    ledger.mint("WETH", "alice", 2 * WETH)
    return ledger


# =============================================================================
# ORACLE FIXTURES
# =============================================================================

@pytest.fixture
def fake_oracle():
    """Integer oracle: every asset worth 1 reference unit per raw unit."""
    return FakeOracle({"DEBT": 1, "COLL": 1, "COLL2": 1, "ZERO": 1})


@pytest.fixture
def static_oracle(ledger):
    return StaticPriceOracle(ledger, {
        "USDC": Decimal("1"),
        "WETH": Decimal("2000"),
        "DAI": Decimal("1"),
    })


# =============================================================================
# MARKET FIXTURES
# =============================================================================

@pytest.fixture
def market():
    """Empty market: eWETH collateral vault and eUSDC credit vault."""
    return build_market()


@pytest.fixture
def funded_market(market):
    """Market with 100,000 USDC supplied by the lender."""
    supply(market, "lender", 100_000 * USDC)
    return market


@pytest.fixture
def borrowed_market(funded_market):
    """
    Alice posted 10 WETH (16,000 USD of collateral value) and borrowed 12,000 USDC.

    Bob posted 5 WETH and enabled eUSDC as controller, ready to liquidate.
    """
    open_position(funded_market, "alice", 10 * WETH, 12_000 * USDC)
    post_collateral(funded_market, "bob", 5 * WETH)
    funded_market.ledger.mint("USDC", "bob", 50_000 * USDC)
    return funded_market


@pytest.fixture
def underwater_market(borrowed_market):
    """WETH fell to 1,400 USD: alice's 11,200 of collateral value backs 12,000 of debt."""
    borrowed_market.oracle.update_price("WETH", Decimal("1400"))
    return borrowed_market


# =============================================================================
# PURE-FUNCTION INPUTS
# =============================================================================

@pytest.fixture
def ten_percent_state():
    """35 units of debt at a 10% APR per-second rate, accumulator at ONE."""
    return MarketState(
        total_borrows=35 * 10**18,
        interest_accumulator=Ray.ONE,
        last_interest_update=START,
        interest_rate=Ray(TEN_PERCENT_APR),
    )


@pytest.fixture
def underwater_valuation():
    """Liability value 100 against collateral value 80."""
    return Valuation(liability_assets=100, liability_value=100, collateral_value=80)
