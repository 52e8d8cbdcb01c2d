"""
Solvency Conformance Tests

INVARIANT: Collateral value is the factor-weighted, rounded-down sum of
the enabled collaterals, and zero-factor collateral never counts.

    collateral_value = Σ_{c ∈ collaterals, cf(c) > 0, balance(c) > 0}
                           quote(balance(c), c, ref) * cf(c) / 100

    healthy ⟺ liability_value ≤ collateral_value
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from creditvault import Valuation, valuate

from tests.fake_oracle import FakeOracle


ASSETS = ["COLL", "COLL2", "COLL3"]


# =============================================================================
# STRATEGIES FOR PROPERTY-BASED TESTING
# =============================================================================

balances = st.fixed_dictionaries({a: st.integers(min_value=0, max_value=10**24) for a in ASSETS})
factors = st.fixed_dictionaries({a: st.integers(min_value=0, max_value=100) for a in ASSETS})
prices = st.fixed_dictionaries(
    {a: st.integers(min_value=1, max_value=10**6) for a in ASSETS + ["DEBT"]}
)


def _valuate(oracle, liability, balance_map, factor_map):
    return valuate(
        oracle=oracle,
        liability_assets=liability,
        borrowed_asset="DEBT",
        collaterals=ASSETS,
        balance_of=balance_map.get,
        collateral_factors=factor_map,
        reference_asset="USD",
        skip_collateral_if_no_liability=False,
    )


# =============================================================================
# PROPERTIES
# =============================================================================

class TestSolvencyProperties:
    """Property-based valuation tests."""

    @given(balances, factors, prices, st.integers(min_value=0, max_value=10**24))
    @settings(max_examples=200)
    def test_matches_weighted_sum(self, balance_map, factor_map, price_map, liability):
        """
        PROPERTY: Collateral value is the rounded-down weighted sum.
        """
        oracle = FakeOracle(price_map)
        result = _valuate(oracle, liability, balance_map, factor_map)

        expected = sum(
            balance_map[a] * price_map[a] * factor_map[a] // 100
            for a in ASSETS
        )
        assert result.collateral_value == expected
        assert result.liability_value == liability * price_map["DEBT"]

    @given(balances, factors, prices)
    @settings(max_examples=200)
    def test_zero_factor_is_never_priced(self, balance_map, factor_map, price_map):
        """
        PROPERTY: The oracle is never asked about zero-factor or zero-balance collateral.
        """
        oracle = FakeOracle(price_map)
        _valuate(oracle, 1, balance_map, factor_map)

        for asset in ASSETS:
            if factor_map[asset] == 0 or balance_map[asset] == 0:
                assert asset not in oracle.quoted_assets()

    @given(balances, factors, prices, st.sampled_from(ASSETS))
    @settings(max_examples=200)
    def test_raising_a_factor_never_lowers_value(self, balance_map, factor_map, price_map, asset):
        """
        PROPERTY: Collateral value is monotone in every collateral factor.
        """
        before = _valuate(FakeOracle(price_map), 1, balance_map, factor_map)
        raised = dict(factor_map, **{asset: min(factor_map[asset] + 1, 100)})
        after = _valuate(FakeOracle(price_map), 1, balance_map, raised)

        assert after.collateral_value >= before.collateral_value

    @given(balances, prices)
    @settings(max_examples=100)
    def test_full_factor_is_market_value(self, balance_map, price_map):
        """
        PROPERTY: At factor 100 the collateral counts at its full market value.
        """
        full = {a: 100 for a in ASSETS}
        result = _valuate(FakeOracle(price_map), 1, balance_map, full)

        assert result.collateral_value == sum(balance_map[a] * price_map[a] for a in ASSETS)

    @given(st.integers(min_value=0, max_value=10**30), st.integers(min_value=0, max_value=10**30))
    @settings(max_examples=100)
    def test_health_is_liability_at_most_collateral(self, liability_value, collateral_value):
        """
        PROPERTY: An account is healthy exactly when liability value ≤ collateral value.
        """
        valuation = Valuation(1, liability_value, collateral_value)
        assert valuation.is_healthy == (liability_value <= collateral_value)
