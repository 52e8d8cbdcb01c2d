"""
Unit tests for valuation.py - liability and risk-adjusted collateral value.

The fake oracle records every quote, so the tests also check which assets
were never priced (zero factors, zero balances, no liability).
"""

import pytest
from decimal import Decimal

from creditvault import (
    OracleError, Valuation, EMPTY_VALUATION,
    calculate_collateral_value, valuate,
)

from tests.fake_oracle import FakeOracle


def _valuate(oracle, liability, balances, factors, skip=False, collaterals=None):
    return valuate(
        oracle=oracle,
        liability_assets=liability,
        borrowed_asset="DEBT",
        collaterals=collaterals if collaterals is not None else list(balances),
        balance_of=lambda c: balances.get(c, 0),
        collateral_factors=factors,
        reference_asset="USD",
        skip_collateral_if_no_liability=skip,
    )


class TestValuate:
    """valuate() aggregates liability and collateral values."""

    def test_liability_and_weighted_collateral(self):
        oracle = FakeOracle({"DEBT": 2, "COLL": 10})
        result = _valuate(oracle, 50, {"COLL": 20}, {"COLL": 80})
        assert result == Valuation(liability_assets=50, liability_value=100, collateral_value=160)

    def test_collateral_value_rounds_down_per_asset(self):
        oracle = FakeOracle({"DEBT": 1, "COLL": 1, "COLL2": 1})
        result = _valuate(oracle, 1, {"COLL": 3, "COLL2": 3}, {"COLL": 50, "COLL2": 50})
        # 3 * 50 // 100 = 1 for each asset
        assert result.collateral_value == 2

    def test_skip_without_liability_makes_no_oracle_calls(self, fake_oracle):
        result = _valuate(fake_oracle, 0, {"COLL": 100}, {"COLL": 80}, skip=True)
        assert result is EMPTY_VALUATION
        assert fake_oracle.calls == []

    def test_no_liability_without_skip_values_collateral_only(self, fake_oracle):
        result = _valuate(fake_oracle, 0, {"COLL": 100}, {"COLL": 80}, skip=False)
        assert result == Valuation(0, 0, 80)
        assert fake_oracle.quoted_assets() == {"COLL"}

    def test_zero_factor_collateral_is_never_priced(self, fake_oracle):
        result = _valuate(fake_oracle, 10, {"COLL": 100, "ZERO": 10**30}, {"COLL": 50, "ZERO": 0})
        assert result.collateral_value == 50
        assert "ZERO" not in fake_oracle.quoted_assets()

    def test_unknown_factor_means_zero(self, fake_oracle):
        result = _valuate(fake_oracle, 10, {"COLL": 100}, {})
        assert result.collateral_value == 0
        assert fake_oracle.quoted_assets() == {"DEBT"}

    def test_zero_balance_is_never_priced(self, fake_oracle):
        result = _valuate(fake_oracle, 10, {"COLL": 0}, {"COLL": 100})
        assert result.collateral_value == 0
        assert "COLL" not in fake_oracle.quoted_assets()

    def test_collateral_order_does_not_matter(self):
        balances = {"COLL": 7, "COLL2": 11}
        factors = {"COLL": 33, "COLL2": 67}
        forward = _valuate(FakeOracle({"DEBT": 1, "COLL": 3, "COLL2": 5}), 9, balances, factors,
                           collaterals=["COLL", "COLL2"])
        backward = _valuate(FakeOracle({"DEBT": 1, "COLL": 3, "COLL2": 5}), 9, balances, factors,
                            collaterals=["COLL2", "COLL"])
        assert forward == backward

    def test_oracle_failure_aborts(self):
        oracle = FakeOracle({"DEBT": 1, "COLL": 1}, failing={"COLL"})
        with pytest.raises(OracleError):
            _valuate(oracle, 10, {"COLL": 5}, {"COLL": 100})

    def test_liability_oracle_failure_aborts(self):
        oracle = FakeOracle({"DEBT": 1, "COLL": 1}, failing={"DEBT"})
        with pytest.raises(OracleError):
            _valuate(oracle, 10, {"COLL": 5}, {"COLL": 100})


class TestCalculateCollateralValue:

    def test_sum(self, fake_oracle):
        value = calculate_collateral_value(
            fake_oracle, ["COLL", "COLL2"], {"COLL": 100, "COLL2": 200}.get,
            {"COLL": 100, "COLL2": 50}, "USD",
        )
        assert value == 200


class TestValuationResult:

    def test_health(self):
        assert Valuation(1, 100, 100).is_healthy
        assert not Valuation(1, 100, 99).is_healthy
        assert EMPTY_VALUATION.is_healthy

    def test_health_factor(self):
        assert Valuation(1, 100, 125).health_factor == Decimal("1.25")
        assert EMPTY_VALUATION.health_factor is None
