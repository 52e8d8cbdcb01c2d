"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the lending vaults.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. accrual.py - Accumulator growth and live debt
2. solvency.py - Risk-adjusted collateral valuation
3. liquidation_bounds.py - Incentive, target health bound and seize sizing
4. conservation.py - Debt and balance conservation across operations
5. atomicity.py - Failed operations and batches leave no trace
6. determinism.py - Reproducible behavior

These tests use hypothesis for property-based testing.
"""
