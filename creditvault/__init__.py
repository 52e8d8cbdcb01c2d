"""
creditvault - Collateralized Lending Vaults

Lenders deposit an asset into a CreditVault, borrowers borrow it against
shares of other vaults enabled as collateral, and positions whose liability
value exceeds their risk-adjusted collateral value are liquidated.

Usage:
    from datetime import datetime, timedelta
    from decimal import Decimal
    from creditvault import (
        Ledger, token, Controller, Vault, CreditVault,
        StaticPriceOracle, FixedRateModel,
    )

    ledger = Ledger("main", datetime(2025, 1, 1))
    ledger.register_asset(token("USD", "US Dollar", 18))
    ledger.register_asset(token("USDC", "USD Coin", 6))
    ledger.register_asset(token("WETH", "Wrapped Ether", 18))
    controller = Controller(ledger)

    oracle = StaticPriceOracle(ledger, {"USDC": Decimal("1"), "WETH": Decimal("2000")})
    weth = Vault(controller, "WETH", "eWETH", governor="dao")
    usdc = CreditVault(controller, "USDC", "eUSDC", governor="dao", oracle=oracle,
                       interest_rate_model=FixedRateModel.from_apr(Decimal("0.10")),
                       reference_asset="USD")
    oracle.resolve_vault(weth)
    usdc.set_collateral_factor("dao", "eWETH", 80)

    ledger.mint("USDC", "lender", 10_000 * 10**6)
    ledger.mint("WETH", "alice", 5 * 10**18)
    usdc.deposit("lender", 10_000 * 10**6, "lender")

    with controller.batch():
        weth.deposit("alice", 5 * 10**18, "alice")
        controller.enable_collateral("alice", "eWETH")
        controller.enable_controller("alice", "eUSDC")
        usdc.borrow("alice", 4_000 * 10**6, "alice")

    ledger.advance_time(datetime(2026, 1, 1))
    usdc.debt_of("alice")  # 4_000 USDC plus a year of interest
"""

# Core types
from .core import (
    SYSTEM_WALLET,
    ONE,
    MAX_UINT256,
    MAX_UINT32,
    SECONDS_PER_YEAR,
    COLLATERAL_FACTOR_SCALE,
    MAX_LIQUIDATION_INCENTIVE,
    TARGET_HEALTH_FACTOR,
    MAX_ALLOWED_INTEREST_RATE,
    Balances,
    CollateralFactors,
    VaultError,
    NotAuthorized,
    Reentrancy,
    ZeroAmount,
    InsufficientBalance,
    AssetNotRegistered,
    ArithmeticOverflow,
    OracleError,
    InvalidCollateralFactor,
    ControllerDisabled,
    ControllerViolation,
    CollateralDisabled,
    OutstandingDebt,
    AccountUnhealthy,
    SupplyCapExceeded,
    BorrowCapExceeded,
    SnapshotNotTaken,
    VaultStatusCheckDeferred,
    SelfLiquidation,
    ViolatorStatusCheckDeferred,
    NoLiquidationOpportunity,
    RepayAssetsInsufficient,
    RepayAssetsExceeded,
    Clock,
    PriceOracle,
    InterestRateModel,
    AccountStatusCheck,
)

# Fixed-point arithmetic
from .fixed_point import (
    Rounding,
    Ray,
    checked_add,
    checked_sub,
    checked_mul,
    mul_div,
    rpow,
)

# Ledger
from .ledger import (
    Asset,
    Move,
    Transaction,
    LedgerSnapshot,
    Ledger,
    token,
)

# Oracles
from .oracle import (
    StaticPriceOracle,
    TimeSeriesPriceOracle,
)

# Interest rate models
from .irm import (
    FixedRateModel,
    LinearKinkModel,
    apr_to_rate,
    rate_to_apy,
    utilisation_to_fraction,
    fraction_to_utilisation,
    rate_curve,
)

# Interest accrual
from .interest import (
    MarketState,
    AccrualResult,
    elapsed_seconds,
    calculate_accrual,
    calculate_debt,
    calculate_utilisation,
    apply_accrual,
)

# Valuation
from .valuation import (
    Valuation,
    EMPTY_VALUATION,
    calculate_collateral_value,
    valuate,
)

# Liquidation
from .liquidation import (
    SeizeQuote,
    LiquidationOpportunity,
    NO_OPPORTUNITY,
    calculate_liquidation_incentive,
    calculate_max_repay_value,
    is_excessive_repay,
    calculate_seize_assets,
    calculate_assets_to_seize,
    check_liquidation,
)

# Status checks
from .status import (
    StatusCheckState,
    VaultSnapshot,
    OperationToken,
    CLEAN_TOKEN,
    begin_operation,
    defer_check,
    end_operation,
    check_vault_status,
    check_account_status,
)

# Controller and vaults
from .controller import Controller
from .vault import (
    VaultEvent,
    VaultState,
    VaultConfig,
    Vault,
    CreditVault,
)


__all__ = [
    # Constants
    'SYSTEM_WALLET', 'ONE', 'MAX_UINT256', 'MAX_UINT32', 'SECONDS_PER_YEAR',
    'COLLATERAL_FACTOR_SCALE', 'MAX_LIQUIDATION_INCENTIVE', 'TARGET_HEALTH_FACTOR',
    'MAX_ALLOWED_INTEREST_RATE',
    # Types
    'Balances', 'CollateralFactors',
    # Exceptions
    'VaultError', 'NotAuthorized', 'Reentrancy', 'ZeroAmount', 'InsufficientBalance',
    'AssetNotRegistered', 'ArithmeticOverflow', 'OracleError', 'InvalidCollateralFactor',
    'ControllerDisabled', 'ControllerViolation', 'CollateralDisabled', 'OutstandingDebt',
    'AccountUnhealthy', 'SupplyCapExceeded', 'BorrowCapExceeded', 'SnapshotNotTaken',
    'VaultStatusCheckDeferred', 'SelfLiquidation', 'ViolatorStatusCheckDeferred',
    'NoLiquidationOpportunity', 'RepayAssetsInsufficient', 'RepayAssetsExceeded',
    # Protocols
    'Clock', 'PriceOracle', 'InterestRateModel', 'AccountStatusCheck',
    # Fixed point
    'Rounding', 'Ray', 'checked_add', 'checked_sub', 'checked_mul', 'mul_div', 'rpow',
    # Ledger
    'Asset', 'Move', 'Transaction', 'LedgerSnapshot', 'Ledger', 'token',
    # Oracles
    'StaticPriceOracle', 'TimeSeriesPriceOracle',
    # Interest rate models
    'FixedRateModel', 'LinearKinkModel', 'apr_to_rate', 'rate_to_apy',
    'utilisation_to_fraction', 'fraction_to_utilisation', 'rate_curve',
    # Interest accrual
    'MarketState', 'AccrualResult', 'elapsed_seconds', 'calculate_accrual',
    'calculate_debt', 'calculate_utilisation', 'apply_accrual',
    # Valuation
    'Valuation', 'EMPTY_VALUATION', 'calculate_collateral_value', 'valuate',
    # Liquidation
    'SeizeQuote', 'LiquidationOpportunity', 'NO_OPPORTUNITY',
    'calculate_liquidation_incentive', 'calculate_max_repay_value', 'is_excessive_repay',
    'calculate_seize_assets', 'calculate_assets_to_seize', 'check_liquidation',
    # Status checks
    'StatusCheckState', 'VaultSnapshot', 'OperationToken', 'CLEAN_TOKEN',
    'begin_operation', 'defer_check', 'end_operation',
    'check_vault_status', 'check_account_status',
    # Controller and vaults
    'Controller', 'VaultEvent', 'VaultState', 'VaultConfig', 'Vault', 'CreditVault',
]

__version__ = '1.0.0'
