"""
quantfin

Present-value and bond analytics, binomial and Black-Scholes option pricing,
and the root finders behind IRR and implied volatility.

The everyday entry points are re-exported here, so you can write, for example:

    from quantfin import irr, bs_price, implied_vol
"""

from .config import ImpliedVolConfig, NumericsConfig
from .exceptions import (
    ArbitrageViolationError,
    InvalidLatticeError,
    InvalidOptionPriceError,
)
from .fixed_income.cash_flow import has_unique_irr, irr, irr_result, pv, pv_discrete
from .models.binomial import BinomialLattice
from .numerics.root_finding import RootMethod
from .pricers.black_scholes import bs_greeks, bs_price, bs_price_and_greeks
from .pricers.tree import binom_price, price_call_european
from .types import (
    CashFlowSchedule,
    Greeks,
    GreeksRequest,
    MarketData,
    OptionSpec,
    OptionType,
    PricingInputs,
)
from .vol.implied_vol import (
    ImpliedVolResult,
    implied_vol,
    implied_vol_bs,
    implied_vol_bs_result,
    with_implied_vol,
)

__all__ = [
    # Types
    "OptionType",
    "OptionSpec",
    "MarketData",
    "PricingInputs",
    "CashFlowSchedule",
    "Greeks",
    "GreeksRequest",
    # Config
    "NumericsConfig",
    "ImpliedVolConfig",
    "RootMethod",
    # Errors
    "InvalidOptionPriceError",
    "ArbitrageViolationError",
    "InvalidLatticeError",
    # Cash flows
    "pv",
    "pv_discrete",
    "irr",
    "irr_result",
    "has_unique_irr",
    # Pricers
    "BinomialLattice",
    "price_call_european",
    "binom_price",
    "bs_price",
    "bs_greeks",
    "bs_price_and_greeks",
    # Implied vol
    "ImpliedVolResult",
    "implied_vol",
    "implied_vol_bs",
    "implied_vol_bs_result",
    "with_implied_vol",
]
