"""
Domain models and value objects.

Contains fundamental domain entities: ActiveStockHolding,
PassiveInvestmentState, StockValues, ZakatState, price quotes.
"""

from src.core.domain.base import WireModel
from src.core.domain.constants import (
    CANONICAL_PASSIVE_VERSION,
    DEFAULT_CURRENCY,
    DEFAULT_STOCK_HAWL_MET,
    NISAB_GOLD_GRAMS,
    NISAB_SILVER_GRAMS,
    ZAKAT_RATE,
    market_value,
    method_label,
    method_tooltip,
    total_label,
    zakat_due,
)
from src.core.domain.holding import ActiveStockHolding, canonical_symbol
from src.core.domain.passive_state import (
    CompanyData,
    CompanyDisplayProperties,
    DisplayProperties,
    HawlStatus,
    Investment,
    PassiveInvestmentState,
    PassiveMethod,
    default_hawl_status,
    default_passive_investments,
    empty_investment,
    fresh_investment_id,
)
from src.core.domain.quotes import BatchPriceQuote, PriceQuote
from src.core.domain.stock_values import (
    WRITABLE_STOCK_VALUE_FIELDS,
    MetalPrices,
    StockPrices,
    StockValues,
    ZakatState,
    initial_stock_values,
    initial_zakat_state,
)

__all__ = [
    "WireModel",
    # Constants
    "CANONICAL_PASSIVE_VERSION",
    "DEFAULT_CURRENCY",
    "DEFAULT_STOCK_HAWL_MET",
    "NISAB_GOLD_GRAMS",
    "NISAB_SILVER_GRAMS",
    "ZAKAT_RATE",
    "market_value",
    "zakat_due",
    "method_label",
    "method_tooltip",
    "total_label",
    # Holding
    "ActiveStockHolding",
    "canonical_symbol",
    # Passive investments
    "CompanyData",
    "CompanyDisplayProperties",
    "DisplayProperties",
    "HawlStatus",
    "Investment",
    "PassiveInvestmentState",
    "PassiveMethod",
    "default_hawl_status",
    "default_passive_investments",
    "empty_investment",
    "fresh_investment_id",
    # Quotes
    "BatchPriceQuote",
    "PriceQuote",
    # Aggregate
    "WRITABLE_STOCK_VALUE_FIELDS",
    "MetalPrices",
    "StockPrices",
    "StockValues",
    "ZakatState",
    "initial_stock_values",
    "initial_zakat_state",
]
