"""Stocks — активные позиции, пассивные инвестиции и итоги zakat.

- StocksStore: снапшот ZakatState с атомарной заменой
- HoldingsRegistry: добавление / обновление / удаление позиций
- PriceUpdatePipeline: пакетное обновление цен со сверкой валют
- PassiveInvestmentManager: блок пассивных инвестиций
- ZakatAggregator: итоги, разбивка, nisab
- StocksSlice: фасад
"""

from .aggregator import BreakdownItem, StocksBreakdown, ZakatAggregator
from .config import StocksConfig
from .holdings_registry import ActiveStocksBreakdown, HoldingRow, HoldingsRegistry
from .passive_manager import (
    PassiveCalculations,
    PassiveInvestmentInput,
    PassiveInvestmentManager,
)
from .price_pipeline import PriceRefreshResult, PriceUpdatePipeline
from .slice import StocksSlice
from .store import StocksStore

__all__ = [
    "ActiveStocksBreakdown",
    "BreakdownItem",
    "HoldingRow",
    "HoldingsRegistry",
    "PassiveCalculations",
    "PassiveInvestmentInput",
    "PassiveInvestmentManager",
    "PriceRefreshResult",
    "PriceUpdatePipeline",
    "StocksBreakdown",
    "StocksConfig",
    "StocksSlice",
    "StocksStore",
    "ZakatAggregator",
]
