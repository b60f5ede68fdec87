"""
StockValues / ZakatState — Модель агрегированного состояния

Immutable Pydantic модели, представляющие снапшот состояния stocks store.
Любая мутация — замена снапшота целиком (StocksStore.set).
"""

from datetime import datetime

from pydantic import Field

from .base import WireModel
from .constants import DEFAULT_CURRENCY, DEFAULT_STOCK_HAWL_MET
from .holding import ActiveStockHolding
from .passive_state import PassiveInvestmentState, default_passive_investments


# =============================================================================
# NESTED MODELS
# =============================================================================


class StockPrices(WireModel):
    """
    Рыночные цены для asset-type калькулятора.
    """

    current_market_price: float = Field(0.0, ge=0, description="Текущая рыночная цена")
    last_updated: datetime | None = Field(None, description="Время обновления цены")


class MetalPrices(WireModel):
    """
    Цены металлов для расчёта nisab (за грамм, в текущей валюте).
    """

    gold: float = Field(0.0, ge=0, description="Цена золота за грамм")
    silver: float = Field(0.0, ge=0, description="Цена серебра за грамм")


# =============================================================================
# STOCK VALUES
# =============================================================================


class StockValues(WireModel):
    """
    Агрегат акций.

    market_value / zakatable_value — legacy проекции. Пишутся только
    внутри той же атомарной записи, что и данные, которые они отражают;
    StocksStore.set_stock_value их не принимает.

    Авторитетна последняя запись: PriceUpdatePipeline.refresh пишет итоги
    ZakatAggregator, PassiveInvestmentManager.update — итоги asset
    калькулятора (или зеркало блока), HoldingsRegistry.update — сумму
    активных позиций. Итоги для отображения читаются из ZakatAggregator.
    """

    # Active trading
    active_stocks: list[ActiveStockHolding] = Field(default_factory=list)

    # Legacy проекции
    market_value: float = Field(0.0, alias="market_value")
    zakatable_value: float = Field(0.0, alias="zakatable_value")

    # Входные поля
    total_dividend_earnings: float = Field(0.0, alias="total_dividend_earnings")
    fund_value: float = Field(0.0, alias="fund_value")
    is_passive_fund: bool = Field(False, alias="is_passive_fund")

    # Passive investments
    passive_investments: PassiveInvestmentState | None = None


# Поля StockValues, которые разрешено писать напрямую (legacy setStockValue)
WRITABLE_STOCK_VALUE_FIELDS = frozenset(
    {"total_dividend_earnings", "fund_value", "is_passive_fund"}
)


def initial_stock_values(now: datetime) -> StockValues:
    """Нулевой агрегат с default блоком пассивных инвестиций."""
    return StockValues(passive_investments=default_passive_investments(now))


# =============================================================================
# ZAKAT STATE (снапшот store)
# =============================================================================


class ZakatState(WireModel):
    """
    Полный снапшот stocks store.

    Immutable модель (frozen=True):
    - stock_values: агрегат акций
    - stock_prices: цены для asset-type калькулятора
    - stock_hawl_met: флаг выполнения Hawl
    - currency: текущая валюта отображения
    - metal_prices: цены металлов для nisab
    """

    stock_values: StockValues
    stock_prices: StockPrices = Field(default_factory=StockPrices)
    stock_hawl_met: bool = Field(DEFAULT_STOCK_HAWL_MET)
    currency: str = Field(DEFAULT_CURRENCY, min_length=1)
    metal_prices: MetalPrices = Field(default_factory=MetalPrices)


def initial_zakat_state(now: datetime) -> ZakatState:
    return ZakatState(stock_values=initial_stock_values(now))
