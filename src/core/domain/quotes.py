"""
Price quotes — ответы внешнего price source

Pydantic модели котировок. price может быть NaN/Inf, если источник
вернул мусор: проверку выполняет потребитель (HoldingsRegistry,
PriceUpdatePipeline).
"""

from datetime import datetime

from pydantic import Field

from .base import WireModel


class PriceQuote(WireModel):
    """Котировка одного тикера (get_price)."""

    price: float = Field(..., description="Цена одной акции")
    last_updated: datetime = Field(..., description="Время котировки")


class BatchPriceQuote(WireModel):
    """
    Котировка из пакетного запроса (get_batch_prices).

    conversion_applied=True означает, что источник уже пересчитал цену
    в запрошенную валюту; source_currency — исходная валюта биржи.
    """

    symbol: str = Field(..., min_length=1)
    price: float = Field(...)
    currency: str | None = Field(None, description="Валюта price")
    source_currency: str | None = Field(None, description="Исходная валюта котировки")
    conversion_applied: bool = Field(False)
    last_updated: datetime = Field(...)
