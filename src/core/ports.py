"""
Ports — контракты внешних коллабораторов stocks core

Core не реализует эти интерфейсы, только потребляет:
- PriceSource: котировки акций (сеть)
- CurrencyConverter: конвертация валют (опционально)
- AssetTypeRegistry / AssetTypeCalculator: итоговый расчёт по типу актива
"""

from typing import Protocol, Sequence

from src.core.domain.quotes import BatchPriceQuote, PriceQuote
from src.core.domain.stock_values import StockPrices, StockValues


class PriceSource(Protocol):
    """Источник котировок."""

    async def get_price(self, symbol: str, currency: str | None = None) -> PriceQuote:
        """
        Котировка одного тикера.

        Args:
            symbol: Тикер
            currency: Желаемая валюта (None — валюта источника по умолчанию)
        """
        ...

    async def get_batch_prices(
        self, symbols: Sequence[str], currency: str
    ) -> list[BatchPriceQuote]:
        """
        Пакетные котировки. Тикеры без котировки в ответе отсутствуют.
        """
        ...


class CurrencyConverter(Protocol):
    """Конвертер валют."""

    def convert_amount(self, amount: float, from_currency: str, to_currency: str) -> float:
        ...


class AssetTypeCalculator(Protocol):
    """Калькулятор итогов для одного типа актива."""

    def calculate_total(self, values: StockValues, prices: StockPrices) -> float:
        ...

    def calculate_zakatable(
        self, values: StockValues, prices: StockPrices, hawl_met: bool
    ) -> float:
        ...


class AssetTypeRegistry(Protocol):
    """Реестр калькуляторов по типу актива ("stocks", "gold", ...)."""

    def lookup(self, asset_kind: str) -> AssetTypeCalculator | None:
        ...
