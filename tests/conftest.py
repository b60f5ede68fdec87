"""
Shared fixtures: fixed clock, in-memory price source, converter, asset registry.
"""

from datetime import datetime, timezone
from typing import Sequence

import pytest

from src.core.domain import BatchPriceQuote, PriceQuote, StockPrices, StockValues
from src.stocks import StocksConfig, StocksSlice, StocksStore

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
QUOTE_TIME = datetime(2024, 1, 15, 11, 30, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


# =============================================================================
# FAKES
# =============================================================================


class FakePriceSource:
    """In-memory PriceSource.

    prices: symbol -> price для get_price
    batch: список котировок для get_batch_prices (None — строится из prices)
    error: исключение, которое бросают оба метода
    """

    def __init__(self, prices=None, batch=None, error=None, currency="USD"):
        self.prices = dict(prices or {})
        self.batch = batch
        self.error = error
        self.currency = currency
        self.calls: list[tuple] = []

    async def get_price(self, symbol: str, currency: str | None = None) -> PriceQuote:
        self.calls.append(("get_price", symbol, currency))
        if self.error is not None:
            raise self.error
        if symbol not in self.prices:
            raise LookupError(f"Unknown symbol {symbol}")
        return PriceQuote(price=self.prices[symbol], last_updated=QUOTE_TIME)

    async def get_batch_prices(self, symbols: Sequence[str], currency: str) -> list[BatchPriceQuote]:
        self.calls.append(("get_batch_prices", list(symbols), currency))
        if self.error is not None:
            raise self.error
        if self.batch is not None:
            return list(self.batch)
        return [
            BatchPriceQuote(
                symbol=symbol,
                price=self.prices[symbol],
                currency=self.currency,
                last_updated=QUOTE_TIME,
            )
            for symbol in symbols
            if symbol in self.prices
        ]


class FakeConverter:
    """CurrencyConverter с фиксированными курсами (from, to) -> rate."""

    def __init__(self, rates=None, error=None):
        self.rates = dict(rates or {})
        self.error = error
        self.calls: list[tuple] = []

    def convert_amount(self, amount: float, from_currency: str, to_currency: str) -> float:
        self.calls.append((amount, from_currency, to_currency))
        if self.error is not None:
            raise self.error
        return amount * self.rates.get((from_currency, to_currency), 1.0)


class FakeStocksCalculator:
    """AssetTypeCalculator: total = market_value + dividends, zakatable × hawl."""

    def __init__(self, error=None):
        self.error = error
        self.calls: list[tuple] = []

    def calculate_total(self, values: StockValues, prices: StockPrices) -> float:
        self.calls.append(("total", values, prices))
        if self.error is not None:
            raise self.error
        return values.market_value + values.total_dividend_earnings

    def calculate_zakatable(self, values: StockValues, prices: StockPrices, hawl_met: bool) -> float:
        self.calls.append(("zakatable", values, prices, hawl_met))
        if not hawl_met:
            return 0.0
        return values.zakatable_value + values.total_dividend_earnings


class FakeAssetRegistry:
    def __init__(self, calculators=None):
        self.calculators = dict(calculators or {})

    def lookup(self, asset_kind: str):
        return self.calculators.get(asset_kind)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def config() -> StocksConfig:
    return StocksConfig()


@pytest.fixture
def store(clock) -> StocksStore:
    return StocksStore(clock=clock)


@pytest.fixture
def price_source() -> FakePriceSource:
    return FakePriceSource(prices={"AAPL": 150.0, "MSFT": 300.0, "TSLA": 200.0})


@pytest.fixture
def stocks_slice(price_source, clock) -> StocksSlice:
    return StocksSlice(price_source, clock=clock)
