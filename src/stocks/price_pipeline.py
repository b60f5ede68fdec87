"""PriceUpdatePipeline — пакетное обновление цен активных позиций.

Порядок:
1. Целевая валюта: аргумент → валюта store → config.default_currency
2. Пакетный запрос котировок в целевой валюте
3. Сопоставление котировок с позициями (case-insensitive) и выбор цены:
   - нет котировки: позиция не меняется (soft failure)
   - источник уже конвертировал в целевую валюту: цена принимается
   - валюта отличается, конвертер доступен: клиентская конвертация,
     при сбое — цена в исходной валюте
   - иначе: цена в валюте котировки
4. Пересчёт market_value / zakat_due
5. Одна атомарная запись: позиции + currency + legacy проекции (итоги
   ZakatAggregator по новому снапшоту)

Сбой самого пакетного запроса — FetchError, состояние не меняется.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from src.core.domain.holding import canonical_symbol
from src.core.domain.quotes import BatchPriceQuote
from src.core.domain.stock_values import ZakatState
from src.core.errors import ConversionError, FetchError, StocksError
from src.core.math.numerical_safeguards import is_number
from src.core.observability.logger import get_json_logger, log_caller_failure, log_recovered
from src.core.ports import CurrencyConverter, PriceSource

from .aggregator import ZakatAggregator
from .config import StocksConfig
from .store import StocksStore

logger = get_json_logger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ResolvedPrice:
    """Цена позиции после сверки валют."""

    price: float
    currency: Optional[str]
    source_currency: Optional[str]
    last_updated: datetime
    converted: bool


@dataclass(frozen=True)
class PriceRefreshResult:
    """Результат пакетного обновления цен."""

    target_currency: str
    success_count: int = 0
    conversion_count: int = 0
    failure_count: int = 0
    missing_symbols: tuple[str, ...] = field(default_factory=tuple)
    details: str = ""


# =============================================================================
# PIPELINE
# =============================================================================


class PriceUpdatePipeline:
    """Пакетное обновление цен с цепочкой сверки валют.

    Конвертер валют передаётся явно (опционально); его отсутствие
    не является ошибкой.
    """

    def __init__(
        self,
        store: StocksStore,
        price_source: PriceSource,
        converter: Optional[CurrencyConverter] = None,
        aggregator: Optional[ZakatAggregator] = None,
        config: Optional[StocksConfig] = None,
    ):
        self.store = store
        self.price_source = price_source
        self.converter = converter
        self.config = config or StocksConfig()
        self.aggregator = aggregator or ZakatAggregator(self.config)

    def resolve_target_currency(self, target_currency: Optional[str]) -> str:
        return target_currency or self.store.get().currency or self.config.default_currency

    async def refresh(
        self,
        target_currency: Optional[str] = None,
        from_currency: Optional[str] = None,
    ) -> PriceRefreshResult:
        """Обновление цен всех активных позиций.

        Args:
            target_currency: валюта результата
            from_currency: валюта котировки, если источник её не указал

        Returns:
            PriceRefreshResult со счётчиками (диагностика)

        Raises:
            FetchError: сбой пакетного запроса; состояние не изменено
        """
        stocks = self.store.get().stock_values.active_stocks
        currency = self.resolve_target_currency(target_currency)

        if not stocks:
            return PriceRefreshResult(target_currency=currency, details="no active stocks")

        symbols = [stock.symbol for stock in stocks]
        logger.info(
            "Fetching current stock prices",
            extra={"extra": {"event": "stock_prices_fetch", "symbols": len(symbols), "currency": currency}},
        )

        try:
            quotes = await self.price_source.get_batch_prices(symbols, currency)
        except StocksError as exc:
            log_caller_failure(
                logger, "stock_prices_fetch_failed", f"Failed to update stock prices: {exc}",
                currency=currency, code=exc.code,
            )
            raise
        except Exception as exc:
            log_caller_failure(
                logger, "stock_prices_fetch_failed", f"Failed to update stock prices: {exc}",
                exc_info=True, currency=currency,
            )
            raise FetchError(
                f"Failed to fetch batch prices: {exc}",
                details={"symbols": symbols, "currency": currency},
            ) from exc

        # Котировки сопоставляются с позициями на момент записи, а не на
        # момент запроса: после await store мог измениться.
        by_symbol: dict[str, BatchPriceQuote] = {}
        for quote in quotes:
            by_symbol.setdefault(canonical_symbol(quote.symbol), quote)

        counters = {"success": 0, "conversion": 0, "failure": 0}
        missing: list[str] = []

        def apply(state: ZakatState) -> ZakatState:
            updated = []
            for stock in state.stock_values.active_stocks:
                quote = by_symbol.get(stock.symbol.upper())
                resolved = self._resolve(stock.symbol, quote, currency, from_currency)

                if resolved is None:
                    counters["failure"] += 1
                    missing.append(stock.symbol)
                    updated.append(stock)
                    continue

                counters["success"] += 1
                if resolved.converted:
                    counters["conversion"] += 1

                updated.append(
                    stock.repriced(
                        resolved.price,
                        resolved.last_updated,
                        zakat_rate=self.config.zakat_rate,
                        precision=self.config.currency_precision,
                        currency=resolved.currency,
                        source_currency=resolved.source_currency,
                    )
                )

            priced = state.model_copy(
                update={
                    "currency": currency,
                    "stock_values": state.stock_values.model_copy(update={"active_stocks": updated}),
                }
            )
            return priced.model_copy(
                update={
                    "stock_values": priced.stock_values.model_copy(
                        update={
                            "market_value": self.aggregator.total_stocks(priced),
                            "zakatable_value": self.aggregator.total_zakatable_stocks(priced),
                        }
                    )
                }
            )

        self.store.set(apply)

        result = PriceRefreshResult(
            target_currency=currency,
            success_count=counters["success"],
            conversion_count=counters["conversion"],
            failure_count=counters["failure"],
            missing_symbols=tuple(missing),
            details=(
                f"{counters['success']} fetched, {counters['conversion']} converted, "
                f"{counters['failure']} failed"
            ),
        )
        logger.info(
            "Stock update results",
            extra={
                "extra": {
                    "event": "stock_prices_updated",
                    "currency": currency,
                    "success": result.success_count,
                    "converted": result.conversion_count,
                    "failed": result.failure_count,
                }
            },
        )
        return result

    # -------------------------------------------------------------------------
    # Сверка валют
    # -------------------------------------------------------------------------

    def _resolve(
        self,
        symbol: str,
        quote: Optional[BatchPriceQuote],
        target_currency: str,
        from_currency: Optional[str],
    ) -> Optional[ResolvedPrice]:
        """Выбор цены для одной позиции; None — позиция остаётся без изменений."""
        if quote is None:
            logger.info(
                "No updated price, keeping existing data",
                extra={"extra": {"event": "stock_price_missing", "symbol": symbol}},
            )
            return None

        if not is_number(quote.price) or quote.price < 0:
            log_recovered(
                logger, "stock_price_invalid", f"Invalid price for {symbol}, keeping existing data",
                symbol=symbol, price=repr(quote.price),
            )
            return None

        quote_currency = quote.currency or from_currency

        # Источник уже конвертировал
        if quote.conversion_applied and quote_currency == target_currency:
            return ResolvedPrice(
                price=float(quote.price),
                currency=target_currency,
                source_currency=quote.source_currency,
                last_updated=quote.last_updated,
                converted=True,
            )

        # Клиентская конвертация
        if self.converter is not None and quote_currency and quote_currency != target_currency:
            try:
                converted = self._convert(symbol, float(quote.price), quote_currency, target_currency)
            except ConversionError as exc:
                log_recovered(
                    logger, "stock_price_conversion_failed", str(exc),
                    symbol=symbol, from_currency=quote_currency, to_currency=target_currency,
                )
                converted = None

            if converted is not None:
                return ResolvedPrice(
                    price=converted,
                    currency=target_currency,
                    source_currency=quote_currency,
                    last_updated=quote.last_updated,
                    converted=True,
                )

        # Цена в валюте котировки
        return ResolvedPrice(
            price=float(quote.price),
            currency=quote_currency,
            source_currency=quote.source_currency,
            last_updated=quote.last_updated,
            converted=False,
        )

    def _convert(
        self, symbol: str, price: float, from_currency: str, to_currency: str
    ) -> Optional[float]:
        """Конвертация цены.

        Returns:
            Новая цена или None, если конвертер вернул то же значение

        Raises:
            ConversionError: конвертер бросил исключение или вернул не число
        """
        try:
            converted = self.converter.convert_amount(price, from_currency, to_currency)
        except Exception as exc:
            raise ConversionError(
                f"Failed to convert {symbol} price: {exc}",
                details={"symbol": symbol},
            ) from exc

        if not is_number(converted) or converted < 0:
            raise ConversionError(
                f"Converter returned invalid amount for {symbol}: {converted!r}",
                details={"symbol": symbol},
            )

        if converted == price:
            return None

        logger.debug(
            "Converted stock price",
            extra={
                "extra": {
                    "symbol": symbol,
                    "original": price,
                    "converted": converted,
                    "from_currency": from_currency,
                    "to_currency": to_currency,
                }
            },
        )
        return float(converted)
