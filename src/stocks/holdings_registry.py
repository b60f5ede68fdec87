"""HoldingsRegistry — CRUD активных позиций по тикеру.

Политика тикеров: сравнение всегда case-insensitive (каноничная форма
uppercase), в том числе при удалении.

Read-then-merge: после каждого await состояние перечитывается из store,
запись выполняется одним StocksStore.set.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from src.core.contracts.validators import ActiveStockHoldingValidator
from src.core.domain.holding import ActiveStockHolding, canonical_symbol
from src.core.domain.quotes import PriceQuote
from src.core.domain.stock_values import ZakatState
from src.core.errors import FetchError, StocksError, ValidationError
from src.core.math.numerical_safeguards import coerce_number, is_number, sum_finite
from src.core.observability.logger import get_json_logger, log_caller_failure, log_recovered
from src.core.ports import PriceSource

from .config import StocksConfig
from .store import StocksStore

logger = get_json_logger(__name__)


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class HoldingRow:
    """Строка разбивки активных позиций."""

    symbol: str
    shares: float
    current_price: float
    market_value: float
    zakat_due: float


@dataclass(frozen=True)
class ActiveStocksBreakdown:
    """Активные позиции и их итоги."""

    stocks: list[HoldingRow]
    total_market_value: float
    total_zakat_due: float


# =============================================================================
# REGISTRY
# =============================================================================


def _find_index(stocks: list[ActiveStockHolding], symbol: str) -> int:
    key = canonical_symbol(symbol)
    for index, stock in enumerate(stocks):
        if stock.symbol.upper() == key:
            return index
    return -1


class HoldingsRegistry:
    """Добавление, обновление и удаление активных позиций."""

    def __init__(
        self,
        store: StocksStore,
        price_source: PriceSource,
        config: Optional[StocksConfig] = None,
        validator: Optional[ActiveStockHoldingValidator] = None,
    ):
        self.store = store
        self.price_source = price_source
        self.config = config or StocksConfig()
        self.validator = validator or ActiveStockHoldingValidator()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_input(symbol: Any, shares: Any) -> str:
        if not isinstance(symbol, str) or not symbol.strip():
            raise ValidationError("Invalid symbol or shares", details={"symbol": symbol})
        if not is_number(shares) or shares <= 0:
            raise ValidationError(
                "Invalid symbol or shares", details={"symbol": symbol, "shares": shares}
            )
        return canonical_symbol(symbol)

    @staticmethod
    def _validate_price(symbol: str, price: Any) -> float:
        if not is_number(price) or price < 0:
            raise ValidationError(
                f"Invalid price received for {symbol}: {price}",
                details={"symbol": symbol, "price": repr(price)},
            )
        return float(price)

    async def _fetch_price(self, symbol: str, currency: Optional[str]) -> PriceQuote:
        try:
            return await self.price_source.get_price(symbol, currency)
        except StocksError:
            raise
        except Exception as exc:
            raise FetchError(
                f"Failed to fetch price for {symbol}: {exc}",
                details={"symbol": symbol, "currency": currency},
            ) from exc

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def add(
        self,
        symbol: str,
        shares: float,
        manual_price: Optional[float] = None,
        currency: Optional[str] = None,
    ) -> ActiveStockHolding:
        """Добавление позиции (или замена существующей с тем же тикером).

        Args:
            symbol: Тикер (регистр не важен)
            shares: Количество акций (> 0)
            manual_price: Ручная цена; если задана, сеть не используется
            currency: Валюта котировки (default: валюта store, затем config)

        Returns:
            Записанная позиция

        Raises:
            ValidationError: пустой тикер, shares <= 0, невалидная цена
            FetchError: сбой price source
        """
        try:
            key = self._validate_input(symbol, shares)
            resolved_currency = (
                currency or self.store.get().currency or self.config.default_currency
            )

            if manual_price is None:
                quote = await self._fetch_price(key, resolved_currency)
                price = self._validate_price(key, quote.price)
                last_updated = quote.last_updated
            else:
                if not is_number(manual_price) or manual_price <= 0:
                    raise ValidationError(
                        f"Invalid manual price for {key}: {manual_price!r}",
                        details={"symbol": key},
                    )
                price = float(manual_price)
                last_updated = self.store.now()
        except StocksError as exc:
            log_caller_failure(
                logger, "add_active_stock_failed", f"Failed to add active stock: {exc}",
                symbol=symbol, code=exc.code,
            )
            raise

        written: list[ActiveStockHolding] = []

        def apply(state: ZakatState) -> ZakatState:
            stocks = list(state.stock_values.active_stocks)
            index = _find_index(stocks, key)

            if index >= 0:
                holding = stocks[index].repriced(
                    price,
                    last_updated,
                    shares=float(shares),
                    zakat_rate=self.config.zakat_rate,
                    precision=self.config.currency_precision,
                    currency=resolved_currency,
                    source_currency=None,
                )
                stocks[index] = holding
            else:
                holding = ActiveStockHolding.priced(
                    key,
                    float(shares),
                    price,
                    last_updated,
                    currency=resolved_currency,
                    zakat_rate=self.config.zakat_rate,
                    precision=self.config.currency_precision,
                )
                stocks.append(holding)

            written.append(holding)
            return state.model_copy(
                update={"stock_values": state.stock_values.model_copy(update={"active_stocks": stocks})}
            )

        self.store.set(apply)
        logger.info(
            "Active stock added",
            extra={"extra": {"event": "active_stock_added", "symbol": key, "shares": shares}},
        )
        return written[0]

    async def update(self, symbol: str, shares: float) -> Optional[ActiveStockHolding]:
        """Обновление количества с новой котировкой.

        Котировка запрашивается в валюте источника по умолчанию. После
        записи пересчитываются legacy проекции: market_value = сумма
        позиций, zakatable_value = market_value если Hawl выполнен, иначе 0.

        Returns:
            Обновлённая позиция или None, если тикера нет в портфеле

        Raises:
            ValidationError: shares <= 0 или невалидная цена
            FetchError: сбой price source
        """
        try:
            key = self._validate_input(symbol, shares)
            quote = await self._fetch_price(key, None)
            price = self._validate_price(key, quote.price)
        except StocksError as exc:
            log_caller_failure(
                logger, "update_active_stock_failed", f"Failed to update active stock: {exc}",
                symbol=symbol, code=exc.code,
            )
            raise

        logger.debug(
            "Updating stock with price",
            extra={"extra": {"symbol": key, "shares": shares, "price": price}},
        )

        written: list[ActiveStockHolding] = []

        def apply(state: ZakatState) -> ZakatState:
            stocks = list(state.stock_values.active_stocks)
            index = _find_index(stocks, key)
            if index >= 0:
                stocks[index] = stocks[index].repriced(
                    price,
                    quote.last_updated,
                    shares=float(shares),
                    zakat_rate=self.config.zakat_rate,
                    precision=self.config.currency_precision,
                )
                written.append(stocks[index])

            total_value = sum_finite(stock.market_value for stock in stocks)
            return state.model_copy(
                update={
                    "stock_values": state.stock_values.model_copy(
                        update={
                            "active_stocks": stocks,
                            "market_value": total_value,
                            "zakatable_value": total_value if state.stock_hawl_met else 0.0,
                        }
                    )
                }
            )

        self.store.set(apply)
        return written[0] if written else None

    def remove(self, symbol: str) -> bool:
        """Удаление позиции (case-insensitive).

        Returns:
            True если позиция была удалена
        """
        if not isinstance(symbol, str) or not symbol.strip():
            return False
        key = canonical_symbol(symbol)
        removed: list[bool] = []

        def apply(state: ZakatState) -> ZakatState:
            stocks = state.stock_values.active_stocks
            kept = [stock for stock in stocks if stock.symbol.upper() != key]
            removed.append(len(kept) != len(stocks))
            return state.model_copy(
                update={"stock_values": state.stock_values.model_copy(update={"active_stocks": kept})}
            )

        self.store.set(apply)
        return removed[0]

    def breakdown(self) -> ActiveStocksBreakdown:
        """Активные позиции с итогами (нечисловые поля → 0)."""
        rows = [
            HoldingRow(
                symbol=stock.symbol,
                shares=coerce_number(stock.shares),
                current_price=coerce_number(stock.current_price),
                market_value=coerce_number(stock.market_value),
                zakat_due=coerce_number(stock.zakat_due),
            )
            for stock in self.store.get().stock_values.active_stocks
        ]
        return ActiveStocksBreakdown(
            stocks=rows,
            total_market_value=sum_finite(row.market_value for row in rows),
            total_zakat_due=sum_finite(row.zakat_due for row in rows),
        )

    def get(self, symbol: str) -> Optional[ActiveStockHolding]:
        stocks = self.store.get().stock_values.active_stocks
        index = _find_index(stocks, symbol)
        return stocks[index] if index >= 0 else None

    def load(self, persisted: Any) -> list[ActiveStockHolding]:
        """Загрузка persisted списка позиций (заменяет текущий).

        Каждая строка проверяется по контракту active_stock_holding;
        невалидные строки и повторы тикера отбрасываются с WARNING.
        Не список → пустой список позиций.

        Returns:
            Записанные позиции
        """
        if not isinstance(persisted, list):
            log_recovered(
                logger,
                "active_stocks_load_defaulted",
                "Persisted active stocks are not a list, starting empty",
                value_type=type(persisted).__name__,
            )
            persisted = []

        loaded: list[ActiveStockHolding] = []
        for index, row in enumerate(persisted):
            errors = (
                self.validator.error_messages(dict(row))
                if isinstance(row, Mapping)
                else ["<root>: not an object"]
            )
            if not errors:
                try:
                    holding = ActiveStockHolding.model_validate(row)
                except PydanticValidationError as exc:
                    errors = [e["msg"] for e in exc.errors()]
                else:
                    if _find_index(loaded, holding.symbol) >= 0:
                        errors = [f"symbol: duplicate {holding.symbol}"]
                    else:
                        loaded.append(holding)

            if errors:
                log_recovered(
                    logger,
                    "active_stock_row_dropped",
                    f"Dropping persisted active stock row {index}",
                    index=index,
                    errors=errors,
                )

        self.store.set(
            lambda state: state.model_copy(
                update={
                    "stock_values": state.stock_values.model_copy(update={"active_stocks": loaded})
                }
            )
        )
        return loaded
