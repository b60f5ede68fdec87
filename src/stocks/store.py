"""StocksStore — владелец агрегированного состояния (ZakatState).

Модель конкурентности: один поток, кооперативная многозадачность (asyncio).
Любая мутация — set(updater): updater получает последний снапшот и
возвращает новый, снапшот заменяется целиком. Частично обновлённое
состояние никогда не наблюдается. Блокировок нет: last write wins.
"""

from datetime import datetime
from typing import Any, Callable, Optional

from src.core.clock import Clock, utc_now
from src.core.domain.constants import DEFAULT_STOCK_HAWL_MET
from src.core.domain.stock_values import (
    WRITABLE_STOCK_VALUE_FIELDS,
    MetalPrices,
    StockPrices,
    ZakatState,
    initial_stock_values,
    initial_zakat_state,
)
from src.core.errors import ValidationError
from src.core.math.numerical_safeguards import is_number

Updater = Callable[[ZakatState], ZakatState]


class StocksStore:
    """Контейнер снапшота ZakatState с атомарной заменой."""

    def __init__(self, initial: Optional[ZakatState] = None, clock: Optional[Clock] = None):
        """
        Args:
            initial: начальное состояние (default: нули + default passive блок)
            clock: источник текущего времени
        """
        self.clock: Clock = clock or utc_now
        self._state = initial or initial_zakat_state(self.clock())

    @property
    def state(self) -> ZakatState:
        return self._state

    def get(self) -> ZakatState:
        return self._state

    def now(self) -> datetime:
        return self.clock()

    def set(self, updater: Updater) -> ZakatState:
        """Атомарная замена снапшота.

        Args:
            updater: функция current -> new; вызывается с последним снапшотом

        Returns:
            Новый снапшот
        """
        new_state = updater(self._state)
        if not isinstance(new_state, ZakatState):
            raise TypeError(f"updater must return ZakatState, got {type(new_state).__name__}")
        self._state = new_state
        return new_state

    def reset(self) -> ZakatState:
        """Замена агрегата акций default'ами (Hawl флаг тоже сбрасывается).

        currency, stock_prices и metal_prices принадлежат другим частям
        калькулятора и не затрагиваются.
        """
        fresh = initial_stock_values(self.clock())
        return self.set(
            lambda state: state.model_copy(
                update={
                    "stock_values": fresh,
                    "stock_hawl_met": DEFAULT_STOCK_HAWL_MET,
                }
            )
        )

    # =========================================================================
    # LEGACY SETTERS
    # =========================================================================

    def set_stock_value(self, key: str, value: Any) -> ZakatState:
        """Запись входного поля StockValues.

        Raises:
            ValidationError: ключ не входит в WRITABLE_STOCK_VALUE_FIELDS
                (в т.ч. legacy проекции market_value / zakatable_value)
                или значение неверного типа
        """
        if key not in WRITABLE_STOCK_VALUE_FIELDS:
            raise ValidationError(
                f"Stock value field {key!r} is not writable",
                details={"key": key, "writable": sorted(WRITABLE_STOCK_VALUE_FIELDS)},
            )

        if key == "is_passive_fund":
            if not isinstance(value, bool):
                raise ValidationError(f"{key} must be a bool, got {value!r}")
        elif not is_number(value):
            raise ValidationError(f"{key} must be a finite number, got {value!r}")
        else:
            value = float(value)

        return self.set(
            lambda state: state.model_copy(
                update={"stock_values": state.stock_values.model_copy(update={key: value})}
            )
        )

    def set_stock_prices(self, prices: StockPrices) -> ZakatState:
        return self.set(lambda state: state.model_copy(update={"stock_prices": prices}))

    def set_stock_hawl(self, value: bool) -> ZakatState:
        return self.set(lambda state: state.model_copy(update={"stock_hawl_met": bool(value)}))

    def set_metal_prices(self, gold: float, silver: float) -> ZakatState:
        prices = MetalPrices(gold=gold, silver=silver)
        return self.set(lambda state: state.model_copy(update={"metal_prices": prices}))

    def set_currency(self, currency: str) -> ZakatState:
        if not currency or not currency.strip():
            raise ValidationError("currency must be a non-empty string")
        code = currency.strip().upper()
        return self.set(lambda state: state.model_copy(update={"currency": code}))
