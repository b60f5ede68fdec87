"""
ActiveStockHolding — Модель активно торгуемой позиции

Immutable Pydantic модель одной позиции в активной торговле.
Wire форма соответствует schema/active_stock_holding.json.
"""

from datetime import datetime

from pydantic import Field, field_validator

from src.core.math.numerical_safeguards import CURRENCY_PRECISION_DEFAULT

from .base import WireModel
from .constants import ZAKAT_RATE, market_value, zakat_due


def canonical_symbol(symbol: str) -> str:
    """Каноничная форма тикера: без пробелов по краям, uppercase."""
    return symbol.strip().upper()


# =============================================================================
# HOLDING MODEL
# =============================================================================


class ActiveStockHolding(WireModel):
    """
    Модель активной позиции.

    Инварианты:
    - symbol всегда в uppercase (каноничная форма)
    - shares > 0
    - market_value и zakat_due пересчитываются только вместе (priced/repriced)
    """

    model_config = {"allow_inf_nan": False}

    # Идентификация
    symbol: str = Field(..., min_length=1, description="Тикер (uppercase)")

    # Позиция и оценка
    shares: float = Field(..., gt=0, description="Количество акций")
    current_price: float = Field(..., ge=0, description="Цена одной акции")
    market_value: float = Field(..., description="shares × current_price (округлено)")
    zakat_due: float = Field(..., description="market_value × zakat_rate (округлено)")

    # Время и валюта
    last_updated: datetime = Field(..., description="Время последнего наблюдения цены")
    currency: str | None = Field(None, description="Валюта current_price")
    source_currency: str | None = Field(
        None, description="Исходная валюта котировки, если была конвертация"
    )

    @field_validator("symbol")
    @classmethod
    def validate_symbol_canonical(cls, v: str) -> str:
        """Тикер хранится только в каноничной форме."""
        return canonical_symbol(v)

    @classmethod
    def priced(
        cls,
        symbol: str,
        shares: float,
        price: float,
        last_updated: datetime,
        currency: str | None = None,
        source_currency: str | None = None,
        zakat_rate: float = ZAKAT_RATE,
        precision: int = CURRENCY_PRECISION_DEFAULT,
    ) -> "ActiveStockHolding":
        """
        Новая позиция с оценкой по цене.

        Returns:
            ActiveStockHolding с согласованными market_value и zakat_due
        """
        value = market_value(shares, price, precision)
        return cls(
            symbol=symbol,
            shares=shares,
            current_price=price,
            market_value=value,
            zakat_due=zakat_due(value, zakat_rate, precision),
            last_updated=last_updated,
            currency=currency,
            source_currency=source_currency,
        )

    def repriced(
        self,
        price: float,
        last_updated: datetime,
        shares: float | None = None,
        zakat_rate: float = ZAKAT_RATE,
        precision: int = CURRENCY_PRECISION_DEFAULT,
        **changes: str | None,
    ) -> "ActiveStockHolding":
        """
        Копия позиции с новой ценой (и опционально новым количеством).

        Поля, не затронутые переоценкой (symbol, currency если не передана),
        сохраняются. changes — currency / source_currency.

        Returns:
            Новый экземпляр с пересчитанными market_value и zakat_due
        """
        new_shares = self.shares if shares is None else shares
        value = market_value(new_shares, price, precision)
        update = {
            "shares": new_shares,
            "current_price": price,
            "market_value": value,
            "zakat_due": zakat_due(value, zakat_rate, precision),
            "last_updated": last_updated,
            **changes,
        }
        # model_copy не валидирует, поэтому пересоздаём через model_validate
        return type(self).model_validate({**self.model_dump(), **update})
