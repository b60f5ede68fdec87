"""
PassiveInvestmentState — Модель состояния пассивных инвестиций

Immutable Pydantic модель каноничной схемы (version "2.0").
Полная совместимость с JSON Schema (schema/passive_investment_state.json).

Старые формы (без version, "1.0") в эту модель напрямую не попадают:
их приводит к каноничной форме StateMigrator.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import Field

from .base import WireModel
from .constants import (
    CANONICAL_PASSIVE_VERSION,
    DEFAULT_CURRENCY,
    method_label,
    total_label,
)


# =============================================================================
# ENUMS
# =============================================================================


class PassiveMethod(str, Enum):
    """
    Метод оценки пассивных инвестиций.

    QUICK: фиксированная доля (30%) рыночной стоимости
    DETAILED: zakatable стоимость из финансовой отчётности компании
    """

    QUICK = "quick"
    DETAILED = "detailed"


# =============================================================================
# NESTED MODELS
# =============================================================================


class Investment(WireModel):
    """Строка списка инвестиций (порядок = порядок отображения)."""

    id: str = Field(..., description="Идентификатор строки")
    name: str = Field("", description="Название инвестиции")
    shares: float = Field(0.0, description="Количество акций")
    price_per_share: float = Field(0.0, description="Цена одной акции")
    market_value: float = Field(0.0, description="Рыночная стоимость строки")


class CompanyDisplayProperties(WireModel):
    currency: str = Field(DEFAULT_CURRENCY)
    share_percentage: float = Field(0.0, description="yourShares / totalShares × 100")


class CompanyData(WireModel):
    """
    Финансовые данные компании для detailed метода.
    """

    cash: float = Field(0.0, description="Денежные средства компании")
    receivables: float = Field(0.0, description="Дебиторская задолженность")
    inventory: float = Field(0.0, description="Запасы")
    total_shares: float = Field(0.0, description="Всего акций компании")
    your_shares: float = Field(0.0, description="Акции пользователя")
    display_properties: CompanyDisplayProperties | None = None


class HawlStatus(WireModel):
    """Статус периода владения (Hawl)."""

    is_complete: bool = Field(False, description="Период владения истёк")
    start_date: str = Field(..., description="Начало периода (ISO timestamp)")
    end_date: str | None = Field(None, description="Конец периода (ISO timestamp)")


class DisplayProperties(WireModel):
    """
    Производные свойства отображения.

    method и total_label — детерминированные функции method, см. for_method().
    """

    currency: str = Field(DEFAULT_CURRENCY)
    method: str = Field(...)
    total_label: str = Field(...)

    @classmethod
    def for_method(
        cls, method: PassiveMethod | str, currency: str = DEFAULT_CURRENCY
    ) -> "DisplayProperties":
        value = method.value if isinstance(method, PassiveMethod) else method
        return cls(
            currency=currency,
            method=method_label(value),
            total_label=total_label(value),
        )


# =============================================================================
# PASSIVE INVESTMENT STATE
# =============================================================================


class PassiveInvestmentState(WireModel):
    """
    Каноничное состояние пассивных инвестиций (version "2.0").

    Immutable модель (frozen=True). zakatable_value <= market_value
    ожидается, но не проверяется: значения приходят из внешнего калькулятора.
    """

    version: Literal["2.0"] = Field(CANONICAL_PASSIVE_VERSION)
    investments: list[Investment] = Field(default_factory=list)
    method: PassiveMethod = Field(PassiveMethod.QUICK)
    market_value: float = Field(0.0)
    zakatable_value: float = Field(0.0)
    company_data: CompanyData | None = Field(None)
    hawl_status: HawlStatus
    display_properties: DisplayProperties


# =============================================================================
# DEFAULTS
# =============================================================================


def fresh_investment_id(now: datetime) -> str:
    """Timestamp-идентификатор строки (миллисекунды epoch)."""
    return str(int(now.timestamp() * 1000))


def empty_investment(now: datetime) -> Investment:
    """Пустая строка-заглушка для формы ввода."""
    return Investment(id=fresh_investment_id(now))


def default_hawl_status(now: datetime) -> HawlStatus:
    return HawlStatus(is_complete=False, start_date=now.isoformat())


def default_passive_investments(now: datetime) -> PassiveInvestmentState:
    """
    Default блок пассивных инвестиций.

    version 2.0, quick метод, одна пустая строка, Hawl не выполнен, USD.
    """
    return PassiveInvestmentState(
        investments=[empty_investment(now)],
        method=PassiveMethod.QUICK,
        market_value=0.0,
        zakatable_value=0.0,
        hawl_status=default_hawl_status(now),
        display_properties=DisplayProperties.for_method(PassiveMethod.QUICK),
    )
