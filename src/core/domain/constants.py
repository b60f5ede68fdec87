"""
Zakat Units — константы и конвертеры для расчёта zakat по акциям

Единственный допустимый способ получить:
- market_value holding'а (shares × price)
- zakat_due (market_value × zakat_rate)
- метки метода для passive investments (quick / detailed)

ЗАПРЕЩЕНО считать market_value и zakat_due независимо друг от друга.
"""

from typing import Final

from src.core.math.numerical_safeguards import (
    CURRENCY_PRECISION_DEFAULT,
    round_currency,
)


# =============================================================================
# ZAKAT ПАРАМЕТРЫ
# =============================================================================

# Ставка zakat (2.5%)
ZAKAT_RATE: Final[float] = 0.025

# Nisab: вес металла в граммах
NISAB_GOLD_GRAMS: Final[float] = 85.0
NISAB_SILVER_GRAMS: Final[float] = 595.0

# Валюта по умолчанию
DEFAULT_CURRENCY: Final[str] = "USD"

# Hawl для акций по умолчанию не выполнен
DEFAULT_STOCK_HAWL_MET: Final[bool] = False

# Версия каноничной схемы passive investments
CANONICAL_PASSIVE_VERSION: Final[str] = "2.0"


# =============================================================================
# PASSIVE METHOD LABELS
# =============================================================================

QUICK_METHOD_LABEL: Final[str] = "30% Rule"
DETAILED_METHOD_LABEL: Final[str] = "CRI Method"

QUICK_TOTAL_LABEL: Final[str] = "Total Investments"
DETAILED_TOTAL_LABEL: Final[str] = "Total Company Assets"

QUICK_TOOLTIP: Final[str] = "30% of market value is zakatable"
DETAILED_TOOLTIP: Final[str] = "Based on company financials"


def method_label(method: str) -> str:
    """Метка метода: quick → "30% Rule", иначе "CRI Method"."""
    return QUICK_METHOD_LABEL if method == "quick" else DETAILED_METHOD_LABEL


def total_label(method: str) -> str:
    """Метка итога: quick → "Total Investments", иначе "Total Company Assets"."""
    return QUICK_TOTAL_LABEL if method == "quick" else DETAILED_TOTAL_LABEL


def method_tooltip(method: str) -> str:
    return QUICK_TOOLTIP if method == "quick" else DETAILED_TOOLTIP


# =============================================================================
# ОЦЕНКА HOLDING
# =============================================================================


def market_value(
    shares: float,
    price: float,
    precision: int = CURRENCY_PRECISION_DEFAULT,
) -> float:
    """
    market_value = round(shares × price)

    Args:
        shares: Количество акций
        price: Цена одной акции
        precision: Точность валюты

    Returns:
        Рыночная стоимость, округлённая до точности валюты
    """
    return round_currency(shares * price, precision)


def zakat_due(
    value: float,
    zakat_rate: float = ZAKAT_RATE,
    precision: int = CURRENCY_PRECISION_DEFAULT,
) -> float:
    """
    zakat_due = round(value × zakat_rate)

    Args:
        value: Zakatable стоимость (уже округлённая)
        zakat_rate: Ставка zakat (default: 2.5%)
        precision: Точность валюты

    Returns:
        Сумма zakat к уплате
    """
    return round_currency(value * zakat_rate, precision)
