"""StocksConfig — конфигурация stocks core."""

from dataclasses import dataclass

from src.core.domain.constants import (
    DEFAULT_CURRENCY,
    NISAB_GOLD_GRAMS,
    NISAB_SILVER_GRAMS,
    ZAKAT_RATE,
)
from src.core.math.numerical_safeguards import CURRENCY_PRECISION_DEFAULT


@dataclass(frozen=True)
class StocksConfig:
    """Конфигурация расчётов по акциям.

    - zakat_rate: ставка zakat (2.5%)
    - nisab_gold_grams / nisab_silver_grams: вес металла для nisab
    - default_currency: валюта, если ни аргумент, ни store её не задают
    - currency_precision: знаков после запятой при округлении
    - asset_kind: ключ калькулятора в AssetTypeRegistry
    """
    zakat_rate: float = ZAKAT_RATE
    nisab_gold_grams: float = NISAB_GOLD_GRAMS
    nisab_silver_grams: float = NISAB_SILVER_GRAMS
    default_currency: str = DEFAULT_CURRENCY
    currency_precision: int = CURRENCY_PRECISION_DEFAULT
    asset_kind: str = "stocks"
