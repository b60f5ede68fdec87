"""ZakatAggregator — итоговые суммы и разбивка по категориям акций.

Чистый read-side view: все методы принимают снапшот ZakatState и
ничего не мутируют.

Категории:
- active_trading: активные позиции (полная рыночная стоимость zakatable)
- passive_investments: пассивные инвестиции (zakatable часть считается заранее)
- dividends: дивиденды (полностью zakatable)

Hawl: если stock_hawl_met = False, zakatable сумма равна 0 независимо
от стоимости.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.domain.constants import method_label, method_tooltip
from src.core.domain.stock_values import ZakatState
from src.core.math.numerical_safeguards import (
    coerce_number,
    round_currency,
    safe_divide,
    sum_finite,
)

from .config import StocksConfig


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class BreakdownItem:
    """Строка разбивки по категории."""

    value: float
    is_zakatable: bool
    zakatable: float
    zakat_due: float
    label: str
    tooltip: str
    percentage: float  # Доля категории в total, %


@dataclass(frozen=True)
class StocksBreakdown:
    """Разбивка акций по категориям."""

    total: float
    zakatable: float
    zakat_due: float
    items: dict[str, BreakdownItem] = field(default_factory=dict)


# =============================================================================
# AGGREGATOR
# =============================================================================


class ZakatAggregator:
    """Агрегация активных позиций, пассивных инвестиций и дивидендов."""

    def __init__(self, config: Optional[StocksConfig] = None):
        self.config = config or StocksConfig()

    # -------------------------------------------------------------------------
    # Составляющие
    # -------------------------------------------------------------------------

    def active_total(self, state: ZakatState) -> float:
        """Сумма market_value активных позиций (нечисловые → 0)."""
        return sum_finite(stock.market_value for stock in state.stock_values.active_stocks)

    def passive_total(self, state: ZakatState) -> float:
        passive = state.stock_values.passive_investments
        return coerce_number(passive.market_value) if passive is not None else 0.0

    def passive_zakatable(self, state: ZakatState) -> float:
        passive = state.stock_values.passive_investments
        return coerce_number(passive.zakatable_value) if passive is not None else 0.0

    def dividend_total(self, state: ZakatState) -> float:
        return coerce_number(state.stock_values.total_dividend_earnings)

    # -------------------------------------------------------------------------
    # Итоги
    # -------------------------------------------------------------------------

    def total_stocks(self, state: ZakatState) -> float:
        """Общая стоимость: активные + пассивные + дивиденды (округлено)."""
        total = self.active_total(state) + self.passive_total(state) + self.dividend_total(state)
        return round_currency(total, self.config.currency_precision)

    def total_zakatable_stocks(self, state: ZakatState) -> float:
        """Zakatable стоимость; 0 если Hawl не выполнен."""
        if not state.stock_hawl_met:
            return 0.0

        total = (
            self.active_total(state)
            + self.passive_zakatable(state)
            + self.dividend_total(state)
        )
        return round_currency(total, self.config.currency_precision)

    def zakat_due(self, value: float) -> float:
        return round_currency(value * self.config.zakat_rate, self.config.currency_precision)

    def percentage(self, value: float, total: float) -> float:
        """Доля value в total, %; 0 при total = 0."""
        if total <= 0:
            return 0.0
        return round_currency(safe_divide(value, total) * 100, self.config.currency_precision)

    # -------------------------------------------------------------------------
    # Разбивка
    # -------------------------------------------------------------------------

    def breakdown(self, state: ZakatState) -> StocksBreakdown:
        """Разбивка по категориям.

        Категория присутствует только если применима. Если ни одна
        не применима, возвращается одна нулевая категория "stocks",
        чтобы разбивка никогда не была пустой.
        """
        total = self.total_stocks(state)
        zakatable = self.total_zakatable_stocks(state)
        hawl_met = state.stock_hawl_met
        items: dict[str, BreakdownItem] = {}

        if state.stock_values.active_stocks:
            active = self.active_total(state)
            items["active_trading"] = BreakdownItem(
                value=active,
                is_zakatable=hawl_met,
                zakatable=active if hawl_met else 0.0,
                zakat_due=self.zakat_due(active) if hawl_met else 0.0,
                label="Active Trading",
                tooltip="Full market value is zakatable",
                percentage=self.percentage(active, total),
            )

        passive = state.stock_values.passive_investments
        if passive is not None:
            passive_value = self.passive_total(state)
            passive_zakatable = self.passive_zakatable(state)
            method = passive.method.value
            items["passive_investments"] = BreakdownItem(
                value=passive_value,
                is_zakatable=hawl_met,
                zakatable=passive_zakatable if hawl_met else 0.0,
                zakat_due=self.zakat_due(passive_zakatable) if hawl_met else 0.0,
                label=f"Passive Investments ({method_label(method)})",
                tooltip=method_tooltip(method),
                percentage=self.percentage(passive_value, total),
            )

        dividends = self.dividend_total(state)
        if dividends > 0:
            items["dividends"] = BreakdownItem(
                value=dividends,
                is_zakatable=hawl_met,
                zakatable=dividends if hawl_met else 0.0,
                zakat_due=self.zakat_due(dividends) if hawl_met else 0.0,
                label="Dividend Earnings",
                tooltip="Full dividend amount is zakatable",
                percentage=self.percentage(dividends, total),
            )

        if not items:
            items["stocks"] = BreakdownItem(
                value=0.0,
                is_zakatable=False,
                zakatable=0.0,
                zakat_due=0.0,
                label="Stocks",
                tooltip="No stocks added yet",
                percentage=0.0,
            )

        return StocksBreakdown(
            total=total,
            zakatable=zakatable,
            zakat_due=self.zakat_due(zakatable),
            items=items,
        )

    # -------------------------------------------------------------------------
    # Nisab
    # -------------------------------------------------------------------------

    def nisab_threshold(self, state: ZakatState) -> float:
        """Nisab = min(золото, серебро): вес металла × цена за грамм."""
        gold_nisab = self.config.nisab_gold_grams * state.metal_prices.gold
        silver_nisab = self.config.nisab_silver_grams * state.metal_prices.silver
        return min(gold_nisab, silver_nisab)

    def meets_nisab_threshold(self, state: ZakatState) -> bool:
        return self.total_stocks(state) >= self.nisab_threshold(state)
