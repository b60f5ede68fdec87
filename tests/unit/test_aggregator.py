"""
Тесты для ZakatAggregator

Проверяет:
1. Итоги (total, zakatable) и Hawl gate
2. Нечисловые слагаемые считаются 0
3. Разбивку по категориям и проценты
4. Nisab (min из золота и серебра)
"""

import pytest

from src.core.domain import (
    ActiveStockHolding,
    MetalPrices,
    PassiveInvestmentState,
    PassiveMethod,
    ZakatState,
    default_passive_investments,
    initial_zakat_state,
)
from src.stocks import StocksConfig, ZakatAggregator
from tests.conftest import FIXED_NOW


def make_state(
    holdings=(),
    passive_value=0.0,
    passive_zakatable=0.0,
    dividends=0.0,
    hawl=True,
    method=PassiveMethod.QUICK,
    with_passive=True,
) -> ZakatState:
    state = initial_zakat_state(FIXED_NOW)
    passive: PassiveInvestmentState | None = None
    if with_passive:
        passive = default_passive_investments(FIXED_NOW).model_copy(
            update={"market_value": passive_value, "zakatable_value": passive_zakatable, "method": method}
        )
    stocks = [ActiveStockHolding.priced(s, n, p, FIXED_NOW) for s, n, p in holdings]
    return state.model_copy(
        update={
            "stock_hawl_met": hawl,
            "stock_values": state.stock_values.model_copy(
                update={
                    "active_stocks": stocks,
                    "passive_investments": passive,
                    "total_dividend_earnings": dividends,
                }
            ),
        }
    )


@pytest.fixture
def aggregator() -> ZakatAggregator:
    return ZakatAggregator(StocksConfig())


# =============================================================================
# TOTALS
# =============================================================================


class TestTotals:
    """Тесты для total_stocks / total_zakatable_stocks"""

    def test_total_sums_all_categories(self, aggregator):
        state = make_state([("AAPL", 10, 150.0)], passive_value=1000.0, passive_zakatable=300.0, dividends=50.0)

        assert aggregator.total_stocks(state) == 2550.0
        assert aggregator.total_zakatable_stocks(state) == 1850.0

    def test_hawl_not_met_zeroes_zakatable(self, aggregator):
        state = make_state([("AAPL", 10, 150.0)], passive_value=1000.0, passive_zakatable=300.0, hawl=False)

        assert aggregator.total_stocks(state) == 2500.0
        assert aggregator.total_zakatable_stocks(state) == 0.0

    def test_non_finite_terms_ignored(self, aggregator):
        state = make_state([("AAPL", 1, 10.0)], passive_value=float("nan"), dividends=float("inf"))

        assert aggregator.total_stocks(state) == 10.0

    def test_missing_passive_block(self, aggregator):
        state = make_state([("AAPL", 1, 10.0)], with_passive=False)
        assert aggregator.total_stocks(state) == 10.0

    def test_totals_rounded(self, aggregator):
        state = make_state(dividends=0.1 + 0.2)
        assert aggregator.total_stocks(state) == 0.3

    def test_zakat_due_uses_configured_rate(self):
        aggregator = ZakatAggregator(StocksConfig(zakat_rate=0.1))
        assert aggregator.zakat_due(1000.0) == 100.0


# =============================================================================
# BREAKDOWN
# =============================================================================


class TestBreakdown:
    """Тесты для breakdown"""

    def test_all_categories(self, aggregator):
        state = make_state(
            [("AAPL", 10, 150.0)],
            passive_value=1000.0,
            passive_zakatable=300.0,
            dividends=500.0,
            method=PassiveMethod.DETAILED,
        )

        breakdown = aggregator.breakdown(state)

        assert breakdown.total == 3000.0
        assert breakdown.zakatable == 2300.0
        assert breakdown.zakat_due == 57.5
        assert set(breakdown.items) == {"active_trading", "passive_investments", "dividends"}

        active = breakdown.items["active_trading"]
        assert active.value == 1500.0
        assert active.zakat_due == 37.5
        assert active.percentage == 50.0

        passive = breakdown.items["passive_investments"]
        assert passive.label == "Passive Investments (CRI Method)"
        assert passive.tooltip == "Based on company financials"
        assert passive.zakatable == 300.0
        assert passive.percentage == pytest.approx(33.33)

        assert breakdown.items["dividends"].percentage == pytest.approx(16.67)

    def test_percentages_sum_to_about_100(self, aggregator):
        state = make_state([("AAPL", 1, 1.0), ("MSFT", 1, 1.0)], passive_value=1.0, dividends=1.0)

        breakdown = aggregator.breakdown(state)

        total_pct = sum(item.percentage for item in breakdown.items.values())
        assert total_pct == pytest.approx(100.0, abs=0.02)

    def test_hawl_not_met(self, aggregator):
        breakdown = aggregator.breakdown(make_state([("AAPL", 10, 150.0)], hawl=False))

        active = breakdown.items["active_trading"]
        assert active.is_zakatable is False
        assert active.zakatable == 0.0
        assert active.zakat_due == 0.0
        assert breakdown.zakat_due == 0.0

    def test_zero_total_gives_zero_percentages(self, aggregator):
        breakdown = aggregator.breakdown(make_state())

        assert breakdown.total == 0.0
        assert list(breakdown.items) == ["passive_investments"]
        assert breakdown.items["passive_investments"].percentage == 0.0
        assert breakdown.items["passive_investments"].label == "Passive Investments (30% Rule)"

    def test_empty_placeholder(self, aggregator):
        breakdown = aggregator.breakdown(make_state(with_passive=False))

        assert list(breakdown.items) == ["stocks"]
        placeholder = breakdown.items["stocks"]
        assert placeholder.value == 0.0
        assert placeholder.is_zakatable is False


# =============================================================================
# NISAB
# =============================================================================


class TestNisab:
    """Тесты для nisab_threshold / meets_nisab_threshold"""

    def test_lower_threshold_used(self):
        """gold 5000 / silver 3000, total 3500 → выполнен"""
        aggregator = ZakatAggregator(StocksConfig(nisab_gold_grams=1.0, nisab_silver_grams=1.0))
        state = make_state([("AAPL", 35, 100.0)]).model_copy(
            update={"metal_prices": MetalPrices(gold=5000.0, silver=3000.0)}
        )

        assert aggregator.nisab_threshold(state) == 3000.0
        assert aggregator.meets_nisab_threshold(state) is True

    def test_default_weights(self, aggregator):
        state = make_state([("AAPL", 10, 150.0)]).model_copy(
            update={"metal_prices": MetalPrices(gold=60.0, silver=0.8)}
        )

        # min(85 × 60, 595 × 0.8) = 476
        assert aggregator.nisab_threshold(state) == pytest.approx(476.0)
        assert aggregator.meets_nisab_threshold(state) is True

    def test_below_threshold(self, aggregator):
        state = make_state([("AAPL", 1, 100.0)]).model_copy(
            update={"metal_prices": MetalPrices(gold=60.0, silver=0.8)}
        )
        assert aggregator.meets_nisab_threshold(state) is False

    def test_zero_metal_prices_always_met(self, aggregator):
        assert aggregator.meets_nisab_threshold(make_state()) is True
