"""StocksSlice — фасад stocks core.

Связывает StocksStore с компонентами и предоставляет действия под теми
же именами, что и у slice калькулятора: add_active_stock,
update_stock_prices, get_total_stocks и т.д.
"""

from typing import Any, Optional

from src.core.clock import Clock
from src.core.domain.holding import ActiveStockHolding
from src.core.domain.passive_state import (
    PassiveInvestmentState,
    PassiveMethod,
    default_passive_investments,
)
from src.core.domain.stock_values import StockPrices, ZakatState
from src.core.observability.logger import get_json_logger, log_recovered
from src.core.ports import AssetTypeRegistry, CurrencyConverter, PriceSource
from src.migration.migrator import StateMigrator

from .aggregator import StocksBreakdown, ZakatAggregator
from .config import StocksConfig
from .holdings_registry import ActiveStocksBreakdown, HoldingsRegistry
from .passive_manager import CalculationsLike, InputLike, PassiveInvestmentManager
from .price_pipeline import PriceRefreshResult, PriceUpdatePipeline
from .store import StocksStore

logger = get_json_logger(__name__)


class StocksSlice:
    """Stocks часть калькулятора zakat."""

    def __init__(
        self,
        price_source: PriceSource,
        converter: Optional[CurrencyConverter] = None,
        asset_registry: Optional[AssetTypeRegistry] = None,
        config: Optional[StocksConfig] = None,
        store: Optional[StocksStore] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or StocksConfig()
        self.store = store or StocksStore(clock=clock)
        self.migrator = StateMigrator(clock=self.store.clock)
        self.aggregator = ZakatAggregator(self.config)
        self.holdings = HoldingsRegistry(self.store, price_source, self.config)
        self.prices = PriceUpdatePipeline(
            self.store, price_source, converter, self.aggregator, self.config
        )
        self.passive = PassiveInvestmentManager(
            self.store, self.migrator, asset_registry, self.config
        )

    @property
    def state(self) -> ZakatState:
        return self.store.get()

    # =========================================================================
    # LOAD
    # =========================================================================

    def hydrate(
        self, persisted_passive: Any, persisted_active: Any = None
    ) -> PassiveInvestmentState:
        """Загрузка persisted блока пассивных инвестиций и активных позиций.

        Блок мигрируется; если миграция вернула None, ставится default блок.
        Активные позиции загружаются, только если переданы.
        """
        migrated = self.migrator.migrate(persisted_passive)
        if migrated is None:
            log_recovered(
                logger,
                "passive_state_hydrate_defaulted",
                "Persisted passive investments rejected, using default block",
            )
            migrated = default_passive_investments(self.store.now())

        if persisted_active is not None:
            self.holdings.load(persisted_active)

        self.store.set(
            lambda state: state.model_copy(
                update={
                    "stock_values": state.stock_values.model_copy(
                        update={"passive_investments": migrated}
                    )
                }
            )
        )
        return migrated

    # =========================================================================
    # ACTIVE TRADING
    # =========================================================================

    async def add_active_stock(
        self,
        symbol: str,
        shares: float,
        manual_price: Optional[float] = None,
        currency: Optional[str] = None,
    ) -> ActiveStockHolding:
        return await self.holdings.add(symbol, shares, manual_price, currency)

    async def update_active_stock(
        self, symbol: str, shares: float
    ) -> Optional[ActiveStockHolding]:
        return await self.holdings.update(symbol, shares)

    def remove_active_stock(self, symbol: str) -> bool:
        return self.holdings.remove(symbol)

    async def update_stock_prices(
        self,
        target_currency: Optional[str] = None,
        from_currency: Optional[str] = None,
    ) -> PriceRefreshResult:
        return await self.prices.refresh(target_currency, from_currency)

    # =========================================================================
    # PASSIVE INVESTMENTS
    # =========================================================================

    def update_passive_investments(
        self,
        method: PassiveMethod | str,
        data: InputLike = None,
        calculations: CalculationsLike = None,
    ) -> Optional[PassiveInvestmentState]:
        return self.passive.update(method, data, calculations)

    # =========================================================================
    # GETTERS
    # =========================================================================

    def get_total_stocks(self) -> float:
        return self.aggregator.total_stocks(self.store.get())

    def get_total_zakatable_stocks(self) -> float:
        return self.aggregator.total_zakatable_stocks(self.store.get())

    def get_stocks_breakdown(self) -> StocksBreakdown:
        return self.aggregator.breakdown(self.store.get())

    def get_active_stocks_breakdown(self) -> ActiveStocksBreakdown:
        return self.holdings.breakdown()

    def meets_nisab_threshold(self) -> bool:
        return self.aggregator.meets_nisab_threshold(self.store.get())

    # =========================================================================
    # LEGACY SETTERS
    # =========================================================================

    def set_stock_value(self, key: str, value: Any) -> ZakatState:
        return self.store.set_stock_value(key, value)

    def set_stock_prices(self, prices: StockPrices) -> ZakatState:
        return self.store.set_stock_prices(prices)

    def set_stock_hawl(self, value: bool) -> ZakatState:
        return self.store.set_stock_hawl(value)

    def set_metal_prices(self, gold: float, silver: float) -> ZakatState:
        return self.store.set_metal_prices(gold, silver)

    def set_currency(self, currency: str) -> ZakatState:
        return self.store.set_currency(currency)

    def reset_stock_values(self) -> ZakatState:
        return self.store.reset()
