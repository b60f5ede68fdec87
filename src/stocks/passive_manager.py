"""PassiveInvestmentManager — обновление блока пассивных инвестиций.

Черновик собирается из входных данных и предыдущего состояния, затем
проходит через StateMigrator (та же санитизация, что и при загрузке).
Входные данные не валидируются заранее: нечисловые значения и неполные
строки приводит к канону мигратор.
Запись — один StocksStore.set: блок + legacy проекции.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.core.domain.constants import DEFAULT_CURRENCY, method_label, total_label
from src.core.domain.passive_state import (
    CompanyData,
    Investment,
    PassiveInvestmentState,
    PassiveMethod,
    default_hawl_status,
)
from src.core.domain.stock_values import ZakatState
from src.core.math.numerical_safeguards import is_number
from src.core.observability.logger import get_json_logger, log_recovered
from src.core.ports import AssetTypeRegistry
from src.migration.migrator import StateMigrator, sanitize_company_data

from .config import StocksConfig
from .store import StocksStore

logger = get_json_logger(__name__)


# =============================================================================
# INPUT MODELS
# =============================================================================


class PassiveInvestmentInput(BaseModel):
    """Данные формы: строки инвестиций и/или данные компании.

    Поля не типизируются строго: строки и companyData санитизирует мигратор.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    investments: Any = Field(None)
    company_data: Any = Field(None, alias="companyData")


class PassiveCalculations(BaseModel):
    """Результаты внешнего калькулятора (quick / detailed)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    market_value: Any = Field(None, alias="marketValue")
    zakatable_value: Any = Field(None, alias="zakatableValue")


InputLike = Union[PassiveInvestmentInput, Mapping[str, Any], None]
CalculationsLike = Union[PassiveCalculations, Mapping[str, Any], None]


def _parse(model: type[BaseModel], value: Any) -> Any:
    """Mapping → модель; всё, что не mapping, считается отсутствующим."""
    if value is None or isinstance(value, model):
        return value
    if isinstance(value, Mapping):
        return model.model_validate(dict(value))
    log_recovered(
        logger,
        "passive_input_ignored",
        f"Ignoring non-mapping {model.__name__}",
        value_type=type(value).__name__,
    )
    return None


def _wire_rows(rows: list[Any]) -> list[Any]:
    return [row.to_wire() if isinstance(row, Investment) else row for row in rows]


def _wire_company(company: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(company, CompanyData):
        return company.to_wire()
    if isinstance(company, Mapping):
        return company
    return None


# =============================================================================
# MANAGER
# =============================================================================


class PassiveInvestmentManager:
    """Обновление пассивных инвестиций с пересчётом через asset калькулятор."""

    def __init__(
        self,
        store: StocksStore,
        migrator: Optional[StateMigrator] = None,
        asset_registry: Optional[AssetTypeRegistry] = None,
        config: Optional[StocksConfig] = None,
    ):
        self.store = store
        self.migrator = migrator or StateMigrator(clock=store.clock)
        self.asset_registry = asset_registry
        self.config = config or StocksConfig()

    def build_draft(
        self,
        state: ZakatState,
        method: PassiveMethod | str,
        data: Optional[PassiveInvestmentInput],
        calculations: Optional[PassiveCalculations],
    ) -> dict[str, Any]:
        """Черновик в wire форме "2.0".

        investments: data (список) → предыдущие → []
        marketValue / zakatableValue: calculations (число) → предыдущие → 0
        hawlStatus: предыдущий или новый
        companyData: только если передан в data
        """
        prior = state.stock_values.passive_investments
        method_value = method.value if isinstance(method, PassiveMethod) else method

        if data is not None and isinstance(data.investments, list):
            investments = _wire_rows(data.investments)
        elif prior is not None:
            investments = [row.to_wire() for row in prior.investments]
        else:
            investments = []

        def pick(calculated: Any, previous: Optional[float]) -> float:
            if is_number(calculated):
                return float(calculated)
            if is_number(previous):
                return float(previous)
            return 0.0

        currency = prior.display_properties.currency if prior is not None else DEFAULT_CURRENCY
        currency = currency or DEFAULT_CURRENCY

        draft: dict[str, Any] = {
            "version": "2.0",
            "method": method_value,
            "investments": investments,
            "marketValue": pick(
                calculations.market_value if calculations else None,
                prior.market_value if prior else None,
            ),
            "zakatableValue": pick(
                calculations.zakatable_value if calculations else None,
                prior.zakatable_value if prior else None,
            ),
            "hawlStatus": (
                prior.hawl_status.to_wire()
                if prior is not None
                else default_hawl_status(self.store.now()).to_wire()
            ),
            "displayProperties": {
                "currency": currency,
                "method": method_label(method_value),
                "totalLabel": total_label(method_value),
            },
        }

        company = _wire_company(data.company_data) if data is not None else None
        if company is not None:
            # sharePercentage всегда пересчитывается из уже приведённых долей
            draft["companyData"] = sanitize_company_data(
                {**company, "displayProperties": {"currency": currency}}
            )

        return draft

    def update(
        self,
        method: PassiveMethod | str,
        data: InputLike = None,
        calculations: CalculationsLike = None,
    ) -> Optional[PassiveInvestmentState]:
        """Обновление блока пассивных инвестиций.

        Не бросает исключений: неверные входные данные санитизируются,
        а сбой миграции или asset калькулятора логируется (WARNING)
        и оставляет состояние без изменений.

        Args:
            method: "quick" или "detailed"
            data: строки инвестиций и/или companyData
            calculations: marketValue / zakatableValue от калькулятора

        Returns:
            Записанный блок или None, если обновление отменено
        """
        draft = self.build_draft(
            self.store.get(),
            method,
            _parse(PassiveInvestmentInput, data),
            _parse(PassiveCalculations, calculations),
        )
        migrated = self.migrator.migrate(draft)
        if migrated is None:
            log_recovered(
                logger,
                "passive_update_abandoned",
                "Failed to create valid passive investments state",
                method=str(method),
            )
            return None

        calculator = (
            self.asset_registry.lookup(self.config.asset_kind)
            if self.asset_registry is not None
            else None
        )

        def apply(state: ZakatState) -> ZakatState:
            values = state.stock_values.model_copy(
                update={
                    "passive_investments": migrated,
                    "market_value": migrated.market_value,
                    "zakatable_value": migrated.zakatable_value,
                }
            )

            if calculator is not None:
                total = calculator.calculate_total(values, state.stock_prices)
                zakatable = calculator.calculate_zakatable(
                    values, state.stock_prices, state.stock_hawl_met
                )
                values = values.model_copy(
                    update={"market_value": float(total), "zakatable_value": float(zakatable)}
                )

            return state.model_copy(update={"stock_values": values})

        try:
            self.store.set(apply)
        except Exception as exc:
            log_recovered(
                logger,
                "passive_update_calculation_failed",
                f"Asset calculator failed, passive update abandoned: {exc}",
                exc_info=True,
                asset_kind=self.config.asset_kind,
            )
            return None

        logger.info(
            "Passive investments updated",
            extra={
                "extra": {
                    "event": "passive_investments_updated",
                    "method": migrated.method.value,
                    "investments": len(migrated.investments),
                }
            },
        )
        return migrated
