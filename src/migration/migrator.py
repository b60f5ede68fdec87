"""StateMigrator — приведение persisted passive state к каноничной схеме "2.0".

Контракт:
- migrate(raw) -> PassiveInvestmentState | None
- никогда не бросает исключений: любой сбой логируется (WARNING,
  outcome="defaulted") и возвращается None — вызывающий подставляет default
- идемпотентна: migrate(migrate(x).to_wire()) == migrate(x)

Каждое поле проверяется независимо (list / число / enum), даже для
уже каноничной формы "2.0". Метки displayProperties всегда пересчитываются
из method и никогда не берутся из сохранённого состояния.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, assert_never

from src.core.clock import Clock, utc_now
from src.core.contracts.validators import PassiveInvestmentStateValidator
from src.core.domain.constants import DEFAULT_CURRENCY, method_label, total_label
from src.core.domain.passive_state import (
    PassiveInvestmentState,
    PassiveMethod,
    default_hawl_status,
    empty_investment,
    fresh_investment_id,
)
from src.core.errors import MigrationError
from src.core.math.numerical_safeguards import coerce_number, is_number, safe_divide
from src.core.observability.logger import get_json_logger, log_recovered

from .versions import SchemaVersion, classify_version

logger = get_json_logger(__name__)

_METHODS = {m.value for m in PassiveMethod}


# =============================================================================
# SANITIZERS (чистые функции)
# =============================================================================


def sanitize_method(value: Any) -> str:
    """method ровно "quick" или "detailed", иначе "quick"."""
    if isinstance(value, PassiveMethod):
        return value.value
    if isinstance(value, str) and value in _METHODS:
        return value
    return PassiveMethod.QUICK.value


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def sanitize_investment(row: Mapping[str, Any], fallback_id: str) -> dict[str, Any]:
    """Строка инвестиции: каждое поле проверяется отдельно."""
    row_id = row.get("id")
    if isinstance(row_id, str) and row_id:
        clean_id = row_id
    elif is_number(row_id):
        clean_id = str(row_id)
    else:
        clean_id = fallback_id

    name = row.get("name")

    return {
        "id": clean_id,
        "name": name if isinstance(name, str) else "",
        "shares": coerce_number(row.get("shares")),
        "pricePerShare": coerce_number(row.get("pricePerShare")),
        "marketValue": coerce_number(row.get("marketValue")),
    }


def sanitize_investments(raw: Any, now: datetime, placeholder: bool) -> list[dict[str, Any]]:
    """
    Список инвестиций.

    Не list → одна пустая строка-заглушка (placeholder=True, старые версии)
    или пустой список ("2.0"). Строки, не являющиеся mapping, отбрасываются.
    """
    if not isinstance(raw, list):
        return [empty_investment(now).to_wire()] if placeholder else []

    base_id = fresh_investment_id(now)
    return [
        sanitize_investment(row, f"{base_id}-{index}")
        for index, row in enumerate(raw)
        if isinstance(row, Mapping)
    ]


def sanitize_company_data(raw: Any) -> Optional[dict[str, Any]]:
    """companyData (detailed метод). Не mapping → отсутствует."""
    if not isinstance(raw, Mapping):
        return None

    company = {
        "cash": coerce_number(raw.get("cash")),
        "receivables": coerce_number(raw.get("receivables")),
        "inventory": coerce_number(raw.get("inventory")),
        "totalShares": coerce_number(raw.get("totalShares")),
        "yourShares": coerce_number(raw.get("yourShares")),
    }

    display = raw.get("displayProperties")
    if isinstance(display, Mapping):
        currency = display.get("currency")
        percentage = display.get("sharePercentage")
        company["displayProperties"] = {
            "currency": currency if _non_empty_str(currency) else DEFAULT_CURRENCY,
            "sharePercentage": (
                float(percentage)
                if is_number(percentage)
                else share_percentage(company["yourShares"], company["totalShares"])
            ),
        }

    return company


def share_percentage(your_shares: float, total_shares: float) -> float:
    """yourShares / totalShares × 100; 0 если totalShares = 0."""
    return safe_divide(your_shares, total_shares) * 100


def sanitize_hawl_status(raw: Any, now: datetime) -> dict[str, Any]:
    """hawlStatus формы "2.0": сохраняется, если поля корректного типа."""
    if not isinstance(raw, Mapping):
        return default_hawl_status(now).to_wire()

    is_complete = raw.get("isComplete")
    start_date = raw.get("startDate")
    end_date = raw.get("endDate")

    hawl: dict[str, Any] = {
        "isComplete": is_complete if isinstance(is_complete, bool) else False,
        "startDate": start_date if _non_empty_str(start_date) else now.isoformat(),
    }
    if isinstance(end_date, str):
        hawl["endDate"] = end_date
    return hawl


def sanitize_passive_state(
    raw: Mapping[str, Any],
    now: datetime,
    legacy: bool,
) -> dict[str, Any]:
    """
    Каноничная wire форма "2.0" из недоверенного mapping.

    Одна функция для всех версий. legacy=True (без версии, "1.0"):
    - investments не list → одна пустая строка
    - hawlStatus всегда новый (не выполнен, start = now)
    - displayProperties.currency = "USD"
    legacy=False ("2.0"):
    - investments не list → []
    - hawlStatus и currency сохраняются, если корректного типа

    Returns:
        dict в wire форме (camelCase)
    """
    method = sanitize_method(raw.get("method"))

    if legacy:
        hawl = default_hawl_status(now).to_wire()
        currency = DEFAULT_CURRENCY
    else:
        hawl = sanitize_hawl_status(raw.get("hawlStatus"), now)
        display = raw.get("displayProperties")
        stored_currency = display.get("currency") if isinstance(display, Mapping) else None
        currency = stored_currency if _non_empty_str(stored_currency) else DEFAULT_CURRENCY

    state: dict[str, Any] = {
        "version": "2.0",
        "investments": sanitize_investments(raw.get("investments"), now, placeholder=legacy),
        "method": method,
        "marketValue": coerce_number(raw.get("marketValue")),
        "zakatableValue": coerce_number(raw.get("zakatableValue")),
        "hawlStatus": hawl,
        "displayProperties": {
            "currency": currency,
            "method": method_label(method),
            "totalLabel": total_label(method),
        },
    }

    company = sanitize_company_data(raw.get("companyData"))
    if company is not None:
        state["companyData"] = company

    return state


# =============================================================================
# STATE MIGRATOR
# =============================================================================


class StateMigrator:
    """Миграция persisted блока пассивных инвестиций.

    Порядок:
    1. Приведение входа к mapping (PassiveInvestmentState → wire dict)
    2. Классификация версии (SchemaVersion)
    3. Санитизация (одна функция для всех версий)
    4. Проверка результата JSON Schema контрактом
    5. Построение PassiveInvestmentState
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        validator: Optional[PassiveInvestmentStateValidator] = None,
    ):
        """
        Args:
            clock: источник текущего времени (default: UTC now)
            validator: контракт каноничной формы
        """
        self._clock = clock or utc_now
        self._validator = validator or PassiveInvestmentStateValidator()

    def migrate(self, raw_state: Any) -> Optional[PassiveInvestmentState]:
        """Миграция в каноничную форму "2.0".

        Args:
            raw_state: persisted форма неизвестной версии

        Returns:
            PassiveInvestmentState или None (вызывающий использует default)
        """
        try:
            return self._migrate(raw_state)
        except MigrationError as exc:
            log_recovered(
                logger,
                "passive_state_migration_failed",
                str(exc),
                **exc.details,
            )
            return None
        except Exception as exc:
            log_recovered(
                logger,
                "passive_state_migration_crashed",
                f"Unexpected error migrating passive investments state: {exc}",
                exc_info=True,
            )
            return None

    def _migrate(self, raw_state: Any) -> PassiveInvestmentState:
        if isinstance(raw_state, PassiveInvestmentState):
            raw_state = raw_state.to_wire()

        if not isinstance(raw_state, Mapping):
            raise MigrationError(
                "Passive investments state is not a mapping",
                details={"input_type": type(raw_state).__name__},
            )

        version = classify_version(raw_state)
        now = self._clock()

        if version is SchemaVersion.UNVERSIONED or version is SchemaVersion.V1:
            wire = sanitize_passive_state(raw_state, now, legacy=True)
        elif version is SchemaVersion.V2:
            wire = sanitize_passive_state(raw_state, now, legacy=False)
        elif version is SchemaVersion.UNRECOGNIZED:
            raise MigrationError(
                "Unrecognized passive investments state version",
                details={"version": repr(raw_state.get("version"))},
            )
        else:
            assert_never(version)

        errors = self._validator.error_messages(wire)
        if errors:
            raise MigrationError(
                "Migrated passive investments state violates contract",
                details={"version": version.value, "errors": errors},
            )

        return PassiveInvestmentState.model_validate(wire)


_DEFAULT_MIGRATOR: Optional[StateMigrator] = None


def migrate_passive_investments(raw_state: Any) -> Optional[PassiveInvestmentState]:
    """Миграция с migrator'ом по умолчанию (UTC clock)."""
    global _DEFAULT_MIGRATOR
    if _DEFAULT_MIGRATOR is None:
        _DEFAULT_MIGRATOR = StateMigrator()
    return _DEFAULT_MIGRATOR.migrate(raw_state)
