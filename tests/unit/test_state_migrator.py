"""
Тесты для StateMigrator

Проверяет:
1. Классификацию версий (SchemaVersion)
2. Миграцию форм без версии и "1.0" в "2.0"
3. Повторную санитизацию формы "2.0" (типы полей, метки)
4. Идемпотентность migrate(migrate(x)) == migrate(x)
5. No-throw контракт: нераспознанная версия / мусор → None + WARNING
"""

import logging

import pytest

from src.core.contracts import validate_passive_investment_state
from src.core.domain import PassiveInvestmentState, PassiveMethod, default_passive_investments
from src.migration import (
    SchemaVersion,
    StateMigrator,
    classify_version,
    migrate_passive_investments,
    sanitize_passive_state,
)
from src.migration.migrator import sanitize_company_data, sanitize_investments
from tests.conftest import FIXED_NOW, fixed_clock

FRESH_ID = str(int(FIXED_NOW.timestamp() * 1000))


@pytest.fixture
def migrator() -> StateMigrator:
    return StateMigrator(clock=fixed_clock)


# =============================================================================
# VERSION CLASSIFICATION
# =============================================================================


class TestClassifyVersion:
    """Тесты для classify_version"""

    @pytest.mark.parametrize("tag", [None, "", 0, False])
    def test_empty_tags_are_unversioned(self, tag):
        assert classify_version({"version": tag}) is SchemaVersion.UNVERSIONED

    def test_missing_tag_is_unversioned(self):
        assert classify_version({}) is SchemaVersion.UNVERSIONED

    def test_known_tags(self):
        assert classify_version({"version": "1.0"}) is SchemaVersion.V1
        assert classify_version({"version": "2.0"}) is SchemaVersion.V2

    @pytest.mark.parametrize("tag", ["3.0", "2", 2.0, True, ["2.0"]])
    def test_other_tags_unrecognized(self, tag):
        assert classify_version({"version": tag}) is SchemaVersion.UNRECOGNIZED


# =============================================================================
# LEGACY FORMS
# =============================================================================


class TestLegacyMigration:
    """Миграция форм без версии и "1.0" """

    def test_v1_detailed(self, migrator):
        """{version:"1.0", method:"detailed", marketValue:1000} → detailed, CRI Method"""
        result = migrator.migrate({"version": "1.0", "method": "detailed", "marketValue": 1000})

        assert result is not None
        assert result.version == "2.0"
        assert result.method is PassiveMethod.DETAILED
        assert result.market_value == 1000.0
        assert result.zakatable_value == 0.0
        assert result.display_properties.method == "CRI Method"
        assert result.display_properties.total_label == "Total Company Assets"
        assert result.hawl_status.is_complete is False
        assert result.hawl_status.start_date == FIXED_NOW.isoformat()

    def test_unversioned_gets_placeholder_investment(self, migrator):
        result = migrator.migrate({"method": "quick"})

        assert result is not None
        assert len(result.investments) == 1
        placeholder = result.investments[0]
        assert placeholder.id == FRESH_ID
        assert placeholder.name == ""
        assert placeholder.shares == 0.0
        assert placeholder.market_value == 0.0

    def test_unversioned_keeps_investment_list(self, migrator):
        result = migrator.migrate(
            {"investments": [{"id": "a", "name": "Fund", "shares": 2, "pricePerShare": 50, "marketValue": 100}]}
        )

        assert result is not None
        assert [i.id for i in result.investments] == ["a"]
        assert result.investments[0].price_per_share == 50.0

    def test_legacy_ignores_stored_hawl_and_currency(self, migrator):
        result = migrator.migrate(
            {
                "version": "1.0",
                "hawlStatus": {"isComplete": True, "startDate": "2020-01-01"},
                "displayProperties": {"currency": "EUR"},
            }
        )

        assert result is not None
        assert result.hawl_status.is_complete is False
        assert result.display_properties.currency == "USD"

    def test_invalid_method_defaults_to_quick(self, migrator):
        result = migrator.migrate({"version": "1.0", "method": "QUICK"})
        assert result is not None
        assert result.method is PassiveMethod.QUICK
        assert result.display_properties.method == "30% Rule"

    def test_non_numeric_values_default_to_zero(self, migrator):
        result = migrator.migrate({"marketValue": "1000", "zakatableValue": float("nan")})
        assert result is not None
        assert result.market_value == 0.0
        assert result.zakatable_value == 0.0

    def test_company_data_carried_through(self, migrator):
        result = migrator.migrate(
            {
                "method": "detailed",
                "companyData": {"cash": 100, "receivables": 50, "inventory": "x", "totalShares": 200, "yourShares": 20},
            }
        )

        assert result is not None
        assert result.company_data is not None
        assert result.company_data.cash == 100.0
        assert result.company_data.inventory == 0.0
        assert result.company_data.your_shares == 20.0

    def test_output_matches_contract(self, migrator):
        result = migrator.migrate({"version": "1.0"})
        validate_passive_investment_state(result.to_wire())


# =============================================================================
# CANONICAL FORM
# =============================================================================


class TestCanonicalMigration:
    """Повторная санитизация формы "2.0" """

    def test_preserves_well_typed_fields(self, migrator):
        raw = {
            "version": "2.0",
            "method": "detailed",
            "investments": [],
            "marketValue": 500,
            "zakatableValue": 125,
            "hawlStatus": {"isComplete": True, "startDate": "2023-01-01T00:00:00Z", "endDate": "2024-01-01T00:00:00Z"},
            "displayProperties": {"currency": "GBP", "method": "30% Rule", "totalLabel": "Total Investments"},
        }

        result = migrator.migrate(raw)

        assert result is not None
        assert result.hawl_status.is_complete is True
        assert result.hawl_status.end_date == "2024-01-01T00:00:00Z"
        assert result.display_properties.currency == "GBP"
        # Метки всегда пересчитываются из method
        assert result.display_properties.method == "CRI Method"
        assert result.display_properties.total_label == "Total Company Assets"

    def test_non_list_investments_become_empty(self, migrator):
        result = migrator.migrate({"version": "2.0", "investments": "oops"})
        assert result is not None
        assert result.investments == []

    def test_malformed_hawl_defaulted(self, migrator):
        result = migrator.migrate({"version": "2.0", "hawlStatus": {"isComplete": "yes", "startDate": 5}})
        assert result is not None
        assert result.hawl_status.is_complete is False
        assert result.hawl_status.start_date == FIXED_NOW.isoformat()

    def test_accepts_model_instance(self, migrator):
        state = default_passive_investments(FIXED_NOW)
        assert migrator.migrate(state) == state

    def test_idempotent(self, migrator):
        first = migrator.migrate(
            {
                "version": "1.0",
                "method": "detailed",
                "marketValue": 1000,
                "companyData": {"cash": 1, "receivables": 2, "inventory": 3, "totalShares": 10, "yourShares": 5},
            }
        )

        assert first is not None
        assert migrator.migrate(first.to_wire()) == first
        assert migrator.migrate(first) == first


# =============================================================================
# FAILURES
# =============================================================================


class TestMigrationFailures:
    """No-throw контракт"""

    def test_unrecognized_version_returns_none(self, migrator):
        assert migrator.migrate({"version": "3.0", "method": "quick"}) is None

    @pytest.mark.parametrize("raw", [None, "state", 42, ["2.0"]])
    def test_non_mapping_returns_none(self, migrator, raw):
        assert migrator.migrate(raw) is None

    def test_failure_logged_as_defaulted(self, migrator, caplog):
        with caplog.at_level(logging.WARNING, logger="src.migration.migrator"):
            migrator.migrate({"version": "9.9"})

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.extra["outcome"] == "defaulted"
        assert record.extra["event"] == "passive_state_migration_failed"

    def test_contract_violation_returns_none(self):
        class RejectingValidator:
            def error_messages(self, data):
                return ["<root>: rejected"]

        migrator = StateMigrator(clock=fixed_clock, validator=RejectingValidator())
        assert migrator.migrate({"version": "2.0"}) is None

    def test_unexpected_error_returns_none(self, caplog):
        def broken_clock():
            raise RuntimeError("clock down")

        migrator = StateMigrator(clock=broken_clock)
        with caplog.at_level(logging.WARNING):
            assert migrator.migrate({"version": "1.0"}) is None
        assert caplog.records[-1].extra["event"] == "passive_state_migration_crashed"


# =============================================================================
# SANITIZERS
# =============================================================================


class TestSanitizers:
    """Чистые функции санитизации"""

    def test_investment_rows_sanitized_field_by_field(self):
        rows = sanitize_investments(
            [{"id": 7, "name": None, "shares": True, "pricePerShare": 2.5}, "junk", {}],
            FIXED_NOW,
            placeholder=False,
        )

        assert len(rows) == 2
        assert rows[0] == {"id": "7", "name": "", "shares": 0.0, "pricePerShare": 2.5, "marketValue": 0.0}
        assert rows[1]["id"] == f"{FRESH_ID}-2"

    def test_company_share_percentage_computed(self):
        company = sanitize_company_data(
            {"totalShares": 200, "yourShares": 50, "displayProperties": {"currency": ""}}
        )
        assert company["displayProperties"] == {"currency": "USD", "sharePercentage": 25.0}

    def test_company_zero_total_shares(self):
        company = sanitize_company_data({"totalShares": 0, "yourShares": 50, "displayProperties": {}})
        assert company["displayProperties"]["sharePercentage"] == 0.0

    def test_company_non_mapping_dropped(self):
        assert sanitize_company_data([1, 2]) is None

    def test_sanitizer_is_pure(self):
        raw = {"method": "detailed", "investments": [{"id": "x"}]}
        first = sanitize_passive_state(raw, FIXED_NOW, legacy=True)
        second = sanitize_passive_state(raw, FIXED_NOW, legacy=True)
        assert first == second
        assert raw == {"method": "detailed", "investments": [{"id": "x"}]}

    def test_sanitized_output_builds_model(self):
        wire = sanitize_passive_state({}, FIXED_NOW, legacy=False)
        state = PassiveInvestmentState.model_validate(wire)
        assert state.investments == []


class TestModuleFunction:
    """migrate_passive_investments с migrator'ом по умолчанию"""

    def test_default_migrator(self):
        result = migrate_passive_investments({"version": "1.0", "method": "detailed"})
        assert result is not None
        assert result.display_properties.method == "CRI Method"

    def test_default_migrator_never_raises(self):
        assert migrate_passive_investments({"version": object()}) is None
