"""
JSON Schema Contract Validators

Модуль для валидации persisted/wire форм согласно формальным JSON Schema
контрактам. Использует библиотеку jsonschema для проверки соответствия.

Схемы (src/core/contracts/schema/):
- passive_investment_state.json — каноничный блок пассивных инвестиций (2.0)
- active_stock_holding.json — активная позиция
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат рядом с модулем в schema/.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'passive_investment_state')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation самой схемы
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            jsonschema.ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)

    def error_messages(self, data: Dict[str, Any]) -> list[str]:
        """
        Человекочитаемые ошибки вида "hawlStatus.isComplete: ...".

        Используется для диагностики в логах.
        """
        messages = []
        for error in sorted(self.iter_errors(data), key=lambda e: [str(p) for p in e.path]):
            path = ".".join(str(p) for p in error.path) or "<root>"
            messages.append(f"{path}: {error.message}")
        return messages


class PassiveInvestmentStateValidator(ContractValidator):
    """Валидатор каноничного блока пассивных инвестиций."""

    def __init__(self):
        super().__init__("passive_investment_state")


class ActiveStockHoldingValidator(ContractValidator):
    """Валидатор активной позиции."""

    def __init__(self):
        super().__init__("active_stock_holding")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_passive_investment_state(data: Dict[str, Any]) -> None:
    """
    Валидация passive_investment_state данных.

    Raises:
        jsonschema.ValidationError: Если данные не соответствуют схеме
    """
    PassiveInvestmentStateValidator().validate(data)


def validate_active_stock_holding(data: Dict[str, Any]) -> None:
    """
    Валидация active_stock_holding данных.

    Raises:
        jsonschema.ValidationError: Если данные не соответствуют схеме
    """
    ActiveStockHoldingValidator().validate(data)
