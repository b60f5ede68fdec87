"""
Errors — иерархия исключений stocks core

Два класса исходов:
- caller-visible: ValidationError, FetchError — пробрасываются вызывающему
- recoverable: MigrationError, ConversionError — ловятся внутри компонента,
  логируются и заменяются default значением / исходной ценой
"""

from typing import Any


class StocksError(Exception):
    """Базовый класс всех ошибок stocks core."""

    code: str = "STOCKS_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ValidationError(StocksError):
    """Невалидный ввод: пустой symbol, shares <= 0, нечисловая цена."""

    code = "VALIDATION_ERROR"


class FetchError(StocksError):
    """Сбой price source (сеть, парсинг ответа). Состояние не изменяется."""

    code = "FETCH_ERROR"


class MigrationError(StocksError):
    """
    Невозможно привести persisted state к каноничной схеме.

    Никогда не выходит за пределы StateMigrator.migrate().
    """

    code = "MIGRATION_ERROR"


class ConversionError(StocksError):
    """
    Сбой конвертации валюты.

    Никогда не выходит за пределы PriceUpdatePipeline: цена остаётся
    в исходной валюте.
    """

    code = "CONVERSION_ERROR"
