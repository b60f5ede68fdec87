"""
Structured JSON logging

Идемпотентная настройка root logger и фабрика логгеров модулей.

Стабильные ключи: ``ts``, ``level``, ``logger``, ``message`` + extra поля.
Два уровня исходов:
- log_recovered: WARNING, outcome="defaulted" — сбой поглощён, применён default
- log_caller_failure: ERROR, outcome="raised" — ошибка будет проброшена вызывающему

Использование:
    configure_root_logging()
    log = get_json_logger(__name__)
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

__all__ = [
    "OUTCOME_DEFAULTED",
    "OUTCOME_RAISED",
    "configure_root_logging",
    "get_json_logger",
    "log_caller_failure",
    "log_recovered",
]

OUTCOME_DEFAULTED = "defaulted"
OUTCOME_RAISED = "raised"


class _JsonFormatter(logging.Formatter):
    """JSON formatter со стабильными ключами и extra полями."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """
    Инициализация root logger с JSON stream handler (идемпотентно).

    Args:
        level: Уровень логирования. Если None — env ``LOG_LEVEL`` или ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved)

    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """
    Логгер модуля, делегирующий форматирование root logger.

    Не настраивает root logger неявно: configure_root_logging()
    вызывается один раз при старте приложения.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.propagate = True
    return logger


def log_recovered(
    logger: logging.Logger,
    event: str,
    message: str,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """Сбой поглощён компонентом, вызывающий получит default значение."""
    logger.warning(
        message,
        exc_info=exc_info,
        extra={"extra": {"event": event, "outcome": OUTCOME_DEFAULTED, **fields}},
    )


def log_caller_failure(
    logger: logging.Logger,
    event: str,
    message: str,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """Ошибка будет проброшена вызывающему."""
    logger.error(
        message,
        exc_info=exc_info,
        extra={"extra": {"event": event, "outcome": OUTCOME_RAISED, **fields}},
    )
