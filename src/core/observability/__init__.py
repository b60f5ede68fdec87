"""Observability — структурированное логирование stocks core."""

from .logger import (
    OUTCOME_DEFAULTED,
    OUTCOME_RAISED,
    configure_root_logging,
    get_json_logger,
    log_caller_failure,
    log_recovered,
)

__all__ = [
    "OUTCOME_DEFAULTED",
    "OUTCOME_RAISED",
    "configure_root_logging",
    "get_json_logger",
    "log_caller_failure",
    "log_recovered",
]
