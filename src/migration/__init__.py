"""Migration — приведение persisted state к каноничной схеме.

- SchemaVersion: закрытое множество версий + UNRECOGNIZED
- StateMigrator: no-throw миграция блока пассивных инвестиций в "2.0"
"""

from .migrator import (
    StateMigrator,
    migrate_passive_investments,
    sanitize_passive_state,
    share_percentage,
)
from .versions import SchemaVersion, classify_version

__all__ = [
    "StateMigrator",
    "SchemaVersion",
    "classify_version",
    "migrate_passive_investments",
    "sanitize_passive_state",
    "share_percentage",
]
