"""Schema versions — закрытое множество версий persisted passive state.

Discriminant "version" классифицируется один раз в SchemaVersion,
дальше обработка идёт исчерпывающе по enum (typing.assert_never).
"""

from enum import Enum
from typing import Any, Mapping


class SchemaVersion(str, Enum):
    """Версия persisted формы блока пассивных инвестиций.

    UNVERSIONED: до введения версий (поле version отсутствует или пустое)
    V1: "1.0" — без hawlStatus / displayProperties
    V2: "2.0" — каноничная форма
    UNRECOGNIZED: любое другое значение, миграция невозможна
    """
    UNVERSIONED = "unversioned"
    V1 = "1.0"
    V2 = "2.0"
    UNRECOGNIZED = "unrecognized"


_KNOWN_TAGS = {
    SchemaVersion.V1.value: SchemaVersion.V1,
    SchemaVersion.V2.value: SchemaVersion.V2,
}


def classify_version(raw: Mapping[str, Any]) -> SchemaVersion:
    """Классификация discriminant'а version.

    Args:
        raw: persisted форма (уже проверено, что это mapping)

    Returns:
        SchemaVersion; пустые значения (None, "", 0, False) → UNVERSIONED
    """
    tag = raw.get("version")

    if tag is None or tag == "" or tag is False or tag == 0:
        return SchemaVersion.UNVERSIONED

    if isinstance(tag, str):
        return _KNOWN_TAGS.get(tag, SchemaVersion.UNRECOGNIZED)

    return SchemaVersion.UNRECOGNIZED
