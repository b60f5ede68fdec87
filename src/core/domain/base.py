"""
WireModel — базовая модель для persisted/wire форм

Python атрибуты в snake_case, wire ключи в camelCase (как в persisted state).
Все модели immutable (frozen=True): любое изменение создаёт новый экземпляр.
"""

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Immutable модель с camelCase wire алиасами."""

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }

    def to_wire(self) -> dict[str, Any]:
        """JSON-совместимый dict по wire алиасам, без None полей."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
