"""Layout configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from choicemap.errors import ScenarioFormatError

DEFAULT_LEVEL_HEIGHT = 120
DEFAULT_NODE_WIDTH = 140
DEFAULT_NODE_HEIGHT = 44
DEFAULT_PADDING = 60


class LayoutConfig(BaseModel):
    """Pixel geometry of the tree map.

    Accepts both snake_case field names and the camelCase keys the front ends
    send (``levelHeight``, ``nodeWidth``, ``nodeHeight``, ``padding``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    level_height: float = Field(DEFAULT_LEVEL_HEIGHT, gt=0)
    node_width: float = Field(DEFAULT_NODE_WIDTH, gt=0)
    node_height: float = Field(DEFAULT_NODE_HEIGHT, gt=0)
    padding: float = Field(DEFAULT_PADDING, ge=0)

    @classmethod
    def coerce(cls, value: LayoutConfig | Mapping[str, Any] | None) -> LayoutConfig:
        """Return a config for ``value``: defaults for None, validated for a mapping."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ScenarioFormatError(f"layout config must be a mapping, got {type(value).__name__}")
        try:
            return cls.model_validate(dict(value))
        except ValidationError as exc:
            raise ScenarioFormatError(f"invalid layout config: {exc}") from exc
