"""Shared behaviour for result dataclasses."""

from __future__ import annotations

from dataclasses import fields
from enum import Enum
from typing import Any


def to_jsonable(value: Any) -> Any:
    """Convert enums, models and containers into plain JSON-ready values."""
    if isinstance(value, ResultModel):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.to_json() if hasattr(value, "to_json") else value.name.lower()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    return value


class ResultModel:
    """Mixin for dataclasses returned by command parsers."""

    def to_dict(self) -> dict[str, Any]:
        return {f.name: to_jsonable(getattr(self, f.name)) for f in fields(self)}
