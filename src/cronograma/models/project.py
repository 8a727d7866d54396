"""Project-level response models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ColumnType = Literal["string", "duration", "date", "number"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ColumnDefinition(_CamelModel):
    """Describes one attribute column of the task grid."""

    key: str
    label: str
    type: ColumnType


class ProjectSummary(_CamelModel):
    """Project listing entry."""

    id: int
    name: str


class ProjectResponse(_CamelModel):
    """A project with its column metadata and nested task rows."""

    project_name: str
    columns: list[ColumnDefinition] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
