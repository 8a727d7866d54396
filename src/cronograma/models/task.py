"""Task models.

Three shapes move through the system:

- `RawTask`: one schedule line-item as the file decoder or the store produced it.
- `TaskRow`: the flat attribute record (`Name`, `Duration`, `Start`, `Finish`,
  `PercentageComplete`) that is persisted and returned to clients.
- `TaskNode`: a `TaskRow` plus its parsed outline keys and owned children.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Timestamp keys are left out of a serialized row when absent
_OPTIONAL_TIMESTAMP_KEYS = ("Start", "Finish")


class RawTask(BaseModel):
    """A schedule line-item before normalization."""

    name: str | None = None
    duration_text: str | None = None
    start: datetime | None = None
    finish: datetime | None = None
    percent_complete: float | None = None

    def is_blank(self) -> bool:
        """Return True for separator rows carrying no name, dates or duration."""

        return (
            (self.name is None or not self.name.strip())
            and self.start is None
            and self.finish is None
            and self.duration_text is None
        )


class TaskRow(BaseModel):
    """Flat task attributes, keyed by the fixed column keys when serialized."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, alias="Name")
    duration: str | None = Field(default=None, alias="Duration")
    start: str | None = Field(default=None, alias="Start")
    finish: str | None = Field(default=None, alias="Finish")
    percentage_complete: float | None = Field(default=None, alias="PercentageComplete")

    def as_row(self) -> dict[str, Any]:
        """Serialize to a column-keyed mapping."""

        row = self.model_dump(by_alias=True)
        for key in _OPTIONAL_TIMESTAMP_KEYS:
            if row[key] is None:
                del row[key]
        return row


class TaskNode(BaseModel):
    """A task together with its outline position and children."""

    attributes: TaskRow
    outline_key: str | None = None
    parent_key: str | None = None

    children: list["TaskNode"] = Field(default_factory=list)


Forest = list[TaskNode]
