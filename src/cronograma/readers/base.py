"""Common pieces for schedule file readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from cronograma.models.task import RawTask


class ScheduleDecodeError(RuntimeError):
    """Raised when a schedule file cannot be decoded."""


@dataclass
class ScheduleFile:
    """Decoded schedule: optional project name plus ordered line-items."""

    name: str | None = None
    tasks: list[RawTask] = field(default_factory=list)


class ScheduleReader(ABC):
    """Decoder for one schedule file format."""

    suffixes: tuple[str, ...] = ()

    @abstractmethod
    def read(self, path: Path) -> ScheduleFile:
        """Decode the file at `path`."""


# Normalized header/key -> RawTask field
_FIELD_ALIASES: dict[str, str] = {
    "name": "name",
    "taskname": "name",
    "task": "name",
    "duration": "duration_text",
    "durationtext": "duration_text",
    "start": "start",
    "startdate": "start",
    "finish": "finish",
    "finishdate": "finish",
    "end": "finish",
    "percentagecomplete": "percent_complete",
    "percentcomplete": "percent_complete",
    "%complete": "percent_complete",
    "complete": "percent_complete",
}


def _normalize_key(key: str) -> str:
    return "".join(key.split()).replace("_", "").lower()


def raw_task_from_mapping(data: Mapping[str, Any]) -> RawTask:
    """Build a RawTask from a loosely keyed mapping (CSV row, JSON object).

    Unknown keys are ignored; empty strings count as absent.

    Raises:
        ScheduleDecodeError: If a value cannot be coerced (e.g. a bad date).
    """

    fields: dict[str, Any] = {}
    for key, value in data.items():
        if key is None:
            continue
        target = _FIELD_ALIASES.get(_normalize_key(str(key)))
        if target is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
            if target == "percent_complete":
                value = value.rstrip("%").strip()
        fields[target] = value

    try:
        return RawTask.model_validate(fields)
    except ValidationError as e:
        raise ScheduleDecodeError(f"invalid task record: {e.errors()[0]['msg']}") from e
