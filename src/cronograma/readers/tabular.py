"""CSV and JSON schedule readers."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from cronograma.logging import get_logger
from cronograma.readers.base import ScheduleDecodeError, ScheduleFile, ScheduleReader, raw_task_from_mapping

logger = get_logger(__name__)


class CsvReader(ScheduleReader):
    """Reads a CSV export with one task per row and a header line.

    Recognized headers: Name, Duration, Start, Finish, PercentageComplete
    (case and spacing are ignored; a few common aliases are accepted).
    """

    suffixes = (".csv",)

    def read(self, path: Path) -> ScheduleFile:
        text = path.read_text(encoding="utf-8-sig")
        reader = csv.DictReader(io.StringIO(text))
        if not reader.fieldnames:
            raise ScheduleDecodeError(f"{path.name}: missing CSV header")

        tasks = []
        for line_no, row in enumerate(reader, start=2):
            try:
                tasks.append(raw_task_from_mapping(row))
            except ScheduleDecodeError as e:
                raise ScheduleDecodeError(f"{path.name}:{line_no}: {e}") from e

        logger.info("Decoded %d tasks from %s", len(tasks), path.name)
        return ScheduleFile(name=None, tasks=tasks)


class JsonReader(ScheduleReader):
    """Reads `{"name": ..., "tasks": [...]}` documents or a bare task list."""

    suffixes = (".json",)

    def read(self, path: Path) -> ScheduleFile:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ScheduleDecodeError(f"{path.name}: invalid JSON ({e.msg})") from e

        name = None
        if isinstance(data, dict):
            name = data.get("name") or None
            if name is not None and not isinstance(name, str):
                raise ScheduleDecodeError(f"{path.name}: project name must be a string")
            data = data.get("tasks", [])
        if not isinstance(data, list):
            raise ScheduleDecodeError(f"{path.name}: expected a list of tasks")

        tasks = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                raise ScheduleDecodeError(f"{path.name}: task #{i} is not an object")
            try:
                tasks.append(raw_task_from_mapping(item))
            except ScheduleDecodeError as e:
                raise ScheduleDecodeError(f"{path.name}: task #{i}: {e}") from e

        logger.info("Decoded %d tasks from %s", len(tasks), path.name)
        return ScheduleFile(name=name, tasks=tasks)
