"""Microsoft Project XML (MSPDI) reader.

MSPDI files list every task under `Project/Tasks/Task` in outline order,
starting with the project summary task, which carries the project title and
no outline number in its name. The project name comes from `Name`, falling
back to `Title`.
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from cronograma.logging import get_logger
from cronograma.models.task import RawTask
from cronograma.readers.base import ScheduleDecodeError, ScheduleFile, ScheduleReader

logger = get_logger(__name__)

_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def format_duration(value: str, hours_per_day: float = 8.0) -> str | None:
    """Convert an MSPDI duration (`PT16H0M0S`) into working-day text (`2d`).

    Unrecognized values are returned unchanged.
    """

    m = _DURATION_RE.match(value.strip())
    if m is None or not any(m.groupdict().values()):
        return value.strip() or None

    parts = {k: float(v) if v else 0.0 for k, v in m.groupdict().items()}
    hours = parts["days"] * hours_per_day + parts["hours"] + parts["minutes"] / 60 + parts["seconds"] / 3600
    days = round(hours / hours_per_day, 2)
    return f"{days:g}d"


def _child_text(el: Tag, name: str) -> str | None:
    child = el.find(name, recursive=False)
    if child is None:
        return None
    text = child.get_text().strip()
    return text or None


def _parse_datetime(value: str | None, *, field: str, uid: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring unparseable %s %r on task uid=%s", field, value, uid)
        return None


def _parse_percent(value: str | None, *, uid: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring unparseable PercentComplete %r on task uid=%s", value, uid)
        return None


class MspdiReader(ScheduleReader):
    """Reads `.xml` project files exported by Microsoft Project and compatible tools."""

    suffixes = (".xml",)

    def __init__(self, hours_per_day: float = 8.0) -> None:
        self.hours_per_day = hours_per_day

    def read(self, path: Path) -> ScheduleFile:
        soup = BeautifulSoup(path.read_bytes(), "xml")
        project = soup.find("Project")
        if not isinstance(project, Tag):
            raise ScheduleDecodeError(f"{path.name}: not an MSPDI project file (missing <Project>)")

        name = _child_text(project, "Name") or _child_text(project, "Title")

        tasks_el = project.find("Tasks", recursive=False)
        tasks: list[RawTask] = []
        if isinstance(tasks_el, Tag):
            for task_el in tasks_el.find_all("Task", recursive=False):
                tasks.append(self._read_task(task_el))

        logger.info("Decoded %d tasks from %s", len(tasks), path.name)
        return ScheduleFile(name=name, tasks=tasks)

    def _read_task(self, el: Tag) -> RawTask:
        if _child_text(el, "IsNull") == "1":
            return RawTask()

        uid = _child_text(el, "UID")
        duration = _child_text(el, "Duration")
        return RawTask(
            name=_child_text(el, "Name"),
            duration_text=format_duration(duration, self.hours_per_day) if duration else None,
            start=_parse_datetime(_child_text(el, "Start"), field="Start", uid=uid),
            finish=_parse_datetime(_child_text(el, "Finish"), field="Finish", uid=uid),
            percent_complete=_parse_percent(_child_text(el, "PercentComplete"), uid=uid),
        )
