"""Persistence interface for projects and their flat task rows.

Only flat rows are stored; the hierarchy is rebuilt on every read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Sequence

from cronograma.models.task import RawTask

# A flat column-keyed row as produced by `to_flat`
FlatRow = Mapping[str, Any]


class ProjectNotFoundError(RuntimeError):
    """Raised when a project id does not exist."""

    def __init__(self, project_id: int) -> None:
        super().__init__(f"project with id {project_id} not found")
        self.project_id = project_id


class ProjectConflictError(RuntimeError):
    """Raised when a project name or source file is already taken."""


@dataclass
class ProjectRecord:
    """Stored project metadata."""

    id: int
    name: str
    source_file_name: str
    created_at: datetime | None = None


class ProjectStore(ABC):
    """Storage backend for projects.

    Callers run `initialize()` once before first use. Every write that touches
    task rows is a single transaction: readers see either the old rows or the
    new ones, never a mix.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Create tables and indexes if missing."""

    @abstractmethod
    def find_conflict(self, name: str, source_file_name: str) -> ProjectRecord | None:
        """Return a project using `name` or `source_file_name`, if any."""

    @abstractmethod
    def find_file_owner(self, source_file_name: str, *, exclude_id: int) -> ProjectRecord | None:
        """Return another project already using `source_file_name`, if any."""

    @abstractmethod
    def create_project(self, name: str, source_file_name: str, rows: Sequence[FlatRow]) -> int:
        """Insert a project and its rows atomically. Returns the new project id.

        Raises:
            ProjectConflictError: On a uniqueness violation.
        """

    @abstractmethod
    def replace_tasks(self, project_id: int, source_file_name: str, rows: Sequence[FlatRow]) -> None:
        """Swap all rows of a project and record its new source file, atomically.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            ProjectConflictError: On a uniqueness violation.
        """

    @abstractmethod
    def get_project(self, project_id: int) -> ProjectRecord:
        """Fetch project metadata.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """

    @abstractmethod
    def load_tasks(self, project_id: int) -> list[RawTask]:
        """Load a project's rows in insertion order."""

    @abstractmethod
    def list_projects(self) -> list[ProjectRecord]:
        """List projects, newest first."""

    @abstractmethod
    def delete_project(self, project_id: int) -> None:
        """Delete a project and all of its rows.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """


def flat_row_values(row: FlatRow) -> tuple[Any, Any, Any, Any, Any]:
    """Return (name, duration, start, finish, percentage) of a flat row. Missing keys are None."""

    return (
        row.get("Name"),
        row.get("Duration"),
        row.get("Start"),
        row.get("Finish"),
        row.get("PercentageComplete"),
    )


def parse_row_timestamp(value: str | None) -> datetime | None:
    """Parse a normalized row timestamp back into a datetime."""

    return datetime.fromisoformat(value) if value else None
