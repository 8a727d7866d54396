"""Project use-cases: upload, update, read, list and delete.

Write paths decode a schedule file, drop blank rows and persist the flat rows;
every response rebuilds the nested rows from those same flat rows.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from cronograma.columns import column_definitions
from cronograma.logging import get_logger, project_context
from cronograma.models.project import ProjectResponse, ProjectSummary
from cronograma.models.task import RawTask, TaskNode
from cronograma.outline.projector import build_from_raw, nodes_from_raw, to_flat, to_nested
from cronograma.outline.tree import build_forest
from cronograma.readers import read_schedule
from cronograma.storage.base import ProjectConflictError, ProjectStore

logger = get_logger(__name__)


def _response(project_name: str, nodes: Sequence[TaskNode]) -> ProjectResponse:
    return ProjectResponse(
        project_name=project_name,
        columns=column_definitions(),
        rows=to_nested(build_forest(nodes)),
    )


def conflict_message(
    *,
    existing_id: int,
    existing_name: str,
    existing_file: str,
    name: str,
    source_file_name: str,
) -> str | None:
    """Describe why a new project clashes with an existing one, or None if it does not."""

    name_conflict = existing_name == name
    file_conflict = existing_file == source_file_name
    if name_conflict and file_conflict:
        return (
            f"A project named '{existing_name}' with file '{existing_file}' already exists "
            f"(id {existing_id})."
        )
    if name_conflict:
        return f"A project named '{existing_name}' already exists (id {existing_id})."
    if file_conflict:
        return f"File '{existing_file}' is already used by project '{existing_name}' (id {existing_id})."
    return None


class ProjectService:
    """Coordinates schedule decoding, outline reconstruction and storage."""

    def __init__(self, store: ProjectStore, *, hours_per_day: float = 8.0) -> None:
        self.store = store
        self.hours_per_day = hours_per_day

    def upload(self, path: Path, source_file_name: str, project_name: str | None = None) -> ProjectResponse:
        """Create a project from a schedule file.

        The project name is, in order of precedence: `project_name`, the name
        stored in the file, the uploaded file name.

        Raises:
            ScheduleDecodeError: If the file cannot be decoded.
            ProjectConflictError: If the name or file is already in use.
        """

        schedule = read_schedule(path, source_file_name, hours_per_day=self.hours_per_day)
        final_name = (project_name or "").strip() or schedule.name or source_file_name

        with project_context(project=final_name, op="upload"):
            nodes = nodes_from_raw(schedule.tasks)

            existing = self.store.find_conflict(final_name, source_file_name)
            if existing is not None:
                msg = conflict_message(
                    existing_id=existing.id,
                    existing_name=existing.name,
                    existing_file=existing.source_file_name,
                    name=final_name,
                    source_file_name=source_file_name,
                )
                if msg:
                    logger.info("Upload rejected: %s", msg)
                    raise ProjectConflictError(msg)

            # Built before persisting so a response failure cannot leave a stored project
            response = _response(final_name, nodes)
            project_id = self.store.create_project(final_name, source_file_name, to_flat(nodes))
            logger.info("Uploaded project id=%d (%d tasks)", project_id, len(nodes))
            return response

    def update(self, project_id: int, path: Path, source_file_name: str) -> ProjectResponse:
        """Replace a project's tasks with those of a new schedule file. The name is kept.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            ProjectConflictError: If the file is already used by another project.
            ScheduleDecodeError: If the file cannot be decoded.
        """

        with project_context(project=project_id, op="update"):
            record = self.store.get_project(project_id)

            owner = self.store.find_file_owner(source_file_name, exclude_id=project_id)
            if owner is not None:
                msg = f"File '{source_file_name}' is already used by project '{owner.name}' (id {owner.id})."
                logger.info("Update rejected: %s", msg)
                raise ProjectConflictError(msg)

            schedule = read_schedule(path, source_file_name, hours_per_day=self.hours_per_day)
            nodes = nodes_from_raw(schedule.tasks)

            response = _response(record.name, nodes)
            self.store.replace_tasks(project_id, source_file_name, to_flat(nodes))
            logger.info("Updated project id=%d (%d tasks)", project_id, len(nodes))
            return response

    def get(self, project_id: int) -> ProjectResponse:
        """Load a project and rebuild its task hierarchy from the stored rows.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """

        with project_context(project=project_id, op="read"):
            record = self.store.get_project(project_id)
            tasks: list[RawTask] = self.store.load_tasks(project_id)
            return ProjectResponse(
                project_name=record.name,
                columns=column_definitions(),
                rows=to_nested(build_from_raw(tasks)),
            )

    def list_projects(self) -> list[ProjectSummary]:
        """List projects, newest first."""

        return [ProjectSummary(id=r.id, name=r.name) for r in self.store.list_projects()]

    def delete(self, project_id: int) -> None:
        """Delete a project and its tasks.

        Raises:
            ProjectNotFoundError: If the project does not exist.
        """

        with project_context(project=project_id, op="delete"):
            self.store.delete_project(project_id)
