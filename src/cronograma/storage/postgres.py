"""PostgreSQL project store (psycopg 3)."""

from __future__ import annotations

from typing import Sequence

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from cronograma.logging import get_logger
from cronograma.models.task import RawTask
from cronograma.storage.base import (
    FlatRow,
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectRecord,
    ProjectStore,
    flat_row_values,
    parse_row_timestamp,
)

logger = get_logger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS cronograma_project (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        source_file_name TEXT NOT NULL UNIQUE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cronograma_task (
        id BIGSERIAL PRIMARY KEY,
        project_id INTEGER NOT NULL REFERENCES cronograma_project(id),
        task_name TEXT,
        duration_text TEXT,
        start_timestamp TIMESTAMP,
        finish_timestamp TIMESTAMP,
        percentage_complete DOUBLE PRECISION
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_cronograma_task_project ON cronograma_task(project_id, id)",
)

_INSERT_TASK = """
    INSERT INTO cronograma_task
        (project_id, task_name, duration_text, start_timestamp, finish_timestamp, percentage_complete)
    VALUES (%s, %s, %s, %s, %s, %s)
"""


def _record(row: dict) -> ProjectRecord:
    return ProjectRecord(
        id=row["id"],
        name=row["name"],
        source_file_name=row["source_file_name"],
        created_at=row.get("created_at"),
    )


def _task_params(project_id: int, row: FlatRow) -> tuple:
    name, duration, start, finish, percentage = flat_row_values(row)
    return (project_id, name, duration, parse_row_timestamp(start), parse_row_timestamp(finish), percentage)


class PostgresProjectStore(ProjectStore):
    """Stores projects in PostgreSQL. One connection per operation."""

    def __init__(self, conninfo: str) -> None:
        self.conninfo = conninfo

    def _connect(self) -> psycopg.Connection:
        return psycopg.connect(self.conninfo, row_factory=dict_row)

    def initialize(self) -> None:
        with self._connect() as conn:
            for stmt in _SCHEMA:
                conn.execute(stmt)
        logger.info("Postgres store ready")

    def find_conflict(self, name: str, source_file_name: str) -> ProjectRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, source_file_name, created_at FROM cronograma_project
                WHERE name = %s OR source_file_name = %s
                ORDER BY id LIMIT 1
                """,
                (name, source_file_name),
            ).fetchone()
        return _record(row) if row else None

    def find_file_owner(self, source_file_name: str, *, exclude_id: int) -> ProjectRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, source_file_name, created_at FROM cronograma_project
                WHERE source_file_name = %s AND id <> %s
                LIMIT 1
                """,
                (source_file_name, exclude_id),
            ).fetchone()
        return _record(row) if row else None

    def create_project(self, name: str, source_file_name: str, rows: Sequence[FlatRow]) -> int:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "INSERT INTO cronograma_project (name, source_file_name) VALUES (%s, %s) RETURNING id",
                    (name, source_file_name),
                ).fetchone()
                project_id = int(row["id"])  # type: ignore[index]
                with conn.cursor() as cur:
                    cur.executemany(_INSERT_TASK, [_task_params(project_id, r) for r in rows])
        except errors.UniqueViolation as e:
            raise ProjectConflictError(f"a project with the same name or file already exists: {e}") from e
        logger.info("Created project id=%d with %d rows", project_id, len(rows))
        return project_id

    def replace_tasks(self, project_id: int, source_file_name: str, rows: Sequence[FlatRow]) -> None:
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "UPDATE cronograma_project SET source_file_name = %s WHERE id = %s",
                    (source_file_name, project_id),
                )
                if cur.rowcount == 0:
                    raise ProjectNotFoundError(project_id)
                conn.execute("DELETE FROM cronograma_task WHERE project_id = %s", (project_id,))
                with conn.cursor() as task_cur:
                    task_cur.executemany(_INSERT_TASK, [_task_params(project_id, r) for r in rows])
        except errors.UniqueViolation as e:
            raise ProjectConflictError(f"uniqueness violation while updating project: {e}") from e
        logger.info("Replaced rows of project id=%d (%d rows)", project_id, len(rows))

    def get_project(self, project_id: int) -> ProjectRecord:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, source_file_name, created_at FROM cronograma_project WHERE id = %s",
                (project_id,),
            ).fetchone()
        if row is None:
            raise ProjectNotFoundError(project_id)
        return _record(row)

    def load_tasks(self, project_id: int) -> list[RawTask]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT task_name, duration_text, start_timestamp, finish_timestamp, percentage_complete
                FROM cronograma_task
                WHERE project_id = %s
                ORDER BY id
                """,
                (project_id,),
            ).fetchall()
        return [
            RawTask(
                name=r["task_name"],
                duration_text=r["duration_text"],
                start=r["start_timestamp"],
                finish=r["finish_timestamp"],
                percent_complete=r["percentage_complete"],
            )
            for r in rows
        ]

    def list_projects(self) -> list[ProjectRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, name, source_file_name, created_at FROM cronograma_project
                ORDER BY created_at DESC, id DESC
                """
            ).fetchall()
        return [_record(r) for r in rows]

    def delete_project(self, project_id: int) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM cronograma_task WHERE project_id = %s", (project_id,))
            cur = conn.execute("DELETE FROM cronograma_project WHERE id = %s", (project_id,))
            if cur.rowcount == 0:
                raise ProjectNotFoundError(project_id)
        logger.info("Deleted project id=%d", project_id)
