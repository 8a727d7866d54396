"""SQLite project store."""

from __future__ import annotations

import contextlib
import sqlite3
from pathlib import Path
from typing import Iterator, Sequence

from cronograma.logging import get_logger
from cronograma.models.task import RawTask
from cronograma.storage.base import (
    FlatRow,
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectRecord,
    ProjectStore,
    flat_row_values,
)

logger = get_logger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS cronograma_project (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        source_file_name TEXT NOT NULL UNIQUE,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cronograma_task (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        project_id INTEGER NOT NULL,
        task_name TEXT,
        duration_text TEXT,
        start_timestamp TEXT,
        finish_timestamp TEXT,
        percentage_complete REAL,
        FOREIGN KEY(project_id) REFERENCES cronograma_project(id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_cronograma_task_project ON cronograma_task(project_id, id)",
)

_INSERT_TASK = """
    INSERT INTO cronograma_task
        (project_id, task_name, duration_text, start_timestamp, finish_timestamp, percentage_complete)
    VALUES (?, ?, ?, ?, ?, ?)
"""


def _record(row: sqlite3.Row) -> ProjectRecord:
    return ProjectRecord(id=row["id"], name=row["name"], source_file_name=row["source_file_name"])


class SqliteProjectStore(ProjectStore):
    """Stores projects in a local SQLite file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def initialize(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            for stmt in _SCHEMA:
                conn.execute(stmt)
        logger.info("SQLite store ready at %s", self.path)

    def find_conflict(self, name: str, source_file_name: str) -> ProjectRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, source_file_name FROM cronograma_project
                WHERE name = ? OR source_file_name = ?
                ORDER BY id LIMIT 1
                """,
                (name, source_file_name),
            ).fetchone()
        return _record(row) if row else None

    def find_file_owner(self, source_file_name: str, *, exclude_id: int) -> ProjectRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, source_file_name FROM cronograma_project
                WHERE source_file_name = ? AND id <> ?
                LIMIT 1
                """,
                (source_file_name, exclude_id),
            ).fetchone()
        return _record(row) if row else None

    def _insert_rows(self, conn: sqlite3.Connection, project_id: int, rows: Sequence[FlatRow]) -> None:
        conn.executemany(
            _INSERT_TASK,
            [(project_id, *flat_row_values(r)) for r in rows],
        )

    def create_project(self, name: str, source_file_name: str, rows: Sequence[FlatRow]) -> int:
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "INSERT INTO cronograma_project (name, source_file_name) VALUES (?, ?)",
                    (name, source_file_name),
                )
                project_id = int(cur.lastrowid)  # type: ignore[arg-type]
                self._insert_rows(conn, project_id, rows)
        except sqlite3.IntegrityError as e:
            raise ProjectConflictError(f"a project with the same name or file already exists: {e}") from e
        logger.info("Created project id=%d with %d rows", project_id, len(rows))
        return project_id

    def replace_tasks(self, project_id: int, source_file_name: str, rows: Sequence[FlatRow]) -> None:
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "UPDATE cronograma_project SET source_file_name = ? WHERE id = ?",
                    (source_file_name, project_id),
                )
                if cur.rowcount == 0:
                    raise ProjectNotFoundError(project_id)
                conn.execute("DELETE FROM cronograma_task WHERE project_id = ?", (project_id,))
                self._insert_rows(conn, project_id, rows)
        except sqlite3.IntegrityError as e:
            raise ProjectConflictError(f"uniqueness violation while updating project: {e}") from e
        logger.info("Replaced rows of project id=%d (%d rows)", project_id, len(rows))

    def get_project(self, project_id: int) -> ProjectRecord:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, source_file_name FROM cronograma_project WHERE id = ?",
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
                WHERE project_id = ?
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
                "SELECT id, name, source_file_name FROM cronograma_project ORDER BY created_at DESC, id DESC"
            ).fetchall()
        return [_record(r) for r in rows]

    def delete_project(self, project_id: int) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM cronograma_task WHERE project_id = ?", (project_id,))
            cur = conn.execute("DELETE FROM cronograma_project WHERE id = ?", (project_id,))
            if cur.rowcount == 0:
                raise ProjectNotFoundError(project_id)
        logger.info("Deleted project id=%d", project_id)
