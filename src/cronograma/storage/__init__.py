"""Project persistence."""

from __future__ import annotations

from pathlib import Path

from cronograma.storage.base import (
    FlatRow,
    ProjectConflictError,
    ProjectNotFoundError,
    ProjectRecord,
    ProjectStore,
)
from cronograma.storage.sqlite import SqliteProjectStore

_SQLITE_PREFIX = "sqlite:///"
_POSTGRES_PREFIXES = ("postgresql://", "postgres://")


def open_store(database_url: str) -> ProjectStore:
    """Create a store for `database_url`.

    Supported: `sqlite:///path.db` and `postgresql://...`.
    The caller is expected to run `initialize()` once on the result.
    """

    if database_url.startswith(_SQLITE_PREFIX):
        return SqliteProjectStore(Path(database_url[len(_SQLITE_PREFIX):]))
    if database_url.startswith(_POSTGRES_PREFIXES):
        from cronograma.storage.postgres import PostgresProjectStore

        return PostgresProjectStore(database_url)
    raise ValueError(f"unsupported database url: {database_url!r}")


__all__ = [
    "FlatRow",
    "ProjectConflictError",
    "ProjectNotFoundError",
    "ProjectRecord",
    "ProjectStore",
    "SqliteProjectStore",
    "open_store",
]
