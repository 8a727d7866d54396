"""Tests for the SQLite project store."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from cronograma.models.task import TaskRow
from cronograma.outline.projector import node_from_row, to_flat
from cronograma.storage import (
    ProjectConflictError,
    ProjectNotFoundError,
    SqliteProjectStore,
    open_store,
)


@pytest.fixture
def store(tmp_path: Path) -> SqliteProjectStore:
    s = SqliteProjectStore(tmp_path / "db" / "cronograma.db")
    s.initialize()
    return s


def _rows(*names: str) -> list[dict[str, Any]]:
    return to_flat(
        node_from_row(TaskRow(name=n, duration="1d", start="2024-01-08T08:00:00", percentage_complete=float(i)))
        for i, n in enumerate(names)
    )


def test_initialize_is_repeatable(store: SqliteProjectStore) -> None:
    """It should tolerate being initialized more than once."""

    store.initialize()
    assert store.list_projects() == []


def test_create_and_load_preserves_order_and_values(store: SqliteProjectStore) -> None:
    """It should return stored rows in insertion order as raw tasks."""

    project_id = store.create_project("Plant", "plant.xml", _rows("Plant", "1 A", "1.1 B"))

    record = store.get_project(project_id)
    assert record.name == "Plant"
    assert record.source_file_name == "plant.xml"

    tasks = store.load_tasks(project_id)
    assert [t.name for t in tasks] == ["Plant", "1 A", "1.1 B"]
    assert tasks[1].start == datetime(2024, 1, 8, 8)
    assert tasks[1].finish is None
    assert tasks[2].percent_complete == 2.0
    assert tasks[0].duration_text == "1d"


def test_find_conflict_by_name_or_file(store: SqliteProjectStore) -> None:
    """It should find a project sharing either the name or the file."""

    project_id = store.create_project("Plant", "plant.xml", [])

    assert store.find_conflict("Plant", "other.xml").id == project_id  # type: ignore[union-attr]
    assert store.find_conflict("Other", "plant.xml").id == project_id  # type: ignore[union-attr]
    assert store.find_conflict("Other", "other.xml") is None


def test_unique_violation_raises_conflict(store: SqliteProjectStore) -> None:
    """It should surface duplicate names as a conflict error."""

    store.create_project("Plant", "plant.xml", [])

    with pytest.raises(ProjectConflictError):
        store.create_project("Plant", "another.xml", _rows("x"))
    assert len(store.list_projects()) == 1


def test_find_file_owner_excludes_self(store: SqliteProjectStore) -> None:
    """It should ignore the project being updated when looking for file owners."""

    first = store.create_project("A", "a.xml", [])
    second = store.create_project("B", "b.xml", [])

    assert store.find_file_owner("a.xml", exclude_id=first) is None
    assert store.find_file_owner("a.xml", exclude_id=second).id == first  # type: ignore[union-attr]


def test_replace_tasks_swaps_rows_and_file(store: SqliteProjectStore) -> None:
    """It should replace all rows and record the new source file."""

    project_id = store.create_project("Plant", "plant-v1.xml", _rows("Plant", "1 Old"))

    store.replace_tasks(project_id, "plant-v2.xml", _rows("Plant", "1 New", "2 Newer"))

    assert store.get_project(project_id).source_file_name == "plant-v2.xml"
    assert [t.name for t in store.load_tasks(project_id)] == ["Plant", "1 New", "2 Newer"]


def test_replace_tasks_is_atomic(store: SqliteProjectStore) -> None:
    """It should leave the previous rows intact when the replacement fails midway."""

    project_id = store.create_project("Plant", "plant.xml", _rows("Plant", "1 Old"))
    bad = {"Name": "2 Broken", "Duration": None, "PercentageComplete": object()}

    with pytest.raises(sqlite3.Error):
        store.replace_tasks(project_id, "plant-v2.xml", [*_rows("1 New"), bad])

    assert [t.name for t in store.load_tasks(project_id)] == ["Plant", "1 Old"]
    assert store.get_project(project_id).source_file_name == "plant.xml"


def test_replace_tasks_missing_project(store: SqliteProjectStore) -> None:
    """It should raise not-found when replacing rows of an unknown project."""

    with pytest.raises(ProjectNotFoundError):
        store.replace_tasks(99, "x.xml", [])


def test_list_projects_newest_first(store: SqliteProjectStore) -> None:
    """It should list the most recently created project first."""

    store.create_project("A", "a.xml", [])
    store.create_project("B", "b.xml", [])

    assert [p.name for p in store.list_projects()] == ["B", "A"]


def test_delete_project_removes_rows(store: SqliteProjectStore) -> None:
    """It should delete the project and its rows, then report it missing."""

    project_id = store.create_project("Plant", "plant.xml", _rows("Plant"))

    store.delete_project(project_id)

    assert store.load_tasks(project_id) == []
    with pytest.raises(ProjectNotFoundError):
        store.get_project(project_id)
    with pytest.raises(ProjectNotFoundError):
        store.delete_project(project_id)


def test_open_store_selects_adapter(tmp_path: Path) -> None:
    """It should pick the adapter from the database URL."""

    store = open_store(f"sqlite:///{tmp_path / 'x.db'}")
    assert isinstance(store, SqliteProjectStore)
    assert store.path == tmp_path / "x.db"

    with pytest.raises(ValueError):
        open_store("mysql://localhost/db")


def test_stores_rows_missing_optional_keys(store: SqliteProjectStore) -> None:
    """It should store flat rows whose absent timestamps were left out."""

    project_id = store.create_project("Plant", "plant.xml", [{"Name": "1 A", "Duration": None, "PercentageComplete": None}])

    (task,) = store.load_tasks(project_id)
    assert task.name == "1 A"
    assert task.start is None and task.finish is None and task.percent_complete is None
