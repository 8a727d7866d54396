"""Tests for ProjectService use-cases."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from cronograma.readers import ScheduleDecodeError
from cronograma.service import ProjectService
from cronograma.storage import ProjectConflictError, ProjectNotFoundError, SqliteProjectStore


@pytest.fixture
def service(tmp_path: Path) -> ProjectService:
    store = SqliteProjectStore(tmp_path / "cronograma.db")
    store.initialize()
    return ProjectService(store)


def _names(rows: list[dict[str, Any]]) -> list[Any]:
    return [(r["Name"], _names(r.get("Children", []))) for r in rows]


def test_upload_builds_hierarchy_and_stores_flat_rows(
    service: ProjectService, write_schedule: Callable[..., Path], sample_tasks: list[dict[str, Any]]
) -> None:
    """It should respond with nested rows and persist only non-blank flat rows."""

    path = write_schedule("cargill.json", sample_tasks)

    response = service.upload(path, "cargill.json", "Cargill")

    assert response.project_name == "Cargill"
    assert [c.key for c in response.columns] == ["Name", "Duration", "Start", "Finish", "PercentageComplete"]
    assert _names(response.rows) == [
        (
            "Cargill Project",
            [("1 Design", [("1.1 Survey", []), ("1.2 Drawings", [])]), ("2 Build", [])],
        )
    ]

    project_id = service.list_projects()[0].id
    stored = service.store.load_tasks(project_id)
    assert len(stored) == 5
    assert all(t.name for t in stored)


def test_get_rebuilds_same_rows_as_upload(
    service: ProjectService, write_schedule: Callable[..., Path], sample_tasks: list[dict[str, Any]]
) -> None:
    """It should rebuild the identical nested rows from storage."""

    path = write_schedule("cargill.json", sample_tasks)
    uploaded = service.upload(path, "cargill.json", "Cargill")
    project_id = service.list_projects()[0].id

    fetched = service.get(project_id)

    assert fetched.project_name == "Cargill"
    assert fetched.rows == uploaded.rows


@pytest.mark.parametrize(
    ("explicit", "file_name", "expected"),
    [
        ("  Given Name ", "Doc Name", "Given Name"),
        ("", "Doc Name", "Doc Name"),
        ("   ", None, "plan.json"),
    ],
)
def test_upload_name_precedence(
    service: ProjectService,
    write_schedule: Callable[..., Path],
    explicit: str,
    file_name: str | None,
    expected: str,
) -> None:
    """It should prefer the explicit name, then the file's project name, then the file name."""

    path = write_schedule("plan.json", [{"Name": "1 A"}], name=file_name)

    assert service.upload(path, "plan.json", explicit).project_name == expected


def test_upload_conflict_messages(service: ProjectService, write_schedule: Callable[..., Path]) -> None:
    """It should reject duplicate names and files with a message naming the clash."""

    path = write_schedule("plan.json", [{"Name": "1 A"}])
    service.upload(path, "plan.json", "Plant")

    with pytest.raises(ProjectConflictError, match="named 'Plant' with file 'plan.json'"):
        service.upload(path, "plan.json", "Plant")
    with pytest.raises(ProjectConflictError, match="named 'Plant' already exists"):
        service.upload(path, "other.json", "Plant")
    with pytest.raises(ProjectConflictError, match="File 'plan.json' is already used by project 'Plant'"):
        service.upload(path, "plan.json", "Other")

    assert len(service.list_projects()) == 1


def test_update_replaces_tasks_and_keeps_name(
    service: ProjectService, write_schedule: Callable[..., Path]
) -> None:
    """It should swap the tasks but keep the stored project name."""

    v1 = write_schedule("v1.json", [{"Name": "Header"}, {"Name": "1 Old"}], name="Ignored")
    v2 = write_schedule("v2.json", [{"Name": "Header"}, {"Name": "1 New"}, {"Name": "1.1 Sub"}], name="Also ignored")
    service.upload(v1, "v1.json", "Plant")
    project_id = service.list_projects()[0].id

    response = service.update(project_id, v2, "v2.json")

    assert response.project_name == "Plant"
    assert _names(response.rows) == [("Header", [("1 New", [("1.1 Sub", [])])])]
    assert service.get(project_id).rows == response.rows
    assert service.store.get_project(project_id).source_file_name == "v2.json"


def test_update_rejects_file_of_another_project(
    service: ProjectService, write_schedule: Callable[..., Path]
) -> None:
    """It should refuse a file already attached to a different project."""

    a = write_schedule("a.json", [{"Name": "1 A"}])
    b = write_schedule("b.json", [{"Name": "1 B"}])
    service.upload(a, "a.json", "A")
    service.upload(b, "b.json", "B")
    b_id = next(p.id for p in service.list_projects() if p.name == "B")

    with pytest.raises(ProjectConflictError, match="already used by project 'A'"):
        service.update(b_id, a, "a.json")

    # Re-uploading its own file is fine
    service.update(b_id, b, "b.json")


def test_update_unknown_project(service: ProjectService, write_schedule: Callable[..., Path]) -> None:
    """It should report a missing project before touching storage."""

    path = write_schedule("a.json", [{"Name": "1 A"}])

    with pytest.raises(ProjectNotFoundError):
        service.update(42, path, "a.json")


def test_upload_undecodable_file(service: ProjectService, tmp_path: Path) -> None:
    """It should propagate decode errors and store nothing."""

    path = tmp_path / "plan.mpp"
    path.write_bytes(b"\xd0\xcf\x11\xe0")

    with pytest.raises(ScheduleDecodeError):
        service.upload(path, "plan.mpp", "Plant")
    assert service.list_projects() == []


def test_delete_then_get(service: ProjectService, write_schedule: Callable[..., Path]) -> None:
    """It should delete a project so later reads report it missing."""

    path = write_schedule("a.json", [{"Name": "1 A"}])
    service.upload(path, "a.json", "A")
    project_id = service.list_projects()[0].id

    service.delete(project_id)

    with pytest.raises(ProjectNotFoundError):
        service.get(project_id)


def test_upload_with_invalid_project_name_stores_nothing(service: ProjectService, tmp_path: Path) -> None:
    """It should fail before persisting when the file's project name is invalid."""

    path = tmp_path / "s.json"
    path.write_text('{"name": 5, "tasks": [{"Name": "1 A"}]}', encoding="utf-8")

    with pytest.raises(ScheduleDecodeError):
        service.upload(path, "s.json")
    assert service.list_projects() == []


def test_failed_response_leaves_nothing_stored(
    service: ProjectService, write_schedule: Callable[..., Path], monkeypatch: pytest.MonkeyPatch
) -> None:
    """It should build the response before writing, so a response error stores nothing."""

    import cronograma.service as service_module

    def broken_response(*_: Any) -> Any:
        raise RuntimeError("response failed")

    monkeypatch.setattr(service_module, "_response", broken_response)
    path = write_schedule("a.json", [{"Name": "1 A"}])

    with pytest.raises(RuntimeError, match="response failed"):
        service.upload(path, "a.json", "A")
    assert service.list_projects() == []
