"""CLI entrypoints for Cronograma."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from cronograma.config import Settings, load_settings
from cronograma.logging import configure_logging, get_logger
from cronograma.models.project import ProjectResponse
from cronograma.outline.parser import parse_outline_key
from cronograma.outline.projector import CHILDREN_KEY, build_from_raw, to_nested
from cronograma.readers import ScheduleDecodeError, read_schedule
from cronograma.service import ProjectService
from cronograma.storage import ProjectConflictError, ProjectNotFoundError, open_store

app = typer.Typer(add_completion=False, help="Cronograma schedule outline CLI")
logger = get_logger(__name__)
console = Console()


def _settings(database_url: str | None) -> Settings:
    settings = load_settings()
    if database_url is not None:
        settings.database_url = database_url
    configure_logging(settings.log_level)
    return settings


def _service(settings: Settings) -> ProjectService:
    store = open_store(settings.database_url)
    store.initialize()
    return ProjectService(store, hours_per_day=settings.hours_per_day)


def _row_label(row: dict[str, Any]) -> str:
    label = escape(row.get("Name") or "(unnamed)")
    details = [
        str(v)
        for v in (row.get("Duration"), row.get("Start"), row.get("Finish"))
        if v is not None
    ]
    pct = row.get("PercentageComplete")
    if pct is not None:
        details.append(f"{pct:g}%")
    if details:
        label += f"  [dim]{escape(' | '.join(details))}[/dim]"
    return label


def _add_rows(tree: Tree, rows: list[dict[str, Any]]) -> None:
    for row in rows:
        branch = tree.add(_row_label(row))
        _add_rows(branch, row.get(CHILDREN_KEY, []))


def _print_rows(title: str, rows: list[dict[str, Any]]) -> None:
    tree = Tree(f"[bold]{escape(title)}[/bold]")
    _add_rows(tree, rows)
    console.print(tree)


def _print_response(response: ProjectResponse, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(response.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
    else:
        _print_rows(response.project_name, response.rows)


DatabaseOption = typer.Option(None, "--database-url", help="Overrides CRONOGRAMA_DATABASE_URL")


@app.command()
def outline(label: str = typer.Argument(..., help="Task label, e.g. '1.2.3 Review'")) -> None:
    """Show the outline key and parent key parsed from a task label."""

    key, parent = parse_outline_key(label)
    typer.echo(f"outline={key or '-'} parent={parent or '-'}")


@app.command()
def tree(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Schedule file (.xml, .csv, .json)"),
    as_json: bool = typer.Option(False, "--json", help="Print nested rows as JSON"),
) -> None:
    """Decode a schedule file and print its task hierarchy without storing it."""

    settings = _settings(None)
    try:
        schedule = read_schedule(file, hours_per_day=settings.hours_per_day)
    except ScheduleDecodeError as e:
        raise typer.BadParameter(str(e)) from e

    rows = to_nested(build_from_raw(schedule.tasks))
    if as_json:
        typer.echo(json.dumps(rows, ensure_ascii=False, indent=2))
    else:
        _print_rows(schedule.name or file.name, rows)


@app.command("import")
def import_file(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Schedule file to import"),
    name: str = typer.Option("", "--name", "-n", help="Project name (defaults to the file's project name)"),
    database_url: str | None = DatabaseOption,
) -> None:
    """Create a project from a schedule file."""

    service = _service(_settings(database_url))
    try:
        response = service.upload(file, file.name, name)
    except (ScheduleDecodeError, ProjectConflictError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    _print_response(response, as_json=False)


@app.command()
def update(
    project_id: int = typer.Argument(..., help="Project id"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="New schedule file"),
    database_url: str | None = DatabaseOption,
) -> None:
    """Replace a project's tasks with those of a new schedule file."""

    service = _service(_settings(database_url))
    try:
        response = service.update(project_id, file, file.name)
    except (ScheduleDecodeError, ProjectConflictError, ProjectNotFoundError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    _print_response(response, as_json=False)


@app.command()
def show(
    project_id: int = typer.Argument(..., help="Project id"),
    as_json: bool = typer.Option(False, "--json", help="Print the full response as JSON"),
    database_url: str | None = DatabaseOption,
) -> None:
    """Print a stored project's task hierarchy."""

    service = _service(_settings(database_url))
    try:
        response = service.get(project_id)
    except ProjectNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    _print_response(response, as_json=as_json)


@app.command("list")
def list_projects(database_url: str | None = DatabaseOption) -> None:
    """List stored projects, newest first."""

    service = _service(_settings(database_url))
    for project in service.list_projects():
        typer.echo(f"{project.id}\t{project.name}")


@app.command()
def delete(
    project_id: int = typer.Argument(..., help="Project id"),
    database_url: str | None = DatabaseOption,
) -> None:
    """Delete a project and its tasks."""

    service = _service(_settings(database_url))
    try:
        service.delete(project_id)
    except ProjectNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    logger.info("Deleted project %d", project_id)
    typer.echo(f"deleted {project_id}")


if __name__ == "__main__":
    app()
