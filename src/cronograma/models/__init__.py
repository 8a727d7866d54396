"""Pydantic models used across the project."""

from __future__ import annotations

from cronograma.models.project import ColumnDefinition, ColumnType, ProjectResponse, ProjectSummary
from cronograma.models.task import Forest, RawTask, TaskNode, TaskRow

__all__ = [
    "ColumnDefinition",
    "ColumnType",
    "Forest",
    "ProjectResponse",
    "ProjectSummary",
    "RawTask",
    "TaskNode",
    "TaskRow",
]
