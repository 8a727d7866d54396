"""Cronograma: rebuilds schedule outlines from numbered task labels."""

from __future__ import annotations

from cronograma.columns import COLUMNS
from cronograma.models import RawTask, TaskNode, TaskRow
from cronograma.outline import (
    build_forest,
    build_from_flat,
    build_from_raw,
    parse_outline_key,
    to_flat,
    to_nested,
)

__version__ = "0.1.0"

__all__ = [
    "COLUMNS",
    "RawTask",
    "TaskNode",
    "TaskRow",
    "__version__",
    "build_forest",
    "build_from_flat",
    "build_from_raw",
    "parse_outline_key",
    "to_flat",
    "to_nested",
]
