"""Outline reconstruction: key parsing, forest assembly and row projection."""

from __future__ import annotations

from cronograma.outline.parser import NO_OUTLINE, OutlineKey, parse_outline_key
from cronograma.outline.projector import (
    CHILDREN_KEY,
    build_from_flat,
    build_from_raw,
    node_from_raw,
    node_from_row,
    nodes_from_raw,
    normalize_timestamp,
    to_flat,
    to_nested,
)
from cronograma.outline.tree import build_forest

__all__ = [
    "CHILDREN_KEY",
    "NO_OUTLINE",
    "OutlineKey",
    "build_forest",
    "build_from_flat",
    "build_from_raw",
    "node_from_raw",
    "node_from_row",
    "nodes_from_raw",
    "normalize_timestamp",
    "parse_outline_key",
    "to_flat",
    "to_nested",
]
