"""Projection between flat task rows and nested task forests.

The hierarchy is never stored. Every read rebuilds it from flat rows by
re-parsing the task names, so a forest is always a function of its rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from cronograma.logging import get_logger
from cronograma.models.task import RawTask, TaskNode, TaskRow
from cronograma.outline.parser import parse_outline_key
from cronograma.outline.tree import build_forest

logger = get_logger(__name__)

CHILDREN_KEY = "Children"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def normalize_timestamp(value: datetime | None) -> str | None:
    """Format a timestamp as local ISO-8601 without offset, e.g. `2024-03-01T08:00:00`."""

    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)


def node_from_row(row: TaskRow) -> TaskNode:
    """Wrap a flat row into a node, deriving its outline keys from the name."""

    outline_key, parent_key = parse_outline_key(row.name)
    return TaskNode(attributes=row, outline_key=outline_key, parent_key=parent_key)


def node_from_raw(raw: RawTask) -> TaskNode | None:
    """Normalize a raw task into a node. Blank separator rows yield None."""

    if raw.is_blank():
        return None

    row = TaskRow(
        name=raw.name,
        duration=raw.duration_text,
        start=normalize_timestamp(raw.start),
        finish=normalize_timestamp(raw.finish),
        percentage_complete=raw.percent_complete,
    )
    return node_from_row(row)


def nodes_from_raw(raws: Iterable[RawTask]) -> list[TaskNode]:
    """Normalize raw tasks in order, dropping blank rows."""

    nodes: list[TaskNode] = []
    dropped = 0
    for raw in raws:
        node = node_from_raw(raw)
        if node is None:
            dropped += 1
            continue
        nodes.append(node)
    if dropped:
        logger.debug("Dropped %d blank rows", dropped)
    return nodes


def to_nested(forest: Sequence[TaskNode]) -> list[dict[str, Any]]:
    """Project a forest into nested column-keyed mappings.

    `Children` is present only on nodes that have children. Works without
    recursion, so outline depth is not bounded by the interpreter stack.
    """

    order: list[TaskNode] = []
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        order.append(node)
        stack.extend(reversed(node.children))

    rows: dict[int, dict[str, Any]] = {}
    for node in reversed(order):
        row = node.attributes.as_row()
        if node.children:
            row[CHILDREN_KEY] = [rows[id(c)] for c in node.children]
        rows[id(node)] = row
    return [rows[id(node)] for node in forest]


def to_flat(nodes: Iterable[TaskNode]) -> list[dict[str, Any]]:
    """Project nodes into flat column-keyed rows, ignoring any children.

    This is the persisted shape. Pass the ordered node list (not a forest) to
    keep every task.
    """

    return [node.attributes.as_row() for node in nodes]


def build_from_raw(raws: Iterable[RawTask]) -> list[TaskNode]:
    """Run the whole pipeline: normalize, parse keys and assemble the forest."""

    return build_forest(nodes_from_raw(raws))


def build_from_flat(rows: Iterable[Mapping[str, Any]]) -> list[TaskNode]:
    """Rebuild a forest from flat column-keyed rows, as produced by `to_flat`.

    Helper for callers holding `to_flat` output in memory. Stores return `RawTask`s and go through
    `build_from_raw` instead.
    """

    nodes = [node_from_row(TaskRow.model_validate(dict(row))) for row in rows]
    return build_forest(nodes)
