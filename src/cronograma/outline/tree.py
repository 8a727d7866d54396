"""Forest assembly from outline-keyed task nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from cronograma.logging import get_logger
from cronograma.models.task import TaskNode

logger = get_logger(__name__)


def _has_key(key: str | None) -> bool:
    return key is not None and bool(key.strip())


@dataclass
class Layout:
    """Index-based tree shape over an input sequence.

    Nodes are referred to by their position in the input; no node is touched
    until the layout is complete.
    """

    roots: list[int] = field(default_factory=list)
    children: dict[int, list[int]] = field(default_factory=dict)

    def attach(self, parent: int, child: int) -> None:
        self.children.setdefault(parent, []).append(child)


def _index_by_outline_key(nodes: Sequence[TaskNode]) -> dict[str, int]:
    # First occurrence wins as the attach point for a key
    index: dict[str, int] = {}
    for i, node in enumerate(nodes):
        if _has_key(node.outline_key):
            index.setdefault(node.outline_key, i)  # type: ignore[arg-type]
    return index


def _find_header(nodes: Sequence[TaskNode]) -> int | None:
    for i, node in enumerate(nodes):
        if not _has_key(node.outline_key):
            return i
    return None


def plan_layout(nodes: Sequence[TaskNode]) -> Layout:
    """Compute root and child positions for `nodes`.

    The first node without an outline key is the header: it is the first root
    and adopts every numbered node whose parent key cannot be resolved. Other
    un-numbered nodes become roots of their own.
    """

    by_key = _index_by_outline_key(nodes)
    header = _find_header(nodes)

    layout = Layout()
    if header is not None:
        layout.roots.append(header)

    for i, node in enumerate(nodes):
        if i == header:
            continue

        if not _has_key(node.outline_key):
            layout.roots.append(i)
            continue

        parent = by_key.get(node.parent_key) if _has_key(node.parent_key) else None  # type: ignore[arg-type]
        if parent is not None:
            layout.attach(parent, i)
        elif header is not None:
            layout.attach(header, i)
        else:
            layout.roots.append(i)

    return layout


def build_forest(nodes: Sequence[TaskNode]) -> list[TaskNode]:
    """Assemble an ordered forest from a flat, ordered node sequence.

    Sibling order follows input order. The input nodes are left untouched; the
    returned trees are built from copies, so building twice from the same input
    yields two independent forests.

    Args:
        nodes: Nodes carrying parsed outline/parent keys, in schedule order.

    Returns:
        Root nodes with their `children` populated.
    """

    if not nodes:
        return []

    layout = plan_layout(nodes)

    # Pre-order walk; copying in reverse builds every child before its parent
    order: list[int] = []
    stack = list(reversed(layout.roots))
    while stack:
        i = stack.pop()
        order.append(i)
        stack.extend(reversed(layout.children.get(i, [])))

    built: dict[int, TaskNode] = {}
    for i in reversed(order):
        kids = [built[c] for c in layout.children.get(i, [])]
        built[i] = nodes[i].model_copy(update={"children": kids})

    forest = [built[i] for i in layout.roots]
    logger.debug("Built forest: %d nodes, %d roots", len(nodes), len(forest))
    return forest
