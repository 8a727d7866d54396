"""Outline key extraction from task labels.

Schedule exports carry their hierarchy only as a numeric prefix in the task
name ("1", "1.2", "1.2.3) Review"). This module turns such a label into the
task's outline key and the key of its presumed parent.
"""

from __future__ import annotations

import re
from typing import NamedTuple

_OUTLINE_TOKEN_RE = re.compile(r"[0-9.]+")


class OutlineKey(NamedTuple):
    """Outline position parsed from a label. Both fields are None when absent."""

    outline_key: str | None
    parent_key: str | None


NO_OUTLINE = OutlineKey(None, None)


def parse_outline_key(label: str | None) -> OutlineKey:
    """Extract the outline key and parent key from a task label.

    The first space-delimited token of the label is taken, trailing `.` and `)`
    are stripped, and what remains must consist of digits and dots only.

    Args:
        label: Raw task name. May be None.

    Returns:
        OutlineKey: e.g. `("1.2.3", "1.2")` for "1.2.3 Do the thing"; `(None, None)`
        for labels without a numeric prefix.
    """

    if label is None or not label.strip():
        return NO_OUTLINE

    trimmed = label.lstrip()
    space_index = trimmed.find(" ")
    if space_index <= 0:
        return NO_OUTLINE

    token = trimmed[:space_index].rstrip(".)")
    if not token or _OUTLINE_TOKEN_RE.fullmatch(token) is None:
        return NO_OUTLINE

    last_dot = token.rfind(".")
    parent = token[:last_dot] if last_dot > 0 else None
    return OutlineKey(token, parent)
