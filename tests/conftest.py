"""Shared fixtures: small schedule files on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

MSPDI_SAMPLE = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Project xmlns="http://schemas.microsoft.com/project">
  <Name>Plant Upgrade</Name>
  <Title>Plant Upgrade Programme</Title>
  <Tasks>
    <Task>
      <UID>0</UID><ID>0</ID>
      <Name>Plant Upgrade</Name>
      <Start>2024-03-01T08:00:00</Start>
      <Finish>2024-03-15T17:00:00</Finish>
      <Duration>PT88H0M0S</Duration>
      <PercentComplete>40</PercentComplete>
    </Task>
    <Task>
      <UID>1</UID><ID>1</ID>
      <Name>1 Planning</Name>
      <Start>2024-03-01T08:00:00</Start>
      <Finish>2024-03-04T17:00:00</Finish>
      <Duration>PT16H0M0S</Duration>
      <PercentComplete>100</PercentComplete>
      <Baseline>
        <Number>0</Number>
        <Start>2020-01-01T08:00:00</Start>
        <Duration>PT80H0M0S</Duration>
      </Baseline>
    </Task>
    <Task>
      <UID>2</UID><ID>2</ID>
      <IsNull>1</IsNull>
    </Task>
    <Task>
      <UID>3</UID><ID>3</ID>
      <Name>1.1 Kickoff</Name>
      <Start>2024-03-01T08:00:00</Start>
      <Finish>2024-03-01T12:00:00</Finish>
      <Duration>PT4H0M0S</Duration>
      <PercentComplete>100</PercentComplete>
    </Task>
    <Task>
      <UID>4</UID><ID>4</ID>
      <Name>2 Execution</Name>
      <Start>2024-03-05T08:00:00</Start>
      <Finish>2024-03-15T17:00:00</Finish>
      <Duration>PT72H0M0S</Duration>
      <PercentComplete>0</PercentComplete>
    </Task>
  </Tasks>
</Project>
"""


@pytest.fixture
def mspdi_file(tmp_path: Path) -> Path:
    path = tmp_path / "plant-upgrade.xml"
    path.write_text(MSPDI_SAMPLE, encoding="utf-8")
    return path


@pytest.fixture
def write_schedule(tmp_path: Path) -> Callable[..., Path]:
    """Write a JSON schedule file and return its path."""

    def _write(filename: str, tasks: list[dict[str, Any]], name: str | None = None) -> Path:
        path = tmp_path / filename
        payload: dict[str, Any] = {"tasks": tasks}
        if name is not None:
            payload["name"] = name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


_SAMPLE_TASKS: list[dict[str, Any]] = [
    {"Name": "Cargill Project", "Start": "2024-01-08T08:00:00", "Finish": "2024-02-02T17:00:00"},
    {"Name": "1 Design", "Duration": "5d", "Start": "2024-01-08T08:00:00", "PercentageComplete": 100},
    {"Name": "1.1 Survey", "Duration": "2d", "Start": "2024-01-08T08:00:00", "PercentageComplete": 100},
    {"Name": "1.2 Drawings", "Duration": "3d", "Start": "2024-01-10T08:00:00", "PercentageComplete": 50},
    {"Name": "", "Duration": None},
    {"Name": "2 Build", "Duration": "15d", "Start": "2024-01-15T08:00:00"},
]


@pytest.fixture
def sample_tasks() -> list[dict[str, Any]]:
    """Header row, two numbered branches and one blank separator row."""

    return [dict(t) for t in _SAMPLE_TASKS]
