"""Schedule file readers.

`read_schedule` picks a reader from the file extension, the way a universal
project reader would.
"""

from __future__ import annotations

from pathlib import Path

from cronograma.readers.base import ScheduleDecodeError, ScheduleFile, ScheduleReader
from cronograma.readers.mspdi import MspdiReader
from cronograma.readers.tabular import CsvReader, JsonReader


def get_reader(filename: str, *, hours_per_day: float = 8.0) -> ScheduleReader:
    """Return the reader matching `filename`'s extension.

    Raises:
        ScheduleDecodeError: If the extension is not supported.
    """

    readers: list[ScheduleReader] = [MspdiReader(hours_per_day=hours_per_day), CsvReader(), JsonReader()]
    suffix = Path(filename).suffix.lower()
    for reader in readers:
        if suffix in reader.suffixes:
            return reader

    supported = ", ".join(s for r in readers for s in r.suffixes)
    raise ScheduleDecodeError(f"unsupported schedule format {suffix or '(none)'!r}; expected one of {supported}")


def read_schedule(path: Path, filename: str | None = None, *, hours_per_day: float = 8.0) -> ScheduleFile:
    """Decode a schedule file.

    Args:
        path: File on disk.
        filename: Original file name, used to pick the format when `path` is a temp file.
        hours_per_day: Working hours per day for duration text.
    """

    reader = get_reader(filename or path.name, hours_per_day=hours_per_day)
    return reader.read(path)


__all__ = [
    "CsvReader",
    "JsonReader",
    "MspdiReader",
    "ScheduleDecodeError",
    "ScheduleFile",
    "ScheduleReader",
    "get_reader",
    "read_schedule",
]
