"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


_project_var: contextvars.ContextVar[str] = contextvars.ContextVar("cronograma_project", default="-")
_op_var: contextvars.ContextVar[str] = contextvars.ContextVar("cronograma_op", default="-")


class _ContextFilter(logging.Filter):
    """Inject project context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.project = _project_var.get()  # type: ignore[attr-defined]
        record.op = _op_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def project_context(*, project: str | int, op: str | None = None) -> Any:
    """Temporarily bind project context for structured logging.

    Args:
        project: Project identifier or name being processed.
        op: Optional operation name (upload, update, read, delete).
    """

    token_project = _project_var.set(str(project))
    token_op = _op_var.set(op or _op_var.get())
    try:
        yield
    finally:
        _project_var.reset(token_project)
        _op_var.reset(token_op)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_time=True, show_level=True)
    handler.addFilter(_ContextFilter())

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s project=%(project)s op=%(op)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    # Avoid duplicate handlers if configure_logging is called multiple times
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if isinstance(h, RichHandler):
                h.addFilter(_ContextFilter())
                h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log an exception with optional structured context."""

    if context:
        logger.exception("%s | context=%s", msg, context)
    else:
        logger.exception("%s", msg)
