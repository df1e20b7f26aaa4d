"""JSON log lines for sweeps, tagged with the id of the sweep that wrote them."""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO, cast, override

if TYPE_CHECKING:
    from rbc.config.settings import LogLevel

# Set by BuildSweeper.run_once for the duration of one sweep.
sweep_id: ContextVar[str | None] = ContextVar("sweep_id", default=None)

# LogRecord attributes that are never copied into the JSON line.
_RECORD_INTERNALS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    },
)


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Every line carries `timestamp`, `level`, `message`, `logger` and the
    current `sweep_id`. Fields passed through `extra=` (for example
    `token_source`) are merged in; an extra named like a core field is kept
    as `extra_<name>` so it cannot mask the sweep it belongs to.
    """

    @override
    def format(self, record: logging.LogRecord) -> str:
        line = _core_fields(record)
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            line["stack_trace"] = self.formatStack(record.stack_info)
        _merge_extras(line, record)
        return json.dumps(line, default=str)


def _core_fields(record: logging.LogRecord) -> dict[str, object]:
    return {
        "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
        "level": record.levelname,
        "message": record.getMessage(),
        "logger": record.name,
        "sweep_id": sweep_id.get(),
    }


def _merge_extras(line: dict[str, object], record: logging.LogRecord) -> None:
    reserved = frozenset(line)
    attributes = cast("dict[str, object]", vars(record))
    for key, value in attributes.items():
        if key in _RECORD_INTERNALS or key.startswith("_"):
            continue
        line[f"extra_{key}" if key in reserved else key] = value


def init_logging(level: LogLevel, *, stream: TextIO | None = None) -> None:
    """Route root logging through JSONFormatter at `level`.

    The webhook logs to stdout. The CLI passes `sys.stderr` so that stdout
    carries only the sweep trace.
    """
    handler = logging.StreamHandler(sys.stdout if stream is None else stream)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for existing in root_logger.handlers[:]:
        # pytest's caplog handler stays attached.
        if type(existing).__name__ != "LogCaptureHandler":
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
