from __future__ import annotations

import contextlib
import contextvars
import logging
import sys
from pathlib import Path
from typing import Any, Iterator

import orjson

_query_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("query_context", default={})

_RESERVED = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class ORJSONFormatter(logging.Formatter):
    """One JSON object per record, serialised with orjson."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - fmt
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        payload.update(_query_context.get({}))
        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith("_"):
                continue
            if key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode()


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure the root logger with the JSON formatter."""

    root = logging.getLogger()
    root.setLevel(log_level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = ORJSONFormatter()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


@contextlib.contextmanager
def query_context(**kwargs: Any) -> Iterator[None]:
    """Attach query metadata (url, mode, ...) to log records emitted inside the block."""

    token = _query_context.set({**_query_context.get({}), **kwargs})
    try:
        yield
    finally:
        _query_context.reset(token)
