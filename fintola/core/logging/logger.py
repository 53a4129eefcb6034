"""JSON-lines logging on top of loguru.

Every record carries the request trace id and the user/broker it concerns, so
a broker callback can be followed from the redirect to the token exchange.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any
from uuid import uuid4

from loguru import logger

from fintola.core.logging.config import LogConfig

SERVICE_NAME = "fintola"

_trace_id: ContextVar[str | None] = ContextVar("fintola_trace_id", default=None)
_bound_fields: ContextVar[dict[str, Any]] = ContextVar("fintola_bound_fields", default={})

# top-level keys of every payload; anything else goes under "context"
_TOP_LEVEL_FIELDS = ("user_id", "broker", "error_code")


def current_trace_id() -> str:
    """Return the active trace id, starting a new trace when there is none."""
    trace_id = _trace_id.get()
    if trace_id is None:
        trace_id = uuid4().hex
        _trace_id.set(trace_id)
    return trace_id


def _attach_context(record: dict[str, Any]) -> None:
    extra = record.setdefault("extra", {})
    if extra.get("trace_id"):
        _trace_id.set(extra["trace_id"])
    else:
        extra["trace_id"] = current_trace_id()

    for key, value in _bound_fields.get({}).items():
        if key == "trace_id":
            continue
        if extra.get(key) is None:
            extra[key] = value


def _to_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record.get("extra", {})
    level = record.get("level")
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat() if "time" in record else datetime.now(UTC).isoformat(),
        "level": getattr(level, "name", None) or str(level or "INFO"),
        "service": SERVICE_NAME,
        "message": record.get("message"),
        "logger": record.get("name"),
        "trace_id": extra.get("trace_id"),
    }
    for key in _TOP_LEVEL_FIELDS:
        payload[key] = extra.get(key)

    context = {k: v for k, v in extra.items() if k != "trace_id" and k not in _TOP_LEVEL_FIELDS}
    if context:
        payload["context"] = context

    exception = record.get("exception")
    if exception:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}" if exception.type else str(exception)
    return payload


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class JsonLineSink:
    """loguru sink writing one JSON object per line to a stream or a file."""

    def __init__(self, stream: IO[str] | None = None, path: str | None = None) -> None:
        if stream is None and path is None:
            raise ValueError("JsonLineSink needs a stream or a path")
        self.stream = stream
        self.path = Path(path) if path else None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, message: Any) -> None:
        line = json.dumps(_to_payload(message.record), default=_serialize) + "\n"
        if self.stream is not None:
            self.stream.write(line)
            self.stream.flush()
        else:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)


def _apply(config: LogConfig) -> None:
    level = config.level.upper()
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        handlers.append({"sink": JsonLineSink(stream=config.console_stream or sys.stdout), "level": level})
    if config.file_output and config.file_path:
        handlers.append({"sink": JsonLineSink(path=config.file_path), "level": level})

    logger.configure(handlers=handlers, patcher=_attach_context, extra=config.extra or {})


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Replace all loguru handlers with JSON sinks at ``level``."""
    _apply(LogConfig(level=level, **kwargs))


class StructuredLogger:
    """Holds the active :class:`LogConfig` and the configured loguru logger."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        _apply(self.config)
        self.logger = logger

    def configure(self, **kwargs: Any) -> None:
        self.config = self.config.model_copy(update=kwargs)
        _apply(self.config)

    @contextmanager
    def context(self, *, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
        with log_context(trace_id=trace_id, **fields) as active:
            yield active


def get_logger(name: str | None = None) -> Any:
    if name:
        return logger.bind(logger_name=name)
    return logger


def bind(**kwargs: Any) -> Any:
    return logger.bind(**kwargs)


@contextmanager
def log_context(*, trace_id: str | None = None, **fields: Any) -> Iterator[str]:
    """Attach a trace id and extra fields to every record logged inside the block.

    A new trace id is generated when none is given. Nested blocks inherit the
    outer fields.
    """
    fields_token = _bound_fields.set({**_bound_fields.get({}), **fields})
    active = trace_id or uuid4().hex
    trace_token = _trace_id.set(active)
    try:
        yield active
    finally:
        _trace_id.reset(trace_token)
        _bound_fields.reset(fields_token)


__all__ = [
    "JsonLineSink",
    "StructuredLogger",
    "bind",
    "configure_logging",
    "current_trace_id",
    "get_logger",
    "log_context",
    "logger",
]
