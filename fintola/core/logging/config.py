"""Settings for the JSON log sinks."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogConfig(BaseModel):
    """Where and at which level JSON log lines are written.

    ``console_stream`` defaults to stdout; tests pass a ``StringIO``.
    ``extra`` is bound to every record, e.g. ``{"env": "staging"}``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = "INFO"
    console_output: bool = True
    console_stream: Any = None
    file_output: bool = False
    file_path: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


__all__ = ["LogConfig"]
