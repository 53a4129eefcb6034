"""Chart level value records: candles, indicator points and markers."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Candle(BaseModel):
    """OHLC price record for one interval; ``time`` is unix seconds."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float | None = None


class LinePoint(BaseModel):
    """One point of an indicator series."""

    time: int
    value: float


class Marker(BaseModel):
    """Buy/sell annotation overlaid on a chart candle."""

    time: int
    position: Literal["aboveBar", "belowBar"]
    color: str
    shape: Literal["arrowUp", "arrowDown"]
    text: str


__all__ = ["Candle", "LinePoint", "Marker"]
