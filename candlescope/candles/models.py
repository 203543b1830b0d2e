from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Timeframe = Literal["4h", "daily", "weekly", "monthly"]
TIMEFRAMES: tuple[str, ...] = ("4h", "daily", "weekly", "monthly")


class Candle(BaseModel):
    date: str = Field(..., description="Sortable label: YYYY-MM-DD or YYYY-MM-DD HH:MM[:SS]")
    open: float
    high: float
    low: float
    close: float
    volume: int = Field(0, ge=0)

    def is_well_formed(self) -> bool:
        return self.low <= min(self.open, self.close) and max(self.open, self.close) <= self.high


class CandleSeries(BaseModel):
    symbol: str
    timeframe: Timeframe
    candles: list[Candle]
    # True when the real provider was rate limited and mock candles were served instead.
    fallback: bool = False


class SymbolMatch(BaseModel):
    symbol: str
    name: str
    type: str
    region: str


class DetectRequest(BaseModel):
    candles: list[Candle] = Field(default_factory=list)
