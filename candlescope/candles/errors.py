"""Market data errors."""

from __future__ import annotations

from typing import Literal

ErrorCode = Literal["RATE_LIMITED", "INVALID_KEY", "NO_DATA", "NETWORK", "UNKNOWN"]


class MarketDataError(RuntimeError):
    """Raised when a candle or symbol-search fetch fails."""

    def __init__(self, message: str, code: ErrorCode = "UNKNOWN") -> None:
        super().__init__(message)
        self.code: ErrorCode = code
