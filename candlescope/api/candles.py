from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from candlescope.ai.candlestick_patterns import detect_pattern
from candlescope.ai.pattern_catalog import SIGNAL_LABELS
from candlescope.api.errors import market_error_response
from candlescope.candles.errors import MarketDataError
from candlescope.candles.service import CandleService
from candlescope.core.settings import settings
from candlescope.utils.perf import perf_span

router = APIRouter(prefix="/candles", tags=["candles"])
svc = CandleService()


@router.get("")
def get_candles(
    symbol: str | None = Query(None, description="Ticker symbol, e.g. AAPL."),
    timeframe: str = Query("monthly", description="4h | daily | weekly | monthly"),
) -> Any:
    """Candles for a symbol plus the pattern detected on the latest candle."""

    if not symbol or not symbol.strip():
        raise HTTPException(status_code=400, detail="Missing required 'symbol' query parameter.")

    allowed = [str(t) for t in (settings.CANDLES_ALLOWED_TIMEFRAMES or [])]
    if timeframe not in allowed:
        quoted = ", ".join(f'"{t}"' for t in allowed) or "none"
        raise HTTPException(status_code=400, detail=f"Unsupported timeframe {timeframe!r}. Supported: {quoted}.")

    try:
        series = svc.get_series(symbol, timeframe)
    except MarketDataError as e:
        return market_error_response(e)

    with perf_span("patterns.detect", symbol=series.symbol, timeframe=timeframe, n=len(series.candles)):
        detected = detect_pattern(series.candles)

    return JSONResponse(
        content={
            "symbol": series.symbol,
            "timeframe": series.timeframe,
            "candles": [c.model_dump() for c in series.candles],
            "fallback": series.fallback,
            "pattern": {**detected.to_dict(), "signalLabel": SIGNAL_LABELS[detected.signal]},
        }
    )
