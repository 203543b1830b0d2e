from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from candlescope.api.errors import market_error_response
from candlescope.candles.errors import MarketDataError
from candlescope.candles.service import CandleService

router = APIRouter(prefix="/search", tags=["search"])
svc = CandleService()


@router.get("")
def search(q: str | None = Query(None, description="Ticker or company keywords.")) -> Any:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing required 'q' query parameter.")

    try:
        results = svc.search(q)
    except MarketDataError as e:
        return market_error_response(e)

    return {"results": [r.model_dump() for r in results]}
