from __future__ import annotations

from fastapi.responses import JSONResponse

from candlescope.candles.errors import MarketDataError

STATUS_BY_CODE: dict[str, int] = {
    "RATE_LIMITED": 429,
    "INVALID_KEY": 401,
    "NO_DATA": 404,
    "NETWORK": 502,
    "UNKNOWN": 500,
}


def market_error_response(e: MarketDataError) -> JSONResponse:
    status = STATUS_BY_CODE.get(str(e.code), 500)
    return JSONResponse(status_code=status, content={"detail": str(e), "code": e.code})
