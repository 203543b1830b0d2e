from __future__ import annotations

from candlescope.candles.models import Candle, SymbolMatch
from candlescope.core.settings import settings
from candlescope.integrations.alphavantage.client import AlphaVantageClient
from candlescope.integrations.alphavantage.rate_limiter import SlidingWindowRateLimiter
from candlescope.utils.perf import perf_span

# Shared across client instances: the quota belongs to the API key, not to a client.
LIMITER = SlidingWindowRateLimiter(max_requests=settings.ALPHA_VANTAGE_MAX_REQUESTS_PER_MINUTE, window_seconds=60.0)


def fetch_candles(symbol: str, timeframe: str) -> list[Candle]:
    with perf_span("alphavantage.fetch_candles", symbol=symbol, timeframe=timeframe):
        client = AlphaVantageClient(limiter=LIMITER)
        try:
            return client.fetch_candles(symbol, timeframe)
        finally:
            client.close()


def search_symbols(keywords: str) -> list[SymbolMatch]:
    with perf_span("alphavantage.search", keywords=keywords):
        client = AlphaVantageClient(limiter=LIMITER)
        try:
            return client.search_symbol(keywords)
        finally:
            client.close()
