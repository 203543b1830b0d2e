from __future__ import annotations

import time
from threading import Lock

from loguru import logger

from candlescope.candles.adapters import alphavantage, mock
from candlescope.candles.errors import MarketDataError
from candlescope.candles.models import CandleSeries, SymbolMatch, TIMEFRAMES
from candlescope.core.settings import settings


def _source(name: str) -> str:
    return "mock" if str(name or "").strip().lower() == "mock" else "alphavantage"


class CandleService:
    _cache_lock = Lock()
    _cache: dict[tuple[str, str, str], tuple[float, CandleSeries]] = {}

    @classmethod
    def clear_cache(cls) -> None:
        with cls._cache_lock:
            cls._cache.clear()

    def get_series(self, symbol: str, timeframe: str) -> CandleSeries:
        sym = str(symbol or "").strip().upper()
        if timeframe not in TIMEFRAMES:
            raise MarketDataError(f"Unsupported timeframe: {timeframe}", "UNKNOWN")

        source = _source(settings.MARKET_DATA_SOURCE)
        ttl = max(0, int(getattr(settings, "CANDLES_CACHE_TTL_SECONDS", 0) or 0))
        cache_key = (source, sym, timeframe)
        now = time.monotonic()

        if ttl > 0:
            with self._cache_lock:
                hit = self._cache.get(cache_key)
                if hit is not None and (now - hit[0]) < ttl:
                    return hit[1]

        series = self._fetch(source, sym, timeframe)
        # Fallback series are not cached so the real provider is retried once quota frees up.
        if ttl > 0 and not series.fallback:
            with self._cache_lock:
                self._cache[cache_key] = (now, series)
        return series

    def _fetch(self, source: str, symbol: str, timeframe: str) -> CandleSeries:
        if source == "mock":
            return CandleSeries(symbol=symbol, timeframe=timeframe, candles=mock.fetch_candles(symbol, timeframe))

        try:
            candles = alphavantage.fetch_candles(symbol, timeframe)
            logger.info("Fetched {} {} candles for {}", len(candles), timeframe, symbol)
            return CandleSeries(symbol=symbol, timeframe=timeframe, candles=candles)
        except MarketDataError as e:
            if e.code != "RATE_LIMITED" or not settings.MOCK_FALLBACK_ON_RATE_LIMIT:
                logger.warning("Candle fetch failed for {} ({}): [{}] {}", symbol, timeframe, e.code, str(e))
                raise
            logger.warning("Rate limited fetching {} ({}); serving mock candles: {}", symbol, timeframe, str(e))
            return CandleSeries(
                symbol=symbol,
                timeframe=timeframe,
                candles=mock.fetch_candles(symbol, timeframe),
                fallback=True,
            )

    def search(self, keywords: str) -> list[SymbolMatch]:
        kw = str(keywords or "").strip()
        if not kw:
            return []

        if _source(settings.SEARCH_SOURCE) == "mock":
            return mock.search_symbols(kw)

        try:
            return alphavantage.search_symbols(kw)
        except MarketDataError as e:
            if e.code != "RATE_LIMITED":
                raise
            logger.warning("Rate limited searching {!r}; using mock search: {}", kw, str(e))
            return mock.search_symbols(kw)
