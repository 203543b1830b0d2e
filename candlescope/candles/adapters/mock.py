from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date, timedelta

import numpy as np

from candlescope.candles.errors import MarketDataError
from candlescope.candles.models import Candle, SymbolMatch
from candlescope.utils.perf import perf_span


@dataclass(frozen=True)
class PriceSeed:
    base: float
    volatility: float


# Rough price levels so well-known tickers look plausible.
PRICE_SEEDS: dict[str, PriceSeed] = {
    "AAPL": PriceSeed(189, 3.5),
    "MSFT": PriceSeed(415, 6),
    "GOOGL": PriceSeed(175, 4),
    "AMZN": PriceSeed(200, 5),
    "TSLA": PriceSeed(245, 12),
    "NVDA": PriceSeed(880, 20),
    "META": PriceSeed(510, 8),
    "SPY": PriceSeed(520, 4),
}
DEFAULT_SEED = PriceSeed(150, 4)

INTRADAY_HOURS = ("08:00", "12:00", "16:00")


def _seed_from_key(key: str) -> int:
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big", signed=False)


def _bar(rng: np.random.Generator, price: float, vol: float, *, drift_scale: float, jitter: float, wick: float) -> tuple[float, float, float, float]:
    """Returns (open, high, low, new_price); close is round(new_price, 2)."""
    drift = (rng.random() - 0.48) * vol * drift_scale
    o = round(price + (rng.random() - 0.5) * vol * jitter, 2)
    price = max(price * 0.7, price + drift)
    c = round(price, 2)
    hi = round(max(o, c) + rng.random() * vol * wick, 2)
    lo = round(min(o, c) - rng.random() * vol * wick, 2)
    return o, hi, lo, price


def _generate_candles(symbol: str, count: int, start: date, step_days: int, key: str) -> list[Candle]:
    seed = PRICE_SEEDS.get(symbol, DEFAULT_SEED)
    rng = np.random.default_rng(_seed_from_key(f"{symbol}:{key}"))
    price = float(seed.base)

    out: list[Candle] = []
    for i in range(count):
        d = start + timedelta(days=i * step_days)
        # Daily bars skip weekends.
        if step_days == 1 and d.weekday() >= 5:
            continue
        o, hi, lo, price = _bar(rng, price, seed.volatility, drift_scale=1.0, jitter=0.3, wick=0.6)
        v = int(round(30_000_000 + rng.random() * 70_000_000))
        out.append(Candle(date=d.isoformat(), open=o, high=hi, low=lo, close=round(price, 2), volume=v))
    return out


def _generate_intraday(symbol: str, days: int) -> list[Candle]:
    seed = PRICE_SEEDS.get(symbol, DEFAULT_SEED)
    rng = np.random.default_rng(_seed_from_key(f"{symbol}:4h"))
    price = float(seed.base)
    start = date(2025, 2, 3)

    out: list[Candle] = []
    for i in range(days):
        d = start + timedelta(days=i)
        if d.weekday() >= 5:
            continue
        for hour in INTRADAY_HOURS:
            o, hi, lo, price = _bar(rng, price, seed.volatility, drift_scale=0.6, jitter=0.2, wick=0.4)
            v = int(round(10_000_000 + rng.random() * 30_000_000))
            out.append(Candle(date=f"{d.isoformat()} {hour}", open=o, high=hi, low=lo, close=round(price, 2), volume=v))
    return out


def fetch_candles(symbol: str, timeframe: str) -> list[Candle]:
    """Deterministic synthetic candles; same (symbol, timeframe) always yields the same series."""
    sym = str(symbol or "").strip().upper()
    with perf_span("mock.fetch_candles", symbol=sym, timeframe=timeframe):
        if timeframe == "4h":
            return _generate_intraday(sym, 30)
        if timeframe == "daily":
            return _generate_candles(sym, 100, date(2024, 10, 1), 1, "daily")
        if timeframe == "weekly":
            return _generate_candles(sym, 52, date(2024, 2, 5), 7, "weekly")
        if timeframe == "monthly":
            return _generate_candles(sym, 24, date(2023, 3, 1), 30, "monthly")
        raise MarketDataError(f"Unsupported timeframe: {timeframe}", "UNKNOWN")


def search_symbols(keywords: str) -> list[SymbolMatch]:
    kw = str(keywords or "").strip()
    if not kw:
        return []
    sym = kw.upper()
    return [SymbolMatch(symbol=sym, name=sym, type="Equity", region="United States")]
