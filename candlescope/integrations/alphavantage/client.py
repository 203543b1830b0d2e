from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from candlescope.candles.errors import MarketDataError
from candlescope.candles.models import Candle, SymbolMatch
from candlescope.core.settings import settings
from candlescope.integrations.alphavantage.rate_limiter import SlidingWindowRateLimiter


@dataclass(frozen=True)
class AlphaVantageConfig:
    base_url: str = "https://www.alphavantage.co/query"
    api_key: str | None = None
    timeout_seconds: float = 5.0
    output_size: str = "compact"


@dataclass(frozen=True)
class SeriesSpec:
    function: str
    series_key: str
    interval: str | None = None


# 4h has no native endpoint; 60min bars are fetched and aggregated.
TIMEFRAME_SPECS: dict[str, SeriesSpec] = {
    "4h": SeriesSpec("TIME_SERIES_INTRADAY", "Time Series (60min)", interval="60min"),
    "daily": SeriesSpec("TIME_SERIES_DAILY", "Time Series (Daily)"),
    "weekly": SeriesSpec("TIME_SERIES_WEEKLY", "Weekly Time Series"),
    "monthly": SeriesSpec("TIME_SERIES_MONTHLY", "Monthly Time Series"),
}


def check_response_body(data: dict[str, Any]) -> None:
    """Alpha Vantage reports most failures as HTTP 200 with a marker key."""
    if isinstance(data.get("Note"), str):
        raise MarketDataError("Alpha Vantage rate limit exceeded. Wait 1 minute before retrying.", "RATE_LIMITED")
    if isinstance(data.get("Error Message"), str):
        raise MarketDataError(str(data["Error Message"]), "NO_DATA")
    if isinstance(data.get("Information"), str):
        info = str(data["Information"])
        if "api key" in info.lower():
            raise MarketDataError(info, "INVALID_KEY")
        raise MarketDataError(info, "RATE_LIMITED")


def parse_candles(series: dict[str, Any]) -> list[Candle]:
    by_date: dict[str, Candle] = {}
    for date, row in (series or {}).items():
        try:
            c = Candle(
                date=str(date),
                open=float(row["1. open"]),
                high=float(row["2. high"]),
                low=float(row["3. low"]),
                close=float(row["4. close"]),
                volume=int(float(row["5. volume"])),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unparseable Alpha Vantage bar {}: {}", date, str(e))
            continue
        if not c.is_well_formed():
            logger.warning("Skipping malformed OHLC bar {}: o={} h={} l={} c={}", date, c.open, c.high, c.low, c.close)
            continue
        by_date[c.date] = c
    return sorted(by_date.values(), key=lambda c: c.date)


def aggregate_to_4h(candles: list[Candle]) -> list[Candle]:
    """Group 60min bars into 4-hour blocks per day (00, 04, 08, 12, 16, 20)."""
    groups: dict[str, list[Candle]] = {}
    for c in sorted(candles, key=lambda x: x.date):
        date_part, _, time_part = c.date.partition(" ")
        hour = int((time_part or "00:00:00").split(":")[0])
        block = (hour // 4) * 4
        groups.setdefault(f"{date_part} {block:02d}:00", []).append(c)

    out: list[Candle] = []
    for key in sorted(groups):
        g = groups[key]
        out.append(
            Candle(
                date=key,
                open=g[0].open,
                high=max(c.high for c in g),
                low=min(c.low for c in g),
                close=g[-1].close,
                volume=sum(c.volume for c in g),
            )
        )
    return out


class AlphaVantageClient:
    def __init__(
        self,
        cfg: AlphaVantageConfig | None = None,
        *,
        limiter: SlidingWindowRateLimiter | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.cfg = cfg or AlphaVantageConfig(
            base_url=settings.ALPHA_VANTAGE_BASE_URL,
            api_key=settings.ALPHA_VANTAGE_API_KEY,
            timeout_seconds=float(settings.ALPHA_VANTAGE_TIMEOUT_SECONDS),
            output_size=settings.ALPHA_VANTAGE_OUTPUT_SIZE,
        )
        self._limiter = limiter or SlidingWindowRateLimiter(settings.ALPHA_VANTAGE_MAX_REQUESTS_PER_MINUTE, 60.0)

        api_key = (self.cfg.api_key or "").strip()
        if not api_key:
            raise MarketDataError("ALPHA_VANTAGE_API_KEY is not set. Add it to your .env file.", "INVALID_KEY")
        self._api_key = api_key

        self._client = httpx.Client(
            timeout=httpx.Timeout(float(self.cfg.timeout_seconds)),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> AlphaVantageClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _get(self, params: dict[str, str]) -> dict[str, Any]:
        self._limiter.acquire()

        try:
            r = self._client.get(self.cfg.base_url, params={**params, "apikey": self._api_key})
        except httpx.TimeoutException:
            raise MarketDataError(
                f"Network error: Request timed out after {self.cfg.timeout_seconds:g} seconds", "NETWORK"
            ) from None
        except httpx.HTTPError as e:
            raise MarketDataError(f"Network error: {e}", "NETWORK") from e

        if r.status_code >= 400:
            raise MarketDataError(f"Alpha Vantage returned HTTP {r.status_code}", "NETWORK")

        try:
            data = r.json()
        except ValueError as e:
            raise MarketDataError(f"Alpha Vantage returned invalid JSON: {e}", "UNKNOWN") from e
        if not isinstance(data, dict):
            raise MarketDataError("Alpha Vantage returned an unexpected payload", "UNKNOWN")

        check_response_body(data)
        return data

    def fetch_candles(self, symbol: str, timeframe: str = "daily", output_size: str | None = None) -> list[Candle]:
        series_spec = TIMEFRAME_SPECS.get(timeframe)
        if series_spec is None:
            raise MarketDataError(f"Unsupported timeframe: {timeframe}", "UNKNOWN")

        params = {"function": series_spec.function, "symbol": symbol.upper()}
        if series_spec.interval:
            params["interval"] = series_spec.interval
        if timeframe in ("daily", "4h"):
            params["outputsize"] = output_size or self.cfg.output_size

        data = self._get(params)
        series = data.get(series_spec.series_key)
        if not isinstance(series, dict) or not series:
            raise MarketDataError(
                f'No {timeframe} data found for "{symbol}". Verify the ticker symbol is correct.', "NO_DATA"
            )

        try:
            candles = parse_candles(series)
            return aggregate_to_4h(candles) if timeframe == "4h" else candles
        except (KeyError, TypeError, ValueError) as e:
            raise MarketDataError(f"Alpha Vantage returned an unreadable {timeframe} series: {e}", "UNKNOWN") from e

    def search_symbol(self, keywords: str) -> list[SymbolMatch]:
        kw = (keywords or "").strip()
        if not kw:
            return []

        data = self._get({"function": "SYMBOL_SEARCH", "keywords": kw})
        matches = data.get("bestMatches")
        if not isinstance(matches, list):
            return []

        out: list[SymbolMatch] = []
        for m in matches:
            if not isinstance(m, dict):
                continue
            out.append(
                SymbolMatch(
                    symbol=str(m.get("1. symbol") or ""),
                    name=str(m.get("2. name") or ""),
                    type=str(m.get("3. type") or ""),
                    region=str(m.get("4. region") or ""),
                )
            )
        return out
