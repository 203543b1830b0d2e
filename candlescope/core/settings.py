from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Performance logging (console)
    # Logs request durations in ms. Useful for diagnosing slow upstream calls.
    PERF_LOG_ENABLED: bool = True
    # Log slow operations at WARNING when >= this threshold.
    PERF_LOG_SLOW_MS: int = 250
    # Internal (non-request) spans: upstream fetches, pattern detection.
    PERF_LOG_INNER_ENABLED: bool = True
    # If true, logs all internal spans (can be noisy). If false, logs only slow spans.
    PERF_LOG_INNER_ALWAYS: bool = False

    # Market data
    # "alphavantage" uses the real provider; "mock" serves deterministic synthetic candles.
    MARKET_DATA_SOURCE: str = "alphavantage"
    # Symbol search burns the same daily quota as candle fetches, so it stays on mock by default.
    SEARCH_SOURCE: str = "mock"
    # When the real provider is rate limited, serve mock candles (flagged fallback=true).
    MOCK_FALLBACK_ON_RATE_LIMIT: bool = True

    # Alpha Vantage
    ALPHA_VANTAGE_API_KEY: str | None = None
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co/query"
    ALPHA_VANTAGE_TIMEOUT_SECONDS: float = 5.0
    # Free tier: 25 requests/day, ~5/min.
    ALPHA_VANTAGE_MAX_REQUESTS_PER_MINUTE: int = 5
    ALPHA_VANTAGE_OUTPUT_SIZE: str = "compact"  # compact|full

    # Candles endpoint
    # Only monthly is enabled by default to keep the free quota usable.
    CANDLES_ALLOWED_TIMEFRAMES: list[str] = ["monthly"]
    # Short cache so repeated chart loads don't re-hit the provider. 0 disables.
    CANDLES_CACHE_TTL_SECONDS: int = 60

    # CORS
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Basic inbound rate limiting (optional)
    RATE_LIMIT_ENABLED: bool = False
    RATE_LIMIT_PER_MINUTE: int = 120


settings = Settings()
