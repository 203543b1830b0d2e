import os
import sys

import pytest

# Ensure repository root is on sys.path so `import candlescope` works when running pytest.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolate_market_data(monkeypatch):
    """Keep tests offline and independent of each other.

    The Alpha Vantage limiter and the candle cache are process-wide; without a
    reset one test's requests would eat into the next test's quota.
    """

    from candlescope.candles.adapters import alphavantage as av_adapter
    from candlescope.candles.service import CandleService
    from candlescope.core.settings import settings as app_settings

    monkeypatch.setattr(app_settings, "APP_ENV", "test", raising=False)
    # Deterministic/offline even if the developer machine has a real key in env.
    monkeypatch.setattr(app_settings, "ALPHA_VANTAGE_API_KEY", None, raising=False)
    monkeypatch.setattr(app_settings, "MARKET_DATA_SOURCE", "mock", raising=False)
    monkeypatch.setattr(app_settings, "SEARCH_SOURCE", "mock", raising=False)
    monkeypatch.setattr(app_settings, "MOCK_FALLBACK_ON_RATE_LIMIT", True, raising=False)
    monkeypatch.setattr(app_settings, "CANDLES_ALLOWED_TIMEFRAMES", ["monthly"], raising=False)
    monkeypatch.setattr(app_settings, "CANDLES_CACHE_TTL_SECONDS", 0, raising=False)
    monkeypatch.setattr(app_settings, "RATE_LIMIT_ENABLED", False, raising=False)

    av_adapter.LIMITER.reset()
    CandleService.clear_cache()
    yield
    CandleService.clear_cache()
