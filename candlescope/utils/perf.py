from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any

from loguru import logger

from candlescope.core.settings import settings
from candlescope.utils.request_context import request_id_var


def _enabled() -> bool:
    return bool(getattr(settings, "PERF_LOG_ENABLED", True)) and bool(getattr(settings, "PERF_LOG_INNER_ENABLED", True))


def _slow_ms() -> int:
    try:
        return int(getattr(settings, "PERF_LOG_SLOW_MS", 250) or 250)
    except (TypeError, ValueError):
        return 250


@contextmanager
def perf_span(op: str, **tags: Any):
    """Measure a code block; logs ms.

    - Always logs if PERF_LOG_INNER_ALWAYS=true
    - Otherwise logs only when >= PERF_LOG_SLOW_MS
    """

    if not _enabled():
        yield
        return

    t0 = time.perf_counter()
    ok = True
    try:
        yield
    except Exception:
        ok = False
        raise
    finally:
        dt_ms = (time.perf_counter() - t0) * 1000.0
        slow_ms = _slow_ms()
        if bool(getattr(settings, "PERF_LOG_INNER_ALWAYS", False)) or dt_ms >= float(slow_ms):
            level = "WARNING" if dt_ms >= float(slow_ms) else "DEBUG"
            rid = request_id_var.get() or "-"
            extra = {k: v for k, v in tags.items() if v is not None}
            logger.log(
                level,
                "PERF {op} {status}: {ms:.1f}ms rid={rid} tags={tags}",
                op=op,
                status="ok" if ok else "err",
                ms=dt_ms,
                rid=rid,
                tags=extra,
            )
