from __future__ import annotations

import time
from collections import deque
from typing import Deque
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from loguru import logger

from candlescope.core.settings import settings
from candlescope.utils.request_context import request_id_var


def _client_ip(request: Request) -> str:
    # Prefer X-Forwarded-For when behind a proxy.
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("x-request-id") or str(uuid4())
        request.state.request_id = req_id
        token = request_id_var.set(req_id)
        try:
            resp = await call_next(request)
            resp.headers["x-request-id"] = req_id
            return resp
        finally:
            request_id_var.reset(token)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self._hits: dict[str, Deque[float]] = {}

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED:
            return await call_next(request)

        ip = _client_ip(request)
        now = time.time()
        window = 60.0
        limit = max(1, int(settings.RATE_LIMIT_PER_MINUTE))

        # Evict old timestamps, and idle IPs along with them.
        cutoff = now - window
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] < cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]

        q = self._hits.setdefault(ip, deque())
        if len(q) >= limit:
            return JSONResponse(status_code=429, content={"detail": "rate limit exceeded", "code": "RATE_LIMITED"})

        q.append(now)
        return await call_next(request)


class PerformanceLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if not getattr(settings, "PERF_LOG_ENABLED", True):
            return await call_next(request)

        t0 = time.perf_counter()
        status_code: int | None = None
        try:
            resp = await call_next(request)
            status_code = int(getattr(resp, "status_code", 0) or 0)
            return resp
        finally:
            dt_ms = (time.perf_counter() - t0) * 1000.0
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id") or "-"
            slow_ms = int(getattr(settings, "PERF_LOG_SLOW_MS", 250) or 250)
            lvl = "WARNING" if dt_ms >= float(slow_ms) else "INFO"
            sc = status_code if status_code is not None else "?"
            logger.log(
                lvl,
                "HTTP {method} {path} -> {status} ({ms:.1f}ms) rid={rid}",
                method=request.method.upper(),
                path=request.url.path,
                status=sc,
                ms=dt_ms,
                rid=rid,
            )
