from __future__ import annotations

from fastapi import APIRouter

from candlescope.api import candles, patterns, search

api_router = APIRouter(prefix="/api")
api_router.include_router(candles.router)
api_router.include_router(search.router)
api_router.include_router(patterns.router)
