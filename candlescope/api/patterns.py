from __future__ import annotations

from dataclasses import asdict
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query

from candlescope.ai.candlestick_patterns import detect_pattern
from candlescope.ai.pattern_catalog import CATALOG, SIGNAL_LABELS, get_pattern, patterns_by_type
from candlescope.candles.models import DetectRequest

router = APIRouter(prefix="/patterns", tags=["patterns"])


def _row(p: Any) -> dict[str, Any]:
    return {**asdict(p), "signalLabel": SIGNAL_LABELS[p.signal]}


@router.get("")
def catalog(type: Literal["single", "double", "triple"] | None = Query(None)) -> dict[str, Any]:
    items = patterns_by_type(type)
    return {
        "count": len(items),
        "total": len(CATALOG),
        "patterns": [_row(p) for p in items],
    }


@router.get("/{slug}")
def pattern(slug: str) -> dict[str, Any]:
    p = get_pattern(slug)
    if p is None:
        raise HTTPException(status_code=404, detail="unknown pattern")
    return _row(p)


@router.post("/detect")
def detect(req: DetectRequest) -> dict[str, Any]:
    """Run the detector on caller-supplied candles (ascending by date)."""
    candles = sorted(req.candles, key=lambda c: c.date)
    detected = detect_pattern(candles)
    return {
        "n": len(candles),
        "pattern": {**detected.to_dict(), "signalLabel": SIGNAL_LABELS[detected.signal]},
    }
