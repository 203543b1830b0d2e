from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping

from candlescope.ai.candlestick_patterns import Signal

PatternType = Literal["single", "double", "triple"]


@dataclass(frozen=True)
class PatternDef:
    name: str
    slug: str
    type: PatternType
    signal: Signal
    description: str
    interpretation: str


SIGNAL_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "buy": "Buy Signal",
        "sell": "Sell Signal",
        "wait": "Wait / Caution",
        "neutral": "Neutral",
    }
)


def _build_catalog() -> Mapping[str, PatternDef]:
    defs = [
        # --- Single candle ---
        PatternDef(
            "Hammer",
            "hammer",
            "single",
            "buy",
            "A small body at the top with a long lower shadow, at least twice the body length. Appears at the bottom of a downtrend.",
            "Sellers pushed price down during the session, but buyers regained control and pushed it back up. Signals potential reversal to the upside.",
        ),
        PatternDef(
            "Inverted Hammer",
            "inverted-hammer",
            "single",
            "buy",
            "A small body at the bottom with a long upper shadow. Appears at the bottom of a downtrend.",
            "Buyers attempted to push price higher. Although sellers pushed it back, buying pressure is emerging. Confirmation needed on next candle.",
        ),
        PatternDef(
            "Hanging Man",
            "hanging-man",
            "single",
            "sell",
            "Identical to a hammer but appears at the top of an uptrend. Small body at top, long lower shadow.",
            "Despite closing near the high, significant selling pressure appeared during the session. The uptrend may be losing strength.",
        ),
        PatternDef(
            "Shooting Star",
            "shooting-star",
            "single",
            "sell",
            "A small body at the bottom with a long upper shadow. Appears at the top of an uptrend.",
            "Buyers pushed price up but sellers overwhelmed them by close. Strong indication the uptrend is reversing.",
        ),
        PatternDef(
            "Doji",
            "doji",
            "single",
            "wait",
            "Open and close are virtually equal, creating a cross or plus sign. Shadows can vary in length.",
            "Market indecision: neither buyers nor sellers have control. Often precedes a reversal, but direction depends on context and confirmation.",
        ),
        PatternDef(
            "Marubozu",
            "marubozu",
            "single",
            "neutral",
            "A long body with no (or very small) shadows. Bullish marubozu has no upper shadow; bearish has no lower shadow.",
            "Strong conviction in one direction. A bullish marubozu shows dominant buying; bearish shows dominant selling. Trend continuation likely.",
        ),
        PatternDef(
            "Spinning Top",
            "spinning-top",
            "single",
            "wait",
            "Small body centered between upper and lower shadows of roughly equal length.",
            "Indecision in the market. Neither bulls nor bears could gain the upper hand. Watch for a breakout candle next.",
        ),
        # --- Double candle ---
        PatternDef(
            "Bullish Engulfing",
            "bullish-engulfing",
            "double",
            "buy",
            "A small bearish candle followed by a larger bullish candle whose body completely engulfs the prior body. Appears in a downtrend.",
            "Buyers have overwhelmed sellers. The larger bullish body shows a decisive shift in momentum to the upside.",
        ),
        PatternDef(
            "Bearish Engulfing",
            "bearish-engulfing",
            "double",
            "sell",
            "A small bullish candle followed by a larger bearish candle whose body completely engulfs the prior body. Appears in an uptrend.",
            "Sellers have taken control from buyers. The engulfing bearish body signals strong downside momentum.",
        ),
        PatternDef(
            "Tweezer Tops",
            "tweezer-tops",
            "double",
            "sell",
            "Two consecutive candles with matching highs at the top of an uptrend. First is bullish, second is bearish.",
            "Price hit resistance at the same level twice and was rejected. The repeated failure suggests a reversal.",
        ),
        PatternDef(
            "Tweezer Bottoms",
            "tweezer-bottoms",
            "double",
            "buy",
            "Two consecutive candles with matching lows at the bottom of a downtrend. First is bearish, second is bullish.",
            "Price found support at the same level twice. The repeated bounce suggests a bottom has formed.",
        ),
        # --- Triple candle ---
        PatternDef(
            "Morning Star",
            "morning-star",
            "triple",
            "buy",
            "Three-candle pattern: a long bearish candle, a small-bodied candle (star) that gaps down, and a long bullish candle that closes into the first candle's body.",
            "The star shows indecision after a downtrend, and the strong bullish follow-through confirms the reversal to the upside.",
        ),
        PatternDef(
            "Evening Star",
            "evening-star",
            "triple",
            "sell",
            "Three-candle pattern: a long bullish candle, a small-bodied candle (star) that gaps up, and a long bearish candle that closes into the first candle's body.",
            "The star signals exhaustion at the top, and the bearish follow-through confirms the reversal to the downside.",
        ),
        PatternDef(
            "Three White Soldiers",
            "three-white-soldiers",
            "triple",
            "buy",
            "Three consecutive long bullish candles, each opening within the prior body and closing at new highs. Small or no upper shadows.",
            "Steady, strong buying pressure over three sessions. A powerful bullish continuation or reversal signal.",
        ),
        PatternDef(
            "Three Black Crows",
            "three-black-crows",
            "triple",
            "sell",
            "Three consecutive long bearish candles, each opening within the prior body and closing at new lows. Small or no lower shadows.",
            "Relentless selling over three sessions. A strong bearish continuation or reversal signal.",
        ),
    ]
    return MappingProxyType({p.slug: p for p in defs})


CATALOG: Mapping[str, PatternDef] = _build_catalog()


def get_pattern(slug: str) -> PatternDef | None:
    return CATALOG.get(str(slug or "").strip().lower())


def patterns_by_type(kind: str | None = None) -> list[PatternDef]:
    if not kind:
        return list(CATALOG.values())
    return [p for p in CATALOG.values() if p.type == kind]
