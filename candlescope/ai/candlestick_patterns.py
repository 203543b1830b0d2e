"""Rule-based candlestick pattern detection for the most recent bar.

`detect_pattern` walks a fixed priority list of rules (triple-candle rules
first, then double, then single) and returns the first match. Every rule
yields one hardcoded `DetectedSignal`; nothing is scored or templated from
measured values.

Input candles must be ascending by date and satisfy
``low <= min(open, close) <= max(open, close) <= high``. The detector does not
check this; results for malformed bars are undefined.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Literal, Sequence

from candlescope.candles.models import Candle

Signal = Literal["buy", "sell", "wait", "neutral"]
Trend = Literal["up", "down", "flat"]

TREND_LOOKBACK = 4


@dataclass(frozen=True)
class DetectedSignal:
    pattern_name: str
    slug: str | None
    signal: Signal
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["patternName"] = d.pop("pattern_name")
        return d


# --- Geometry ---

def body_size(c: Candle) -> float:
    return abs(float(c.close) - float(c.open))


def candle_range(c: Candle) -> float:
    return float(c.high) - float(c.low)


def upper_shadow(c: Candle) -> float:
    return float(c.high) - max(float(c.open), float(c.close))


def lower_shadow(c: Candle) -> float:
    return min(float(c.open), float(c.close)) - float(c.low)


def is_bullish(c: Candle) -> bool:
    # A flat close counts as bullish.
    return float(c.close) >= float(c.open)


def body_ratio(c: Candle) -> float:
    r = candle_range(c)
    if r <= 0:
        return 0.0
    return body_size(c) / r


def detect_trend(candles: Sequence[Candle], lookback: int = TREND_LOOKBACK) -> Trend:
    """Majority vote over consecutive close-to-close steps in the last `lookback` bars."""
    if len(candles) < 2:
        return "flat"

    window = list(candles)[-min(lookback, len(candles)) :]
    ups = 0
    downs = 0
    for a, b in zip(window, window[1:]):
        if b.close > a.close:
            ups += 1
        elif b.close < a.close:
            downs += 1

    if ups > downs:
        return "up"
    if downs > ups:
        return "down"
    return "flat"


# --- Results ---

NO_DATA = DetectedSignal("No Data", None, "neutral", "No candle data available.")

FLAT_DOJI = DetectedSignal(
    "Doji",
    "doji",
    "wait",
    "Open, high, low, and close are all equal — complete market indecision.",
)

THREE_WHITE_SOLDIERS = DetectedSignal(
    "Three White Soldiers",
    "three-white-soldiers",
    "buy",
    "Three consecutive strong bullish candles with ascending closes — steady buying pressure signals a powerful upside move.",
)
THREE_BLACK_CROWS = DetectedSignal(
    "Three Black Crows",
    "three-black-crows",
    "sell",
    "Three consecutive strong bearish candles with descending closes — relentless selling pressure signals a continued downturn.",
)
MORNING_STAR = DetectedSignal(
    "Morning Star",
    "morning-star",
    "buy",
    "A small indecision candle between a bearish and bullish candle — the classic three-candle reversal pattern pointing to upside.",
)
EVENING_STAR = DetectedSignal(
    "Evening Star",
    "evening-star",
    "sell",
    "A small indecision candle between a bullish and bearish candle — the classic three-candle reversal pattern pointing to downside.",
)

BULLISH_ENGULFING = DetectedSignal(
    "Bullish Engulfing",
    "bullish-engulfing",
    "buy",
    "A large bullish candle completely engulfs the prior bearish candle — a decisive shift in momentum to the upside.",
)
BEARISH_ENGULFING = DetectedSignal(
    "Bearish Engulfing",
    "bearish-engulfing",
    "sell",
    "A large bearish candle completely engulfs the prior bullish candle — sellers have taken control from buyers.",
)
TWEEZER_TOPS = DetectedSignal(
    "Tweezer Tops",
    "tweezer-tops",
    "sell",
    "Two candles hit the same high and were rejected — price failed to break resistance twice, suggesting a reversal.",
)
TWEEZER_BOTTOMS = DetectedSignal(
    "Tweezer Bottoms",
    "tweezer-bottoms",
    "buy",
    "Two candles bounced off the same low — price found support at this level twice, suggesting a bottom has formed.",
)

DOJI = DetectedSignal(
    "Doji",
    "doji",
    "wait",
    "Open and close are nearly equal — the market is undecided. Wait for the next candle to confirm direction.",
)
BULLISH_MARUBOZU = DetectedSignal(
    "Marubozu",
    "marubozu",
    "buy",
    "A full-bodied bullish candle with almost no shadows — dominant buying conviction, trend continuation is likely.",
)
BEARISH_MARUBOZU = DetectedSignal(
    "Marubozu",
    "marubozu",
    "sell",
    "A full-bodied bearish candle with almost no shadows — dominant selling conviction, trend continuation is likely.",
)
HAMMER = DetectedSignal(
    "Hammer",
    "hammer",
    "buy",
    "A small body at the top with a long lower wick after a downtrend — sellers pushed price down but buyers fought back, signaling a potential reversal.",
)
HANGING_MAN = DetectedSignal(
    "Hanging Man",
    "hanging-man",
    "sell",
    "A small body at the top with a long lower wick after an uptrend — selling pressure is appearing despite the close near the high.",
)
INVERTED_HAMMER = DetectedSignal(
    "Inverted Hammer",
    "inverted-hammer",
    "buy",
    "A small body at the bottom with a long upper wick after a downtrend — buying pressure is emerging even though sellers pushed it back.",
)
SHOOTING_STAR = DetectedSignal(
    "Shooting Star",
    "shooting-star",
    "sell",
    "A small body at the bottom with a long upper wick after an uptrend — buyers pushed up but sellers overwhelmed them by close.",
)
SPINNING_TOP = DetectedSignal(
    "Spinning Top",
    "spinning-top",
    "wait",
    "A small body with balanced shadows — neither buyers nor sellers won this period. Watch for a breakout candle next.",
)

BULLISH_CANDLE = DetectedSignal(
    "Bullish Candle",
    None,
    "neutral",
    "A standard bullish candle — buyers controlled this period. No specific reversal or continuation pattern detected.",
)
BEARISH_CANDLE = DetectedSignal(
    "Bearish Candle",
    None,
    "neutral",
    "A standard bearish candle — sellers controlled this period. No specific reversal or continuation pattern detected.",
)


# --- Rule cascade ---

@dataclass(frozen=True)
class _Bars:
    """Tail of the series plus the current bar's geometry (range > 0)."""

    cur: Candle
    prev: Candle | None
    prev2: Candle | None
    trend: Trend
    body: float
    rng: float
    upper: float
    lower: float
    ratio: float
    bull: bool


@dataclass(frozen=True)
class PatternRule:
    name: str
    min_window: int
    matches: Callable[[_Bars], bool]
    build: Callable[[_Bars], DetectedSignal]


def _three_white_soldiers(b: _Bars) -> bool:
    a, m, c = b.prev2, b.prev, b.cur
    return (
        is_bullish(a)
        and is_bullish(m)
        and b.bull
        and m.close > a.close
        and c.close > m.close
        and body_ratio(a) > 0.5
        and body_ratio(m) > 0.5
        and b.ratio > 0.5
    )


def _three_black_crows(b: _Bars) -> bool:
    a, m, c = b.prev2, b.prev, b.cur
    return (
        not is_bullish(a)
        and not is_bullish(m)
        and not b.bull
        and m.close < a.close
        and c.close < m.close
        and body_ratio(a) > 0.5
        and body_ratio(m) > 0.5
        and b.ratio > 0.5
    )


def _morning_star(b: _Bars) -> bool:
    a = b.prev2
    return (
        not is_bullish(a)
        and body_ratio(a) > 0.5
        and body_ratio(b.prev) < 0.3
        and b.bull
        and b.ratio > 0.4
        and b.cur.close > (a.open + a.close) / 2
    )


def _evening_star(b: _Bars) -> bool:
    a = b.prev2
    return (
        is_bullish(a)
        and body_ratio(a) > 0.5
        and body_ratio(b.prev) < 0.3
        and not b.bull
        and b.ratio > 0.4
        and b.cur.close < (a.open + a.close) / 2
    )


def _bullish_engulfing(b: _Bars) -> bool:
    p, c = b.prev, b.cur
    return (
        not is_bullish(p)
        and b.bull
        and c.open <= min(p.open, p.close)
        and c.close >= max(p.open, p.close)
        and b.body > body_size(p)
    )


def _bearish_engulfing(b: _Bars) -> bool:
    p, c = b.prev, b.cur
    return (
        is_bullish(p)
        and not b.bull
        and c.open >= max(p.open, p.close)
        and c.close <= min(p.open, p.close)
        and b.body > body_size(p)
    )


def _tweezer_tops(b: _Bars) -> bool:
    return (
        b.trend == "up"
        and abs(b.cur.high - b.prev.high) / b.rng < 0.05
        and is_bullish(b.prev)
        and not b.bull
    )


def _tweezer_bottoms(b: _Bars) -> bool:
    return (
        b.trend == "down"
        and abs(b.cur.low - b.prev.low) / b.rng < 0.05
        and not is_bullish(b.prev)
        and b.bull
    )


def _long_lower_wick(b: _Bars) -> bool:
    return b.ratio < 0.35 and b.lower >= b.body * 2 and b.upper <= b.body * 0.5


def _long_upper_wick(b: _Bars) -> bool:
    return b.ratio < 0.35 and b.upper >= b.body * 2 and b.lower <= b.body * 0.5


def _spinning_top(b: _Bars) -> bool:
    if not (b.ratio < 0.35 and b.upper > 0 and b.lower > 0):
        return False
    return min(b.upper, b.lower) / max(b.upper, b.lower) > 0.4


def _fixed(sig: DetectedSignal) -> Callable[[_Bars], DetectedSignal]:
    return lambda _b: sig


# Order is significant: rule bodies overlap and the first match wins.
RULES: tuple[PatternRule, ...] = (
    PatternRule("Three White Soldiers", 3, _three_white_soldiers, _fixed(THREE_WHITE_SOLDIERS)),
    PatternRule("Three Black Crows", 3, _three_black_crows, _fixed(THREE_BLACK_CROWS)),
    PatternRule("Morning Star", 3, _morning_star, _fixed(MORNING_STAR)),
    PatternRule("Evening Star", 3, _evening_star, _fixed(EVENING_STAR)),
    PatternRule("Bullish Engulfing", 2, _bullish_engulfing, _fixed(BULLISH_ENGULFING)),
    PatternRule("Bearish Engulfing", 2, _bearish_engulfing, _fixed(BEARISH_ENGULFING)),
    PatternRule("Tweezer Tops", 2, _tweezer_tops, _fixed(TWEEZER_TOPS)),
    PatternRule("Tweezer Bottoms", 2, _tweezer_bottoms, _fixed(TWEEZER_BOTTOMS)),
    PatternRule("Doji", 1, lambda b: b.ratio < 0.1, _fixed(DOJI)),
    PatternRule("Marubozu", 1, lambda b: b.ratio > 0.85, lambda b: BULLISH_MARUBOZU if b.bull else BEARISH_MARUBOZU),
    PatternRule("Hammer / Hanging Man", 1, _long_lower_wick, lambda b: HAMMER if b.trend == "down" else HANGING_MAN),
    PatternRule("Inverted Hammer / Shooting Star", 1, _long_upper_wick, lambda b: INVERTED_HAMMER if b.trend == "down" else SHOOTING_STAR),
    PatternRule("Spinning Top", 1, _spinning_top, _fixed(SPINNING_TOP)),
)


def _bars(candles: Sequence[Candle]) -> _Bars:
    cur = candles[-1]
    body = body_size(cur)
    rng = candle_range(cur)
    return _Bars(
        cur=cur,
        prev=candles[-2] if len(candles) >= 2 else None,
        prev2=candles[-3] if len(candles) >= 3 else None,
        trend=detect_trend(candles[:-1]),
        body=body,
        rng=rng,
        upper=upper_shadow(cur),
        lower=lower_shadow(cur),
        ratio=body / rng,
        bull=is_bullish(cur),
    )


def detect_pattern(candles: Sequence[Candle]) -> DetectedSignal:
    """Classify the last candle of an ascending series.

    Total over finite input: the empty series yields `NO_DATA`, and a bar
    that matches no rule falls back to a plain bullish/bearish candle.
    """
    cs = list(candles)
    if not cs:
        return NO_DATA

    # Zero range short-circuits before any ratio is computed.
    if candle_range(cs[-1]) == 0:
        return FLAT_DOJI

    bars = _bars(cs)
    for rule in RULES:
        if len(cs) < rule.min_window:
            continue
        if rule.matches(bars):
            return rule.build(bars)

    return BULLISH_CANDLE if bars.bull else BEARISH_CANDLE
