from __future__ import annotations

from candlescope.ai.candlestick_patterns import (
    FLAT_DOJI,
    RULES,
    body_ratio,
    candle_range,
    detect_pattern,
    detect_trend,
    is_bullish,
    lower_shadow,
    upper_shadow,
)
from candlescope.candles.adapters import mock
from candlescope.candles.models import Candle


def _mk(i: int, o: float, h: float, l: float, c: float, v: int = 1000) -> Candle:
    return Candle(date=f"2024-01-{i + 1:02d}", open=o, high=h, low=l, close=c, volume=v)


def _series(*bars: tuple[float, float, float, float]) -> list[Candle]:
    return [_mk(i, *b) for i, b in enumerate(bars)]


def _closes(*xs: float) -> list[Candle]:
    return [_mk(i, x, x + 1, x - 1, x) for i, x in enumerate(xs)]


DOWNTREND = [
    (122, 123, 119, 120),
    (117, 118, 114, 115),
    (112, 113, 109, 110),
    (107, 108, 104, 105),
]
UPTREND = [
    (78, 81, 77, 80),
    (83, 86, 82, 85),
    (88, 91, 87, 90),
    (93, 96, 92, 95),
]


def test_geometry_helpers():
    c = _mk(0, 100, 103, 90, 102)
    assert candle_range(c) == 13
    assert upper_shadow(c) == 1
    assert lower_shadow(c) == 10
    assert is_bullish(c)
    assert abs(body_ratio(c) - 2 / 13) < 1e-12

    flat = _mk(0, 5, 5, 5, 5)
    assert is_bullish(flat)  # tie favors bullish
    assert body_ratio(flat) == 0.0


def test_empty_series_is_no_data():
    res = detect_pattern([])
    assert res.pattern_name == "No Data"
    assert res.slug is None
    assert res.signal == "neutral"
    assert res.to_dict() == {
        "patternName": "No Data",
        "slug": None,
        "signal": "neutral",
        "explanation": "No candle data available.",
    }


def test_zero_range_is_doji_regardless_of_history():
    history = [
        (10, 12.1, 9.9, 12),
        (12, 14.1, 11.9, 14),
    ]
    res = detect_pattern(_series(*history, (100, 100, 100, 100)))
    assert res == FLAT_DOJI
    assert res.slug == "doji"
    assert res.signal == "wait"

    assert detect_pattern(_series((7, 7, 7, 7))) == FLAT_DOJI


def test_three_white_soldiers_beats_marubozu():
    soldiers = _series(
        (10, 12.1, 9.9, 12),
        (12, 14.1, 11.9, 14),
        (14, 16.05, 13.98, 16),
    )
    res = detect_pattern(soldiers)
    assert res.pattern_name == "Three White Soldiers"
    assert res.signal == "buy"

    # The same final candle on its own is a bullish marubozu.
    alone = detect_pattern(soldiers[-1:])
    assert alone.slug == "marubozu"
    assert alone.signal == "buy"


def test_three_black_crows():
    res = detect_pattern(
        _series(
            (16, 16.1, 13.9, 14),
            (14, 14.1, 11.9, 12),
            (12, 12.05, 9.95, 10),
        )
    )
    assert res.slug == "three-black-crows"
    assert res.signal == "sell"


def test_morning_star():
    res = detect_pattern(
        _series(
            (20, 20.2, 15.8, 16),
            (15.5, 16, 14.5, 15.6),
            (15.8, 19.2, 15.6, 19),
        )
    )
    assert res.slug == "morning-star"
    assert res.signal == "buy"


def test_morning_star_needs_close_above_first_body_midpoint():
    res = detect_pattern(
        _series(
            (20, 20.2, 15.8, 16),
            (15.5, 16, 14.5, 15.6),
            (15.8, 18.0, 15.6, 17.8),
        )
    )
    assert res.slug != "morning-star"


def test_evening_star():
    res = detect_pattern(
        _series(
            (16, 20.2, 15.8, 20),
            (20.5, 21, 19.9, 20.6),
            (20.2, 20.4, 16.8, 17),
        )
    )
    assert res.slug == "evening-star"
    assert res.signal == "sell"


def test_bullish_engulfing_exactness():
    prior = (10, 10.5, 7.5, 8)
    res = detect_pattern(_series(prior, (8, 11.5, 7.8, 11)))
    assert res.pattern_name == "Bullish Engulfing"
    assert res.signal == "buy"

    # Smaller current body no longer engulfs; falls through to the default.
    res = detect_pattern(_series(prior, (8, 11.5, 7.8, 9.5)))
    assert res.pattern_name != "Bullish Engulfing"
    assert res.pattern_name == "Bullish Candle"
    assert res.slug is None


def test_equal_bodies_do_not_engulf():
    res = detect_pattern(_series((10, 10.5, 7.5, 8), (8, 10.2, 7.9, 10)))
    assert res.slug == "marubozu"
    assert res.signal == "buy"


def test_bearish_engulfing():
    res = detect_pattern(_series((8, 10.5, 7.5, 10), (10.2, 10.4, 7.6, 7.8)))
    assert res.slug == "bearish-engulfing"
    assert res.signal == "sell"


def test_tweezer_tops_after_uptrend():
    res = detect_pattern(
        _series(
            (90, 92, 89, 91),
            (91, 93, 90, 92),
            (92, 94, 91, 93),
            (93, 96, 92.5, 95),
            (95.5, 96.05, 93.5, 94),
        )
    )
    assert res.slug == "tweezer-tops"
    assert res.signal == "sell"


def test_tweezer_bottoms_after_downtrend():
    res = detect_pattern(
        _series(
            (110, 111, 108, 109),
            (109, 110, 107, 108),
            (108, 109, 106, 107),
            (107, 107.5, 104, 105),
            (104.5, 106.5, 103.95, 106),
        )
    )
    assert res.slug == "tweezer-bottoms"
    assert res.signal == "buy"


def test_hammer_vs_hanging_man_depends_on_trend():
    shape = (100, 103, 90, 102)

    down = detect_pattern(_series(*DOWNTREND, shape))
    assert down.pattern_name == "Hammer"
    assert down.slug == "hammer"
    assert down.signal == "buy"

    up = detect_pattern(_series(*UPTREND, shape))
    assert up.pattern_name == "Hanging Man"
    assert up.slug == "hanging-man"
    assert up.signal == "sell"

    # No history means no downtrend.
    assert detect_pattern(_series(shape)).slug == "hanging-man"


def test_inverted_hammer_vs_shooting_star_depends_on_trend():
    shape = (100, 112, 99, 102)

    down = detect_pattern(_series(*DOWNTREND, shape))
    assert down.slug == "inverted-hammer"
    assert down.signal == "buy"

    up = detect_pattern(_series(*UPTREND, shape))
    assert up.slug == "shooting-star"
    assert up.signal == "sell"


def test_small_body_doji():
    res = detect_pattern(_series((100, 102, 98, 100.05)))
    assert res.slug == "doji"
    assert res.signal == "wait"
    assert res != FLAT_DOJI


def test_bearish_marubozu():
    res = detect_pattern(_series((110, 110.5, 99.8, 100)))
    assert res.slug == "marubozu"
    assert res.signal == "sell"


def test_spinning_top_and_unbalanced_small_body():
    spin = detect_pattern(_series((100, 103, 98, 101)))
    assert spin.slug == "spinning-top"
    assert spin.signal == "wait"

    # Shadows too lopsided for a spinning top, too short for a hammer.
    other = detect_pattern(_series((100, 104, 99.4, 101)))
    assert other.pattern_name == "Bullish Candle"


def test_default_fallback_by_color():
    bull = detect_pattern(_series((100, 108, 99, 106)))
    assert bull.pattern_name == "Bullish Candle"
    assert bull.slug is None
    assert bull.signal == "neutral"

    bear = detect_pattern(_series((106, 107, 98, 100)))
    assert bear.pattern_name == "Bearish Candle"
    assert bear.slug is None
    assert bear.signal == "neutral"


def test_trend_majority_and_ties():
    assert detect_trend([]) == "flat"
    assert detect_trend(_closes(10)) == "flat"
    assert detect_trend(_closes(10, 11, 12)) == "up"
    assert detect_trend(_closes(12, 11, 10)) == "down"

    # Equal ups and downs resolve to flat.
    assert detect_trend(_closes(10, 11, 10)) == "flat"
    assert detect_trend(_closes(10, 11, 11, 10)) == "flat"
    # Three steps cannot tie without a flat step.
    assert detect_trend(_closes(10, 11, 10, 11)) == "up"


def test_trend_only_looks_at_last_four():
    # Whole series has more ups, but the last four closes (3, 4, 3, 2) lean down.
    assert detect_trend(_closes(1, 2, 3, 4, 3, 2)) == "down"


def test_rule_order_is_triple_then_double_then_single():
    names = [r.name for r in RULES]
    assert names[:4] == ["Three White Soldiers", "Three Black Crows", "Morning Star", "Evening Star"]
    assert names[4:8] == ["Bullish Engulfing", "Bearish Engulfing", "Tweezer Tops", "Tweezer Bottoms"]
    assert names[8] == "Doji"
    assert [r.min_window for r in RULES] == sorted((r.min_window for r in RULES), reverse=True)


def test_total_and_idempotent_over_mock_series():
    for sym in ("AAPL", "TSLA", "ZZZ"):
        for tf in ("4h", "daily", "weekly", "monthly"):
            candles = mock.fetch_candles(sym, tf)
            snapshot = [c.model_copy() for c in candles]
            for n in range(len(candles) + 1):
                res = detect_pattern(candles[:n])
                assert res.signal in {"buy", "sell", "wait", "neutral"}
                assert res == detect_pattern(candles[:n])
            assert candles == snapshot
