import random

import pytest

from conftest import make_bars
from kmotion.chart.scale import ScaleWindow, resolve_scale
from kmotion.data.models import Bar


def test_empty_series_with_initial_price():
    # 100 -> ±5 % -> (95, 105) -> 10 % de marge -> (94, 106)
    assert resolve_scale([], 100) == ScaleWindow(94.0, 106.0)


def test_empty_series_without_initial_price_uses_flat_guard():
    # baseline 100 plate -> (95, 105) -> (94, 106)
    assert resolve_scale([], None) == ScaleWindow(94.0, 106.0)


def test_bars_widen_around_initial_anchor():
    bar = Bar(time="t", open=100, high=112, low=99, close=110)
    win = resolve_scale([bar], 100)
    assert win.min_price == pytest.approx(99 - 1.3)
    assert win.max_price == pytest.approx(112 + 1.3)


def test_anchor_is_kept_when_bars_drift_away():
    bar = Bar(time="t", open=150, high=160, low=149, close=158)
    win = resolve_scale([bar], 100)
    assert win.min_price < 100 < win.max_price


def test_flat_bars():
    bar = Bar(time="t", open=50, high=50, low=50, close=50)
    win = resolve_scale([bar], None)
    # min(100, 50) / max(100, 50) -> pas plat
    assert win == pytest.approx((45.0, 105.0))


@pytest.mark.parametrize("y_min,y_max,expected", [
    ("90", None, (90.0, 106.0)),
    (None, 110, (94.0, 110.0)),
    ("abc", "", (94.0, 106.0)),
    (80, 120, (80.0, 120.0)),
])
def test_overrides(y_min, y_max, expected):
    assert resolve_scale([], 100, y_min, y_max) == pytest.approx(expected)


def test_inverted_overrides_are_repaired():
    win = resolve_scale([], 100, y_min=200, y_max=150)
    assert win == ScaleWindow(200, 201)


def test_pure_and_ordered():
    rng = random.Random(3)
    for n in range(0, 60, 7):
        bars = make_bars(n, seed=rng.randint(0, 1000))
        initial = rng.choice([None, 100, "100", 0])
        first = resolve_scale(bars, initial, None, None)
        assert resolve_scale(bars, initial, None, None) == first
        assert first.min_price < first.max_price
        assert first.span > 0
