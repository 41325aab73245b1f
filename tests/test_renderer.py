from PyQt6.QtCore import QPointF

from conftest import make_bars
from kmotion.chart.renderer import (
    BACKGROUND, ChartLayout, date_ticks, header_info, hit_test, render_image,
)
from kmotion.chart.scale import ScaleWindow, resolve_scale
from kmotion.data.models import Bar, ChartConfig

BULL = Bar(time="2024-01-02", open=100, high=112, low=99, close=110)
BEAR = Bar(time="2024-01-02", open=110, high=112, low=99, close=100)


def _render(bars, w=400, h=300, cfg=None):
    cfg = cfg or ChartConfig()
    return render_image(w, h, bars, resolve_scale(bars, cfg.initial_price, cfg.y_min, cfg.y_max), cfg)


class TestLayout:

    def test_price_to_y_is_linear(self):
        layout = ChartLayout(400, 300)
        scale = ScaleWindow(90, 110)
        assert layout.price_to_y(110, scale) == layout.top
        assert layout.price_to_y(90, scale) == layout.top + layout.chart_h
        assert layout.price_to_y(100, scale) == layout.top + layout.chart_h / 2

    def test_degenerate_range_maps_to_middle(self):
        layout = ChartLayout(400, 300)
        assert layout.price_to_y(123, ScaleWindow(100, 100)) == layout.top + layout.chart_h / 2

    def test_body_width_bounds(self):
        layout = ChartLayout(400, 300)
        assert layout.body_width(1) == 50
        assert layout.body_width(10) == 33 * 0.7
        assert layout.body_width(5000) == 1


class TestRender:

    def test_background_and_bull_body(self):
        img = _render([BULL])
        assert img.width() == 400 and img.height() == 300
        assert img.pixelColor(2, 2).name() == BACKGROUND
        # corps centré dans l'unique slot (x 150..200), y(105) ~ 180
        assert img.pixelColor(175, 180).name() == "#22c55e"

    def test_bear_body_uses_bear_color(self):
        img = _render([BEAR], cfg=ChartConfig(bear_color="#123456"))
        assert img.pixelColor(175, 180).name() == "#123456"

    def test_empty_state(self):
        img = _render([])
        assert not img.isNull()
        assert img.pixelColor(2, 2).name() == BACKGROUND

    def test_zero_dimension_suppresses_drawing(self):
        assert _render([BULL], w=0).isNull()
        assert _render([BULL], h=0).isNull()

    def test_idempotent(self):
        bars = make_bars(25)
        assert _render(bars) == _render(bars)

    def test_many_bars(self):
        img = _render(make_bars(800), w=640, h=360)
        assert not img.isNull()


class TestHelpers:

    def test_header_info(self):
        info = header_info([BEAR, BULL])
        assert info.price == 110
        assert info.change == 10
        assert info.change_pct == 10.0
        assert info.is_up
        assert header_info([]) is None

    def test_date_ticks(self):
        bars = make_bars(7)
        assert date_ticks([]) == []
        assert date_ticks(bars[:1]) == [(bars[0].time, "left")]
        assert date_ticks(bars[:2]) == [(bars[0].time, "left"), (bars[1].time, "right")]
        assert [a for _, a in date_ticks(bars[:5])] == ["left", "right"]
        assert date_ticks(bars[:6]) == [(bars[0].time, "left"), (bars[3].time, "center"), (bars[5].time, "right")]

    def test_hit_test(self):
        bars = make_bars(3)   # chart_w = 330 -> slots de 110 px
        assert hit_test(15, 400, 300, bars) is bars[0]
        assert hit_test(10 + 115, 400, 300, bars) is bars[1]
        assert hit_test(339, 400, 300, bars) is bars[2]
        assert hit_test(5, 400, 300, bars) is None
        assert hit_test(345, 400, 300, bars) is None
        assert hit_test(50, 400, 300, []) is None
        assert hit_test(50, 0, 0, bars) is None
        # largeur juste égale aux marges : aucune zone de graphique
        assert hit_test(10, 70, 300, bars) is None
        assert hit_test(10, 40, 300, bars) is None
