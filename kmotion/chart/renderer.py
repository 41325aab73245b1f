# kmotion/chart/renderer.py
"""
Rendu du graphique en bougies sur n'importe quelle cible QPainter (widget, QImage).

Fonction pure de (bougies visibles, taille, échelle, config) : chaque appel repeint
toute la surface, rien n'est patché de façon incrémentale. Le même rendu sert à
l'écran, au snapshot PNG et aux frames de la vidéo.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QFontMetricsF, QImage, QPainter, QPen

from kmotion.data.models import Bar, ChartConfig, to_number
from .scale import ScaleWindow

BACKGROUND = "#0f172a"
TEXT_MAIN = "#ffffff"
TEXT_SUB = "#94a3b8"
TEXT_MUTED = "#64748b"
TEXT_EMPTY = "#475569"
GRID = "#334155"
UP = "#22c55e"
DOWN = "#ef4444"

UI_FONT = "Inter"
MONO_FONT = "JetBrains Mono"

GRID_FRACTIONS = (0.0, 0.25, 0.5, 0.75, 1.0)
GRID_OPACITY = 0.3
BODY_RATIO = 0.7
MAX_BODY_PX = 50.0
EMPTY_MESSAGE = "En attente de données..."

_LEFT, _CENTER, _RIGHT = "left", "center", "right"


@dataclass(frozen=True)
class ChartLayout:
    """Marges fixes : en-tête en haut, dates + titre X en bas, prix à droite."""
    width: float
    height: float
    top: float = 100
    right: float = 60
    bottom: float = 50
    left: float = 10

    @property
    def chart_w(self) -> float:
        return self.width - self.left - self.right

    @property
    def chart_h(self) -> float:
        return self.height - self.top - self.bottom

    def price_to_y(self, price: float, scale: ScaleWindow) -> float:
        span = scale.max_price - scale.min_price
        if span == 0:
            return self.top + self.chart_h / 2
        pct = (price - scale.min_price) / span
        return self.top + self.chart_h * (1 - pct)

    def slot_width(self, count: int) -> float:
        return self.chart_w / count if count else 0.0

    def body_width(self, count: int) -> float:
        return max(1.0, min(self.slot_width(count) * BODY_RATIO, MAX_BODY_PX))


class HeaderInfo(NamedTuple):
    price: float
    change: float
    change_pct: float
    is_up: bool


def header_info(bars: Sequence[Bar]) -> Optional[HeaderInfo]:
    """Dernier close + variation vs son propre open."""
    if not bars:
        return None
    last = bars[-1]
    change = last.close - last.open
    return HeaderInfo(last.close, change, change / last.open * 100, last.close >= last.open)


def date_ticks(bars: Sequence[Bar]) -> list[tuple[str, str]]:
    """(libellé, ancrage) : début à gauche, milieu si >= 6 bougies, fin à droite si >= 2."""
    n = len(bars)
    if n == 0:
        return []
    ticks = [(bars[0].time, _LEFT)]
    if n > 5:
        ticks.append((bars[n // 2].time, _CENTER))
    if n > 1:
        ticks.append((bars[-1].time, _RIGHT))
    return ticks


def hit_test(x: float, width: float, height: float, bars: Sequence[Bar]) -> Optional[Bar]:
    """Bougie sous le pointeur (même découpage en slots que le rendu) ou None."""
    if not bars or width <= 0 or height <= 0:
        return None
    layout = ChartLayout(width, height)
    if layout.chart_w <= 0:
        return None
    rel = x - layout.left
    if rel < 0 or rel > layout.chart_w:
        return None
    idx = math.floor(rel / layout.slot_width(len(bars)))
    if 0 <= idx < len(bars):
        return bars[idx]
    return None


# ----------------- helpers texte -----------------
def _font(family: str, px: int, weight: QFont.Weight = QFont.Weight.Normal) -> QFont:
    f = QFont(family)
    f.setPixelSize(px)
    f.setWeight(weight)
    return f


def _text(p: QPainter, x: float, y: float, text: str, anchor: str = _LEFT, middle: bool = False):
    fm = QFontMetricsF(p.font())
    w = fm.horizontalAdvance(text)
    if anchor == _RIGHT:
        x -= w
    elif anchor == _CENTER:
        x -= w / 2
    if middle:
        y += (fm.ascent() - fm.descent()) / 2
    p.drawText(QPointF(x, y), text)


# ----------------- rendu -----------------
def draw_chart(
    painter: QPainter,
    width: float,
    height: float,
    bars: Sequence[Bar],
    scale: ScaleWindow,
    config: ChartConfig,
):
    """Repeint toute la surface. Une dimension nulle supprime le dessin."""
    if width <= 0 or height <= 0:
        return

    layout = ChartLayout(width, height)
    y_of = lambda price: layout.price_to_y(price, scale)  # noqa: E731
    p = painter
    p.save()
    p.setOpacity(1.0)

    # 1. Fond
    p.fillRect(QRectF(0, 0, width, height), QColor(BACKGROUND))

    # 2. En-tête : symbole, titre, dernier prix
    p.setPen(QColor(TEXT_MAIN))
    p.setFont(_font(UI_FONT, 24, QFont.Weight.Bold))
    _text(p, 20, 40, config.symbol)

    p.setPen(QColor(TEXT_SUB))
    p.setFont(_font(UI_FONT, 14))
    _text(p, 20, 65, config.title)

    info = header_info(bars)
    if info:
        p.setPen(QColor(TEXT_MAIN))
        p.setFont(_font(MONO_FONT, 24, QFont.Weight.Bold))
        _text(p, width - 20, 40, f"{info.price:.2f}", _RIGHT)

        sign = "+" if info.change >= 0 else ""
        p.setPen(QColor(UP if info.is_up else DOWN))
        p.setFont(_font(MONO_FONT, 14))
        _text(p, width - 20, 65, f"{sign}{info.change_pct:.2f}%", _RIGHT)

    # 3. Grille horizontale + prix à droite
    grid_pen = QPen(QColor(GRID), 1)
    grid_pen.setDashPattern([4, 4])
    p.setFont(_font(MONO_FONT, 10))
    for t in GRID_FRACTIONS:
        price = scale.min_price + (scale.max_price - scale.min_price) * t
        y = y_of(price)
        p.setOpacity(GRID_OPACITY)
        p.setPen(grid_pen)
        p.drawLine(QPointF(layout.left, y), QPointF(width - layout.right, y))
        p.setOpacity(1.0)
        p.setPen(QColor(TEXT_MUTED))
        _text(p, width - layout.right + 8, y, f"{price:.2f}", middle=True)

    # 4. Titres d'axes
    p.setPen(QColor(TEXT_SUB))
    p.setFont(_font(UI_FONT, 11, QFont.Weight.DemiBold))
    _text(p, layout.left, layout.top - 15, config.y_axis_label)
    _text(p, width - layout.right, height - 10, config.x_axis_label, _RIGHT)

    # 5. État vide
    if not bars:
        initial = to_number(config.initial_price)
        if initial:
            ref_pen = QPen(QColor(TEXT_MUTED), 1)
            ref_pen.setDashPattern([2, 2])
            p.setPen(ref_pen)
            y = y_of(initial)
            p.drawLine(QPointF(layout.left, y), QPointF(width - layout.right, y))
        p.setPen(QColor(TEXT_EMPTY))
        p.setFont(_font(UI_FONT, 14))
        _text(p, width / 2, layout.top + layout.chart_h / 2, EMPTY_MESSAGE, _CENTER)
        p.restore()
        return

    # 6. Dates (début / milieu / fin)
    date_y = height - 30
    p.setPen(QColor(TEXT_MUTED))
    p.setFont(_font(MONO_FONT, 10))
    anchors_x = {_LEFT: layout.left, _CENTER: layout.left + layout.chart_w / 2, _RIGHT: width - layout.right}
    for label, anchor in date_ticks(bars):
        _text(p, anchors_x[anchor], date_y, label, anchor)

    # 7. Bougies
    slot = layout.slot_width(len(bars))
    body_w = layout.body_width(len(bars))
    gap = (slot - body_w) / 2
    wick_w = max(1.0, body_w * 0.15)

    for i, bar in enumerate(bars):
        x = layout.left + i * slot + gap
        cx = x + body_w / 2
        color = QColor(config.bull_color if bar.is_bull else config.bear_color)

        wick = QPen(color, wick_w)
        wick.setCapStyle(Qt.PenCapStyle.FlatCap)
        p.setPen(wick)
        p.drawLine(QPointF(cx, y_of(bar.high)), QPointF(cx, y_of(bar.low)))

        y_open, y_close = y_of(bar.open), y_of(bar.close)
        body_h = max(abs(y_open - y_close), 1.0)
        p.fillRect(QRectF(x, min(y_open, y_close), body_w, body_h), color)

    p.restore()


def render_image(
    width: int,
    height: int,
    bars: Sequence[Bar],
    scale: ScaleWindow,
    config: ChartConfig,
    device_pixel_ratio: float = 1.0,
) -> QImage:
    """Rendu hors-écran ; QImage nulle si une dimension vaut 0."""
    if width <= 0 or height <= 0:
        return QImage()
    dpr = max(1.0, float(device_pixel_ratio))
    img = QImage(round(width * dpr), round(height * dpr), QImage.Format.Format_ARGB32_Premultiplied)
    img.setDevicePixelRatio(dpr)
    painter = QPainter(img)
    try:
        draw_chart(painter, width, height, bars, scale, config)
    finally:
        painter.end()
    return img
