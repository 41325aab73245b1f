# kmotion/chart/chart_view.py
from __future__ import annotations

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QSizePolicy, QWidget

from kmotion.chart.renderer import DOWN, UP, draw_chart, hit_test
from kmotion.data.models import Bar
from kmotion.session import StudioSession


class ChartView(QWidget):
    """
    Surface du graphique : repeint entièrement la frame courante de la session
    à chaque `changed`, et affiche l'OHLC de la bougie survolée (overlay écran seulement).
    """

    def __init__(self, session: StudioSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._hover: Bar | None = None

        self.setMouseTracking(True)
        self.setMinimumSize(320, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setCursor(Qt.CursorShape.CrossCursor)

        session.changed.connect(self._on_session_changed)

    # --------- Qt events ---------
    def paintEvent(self, e):
        w, h = self.width(), self.height()
        bars = self.session.visible_bars()
        p = QPainter(self)
        try:
            draw_chart(p, w, h, bars, self.session.scale(bars), self.session.config)
            if self._hover is not None:
                self._draw_tooltip(p, self._hover)
        finally:
            p.end()

    def resizeEvent(self, e):
        self.session.set_surface_size(self.width(), self.height(), self.devicePixelRatioF())
        super().resizeEvent(e)

    def mouseMoveEvent(self, e):
        bar = hit_test(e.position().x(), self.width(), self.height(), self.session.visible_bars())
        if bar is not self._hover:
            self._hover = bar
            self.update()
        super().mouseMoveEvent(e)

    def leaveEvent(self, e):
        if self._hover is not None:
            self._hover = None
            self.update()
        super().leaveEvent(e)

    # --------- helpers ---------
    @property
    def hovered_bar(self) -> Bar | None:
        return self._hover

    def _on_session_changed(self):
        # La série / le curseur ont bougé : l'ancienne bougie survolée peut ne plus être visible
        if self._hover is not None and self._hover not in self.session.visible_bars():
            self._hover = None
        self.update()

    def _draw_tooltip(self, p: QPainter, bar: Bar):
        rect = QRectF(16, 96, 160, 108)
        p.save()
        p.setPen(QPen(QColor("#475569"), 1))
        p.setBrush(QColor(30, 41, 59, 240))
        p.drawRoundedRect(rect, 4, 4)

        font = QFont("JetBrains Mono")
        font.setPixelSize(11)
        p.setFont(font)
        p.setPen(QColor("#94a3b8"))
        p.drawText(QPointF(rect.left() + 10, rect.top() + 18), bar.time)
        p.setPen(QColor("#334155"))
        p.drawLine(QPointF(rect.left() + 10, rect.top() + 25), QPointF(rect.right() - 10, rect.top() + 25))

        rows = (("Open", bar.open, "#ffffff"), ("High", bar.high, "#ffffff"),
                ("Low", bar.low, "#ffffff"), ("Close", bar.close, UP if bar.is_bull else DOWN))
        y = rect.top() + 42
        for label, value, color in rows:
            p.setPen(QColor("#64748b"))
            p.drawText(QPointF(rect.left() + 10, y), label)
            p.setPen(QColor(color))
            txt = f"{value:.2f}"
            p.drawText(QPointF(rect.right() - 10 - p.fontMetrics().horizontalAdvance(txt), y), txt)
            y += 18
        p.restore()
