# kmotion/session.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QImage

from kmotion import config
from kmotion.chart.renderer import render_image
from kmotion.chart.scale import ScaleWindow, resolve_scale
from kmotion.data.generator import generate_next_bar
from kmotion.data.models import LOCKED_FIELDS, Bar, ChartConfig, Direction
from kmotion.data.series import BarSeries
from kmotion.export.capture import CaptureSink, FrameRecorder
from kmotion.export.exporter import (
    ExportCoordinator, export_path, read_json, write_json, write_snapshot,
)
from kmotion.player.playback import PlaybackController


def _dbg(*a):
    if config.DEBUG:
        print("[SESSION]", *a, flush=True)


class StudioSession(QObject):
    """
    Tout l'état mutable d'une session de travail : série, config, curseur,
    taille de la surface, recorder et coordinateur d'export.
    `changed` est émis à chaque mutation -> le graphique se repeint entièrement.
    """
    changed = pyqtSignal()
    configChanged = pyqtSignal(object)   # ChartConfig

    def __init__(
        self,
        chart_config: ChartConfig | None = None,
        sink: CaptureSink | None = None,
        export_dir: str | Path | None = None,
        settle_ms: int = config.EXPORT_SETTLE_MS,
        parent=None,
    ):
        super().__init__(parent)
        self._config = chart_config or ChartConfig()
        self.volatility: float = config.DEFAULT_VOLATILITY
        self.export_dir = Path(export_dir or config.EXPORT_DIR)
        self._surface = (config.SURFACE_WIDTH, config.SURFACE_HEIGHT)
        self._dpr = 1.0

        self.series = BarSeries(parent=self)
        self.playback = PlaybackController(self.series, parent=self)
        if sink is None:
            sink = FrameRecorder(
                self.render_frame,
                lambda: export_path(self._config.symbol, "animation", config.VIDEO_EXT, self.export_dir),
                parent=self,
            )
        self.sink = sink
        self.exporter = ExportCoordinator(self.playback, self.series, sink, settle_ms=settle_ms, parent=self)

        self.series.lengthChanged.connect(lambda *_: self.changed.emit())
        self.playback.frameChanged.connect(lambda *_: self.changed.emit())
        self.configChanged.connect(lambda *_: self.changed.emit())

    # ---------- état ----------
    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def current_frame(self) -> int:
        return self.playback.current_frame

    @property
    def is_recording(self) -> bool:
        return self.exporter.busy

    @property
    def locked(self) -> bool:
        """timeframe / prix initial / date de départ figés tant que la série n'est pas vide."""
        return len(self.series) > 0

    def visible_bars(self) -> list[Bar]:
        return self.series.visible(self.playback.current_frame)

    def scale(self, bars: list[Bar] | None = None) -> ScaleWindow:
        cfg = self._config
        bars = self.visible_bars() if bars is None else bars
        return resolve_scale(bars, cfg.initial_price, cfg.y_min, cfg.y_max)

    # ---------- surface ----------
    @property
    def surface_size(self) -> tuple[int, int]:
        return self._surface

    def set_surface_size(self, width: int, height: int, device_pixel_ratio: float = 1.0):
        self._surface = (max(0, int(width)), max(0, int(height)))
        self._dpr = device_pixel_ratio

    def render_frame(self, width: int | None = None, height: int | None = None) -> QImage:
        """Rendu hors-écran de la frame courante (snapshot, capture vidéo)."""
        w, h = self._surface if width is None else (width, height)
        bars = self.visible_bars()
        return render_image(w, h, bars, self.scale(bars), self._config, self._dpr)

    # ---------- édition ----------
    def update_config(self, **changes) -> ChartConfig:
        if self.locked:
            ignored = LOCKED_FIELDS.intersection(changes)
            for key in ignored:
                changes.pop(key)
                _dbg(f"'{key}' figé tant que la série n'est pas effacée")
        if not changes:
            return self._config
        self._config = self._config.with_changes(**changes)
        self.configChanged.emit(self._config)
        return self._config

    def add_bar(self, direction: Direction | str) -> Optional[Bar]:
        """Ajout manuel d'une bougie ; met la lecture en pause et avance le curseur d'une frame."""
        if self.exporter.busy:
            _dbg("add_bar ignoré pendant l'export")
            return None
        cfg = self._config
        bar = generate_next_bar(
            self.series.last(),
            direction,
            self.volatility,
            cfg.start_date,
            cfg.initial_price,
            cfg.timeframe,
        )
        frame = self.playback.current_frame
        self.playback.pause()
        self.series.append(bar)
        # Le curseur avance d'une bougie ; à une bougie de la fin, il rattrape la fin
        target = frame + 1
        if target == len(self.series) - 1:
            target = len(self.series)
        self.playback.seek(target)
        _dbg("bar", len(self.series), bar.time, f"{bar.open:.2f}->{bar.close:.2f}")
        return bar

    @pyqtSlot()
    def clear(self):
        self.exporter.cancel()
        self.playback.pause()
        self.playback.seek(0)
        self.series.clear()
        self.configChanged.emit(self._config)  # déverrouille les champs figés côté UI

    # ---------- exports ----------
    def export_json(self, path: str | Path | None = None) -> Optional[Path]:
        path = path or export_path(self._config.symbol, "data", "json", self.export_dir)
        return write_json(self.series, path)

    def import_json(self, path: str | Path) -> int:
        """Remplace la série par un dump JSON ; le curseur va à la fin."""
        bars = read_json(path)
        self.exporter.cancel()
        self.playback.pause()
        self.series.load(bars)
        self.playback.seek_end()
        self.configChanged.emit(self._config)
        print(f"📂 {len(bars)} bougies importées depuis {path}")
        return len(bars)

    def export_snapshot(self, path: str | Path | None = None) -> Optional[Path]:
        if len(self.series) == 0:
            return None
        path = path or export_path(self._config.symbol, "snapshot", "png", self.export_dir)
        return write_snapshot(self.render_frame(), path)

    def export_video(self) -> bool:
        return self.exporter.start()

    def shutdown(self):
        self.exporter.cancel()
        self.playback.pause()
