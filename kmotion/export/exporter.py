# kmotion/export/exporter.py
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QImage

from kmotion import config
from kmotion.data.series import BarSeries
from kmotion.player.playback import PlaybackController
from .capture import CaptureError, CaptureSink


def _dbg(*a):
    if config.DEBUG:
        print("[EXPORT]", *a, flush=True)


# ---------- fichiers ----------
def safe_name(symbol: str) -> str:
    """'BTC/USD' -> 'BTC-USD' (utilisable comme nom de fichier)."""
    name = re.sub(r"[^\w.\-]+", "-", symbol.strip()).strip("-.")
    return name or "chart"


def export_path(symbol: str, kind: str, ext: str, directory: str | Path = None) -> Path:
    return Path(directory or config.EXPORT_DIR) / f"{safe_name(symbol)}_{kind}.{ext}"


def write_json(series: BarSeries, path: Path) -> Optional[Path]:
    """Dump brut de toute la série ; no-op si vide."""
    if len(series) == 0:
        return None
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(series.to_json(), encoding="utf-8")
    print(f"💾 JSON exporté: {path} ({len(series)} bougies)")
    return path


def read_json(path: Path) -> list:
    return BarSeries.parse_json(Path(path).read_bytes())


def write_snapshot(image: QImage, path: Path) -> Optional[Path]:
    if image is None or image.isNull():
        return None
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not image.save(str(path), "PNG"):
        print("❌ Snapshot non écrit:", path)
        return None
    print(f"📸 Snapshot: {path}")
    return path


# ---------- vidéo ----------
class ExportCoordinator(QObject):
    """
    Orchestration d'un export vidéo complet :
    pause -> seek(0) -> armement -> délai de stabilisation -> sink.start() -> play().
    Le curseur n'est jamais écrit directement : uniquement via pause/seek/play du player.
    Le sink est arrêté une seule fois, dès que current_frame >= len(series).
    """
    recordingChanged = pyqtSignal(bool)
    exportFinished = pyqtSignal(object)   # Path
    exportFailed = pyqtSignal(str)

    IDLE, ARMED, RECORDING = "idle", "armed", "recording"

    def __init__(
        self,
        playback: PlaybackController,
        series: BarSeries,
        sink: CaptureSink | None,
        settle_ms: int = config.EXPORT_SETTLE_MS,
        parent=None,
    ):
        super().__init__(parent)
        self._playback = playback
        self._series = series
        self._sink = sink
        self._state = self.IDLE

        self._settle = QTimer(self)
        self._settle.setSingleShot(True)
        self._settle.setInterval(int(settle_ms))
        self._settle.timeout.connect(self._begin_capture)

        self._playback.frameChanged.connect(self._on_frame)

    @property
    def state(self) -> str:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state != self.IDLE

    @property
    def is_recording(self) -> bool:
        return self._state == self.RECORDING

    @property
    def settle_ms(self) -> int:
        return self._settle.interval()

    # ---------- commandes ----------
    def start(self) -> bool:
        if self.busy or len(self._series) == 0:
            return False
        if self._sink is None or not self._sink.is_available():
            print("❌ Export vidéo annulé: surface ou backend de capture indisponible")
            self.exportFailed.emit("capture indisponible")
            return False

        self._playback.pause()
        self._playback.seek(0)
        self._set_state(self.ARMED)
        self._settle.start()
        _dbg(f"armed; capture in {self._settle.interval()} ms")
        return True

    @pyqtSlot()
    def cancel(self):
        if self._state == self.ARMED:
            self._settle.stop()
        elif self._state == self.RECORDING:
            self._sink.abort()
            self._playback.pause()
        else:
            return
        print("⏹ Export vidéo interrompu")
        self._set_state(self.IDLE)

    # ---------- interne ----------
    @pyqtSlot()
    def _begin_capture(self):
        if self._state != self.ARMED:
            return
        self._playback.seek(0)
        try:
            self._sink.start()
        except CaptureError as e:
            self._fail(str(e))
            return
        self._set_state(self.RECORDING)
        self._playback.play()

    @pyqtSlot(int)
    def _on_frame(self, frame: int):
        if self._state != self.RECORDING or frame < len(self._series):
            return
        # Passe en Idle avant stop() : un frameChanged ré-entrant ne relance pas l'arrêt
        self._set_state(self.IDLE)
        try:
            asset = self._sink.stop()
        except CaptureError as e:
            self._playback.pause()
            print("❌ Export vidéo échoué:", e)
            self.exportFailed.emit(str(e))
            return
        self._playback.pause()
        self.exportFinished.emit(asset)

    def _fail(self, message: str):
        print("❌ Export vidéo échoué:", message)
        try:
            self._sink.abort()
        finally:
            self._playback.pause()
            self._set_state(self.IDLE)
            self.exportFailed.emit(message)

    def _set_state(self, state: str):
        was_busy = self.busy
        self._state = state
        if was_busy != self.busy:
            self.recordingChanged.emit(self.busy)
