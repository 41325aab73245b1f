# kmotion/player/playback.py
from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer, Qt, pyqtSignal, pyqtSlot

from kmotion import config
from kmotion.data.series import BarSeries


def _dbg(*a):
    if config.DEBUG:
        print("[PLAYER]", *a, flush=True)


class PlaybackController(QObject):
    """
    Curseur de lecture sur la série : current_frame = nombre de bougies visibles,
    toujours dans [0, len(series)]. Idle <-> Playing, avancé par un QTimer à 1000/fps ms.
    """
    frameChanged = pyqtSignal(int)
    playingChanged = pyqtSignal(bool)

    def __init__(self, series: BarSeries, fps: int = config.DEFAULT_FPS, parent=None):
        super().__init__(parent)
        self._series = series
        self._frame = 0
        self._fps = self._check_fps(fps)

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(self.interval_ms)
        self._timer.timeout.connect(self.tick)

        self._series.lengthChanged.connect(self._on_length_changed)

    # ---------- état ----------
    @property
    def current_frame(self) -> int:
        return self._frame

    @property
    def total_frames(self) -> int:
        return len(self._series)

    @property
    def is_playing(self) -> bool:
        return self._timer.isActive()

    @property
    def at_end(self) -> bool:
        return self._frame >= len(self._series)

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def interval_ms(self) -> int:
        return int(1000 / self._fps)

    @staticmethod
    def _check_fps(fps: int) -> int:
        if fps not in config.FPS_CHOICES:
            raise ValueError(f"fps must be one of {config.FPS_CHOICES} (got {fps})")
        return int(fps)

    def set_fps(self, fps: int):
        self._fps = self._check_fps(fps)
        self._timer.setInterval(self.interval_ms)  # réarme le timer s'il tourne
        _dbg("fps ->", self._fps)

    # ---------- commandes ----------
    @pyqtSlot()
    def toggle(self):
        """Play/pause : rembobine à 0 si on est déjà à la fin."""
        if len(self._series) == 0:
            return
        if self.is_playing:
            self.pause()
        else:
            self.play()

    @pyqtSlot()
    def play(self):
        if len(self._series) == 0 or self.is_playing:
            return
        if self.at_end:
            self.seek(0)
        self._timer.start()
        _dbg(f"play from {self._frame}/{len(self._series)} @ {self._fps} fps")
        self.playingChanged.emit(True)

    @pyqtSlot()
    def pause(self):
        """Idempotent : aucun timer ne reste actif en Idle."""
        if not self._timer.isActive():
            return
        self._timer.stop()
        _dbg(f"pause at {self._frame}/{len(self._series)}")
        self.playingChanged.emit(False)

    @pyqtSlot(int)
    def seek(self, frame: int):
        frame = max(0, min(int(frame), len(self._series)))
        if frame == self._frame:
            return
        self._frame = frame
        self.frameChanged.emit(frame)

    def step(self, delta: int):
        self.seek(self._frame + delta)

    def seek_end(self):
        self.seek(len(self._series))

    @pyqtSlot()
    def tick(self):
        """Un pas de lecture ; passe en Idle dès que le curseur atteint la fin."""
        if self._frame < len(self._series):
            self.seek(self._frame + 1)
        if self.at_end:
            self.pause()

    # ---------- série ----------
    @pyqtSlot(int, int)
    def _on_length_changed(self, new_len: int, old_len: int):
        if self._frame > new_len:
            self.seek(new_len)
            return
        # Ajout manuel d'une bougie : si on était sur la dernière, on la montre tout de suite
        if (not self.is_playing and new_len == old_len + 1
                and self._frame == new_len - 1):
            self.seek(new_len)
