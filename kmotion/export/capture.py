# kmotion/export/capture.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Protocol

import imageio.v2 as imageio
import numpy as np
from PyQt6.QtCore import QObject, QTimer, Qt, pyqtSlot
from PyQt6.QtGui import QImage

from kmotion import config

__all__ = ["CaptureError", "CaptureSink", "FrameRecorder", "qimage_to_array"]


def _dbg(*a):
    if config.DEBUG:
        print("[CAPTURE]", *a, flush=True)


class CaptureError(RuntimeError):
    """Surface ou backend vidéo indisponible, ou écriture impossible."""


class CaptureSink(Protocol):
    def is_available(self) -> bool: ...
    def start(self) -> None: ...
    def stop(self) -> Path: ...
    def abort(self) -> None: ...


def qimage_to_array(img: QImage) -> np.ndarray:
    """QImage -> ndarray (h, w, 3) uint8 RGB, copie indépendante du buffer Qt."""
    rgb = img.convertToFormat(QImage.Format.Format_RGB888)
    w, h, stride = rgb.width(), rgb.height(), rgb.bytesPerLine()
    ptr = rgb.constBits()
    ptr.setsize(rgb.sizeInBytes())
    arr = np.frombuffer(ptr, dtype=np.uint8).reshape(h, stride)
    return arr[:, : w * 3].reshape(h, w, 3).copy()


class FrameRecorder(QObject):
    """
    Recorder vidéo : échantillonne la surface rendue à cadence fixe (son propre QTimer,
    indépendant du timer de lecture), puis assemble le fichier via imageio/ffmpeg au stop().
    """

    def __init__(
        self,
        frame_source: Callable[[], QImage],
        output_path: Callable[[], Path] | Path,
        fps: int = config.CAPTURE_FPS,
        parent=None,
    ):
        super().__init__(parent)
        self._source = frame_source
        self._output = output_path
        self.fps = int(fps)
        self._frames: list[np.ndarray] = []
        self._recording = False

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, int(1000 / self.fps)))
        self._timer.timeout.connect(self.sample)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def is_available(self) -> bool:
        try:
            img = self._source()
        except Exception as e:
            print("[WARN] capture: surface indisponible:", e)
            return False
        if img is None or img.isNull():
            return False
        return _ffmpeg_available()

    # ---------- cycle ----------
    def start(self):
        if self._recording:
            raise CaptureError("capture déjà en cours")
        self._frames = []
        self._recording = True
        self.sample()  # frame 0 tout de suite
        self._timer.start()
        _dbg(f"start @ {self.fps} fps")

    @pyqtSlot()
    def sample(self):
        if not self._recording:
            return
        img = self._source()
        if img is None or img.isNull():
            return
        frame = qimage_to_array(img)
        # Taille figée sur la première frame (ffmpeg n'accepte pas de changement en cours)
        if self._frames and frame.shape != self._frames[0].shape:
            _dbg("frame ignorée (taille changée)", frame.shape)
            return
        self._frames.append(frame)

    def stop(self) -> Path:
        """Capture la frame finale, écrit la vidéo et renvoie son chemin."""
        if not self._recording:
            raise CaptureError("aucune capture en cours")
        self.sample()
        self._timer.stop()
        self._recording = False
        frames, self._frames = self._frames, []
        if not frames:
            raise CaptureError("aucune frame capturée")
        return self._write(frames)

    def abort(self):
        self._timer.stop()
        self._recording = False
        self._frames = []

    def _write(self, frames: list[np.ndarray]) -> Path:
        path = Path(self._output() if callable(self._output) else self._output)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            imageio.mimwrite(str(path), frames, fps=self.fps)
        except Exception as e:
            # Pas de fichier partiel
            if path.exists():
                os.remove(path)
            raise CaptureError(f"écriture vidéo impossible: {e}") from e
        print(f"🎬 Vidéo écrite: {path} ({len(frames)} frames)")
        return path


def _ffmpeg_available() -> bool:
    try:
        import imageio_ffmpeg
        imageio_ffmpeg.get_ffmpeg_exe()
    except Exception as e:
        print("[WARN] ffmpeg introuvable:", e)
        return False
    return True

