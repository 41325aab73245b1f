import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import random
from pathlib import Path

import pytest

from kmotion.data.generator import generate_next_bar
from kmotion.data.models import Direction
from kmotion.data.series import BarSeries
from kmotion.export.capture import CaptureError


@pytest.fixture(autouse=True)
def _qt_app(qapp):
    """QTimer / QPainter ont besoin d'une QApplication."""
    return qapp


def make_bars(n: int, seed: int = 7, start: str = "2024-01-02", timeframe: str = "1d"):
    rng = random.Random(seed)
    bars, prev = [], None
    for _ in range(n):
        direction = rng.choice([Direction.BULL, Direction.BEAR])
        prev = generate_next_bar(prev, direction, 2.0, start, 100, timeframe, rng=rng)
        bars.append(prev)
    return bars


@pytest.fixture
def series_of():
    def _make(n: int) -> BarSeries:
        return BarSeries(make_bars(n))
    return _make


class FakeSink:
    """Capture sink en mémoire : note la frame courante à chaque start/stop."""

    def __init__(self, available: bool = True, fail_on_start: bool = False):
        self.available = available
        self.fail_on_start = fail_on_start
        self.playback = None
        self.start_frames: list[int] = []
        self.stop_frames: list[int] = []
        self.aborts = 0

    def _frame(self):
        return self.playback.current_frame if self.playback else None

    def is_available(self) -> bool:
        return self.available

    def start(self):
        if self.fail_on_start:
            raise CaptureError("boom")
        self.start_frames.append(self._frame())

    def stop(self) -> Path:
        self.stop_frames.append(self._frame())
        return Path("fake_animation.mp4")

    def abort(self):
        self.aborts += 1


@pytest.fixture
def fake_sink():
    return FakeSink()
