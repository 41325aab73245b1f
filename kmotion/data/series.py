# kmotion/data/series.py
from __future__ import annotations

import json
from typing import Iterable, Iterator

from pydantic import TypeAdapter
from PyQt6.QtCore import QObject, pyqtSignal

from .models import Bar

_BARS = TypeAdapter(list[Bar])


class BarSeries(QObject):
    """
    Série OHLC ordonnée, append-only pendant une session.
    Chaque mutation émet lengthChanged(new_len, old_len).
    """
    lengthChanged = pyqtSignal(int, int)

    def __init__(self, bars: Iterable[Bar] = (), parent=None):
        super().__init__(parent)
        self._bars: list[Bar] = list(bars)

    # ---------- lecture ----------
    def __len__(self) -> int:
        return len(self._bars)

    def __getitem__(self, idx):
        return self._bars[idx]

    def __iter__(self) -> Iterator[Bar]:
        return iter(list(self._bars))

    @property
    def bars(self) -> tuple[Bar, ...]:
        return tuple(self._bars)

    def last(self) -> Bar | None:
        return self._bars[-1] if self._bars else None

    def visible(self, count: int) -> list[Bar]:
        """Préfixe visible series[0:count] (count borné à [0, len])."""
        count = max(0, min(int(count), len(self._bars)))
        return self._bars[:count]

    # ---------- mutation ----------
    def append(self, bar: Bar):
        old = len(self._bars)
        self._bars.append(bar)
        self.lengthChanged.emit(len(self._bars), old)

    def clear(self):
        old = len(self._bars)
        self._bars = []
        self.lengthChanged.emit(0, old)

    def load(self, bars: Iterable[Bar]):
        """Remplace tout le contenu (import JSON)."""
        old = len(self._bars)
        self._bars = list(bars)
        self.lengthChanged.emit(len(self._bars), old)

    # ---------- JSON ----------
    def to_records(self) -> list[dict]:
        return [b.model_dump() for b in self._bars]

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_records(), indent=indent, ensure_ascii=False)

    @staticmethod
    def parse_json(payload: str | bytes) -> list[Bar]:
        """Valide un tableau [{time, open, high, low, close, volume}, ...]."""
        return _BARS.validate_json(payload)
