# kmotion/chart/scale.py
from __future__ import annotations

from typing import NamedTuple, Sequence

from kmotion.data.models import Bar, to_number

BASELINE_PRICE = 100.0
EMPTY_WINDOW = 0.05   # ±5 % autour du prix initial quand aucune bougie n'est visible
FLAT_EPS = 1e-4
PADDING = 0.10


class ScaleWindow(NamedTuple):
    min_price: float
    max_price: float

    @property
    def span(self) -> float:
        return self.max_price - self.min_price


def resolve_scale(bars: Sequence[Bar], initial_price=None, y_min=None, y_max=None) -> ScaleWindow:
    """
    Fenêtre de prix visible (pure, déterministe).
    Le prix initial sert d'ancre pour éviter les gros sauts de zoom sur les premières bougies.
    """
    initial = to_number(initial_price)
    if initial:
        lo = hi = initial
    else:
        lo = hi = BASELINE_PRICE

    if bars:
        lo = min(lo, min(b.low for b in bars))
        hi = max(hi, max(b.high for b in bars))
    elif initial:
        lo = initial * (1 - EMPTY_WINDOW)
        hi = initial * (1 + EMPTY_WINDOW)

    # ligne plate
    if abs(hi - lo) < FLAT_EPS:
        lo *= 0.95
        hi *= 1.05

    pad = (hi - lo) * PADDING
    lo -= pad
    hi += pad

    override_min = to_number(y_min)
    override_max = to_number(y_max)
    if override_min is not None:
        lo = override_min
    if override_max is not None:
        hi = override_max

    if lo >= hi:
        hi = lo + 1
    return ScaleWindow(lo, hi)
