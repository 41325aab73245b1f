# Pydantic types (Bar, ChartConfig, etc.)
from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from dateutil import parser as dtparser
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kmotion import config


class Timeframe(str, Enum):
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"
    MN1 = "1mo"

    @property
    def date_only(self) -> bool:
        """Jour / semaine / mois : pas d'heure dans le libellé."""
        return self in (Timeframe.D1, Timeframe.W1, Timeframe.MN1)


class Direction(str, Enum):
    BULL = "bull"
    BEAR = "bear"


class Bar(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str            # "YYYY-MM-DD" ou "YYYY-MM-DD HH:MM"
    open: float
    high: float
    low: float
    close: float
    volume: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_ohlc(self):
        if self.low <= 0:
            raise ValueError(f"low must be > 0 (got {self.low})")
        if not (self.low <= min(self.open, self.close) <= max(self.open, self.close) <= self.high):
            raise ValueError(
                f"OHLC invariant broken: o={self.open} h={self.high} l={self.low} c={self.close}"
            )
        return self

    @property
    def is_bull(self) -> bool:
        return self.close >= self.open


# Champs figés dès que la série contient au moins une bougie
LOCKED_FIELDS = frozenset({"timeframe", "initial_price", "start_date"})

NumberLike = Union[float, int, str, None]


class ChartConfig(BaseModel):
    """Réglages du graphique. Immutable : une édition produit une nouvelle instance validée."""
    model_config = ConfigDict(frozen=True)

    symbol: str = config.DEFAULT_SYMBOL
    title: str = config.DEFAULT_TITLE
    x_axis_label: str = config.DEFAULT_X_LABEL
    y_axis_label: str = config.DEFAULT_Y_LABEL
    bull_color: str = config.DEFAULT_BULL_COLOR
    bear_color: str = config.DEFAULT_BEAR_COLOR
    # Axe Y : vide / None -> auto
    y_min: NumberLike = None
    y_max: NumberLike = None
    start_date: Optional[str] = Field(default_factory=config.default_start_date)
    initial_price: NumberLike = config.DEFAULT_INITIAL_PRICE
    timeframe: Timeframe = Timeframe(config.DEFAULT_TIMEFRAME)

    @field_validator("start_date")
    @classmethod
    def _check_start_date(cls, v: Optional[str]) -> Optional[str]:
        # Vide -> "maintenant" ; sinon la date doit être lisible par dateutil
        if v is None or not v.strip():
            return None
        try:
            dtparser.parse(v)
        except (ValueError, OverflowError):
            raise ValueError(f"date de départ illisible: {v!r}")
        return v.strip()

    def with_changes(self, **changes) -> "ChartConfig":
        data = self.model_dump()
        data.update(changes)
        return ChartConfig.model_validate(data)


def to_number(value) -> Optional[float]:
    """Convertit une saisie (str/int/float) en float ; None si vide ou non numérique."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if num != num or num in (float("inf"), float("-inf")):  # NaN / inf
        return None
    return num
