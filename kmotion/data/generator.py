# kmotion/data/generator.py
from __future__ import annotations

import random
from datetime import date, datetime, time
from typing import Optional, Union

from dateutil import parser as dtparser
from dateutil.relativedelta import relativedelta

from .models import Bar, Direction, Timeframe, to_number

DEFAULT_PRICE = 100.0
MIN_PRICE = 0.01
MARKET_OPEN = time(9, 0)   # heure par défaut quand la date de départ n'a pas d'heure
WICK_SCALE = 0.3

STEPS = {
    Timeframe.M1: relativedelta(minutes=1),
    Timeframe.M5: relativedelta(minutes=5),
    Timeframe.M15: relativedelta(minutes=15),
    Timeframe.M30: relativedelta(minutes=30),
    Timeframe.H1: relativedelta(hours=1),
    Timeframe.H4: relativedelta(hours=4),
    Timeframe.D1: relativedelta(days=1),
    Timeframe.W1: relativedelta(days=7),
    Timeframe.MN1: relativedelta(months=1),
}

StartLike = Union[str, datetime, date, None]


def format_time(dt: datetime, timeframe: Timeframe) -> str:
    if timeframe.date_only:
        return dt.strftime("%Y-%m-%d")
    return dt.strftime("%Y-%m-%d %H:%M")


def advance_time(dt: datetime, timeframe: Timeframe) -> datetime:
    """Avance d'exactement une unité de timeframe (mois calendaire inclus)."""
    return dt + STEPS[timeframe]


def start_time(start: StartLike) -> datetime:
    if start is None or (isinstance(start, str) and not start.strip()):
        return datetime.now()
    if isinstance(start, datetime):
        return start
    if isinstance(start, date):
        return datetime.combine(start, MARKET_OPEN)
    dt = dtparser.parse(start)
    # Saisie "YYYY-MM-DD" : on cale sur l'ouverture du marché
    if ":" not in start:
        dt = datetime.combine(dt.date(), MARKET_OPEN)
    return dt


def opening_price(prev: Optional[Bar], initial_price) -> float:
    if prev is not None:
        return prev.close
    price = to_number(initial_price)
    if price is None or price <= 0:
        return DEFAULT_PRICE
    return price


def generate_next_bar(
    prev: Optional[Bar],
    direction: Union[Direction, str],
    volatility_pct: float = 1.5,
    start: StartLike = None,
    initial_price=None,
    timeframe: Union[Timeframe, str] = Timeframe.D1,
    rng: Optional[random.Random] = None,
) -> Bar:
    """Produit la bougie suivante (pure, hormis l'aléa). L'appelant l'ajoute à la série."""
    if volatility_pct <= 0:
        raise ValueError(f"volatility_pct must be > 0 (got {volatility_pct})")
    direction = Direction(direction)
    timeframe = Timeframe(timeframe)
    rnd = rng or random

    if prev is not None:
        when = advance_time(dtparser.parse(prev.time), timeframe)
    else:
        when = start_time(start)

    open_ = opening_price(prev, initial_price)

    # Facteur aléatoire entre 0.5 et 1.2
    move = open_ * (volatility_pct / 100.0) * rnd.uniform(0.5, 1.2)

    if direction is Direction.BULL:
        close = open_ + move
        high = close + rnd.uniform(0, move * WICK_SCALE)
        low = max(MIN_PRICE, open_ - rnd.uniform(0, move * WICK_SCALE))
    else:
        close = max(MIN_PRICE, open_ - move)
        high = open_ + rnd.uniform(0, move * WICK_SCALE)
        low = max(MIN_PRICE, close - rnd.uniform(0, move * WICK_SCALE))

    # Garde-fou : la mèche tirée au hasard ne doit jamais casser l'invariant OHLC
    high = max(high, open_, close)
    low = min(low, open_, close)

    return Bar(
        time=format_time(when, timeframe),
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=rnd.randint(1000, 10999),
    )
