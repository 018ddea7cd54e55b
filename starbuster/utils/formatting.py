"""Display formatting helpers for analysis results."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import pandas as pd


def _one_decimal(value: float) -> str:
    # Halves round away from zero: 1.25 -> '1.3'
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_number(num: Optional[float]) -> str:
    """Compact number format: 2300000 -> '2.3M', 1500 -> '1.5K', 999 -> '999'."""
    if num is None or pd.isna(num):
        return "0"
    if num >= 1_000_000:
        return f"{_one_decimal(num / 1_000_000)}M"
    if num >= 1_000:
        return f"{_one_decimal(num / 1_000)}K"
    if float(num).is_integer():
        return str(int(num))
    return str(num)


def format_processing_time(ms: float) -> str:
    """Render a duration in milliseconds as '2m 5s' or '42s'."""
    seconds = math.floor(ms / 1000)
    minutes = math.floor(seconds / 60)
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def stars_per_day(stars: float, days_old: int) -> float:
    return stars / days_old if days_old > 0 else 0


def format_percentage(value: float) -> str:
    return f"{_one_decimal(value)}%"
