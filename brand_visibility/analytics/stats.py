"""Shared numeric helpers for the analytics engine.

Rounding is half-up (``floor(x + 0.5)``) everywhere, unlike the built-in
banker's rounding (``round(2.5) == 2``).
"""

from __future__ import annotations

import math
from collections.abc import Iterable


def round_half_up(value: float, digits: int = 0) -> float:
    """Round *value* to *digits* decimals, halves rounded toward +inf."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Half-up rounding to an integer."""
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    """``part / whole`` as a rounded percentage, 0 when *whole* is 0."""
    if whole <= 0:
        return 0
    return round_int(part / whole * 100)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty iterable."""
    total = 0.0
    count = 0
    for v in values:
        total += v
        count += 1
    return total / count if count else 0.0


def mean_1dp(values: Iterable[float]) -> float:
    """Mean rounded to one decimal, 0 when there are no values."""
    return round_half_up(mean(values), 1)


class OnlineMean:
    """Running mean updated one observation at a time.

    ``add(x)`` applies ``mean = (mean * (n - 1) + x) / n`` in its numerically
    stable form ``mean += (x - mean) / n``.
    """

    __slots__ = ("count", "value")

    def __init__(self) -> None:
        self.count = 0
        self.value = 0.0

    def add(self, x: float) -> float:
        self.count += 1
        self.value += (x - self.value) / self.count
        return self.value

    def __repr__(self) -> str:
        return f"OnlineMean(count={self.count}, value={self.value:.4f})"
