"""
Pure chart math: axis-limit inference, series windowing, value mapping and default labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

OVERFLOW_NUDGE = 0.01


@dataclass(frozen=True)
class AxisLimits:
    lower: float
    upper: float

    @property
    def span(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


def infer_x_limits(series: Sequence[Sequence[float]]) -> AxisLimits:
    return AxisLimits(0, max(len(values) for values in series))


def infer_y_limits(series: Sequence[Sequence[float]]) -> AxisLimits:
    flat = np.concatenate([np.asarray(values, dtype=float) for values in series])
    low = float(np.min(flat))
    high = float(np.max(flat))
    if low == high:
        return AxisLimits(low - 1.0, high + 1.0)
    return AxisLimits(low, high)


def window_series(values: Sequence[float], x_limits: AxisLimits, y_limits: AxisLimits) -> tuple[float, ...]:
    """Truncate to the x window and clamp (not rescale) into the y window."""
    data = np.asarray(values, dtype=float)[int(x_limits.lower) : int(x_limits.upper)]
    return tuple(float(v) for v in np.clip(data, y_limits.lower, y_limits.upper))


def nudged(limits: AxisLimits) -> AxisLimits:
    """Widen limits by 1% of their magnitude so boundary values never miss the plot."""
    return AxisLimits(
        limits.lower - abs(limits.lower) * OVERFLOW_NUDGE,
        limits.upper + abs(limits.upper) * OVERFLOW_NUDGE,
    )


def value_fraction(value: float, limits: AxisLimits) -> float:
    """Vertical fraction of ``value``; 0 is the top because page y grows downward."""
    return 1.0 - (value - limits.lower) / limits.span


def interior_fractions(count: int) -> list[float]:
    return [i / (count + 1) for i in range(1, count + 1)]


def sample_fraction(index: int, num_points: int) -> float:
    return index / (num_points - 1)


def default_x_label(index: int) -> str:
    return str(int(index))


def default_y_label(value: float) -> str:
    text = f"{value:.1f}" if value > 1 else f"{value:.3f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
