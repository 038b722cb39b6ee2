from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Gravity(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class GravitySet:
    """
    Directional bias pulling content toward edges of its parent.
    Opposing flags cancel each other on their axis.
    """

    flags: frozenset[Gravity] = field(default_factory=frozenset)

    @classmethod
    def of(cls, *flags: Gravity) -> "GravitySet":
        return cls(frozenset(flags))

    def vertical(self) -> Gravity | None:
        return _single(self.flags, Gravity.TOP, Gravity.BOTTOM)

    def horizontal(self) -> Gravity | None:
        return _single(self.flags, Gravity.LEFT, Gravity.RIGHT)

    def is_empty(self) -> bool:
        return self.vertical() is None and self.horizontal() is None

    def __contains__(self, flag: Gravity) -> bool:
        return flag in self.flags


def _single(flags: frozenset[Gravity], first: Gravity, second: Gravity) -> Gravity | None:
    has_first = first in flags
    has_second = second in flags
    if has_first == has_second:
        return None
    return first if has_first else second


NO_GRAVITY = GravitySet()


class ScaleStrategy(str, Enum):
    FILL = "fill"
    FIT_CENTER = "fit_center"
    FIT_START = "fit_start"
    FIT_END = "fit_end"


class DrawingMode(str, Enum):
    NONE = "none"
    BOXED = "boxed"
    CALIBRATION = "calibration"
    BOXED_CALIBRATION = "boxed_calibration"

    @property
    def boxed(self) -> bool:
        return self in (DrawingMode.BOXED, DrawingMode.BOXED_CALIBRATION)

    @property
    def calibration(self) -> bool:
        return self in (DrawingMode.CALIBRATION, DrawingMode.BOXED_CALIBRATION)


class FitPolicy(str, Enum):
    STRICT = "strict"  # overflow raises ValidationError
    CLAMP = "clamp"  # overflow is pinned inside the region
