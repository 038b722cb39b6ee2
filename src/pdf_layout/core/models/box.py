"""
Normalized coordinate algebra.

A ``NormalizedBox`` expresses a rectangle (or a line, when one side is zero) as fractions
of a containing area. ``Rect`` is the absolute counterpart in page points, with y growing
downward the way page layouts are described.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pdf_layout.core.validation import RangeError, ValidationError, require_between, require_non_negative

_EPSILON = 1e-9


def _snap(value: float) -> float:
    """Pull float noise just outside the unit interval back onto its bounds."""
    if -_EPSILON < value < 0.0:
        return 0.0
    if 1.0 < value < 1.0 + _EPSILON:
        return 1.0
    return value


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def ratio(self) -> float:
        if self.height == 0:
            raise ValidationError("ratio of a rectangle with zero height is undefined")
        return self.width / self.height


@dataclass(frozen=True)
class NormalizedBox:
    from_x: float
    from_y: float
    to_x: float
    to_y: float

    def __post_init__(self) -> None:
        for name in ("from_x", "from_y", "to_x", "to_y"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or math.isnan(value):
                raise RangeError(f"{name} must be a number, got {value!r}")
            require_between(value, 0.0, 1.0, name)
        if self.from_x + self.from_y + self.to_x + self.to_y <= 0:
            raise RangeError("box coordinates must not all be zero")

    @classmethod
    def at(cls, x: float, y: float, width: float, height: float) -> "NormalizedBox":
        """Build a box from its top-left corner and size."""
        return cls(_snap(x), _snap(y), _snap(x + width), _snap(y + height))

    @property
    def width(self) -> float:
        return abs(self.to_x - self.from_x)

    @property
    def height(self) -> float:
        return abs(self.to_y - self.from_y)

    @property
    def length(self) -> float:
        return math.hypot(self.width, self.height)

    @property
    def left(self) -> float:
        return min(self.from_x, self.to_x)

    @property
    def top(self) -> float:
        return min(self.from_y, self.to_y)

    @property
    def center_x(self) -> float:
        return (self.from_x + self.to_x) / 2

    @property
    def center_y(self) -> float:
        return (self.from_y + self.to_y) / 2

    @property
    def ratio(self) -> float:
        if self.height == 0:
            raise ValidationError("ratio of a box with zero height is undefined")
        return self.width / self.height

    def to_absolute(self, container: Rect) -> Rect:
        return Rect(
            x=container.x + container.width * self.left,
            y=container.y + container.height * self.top,
            width=container.width * self.width,
            height=container.height * self.height,
        )

    def split(self, rows: int, cols: int, h_pad: float = 0.0, v_pad: float = 0.0) -> list[list["NormalizedBox"]]:
        if rows <= 0 or cols <= 0:
            raise RangeError(f"split needs positive rows and cols, got {rows}x{cols}")
        require_non_negative(h_pad, "h_pad")
        require_non_negative(v_pad, "v_pad")

        cell_w = (self.width - (cols - 1) * h_pad) / cols
        cell_h = (self.height - (rows - 1) * v_pad) / rows
        if cell_w < -_EPSILON or cell_h < -_EPSILON:
            raise RangeError("padding does not fit inside the box")
        cell_w = max(cell_w, 0.0)
        cell_h = max(cell_h, 0.0)

        grid: list[list[NormalizedBox]] = []
        for row in range(rows):
            y = self.top + row * (cell_h + v_pad)
            grid.append([NormalizedBox.at(self.left + col * (cell_w + h_pad), y, cell_w, cell_h) for col in range(cols)])
        return grid

    def maximize_inside(self, destination: "NormalizedBox") -> "NormalizedBox":
        if self.width == 0 or self.height == 0:
            raise ValidationError("cannot maximize a line, it has no aspect ratio")
        if destination.width == 0 or destination.height == 0:
            raise ValidationError("cannot maximize inside a line")

        source_ratio = self.ratio
        destination_ratio = destination.ratio
        # a destination relatively wider than the source limits the height, otherwise the width
        if destination_ratio > source_ratio:
            height = destination.height
            width = height * source_ratio
            x = destination.left + (destination.width - width) / 2
            y = destination.top
        else:
            width = destination.width
            height = width / source_ratio
            x = destination.left
            y = destination.top + (destination.height - height) / 2
        return NormalizedBox.at(x, y, width, height)

    def move(self, dx: float, dy: float) -> "NormalizedBox":
        require_between(dx, -1.0, 1.0, "dx")
        require_between(dy, -1.0, 1.0, "dy")
        from_x, to_x = _slide(self.from_x + dx, self.to_x + dx)
        from_y, to_y = _slide(self.from_y + dy, self.to_y + dy)
        return NormalizedBox(_snap(from_x), _snap(from_y), _snap(to_x), _snap(to_y))


def _slide(start: float, end: float) -> tuple[float, float]:
    high = max(start, end)
    low = min(start, end)
    if high > 1.0:
        shift = 1.0 - high
    elif low < 0.0:
        shift = -low
    else:
        return start, end
    return start + shift, end + shift


LINE_TOP = NormalizedBox(0.0, 0.0, 1.0, 0.0)
LINE_BOTTOM = NormalizedBox(0.0, 1.0, 1.0, 1.0)
LINE_LEFT = NormalizedBox(0.0, 0.0, 0.0, 1.0)
LINE_RIGHT = NormalizedBox(1.0, 0.0, 1.0, 1.0)
FULL = NormalizedBox(0.0, 0.0, 1.0, 1.0)
