"""
Drawing surface contract used by the layout engine.

A ``DrawingSurface`` owns pages and the drawing mode. Selecting a region of a page returns a
``DrawingHandle``; the handle carries the active rectangle, the current color and font, and is
the only way to draw. Every coordinate passed to a handle is normalized to its active rectangle.

The pure helpers at the bottom are shared by concrete surfaces: page margins, stroke clamping
and dash patterns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable

from pdf_layout.core.models.box import FULL, NormalizedBox, Rect
from pdf_layout.core.models.flags import DrawingMode
from pdf_layout.core.models.styles import Color, FontFamily, FontStyle, TextStyle

PAGE_WIDTH_RATIO = 0.94
PAGE_HEIGHT_RATIO = 0.96


class DrawingHandle(ABC):
    @abstractmethod
    def active_rect(self) -> Rect: ...

    @abstractmethod
    def current_mode(self) -> DrawingMode: ...

    @abstractmethod
    def measure_text_width(self, text: str) -> float: ...

    @abstractmethod
    def measure_text_height(self, text: str) -> float: ...

    @abstractmethod
    def measure_image_height(self, image: Any) -> float: ...

    @abstractmethod
    def image_aspect_ratio(self, image: Any) -> float: ...

    def thickness_to_width(self, thickness: float) -> float:
        return thickness / self.active_rect().width

    def thickness_to_height(self, thickness: float) -> float:
        return thickness / self.active_rect().height

    def canvas_ratio(self) -> float:
        return self.active_rect().ratio

    @property
    @abstractmethod
    def color(self) -> Color: ...

    @property
    @abstractmethod
    def font(self) -> TextStyle: ...

    @abstractmethod
    def set_color(self, color: Color) -> None: ...

    @abstractmethod
    def set_font(self, family: FontFamily, styles: Iterable[FontStyle], size: float) -> None: ...

    def set_text_style(self, style: TextStyle) -> None:
        self.set_font(style.family, style.styles, style.size)
        self.set_color(style.color)

    @abstractmethod
    def write_text(self, text: str, x: float, y: float) -> None: ...

    @abstractmethod
    def draw_line(self, box: NormalizedBox, thickness: float, units_on: float) -> None: ...

    @abstractmethod
    def draw_rect(self, box: NormalizedBox) -> None: ...

    @abstractmethod
    def draw_rect_outline(self, box: NormalizedBox, thickness: float, units_on: float) -> None: ...

    @abstractmethod
    def draw_image(self, image: Any, box: NormalizedBox) -> None: ...


class DrawingSurface(ABC):
    @abstractmethod
    def add_page(self, page_id: int) -> bool: ...

    @abstractmethod
    def page_ids(self) -> list[int]: ...

    @abstractmethod
    def select_region(self, box: NormalizedBox, page_id: int) -> DrawingHandle: ...

    def select_full_page(self, page_id: int) -> DrawingHandle:
        return self.select_region(FULL, page_id)

    @property
    @abstractmethod
    def mode(self) -> DrawingMode: ...

    @abstractmethod
    def set_mode(self, mode: DrawingMode) -> "DrawingSurface": ...

    @abstractmethod
    def finalize(self, destination: Path | str) -> bool: ...


def margin_rect(
    page_width: float,
    page_height: float,
    width_ratio: float = PAGE_WIDTH_RATIO,
    height_ratio: float = PAGE_HEIGHT_RATIO,
) -> Rect:
    """Drawable page area: the page scaled by the margin ratios and centered."""
    width = page_width * width_ratio
    height = page_height * height_ratio
    return Rect((page_width - width) / 2, (page_height - height) / 2, width, height)


def bind_point(x: float, y: float, half_thickness: float, rect: Rect) -> tuple[float, float]:
    """
    Clamp an absolute stroke endpoint into ``rect`` and inset it so that a stroke of
    ``2 * half_thickness`` never paints outside the rectangle.
    """
    x = min(max(x, rect.x), rect.right)
    y = min(max(y, rect.y), rect.bottom)
    if x - half_thickness < rect.x:
        x += rect.x - (x - half_thickness)
    if x + half_thickness > rect.right:
        x -= (x + half_thickness) - rect.right
    if y - half_thickness < rect.y:
        y += rect.y - (y - half_thickness)
    if y + half_thickness > rect.bottom:
        y -= (y + half_thickness) - rect.bottom
    return x, y


def dash_pattern(length: float, thickness: float, units_on: float) -> tuple[float, float] | None:
    """
    Dash pattern in stroke-width units, or ``None`` for a solid stroke.

    ``units_on`` of 0 yields a pattern with no visible dash; surfaces skip such strokes.
    """
    if units_on >= 1 or length <= 0:
        return None
    num_units = length / thickness
    on_units = units_on * num_units
    off_units = num_units - on_units
    if on_units <= 0:
        return 0.0, max(1.0, num_units)
    return max(1.0, on_units / off_units), max(1.0, off_units / on_units)


def outline_length(rect: Rect) -> float:
    return 2 * (rect.width + rect.height)
