from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.styles import Color
from pdf_layout.core.surface import DrawingHandle

# Lower-left text anchors sit this far down a measured line box.
BASELINE_RATIO = 0.85


class Element(ABC):
    """A visual element placed inside a region. Render order is insertion order."""

    kind: ClassVar[str]

    @abstractmethod
    def render(self, handle: DrawingHandle) -> None: ...


def draw_marker_box(handle: DrawingHandle, box: NormalizedBox, color: Color, diagonals: bool = False) -> None:
    """Calibration outline, optionally crossed."""
    handle.set_color(color)
    handle.draw_rect_outline(box, 1, 1)
    if diagonals:
        handle.draw_line(box, 1, 1)
        handle.draw_line(NormalizedBox(box.from_x, box.to_y, box.to_x, box.from_y), 1, 1)
