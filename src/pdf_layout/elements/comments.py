from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.styles import DARK_GREY, LineStyle, TextStyle
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import (
    RangeError,
    ValidationError,
    require_between,
    require_non_negative,
    require_positive,
)
from pdf_layout.elements.base import BASELINE_RATIO, Element

_TOLERANCE = 1e-9


def _ruled_line() -> LineStyle:
    return LineStyle(color=DARK_GREY, thickness=0.5)


@dataclass(frozen=True)
class CommentsElement(Element):
    """
    An optionally titled area of ruled lines for handwritten comments.
    Without a title the first rule sits at ``start_at``. ``num_lines=None`` rules as many lines as fit.
    """

    kind: ClassVar[str] = "comments"

    line_spacing: float
    title: str = ""
    num_lines: int | None = None
    line_width: float = 1.0
    start_at: tuple[float, float] = (0.0, 0.0)
    line_style: LineStyle = field(default_factory=_ruled_line)
    text_style: TextStyle = field(default_factory=TextStyle)

    def __post_init__(self) -> None:
        require_positive(self.line_spacing, "line_spacing")
        require_between(self.line_spacing, 0.0, 1.0, "line_spacing")
        require_positive(self.line_width, "line_width")
        require_between(self.line_width, 0.0, 1.0, "line_width")
        if self.num_lines is not None:
            require_non_negative(self.num_lines, "num_lines")
        x, y = self.start_at
        require_between(x, 0.0, 1.0, "start x")
        require_between(y, 0.0, 1.0, "start y")
        if x + self.line_width > 1:
            raise RangeError(f"comment lines overflow the region: {x} + {self.line_width} > 1")

    def line_positions(self, title_height: float) -> list[float]:
        first = self.start_at[1]
        if self.title:
            first += title_height * BASELINE_RATIO + self.line_spacing
        if self.num_lines is None:
            positions = []
            y = first
            while y <= 1 + _TOLERANCE:
                positions.append(min(y, 1.0))
                y += self.line_spacing
            return positions

        positions = [first + i * self.line_spacing for i in range(self.num_lines)]
        if positions and positions[-1] > 1 + _TOLERANCE:
            raise ValidationError(f"{self.num_lines} comment lines do not fit with spacing {self.line_spacing}")
        return [min(y, 1.0) for y in positions]

    def render(self, handle: DrawingHandle) -> None:
        x, y = self.start_at
        handle.set_text_style(self.text_style)
        title_height = handle.measure_text_height(self.title)
        if self.title:
            handle.write_text(self.title, x, y + title_height * BASELINE_RATIO)

        handle.set_color(self.line_style.color)
        end_x = min(1.0, x + self.line_width)
        for line_y in self.line_positions(title_height):
            handle.draw_line(
                NormalizedBox(x, line_y, end_x, line_y),
                self.line_style.thickness,
                self.line_style.units_on,
            )
