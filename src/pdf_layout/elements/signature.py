from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.styles import DARK_GREY, FontFamily, LineStyle, TextStyle
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import RangeError, require_between, require_not_none, require_positive
from pdf_layout.elements.base import Element

SUBTITLE_OFFSET = 0.9


def _signature_line() -> LineStyle:
    return LineStyle(color=DARK_GREY, thickness=0.5)


def _subtitle_style() -> TextStyle:
    return TextStyle(family=FontFamily.HELVETICA, size=8)


@dataclass(frozen=True)
class SignatureElement(Element):
    """Signature line with a small caption underneath."""

    kind: ClassVar[str] = "signature"

    subtitle: str
    line_width: float = 1.0
    start_at: tuple[float, float] = (0.0, 0.0)
    line_style: LineStyle = field(default_factory=_signature_line)
    text_style: TextStyle = field(default_factory=_subtitle_style)

    def __post_init__(self) -> None:
        require_not_none(self.subtitle, "subtitle")
        require_positive(self.line_width, "line_width")
        require_between(self.line_width, 0.0, 1.0, "line_width")
        x, y = self.start_at
        require_between(x, 0.0, 1.0, "start x")
        require_between(y, 0.0, 1.0, "start y")
        if x + self.line_width > 1:
            raise RangeError(f"signature line overflows the region: {x} + {self.line_width} > 1")

    def render(self, handle: DrawingHandle) -> None:
        x, y = self.start_at
        handle.set_color(self.line_style.color)
        handle.draw_line(
            NormalizedBox(x, y, min(1.0, x + self.line_width), y),
            self.line_style.thickness,
            self.line_style.units_on,
        )

        handle.set_text_style(self.text_style)
        height = handle.measure_text_height(self.subtitle)
        handle.write_text(self.subtitle, x, y + height * SUBTITLE_OFFSET)
