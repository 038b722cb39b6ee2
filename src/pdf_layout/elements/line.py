from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.styles import LineStyle
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import require_not_none
from pdf_layout.elements.base import Element


@dataclass(frozen=True)
class LineElement(Element):
    kind: ClassVar[str] = "line"

    line: NormalizedBox
    style: LineStyle = field(default_factory=LineStyle)

    def __post_init__(self) -> None:
        require_not_none(self.line, "line")

    def render(self, handle: DrawingHandle) -> None:
        handle.set_color(self.style.color)
        handle.draw_line(self.line, self.style.thickness, self.style.units_on)
