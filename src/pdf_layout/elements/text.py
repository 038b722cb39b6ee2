from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar

from pdf_layout.config import package_version
from pdf_layout.core.calculations.positioning import apply_gravity
from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.flags import NO_GRAVITY, FitPolicy, GravitySet
from pdf_layout.core.models.styles import BLACK, GREEN, RED, TextStyle
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import ValidationError, require_between, require_not_none
from pdf_layout.elements.base import BASELINE_RATIO, Element, draw_marker_box

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextElement(Element):
    """
    A single line of text.

    Without a position the text is centered in the region. ``start_at`` pins its top-left
    corner and wins over ``center_in``, which centers the text inside a box. Gravity then
    pulls the resulting box against region edges.
    """

    kind: ClassVar[str] = "text"

    text: str
    style: TextStyle = field(default_factory=TextStyle)
    start_at: tuple[float, float] | None = None
    center_in: NormalizedBox | None = None
    gravity: GravitySet = NO_GRAVITY
    fit: FitPolicy = FitPolicy.STRICT

    def __post_init__(self) -> None:
        require_not_none(self.text, "text")
        if self.start_at is not None:
            x, y = self.start_at
            require_between(x, 0.0, 1.0, "start x")
            require_between(y, 0.0, 1.0, "start y")

    @classmethod
    def for_version(
        cls,
        style: TextStyle | None = None,
        prefix: str = "",
        version: str | None = None,
        **kwargs,
    ) -> "TextElement":
        parts = (version or package_version()).split(".")
        major, minor, patch = (parts + ["0", "0", "0"])[:3]
        return cls(f"{prefix}v{major}.{minor}.{patch}", style or TextStyle(), **kwargs)

    def render(self, handle: DrawingHandle) -> None:
        style = self.style
        strict = self.fit is FitPolicy.STRICT
        calibration = handle.current_mode().calibration

        handle.set_font(style.family, style.styles, style.size)
        width = handle.measure_text_width(self.text)
        height = handle.measure_text_height(self.text)
        if width > 1 or height > 1:
            self._overflow(strict, "is larger than its region")
            width = min(width, 1.0)
            height = min(height, 1.0)

        x = 0.5 - width / 2
        y = 0.5 - height / 2
        box = NormalizedBox.at(x, y, width, height)

        if self.start_at is not None:
            x, y = self.start_at
            if x + width > 1 or y + height > 1:
                self._overflow(strict, f"does not fit when started at {self.start_at}")
                x = min(x, 1.0 - width)
                y = min(y, 1.0 - height)
            box = NormalizedBox.at(x, y, width, height)
            if calibration:
                draw_marker_box(handle, box, RED)
        elif self.center_in is not None:
            box = self.center_in
            if box.width < width or box.height < height:
                self._overflow(strict, "does not fit in its centering box")
            x = box.center_x - width / 2
            y = box.center_y - height / 2
            if calibration:
                draw_marker_box(handle, box, RED)

        if not self.gravity.is_empty():
            box = apply_gravity(box, self.gravity)
            if self.gravity.vertical() is not None:
                y = box.center_y - height / 2
            if self.gravity.horizontal() is not None:
                x = box.center_x - width / 2
            if calibration:
                draw_marker_box(handle, box, GREEN)

        x = max(0.0, x)
        y = max(0.0, y)
        handle.set_color(BLACK if calibration else style.color)
        handle.write_text(self.text, x, y + height * BASELINE_RATIO)

    def _overflow(self, strict: bool, reason: str) -> None:
        if strict:
            raise ValidationError(f"text {self.text!r} {reason}")
        logger.debug(f"Clamping text {self.text!r}: {reason}")
