from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from PIL import Image

from pdf_layout.core.calculations.positioning import Placement, resolve_placement
from pdf_layout.core.models.box import FULL, NormalizedBox
from pdf_layout.core.models.flags import NO_GRAVITY, GravitySet, ScaleStrategy
from pdf_layout.core.models.styles import GREEN, ORANGE, RED
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import ValidationError, require_image_file, require_not_none
from pdf_layout.elements.base import Element, draw_marker_box
from pdf_layout.utils.pdf.core.images import ImageSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageElement(Element):
    kind: ClassVar[str] = "image"

    image: ImageSource
    scale: ScaleStrategy = ScaleStrategy.FILL
    box: NormalizedBox = FULL
    gravity: GravitySet = NO_GRAVITY

    def __post_init__(self) -> None:
        require_not_none(self.image, "image")
        if isinstance(self.image, (str, Path)):
            object.__setattr__(self, "image", require_image_file(self.image))
        elif not isinstance(self.image, Image.Image):
            raise ValidationError(f"unsupported image source: {type(self.image).__name__}")

    def placement(self, handle: DrawingHandle) -> Placement:
        return resolve_placement(
            self.box,
            self.gravity,
            self.scale,
            handle.image_aspect_ratio(self.image),
            handle.canvas_ratio(),
        )

    def render(self, handle: DrawingHandle) -> None:
        placement = self.placement(handle)
        if handle.current_mode().calibration:
            draw_marker_box(handle, placement.requested, RED)
            draw_marker_box(handle, placement.gravitated, GREEN)
            draw_marker_box(handle, placement.fitted, ORANGE, diagonals=True)
            return
        logger.debug(f"Drawing image into {placement.fitted}")
        handle.draw_image(self.image, placement.fitted)
