"""
Drawing surface that writes a PDF document.

Page space has its origin at the top-left corner with y growing downward; the content
streams are written in PDF space (origin bottom-left, y growing up).
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable

from PIL import Image

from pdf_layout.config import RenderSettings, load_settings
from pdf_layout.core.models.box import NormalizedBox, Rect
from pdf_layout.core.models.flags import DrawingMode
from pdf_layout.core.models.styles import BLACK, Color, FontFamily, FontStyle, TextStyle
from pdf_layout.core.surface import (
    DrawingHandle,
    DrawingSurface,
    bind_point,
    dash_pattern,
    margin_rect,
    outline_length,
)
from pdf_layout.core.validation import ValidationError, require_between, require_positive
from pdf_layout.utils.pdf.core.builder import build_pdf_bytes
from pdf_layout.utils.pdf.core.drawing import (
    _draw_image,
    _draw_line,
    _draw_rect,
    _draw_text,
    _fill_state,
    _stroke_state,
)
from pdf_layout.utils.pdf.core.fonts import FontRegistry
from pdf_layout.utils.pdf.core.images import (
    ImageResource,
    ImageSource,
    aspect_ratio,
    encode_image,
    image_key,
    open_image,
    point_size,
)
from pdf_layout.utils.pdf.core.layout_common import DECORATION_THICKNESS, STRIKEOUT_OFFSET, UNDERLINE_OFFSET

logger = logging.getLogger(__name__)


class PdfSurface(DrawingSurface):
    def __init__(self, settings: RenderSettings | None = None):
        self.settings = settings or load_settings()
        self.fonts = FontRegistry(self.settings.font_dir)
        self._pages: dict[int, list[str]] = {}
        self._mode = DrawingMode.NONE
        self._decoded: dict[object, Image.Image] = {}
        self._images: dict[object, ImageResource] = {}

    def add_page(self, page_id: int) -> bool:
        if page_id in self._pages:
            return False
        self._pages[page_id] = []
        logger.debug(f"Added page {page_id}")
        return True

    def page_ids(self) -> list[int]:
        return list(self._pages)

    def select_region(self, box: NormalizedBox, page_id: int) -> "PdfDrawingHandle":
        if page_id not in self._pages:
            raise ValidationError(f"page {page_id} does not exist")
        area = margin_rect(
            self.settings.page_width,
            self.settings.page_height,
            self.settings.width_ratio,
            self.settings.height_ratio,
        )
        return PdfDrawingHandle(self, page_id, box.to_absolute(area))

    @property
    def mode(self) -> DrawingMode:
        return self._mode

    def set_mode(self, mode: DrawingMode) -> "PdfSurface":
        self._mode = mode
        return self

    def to_bytes(self) -> bytes:
        return build_pdf_bytes(
            ["".join(parts) for parts in self._pages.values()],
            page_size=(self.settings.page_width, self.settings.page_height),
            fonts=self.fonts.resources(),
            images=list(self._images.values()),
        )

    def finalize(self, destination: Path | str) -> bool:
        if not self._pages:
            logger.warning("No pages to write")
            return False
        target = Path(destination)
        try:
            target.write_bytes(self.to_bytes())
        except OSError:
            logger.exception(f"Failed to write PDF to {target}")
            return False
        logger.info(f"Wrote {len(self._pages)} page(s) to {target}")
        return True

    def append(self, page_id: int, content: str) -> None:
        self._pages[page_id].append(content)

    def decoded_image(self, source: ImageSource) -> Image.Image:
        key = image_key(source)
        if key not in self._decoded:
            self._decoded[key] = open_image(source)
        return self._decoded[key]

    def image_resource(self, source: ImageSource) -> ImageResource:
        key = image_key(source)
        if key not in self._images:
            self._images[key] = encode_image(self.decoded_image(source), f"/Im{len(self._images) + 1}")
        return self._images[key]


class PdfDrawingHandle(DrawingHandle):
    def __init__(self, surface: PdfSurface, page_id: int, rect: Rect):
        self._surface = surface
        self.page_id = page_id
        self._rect = rect
        self._color = BLACK
        self._font = TextStyle()

    def active_rect(self) -> Rect:
        return self._rect

    def current_mode(self) -> DrawingMode:
        return self._surface.mode

    @property
    def color(self) -> Color:
        return self._color

    @property
    def font(self) -> TextStyle:
        return TextStyle(self._font.family, self._font.styles, self._font.size, self._color)

    def set_color(self, color: Color) -> None:
        self._color = color

    def set_font(self, family: FontFamily, styles: Iterable[FontStyle], size: float) -> None:
        self._font = TextStyle(family=family, styles=frozenset(styles), size=size)

    def measure_text_width(self, text: str) -> float:
        return self._resource().text_width(text, self._font.size) / self._rect.width

    def measure_text_height(self, text: str) -> float:
        return self._resource().line_height(self._font.size) / self._rect.height

    def measure_image_height(self, image: ImageSource) -> float:
        _, height = point_size(self._surface.decoded_image(image))
        return height / self._rect.height

    def image_aspect_ratio(self, image: ImageSource) -> float:
        return aspect_ratio(self._surface.decoded_image(image))

    def write_text(self, text: str, x: float, y: float) -> None:
        require_between(x, 0.0, 1.0, "text x")
        require_between(y, 0.0, 1.0, "text y")
        font = self._resource()
        size = self._font.size
        px = self._page_x(x)
        py = self._pdf_y(self._page_y(y))
        parts = [_fill_state(self._color), _draw_text(text, px, py, font, size), "Q\n"]

        width = font.text_width(text, size)
        for style, offset in ((FontStyle.UNDERLINE, -UNDERLINE_OFFSET), (FontStyle.STRIKEOUT, STRIKEOUT_OFFSET)):
            if style in self._font.styles:
                line_y = py + size * offset
                parts.append(_stroke_state(self._color, size * DECORATION_THICKNESS, None))
                parts.append(_draw_line(px, line_y, px + width, line_y))
                parts.append("Q\n")
        self._surface.append(self.page_id, "".join(parts))

    def draw_line(self, box: NormalizedBox, thickness: float, units_on: float) -> None:
        _require_stroke(thickness, units_on)
        rect = self._rect
        start = (self._page_x(box.from_x), self._page_y(box.from_y))
        end = (self._page_x(box.to_x), self._page_y(box.to_y))
        dash = dash_pattern(math.dist(start, end), thickness, units_on)
        if dash is not None and dash[0] == 0:
            return
        half = thickness / 2
        x1, y1 = bind_point(*start, half, rect)
        x2, y2 = bind_point(*end, half, rect)
        content = _stroke_state(self._color, thickness, dash) + _draw_line(x1, self._pdf_y(y1), x2, self._pdf_y(y2)) + "Q\n"
        self._surface.append(self.page_id, content)

    def draw_rect_outline(self, box: NormalizedBox, thickness: float, units_on: float) -> None:
        _require_stroke(thickness, units_on)
        absolute = box.to_absolute(self._rect)
        dash = dash_pattern(outline_length(absolute), thickness, units_on)
        if dash is not None and dash[0] == 0:
            return
        half = thickness / 2
        x1, y1 = bind_point(absolute.x, absolute.y, half, self._rect)
        x2, y2 = bind_point(absolute.right, absolute.bottom, half, self._rect)
        content = (
            _stroke_state(self._color, thickness, dash)
            + _draw_rect(x1, self._pdf_y(y2), x2 - x1, y2 - y1, stroke=True)
            + "Q\n"
        )
        self._surface.append(self.page_id, content)

    def draw_rect(self, box: NormalizedBox) -> None:
        absolute = box.to_absolute(self._rect)
        content = (
            _fill_state(self._color)
            + _draw_rect(absolute.x, self._pdf_y(absolute.bottom), absolute.width, absolute.height, stroke=False, fill=True)
            + "Q\n"
        )
        self._surface.append(self.page_id, content)

    def draw_image(self, image: ImageSource, box: NormalizedBox) -> None:
        resource = self._surface.image_resource(image)
        absolute = box.to_absolute(self._rect)
        content = _draw_image(resource.name, absolute.x, self._pdf_y(absolute.bottom), absolute.width, absolute.height)
        self._surface.append(self.page_id, content)

    def _resource(self):
        return self._surface.fonts.resolve(self._font.family, self._font.styles)

    def _page_x(self, x: float) -> float:
        return self._rect.x + self._rect.width * x

    def _page_y(self, y: float) -> float:
        return self._rect.y + self._rect.height * y

    def _pdf_y(self, y: float) -> float:
        # PDF y grows up
        return self._surface.settings.page_height - y


def _require_stroke(thickness: float, units_on: float) -> None:
    require_positive(thickness, "thickness")
    require_between(units_on, 0.0, 1.0, "units_on")
