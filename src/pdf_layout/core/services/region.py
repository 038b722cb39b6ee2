from __future__ import annotations

import logging
from typing import Iterable

from pdf_layout.core.models.box import FULL, NormalizedBox
from pdf_layout.core.models.styles import BLACK
from pdf_layout.core.surface import DrawingSurface
from pdf_layout.core.validation import ValidationError, require_not_none
from pdf_layout.elements.base import Element

logger = logging.getLogger(__name__)


class Region:
    """
    A rectangular area of a page holding elements drawn in insertion order.

    Elements can be added until the region is rendered; afterwards the region is frozen.
    """

    def __init__(self, box: NormalizedBox, page_id: int, elements: Iterable[Element] = ()):
        require_not_none(box, "box")
        if box.width == 0 or box.height == 0:
            raise ValidationError(f"a region needs a non-empty area, got {box}")
        self.box = box
        self.page_id = page_id
        self._elements: list[Element] = []
        self._rendered = False
        for element in elements:
            self.add(element)

    @property
    def elements(self) -> tuple[Element, ...]:
        return tuple(self._elements)

    def add(self, element: Element) -> "Region":
        if self._rendered:
            raise ValidationError("cannot add elements to a region that was already rendered")
        require_not_none(element, "element")
        self._elements.append(element)
        return self

    def render(self, surface: DrawingSurface) -> None:
        surface.add_page(self.page_id)
        handle = surface.select_region(self.box, self.page_id)
        logger.debug(f"Rendering region {self.box} on page {self.page_id} with {len(self._elements)} elements")

        if handle.current_mode().boxed:
            handle.set_color(BLACK)
            handle.draw_rect_outline(FULL, 1, 1)

        self._rendered = True
        for element in self._elements:
            logger.debug(f"Rendering {element.kind} element")
            element.render(handle)
