from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from pdf_layout.config import RenderSettings
from pdf_layout.core.models.flags import DrawingMode
from pdf_layout.core.services.region import Region
from pdf_layout.utils.pdf.renderers.pdf_surface import PdfSurface

logger = logging.getLogger(__name__)


def render_pdf(
    path: Path,
    regions: Iterable[Region],
    mode: DrawingMode = DrawingMode.NONE,
    settings: RenderSettings | None = None,
) -> bool:
    """
    High-level renderer: draws regions in order on a fresh PDF surface and writes it to ``path``.
    Returns False when the document could not be written.
    """
    surface = PdfSurface(settings).set_mode(mode)
    count = 0
    for region in regions:
        region.render(surface)
        count += 1
    logger.debug(f"Rendered {count} region(s) across pages {surface.page_ids()}")
    return surface.finalize(path)
