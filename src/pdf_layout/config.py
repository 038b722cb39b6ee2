from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from pdf_layout.core.surface import PAGE_HEIGHT_RATIO, PAGE_WIDTH_RATIO
from pdf_layout.core.validation import require_between, require_positive
from pdf_layout.utils.pdf.core.layout_common import PAGE_H, PAGE_W

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "pdf-layout"
SETTINGS_ENV = "PDF_LAYOUT_SETTINGS"
FONT_DIR_ENV = "PDF_LAYOUT_FONT_DIR"


@dataclass(frozen=True)
class RenderSettings:
    page_width: float = PAGE_W
    page_height: float = PAGE_H
    width_ratio: float = PAGE_WIDTH_RATIO
    height_ratio: float = PAGE_HEIGHT_RATIO
    font_dir: Path | None = None

    def __post_init__(self) -> None:
        require_positive(self.page_width, "page_width")
        require_positive(self.page_height, "page_height")
        require_between(self.width_ratio, 0.0, 1.0, "width_ratio")
        require_between(self.height_ratio, 0.0, 1.0, "height_ratio")
        require_positive(self.width_ratio, "width_ratio")
        require_positive(self.height_ratio, "height_ratio")
        if self.font_dir is not None and not isinstance(self.font_dir, Path):
            object.__setattr__(self, "font_dir", Path(self.font_dir))


DEFAULT_SETTINGS = RenderSettings()


def load_settings(path: Path | None = None) -> RenderSettings:
    """
    Read settings from JSON (explicit path or $PDF_LAYOUT_SETTINGS) merged over defaults.
    $PDF_LAYOUT_FONT_DIR overrides the font directory.
    """
    settings = DEFAULT_SETTINGS
    env_path = os.environ.get(SETTINGS_ENV)
    target = path or (Path(env_path) if env_path else None)
    if target is not None and target.exists():
        try:
            raw = json.loads(target.read_text(encoding="utf-8"))
            known = {f.name for f in fields(RenderSettings)}
            settings = replace(settings, **{k: v for k, v in raw.items() if k in known})
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning(f"Ignoring unreadable settings file {target}: {exc}")
            settings = DEFAULT_SETTINGS

    font_dir = os.environ.get(FONT_DIR_ENV)
    if font_dir:
        settings = replace(settings, font_dir=Path(font_dir))
    return settings


def save_settings(settings: RenderSettings, path: Path) -> Path:
    data = asdict(settings)
    data["font_dir"] = str(settings.font_dir) if settings.font_dir else None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def package_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"
