import sys
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pdf_layout.core.models.box import FULL, Rect  # noqa: E402
from pdf_layout.core.models.flags import DrawingMode  # noqa: E402
from pdf_layout.core.models.styles import BLACK, TextStyle  # noqa: E402
from pdf_layout.core.surface import DrawingHandle, DrawingSurface  # noqa: E402
from pdf_layout.core.validation import ValidationError, require_between  # noqa: E402

DRAW_CALLS = {"write_text", "draw_line", "draw_rect", "draw_rect_outline", "draw_image"}


class RecordingHandle(DrawingHandle):
    """Handle with fixed metrics that logs every call it receives."""

    def __init__(self, surface, rect):
        self._surface = surface
        self._rect = rect
        self._color = BLACK
        self._font = TextStyle()

    def _record(self, *call):
        self._surface.calls.append(call)

    def active_rect(self):
        return self._rect

    def current_mode(self):
        return self._surface.mode

    def measure_text_width(self, text):
        return len(text) * self._surface.char_width

    def measure_text_height(self, text):
        return self._surface.line_height

    def measure_image_height(self, image):
        return self._surface.image_height

    def image_aspect_ratio(self, image):
        return self._surface.image_ratio

    @property
    def color(self):
        return self._color

    @property
    def font(self):
        return self._font

    def set_color(self, color):
        self._color = color
        self._record("set_color", color)

    def set_font(self, family, styles, size):
        self._font = TextStyle(family=family, styles=frozenset(styles), size=size)
        self._record("set_font", family, size)

    def write_text(self, text, x, y):
        require_between(x, 0.0, 1.0, "text x")
        require_between(y, 0.0, 1.0, "text y")
        self._record("write_text", text, x, y)

    def draw_line(self, box, thickness, units_on):
        self._record("draw_line", box, thickness, units_on)

    def draw_rect(self, box):
        self._record("draw_rect", box)

    def draw_rect_outline(self, box, thickness, units_on):
        self._record("draw_rect_outline", box, thickness, units_on)

    def draw_image(self, image, box):
        self._record("draw_image", image, box)


class RecordingSurface(DrawingSurface):
    def __init__(self, rect=Rect(0, 0, 100, 100), char_width=0.01, line_height=0.05, image_height=0.1, image_ratio=1.0):
        self.rect = rect
        self.char_width = char_width
        self.line_height = line_height
        self.image_height = image_height
        self.image_ratio = image_ratio
        self.calls = []
        self._pages = []
        self._mode = DrawingMode.NONE

    def add_page(self, page_id):
        if page_id in self._pages:
            return False
        self._pages.append(page_id)
        return True

    def page_ids(self):
        return list(self._pages)

    def select_region(self, box, page_id):
        if page_id not in self._pages:
            raise ValidationError(f"page {page_id} does not exist")
        self.calls.append(("select_region", box, page_id))
        return RecordingHandle(self, box.to_absolute(self.rect))

    @property
    def mode(self):
        return self._mode

    def set_mode(self, mode):
        self._mode = mode
        return self

    def finalize(self, destination):
        return True

    def draws(self):
        return [call for call in self.calls if call[0] in DRAW_CALLS]

    def named(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("PDF_LAYOUT_SETTINGS", raising=False)
    monkeypatch.delenv("PDF_LAYOUT_FONT_DIR", raising=False)


@pytest.fixture
def make_surface():
    return RecordingSurface


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def handle(surface):
    surface.add_page(1)
    return surface.select_region(FULL, 1)


@pytest.fixture
def png_file(tmp_path):
    from PIL import Image

    path = tmp_path / "marker.png"
    Image.new("RGBA", (40, 20), (255, 0, 0, 128)).save(path)
    return path
