import pytest
from PIL import Image

from pdf_layout.config import RenderSettings
from pdf_layout.core.models.box import FULL, LINE_TOP, NormalizedBox
from pdf_layout.core.models.flags import DrawingMode, ScaleStrategy
from pdf_layout.core.models.styles import RED, FontFamily, FontStyle, LineStyle, TextStyle
from pdf_layout.core.services.region import Region
from pdf_layout.core.validation import RangeError, ValidationError
from pdf_layout.elements.chart import ChartConfig, ChartElement
from pdf_layout.elements.image import ImageElement
from pdf_layout.elements.line import LineElement
from pdf_layout.elements.text import TextElement
from pdf_layout.utils.pdf.renderers.pdf_renderer import render_pdf
from pdf_layout.utils.pdf.renderers.pdf_surface import PdfSurface


def assert_valid_pdf(data: bytes) -> None:
    assert data.startswith(b"%PDF")
    startxref = int(data.split(b"startxref\n")[1].split(b"\n")[0])
    assert data[startxref : startxref + 4] == b"xref"


def test_pages_are_tracked_in_order():
    surface = PdfSurface(RenderSettings())
    assert surface.add_page(2)
    assert surface.add_page(1)
    assert not surface.add_page(2)
    assert surface.page_ids() == [2, 1]
    assert surface.set_mode(DrawingMode.BOXED) is surface
    assert surface.select_full_page(2).current_mode() is DrawingMode.BOXED
    with pytest.raises(ValidationError):
        surface.select_region(FULL, 9)


def test_full_page_uses_margins():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    rect = surface.select_full_page(1).active_rect()
    assert rect.x == pytest.approx(17.85)
    assert rect.width == pytest.approx(559.3)
    half = surface.select_region(NormalizedBox(0, 0.5, 1, 1), 1).active_rect()
    assert half.y == pytest.approx(16.84 + 808.32 / 2)


def test_type1_fallback_measurement():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    handle = surface.select_full_page(1)
    handle.set_font(FontFamily.TIMES, {FontStyle.BOLD}, 10)
    assert handle.measure_text_width("abcd") == pytest.approx(4 * 10 * 0.52 / 559.3)
    assert handle.measure_text_height("abcd") == pytest.approx(11.5 / 808.32)
    assert surface.fonts.resources()[0].base_font == "Times-Bold"


def test_image_measurement_uses_pixels_as_points():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    handle = surface.select_full_page(1)
    picture = Image.new("RGB", (40, 20))
    assert handle.image_aspect_ratio(picture) == pytest.approx(2.0)
    assert handle.measure_image_height(picture) == pytest.approx(20 / 808.32)


def test_write_text_rejects_points_outside_region():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    with pytest.raises(RangeError):
        surface.select_full_page(1).write_text("x", 0.5, 1.2)


def test_strokes_are_clamped_inside_region():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    handle = surface.select_full_page(1)
    handle.draw_line(LINE_TOP, 4, 1)
    handle.draw_line(LINE_TOP, 0.5, 0.25)
    handle.draw_line(LINE_TOP, 1, 0)

    data = surface.to_bytes()
    assert b"19.85 823.16 m 575.15 823.16 l S" in data
    assert b"[0.5 1.5] 0 d" in data
    assert data.count(b" l S") == 2


@pytest.mark.parametrize("thickness, units_on", [(0, 0.5), (-1, 1), (1, 2.0), (1, -0.1)])
def test_stroke_arguments_are_validated(thickness, units_on):
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    handle = surface.select_full_page(1)
    with pytest.raises(ValidationError):
        handle.draw_line(LINE_TOP, thickness, units_on)
    with pytest.raises(ValidationError):
        handle.draw_rect_outline(FULL, thickness, units_on)
    assert b"/Length 0 >> stream" in surface.to_bytes()


def test_full_document_round_trip(tmp_path, png_file):
    region = Region(FULL, 1)
    region.add(TextElement("Hello", TextStyle.of(FontFamily.HELVETICA, 14, FontStyle.UNDERLINE), start_at=(0, 0)))
    region.add(LineElement(LINE_TOP, LineStyle(color=RED)))
    region.add(ImageElement(png_file, ScaleStrategy.FIT_CENTER, NormalizedBox(0, 0.1, 0.5, 0.4)))
    chart = Region(NormalizedBox(0, 0.5, 1, 1), 2, [ChartElement(ChartConfig().with_series([1, 3, 2]).with_axis_markers(2, 2))])
    out_path = tmp_path / "layout.pdf"

    assert render_pdf(out_path, [region, chart])

    data = out_path.read_bytes()
    assert_valid_pdf(data)
    assert b"/Count 2" in data
    assert b"(Hello) Tj" in data
    assert b"/BaseFont /Helvetica" in data
    assert b"/Im1 Do" in data
    assert b"/Subtype /Image /Width 40 /Height 20" in data


def test_finalize_reports_io_failure(tmp_path):
    surface = PdfSurface(RenderSettings())
    assert not surface.finalize(tmp_path / "empty.pdf")
    surface.add_page(1)
    assert not surface.finalize(tmp_path)
    assert surface.finalize(tmp_path / "ok.pdf")


def test_missing_font_files_fall_back_to_type1(tmp_path):
    surface = PdfSurface(RenderSettings(font_dir=tmp_path))
    surface.add_page(1)
    handle = surface.select_full_page(1)
    handle.set_font(FontFamily.ARIAL, set(), 12)
    handle.write_text("Ahoj", 0.1, 0.1)
    resource = surface.fonts.resources()[0]
    assert resource.ttf is None
    assert resource.base_font == "Helvetica"


def test_handle_reports_current_style():
    surface = PdfSurface(RenderSettings())
    surface.add_page(1)
    handle = surface.select_full_page(1)
    handle.set_text_style(TextStyle.of(FontFamily.TIMES, 9, FontStyle.ITALIC, color=RED))
    assert handle.color == RED
    assert handle.font == TextStyle(FontFamily.TIMES, frozenset({FontStyle.ITALIC}), 9, RED)
