import pytest

from pdf_layout.core.models.box import FULL, NormalizedBox, Rect
from pdf_layout.core.models.flags import DrawingMode
from pdf_layout.core.surface import bind_point, dash_pattern, margin_rect, outline_length


def test_dash_pattern_half_fill():
    assert dash_pattern(10, 1, 0.5) == (1.0, 1.0)


def test_dash_pattern_uneven_fill():
    # 8 units: 2 on, 6 off
    assert dash_pattern(8, 1, 0.25) == pytest.approx((1.0, 3.0))
    assert dash_pattern(8, 1, 0.75) == pytest.approx((3.0, 1.0))


def test_dash_pattern_solid_and_invisible():
    assert dash_pattern(10, 1, 1.0) is None
    assert dash_pattern(0, 1, 0.5) is None
    assert dash_pattern(10, 1, 0.0) == (0.0, 10.0)


def test_outline_length_is_perimeter():
    assert outline_length(Rect(0, 0, 30, 20)) == 100


def test_bind_point_insets_by_half_thickness():
    rect = Rect(0, 0, 100, 50)
    assert bind_point(0, 0, 2, rect) == (2, 2)
    assert bind_point(150, -10, 1, rect) == (99, 1)
    assert bind_point(40, 25, 3, rect) == (40, 25)
    assert bind_point(100, 50, 0.5, rect) == (99.5, 49.5)


def test_margin_rect_centers_scaled_page():
    rect = margin_rect(595, 842)
    assert rect.width == pytest.approx(559.3)
    assert rect.height == pytest.approx(808.32)
    assert rect.x == pytest.approx(17.85)
    assert rect.y == pytest.approx(16.84)


def test_select_full_page_matches_full_region(surface):
    assert surface.add_page(3)
    assert not surface.add_page(3)
    surface.add_page(1)
    assert surface.page_ids() == [3, 1]
    full = surface.select_full_page(3)
    region = surface.select_region(FULL, 3)
    assert full.active_rect() == region.active_rect()


def test_handle_thickness_conversion_and_mode(make_surface):
    surface = make_surface(rect=Rect(0, 0, 200, 50)).set_mode(DrawingMode.BOXED)
    surface.add_page(1)
    handle = surface.select_region(NormalizedBox(0, 0, 0.5, 1), 1)
    assert handle.thickness_to_width(10) == pytest.approx(0.1)
    assert handle.thickness_to_height(10) == pytest.approx(0.2)
    assert handle.canvas_ratio() == pytest.approx(2.0)
    assert handle.current_mode().boxed
    assert not handle.current_mode().calibration
