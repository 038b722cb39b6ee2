import struct

import pytest

from pdf_layout.config import RenderSettings
from pdf_layout.core.models.styles import FontFamily, FontStyle
from pdf_layout.utils.pdf.core.fonts import FontRegistry, TrueTypeFont, _format_cid_widths, font_objects, variant_index
from pdf_layout.utils.pdf.renderers.pdf_surface import PdfSurface


def write_ttf(path, advances=(500, 600, 700)):
    """Smallest font the parser accepts: 'A' and 'B' map to glyphs 1 and 2."""
    head = bytearray(54)
    struct.pack_into(">H", head, 18, 1000)
    struct.pack_into(">hhhh", head, 36, 0, -200, 1000, 800)
    hhea = bytearray(36)
    struct.pack_into(">hhh", hhea, 4, 800, -200, 100)
    struct.pack_into(">H", hhea, 34, len(advances))
    maxp = bytearray(6)
    struct.pack_into(">H", maxp, 4, len(advances))
    hmtx = b"".join(struct.pack(">Hh", width, 0) for width in advances)

    segments = struct.pack(">HHHHHHH", 4, 0, 0, 4, 0, 0, 0)
    segments += struct.pack(">HH", 0x42, 0xFFFF) + b"\0\0"
    segments += struct.pack(">HH", 0x41, 0xFFFF)
    segments += struct.pack(">hh", 1 - 0x41, 1)
    segments += struct.pack(">HH", 0, 0)
    cmap = struct.pack(">HHHHI", 0, 1, 3, 1, 12) + segments

    tables = {"cmap": cmap, "head": bytes(head), "hhea": bytes(hhea), "hmtx": hmtx, "maxp": bytes(maxp)}
    directory = struct.pack(">IHHHH", 0x00010000, len(tables), 0, 0, 0)
    body = b""
    first_offset = 12 + 16 * len(tables)
    for tag, table in tables.items():
        directory += tag.encode("ascii") + struct.pack(">III", 0, first_offset + len(body), len(table))
        body += table
    path.write_bytes(directory + body)
    return path


def test_variant_index():
    assert variant_index([]) == 0
    assert variant_index([FontStyle.BOLD, FontStyle.UNDERLINE]) == 1
    assert variant_index([FontStyle.ITALIC, FontStyle.BOLD]) == 3


def test_truetype_metrics(tmp_path):
    font = TrueTypeFont(write_ttf(tmp_path / "f.ttf"), "/Test")
    assert font.glyph_id(ord("A")) == 1
    assert font.glyph_id(ord("B")) == 2
    assert font.glyph_id(ord("z")) == 0
    assert font.text_width("AB", 10) == pytest.approx(13.0)
    assert font.line_height(10) == pytest.approx(11.0)


def test_used_glyphs_drive_width_array(tmp_path):
    font = TrueTypeFont(write_ttf(tmp_path / "f.ttf"), "/Test")
    assert font.encode_text_hex("BA") == "00020001"
    assert font.used_gids == {0, 1, 2}
    assert _format_cid_widths(font) == "0 [500 600 700]"


def test_registry_loads_font_files_by_family_and_variant(tmp_path):
    write_ttf(tmp_path / "helvetica-bold.ttf")
    registry = FontRegistry(tmp_path)
    bold = registry.resolve(FontFamily.HELVETICA, {FontStyle.BOLD})
    regular = registry.resolve(FontFamily.HELVETICA, set())
    assert bold.name == "/F1"
    assert bold.base_font == "HelveticaBold"
    assert bold.ttf is not None
    assert regular.ttf is None
    assert registry.resolve(FontFamily.HELVETICA, [FontStyle.BOLD]) is bold

    objs, ref_id, next_id = font_objects(bold, 3)
    assert (len(objs), ref_id, next_id) == (4, 6, 7)
    assert b"/Subtype /Type0" in objs[3]


def test_unreadable_font_falls_back(tmp_path, caplog):
    (tmp_path / "times-regular.ttf").write_bytes(b"nope")
    resource = FontRegistry(tmp_path).resolve(FontFamily.TIMES, ())
    assert resource.ttf is None
    assert resource.base_font == "Times-Roman"
    assert "Cannot load font" in caplog.text


def test_surface_embeds_truetype_text(tmp_path):
    write_ttf(tmp_path / "arial-regular.ttf")
    surface = PdfSurface(RenderSettings(font_dir=tmp_path))
    surface.add_page(1)
    handle = surface.select_full_page(1)
    handle.set_font(FontFamily.ARIAL, (), 10)
    assert handle.measure_text_width("AB") == pytest.approx(13.0 / 559.3)
    handle.write_text("AB", 0.1, 0.1)
    data = surface.to_bytes()
    assert b"<00010002> Tj" in data
    assert b"/FontFile2" in data
