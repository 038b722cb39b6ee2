from __future__ import annotations

import logging
import struct
from bisect import bisect_right
from dataclasses import dataclass
from functools import partial
from itertools import groupby
from pathlib import Path
from typing import Callable, Iterable, NamedTuple

from pdf_layout.core.models.styles import FontFamily, FontStyle
from pdf_layout.utils.pdf.core.layout_common import FALLBACK_CHAR_WIDTH, FALLBACK_LINE_HEIGHT

logger = logging.getLogger(__name__)

# Standard Type1 faces indexed by variant: regular, bold, italic, bold italic.
# Arial and Verdana map onto Helvetica, which every PDF viewer ships.
_TYPE1_NAMES: dict[FontFamily, tuple[str, str, str, str]] = {
    FontFamily.HELVETICA: ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    FontFamily.ARIAL: ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    FontFamily.VERDANA: ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    FontFamily.TIMES: ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
}
_VARIANTS = ("regular", "bold", "italic", "bolditalic")

_REQUIRED_TABLES = ("cmap", "head", "hhea", "hmtx", "maxp")
# (platform, encoding) pairs, most preferred first
_CMAP_PREFERENCE = ((3, 10), (3, 1), (0, 4), (0, 3), (0, 2), (0, 1))


def variant_index(styles: Iterable[FontStyle]) -> int:
    styles = set(styles)
    return (2 if FontStyle.ITALIC in styles else 0) + (1 if FontStyle.BOLD in styles else 0)


def _table_directory(data: bytes) -> dict[str, tuple[int, int]]:
    """Map of table tag to (offset, length)."""
    if len(data) < 12:
        raise ValueError("Invalid TTF (too small)")
    (num_tables,) = struct.unpack_from(">H", data, 4)
    tables: dict[str, tuple[int, int]] = {}
    for base in range(12, 12 + 16 * num_tables, 16):
        tag = data[base : base + 4].decode("ascii", "replace")
        tables[tag] = struct.unpack_from(">II", data, base + 8)
    missing = [tag for tag in _REQUIRED_TABLES if tag not in tables]
    if missing:
        raise ValueError(f"TTF missing tables: {', '.join(missing)}")
    return tables


def _shifted(delta: int, codepoint: int) -> int:
    return (codepoint + delta) & 0xFFFF


class _Segment(NamedTuple):
    first: int
    last: int
    glyph: Callable[[int], int]


class TrueTypeFont:
    """
    The parts of a TrueType file needed to measure text and embed it as a CID font:
    horizontal metrics and a Unicode cmap (formats 4 and 12).
    """

    def __init__(self, path: Path, pdf_name: str):
        self.path = path
        self.pdf_name = pdf_name  # e.g. "/HelveticaBold"
        self.data = path.read_bytes()
        tables = _table_directory(self.data)

        head = tables["head"][0]
        self.units_per_em = self._read(">H", head + 18)[0]
        self.bbox = self._read(">hhhh", head + 36)
        hhea = tables["hhea"][0]
        self.ascent, self.descent, self.line_gap = self._read(">hhh", hhea + 4)
        num_hmetrics = self._read(">H", hhea + 34)[0]
        self.num_glyphs = self._read(">H", tables["maxp"][0] + 4)[0]

        self._advances = self._advance_widths(tables["hmtx"][0], num_hmetrics)
        self._segments = self._cmap_segments(tables["cmap"][0])
        self._firsts = [segment.first for segment in self._segments]
        self.used_gids: set[int] = {self.glyph_id(ord(" "))}

    def _read(self, fmt: str, offset: int) -> tuple:
        return struct.unpack_from(fmt, self.data, offset)

    def _advance_widths(self, offset: int, num_hmetrics: int) -> list[int]:
        count = min(num_hmetrics, self.num_glyphs)
        widths = [self._read(">H", offset + 4 * i)[0] for i in range(count)] or [int(self.units_per_em)]
        # glyphs past numberOfHMetrics reuse the last advance
        return widths + [widths[-1]] * (self.num_glyphs - len(widths))

    def _cmap_segments(self, offset: int) -> list[_Segment]:
        version, count = self._read(">HH", offset)
        if version != 0 or count == 0:
            raise ValueError("Invalid cmap table")
        records: dict[tuple[int, int], int] = {}
        for i in range(count):
            platform, encoding, sub_offset = self._read(">HHI", offset + 4 + 8 * i)
            records.setdefault((platform, encoding), sub_offset)
        key = next((k for k in _CMAP_PREFERENCE if k in records), next(iter(records)))

        start = offset + records[key]
        fmt = self._read(">H", start)[0]
        if fmt == 4:
            segments = self._format4_segments(start)
        elif fmt == 12:
            segments = self._format12_segments(start)
        else:
            raise ValueError(f"Unsupported cmap format: {fmt}")
        return sorted(segments, key=lambda segment: segment.first)

    def _format4_segments(self, start: int) -> list[_Segment]:
        count = self._read(">H", start + 6)[0] // 2
        ends_at = start + 14
        firsts_at = ends_at + 2 * count + 2  # reservedPad
        deltas_at = firsts_at + 2 * count
        ranges_at = deltas_at + 2 * count
        ends = self._read(f">{count}H", ends_at)
        firsts = self._read(f">{count}H", firsts_at)
        deltas = self._read(f">{count}h", deltas_at)
        range_offsets = self._read(f">{count}H", ranges_at)

        segments = []
        for i in range(count):
            if range_offsets[i] == 0:
                glyph = partial(_shifted, deltas[i])
            else:
                # idRangeOffset is relative to its own slot in the array
                base = ranges_at + 2 * i + range_offsets[i] - 2 * firsts[i]
                glyph = partial(self._indexed_glyph, base, deltas[i])
            segments.append(_Segment(firsts[i], ends[i], glyph))
        return segments

    def _indexed_glyph(self, base: int, delta: int, codepoint: int) -> int:
        address = base + 2 * codepoint
        if address + 2 > len(self.data):
            return 0
        glyph = self._read(">H", address)[0]
        return _shifted(delta, glyph) if glyph else 0

    def _format12_segments(self, start: int) -> list[_Segment]:
        groups = self._read(">I", start + 12)[0]
        segments = []
        for i in range(groups):
            first, last, first_gid = self._read(">III", start + 16 + 12 * i)
            segments.append(_Segment(first, last, partial(_shifted, first_gid - first)))
        return segments

    def glyph_id(self, codepoint: int) -> int:
        index = bisect_right(self._firsts, codepoint) - 1
        if index < 0 or codepoint > self._segments[index].last:
            return 0
        gid = self._segments[index].glyph(codepoint)
        return gid if 0 <= gid < self.num_glyphs else 0

    def width_1000(self, gid: int) -> int:
        if not 0 <= gid < len(self._advances):
            return 500
        return _scale_font_units(self._advances[gid], self.units_per_em)

    def text_width(self, text: str, size: float) -> float:
        return sum(self.width_1000(self.glyph_id(ord(ch))) for ch in text) * size / 1000.0

    def line_height(self, size: float) -> float:
        units = float(self.units_per_em or 1000)
        return (self.ascent - self.descent + self.line_gap) * size / units

    def encode_text_hex(self, text: str) -> str:
        gids = [self.glyph_id(ord(ch)) for ch in str(text)]
        self.used_gids.update(gids)
        return "".join(f"{gid:04X}" for gid in gids)


@dataclass
class FontResource:
    """A font as referenced from page content, e.g. ``/F1``."""

    name: str
    base_font: str
    ttf: TrueTypeFont | None = None

    def text_width(self, text: str, size: float) -> float:
        if self.ttf is not None:
            return self.ttf.text_width(text, size)
        return len(text) * size * FALLBACK_CHAR_WIDTH

    def line_height(self, size: float) -> float:
        if self.ttf is not None:
            return self.ttf.line_height(size)
        return size * FALLBACK_LINE_HEIGHT


class FontRegistry:
    """
    Resolves family and style to page font resources, loading TrueType files from
    ``font_dir`` (``<family>-<variant>.ttf``) and falling back to standard Type1 fonts.
    """

    def __init__(self, font_dir: Path | None = None):
        self.font_dir = font_dir
        self._fonts: dict[tuple[FontFamily, int], FontResource] = {}

    def resolve(self, family: FontFamily, styles: Iterable[FontStyle]) -> FontResource:
        key = (family, variant_index(styles))
        if key not in self._fonts:
            self._fonts[key] = self._load(family, key[1], f"/F{len(self._fonts) + 1}")
        return self._fonts[key]

    def resources(self) -> list[FontResource]:
        return list(self._fonts.values())

    def _load(self, family: FontFamily, variant: int, name: str) -> FontResource:
        base_font = _TYPE1_NAMES[family][variant]
        if self.font_dir is None:
            return FontResource(name, base_font)
        path = Path(self.font_dir) / f"{family.value}-{_VARIANTS[variant]}.ttf"
        if not path.is_file():
            logger.debug(f"No TrueType file {path}, using {base_font}")
            return FontResource(name, base_font)
        try:
            ttf = TrueTypeFont(path, pdf_name=f"/{family.value.title()}{_VARIANTS[variant].title()}")
        except (OSError, ValueError, struct.error) as exc:
            logger.warning(f"Cannot load font {path}: {exc}; using {base_font}")
            return FontResource(name, base_font)
        return FontResource(name, ttf.pdf_name.lstrip("/"), ttf)


def _scale_font_units(value: int, units_per_em: int) -> int:
    if units_per_em <= 0:
        return int(value)
    return int(round(value * 1000.0 / float(units_per_em)))


def _format_cid_widths(font: TrueTypeFont) -> str:
    """``/W`` array body: one ``first [w w ...]`` run per block of consecutive glyph ids."""
    runs = []
    for _, run in groupby(enumerate(sorted(font.used_gids)), key=lambda pair: pair[1] - pair[0]):
        gids = [gid for _, gid in run]
        runs.append(f"{gids[0]} [{' '.join(str(font.width_1000(gid)) for gid in gids)}]")
    return " ".join(runs)


def font_objects(font: FontResource, first_id: int) -> tuple[list[bytes], int, int]:
    """
    PDF objects for one font resource.
    Returns (objects, id of the object referenced from page resources, next free id).
    """
    if font.ttf is None:
        obj = f"{first_id} 0 obj << /Type /Font /Subtype /Type1 /BaseFont /{font.base_font} >> endobj\n"
        return [obj.encode("ascii")], first_id, first_id + 1

    ttf = font.ttf
    file_id, desc_id, cid_id, type0_id = range(first_id, first_id + 4)
    units = int(ttf.units_per_em or 1000)
    x_min, y_min, x_max, y_max = (_scale_font_units(v, units) for v in ttf.bbox)
    ascent = _scale_font_units(int(ttf.ascent), units)
    descent = _scale_font_units(int(ttf.descent), units)
    default_width = ttf.width_1000(ttf.glyph_id(ord(" "))) or 500
    widths = _format_cid_widths(ttf)
    w_part = f" /W [{widths}]" if widths else ""

    font_file = f"{file_id} 0 obj << /Length {len(ttf.data)} >> stream\n".encode("ascii") + ttf.data
    descriptor = (
        f"{desc_id} 0 obj << /Type /FontDescriptor /FontName {ttf.pdf_name} "
        f"/Flags 32 /FontBBox [{x_min} {y_min} {x_max} {y_max}] "
        f"/ItalicAngle 0 /Ascent {ascent} /Descent {descent} /CapHeight {ascent} "
        f"/StemV 80 /FontFile2 {file_id} 0 R >> endobj\n"
    )
    cid_font = (
        f"{cid_id} 0 obj << /Type /Font /Subtype /CIDFontType2 /BaseFont {ttf.pdf_name} "
        f"/CIDSystemInfo << /Registry (Adobe) /Ordering (Identity) /Supplement 0 >> "
        f"/FontDescriptor {desc_id} 0 R /CIDToGIDMap /Identity /DW {default_width}{w_part} >> endobj\n"
    )
    type0 = (
        f"{type0_id} 0 obj << /Type /Font /Subtype /Type0 /BaseFont {ttf.pdf_name}-Identity-H "
        f"/Encoding /Identity-H /DescendantFonts [{cid_id} 0 R] >> endobj\n"
    )
    objs = [font_file + b"\nendstream endobj\n"] + [part.encode("ascii") for part in (descriptor, cid_font, type0)]
    return objs, type0_id, type0_id + 1
