from __future__ import annotations

import unicodedata

from pdf_layout.core.models.styles import Color
from pdf_layout.utils.pdf.core.fonts import FontResource


def _normalize_ascii(text: str) -> str:
    """Remove diacritics to stay compatible with built-in PDF Type1 fonts."""
    normalized = unicodedata.normalize("NFKD", str(text))
    return normalized.encode("ascii", "ignore").decode("ascii")


def _escape_pdf_text(text: str) -> str:
    ascii_text = _normalize_ascii(text)
    return ascii_text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _draw_text(text: str, x: float, y: float, font: FontResource, size: float) -> str:
    if font.ttf is not None:
        operand = f"<{font.ttf.encode_text_hex(text)}>"
    else:
        operand = f"({_escape_pdf_text(text)})"
    return f"BT {font.name} {_fmt(size)} Tf {_fmt(x)} {_fmt(y)} Td {operand} Tj ET\n"


def _draw_rect(x: float, y: float, w: float, h: float, stroke: bool = True, fill: bool = False) -> str:
    if fill and stroke:
        op = "B"
    elif fill:
        op = "f"
    else:
        op = "S"
    return f"{_fmt(x)} {_fmt(y)} {_fmt(w)} {_fmt(h)} re {op}\n"


def _draw_line(x1: float, y1: float, x2: float, y2: float) -> str:
    return f"{_fmt(x1)} {_fmt(y1)} m {_fmt(x2)} {_fmt(y2)} l S\n"


def _stroke_state(color: Color, thickness: float, dash: tuple[float, float] | None) -> str:
    """Open a graphics state for one stroke; close it with ``Q``."""
    dash_op = "[] 0 d"
    if dash is not None:
        # dash lengths are given in stroke widths, PDF expects user space units
        dash_op = f"[{_fmt(dash[0] * thickness)} {_fmt(dash[1] * thickness)}] 0 d"
    return f"q {color.to_pdf()} RG {_fmt(thickness)} w {dash_op}\n"


def _fill_state(color: Color) -> str:
    return f"q {color.to_pdf()} rg\n"


def _draw_image(name: str, x: float, y: float, w: float, h: float) -> str:
    return f"q {_fmt(w)} 0 0 {_fmt(h)} {_fmt(x)} {_fmt(y)} cm {name} Do Q\n"
