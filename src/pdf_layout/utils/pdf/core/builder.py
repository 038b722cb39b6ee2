"""
PDF object builder: assembles page content streams, fonts and images into PDF bytes.
"""

from __future__ import annotations

from typing import List, Sequence

from pdf_layout.utils.pdf.core.fonts import FontResource, font_objects
from pdf_layout.utils.pdf.core.images import ImageResource, image_object
from pdf_layout.utils.pdf.core.layout_common import PAGE_H, PAGE_W


def build_pdf_bytes(
    content_streams: List[str],
    page_size=(PAGE_W, PAGE_H),
    fonts: Sequence[FontResource] = (),
    images: Sequence[ImageResource] = (),
) -> bytes:
    """
    Given list of page content streams (str), return ready-to-write PDF bytes.
    Every page shares one resource dictionary with all fonts and images.
    """
    streams_bytes = [s.encode("ascii", "ignore") for s in content_streams]

    next_obj_id = 3
    resource_objs: list[bytes] = []
    font_refs: list[str] = []
    for font in fonts:
        objs, font_id, next_obj_id = font_objects(font, next_obj_id)
        resource_objs.extend(objs)
        font_refs.append(f"{font.name} {font_id} 0 R")
    image_refs: list[str] = []
    for image in images:
        resource_objs.append(image_object(image, next_obj_id))
        image_refs.append(f"{image.name} {next_obj_id} 0 R")
        next_obj_id += 1

    resources = f"/Font << {' '.join(font_refs)} >>"
    if image_refs:
        resources += f" /XObject << {' '.join(image_refs)} >>"

    page_objs: list[bytes] = []
    pages_kids: list[int] = []
    width, height = page_size
    for stream in streams_bytes:
        content_id = next_obj_id
        page_id = next_obj_id + 1
        pages_kids.append(page_id)
        page_objs.append(
            f"{content_id} 0 obj << /Length {len(stream)} >> stream\n".encode("ascii") + stream + b"\nendstream endobj\n"
        )
        page_objs.append(
            f"{page_id} 0 obj << /Type /Page /Parent 2 0 R /MediaBox [0 0 {width} {height}] "
            f"/Contents {content_id} 0 R /Resources << {resources} >> >> endobj\n".encode("ascii")
        )
        next_obj_id += 2

    kids_ref = " ".join(f"{kid} 0 R" for kid in pages_kids)
    pages_obj = f"2 0 obj << /Type /Pages /Count {len(pages_kids)} /Kids [{kids_ref}] >> endobj\n".encode("ascii")
    catalog_obj = b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"

    objs = [catalog_obj, pages_obj] + resource_objs + page_objs

    header = b"%PDF-1.4\n"
    offsets = [0]
    pdf_body = bytearray()
    current_offset = len(header)
    for obj in objs:
        offsets.append(current_offset)
        pdf_body += obj
        current_offset += len(obj)

    xref_entries = ["0000000000 65535 f \n"] + [_format_xref_entry(off) for off in offsets[1:]]
    xref = ("xref\n0 %d\n" % len(offsets)).encode("ascii") + "".join(xref_entries).encode("ascii")
    startxref = len(header) + len(pdf_body)
    trailer = f"trailer << /Size {len(offsets)} /Root 1 0 R >>\nstartxref\n{startxref}\n%%EOF\n".encode("ascii")

    return header + bytes(pdf_body) + xref + trailer


def _format_xref_entry(offset: int) -> str:
    return f"{offset:010d} 00000 n \n"
