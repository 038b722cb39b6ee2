from __future__ import annotations

import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from PIL import Image

from pdf_layout.utils.pdf.core.layout_common import DEFAULT_IMAGE_DPI

ImageSource = Union[str, Path, Image.Image]


@dataclass(frozen=True)
class ImageResource:
    """A decoded image ready to be embedded as an XObject, e.g. ``/Im1``."""

    name: str
    width: int
    height: int
    data: bytes  # Flate-compressed RGB samples


def open_image(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    with Image.open(source) as img:
        img.load()
        return img.copy()


def image_key(source: ImageSource) -> object:
    if isinstance(source, Image.Image):
        return id(source)
    return str(Path(source).resolve())


def aspect_ratio(image: Image.Image) -> float:
    width, height = image.size
    return width / height


def point_size(image: Image.Image) -> tuple[float, float]:
    """Natural size of the image in points, honoring its dpi when present."""
    dpi = image.info.get("dpi") or (DEFAULT_IMAGE_DPI, DEFAULT_IMAGE_DPI)
    dpi_x = float(dpi[0]) if dpi[0] and float(dpi[0]) > 0 else DEFAULT_IMAGE_DPI
    dpi_y = float(dpi[1]) if dpi[1] and float(dpi[1]) > 0 else DEFAULT_IMAGE_DPI
    width, height = image.size
    return width * 72.0 / dpi_x, height * 72.0 / dpi_y


def _flatten(image: Image.Image) -> Image.Image:
    has_alpha = image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
    if not has_alpha:
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.split()[3])
    return background


def encode_image(image: Image.Image, name: str) -> ImageResource:
    rgb = _flatten(image)
    return ImageResource(name=name, width=rgb.width, height=rgb.height, data=zlib.compress(rgb.tobytes()))


def image_object(image: ImageResource, obj_id: int) -> bytes:
    header = (
        f"{obj_id} 0 obj << /Type /XObject /Subtype /Image /Width {image.width} /Height {image.height} "
        f"/ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /FlateDecode /Length {len(image.data)} >> stream\n"
    )
    return header.encode("ascii") + image.data + b"\nendstream endobj\n"
