from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pdf_layout.core.validation import RangeError, require_between, require_positive


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not isinstance(value, int):
                raise RangeError(f"color channel {name} must be an int, got {value!r}")
            require_between(value, 0, 255, f"color channel {name}")

    def blend(self, alpha: float, background: "Color | None" = None) -> "Color":
        """Mix this color over ``background`` (white by default) with the given opacity."""
        require_between(alpha, 0.0, 1.0, "alpha")
        base = background or WHITE
        return Color(
            int(round(self.r * alpha + base.r * (1 - alpha))),
            int(round(self.g * alpha + base.g * (1 - alpha))),
            int(round(self.b * alpha + base.b * (1 - alpha))),
        )

    def to_pdf(self) -> str:
        return " ".join(_component(v) for v in (self.r, self.g, self.b))


def _component(value: int) -> str:
    text = f"{value / 255:.3f}".rstrip("0").rstrip(".")
    return text or "0"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
RED = Color(244, 67, 54)
GREEN = Color(76, 175, 80)
ORANGE = Color(255, 152, 0)
BLUE = Color(33, 150, 243)
GREY = Color(158, 158, 158)
DARK_GREY = Color(66, 66, 66)


class FontFamily(str, Enum):
    ARIAL = "arial"
    HELVETICA = "helvetica"
    TIMES = "times"
    VERDANA = "verdana"


class FontStyle(str, Enum):
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKEOUT = "strikeout"


REGULAR: frozenset[FontStyle] = frozenset()


@dataclass(frozen=True)
class LineStyle:
    color: Color = BLACK
    thickness: float = 1.0
    units_on: float = 1.0

    def __post_init__(self) -> None:
        require_positive(self.thickness, "thickness")
        require_between(self.units_on, 0.0, 1.0, "units_on")

    @classmethod
    def dashed(cls, color: Color = BLACK, thickness: float = 0.5, units_on: float = 0.25) -> "LineStyle":
        return cls(color=color, thickness=thickness, units_on=units_on)


@dataclass(frozen=True)
class TextStyle:
    family: FontFamily = FontFamily.HELVETICA
    styles: frozenset[FontStyle] = field(default_factory=frozenset)
    size: float = 12.0
    color: Color = BLACK

    def __post_init__(self) -> None:
        require_positive(self.size, "font size")
        if not isinstance(self.styles, frozenset):
            object.__setattr__(self, "styles", frozenset(self.styles))

    @classmethod
    def of(cls, family: FontFamily, size: float, *styles: FontStyle, color: Color = BLACK) -> "TextStyle":
        return cls(family=family, styles=frozenset(styles), size=size, color=color)
