"""
Validation errors and small argument checks shared by value objects and elements.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

T = TypeVar("T")

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"})


class ValidationError(ValueError):
    """Raised when a value object or a render step receives impossible input."""


class RangeError(ValidationError):
    """Raised when a number falls outside its allowed interval."""


def require_between(value: float, low: float, high: float, name: str) -> float:
    if not (low <= value <= high):
        raise RangeError(f"{name} must be between {low} and {high}, got {value}")
    return value


def require_positive(value: float, name: str) -> float:
    if not value > 0:
        raise RangeError(f"{name} must be positive, got {value}")
    return value


def require_non_negative(value: float, name: str) -> float:
    if value < 0:
        raise RangeError(f"{name} must not be negative, got {value}")
    return value


def require_not_none(value: T | None, name: str) -> T:
    if value is None:
        raise ValidationError(f"{name} is required")
    return value


def require_image_file(path: Any, name: str = "image") -> Path:
    target = Path(path)
    if not target.is_file():
        raise ValidationError(f"{name} file does not exist: {target}")
    if target.suffix.lower() not in IMAGE_EXTENSIONS:
        raise ValidationError(f"{name} file is not a supported image: {target.name}")
    return target
