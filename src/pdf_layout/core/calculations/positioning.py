"""
Gravity and scale resolution for content placed inside a parent box.

All functions are pure: they take immutable boxes and return new ones.
"""

from __future__ import annotations

from typing import NamedTuple

from pdf_layout.core.models.box import FULL, NormalizedBox
from pdf_layout.core.models.flags import Gravity, GravitySet, ScaleStrategy
from pdf_layout.core.validation import require_positive


class Placement(NamedTuple):
    requested: NormalizedBox
    gravitated: NormalizedBox
    fitted: NormalizedBox


def gravity_offsets(box: NormalizedBox, gravity: GravitySet) -> tuple[float, float]:
    dx = 0.0
    dy = 0.0
    vertical = gravity.vertical()
    if vertical is Gravity.TOP:
        dy = -box.top
    elif vertical is Gravity.BOTTOM:
        dy = 1.0 - max(box.from_y, box.to_y)
    horizontal = gravity.horizontal()
    if horizontal is Gravity.LEFT:
        dx = -box.left
    elif horizontal is Gravity.RIGHT:
        dx = 1.0 - max(box.from_x, box.to_x)
    return dx, dy


def apply_gravity(box: NormalizedBox, gravity: GravitySet) -> NormalizedBox:
    if gravity.is_empty():
        return box
    dx, dy = gravity_offsets(box, gravity)
    return box.move(dx, dy)


def aspect_container(image_ratio: float, surface_ratio: float) -> NormalizedBox:
    """
    Unit-square box with the image's proportions expressed in the surface's normalized space.
    """
    require_positive(image_ratio, "image_ratio")
    require_positive(surface_ratio, "surface_ratio")
    ratios = surface_ratio / image_ratio
    if ratios < 1:
        container = NormalizedBox(0.0, 0.0, 1.0, ratios)
    else:
        container = NormalizedBox(0.0, 0.0, 1.0 / ratios, 1.0)
    return container.maximize_inside(FULL)


def fit_scale(
    strategy: ScaleStrategy,
    destination: NormalizedBox,
    image_ratio: float,
    surface_ratio: float,
) -> NormalizedBox:
    if strategy is ScaleStrategy.FILL:
        return destination

    container = aspect_container(image_ratio, surface_ratio)
    fitted = container.maximize_inside(destination)
    if strategy is ScaleStrategy.FIT_CENTER:
        return fitted

    # relatively wide images shrink vertically, relatively tall ones horizontally
    shrunk_vertically = surface_ratio / image_ratio < 1
    if strategy is ScaleStrategy.FIT_START:
        if shrunk_vertically:
            return fitted.move(0.0, destination.top - fitted.top)
        return fitted.move(destination.left - fitted.left, 0.0)
    if shrunk_vertically:
        return fitted.move(0.0, max(destination.from_y, destination.to_y) - (fitted.top + fitted.height))
    return fitted.move(max(destination.from_x, destination.to_x) - (fitted.left + fitted.width), 0.0)


def resolve_placement(
    box: NormalizedBox,
    gravity: GravitySet,
    strategy: ScaleStrategy,
    image_ratio: float,
    surface_ratio: float,
) -> Placement:
    gravitated = apply_gravity(box, gravity)
    fitted = fit_scale(strategy, gravitated, image_ratio, surface_ratio)
    return Placement(requested=box, gravitated=gravitated, fitted=fitted)
