"""
Line chart element.

A chart is described by an immutable ``ChartConfig`` assembled with ``with_*`` calls and is
validated once, when the ``ChartElement`` is built. Rendering is a single pass:

1. axis markers reserve room at the bottom (x) and on the left (y) of the region,
2. markers, background, grid, fill band and reference lines are drawn in the plot area,
3. series are drawn as clipped polylines with optional image markers on their points,
4. legends and finally the border go on top.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, ClassVar, Iterable, Sequence, Union

from pdf_layout.core.calculations.chart_layout import (
    AxisLimits,
    default_x_label,
    default_y_label,
    infer_x_limits,
    infer_y_limits,
    interior_fractions,
    nudged,
    sample_fraction,
    value_fraction,
    window_series,
)
from pdf_layout.core.models.box import NormalizedBox
from pdf_layout.core.models.styles import GREY, Color, FontFamily, LineStyle, TextStyle
from pdf_layout.core.surface import DrawingHandle
from pdf_layout.core.validation import (
    RangeError,
    ValidationError,
    require_between,
    require_non_negative,
    require_positive,
)
from pdf_layout.elements.base import BASELINE_RATIO, Element
from pdf_layout.elements.image import ImageSource

logger = logging.getLogger(__name__)

MARKER_PADDING = 0.025
POINT_MARKER_GAP = 0.025
MARKER_GRID_STYLE = LineStyle(color=GREY, thickness=0.5)


def _marker_style() -> TextStyle:
    return TextStyle(family=FontFamily.HELVETICA, size=8)


@dataclass(frozen=True)
class PointMarker:
    index: int
    image: ImageSource


@dataclass(frozen=True)
class Series:
    values: tuple[float, ...]
    style: LineStyle = field(default_factory=LineStyle)
    markers: tuple[PointMarker, ...] = ()


@dataclass(frozen=True)
class Legend:
    text: str
    x: float
    y: float
    style: TextStyle = field(default_factory=TextStyle)


@dataclass(frozen=True)
class ReferenceLine:
    value: float
    style: LineStyle
    label: str = ""


@dataclass(frozen=True)
class FillBand:
    low: float
    high: float
    color: Color


@dataclass(frozen=True)
class EvenGrid:
    style: LineStyle
    vertical: int
    horizontal: int


@dataclass(frozen=True)
class SquareGrid:
    style: LineStyle
    vertical: int


@dataclass(frozen=True)
class MarkerGrid:
    style: LineStyle
    along_x: bool = True
    along_y: bool = True


Grid = Union[EvenGrid, SquareGrid, MarkerGrid]


@dataclass(frozen=True)
class ChartConfig:
    series: tuple[Series, ...] = ()
    markers_x: int = 0
    markers_y: int = 0
    format_x: Callable[[int], str] = default_x_label
    format_y: Callable[[float], str] = default_y_label
    marker_style: TextStyle = field(default_factory=_marker_style)
    grid: Grid | None = None
    background: Color | None = None
    border: LineStyle | None = None
    x_limits: tuple[float, float] | None = None
    y_limits: tuple[float, float] | None = None
    legends: tuple[Legend, ...] = ()
    horizontal_lines: tuple[ReferenceLine, ...] = ()
    vertical_lines: tuple[ReferenceLine, ...] = ()
    fill_band: FillBand | None = None

    def with_series(
        self,
        values: Iterable[float],
        style: LineStyle | None = None,
        markers: Iterable[PointMarker] = (),
    ) -> "ChartConfig":
        series = Series(tuple(float(v) for v in values), style or LineStyle(), tuple(markers))
        return replace(self, series=self.series + (series,))

    def with_axis_markers(
        self,
        x: int = 0,
        y: int = 0,
        format_x: Callable[[int], str] | None = None,
        format_y: Callable[[float], str] | None = None,
        style: TextStyle | None = None,
    ) -> "ChartConfig":
        return replace(
            self,
            markers_x=x,
            markers_y=y,
            format_x=format_x or self.format_x,
            format_y=format_y or self.format_y,
            marker_style=style or self.marker_style,
        )

    def with_grid(self, style: LineStyle, vertical: int, horizontal: int) -> "ChartConfig":
        return replace(self, grid=EvenGrid(style, vertical, horizontal))

    def with_square_grid(self, style: LineStyle, vertical: int) -> "ChartConfig":
        return replace(self, grid=SquareGrid(style, vertical))

    def with_marker_grid(
        self, style: LineStyle | None = None, along_x: bool = True, along_y: bool = True
    ) -> "ChartConfig":
        return replace(self, grid=MarkerGrid(style or MARKER_GRID_STYLE, along_x, along_y))

    def with_background(self, color: Color) -> "ChartConfig":
        return replace(self, background=color)

    def with_border(self, style: LineStyle) -> "ChartConfig":
        return replace(self, border=style)

    def with_x_limits(self, lower: float, upper: float) -> "ChartConfig":
        return replace(self, x_limits=(lower, upper))

    def with_y_limits(self, lower: float, upper: float) -> "ChartConfig":
        return replace(self, y_limits=(lower, upper))

    def with_legend(self, text: str, x: float, y: float, style: TextStyle | None = None) -> "ChartConfig":
        return replace(self, legends=self.legends + (Legend(text, x, y, style or TextStyle()),))

    def with_horizontal_line(self, value: float, style: LineStyle, label: str = "") -> "ChartConfig":
        return replace(self, horizontal_lines=self.horizontal_lines + (ReferenceLine(value, style, label),))

    def with_vertical_line(self, index: int, style: LineStyle, label: str = "") -> "ChartConfig":
        return replace(self, vertical_lines=self.vertical_lines + (ReferenceLine(index, style, label),))

    def with_fill_band(self, low: float, high: float, color: Color, opacity: float = 1.0) -> "ChartConfig":
        return replace(self, fill_band=FillBand(low, high, color.blend(opacity)))


def validate_config(config: ChartConfig) -> None:
    if not config.series:
        raise ValidationError("a chart needs at least one series")
    for number, series in enumerate(config.series):
        if len(series.values) < 2:
            raise ValidationError(f"series {number} needs at least two points, got {len(series.values)}")
        if not all(math.isfinite(v) for v in series.values):
            raise ValidationError(f"series {number} contains non-finite values")
        for marker in series.markers:
            if not 0 <= marker.index < len(series.values):
                raise RangeError(f"marker index {marker.index} is outside series {number}")
    require_non_negative(config.markers_x, "markers_x")
    require_non_negative(config.markers_y, "markers_y")

    if config.x_limits is not None:
        lower, upper = config.x_limits
        require_non_negative(lower, "x lower limit")
        if upper - lower < 2:
            raise RangeError(f"x limits must span at least two points, got {config.x_limits}")
    if config.y_limits is not None:
        lower, upper = config.y_limits
        if not upper > lower:
            raise RangeError(f"y upper limit must exceed the lower one, got {config.y_limits}")
    if config.fill_band is not None and not config.fill_band.high > config.fill_band.low:
        raise RangeError("fill band high bound must exceed the low bound")

    grid = config.grid
    if isinstance(grid, EvenGrid):
        require_non_negative(grid.vertical, "grid vertical lines")
        require_non_negative(grid.horizontal, "grid horizontal lines")
    elif isinstance(grid, SquareGrid):
        require_positive(grid.vertical, "square grid vertical lines")

    for legend in config.legends:
        require_between(legend.x, 0.0, 1.0, "legend x")
        require_between(legend.y, 0.0, 1.0, "legend y")


@dataclass(frozen=True)
class ChartElement(Element):
    kind: ClassVar[str] = "chart"

    config: ChartConfig
    x_limits: AxisLimits = field(init=False)
    y_limits: AxisLimits = field(init=False)
    series: tuple[tuple[float, ...], ...] = field(init=False)

    def __post_init__(self) -> None:
        validate_config(self.config)
        raw = [s.values for s in self.config.series]
        x_limits = AxisLimits(*self.config.x_limits) if self.config.x_limits else infer_x_limits(raw)
        y_limits = AxisLimits(*self.config.y_limits) if self.config.y_limits else infer_y_limits(raw)
        object.__setattr__(self, "x_limits", x_limits)
        object.__setattr__(self, "y_limits", y_limits)
        object.__setattr__(self, "series", tuple(window_series(v, x_limits, y_limits) for v in raw))

    @property
    def first_index(self) -> int:
        return int(self.x_limits.lower)

    @property
    def num_points(self) -> int:
        return int(self.x_limits.upper) - int(self.x_limits.lower)

    def index_at(self, fraction: float) -> int:
        return self.first_index + int(round(fraction * (self.num_points - 1)))

    def render(self, handle: DrawingHandle) -> None:
        cfg = self.config
        limits = nudged(self.y_limits)

        handle.set_text_style(cfg.marker_style)
        x_labels = [(f, cfg.format_x(self.index_at(f))) for f in interior_fractions(cfg.markers_x)]
        y_labels = [(f, cfg.format_y(f * limits.span + limits.lower)) for f in interior_fractions(cfg.markers_y)]
        horizontal_lines = [line for line in cfg.horizontal_lines if self._horizontal_visible(line)]
        vertical_lines = [line for line in cfg.vertical_lines if self._vertical_visible(line)]

        reserved_height = max(
            [handle.measure_text_height(label) + MARKER_PADDING for _, label in x_labels]
            + [handle.measure_text_height(line.label) + MARKER_PADDING for line in vertical_lines if line.label],
            default=0.0,
        )
        reserved_width = max(
            [handle.measure_text_width(label) + MARKER_PADDING for _, label in y_labels]
            + [handle.measure_text_width(line.label) + MARKER_PADDING for line in horizontal_lines if line.label],
            default=0.0,
        )
        if reserved_height >= 1 or reserved_width >= 1:
            raise ValidationError("axis markers leave no room for the plot area")
        plot = NormalizedBox(reserved_width, 0.0, 1.0, 1.0 - reserved_height)
        logger.debug(f"Chart plot area {plot} for {len(self.series)} series")

        x_centers = self._draw_x_markers(handle, plot, x_labels)
        y_centers = self._draw_y_markers(handle, plot, y_labels)

        if cfg.background is not None:
            handle.set_color(cfg.background)
            handle.draw_rect(plot)
        if cfg.grid is not None:
            self._draw_grid(handle, plot, x_centers, y_centers)
        self._draw_fill_band(handle, plot, limits)
        for line in horizontal_lines:
            self._draw_horizontal_line(handle, plot, limits, line)
        for line in vertical_lines:
            self._draw_vertical_line(handle, plot, line)

        for series, values in zip(cfg.series, self.series):
            self._draw_series(handle, plot, limits, series, values)

        for legend in cfg.legends:
            self._draw_legend(handle, legend)

        if cfg.border is not None:
            handle.set_color(cfg.border.color)
            handle.draw_rect_outline(plot, cfg.border.thickness, cfg.border.units_on)

    def _horizontal_visible(self, line: ReferenceLine) -> bool:
        if self.y_limits.contains(line.value):
            return True
        logger.debug(f"Skipping horizontal line at {line.value} outside {self.y_limits}")
        return False

    def _vertical_visible(self, line: ReferenceLine) -> bool:
        if 0 <= line.value - self.first_index < self.num_points:
            return True
        logger.debug(f"Skipping vertical line at index {line.value} outside the x window")
        return False

    def _draw_x_markers(
        self, handle: DrawingHandle, plot: NormalizedBox, labels: Sequence[tuple[float, str]]
    ) -> list[float]:
        centers = []
        for fraction, label in labels:
            width = handle.measure_text_width(label)
            center = plot.left + fraction * plot.width
            handle.write_text(label, _clamp(center - width / 2, 0.0, 1.0 - width), 1.0 - MARKER_PADDING / 2)
            centers.append(center)
        return centers

    def _draw_y_markers(
        self, handle: DrawingHandle, plot: NormalizedBox, labels: Sequence[tuple[float, str]]
    ) -> list[float]:
        centers = []
        for fraction, label in labels:
            height = handle.measure_text_height(label)
            center = plot.top + (1.0 - fraction) * plot.height
            handle.write_text(label, MARKER_PADDING / 2, _clamp(center + height * (BASELINE_RATIO - 0.5), 0.0, 1.0))
            centers.append(center)
        return centers

    def _draw_grid(
        self, handle: DrawingHandle, plot: NormalizedBox, x_centers: Sequence[float], y_centers: Sequence[float]
    ) -> None:
        grid = self.config.grid
        style = grid.style
        handle.set_color(style.color)
        xs: list[float] = []
        ys: list[float] = []
        if isinstance(grid, EvenGrid):
            xs = [plot.left + f * plot.width for f in interior_fractions(grid.vertical)]
            ys = [plot.top + f * plot.height for f in interior_fractions(grid.horizontal)]
        elif isinstance(grid, SquareGrid):
            inc_x = 1.0 / (grid.vertical + 1)
            inc_y = inc_x * plot.ratio * handle.canvas_ratio()
            xs = [plot.left + step * plot.width for step in _steps(inc_x)]
            ys = [plot.to_y - step * plot.height for step in _steps(inc_y)]
        elif isinstance(grid, MarkerGrid):
            xs = list(x_centers) if grid.along_x else []
            ys = list(y_centers) if grid.along_y else []

        for x in xs:
            handle.draw_line(_line(x, plot.top, x, plot.to_y), style.thickness, style.units_on)
        for y in ys:
            handle.draw_line(_line(plot.left, y, plot.to_x, y), style.thickness, style.units_on)

    def _draw_fill_band(self, handle: DrawingHandle, plot: NormalizedBox, limits: AxisLimits) -> None:
        band = self.config.fill_band
        if band is None:
            return
        if not (self.y_limits.contains(band.low) and self.y_limits.contains(band.high)):
            logger.debug(f"Skipping fill band {band.low}..{band.high} outside {self.y_limits}")
            return
        top = plot.top + value_fraction(band.high, limits) * plot.height
        bottom = plot.top + value_fraction(band.low, limits) * plot.height
        handle.set_color(band.color)
        handle.draw_rect(_line(plot.left, top, plot.to_x, bottom))

    def _draw_horizontal_line(
        self, handle: DrawingHandle, plot: NormalizedBox, limits: AxisLimits, line: ReferenceLine
    ) -> None:
        y = plot.top + value_fraction(line.value, limits) * plot.height
        handle.set_color(line.style.color)
        handle.draw_line(_line(plot.left, y, plot.to_x, y), line.style.thickness, line.style.units_on)
        if line.label:
            handle.set_text_style(self.config.marker_style)
            height = handle.measure_text_height(line.label)
            baseline = y - height / 2 + height * BASELINE_RATIO
            handle.write_text(line.label, MARKER_PADDING / 2, _clamp(baseline, 0.0, 1.0))

    def _draw_vertical_line(self, handle: DrawingHandle, plot: NormalizedBox, line: ReferenceLine) -> None:
        x = plot.left + sample_fraction(line.value - self.first_index, self.num_points) * plot.width
        handle.set_color(line.style.color)
        handle.draw_line(_line(x, plot.top, x, plot.to_y), line.style.thickness, line.style.units_on)
        if line.label:
            handle.set_text_style(self.config.marker_style)
            width = handle.measure_text_width(line.label)
            handle.write_text(line.label, _clamp(x - width / 2, 0.0, 1.0 - width), 1.0 - MARKER_PADDING / 2)

    def _draw_series(
        self,
        handle: DrawingHandle,
        plot: NormalizedBox,
        limits: AxisLimits,
        series: Series,
        values: Sequence[float],
    ) -> None:
        points = [
            (
                plot.left + sample_fraction(i, self.num_points) * plot.width,
                plot.top + value_fraction(v, limits) * plot.height,
            )
            for i, v in enumerate(values)
        ]
        handle.set_color(series.style.color)
        for (x1, y1), (x2, y2) in zip(points, points[1:]):
            handle.draw_line(_line(x1, y1, x2, y2), series.style.thickness, series.style.units_on)

        for marker in series.markers:
            position = marker.index - self.first_index
            if 0 <= position < len(points):
                self._draw_point_marker(handle, marker, *points[position])

    def _draw_point_marker(self, handle: DrawingHandle, marker: PointMarker, x: float, y: float) -> None:
        height = min(handle.measure_image_height(marker.image), 1.0)
        width = height * handle.image_aspect_ratio(marker.image) / handle.canvas_ratio()
        top = y - height - POINT_MARKER_GAP
        if top < 0:
            top = y + POINT_MARKER_GAP
        top = _clamp(top, 0.0, 1.0)
        box = _line(x - width / 2, top, x + width / 2, top + height)
        handle.draw_image(marker.image, box)

    def _draw_legend(self, handle: DrawingHandle, legend: Legend) -> None:
        try:
            handle.set_text_style(legend.style)
            height = handle.measure_text_height(legend.text)
            handle.write_text(legend.text, legend.x, legend.y + height * BASELINE_RATIO)
        except ValidationError as exc:
            logger.debug(f"Skipping legend {legend.text!r}: {exc}")


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), max(low, high))


def _line(x1: float, y1: float, x2: float, y2: float) -> NormalizedBox:
    return NormalizedBox(_clamp(x1, 0.0, 1.0), _clamp(y1, 0.0, 1.0), _clamp(x2, 0.0, 1.0), _clamp(y2, 0.0, 1.0))


def _steps(increment: float) -> list[float]:
    steps = []
    step = increment
    while step < 1.0 - 1e-9:
        steps.append(step)
        step += increment
    return steps
