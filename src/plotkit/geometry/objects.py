"""Styled drawable objects.

A :class:`PlotObject` pairs one geometric shape with the style it is drawn
with and a tuple of free-form annotations carried along for diagnostics
(flattened GeoJSON properties, the index of the 3D face a segment came
from, and so on).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import TypeAlias

from plotkit.geometry.primitives import (
    Frame,
    MultiPolygon2,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
)

Shape: TypeAlias = Point2 | Segment2 | Polyline2 | Polygon2 | MultiPolygon2

Annotations: TypeAlias = tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class Style:
    """How an object is drawn.

    Attributes:
        color: Stroke color, any SVG color string.
        layer: Layer the object is bucketed into. Defaults to the color.
        thickness: Stroke width in output units.
    """

    color: str = "black"
    layer: str = ""
    thickness: float = 1.0

    def __post_init__(self) -> None:
        if not self.layer:
            object.__setattr__(self, "layer", self.color)
        if self.thickness <= 0:
            raise ValueError(f"thickness must be positive, got {self.thickness}")


@dataclass(frozen=True)
class PlotObject:
    """A shape with its style and annotations."""

    shape: Shape
    style: Style = field(default_factory=Style)
    annotations: Annotations = ()

    def with_shape(self, shape: Shape) -> PlotObject:
        """Return a copy carrying a different shape."""
        return replace(self, shape=shape)

    def with_style(self, style: Style) -> PlotObject:
        """Return a copy carrying a different style."""
        return replace(self, style=style)

    def annotation(self, key: str) -> str | None:
        """Look up the first annotation with the given key."""
        for k, v in self.annotations:
            if k == key:
                return v
        return None


def vertices(shape: Shape) -> Iterator[Point2]:
    """Yield every vertex of a shape."""
    match shape:
        case Point2():
            yield shape
        case Segment2(start=start, end=end):
            yield start
            yield end
        case Polyline2(points=points) | Polygon2(points=points):
            yield from points
        case MultiPolygon2(polygons=polygons):
            for ring in polygons:
                yield from ring.points
        case _:
            raise TypeError(f"Not a shape: {type(shape).__name__}")


def bounding_box(items: Shape | PlotObject | Iterable[Shape | PlotObject]) -> Frame:
    """Smallest axis-aligned frame containing the given shapes or objects.

    Args:
        items: A single shape, a single object, or any iterable of either.

    Returns:
        The bounding Frame (possibly of zero width or height).

    Raises:
        ValueError: If the input contains no vertices.
    """
    if isinstance(items, PlotObject):
        return Frame.from_points(vertices(items.shape))
    if isinstance(items, Point2 | Segment2 | Polyline2 | Polygon2 | MultiPolygon2):
        return Frame.from_points(vertices(items))

    def _all_points() -> Iterator[Point2]:
        for item in items:
            shape = item.shape if isinstance(item, PlotObject) else item
            yield from vertices(shape)

    return Frame.from_points(_all_points())
