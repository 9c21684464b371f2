"""Geometry primitives for plotkit.

This module provides the immutable 2D value types that flow through the
pipeline: points, segments, polylines, polygons, multi-polygons and the
rectangular Frame describing a physical canvas.

Conventions:
    - Coordinates are plain floats in whatever unit the current stage uses
      (input units during ingestion, output units after fitting).
    - Polygons are stored without a repeated closing vertex.
    - Multi-polygons use the even-odd fill convention: a point is inside
      when it lies inside an odd number of member rings. GeoJSON holes are
      therefore just additional rings.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Self

from pydantic import BaseModel, Field

from plotkit.exceptions import InvalidGeometry


@dataclass(frozen=True, slots=True)
class Point2:
    """An (x, y) position.

    Equality is exact; use the predicates in ``plotkit.geometry.predicates``
    for tolerant comparisons.
    """

    x: float
    y: float

    def __add__(self, other: Point2) -> Point2:
        return Point2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point2) -> Point2:
        return Point2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point2:
        return Point2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> Point2:
        return Point2(-self.x, -self.y)

    def dot(self, other: Point2) -> float:
        """Dot product, treating both points as vectors."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Point2) -> float:
        """Z component of the 3D cross product of the two vectors."""
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        """Length of the vector from the origin to this point."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Point2) -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, coord: tuple[float, float]) -> Self:
        """Create Point2 from (x, y) tuple."""
        return cls(float(coord[0]), float(coord[1]))


@dataclass(frozen=True, slots=True)
class Segment2:
    """A line segment between two points.

    The segment is directional when emitted as a path (start to end) but
    directionless for set comparisons, see :meth:`same_as`.
    """

    start: Point2
    end: Point2

    @property
    def vector(self) -> Point2:
        """Direction vector from start to end."""
        return self.end - self.start

    @property
    def length(self) -> float:
        """Euclidean length of the segment."""
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> Point2:
        """Point halfway between start and end."""
        return Point2((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    def point_at(self, t: float) -> Point2:
        """Return the point at parameter ``t`` (0 = start, 1 = end)."""
        return Point2(
            self.start.x + (self.end.x - self.start.x) * t,
            self.start.y + (self.end.y - self.start.y) * t,
        )

    def reversed(self) -> Segment2:
        """Return the same segment traversed end to start."""
        return Segment2(self.end, self.start)

    def same_as(self, other: Segment2) -> bool:
        """Compare two segments ignoring direction."""
        return (self.start == other.start and self.end == other.end) or (
            self.start == other.end and self.end == other.start
        )

    def points(self) -> tuple[Point2, Point2]:
        return (self.start, self.end)


def _drop_consecutive_duplicates(points: Iterable[Point2]) -> list[Point2]:
    result: list[Point2] = []
    for point in points:
        if not result or result[-1] != point:
            result.append(point)
    return result


@dataclass(frozen=True, slots=True)
class Polyline2:
    """An open path through two or more points.

    Raises:
        InvalidGeometry: If fewer than 2 distinct points are given.
    """

    points: tuple[Point2, ...]

    def __post_init__(self) -> None:
        points = tuple(_drop_consecutive_duplicates(self.points))
        if len(points) < 2:
            raise InvalidGeometry(
                f"Polyline needs at least 2 distinct points, got {len(points)}"
            )
        object.__setattr__(self, "points", points)

    @classmethod
    def from_coords(cls, coords: Iterable[tuple[float, float]]) -> Self:
        """Create a Polyline2 from (x, y) tuples."""
        return cls(tuple(Point2.from_tuple(c) for c in coords))

    def segments(self) -> Iterator[Segment2]:
        """Yield consecutive segments along the path."""
        for a, b in zip(self.points, self.points[1:]):
            yield Segment2(a, b)

    @property
    def length(self) -> float:
        return sum(s.length for s in self.segments())


@dataclass(frozen=True, slots=True)
class Polygon2:
    """A closed ring of points.

    The closing vertex is implicit: a trailing point equal to the first one
    is dropped on construction, as are exact consecutive duplicates.
    Self-intersection is not checked here (it is O(n^2)); see
    :func:`plotkit.geometry.validators.validate_polygon`.

    Raises:
        InvalidGeometry: If the ring has fewer than 3 distinct vertices.
    """

    points: tuple[Point2, ...]

    def __post_init__(self) -> None:
        points = _drop_consecutive_duplicates(self.points)
        while len(points) > 1 and points[0] == points[-1]:
            points.pop()
        if len(set(points)) < 3:
            raise InvalidGeometry(
                f"Polygon needs at least 3 distinct vertices, got {len(set(points))}"
            )
        object.__setattr__(self, "points", tuple(points))

    @classmethod
    def from_coords(cls, coords: Iterable[tuple[float, float]]) -> Self:
        """Create a Polygon2 from (x, y) tuples (closed or open ring)."""
        return cls(tuple(Point2.from_tuple(c) for c in coords))

    def __len__(self) -> int:
        return len(self.points)

    def segments(self) -> Iterator[Segment2]:
        """Yield the edges of the ring, including the closing edge."""
        n = len(self.points)
        for i in range(n):
            yield Segment2(self.points[i], self.points[(i + 1) % n])

    @property
    def signed_area(self) -> float:
        """Shoelace area: positive for counter-clockwise rings."""
        total = 0.0
        n = len(self.points)
        for i in range(n):
            a = self.points[i]
            b = self.points[(i + 1) % n]
            total += a.x * b.y - b.x * a.y
        return total / 2

    @property
    def area(self) -> float:
        return abs(self.signed_area)

    @property
    def is_ccw(self) -> bool:
        """True when the ring winds counter-clockwise (y up)."""
        return self.signed_area > 0

    @property
    def perimeter(self) -> float:
        return sum(s.length for s in self.segments())

    def reversed(self) -> Polygon2:
        """Return the ring traversed in the opposite direction."""
        return Polygon2(tuple(reversed(self.points)))

    def oriented_ccw(self) -> Polygon2:
        """Return this ring with counter-clockwise winding."""
        return self if self.is_ccw else self.reversed()

    def rotated_to(self, index: int) -> Polygon2:
        """Return the same ring starting at vertex ``index``."""
        return Polygon2(self.points[index:] + self.points[:index])

    def canonical(self) -> Polygon2:
        """Counter-clockwise ring starting at its lexicographically smallest vertex."""
        ring = self.oriented_ccw()
        start = min(range(len(ring.points)), key=lambda i: ring.points[i].to_tuple())
        return ring.rotated_to(start)

    def equivalent(self, other: Polygon2) -> bool:
        """Compare two rings up to starting vertex and traversal direction."""
        if len(self.points) != len(other.points):
            return False
        return self.canonical().points == other.canonical().points


@dataclass(frozen=True, slots=True)
class MultiPolygon2:
    """A set of rings under the even-odd fill convention.

    Raises:
        InvalidGeometry: If no rings are given.
    """

    polygons: tuple[Polygon2, ...]

    def __post_init__(self) -> None:
        if not self.polygons:
            raise InvalidGeometry("MultiPolygon needs at least one ring")
        object.__setattr__(self, "polygons", tuple(self.polygons))

    def __len__(self) -> int:
        return len(self.polygons)

    def __iter__(self) -> Iterator[Polygon2]:
        return iter(self.polygons)

    @property
    def area(self) -> float:
        """Area of the even-odd region, assuming rings do not cross.

        Rings nested at odd depth subtract, rings at even depth add. Ring
        nesting is decided by testing one vertex of each ring.
        """
        from plotkit.geometry.predicates import Location, polygon_contains_point

        total = 0.0
        for ring in self.polygons:
            depth = sum(
                1
                for other in self.polygons
                if other is not ring
                and polygon_contains_point(other, ring.points[0]) is Location.INSIDE
            )
            total += ring.area if depth % 2 == 0 else -ring.area
        return total

    def equivalent(self, other: MultiPolygon2) -> bool:
        """Compare ring sets up to ring order, start vertex and direction."""
        if len(self.polygons) != len(other.polygons):
            return False
        mine = sorted(p.canonical().points for p in self.polygons)
        theirs = sorted(p.canonical().points for p in other.polygons)
        return mine == theirs


class Frame(BaseModel, frozen=True):
    """An axis-aligned rectangle: a physical canvas or a bounding box.

    The frame is defined by its minimum corner (x, y) and its extent.
    Zero width or height is allowed so that bounding boxes of points and
    axis-parallel segments can be represented; operations that need a
    non-empty area check for it explicitly.

    Attributes:
        x: Minimum x coordinate.
        y: Minimum y coordinate.
        width: Horizontal extent (>= 0).
        height: Vertical extent (>= 0).
    """

    x: float = Field(default=0.0, description="Minimum x coordinate")
    y: float = Field(default=0.0, description="Minimum y coordinate")
    width: float = Field(..., ge=0, description="Horizontal extent")
    height: float = Field(..., ge=0, description="Vertical extent")

    @property
    def right(self) -> float:
        """Return the maximum x coordinate."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Return the maximum y coordinate."""
        return self.y + self.height

    @property
    def center(self) -> Point2:
        return Point2(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Return width/height aspect ratio.

        Raises:
            ZeroDivisionError: If the frame has zero height.
        """
        return self.width / self.height

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> Self:
        """Create Frame from corner coordinates.

        Raises:
            ValueError: If a max coordinate is smaller than its min.
        """
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)

    @classmethod
    def from_points(cls, points: Iterable[Point2]) -> Self:
        """Smallest frame containing every point.

        Raises:
            ValueError: If no points are given.
        """
        xs: list[float] = []
        ys: list[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        if not xs:
            raise ValueError("Cannot compute the bounds of zero points")
        return cls.from_bounds(min(xs), min(ys), max(xs), max(ys))

    def contains_point(self, point: Point2, eps: float = 0.0) -> bool:
        """Check if a point is inside this frame (inclusive of edges)."""
        return (
            self.x - eps <= point.x <= self.right + eps
            and self.y - eps <= point.y <= self.bottom + eps
        )

    def contains_frame(self, other: Frame, eps: float = 0.0) -> bool:
        """Check if another frame lies entirely inside this one."""
        return (
            other.x >= self.x - eps
            and other.y >= self.y - eps
            and other.right <= self.right + eps
            and other.bottom <= self.bottom + eps
        )

    def intersects(self, other: Frame, eps: float = 0.0) -> bool:
        """Check if this frame overlaps or touches another."""
        return not (
            other.x > self.right + eps
            or other.right < self.x - eps
            or other.y > self.bottom + eps
            or other.bottom < self.y - eps
        )

    def union(self, other: Frame) -> Frame:
        """Smallest frame containing both frames."""
        return Frame.from_bounds(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )

    def inset(self, margin: float) -> Frame:
        """Shrink the frame by a fraction of its size on every side.

        Args:
            margin: Fraction of the width (resp. height) removed from the
                left and right (resp. top and bottom) edges. Must be in
                [0, 0.5).

        Returns:
            The inner frame.

        Raises:
            ValueError: If margin is outside [0, 0.5).
        """
        if not 0 <= margin < 0.5:
            raise ValueError(f"margin must be in [0, 0.5), got {margin}")
        dx = self.width * margin
        dy = self.height * margin
        return Frame(
            x=self.x + dx,
            y=self.y + dy,
            width=self.width - 2 * dx,
            height=self.height - 2 * dy,
        )

    def corners(self) -> tuple[Point2, Point2, Point2, Point2]:
        """Corners in counter-clockwise order starting at (x, y)."""
        return (
            Point2(self.x, self.y),
            Point2(self.right, self.y),
            Point2(self.right, self.bottom),
            Point2(self.x, self.bottom),
        )

    def to_polygon(self) -> Polygon2:
        """The frame as a counter-clockwise polygon.

        Raises:
            InvalidGeometry: If the frame has zero area.
        """
        return Polygon2(self.corners())
