"""3D value types: points, planes, faces and solids."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from plotkit.exceptions import InvalidGeometry
from plotkit.geometry.objects import Style


@dataclass(frozen=True, slots=True)
class Point3:
    """An (x, y, z) position or direction."""

    x: float
    y: float
    z: float

    def __add__(self, other: Point3) -> Point3:
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point3) -> Point3:
        return Point3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> Point3:
        return Point3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def dot(self, other: Point3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Point3) -> Point3:
        return Point3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def norm(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> Point3:
        """Unit vector in the same direction.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.norm()
        if length == 0:
            raise ValueError("Cannot normalize a zero vector")
        return self * (1.0 / length)

    def lerp(self, other: Point3, t: float) -> Point3:
        """Linear interpolation: ``self`` at t=0, ``other`` at t=1."""
        return self + (other - self) * t

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, coord: tuple[float, float, float]) -> Point3:
        return cls(float(coord[0]), float(coord[1]), float(coord[2]))


@dataclass(frozen=True, slots=True)
class Plane:
    """The plane ``normal . p == offset``; the positive side is kept by clipping."""

    normal: Point3
    offset: float

    def signed_distance(self, point: Point3) -> float:
        return self.normal.dot(point) - self.offset

    def clip(self, points: tuple[Point3, ...]) -> tuple[Point3, ...]:
        """Sutherland-Hodgman: keep the part of a closed polygon on the positive side."""
        if not points:
            return ()
        result: list[Point3] = []
        n = len(points)
        for i in range(n):
            current = points[i]
            following = points[(i + 1) % n]
            d_current = self.signed_distance(current)
            d_following = self.signed_distance(following)
            if d_current >= 0:
                result.append(current)
            if (d_current >= 0) != (d_following >= 0):
                t = d_current / (d_current - d_following)
                result.append(current.lerp(following, t))
        return tuple(result)


@dataclass(frozen=True)
class Face:
    """A planar polygon in 3D with the style its edges are drawn with.

    Raises:
        InvalidGeometry: If fewer than 3 distinct points are given.
    """

    points: tuple[Point3, ...]
    style: Style = field(default_factory=Style)

    def __post_init__(self) -> None:
        points = tuple(self.points)
        while len(points) > 1 and points[0] == points[-1]:
            points = points[:-1]
        if len(set(points)) < 3:
            raise InvalidGeometry(f"Face needs at least 3 distinct points, got {len(set(points))}")
        object.__setattr__(self, "points", points)

    def edges(self) -> Iterator[tuple[Point3, Point3]]:
        n = len(self.points)
        for i in range(n):
            yield self.points[i], self.points[(i + 1) % n]

    @property
    def centroid(self) -> Point3:
        n = len(self.points)
        return Point3(
            sum(p.x for p in self.points) / n,
            sum(p.y for p in self.points) / n,
            sum(p.z for p in self.points) / n,
        )


@dataclass(frozen=True)
class Solid:
    """A collection of faces treated as one body."""

    faces: tuple[Face, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "faces", tuple(self.faces))

    def __iter__(self) -> Iterator[Face]:
        return iter(self.faces)

    def __len__(self) -> int:
        return len(self.faces)


def _planar_face(origin: Point3, d1: Point3, d2: Point3, style: Style) -> Face:
    return Face((origin, origin + d1, origin + d1 + d2, origin + d2), style)


def cuboid(
    origin: Point3,
    size: tuple[float, float, float],
    style: Style | None = None,
) -> Solid:
    """Axis-aligned box with one corner at ``origin``.

    Args:
        origin: Minimum corner.
        size: Extent along x, y and z; all must be positive.
        style: Style applied to every face.

    Returns:
        A Solid with six faces.
    """
    dx, dy, dz = size
    if dx <= 0 or dy <= 0 or dz <= 0:
        raise InvalidGeometry(f"Cuboid size must be positive, got {size}")
    style = style or Style()
    ux = Point3(dx, 0.0, 0.0)
    uy = Point3(0.0, dy, 0.0)
    uz = Point3(0.0, 0.0, dz)
    return Solid(
        (
            _planar_face(origin, ux, uy, style),
            _planar_face(origin, ux, uz, style),
            _planar_face(origin, uy, uz, style),
            _planar_face(origin + ux, uy, uz, style),
            _planar_face(origin + uy, ux, uz, style),
            _planar_face(origin + uz, ux, uy, style),
        )
    )


def faces_of(solids: Iterable[Solid | Face]) -> list[Face]:
    """Flatten solids (and loose faces) into one face list, keeping order."""
    faces: list[Face] = []
    for item in solids:
        if isinstance(item, Face):
            faces.append(item)
        else:
            faces.extend(item.faces)
    return faces
