"""Affine transforms over shapes and plot objects.

An :class:`Affine` maps ``(x, y)`` to::

    x' = a*x + b*y + c
    y' = d*x + e*y + f

Transforms never mutate their input and never reorder vertices. A
reflection therefore flips the winding of every polygon it is applied to.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, overload

from plotkit.geometry.objects import PlotObject, Shape
from plotkit.geometry.primitives import (
    MultiPolygon2,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
)

_ORIGIN = Point2(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Affine:
    """Immutable 2x3 affine matrix."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    e: float = 1.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> Affine:
        return cls()

    @classmethod
    def translation(cls, dx: float, dy: float) -> Affine:
        return cls(c=dx, f=dy)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None, origin: Point2 = _ORIGIN) -> Affine:
        """Scale about ``origin``; ``sy`` defaults to ``sx`` (uniform)."""
        sy = sx if sy is None else sy
        return cls(
            a=sx,
            c=origin.x - sx * origin.x,
            e=sy,
            f=origin.y - sy * origin.y,
        )

    @classmethod
    def rotation(cls, degrees: float, origin: Point2 = _ORIGIN) -> Affine:
        """Counter-clockwise rotation (y up) about ``origin``."""
        rad = math.radians(degrees)
        cos = math.cos(rad)
        sin = math.sin(rad)
        return (
            cls.translation(-origin.x, -origin.y)
            .then(cls(a=cos, b=-sin, d=sin, e=cos))
            .then(cls.translation(origin.x, origin.y))
        )

    @classmethod
    def reflection(cls, axis: Literal["x", "y"], origin: Point2 = _ORIGIN) -> Affine:
        """Mirror across the horizontal (``"x"``) or vertical (``"y"``) line through origin."""
        if axis == "x":
            return cls.scaling(1.0, -1.0, origin)
        if axis == "y":
            return cls.scaling(-1.0, 1.0, origin)
        raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")

    def __matmul__(self, other: Affine) -> Affine:
        """Matrix product: ``(self @ other)`` applies ``other`` first."""
        return Affine(
            a=self.a * other.a + self.b * other.d,
            b=self.a * other.b + self.b * other.e,
            c=self.a * other.c + self.b * other.f + self.c,
            d=self.d * other.a + self.e * other.d,
            e=self.d * other.b + self.e * other.e,
            f=self.d * other.c + self.e * other.f + self.f,
        )

    def then(self, other: Affine) -> Affine:
        """Compose so that ``self`` is applied first, then ``other``."""
        return other @ self

    @property
    def determinant(self) -> float:
        return self.a * self.e - self.b * self.d

    def inverse(self) -> Affine:
        """Return the inverse transform.

        Raises:
            ValueError: If the matrix is singular.
        """
        det = self.determinant
        if det == 0:
            raise ValueError("Affine transform is singular")
        a = self.e / det
        b = -self.b / det
        d = -self.d / det
        e = self.a / det
        return Affine(
            a=a,
            b=b,
            c=-(a * self.c + b * self.f),
            d=d,
            e=e,
            f=-(d * self.c + e * self.f),
        )

    def apply(self, point: Point2) -> Point2:
        """Map a single point."""
        return Point2(
            self.a * point.x + self.b * point.y + self.c,
            self.d * point.x + self.e * point.y + self.f,
        )

    @property
    def uniform_scale(self) -> float:
        """Geometric-mean scale factor, used to scale stroke widths."""
        return math.sqrt(abs(self.determinant))


def transform_shape(shape: Shape, affine: Affine) -> Shape:
    """Apply an affine transform to every vertex of a shape."""
    match shape:
        case Point2():
            return affine.apply(shape)
        case Segment2(start=start, end=end):
            return Segment2(affine.apply(start), affine.apply(end))
        case Polyline2(points=points):
            return Polyline2(tuple(affine.apply(p) for p in points))
        case Polygon2(points=points):
            return Polygon2(tuple(affine.apply(p) for p in points))
        case MultiPolygon2(polygons=polygons):
            return MultiPolygon2(
                tuple(Polygon2(tuple(affine.apply(p) for p in ring.points)) for ring in polygons)
            )
        case _:
            raise TypeError(f"Not a shape: {type(shape).__name__}")


@overload
def transform(item: PlotObject, affine: Affine) -> PlotObject: ...


@overload
def transform(item: Shape, affine: Affine) -> Shape: ...


def transform(item: Shape | PlotObject, affine: Affine) -> Shape | PlotObject:
    """Return a transformed copy of a shape or object.

    Objects keep their style and annotations; only the geometry changes.
    """
    if isinstance(item, PlotObject):
        return item.with_shape(transform_shape(item.shape, affine))
    return transform_shape(item, affine)
