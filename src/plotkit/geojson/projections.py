"""Coordinate projections from GeoJSON positions to planar points.

GeoJSON positions are ``[longitude, latitude, ...]``. The projection only
has to produce a plane in which shapes keep their relative placement; the
canvas fitting stage scales the result to the physical page afterwards.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Protocol

from plotkit.geometry.primitives import Point2

ProjectionName = Literal["linear", "mercator"]


class CoordinateProjection(Protocol):
    """Maps a (longitude, latitude) pair to a planar point."""

    def project(self, lon: float, lat: float) -> Point2: ...


@dataclass(frozen=True)
class LinearProjection:
    """Equirectangular projection with independent axis scale factors."""

    scale_x: float = 1.0
    scale_y: float = 1.0

    def project(self, lon: float, lat: float) -> Point2:
        return Point2(lon * self.scale_x, lat * self.scale_y)


def latitude_to_y(latitude: float) -> float:
    """Mercator latitude transform, in degree-like units.

    Raises:
        ValueError: If the latitude is not strictly between -90 and 90.
    """
    if not -90.0 < latitude < 90.0:
        raise ValueError(f"Latitude {latitude} is outside the Mercator range (-90, 90)")
    return math.log(math.tan((latitude + 90.0) / 360.0 * math.pi)) / math.pi * 180.0


@dataclass(frozen=True)
class MercatorProjection:
    """Spherical Mercator: longitude unchanged, latitude stretched toward the poles."""

    def project(self, lon: float, lat: float) -> Point2:
        return Point2(lon, latitude_to_y(lat))


def make_projection(
    name: ProjectionName, scale_x: float = 1.0, scale_y: float = 1.0
) -> CoordinateProjection:
    """Build a projection by name."""
    if name == "linear":
        return LinearProjection(scale_x, scale_y)
    if name == "mercator":
        return MercatorProjection()
    raise ValueError(f"Unknown projection {name!r}; expected 'linear' or 'mercator'")
