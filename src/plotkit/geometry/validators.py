"""Structural validation for polygons.

Construction of a :class:`Polygon2` only rejects rings with fewer than three
distinct vertices. The checks here are more expensive (self-intersection is
quadratic in the vertex count) and run where geometry is consumed: frame
clipping and the boolean engine. Ingestion does not call them, so an invalid
ring surfaces during clipping with its object index attached.
"""

from __future__ import annotations

from plotkit.exceptions import InvalidGeometry
from plotkit.geometry.predicates import segment_intersection
from plotkit.geometry.primitives import Frame, MultiPolygon2, Polygon2
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance


def validate_polygon(polygon: Polygon2, tolerance: Tolerance = DEFAULT_TOLERANCE) -> Polygon2:
    """Check that a polygon is a simple ring with non-zero area.

    Args:
        polygon: Ring to validate.
        tolerance: Relative tolerance used for the area and crossing checks.

    Returns:
        The same polygon, for call chaining.

    Raises:
        InvalidGeometry: If the ring has fewer than 3 distinct vertices,
            zero area, or non-adjacent edges that touch or cross.
    """
    points = polygon.points
    if len(set(points)) < 3:
        raise InvalidGeometry(
            f"Polygon needs at least 3 distinct vertices, got {len(set(points))}"
        )

    eps = tolerance.absolute(Frame.from_points(points).diagonal)
    if polygon.area <= eps * eps:
        raise InvalidGeometry("Polygon has zero area")

    edges = list(polygon.segments())
    n = len(edges)
    for i in range(n):
        for j in range(i + 1, n):
            adjacent = j == i + 1 or (i == 0 and j == n - 1)
            hits = segment_intersection(edges[i], edges[j], eps=eps)
            if not hits:
                continue
            if not adjacent:
                raise InvalidGeometry(f"Polygon edges {i} and {j} intersect")
            # Adjacent edges share exactly one vertex; anything more is a fold-back.
            if len(hits) > 1:
                raise InvalidGeometry(f"Polygon edges {i} and {j} overlap")
    return polygon


def validate_multipolygon(
    multi: MultiPolygon2, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> MultiPolygon2:
    """Validate every ring of a multi-polygon.

    Raises:
        InvalidGeometry: If any ring is invalid; the message names the ring.
    """
    for index, ring in enumerate(multi.polygons):
        try:
            validate_polygon(ring, tolerance)
        except InvalidGeometry as e:
            raise InvalidGeometry(f"Ring {index}: {e.message}") from e
    return multi
