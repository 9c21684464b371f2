"""Tolerant geometric predicates.

All predicates take an explicit :class:`~plotkit.geometry.tolerance.Tolerance`.
The absolute epsilon is derived from the diagonal of the bounding box of
the geometry under test, so the same relative tolerance works for inputs
in degrees of longitude and for outputs in millimetres.
"""

from __future__ import annotations

import math
from enum import Enum

from plotkit.geometry.primitives import Frame, Point2, Polygon2, Segment2
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance


class Location(str, Enum):
    """Where a point lies relative to a closed region."""

    INSIDE = "inside"
    OUTSIDE = "outside"
    BOUNDARY = "boundary"


def _diagonal(*points: Point2) -> float:
    return Frame.from_points(points).diagonal


def orientation(a: Point2, b: Point2, c: Point2) -> float:
    """Twice the signed area of triangle abc (positive when counter-clockwise)."""
    return (b - a).cross(c - a)


def distance_to_segment(point: Point2, segment: Segment2) -> float:
    """Shortest distance from a point to a segment."""
    d = segment.vector
    length_sq = d.dot(d)
    if length_sq == 0:
        return point.distance_to(segment.start)
    t = max(0.0, min(1.0, (point - segment.start).dot(d) / length_sq))
    return point.distance_to(segment.point_at(t))


def project_parameter(point: Point2, segment: Segment2) -> float:
    """Parameter of the orthogonal projection of ``point`` onto the segment line."""
    d = segment.vector
    length_sq = d.dot(d)
    if length_sq == 0:
        return 0.0
    return (point - segment.start).dot(d) / length_sq


def point_on_segment(
    point: Point2,
    segment: Segment2,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
    *,
    eps: float | None = None,
) -> bool:
    """Check whether a point lies on a segment within tolerance.

    Args:
        point: Point to test.
        segment: Segment to test against.
        tolerance: Relative tolerance.
        eps: Absolute epsilon override, used by callers that already
            computed one for a larger working set.

    Returns:
        True if the point is within epsilon of the segment.
    """
    if eps is None:
        eps = tolerance.absolute(_diagonal(point, segment.start, segment.end))
    return distance_to_segment(point, segment) <= eps


def segment_intersection(
    first: Segment2,
    second: Segment2,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
    *,
    eps: float | None = None,
) -> list[Point2]:
    """Compute the intersection of two segments.

    Args:
        first: First segment.
        second: Second segment.
        tolerance: Relative tolerance.
        eps: Absolute epsilon override.

    Returns:
        An empty list when the segments are disjoint, one point for a
        crossing or touch, and the two overlap endpoints (sorted by
        ``(x, y)``) when the segments are collinear and overlap.
    """
    if eps is None:
        eps = tolerance.absolute(
            _diagonal(first.start, first.end, second.start, second.end)
        )

    r = first.vector
    s = second.vector
    r_len = r.norm()
    s_len = s.norm()

    if r_len <= eps or s_len <= eps:
        # A degenerate segment behaves like a point.
        if r_len <= eps and s_len <= eps:
            return [first.start] if first.start.distance_to(second.start) <= eps else []
        if r_len <= eps:
            return [first.start] if point_on_segment(first.start, second, eps=eps) else []
        return [second.start] if point_on_segment(second.start, first, eps=eps) else []

    denom = r.cross(s)
    offset = second.start - first.start

    if abs(denom) <= 1e-12 * r_len * s_len:
        # Parallel: only collinear overlaps intersect.
        if abs(offset.cross(r)) / r_len > eps:
            return []
        candidates = [
            p for p in (first.start, first.end) if point_on_segment(p, second, eps=eps)
        ] + [
            p for p in (second.start, second.end) if point_on_segment(p, first, eps=eps)
        ]
        unique: list[Point2] = []
        for p in sorted(candidates, key=Point2.to_tuple):
            if not any(p.distance_to(q) <= eps for q in unique):
                unique.append(p)
        if len(unique) > 2:
            unique = [unique[0], unique[-1]]
        return unique

    t = offset.cross(s) / denom
    u = offset.cross(r) / denom
    t_eps = eps / r_len
    u_eps = eps / s_len
    if -t_eps <= t <= 1 + t_eps and -u_eps <= u <= 1 + u_eps:
        return [first.point_at(min(1.0, max(0.0, t)))]
    return []


def segments_intersect(
    first: Segment2,
    second: Segment2,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> bool:
    """Check whether two segments share at least one point."""
    return bool(segment_intersection(first, second, tolerance))


def polygon_contains_point(
    polygon: Polygon2,
    point: Point2,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
    *,
    eps: float | None = None,
) -> Location:
    """Locate a point relative to a polygon.

    Boundary contact is checked first (within epsilon); otherwise the
    even-odd crossing rule decides between inside and outside.

    Args:
        polygon: Closed ring to test against.
        point: Point to locate.
        tolerance: Relative tolerance.
        eps: Absolute epsilon override.

    Returns:
        The point's Location.
    """
    if eps is None:
        eps = tolerance.absolute(Frame.from_points(polygon.points).diagonal)

    for edge in polygon.segments():
        if distance_to_segment(point, edge) <= eps:
            return Location.BOUNDARY

    inside = False
    pts = polygon.points
    n = len(pts)
    j = n - 1
    for i in range(n):
        a = pts[i]
        b = pts[j]
        if (a.y > point.y) != (b.y > point.y):
            x_cross = a.x + (point.y - a.y) * (b.x - a.x) / (b.y - a.y)
            if point.x < x_cross:
                inside = not inside
        j = i
    return Location.INSIDE if inside else Location.OUTSIDE


def angle_between(incoming: Point2, outgoing: Point2) -> float:
    """Signed turn angle in radians from one direction to another."""
    return math.atan2(incoming.cross(outgoing), incoming.dot(outgoing))
