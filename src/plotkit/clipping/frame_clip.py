"""Clipping shapes to a rectangular frame or a polygonal region.

Frame clipping dispatches on the shape kind. Points are kept when inside
(edges inclusive); segments and polylines go through Liang-Barsky, so a
polyline that leaves and re-enters the frame comes back as several
polylines; polygons and multi-polygons are intersected with the frame
polygon. Regions are validated first; a valid region already inside the
frame is returned unchanged, which makes clipping idempotent.
"""

from __future__ import annotations

from typing import Literal

from plotkit.clipping.boolean import intersection
from plotkit.clipping.graph import RingSet
from plotkit.geometry.objects import PlotObject, Shape, bounding_box
from plotkit.geometry.predicates import Location, project_parameter, segment_intersection
from plotkit.geometry.primitives import (
    Frame,
    MultiPolygon2,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
)
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance
from plotkit.geometry.validators import validate_multipolygon, validate_polygon


def _clamp(point: Point2, frame: Frame) -> Point2:
    return Point2(
        min(max(point.x, frame.x), frame.right),
        min(max(point.y, frame.y), frame.bottom),
    )


def liang_barsky(segment: Segment2, frame: Frame, eps: float = 0.0) -> Segment2 | None:
    """Clip a segment to a frame.

    Args:
        segment: Segment to clip.
        frame: Clipping rectangle (edges inclusive).
        eps: Absolute tolerance for the inside test.

    Returns:
        The visible part of the segment, or None if nothing is visible.
        A segment already inside the frame is returned as is; computed
        endpoints are clamped onto the frame.
    """
    if frame.contains_point(segment.start, eps) and frame.contains_point(segment.end, eps):
        return segment

    d = segment.vector
    t0, t1 = 0.0, 1.0
    checks = (
        (-d.x, segment.start.x - frame.x),
        (d.x, frame.right - segment.start.x),
        (-d.y, segment.start.y - frame.y),
        (d.y, frame.bottom - segment.start.y),
    )
    for p, q in checks:
        if p == 0:
            if q < -eps:
                return None
            continue
        r = q / p
        if p < 0:
            t0 = max(t0, r)
        else:
            t1 = min(t1, r)
        if t0 > t1:
            return None

    start = segment.start if t0 == 0 else _clamp(segment.point_at(t0), frame)
    end = segment.end if t1 == 1 else _clamp(segment.point_at(t1), frame)
    if start == end:
        return None
    return Segment2(start, end)


def _clip_polyline(polyline: Polyline2, frame: Frame, eps: float) -> list[Polyline2]:
    runs: list[list[Point2]] = []
    for segment in polyline.segments():
        clipped = liang_barsky(segment, frame, eps)
        if clipped is None:
            continue
        if runs and runs[-1][-1] == clipped.start:
            runs[-1].append(clipped.end)
        else:
            runs.append([clipped.start, clipped.end])
    return [Polyline2(tuple(run)) for run in runs]


def _clip_region(
    region: Polygon2 | MultiPolygon2, frame: Frame, eps: float, tolerance: Tolerance
) -> list[Shape]:
    if isinstance(region, MultiPolygon2):
        validate_multipolygon(region, tolerance)
    else:
        validate_polygon(region, tolerance)
    bbox = bounding_box(region)
    if frame.contains_frame(bbox, eps):
        return [region]
    if not frame.intersects(bbox, eps) or frame.area == 0:
        return []
    result = intersection(region, frame.to_polygon(), tolerance)
    return [] if result is None else [result]


def clip_shape(
    shape: Shape, frame: Frame, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> list[Shape]:
    """Clip one shape to a frame.

    Args:
        shape: Shape to clip.
        frame: Clipping rectangle.
        tolerance: Relative tolerance, scaled by the frame diagonal.

    Returns:
        The visible pieces; an empty list when the shape is fully outside.

    Raises:
        InvalidGeometry: If a polygon ring is degenerate or self-intersecting,
            wherever it lies relative to the frame.
    """
    eps = tolerance.absolute(frame.diagonal)
    match shape:
        case Point2():
            return [shape] if frame.contains_point(shape, eps) else []
        case Segment2():
            clipped = liang_barsky(shape, frame, eps)
            return [] if clipped is None else [clipped]
        case Polyline2():
            return list(_clip_polyline(shape, frame, eps))
        case Polygon2() | MultiPolygon2():
            return _clip_region(shape, frame, eps, tolerance)
        case _:
            raise TypeError(f"Not a shape: {type(shape).__name__}")


def clip_object(
    obj: PlotObject, frame: Frame, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> list[PlotObject]:
    """Clip an object's shape to a frame, keeping its style and annotations."""
    pieces = clip_shape(obj.shape, frame, tolerance)
    if len(pieces) == 1 and pieces[0] is obj.shape:
        return [obj]
    return [obj.with_shape(piece) for piece in pieces]


def _region_rings(region: Polygon2 | MultiPolygon2) -> tuple[Polygon2, ...]:
    return (region,) if isinstance(region, Polygon2) else region.polygons


def clip_segment_to_polygon(
    segment: Segment2,
    region: Polygon2 | MultiPolygon2,
    keep: Literal["inside", "outside"] = "inside",
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> list[Segment2]:
    """Split a segment where it crosses a region boundary and keep one side.

    Pieces lying along the boundary are kept in both modes: they are part
    of the region for ``keep="inside"`` and still visible for
    ``keep="outside"``.

    Args:
        segment: Segment to split.
        region: Polygon or multi-polygon (even-odd) to test against.
        keep: Which side of the boundary to return.
        tolerance: Relative tolerance.

    Returns:
        Kept pieces in order along the segment, adjacent pieces merged.
    """
    if keep not in ("inside", "outside"):
        raise ValueError(f"keep must be 'inside' or 'outside', got {keep!r}")
    rings = RingSet.of(_region_rings(region))
    frame = segment_frame = Frame.from_points(segment.points())
    for ring_frame in rings.frames:
        frame = frame.union(ring_frame)
    eps = tolerance.absolute(frame.diagonal)

    length = segment.length
    if length <= eps:
        return []

    params = [0.0, 1.0]
    for ring, ring_frame in zip(rings.rings, rings.frames):
        if not ring_frame.intersects(segment_frame, eps):
            continue
        for edge in ring.segments():
            for point in segment_intersection(segment, edge, eps=eps):
                params.append(min(1.0, max(0.0, project_parameter(point, segment))))
    params.sort()

    wanted = Location.INSIDE if keep == "inside" else Location.OUTSIDE
    pieces: list[tuple[float, float]] = []
    min_step = eps / length
    for t0, t1 in zip(params, params[1:]):
        if t1 - t0 <= min_step:
            continue
        location = rings.locate(segment.point_at((t0 + t1) / 2), eps)
        if location is not wanted and location is not Location.BOUNDARY:
            continue
        if pieces and t0 - pieces[-1][1] <= min_step:
            pieces[-1] = (pieces[-1][0], t1)
        else:
            pieces.append((t0, t1))

    def _at(t: float) -> Point2:
        if t == 0.0:
            return segment.start
        if t == 1.0:
            return segment.end
        return segment.point_at(t)

    return [Segment2(_at(t0), _at(t1)) for t0, t1 in pieces]
