"""Boolean operations on polygons and multi-polygons.

Both operands are overlaid on one vertex/edge graph (see
:mod:`plotkit.clipping.graph`): every edge is split where it meets the
other operand, each directed fragment is classified against the other
operand, and the fragments the operation keeps are traced back into rings.

Regions follow the even-odd convention of :class:`MultiPolygon2`. A
multi-polygon operand is first folded into non-crossing rings by taking the
symmetric difference of its rings one at a time; after that every ring set
has its interior on the left of each edge (outer rings counter-clockwise,
holes clockwise), which is what the fragment selection relies on.

An empty result is ``None``, never an error.
"""

from __future__ import annotations

from enum import Enum

from plotkit.clipping.graph import (
    Edge,
    FragmentKind,
    RingSet,
    VertexArena,
    classify,
    simplify_ring,
    split_edges,
    trace_rings,
)
from plotkit.geometry.primitives import Frame, MultiPolygon2, Polygon2
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance
from plotkit.geometry.validators import validate_polygon
from plotkit.utils.logging import get_logger

logger = get_logger(__name__)

Region = Polygon2 | MultiPolygon2


class Operation(str, Enum):
    INTERSECTION = "intersection"
    UNION = "union"
    DIFFERENCE = "difference"
    SYMMETRIC_DIFFERENCE = "symmetric_difference"


# (operation, operand) -> {fragment kind: reverse?}
_SELECTION: dict[tuple[Operation, int], dict[FragmentKind, bool]] = {
    (Operation.INTERSECTION, 0): {FragmentKind.INSIDE: False, FragmentKind.SHARED_SAME: False},
    (Operation.INTERSECTION, 1): {FragmentKind.INSIDE: False},
    (Operation.UNION, 0): {FragmentKind.OUTSIDE: False, FragmentKind.SHARED_SAME: False},
    (Operation.UNION, 1): {FragmentKind.OUTSIDE: False},
    (Operation.DIFFERENCE, 0): {FragmentKind.OUTSIDE: False, FragmentKind.SHARED_OPPOSITE: False},
    (Operation.DIFFERENCE, 1): {FragmentKind.INSIDE: True},
    (Operation.SYMMETRIC_DIFFERENCE, 0): {FragmentKind.OUTSIDE: False, FragmentKind.INSIDE: True},
    (Operation.SYMMETRIC_DIFFERENCE, 1): {FragmentKind.OUTSIDE: False, FragmentKind.INSIDE: True},
}


def _select(
    fragments: list[Edge], kinds: list[FragmentKind], rules: dict[FragmentKind, bool]
) -> list[Edge]:
    selected: list[Edge] = []
    for (u, v), kind in zip(fragments, kinds):
        if kind in rules:
            selected.append((v, u) if rules[kind] else (u, v))
    return selected


def _working_eps(first: list[Polygon2], second: list[Polygon2], tolerance: Tolerance) -> float:
    points = [p for ring in (*first, *second) for p in ring.points]
    return tolerance.absolute(Frame.from_points(points).diagonal)


def _overlay(
    first: list[Polygon2],
    second: list[Polygon2],
    operation: Operation,
    tolerance: Tolerance,
) -> list[Polygon2]:
    """Overlay two oriented ring sets and return the oriented result rings."""
    if not first and not second:
        return []
    eps = _working_eps(first, second, tolerance)
    arena = VertexArena(eps)
    for ring in first:
        for point in ring.points:
            arena.add(point, original=True)
    for ring in second:
        for point in ring.points:
            arena.add(point, original=True)

    first_set = RingSet.of(first)
    second_set = RingSet.of(second)
    first_fragments, second_fragments = split_edges(
        first_set.edges(), second_set.edges(), arena
    )
    first_kinds = classify(first_fragments, second_fragments, second_set, arena)
    second_kinds = classify(second_fragments, first_fragments, first_set, arena)

    selected = _select(first_fragments, first_kinds, _SELECTION[(operation, 0)])
    selected += _select(second_fragments, second_kinds, _SELECTION[(operation, 1)])

    result: list[Polygon2] = []
    for handles in trace_rings(selected, arena):
        handles = simplify_ring(handles, arena)
        if len(handles) < 3:
            continue
        ring = Polygon2(tuple(arena.point(h) for h in handles))
        if ring.area <= eps * ring.perimeter:
            continue
        result.append(ring)
    logger.debug(
        "Overlay complete",
        operation=operation.value,
        fragments=len(first_fragments) + len(second_fragments),
        rings=len(result),
    )
    return result


def _oriented_rings(region: Region, tolerance: Tolerance) -> list[Polygon2]:
    """Validate a region and return it as non-crossing, interior-left rings."""
    match region:
        case Polygon2():
            return [validate_polygon(region, tolerance).oriented_ccw()]
        case MultiPolygon2(polygons=polygons):
            rings: list[Polygon2] = []
            for ring in polygons:
                validate_polygon(ring, tolerance)
                rings = _overlay(
                    rings, [ring.oriented_ccw()], Operation.SYMMETRIC_DIFFERENCE, tolerance
                )
            return rings
        case _:
            raise TypeError(f"Boolean operands must be polygons, got {type(region).__name__}")


def _anchored(ring: Polygon2) -> Polygon2:
    """Rotate a ring to start at its smallest vertex, keeping its orientation."""
    start = min(range(len(ring.points)), key=lambda i: ring.points[i].to_tuple())
    return ring.rotated_to(start)


def _assemble(rings: list[Polygon2]) -> Region | None:
    if not rings:
        return None
    if len(rings) == 1:
        return rings[0].canonical()
    anchored = sorted((_anchored(r) for r in rings), key=lambda r: r.points[0].to_tuple())
    return MultiPolygon2(tuple(anchored))


def boolean(
    first: Region,
    second: Region,
    operation: Operation,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> Region | None:
    """Run one boolean operation.

    Args:
        first: Left operand.
        second: Right operand.
        operation: Operation to perform.
        tolerance: Relative tolerance for snapping and classification.

    Returns:
        A Polygon2 when the result is a single ring, a MultiPolygon2 when it
        has several rings (holes are clockwise), or None when it is empty.

    Raises:
        InvalidGeometry: If either operand has a degenerate or
            self-intersecting ring.
    """
    rings = _overlay(
        _oriented_rings(first, tolerance),
        _oriented_rings(second, tolerance),
        operation,
        tolerance,
    )
    return _assemble(rings)


def intersection(
    first: Region, second: Region, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> Region | None:
    """Region covered by both operands."""
    return boolean(first, second, Operation.INTERSECTION, tolerance)


def union(first: Region, second: Region, tolerance: Tolerance = DEFAULT_TOLERANCE) -> Region | None:
    """Region covered by either operand."""
    return boolean(first, second, Operation.UNION, tolerance)


def difference(
    first: Region, second: Region, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> Region | None:
    """Region covered by ``first`` but not by ``second``."""
    return boolean(first, second, Operation.DIFFERENCE, tolerance)


def symmetric_difference(
    first: Region, second: Region, tolerance: Tolerance = DEFAULT_TOLERANCE
) -> Region | None:
    """Region covered by exactly one operand."""
    return boolean(first, second, Operation.SYMMETRIC_DIFFERENCE, tolerance)
