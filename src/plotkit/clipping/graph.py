"""Vertex arena and fragment graph for polygon overlay.

The overlay engine never stores point objects in its graph. Every vertex
lives once in a :class:`VertexArena` and edges refer to it by integer
handle, so coincident points coming from both operands (within epsilon)
collapse to the same handle and shared edges can be found by handle-pair
lookup.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from plotkit.geometry.predicates import (
    Location,
    angle_between,
    distance_to_segment,
    polygon_contains_point,
    project_parameter,
    segment_intersection,
)
from plotkit.geometry.primitives import Frame, Point2, Polygon2, Segment2

Edge = tuple[int, int]


class VertexArena:
    """Epsilon-snapping store of vertices addressed by integer handles.

    Lookups go through a uniform grid with cell size ``2 * eps`` so that any
    two points within ``eps`` of each other fall in neighbouring cells.
    """

    def __init__(self, eps: float) -> None:
        self.eps = eps
        self._cell = 2 * eps
        self._points: list[Point2] = []
        self._grid: dict[tuple[int, int], list[int]] = defaultdict(list)
        self._original: set[int] = set()

    def __len__(self) -> int:
        return len(self._points)

    def _key(self, point: Point2) -> tuple[int, int]:
        return (math.floor(point.x / self._cell), math.floor(point.y / self._cell))

    def find(self, point: Point2) -> int | None:
        """Return the handle of the nearest stored vertex within epsilon."""
        kx, ky = self._key(point)
        best: int | None = None
        best_distance = math.inf
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for handle in self._grid.get((kx + dx, ky + dy), ()):
                    distance = self._points[handle].distance_to(point)
                    if distance <= self.eps and distance < best_distance:
                        best = handle
                        best_distance = distance
        return best

    def add(self, point: Point2, *, original: bool = False) -> int:
        """Insert a point, or snap it to an existing vertex.

        Args:
            point: Point to store.
            original: Mark the resulting handle as an input vertex whose
                position must survive simplification.

        Returns:
            Handle of the stored (or snapped-to) vertex.
        """
        handle = self.find(point)
        if handle is None:
            handle = len(self._points)
            self._points.append(point)
            self._grid[self._key(point)].append(handle)
        if original:
            self._original.add(handle)
        return handle

    def point(self, handle: int) -> Point2:
        return self._points[handle]

    def is_original(self, handle: int) -> bool:
        return handle in self._original


class FragmentKind(str, Enum):
    """Position of a directed fragment relative to the other operand."""

    INSIDE = "inside"
    OUTSIDE = "outside"
    SHARED_SAME = "shared_same"
    SHARED_OPPOSITE = "shared_opposite"


@dataclass(frozen=True)
class RingSet:
    """Rings of one operand with cached bounding boxes."""

    rings: tuple[Polygon2, ...]
    frames: tuple[Frame, ...]

    @classmethod
    def of(cls, rings: Iterable[Polygon2]) -> RingSet:
        rings = tuple(rings)
        return cls(rings, tuple(Frame.from_points(r.points) for r in rings))

    def edges(self) -> list[Segment2]:
        return [edge for ring in self.rings for edge in ring.segments()]

    def locate(self, point: Point2, eps: float) -> Location:
        """Even-odd location of a point against every ring."""
        inside = False
        for ring, frame in zip(self.rings, self.frames):
            if not frame.contains_point(point, eps):
                continue
            location = polygon_contains_point(ring, point, eps=eps)
            if location is Location.BOUNDARY:
                return Location.BOUNDARY
            if location is Location.INSIDE:
                inside = not inside
        return Location.INSIDE if inside else Location.OUTSIDE


def _segment_frame(segment: Segment2) -> Frame:
    return Frame.from_points(segment.points())


def split_edges(
    first: Sequence[Segment2],
    second: Sequence[Segment2],
    arena: VertexArena,
) -> tuple[list[Edge], list[Edge]]:
    """Split both edge lists at every mutual intersection.

    Cut points along an edge are ordered by their parameter, ties broken by
    ``(x, y)``. Each cut point is snapped through the arena, so fragments
    are returned as directed handle pairs; zero-length fragments are dropped.

    Returns:
        Directed fragments of ``first`` and of ``second``.
    """
    eps = arena.eps
    first_cuts: list[list[tuple[float, Point2]]] = [
        [(0.0, e.start), (1.0, e.end)] for e in first
    ]
    second_cuts: list[list[tuple[float, Point2]]] = [
        [(0.0, e.start), (1.0, e.end)] for e in second
    ]
    second_frames = [_segment_frame(e) for e in second]

    for i, a in enumerate(first):
        a_frame = _segment_frame(a)
        for j, b in enumerate(second):
            if not a_frame.intersects(second_frames[j], eps):
                continue
            for point in segment_intersection(a, b, eps=eps):
                first_cuts[i].append((project_parameter(point, a), point))
                second_cuts[j].append((project_parameter(point, b), point))

    return _fragments(first_cuts, arena), _fragments(second_cuts, arena)


def _fragments(cuts: list[list[tuple[float, Point2]]], arena: VertexArena) -> list[Edge]:
    fragments: list[Edge] = []
    for edge_cuts in cuts:
        edge_cuts.sort(key=lambda c: (c[0], c[1].x, c[1].y))
        handles: list[int] = []
        for _, point in edge_cuts:
            handle = arena.add(point)
            if not handles or handles[-1] != handle:
                handles.append(handle)
        fragments.extend(zip(handles, handles[1:]))
    return fragments


def classify(
    fragments: Sequence[Edge],
    other_fragments: Sequence[Edge],
    other: RingSet,
    arena: VertexArena,
) -> list[FragmentKind]:
    """Classify each directed fragment against the other operand.

    Shared edges are found by handle-pair lookup first. Fragments that are
    not shared are located by their midpoint; a midpoint on the other
    boundary without a matching fragment falls back to comparing direction
    with the boundary edge it lies on.
    """
    eps = arena.eps
    other_set = set(other_fragments)
    other_edges = other.edges()
    kinds: list[FragmentKind] = []
    for u, v in fragments:
        if (u, v) in other_set:
            kinds.append(FragmentKind.SHARED_SAME)
            continue
        if (v, u) in other_set:
            kinds.append(FragmentKind.SHARED_OPPOSITE)
            continue
        fragment = Segment2(arena.point(u), arena.point(v))
        location = other.locate(fragment.midpoint, eps)
        if location is Location.INSIDE:
            kinds.append(FragmentKind.INSIDE)
        elif location is Location.OUTSIDE:
            kinds.append(FragmentKind.OUTSIDE)
        else:
            kinds.append(_shared_direction(fragment, other_edges))
    return kinds


def _shared_direction(fragment: Segment2, edges: Sequence[Segment2]) -> FragmentKind:
    midpoint = fragment.midpoint
    host = min(edges, key=lambda e: distance_to_segment(midpoint, e))
    if fragment.vector.dot(host.vector) > 0:
        return FragmentKind.SHARED_SAME
    return FragmentKind.SHARED_OPPOSITE


def trace_rings(edges: Iterable[Edge], arena: VertexArena) -> list[list[int]]:
    """Link directed edges into closed rings.

    Tracing starts from the lexicographically smallest unused edge. At a
    vertex with several unused outgoing edges the rightmost turn is taken.
    A chain that cannot be closed is discarded.
    """
    unique = sorted(
        set(edges),
        key=lambda e: (arena.point(e[0]).to_tuple(), arena.point(e[1]).to_tuple()),
    )
    outgoing: dict[int, list[int]] = defaultdict(list)
    for u, v in unique:
        outgoing[u].append(v)

    used: set[Edge] = set()
    rings: list[list[int]] = []
    for start in unique:
        if start in used:
            continue
        used.add(start)
        origin, current = start
        previous = origin
        ring = [origin]
        closed = True
        while current != origin:
            ring.append(current)
            candidates = [w for w in outgoing[current] if (current, w) not in used]
            if not candidates:
                closed = False
                break
            here = arena.point(current)
            incoming = here - arena.point(previous)
            following = min(
                candidates,
                key=lambda w: (
                    angle_between(incoming, arena.point(w) - here),
                    arena.point(w).to_tuple(),
                ),
            )
            used.add((current, following))
            previous, current = current, following
        if closed:
            rings.append(ring)
    return rings


def simplify_ring(ring: list[int], arena: VertexArena) -> list[int]:
    """Remove spikes and collinear vertices that are not original input vertices."""
    eps = arena.eps
    handles = list(ring)
    changed = True
    while changed and len(handles) >= 3:
        changed = False
        n = len(handles)
        for i in range(n):
            prev = arena.point(handles[i - 1])
            cur = arena.point(handles[i])
            nxt = arena.point(handles[(i + 1) % n])
            incoming = cur - prev
            outgoing = nxt - cur
            span = max(nxt.distance_to(prev), eps)
            if abs(incoming.cross(outgoing)) > eps * span:
                continue
            spike = incoming.dot(outgoing) < 0
            if spike or not arena.is_original(handles[i]):
                del handles[i]
                changed = True
                break
    return handles
