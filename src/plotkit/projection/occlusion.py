"""Projection of 3D scenes to 2D line drawings with hidden-line removal.

Hidden lines are removed with a painter-style approximation rather than an
exact visibility algorithm:

1. Every face is transformed to camera space, clipped to the near and far
   planes and projected.
2. Faces are sorted by average depth, nearest first; ties keep their
   original order.
3. Each face's projected edges have the projected outline of every nearer
   face subtracted from them.
4. The surviving pieces are emitted face by face, farthest first; faces
   at equal depth come out in ingestion order.

There is no BSP split, so faces that intersect or are nearly coplanar may
occlude each other incorrectly.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from plotkit.clipping.frame_clip import clip_segment_to_polygon, liang_barsky
from plotkit.exceptions import InvalidGeometry
from plotkit.geometry.objects import PlotObject
from plotkit.geometry.primitives import Frame, Point2, Polygon2, Segment2
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance
from plotkit.projection.camera import Camera, ProjectedFace
from plotkit.projection.primitives3d import Face, Solid, faces_of
from plotkit.utils.logging import get_logger

logger = get_logger(__name__)


class ProjectionConfig(BaseModel, frozen=True):
    """Options for :func:`project_scene`.

    Attributes:
        occlusion: Remove edges hidden behind nearer faces. When False the
            scene is drawn as a plain wireframe.
        y_down: Flip the image y axis so that "up" points to the top of an
            SVG canvas.
    """

    occlusion: bool = Field(default=True, description="Remove hidden lines")
    y_down: bool = Field(default=True, description="Flip y for SVG output")


def _flip(point: Point2) -> Point2:
    return Point2(point.x, -point.y)


def _occluder(projected: ProjectedFace, tolerance: Tolerance) -> Polygon2 | None:
    try:
        polygon = Polygon2(projected.points)
    except InvalidGeometry:
        return None
    eps = tolerance.absolute(Frame.from_points(polygon.points).diagonal)
    if polygon.area <= eps * polygon.perimeter:
        # Edge-on faces hide nothing.
        return None
    return polygon


def _edges(projected: ProjectedFace) -> list[Segment2]:
    points = projected.points
    n = len(points)
    return [
        Segment2(points[i], points[(i + 1) % n])
        for i in range(n)
        if points[i] != points[(i + 1) % n]
    ]


def project_scene(
    solids: Iterable[Solid | Face],
    camera: Camera,
    config: ProjectionConfig | None = None,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> list[PlotObject]:
    """Project 3D geometry into styled 2D segments.

    Args:
        solids: Solids and loose faces, in ingestion order.
        camera: Camera to view them through.
        config: Occlusion and axis options.
        tolerance: Relative tolerance used when subtracting occluders.

    Returns:
        Segment objects, grouped per face from farthest to nearest. Each
        carries the face style and a ``face`` annotation with the face's
        ingestion index.
    """
    config = config or ProjectionConfig()
    faces = faces_of(solids)

    projected: list[ProjectedFace] = []
    for index, face in enumerate(faces):
        result = camera.project_face(face, index)
        if result is not None:
            projected.append(result)

    # Stable sort keeps ingestion order for faces at equal depth.
    front_to_back = sorted(projected, key=lambda p: p.depth)

    visible: list[tuple[ProjectedFace, list[Segment2]]] = []
    occluders: list[Polygon2] = []
    for current in front_to_back:
        pieces = _edges(current)
        if config.occlusion:
            for occluder in occluders:
                remaining: list[Segment2] = []
                for piece in pieces:
                    remaining.extend(clip_segment_to_polygon(piece, occluder, "outside", tolerance))
                pieces = remaining
                if not pieces:
                    break
            polygon = _occluder(current, tolerance)
            if polygon is not None:
                occluders.append(polygon)
        visible.append((current, pieces))

    extents = camera.projection.extents()
    objects: list[PlotObject] = []
    # Back to front; equal depths keep ingestion order.
    back_to_front = sorted(visible, key=lambda item: (-item[0].depth, item[0].index))
    for current, pieces in back_to_front:
        annotations = (("face", str(current.index)),)
        for piece in pieces:
            clipped = piece if extents is None else liang_barsky(piece, extents)
            if clipped is None:
                continue
            if config.y_down:
                clipped = Segment2(_flip(clipped.start), _flip(clipped.end))
            objects.append(PlotObject(clipped, current.face.style, annotations))

    logger.info(
        "Projected scene",
        faces=len(faces),
        visible_faces=len(projected),
        segments=len(objects),
        occlusion=config.occlusion,
    )
    return objects
