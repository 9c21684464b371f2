"""Hatching: fill a region with parallel strokes.

A pen plotter cannot fill an area, so filled regions are rendered as a set
of evenly spaced parallel lines clipped to the region interior.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field

from plotkit.clipping.frame_clip import clip_segment_to_polygon
from plotkit.geometry.objects import PlotObject, Style, vertices
from plotkit.geometry.primitives import MultiPolygon2, Point2, Polygon2, Segment2
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance


class HatchConfig(BaseModel, frozen=True):
    """How a region is hatched.

    Attributes:
        gap: Perpendicular distance between strokes, in output units.
        angle_deg: Stroke direction, counter-clockwise from the x axis.
        thickness: Stroke width of the hatch lines; None keeps the
            object's own thickness.
        keep_outline: Also emit the region outline.
        switchback: Alternate stroke direction so the pen zig-zags.
    """

    gap: float = Field(..., gt=0, description="Distance between strokes")
    angle_deg: float = Field(default=45.0, description="Stroke angle in degrees")
    thickness: float | None = Field(default=None, gt=0, description="Hatch stroke width")
    keep_outline: bool = Field(default=True, description="Emit the outline too")
    switchback: bool = Field(default=False, description="Alternate stroke direction")


def hatch_polygon(
    region: Polygon2 | MultiPolygon2,
    config: HatchConfig,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> list[Segment2]:
    """Generate hatch strokes covering a region.

    Args:
        region: Polygon or multi-polygon (even-odd) to fill.
        config: Stroke spacing and angle.
        tolerance: Relative tolerance for the interior clipping.

    Returns:
        Strokes ordered across the region; empty if the region is thinner
        than one gap.
    """
    rad = math.radians(config.angle_deg)
    direction = Point2(math.cos(rad), math.sin(rad))
    normal = Point2(-direction.y, direction.x)

    points = list(vertices(region))
    along = [p.dot(direction) for p in points]
    across = [p.dot(normal) for p in points]
    lo, hi = min(along) - config.gap, max(along) + config.gap
    low, high = min(across), max(across)

    strokes: list[Segment2] = []
    offset = low + config.gap / 2
    row = 0
    while offset < high:
        base = normal * offset
        line = Segment2(base + direction * lo, base + direction * hi)
        pieces = clip_segment_to_polygon(line, region, "inside", tolerance)
        if config.switchback and row % 2 == 1:
            pieces = [piece.reversed() for piece in reversed(pieces)]
        strokes.extend(pieces)
        offset += config.gap
        row += 1
    return strokes


def hatch_object(
    obj: PlotObject,
    config: HatchConfig,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
) -> list[PlotObject]:
    """Replace a filled object by its hatch strokes (and outline if configured).

    Objects that are not polygons or multi-polygons are returned unchanged.
    """
    if not isinstance(obj.shape, Polygon2 | MultiPolygon2):
        return [obj]
    style = obj.style
    if config.thickness is not None:
        style = Style(color=style.color, layer=style.layer, thickness=config.thickness)
    hatched = [
        PlotObject(stroke, style, obj.annotations)
        for stroke in hatch_polygon(obj.shape, config, tolerance)
    ]
    return [obj, *hatched] if config.keep_outline else hatched
