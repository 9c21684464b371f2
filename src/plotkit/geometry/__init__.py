"""Geometry module for plotkit.

This package provides the immutable 2D primitives every pipeline stage
works on, tolerant predicates, validation and affine transforms.

Key Components:
    - Primitives: Point2, Segment2, Polyline2, Polygon2, MultiPolygon2, Frame
    - Objects: Style, PlotObject and the Shape union
    - Predicates: tolerant point/segment/polygon tests
    - Validators: simple-polygon checks
    - Transforms: Affine matrices applied to shapes and objects

Example:
    from plotkit.geometry import Affine, Polygon2, transform

    square = Polygon2.from_coords([(0, 0), (1, 0), (1, 1), (0, 1)])
    doubled = transform(square, Affine.scaling(2.0))
"""

from plotkit.geometry.objects import PlotObject, Shape, Style, bounding_box, vertices
from plotkit.geometry.predicates import (
    Location,
    point_on_segment,
    polygon_contains_point,
    segment_intersection,
    segments_intersect,
)
from plotkit.geometry.primitives import (
    Frame,
    MultiPolygon2,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
)
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance
from plotkit.geometry.transforms import Affine, transform, transform_shape
from plotkit.geometry.validators import validate_multipolygon, validate_polygon

__all__ = [
    "DEFAULT_TOLERANCE",
    "Affine",
    "Frame",
    "Location",
    "MultiPolygon2",
    "PlotObject",
    "Point2",
    "Polygon2",
    "Polyline2",
    "Segment2",
    "Shape",
    "Style",
    "Tolerance",
    "bounding_box",
    "point_on_segment",
    "polygon_contains_point",
    "segment_intersection",
    "segments_intersect",
    "transform",
    "transform_shape",
    "validate_multipolygon",
    "validate_polygon",
    "vertices",
]
