"""Boolean and clipping engine for plotkit.

Key Components:
    - Boolean: union, intersection, difference, symmetric_difference
    - Frame clipping: clip_shape, clip_object, clip_segment_to_polygon
    - Hatching: hatch_polygon, hatch_object, HatchConfig
"""

from plotkit.clipping.boolean import (
    Operation,
    boolean,
    difference,
    intersection,
    symmetric_difference,
    union,
)
from plotkit.clipping.frame_clip import (
    clip_object,
    clip_segment_to_polygon,
    clip_shape,
    liang_barsky,
)
from plotkit.clipping.hatching import HatchConfig, hatch_object, hatch_polygon

__all__ = [
    "HatchConfig",
    "Operation",
    "boolean",
    "clip_object",
    "clip_segment_to_polygon",
    "clip_shape",
    "difference",
    "hatch_object",
    "hatch_polygon",
    "intersection",
    "liang_barsky",
    "symmetric_difference",
    "union",
]
