"""Fitting drawings onto a physical canvas."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from plotkit.clipping.frame_clip import clip_object
from plotkit.exceptions import InvalidGeometry
from plotkit.geometry.objects import PlotObject, bounding_box
from plotkit.geometry.primitives import Frame
from plotkit.geometry.tolerance import DEFAULT_TOLERANCE, Tolerance
from plotkit.geometry.transforms import Affine, transform
from plotkit.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FitResult:
    """Fitted objects and the transform that produced them."""

    objects: tuple[PlotObject, ...]
    transform: Affine

    @property
    def scale(self) -> float:
        return self.transform.uniform_scale


def fit_transform(bbox: Frame, target_frame: Frame, margin: float, flip_y: bool = False) -> Affine:
    """Compute the uniform scale-and-center transform from ``bbox`` into a canvas.

    Args:
        bbox: Bounding box of the drawing.
        target_frame: Physical canvas.
        margin: Fraction of each canvas dimension left empty on each side.
        flip_y: Mirror vertically, for inputs whose y axis points up.

    Returns:
        The affine transform. A zero-size bbox is centered without scaling;
        a bbox of zero width (or height) is scaled by its other dimension.

    Raises:
        ValueError: If margin is outside [0, 0.5).
    """
    inner = target_frame.inset(margin)
    ratios = []
    if bbox.width > 0:
        ratios.append(inner.width / bbox.width)
    if bbox.height > 0:
        ratios.append(inner.height / bbox.height)
    scale = min(ratios) if ratios else 1.0

    center = bbox.center
    target = inner.center
    return (
        Affine.translation(-center.x, -center.y)
        .then(Affine.scaling(scale, -scale if flip_y else scale))
        .then(Affine.translation(target.x, target.y))
    )


def fit(
    objects: Sequence[PlotObject],
    target_frame: Frame,
    margin: float = 0.05,
    flip_y: bool = False,
) -> FitResult:
    """Scale and center objects into ``target_frame`` inset by ``margin``.

    The aspect ratio of the drawing is preserved; the scale is the largest
    one that keeps the union bounding box inside the inset frame.

    Args:
        objects: Objects to fit.
        target_frame: Physical canvas.
        margin: Fraction of each canvas dimension, in [0, 0.5).
        flip_y: Mirror vertically (GeoJSON latitude grows upward, SVG y
            grows downward).

    Returns:
        FitResult with transformed objects in input order.
    """
    if not objects:
        # Still validates the margin.
        target_frame.inset(margin)
        return FitResult((), Affine.identity())

    bbox = bounding_box(objects)
    affine = fit_transform(bbox, target_frame, margin, flip_y)
    logger.debug(
        "Computed fit transform",
        objects=len(objects),
        bbox=bbox.to_tuple(),
        scale=affine.uniform_scale,
    )
    return FitResult(tuple(transform(obj, affine) for obj in objects), affine)


def clip_to_frame(
    objects: Sequence[PlotObject],
    frame: Frame,
    tolerance: Tolerance = DEFAULT_TOLERANCE,
    skip_invalid: bool = False,
) -> list[PlotObject]:
    """Clip every object to ``frame``; fully outside objects are dropped.

    Args:
        objects: Objects to clip, in output order.
        frame: Clipping rectangle.
        tolerance: Relative tolerance for the clipper.
        skip_invalid: Drop objects with invalid geometry instead of failing.

    Raises:
        InvalidGeometry: If an object cannot be clipped and skip_invalid is
            False. The error carries the object index.
    """
    clipped: list[PlotObject] = []
    for index, obj in enumerate(objects):
        try:
            clipped.extend(clip_object(obj, frame, tolerance))
        except InvalidGeometry as e:
            if not skip_invalid:
                raise e.with_context(index=index) from e
            logger.warning("Skipping invalid object", index=index, error=str(e))
    return clipped
