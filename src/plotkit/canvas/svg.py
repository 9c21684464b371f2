"""SVG serialization of layered scenes.

Each layer becomes one ``<g>`` group whose id is ``<prefix>_<layer>``; the
print sequencer driving the plotter addresses pens by these ids. The id
``<prefix>_all`` is reserved for the combined layer file. Numbers
are written with a fixed precision so that identical scenes serialize to
byte-identical files.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Sequence
from pathlib import Path

import svgwrite
import svgwrite.container

from plotkit.canvas.layers import Layer
from plotkit.canvas.scene import Scene
from plotkit.exceptions import PlotIOError
from plotkit.geometry.objects import PlotObject, Style
from plotkit.geometry.primitives import (
    Frame,
    MultiPolygon2,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
)
from plotkit.utils.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_ID_RE = re.compile(r"[^A-Za-z0-9_-]+")

DEFAULT_PRECISION = 3
FRAME_LAYER = "frame"


def sanitize_id(name: str) -> str:
    """Make a layer name usable inside an XML id and a filename."""
    return _UNSAFE_ID_RE.sub("_", name).strip("_") or "layer"


def _num(value: float, precision: int) -> str:
    text = f"{value:.{precision}f}"
    # Avoid "-0.000" so that mirrored zeros serialize identically.
    if float(text) == 0:
        return f"{0:.{precision}f}"
    return text


def _pt(point: Point2, precision: int) -> str:
    return f"{_num(point.x, precision)},{_num(point.y, precision)}"


def _ring_path(points: Sequence[Point2], precision: int, closed: bool) -> str:
    head, *rest = points
    parts = [f"M{_pt(head, precision)}"]
    parts.extend(f"L{_pt(p, precision)}" for p in rest)
    if closed:
        parts.append("Z")
    return " ".join(parts)


def path_data(shape: Segment2 | Polyline2 | Polygon2 | MultiPolygon2, precision: int) -> str:
    """SVG path ``d`` attribute for a line-like shape."""
    match shape:
        case Segment2(start=start, end=end):
            return _ring_path((start, end), precision, closed=False)
        case Polyline2(points=points):
            return _ring_path(points, precision, closed=False)
        case Polygon2(points=points):
            return _ring_path(points, precision, closed=True)
        case MultiPolygon2(polygons=polygons):
            return " ".join(_ring_path(r.points, precision, closed=True) for r in polygons)
        case _:
            raise TypeError(f"No path data for {type(shape).__name__}")


def _element(
    dwg: svgwrite.Drawing, obj: PlotObject, precision: int
) -> svgwrite.base.BaseElement:
    stroke = {
        "stroke": obj.style.color,
        "stroke_width": _num(obj.style.thickness, precision),
        "fill": "none",
    }
    shape = obj.shape
    if isinstance(shape, Point2):
        return dwg.circle(
            center=(_num(shape.x, precision), _num(shape.y, precision)),
            r=_num(obj.style.thickness, precision),
            **stroke,
        )
    if isinstance(shape, MultiPolygon2):
        return dwg.path(d=path_data(shape, precision), fill_rule="evenodd", **stroke)
    return dwg.path(d=path_data(shape, precision), **stroke)


def combined_id(prefix: str) -> str:
    """Name of the combined layer file, reserved so no layer can take it."""
    return f"{sanitize_id(prefix)}_all"


def layer_ids(layers: Sequence[Layer], prefix: str) -> list[str]:
    """Group ids for ``layers``, unique and distinct from :func:`combined_id`.

    Layers whose sanitized names collide get a numeric suffix in emission
    order: ``layer_red``, ``layer_red_2``. A layer literally named ``all``
    becomes ``<prefix>_all_2``.
    """
    taken = {combined_id(prefix)}
    ids: list[str] = []
    for layer in layers:
        base = f"{sanitize_id(prefix)}_{sanitize_id(layer.name)}"
        candidate = base
        suffix = 2
        while candidate in taken:
            candidate = f"{base}_{suffix}"
            suffix += 1
        taken.add(candidate)
        ids.append(candidate)
    return ids


def frame_outline(frame: Frame, margin: float = 0.0, style: Style | None = None) -> PlotObject:
    """Border rectangle drawn as its own layer.

    Args:
        frame: Canvas frame.
        margin: Inset of the border, as a fraction of each dimension.
        style: Border style; defaults to a black pen on the ``frame`` layer.
    """
    style = style or Style(color="black", layer=FRAME_LAYER)
    return PlotObject(frame.inset(margin).to_polygon(), style, (("role", FRAME_LAYER),))


def render_layers(
    frame: Frame,
    layers: Sequence[Layer],
    prefix: str = "layer",
    precision: int = DEFAULT_PRECISION,
    units: str = "mm",
    group_ids: Sequence[str] | None = None,
) -> str:
    """Serialize already-bucketed layers to SVG text.

    ``group_ids`` overrides the ids from :func:`layer_ids`, so a subset of
    layers can be written under the ids they carry in the full document.
    """
    if group_ids is None:
        group_ids = layer_ids(layers, prefix)
    dwg = svgwrite.Drawing(
        size=(f"{_num(frame.width, precision)}{units}", f"{_num(frame.height, precision)}{units}"),
        viewBox=" ".join(
            _num(v, precision) for v in (frame.x, frame.y, frame.width, frame.height)
        ),
        debug=False,
    )
    for layer, group_id in zip(layers, group_ids, strict=True):
        group: svgwrite.container.Group = dwg.g(id=group_id)
        for obj in layer.objects:
            group.add(_element(dwg, obj, precision))
        dwg.add(group)
    return str(dwg.tostring())


def serialize(
    scene: Scene,
    prefix: str = "layer",
    priority: Sequence[str] | None = None,
    precision: int = DEFAULT_PRECISION,
) -> str:
    """Serialize a scene to SVG text, one group per layer.

    Args:
        scene: Scene to serialize.
        prefix: Group id prefix.
        priority: Layer names emitted first, in this order.
        precision: Digits after the decimal point for every coordinate.

    Returns:
        The SVG document.
    """
    return render_layers(scene.frame, scene.layers(priority), prefix, precision)


def _atomic_write(path: Path, text: str) -> None:
    # One temp file per call; concurrent writers of a path never share it.
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(text, encoding="utf-8")
        # replace() is atomic on both POSIX and Windows
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise PlotIOError(f"Cannot write output: {e.strerror or e}", path) from e


def write_svg(
    scene: Scene,
    path: Path | str,
    prefix: str = "layer",
    priority: Sequence[str] | None = None,
    precision: int = DEFAULT_PRECISION,
) -> Path:
    """Serialize a scene and write it atomically.

    The document is written to a hidden sibling temp file which is then
    renamed over ``path``; on failure the temp file is removed and no
    partial output is left behind.

    Raises:
        PlotIOError: If the file cannot be written.
    """
    path = Path(path)
    _atomic_write(path, serialize(scene, prefix, priority, precision))
    logger.info("Wrote SVG", path=str(path), objects=len(scene))
    return path


def write_layer_files(
    scene: Scene,
    directory: Path | str,
    prefix: str = "layer",
    priority: Sequence[str] | None = None,
    precision: int = DEFAULT_PRECISION,
) -> list[Path]:
    """Write ``<prefix>_all.svg`` plus one ``<prefix>_<layer>.svg`` per layer.

    Per-layer files are returned after the combined file, in layer emission
    order, which is the order the plotter draws them in. Each per-layer file
    holds one group whose id matches both its file name and the group id of
    that layer in the combined file.

    Raises:
        PlotIOError: If any file cannot be written.
    """
    directory = Path(directory)
    layers = scene.layers(priority)
    group_ids = layer_ids(layers, prefix)

    combined = directory / f"{combined_id(prefix)}.svg"
    _atomic_write(
        combined, render_layers(scene.frame, layers, prefix, precision, group_ids=group_ids)
    )
    written = [combined]
    for layer, group_id in zip(layers, group_ids, strict=True):
        path = directory / f"{group_id}.svg"
        _atomic_write(
            path, render_layers(scene.frame, [layer], prefix, precision, group_ids=[group_id])
        )
        written.append(path)
    logger.info("Wrote layer files", directory=str(directory), files=len(written))
    return written
