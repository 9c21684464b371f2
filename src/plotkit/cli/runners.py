"""CLI runners for rendering and the 3D demo.

This module provides the execution logic for the CLI commands,
bridging the CLI interface to the core plotkit components.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from plotkit.canvas.pipeline import Pipeline, PipelineConfig, RenderResult
from plotkit.canvas.svg import write_svg
from plotkit.config import settings
from plotkit.geometry.objects import Style
from plotkit.projection.camera import Camera, OrthographicProjection, PerspectiveProjection
from plotkit.projection.occlusion import ProjectionConfig, project_scene
from plotkit.projection.primitives3d import Point3, Solid, cuboid
from plotkit.utils.logging import get_logger

if TYPE_CHECKING:
    from plotkit.cli.main import CameraProjection, GeoProjection

logger = get_logger(__name__)


@dataclass(frozen=True)
class CubeResult:
    """Result from `plotkit cube`."""

    output: Path
    segments: int
    layers: list[str]


def parse_color_map(entries: list[str]) -> dict[str, str]:
    """Parse ``RULE:COLOR`` options into an ordered rule map.

    ``RULE`` is ``name`` or ``name=value``; the last ``:`` separates the
    color so rules may themselves contain colons.

    Raises:
        ValueError: If an entry has no ``:`` or an empty side.
    """
    mapping: dict[str, str] = {}
    for entry in entries:
        rule, sep, color = entry.rpartition(":")
        if not sep or not rule or not color:
            raise ValueError(f"Invalid color map entry {entry!r}; expected RULE:COLOR")
        mapping[rule] = color
    return mapping


def parse_point(text: str) -> Point3:
    """Parse ``"x,y,z"`` into a Point3.

    Raises:
        ValueError: If the text is not three comma-separated numbers.
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Expected three comma-separated numbers, got {text!r}")
    x, y, z = (float(p) for p in parts)
    return Point3(x, y, z)


def run_render(  # noqa: PLR0913
    *,
    inputs: list[Path],
    output: Path,
    width: float | None,
    height: float | None,
    margin: float | None,
    prefix: str | None,
    priority: list[str],
    color_map: list[str],
    strict: bool,
    split_layers: bool,
    flip_y: bool,
    projection: GeoProjection,
    workers: int | None,
    draw_frame: bool,
) -> RenderResult:
    """Render GeoJSON files to SVG using settings overridden by CLI options."""
    config = PipelineConfig.from_settings(
        settings,
        target_width=width,
        target_height=height,
        margin=margin,
        layer_prefix=prefix,
        layer_priority=priority,
        property_to_color_map=parse_color_map(color_map),
        strict=strict,
        flip_y=flip_y,
        projection=projection.value,
        workers=workers,
        draw_frame=draw_frame,
    )
    return Pipeline(config).render(inputs, output, split_layers=split_layers)


def demo_solids() -> list[Solid]:
    """A small arrangement of boxes, one color per box."""
    return [
        cuboid(Point3(0.0, 0.0, 0.0), (2.0, 2.0, 2.0), Style(color="black")),
        cuboid(Point3(3.0, 0.5, 0.0), (1.0, 1.0, 3.0), Style(color="red")),
        cuboid(Point3(0.5, 3.0, 0.0), (3.0, 1.0, 1.0), Style(color="blue")),
    ]


def run_cube(
    *,
    output: Path,
    camera_position: str,
    target: str,
    projection: CameraProjection,
    occlusion: bool,
    width: float | None,
    height: float | None,
    margin: float | None,
) -> CubeResult:
    """Project the demo solids and write them as a layered SVG."""
    lens: PerspectiveProjection | OrthographicProjection
    if projection.value == "orthographic":
        lens = OrthographicProjection(left=-10, right=10, bottom=-10, top=10, near=0.0, far=1000)
    else:
        lens = PerspectiveProjection(fov_deg=45.0, near=0.1, far=1000.0)
    camera = Camera(
        position=parse_point(camera_position),
        target=parse_point(target),
        up=Point3(0.0, 0.0, 1.0),
        projection=lens,
    )

    objects = project_scene(demo_solids(), camera, ProjectionConfig(occlusion=occlusion))
    config = PipelineConfig.from_settings(
        settings,
        target_width=width,
        target_height=height,
        margin=margin,
        flip_y=False,
    )
    pipeline = Pipeline(config, run_id="cube")
    scene = pipeline.build_scene(objects)
    write_svg(scene, output, config.layer_prefix)
    layers = [layer.name for layer in scene.layers()]
    logger.info("Cube demo rendered", output=str(output), segments=len(scene))
    return CubeResult(output=output, segments=len(scene), layers=layers)
