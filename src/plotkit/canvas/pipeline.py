"""End-to-end rendering pipeline: GeoJSON files to layered SVG.

Stages run in a fixed order: ingest -> fit -> hatch -> clip -> layer ->
serialize. The per-object stages (hatch and clip) are pure, so they may run
on a thread pool; results are reassembled in input order, which keeps the
output independent of the worker count.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field

from plotkit.canvas.fitting import fit
from plotkit.canvas.scene import Scene
from plotkit.canvas.svg import frame_outline, write_layer_files, write_svg
from plotkit.clipping.frame_clip import clip_object
from plotkit.clipping.hatching import HatchConfig, hatch_object
from plotkit.config import Settings
from plotkit.exceptions import InvalidGeometry, PlotkitError
from plotkit.geojson.ingest import IngestConfig, load_geojson
from plotkit.geojson.projections import ProjectionName
from plotkit.geometry.objects import PlotObject
from plotkit.geometry.primitives import Frame
from plotkit.geometry.tolerance import Tolerance
from plotkit.utils.logging import get_logger, set_correlation_context

logger = get_logger(__name__)


class PipelineConfig(BaseModel):
    """Configuration for a rendering run.

    Attributes:
        target_width: Canvas width in output units.
        target_height: Canvas height in output units.
        margin: Fraction of each canvas dimension left empty on each side.
        property_to_color_map: Ordered property rules -> color.
        layer_priority: Layer names emitted first, in this order.
        layer_prefix: Prefix of SVG group ids and layer file names.
        flip_y: Mirror vertically while fitting (GeoJSON y grows upward).
        strict: Abort the run on the first failing input file.
        skip_invalid: Drop objects with invalid geometry instead of failing.
        workers: Thread pool size for per-object stages (1 = sequential).
        relative_epsilon: Relative geometric tolerance.
        hatching: Layer name -> hatch settings for filled regions.
        draw_frame: Add a border rectangle on its own layer.
    """

    target_width: float = Field(..., gt=0)
    target_height: float = Field(..., gt=0)
    margin: float = Field(default=0.05, ge=0.0, lt=0.5)
    property_to_color_map: dict[str, str] = Field(default_factory=dict)
    layer_priority: list[str] = Field(default_factory=list)
    layer_prefix: str = "layer"
    flip_y: bool = True
    strict: bool = False
    skip_invalid: bool = False
    workers: int = Field(default=1, ge=1)
    relative_epsilon: float = Field(default=1e-9, gt=0.0)
    hatching: dict[str, HatchConfig] = Field(default_factory=dict)
    draw_frame: bool = False

    # Ingestion
    projection: ProjectionName = "linear"
    scale_x: float = 1.0
    scale_y: float = 1.0
    color_property: str | None = "color"
    layer_property: str | None = "layer"
    default_color: str = "black"
    thickness: float = Field(default=1.0, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: object) -> Self:
        """Build a config from environment settings, then apply overrides."""
        values: dict[str, object] = {
            "target_width": settings.TARGET_WIDTH,
            "target_height": settings.TARGET_HEIGHT,
            "margin": settings.MARGIN,
            "layer_prefix": settings.LAYER_PREFIX,
            "default_color": settings.DEFAULT_COLOR,
            "workers": settings.WORKERS,
            "relative_epsilon": settings.RELATIVE_EPSILON,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)

    @property
    def target_frame(self) -> Frame:
        return Frame(width=self.target_width, height=self.target_height)

    @property
    def tolerance(self) -> Tolerance:
        return Tolerance(self.relative_epsilon)

    def ingest_config(self) -> IngestConfig:
        return IngestConfig(
            projection=self.projection,
            scale_x=self.scale_x,
            scale_y=self.scale_y,
            color_property=self.color_property,
            layer_property=self.layer_property,
            property_to_color_map=self.property_to_color_map,
            default_color=self.default_color,
            thickness=self.thickness,
        )


@dataclass(frozen=True)
class FileFailure:
    """An input file that could not be ingested."""

    path: Path
    error: str
    kind: str


@dataclass
class IngestResult:
    """Objects from every successfully parsed file, plus failures."""

    objects: list[PlotObject] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)
    files_ok: int = 0


@dataclass
class RenderResult:
    """Summary of a rendering run."""

    run_id: str
    output: Path
    layers: list[str]
    object_counts: dict[str, int]
    files: list[Path] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def total_objects(self) -> int:
        return sum(self.object_counts.values())


class Pipeline:
    """Runs ingestion, fitting, clipping and serialization.

    Usage:
        pipeline = Pipeline(PipelineConfig(target_width=100, target_height=100))
        result = pipeline.render(["map.geojson"], "map.svg")
    """

    def __init__(self, config: PipelineConfig, run_id: str | None = None) -> None:
        self.config = config
        self.run_id = run_id or datetime.now(UTC).strftime("render_%Y%m%d_%H%M%S")

    def ingest(self, paths: Iterable[Path | str]) -> IngestResult:
        """Load every input file.

        In batch mode a failing file is logged, recorded and skipped; in
        strict mode the first failure is re-raised.

        Raises:
            PlotkitError: On the first failing file, in strict mode.
        """
        ingest_config = self.config.ingest_config()
        result = IngestResult()
        for path in map(Path, paths):
            set_correlation_context(run_id=self.run_id, source=str(path))
            try:
                objects = load_geojson(path, ingest_config)
            except PlotkitError as e:
                if self.config.strict:
                    raise
                logger.warning("Skipping input file", error=str(e), kind=type(e).__name__)
                result.failures.append(FileFailure(path, str(e), type(e).__name__))
                continue
            result.objects.extend(objects)
            result.files_ok += 1
        return result

    def _finish_object(self, item: tuple[int, PlotObject]) -> list[PlotObject]:
        """Hatch (if configured for the layer) and clip one fitted object."""
        index, obj = item
        set_correlation_context(run_id=self.run_id, object_index=index)
        frame = self.config.target_frame
        tolerance = self.config.tolerance
        try:
            hatch = self.config.hatching.get(obj.style.layer)
            pieces = hatch_object(obj, hatch, tolerance) if hatch else [obj]
            clipped: list[PlotObject] = []
            for piece in pieces:
                clipped.extend(clip_object(piece, frame, tolerance))
            return clipped
        except InvalidGeometry as e:
            if not self.config.skip_invalid:
                raise e.with_context(index=index) from e
            logger.warning("Skipping invalid object", index=index, error=str(e))
            return []

    def build_scene(self, objects: Sequence[PlotObject]) -> Scene:
        """Fit, hatch and clip objects into a Scene.

        Raises:
            InvalidGeometry: If an object cannot be clipped and
                ``skip_invalid`` is False; carries the object index.
        """
        fitted = fit(
            objects,
            self.config.target_frame,
            self.config.margin,
            flip_y=self.config.flip_y,
        )
        logger.info("Fitted objects", objects=len(objects), scale=fitted.scale)

        items = list(enumerate(fitted.objects))
        if self.config.workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                # map() yields results in submission order.
                finished = list(pool.map(self._finish_object, items))
        else:
            finished = [self._finish_object(item) for item in items]

        scene = Scene(self.config.target_frame)
        for pieces in finished:
            scene.extend(pieces)
        if self.config.draw_frame:
            scene.add(frame_outline(self.config.target_frame, self.config.margin / 2))
        return scene

    def render(
        self,
        paths: Iterable[Path | str],
        output: Path | str,
        *,
        split_layers: bool = False,
    ) -> RenderResult:
        """Render GeoJSON inputs to SVG.

        Args:
            paths: Input GeoJSON files.
            output: Output SVG path. With ``split_layers`` the per-layer
                files are written next to it.
            split_layers: Also write one file per layer.

        Returns:
            RenderResult describing the written output.
        """
        output = Path(output)
        ingested = self.ingest(paths)
        scene = self.build_scene(ingested.objects)
        layers = scene.layers(self.config.layer_priority)

        write_svg(scene, output, self.config.layer_prefix, self.config.layer_priority)
        files = [output]
        if split_layers:
            files.extend(
                write_layer_files(
                    scene,
                    output.parent,
                    self.config.layer_prefix,
                    self.config.layer_priority,
                )
            )

        counts = {layer.name: len(layer) for layer in layers}
        logger.info(
            "Render complete",
            output=str(output),
            layers=len(layers),
            objects=sum(counts.values()),
            failures=len(ingested.failures),
        )
        return RenderResult(
            run_id=self.run_id,
            output=output,
            layers=[layer.name for layer in layers],
            object_counts=counts,
            files=files,
            failures=ingested.failures,
        )
