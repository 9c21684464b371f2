"""Canvas fitting, layering, serialization and the rendering pipeline.

Key Components:
    - Fitting: fit, fit_transform, clip_to_frame
    - Layers: Layer, bucket_by_layer
    - Scene: ordered objects on a target frame
    - SVG: serialize, write_svg, write_layer_files, frame_outline
    - Pipeline: PipelineConfig, Pipeline, RenderResult
"""

from plotkit.canvas.fitting import FitResult, clip_to_frame, fit, fit_transform
from plotkit.canvas.layers import Layer, bucket_by_layer
from plotkit.canvas.pipeline import (
    FileFailure,
    IngestResult,
    Pipeline,
    PipelineConfig,
    RenderResult,
)
from plotkit.canvas.scene import Scene
from plotkit.canvas.svg import (
    frame_outline,
    render_layers,
    sanitize_id,
    serialize,
    write_layer_files,
    write_svg,
)

__all__ = [
    "FileFailure",
    "FitResult",
    "IngestResult",
    "Layer",
    "Pipeline",
    "PipelineConfig",
    "RenderResult",
    "Scene",
    "bucket_by_layer",
    "clip_to_frame",
    "fit",
    "fit_transform",
    "frame_outline",
    "render_layers",
    "sanitize_id",
    "serialize",
    "write_layer_files",
    "write_svg",
]
