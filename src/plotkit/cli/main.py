"""plotkit CLI - layered, plot-ready SVG from GeoJSON and 3D scenes.

Command-line interface for rendering GeoJSON files and the 3D demo.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from plotkit import __version__
from plotkit.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="plotkit",
    help="plotkit: layered, plot-ready vector drawings for pen plotters",
    add_completion=False,
)


class GeoProjection(str, Enum):
    """Coordinate projection for GeoJSON input."""

    linear = "linear"
    mercator = "mercator"


class CameraProjection(str, Enum):
    """Camera projection for 3D scenes."""

    perspective = "perspective"
    orthographic = "orthographic"


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"plotkit {__version__}")


@app.command()
def render(  # noqa: PLR0913
    inputs: Annotated[
        list[Path],
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="GeoJSON Feature Collection files",
        ),
    ],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output SVG path")],
    width: Annotated[
        float | None, typer.Option("--width", help="Canvas width (default: TARGET_WIDTH)")
    ] = None,
    height: Annotated[
        float | None, typer.Option("--height", help="Canvas height (default: TARGET_HEIGHT)")
    ] = None,
    margin: Annotated[
        float | None, typer.Option("--margin", help="Margin as a fraction of each side")
    ] = None,
    prefix: Annotated[
        str | None, typer.Option("--prefix", help="Layer group id prefix")
    ] = None,
    priority: Annotated[
        list[str] | None,
        typer.Option("--priority", help="Layer drawn first (repeatable, in order)"),
    ] = None,
    color_map: Annotated[
        list[str] | None,
        typer.Option(
            "--color-map",
            help="Property rule to color, as NAME:COLOR or NAME=VALUE:COLOR (repeatable)",
        ),
    ] = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Abort on the first failing input file")
    ] = False,
    split_layers: Annotated[
        bool, typer.Option("--split-layers", help="Also write one SVG per layer")
    ] = False,
    flip_y: Annotated[
        bool, typer.Option("--flip-y/--no-flip-y", help="Mirror vertically (north up)")
    ] = True,
    projection: Annotated[
        GeoProjection, typer.Option("--projection", help="Coordinate projection")
    ] = GeoProjection.linear,
    workers: Annotated[
        int | None, typer.Option("--workers", "-w", min=1, help="Per-object worker threads")
    ] = None,
    draw_frame: Annotated[
        bool, typer.Option("--frame", help="Draw a border on its own layer")
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Render GeoJSON files to a layered SVG."""
    from plotkit.cli.runners import run_render  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)
    logger.info("Starting render", inputs=[str(p) for p in inputs], output=str(output))

    try:
        result = run_render(
            inputs=inputs,
            output=output,
            width=width,
            height=height,
            margin=margin,
            prefix=prefix,
            priority=priority or [],
            color_map=color_map or [],
            strict=strict,
            split_layers=split_layers,
            flip_y=flip_y,
            projection=projection,
            workers=workers,
            draw_frame=draw_frame,
        )

        if json_output:
            output_data = {
                "output": str(result.output),
                "files": [str(p) for p in result.files],
                "layers": result.object_counts,
                "failures": [
                    {"path": str(f.path), "error": f.error, "kind": f.kind}
                    for f in result.failures
                ],
            }
            typer.echo(json.dumps(output_data, indent=2))
        else:
            typer.echo(f"Wrote {result.output} ({result.total_objects} objects)")
            for name, count in result.object_counts.items():
                typer.echo(f"  {name}: {count}")
            for failure in result.failures:
                typer.echo(f"Skipped {failure.path}: {failure.error}", err=True)

        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Render failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def cube(  # noqa: PLR0913
    output: Annotated[Path, typer.Option("--output", "-o", help="Output SVG path")] = Path(
        "cube.svg"
    ),
    camera: Annotated[
        str, typer.Option("--camera", help="Camera position as x,y,z")
    ] = "10,-8,6",
    target: Annotated[str, typer.Option("--target", help="Look-at point as x,y,z")] = "1.5,1.5,1",
    projection: Annotated[
        CameraProjection, typer.Option("--projection", help="Camera projection")
    ] = CameraProjection.perspective,
    occlusion: Annotated[
        bool, typer.Option("--occlusion/--no-occlusion", help="Remove hidden lines")
    ] = True,
    width: Annotated[float | None, typer.Option("--width", help="Canvas width")] = None,
    height: Annotated[float | None, typer.Option("--height", help="Canvas height")] = None,
    margin: Annotated[float | None, typer.Option("--margin", help="Margin fraction")] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Render a few boxes through the 3D projection pipeline."""
    from plotkit.cli.runners import run_cube  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        result = run_cube(
            output=output,
            camera_position=camera,
            target=target,
            projection=projection,
            occlusion=occlusion,
            width=width,
            height=height,
            margin=margin,
        )
        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "output": str(result.output),
                        "segments": result.segments,
                        "layers": result.layers,
                    },
                    indent=2,
                )
            )
        else:
            typer.echo(f"Wrote {result.output} ({result.segments} segments)")
        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Cube demo failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


if __name__ == "__main__":  # pragma: no cover
    app()
