"""CLI module for plotkit.

Provides the command-line interface for rendering GeoJSON files and the
3D projection demo.
"""

from __future__ import annotations

from plotkit.cli.main import CameraProjection, GeoProjection, app

__all__ = ["CameraProjection", "GeoProjection", "app"]
