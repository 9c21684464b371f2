"""Shared pytest fixtures and configuration."""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from plotkit.config import Settings
from plotkit.geometry import Polygon2
from plotkit.utils.logging import clear_correlation_context, configure_logging


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        TARGET_WIDTH=100.0,
        TARGET_HEIGHT=100.0,
        MARGIN=0.1,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def unit_square() -> Polygon2:
    """Counter-clockwise unit square at the origin."""
    return Polygon2.from_coords([(0, 0), (1, 0), (1, 1), (0, 1)])


def _feature(
    geometry: dict[str, Any] | None, properties: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Build a GeoJSON Feature."""
    return {"type": "Feature", "geometry": geometry, "properties": properties or {}}


def _feature_collection(*features: dict[str, Any]) -> dict[str, Any]:
    """Build a GeoJSON FeatureCollection."""
    return {"type": "FeatureCollection", "features": list(features)}


def _square_polygon(x: float, y: float, size: float) -> dict[str, Any]:
    """GeoJSON Polygon geometry for an axis-aligned square."""
    return {
        "type": "Polygon",
        "coordinates": [
            [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]
        ],
    }


@pytest.fixture
def write_geojson(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Write a document (dict or raw text) to a file under tmp_path."""

    def _write(name: str, document: Any) -> Path:
        path = tmp_path / name
        text = document if isinstance(document, str) else json.dumps(document)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def red_square_file(write_geojson: Callable[[str, Any], Path]) -> Path:
    """A single red 10x10 square."""
    return write_geojson(
        "red_square.geojson",
        _feature_collection(_feature(_square_polygon(0, 0, 10), {"color": "red"})),
    )
