"""GeoJSON ingestion for plotkit.

Example:
    from plotkit.geojson import IngestConfig, load_geojson

    objects = load_geojson("roads.geojson", IngestConfig(projection="mercator"))
"""

from plotkit.geojson.ingest import (
    IngestConfig,
    flatten_properties,
    load_geojson,
    parse_feature_collection,
    parse_geometry,
    resolve_color,
)
from plotkit.geojson.projections import (
    CoordinateProjection,
    LinearProjection,
    MercatorProjection,
    latitude_to_y,
    make_projection,
)

__all__ = [
    "CoordinateProjection",
    "IngestConfig",
    "LinearProjection",
    "MercatorProjection",
    "flatten_properties",
    "latitude_to_y",
    "load_geojson",
    "make_projection",
    "parse_feature_collection",
    "parse_geometry",
    "resolve_color",
]
