"""GeoJSON ingestion: Feature Collections to styled plot objects.

Supported geometry types are Point, LineString, Polygon and MultiPolygon.
Polygon holes (and the members of a MultiPolygon) become rings of a
:class:`MultiPolygon2`, which is read with the even-odd convention.

A file is parsed completely or not at all: the first malformed feature
aborts the file with an error that names the file and the feature index.
"""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from plotkit.exceptions import InvalidGeometry, ParseError, PlotIOError, UnsupportedGeometry
from plotkit.geojson.projections import CoordinateProjection, ProjectionName, make_projection
from plotkit.geometry.objects import Annotations, PlotObject, Shape, Style
from plotkit.geometry.primitives import MultiPolygon2, Point2, Polygon2, Polyline2
from plotkit.utils.logging import get_logger

logger = get_logger(__name__)


class IngestConfig(BaseModel, frozen=True):
    """How GeoJSON features are turned into styled objects.

    Attributes:
        projection: Coordinate projection, ``linear`` or ``mercator``.
        scale_x: Longitude scale factor (linear projection only).
        scale_y: Latitude scale factor (linear projection only).
        color_property: Property whose value is used directly as the color.
        layer_property: Property whose value names the layer; defaults to
            the color when absent.
        property_to_color_map: Ordered rules mapping properties to colors.
            A key ``"name"`` matches when the property is present, a key
            ``"name=value"`` when it has that value. The first match wins.
        default_color: Color used when nothing else matches.
        thickness: Stroke width given to every ingested object.
    """

    projection: ProjectionName = Field(default="linear", description="Coordinate projection")
    scale_x: float = Field(default=1.0, description="Longitude scale factor")
    scale_y: float = Field(default=1.0, description="Latitude scale factor")
    color_property: str | None = Field(default="color", description="Direct color property")
    layer_property: str | None = Field(default="layer", description="Direct layer property")
    property_to_color_map: dict[str, str] = Field(
        default_factory=dict, description="Property rule -> color"
    )
    default_color: str = Field(default="black", description="Fallback color")
    thickness: float = Field(default=1.0, gt=0, description="Stroke width")


def flatten_properties(value: Any, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten a properties object into ``(key, value)`` string pairs.

    Nested objects use dotted keys, arrays use their index; nulls are
    dropped and booleans are written in JSON spelling.
    """
    pairs: list[tuple[str, str]] = []
    if isinstance(value, Mapping):
        items: Sequence[tuple[str, Any]] = [(str(k), v) for k, v in value.items()]
    elif isinstance(value, list):
        items = [(str(i), v) for i, v in enumerate(value)]
    else:
        return pairs
    for key, item in items:
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(item, Mapping | list):
            pairs.extend(flatten_properties(item, full_key))
        elif item is None:
            continue
        elif isinstance(item, bool):
            pairs.append((full_key, "true" if item else "false"))
        else:
            pairs.append((full_key, str(item)))
    return pairs


def resolve_color(annotations: Annotations, config: IngestConfig) -> str:
    """Pick a color from flattened properties."""
    props = dict(annotations)
    if config.color_property and config.color_property in props:
        return props[config.color_property]
    for rule, color in config.property_to_color_map.items():
        name, sep, expected = rule.partition("=")
        if name not in props:
            continue
        if not sep or props[name] == expected:
            return color
    return config.default_color


def _style_for(annotations: Annotations, config: IngestConfig) -> Style:
    color = resolve_color(annotations, config)
    props = dict(annotations)
    layer = props.get(config.layer_property, "") if config.layer_property else ""
    return Style(color=color, layer=layer, thickness=config.thickness)


def _position(value: Any, projection: CoordinateProjection) -> Point2:
    if not isinstance(value, list) or len(value) < 2:
        raise ParseError(f"Position must be an array of at least 2 numbers, got {value!r}")
    lon, lat = value[0], value[1]
    for number in (lon, lat):
        if isinstance(number, bool) or not isinstance(number, int | float):
            raise ParseError(f"Position must contain numbers, got {value!r}")
    try:
        return projection.project(float(lon), float(lat))
    except ValueError as e:
        raise ParseError(str(e)) from e


def _positions(value: Any, projection: CoordinateProjection) -> tuple[Point2, ...]:
    if not isinstance(value, list):
        raise ParseError(f"Expected an array of positions, got {type(value).__name__}")
    return tuple(_position(p, projection) for p in value)


def _rings(value: Any, projection: CoordinateProjection) -> list[Polygon2]:
    if not isinstance(value, list) or not value:
        raise ParseError("Polygon coordinates must be a non-empty array of rings")
    return [Polygon2(_positions(ring, projection)) for ring in value]


def parse_geometry(geometry: Mapping[str, Any], projection: CoordinateProjection) -> Shape:
    """Convert one GeoJSON geometry object to a shape.

    Raises:
        ParseError: If ``type`` or ``coordinates`` is missing or malformed.
        UnsupportedGeometry: For geometry types other than Point,
            LineString, Polygon and MultiPolygon.
        InvalidGeometry: If a line or ring is degenerate.
    """
    geometry_type = geometry.get("type")
    if not isinstance(geometry_type, str):
        raise ParseError("Geometry is missing its 'type'")
    if geometry_type not in ("Point", "LineString", "Polygon", "MultiPolygon"):
        raise UnsupportedGeometry(geometry_type)
    if "coordinates" not in geometry:
        raise ParseError(f"{geometry_type} geometry is missing 'coordinates'")
    coords = geometry["coordinates"]

    match geometry_type:
        case "Point":
            return _position(coords, projection)
        case "LineString":
            return Polyline2(_positions(coords, projection))
        case "Polygon":
            rings = _rings(coords, projection)
            return rings[0] if len(rings) == 1 else MultiPolygon2(tuple(rings))
        case _:
            if not isinstance(coords, list) or not coords:
                raise ParseError("MultiPolygon coordinates must be a non-empty array")
            rings = [ring for polygon in coords for ring in _rings(polygon, projection)]
            return rings[0] if len(rings) == 1 else MultiPolygon2(tuple(rings))


def _features(document: Any) -> list[Any]:
    if not isinstance(document, Mapping):
        raise ParseError("GeoJSON document must be an object")
    doc_type = document.get("type")
    if doc_type == "Feature":
        return [document]
    if doc_type != "FeatureCollection":
        raise ParseError(f"Expected a FeatureCollection, got type {doc_type!r}")
    features = document.get("features")
    if not isinstance(features, list):
        raise ParseError("FeatureCollection is missing its 'features' array")
    return features


def parse_feature_collection(
    document: Any,
    config: IngestConfig | None = None,
    source: Path | str | None = None,
) -> list[PlotObject]:
    """Convert a parsed GeoJSON document into plot objects.

    Args:
        document: Decoded JSON (a FeatureCollection, or a single Feature).
        config: Styling and projection options.
        source: File the document came from, attached to errors.

    Returns:
        One object per supported feature, in document order. Features with
        a null geometry are skipped.

    Raises:
        ParseError: If the document or any feature is malformed.
        UnsupportedGeometry: If any feature has an unsupported type.
        InvalidGeometry: If any line or ring is degenerate.
    """
    config = config or IngestConfig()
    projection = make_projection(config.projection, config.scale_x, config.scale_y)
    try:
        features = _features(document)
    except ParseError as e:
        raise e.with_context(path=source) from None

    objects: list[PlotObject] = []
    stats: Counter[str] = Counter()
    skipped = 0
    for index, feature in enumerate(features):
        try:
            if not isinstance(feature, Mapping) or "geometry" not in feature:
                raise ParseError("Feature must be an object with a 'geometry' member")
            geometry = feature["geometry"]
            if geometry is None:
                skipped += 1
                logger.debug("Skipping feature without geometry", index=index)
                continue
            if not isinstance(geometry, Mapping):
                raise ParseError("Feature geometry must be an object or null")
            shape = parse_geometry(geometry, projection)
        except (ParseError, UnsupportedGeometry, InvalidGeometry) as e:
            raise e.with_context(path=source, index=index) from e

        annotations = tuple(flatten_properties(feature.get("properties") or {}))
        objects.append(PlotObject(shape, _style_for(annotations, config), annotations))
        stats[str(geometry["type"])] += 1

    logger.info(
        "Parsed GeoJSON",
        source=str(source) if source else None,
        features=len(features),
        objects=len(objects),
        skipped_null_geometry=skipped,
        **{f"count_{k.lower()}": v for k, v in sorted(stats.items())},
    )
    return objects


def load_geojson(path: Path | str, config: IngestConfig | None = None) -> list[PlotObject]:
    """Read and parse a GeoJSON file.

    Raises:
        PlotIOError: If the file cannot be read.
        ParseError: If the file is not valid JSON or not valid GeoJSON.
        UnsupportedGeometry: If a feature has an unsupported geometry type.
        InvalidGeometry: If a feature has a degenerate line or ring.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PlotIOError(f"Cannot read input: {e.strerror or e}", path) from e
    except UnicodeDecodeError as e:
        raise ParseError(f"Input is not UTF-8: {e.reason}", path) from e

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg} at line {e.lineno}", path) from e

    return parse_feature_collection(document, config, source=path)
