"""Unit tests for SVG serialization and file output."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from plotkit.canvas import (
    Scene,
    frame_outline,
    sanitize_id,
    serialize,
    write_layer_files,
    write_svg,
)
from plotkit.canvas.svg import path_data
from plotkit.exceptions import PlotIOError
from plotkit.geometry import (
    Frame,
    MultiPolygon2,
    PlotObject,
    Point2,
    Polygon2,
    Polyline2,
    Segment2,
    Style,
)

CANVAS = Frame(width=100, height=100)


def _rect(x: float, y: float, w: float, h: float) -> Polygon2:
    return Polygon2.from_coords([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])


def _scene(*objects: PlotObject) -> Scene:
    return Scene(CANVAS, objects)


class TestSanitizeId:
    """Tests for sanitize_id."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("red", "red"),
            ("#ff0000", "ff0000"),
            ("rgb(1, 2, 3)", "rgb_1_2_3"),
            ("main road", "main_road"),
            ("../etc", "etc"),
            ("###", "layer"),
        ],
    )
    def test_sanitize(self, name: str, expected: str) -> None:
        """Test unsafe characters collapse to underscores."""
        assert sanitize_id(name) == expected


class TestPathData:
    """Tests for path_data."""

    def test_segment(self) -> None:
        """Test a segment is an open two-point path."""
        assert path_data(Segment2(Point2(0, 0), Point2(1.5, 2)), 3) == (
            "M0.000,0.000 L1.500,2.000"
        )

    def test_polyline(self) -> None:
        """Test a polyline stays open."""
        line = Polyline2.from_coords([(0, 0), (1, 0), (1, 1)])
        assert path_data(line, 1) == "M0.0,0.0 L1.0,0.0 L1.0,1.0"

    def test_polygon_closed(self) -> None:
        """Test a polygon ends with Z."""
        assert path_data(_rect(0, 0, 1, 1), 0).endswith(" Z")

    def test_negative_zero_normalized(self) -> None:
        """Test values that round to zero print without a sign."""
        segment = Segment2(Point2(-0.0, -0.0001), Point2(1, 1))
        assert path_data(segment, 3).startswith("M0.000,0.000 ")

    def test_multipolygon_one_subpath_per_ring(self) -> None:
        """Test each ring becomes its own closed subpath."""
        donut = MultiPolygon2((_rect(0, 0, 10, 10), _rect(4, 4, 2, 2)))
        d = path_data(donut, 0)
        assert d.count("M") == 2
        assert d.count("Z") == 2

    def test_point_rejected(self) -> None:
        """Test points have no path form."""
        with pytest.raises(TypeError):
            path_data(Point2(0, 0), 3)  # type: ignore[arg-type]


class TestSerialize:
    """Tests for serialize."""

    def test_group_per_layer(self) -> None:
        """Test one group per layer, named with the prefix."""
        svg = serialize(
            _scene(
                PlotObject(_rect(10, 10, 80, 80), Style(color="red")),
                PlotObject(Segment2(Point2(0, 0), Point2(5, 5)), Style(color="blue")),
            )
        )
        assert 'id="layer_red"' in svg
        assert 'id="layer_blue"' in svg
        assert svg.index("layer_red") < svg.index("layer_blue")
        assert 'd="M10.000,10.000 L90.000,10.000 L90.000,90.000 L10.000,90.000 Z"' in svg
        assert 'stroke="red"' in svg
        assert 'fill="none"' in svg

    def test_priority_and_prefix(self) -> None:
        """Test priority reorders groups and prefix renames them."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(color="red")),
            PlotObject(Point2(2, 2), Style(color="blue")),
        )
        svg = serialize(scene, prefix="pen", priority=["blue"])
        assert svg.index('id="pen_blue"') < svg.index('id="pen_red"')

    def test_canvas_size_and_viewbox(self) -> None:
        """Test the document is sized in millimetres with a matching viewBox."""
        svg = serialize(_scene(PlotObject(Point2(1, 1))))
        assert 'width="100.000mm"' in svg
        assert 'height="100.000mm"' in svg
        assert 'viewBox="0.000 0.000 100.000 100.000"' in svg

    def test_point_is_circle(self) -> None:
        """Test points are drawn as small circles."""
        svg = serialize(_scene(PlotObject(Point2(3, 4), Style(thickness=0.5))))
        assert "<circle" in svg
        assert 'cx="3.000"' in svg
        assert 'r="0.500"' in svg

    def test_multipolygon_even_odd(self) -> None:
        """Test rings with holes fill with the even-odd rule."""
        donut = MultiPolygon2((_rect(0, 0, 10, 10), _rect(4, 4, 2, 2)))
        svg = serialize(_scene(PlotObject(donut)))
        assert 'fill-rule="evenodd"' in svg

    def test_stroke_width(self) -> None:
        """Test the thickness becomes the stroke width."""
        svg = serialize(_scene(PlotObject(_rect(0, 0, 1, 1), Style(thickness=0.35))))
        assert 'stroke-width="0.350"' in svg

    def test_duplicate_sanitized_ids_get_suffix(self) -> None:
        """Test layers that sanitize to the same id stay distinct."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(layer="a b")),
            PlotObject(Point2(2, 2), Style(layer="a-b")),
            PlotObject(Point2(3, 3), Style(layer="a_b")),
        )
        svg = serialize(scene)
        assert 'id="layer_a_b"' in svg
        assert 'id="layer_a-b"' in svg
        assert 'id="layer_a_b_2"' in svg

    def test_deterministic(self) -> None:
        """Test identical scenes serialize to identical text."""
        objects = [
            PlotObject(_rect(1, 1, 3, 3), Style(color="red")),
            PlotObject(Point2(5, 5), Style(color="green")),
        ]
        assert serialize(_scene(*objects)) == serialize(_scene(*objects))

    def test_empty_scene(self) -> None:
        """Test an empty scene is still a valid document."""
        svg = serialize(_scene())
        assert svg.startswith("<svg")
        assert "<g" not in svg

    def test_all_layer_does_not_take_combined_id(self) -> None:
        """Test a layer named all is suffixed away from the combined file id."""
        svg = serialize(_scene(PlotObject(Point2(1, 1), Style(layer="all"))))
        assert 'id="layer_all_2"' in svg
        assert 'id="layer_all"' not in svg


class TestWriteSvg:
    """Tests for write_svg."""

    def test_writes_file(self, tmp_path: Path) -> None:
        """Test the document lands at the path with no temp file left."""
        path = tmp_path / "out" / "plot.svg"
        scene = _scene(PlotObject(_rect(1, 1, 2, 2), Style(color="red")))
        assert write_svg(scene, path) == path
        assert path.read_text(encoding="utf-8") == serialize(scene)
        assert list(path.parent.glob(".*.tmp")) == []

    def test_overwrites_existing(self, tmp_path: Path) -> None:
        """Test an existing file is replaced."""
        path = tmp_path / "plot.svg"
        path.write_text("old", encoding="utf-8")
        write_svg(_scene(PlotObject(Point2(1, 1))), path)
        assert path.read_text(encoding="utf-8").startswith("<svg")

    def test_unwritable_target(self, tmp_path: Path) -> None:
        """Test writing over a directory is an I/O error."""
        target = tmp_path / "taken"
        target.mkdir()
        with pytest.raises(PlotIOError) as exc_info:
            write_svg(_scene(PlotObject(Point2(1, 1))), target)
        assert exc_info.value.path == target
        assert list(tmp_path.glob(".*.tmp")) == []

    def test_concurrent_writers_same_path(self, tmp_path: Path) -> None:
        """Test parallel writes to one path all land and leave no temp files."""
        path = tmp_path / "plot.svg"
        scene = _scene(PlotObject(_rect(1, 1, 2, 2), Style(color="red")))
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: write_svg(scene, path), range(16)))
        assert results == [path] * 16
        assert path.read_text(encoding="utf-8") == serialize(scene)
        assert list(tmp_path.glob(".*.tmp")) == []


class TestWriteLayerFiles:
    """Tests for write_layer_files."""

    def test_combined_then_per_layer(self, tmp_path: Path) -> None:
        """Test file names and order."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(color="red")),
            PlotObject(Point2(2, 2), Style(color="blue")),
        )
        files = write_layer_files(scene, tmp_path, priority=["blue"])
        assert [f.name for f in files] == ["layer_all.svg", "layer_blue.svg", "layer_red.svg"]
        assert all(f.exists() for f in files)

    def test_layer_file_holds_one_group(self, tmp_path: Path) -> None:
        """Test each per-layer file carries only its own group."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(color="red")),
            PlotObject(Point2(2, 2), Style(color="blue")),
        )
        _, red, _ = write_layer_files(scene, tmp_path)
        text = red.read_text(encoding="utf-8")
        assert 'id="layer_red"' in text
        assert "layer_blue" not in text

    def test_layer_named_all_keeps_combined_file(self, tmp_path: Path) -> None:
        """Test a layer named all neither overwrites nor shadows the combined file."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(layer="red")),
            PlotObject(Point2(2, 2), Style(layer="all")),
        )
        files = write_layer_files(scene, tmp_path)
        assert [f.name for f in files] == ["layer_all.svg", "layer_red.svg", "layer_all_2.svg"]
        combined = files[0].read_text(encoding="utf-8")
        assert 'id="layer_red"' in combined
        assert 'id="layer_all_2"' in combined
        assert 'id="layer_all_2"' in files[2].read_text(encoding="utf-8")

    def test_suffixed_layer_file_matches_group_id(self, tmp_path: Path) -> None:
        """Test a suffixed layer keeps the same id in its file name and group."""
        scene = _scene(
            PlotObject(Point2(1, 1), Style(layer="red")),
            PlotObject(Point2(2, 2), Style(layer="red!")),
        )
        _, _, second = write_layer_files(scene, tmp_path)
        assert second.name == "layer_red_2.svg"
        text = second.read_text(encoding="utf-8")
        assert 'id="layer_red_2"' in text
        assert 'id="layer_red"' not in text


class TestFrameOutline:
    """Tests for frame_outline."""

    def test_border_on_frame_layer(self) -> None:
        """Test the border is a rectangle on its own layer."""
        border = frame_outline(CANVAS, margin=0.1)
        assert border.style.layer == "frame"
        assert border.annotation("role") == "frame"
        assert isinstance(border.shape, Polygon2)
        assert border.shape.area == pytest.approx(6400.0)

    def test_custom_style(self) -> None:
        """Test a caller-supplied style is used as is."""
        border = frame_outline(CANVAS, style=Style(color="gray", layer="border"))
        assert border.style.layer == "border"
        assert border.shape.area == pytest.approx(10000.0)
