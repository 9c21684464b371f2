"""Unit tests for frame and region clipping."""

from __future__ import annotations

import pytest

from plotkit.clipping import clip_object, clip_segment_to_polygon, clip_shape, liang_barsky
from plotkit.exceptions import InvalidGeometry
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

FRAME = Frame(width=10, height=10)


def _seg(x1: float, y1: float, x2: float, y2: float) -> Segment2:
    return Segment2(Point2(x1, y1), Point2(x2, y2))


class TestLiangBarsky:
    """Tests for segment clipping."""

    def test_inside_segment_unchanged(self) -> None:
        """Test a segment inside the frame is returned as is."""
        seg = _seg(1, 1, 9, 9)
        assert liang_barsky(seg, FRAME) is seg

    def test_crossing_segment_clipped(self) -> None:
        """Test a segment crossing both sides is cut at the edges."""
        clipped = liang_barsky(_seg(-5, 5, 15, 5), FRAME)
        assert clipped == _seg(0, 5, 10, 5)

    def test_one_end_outside(self) -> None:
        """Test the inside endpoint is kept exactly."""
        clipped = liang_barsky(_seg(5, 5, 5, 20), FRAME)
        assert clipped is not None
        assert clipped.start == Point2(5, 5)
        assert clipped.end.y == pytest.approx(10.0)

    def test_outside_segment_dropped(self) -> None:
        """Test a segment that misses the frame."""
        assert liang_barsky(_seg(11, 0, 20, 5), FRAME) is None
        assert liang_barsky(_seg(-1, 12, 12, 11), FRAME) is None

    def test_clipped_endpoints_stay_on_frame(self) -> None:
        """Test computed endpoints are clamped onto the frame."""
        clipped = liang_barsky(_seg(-3, -7, 13, 17), FRAME)
        assert clipped is not None
        for point in clipped.points():
            assert FRAME.contains_point(point)


class TestClipShape:
    """Tests for clip_shape dispatch."""

    def test_points(self) -> None:
        """Test points inside (edges inclusive) survive."""
        assert clip_shape(Point2(10, 10), FRAME) == [Point2(10, 10)]
        assert clip_shape(Point2(11, 10), FRAME) == []

    def test_polyline_leaving_and_reentering(self) -> None:
        """Test a polyline that exits and comes back becomes two runs."""
        line = Polyline2.from_coords([(1, 1), (5, 1), (5, 20), (8, 20), (8, 1)])
        pieces = clip_shape(line, FRAME)
        assert len(pieces) == 2
        first, second = pieces
        assert isinstance(first, Polyline2)
        assert isinstance(second, Polyline2)
        assert first.points[:2] == (Point2(1, 1), Point2(5, 1))
        assert first.points[2].y == pytest.approx(10.0)
        assert second.points[-1] == Point2(8, 1)

    def test_polygon_inside_unchanged(self, unit_square: Polygon2) -> None:
        """Test a polygon inside the frame comes back as the same object."""
        assert clip_shape(unit_square, FRAME)[0] is unit_square

    def test_polygon_outside_dropped(self, unit_square: Polygon2) -> None:
        """Test a polygon outside the frame disappears."""
        far = Polygon2.from_coords([(20, 20), (21, 20), (21, 21)])
        assert clip_shape(far, FRAME) == []

    def test_triangle_clipped_to_window(self) -> None:
        """Test a triangle cut by a square window."""
        triangle = Polygon2.from_coords([(0, 0), (20, 0), (10, 20)])
        window = Frame(x=5, y=5, width=10, height=10)
        (clipped,) = clip_shape(triangle, window)
        assert isinstance(clipped, Polygon2)
        expected = Polygon2.from_coords(
            [(5, 5), (15, 5), (15, 10), (12.5, 15), (7.5, 15), (5, 10)]
        )
        assert clipped.equivalent(expected)

    def test_clipping_is_idempotent(self) -> None:
        """Test clipping an already clipped shape changes nothing."""
        triangle = Polygon2.from_coords([(0, 0), (20, 0), (10, 20)])
        window = Frame(x=5, y=5, width=10, height=10)
        once = clip_shape(triangle, window)
        twice = [piece for shape in once for piece in clip_shape(shape, window)]
        assert twice == once

    def test_multipolygon_partially_outside(self) -> None:
        """Test a donut cut by the frame edge keeps its hole."""
        donut = MultiPolygon2(
            (
                Polygon2.from_coords([(2, 2), (14, 2), (14, 8), (2, 8)]),
                Polygon2.from_coords([(4, 4), (6, 4), (6, 6), (4, 6)]),
            )
        )
        (clipped,) = clip_shape(donut, FRAME)
        assert isinstance(clipped, MultiPolygon2)
        assert clipped.area == pytest.approx(8 * 6 - 4)

    def test_zero_area_frame(self, unit_square: Polygon2) -> None:
        """Test a degenerate frame keeps no area."""
        line_frame = Frame(x=0.5, y=-1, width=0, height=3)
        assert clip_shape(unit_square, line_frame) == []

    @pytest.mark.parametrize(
        "coords",
        [
            [(1, 1), (3, 3), (3, 1), (1, 3)],
            [(1, 1), (30, 3), (30, 1), (1, 3)],
            [(20, 20), (23, 23), (23, 20), (20, 23)],
        ],
        ids=["inside", "crossing", "outside"],
    )
    def test_self_intersecting_polygon_rejected(self, coords: list[tuple[float, float]]) -> None:
        """Test a bowtie is invalid wherever it lies relative to the frame."""
        with pytest.raises(InvalidGeometry):
            clip_shape(Polygon2.from_coords(coords), FRAME)

    def test_invalid_ring_in_multipolygon_rejected(self, unit_square: Polygon2) -> None:
        """Test a bad ring inside an otherwise inside multi-polygon is reported."""
        bowtie = Polygon2.from_coords([(4, 4), (6, 6), (6, 4), (4, 6)])
        with pytest.raises(InvalidGeometry, match="Ring 1"):
            clip_shape(MultiPolygon2((unit_square, bowtie)), FRAME)


class TestClipObject:
    """Tests for clip_object."""

    def test_inside_object_identity(self, unit_square: Polygon2) -> None:
        """Test an object already inside is returned unchanged."""
        obj = PlotObject(unit_square, Style(color="red"))
        assert clip_object(obj, FRAME) == [obj]
        assert clip_object(obj, FRAME)[0] is obj

    def test_pieces_keep_style(self) -> None:
        """Test clipped pieces carry the original style and annotations."""
        obj = PlotObject(_seg(-5, 5, 15, 5), Style(color="blue"), (("id", "1"),))
        (piece,) = clip_object(obj, FRAME)
        assert piece.style == obj.style
        assert piece.annotations == obj.annotations
        assert piece.shape == _seg(0, 5, 10, 5)


class TestClipSegmentToPolygon:
    """Tests for clip_segment_to_polygon."""

    def test_keep_inside(self, unit_square: Polygon2) -> None:
        """Test the part of a segment inside a polygon."""
        (piece,) = clip_segment_to_polygon(_seg(-1, 0.5, 2, 0.5), unit_square, "inside")
        assert piece.start.x == pytest.approx(0.0)
        assert piece.end.x == pytest.approx(1.0)

    def test_keep_outside(self, unit_square: Polygon2) -> None:
        """Test the parts of a segment outside a polygon, in order."""
        pieces = clip_segment_to_polygon(_seg(-1, 0.5, 2, 0.5), unit_square, "outside")
        assert len(pieces) == 2
        assert pieces[0].start == Point2(-1, 0.5)
        assert pieces[0].end.x == pytest.approx(0.0)
        assert pieces[1].start.x == pytest.approx(1.0)
        assert pieces[1].end == Point2(2, 0.5)

    def test_boundary_kept_in_both_modes(self, unit_square: Polygon2) -> None:
        """Test a segment along the boundary is kept inside and outside."""
        edge = _seg(0, 0, 1, 0)
        assert clip_segment_to_polygon(edge, unit_square, "inside") == [edge]
        assert clip_segment_to_polygon(edge, unit_square, "outside") == [edge]

    def test_hole_splits_segment(self) -> None:
        """Test even-odd: a hole removes the middle of an inside segment."""
        donut = MultiPolygon2(
            (
                Polygon2.from_coords([(0, 0), (10, 0), (10, 10), (0, 10)]),
                Polygon2.from_coords([(4, 4), (6, 4), (6, 6), (4, 6)]),
            )
        )
        pieces = clip_segment_to_polygon(_seg(-1, 5, 11, 5), donut, "inside")
        assert [(p.start.x, p.end.x) for p in pieces] == [
            pytest.approx((0.0, 4.0)),
            pytest.approx((6.0, 10.0)),
        ]

    def test_invalid_keep(self, unit_square: Polygon2) -> None:
        """Test an unknown mode."""
        with pytest.raises(ValueError, match="keep"):
            clip_segment_to_polygon(_seg(0, 0, 1, 1), unit_square, "both")  # type: ignore[arg-type]
