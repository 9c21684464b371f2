"""Unit tests for canvas fitting and frame clipping."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from plotkit.canvas import clip_to_frame, fit, fit_transform
from plotkit.exceptions import InvalidGeometry
from plotkit.geometry import (
    Affine,
    Frame,
    PlotObject,
    Point2,
    Polygon2,
    Segment2,
    Style,
    bounding_box,
)

CANVAS = Frame(width=100, height=100)


def _rect(x: float, y: float, w: float, h: float) -> Polygon2:
    return Polygon2.from_coords([(x, y), (x + w, y), (x + w, y + h), (x, y + h)])


class TestFit:
    """Tests for fit()."""

    def test_square_fills_inset_frame(self) -> None:
        """Test a 10x10 square lands on [10, 90] with a 10% margin."""
        result = fit([PlotObject(_rect(0, 0, 10, 10))], CANVAS, margin=0.1)
        assert bounding_box(result.objects).to_tuple() == pytest.approx((10, 10, 80, 80))
        assert result.scale == pytest.approx(8.0)

    def test_flip_y_mirrors_vertically(self) -> None:
        """Test the highest input point ends at the top of the canvas."""
        line = Segment2(Point2(0, 0), Point2(0, 10))
        (fitted,) = fit([PlotObject(line)], CANVAS, margin=0.1, flip_y=True).objects
        assert isinstance(fitted.shape, Segment2)
        assert fitted.shape.start.y == pytest.approx(90.0)
        assert fitted.shape.end.y == pytest.approx(10.0)

    def test_aspect_ratio_preserved(self) -> None:
        """Test a wide drawing is limited by its width and centered vertically."""
        result = fit([PlotObject(_rect(0, 0, 40, 10))], CANVAS, margin=0.0)
        bbox = bounding_box(result.objects)
        assert bbox.width == pytest.approx(100.0)
        assert bbox.height == pytest.approx(25.0)
        assert bbox.center.y == pytest.approx(50.0)

    def test_input_order_and_styles_kept(self) -> None:
        """Test objects come back in order with their styles."""
        objects = [
            PlotObject(Point2(0, 0), Style(color="red")),
            PlotObject(Point2(5, 5), Style(color="blue")),
        ]
        result = fit(objects, CANVAS)
        assert [o.style.color for o in result.objects] == ["red", "blue"]

    def test_single_point_is_centered(self) -> None:
        """Test a zero-size drawing is centered without scaling."""
        (obj,) = fit([PlotObject(Point2(3, 3))], CANVAS).objects
        assert obj.shape == Point2(50, 50)

    def test_vertical_line_scaled_by_height(self) -> None:
        """Test a zero-width drawing scales by its height."""
        line = Segment2(Point2(7, 0), Point2(7, 1))
        (obj,) = fit([PlotObject(line)], CANVAS, margin=0.1).objects
        assert isinstance(obj.shape, Segment2)
        assert obj.shape.length == pytest.approx(80.0)
        assert obj.shape.start.x == pytest.approx(50.0)

    def test_empty_input(self) -> None:
        """Test no objects gives the identity transform."""
        result = fit([], CANVAS)
        assert result.objects == ()
        assert result.transform == Affine.identity()

    def test_empty_input_still_validates_margin(self) -> None:
        """Test a bad margin is rejected even without objects."""
        with pytest.raises(ValueError, match="margin"):
            fit([], CANVAS, margin=0.6)

    @given(
        width=st.floats(min_value=0.01, max_value=1e4),
        height=st.floats(min_value=0.01, max_value=1e4),
        x=st.floats(min_value=-1e4, max_value=1e4),
        y=st.floats(min_value=-1e4, max_value=1e4),
        margin=st.floats(min_value=0.0, max_value=0.45),
    )
    def test_fit_preserves_aspect_and_stays_inside(
        self, width: float, height: float, x: float, y: float, margin: float
    ) -> None:
        """Test fitted drawings keep their aspect ratio and touch the inset frame."""
        canvas = Frame(width=297, height=210)
        result = fit([PlotObject(_rect(x, y, width, height))], canvas, margin=margin)
        bbox = bounding_box(result.objects)
        inner = canvas.inset(margin)
        assert bbox.width / bbox.height == pytest.approx(width / height, rel=1e-6)
        assert inner.contains_frame(bbox, eps=1e-6 * canvas.diagonal)
        assert bbox.width == pytest.approx(inner.width, rel=1e-6) or bbox.height == pytest.approx(
            inner.height, rel=1e-6
        )


class TestFitTransform:
    """Tests for fit_transform()."""

    def test_maps_center_to_center(self) -> None:
        """Test the bbox center maps to the canvas center."""
        affine = fit_transform(Frame(x=-5, y=-5, width=10, height=10), CANVAS, 0.2)
        assert affine.apply(Point2(0, 0)) == Point2(50, 50)


class TestClipToFrame:
    """Tests for clip_to_frame()."""

    def test_outside_objects_dropped(self) -> None:
        """Test objects fully outside the frame disappear."""
        objects = [PlotObject(_rect(1, 1, 2, 2)), PlotObject(_rect(200, 200, 1, 1))]
        assert len(clip_to_frame(objects, CANVAS)) == 1

    def test_invalid_object_raises_with_index(self) -> None:
        """Test an invalid polygon that needs clipping names its index."""
        bowtie = Polygon2.from_coords([(90, 90), (120, 120), (120, 90), (90, 120)])
        objects = [PlotObject(_rect(1, 1, 2, 2)), PlotObject(bowtie)]
        with pytest.raises(InvalidGeometry) as exc_info:
            clip_to_frame(objects, CANVAS)
        assert exc_info.value.index == 1

    def test_skip_invalid(self) -> None:
        """Test skip_invalid drops the bad object and keeps the rest."""
        bowtie = Polygon2.from_coords([(90, 90), (120, 120), (120, 90), (90, 120)])
        objects = [PlotObject(_rect(1, 1, 2, 2)), PlotObject(bowtie)]
        assert len(clip_to_frame(objects, CANVAS, skip_invalid=True)) == 1

    def test_invalid_object_inside_frame_raises(self) -> None:
        """Test an invalid polygon is reported even when nothing needs clipping."""
        bowtie = Polygon2.from_coords([(10, 10), (20, 20), (20, 10), (10, 20)])
        with pytest.raises(InvalidGeometry) as exc_info:
            clip_to_frame([PlotObject(bowtie)], CANVAS)
        assert exc_info.value.index == 0
