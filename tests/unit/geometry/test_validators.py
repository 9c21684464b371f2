"""Unit tests for polygon validation.

Tests validate_polygon and validate_multipolygon including:
- simple rings passing through unchanged
- zero-area, self-crossing and folded rings being rejected
- ring indices in multi-polygon error messages
"""

from __future__ import annotations

import pytest

from plotkit.exceptions import InvalidGeometry
from plotkit.geometry import MultiPolygon2, Polygon2, validate_multipolygon, validate_polygon


class TestValidatePolygon:
    """Tests for validate_polygon."""

    def test_simple_ring_returned(self, unit_square: Polygon2) -> None:
        """Test a valid ring is returned as is."""
        assert validate_polygon(unit_square) is unit_square

    def test_concave_ring_valid(self) -> None:
        """Test a concave but simple ring passes."""
        ring = Polygon2.from_coords([(0, 0), (4, 0), (4, 4), (2, 1), (0, 4)])
        assert validate_polygon(ring) is ring

    def test_zero_area_rejected(self) -> None:
        """Test a ring of collinear vertices."""
        ring = Polygon2.from_coords([(0, 0), (1, 0), (2, 0)])
        with pytest.raises(InvalidGeometry, match="zero area"):
            validate_polygon(ring)

    def test_bowtie_rejected(self) -> None:
        """Test a self-crossing ring."""
        bowtie = Polygon2.from_coords([(0, 0), (2, 2), (2, 0), (0, 2)])
        with pytest.raises(InvalidGeometry, match="intersect"):
            validate_polygon(bowtie)

    def test_fold_back_rejected(self) -> None:
        """Test adjacent edges that run back over each other."""
        ring = Polygon2.from_coords([(0, 0), (2, 0), (1, 0), (1, 1)])
        with pytest.raises(InvalidGeometry, match="overlap"):
            validate_polygon(ring)

    def test_touching_vertex_rejected(self) -> None:
        """Test a ring whose boundary touches itself at a vertex."""
        ring = Polygon2.from_coords([(0, 0), (4, 0), (2, 2), (4, 4), (0, 4), (2, 2)])
        with pytest.raises(InvalidGeometry):
            validate_polygon(ring)


class TestValidateMultiPolygon:
    """Tests for validate_multipolygon."""

    def test_valid_rings(self, unit_square: Polygon2) -> None:
        """Test a multi-polygon of valid rings."""
        hole = Polygon2.from_coords([(0.25, 0.25), (0.75, 0.25), (0.5, 0.75)])
        multi = MultiPolygon2((unit_square, hole))
        assert validate_multipolygon(multi) is multi

    def test_error_names_ring(self, unit_square: Polygon2) -> None:
        """Test the failing ring index is in the message."""
        bowtie = Polygon2.from_coords([(5, 5), (7, 7), (7, 5), (5, 7)])
        with pytest.raises(InvalidGeometry, match="Ring 1"):
            validate_multipolygon(MultiPolygon2((unit_square, bowtie)))
