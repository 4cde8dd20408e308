# -*- coding: utf-8 -*-
"""Tests for the geometry model."""

import math

import numpy as np
import pytest

from bte_geotools.enums import GeometryKind
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.geometry import Feature
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import MultiLineString
from bte_geotools.geometry import MultiPoint
from bte_geotools.geometry import MultiPolygon
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon
from bte_geotools.geometry import as_coordinates
from bte_geotools.geometry import collection_of
from bte_geotools.geometry import position_to_list

# Import fixtures from conftest
from tests.conftest import nested_collection
from tests.conftest import square_ring


class TestCoordinates:
    """Tests for coordinate array construction."""

    def test_2d_positions_get_absent_z(self):
        coords = as_coordinates([(1.0, 2.0), (3.0, 4.0)])
        assert coords.shape == (2, 3)
        assert np.isnan(coords[:, 2]).all()

    def test_single_position(self):
        assert as_coordinates((1.0, 2.0, 3.0)).shape == (1, 3)

    def test_empty(self):
        assert as_coordinates([]).shape == (0, 3)

    @pytest.mark.parametrize(
        "values",
        [
            [(1.0,)],
            [(1.0, 2.0, 3.0, 4.0)],
            [(math.nan, 1.0)],
            [(1.0, math.inf)],
            [(1.0, 2.0, math.inf)],
            [("a", "b")],
        ],
    )
    def test_invalid(self, values):
        with pytest.raises(IncompleteFeatureError):
            as_coordinates(values)

    def test_position_to_list(self):
        assert position_to_list(np.array([1.0, 2.0, np.nan])) == [1.0, 2.0]
        assert position_to_list(np.array([1.0, 2.0, 0.0])) == [1.0, 2.0, 0.0]


class TestPrimitives:
    """Tests for points, lines and rings."""

    def test_point(self):
        point = Point((2.0, 3.0, 4.0))
        assert (point.x, point.y, point.z) == (2.0, 3.0, 4.0)
        assert point.kind == GeometryKind.POINT
        assert point.has_z

    def test_point_needs_one_position(self):
        with pytest.raises(IncompleteFeatureError):
            Point([(0.0, 0.0), (1.0, 1.0)])

    def test_line_needs_two_positions(self):
        with pytest.raises(IncompleteFeatureError, match="at least 2"):
            LineString([(0.0, 0.0)])

    def test_line_without_z(self):
        line = LineString([(0.0, 0.0), (1.0, 1.0)])
        assert len(line) == 2
        assert not line.has_z

    def test_ring_must_be_closed(self):
        with pytest.raises(IncompleteFeatureError, match="closed"):
            LinearRing([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)])

    def test_ring_needs_four_positions(self):
        with pytest.raises(IncompleteFeatureError, match="at least 4"):
            LinearRing([(0.0, 0.0), (1.0, 0.0), (0.0, 0.0)])

    def test_ring_closing_elevation(self):
        with pytest.raises(IncompleteFeatureError):
            LinearRing([(0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 0, 2)])

    def test_ring_is_a_line(self):
        ring = square_ring()
        assert isinstance(ring, LineString)
        assert ring.kind == GeometryKind.LINEAR_RING


class TestPolygon:
    """Tests for polygons."""

    def test_rings(self, polygon_with_hole):
        assert len(polygon_with_hole.rings) == 2
        assert polygon_with_hole.rings[0] is polygon_with_hole.shell

    def test_coerces_rings(self):
        polygon = Polygon([(0, 0), (1, 0), (1, 1), (0, 0)])
        assert isinstance(polygon.shell, LinearRing)

    def test_coordinates(self, polygon_with_hole):
        assert polygon_with_hole.coordinates().shape == (10, 3)

    def test_to_shapely(self, polygon_with_hole):
        assert polygon_with_hole.to_shapely().area == pytest.approx(96.0)


class TestCollections:
    """Tests for collections."""

    def test_multi_point_members(self):
        with pytest.raises(IncompleteFeatureError):
            MultiPoint((LineString([(0, 0), (1, 1)]),))

    def test_indexing(self):
        collection = nested_collection()
        assert len(collection) == 3
        assert isinstance(collection[0], GeometryCollection)
        assert [child.kind for child in collection][1:] == [
            GeometryKind.LINE_STRING,
            GeometryKind.POLYGON,
        ]

    def test_coordinates_are_concatenated(self):
        assert nested_collection().coordinates().shape == (1 + 2 + 5, 3)

    def test_empty_collection(self):
        assert GeometryCollection().coordinates().shape == (0, 3)

    @pytest.mark.parametrize(
        ("children", "expected"),
        [
            ((Point((0, 0)), Point((1, 1))), MultiPoint),
            ((LineString([(0, 0), (1, 1)]),), MultiLineString),
            ((Polygon(square_ring()),), MultiPolygon),
            ((square_ring(),), GeometryCollection),
            ((Point((0, 0)), LineString([(0, 0), (1, 1)])), GeometryCollection),
            ((), GeometryCollection),
        ],
    )
    def test_collection_of(self, children, expected):
        assert type(collection_of(children)) is expected


class TestCopies:
    """Geometries are never shared between a source and its copies."""

    def test_copy_is_independent(self, polygon_with_hole):
        copy = polygon_with_hole.copy()
        copy.shell.coords[0, 2] = 99.0
        assert polygon_with_hole.shell.coords[0, 2] == 5.0

    def test_constructor_copies_input(self):
        source = np.array([[0.0, 0.0, 1.0], [1.0, 1.0, 1.0]])
        line = LineString(source)
        source[0, 2] = 7.0
        assert line.coords[0, 2] == 1.0

    def test_map_coordinates_keeps_types(self):
        mapped = nested_collection().map_coordinates(lambda c: c + 1)
        assert isinstance(mapped[0], GeometryCollection)
        assert isinstance(mapped[2], Polygon)
        assert mapped[1].coords[0, 0] == 1.0

    def test_topologically_equals(self):
        shifted = LinearRing([(1, 1), (0, 1), (0, 0), (1, 0), (1, 1)])
        assert Polygon(square_ring()).topologically_equals(Polygon(shifted))


class TestFeature:
    """Tests for features."""

    def test_name(self, point_feature):
        assert point_feature.name == "Eiffel Tower"

    def test_name_must_be_a_string(self):
        assert Feature(Point((0, 0)), properties={"name": 3}).name is None

    def test_with_geometry(self, point_feature):
        moved = point_feature.with_geometry(Point((0, 0)))
        assert moved.id == "eiffel"
        assert moved.properties == point_feature.properties
        assert point_feature.geometry.x == 2.2945
