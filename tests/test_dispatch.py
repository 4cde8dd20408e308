# -*- coding: utf-8 -*-
"""Tests for the recursive geometry dispatcher."""

import pytest

from bte_geotools.dispatch import GeometryDispatcher
from bte_geotools.dispatch import indexed_key
from bte_geotools.dispatch import resolve_name
from bte_geotools.enums import GeometryKind
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Feature
from bte_geotools.geometry import Geometry
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LineString
from bte_geotools.geometry import MultiPoint
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon

# Import fixtures from conftest
from tests.conftest import nested_collection
from tests.conftest import square_ring


class Recorder(GeometryDispatcher[str]):
    """Dispatcher recording every rendered leaf."""

    def __init__(self, styles=None, default="default", *, strict=False):
        super().__init__(styles, default, strict=strict)
        self.calls = []

    def _record(self, primitive, geometry, key, label, style):
        self.calls.append((primitive, key, label, style))
        return 1

    def render_point(self, point, key, label, style):
        return self._record("point", point, key, label, style)

    def render_line(self, line, key, label, style):
        return self._record("line", line, key, label, style)

    def render_ring(self, ring, key, label, style):
        return self._record("ring", ring, key, label, style)

    def render_polygon(self, polygon, key, label, style):
        return self._record("polygon", polygon, key, label, style)


class Blob(Geometry):
    """Geometry no sink knows how to render."""


class TestResolveName:
    """Tests for resolve_name."""

    def test_label_first(self, point_feature):
        assert resolve_name("Override", point_feature, 3) == "Override"

    def test_name_property(self, point_feature):
        assert resolve_name(None, point_feature, 3) == "Eiffel Tower"

    def test_identifier(self):
        assert resolve_name(None, Feature(Point((0, 0)), id="louvre"), 3) == "louvre"

    def test_index(self):
        assert resolve_name(None, Feature(Point((0, 0))), 3) == "3"
        assert resolve_name(None, None, 0) == "0"

    def test_indexed_key(self):
        assert indexed_key("roads", 2) == "roads-2"


class TestRender:
    """Tests for GeometryDispatcher.render."""

    @pytest.mark.parametrize(
        ("geometry", "primitive"),
        [
            (Point((0, 0)), "point"),
            (LineString([(0, 0), (1, 1)]), "line"),
            (square_ring(), "ring"),
            (Polygon(square_ring()), "polygon"),
        ],
    )
    def test_leaves(self, geometry, primitive):
        recorder = Recorder()
        assert recorder.render(geometry, "k", "Label") == 1
        assert recorder.calls == [(primitive, "k", "Label", "default")]

    def test_collection_keys(self):
        """Children are suffixed with their index, recursively."""
        recorder = Recorder()
        assert recorder.render(nested_collection(), "x", "X") == 3
        assert [(call[0], call[1]) for call in recorder.calls] == [
            ("point", "x-0-0"),
            ("line", "x-1"),
            ("polygon", "x-2"),
        ]
        assert {call[2] for call in recorder.calls} == {"X"}

    def test_empty_collection(self):
        recorder = Recorder()
        assert recorder.render(GeometryCollection(), "x", "X") == 0
        assert recorder.calls == []

    def test_styles_by_kind(self):
        recorder = Recorder({GeometryKind.POINT: "p", GeometryKind.LINE_STRING: "l"})
        recorder.render(nested_collection(), "x", "X")
        assert [call[3] for call in recorder.calls] == ["p", "l", "default"]

    def test_wildcard_overrides(self):
        recorder = Recorder({GeometryKind.GEOMETRY: "w", GeometryKind.POINT: "p"})
        recorder.render(nested_collection(), "x", "X")
        assert [call[3] for call in recorder.calls] == ["w", "w", "w"]

    def test_collection_style_is_inherited(self):
        recorder = Recorder(
            {GeometryKind.GEOMETRY_COLLECTION: "c", GeometryKind.POINT: "p"}
        )
        recorder.render(nested_collection(), "x", "X")
        assert [call[3] for call in recorder.calls] == ["c", "c", "c"]

    def test_multi_part_style(self):
        recorder = Recorder({GeometryKind.MULTI_POINT: "mp", GeometryKind.POINT: "p"})
        multi = MultiPoint((Point((0, 0)), Point((1, 1))))
        assert recorder.render(multi, "m", "M") == 2
        assert recorder.calls == [
            ("point", "m-0", "M", "mp"),
            ("point", "m-1", "M", "mp"),
        ]

    def test_unsupported_is_skipped(self):
        recorder = Recorder()
        collection = GeometryCollection((Blob(), Point((0, 0))))
        assert recorder.render(collection, "x", "X") == 1
        assert recorder.calls == [("point", "x-1", "X", "default")]

    def test_unsupported_strict(self):
        with pytest.raises(UnsupportedConversionError, match="Blob"):
            Recorder(strict=True).render(Blob(), "x", "X")
