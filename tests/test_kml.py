# -*- coding: utf-8 -*-
"""Tests for the streaming KML reader and writer."""

import io
import logging
import xml.etree.ElementTree as ET

import numpy as np
import pytest

from bte_geotools.constants import KML_21_NAMESPACE
from bte_geotools.constants import KML_22_NAMESPACE
from bte_geotools.enums import KMLVersion
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import NoMoreElementsError
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Feature
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LineString
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon
from bte_geotools.kml import KMLFeatureReader
from bte_geotools.kml import KMLFeatureWriter
from bte_geotools.kml import parse_coordinates
from bte_geotools.models import WriterOptions

# Import fixtures from conftest
from tests.conftest import SAMPLE_KML
from tests.conftest import SAMPLE_KML21
from tests.conftest import nested_collection


def read_all(path, **kwargs) -> list[Feature]:
    with KMLFeatureReader(path, **kwargs) as reader:
        return list(reader)


def write_kml(features, **kwargs) -> bytes:
    buffer = io.BytesIO()
    with KMLFeatureWriter(buffer, **kwargs) as writer:
        for feature in features:
            writer.write_feature(feature)
    return buffer.getvalue()


class TestParseCoordinates:
    """Tests for the coordinates body decoder."""

    def test_mixed_whitespace(self):
        assert parse_coordinates("\n  1,2,3\t4,5 \n") == [[1.0, 2.0, 3.0], [4.0, 5.0]]

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_empty(self, text):
        with pytest.raises(IncompleteFeatureError):
            parse_coordinates(text)

    @pytest.mark.parametrize("text", ["1", "1,2,3,4", "1,north"])
    def test_malformed(self, text):
        with pytest.raises(MalformedSourceError):
            parse_coordinates(text)


class TestKMLFeatureReader:
    """Tests for KMLFeatureReader."""

    def test_features(self, caplog):
        with caplog.at_level(logging.WARNING):
            features = read_all(SAMPLE_KML)

        assert [f.name for f in features] == ["Eiffel Tower", "Seine walk", "Louvre", "Mixed"]
        assert [f.id for f in features] == ["eiffel", None, "louvre", "mixed"]
        assert "without geometry" in caplog.text

    def test_properties(self):
        eiffel = read_all(SAMPLE_KML)[0]
        assert eiffel.properties == {
            "name": "Eiffel Tower",
            "description": "Iron lattice tower",
            "height": "330",
        }

    def test_geometries(self):
        eiffel, seine, louvre, mixed = (f.geometry for f in read_all(SAMPLE_KML))

        assert isinstance(eiffel, Point)
        assert (eiffel.x, eiffel.y, eiffel.z) == (2.2945, 48.8584, 35.0)

        assert isinstance(seine, LineString)
        assert len(seine) == 3

        assert isinstance(louvre, Polygon)
        assert len(louvre.holes) == 1
        assert louvre.shell.coords[0, 2] == 10.0

        assert type(mixed) is GeometryCollection
        assert [type(child) for child in mixed] == [Point, LineString]
        assert not mixed.has_z

    def test_kml21_schema_data(self):
        (feature,) = read_all(SAMPLE_KML21)
        assert feature.name == "Notre-Dame"
        assert feature.properties["kind"] == "cathedral"
        assert not feature.geometry.has_z

    def test_parsing_element(self):
        """Any element can be streamed as one feature."""
        features = read_all(SAMPLE_KML, parsing_element="Point")
        assert len(features) == 2
        assert all(isinstance(f.geometry, Point) for f in features)
        assert features[1].geometry.x == 2.3522

    def test_cursor(self):
        reader = KMLFeatureReader(SAMPLE_KML)
        assert reader.has_next()
        assert reader.has_next()
        assert reader.next().id == "eiffel"

        remaining = 0
        while reader.has_next():
            reader.next()
            remaining += 1

        assert remaining == 3
        assert reader.count == 4
        with pytest.raises(NoMoreElementsError):
            reader.next()

    def test_close_is_idempotent(self):
        reader = KMLFeatureReader(SAMPLE_KML)
        reader.close()
        reader.close()
        assert not reader.has_next()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceIOError):
            KMLFeatureReader(tmp_path / "missing.kml")

    def test_truncated_document(self, tmp_path):
        path = tmp_path / "truncated.kml"
        path.write_text("<kml><Document><Placemark><Point><coordinates>1,2")
        reader = KMLFeatureReader(path)
        with pytest.raises(MalformedSourceError, match="truncated.kml"):
            list(reader)
        assert not reader.has_next()

    def test_bad_coordinates(self, tmp_path):
        path = tmp_path / "bad.kml"
        path.write_text(
            "<kml><Document><Placemark><Point><coordinates>1,north</coordinates>"
            "</Point></Placemark></Document></kml>"
        )
        with pytest.raises(MalformedSourceError):
            read_all(path)

    def test_polygon_without_ring(self, tmp_path):
        path = tmp_path / "bad.kml"
        path.write_text(
            "<kml><Placemark><Polygon><outerBoundaryIs/></Polygon></Placemark></kml>"
        )
        with pytest.raises(IncompleteFeatureError, match="outer boundary"):
            read_all(path)


class TestKMLFeatureWriter:
    """Tests for KMLFeatureWriter."""

    def test_document(self):
        data = write_kml(read_all(SAMPLE_KML))
        root = ET.fromstring(data)

        assert root.tag == f"{{{KML_22_NAMESPACE}}}kml"
        placemarks = root.findall(f".//{{{KML_22_NAMESPACE}}}Placemark")
        assert [p.get("id") for p in placemarks] == ["eiffel", "1", "louvre", "mixed"]

    def test_pretty(self):
        data = write_kml([Feature(Point((1.0, 2.0)))])
        assert data.startswith(b'<?xml version="1.0" encoding="UTF-8"?>\n<kml')
        assert b"\n    <Placemark" in data
        assert data.endswith(b"</kml>\n")

    def test_compact(self):
        data = write_kml(
            [Feature(Point((1.0, 2.0))), Feature(Point((3.0, 4.0)))],
            options=WriterOptions(pretty=False),
        )
        assert b"\n" not in data
        assert b"<coordinates>1.0,2.0</coordinates>" in data

    def test_empty_document(self):
        root = ET.fromstring(write_kml([]))
        assert root.find(f"{{{KML_22_NAMESPACE}}}Document") is not None

    def test_version_21(self):
        root = ET.fromstring(write_kml([], version=KMLVersion.V21))
        assert root.tag == f"{{{KML_21_NAMESPACE}}}kml"

    def test_drop_namespace(self):
        root = ET.fromstring(write_kml([Feature(Point((1.0, 2.0)))], drop_namespace=True))
        assert root.tag == "kml"
        assert root.find("Document/Placemark/Point/coordinates").text == "1.0,2.0"

    def test_document_id(self):
        root = ET.fromstring(write_kml([], drop_namespace=True, document_id="roads"))
        assert root.find("Document").get("id") == "roads"

    def test_properties(self):
        feature = Feature(
            Point((1.0, 2.0, 3.0)),
            id="p",
            properties={"name": "P", "lanes": 2, "note": None},
        )
        root = ET.fromstring(write_kml([feature], drop_namespace=True))
        placemark = root.find("Document/Placemark")

        assert placemark.find("name").text == "P"
        values = {d.get("name"): d.find("value").text for d in placemark.iter("Data")}
        assert values == {"lanes": "2", "note": None}
        assert placemark.find("Point/coordinates").text == "1.0,2.0,3.0"

    def test_nested_collection(self):
        root = ET.fromstring(write_kml([Feature(nested_collection())], drop_namespace=True))
        multi = root.find("Document/Placemark/MultiGeometry")
        assert [child.tag for child in multi] == ["MultiGeometry", "LineString", "Polygon"]

    def test_precision_rejected(self):
        with pytest.raises(UnsupportedConversionError, match="precision"):
            KMLFeatureWriter(io.BytesIO(), WriterOptions(precision=6))

    def test_write_after_export(self):
        writer = KMLFeatureWriter(io.BytesIO())
        writer.export()
        with pytest.raises(UnsupportedConversionError):
            writer.write_feature(Feature(Point((1.0, 2.0))))

    def test_unwritable_target(self, tmp_path):
        with pytest.raises(ResourceIOError):
            KMLFeatureWriter(tmp_path / "missing" / "out.kml")

    def test_round_trip(self, tmp_path):
        """Reading back a written document gives the same features."""
        source = read_all(SAMPLE_KML)
        output = tmp_path / "out.kml"
        with KMLFeatureWriter(output) as writer:
            for feature in source:
                writer.write_feature(feature)

        result = read_all(output)

        assert len(result) == len(source)
        for before, after in zip(source, result, strict=True):
            assert after.properties == before.properties
            np.testing.assert_array_equal(
                after.geometry.coordinates(), before.geometry.coordinates()
            )
            assert after.geometry.has_z == before.geometry.has_z
