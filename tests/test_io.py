# -*- coding: utf-8 -*-
"""Tests for the file I/O helpers."""

import shutil

import pytest

from bte_geotools.enums import ConversionFormat
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Point
from bte_geotools.io import convert_file
from bte_geotools.io import read_features
from bte_geotools.kml import KMLFeatureReader
from bte_geotools.models import ConversionOptions
from bte_geotools.models import ElevationEdit

# Import fixtures from conftest
from tests.conftest import SAMPLE_GEOJSON
from tests.conftest import SAMPLE_KML
from tests.conftest import SINGLE_FEATURE_GEOJSON


class TestReadFeatures:
    """Tests for read_features."""

    def test_geojson(self):
        features = list(read_features(SAMPLE_GEOJSON))
        assert [f.name for f in features] == ["Eiffel Tower", "Seine walk", "Louvre", None]

    def test_kml(self):
        assert len(list(read_features(SAMPLE_KML))) == 4

    def test_single_feature(self):
        assert len(list(read_features(SINGLE_FEATURE_GEOJSON))) == 1

    def test_parsing_element(self):
        features = list(read_features(SAMPLE_KML, parsing_element="Point"))
        assert all(isinstance(f.geometry, Point) for f in features)

    def test_explicit_source(self, tmp_path):
        path = tmp_path / "landmarks.xml"
        shutil.copy(SAMPLE_KML, path)
        assert len(list(read_features(path, ConversionFormat.KML))) == 4

    def test_unknown_extension(self, tmp_path):
        with pytest.raises(UnsupportedConversionError, match="landmarks.xml"):
            list(read_features(tmp_path / "landmarks.xml"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceIOError):
            list(read_features(tmp_path / "missing.geojson"))

    def test_is_lazy(self, tmp_path):
        """Nothing is opened before the first feature is requested."""
        iterator = read_features(tmp_path / "missing.geojson")
        with pytest.raises(ResourceIOError):
            next(iterator)


class TestConvertFile:
    """Tests for convert_file."""

    def test_geojson_to_kml(self, tmp_path):
        output = tmp_path / "landmarks.kml"
        result = convert_file(SAMPLE_GEOJSON, output, ConversionFormat.KML)

        assert result.features == 4
        with KMLFeatureReader(output) as reader:
            assert [f.name for f in reader] == ["Eiffel Tower", "Seine walk", "Louvre", None]

    def test_options(self, tmp_path):
        output = tmp_path / "landmarks.geojson"
        options = ConversionOptions(elevation=ElevationEdit(normalize=0.0))
        convert_file(SAMPLE_KML, output, "geojson", options)

        (eiffel, *_) = read_features(output)
        assert eiffel.geometry.z == 0.0

    def test_explicit_source(self, tmp_path):
        source = tmp_path / "landmarks.xml"
        shutil.copy(SAMPLE_KML, source)
        output = tmp_path / "landmarks.geojson"

        result = convert_file(source, output, ConversionFormat.GEOJSON, source="kml")
        assert result.emitted == 4

    def test_worldedit_rejected(self, tmp_path):
        with pytest.raises(UnsupportedConversionError):
            convert_file(SAMPLE_KML, tmp_path / "out.json", ConversionFormat.WORLDEDIT)
