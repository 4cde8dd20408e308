# -*- coding: utf-8 -*-
"""Tests for option models module."""

import math

import pytest
from pydantic import ValidationError

from bte_geotools.constants import DEFAULT_BLOCK
from bte_geotools.constants import DEFAULT_INDENT
from bte_geotools.coordinates import Drop
from bte_geotools.coordinates import Normalize
from bte_geotools.coordinates import Offset
from bte_geotools.enums import ElevationMode
from bte_geotools.enums import GeometryKind
from bte_geotools.enums import KMLVersion
from bte_geotools.models import BlockOptions
from bte_geotools.models import ConversionOptions
from bte_geotools.models import ElevationEdit
from bte_geotools.models import MarkerOptions
from bte_geotools.models import MarkerStyle
from bte_geotools.models import WriterOptions


class TestElevationEdit:
    """Tests for ElevationEdit model."""

    def test_no_edit(self):
        assert ElevationEdit().resolve() is None

    def test_drop_wins(self):
        edit = ElevationEdit(normalize=10.0, offset=2.0, drop=True)
        assert edit.resolve() == Drop()

    def test_normalize_over_offset(self):
        assert ElevationEdit(normalize=10.0, offset=2.0).resolve() == Normalize(10.0)

    def test_offset(self):
        assert ElevationEdit(offset=-3.5).resolve() == Offset(-3.5)

    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_finite(self, value):
        with pytest.raises(ValidationError, match="finite"):
            ElevationEdit(offset=value)


class TestWriterOptions:
    """Tests for WriterOptions model."""

    def test_defaults(self):
        options = WriterOptions()
        assert options.pretty
        assert options.indent == DEFAULT_INDENT
        assert options.precision is None

    @pytest.mark.parametrize("precision", [-1, 18])
    def test_precision_range(self, precision):
        with pytest.raises(ValidationError):
            WriterOptions(precision=precision)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            WriterOptions().pretty = False


class TestMarkerOptions:
    """Tests for MarkerOptions model."""

    def test_defaults(self):
        options = MarkerOptions()
        assert options.toggleable
        assert not options.default_hidden
        assert options.elevation == ElevationMode.AUTO
        assert options.default_style == MarkerStyle()

    def test_normalized_needs_value(self):
        with pytest.raises(ValidationError, match="normalize_value"):
            MarkerOptions(elevation=ElevationMode.NORMALIZED)

    def test_value_needs_normalized(self):
        with pytest.raises(ValidationError, match="normalize_value"):
            MarkerOptions(normalize_value=64.0)

    def test_normalized(self):
        options = MarkerOptions(elevation="normalized", normalize_value=64.0)
        assert options.elevation == ElevationMode.NORMALIZED

    def test_extrude_positive(self):
        with pytest.raises(ValidationError):
            MarkerOptions(extrude=0.0)

    def test_styles_by_kind(self):
        options = MarkerOptions(styles={"Polygon": MarkerStyle(line_width=5)})
        assert options.styles[GeometryKind.POLYGON].line_width == 5


class TestMarkerStyle:
    """Tests for MarkerStyle model."""

    def test_color_json(self):
        assert MarkerStyle.color_json((1, 2, 3, 0.5)) == {"r": 1, "g": 2, "b": 3, "a": 0.5}

    @pytest.mark.parametrize("color", [(256, 0, 0, 1.0), (0, 0, 0, 1.5)])
    def test_color_range(self, color):
        with pytest.raises(ValidationError):
            MarkerStyle(line_color=color)


class TestBlockOptions:
    """Tests for BlockOptions model."""

    def test_defaults(self):
        options = BlockOptions()
        assert options.writing_size == 0.0
        assert options.fallback == DEFAULT_BLOCK
        assert options.styles is None

    def test_writing_size_non_negative(self):
        with pytest.raises(ValidationError):
            BlockOptions(writing_size=-1.0)


class TestConversionOptions:
    """Tests for ConversionOptions model."""

    def test_defaults(self):
        options = ConversionOptions()
        assert options.elevation == ElevationEdit()
        assert options.markers is None
        assert options.blocks is None
        assert options.projection is None
        assert options.kml_version == KMLVersion.V22
        assert options.parsing_element == "Placemark"

    def test_copy_with_update(self):
        options = ConversionOptions().model_copy(update={"strict": True})
        assert options.strict
