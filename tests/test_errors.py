# -*- coding: utf-8 -*-
"""Tests for errors module."""

from pathlib import Path

import pytest

from bte_geotools.errors import GeoToolsError
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import NoMoreElementsError
from bte_geotools.errors import OutOfProjectionDomainError
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError


class TestGeoToolsError:
    """Tests for the base error."""

    def test_message(self):
        error = GeoToolsError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.cause is None
        assert str(error) == "Something went wrong"

    def test_cause_is_appended(self):
        cause = ValueError("bad token")
        error = GeoToolsError("Unable to parse", cause)
        assert error.cause is cause
        assert str(error) == "Unable to parse: bad token"

    def test_empty_cause_is_not_appended(self):
        assert str(GeoToolsError("Unable to parse", ValueError())) == "Unable to parse"

    def test_raise_from_keeps_chain(self):
        cause = OSError("disk full")
        with pytest.raises(GeoToolsError) as exc_info:
            try:
                raise cause
            except OSError as exc:
                raise ResourceIOError("Unable to write", Path("out.json"), exc) from exc
        assert exc_info.value.__cause__ is cause

    @pytest.mark.parametrize(
        "error_class",
        [
            MalformedSourceError,
            UnsupportedConversionError,
            IncompleteFeatureError,
        ],
    )
    def test_hierarchy(self, error_class):
        """Every library error can be caught as GeoToolsError."""
        with pytest.raises(GeoToolsError):
            raise error_class("failure")


class TestOutOfProjectionDomainError:
    """Tests for the projection domain error."""

    def test_point_in_message(self):
        error = OutOfProjectionDomainError("Latitude out of range", (10.0, 95.0))
        assert error.point == (10.0, 95.0)
        assert "10.0" in str(error)
        assert "95.0" in str(error)
        assert isinstance(error, GeoToolsError)


class TestResourceIOError:
    """Tests for the I/O error."""

    def test_path(self):
        error = ResourceIOError("Unable to open", Path("missing.kml"))
        assert error.path == Path("missing.kml")
        assert str(error) == "Unable to open"

    def test_path_optional(self):
        assert ResourceIOError("Unable to open").path is None


class TestNoMoreElementsError:
    """Exhausted readers raise a lookup error, not a conversion error."""

    def test_not_a_conversion_error(self):
        assert issubclass(NoMoreElementsError, LookupError)
        assert not issubclass(NoMoreElementsError, GeoToolsError)
