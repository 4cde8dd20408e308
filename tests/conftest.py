# -*- coding: utf-8 -*-
"""Pytest configuration and fixtures.

This module provides shared paths, sample geometries and fixtures for the
sample documents of ``tests/artifacts``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bte_geotools.geometry import Feature
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# =============================================================================
# Path Constants
# =============================================================================

ARTIFACTS_DIR = Path(__file__).parent / "artifacts"
SAMPLE_KML = ARTIFACTS_DIR / "sample.kml"
SAMPLE_KML21 = ARTIFACTS_DIR / "kml21.kml"
SAMPLE_GEOJSON = ARTIFACTS_DIR / "sample.geojson"
SINGLE_FEATURE_GEOJSON = ARTIFACTS_DIR / "single_feature.geojson"

# =============================================================================
# Reference Coordinates
# =============================================================================

#: Notre-Dame de Paris and its calibrated BTE block position
PARIS_GEO = (2.350987, 48.856667)
PARIS_BTE = (2851660.28, -5049718.24)

#: Calibrated (lon, lat) => BTE block positions
CALIBRATION = [
    pytest.param((2.350987, 48.856667), (2851660.278582057, -5049718.243628887), id="paris"),
    pytest.param((-74.005974, 40.714268), (-8526456.75523275, -6021812.714103152), id="new-york"),
    pytest.param((-0.16667, 51.5), (2774758.1546624764, -5411708.236500686), id="london"),
    pytest.param((116.39723, 39.9075), (11571988.173618957, -6472387.375809908), id="beijing"),
    pytest.param((-122.33207, 47.60621), (-12410431.110669583, -6894851.702710003), id="seattle"),
    pytest.param((151.208666, -33.875113), (20001061.636216827, -2223355.8371363534), id="sydney"),
    pytest.param((2.295026, 48.873781), (2848192.3338641203, -5053053.018157968), id="etoile"),
    pytest.param((2.236214, 48.8926507), (2844585.5271490104, -5056657.959395678), id="la-defense"),
    pytest.param((2.34927, 48.853474), (2851410.680220599, -5049403.7778784195), id="notre-dame"),
    pytest.param((2.348969, 48.853065), (2851372.726732094, -5049365.549214174), id="parvis"),
]

#: Cities spread over the whole net
WORLD_CITIES = [
    pytest.param((2.350987, 48.856667), id="paris"),
    pytest.param((-74.0060, 40.7128), id="new-york"),
    pytest.param((139.6917, 35.6895), id="tokyo"),
    pytest.param((151.2093, -33.8688), id="sydney"),
    pytest.param((-43.1729, -22.9068), id="rio"),
    pytest.param((37.6173, 55.7558), id="moscow"),
    pytest.param((100.5018, 13.7563), id="bangkok"),
    pytest.param((18.4241, -33.9249), id="cape-town"),
    pytest.param((-70.6693, -33.4489), id="santiago"),
]


# =============================================================================
# Geometry Factories
# =============================================================================


def square_ring(size: float = 1.0, z: float | None = None, origin=(0.0, 0.0)) -> LinearRing:
    """Closed square ring of side ``size``, optionally at elevation ``z``."""
    x0, y0 = origin
    corners = [
        (x0, y0),
        (x0 + size, y0),
        (x0 + size, y0 + size),
        (x0, y0 + size),
        (x0, y0),
    ]
    if z is None:
        return LinearRing(corners)
    return LinearRing([(x, y, z) for x, y in corners])


def nested_collection() -> GeometryCollection:
    """Collection of 3 children, the first being itself a collection."""
    return GeometryCollection(
        (
            GeometryCollection((Point((0.0, 0.0, 1.0)),)),
            LineString([(0.0, 0.0, 1.0), (1.0, 1.0, 2.0)]),
            Polygon(square_ring(4.0, z=3.0)),
        )
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def artifacts_dir() -> Path:
    """Return path to test artifacts directory."""
    return ARTIFACTS_DIR


@pytest.fixture
def point_feature() -> Feature:
    return Feature(Point((2.2945, 48.8584, 35.0)), id="eiffel", properties={"name": "Eiffel Tower"})


@pytest.fixture
def polygon_with_hole() -> Polygon:
    return Polygon(
        square_ring(10.0, z=5.0),
        (square_ring(2.0, z=5.0, origin=(4.0, 4.0)),),
    )
