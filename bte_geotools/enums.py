# -*- coding: utf-8 -*-
"""Enumerations for geospatial formats, geometry kinds and output policies."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from bte_geotools.constants import KML_21_NAMESPACE
from bte_geotools.constants import KML_22_NAMESPACE


class ConversionFormat(str, Enum):
    """Formats taking part in a conversion.

    Attributes:
        GEOJSON: GeoJSON FeatureCollection document (source and sink)
        KML: KML placemark document (source and sink)
        BLUEMAP: BlueMap marker-set JSON document (sink only)
        WORLDEDIT: Block placement through an edit session (sink only)
    """

    GEOJSON = "geojson"
    KML = "kml"
    BLUEMAP = "bluemap"
    WORLDEDIT = "worldedit"

    @property
    def is_source(self) -> bool:
        """Whether features can be streamed out of this format."""
        return self in (ConversionFormat.GEOJSON, ConversionFormat.KML)

    @property
    def is_document(self) -> bool:
        """Whether this format is a feature document (symmetric round trip)."""
        return self.is_source

    @classmethod
    def from_path(cls, path: Path) -> ConversionFormat:
        """Detect a source format from a file extension.

        Args:
            path: File path

        Returns:
            The detected format

        Raises:
            ValueError: If the extension is not recognized
        """
        match f_ext := path.suffix.lower():
            case (
                FileExtension.GEOJSON.value
                | FileExtension.GJSON.value
                | FileExtension.JSON.value
            ):
                return cls.GEOJSON

            case FileExtension.KML.value:
                return cls.KML

            case _:
                raise ValueError(f"Unknown file extension: `{f_ext}`")


class FileExtension(str, Enum):
    """File extensions for supported formats (with dot)."""

    GEOJSON = ".geojson"
    GJSON = ".gjson"
    JSON = ".json"
    KML = ".kml"


class GeometryKind(str, Enum):
    """Geometry type classes used to key style tables.

    Attributes:
        GEOMETRY: Wildcard entry, overrides every other entry of a style table
    """

    GEOMETRY = "Geometry"
    POINT = "Point"
    LINE_STRING = "LineString"
    LINEAR_RING = "LinearRing"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"


class ElevationMode(str, Enum):
    """Elevation aggregation policy of rendered primitives.

    Attributes:
        AUTO: Preserve per-vertex elevation where the sink supports it,
            fall back to the ring average otherwise
        AVERAGE: Use the mean of all finite elevations of a ring or line
        NORMALIZED: Use one fixed elevation for every primitive
    """

    AUTO = "auto"
    AVERAGE = "average"
    NORMALIZED = "normalized"


class KMLVersion(str, Enum):
    """Supported KML schema versions."""

    V21 = "2.1"
    V22 = "2.2"

    @property
    def namespace(self) -> str:
        """Get the XML namespace of this version."""
        return {
            KMLVersion.V21: KML_21_NAMESPACE,
            KMLVersion.V22: KML_22_NAMESPACE,
        }[self]
