# -*- coding: utf-8 -*-
"""BuildTheEarth GeoTools.

Convert KML and GeoJSON documents between each other, into BlueMap marker
sets and into WorldEdit block edits, projecting geographic coordinates onto
the BuildTheEarth Minecraft grid.

Usage:
    # Stream the features of a document
    from bte_geotools import read_features
    for feature in read_features(Path("roads.kml")):
        print(feature.name, feature.geometry.kind)

    # Configure a conversion
    from bte_geotools import ConversionFormat, ConverterBuilder
    converter = (
        ConverterBuilder(Path("roads.kml"), ConversionFormat.GEOJSON)
        .drop_z()
        .precision(7)
        .build()
    )
    converter.convert(Path("roads.geojson"))

    # Project a coordinate
    from bte_geotools.projection import bte
    x, y = bte().forward(2.350987, 48.856667)
"""

__version__ = "0.1.0"

# Sinks
from bte_geotools.bluemap import BlueMapMarkerWriter
from bte_geotools.bluemap import to_lower_hyphen

# Constants
from bte_geotools.constants import EARTH_TO_MINECRAFT_SCALE

# Pipeline
from bte_geotools.converter import ConversionResult
from bte_geotools.converter import ConverterBuilder
from bte_geotools.converter import GeoToolsConverter

# Coordinate editing
from bte_geotools.coordinates import Drop
from bte_geotools.coordinates import Normalize
from bte_geotools.coordinates import Offset
from bte_geotools.coordinates import apply_z
from bte_geotools.coordinates import average_elevation
from bte_geotools.coordinates import edit_geometry

# Enums
from bte_geotools.enums import ConversionFormat
from bte_geotools.enums import ElevationMode
from bte_geotools.enums import GeometryKind
from bte_geotools.enums import KMLVersion

# Errors
from bte_geotools.errors import GeoToolsError
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import NoMoreElementsError
from bte_geotools.errors import OutOfProjectionDomainError
from bte_geotools.errors import ResourceIOError
from bte_geotools.errors import UnsupportedConversionError

# Geometry
from bte_geotools.geometry import Feature
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import MultiLineString
from bte_geotools.geometry import MultiPoint
from bte_geotools.geometry import MultiPolygon
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon

# Streaming
from bte_geotools.geojson import GeoJSONFeatureReader
from bte_geotools.geojson import GeoJSONFeatureWriter
from bte_geotools.io import convert_file
from bte_geotools.io import read_features
from bte_geotools.kml import KMLFeatureReader
from bte_geotools.kml import KMLFeatureWriter

# Models
from bte_geotools.models import BlockOptions
from bte_geotools.models import ConversionOptions
from bte_geotools.models import ElevationEdit
from bte_geotools.models import MarkerOptions
from bte_geotools.models import MarkerStyle
from bte_geotools.models import ProjectionParameters
from bte_geotools.models import WriterOptions

# Projection
from bte_geotools.projection import MinecraftProjection
from bte_geotools.projection import asean_bte
from bte_geotools.projection import bte
from bte_geotools.worldedit import BlockPattern
from bte_geotools.worldedit import BufferingEditSession
from bte_geotools.worldedit import WorldEditGeometryWriter

__all__ = [
    # Constants
    "EARTH_TO_MINECRAFT_SCALE",
    # Models
    "BlockOptions",
    # Sinks
    "BlockPattern",
    "BlueMapMarkerWriter",
    "BufferingEditSession",
    # Enums
    "ConversionFormat",
    "ConversionOptions",
    # Pipeline
    "ConversionResult",
    "ConverterBuilder",
    # Coordinate editing
    "Drop",
    "ElevationEdit",
    "ElevationMode",
    # Geometry
    "Feature",
    # Streaming
    "GeoJSONFeatureReader",
    "GeoJSONFeatureWriter",
    # Errors
    "GeoToolsError",
    "GeoToolsConverter",
    "GeometryCollection",
    "GeometryKind",
    "IncompleteFeatureError",
    "KMLFeatureReader",
    "KMLFeatureWriter",
    "KMLVersion",
    "LineString",
    "LinearRing",
    "MalformedSourceError",
    "MarkerOptions",
    "MarkerStyle",
    # Projection
    "MinecraftProjection",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "NoMoreElementsError",
    "Normalize",
    "Offset",
    "OutOfProjectionDomainError",
    "Point",
    "Polygon",
    "ProjectionParameters",
    "ResourceIOError",
    "UnsupportedConversionError",
    "WorldEditGeometryWriter",
    "WriterOptions",
    "apply_z",
    "asean_bte",
    "average_elevation",
    "bte",
    "convert_file",
    "edit_geometry",
    "read_features",
    "to_lower_hyphen",
]
