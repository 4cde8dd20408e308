# -*- coding: utf-8 -*-
"""Constants used throughout the bte_geotools library.

This module centralizes all constant values to ensure consistency
and avoid magic numbers/strings scattered across the codebase.
"""

# -----------------------------------------------------------------------------
# Encodings
# -----------------------------------------------------------------------------

#: Encoding used for KML documents
KML_ENCODING = "utf-8"

# -----------------------------------------------------------------------------
# Projection
# -----------------------------------------------------------------------------

#: Validated Earth-to-Minecraft scale of the BTE projection (meters per block)
EARTH_TO_MINECRAFT_SCALE: float = 7318261.522857145

#: The base projection operates on a unit sphere
UNIT_RADIUS: float = 1.0

#: False easting/northing of the regional (ASEAN) BTE projection
ASEAN_OFFSET: tuple[float, float] = (-13379008.0, 2727648.0)

#: Identifier of the global BTE projection
BTE_CRS_CODE = "airocean:bte"

#: Identifier of the regional (ASEAN) BTE projection
ASEAN_BTE_CRS_CODE = "airocean:aseanbte"

#: Number of lattice subdivisions along one side of the conformal field
CONFORMAL_SIDE_LENGTH: int = 256

#: Newton iterations used by the conformal forward transform
CONFORMAL_NEWTON_ITERATIONS: int = 5

#: Newton iterations used by the Dymaxion inverse triangle transform
DYMAXION_NEWTON_ITERATIONS: int = 5

#: Environment variable pointing at a published conformal field table
CONFORMAL_TABLE_ENV = "BTE_GEOTOOLS_CONFORMAL_TABLE"

# -----------------------------------------------------------------------------
# KML
# -----------------------------------------------------------------------------

#: KML 2.2 (OGC) namespace
KML_22_NAMESPACE = "http://www.opengis.net/kml/2.2"

#: KML 2.1 (Google) namespace
KML_21_NAMESPACE = "http://earth.google.com/kml/2.1"

#: Element streamed as one feature when reading KML
DEFAULT_PARSING_ELEMENT = "Placemark"

#: Tags recognized as KML geometries
KML_GEOMETRY_TAGS: frozenset[str] = frozenset(
    {"Point", "LineString", "LinearRing", "Polygon", "MultiGeometry"}
)

# -----------------------------------------------------------------------------
# Output Formatting
# -----------------------------------------------------------------------------

#: Default indentation width for pretty-printed output
DEFAULT_INDENT: int = 2

#: Decimal places used by the GeoJSON writer when no precision is requested
GEOJSON_FULL_PRECISION: int = 17

#: Chunk size used when scanning JSON documents incrementally
JSON_READ_CHUNK_SIZE: int = 64 * 1024

# -----------------------------------------------------------------------------
# BlueMap
# -----------------------------------------------------------------------------

#: Default line width of BlueMap shape/line markers
BLUEMAP_LINE_WIDTH: int = 2

#: Default line color (r, g, b, a) of BlueMap markers
BLUEMAP_LINE_COLOR: tuple[int, int, int, float] = (255, 0, 0, 1.0)

#: Default fill color (r, g, b, a) of BlueMap markers
BLUEMAP_FILL_COLOR: tuple[int, int, int, float] = (200, 0, 0, 0.3)

#: Default icon of BlueMap point-of-interest markers
BLUEMAP_POI_ICON = "assets/poi.svg"

#: Anchor (x, y) of the default BlueMap point-of-interest icon, in pixels
BLUEMAP_POI_ANCHOR: tuple[int, int] = (25, 45)

# -----------------------------------------------------------------------------
# WorldEdit
# -----------------------------------------------------------------------------

#: Block placed when no pattern is configured
DEFAULT_BLOCK = "minecraft:diamond_block"

#: Block used to clear polygon holes
AIR_BLOCK = "minecraft:air"
