# -*- coding: utf-8 -*-
"""Configuration models of the conversion pipeline.

All options are immutable Pydantic models validated once at construction,
then passed by reference through readers, writers and dispatchers.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING
from typing import Annotated
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic import model_validator

from bte_geotools.constants import BLUEMAP_FILL_COLOR
from bte_geotools.constants import BLUEMAP_LINE_COLOR
from bte_geotools.constants import BLUEMAP_LINE_WIDTH
from bte_geotools.constants import DEFAULT_BLOCK
from bte_geotools.constants import DEFAULT_INDENT
from bte_geotools.constants import DEFAULT_PARSING_ELEMENT
from bte_geotools.constants import EARTH_TO_MINECRAFT_SCALE
from bte_geotools.constants import UNIT_RADIUS
from bte_geotools.coordinates import Drop
from bte_geotools.coordinates import Normalize
from bte_geotools.coordinates import Offset
from bte_geotools.enums import ElevationMode
from bte_geotools.enums import GeometryKind
from bte_geotools.enums import KMLVersion

if TYPE_CHECKING:
    from bte_geotools.coordinates import ZPolicy

logger = logging.getLogger(__name__)

#: RGBA color, alpha in [0, 1]
Color = tuple[
    Annotated[int, Field(ge=0, le=255)],
    Annotated[int, Field(ge=0, le=255)],
    Annotated[int, Field(ge=0, le=255)],
    Annotated[float, Field(ge=0.0, le=1.0)],
]


class ElevationEdit(BaseModel):
    """Requested elevation (Z) edit of a conversion.

    At most one policy applies: ``drop`` wins over ``normalize``, which wins
    over ``offset``.

    Attributes:
        normalize: Set every elevation to this value
        offset: Add this value to every present elevation
        drop: Remove every elevation (2D output)
    """

    model_config = ConfigDict(frozen=True)

    normalize: float | None = None
    offset: float | None = None
    drop: bool = False

    @field_validator("normalize", "offset")
    @classmethod
    def validate_finite(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError(f"Elevation edits must be finite, got {v}")
        return v

    def resolve(self) -> ZPolicy | None:
        """Resolve the single effective policy, ``None`` for no edit."""
        if self.drop:
            return Drop()
        if self.normalize is not None:
            if self.offset is not None:
                logger.debug(
                    "Both normalize and offset requested, normalize takes priority"
                )
            return Normalize(self.normalize)
        if self.offset is not None:
            return Offset(self.offset)
        return None


class WriterOptions(BaseModel):
    """Serialization options of document writers.

    Attributes:
        pretty: Pretty-print the output (``False`` for compact output)
        indent: Indentation width used when pretty-printing
        precision: Maximum number of decimal places of coordinates
    """

    model_config = ConfigDict(frozen=True)

    pretty: bool = True
    indent: Annotated[int, Field(default=DEFAULT_INDENT, ge=0, le=16)]
    precision: Annotated[int | None, Field(default=None, ge=0, le=17)]


class MarkerStyle(BaseModel):
    """Rendering style of BlueMap shape, line and extrude markers."""

    model_config = ConfigDict(frozen=True)

    line_width: Annotated[int, Field(default=BLUEMAP_LINE_WIDTH, ge=0)]
    line_color: Color = BLUEMAP_LINE_COLOR
    fill_color: Color = BLUEMAP_FILL_COLOR

    @staticmethod
    def color_json(color: Color) -> dict[str, Any]:
        r, g, b, a = color
        return {"r": r, "g": g, "b": b, "a": a}


class MarkerOptions(BaseModel):
    """Options of the BlueMap marker sink.

    Attributes:
        label: Marker-set label (defaults to the output file stem)
        toggleable: Whether the marker set can be toggled in the web UI
        default_hidden: Whether the marker set starts hidden
        sorting: Sorting priority of the marker set
        normalize_naming: Rewrite marker and set keys as lowercase hyphen slugs
        elevation: Elevation aggregation policy
        normalize_value: Fixed elevation used with ``ElevationMode.NORMALIZED``
        extrude: Extrusion length of polygons and rings (extrude markers)
        precision: Maximum number of decimal places of marker positions
        styles: Per geometry kind marker style table
        default_style: Style used when the table has no matching entry
        strict: Fail on unsupported geometries instead of skipping them
    """

    model_config = ConfigDict(frozen=True)

    label: str | None = None
    toggleable: bool = True
    default_hidden: bool = False
    sorting: int = 0
    normalize_naming: bool = False
    elevation: ElevationMode = ElevationMode.AUTO
    normalize_value: float | None = None
    extrude: Annotated[float | None, Field(default=None, gt=0)]
    precision: Annotated[int | None, Field(default=None, ge=0, le=17)]
    styles: dict[GeometryKind, MarkerStyle] | None = None
    default_style: MarkerStyle = MarkerStyle()
    strict: bool = False

    @model_validator(mode="after")
    def validate_elevation(self) -> MarkerOptions:
        if self.elevation == ElevationMode.NORMALIZED and self.normalize_value is None:
            raise ValueError("`normalize_value` is required for normalized elevation")
        if self.normalize_value is not None and self.elevation != ElevationMode.NORMALIZED:
            raise ValueError(
                "`normalize_value` is only valid with ElevationMode.NORMALIZED"
            )
        return self


class BlockOptions(BaseModel):
    """Options of the WorldEdit block sink.

    Attributes:
        writing_size: Radius of points and lines (``0`` for single blocks)
        fill_stroke: Fill spheres and line brushes instead of hollowing them
        fill_geometry: Fill polygon areas
        styles: Block id per geometry kind
        fallback: Block id used when the table has no matching entry
    """

    model_config = ConfigDict(frozen=True)

    writing_size: Annotated[float, Field(default=0.0, ge=0)]
    fill_stroke: bool = False
    fill_geometry: bool = False
    styles: dict[GeometryKind, str] | None = None
    fallback: str = DEFAULT_BLOCK


class ConversionOptions(BaseModel):
    """Complete, immutable configuration of one conversion.

    Attributes:
        elevation: Elevation (Z) edit applied to every feature
        writer: Document writer serialization options
        markers: BlueMap sink options (marker sink only)
        blocks: WorldEdit sink options (block sink only)
        projection: Projection applied before rendering (``None`` means the
            sink default: BTE for marker/block sinks, none for documents)
        strict: Fail on unsupported geometries instead of skipping them
        parsing_element: KML element streamed as one feature
        kml_version: KML schema version of the KML writer
        drop_namespace: Write the KML root without a namespace
        document_id: Identifier of the written KML document
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    elevation: ElevationEdit = ElevationEdit()
    writer: WriterOptions = WriterOptions()
    markers: MarkerOptions | None = None
    blocks: BlockOptions | None = None
    projection: Any = None
    strict: bool = False
    parsing_element: str = DEFAULT_PARSING_ELEMENT
    kml_version: KMLVersion = KMLVersion.V22
    drop_namespace: bool = False
    document_id: str | None = None


class ProjectionParameters(BaseModel):
    """Parameters of the BTE projection.

    The base transform is only valid on the unit sphere, so both radii are
    fixed; the scale factor is calibrated but may be overridden.
    """

    model_config = ConfigDict(frozen=True)

    semi_major: float = UNIT_RADIUS
    semi_minor: float = UNIT_RADIUS
    scale_factor: Annotated[float, Field(default=EARTH_TO_MINECRAFT_SCALE, gt=0)]
    false_easting: float = 0.0
    false_northing: float = 0.0

    @field_validator("semi_major", "semi_minor")
    @classmethod
    def validate_unit_radius(cls, v: float) -> float:
        if v != UNIT_RADIUS:
            raise ValueError(
                f"This projection operates in a normalized unit circle, got radius {v}"
            )
        return v

    @field_validator("scale_factor")
    @classmethod
    def validate_scale_factor(cls, v: float) -> float:
        if v != EARTH_TO_MINECRAFT_SCALE:
            logger.warning(
                "Scale factor %s differs from the validated Earth-to-Minecraft "
                "scale %s; results are untested.",
                v,
                EARTH_TO_MINECRAFT_SCALE,
            )
        return v

    @field_validator("false_easting", "false_northing")
    @classmethod
    def validate_offset(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Offsets must be finite, got {v}")
        return v
