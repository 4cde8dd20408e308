# -*- coding: utf-8 -*-
"""Streaming KML reader and writer.

The reader walks the document with :func:`xml.etree.ElementTree.iterparse`
and detaches every consumed element, so memory stays bounded whatever the
number of placemarks. Tags are matched on their local name: KML 2.1, KML
2.2 and unqualified documents are read alike.

The writer emits one ``<Placemark>`` per feature inside a single
``<Document>``. Coordinates are always written at full precision.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import BinaryIO

from bte_geotools.constants import DEFAULT_PARSING_ELEMENT
from bte_geotools.constants import KML_ENCODING
from bte_geotools.constants import KML_GEOMETRY_TAGS
from bte_geotools.enums import KMLVersion
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Feature
from bte_geotools.geometry import Geometry
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon
from bte_geotools.geometry import collection_of
from bte_geotools.geometry import position_to_list
from bte_geotools.streaming import FeatureReader
from bte_geotools.streaming import FeatureWriter

if TYPE_CHECKING:
    import numpy as np

    from bte_geotools.models import WriterOptions

logger = logging.getLogger(__name__)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix of an element tag."""
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in elem if local_name(child.tag) == name]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    for child in elem:
        if local_name(child.tag) == name:
            return child
    return None


def _text(elem: ET.Element | None) -> str | None:
    if elem is None or elem.text is None:
        return None
    return elem.text.strip()


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def parse_coordinates(text: str | None) -> list[list[float]]:
    """Parse a ``<coordinates>`` body: ``lon,lat[,alt]`` tuples separated by whitespace.

    Raises:
        IncompleteFeatureError: If the body is empty
        MalformedSourceError: If a tuple is not 2 or 3 numbers
    """
    if text is None or not text.strip():
        raise IncompleteFeatureError("Empty <coordinates> element")

    positions = []
    for token in text.split():
        parts = token.split(",")
        if len(parts) not in (2, 3):
            raise MalformedSourceError(f"Invalid KML coordinate tuple `{token}`")
        try:
            positions.append([float(part) for part in parts])
        except ValueError as exc:
            raise MalformedSourceError(f"Invalid KML coordinate tuple `{token}`", exc) from exc
    return positions


def _ring(elem: ET.Element | None, context: str) -> LinearRing:
    ring = _child(elem, "LinearRing") if elem is not None else None
    if ring is None:
        raise IncompleteFeatureError(f"Polygon {context} without a <LinearRing>")
    return LinearRing(_coordinates_of(ring))


def _coordinates_of(elem: ET.Element) -> list[list[float]]:
    return parse_coordinates(_text(_child(elem, "coordinates")))


def parse_geometry(elem: ET.Element) -> Geometry:
    """Decode a KML geometry element.

    Raises:
        IncompleteFeatureError: If the geometry is structurally invalid
        MalformedSourceError: If a coordinate cannot be decoded
    """
    match tag := local_name(elem.tag):
        case "Point":
            return Point(_coordinates_of(elem))

        case "LineString":
            return LineString(_coordinates_of(elem))

        case "LinearRing":
            return LinearRing(_coordinates_of(elem))

        case "Polygon":
            shell = _ring(_child(elem, "outerBoundaryIs"), "outer boundary")
            holes = tuple(
                _ring(inner, "inner boundary")
                for inner in _children(elem, "innerBoundaryIs")
            )
            return Polygon(shell, holes)

        case "MultiGeometry":
            return collection_of(
                parse_geometry(child)
                for child in elem
                if local_name(child.tag) in KML_GEOMETRY_TAGS
            )

        case _:
            raise MalformedSourceError(f"Unsupported KML geometry <{tag}>")


def parse_properties(elem: ET.Element) -> dict[str, Any]:
    """Collect name, description and extended data of a placemark."""
    properties: dict[str, Any] = {}

    for key in ("name", "description"):
        if (value := _text(_child(elem, key))) is not None:
            properties[key] = value

    extended = _child(elem, "ExtendedData")
    if extended is not None:
        for data in _children(extended, "Data"):
            if (key := data.get("name")) is not None:
                properties[key] = _text(_child(data, "value"))

        for schema in _children(extended, "SchemaData"):
            for data in _children(schema, "SimpleData"):
                if (key := data.get("name")) is not None:
                    properties[key] = _text(data)

    return properties


class KMLFeatureReader(FeatureReader):
    """Stream the placemarks of a KML document as features.

    Args:
        path: KML document
        parsing_element: Local name of the element read as one feature
    """

    def __init__(self, path: str | Path, parsing_element: str = DEFAULT_PARSING_ELEMENT):
        super().__init__(path)
        self.parsing_element = parsing_element
        self._events = ET.iterparse(self._stream, events=("start", "end"))
        self._open: list[ET.Element] = []
        self._depth = 0

    def _to_feature(self, elem: ET.Element) -> Feature | None:
        if local_name(elem.tag) in KML_GEOMETRY_TAGS:
            geometry_elem: ET.Element | None = elem
        else:
            geometry_elem = next(
                (child for child in elem if local_name(child.tag) in KML_GEOMETRY_TAGS),
                None,
            )

        if geometry_elem is None:
            logger.warning(
                "Skipping <%s> without geometry in `%s`", self.parsing_element, self.path.name
            )
            return None

        return Feature(
            geometry=parse_geometry(geometry_elem),
            id=elem.get("id"),
            properties=parse_properties(elem),
        )

    def _read_next(self, stream: BinaryIO) -> Feature | None:
        while True:
            try:
                event, elem = next(self._events)
            except StopIteration:
                return None
            except ET.ParseError as exc:
                raise MalformedSourceError(
                    f"Malformed KML document `{self.path.name}`", exc
                ) from exc

            is_target = local_name(elem.tag) == self.parsing_element

            if event == "start":
                self._open.append(elem)
                if is_target:
                    self._depth += 1
                continue

            self._open.pop()
            parent = self._open[-1] if self._open else None

            if is_target:
                self._depth -= 1
                if self._depth == 0:
                    feature = self._to_feature(elem)
                    if parent is not None:
                        parent.remove(elem)
                    if feature is not None:
                        return feature

            elif self._depth == 0 and parent is not None:
                # Document-level metadata (styles, folders' names, ...) is not kept
                parent.remove(elem)


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def _format_coordinates(coords: np.ndarray) -> str:
    return " ".join(
        ",".join(repr(value) for value in position_to_list(position))
        for position in coords
    )


def _coordinates_elem(parent: ET.Element, coords: np.ndarray) -> None:
    ET.SubElement(parent, "coordinates").text = _format_coordinates(coords)


def build_geometry(parent: ET.Element, geometry: Geometry) -> None:
    """Append the KML element of ``geometry`` to ``parent``."""
    match geometry:
        case Point():
            _coordinates_elem(ET.SubElement(parent, "Point"), geometry.coords)

        case LinearRing():
            _coordinates_elem(ET.SubElement(parent, "LinearRing"), geometry.coords)

        case LineString():
            _coordinates_elem(ET.SubElement(parent, "LineString"), geometry.coords)

        case Polygon():
            polygon = ET.SubElement(parent, "Polygon")
            outer = ET.SubElement(polygon, "outerBoundaryIs")
            _coordinates_elem(ET.SubElement(outer, "LinearRing"), geometry.shell.coords)
            for hole in geometry.holes:
                inner = ET.SubElement(polygon, "innerBoundaryIs")
                _coordinates_elem(ET.SubElement(inner, "LinearRing"), hole.coords)

        case GeometryCollection():
            multi = ET.SubElement(parent, "MultiGeometry")
            for child in geometry:
                build_geometry(multi, child)

        case _:
            raise UnsupportedConversionError(
                f"Cannot write {type(geometry).__name__} to KML"
            )


class KMLFeatureWriter(FeatureWriter):
    """Write features as the placemarks of a KML document.

    Args:
        target: Binary stream or output path
        options: Serialization options (``precision`` is not supported)
        version: KML schema version
        drop_namespace: Write the ``<kml>`` root without ``xmlns``
        document_id: Identifier of the ``<Document>`` element
    """

    def __init__(
        self,
        target: BinaryIO | str | Path,
        options: WriterOptions | None = None,
        version: KMLVersion = KMLVersion.V22,
        *,
        drop_namespace: bool = False,
        document_id: str | None = None,
    ):
        super().__init__(target, options)
        self.version = version
        self.drop_namespace = drop_namespace
        self.document_id = document_id

    def _validate_options(self, options: WriterOptions) -> None:
        if options.precision is not None:
            raise UnsupportedConversionError(
                "KML output always uses full coordinate precision, "
                "a fixed precision is not supported"
            )

    @property
    def _pretty(self) -> bool:
        return self.options.pretty

    def _newline(self, level: int) -> str:
        if not self._pretty:
            return ""
        return "\n" + " " * (self.options.indent * level)

    def _header(self) -> bytes:
        root = "<kml>" if self.drop_namespace else f'<kml xmlns="{self.version.namespace}">'

        document = ET.Element("Document")
        if self.document_id is not None:
            document.set("id", self.document_id)
        # serialised self-closed, reopened by hand
        opening = ET.tostring(document, encoding="unicode").replace(" />", ">")

        return (
            f'<?xml version="1.0" encoding="{KML_ENCODING.upper()}"?>'
            f"{self._newline(0)}{root}{self._newline(1)}{opening}"
        ).encode(KML_ENCODING)

    def _footer(self) -> bytes:
        closing = f"{self._newline(1)}</Document>{self._newline(0)}</kml>"
        if self._pretty:
            closing += "\n"
        return closing.encode(KML_ENCODING)

    def _encode_feature(self, feature: Feature, feature_id: str, index: int) -> bytes:
        placemark = ET.Element("Placemark", {"id": feature_id})

        properties = dict(feature.properties)
        for key in ("name", "description"):
            if (value := properties.pop(key, None)) is not None:
                ET.SubElement(placemark, key).text = str(value)

        if properties:
            extended = ET.SubElement(placemark, "ExtendedData")
            for key, value in properties.items():
                data = ET.SubElement(extended, "Data", {"name": str(key)})
                ET.SubElement(data, "value").text = "" if value is None else str(value)

        build_geometry(placemark, feature.geometry)

        if self._pretty and self.options.indent:
            ET.indent(placemark, space=" " * self.options.indent, level=2)

        return (self._newline(2) + ET.tostring(placemark, encoding="unicode")).encode(
            KML_ENCODING
        )
