# -*- coding: utf-8 -*-
"""Streaming GeoJSON reader and writer.

Reading a ``FeatureCollection`` never loads the whole document: a small
incremental scanner locates the top-level ``features`` array and hands the
bytes of one member at a time to :func:`orjson.loads`. A document holding
a single ``Feature`` or a bare geometry is read whole.

Writing builds each feature with the ``geojson`` object model and
serialises it with orjson as soon as it is written.
"""

from __future__ import annotations

import codecs
import logging
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from typing import BinaryIO

import geojson
import orjson

from bte_geotools.constants import GEOJSON_FULL_PRECISION
from bte_geotools.constants import JSON_READ_CHUNK_SIZE
from bte_geotools.errors import IncompleteFeatureError
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import Feature
from bte_geotools.geometry import Geometry
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import MultiLineString
from bte_geotools.geometry import MultiPoint
from bte_geotools.geometry import MultiPolygon
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon
from bte_geotools.geometry import position_to_list
from bte_geotools.models import WriterOptions
from bte_geotools.streaming import FeatureReader
from bte_geotools.streaming import FeatureWriter

logger = logging.getLogger(__name__)

#: Bytes that change the state of the JSON scanner
_TOKENS = re.compile(rb'[\\"{}\[\],:]')

_FEATURES_KEY = b"features"

_GEOMETRY_TYPES = frozenset(
    {"Point", "LineString", "Polygon", "MultiPoint", "MultiLineString", "MultiPolygon"}
)


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def _loads(data: bytes, context: str) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise MalformedSourceError(f"Malformed GeoJSON {context}", exc) from exc


def _rings(coordinates: Any) -> tuple[LinearRing, tuple[LinearRing, ...]]:
    if not isinstance(coordinates, list) or not coordinates:
        raise IncompleteFeatureError("A polygon needs at least one ring")
    shell, *holes = coordinates
    return LinearRing(shell), tuple(LinearRing(hole) for hole in holes)


def parse_geometry(obj: Any) -> Geometry:
    """Decode a GeoJSON geometry object.

    Raises:
        MalformedSourceError: If the object is not a known geometry
        IncompleteFeatureError: If the geometry is structurally invalid
    """
    if not isinstance(obj, dict):
        raise MalformedSourceError(f"A GeoJSON geometry must be an object, got {obj!r}")

    kind = obj.get("type")

    if kind == "GeometryCollection":
        geometries = obj.get("geometries")
        if not isinstance(geometries, list):
            raise IncompleteFeatureError("GeometryCollection without `geometries`")
        return GeometryCollection(tuple(parse_geometry(child) for child in geometries))

    coordinates = obj.get("coordinates")
    if kind in _GEOMETRY_TYPES and not isinstance(coordinates, list):
        raise IncompleteFeatureError(f"{kind} without a `coordinates` array")

    match kind:
        case "Point":
            return Point(coordinates)

        case "LineString":
            return LineString(coordinates)

        case "Polygon":
            return Polygon(*_rings(coordinates))

        case "MultiPoint":
            return MultiPoint(tuple(Point(position) for position in coordinates))

        case "MultiLineString":
            return MultiLineString(tuple(LineString(line) for line in coordinates))

        case "MultiPolygon":
            return MultiPolygon(tuple(Polygon(*_rings(rings)) for rings in coordinates))

        case _:
            raise MalformedSourceError(f"Unsupported GeoJSON geometry type `{kind}`")


def parse_feature(obj: Any) -> Feature | None:
    """Decode a GeoJSON feature object, ``None`` when its geometry is ``null``.

    Raises:
        MalformedSourceError: If the object is not a feature
    """
    if not isinstance(obj, dict) or obj.get("type") != "Feature":
        raise MalformedSourceError("Expected a GeoJSON Feature object")

    if (geometry := obj.get("geometry")) is None:
        return None

    properties = obj.get("properties") or {}
    if not isinstance(properties, dict):
        raise MalformedSourceError("GeoJSON feature `properties` must be an object")

    feature_id = obj.get("id")
    return Feature(
        geometry=parse_geometry(geometry),
        id=str(feature_id) if feature_id is not None else None,
        properties=properties,
    )


class FeatureArrayScanner:
    """Yield the raw bytes of each member of a top-level ``features`` array.

    Only the member being scanned is buffered. After iteration,
    :attr:`found` tells whether the document had such an array at all.

    Args:
        stream: Binary stream positioned at the start of the document
        chunk_size: Number of bytes read at once
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = JSON_READ_CHUNK_SIZE):
        self.stream = stream
        self.chunk_size = chunk_size
        self.found = False

    def _chunks(self) -> Iterator[bytes]:
        """Read the stream chunk by chunk, without a leading UTF-8 BOM."""
        head = b""
        while len(head) < len(codecs.BOM_UTF8):
            if not (chunk := self.stream.read(self.chunk_size)):
                break
            head += chunk

        if head := head.removeprefix(codecs.BOM_UTF8):
            yield head

        while chunk := self.stream.read(self.chunk_size):
            yield chunk

    def __iter__(self) -> Iterator[bytes]:  # noqa: C901, PLR0912, PLR0915
        depth = 0
        in_string = False
        escaped = -1  # absolute offset of the byte following a backslash
        offset = 0
        started = False

        expect_key = False
        key_parts: list[bytes] | None = None
        key_from = 0
        last_key = b""

        in_features = False
        member: list[bytes] | None = None
        member_from = 0

        for chunk in self._chunks():
            if not started:
                head = chunk.lstrip()
                if not head:
                    offset += len(chunk)
                    continue
                if not head.startswith(b"{"):
                    return
                started = True

            for hit in _TOKENS.finditer(chunk):
                i = hit.start()
                if offset + i == escaped:
                    continue
                token = chunk[i : i + 1]

                if in_string:
                    if token == b"\\":
                        escaped = offset + i + 1
                    elif token == b'"':
                        in_string = False
                        if key_parts is not None:
                            key_parts.append(chunk[key_from:i])
                            last_key = b"".join(key_parts)
                            key_parts = None
                    continue

                match token:
                    case b'"':
                        in_string = True
                        if depth == 1 and expect_key:
                            expect_key = False
                            key_parts = []
                            key_from = i + 1

                    case b"{" | b"[":
                        depth += 1
                        if depth == 1:
                            expect_key = True
                        elif depth == 2 and token == b"[" and last_key == _FEATURES_KEY:  # noqa: PLR2004
                            in_features = True
                            self.found = True
                        elif depth == 3 and in_features:  # noqa: PLR2004
                            member = []
                            member_from = i

                    case b"}" | b"]":
                        depth -= 1
                        if in_features and depth == 2 and member is not None:  # noqa: PLR2004
                            member.append(chunk[member_from : i + 1])
                            yield b"".join(member)
                            member = None
                        elif in_features and depth == 1:
                            in_features = False
                            last_key = b""

                    case b",":
                        if depth == 1:
                            expect_key = True

            if member is not None:
                member.append(chunk[member_from:])
                member_from = 0
            if key_parts is not None:
                key_parts.append(chunk[key_from:])
                key_from = 0
            offset += len(chunk)

        if started and (depth != 0 or in_string):
            raise MalformedSourceError("Truncated GeoJSON document")


class GeoJSONFeatureReader(FeatureReader):
    """Stream the features of a GeoJSON document.

    Args:
        path: GeoJSON document
        chunk_size: Number of bytes read at once
    """

    def __init__(self, path: str | Path, chunk_size: int = JSON_READ_CHUNK_SIZE):
        super().__init__(path)
        self._raw = self._raw_features(self._stream, chunk_size)

    def _raw_features(self, stream: BinaryIO, chunk_size: int) -> Iterator[Any]:
        scanner = FeatureArrayScanner(stream, chunk_size)
        for index, data in enumerate(scanner):
            yield _loads(data, f"feature #{index} in `{self.path.name}`")

        if scanner.found:
            return

        # Not a FeatureCollection: a single Feature or a bare geometry
        stream.seek(0)
        data = stream.read().removeprefix(codecs.BOM_UTF8)
        document = _loads(data, f"document `{self.path.name}`")
        if not isinstance(document, dict):
            raise MalformedSourceError(
                f"`{self.path.name}` is not a GeoJSON object"
            )

        match document.get("type"):
            case "FeatureCollection":
                raise MalformedSourceError(
                    f"FeatureCollection without `features` in `{self.path.name}`"
                )
            case "Feature":
                yield document
            case _:
                yield {"type": "Feature", "geometry": document, "properties": {}}

    def _read_next(self, stream: BinaryIO) -> Feature | None:
        for obj in self._raw:
            if (feature := parse_feature(obj)) is not None:
                return feature
            logger.warning(
                "Skipping feature without geometry in `%s` (id: %s)",
                self.path.name,
                obj.get("id"),
            )
        return None

    def close(self) -> None:
        self._raw.close()
        super().close()


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def to_geojson(geometry: Geometry, precision: int = GEOJSON_FULL_PRECISION) -> geojson.base.GeoJSON:
    """Convert a geometry to its ``geojson`` object.

    Standalone rings are written as ``LineString`` (GeoJSON has no ring type).
    """

    def positions(coords):
        return [position_to_list(position) for position in coords]

    match geometry:
        case Point():
            return geojson.Point(position_to_list(geometry.coords[0]), precision=precision)

        case LineString():
            return geojson.LineString(positions(geometry.coords), precision=precision)

        case Polygon():
            return geojson.Polygon(
                [positions(ring.coords) for ring in geometry.rings], precision=precision
            )

        case MultiPoint():
            return geojson.MultiPoint(
                [position_to_list(point.coords[0]) for point in geometry],
                precision=precision,
            )

        case MultiLineString():
            return geojson.MultiLineString(
                [positions(line.coords) for line in geometry], precision=precision
            )

        case MultiPolygon():
            return geojson.MultiPolygon(
                [[positions(ring.coords) for ring in polygon.rings] for polygon in geometry],
                precision=precision,
            )

        case GeometryCollection():
            return geojson.GeometryCollection(
                [to_geojson(child, precision) for child in geometry]
            )

        case _:
            raise UnsupportedConversionError(
                f"Cannot write {type(geometry).__name__} to GeoJSON"
            )


def reindent(data: bytes, indent: int, level: int = 0) -> bytes:
    """Re-indent orjson ``OPT_INDENT_2`` output to ``indent`` spaces, nested ``level`` deep."""
    lines = []
    for line in data.split(b"\n"):
        stripped = line.lstrip(b" ")
        depth = (len(line) - len(stripped)) // 2 + level
        lines.append(b" " * (depth * indent) + stripped)
    return b"\n".join(lines)


class GeoJSONFeatureWriter(FeatureWriter):
    """Write features as a GeoJSON ``FeatureCollection``.

    Args:
        target: Binary stream or output path
        options: Serialization options
    """

    @property
    def precision(self) -> int:
        if self.options.precision is None:
            return GEOJSON_FULL_PRECISION
        return self.options.precision

    def _header(self) -> bytes:
        if not self.options.pretty:
            return b'{"type":"FeatureCollection","features":['
        pad = b" " * self.options.indent
        return b'{\n' + pad + b'"type": "FeatureCollection",\n' + pad + b'"features": ['

    def _footer(self) -> bytes:
        if not self.options.pretty:
            return b"]}"
        pad = b" " * self.options.indent
        closing = b"\n" + pad + b"]" if self.count else b"]"
        return closing + b"\n}\n"

    def _encode_feature(self, feature: Feature, feature_id: str, index: int) -> bytes:
        obj = geojson.Feature(
            id=feature_id,
            geometry=to_geojson(feature.geometry, self.precision),
            properties=dict(feature.properties),
        )

        if not self.options.pretty:
            data = orjson.dumps(obj)
            return data if index == 0 else b"," + data

        data = reindent(orjson.dumps(obj, option=orjson.OPT_INDENT_2), self.options.indent, 2)
        return (b"\n" if index == 0 else b",\n") + data


def dumps_document(obj: Any, options: WriterOptions) -> bytes:
    """Serialise a whole JSON document with the pretty-print options."""
    if not options.pretty:
        return orjson.dumps(obj)
    return reindent(orjson.dumps(obj, option=orjson.OPT_INDENT_2), options.indent) + b"\n"
