# -*- coding: utf-8 -*-
"""Recursive geometry rendering shared by the marker and block sinks.

A dispatcher walks one geometry and hands every leaf (point, line, ring,
polygon) to the sink-specific ``render_*`` hook together with its output
key and rendering style. Collection children get the key of their parent
suffixed with their zero-based index (``key-0``, ``key-1``, nested as
``key-0-0``).

Style tables map a :class:`~bte_geotools.enums.GeometryKind` to a
sink-specific style. A ``GeometryKind.GEOMETRY`` entry overrides every
other entry.
"""

from __future__ import annotations

import logging
from abc import ABC
from abc import abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Generic
from typing import TypeVar

from bte_geotools.enums import GeometryKind
from bte_geotools.errors import UnsupportedConversionError
from bte_geotools.geometry import GeometryCollection
from bte_geotools.geometry import LinearRing
from bte_geotools.geometry import LineString
from bte_geotools.geometry import MultiLineString
from bte_geotools.geometry import MultiPoint
from bte_geotools.geometry import MultiPolygon
from bte_geotools.geometry import Point
from bte_geotools.geometry import Polygon

if TYPE_CHECKING:
    from bte_geotools.geometry import Feature
    from bte_geotools.geometry import Geometry

logger = logging.getLogger(__name__)

StyleT = TypeVar("StyleT")


def resolve_name(label: str | None, feature: Feature | None, index: int) -> str:
    """Resolve the display name of an emission.

    Order: explicit ``label``, the feature's ``name`` property, the feature
    identifier, then ``index``.
    """
    if label is not None:
        return label
    if feature is not None:
        if feature.name is not None:
            return feature.name
        if feature.id is not None:
            return str(feature.id)
    return str(index)


def indexed_key(key: str, index: int) -> str:
    return f"{key}-{index}"


class GeometryDispatcher(ABC, Generic[StyleT]):
    """Exhaustive geometry match with style resolution.

    Args:
        styles: Per geometry kind style table (optional)
        default: Style used when the table has no matching entry
        strict: Raise on unsupported geometries instead of skipping them
    """

    def __init__(
        self,
        styles: Mapping[GeometryKind, StyleT] | None,
        default: StyleT,
        *,
        strict: bool = False,
    ):
        self.styles = dict(styles) if styles else None
        self.default_style = default
        self.strict = strict

    def style_for(self, kind: GeometryKind) -> StyleT | None:
        """Registered style of ``kind``, the wildcard entry first."""
        if self.styles is None:
            return None
        if GeometryKind.GEOMETRY in self.styles:
            return self.styles[GeometryKind.GEOMETRY]
        return self.styles.get(kind)

    def style_or_default(self, kind: GeometryKind) -> StyleT:
        style = self.style_for(kind)
        return style if style is not None else self.default_style

    def render(
        self,
        geometry: Geometry,
        key: str,
        label: str,
        parent: GeometryCollection | None = None,
    ) -> int:
        """Render ``geometry`` and return the number of emitted primitives.

        Args:
            geometry: Geometry to render
            key: Output key of the geometry
            label: Human-readable name of the emissions
            parent: Generic collection holding ``geometry``; its registered
                style takes precedence

        Raises:
            UnsupportedConversionError: On an unknown geometry in strict mode
        """
        inherited = self.style_for(parent.kind) if parent is not None else None
        style = inherited if inherited is not None else self.style_or_default(geometry.kind)

        match geometry:
            case Point():
                return self.render_point(geometry, key, label, style)

            case LinearRing():
                return self.render_ring(geometry, key, label, style)

            case LineString():
                return self.render_line(geometry, key, label, style)

            case Polygon():
                return self.render_polygon(geometry, key, label, style)

            case MultiPoint() | MultiLineString() | MultiPolygon():
                # every part uses the style of the multi-part kind
                part_style = self.style_or_default(geometry.kind)
                return sum(
                    self._render_part(child, indexed_key(key, index), label, part_style)
                    for index, child in enumerate(geometry)
                )

            case GeometryCollection():
                return sum(
                    self.render(child, indexed_key(key, index), label, parent=geometry)
                    for index, child in enumerate(geometry)
                )

            case _:
                return self.unsupported(geometry, key)

    def _render_part(self, geometry: Geometry, key: str, label: str, style: StyleT) -> int:
        match geometry:
            case Point():
                return self.render_point(geometry, key, label, style)
            case LineString():
                return self.render_line(geometry, key, label, style)
            case Polygon():
                return self.render_polygon(geometry, key, label, style)
            case _:
                return self.unsupported(geometry, key)

    def unsupported(self, geometry: Geometry, key: str) -> int:
        if self.strict:
            raise UnsupportedConversionError(
                f"Unsupported geometry {type(geometry).__name__} (key: `{key}`)"
            )
        logger.debug("Skipping unsupported geometry %s (key: `%s`)", type(geometry).__name__, key)
        return 0

    @abstractmethod
    def render_point(self, point: Point, key: str, label: str, style: StyleT) -> int: ...

    @abstractmethod
    def render_line(self, line: LineString, key: str, label: str, style: StyleT) -> int: ...

    @abstractmethod
    def render_ring(self, ring: LinearRing, key: str, label: str, style: StyleT) -> int: ...

    @abstractmethod
    def render_polygon(self, polygon: Polygon, key: str, label: str, style: StyleT) -> int: ...
