# -*- coding: utf-8 -*-
"""BlueMap marker-set sink.

Every leaf geometry becomes one BlueMap marker:

* ``Point`` → ``poi``
* ``LineString`` → ``line``
* ``LinearRing`` and ``Polygon`` → ``shape``, or ``extrude`` when an
  extrusion length is configured

Coordinates are expected in Minecraft block space: the projected ``(x, y)``
become BlueMap ``(x, z)`` and the elevation becomes BlueMap ``y``.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import BinaryIO

import numpy as np

from bte_geotools.constants import BLUEMAP_POI_ANCHOR
from bte_geotools.constants import BLUEMAP_POI_ICON
from bte_geotools.coordinates import average_elevation
from bte_geotools.dispatch import GeometryDispatcher
from bte_geotools.dispatch import resolve_name
from bte_geotools.enums import ElevationMode
from bte_geotools.errors import ResourceIOError
from bte_geotools.geojson import dumps_document
from bte_geotools.models import MarkerOptions
from bte_geotools.models import MarkerStyle
from bte_geotools.models import WriterOptions

if TYPE_CHECKING:
    from bte_geotools.geometry import Feature
    from bte_geotools.geometry import LinearRing
    from bte_geotools.geometry import LineString
    from bte_geotools.geometry import Point
    from bte_geotools.geometry import Polygon

logger = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.[^.]+$")
_NON_WORD = re.compile(r"\W+", re.ASCII)
_WORD_PART = re.compile(r"[a-z]+[0-9]*|[A-Z][a-z]+[0-9]*")
_HYPHENS = re.compile(r"-{2,}")


def to_lower_hyphen(name: str) -> str:
    """Rewrite ``name`` as a lowercase, hyphen-separated slug.

    A trailing file extension is removed, diacritics are stripped,
    underscores and runs of non-word characters become single hyphens and
    camel-case words are split.

    >>> to_lower_hyphen("Café au lait.kml")
    'cafe-au-lait'
    >>> to_lower_hyphen("CamelCase_name")
    'camel-case-name'
    """
    name = _EXTENSION.sub("", name)
    name = "".join(
        char
        for char in unicodedata.normalize("NFD", name)
        if not unicodedata.combining(char)
    ).replace("_", "-")

    words = [word for word in _NON_WORD.split(name) if word]
    if not words:
        return re.sub(r"\s+", "", name)

    slugs = []
    for word in words:
        hyphenated = _WORD_PART.sub(lambda m: f"-{m.group(0)}-", word)
        slugs.append(_HYPHENS.sub("-", hyphenated).strip("-").lower())
    return "-".join(slugs)


class BlueMapMarkerWriter(GeometryDispatcher[MarkerStyle]):
    """Collect features as BlueMap markers and export one marker set.

    Args:
        options: Marker-set and rendering options
        writer_options: JSON pretty-print options of :meth:`export`
    """

    def __init__(
        self,
        options: MarkerOptions | None = None,
        writer_options: WriterOptions | None = None,
    ):
        self.options = options if options is not None else MarkerOptions()
        self.writer_options = writer_options if writer_options is not None else WriterOptions()
        super().__init__(
            self.options.styles,
            self.options.default_style,
            strict=self.options.strict,
        )
        self.markers: dict[str, dict[str, Any]] = {}
        self.feature_count = 0

    @property
    def count(self) -> int:
        """Number of emitted markers."""
        return len(self.markers)

    def key_name(self, name: str) -> str:
        return to_lower_hyphen(name) if self.options.normalize_naming else name

    def write_feature(self, feature: Feature, label: str | None = None) -> int:
        """Render one feature, return the number of emitted markers."""
        name = resolve_name(label, feature, self.count)
        emitted = self.render(feature.geometry, self.key_name(name), name)
        self.feature_count += 1
        return emitted

    # -------------------------------------------------------------------------
    # Elevation & formatting
    # -------------------------------------------------------------------------

    def _round(self, value: float) -> float:
        value = float(value)
        if self.options.precision is None:
            return value
        return round(value, self.options.precision)

    def _shape_elevation(self, coords: np.ndarray) -> float:
        # shapes carry a single height: AUTO falls back to the average
        if self.options.elevation == ElevationMode.NORMALIZED:
            return float(self.options.normalize_value)
        return average_elevation(coords)

    def _line_elevations(self, coords: np.ndarray) -> np.ndarray:
        match self.options.elevation:
            case ElevationMode.NORMALIZED:
                return np.full(len(coords), float(self.options.normalize_value))
            case ElevationMode.AVERAGE:
                return np.full(len(coords), average_elevation(coords))
            case _:
                return np.nan_to_num(coords[:, 2], nan=0.0)

    def _position(self, x: float, y: float, z: float) -> dict[str, float]:
        return {"x": self._round(x), "y": self._round(y), "z": self._round(z)}

    def _outline(self, coords: np.ndarray) -> list[dict[str, float]]:
        return [{"x": self._round(x), "z": self._round(z)} for x, z in coords[:, :2]]

    @staticmethod
    def _style_json(style: MarkerStyle, *, fill: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "line-width": style.line_width,
            "line-color": MarkerStyle.color_json(style.line_color),
        }
        if fill:
            data["fill-color"] = MarkerStyle.color_json(style.fill_color)
        return data

    def _add(self, key: str, marker: dict[str, Any]) -> int:
        if key in self.markers:
            unique = f"{key}-{self.count}"
            while unique in self.markers:
                unique = f"{unique}-{self.count}"
            logger.warning("Duplicate marker key `%s`, renamed to `%s`", key, unique)
            key = unique

        self.markers[key] = marker
        return 1

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_point(self, point: Point, key: str, label: str, style: MarkerStyle) -> int:
        if self.options.elevation == ElevationMode.NORMALIZED:
            elevation = float(self.options.normalize_value)
        else:
            elevation = 0.0 if np.isnan(point.z) else point.z

        return self._add(
            key,
            {
                "type": "poi",
                "label": label,
                "detail": label,
                "position": self._position(point.x, elevation, point.y),
                "icon": BLUEMAP_POI_ICON,
                "anchor": dict(zip(("x", "y"), BLUEMAP_POI_ANCHOR, strict=True)),
            },
        )

    def render_line(self, line: LineString, key: str, label: str, style: MarkerStyle) -> int:
        coords = line.coords
        heights = self._line_elevations(coords)
        points = [
            self._position(x, height, z)
            for (x, z), height in zip(coords[:, :2], heights, strict=True)
        ]

        return self._add(
            key,
            {
                "type": "line",
                "label": label,
                "position": self._position(
                    coords[:, 0].mean(), heights.mean(), coords[:, 1].mean()
                ),
                "line": points,
                "depth-test": False,
                **self._style_json(style, fill=False),
            },
        )

    def _area(
        self,
        key: str,
        label: str,
        shell: LinearRing,
        holes: tuple[LinearRing, ...],
        style: MarkerStyle,
    ) -> int:
        elevation = self._shape_elevation(shell.coords)
        # the closing position duplicates the first one
        outline = shell.coords[:-1]
        marker: dict[str, Any] = {
            "label": label,
            "position": self._position(outline[:, 0].mean(), elevation, outline[:, 1].mean()),
            "shape": self._outline(outline),
            "holes": [self._outline(hole.coords[:-1]) for hole in holes],
            "depth-test": False,
            **self._style_json(style),
        }

        if self.options.extrude is not None:
            marker["type"] = "extrude"
            marker["shape-min-y"] = self._round(elevation)
            marker["shape-max-y"] = self._round(elevation + self.options.extrude)
        else:
            marker["type"] = "shape"
            marker["shape-y"] = self._round(elevation)

        return self._add(key, marker)

    def render_ring(self, ring: LinearRing, key: str, label: str, style: MarkerStyle) -> int:
        return self._area(key, label, ring, (), style)

    def render_polygon(self, polygon: Polygon, key: str, label: str, style: MarkerStyle) -> int:
        return self._area(key, label, polygon.shell, polygon.holes, style)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def marker_set(self, label: str) -> dict[str, Any]:
        return {
            "label": self.options.label if self.options.label is not None else label,
            "toggleable": self.options.toggleable,
            "default-hidden": self.options.default_hidden,
            "sorting": self.options.sorting,
            "markers": self.markers,
        }

    def document(self, set_name: str) -> dict[str, Any]:
        """Marker-set document ``{"<setKey>": markerSet}``.

        Args:
            set_name: Output file name, used for the set key and the
                default set label
        """
        return {self.key_name(set_name): self.marker_set(Path(set_name).stem)}

    def export(self, target: BinaryIO | str | Path, set_name: str | None = None) -> None:
        """Serialise the marker set.

        Args:
            target: Binary stream or output path
            set_name: Output file name (defaults to the name of ``target``
                when it is a path)

        Raises:
            ResourceIOError: If the document cannot be written
        """
        if isinstance(target, (str, Path)):
            path = Path(target)
            set_name = set_name if set_name is not None else path.name
            data = dumps_document(self.document(set_name), self.writer_options)
            try:
                path.write_bytes(data)
            except OSError as exc:
                raise ResourceIOError("Unable to write marker document", path, exc) from exc
        else:
            if set_name is None:
                raise ValueError("`set_name` is required when exporting to a stream")
            data = dumps_document(self.document(set_name), self.writer_options)
            try:
                target.write(data)
                target.flush()
            except OSError as exc:
                raise ResourceIOError("Unable to write marker document", None, exc) from exc

        logger.info(
            "Exported %d markers from %d features to `%s`",
            self.count,
            self.feature_count,
            set_name,
        )
