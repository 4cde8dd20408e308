# -*- coding: utf-8 -*-
"""Geometry and feature values streamed through the conversion pipeline.

Every leaf geometry owns a ``(N, 3)`` float array of ``(x, y, z)``
coordinates. A NaN ``z`` is the "absent" sentinel of a 2D coordinate;
``x`` and ``y`` are always finite. Geometries are immutable: coordinate
edits and projections build new, structurally independent geometries.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from typing import Any
from typing import ClassVar

import numpy as np
import shapely

from bte_geotools.enums import GeometryKind
from bte_geotools.errors import IncompleteFeatureError

#: Signature of a function rewriting a coordinate array
CoordinateFunction = Callable[[np.ndarray], np.ndarray]

#: Minimum number of positions of a closed ring (3 distinct + closing)
MIN_RING_POSITIONS: int = 4


def as_coordinates(values: Any) -> np.ndarray:
    """Build an owned ``(N, 3)`` coordinate array.

    Positions may be given as ``(x, y)`` or ``(x, y, z)``; a missing ``z``
    becomes NaN.

    Args:
        values: A single position or a sequence of positions

    Returns:
        A new float array of shape ``(N, 3)``

    Raises:
        IncompleteFeatureError: If the positions are not 2D/3D or ``x``/``y``
            is not finite
    """
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise IncompleteFeatureError("Invalid coordinate sequence", exc) from exc

    if arr.size == 0:
        return np.empty((0, 3), dtype=float)

    if arr.ndim == 1:
        arr = arr.reshape(1, -1)

    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise IncompleteFeatureError(
            f"Positions must have 2 or 3 components, got shape {arr.shape}"
        )

    if arr.shape[1] == 2:
        arr = np.column_stack([arr, np.full(len(arr), np.nan)])

    if not np.isfinite(arr[:, :2]).all():
        raise IncompleteFeatureError("Coordinate x/y values must be finite")

    if np.isinf(arr[:, 2]).any():
        raise IncompleteFeatureError("Coordinate z values must be finite or absent")

    return arr


def position_to_list(position: np.ndarray) -> list[float]:
    """Convert one coordinate row to ``[x, y]`` or ``[x, y, z]``."""
    x, y, z = (float(v) for v in position)
    if math.isnan(z):
        return [x, y]
    return [x, y, z]


class Geometry:
    """Base class of the geometry tagged union."""

    kind: ClassVar[GeometryKind] = GeometryKind.GEOMETRY

    def map_coordinates(self, fn: CoordinateFunction) -> Geometry:
        """Return a new geometry with ``fn`` applied to every coordinate array."""
        raise NotImplementedError

    def coordinates(self) -> np.ndarray:
        """Return all coordinates of this geometry as one ``(N, 3)`` array."""
        raise NotImplementedError

    def to_shapely(self) -> shapely.Geometry:
        """Convert to a planar (2D) shapely geometry."""
        raise NotImplementedError

    def copy(self) -> Geometry:
        """Return a structurally independent copy."""
        return self.map_coordinates(np.copy)

    @property
    def has_z(self) -> bool:
        """Whether any coordinate carries a finite elevation."""
        coords = self.coordinates()
        return bool(len(coords)) and bool(np.isfinite(coords[:, 2]).any())

    def topologically_equals(self, other: Geometry) -> bool:
        """Planar topological equality (vertex order independent)."""
        return bool(self.to_shapely().equals(other.to_shapely()))


@dataclass(frozen=True, eq=False)
class Point(Geometry):
    """A single position."""

    coords: np.ndarray

    kind: ClassVar[GeometryKind] = GeometryKind.POINT

    def __post_init__(self) -> None:
        coords = as_coordinates(self.coords)
        if len(coords) != 1:
            raise IncompleteFeatureError(
                f"A point holds exactly one position, got {len(coords)}"
            )
        object.__setattr__(self, "coords", coords)

    @property
    def x(self) -> float:
        return float(self.coords[0, 0])

    @property
    def y(self) -> float:
        return float(self.coords[0, 1])

    @property
    def z(self) -> float:
        return float(self.coords[0, 2])

    def map_coordinates(self, fn: CoordinateFunction) -> Point:
        return Point(fn(self.coords.copy()))

    def coordinates(self) -> np.ndarray:
        return self.coords.copy()

    def to_shapely(self) -> shapely.Point:
        return shapely.Point(self.coords[0, :2])


@dataclass(frozen=True, eq=False)
class LineString(Geometry):
    """An open path of at least two positions."""

    coords: np.ndarray

    kind: ClassVar[GeometryKind] = GeometryKind.LINE_STRING

    def __post_init__(self) -> None:
        coords = as_coordinates(self.coords)
        self._validate(coords)
        object.__setattr__(self, "coords", coords)

    def _validate(self, coords: np.ndarray) -> None:
        if len(coords) < 2:  # noqa: PLR2004
            raise IncompleteFeatureError(
                f"A line string needs at least 2 positions, got {len(coords)}"
            )

    def __len__(self) -> int:
        return len(self.coords)

    def map_coordinates(self, fn: CoordinateFunction) -> LineString:
        return type(self)(fn(self.coords.copy()))

    def coordinates(self) -> np.ndarray:
        return self.coords.copy()

    def to_shapely(self) -> shapely.Geometry:
        return shapely.LineString(self.coords[:, :2])


@dataclass(frozen=True, eq=False)
class LinearRing(LineString):
    """A closed path: first position equals the last, at least 4 positions."""

    kind: ClassVar[GeometryKind] = GeometryKind.LINEAR_RING

    def _validate(self, coords: np.ndarray) -> None:
        if len(coords) < MIN_RING_POSITIONS:
            raise IncompleteFeatureError(
                f"A linear ring needs at least {MIN_RING_POSITIONS} positions, "
                f"got {len(coords)}"
            )

        first, last = coords[0], coords[-1]
        same_z = (np.isnan(first[2]) and np.isnan(last[2])) or first[2] == last[2]
        if not (np.array_equal(first[:2], last[:2]) and same_z):
            raise IncompleteFeatureError(
                "A linear ring must be closed (first position == last position)"
            )

    def to_shapely(self) -> shapely.Geometry:
        return shapely.LinearRing(self.coords[:, :2])


@dataclass(frozen=True, eq=False)
class Polygon(Geometry):
    """A shell ring with zero or more interior rings (holes)."""

    shell: LinearRing
    holes: tuple[LinearRing, ...] = ()

    kind: ClassVar[GeometryKind] = GeometryKind.POLYGON

    def __post_init__(self) -> None:
        shell = self.shell
        if not isinstance(shell, LinearRing):
            shell = LinearRing(shell)
        holes = tuple(
            hole if isinstance(hole, LinearRing) else LinearRing(hole)
            for hole in self.holes
        )
        object.__setattr__(self, "shell", shell)
        object.__setattr__(self, "holes", holes)

    @property
    def rings(self) -> tuple[LinearRing, ...]:
        return (self.shell, *self.holes)

    def map_coordinates(self, fn: CoordinateFunction) -> Polygon:
        return Polygon(
            shell=self.shell.map_coordinates(fn),
            holes=tuple(hole.map_coordinates(fn) for hole in self.holes),
        )

    def coordinates(self) -> np.ndarray:
        return np.concatenate([ring.coords for ring in self.rings])

    def to_shapely(self) -> shapely.Polygon:
        return shapely.Polygon(
            self.shell.coords[:, :2],
            holes=[hole.coords[:, :2] for hole in self.holes],
        )


@dataclass(frozen=True, eq=False)
class GeometryCollection(Geometry):
    """An ordered collection of child geometries."""

    geometries: tuple[Geometry, ...] = ()

    kind: ClassVar[GeometryKind] = GeometryKind.GEOMETRY_COLLECTION
    member_type: ClassVar[type[Geometry]] = Geometry

    def __post_init__(self) -> None:
        geometries = tuple(self.geometries)
        for child in geometries:
            if not isinstance(child, self.member_type):
                raise IncompleteFeatureError(
                    f"{type(self).__name__} cannot hold a {type(child).__name__}"
                )
        object.__setattr__(self, "geometries", geometries)

    def __len__(self) -> int:
        return len(self.geometries)

    def __iter__(self):
        return iter(self.geometries)

    def __getitem__(self, index: int) -> Geometry:
        return self.geometries[index]

    def map_coordinates(self, fn: CoordinateFunction) -> GeometryCollection:
        return type(self)(tuple(child.map_coordinates(fn) for child in self))

    def coordinates(self) -> np.ndarray:
        if not self.geometries:
            return np.empty((0, 3), dtype=float)
        return np.concatenate([child.coordinates() for child in self])

    def to_shapely(self) -> shapely.Geometry:
        return shapely.GeometryCollection([child.to_shapely() for child in self])


@dataclass(frozen=True, eq=False)
class MultiPoint(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTI_POINT
    member_type: ClassVar[type[Geometry]] = Point

    def to_shapely(self) -> shapely.Geometry:
        return shapely.MultiPoint([child.to_shapely() for child in self])


@dataclass(frozen=True, eq=False)
class MultiLineString(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTI_LINE_STRING
    member_type: ClassVar[type[Geometry]] = LineString

    def to_shapely(self) -> shapely.Geometry:
        return shapely.MultiLineString([child.coords[:, :2] for child in self])


@dataclass(frozen=True, eq=False)
class MultiPolygon(GeometryCollection):
    kind: ClassVar[GeometryKind] = GeometryKind.MULTI_POLYGON
    member_type: ClassVar[type[Geometry]] = Polygon

    def to_shapely(self) -> shapely.Geometry:
        return shapely.MultiPolygon([child.to_shapely() for child in self])


def collection_of(geometries: Iterable[Geometry]) -> GeometryCollection:
    """Build the most specific collection type for ``geometries``.

    Homogeneous points, lines or polygons become a ``Multi*`` collection;
    anything else (including standalone rings) a generic collection.
    """
    children = tuple(geometries)
    kinds = {type(child) for child in children}
    if children and len(kinds) == 1:
        match children[0]:
            case Point():
                return MultiPoint(children)
            case LinearRing():
                return GeometryCollection(children)
            case LineString():
                return MultiLineString(children)
            case Polygon():
                return MultiPolygon(children)
    return GeometryCollection(children)


@dataclass(frozen=True)
class Feature:
    """One geometry with its identifier and pass-through properties.

    Attributes:
        geometry: The feature geometry
        id: Source identifier, ``None`` when the source provides none
        properties: Named scalar properties, not interpreted except ``name``
    """

    geometry: Geometry
    id: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        """The conventional ``name`` property, if it is a string."""
        value = self.properties.get("name")
        return value if isinstance(value, str) else None

    def with_geometry(self, geometry: Geometry) -> Feature:
        return replace(self, geometry=geometry)
