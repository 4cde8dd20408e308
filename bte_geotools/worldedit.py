# -*- coding: utf-8 -*-
"""WorldEdit block sink.

Geometries are drawn as blocks through an :class:`EditSession`:

* ``Point`` → one block, or a sphere of ``writing_size`` radius
* ``LineString`` / ``LinearRing`` → a line through every vertex
* ``Polygon`` → its outline, optionally filled; holes are cleared with air

Positions use the Minecraft axes: the projected ``(x, y)`` become the block
``(x, z)`` and the elevation becomes the block ``y``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Protocol

import numpy as np
import shapely

from bte_geotools.constants import AIR_BLOCK
from bte_geotools.constants import DEFAULT_BLOCK
from bte_geotools.dispatch import GeometryDispatcher
from bte_geotools.dispatch import resolve_name

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator
    from collections.abc import Mapping
    from collections.abc import Sequence

    from bte_geotools.enums import GeometryKind
    from bte_geotools.geometry import Feature
    from bte_geotools.geometry import LinearRing
    from bte_geotools.geometry import LineString
    from bte_geotools.geometry import Point
    from bte_geotools.geometry import Polygon
    from bte_geotools.projection.minecraft import MinecraftProjection

logger = logging.getLogger(__name__)

#: Block position ``(x, y, z)``, ``y`` pointing up
BlockVector = tuple[int, int, int]

#: Column position ``(x, z)``
BlockVector2 = tuple[int, int]

_NEIGHBOURS: tuple[BlockVector, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)


@dataclass(frozen=True)
class BlockPattern:
    """Pattern placing a single block type."""

    block: str

    def apply(self, position: BlockVector) -> str:
        return self.block


DIAMOND_BLOCK = BlockPattern(DEFAULT_BLOCK)
AIR = BlockPattern(AIR_BLOCK)


class Polygonal2DRegion:
    """Vertical prism over a 2D polygon, spanning ``[min_y, max_y]``.

    A column belongs to the region when the polygon covers it, boundary
    included. Fewer than 3 distinct vertices make an empty region.

    Args:
        points: Polygon vertices as ``(x, z)`` columns
        min_y: Lowest block layer
        max_y: Highest block layer
    """

    def __init__(self, points: Sequence[BlockVector2], min_y: int, max_y: int):
        self.points = [(int(x), int(z)) for x, z in points]
        self.min_y = min(min_y, max_y)
        self.max_y = max(min_y, max_y)

    def columns(self) -> list[BlockVector2]:
        """All ``(x, z)`` columns inside the polygon."""
        if len(set(self.points)) < 3:  # noqa: PLR2004
            return []

        polygon = shapely.Polygon(self.points)
        min_x, min_z, max_x, max_z = (int(v) for v in polygon.bounds)
        xs, zs = np.meshgrid(
            np.arange(min_x, max_x + 1), np.arange(min_z, max_z + 1), indexing="ij"
        )
        xs, zs = xs.ravel(), zs.ravel()
        inside = shapely.covers(polygon, shapely.points(xs, zs))
        return [(int(x), int(z)) for x, z in zip(xs[inside], zs[inside], strict=True)]

    def __iter__(self) -> Iterator[BlockVector]:
        for x, z in self.columns():
            for y in range(self.min_y, self.max_y + 1):
                yield (x, y, z)

    @property
    def volume(self) -> int:
        return len(self.columns()) * (self.max_y - self.min_y + 1)


def sphere_offsets(radius: float, filled: bool) -> list[BlockVector]:
    """Offsets of the blocks of a sphere centred on the origin."""
    bound = radius + 0.5
    reach = math.ceil(bound)

    def inside(dx: int, dy: int, dz: int) -> bool:
        return dx * dx + dy * dy + dz * dz <= bound * bound

    offsets = []
    for dx in range(-reach, reach + 1):
        for dy in range(-reach, reach + 1):
            for dz in range(-reach, reach + 1):
                if not inside(dx, dy, dz):
                    continue
                if not filled and all(
                    inside(dx + ox, dy + oy, dz + oz)
                    for ox, oy, oz in _NEIGHBOURS
                ):
                    continue
                offsets.append((dx, dy, dz))
    return offsets


def line_positions(points: Sequence[BlockVector]) -> list[BlockVector]:
    """Blocks of the polyline through ``points``, without duplicates."""
    positions: dict[BlockVector, None] = {}
    if len(points) == 1:
        positions[points[0]] = None

    for start, end in zip(points[:-1], points[1:], strict=True):
        a = np.array(start, dtype=float)
        b = np.array(end, dtype=float)
        steps = int(np.abs(b - a).max())
        if steps == 0:
            positions[tuple(start)] = None
            continue
        for t in np.linspace(0.0, 1.0, steps + 1):
            x, y, z = np.floor(a + (b - a) * t + 0.5).astype(int)
            positions[(int(x), int(y), int(z))] = None

    return list(positions)


class EditSession(Protocol):
    """Block placement collaborator (a WorldEdit ``EditSession``)."""

    def set_block(self, position: BlockVector, pattern: BlockPattern) -> bool: ...

    def make_sphere(
        self, position: BlockVector, pattern: BlockPattern, radius: float, filled: bool
    ) -> int: ...

    def draw_line(
        self,
        pattern: BlockPattern,
        points: Sequence[BlockVector],
        radius: float,
        filled: bool,
    ) -> int: ...

    def set_blocks(self, region: Polygonal2DRegion, pattern: BlockPattern) -> int: ...


class BufferingEditSession:
    """In-memory :class:`EditSession` recording every placed block.

    Attributes:
        blocks: Block type by position, in placement order
        min: Lowest corner of the bounding box (``None`` when empty)
        max: Highest corner of the bounding box (``None`` when empty)
    """

    def __init__(self):
        self.blocks: dict[BlockVector, str] = {}
        self.min: BlockVector | None = None
        self.max: BlockVector | None = None

    def __len__(self) -> int:
        return len(self.blocks)

    def block_at(self, position: BlockVector) -> str | None:
        return self.blocks.get(position)

    @property
    def bounds(self) -> tuple[BlockVector, BlockVector] | None:
        if self.min is None or self.max is None:
            return None
        return self.min, self.max

    def set_block(self, position: BlockVector, pattern: BlockPattern) -> bool:
        position = (int(position[0]), int(position[1]), int(position[2]))
        self.blocks[position] = pattern.apply(position)

        if self.min is None or self.max is None:
            self.min = self.max = position
        else:
            self.min = tuple(map(min, self.min, position))
            self.max = tuple(map(max, self.max, position))
        return True

    def _set_all(self, positions: Iterable[BlockVector], pattern: BlockPattern) -> int:
        return sum(self.set_block(position, pattern) for position in positions)

    def make_sphere(
        self, position: BlockVector, pattern: BlockPattern, radius: float, filled: bool
    ) -> int:
        x, y, z = position
        return self._set_all(
            [(x + dx, y + dy, z + dz) for dx, dy, dz in sphere_offsets(radius, filled)],
            pattern,
        )

    def draw_line(
        self,
        pattern: BlockPattern,
        points: Sequence[BlockVector],
        radius: float,
        filled: bool,
    ) -> int:
        positions = line_positions(points)
        if radius > 0:
            offsets = sphere_offsets(radius, filled)
            positions = list(
                dict.fromkeys(
                    (x + dx, y + dy, z + dz)
                    for x, y, z in positions
                    for dx, dy, dz in offsets
                )
            )
        return self._set_all(positions, pattern)

    def set_blocks(self, region: Polygonal2DRegion, pattern: BlockPattern) -> int:
        return self._set_all(iter(region), pattern)


def _block_position(x: float, y: float, z: float) -> BlockVector:
    elevation = 0.0 if math.isnan(z) else z
    return (math.floor(x), math.floor(elevation), math.floor(y))


def _block_positions(coords: np.ndarray) -> list[BlockVector]:
    return [_block_position(x, y, z) for x, y, z in coords]


def _region(ring: LinearRing) -> Polygonal2DRegion:
    elevations = np.floor(np.nan_to_num(ring.coords[:, 2], nan=0.0)).astype(int)
    columns = [(math.floor(x), math.floor(y)) for x, y in ring.coords[:-1, :2]]
    return Polygonal2DRegion(columns, int(elevations.min()), int(elevations.max()))


class WorldEditGeometryWriter(GeometryDispatcher[BlockPattern]):
    """Draw geometries as blocks through an edit session.

    Args:
        session: Edit session receiving the blocks
        projection: Projection applied by :meth:`write_feature` (``None``
            when the geometries are already in block space)
        styles: Per geometry kind block pattern table
        fallback: Pattern used when the table has no matching entry
        writing_size: Radius of points and lines (``0`` for single blocks)
        fill_stroke: Fill spheres and line brushes instead of hollowing them
        fill_geometry: Fill polygon areas
        strict: Raise on unsupported geometries instead of skipping them
    """

    def __init__(
        self,
        session: EditSession,
        projection: MinecraftProjection | None = None,
        styles: Mapping[GeometryKind, BlockPattern] | None = None,
        fallback: BlockPattern = DIAMOND_BLOCK,
        *,
        writing_size: float = 0.0,
        fill_stroke: bool = False,
        fill_geometry: bool = False,
        strict: bool = False,
    ):
        if writing_size < 0:
            raise ValueError(f"`writing_size` must be non-negative, got {writing_size}")

        super().__init__(styles, fallback, strict=strict)
        self.session = session
        self.projection = projection
        self.writing_size = writing_size
        self.fill_stroke = fill_stroke
        self.fill_geometry = fill_geometry
        self.feature_count = 0
        self.count = 0

    def write_feature(self, feature: Feature, label: str | None = None) -> int:
        """Project and draw one feature, return the number of block edits."""
        geometry = feature.geometry
        if self.projection is not None:
            geometry = self.projection.project(geometry)

        name = resolve_name(label, feature, self.feature_count)
        edits = self.render(geometry, name, name)
        logger.debug("Feature `%s`: %d block edits", name, edits)

        self.feature_count += 1
        self.count += edits
        return edits

    def render_point(self, point: Point, key: str, label: str, style: BlockPattern) -> int:
        position = _block_position(point.x, point.y, point.z)
        if self.writing_size > 0:
            return self.session.make_sphere(position, style, self.writing_size, self.fill_stroke)
        return int(self.session.set_block(position, style))

    def render_line(self, line: LineString, key: str, label: str, style: BlockPattern) -> int:
        return self.session.draw_line(
            style, _block_positions(line.coords), self.writing_size, self.fill_stroke
        )

    def render_ring(self, ring: LinearRing, key: str, label: str, style: BlockPattern) -> int:
        return self.render_line(ring, key, label, style)

    def render_polygon(self, polygon: Polygon, key: str, label: str, style: BlockPattern) -> int:
        fill = 0
        if self.fill_geometry:
            fill = self.session.set_blocks(_region(polygon.shell), style)

        edits = fill + self.render_line(polygon.shell, key, label, style)
        for hole in polygon.holes:
            if fill > 0:
                edits -= self.session.set_blocks(_region(hole), AIR)
            edits += self.render_line(hole, key, label, style)
        return edits
