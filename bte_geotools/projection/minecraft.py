# -*- coding: utf-8 -*-
"""Geographic to Minecraft block coordinates.

A :class:`MinecraftProjection` always applies its steps in the same order:

    base transform -> vertical flip -> scale -> offset(s)

and undoes them in reverse order. Callers cannot re-order the steps: they
pick a preset (:func:`bte`, :func:`asean_bte`) or one of the factories
(:func:`custom_offset`, :func:`custom_base`) and may append translations
with :meth:`MinecraftProjection.offset`.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol

import numpy as np

from bte_geotools.constants import ASEAN_BTE_CRS_CODE
from bte_geotools.constants import ASEAN_OFFSET
from bte_geotools.constants import BTE_CRS_CODE
from bte_geotools.geometry import Geometry
from bte_geotools.models import ProjectionParameters
from bte_geotools.projection.dymaxion import BTEDymaxionProjection

logger = logging.getLogger(__name__)


class BaseProjection(Protocol):
    """A unit-sphere transform between degrees and planar coordinates."""

    def from_geo(self, longitude: float, latitude: float) -> tuple[float, float]: ...

    def to_geo(self, x: float, y: float) -> tuple[float, float]: ...


class MinecraftProjection:
    """Immutable projection from (longitude, latitude) to block (x, z).

    Args:
        base: Unit-sphere base transform (BTE conformal Dymaxion by default)
        parameters: Scale and false easting/northing
        offsets: Extra translations applied after the false easting/northing
        crs_code: Identifier of the projection
    """

    def __init__(
        self,
        base: BaseProjection | None = None,
        parameters: ProjectionParameters | None = None,
        offsets: tuple[tuple[float, float], ...] = (),
        crs_code: str | None = None,
    ):
        self._base = base if base is not None else BTEDymaxionProjection()
        self._parameters = parameters if parameters is not None else ProjectionParameters()
        self._offsets = tuple((float(dx), float(dy)) for dx, dy in offsets)
        self._crs_code = crs_code

        for dx, dy in self._offsets:
            if not (math.isfinite(dx) and math.isfinite(dy)):
                raise ValueError(f"Offsets must be finite, got ({dx}, {dy})")

    @property
    def base(self) -> BaseProjection:
        return self._base

    @property
    def parameters(self) -> ProjectionParameters:
        return self._parameters

    @property
    def offsets(self) -> tuple[tuple[float, float], ...]:
        """All translations, false easting/northing first."""
        return (
            (self._parameters.false_easting, self._parameters.false_northing),
            *self._offsets,
        )

    @property
    def crs_code(self) -> str | None:
        return self._crs_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(base={type(self._base).__name__}, "
            f"scale={self._parameters.scale_factor}, offsets={self.offsets}, "
            f"crs_code={self._crs_code!r})"
        )

    def offset(self, dx: float, dy: float) -> MinecraftProjection:
        """Return a new projection translated by ``(dx, dy)`` blocks."""
        return MinecraftProjection(
            base=self._base,
            parameters=self._parameters,
            offsets=(*self._offsets, (dx, dy)),
        )

    def forward(self, longitude: float, latitude: float) -> tuple[float, float]:
        """Project degrees to block coordinates.

        Raises:
            OutOfProjectionDomainError: If the position is not on Earth
        """
        x, y = self._base.from_geo(longitude, latitude)

        # the base transform's vertical axis points the other way
        y = -y

        scale = self._parameters.scale_factor
        x *= scale
        y *= scale

        for dx, dy in self.offsets:
            x += dx
            y += dy

        return x, y

    def inverse(self, x: float, y: float) -> tuple[float, float]:
        """Unproject block coordinates to degrees.

        Raises:
            OutOfProjectionDomainError: If the point is outside the projected world
        """
        for dx, dy in reversed(self.offsets):
            x -= dx
            y -= dy

        scale = self._parameters.scale_factor
        x /= scale
        y /= scale

        return self._base.to_geo(x, -y)

    def _forward_array(self, coords: np.ndarray) -> np.ndarray:
        for row in coords:
            row[0], row[1] = self.forward(float(row[0]), float(row[1]))
        return coords

    def _inverse_array(self, coords: np.ndarray) -> np.ndarray:
        for row in coords:
            row[0], row[1] = self.inverse(float(row[0]), float(row[1]))
        return coords

    def project(self, geometry: Geometry) -> Geometry:
        """Return a new geometry with every ``(x, y)`` projected, ``z`` kept."""
        return geometry.map_coordinates(self._forward_array)

    def unproject(self, geometry: Geometry) -> Geometry:
        """Return a new geometry with every ``(x, y)`` unprojected, ``z`` kept."""
        return geometry.map_coordinates(self._inverse_array)


def bte() -> MinecraftProjection:
    """The global BuildTheEarth projection."""
    return MinecraftProjection(crs_code=BTE_CRS_CODE)


def asean_bte() -> MinecraftProjection:
    """The BuildTheEarth projection of the ASEAN servers."""
    easting, northing = ASEAN_OFFSET
    return MinecraftProjection(
        parameters=ProjectionParameters(false_easting=easting, false_northing=northing),
        crs_code=ASEAN_BTE_CRS_CODE,
    )


def custom_offset(dx: float, dy: float) -> MinecraftProjection:
    """The global BuildTheEarth projection translated by ``(dx, dy)`` blocks."""
    return MinecraftProjection(
        parameters=ProjectionParameters(false_easting=dx, false_northing=dy)
    )


def custom_base(
    base: BaseProjection, parameters: ProjectionParameters | None = None
) -> MinecraftProjection:
    """Wrap another unit-sphere transform in the flip, scale and offset steps."""
    logger.debug("Using custom base projection %s", type(base).__name__)
    return MinecraftProjection(base=base, parameters=parameters)
