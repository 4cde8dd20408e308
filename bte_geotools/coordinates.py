# -*- coding: utf-8 -*-
"""Coordinate editing: normalize, offset or drop the elevation component.

All functions are pure: they return new arrays/geometries and never mutate
their input, so a source geometry can safely be shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from bte_geotools.geometry import Geometry


@dataclass(frozen=True)
class Normalize:
    """Set every elevation to ``value``."""

    value: float


@dataclass(frozen=True)
class Offset:
    """Add ``delta`` to every present elevation; absent ones stay absent."""

    delta: float


@dataclass(frozen=True)
class Drop:
    """Set every elevation to the absent sentinel."""


ZPolicy = Normalize | Offset | Drop


def apply_z(coords: np.ndarray, policy: ZPolicy | None) -> np.ndarray:
    """Apply one elevation policy to a coordinate array.

    Args:
        coords: Array of shape ``(N, 3)``
        policy: The policy to apply, ``None`` for an unchanged copy

    Returns:
        A new array of shape ``(N, 3)``
    """
    result = np.array(coords, dtype=float, copy=True)

    match policy:
        case None:
            pass

        case Drop():
            result[:, 2] = np.nan

        case Normalize(value=value):
            result[:, 2] = value

        case Offset(delta=delta):
            # NaN + delta stays NaN: absent elevations are never invented
            result[:, 2] += delta

        case _:
            raise TypeError(f"Unknown elevation policy: {policy!r}")

    return result


def edit_geometry(geometry: Geometry, policy: ZPolicy | None) -> Geometry:
    """Return a structurally independent copy of ``geometry`` with ``policy`` applied."""
    return geometry.map_coordinates(lambda coords: apply_z(coords, policy))


def average_elevation(coords: np.ndarray) -> float:
    """Arithmetic mean of the finite elevations of ``coords``.

    Absent (NaN) elevations are excluded from both the sum and the count;
    ``0.0`` is returned when no elevation is finite.
    """
    z = np.asarray(coords, dtype=float)[:, 2]
    finite = z[np.isfinite(z)]
    if finite.size == 0:
        return 0.0
    return float(finite.mean())
