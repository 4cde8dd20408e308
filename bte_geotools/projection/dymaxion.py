# -*- coding: utf-8 -*-
"""Unit-sphere base transforms of the BTE projection.

- :class:`DymaxionProjection`: Buckminster Fuller's icosahedral net
- :class:`ConformalDymaxionProjection`: the same net, corrected by a
  vector field so that every face is mapped conformally
- :class:`BTEDymaxionProjection`: the conformal net re-arranged so that the
  continents are contiguous (the Eurasian part is rotated by -150 degrees
  around the Bering strait)

All transforms work on degrees and return plain floats; the planar output
is in units of the unit sphere (an icosahedron edge is ``ARC`` long).
"""

from __future__ import annotations

import math

from bte_geotools.constants import CONFORMAL_NEWTON_ITERATIONS
from bte_geotools.errors import OutOfProjectionDomainError
from bte_geotools.projection.field import InvertableVectorField
from bte_geotools.projection.field import default_field
from bte_geotools.projection.icosahedron import ARC
from bte_geotools.projection.icosahedron import CENTER_MAP
from bte_geotools.projection.icosahedron import FLIP_TRIANGLE
from bte_geotools.projection.icosahedron import INVERSE_ROTATION_MATRICES
from bte_geotools.projection.icosahedron import ROOT3
from bte_geotools.projection.icosahedron import ROTATION_MATRICES
from bte_geotools.projection.icosahedron import Vector
from bte_geotools.projection.icosahedron import cartesian_to_spherical
from bte_geotools.projection.icosahedron import find_triangle
from bte_geotools.projection.icosahedron import find_triangle_grid
from bte_geotools.projection.icosahedron import geo_to_spherical
from bte_geotools.projection.icosahedron import inverse_triangle_transform
from bte_geotools.projection.icosahedron import rotate
from bte_geotools.projection.icosahedron import spherical_to_cartesian
from bte_geotools.projection.icosahedron import spherical_to_geo
from bte_geotools.projection.icosahedron import triangle_transform


def check_geo_domain(longitude: float, latitude: float) -> None:
    """Raise if ``(longitude, latitude)`` is not a finite position on Earth."""
    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        raise OutOfProjectionDomainError(
            "Coordinates must be finite", (longitude, latitude)
        )
    if abs(longitude) > 180 or abs(latitude) > 90:  # noqa: PLR2004
        raise OutOfProjectionDomainError(
            "Longitude must be in [-180, 180] and latitude in [-90, 90]",
            (longitude, latitude),
        )


class DymaxionProjection:
    """Fuller's Dymaxion projection on the unit sphere."""

    def _triangle_transform(self, vector: Vector) -> tuple[float, float]:
        x, y = triangle_transform(*vector)
        return float(x), float(y)

    def _inverse_triangle_transform(self, x: float, y: float) -> Vector:
        px, py, pz = inverse_triangle_transform(x, y)
        return float(px), float(py), float(pz)

    def from_geo(self, longitude: float, latitude: float) -> tuple[float, float]:
        """Project a geographic position onto the unfolded net."""
        check_geo_domain(longitude, latitude)

        vector = spherical_to_cartesian(*geo_to_spherical(longitude, latitude))
        face = find_triangle(vector)

        # move the face onto the template face
        x, y = self._triangle_transform(rotate(ROTATION_MATRICES[face], vector))

        if FLIP_TRIANGLE[face]:
            x, y = -x, -y

        # the face under the Antarctic "snowflake" is split in two slots
        if ((face == 15 and x > y * ROOT3) or face == 14) and x > 0:  # noqa: PLR2004
            x, y = 0.5 * x - 0.5 * ROOT3 * y, 0.5 * ROOT3 * x + 0.5 * y
            face += 6

        return x + CENTER_MAP[face][0], y + CENTER_MAP[face][1]

    def to_geo(self, x: float, y: float) -> tuple[float, float]:
        """Unproject a point of the unfolded net.

        Raises:
            OutOfProjectionDomainError: If the point is not on the net
        """
        if not (math.isfinite(x) and math.isfinite(y)):
            raise OutOfProjectionDomainError("Coordinates must be finite", (x, y))

        face = find_triangle_grid(x, y)
        if face == -1:
            raise OutOfProjectionDomainError("Point is outside the Dymaxion net", (x, y))

        px = x - CENTER_MAP[face][0]
        py = y - CENTER_MAP[face][1]

        match face:
            case 14 if px > 0:
                outside = True
            case 20 if -py * ROOT3 > px:
                outside = True
            case 15 if px > 0 and px > py * ROOT3:
                outside = True
            case 21 if px < 0 or -py * ROOT3 > px:
                outside = True
            case _:
                outside = False

        if outside:
            raise OutOfProjectionDomainError(
                "Point is in the unused half of a split face", (x, y)
            )

        if FLIP_TRIANGLE[face]:
            px, py = -px, -py

        vector = rotate(
            INVERSE_ROTATION_MATRICES[face], self._inverse_triangle_transform(px, py)
        )
        return spherical_to_geo(*cartesian_to_spherical(*vector))


class ConformalDymaxionProjection(DymaxionProjection):
    """Dymaxion projection corrected to be conformal within each face.

    Args:
        field: Conformal correction field (the process-wide one by default)
    """

    def __init__(self, field: InvertableVectorField | None = None):
        self._field = field

    @property
    def field(self) -> InvertableVectorField:
        if self._field is None:
            self._field = default_field()
        return self._field

    def _triangle_transform(self, vector: Vector) -> tuple[float, float]:
        x, y = super()._triangle_transform(vector)

        # the plain Dymaxion position is a close first guess
        u, v = self.field.apply_newtons_method(
            x, y, x / ARC + 0.5, y / ARC + ROOT3 / 6, CONFORMAL_NEWTON_ITERATIONS
        )
        return (u - 0.5) * ARC, (v - ROOT3 / 6) * ARC

    def _inverse_triangle_transform(self, x: float, y: float) -> Vector:
        fx, fy, *_ = self.field.get_interpolated_vector(
            x / ARC + 0.5, y / ARC + ROOT3 / 6
        )
        return super()._inverse_triangle_transform(fx, fy)


#: Rotation of the Eurasian part around the Bering strait
_THETA = math.radians(-150)
_SIN_THETA = math.sin(_THETA)
_COS_THETA = math.cos(_THETA)

# Bering strait and Aleutian islands cut of the Eurasian part
BERING_X = -0.3420420960118339
BERING_Y = -0.322211064085279
ARCTIC_Y = -0.2
ARCTIC_M = (ARCTIC_Y - ROOT3 * ARC / 4) / (BERING_X - -0.5 * ARC)
ARCTIC_B = ARCTIC_Y - ARCTIC_M * BERING_X
ALEUTIAN_Y = -0.5000446805492526
ALEUTIAN_XL = -0.5149231279757507
ALEUTIAN_XR = -0.45
ALEUTIAN_M = (BERING_Y - ALEUTIAN_Y) / (BERING_X - ALEUTIAN_XR)
ALEUTIAN_B = BERING_Y - ALEUTIAN_M * BERING_X


def is_eurasian_part(x: float, y: float) -> bool:
    """Whether a point of the conformal net belongs to the rotated Eurasian part."""
    # most points are far from the cut
    if x > 0:
        return False
    if x < -0.5 * ARC:
        return True

    if y > ROOT3 * ARC / 4:  # above the arctic ocean
        return x < 0

    if y < ALEUTIAN_Y:  # below the bering sea
        return y < (ALEUTIAN_Y + ALEUTIAN_XL) - x

    if y > BERING_Y:  # across the arctic ocean
        if y < ARCTIC_Y:  # in the strait
            return x < BERING_X
        return y < ARCTIC_M * x + ARCTIC_B

    return y > ALEUTIAN_M * x + ALEUTIAN_B


class BTEDymaxionProjection(ConformalDymaxionProjection):
    """Conformal Dymaxion net re-arranged for the BuildTheEarth project."""

    def from_geo(self, longitude: float, latitude: float) -> tuple[float, float]:
        x, y = super().from_geo(longitude, latitude)

        eurasian = is_eurasian_part(x, y)
        y -= 0.75 * ARC * ROOT3

        if eurasian:
            x += ARC
            x, y = _COS_THETA * x - _SIN_THETA * y, _SIN_THETA * x + _COS_THETA * y
        else:
            x -= ARC

        return y, -x

    def to_geo(self, x: float, y: float) -> tuple[float, float]:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise OutOfProjectionDomainError("Coordinates must be finite", (x, y))

        if y < 0:
            eurasian = x > 0
        elif y > ARC / 2:
            eurasian = x > -ROOT3 * ARC / 2
        else:
            eurasian = y * -ROOT3 < x

        px, py = -y, x
        if eurasian:
            px, py = _COS_THETA * px + _SIN_THETA * py, _COS_THETA * py - _SIN_THETA * px
            px -= ARC
        else:
            px += ARC
        py += 0.75 * ARC * ROOT3

        if eurasian != is_eurasian_part(px, py):
            raise OutOfProjectionDomainError(
                "Point is outside the BuildTheEarth net", (x, y)
            )

        try:
            return super().to_geo(px, py)
        except OutOfProjectionDomainError as exc:
            raise OutOfProjectionDomainError(
                "Point is outside the BuildTheEarth net", (x, y), exc
            ) from exc
