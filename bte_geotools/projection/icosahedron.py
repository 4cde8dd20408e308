# -*- coding: utf-8 -*-
"""Icosahedral net geometry of the Dymaxion projection.

The sphere is split into the 20 faces of an icosahedron (plus two extra
slots for the split face around the Antarctic "snowflake"). Each face is
rotated onto a template face centered on the +z axis, flattened onto an
equilateral triangle of side ``ARC`` and placed on the unfolded net.

The triangle transforms accept floats or numpy arrays.
"""

from __future__ import annotations

import math

import numpy as np

from bte_geotools.constants import DYMAXION_NEWTON_ITERATIONS

ROOT3 = math.sqrt(3)

#: Angular length of an icosahedron edge (radians)
ARC = 2 * math.asin(math.sqrt(5 - math.sqrt(5)) / math.sqrt(10))

#: Cosine of the angle between a face center and its vertices
Z = math.sqrt(5 + 2 * math.sqrt(5)) / math.sqrt(15)

#: Edge length of the unit icosahedron
EL = math.sqrt(8) / math.sqrt(5 + math.sqrt(5))
EL6 = EL / 6

#: Distance from the center of the icosahedron to an edge midpoint
DVE = math.sqrt(3 + math.sqrt(5)) / math.sqrt(5 + math.sqrt(5))

#: tan(a) + tan(b) + tan(c) is constant over the template face
R = -3 * EL6 / DVE

#: Icosahedron vertices as (longitude, latitude) in degrees
VERTICES_GEO: tuple[tuple[float, float], ...] = (
    (10.536199, 64.700000),
    (-5.245390, 2.300882),
    (58.157706, 10.447378),
    (122.300000, 39.100000),
    (-143.478490, 50.103201),
    (-67.132330, 23.717925),
    (36.521510, -50.103200),
    (112.867673, -23.717930),
    (174.754610, -2.300882),
    (-121.842290, -10.447350),
    (-57.700000, -39.100000),
    (-169.463800, -64.700000),
)

#: Vertex indices of every face slot of the net
ISO: tuple[tuple[int, int, int], ...] = (
    (2, 1, 6),
    (1, 0, 2),
    (0, 1, 5),
    (1, 5, 10),
    (1, 6, 10),
    (7, 2, 6),
    (2, 3, 7),
    (3, 0, 2),
    (0, 3, 4),
    (4, 0, 5),
    (5, 4, 9),
    (9, 5, 10),
    (10, 9, 11),
    (11, 6, 10),
    (6, 7, 11),
    (8, 3, 7),
    (8, 3, 4),
    (8, 4, 9),
    (9, 8, 11),
    (7, 8, 11),
    (11, 6, 7),  # child of 14
    (3, 7, 8),  # child of 15
)

#: Face centers on the net, in units of (ARC / 2, ARC * sqrt(3) / 12)
_CENTER_UNITS: tuple[tuple[int, int], ...] = (
    (-3, 7),
    (-2, 5),
    (-1, 7),
    (2, 5),
    (4, 5),
    (-4, 1),
    (-3, -1),
    (-2, 1),
    (-1, -1),
    (0, 1),
    (1, -1),
    (2, 1),
    (3, -1),
    (4, 1),
    (5, -1),
    (-3, -5),
    (-1, -5),
    (1, -5),
    (2, -7),
    (-4, -7),
    (-5, -5),
    (-2, -7),
)

CENTER_MAP: tuple[tuple[float, float], ...] = tuple(
    (x * 0.5 * ARC, y * ARC * ROOT3 / 12) for x, y in _CENTER_UNITS
)

#: Faces drawn upside down on the net
FLIP_TRIANGLE: tuple[bool, ...] = tuple(
    bool(flag)
    for flag in (1, 0, 1, 0, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1, 0, 0, 1, 0)
)

#: Face slot found at each (row, column) cell of the net grid, -1 if empty
FACE_ON_GRID: tuple[int, ...] = (
    -1, -1, 0, 1, 2, -1, -1, 3, -1, 4, -1,
    -1, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14,
    20, 19, 15, 21, 16, -1, 17, 18, -1, -1, -1,
)  # fmt: skip

#: Number of real icosahedron faces (slots 20 and 21 are split children)
FACE_COUNT: int = 20

Vector = tuple[float, float, float]
Matrix = tuple[Vector, Vector, Vector]


def geo_to_spherical(longitude: float, latitude: float) -> tuple[float, float]:
    """Convert degrees to (azimuth, polar angle) in radians."""
    return math.radians(longitude), math.radians(90.0 - latitude)


def spherical_to_geo(azimuth: float, polar: float) -> tuple[float, float]:
    return math.degrees(azimuth), 90.0 - math.degrees(polar)


def spherical_to_cartesian(azimuth: float, polar: float) -> Vector:
    sin_polar = math.sin(polar)
    return (
        sin_polar * math.cos(azimuth),
        sin_polar * math.sin(azimuth),
        math.cos(polar),
    )


def cartesian_to_spherical(x: float, y: float, z: float) -> tuple[float, float]:
    return math.atan2(y, x), math.atan2(math.hypot(x, y), z)


def rotate(matrix: Matrix, vector: Vector) -> Vector:
    x, y, z = vector
    return (
        matrix[0][0] * x + matrix[0][1] * y + matrix[0][2] * z,
        matrix[1][0] * x + matrix[1][1] * y + matrix[1][2] * z,
        matrix[2][0] * x + matrix[2][1] * y + matrix[2][2] * z,
    )


def zyz_rotation(a: float, b: float, c: float) -> Matrix:
    """Rotation ``Rz(c) @ Ry(b) @ Rz(a)``."""
    sa, ca = math.sin(a), math.cos(a)
    sb, cb = math.sin(b), math.cos(b)
    sc, cc = math.sin(c), math.cos(c)
    return (
        (cc * cb * ca - sc * sa, -cc * cb * sa - sc * ca, cc * sb),
        (sc * cb * ca + cc * sa, -sc * cb * sa + cc * ca, sc * sb),
        (-sb * ca, sb * sa, cb),
    )


def _y_rotation(azimuth: float, polar: float, angle: float) -> tuple[float, float]:
    x, y, z = spherical_to_cartesian(azimuth, polar)
    sin_a, cos_a = math.sin(angle), math.cos(angle)
    return cartesian_to_spherical(z * sin_a + x * cos_a, y, z * cos_a - x * sin_a)


def _build_faces() -> tuple[
    tuple[Vector, ...], tuple[Matrix, ...], tuple[Matrix, ...]
]:
    vertices = [geo_to_spherical(lon, lat) for lon, lat in VERTICES_GEO]

    centroids = []
    rotations = []
    inverses = []
    for face in ISO:
        points = [spherical_to_cartesian(*vertices[index]) for index in face]
        sx, sy, sz = (sum(axis) for axis in zip(*points, strict=True))
        mag = math.sqrt(sx * sx + sy * sy + sz * sz)
        centroids.append((sx / mag, sy / mag, sz / mag))

        azimuth, polar = cartesian_to_spherical(sx, sy, sz)

        # First vertex of the face is used as the orientation reference
        first_azimuth, first_polar = vertices[face[0]]
        reference, _ = _y_rotation(first_azimuth - azimuth, first_polar, -polar)

        rotations.append(zyz_rotation(-azimuth, -polar, math.pi / 2 - reference))
        inverses.append(zyz_rotation(reference - math.pi / 2, polar, azimuth))

    return tuple(centroids), tuple(rotations), tuple(inverses)


CENTROIDS, ROTATION_MATRICES, INVERSE_ROTATION_MATRICES = _build_faces()


def find_triangle(vector: Vector) -> int:
    """Find the icosahedron face closest to a unit vector."""
    x, y, z = vector
    minimum = math.inf
    face = 0
    for index in range(FACE_COUNT):
        cx, cy, cz = CENTROIDS[index]
        distance = (cx - x) ** 2 + (cy - y) ** 2 + (cz - z) ** 2
        if distance < minimum:
            if distance < 0.1:  # noqa: PLR2004
                return index
            face = index
            minimum = distance
    return face


def find_triangle_grid(x: float, y: float) -> int:
    """Find the face slot of a point on the unfolded net, -1 outside the net."""
    xp = x / ARC
    yp = y / (ARC * ROOT3)

    if -0.25 < yp < 0.25:  # noqa: PLR2004
        row = 1
    elif 0.25 <= yp <= 0.75:  # noqa: PLR2004
        row = 0
        yp = 0.5 - yp
    elif -0.75 <= yp <= -0.25:  # noqa: PLR2004
        row = 2
        yp = -yp - 0.5
    else:
        return -1

    # Shear the triangle rows onto a square grid along the y = x diagonal
    yp += 0.25
    gx = math.floor(xp - yp)
    gy = math.floor(xp + yp)
    col = 2 * gx + (1 if gy != gx else 0) + 6

    if not 0 <= col < 11:  # noqa: PLR2004
        return -1
    return FACE_ON_GRID[row * 11 + col]


def triangle_transform(x, y, z):
    """Flatten a point of the template face onto the template triangle."""
    scale = Z / z
    xp = scale * x
    yp = scale * y

    a = np.arctan((2 * yp / ROOT3 - EL6) / DVE)
    b = np.arctan((xp - yp / ROOT3 - EL6) / DVE)
    c = np.arctan((-xp - yp / ROOT3 - EL6) / DVE)
    return 0.5 * (b - c), (2 * a - b - c) / (2 * ROOT3)


def inverse_triangle_transform(x, y, iterations: int = DYMAXION_NEWTON_ITERATIONS):
    """Lift a point of the template triangle back onto the template face.

    Solves ``tan(a) + tan(b) + tan(c) = R`` for ``tan(c)`` with Newton's
    method, starting from ``tan(c) = 0``.
    """
    tan_a_off = np.tan(ROOT3 * y + x)
    tan_b_off = np.tan(2 * x)

    a_numer = tan_a_off * tan_a_off + 1
    b_numer = tan_b_off * tan_b_off + 1

    tan_a = tan_a_off
    tan_b = tan_b_off
    tan_c = 0.0 * tan_a_off
    a_denom = 1.0
    b_denom = 1.0

    for _ in range(iterations):
        f = tan_a + tan_b + tan_c - R
        fp = a_numer * a_denom * a_denom + b_numer * b_denom * b_denom + 1
        tan_c = tan_c - f / fp

        a_denom = 1 / (1 - tan_c * tan_a_off)
        b_denom = 1 / (1 - tan_c * tan_b_off)
        tan_a = (tan_c + tan_a_off) * a_denom
        tan_b = (tan_c + tan_b_off) * b_denom

    yp = ROOT3 * (DVE * tan_a + EL6) / 2
    xp = DVE * tan_b + yp / ROOT3 + EL6

    xp_over_z = xp / Z
    yp_over_z = yp / Z
    z = 1 / np.sqrt(1 + xp_over_z * xp_over_z + yp_over_z * yp_over_z)
    return z * xp_over_z, z * yp_over_z, z
