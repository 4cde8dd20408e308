# -*- coding: utf-8 -*-
"""Conformal correction field of the Dymaxion projection.

The field is sampled on a triangular lattice covering the normalized
template triangle: sample ``(u, v)`` with ``u + v <= side`` sits at

    P = ((u + v / 2) / side, (sqrt(3) / 2) * v / side)

and holds the (unnormalized) Dymaxion triangle coordinates of the sphere
point which the conformal map sends to ``P``. ``vx[u]`` and ``vy[u]`` have
``side + 1 - u`` entries each.

The field is either loaded from a published text table or generated by
inverting the conformal map of the template face: the icosahedral
invariant of the sphere is matched against the invariant of the
equilateral triangle lattice with Newton's method.
"""

from __future__ import annotations

import logging
import math
import os
from functools import lru_cache
from pathlib import Path

import numpy as np

from bte_geotools.constants import CONFORMAL_SIDE_LENGTH
from bte_geotools.constants import CONFORMAL_TABLE_ENV
from bte_geotools.errors import MalformedSourceError
from bte_geotools.errors import ResourceIOError
from bte_geotools.projection.icosahedron import ARC
from bte_geotools.projection.icosahedron import ROOT3
from bte_geotools.projection.icosahedron import Z
from bte_geotools.projection.icosahedron import inverse_triangle_transform
from bte_geotools.projection.icosahedron import triangle_transform

logger = logging.getLogger(__name__)

#: Invariant g3 of the lattice Z + Z * exp(i * pi / 3): Gamma(1/3)^18 / (2 pi)^6
_G3 = math.gamma(1 / 3) ** 18 / (2 * math.pi) ** 6

#: Number of Laurent coefficients used for the Weierstrass function
_LAURENT_TERMS = 16

_MAX_ITERATIONS = 100
_TOLERANCE = 1e-15
_RESIDUAL_WARNING = 1e-9


class InvertableVectorField:
    """Triangular lattice of 2D vectors with interpolation and inversion.

    Args:
        vx: Rows of x components, row ``u`` holding ``side + 1 - u`` values
        vy: Rows of y components, same shape as ``vx``
    """

    def __init__(self, vx: list[list[float]], vy: list[list[float]]):
        if len(vx) != len(vy) or len(vx) < 2:  # noqa: PLR2004
            raise ValueError("Vector field rows must match and hold a triangle")

        self.side_length = len(vx) - 1
        for u, (row_x, row_y) in enumerate(zip(vx, vy, strict=True)):
            expected = self.side_length + 1 - u
            if len(row_x) != expected or len(row_y) != expected:
                raise ValueError(
                    f"Vector field row {u} must hold {expected} samples, "
                    f"got {len(row_x)}/{len(row_y)}"
                )

        self.vx = vx
        self.vy = vy

    def get_interpolated_vector(
        self, x: float, y: float
    ) -> tuple[float, float, float, float, float, float]:
        """Interpolate the field at a normalized point.

        Returns:
            ``(fx, fy, dfx/dx, dfx/dy, dfy/dx, dfy/dy)``
        """
        side = self.side_length

        # scale up to lattice units
        x *= side
        y *= side

        v = 2 * y / ROOT3
        u = x - v * 0.5

        u1 = min(max(int(u), 0), side - 1)
        v1 = min(max(int(v), 0), side - u1 - 1)

        flip = 1.0
        if y < -ROOT3 * (x - u1 - v1 - 1) or v1 == side - u1 - 1:
            x1, y1 = self.vx[u1][v1], self.vy[u1][v1]
            x2, y2 = self.vx[u1][v1 + 1], self.vy[u1][v1 + 1]
            x3, y3 = self.vx[u1 + 1][v1], self.vy[u1 + 1][v1]

            corner_y = 0.5 * ROOT3 * v1
            corner_x = (u1 + 1) + 0.5 * v1
        else:
            x1, y1 = self.vx[u1][v1 + 1], self.vy[u1][v1 + 1]
            x2, y2 = self.vx[u1 + 1][v1], self.vy[u1 + 1][v1]
            x3, y3 = self.vx[u1 + 1][v1 + 1], self.vy[u1 + 1][v1 + 1]

            flip = -1.0
            y = -y
            corner_y = -(0.5 * ROOT3 * (v1 + 1))
            corner_x = (u1 + 1) + 0.5 * (v1 + 1)

        w1 = -(y - corner_y) / ROOT3 - (x - corner_x)
        w2 = 2 * (y - corner_y) / ROOT3
        w3 = 1 - w1 - w2

        return (
            x1 * w1 + x2 * w2 + x3 * w3,
            y1 * w1 + y2 * w2 + y3 * w3,
            (x3 - x1) * side,
            side * flip * (2 * x2 - x1 - x3) / ROOT3,
            (y3 - y1) * side,
            side * flip * (2 * y2 - y1 - y3) / ROOT3,
        )

    def apply_newtons_method(
        self,
        expected_x: float,
        expected_y: float,
        x_guess: float,
        y_guess: float,
        iterations: int,
    ) -> tuple[float, float]:
        """Find the normalized point whose field value is ``(expected_x, expected_y)``."""
        for _ in range(iterations):
            f_x, f_y, dfx_dx, dfx_dy, dfy_dx, dfy_dy = self.get_interpolated_vector(
                x_guess, y_guess
            )
            f_x -= expected_x
            f_y -= expected_y

            determinant = 1 / (dfx_dx * dfy_dy - dfx_dy * dfy_dx)

            x_guess -= determinant * (dfy_dy * f_x - dfx_dy * f_y)
            y_guess -= determinant * (-dfy_dx * f_x + dfx_dx * f_y)

        return x_guess, y_guess


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------


def _side_for_samples(count: int) -> int:
    side = (math.isqrt(8 * count + 1) - 3) // 2
    if side < 1 or (side + 1) * (side + 2) // 2 != count:
        raise MalformedSourceError(
            f"A conformal field table needs a triangular number of samples, got {count}"
        )
    return side


def load_vector_field(path: str | Path) -> InvertableVectorField:
    """Load a conformal field table.

    The table is text with one ``x y`` pair per line in u-major lattice
    order. Brackets and commas are ignored, so JSON-like dumps load too.

    Raises:
        ResourceIOError: If the file cannot be read
        MalformedSourceError: If a line is not a pair of numbers or the
            sample count does not fill a triangle
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ResourceIOError("Unable to read conformal field table", path, exc) from exc

    xs: list[float] = []
    ys: list[float] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = line.translate(str.maketrans("[](),", "     ")).split()
        if not tokens:
            continue
        if len(tokens) != 2:  # noqa: PLR2004
            raise MalformedSourceError(
                f"Line {lineno} of {path.name} must hold an `x y` pair, got {line!r}"
            )
        try:
            xs.append(float(tokens[0]))
            ys.append(float(tokens[1]))
        except ValueError as exc:
            raise MalformedSourceError(
                f"Line {lineno} of {path.name} is not numeric", exc
            ) from exc

    side = _side_for_samples(len(xs))

    vx: list[list[float]] = []
    vy: list[list[float]] = []
    start = 0
    for u in range(side + 1):
        stop = start + side + 1 - u
        vx.append(xs[start:stop])
        vy.append(ys[start:stop])
        start = stop

    logger.debug("Loaded conformal field of side %d from `%s`", side, path)
    return InvertableVectorField(vx, vy)


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------


def _laurent_coefficients(terms: int) -> list[float]:
    """Coefficients ``c[k]`` of ``w^2 * P(w) = 1 + sum c[k] * w^(6k)``.

    For the equianharmonic lattice ``g2 = 0``, so only every third
    coefficient of the usual recurrence is non-zero.
    """
    top = 3 * terms
    c = [0.0] * (top + 1)
    c[3] = _G3 / 28
    for n in range(4, top + 1):
        total = sum(c[m] * c[n - m] for m in range(2, n - 1))
        c[n] = 3 * total / ((2 * n + 1) * (n - 3))
    return [c[3 * k] for k in range(1, terms + 1)]


_LAURENT = _laurent_coefficients(_LAURENT_TERMS)


def _triangle_invariant(points: np.ndarray) -> np.ndarray:
    """Invariant ``4 P^3 / g3`` of the triangle group at normalized points.

    It has a triple zero at the triangle center, a sextuple pole at the
    vertices and takes the value 1 (twice) at the edge midpoints.
    """
    vertices = np.array([0.0, 1.0, 0.5 + 0.5j * ROOT3])
    offsets = points[:, None] - vertices[None, :]
    nearest = np.argmin(np.abs(offsets), axis=1)
    w = offsets[np.arange(len(points)), nearest]

    w6 = w**6
    series = np.zeros_like(w)
    for coefficient in reversed(_LAURENT):
        series = (series + coefficient) * w6
    weierstrass = (1 + series) / (w * w)

    return 4 * weierstrass**3 / _G3


def _template_vertices() -> tuple[np.ndarray, np.ndarray]:
    """Vertices and face centers of the icosahedron of the template face.

    Returns:
        The 12 vertices (the 3 template ones first) and the 20 face
        centers, as unit vectors
    """
    s = math.sqrt(1 - Z * Z)
    top = [
        np.array([0.0, s, Z]),
        np.array([-s * ROOT3 / 2, -s / 2, Z]),
        np.array([s * ROOT3 / 2, -s / 2, Z]),
    ]

    # Half turns around the edge midpoints of the template face
    middle = []
    for i, j, k in ((0, 1, 2), (1, 2, 0), (2, 0, 1)):
        axis = top[i] + top[j]
        axis /= np.linalg.norm(axis)
        middle.append(2 * np.dot(top[k], axis) * axis - top[k])

    vertices = np.array(top + middle + [-v for v in top + middle])

    adjacent = vertices @ vertices.T > 0.3  # noqa: PLR2004
    centers = []
    count = len(vertices)
    for a in range(count):
        for b in range(a + 1, count):
            if not adjacent[a, b]:
                continue
            for c in range(b + 1, count):
                if adjacent[a, c] and adjacent[b, c]:
                    center = vertices[a] + vertices[b] + vertices[c]
                    centers.append(center / np.linalg.norm(center))

    return vertices, np.array(centers)


def _stereographic(points: np.ndarray) -> np.ndarray:
    return (points[..., 0] + 1j * points[..., 1]) / (1 + points[..., 2])


class _IcosahedralInvariant:
    """Klein's icosahedral invariant in the stereographic plane.

    Triple zeros at the face centers, quintuple poles at the vertices and
    value 1 at the edge midpoints.
    """

    def __init__(self):
        vertices, centers = _template_vertices()

        # The face center at the south pole maps to infinity
        centers = centers[centers[:, 2] > -0.999]  # noqa: PLR2004

        self.vertices = _stereographic(vertices)
        self.centers = _stereographic(centers)
        self.template = self.vertices[:3]

        midpoint = vertices[0] + vertices[1]
        midpoint /= np.linalg.norm(midpoint)
        self.constant = 1.0
        self.constant = 1.0 / self(np.array([_stereographic(midpoint)]))[0]

    def __call__(self, zeta: np.ndarray) -> np.ndarray:
        to_centers = zeta[:, None] - self.centers[None, :]
        to_vertices = zeta[:, None] - self.vertices[None, :]
        return (
            self.constant
            * np.prod(to_centers, axis=1) ** 3
            / np.prod(to_vertices, axis=1) ** 5
        )

    def log_derivative(self, zeta: np.ndarray) -> np.ndarray:
        return 3 * np.sum(1 / (zeta[:, None] - self.centers[None, :]), axis=1) - 5 * (
            np.sum(1 / (zeta[:, None] - self.vertices[None, :]), axis=1)
        )


def _solve(
    invariant: _IcosahedralInvariant, target: np.ndarray, zeta: np.ndarray
) -> np.ndarray:
    """Solve ``invariant(zeta) == target`` near the initial ``zeta``."""
    zeta = zeta.copy()
    active = np.arange(len(zeta))

    for _ in range(_MAX_ITERATIONS):
        if not len(active):
            break

        current = zeta[active]
        with np.errstate(divide="ignore", invalid="ignore"):
            residual = np.log(invariant(current) / target[active])
            step = residual / invariant.log_derivative(current)
        step = np.where(np.isfinite(step), step, 0.0)
        step = np.where(np.abs(residual) < _TOLERANCE, 0.0, step)

        # Keep every step inside the template face
        reach = np.min(np.abs(current[:, None] - invariant.template[None, :]), axis=1)
        magnitude = np.abs(step)
        scale = np.minimum(1.0, 0.5 * reach / np.maximum(magnitude, _TOLERANCE))
        zeta[active] = current - step * scale

        active = active[magnitude * scale > _TOLERANCE]

    with np.errstate(divide="ignore", invalid="ignore"):
        worst = np.max(np.abs(np.log(invariant(zeta) / target)), initial=0.0)
    if not worst < _RESIDUAL_WARNING:
        logger.warning(
            "Conformal field generation did not fully converge (residual %.3g)", worst
        )
    return zeta


def build_conformal_field(side_length: int = CONFORMAL_SIDE_LENGTH) -> InvertableVectorField:
    """Generate the conformal correction field.

    Args:
        side_length: Number of lattice subdivisions along one triangle side

    Returns:
        The generated field
    """
    u, v = np.array(
        [(a, b) for a in range(side_length + 1) for b in range(side_length + 1 - a)],
        dtype=float,
    ).T

    px = (u + 0.5 * v) / side_length
    py = 0.5 * ROOT3 * v / side_length

    sx = np.empty_like(px)
    sy = np.empty_like(px)
    sz = np.empty_like(px)

    invariant = _IcosahedralInvariant()
    template = _template_vertices()[0][:3]
    corners = {
        (0, 0): 1,
        (side_length, 0): 2,
        (0, side_length): 0,
    }

    is_corner = np.zeros(len(u), dtype=bool)
    for (cu, cv), index in corners.items():
        mask = (u == cu) & (v == cv)
        is_corner |= mask
        sx[mask], sy[mask], sz[mask] = template[index]

    inner = ~is_corner

    # The plain Dymaxion inverse is a close initial guess
    gx, gy, gz = inverse_triangle_transform(
        (px[inner] - 0.5) * ARC, (py[inner] - ROOT3 / 6) * ARC
    )
    guess = (gx + 1j * gy) / (1 + gz)

    target = _triangle_invariant(px[inner] + 1j * py[inner])
    zeta = _solve(invariant, target, guess)

    r2 = np.abs(zeta) ** 2
    sx[inner] = 2 * zeta.real / (1 + r2)
    sy[inner] = 2 * zeta.imag / (1 + r2)
    sz[inner] = (1 - r2) / (1 + r2)

    fx, fy = triangle_transform(sx, sy, sz)

    vx: list[list[float]] = []
    vy: list[list[float]] = []
    start = 0
    for row in range(side_length + 1):
        stop = start + side_length + 1 - row
        vx.append(fx[start:stop].tolist())
        vy.append(fy[start:stop].tolist())
        start = stop

    return InvertableVectorField(vx, vy)


@lru_cache(maxsize=1)
def default_field() -> InvertableVectorField:
    """The process-wide conformal field.

    Loaded from the table named by the ``BTE_GEOTOOLS_CONFORMAL_TABLE``
    environment variable when it is set, generated otherwise.
    """
    if table := os.environ.get(CONFORMAL_TABLE_ENV):
        logger.info("Loading conformal field table `%s`", table)
        return load_vector_field(table)

    logger.debug("Generating conformal field (side %d)", CONFORMAL_SIDE_LENGTH)
    return build_conformal_field()
