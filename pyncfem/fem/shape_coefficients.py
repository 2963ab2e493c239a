"""pyncfem.fem.shape_coefficients
Per-cell affine basis of the P1 non-conforming quadrilateral element.

Each of the four basis functions is an affine function
``N_k(x, y) = a_k x + b_k y + c_k`` on the *physical* cell.  The linear part is
fixed by requiring N_k to take the values +-1/2 along the two midlines
(the segments joining opposite edge midpoints); the constant is fixed by
N_k = 1/4 at the centroid of the edge midpoints.  Consequently the four
functions sum to one everywhere in the plane.
"""
from __future__ import annotations

import logging

import numpy as np

from pyncfem.core.convention import GEOM
from pyncfem.core.topology import as_vertex_array
from pyncfem.errors import DegenerateCellError
from pyncfem.integration.pre_tabulates import (
    _P1NC_SX, _P1NC_SY, _p1nc_coefficients, _tabulate_p1nc
)

logger = logging.getLogger(__name__)


def edge_midpoints(vertices) -> np.ndarray:
    """Midpoints of edges (v0,v2), (v1,v3), (v0,v1), (v2,v3), shape (4, 2)."""
    v = as_vertex_array(vertices)
    return 0.5 * np.array([v[0] + v[2], v[1] + v[3], v[0] + v[1], v[2] + v[3]])


def midpoint_centroid(vertices) -> np.ndarray:
    """Average of the four edge midpoints.

    For a general quadrilateral this is the vertex average as well, but it is
    defined through the midpoints because that is where N_k = 1/4 is imposed.
    """
    return edge_midpoints(vertices).mean(axis=0)


def midline_determinant(vertices) -> float:
    """det[m0 - m1, m2 - m3], the system determinant of the coefficient solve."""
    m = edge_midpoints(vertices)
    d1 = m[0] - m[1]
    d2 = m[2] - m[3]
    return float(d1[0] * d2[1] - d2[0] * d1[1])


def _midline_sine(det: float, scale: float) -> float:
    # non-finite det/scale (NaN vertices, overflow) counts as degenerate
    if scale == 0.0 or not np.isfinite(det) or not np.isfinite(scale):
        return 0.0
    return det / scale


def linear_shape_coefficients(vertices, rtol: float | None = None) -> np.ndarray:
    """
    Coefficients (a_k, b_k, c_k) of the four basis functions on one cell.

    Parameters
    ----------
    vertices
        (4, 2) coordinates ordered bottom-left, bottom-right, top-left,
        top-right, or anything :func:`as_vertex_array` accepts.
    rtol
        Degeneracy threshold on the sine of the angle between the midlines.
        Defaults to ``GEOM.degeneracy_rtol``.

    Returns
    -------
    numpy.ndarray
        Array of shape (4, 3); row k holds (a_k, b_k, c_k).

    Raises
    ------
    DegenerateCellError
        If the midlines are parallel (or one has zero length), or if the
        vertices are not finite or the solve overflows.
    """
    m = edge_midpoints(vertices)
    with np.errstate(over='ignore', invalid='ignore', divide='ignore'):
        c = m.mean(axis=0)
        d1 = m[0] - m[1]
        d2 = m[2] - m[3]
        det = d1[0] * d2[1] - d2[0] * d1[1]
        scale = np.linalg.norm(d1) * np.linalg.norm(d2)

        sine = _midline_sine(det, scale)
        if GEOM.is_degenerate(sine, rtol):
            raise DegenerateCellError(
                f"Degenerate cell: midline determinant {det:.3e} (sin angle {sine:.3e}); "
                f"vertices {as_vertex_array(vertices).tolist()}",
                det=float(det),
            )
        if GEOM.is_nearly_degenerate(sine):
            logger.warning(f"Nearly degenerate cell: sin of midline angle is {sine:.3e}")

        a = (d2[1] * _P1NC_SX - d1[1] * _P1NC_SY) / det
        b = (-d2[0] * _P1NC_SX + d1[0] * _P1NC_SY) / det
        coeffs = np.empty((4, 3), dtype=float)
        coeffs[:, 0] = a
        coeffs[:, 1] = b
        coeffs[:, 2] = 0.25 - c[0] * a - c[1] * b
    if not np.all(np.isfinite(coeffs)):
        raise DegenerateCellError(
            f"Shape coefficients are not representable for vertices "
            f"{as_vertex_array(vertices).tolist()}",
            det=float(det),
        )
    return coeffs


def linear_shape_coefficients_batched(vertices, rtol: float | None = None) -> np.ndarray:
    """
    Vectorised :func:`linear_shape_coefficients` for a stack of cells.

    ``vertices`` has shape (n_cells, 4, 2); the result has shape
    (n_cells, 4, 3).  All degenerate cells are reported in one
    :class:`DegenerateCellError` through its ``cell_indices``.
    """
    verts = np.ascontiguousarray(vertices, dtype=np.float64)
    if verts.ndim != 3 or verts.shape[1:] != (4, 2):
        raise ValueError(f"vertices must have shape (n_cells, 4, 2), got {verts.shape}")
    n_cells = verts.shape[0]
    coeffs = np.empty((n_cells, 4, 3), dtype=np.float64)
    sines = np.empty(n_cells, dtype=np.float64)
    _p1nc_coefficients(verts, coeffs, sines)

    if rtol is None:
        rtol = GEOM.degeneracy_rtol
    bad = np.flatnonzero((np.abs(sines) <= rtol) |
                         ~np.all(np.isfinite(coeffs), axis=(1, 2)))
    if bad.size:
        raise DegenerateCellError(
            f"{bad.size} degenerate cell(s) out of {n_cells}: indices {bad[:10].tolist()}"
            + (" ..." if bad.size > 10 else ""),
            cell_indices=bad,
        )
    near = np.flatnonzero(np.abs(sines) <= GEOM.warn_rtol)
    if near.size:
        logger.warning(f"{near.size} nearly degenerate cell(s): indices {near[:10].tolist()}")
    return coeffs


def tabulate_batched(vertices, points, rtol: float | None = None):
    """
    Basis values and gradients for many cells at once.

    ``vertices``: (n_cells, 4, 2); ``points``: physical points (n_cells, n_q, 2).
    Returns ``N`` (n_cells, n_q, 4) and ``dN`` (n_cells, n_q, 4, 2).
    """
    coeffs = linear_shape_coefficients_batched(vertices, rtol=rtol)
    pts = np.ascontiguousarray(points, dtype=np.float64)
    if pts.ndim != 3 or pts.shape[0] != coeffs.shape[0] or pts.shape[2] != 2:
        raise ValueError(f"points must have shape ({coeffs.shape[0]}, n_q, 2), got {pts.shape}")
    n_cells, n_q = pts.shape[0], pts.shape[1]
    N = np.empty((n_cells, n_q, 4))
    dN = np.empty((n_cells, n_q, 4, 2))
    _tabulate_p1nc(coeffs, pts, N, dN)
    return N, dN


def evaluate_affine(coeffs: np.ndarray, points) -> np.ndarray:
    """Values N_k(x_q) for coefficients (4, 3) and points (n_q, 2); shape (4, n_q)."""
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    return coeffs[:, :2] @ pts.T + coeffs[:, 2:3]
