"""pyncfem.utils.meshgen
Mesh generators for quick tests and demos.
"""
from typing import Optional, Tuple

import numba
import numpy as np

from pyncfem.core.convention import GEOM
from pyncfem.core.mesh import QuadMesh

__all__ = ["structured_quad", "structured_quad_mesh", "distort_interior_nodes"]


@numba.njit(cache=True)
def _structured_q1_numba(Lx: float, Ly: float, nx: int, ny: int):
    """
    Node coordinates and (bl, br, tl, tr) cell connectivity of an nx-by-ny grid.
    """
    n_nodes_x = nx + 1
    n_nodes_y = ny + 1
    nodes_coords = np.zeros((n_nodes_x * n_nodes_y, 2), dtype=np.float64)
    x_coords = np.linspace(0.0, Lx, n_nodes_x)
    y_coords = np.linspace(0.0, Ly, n_nodes_y)
    for j in range(n_nodes_y):
        for i in range(n_nodes_x):
            node_id = j * n_nodes_x + i
            nodes_coords[node_id, 0] = x_coords[i]
            nodes_coords[node_id, 1] = y_coords[j]

    cells = np.empty((nx * ny, 4), dtype=np.int64)
    for c in range(nx * ny):
        cj = c // nx
        ci = c % nx
        bl = cj * n_nodes_x + ci
        cells[c, 0] = bl
        cells[c, 1] = bl + 1
        cells[c, 2] = bl + n_nodes_x
        cells[c, 3] = bl + n_nodes_x + 1
    return nodes_coords, cells


@numba.njit(cache=True)
def _translate_coords(coords: np.ndarray, offset: np.ndarray):
    """Translates all node coordinates by a given offset vector."""
    coords[:, 0] += offset[0]
    coords[:, 1] += offset[1]
    return coords


def structured_quad(Lx: float, Ly: float, *, nx: int, ny: int,
                    offset: Optional[Tuple[float, float]] = None):
    """
    Structured quadrilateral grid on [0, Lx] x [0, Ly].

    Returns raw data: node coordinates (n_nodes, 2) and cell connectivity
    (n_cells, 4) with corners ordered bottom-left, bottom-right, top-left,
    top-right.  Cells are numbered row by row starting at the bottom.
    """
    if nx < 1 or ny < 1:
        raise ValueError(f"nx and ny must be positive, got nx={nx}, ny={ny}")
    if Lx <= 0.0 or Ly <= 0.0:
        raise ValueError(f"Domain size must be positive, got Lx={Lx}, Ly={Ly}")
    nodes_coords, cells = _structured_q1_numba(float(Lx), float(Ly), int(nx), int(ny))
    if offset is not None:
        nodes_coords = _translate_coords(nodes_coords, np.array(offset, dtype=np.float64))
    return nodes_coords, cells


def distort_interior_nodes(nodes_coords: np.ndarray, amplitude: float, *,
                           seed: Optional[int] = None, tol: Optional[float] = None) -> np.ndarray:
    """
    Randomly move interior nodes by up to ``amplitude`` in each direction.

    Boundary nodes (those on the bounding box) stay put so that the domain
    keeps its shape.  Keep ``amplitude`` below half the grid spacing to
    preserve convexity of the cells.
    """
    if tol is None:
        tol = GEOM.point_tol
    coords = np.array(nodes_coords, dtype=float, copy=True)
    lo = coords.min(axis=0)
    hi = coords.max(axis=0)
    on_bnd = (np.any(np.abs(coords - lo) <= tol, axis=1) |
              np.any(np.abs(coords - hi) <= tol, axis=1))
    rng = np.random.default_rng(seed)
    shift = rng.uniform(-amplitude, amplitude, size=coords.shape)
    shift[on_bnd] = 0.0
    return coords + shift


def structured_quad_mesh(Lx: float, Ly: float, *, nx: int, ny: int,
                         offset: Optional[Tuple[float, float]] = None,
                         distortion: float = 0.0, seed: Optional[int] = None) -> QuadMesh:
    """Convenience wrapper returning a :class:`QuadMesh`."""
    nodes, cells = structured_quad(Lx, Ly, nx=nx, ny=ny, offset=offset)
    if distortion > 0.0:
        nodes = distort_interior_nodes(nodes, distortion, seed=seed)
    return QuadMesh(nodes, cells)
