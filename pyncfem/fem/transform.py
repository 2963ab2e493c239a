"""pyncfem.fem.transform
Reference → physical mapping for bilinear quadrilateral cells.

This is the geometry collaborator of the evaluation contexts: it turns
reference quadrature points into physical coordinates and supplies
Jacobian-weighted weights and face normals.  The P1NC element itself only
ever sees the physical points.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from pyncfem.core.topology import as_vertex_array, FACES_PER_CELL
from pyncfem.fem.reference import get_reference
from pyncfem.fem.update_flags import UpdateFlags
from pyncfem.integration.pre_tabulates import _map_q1_points
from pyncfem.integration.quadrature import Quadrature

logger = logging.getLogger(__name__)

# Reference tangent of each face, oriented from its lower-index vertex.
_FACE_TANGENT_REF = np.array([[0, 1], [0, 1], [1, 0], [1, 0]], dtype=float)
# +1: outward normal is the tangent turned counter-clockwise, -1: clockwise.
_FACE_NORMAL_TURN = np.array([+1.0, -1.0, -1.0, +1.0])


@dataclass
class MappingData:
    """Geometry at the quadrature points of one cell, face or sub-face.

    Arrays that were not requested are left with zero length.
    """
    quadrature_points: np.ndarray            # (n_q, 2)
    JxW_values: np.ndarray                   # (n_q,)
    normal_vectors: np.ndarray               # (n_q, 2)

    @classmethod
    def allocate(cls, n_q: int, flags: UpdateFlags, with_normals: bool = False) -> "MappingData":
        return cls(
            quadrature_points=np.zeros((n_q if flags & UpdateFlags.QUADRATURE_POINTS else 0, 2)),
            JxW_values=np.zeros(n_q if flags & UpdateFlags.JXW_VALUES else 0),
            normal_vectors=np.zeros((n_q if (with_normals and flags & UpdateFlags.CELL_NORMAL_VECTORS) else 0, 2)),
        )


# ---------- single-point helpers ----------

def x_mapping(vertices, xi_eta):
    ref = get_reference("quad")
    N = ref.shape(float(xi_eta[0]), float(xi_eta[1]))
    return N @ as_vertex_array(vertices)                  # (2,)


def jacobian(vertices, xi_eta):
    """J[i, j] = d x_j / d xi_i (rows: reference direction, columns: physical)."""
    ref = get_reference("quad")
    dN = ref.grad(float(xi_eta[0]), float(xi_eta[1]))
    return dN.T @ as_vertex_array(vertices)


def det_jacobian(vertices, xi_eta):
    return np.linalg.det(jacobian(vertices, xi_eta))


# ---------- vectorised mappings ----------

def map_points(vertices, ref_points) -> np.ndarray:
    """Physical coordinates of reference points, shape (n_q, 2)."""
    verts = np.ascontiguousarray(as_vertex_array(vertices))[None, :, :]
    pts = np.asarray(ref_points, dtype=float).reshape(-1, 2)
    out = np.empty((1, pts.shape[0], 2))
    _map_q1_points(verts, np.ascontiguousarray(pts[:, 0]), np.ascontiguousarray(pts[:, 1]), out)
    return out[0]


def map_points_batched(vertices, ref_points) -> np.ndarray:
    """Physical coordinates for a stack of cells: (n_cells, 4, 2) → (n_cells, n_q, 2)."""
    verts = np.ascontiguousarray(vertices, dtype=np.float64)
    if verts.ndim != 3 or verts.shape[1:] != (4, 2):
        raise ValueError(f"vertices must have shape (n_cells, 4, 2), got {verts.shape}")
    pts = np.asarray(ref_points, dtype=float).reshape(-1, 2)
    out = np.empty((verts.shape[0], pts.shape[0], 2))
    _map_q1_points(verts, np.ascontiguousarray(pts[:, 0]), np.ascontiguousarray(pts[:, 1]), out)
    return out


def _jacobians(vertices, ref_points) -> np.ndarray:
    ref = get_reference("quad")
    V = as_vertex_array(vertices)
    return np.array([ref.grad(float(x), float(y)).T @ V for x, y in ref_points])  # (n_q, 2, 2)


def fill_mapping_data(vertices, quadrature: Quadrature, flags: UpdateFlags,
                      out: MappingData, face_no: Optional[int] = None) -> MappingData:
    """
    Fill ``out`` for the reference rule ``quadrature`` on one cell.

    With ``face_no`` set, the rule is taken to live on that reference face:
    JxW then measures arc length and normals are outward unit normals.
    """
    pts = quadrature.points
    if flags & UpdateFlags.QUADRATURE_POINTS:
        out.quadrature_points[...] = map_points(vertices, pts)

    need_jac = flags & (UpdateFlags.JXW_VALUES | UpdateFlags.CELL_NORMAL_VECTORS)
    if not need_jac:
        return out
    J = _jacobians(vertices, pts)
    if face_no is None:
        detJ = np.linalg.det(J)
        if flags & UpdateFlags.JXW_VALUES:
            out.JxW_values[...] = np.abs(detJ) * quadrature.weights
        return out

    if not 0 <= face_no < FACES_PER_CELL:
        raise IndexError(f"face_no must be in [0, {FACES_PER_CELL}), got {face_no}")
    t_phys = _FACE_TANGENT_REF[face_no] @ J            # (n_q, 2)
    length = np.linalg.norm(t_phys, axis=1)
    if flags & UpdateFlags.JXW_VALUES:
        out.JxW_values[...] = length * quadrature.weights
    if flags & UpdateFlags.CELL_NORMAL_VECTORS and out.normal_vectors.shape[0]:
        orient = np.sign(np.linalg.det(J))
        turn = _FACE_NORMAL_TURN[face_no] * orient
        t_unit = t_phys / length[:, None]
        out.normal_vectors[:, 0] = -turn * t_unit[:, 1]
        out.normal_vectors[:, 1] = turn * t_unit[:, 0]
    return out
