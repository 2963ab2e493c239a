"""pyncfem.integration.quadrature
Gauss–Legendre rules on the reference quadrilateral [-1,1]^2 and its faces.
"""
# pyncfem.integration.quadrature
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss

from pyncfem.core.topology import FACES_PER_CELL, SUBFACES_PER_FACE


@dataclass(frozen=True)
class Quadrature:
    """Reference points (n, 2) and weights (n,)."""
    points: np.ndarray
    weights: np.ndarray

    def __post_init__(self):
        if self.points.ndim != 2 or self.points.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {self.points.shape}")
        if self.weights.shape != (self.points.shape[0],):
            raise ValueError("weights must have one entry per point")

    def __len__(self) -> int:
        return self.points.shape[0]

    @property
    def size(self) -> int:
        return self.points.shape[0]


# -------------------------------------------------------------------------
# 1‑D Gauss–Legendre
# -------------------------------------------------------------------------
def gauss_legendre(order: int):
    if order < 1:
        raise ValueError(order)
    return leggauss(order)  # (points, weights)


def _frozen(arr) -> np.ndarray:
    arr = np.ascontiguousarray(arr, dtype=float)
    arr.flags.writeable = False
    return arr


# -------------------------------------------------------------------------
# Tensor‑product volume rule
# -------------------------------------------------------------------------
@lru_cache(maxsize=None)
def quad_rule(order: int) -> Quadrature:
    """order×order Gauss rule, exact for Q_{2·order-1} on [-1,1]^2."""
    xi, wi = gauss_legendre(order)
    pts = np.array([[x, y] for y in xi for x in xi])
    wts = np.array([wx * wy for wy in wi for wx in wi])
    return Quadrature(_frozen(pts), _frozen(wts))


# -------------------------------------------------------------------------
# Face / sub-face rules (reference domain)
# -------------------------------------------------------------------------
def _face_points(face_no: int, t: np.ndarray) -> np.ndarray:
    """Points on a reference face for parameter t in [-1, 1].

    The parameter runs from the face's lower-index vertex to the higher one:
    face 0 (x=-1) and 1 (x=+1) upward, face 2 (y=-1) and 3 (y=+1) rightward.
    """
    if face_no == 0:
        return np.column_stack([-np.ones_like(t), t])
    if face_no == 1:
        return np.column_stack([np.ones_like(t), t])
    if face_no == 2:
        return np.column_stack([t, -np.ones_like(t)])
    if face_no == 3:
        return np.column_stack([t, np.ones_like(t)])
    raise IndexError(f"face_no must be in [0, {FACES_PER_CELL}), got {face_no}")


@lru_cache(maxsize=None)
def face_rule(face_no: int, order: int = 2) -> Quadrature:
    """Gauss rule on one face; weights sum to the reference face length 2."""
    t, w = gauss_legendre(order)
    return Quadrature(_frozen(_face_points(face_no, t)), _frozen(w))


@lru_cache(maxsize=None)
def subface_rule(face_no: int, subface_no: int, order: int = 2) -> Quadrature:
    """Gauss rule on half of a face: subface 0 is t in [-1,0], subface 1 is t in [0,1]."""
    if not 0 <= subface_no < SUBFACES_PER_FACE:
        raise IndexError(f"subface_no must be in [0, {SUBFACES_PER_FACE}), got {subface_no}")
    t, w = gauss_legendre(order)
    shift = -0.5 if subface_no == 0 else 0.5
    ts = 0.5 * t + shift
    return Quadrature(_frozen(_face_points(face_no, ts)), _frozen(0.5 * w))


def reference_points(points) -> Quadrature:
    """Wrap arbitrary reference points (unit weights) as a rule, e.g. for sampling."""
    pts = np.atleast_2d(np.asarray(points, dtype=float))
    return Quadrature(_frozen(pts), _frozen(np.ones(pts.shape[0])))


# -------------------------------------------------------------------------
# Physical line rule
# -------------------------------------------------------------------------
def line_quadrature(p0: np.ndarray, p1: np.ndarray, order: int = 2):
    """Gauss points and weights on the physical segment p0→p1."""
    xi, w_ref = gauss_legendre(order)
    p0 = np.asarray(p0, dtype=float); p1 = np.asarray(p1, dtype=float)
    mid = 0.5 * (p0 + p1)
    half = 0.5 * (p1 - p0)
    pts = mid[None, :] + xi[:, None] * half[None, :]
    J = float(np.linalg.norm(half))
    return pts, w_ref * J
