"""pyncfem.fem.fe_values
Evaluation contexts: the caller side of the element's fill contract.

A context is built once for an element, a reference quadrature rule and a
set of requested quantities.  It resolves the flags, asks the element for its
per-context data, and allocates all output buffers.  ``reinit`` then maps the
rule onto one cell (or one face / half-face of it) and lets the element fill
the buffers in place.

Contexts hold mutable buffers; use one context per thread.
"""
from __future__ import annotations

import logging
import numbers

import numpy as np

from pyncfem.core.topology import as_vertex_array
from pyncfem.fem.element import FEOutputData, FiniteElement
from pyncfem.fem.transform import MappingData, fill_mapping_data
from pyncfem.fem.update_flags import UpdateFlags
from pyncfem.integration import quadrature as q

logger = logging.getLogger(__name__)


class _FEValuesBase:
    _is_face = False

    def __init__(self, element: FiniteElement, n_quadrature_points: int, flags):
        self.element = element
        self.requested_flags = UpdateFlags(int(flags))
        self.update_flags = element.resolve_update_flags(self.requested_flags)
        self.n_quadrature_points = int(n_quadrature_points)
        self.dofs_per_cell = element.dofs_per_cell

        self._internal = element.get_data(self.update_flags, self.n_quadrature_points)
        self._output = FEOutputData.allocate(self.dofs_per_cell, self.n_quadrature_points,
                                             self.update_flags)
        self._mapping = MappingData.allocate(self.n_quadrature_points, self.update_flags,
                                             with_normals=self._is_face)
        self._initialized = False
        logger.debug(f"{type(self).__name__}({element.name()}): n_q={self.n_quadrature_points}, "
                     f"flags={self.update_flags!r}")

    # ..................................................................
    def _require(self, flag: UpdateFlags, what: str) -> None:
        if not self.update_flags & flag:
            raise RuntimeError(f"{what} not available: {flag.name} was not requested "
                               f"(context flags {self.update_flags!r}).")
        if not self._initialized:
            raise RuntimeError(f"{what} not available: call reinit() first.")

    @property
    def output(self) -> FEOutputData:
        return self._output

    @property
    def mapping_data(self) -> MappingData:
        return self._mapping

    # ..................................................................
    #  Accessors
    # ..................................................................
    def shape_value(self, k: int, q_point: int) -> float:
        self._require(UpdateFlags.VALUES, "Shape values")
        return float(self._output.shape_values[k, q_point])

    def shape_grad(self, k: int, q_point: int) -> np.ndarray:
        self._require(UpdateFlags.GRADIENTS, "Shape gradients")
        return self._output.shape_gradients[k, q_point]

    def shape_hessian(self, k: int, q_point: int) -> np.ndarray:
        self._require(UpdateFlags.HESSIANS, "Shape Hessians")
        return self._output.shape_hessians[k, q_point]

    def quadrature_point(self, q_point: int) -> np.ndarray:
        self._require(UpdateFlags.QUADRATURE_POINTS, "Quadrature points")
        return self._mapping.quadrature_points[q_point]

    def JxW(self, q_point: int) -> float:
        self._require(UpdateFlags.JXW_VALUES, "JxW values")
        return float(self._mapping.JxW_values[q_point])

    def get_function_values(self, dof_values) -> np.ndarray:
        """Values of the finite-element function with local DOF values ``dof_values``."""
        self._require(UpdateFlags.VALUES, "Shape values")
        return np.asarray(dof_values, dtype=float) @ self._output.shape_values

    def get_function_gradients(self, dof_values) -> np.ndarray:
        self._require(UpdateFlags.GRADIENTS, "Shape gradients")
        return np.einsum("k,kqd->qd", np.asarray(dof_values, dtype=float),
                         self._output.shape_gradients)


class FEValues(_FEValuesBase):
    """Shape data at interior quadrature points of a cell."""

    def __init__(self, element: FiniteElement, quadrature, flags):
        if isinstance(quadrature, numbers.Integral):
            quadrature = q.quad_rule(quadrature)
        self.quadrature: q.Quadrature = quadrature
        super().__init__(element, len(quadrature), flags)

    def reinit(self, cell) -> "FEValues":
        vertices = as_vertex_array(cell)
        fill_mapping_data(vertices, self.quadrature, self.update_flags, self._mapping)
        self.element.fill_fe_values(vertices, self._mapping, self._internal, self._output)
        self._initialized = True
        return self


class _FEFaceValuesBase(_FEValuesBase):
    _is_face = True

    def __init__(self, element: FiniteElement, order: int, flags):
        self.order = int(order)
        super().__init__(element, self.order, flags)
        self.face_no = None

    def normal_vector(self, q_point: int) -> np.ndarray:
        """Outward unit normal of the current face."""
        self._require(UpdateFlags.CELL_NORMAL_VECTORS, "Normal vectors")
        return self._mapping.normal_vectors[q_point]


class FEFaceValues(_FEFaceValuesBase):
    """Shape data at Gauss points on one face of a cell."""

    def reinit(self, cell, face_no: int) -> "FEFaceValues":
        vertices = as_vertex_array(cell)
        rule = q.face_rule(face_no, self.order)
        fill_mapping_data(vertices, rule, self.update_flags, self._mapping, face_no=face_no)
        self.element.fill_fe_face_values(vertices, face_no, self._mapping,
                                         self._internal, self._output)
        self.face_no = face_no
        self._initialized = True
        return self


class FESubfaceValues(_FEFaceValuesBase):
    """Shape data at Gauss points on one half of a face (the side a refined neighbour sees)."""

    def __init__(self, element: FiniteElement, order: int, flags):
        super().__init__(element, order, flags)
        self.subface_no = None

    def reinit(self, cell, face_no: int, subface_no: int) -> "FESubfaceValues":
        vertices = as_vertex_array(cell)
        rule = q.subface_rule(face_no, subface_no, self.order)
        fill_mapping_data(vertices, rule, self.update_flags, self._mapping, face_no=face_no)
        self.element.fill_fe_subface_values(vertices, face_no, subface_no, self._mapping,
                                            self._internal, self._output)
        self.face_no = face_no
        self.subface_no = subface_no
        self._initialized = True
        return self
