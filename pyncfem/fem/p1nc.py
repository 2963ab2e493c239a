"""pyncfem.fem.p1nc
The P1 non-conforming element on quadrilaterals.

One scalar DOF per vertex, four per cell, none shared between cells.  The
basis on a cell is affine in *physical* coordinates (see
:mod:`pyncfem.fem.shape_coefficients`), so values are evaluated directly at
mapped quadrature points, gradients are constant per cell and all second
derivatives vanish.

Hanging nodes: when one side of an edge is refined, the value at the new
midpoint DOF is the average of the two endpoint values on the coarse side,
which is the single row ``[0.5, 0.5]`` of :attr:`P1NCElement.interface_constraints`.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from pyncfem.core.topology import FACES_PER_CELL, SUBFACES_PER_FACE, as_vertex_array
from pyncfem.errors import BufferSizeMismatchError
from pyncfem.fem.element import (
    Conformity, FEOutputData, FiniteElement, FiniteElementData, InternalData, GEOMETRIC_DIM,
)
from pyncfem.fem.shape_coefficients import linear_shape_coefficients
from pyncfem.fem.update_flags import FlagClosure, UpdateFlags

logger = logging.getLogger(__name__)

_P1NC_FLAG_CLOSURE = FlagClosure({
    UpdateFlags.VALUES: UpdateFlags.VALUES | UpdateFlags.QUADRATURE_POINTS,
    UpdateFlags.GRADIENTS: UpdateFlags.GRADIENTS,
    UpdateFlags.CELL_NORMAL_VECTORS: UpdateFlags.CELL_NORMAL_VECTORS | UpdateFlags.JXW_VALUES,
    UpdateFlags.HESSIANS: UpdateFlags.HESSIANS,
})


def _read_only(arr) -> np.ndarray:
    arr = np.array(arr, dtype=float)
    arr.flags.writeable = False
    return arr


class P1NCElement(FiniteElement):
    """Non-conforming linear element with one DOF per quadrilateral vertex."""

    def __init__(self) -> None:
        super().__init__(FiniteElementData(dofs_per_object=(1, 0, 0),
                                           n_components=1,
                                           degree=1,
                                           conformity=Conformity.L2))
        # face support points: the two end vertices of the reference face [-1, 1]
        self._unit_face_support_points = _read_only([-1.0, 1.0])
        self._restriction_is_additive = (False,) * self.n_components
        self._nonzero_components = tuple((True,) * self.n_components
                                         for _ in range(self.dofs_per_cell))
        self._initialize_constraints()

    def _initialize_constraints(self) -> None:
        # the hanging DOF sits at the face midpoint
        self._constraint_support_points = _read_only([0.0])
        table = np.zeros(self.interface_constraints_size())
        table[0, 0] = 0.5
        table[0, 1] = 0.5
        self._interface_constraints = _read_only(table)

    # ..................................................................
    #  Identity
    # ..................................................................
    def name(self) -> str:
        return "FE_P1NC"

    def clone(self) -> "P1NCElement":
        return P1NCElement()

    def __copy__(self) -> "P1NCElement":
        return self.clone()

    def __deepcopy__(self, memo) -> "P1NCElement":
        return self.clone()

    def resolve_update_flags(self, requested) -> UpdateFlags:
        return _P1NC_FLAG_CLOSURE(requested)

    # ..................................................................
    #  Read-only element data
    # ..................................................................
    @property
    def interface_constraints(self) -> np.ndarray:
        return self._interface_constraints

    @property
    def constraint_support_points(self) -> np.ndarray:
        """Face coordinates (on [-1, 1]) of the DOFs the constraints create."""
        return self._constraint_support_points

    @property
    def unit_face_support_points(self) -> np.ndarray:
        return self._unit_face_support_points

    @property
    def restriction_is_additive(self) -> Tuple[bool, ...]:
        return self._restriction_is_additive

    @property
    def nonzero_components(self) -> Tuple[Tuple[bool, ...], ...]:
        return self._nonzero_components

    def apply_interface_constraints(self, face_values) -> np.ndarray:
        """
        Values of the DOFs created on a refined face from the coarse face's DOFs.

        ``face_values`` has shape (dofs_per_face,) or (dofs_per_face, n); the
        result has shape (1,) or (1, n).
        """
        vals = np.asarray(face_values, dtype=float)
        if vals.shape[0] != self.dofs_per_face:
            raise ValueError(f"Expected {self.dofs_per_face} face values, got shape {vals.shape}")
        return self._interface_constraints @ vals

    # ..................................................................
    #  Evaluation
    # ..................................................................
    def get_data(self, flags, n_quadrature_points: int) -> InternalData:
        update_each = self.resolve_update_flags(flags)
        data = InternalData(update_each=update_each, n_quadrature_points=int(n_quadrature_points))
        if update_each & UpdateFlags.HESSIANS:
            d = GEOMETRIC_DIM
            data.shape_hessians = np.zeros((self.dofs_per_cell, data.n_quadrature_points, d, d))
        logger.debug(f"{self.name()}.get_data: requested {UpdateFlags(int(flags))!r}, "
                     f"resolved {update_each!r}, n_q={data.n_quadrature_points}")
        return data

    def shape_coefficients(self, cell) -> np.ndarray:
        """(4, 3) coefficients (a_k, b_k, c_k) of the basis on ``cell``."""
        return linear_shape_coefficients(as_vertex_array(cell))

    def _fill(self, cell, mapping_data, internal: InternalData, output: FEOutputData,
              hessians_from_cache: bool) -> None:
        flags = internal.update_each
        n_q = internal.n_quadrature_points
        output.check(self.dofs_per_cell, n_q, flags)

        if flags & (UpdateFlags.VALUES | UpdateFlags.GRADIENTS):
            coeffs = self.shape_coefficients(cell)
            if flags & UpdateFlags.VALUES:
                pts = mapping_data.quadrature_points
                if pts.shape != (n_q, GEOMETRIC_DIM):
                    raise BufferSizeMismatchError("quadrature_points", (n_q, GEOMETRIC_DIM), pts.shape)
                np.matmul(coeffs[:, :2], pts.T, out=output.shape_values)
                output.shape_values += coeffs[:, 2:3]
            if flags & UpdateFlags.GRADIENTS:
                output.shape_gradients[...] = coeffs[:, None, :2]

        if flags & UpdateFlags.HESSIANS:
            if hessians_from_cache and internal.shape_hessians is not None:
                output.shape_hessians[...] = internal.shape_hessians
            else:
                output.shape_hessians.fill(0.0)

    def fill_fe_values(self, cell, mapping_data, internal: InternalData,
                       output: FEOutputData) -> None:
        self._fill(cell, mapping_data, internal, output, hessians_from_cache=True)

    def fill_fe_face_values(self, cell, face_no: int, mapping_data,
                            internal: InternalData, output: FEOutputData) -> None:
        if not 0 <= face_no < FACES_PER_CELL:
            raise IndexError(f"face_no must be in [0, {FACES_PER_CELL}), got {face_no}")
        self._fill(cell, mapping_data, internal, output, hessians_from_cache=False)

    def fill_fe_subface_values(self, cell, face_no: int, subface_no: int, mapping_data,
                               internal: InternalData, output: FEOutputData) -> None:
        if not 0 <= face_no < FACES_PER_CELL:
            raise IndexError(f"face_no must be in [0, {FACES_PER_CELL}), got {face_no}")
        if not 0 <= subface_no < SUBFACES_PER_FACE:
            raise IndexError(f"subface_no must be in [0, {SUBFACES_PER_FACE}), got {subface_no}")
        self._fill(cell, mapping_data, internal, output, hessians_from_cache=False)
