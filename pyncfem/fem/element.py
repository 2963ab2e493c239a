"""pyncfem.fem.element
Capability interface shared by finite elements, and the data records that
pass between an element and the evaluation context driving it.
"""
from __future__ import annotations

import abc
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from pyncfem.errors import BufferSizeMismatchError
from pyncfem.fem.update_flags import UpdateFlags

GEOMETRIC_DIM = 2


class Conformity(Enum):
    """Sobolev space the global discrete space is a subspace of."""
    L2 = "L2"
    H1 = "H1"


@dataclass(frozen=True)
class FiniteElementData:
    """
    DOF layout and identity of an element on quadrilaterals.

    ``dofs_per_object`` lists the DOFs on each vertex, each line and the
    interior, in that order.
    """
    dofs_per_object: Tuple[int, int, int]
    n_components: int = 1
    degree: int = 1
    conformity: Conformity = Conformity.L2

    @property
    def dofs_per_vertex(self) -> int:
        return self.dofs_per_object[0]

    @property
    def dofs_per_line(self) -> int:
        return self.dofs_per_object[1]

    @property
    def dofs_per_quad(self) -> int:
        return self.dofs_per_object[2]

    @property
    def dofs_per_face(self) -> int:
        return 2 * self.dofs_per_vertex + self.dofs_per_line

    @property
    def dofs_per_cell(self) -> int:
        return 4 * self.dofs_per_vertex + 4 * self.dofs_per_line + self.dofs_per_quad


@dataclass
class InternalData:
    """Per-context data an element prepares once in :meth:`FiniteElement.get_data`."""
    update_each: UpdateFlags
    n_quadrature_points: int
    shape_hessians: np.ndarray | None = None     # (dofs_per_cell, n_q, 2, 2)


@dataclass
class FEOutputData:
    """
    Caller-owned buffers an element writes shape data into.

    Index order is (dof, quadrature point, ...).  Buffers for quantities that
    were not requested have zero length.
    """
    shape_values: np.ndarray                     # (dofs_per_cell, n_q)
    shape_gradients: np.ndarray                  # (dofs_per_cell, n_q, 2)
    shape_hessians: np.ndarray                   # (dofs_per_cell, n_q, 2, 2)

    @classmethod
    def allocate(cls, dofs_per_cell: int, n_q: int, flags: UpdateFlags) -> "FEOutputData":
        d = GEOMETRIC_DIM
        nv = n_q if flags & UpdateFlags.VALUES else 0
        ng = n_q if flags & UpdateFlags.GRADIENTS else 0
        nh = n_q if flags & UpdateFlags.HESSIANS else 0
        return cls(
            shape_values=np.zeros((dofs_per_cell if nv else 0, nv)),
            shape_gradients=np.zeros((dofs_per_cell if ng else 0, ng, d)),
            shape_hessians=np.zeros((dofs_per_cell if nh else 0, nh, d, d)),
        )

    def check(self, dofs_per_cell: int, n_q: int, flags: UpdateFlags) -> None:
        """Raise :class:`BufferSizeMismatchError` if a requested buffer is mis-sized."""
        d = GEOMETRIC_DIM
        expected = (
            ("shape_values", UpdateFlags.VALUES, (dofs_per_cell, n_q)),
            ("shape_gradients", UpdateFlags.GRADIENTS, (dofs_per_cell, n_q, d)),
            ("shape_hessians", UpdateFlags.HESSIANS, (dofs_per_cell, n_q, d, d)),
        )
        for name, flag, shape in expected:
            if not flags & flag:
                continue
            buf = getattr(self, name)
            if buf is None or buf.shape != shape:
                raise BufferSizeMismatchError(name, shape, () if buf is None else buf.shape)


class FiniteElement(abc.ABC):
    """
    What an evaluation context needs from an element.

    Concrete elements provide the DOF layout through :class:`FiniteElementData`,
    the closure of update flags, and three fill routines (cell, face, sub-face)
    that write shape data for one cell into caller-owned buffers.
    """

    def __init__(self, fe_data: FiniteElementData):
        self._fe_data = fe_data

    # ..................................................................
    #  DOF layout
    # ..................................................................
    @property
    def fe_data(self) -> FiniteElementData:
        return self._fe_data

    def dofs_per_object(self) -> Tuple[int, int, int]:
        """DOFs per (vertex, line, interior)."""
        return self._fe_data.dofs_per_object

    @property
    def dofs_per_vertex(self) -> int:
        return self._fe_data.dofs_per_vertex

    @property
    def dofs_per_line(self) -> int:
        return self._fe_data.dofs_per_line

    @property
    def dofs_per_quad(self) -> int:
        return self._fe_data.dofs_per_quad

    @property
    def dofs_per_face(self) -> int:
        return self._fe_data.dofs_per_face

    @property
    def dofs_per_cell(self) -> int:
        return self._fe_data.dofs_per_cell

    @property
    def n_components(self) -> int:
        return self._fe_data.n_components

    @property
    def degree(self) -> int:
        return self._fe_data.degree

    @property
    def conformity(self) -> Conformity:
        return self._fe_data.conformity

    def interface_constraints_size(self) -> Tuple[int, int]:
        """(DOFs created on a refined face, DOFs on the coarse face)."""
        return (self.dofs_per_vertex + 2 * self.dofs_per_line, self.dofs_per_face)

    # ..................................................................
    #  Contract
    # ..................................................................
    @abc.abstractmethod
    def name(self) -> str:
        """Fixed identifier of the element type."""

    @abc.abstractmethod
    def resolve_update_flags(self, requested: UpdateFlags) -> UpdateFlags:
        """Smallest flag set that lets the element deliver ``requested``."""

    @abc.abstractmethod
    def clone(self) -> "FiniteElement":
        """Independent copy with identical behaviour."""

    @abc.abstractmethod
    def get_data(self, flags: UpdateFlags, n_quadrature_points: int) -> InternalData:
        """Prepare per-context data for an evaluation context."""

    @abc.abstractmethod
    def fill_fe_values(self, cell, mapping_data, internal: InternalData,
                       output: FEOutputData) -> None:
        """Write shape data at interior quadrature points."""

    @abc.abstractmethod
    def fill_fe_face_values(self, cell, face_no: int, mapping_data,
                            internal: InternalData, output: FEOutputData) -> None:
        """Write shape data at quadrature points on a face."""

    @abc.abstractmethod
    def fill_fe_subface_values(self, cell, face_no: int, subface_no: int, mapping_data,
                               internal: InternalData, output: FEOutputData) -> None:
        """Write shape data at quadrature points on half of a face."""

    @property
    @abc.abstractmethod
    def interface_constraints(self) -> np.ndarray:
        """Read-only hanging-node constraint table."""

    def constraint_table(self) -> np.ndarray:
        return self.interface_constraints

    # ..................................................................
    def __eq__(self, other) -> bool:
        if not isinstance(other, FiniteElement):
            return NotImplemented
        return self.name() == other.name() and self._fe_data == other._fe_data

    def __hash__(self) -> int:
        return hash((self.name(), self._fe_data))

    def __str__(self) -> str:
        return self.name()

    def __repr__(self) -> str:
        return (f"<{type(self).__name__} '{self.name()}', dofs_per_object={self.dofs_per_object()}, "
                f"dofs_per_cell={self.dofs_per_cell}>")
