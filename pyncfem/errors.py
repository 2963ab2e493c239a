"""pyncfem.errors
Exceptions raised by the element and its evaluation contexts.
"""
from __future__ import annotations

from typing import Sequence, Tuple


class PyNCFemError(Exception):
    """Base class for all pyncfem errors."""


class DegenerateCellError(PyNCFemError, ValueError):
    """The midlines of a cell are (numerically) parallel.

    The shape coefficients are obtained by dividing through the determinant
    of the two midline vectors, so a zero determinant means the four affine
    functions do not exist for this cell.
    """

    def __init__(self, message: str, det: float | None = None,
                 cell_indices: Sequence[int] | None = None):
        super().__init__(message)
        self.det = det
        self.cell_indices = tuple(int(i) for i in cell_indices) if cell_indices is not None else ()


class BufferSizeMismatchError(PyNCFemError, ValueError):
    """An output buffer does not have the shape the element writes into."""

    def __init__(self, name: str, expected: Tuple[int, ...], actual: Tuple[int, ...]):
        super().__init__(
            f"Output buffer '{name}' has shape {tuple(actual)}, expected {tuple(expected)}."
        )
        self.name = name
        self.expected = tuple(expected)
        self.actual = tuple(actual)


class UnsupportedFlagCombinationError(PyNCFemError, ValueError):
    """A flag dependency table does not define a closed set of update flags."""


__all__ = [
    "PyNCFemError",
    "DegenerateCellError",
    "BufferSizeMismatchError",
    "UnsupportedFlagCombinationError",
]
