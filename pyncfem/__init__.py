"""pyncfem
Non-conforming linear (P1NC) finite element on quadrilateral cells.
"""
from pyncfem.errors import (
    PyNCFemError, DegenerateCellError, BufferSizeMismatchError, UnsupportedFlagCombinationError,
)
from pyncfem.fem.update_flags import UpdateFlags, FlagClosure
from pyncfem.fem.element import FiniteElement, FiniteElementData, Conformity, InternalData, FEOutputData
from pyncfem.fem.p1nc import P1NCElement
from pyncfem.fem.shape_coefficients import (
    linear_shape_coefficients, linear_shape_coefficients_batched, edge_midpoints, midpoint_centroid,
)
from pyncfem.fem.fe_values import FEValues, FEFaceValues, FESubfaceValues

__version__ = "0.1.0"

__all__ = [
    "PyNCFemError", "DegenerateCellError", "BufferSizeMismatchError",
    "UnsupportedFlagCombinationError",
    "UpdateFlags", "FlagClosure",
    "FiniteElement", "FiniteElementData", "Conformity", "InternalData", "FEOutputData",
    "P1NCElement",
    "linear_shape_coefficients", "linear_shape_coefficients_batched",
    "edge_midpoints", "midpoint_centroid",
    "FEValues", "FEFaceValues", "FESubfaceValues",
]
