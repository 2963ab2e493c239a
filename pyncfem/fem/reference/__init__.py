# pyncfem.fem.reference
"""
Reference bilinear element used by the geometry mapping.
"""
from functools import lru_cache
import numpy as np

from . import quad_q1


class Ref:
    def __init__(self, shape_lambda, grad_lambda):
        self.shape_lambda = shape_lambda
        self.grad_lambda = grad_lambda

    # cached arrays are shared between callers, hence read-only
    @lru_cache(maxsize=4096)
    def shape(self, xi, eta):
        N = np.array(self.shape_lambda(xi, eta), dtype=float).ravel()
        N.flags.writeable = False
        return N

    @lru_cache(maxsize=4096)
    def grad(self, xi, eta):
        """(4, 2) array with columns (d/dxi, d/deta)."""
        dN = np.array(self.grad_lambda(xi, eta), dtype=float).reshape(4, 2)
        dN.flags.writeable = False
        return dN


@lru_cache(maxsize=None)
def get_reference(element_type: str = "quad"):
    if element_type != "quad":
        raise KeyError(element_type)
    return Ref(quad_q1.shape, quad_q1.grad)
