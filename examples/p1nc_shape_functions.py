"""Example: the four P1NC basis functions on a distorted quadrilateral"""
import numpy as np
from pyncfem import P1NCElement, linear_shape_coefficients
from pyncfem.io.visualization import plot_shape_functions

V = np.array([[0.0, 0.0], [2.0, 0.2], [0.3, 1.5], [1.8, 1.9]])   # bl, br, tl, tr
fe = P1NCElement()
print(repr(fe))
print('coefficients (a, b, c) per DOF:\n', linear_shape_coefficients(V))
print('hanging-node table:', fe.interface_constraints)
plot_shape_functions(fe, V, resolution=60)
