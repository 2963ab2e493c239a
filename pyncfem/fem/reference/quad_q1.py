"""pyncfem.fem.reference.quad_q1
Bilinear geometry basis on [-1,1]^2, one function per cell vertex.
"""
import sympy as sp

xi, eta = sp.symbols('xi eta')
# reference corners in vertex order bl, br, tl, tr
VERTICES = ((-1, -1), (1, -1), (-1, 1), (1, 1))

N_sym = sp.Matrix([(1 + sx * xi) * (1 + sy * eta) / 4 for sx, sy in VERTICES])
dN_sym = N_sym.jacobian([xi, eta])

shape = sp.lambdify((xi, eta), N_sym, 'numpy')
grad = sp.lambdify((xi, eta), dN_sym, 'numpy')
