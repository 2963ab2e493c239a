import numba as _nb
import numpy as np

# Serial kernels: callers own any parallel dispatch over cells.

# Sign pattern (s_x, s_y) of each P1NC basis function, DOF order bl, br, tl, tr.
_P1NC_SX = np.array([0.5, -0.5, 0.5, -0.5])
_P1NC_SY = np.array([0.5, 0.5, -0.5, -0.5])


@_nb.njit(cache=True)
def _q1_shape_grad(xi, eta):
    """
    Bilinear shape functions and reference gradients at one point of
    [-1,1]^2, LEXICOGRAPHICAL node ordering (-1,-1), (1,-1), (-1,1), (1,1).
    """
    N = np.empty(4)
    dN = np.empty((4, 2))
    N[0] = 0.25 * (1 - xi) * (1 - eta)
    dN[0, 0] = -0.25 * (1 - eta); dN[0, 1] = -0.25 * (1 - xi)
    N[1] = 0.25 * (1 + xi) * (1 - eta)
    dN[1, 0] =  0.25 * (1 - eta); dN[1, 1] = -0.25 * (1 + xi)
    N[2] = 0.25 * (1 - xi) * (1 + eta)
    dN[2, 0] = -0.25 * (1 + eta); dN[2, 1] =  0.25 * (1 - xi)
    N[3] = 0.25 * (1 + xi) * (1 + eta)
    dN[3, 0] =  0.25 * (1 + eta); dN[3, 1] =  0.25 * (1 + xi)
    return N, dN


@_nb.njit(cache=True)
def _map_q1_points(verts, xi, eta, out):
    """
    Map reference points to physical space for a stack of cells.

    verts: (nE, 4, 2), xi/eta: (nQ,), out: (nE, nQ, 2)
    """
    nE = verts.shape[0]
    nQ = xi.shape[0]
    for e in range(nE):
        for q in range(nQ):
            N, _ = _q1_shape_grad(xi[q], eta[q])
            x = 0.0; y = 0.0
            for i in range(4):
                x += N[i] * verts[e, i, 0]
                y += N[i] * verts[e, i, 1]
            out[e, q, 0] = x
            out[e, q, 1] = y


@_nb.njit(cache=True)
def _p1nc_coefficients(verts, coeffs, sines):
    """
    Affine P1NC coefficients (a, b, c) for a stack of cells.

    verts: (nE, 4, 2), coeffs: (nE, 4, 3), sines: (nE,)
    sines[e] receives det / (|m0-m1| |m2-m3|); cells with det == 0, or with a
    non-finite det or scale, get NaN coefficients and sine 0 so that the
    caller can reject them.
    """
    nE = verts.shape[0]
    for e in range(nE):
        m0x = 0.5 * (verts[e, 0, 0] + verts[e, 2, 0]); m0y = 0.5 * (verts[e, 0, 1] + verts[e, 2, 1])
        m1x = 0.5 * (verts[e, 1, 0] + verts[e, 3, 0]); m1y = 0.5 * (verts[e, 1, 1] + verts[e, 3, 1])
        m2x = 0.5 * (verts[e, 0, 0] + verts[e, 1, 0]); m2y = 0.5 * (verts[e, 0, 1] + verts[e, 1, 1])
        m3x = 0.5 * (verts[e, 2, 0] + verts[e, 3, 0]); m3y = 0.5 * (verts[e, 2, 1] + verts[e, 3, 1])
        cx = 0.25 * (m0x + m1x + m2x + m3x)
        cy = 0.25 * (m0y + m1y + m2y + m3y)

        d1x = m0x - m1x; d1y = m0y - m1y
        d2x = m2x - m3x; d2y = m2y - m3y
        det = d1x * d2y - d2x * d1y
        scale = np.sqrt(d1x * d1x + d1y * d1y) * np.sqrt(d2x * d2x + d2y * d2y)
        if det == 0.0 or scale == 0.0 or not np.isfinite(det) or not np.isfinite(scale):
            sines[e] = 0.0
            coeffs[e, :, :] = np.nan
            continue
        sines[e] = det / scale

        for k in range(4):
            sx = _P1NC_SX[k]; sy = _P1NC_SY[k]
            a = (d2y * sx - d1y * sy) / det
            b = (-d2x * sx + d1x * sy) / det
            coeffs[e, k, 0] = a
            coeffs[e, k, 1] = b
            coeffs[e, k, 2] = 0.25 - cx * a - cy * b


@_nb.njit(cache=True)
def _tabulate_p1nc(coeffs, pts, N, dN):
    """
    Tabulates P1NC shape functions and gradients at physical points.

    coeffs: (nE, 4, 3), pts: (nE, nQ, 2), N: (nE, nQ, 4), dN: (nE, nQ, 4, 2)
    """
    nE, nQ = pts.shape[0], pts.shape[1]
    for e in range(nE):
        for q in range(nQ):
            x = pts[e, q, 0]; y = pts[e, q, 1]
            for k in range(4):
                a = coeffs[e, k, 0]; b = coeffs[e, k, 1]
                N[e, q, k] = a * x + b * y + coeffs[e, k, 2]
                dN[e, q, k, 0] = a
                dN[e, q, k, 1] = b
