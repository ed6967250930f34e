"""4th order artificial viscosity for the continuity equation.

Damps odd-even (checkerboard) pressure modes, which the central-difference
continuity equation on a collocated grid does not see. The undivided 4th
difference is divided by dx (not dx^4), so the damping term scales as dx^3.
"""

import numpy as np

from .timestep import eigenvalues, local_beta2


def _extrapolate_edges(visc: np.ndarray):
    """Linear extrapolation onto the lines next to the boundary.

    x-edges (i = 1, nx-2) first, then y-edges (j = 1, ny-2), so the
    y-edge pass owns the four near-corner nodes.
    """
    nx, ny = visc.shape
    rows = slice(2, ny - 2)
    if nx > 5:
        visc[1, rows] = 2.0 * visc[2, rows] - visc[3, rows]
        visc[-2, rows] = 2.0 * visc[-3, rows] - visc[-4, rows]
    else:
        visc[1, rows] = visc[2, rows]
        visc[-2, rows] = visc[-3, rows]

    cols = slice(1, nx - 1)
    if ny > 5:
        visc[cols, 1] = 2.0 * visc[cols, 2] - visc[cols, 3]
        visc[cols, -2] = 2.0 * visc[cols, -3] - visc[cols, -4]
    else:
        visc[cols, 1] = visc[cols, 2]
        visc[cols, -2] = visc[cols, -3]


def compute_artificial_viscosity(U: np.ndarray, visc_x: np.ndarray, visc_y: np.ndarray, constants):
    """Overwrite ``visc_x`` and ``visc_y`` with the damping terms of ``U``.

    Parameters
    ----------
    U : np.ndarray
        State (nx, ny, 3) holding (p, u, v).
    visc_x, visc_y : np.ndarray
        Damping terms (nx, ny). Interior entries are overwritten; boundary
        entries are left untouched.
    constants : ProblemConstants
        Derived problem constants.
    """
    c = constants
    p = U[:, :, 0]
    inner = (slice(2, -2), slice(2, -2))
    u = U[2:-2, 2:-2, 1]
    v = U[2:-2, 2:-2, 2]

    beta2 = local_beta2(u, v, c.beta2_floor)
    lambda_x, lambda_y = eigenvalues(u, v, beta2)

    d4pdx4 = (p[4:, 2:-2] - 4.0 * p[3:-1, 2:-2] + 6.0 * p[2:-2, 2:-2]
              - 4.0 * p[1:-3, 2:-2] + p[:-4, 2:-2]) / c.dx
    d4pdy4 = (p[2:-2, 4:] - 4.0 * p[2:-2, 3:-1] + 6.0 * p[2:-2, 2:-2]
              - 4.0 * p[2:-2, 1:-3] + p[2:-2, :-4]) / c.dy

    visc_x[inner] = -np.abs(lambda_x) * c.Cx * d4pdx4 / beta2
    visc_y[inner] = -np.abs(lambda_y) * c.Cy * d4pdy4 / beta2

    _extrapolate_edges(visc_x)
    _extrapolate_edges(visc_y)
