"""Relaxation kernels for the discretized artificial-compressibility equations.

At each interior node the steady residuals

    R_c = rho du/dx + rho dv/dy - Vx - Vy - S_mass
    R_x = rho u du/dx + rho v du/dy + dp/dx - mu lap(u) - S_xmtm
    R_y = rho u dv/dx + rho v dv/dy + dp/dy - mu lap(v) - S_ymtm

drive the explicit pseudo-time update

    p -= beta^2 dt R_c,   u -= dt/rho R_x,   v -= dt/rho R_y

Gauss-Seidel sweeps update a single buffer in place, node by node, and are
compiled with numba. The point-Jacobi update reads only the old buffer and
is vectorised.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def _relax_node(u, i, j, visc_x, visc_y, dt, s, rho, rhoinv, rmu, dx, dy, beta2_floor):
    """Update node (i, j) of ``u`` in place using its current neighbours."""
    uvel2 = u[i, j, 1] * u[i, j, 1] + u[i, j, 2] * u[i, j, 2]
    beta2 = max(uvel2, beta2_floor)

    dpdx = (u[i + 1, j, 0] - u[i - 1, j, 0]) / (2.0 * dx)
    dpdy = (u[i, j + 1, 0] - u[i, j - 1, 0]) / (2.0 * dy)

    dudx = (u[i + 1, j, 1] - u[i - 1, j, 1]) / (2.0 * dx)
    dudy = (u[i, j + 1, 1] - u[i, j - 1, 1]) / (2.0 * dy)
    d2udx2 = (u[i + 1, j, 1] - 2.0 * u[i, j, 1] + u[i - 1, j, 1]) / (dx * dx)
    d2udy2 = (u[i, j + 1, 1] - 2.0 * u[i, j, 1] + u[i, j - 1, 1]) / (dy * dy)

    dvdx = (u[i + 1, j, 2] - u[i - 1, j, 2]) / (2.0 * dx)
    dvdy = (u[i, j + 1, 2] - u[i, j - 1, 2]) / (2.0 * dy)
    d2vdx2 = (u[i + 1, j, 2] - 2.0 * u[i, j, 2] + u[i - 1, j, 2]) / (dx * dx)
    d2vdy2 = (u[i, j + 1, 2] - 2.0 * u[i, j, 2] + u[i, j - 1, 2]) / (dy * dy)

    # Continuity
    res_c = rho * dudx + rho * dvdy - visc_x[i, j] - visc_y[i, j] - s[i, j, 0]
    u[i, j, 0] = u[i, j, 0] - beta2 * dt[i, j] * res_c

    # x-momentum
    res_x = (rho * u[i, j, 1] * dudx + rho * u[i, j, 2] * dudy + dpdx
             - rmu * d2udx2 - rmu * d2udy2 - s[i, j, 1])
    u[i, j, 1] = u[i, j, 1] - dt[i, j] * rhoinv * res_x

    # y-momentum (sees the u just updated above)
    res_y = (rho * u[i, j, 1] * dvdx + rho * u[i, j, 2] * dvdy + dpdy
             - rmu * d2vdx2 - rmu * d2vdy2 - s[i, j, 2])
    u[i, j, 2] = u[i, j, 2] - dt[i, j] * rhoinv * res_y


@njit(cache=True)
def sgs_forward_sweep(u, visc_x, visc_y, dt, s, rho, rhoinv, rmu, dx, dy, beta2_floor):
    """Gauss-Seidel sweep with j and i increasing."""
    nx, ny = u.shape[0], u.shape[1]
    for j in range(1, ny - 1):
        for i in range(1, nx - 1):
            _relax_node(u, i, j, visc_x, visc_y, dt, s, rho, rhoinv, rmu, dx, dy, beta2_floor)


@njit(cache=True)
def sgs_backward_sweep(u, visc_x, visc_y, dt, s, rho, rhoinv, rmu, dx, dy, beta2_floor):
    """Gauss-Seidel sweep with j and i decreasing."""
    nx, ny = u.shape[0], u.shape[1]
    for j in range(ny - 2, 0, -1):
        for i in range(nx - 2, 0, -1):
            _relax_node(u, i, j, visc_x, visc_y, dt, s, rho, rhoinv, rmu, dx, dy, beta2_floor)


def point_jacobi_update(u, uold, visc_x, visc_y, dt, s, constants):
    """Write the interior of ``u`` from residuals evaluated on ``uold`` only."""
    c = constants
    dx, dy = c.dx, c.dy
    po, uo, vo = uold[:, :, 0], uold[:, :, 1], uold[:, :, 2]
    C = (slice(1, -1), slice(1, -1))
    E, W = (slice(2, None), slice(1, -1)), (slice(None, -2), slice(1, -1))
    N, S = (slice(1, -1), slice(2, None)), (slice(1, -1), slice(None, -2))

    dpdx = (po[E] - po[W]) / (2.0 * dx)
    dpdy = (po[N] - po[S]) / (2.0 * dy)

    dudx = (uo[E] - uo[W]) / (2.0 * dx)
    dudy = (uo[N] - uo[S]) / (2.0 * dy)
    dvdx = (vo[E] - vo[W]) / (2.0 * dx)
    dvdy = (vo[N] - vo[S]) / (2.0 * dy)

    d2udx2 = (uo[E] - 2.0 * uo[C] + uo[W]) / dx**2
    d2udy2 = (uo[N] - 2.0 * uo[C] + uo[S]) / dy**2
    d2vdx2 = (vo[E] - 2.0 * vo[C] + vo[W]) / dx**2
    d2vdy2 = (vo[N] - 2.0 * vo[C] + vo[S]) / dy**2

    beta2 = np.maximum(uo[C] ** 2 + vo[C] ** 2, c.beta2_floor)
    dtc = dt[C]
    src = s[1:-1, 1:-1]

    res_c = c.rho * dudx + c.rho * dvdy - visc_x[C] - visc_y[C] - src[:, :, 0]
    res_x = (c.rho * uo[C] * dudx + c.rho * vo[C] * dudy + dpdx
             - c.rmu * d2udx2 - c.rmu * d2udy2 - src[:, :, 1])
    res_y = (c.rho * uo[C] * dvdx + c.rho * vo[C] * dvdy + dpdy
             - c.rmu * d2vdx2 - c.rmu * d2vdy2 - src[:, :, 2])

    u[1:-1, 1:-1, 0] = po[C] - beta2 * dtc * res_c
    u[1:-1, 1:-1, 1] = uo[C] - dtc * c.rhoinv * res_x
    u[1:-1, 1:-1, 2] = vo[C] - dtc * c.rhoinv * res_y
