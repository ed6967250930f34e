"""Tests for the node relaxation kernels."""

import numpy as np
import pytest

from ldc_ac.operators.sweeps import (
    _relax_node,
    point_jacobi_update,
    sgs_backward_sweep,
    sgs_forward_sweep,
)


def _kernel_args(c, n=11):
    visc_x = np.zeros((n, n))
    visc_y = np.zeros((n, n))
    dt = np.full((n, n), 1e-4)
    s = np.zeros((n, n, 3))
    return visc_x, visc_y, dt, s


def _scalars(c):
    return c.rho, c.rhoinv, c.rmu, c.dx, c.dy, c.beta2_floor


class TestRestState:
    """A fluid at rest under uniform pressure is a fixed point."""

    @pytest.mark.parametrize("sweep", [sgs_forward_sweep, sgs_backward_sweep])
    def test_sgs_fixed_point(self, constants, sweep):
        U = np.zeros((11, 11, 3))
        U[:, :, 0] = 0.8
        before = U.copy()
        visc_x, visc_y, dt, s = _kernel_args(constants)

        sweep(U, visc_x, visc_y, dt, s, *_scalars(constants))

        np.testing.assert_array_equal(U, before)

    def test_pj_fixed_point(self, constants):
        Uold = np.zeros((11, 11, 3))
        Uold[:, :, 0] = 0.8
        U = np.zeros_like(Uold)
        visc_x, visc_y, dt, s = _kernel_args(constants)

        point_jacobi_update(U, Uold, visc_x, visc_y, dt, s, constants)

        np.testing.assert_allclose(U[1:-1, 1:-1], Uold[1:-1, 1:-1])


class TestPointJacobi:
    """Point-Jacobi reads only the previous iteration."""

    def test_old_state_not_modified(self, constants):
        Uold = np.random.default_rng(0).random((11, 11, 3))
        snapshot = Uold.copy()
        U = np.zeros_like(Uold)
        visc_x, visc_y, dt, s = _kernel_args(constants)

        point_jacobi_update(U, Uold, visc_x, visc_y, dt, s, constants)

        np.testing.assert_array_equal(Uold, snapshot)

    def test_boundary_not_written(self, constants):
        Uold = np.random.default_rng(1).random((11, 11, 3))
        U = np.full_like(Uold, -5.0)
        visc_x, visc_y, dt, s = _kernel_args(constants)

        point_jacobi_update(U, Uold, visc_x, visc_y, dt, s, constants)

        assert np.all(U[0] == -5.0) and np.all(U[-1] == -5.0)
        assert np.all(U[:, 0] == -5.0) and np.all(U[:, -1] == -5.0)

    def test_matches_single_node_update(self, constants):
        """Continuity and x-momentum match the in-place kernel at one node."""
        rng = np.random.default_rng(2)
        Uold = rng.random((11, 11, 3))
        visc_x, visc_y, dt, s = _kernel_args(constants)
        visc_x[...] = rng.random((11, 11))
        s[...] = rng.random((11, 11, 3))

        U = np.zeros_like(Uold)
        point_jacobi_update(U, Uold, visc_x, visc_y, dt, s, constants)

        single = Uold.copy()
        _relax_node(single, 4, 6, visc_x, visc_y, dt, s, *_scalars(constants))

        assert U[4, 6, 0] == pytest.approx(single[4, 6, 0], rel=1e-12)
        assert U[4, 6, 1] == pytest.approx(single[4, 6, 1], rel=1e-12)

    def test_source_drives_update(self, constants):
        """With a zero field, the update equals +dt * source."""
        Uold = np.zeros((11, 11, 3))
        U = np.zeros_like(Uold)
        visc_x, visc_y, dt, s = _kernel_args(constants)
        s[1:-1, 1:-1, 1] = 2.0

        point_jacobi_update(U, Uold, visc_x, visc_y, dt, s, constants)

        np.testing.assert_allclose(U[1:-1, 1:-1, 1], 1e-4 * 2.0 * constants.rhoinv)
        np.testing.assert_allclose(U[1:-1, 1:-1, 2], 0.0)
