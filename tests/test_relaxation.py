"""Tests for the relaxation strategies."""

import numpy as np
import pytest

from ldc_ac.boundary import CavityWalls
from ldc_ac.datastructures import SolverFields
from ldc_ac.operators.timestep import compute_time_step
from ldc_ac.problem import initial_state
from ldc_ac.relaxation import PointJacobi, SymmetricGaussSeidel, create_relaxation_scheme


@pytest.fixture
def setup(constants):
    fields = SolverFields.allocate(constants.nx, constants.ny)
    fields.U.data[...] = initial_state(constants, 0.8).U
    bc = CavityWalls(constants.uinf)
    bc.apply(fields.U.data)
    compute_time_step(fields.U.data, fields.dt.data, constants)
    return fields, bc


class TestIterate:
    """One iteration of each strategy."""

    @pytest.mark.parametrize("scheme_cls", [SymmetricGaussSeidel, PointJacobi])
    def test_old_holds_previous_state(self, setup, constants, scheme_cls):
        fields, bc = setup
        before = fields.U.data.copy()

        scheme_cls().iterate(fields, bc, constants)

        np.testing.assert_array_equal(fields.U_old.data, before)
        assert not np.array_equal(fields.U.data, before)

    @pytest.mark.parametrize("scheme_cls", [SymmetricGaussSeidel, PointJacobi])
    def test_boundary_conditions_hold(self, setup, constants, scheme_cls):
        fields, bc = setup
        scheme = scheme_cls()
        for _ in range(3):
            compute_time_step(fields.U.data, fields.dt.data, constants)
            scheme.iterate(fields, bc, constants)

        U = fields.U.data
        assert np.all(U[:, -1, 1] == 1.0)
        assert np.all(U[:, -1, 2] == 0.0)
        assert np.all(U[0, :-1, 1:] == 0.0)
        assert np.all(U[:, 0, 1:] == 0.0)

    def test_point_jacobi_swaps_buffers(self, setup, constants):
        fields, bc = setup
        buf_u, buf_old = fields.U.data, fields.U_old.data

        PointJacobi().iterate(fields, bc, constants)

        assert fields.U.data is buf_old
        assert fields.U_old.data is buf_u

    def test_sgs_keeps_buffers(self, setup, constants):
        fields, bc = setup
        buf_u = fields.U.data

        SymmetricGaussSeidel().iterate(fields, bc, constants)

        assert fields.U.data is buf_u

    def test_first_iteration_moves_fluid_below_lid(self, setup, constants):
        fields, bc = setup
        SymmetricGaussSeidel().iterate(fields, bc, constants)
        assert np.all(fields.U.data[1:-1, -2, 1] > 0.0)


class TestFactory:
    """Scheme selection."""

    def test_names(self):
        assert isinstance(create_relaxation_scheme("sgs"), SymmetricGaussSeidel)
        assert isinstance(create_relaxation_scheme("PJ"), PointJacobi)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown relaxation scheme"):
            create_relaxation_scheme("sor")
