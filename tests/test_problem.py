"""Tests for parameter validation, derived constants and initial state."""

import numpy as np
import pytest

from ldc_ac.datastructures import Parameters
from ldc_ac.errors import ConfigurationError
from ldc_ac.problem import derive_constants, initial_state


class TestDerivedConstants:
    """Derived physical and numerical constants."""

    def test_default_cavity(self):
        c = derive_constants(Parameters(nx=11, ny=11))

        assert c.rlength == pytest.approx(0.05)
        assert c.rmu == pytest.approx(1.0 * 1.0 * 0.05 / 10.0)
        assert c.dx == pytest.approx(0.005)
        assert c.dy == pytest.approx(0.005)
        assert c.rhoinv == pytest.approx(1.0)
        assert c.vel2ref == pytest.approx(1.0)
        assert c.beta2_floor == pytest.approx(0.1)

    def test_coordinates(self):
        c = derive_constants(Parameters(nx=5, ny=7, xmax=1.0, ymax=3.0))
        np.testing.assert_allclose(c.x, [0.0, 0.25, 0.5, 0.75, 1.0])
        np.testing.assert_allclose(c.y, np.linspace(0.0, 3.0, 7))
        assert c.center == (2, 3)


class TestValidation:
    """Configuration faults are reported before any state is built."""

    @pytest.mark.parametrize("n", [3, 4, 10, 0])
    def test_invalid_grid_size(self, n):
        with pytest.raises(ConfigurationError):
            derive_constants(Parameters(nx=n, ny=11))
        with pytest.raises(ConfigurationError):
            derive_constants(Parameters(nx=11, ny=n))

    @pytest.mark.parametrize(
        "override",
        [
            {"scheme": "jacobi"},
            {"dtmin_mode": "average"},
            {"normalization": "global"},
            {"Re": 0.0},
            {"cfl": -0.5},
            {"xmax": 0.0},
            {"output_interval": 0},
        ],
    )
    def test_invalid_options(self, override):
        with pytest.raises(ConfigurationError):
            derive_constants(Parameters(nx=11, ny=11, **override))

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            derive_constants(Parameters(nx=8, ny=8))

    def test_default_normalization(self):
        assert Parameters().normalization == "per_equation"
        assert "continuity" in Parameters.__doc__


class TestInitialState:
    """Fresh-start state."""

    def test_fresh_start(self, constants):
        state = initial_state(constants, p_ref=0.8)

        assert state.iteration == 1
        assert state.sim_time == 0.0
        assert state.resinit is None
        assert state.U.shape == (11, 11, 3)
        assert np.all(state.U[:, :, 0] == 0.8)
        assert np.all(state.U[:, -1, 1] == 1.0)
        assert np.all(state.U[:, :-1, 1] == 0.0)
        assert np.all(state.U[:, :, 2] == 0.0)
