"""Tests for error norms, observed order and centreline extraction."""

import numpy as np
import pytest

from ldc_ac.metrics import centerline_profiles, discretization_error_norms, observed_order


class TestDiscretizationErrorNorms:
    """Norms over interior nodes, normalised by the total node count."""

    def test_constant_error(self):
        exact = np.zeros((5, 5, 3))
        U = exact.copy()
        U[1:-1, 1:-1, 1] = 0.5

        norms = discretization_error_norms(U, exact)

        assert list(norms.index) == ["p", "u", "v"]
        assert norms.loc["u", "L1"] == pytest.approx(9 * 0.5 / 25)
        assert norms.loc["u", "L2"] == pytest.approx(np.sqrt(9 * 0.25 / 25))
        assert norms.loc["u", "Linf"] == pytest.approx(0.5)
        assert norms.loc["p", "L2"] == 0.0

    def test_boundary_excluded(self):
        exact = np.zeros((5, 5, 3))
        U = exact.copy()
        U[0, :, :] = 10.0
        U[:, -1, :] = -10.0

        norms = discretization_error_norms(U, exact)

        assert np.all(norms.values == 0.0)

    def test_absolute_value(self):
        exact = np.zeros((5, 5, 3))
        U = exact.copy()
        U[2, 2, 2] = -3.0
        norms = discretization_error_norms(U, exact)
        assert norms.loc["v", "Linf"] == pytest.approx(3.0)
        assert norms.loc["v", "L1"] == pytest.approx(3.0 / 25)


class TestObservedOrder:
    """Order of accuracy from successive refinements."""

    def test_second_order(self):
        h = np.array([0.1, 0.05, 0.025])
        errors = 3.0 * h**2
        np.testing.assert_allclose(observed_order(errors, h), [2.0, 2.0])

    def test_needs_pairs(self):
        with pytest.raises(ValueError):
            observed_order([1.0], [0.1])
        with pytest.raises(ValueError):
            observed_order([1.0, 0.5], [0.1, 0.05, 0.025])


class TestCenterlineProfiles:
    """Spline interpolation along the centrelines."""

    def test_linear_field_reproduced(self):
        x = np.linspace(0.0, 1.0, 9)
        y = np.linspace(0.0, 2.0, 9)
        X, Y = np.meshgrid(x, y, indexing="ij")
        U = np.zeros((9, 9, 3))
        U[:, :, 1] = 2.0 * Y
        U[:, :, 2] = 3.0 * X

        u_profile, v_profile = centerline_profiles(U, x, y, n_points=21)

        assert len(u_profile) == 21 and len(v_profile) == 21
        np.testing.assert_allclose(u_profile["u"], 2.0 * u_profile["y"], atol=1e-12)
        np.testing.assert_allclose(v_profile["v"], 3.0 * v_profile["x"], atol=1e-12)
