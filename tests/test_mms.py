"""Tests for the manufactured solution oracle."""

import numpy as np
import pytest

from ldc_ac.mms import ManufacturedSolution


@pytest.fixture
def solution():
    return ManufacturedSolution(rho=1.0, rmu=0.005, rlength=0.05)


def _fd_gradient(sol, x, y, k, h=1e-7):
    ddx = (sol.exact(x + h, y, k) - sol.exact(x - h, y, k)) / (2 * h)
    ddy = (sol.exact(x, y + h, k) - sol.exact(x, y - h, k)) / (2 * h)
    return ddx, ddy


class TestExactField:
    """Closed-form values."""

    def test_centre_pressure(self, solution):
        """Centre pressure matches the rounded default reference pressure."""
        assert solution.exact(0.025, 0.025, 0) == pytest.approx(0.801333844662, abs=1e-7)

    def test_centre_pressure_closed_form(self, solution):
        assert solution.exact(0.025, 0.025, 0) == pytest.approx(0.8013338329953574, abs=1e-12)

    def test_origin_values(self, solution):
        # sin terms vanish at the origin; cos terms equal 1
        assert solution.exact(0.0, 0.0, 0) == pytest.approx(0.25 + 0.5)
        assert solution.exact(0.0, 0.0, 1) == pytest.approx(0.3 + 0.2)
        assert solution.exact(0.0, 0.0, 2) == pytest.approx(0.2 + 1.0 / 6.0 + 0.25 + 0.1)

    def test_exact_fields_layout(self, solution):
        x = np.linspace(0.0, 0.05, 5)
        y = np.linspace(0.0, 0.05, 7)
        fields = solution.exact_fields(x, y)

        assert fields.shape == (5, 7, 3)
        assert fields[3, 2, 1] == pytest.approx(solution.exact(x[3], y[2], 1))


class TestDerivatives:
    """Analytic derivatives agree with finite differences."""

    @pytest.mark.parametrize("k", [0, 1, 2])
    def test_gradient(self, solution, k):
        x, y = 0.013, 0.037
        ddx, ddy = solution.gradient(x, y, k)
        fx, fy = _fd_gradient(solution, x, y, k)
        assert ddx == pytest.approx(fx, rel=1e-5)
        assert ddy == pytest.approx(fy, rel=1e-5)

    @pytest.mark.parametrize("k", [0, 1, 2])
    def test_second_derivatives(self, solution, k):
        x, y, h = 0.021, 0.008, 1e-5
        d2x, d2y = solution.second_derivatives(x, y, k)
        f = solution.exact
        fd2x = (f(x + h, y, k) - 2 * f(x, y, k) + f(x - h, y, k)) / h**2
        fd2y = (f(x, y + h, k) - 2 * f(x, y, k) + f(x, y - h, k)) / h**2
        assert d2x == pytest.approx(fd2x, rel=1e-4)
        assert d2y == pytest.approx(fd2y, rel=1e-4)


class TestSourceTerms:
    """Forcing terms are the steady residuals of the exact field."""

    def test_mass_source(self, solution):
        x, y = 0.03, 0.011
        dudx, _ = _fd_gradient(solution, x, y, 1)
        _, dvdy = _fd_gradient(solution, x, y, 2)
        assert solution.source_mass(x, y) == pytest.approx(dudx + dvdy, rel=1e-5)

    def test_momentum_source_x(self, solution):
        x, y = 0.03, 0.011
        u = solution.exact(x, y, 1)
        v = solution.exact(x, y, 2)
        dudx, dudy = solution.gradient(x, y, 1)
        dpdx, _ = solution.gradient(x, y, 0)
        d2x, d2y = solution.second_derivatives(x, y, 1)
        expected = u * dudx + v * dudy + dpdx - 0.005 * (d2x + d2y)
        assert solution.source_xmtm(x, y) == pytest.approx(expected)

    def test_source_terms_zero_on_boundary(self, mms_constants):
        sol = ManufacturedSolution.from_constants(mms_constants)
        S = sol.source_terms(mms_constants)

        assert S.shape == (9, 9, 3)
        assert np.all(S[0] == 0.0) and np.all(S[-1] == 0.0)
        assert np.all(S[:, 0] == 0.0) and np.all(S[:, -1] == 0.0)
        assert np.any(S[1:-1, 1:-1] != 0.0)
