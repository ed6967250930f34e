"""Pytest configuration and fixtures for the cavity solver tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def small_grid_params():
    """Parameters for an 11x11 grid at Re=10."""
    return {
        "Re": 10.0,
        "nx": 11,
        "ny": 11,
        "tolerance": 1e-6,
        "max_iterations": 50000,
        "lid_velocity": 1.0,
        "output_interval": 100000,
        "residual_interval": 10,
    }


@pytest.fixture
def constants():
    """Derived constants of the 11x11 cavity."""
    from ldc_ac.datastructures import Parameters
    from ldc_ac.problem import derive_constants

    return derive_constants(Parameters(nx=11, ny=11))


@pytest.fixture
def mms_constants():
    """Derived constants of a 9x9 manufactured-solution problem."""
    from ldc_ac.datastructures import Parameters
    from ldc_ac.problem import derive_constants

    return derive_constants(Parameters(nx=9, ny=9, mms=True))
