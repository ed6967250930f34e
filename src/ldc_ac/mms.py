"""Manufactured solution for code verification.

The exact field of each primitive variable (p, u, v) is a constant plus
three trigonometric terms::

    phi_k(x, y) = phi0 + phix * f(apx*pi*x/L) + phiy * g(apy*pi*y/L)
                       + phixy * h(apxy*pi*x*y/L^2)

where each of f, g, h is a sine or a cosine as selected by the ``fsin*``
tables (1 = sine, 0 = cosine). The source terms are the steady
incompressible Navier-Stokes residuals of that field; adding them to the
discrete equations makes the manufactured field their continuous solution.
"""

import numpy as np

# One entry per variable: (p, u, v)
PHI0 = np.array([0.25, 0.3, 0.2])
PHIX = np.array([0.5, 0.15, 1.0 / 6.0])
PHIY = np.array([0.4, 0.2, 0.25])
PHIXY = np.array([1.0 / 3.0, 0.25, 0.1])
APX = np.array([0.5, 1.0 / 3.0, 7.0 / 17.0])
APY = np.array([0.2, 0.25, 1.0 / 6.0])
APXY = np.array([2.0 / 7.0, 0.4, 1.0 / 3.0])
FSINX = np.array([0.0, 1.0, 0.0])
FSINY = np.array([1.0, 0.0, 0.0])
FSINXY = np.array([1.0, 1.0, 0.0])


def _wave(arg, fsin):
    return fsin * np.sin(arg) + (1.0 - fsin) * np.cos(arg)


def _wave_prime(arg, fsin):
    return fsin * np.cos(arg) - (1.0 - fsin) * np.sin(arg)


class ManufacturedSolution:
    """Exact field and forcing terms of the manufactured solution.

    Parameters
    ----------
    rho : float
        Density.
    rmu : float
        Dynamic viscosity.
    rlength : float
        Characteristic length L used to scale the arguments.
    """

    def __init__(self, rho: float, rmu: float, rlength: float):
        self.rho = rho
        self.rmu = rmu
        self.rlength = rlength

    @classmethod
    def from_constants(cls, constants) -> "ManufacturedSolution":
        return cls(rho=constants.rho, rmu=constants.rmu, rlength=constants.rlength)

    def _args(self, x, y, k):
        L = self.rlength
        argx = APX[k] * np.pi * x / L
        argy = APY[k] * np.pi * y / L
        argxy = APXY[k] * np.pi * x * y / L**2
        return argx, argy, argxy

    def exact(self, x, y, k: int):
        """Exact value of variable ``k`` (0=p, 1=u, 2=v) at (x, y)."""
        argx, argy, argxy = self._args(x, y, k)
        return (
            PHI0[k]
            + PHIX[k] * _wave(argx, FSINX[k])
            + PHIY[k] * _wave(argy, FSINY[k])
            + PHIXY[k] * _wave(argxy, FSINXY[k])
        )

    def exact_fields(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Exact (p, u, v) on the tensor grid of node vectors ``x``, ``y``."""
        X, Y = np.meshgrid(x, y, indexing="ij")
        return np.stack([self.exact(X, Y, k) for k in range(3)], axis=-1)

    def gradient(self, x, y, k: int):
        """Return (d/dx, d/dy) of variable ``k``."""
        L = self.rlength
        argx, argy, argxy = self._args(x, y, k)
        cx = APX[k] * np.pi / L
        cy = APY[k] * np.pi / L
        cxy = APXY[k] * np.pi / L**2
        dxy = PHIXY[k] * _wave_prime(argxy, FSINXY[k])
        ddx = PHIX[k] * cx * _wave_prime(argx, FSINX[k]) + dxy * cxy * y
        ddy = PHIY[k] * cy * _wave_prime(argy, FSINY[k]) + dxy * cxy * x
        return ddx, ddy

    def second_derivatives(self, x, y, k: int):
        """Return (d2/dx2, d2/dy2) of variable ``k``."""
        L = self.rlength
        argx, argy, argxy = self._args(x, y, k)
        cx = APX[k] * np.pi / L
        cy = APY[k] * np.pi / L
        cxy = APXY[k] * np.pi / L**2
        wxy = PHIXY[k] * _wave(argxy, FSINXY[k])
        d2x = -PHIX[k] * cx**2 * _wave(argx, FSINX[k]) - wxy * (cxy * y) ** 2
        d2y = -PHIY[k] * cy**2 * _wave(argy, FSINY[k]) - wxy * (cxy * x) ** 2
        return d2x, d2y

    def source_mass(self, x, y):
        """Continuity source: rho * (du/dx + dv/dy)."""
        dudx, _ = self.gradient(x, y, 1)
        _, dvdy = self.gradient(x, y, 2)
        return self.rho * dudx + self.rho * dvdy

    def _momentum_source(self, x, y, k):
        uvel = self.exact(x, y, 1)
        vvel = self.exact(x, y, 2)
        dphidx, dphidy = self.gradient(x, y, k)
        dpdx, dpdy = self.gradient(x, y, 0)
        d2x, d2y = self.second_derivatives(x, y, k)
        dp = dpdx if k == 1 else dpdy
        return (
            self.rho * uvel * dphidx
            + self.rho * vvel * dphidy
            + dp
            - self.rmu * (d2x + d2y)
        )

    def source_xmtm(self, x, y):
        """x-momentum source."""
        return self._momentum_source(x, y, 1)

    def source_ymtm(self, x, y):
        """y-momentum source."""
        return self._momentum_source(x, y, 2)

    def source_terms(self, constants) -> np.ndarray:
        """Source array (nx, ny, 3), evaluated on interior nodes only."""
        S = np.zeros((constants.nx, constants.ny, 3))
        X, Y = np.meshgrid(constants.x[1:-1], constants.y[1:-1], indexing="ij")
        S[1:-1, 1:-1, 0] = self.source_mass(X, Y)
        S[1:-1, 1:-1, 1] = self.source_xmtm(X, Y)
        S[1:-1, 1:-1, 2] = self.source_ymtm(X, Y)
        return S
