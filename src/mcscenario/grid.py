r"""
Scenario axes for the spot × volatility × maturity grid.

Two five-point axes are built around a pivot:

* spot moves geometrically, :math:`S_0 (1 \pm s)^k`, for :math:`k = 0, 1, 2`;
* volatility moves arithmetically, :math:`\sigma_0 \pm k s`.

Index 2 of either axis is the pivot itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .parameters import SimulationParameters

__all__ = [
    "AXIS_LENGTH",
    "PIVOT_INDEX",
    "geometric_axis",
    "arithmetic_axis",
    "ScenarioGrid",
]

AXIS_LENGTH = 5
PIVOT_INDEX = 2


def _freeze(values: list[float]) -> np.ndarray:
    axis = np.array(values, dtype=float)
    axis.setflags(write=False)
    return axis


def geometric_axis(pivot: float, step_percent: float) -> np.ndarray:
    r"""
    Spot axis with a relative step compounded twice in each direction.

    .. math::
       [p(1-s)^2,\; p(1-s),\; p,\; p(1+s),\; p(1+s)^2], \qquad s = \text{step}/100

    Parameters
    ----------
    pivot : float
        Central spot.
    step_percent : float
        Relative step in percent.

    Returns
    -------
    numpy.ndarray
        Read-only array of length 5.

    Examples
    --------
    >>> [round(x, 6) for x in geometric_axis(100.0, 10.0)]
    [81.0, 90.0, 100.0, 110.0, 121.0]
    """
    step = step_percent / 100.0
    down, up = 1.0 - step, 1.0 + step
    return _freeze([pivot * down**2, pivot * down, pivot, pivot * up, pivot * up**2])


def arithmetic_axis(pivot: float, step_percent: float) -> np.ndarray:
    r"""
    Volatility axis with an absolute step.

    .. math::
       [p - 2s,\; p - s,\; p,\; p + s,\; p + 2s], \qquad s = \text{step}/100

    The pivot must already be a decimal (``0.20``), while the step is still in
    percentage points (``1.0`` means one vol point).

    Returns
    -------
    numpy.ndarray
        Read-only array of length 5.
    """
    step = step_percent / 100.0
    return _freeze([pivot - 2 * step, pivot - step, pivot, pivot + step, pivot + 2 * step])


@dataclass(frozen=True)
class ScenarioGrid:
    r"""
    The spot and volatility axes of a run together with its maturities.

    Attributes
    ----------
    spots : numpy.ndarray
        Geometric spot axis, length 5.
    vols : numpy.ndarray
        Arithmetic volatility axis (decimals), length 5.
    maturities : tuple of float
        Maturities in configured order.
    """

    spots: np.ndarray
    vols: np.ndarray
    maturities: tuple[float, ...]

    @classmethod
    def from_parameters(cls, params: SimulationParameters) -> "ScenarioGrid":
        return cls(
            spots=geometric_axis(params.s0, params.s0_step),
            vols=arithmetic_axis(params.vol_decimal, params.vol_step),
            maturities=tuple(params.maturities),
        )

    def __len__(self) -> int:
        return AXIS_LENGTH * AXIS_LENGTH * len(self.maturities)

    def triples(self) -> Iterator[tuple[int, int, int]]:
        """Yield ``(spot_index, vol_index, maturity_index)`` in spot → vol → maturity order."""
        for i in range(AXIS_LENGTH):
            for j in range(AXIS_LENGTH):
                for t in range(len(self.maturities)):
                    yield i, j, t

    def values(self, spot_index: int, vol_index: int, maturity_index: int) -> tuple[float, float, float]:
        """Return ``(spot, vol, maturity)`` for a triple of indices."""
        return (
            float(self.spots[spot_index]),
            float(self.vols[vol_index]),
            float(self.maturities[maturity_index]),
        )
