r"""
Terminal-price simulation under Geometric Brownian Motion.

Under the risk-neutral measure with continuous dividend yield :math:`q`,

.. math::
   dS_t = (r - q) S_t\,dt + \sigma S_t\,dW_t,

whose exact solution at maturity is

.. math::
   S_T = S_0 \exp\!\left((r - q - \tfrac{1}{2}\sigma^2)T + \sigma\sqrt{T}\,Z\right),
   \qquad Z \sim \mathcal{N}(0, 1).

A European payoff only needs :math:`S_T`, so each path is a single draw; no
time stepping is involved.
"""

from __future__ import annotations

import numpy as np
from numpy.random import Generator

from .sampler import box_muller

__all__ = ["gbm_drift_diffusion", "simulate_terminal_prices"]


def gbm_drift_diffusion(vol: float, maturity: float, rate: float, dividend: float) -> tuple[float, float]:
    r"""
    Log-space drift :math:`(r - q - \tfrac12\sigma^2)T` and diffusion :math:`\sigma\sqrt{T}`.

    Both are exactly ``0.0`` at :math:`T = 0`.
    """
    if maturity == 0.0:
        return 0.0, 0.0
    drift = (rate - dividend - 0.5 * vol * vol) * maturity
    diffusion = vol * np.sqrt(maturity)
    return float(drift), float(diffusion)


def simulate_terminal_prices(
    spot: float,
    vol: float,
    maturity: float,
    rate: float,
    dividend: float,
    n_paths: int,
    rng: Generator,
) -> np.ndarray:
    r"""
    Simulate ``n_paths`` independent terminal prices :math:`S_T`.

    Parameters
    ----------
    spot : float
        Initial level :math:`S_0`.
    vol : float
        Volatility :math:`\sigma` as a decimal.
    maturity : float
        Horizon :math:`T` in years, :math:`T \ge 0`.
    rate : float
        Risk-free rate :math:`r` as a decimal.
    dividend : float
        Dividend yield :math:`q` as a decimal.
    n_paths : int
        Number of paths. ``0`` gives an empty array.
    rng : numpy.random.Generator
        Stream the normals are drawn from (:func:`~mcscenario.sampler.box_muller`).

    Returns
    -------
    numpy.ndarray
        Array of shape ``(n_paths,)``.

    Raises
    ------
    ValueError
        If ``maturity`` is negative or ``n_paths`` is negative.

    Notes
    -----
    At :math:`T = 0` every entry equals ``spot`` exactly; no normals are drawn.
    """
    if maturity < 0.0:
        raise ValueError(f"maturity must be >= 0, got {maturity}")
    if n_paths < 0:
        raise ValueError(f"n_paths must be >= 0, got {n_paths}")
    if maturity == 0.0:
        return np.full(n_paths, float(spot))

    drift, diffusion = gbm_drift_diffusion(vol, maturity, rate, dividend)
    z = box_muller(rng, n_paths)
    return spot * np.exp(drift + diffusion * z)
