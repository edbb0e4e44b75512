r"""
Monte Carlo valuation of a European call from simulated terminal prices.

The estimator is the discounted sample mean of the payoff,

.. math::
   \widehat{C} = e^{-rT}\,\frac{1}{N}\sum_{i=1}^N \max(S_T^{(i)} - K, 0),

with standard error :math:`s / \sqrt{N}` where :math:`s` is the sample
standard deviation (``ddof=1``) of the discounted per-path payoffs.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

__all__ = ["CallValuation", "call_payoff", "value_call"]


@dataclass(frozen=True)
class CallValuation:
    """Price and standard error of one Monte Carlo call estimate."""

    price: float
    std_error: float


def call_payoff(terminal_prices: np.ndarray, strike: float) -> np.ndarray:
    r"""Undiscounted per-path payoff :math:`\max(S_T - K, 0)`."""
    return np.maximum(np.asarray(terminal_prices, dtype=float) - strike, 0.0)


def value_call(terminal_prices: np.ndarray, strike: float, maturity: float, rate: float) -> CallValuation:
    r"""
    Discounted expected payoff of a European call.

    Parameters
    ----------
    terminal_prices : numpy.ndarray
        Simulated :math:`S_T`, at least one element.
    strike : float
        Strike :math:`K`.
    maturity : float
        Maturity :math:`T` in years (discounting horizon).
    rate : float
        Risk-free rate :math:`r` as a decimal.

    Returns
    -------
    CallValuation
        ``price`` is non-negative; ``std_error`` is ``0.0`` for a single path.

    Raises
    ------
    ValueError
        If ``terminal_prices`` is empty.

    Examples
    --------
    >>> value_call(np.array([90.0, 110.0]), 100.0, 0.0, 0.05).price
    5.0
    """
    prices = np.asarray(terminal_prices, dtype=float)
    n = prices.size
    if n == 0:
        raise ValueError("cannot value a call on an empty sample")

    discounted = np.exp(-rate * maturity) * call_payoff(prices, strike)
    price = float(np.mean(discounted))
    std_error = float(np.std(discounted, ddof=1) / np.sqrt(n)) if n > 1 else 0.0
    return CallValuation(price=price, std_error=std_error)
