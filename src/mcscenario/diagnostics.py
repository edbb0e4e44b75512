r"""
mcscenario.diagnostics
======================

Checks and summaries for the output of a scenario-grid run.

* :func:`summarize_distribution` – stats-engine summary of a terminal-price sample.
* :func:`distribution_histogram` – equal-width binning of a sample.
* :func:`expected_terminal_mean` / :func:`lognormal_median` – GBM moments to
  compare the central distribution against.
* :func:`black_scholes_call` – closed-form price to compare Monte Carlo rows against.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy.stats import norm

from .stats_engine import DEFAULT_ENGINE, StatsContext, StatsEngine

__all__ = [
    "HistogramBin",
    "summarize_distribution",
    "distribution_histogram",
    "expected_terminal_mean",
    "lognormal_median",
    "black_scholes_call",
]

DEFAULT_BIN_COUNT = 50


@dataclass(frozen=True)
class HistogramBin:
    """One histogram bin ``[start, end)``; the last bin also includes ``end``."""

    start: float
    end: float
    count: int
    frequency: float

    @property
    def mid(self) -> float:
        return 0.5 * (self.start + self.end)


def summarize_distribution(
    sample: np.ndarray,
    confidence: float = 0.95,
    engine: StatsEngine | None = None,
) -> dict[str, Any]:
    r"""
    Describe a terminal-price sample with the stats engine.

    Parameters
    ----------
    sample : numpy.ndarray
        Terminal prices, e.g. :attr:`SimulationResult.central_distribution`.
    confidence : float, default 0.95
        Confidence level of ``ci_mean``.
    engine : StatsEngine, optional
        Defaults to :data:`mcscenario.stats_engine.DEFAULT_ENGINE`.

    Returns
    -------
    dict
        ``mean``, ``std``, ``percentiles``, ``ci_mean``, ``skew``, ``kurtosis``,
        plus ``n``, ``min`` and ``max``.

    Raises
    ------
    ValueError
        If ``sample`` is empty.
    """
    arr = np.asarray(sample, dtype=float).ravel()
    if arr.size == 0:
        raise ValueError("cannot summarize an empty sample")
    eng = engine or DEFAULT_ENGINE
    stats = eng.compute(arr, StatsContext(n=arr.size, confidence=confidence))
    stats.update({"n": int(arr.size), "min": float(arr.min()), "max": float(arr.max())})
    return stats


def distribution_histogram(sample: np.ndarray, bin_count: int = DEFAULT_BIN_COUNT) -> list[HistogramBin]:
    r"""
    Equal-width histogram over ``[min(sample), max(sample)]``.

    Parameters
    ----------
    sample : numpy.ndarray
        Values to bin.
    bin_count : int, default 50
        Number of bins.

    Returns
    -------
    list of HistogramBin
        ``bin_count`` bins; a single bin when every value is equal; an empty
        list for an empty sample. Frequencies sum to one.

    Raises
    ------
    ValueError
        If ``bin_count`` is not positive or the sample has non-finite values.
    """
    if bin_count <= 0:
        raise ValueError("bin_count must be positive")
    arr = np.asarray(sample, dtype=float).ravel()
    if arr.size == 0:
        return []
    if not np.all(np.isfinite(arr)):
        raise ValueError("sample contains non-finite values")

    lo, hi = float(arr.min()), float(arr.max())
    if lo == hi:
        return [HistogramBin(lo, hi, int(arr.size), 1.0)]

    counts, edges = np.histogram(arr, bins=bin_count, range=(lo, hi))
    total = float(arr.size)
    return [
        HistogramBin(float(edges[b]), float(edges[b + 1]), int(c), c / total)
        for b, c in enumerate(counts)
    ]


def expected_terminal_mean(spot: float, maturity: float, rate: float, dividend: float) -> float:
    r"""Risk-neutral mean :math:`\mathbb{E}[S_T] = S_0 e^{(r-q)T}`."""
    return float(spot * np.exp((rate - dividend) * maturity))


def lognormal_median(spot: float, vol: float, maturity: float, rate: float, dividend: float) -> float:
    r"""Median of :math:`S_T`, :math:`S_0 e^{(r - q - \frac12\sigma^2)T}`."""
    return float(spot * np.exp((rate - dividend - 0.5 * vol * vol) * maturity))


def black_scholes_call(
    spot: float, strike: float, maturity: float, rate: float, dividend: float, vol: float
) -> float:
    r"""
    Black–Scholes–Merton price of a European call with continuous dividend yield.

    .. math::
       C = S_0 e^{-qT} N(d_1) - K e^{-rT} N(d_2)

    Degenerates to the discounted intrinsic value
    :math:`\max(S_0 e^{-qT} - K e^{-rT}, 0)` when :math:`\sigma\sqrt{T} = 0`.

    Examples
    --------
    >>> round(black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.0, 0.2), 4)
    10.4506
    """
    fwd_spot = spot * np.exp(-dividend * maturity)
    pv_strike = strike * np.exp(-rate * maturity)
    sd = vol * np.sqrt(maturity)
    if sd == 0.0:
        return float(max(fwd_spot - pv_strike, 0.0))
    d1 = (np.log(spot / strike) + (rate - dividend + 0.5 * vol * vol) * maturity) / sd
    d2 = d1 - sd
    return float(fwd_spot * norm.cdf(d1) - pv_strike * norm.cdf(d2))
