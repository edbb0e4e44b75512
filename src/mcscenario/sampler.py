r"""
Standard-normal draws via the Box–Muller transform.

Given independent :math:`U, V \sim \mathcal{U}(0, 1)`,

.. math::
   Z = \sqrt{-2 \ln U}\,\cos(2\pi V)

is standard normal. Each normal consumes two uniforms. :meth:`numpy.random.Generator.random`
samples :math:`[0, 1)`, so a ``U`` of exactly zero is redrawn before taking the log.

There is no module-level generator: every draw comes from the
:class:`numpy.random.Generator` the caller passes in, which is what lets the
simulation hand one independent stream to each scenario.
"""

from __future__ import annotations

from typing import Optional, overload

import numpy as np
from numpy.random import Generator

__all__ = ["box_muller", "GaussianSampler"]

_TWO_PI = 2.0 * np.pi


def _nonzero_uniform(rng: Generator, size: int) -> np.ndarray:
    """Uniforms on ``(0, 1)``: zeros from ``rng.random`` are redrawn in place."""
    u = rng.random(size)
    zeros = np.flatnonzero(u == 0.0)
    while zeros.size:
        u[zeros] = rng.random(zeros.size)
        zeros = zeros[u[zeros] == 0.0]
    return u


@overload
def box_muller(rng: Generator, size: None = None) -> float: ...


@overload
def box_muller(rng: Generator, size: int) -> np.ndarray: ...


def box_muller(rng: Generator, size: Optional[int] = None):
    r"""
    Draw standard-normal variates with the Box–Muller transform.

    Parameters
    ----------
    rng : numpy.random.Generator
        Source of uniforms.
    size : int, optional
        Number of draws. ``None`` returns a single ``float``.

    Returns
    -------
    float or numpy.ndarray
        One draw, or an array of shape ``(size,)``.

    Examples
    --------
    >>> rng = np.random.default_rng(7)
    >>> box_muller(rng, 3).shape
    (3,)
    """
    n = 1 if size is None else int(size)
    if n < 0:
        raise ValueError("size must be non-negative")
    u = _nonzero_uniform(rng, n)
    v = rng.random(n)
    z = np.sqrt(-2.0 * np.log(u)) * np.cos(_TWO_PI * v)
    if size is None:
        return float(z[0])
    return z


class GaussianSampler:
    r"""
    Stateful wrapper around :func:`box_muller` bound to one generator.

    Parameters
    ----------
    rng : numpy.random.Generator, optional
        Generator to draw from. A fresh, OS-seeded one is used if omitted.

    Examples
    --------
    >>> sampler = GaussianSampler(np.random.default_rng(1))
    >>> isinstance(sampler(), float)
    True
    """

    def __init__(self, rng: Optional[Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def __call__(self) -> float:
        return box_muller(self.rng)

    def sample(self, size: int) -> np.ndarray:
        return box_muller(self.rng, size)
