r"""
mcscenario.parameters
=====================

Run configuration for the scenario-grid pricer.

This module provides:

* :class:`SimulationParameters` – frozen, validated market/scenario/product inputs.
* :class:`InvalidParameterError` – raised for inputs the engine refuses to run.
* :data:`DEFAULT_PARAMETERS` – the stock configuration of the pricing screen.
* :data:`MAX_N_PATHS` – largest supported path count.

Rates, dividend yield and volatility are entered in percent, exactly as a user
would type them; the decimal views (:attr:`SimulationParameters.rate`,
:attr:`~SimulationParameters.dividend`, :attr:`~SimulationParameters.vol_decimal`)
are what the simulation uses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from numbers import Integral, Real
from typing import Any, Iterable, Mapping

__all__ = [
    "InvalidParameterError",
    "SimulationParameters",
    "DEFAULT_PARAMETERS",
    "MAX_N_PATHS",
]

# A run retains at most 27 samples of ``n_paths`` float64 values (the central
# one is detailed column 0) plus one in-flight sample per worker, whatever the
# number of maturities; 5M paths is ~1.1 GB of retained samples.
MAX_N_PATHS = 5_000_000

# Accepted spellings from the pricing screen's camelCase payload.
_ALIASES = {
    "s0Step": "s0_step",
    "volStep": "vol_step",
    "nPaths": "n_paths",
}


class InvalidParameterError(ValueError):
    """Simulation inputs that violate the engine's preconditions."""


def _as_float_tuple(name: str, values: Iterable[Any]) -> tuple[float, ...]:
    if isinstance(values, (str, bytes)):
        raise InvalidParameterError(f"{name} must be a sequence of numbers, got {values!r}")
    try:
        items = list(values)
    except TypeError as exc:
        raise InvalidParameterError(f"{name} must be a sequence of numbers") from exc
    for v in items:
        if isinstance(v, bool) or not isinstance(v, Real):
            raise InvalidParameterError(f"{name} must be a sequence of numbers, got {v!r}")
    return tuple(float(v) for v in items)


@dataclass(frozen=True)
class SimulationParameters:
    r"""
    Inputs for one scenario-grid run.

    Attributes
    ----------
    s0 : float
        Spot pivot.
    s0_step : float
        Relative spot step in percent; the spot axis is compounded by
        :math:`(1 \pm s)` twice in each direction.
    vol : float
        Volatility pivot in percent (``20`` means :math:`\sigma = 0.20`).
    vol_step : float
        Absolute volatility step in percentage points.
    r : float
        Continuously compounded risk-free rate in percent.
    q : float
        Continuous dividend yield in percent.
    n_paths : int
        Terminal prices simulated per (spot, vol, maturity) scenario.
    maturities : tuple of float
        Maturities in years. Order matters: index 0 drives the central
        distribution and index 0..2 map to the detailed columns. Zero is
        allowed; negative maturities are refused because :math:`\sigma\sqrt{T}`
        is undefined for :math:`T < 0`.
    strikes : tuple of float
        Strikes priced on every scenario.

    Raises
    ------
    InvalidParameterError
        If ``n_paths`` is not a positive integer or exceeds :data:`MAX_N_PATHS`,
        if ``maturities`` or ``strikes`` is empty, if a maturity is negative,
        or if any number is not finite.

    Examples
    --------
    >>> p = SimulationParameters(s0=100.0, s0_step=5.0, vol=20.0, vol_step=2.0,
    ...                          r=3.0, q=0.0, n_paths=1000,
    ...                          maturities=(1.0,), strikes=(100.0,))
    >>> p.vol_decimal
    0.2
    """

    s0: float
    s0_step: float
    vol: float
    vol_step: float
    r: float
    q: float
    n_paths: int
    maturities: tuple[float, ...] = field(default=())
    strikes: tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        # normalize list inputs so the frozen instance is truly immutable
        object.__setattr__(self, "maturities", _as_float_tuple("maturities", self.maturities))
        object.__setattr__(self, "strikes", _as_float_tuple("strikes", self.strikes))

        if isinstance(self.n_paths, bool) or not isinstance(self.n_paths, Integral):
            raise InvalidParameterError(f"n_paths must be an integer, got {self.n_paths!r}")
        if self.n_paths <= 0:
            raise InvalidParameterError("n_paths must be positive")
        if self.n_paths > MAX_N_PATHS:
            raise InvalidParameterError(f"n_paths must be <= {MAX_N_PATHS:,}, got {self.n_paths:,}")
        object.__setattr__(self, "n_paths", int(self.n_paths))

        for name in ("s0", "s0_step", "vol", "vol_step", "r", "q"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be a finite number, got {value!r}")
            object.__setattr__(self, name, float(value))

        if not self.maturities:
            raise InvalidParameterError("at least one maturity is required")
        if not self.strikes:
            raise InvalidParameterError("at least one strike is required")
        if not all(math.isfinite(t) for t in self.maturities):
            raise InvalidParameterError("maturities must be finite")
        if any(t < 0.0 for t in self.maturities):
            raise InvalidParameterError("maturities must be >= 0")
        if not all(math.isfinite(k) for k in self.strikes):
            raise InvalidParameterError("strikes must be finite")

    @property
    def rate(self) -> float:
        """Risk-free rate as a decimal."""
        return self.r / 100.0

    @property
    def dividend(self) -> float:
        """Dividend yield as a decimal."""
        return self.q / 100.0

    @property
    def vol_decimal(self) -> float:
        """Volatility pivot as a decimal."""
        return self.vol / 100.0

    @property
    def n_scenarios(self) -> int:
        """Number of simulated (spot, vol, maturity) triples, ``25 * M``."""
        return 25 * len(self.maturities)

    @property
    def n_rows(self) -> int:
        """Number of priced rows, ``25 * M * K``."""
        return self.n_scenarios * len(self.strikes)

    def with_overrides(self, **changes: Any) -> "SimulationParameters":
        r"""
        Return a validated copy with selected fields replaced.

        Examples
        --------
        >>> DEFAULT_PARAMETERS.with_overrides(n_paths=10_000).n_paths
        10000
        """
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SimulationParameters":
        r"""
        Build parameters from a mapping, e.g. a parsed JSON payload.

        Both ``snake_case`` names and the pricing screen's camelCase names
        (``s0Step``, ``volStep``, ``nPaths``) are accepted. Unknown keys are
        rejected.

        Raises
        ------
        InvalidParameterError
            On unknown or missing keys, or any failed validation.
        """
        names = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in names:
                raise InvalidParameterError(f"unknown parameter '{key}'")
            if name in kwargs:
                raise InvalidParameterError(f"parameter '{name}' given more than once")
            kwargs[name] = value
        missing = names - kwargs.keys()
        if missing:
            raise InvalidParameterError(f"missing parameters: {sorted(missing)}")
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Plain ``dict`` view, with tuples turned into lists."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = list(value) if isinstance(value, tuple) else value
        return out


DEFAULT_PARAMETERS = SimulationParameters(
    s0=50_000.0,
    s0_step=2.5,
    vol=20.0,
    vol_step=1.0,
    r=3.0,
    q=0.0,
    n_paths=200_000,
    maturities=(4.0, 5.0, 6.0),
    strikes=(50_000.0, 52_000.0),
)
