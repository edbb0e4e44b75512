r"""
mcscenario.stats_engine
=======================
Summary statistics for simulated price samples.

This module defines:

- :class:`StatsContext`: the explicit configuration shared by all metrics.
- :class:`FnMetric`: a frozen adapter that names a metric function.
- :class:`StatsEngine`: evaluates a set of metrics over one sample.

The engine is used to describe the central terminal-price distribution of a
run (:func:`mcscenario.diagnostics.summarize_distribution`).

See Also
--------
mcscenario.utils.autocrit
    Selects a z/t critical value for a confidence level and sample size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Protocol, Sequence, TypeVar

import numpy as np
from scipy.stats import kurtosis as sp_kurtosis
from scipy.stats import skew as sp_skew

from .utils import autocrit

logger = logging.getLogger(__name__)


class NanPolicy(str, Enum):
    r"""
    Handling of non-finite observations.

    Attributes
    ----------
    propagate : str
        Keep NaNs/infinities; metrics will reflect them.
    omit : str
        Drop non-finite observations before computing a metric.
    """

    propagate = "propagate"
    omit = "omit"


class CIMethod(str, Enum):
    r"""
    Critical-value selection for :func:`ci_mean`.

    Attributes
    ----------
    auto : str
        Student-t when :math:`n_\text{eff} < 30`, otherwise z.
    z : str
        Always the normal critical value.
    t : str
        Always the Student-t critical value.
    """

    auto = "auto"
    z = "z"
    t = "t"


@dataclass(slots=True)
class StatsContext:
    r"""
    Configuration shared by every metric of a :class:`StatsEngine`.

    Attributes
    ----------
    n : int
        Declared sample size (used unless NaNs are omitted).
    confidence : float, default 0.95
        Confidence level in :math:`(0, 1)`.
    ci_method : {"auto", "z", "t"}, default "auto"
        Critical value used by :func:`ci_mean`.
    percentiles : tuple of int, default ``(5, 25, 50, 75, 95)``
        Percentiles reported by :func:`percentiles`.
    nan_policy : {"propagate", "omit"}, default "propagate"
        If ``"omit"``, drop non-finite values first.
    ddof : int, default 1
        Degrees of freedom for :func:`std`.

    Examples
    --------
    >>> ctx = StatsContext(n=10_000, confidence=0.99)
    >>> round(ctx.alpha, 2)
    0.01
    """

    n: int
    confidence: float = 0.95
    ci_method: CIMethod = CIMethod.auto
    percentiles: tuple[int, ...] = (5, 25, 50, 75, 95)
    nan_policy: NanPolicy = NanPolicy.propagate
    ddof: int = 1

    def with_overrides(self, **changes) -> "StatsContext":
        """Return a copy with selected fields replaced."""
        return replace(self, **changes)

    @property
    def alpha(self) -> float:
        r"""Tail probability :math:`\alpha = 1 - \text{confidence}`."""
        return 1.0 - self.confidence

    def eff_n(self, observed_len: int, finite_count: Optional[int] = None) -> int:
        r"""
        Effective sample size :math:`n_\text{eff}`.

        The finite count wins when ``nan_policy="omit"``; otherwise the declared
        :attr:`n`, falling back to ``observed_len``.
        """
        if self.nan_policy == NanPolicy.omit and finite_count is not None:
            return int(finite_count)
        return int(self.n or observed_len)

    def __post_init__(self) -> None:
        if not (0.0 < self.confidence < 1.0):
            raise ValueError("confidence must be in (0,1)")
        if any(p < 0 or p > 100 for p in self.percentiles):
            raise ValueError("percentiles must be in [0,100]")
        if self.ddof < 0:
            raise ValueError("ddof must be >= 0")
        self.ci_method = CIMethod(self.ci_method)
        self.nan_policy = NanPolicy(self.nan_policy)


class Metric(Protocol):
    r"""
    Protocol for metric callables used by :class:`StatsEngine`.

    A metric has a ``name`` and is callable as ``metric(x, ctx) -> Any``.
    """

    name: str

    def __call__(self, x: np.ndarray, ctx: StatsContext, /) -> Any: ...


T = TypeVar("T")


@dataclass(frozen=True)
class FnMetric(Generic[T]):
    r"""
    Bind a ``name`` to a metric function ``fn(x, ctx) -> T``.

    Examples
    --------
    >>> m = FnMetric("mean", lambda a, ctx: float(np.mean(a)))
    >>> m(np.array([1.0, 2.0, 3.0]), StatsContext(n=3))
    2.0
    """

    name: str
    fn: Callable[[np.ndarray, StatsContext], T]
    doc: str = ""

    def __call__(self, x: np.ndarray, ctx: StatsContext) -> T:
        return self.fn(x, ctx)


class StatsEngine:
    r"""
    Evaluate a set of metrics over an input sample.

    Parameters
    ----------
    metrics : iterable of Metric
        Callables with a ``name`` and signature ``metric(x, ctx)``.

    Notes
    -----
    All metrics receive the same :class:`StatsContext`. Metrics returning an
    empty mapping are left out of the output; exceptions propagate.

    Examples
    --------
    >>> eng = StatsEngine([FnMetric("mean", mean), FnMetric("std", std)])
    >>> eng.compute(np.array([1., 2., 3.]))
    {'mean': 2.0, 'std': 1.0}
    """

    def __init__(self, metrics: Iterable[Metric]):
        self._metrics = list(metrics)

    def available(self) -> tuple[str, ...]:
        return tuple(m.name for m in self._metrics)

    def compute(
        self,
        x: np.ndarray,
        ctx: Optional[StatsContext | Mapping[str, Any]] = None,
        select: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        r"""
        Evaluate the registered metrics on ``x``.

        Parameters
        ----------
        x : ndarray
            Sample values.
        ctx : StatsContext or mapping, optional
            Context. If omitted, one is built from ``**kwargs`` with ``n``
            defaulting to ``x.size``.
        select : sequence of str, optional
            Only compute metrics with these names.

        Returns
        -------
        dict
            Mapping from metric name to computed value.
        """
        if ctx is None:
            base = dict(kwargs)
            base.setdefault("n", int(np.asarray(x).size))
            ctx = StatsContext(**base)
        else:
            ctx = _ensure_ctx(ctx, x)

        wanted = None if select is None else set(select)
        out: dict[str, Any] = {}
        for m in self._metrics:
            if wanted is not None and m.name not in wanted:
                continue
            result = m(x, ctx)
            if isinstance(result, dict) and not result:
                logger.debug("Metric '%s' returned no values, skipping", m.name)
                continue
            out[m.name] = result
        return out


def _ensure_ctx(ctx: Any, x: np.ndarray) -> StatsContext:
    """Normalize ``None``, a mapping, or a :class:`StatsContext` into a context."""
    if isinstance(ctx, StatsContext):
        return ctx
    arr_len = int(np.asarray(x).size)
    if ctx is None:
        return StatsContext(n=arr_len)
    if isinstance(ctx, Mapping):
        data = dict(ctx)
        data.setdefault("n", arr_len)
        return StatsContext(**data)
    raise TypeError("ctx must be a StatsContext, a mapping, or None")


def _clean(x: np.ndarray, ctx: StatsContext) -> tuple[np.ndarray, int]:
    """Return the (possibly filtered) sample and its count of finite values."""
    arr = np.asarray(x, dtype=float).ravel()
    finite = np.isfinite(arr)
    if ctx.nan_policy == NanPolicy.omit:
        arr = arr[finite]
    return arr, int(finite.sum())


def mean(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> float:
    r"""
    Sample mean :math:`\bar X`; NaN for an empty sample.

    Examples
    --------
    >>> mean(np.array([1, 2, 3]))
    2.0
    """
    ctx = _ensure_ctx(ctx, x)
    arr, _ = _clean(x, ctx)
    return float(np.mean(arr)) if arr.size else float("nan")


def std(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> float:
    r"""
    Sample standard deviation with :attr:`StatsContext.ddof` (Bessel by default).

    Returns ``0.0`` when :math:`n_\text{eff} \le 1`.

    Examples
    --------
    >>> std(np.array([1, 2, 3]))
    1.0
    """
    ctx = _ensure_ctx(ctx, x)
    arr, finite_count = _clean(x, ctx)
    if ctx.eff_n(arr.size, finite_count) <= 1 or arr.size <= ctx.ddof:
        return 0.0
    return float(np.std(arr, ddof=ctx.ddof))


def percentiles(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> dict[int, float]:
    r"""
    Empirical percentiles ``{p: Q_p(x)}`` for :attr:`StatsContext.percentiles`.

    Examples
    --------
    >>> percentiles(np.array([0., 1., 2., 3.]), {"percentiles": (50, 75)})
    {50: 1.5, 75: 2.25}
    """
    ctx = _ensure_ctx(ctx, x)
    arr, _ = _clean(x, ctx)
    if arr.size == 0:
        return {p: float("nan") for p in ctx.percentiles}
    values = np.percentile(arr, ctx.percentiles)
    return dict(zip(ctx.percentiles, map(float, values)))


def skew(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> float:
    """Unbiased Fisher–Pearson skewness (``0.0`` for fewer than three points)."""
    ctx = _ensure_ctx(ctx, x)
    arr, _ = _clean(x, ctx)
    if arr.size <= 2 or np.all(arr == arr[0]):
        return 0.0
    return float(sp_skew(arr, bias=False))


def kurtosis(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> float:
    """Unbiased excess kurtosis (``0.0`` for fewer than four points)."""
    ctx = _ensure_ctx(ctx, x)
    arr, _ = _clean(x, ctx)
    if arr.size <= 3 or np.all(arr == arr[0]):
        return 0.0
    return float(sp_kurtosis(arr, fisher=True, bias=False))


def ci_mean(x: np.ndarray, ctx: StatsContext | Mapping[str, Any] | None = None) -> dict[str, float | str]:
    r"""
    Parametric CI for the mean, :math:`\bar X \pm c\,s/\sqrt{n_\text{eff}}`.

    Returns
    -------
    dict[str, float | str]
        Keys ``confidence``, ``method``, ``se``, ``crit``, ``low``, ``high``.
        Endpoints are NaN when fewer than two observations are available; a
        constant sample collapses the interval to a point.
    """
    ctx = _ensure_ctx(ctx, x)
    arr, finite_count = _clean(x, ctx)
    n_eff = ctx.eff_n(arr.size, finite_count) if arr.size else 0
    if n_eff < 2:
        return {
            "confidence": ctx.confidence,
            "method": ctx.ci_method.value,
            "se": float("nan"),
            "crit": float("nan"),
            "low": float("nan"),
            "high": float("nan"),
        }

    mu = float(np.mean(arr))
    s = float(np.std(arr, ddof=ctx.ddof))
    se = s / np.sqrt(n_eff) if s > 0.0 else 0.0
    crit, method = autocrit(ctx.confidence, n_eff, ctx.ci_method.value)
    return {
        "confidence": ctx.confidence,
        "method": method,
        "se": float(se),
        "crit": float(crit),
        "low": float(mu - crit * se),
        "high": float(mu + crit * se),
    }


def build_default_engine(include_shape: bool = True) -> StatsEngine:
    r"""
    Construct a :class:`StatsEngine` with the metrics used for price samples.

    Parameters
    ----------
    include_shape : bool, default True
        Include :func:`skew` and :func:`kurtosis`.

    Returns
    -------
    StatsEngine
    """
    metrics: list[Metric] = [
        FnMetric[float]("mean", mean, "Sample mean"),
        FnMetric[float]("std", std, "Sample standard deviation"),
        FnMetric[dict[int, float]]("percentiles", percentiles, "Percentiles over the sample"),
        FnMetric[dict[str, float | str]]("ci_mean", ci_mean, "z/t CI for the mean"),
    ]
    if include_shape:
        metrics.extend(
            [
                FnMetric[float]("skew", skew, "Fisher skewness (unbiased)"),
                FnMetric[float]("kurtosis", kurtosis, "Excess kurtosis (unbiased)"),
            ]
        )
    return StatsEngine(metrics)


DEFAULT_ENGINE = build_default_engine()

__all__ = [
    "NanPolicy",
    "CIMethod",
    "StatsContext",
    "Metric",
    "FnMetric",
    "StatsEngine",
    "mean",
    "std",
    "percentiles",
    "skew",
    "kurtosis",
    "ci_mean",
    "build_default_engine",
    "DEFAULT_ENGINE",
]
