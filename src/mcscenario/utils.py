r"""
mcscenario.utils
================

Critical-value helpers for confidence intervals.

* :func:`z_crit` – two-sided normal critical value.
* :func:`t_crit` – two-sided Student-t critical value.
* :func:`autocrit` – pick z or t from the effective sample size.
"""

from __future__ import annotations

from scipy.stats import norm
from scipy.stats import t as student_t

__all__ = ["z_crit", "t_crit", "autocrit"]

# Below this effective sample size ``"auto"`` switches to Student-t.
_T_THRESHOLD = 30


def z_crit(confidence: float) -> float:
    r"""
    Two-sided normal critical value :math:`z_{1-\alpha/2}`.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.

    Returns
    -------
    float

    Examples
    --------
    >>> round(z_crit(0.95), 3)
    1.96
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in (0,1)")
    return float(norm.ppf(0.5 + confidence / 2.0))


def t_crit(confidence: float, df: int) -> float:
    r"""
    Two-sided Student-t critical value :math:`t_{1-\alpha/2,\,\nu}`.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.
    df : int
        Degrees of freedom :math:`\nu \ge 1`.

    Returns
    -------
    float
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in (0,1)")
    if df < 1:
        raise ValueError("df must be >= 1")
    return float(student_t.ppf(0.5 + confidence / 2.0, df))


def autocrit(confidence: float, n: int, method: str = "auto") -> tuple[float, str]:
    r"""
    Select a critical value for a mean CI.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.
    n : int
        Effective sample size.
    method : {"auto", "z", "t"}, default ``"auto"``
        ``"auto"`` uses t when :math:`n < 30`, otherwise z.

    Returns
    -------
    tuple[float, str]
        ``(crit, kind)`` where ``kind`` is ``"z"`` or ``"t"``.
    """
    method = getattr(method, "value", method)
    if method == "z":
        return z_crit(confidence), "z"
    if method == "t":
        return t_crit(confidence, max(1, n - 1)), "t"
    if method == "auto":
        if n < _T_THRESHOLD:
            return t_crit(confidence, max(1, n - 1)), "t"
        return z_crit(confidence), "z"
    raise ValueError(f"method must be one of 'auto', 'z', 't', got '{method}'")
