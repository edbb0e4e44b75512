r"""

mcscenario.core
===============

Result containers produced by a scenario-grid run.

This module provides:

* :class:`~mcscenario.core.ScenarioKey` – grid indices identifying a priced row.
* :class:`~mcscenario.core.ScenarioRow` – one priced (spot, vol, maturity, strike) outcome.
* :class:`~mcscenario.core.SimulationResult` – every row, the central distribution
  and the 27 detailed samples, with index-based views for tables and heat maps.

Rows carry the indices they were generated from, so consumers look prices up
by position on the grid rather than by matching floating-point values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

import numpy as np

from .columns import DETAILED_COLUMN_COUNT, DETAILED_COLUMNS
from .grid import AXIS_LENGTH
from .parameters import SimulationParameters

__all__ = ["ScenarioKey", "ScenarioRow", "SimulationResult"]


@dataclass(frozen=True, order=True)
class ScenarioKey:
    """Position of a row on the spot × vol × maturity × strike grid."""

    spot_index: int
    vol_index: int
    maturity_index: int
    strike_index: int


@dataclass(frozen=True)
class ScenarioRow:
    r"""
    One priced scenario.

    Attributes
    ----------
    spot : float
        Spot level of the scenario.
    vol : float
        Volatility as a decimal (``0.20``).
    maturity : float
        Maturity in years.
    strike : float
        Strike.
    price : float
        Monte Carlo call price, :math:`\ge 0`.
    std_error : float
        Standard error of ``price``.
    key : ScenarioKey
        Grid indices the row was produced from.
    """

    spot: float
    vol: float
    maturity: float
    strike: float
    price: float
    std_error: float
    key: ScenarioKey


@dataclass
class SimulationResult:
    r"""
    Outcome of :meth:`mcscenario.simulation.ScenarioSimulation.run`.

    Attributes
    ----------
    rows : tuple of ScenarioRow
        ``25 * M * K`` rows ordered spot → vol → maturity → strike.
    central_distribution : ndarray of float
        Terminal prices for pivot spot, pivot vol and the first maturity.
    detailed_paths : tuple of (ndarray or None)
        27 slots indexed by :func:`~mcscenario.columns.detailed_column_index`;
        ``None`` marks a slot whose maturity is not configured.
    spots : ndarray of float
        Spot axis used for the run.
    vols : ndarray of float
        Volatility axis (decimals) used for the run.
    parameters : SimulationParameters
        Inputs of the run.
    execution_time : float
        Wall-clock time in seconds.
    metadata : dict
        Freeform metadata: ``"backend"``, ``"n_workers"``, ``"seed_entropy"``,
        ``"timestamp"``.
    """

    rows: tuple[ScenarioRow, ...]
    central_distribution: np.ndarray
    detailed_paths: tuple[Optional[np.ndarray], ...]
    spots: np.ndarray
    vols: np.ndarray
    parameters: SimulationParameters
    execution_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.detailed_paths) != DETAILED_COLUMN_COUNT:
            raise ValueError(
                f"detailed_paths must have {DETAILED_COLUMN_COUNT} slots, got {len(self.detailed_paths)}"
            )

    @property
    def results(self) -> tuple[ScenarioRow, ...]:
        """Alias of :attr:`rows`."""
        return self.rows

    @property
    def n_populated_columns(self) -> int:
        return sum(p is not None for p in self.detailed_paths)

    def _row_index(self, spot_index: int, vol_index: int, maturity_index: int, strike_index: int) -> int:
        n_mat = len(self.parameters.maturities)
        n_strikes = len(self.parameters.strikes)
        for name, idx, size in (
            ("spot_index", spot_index, AXIS_LENGTH),
            ("vol_index", vol_index, AXIS_LENGTH),
            ("maturity_index", maturity_index, n_mat),
            ("strike_index", strike_index, n_strikes),
        ):
            if not 0 <= idx < size:
                raise IndexError(f"{name} {idx} out of range [0, {size})")
        return ((spot_index * AXIS_LENGTH + vol_index) * n_mat + maturity_index) * n_strikes + strike_index

    def row(self, spot_index: int, vol_index: int, maturity_index: int, strike_index: int) -> ScenarioRow:
        """Row at the given grid indices."""
        return self.rows[self._row_index(spot_index, vol_index, maturity_index, strike_index)]

    def price(self, spot_index: int, vol_index: int, maturity_index: int, strike_index: int) -> float:
        """Price at the given grid indices."""
        return self.row(spot_index, vol_index, maturity_index, strike_index).price

    def price_surface(self, maturity_index: int, strike_index: int) -> np.ndarray:
        r"""
        Prices over the spot × vol grid for one maturity and strike.

        Returns
        -------
        numpy.ndarray
            Shape ``(5, 5)``; rows follow :attr:`spots`, columns :attr:`vols`.
        """
        surface = np.empty((AXIS_LENGTH, AXIS_LENGTH), dtype=float)
        for i in range(AXIS_LENGTH):
            for j in range(AXIS_LENGTH):
                surface[i, j] = self.price(i, j, maturity_index, strike_index)
        return surface

    def detailed_headers(self) -> list[dict[str, Any]]:
        r"""
        Spot, vol and maturity of each detailed column.

        Values are ``None`` for columns whose maturity index is not configured.
        """
        n_mat = len(self.parameters.maturities)
        headers = []
        for col in DETAILED_COLUMNS:
            configured = col.maturity_index < n_mat
            headers.append(
                {
                    "column": col.column,
                    "label": col.label,
                    "spot": float(self.spots[col.spot_index]) if configured else None,
                    "vol": float(self.vols[col.vol_index]) if configured else None,
                    "maturity": self.parameters.maturities[col.maturity_index] if configured else None,
                }
            )
        return headers

    def detailed_price_matrix(self) -> np.ndarray:
        r"""
        Prices of the 27 detailed columns for every strike.

        Returns
        -------
        numpy.ndarray
            Shape ``(K, 27)``. Columns whose maturity is not configured hold NaN.
        """
        n_mat = len(self.parameters.maturities)
        matrix = np.full((len(self.parameters.strikes), DETAILED_COLUMN_COUNT), np.nan)
        for col in DETAILED_COLUMNS:
            if col.maturity_index >= n_mat:
                continue
            for k in range(len(self.parameters.strikes)):
                matrix[k, col.column] = self.price(col.spot_index, col.vol_index, col.maturity_index, k)
        return matrix

    def to_records(self) -> list[dict[str, Any]]:
        """Rows as plain dicts, with the grid indices flattened in."""
        records = []
        for r in self.rows:
            rec = asdict(r)
            rec.update(rec.pop("key"))
            records.append(rec)
        return records

    def result_to_string(self) -> str:
        r"""
        Human-readable summary of the run.

        Returns
        -------
        str
            Multiline summary with the pivot prices per maturity and strike.
        """
        p = self.parameters
        lines = [
            "=" * 20 + " SCENARIO GRID " + "=" * 20,
            f"  Scenarios simulated: {p.n_scenarios} ({p.n_paths} paths each)",
            f"  Rows priced: {len(self.rows)}",
            f"  Execution time: {self.execution_time:.2f} seconds",
            f"  Detailed columns populated: {self.n_populated_columns}/{DETAILED_COLUMN_COUNT}",
            f"  Spot axis: {', '.join(f'{s:.2f}' for s in self.spots)}",
            f"  Vol axis: {', '.join(f'{v:.2%}' for v in self.vols)}",
            "  Pivot prices:",
        ]
        for t, maturity in enumerate(p.maturities):
            for k, strike in enumerate(p.strikes):
                row = self.row(2, 2, t, k)
                lines.append(f"    T={maturity:g} K={strike:g}: {row.price:.5f} (SE: {row.std_error:.5f})")
        if self.metadata:
            lines.append("Metadata:")
        for key, value in self.metadata.items():
            lines.append(f"    {key}: {value}")
        lines.append("=" * 20 + " END " + "=" * 20)
        return "\n".join(lines)
