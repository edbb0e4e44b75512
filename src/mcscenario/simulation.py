r"""
Scenario-grid simulation and orchestration logic.

This module provides:

Classes
    :class:`ScenarioSimulation` — Prices a European call over the full grid
    :class:`ScenarioOutcome` — Samples and valuations of one grid triple

A run walks every ``(spot_index, vol_index, maturity_index)`` triple of the
5 × 5 × M grid, simulates ``n_paths`` terminal prices once per triple and values
every strike on that same sample. Each triple draws from its own
:class:`numpy.random.Philox` stream spawned from the run's
:class:`numpy.random.SeedSequence`, which keeps seeded runs reproducible and
makes the triples safe to compute in parallel.

Example
-------
>>> from mcscenario import ScenarioSimulation, SimulationParameters
>>> params = SimulationParameters(s0=100.0, s0_step=5.0, vol=20.0, vol_step=2.0,
...                               r=3.0, q=0.0, n_paths=10_000,
...                               maturities=(0.5, 1.0, 2.0), strikes=(95.0, 105.0))
>>> sim = ScenarioSimulation()
>>> sim.set_seed(42)
>>> result = sim.run(params)  # doctest: +SKIP
>>> len(result.rows)  # doctest: +SKIP
150

See Also
--------
mcscenario.backends
    Execution backends for sequential and parallel execution.
mcscenario.columns
    Which triples keep their full sample.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import numpy as np
from numpy.random import Generator

from .backends import ProcessBackend, SequentialBackend, ThreadBackend, is_windows_platform, make_tasks
from .columns import DETAILED_COLUMN_COUNT, detailed_column_index
from .core import ScenarioKey, ScenarioRow, SimulationResult
from .grid import PIVOT_INDEX, ScenarioGrid
from .parameters import InvalidParameterError, SimulationParameters
from .paths import simulate_terminal_prices
from .payoff import CallValuation, value_call

logger = logging.getLogger(__name__)

__all__ = ["ScenarioOutcome", "ScenarioSimulation"]

_CENTRAL_TRIPLE = (PIVOT_INDEX, PIVOT_INDEX, 0)


@dataclass(frozen=True)
class ScenarioOutcome:
    r"""
    Result of simulating one grid triple.

    Attributes
    ----------
    position : int
        Index of the triple in run order.
    spot_index, vol_index, maturity_index : int
        Grid coordinates.
    terminal_prices : numpy.ndarray or None
        The ``n_paths`` simulated terminal prices, kept only for the central
        triple and triples mapped to a detailed column; ``None`` otherwise.
    valuations : tuple of CallValuation
        One valuation per configured strike, in strike order.
    """

    position: int
    spot_index: int
    vol_index: int
    maturity_index: int
    terminal_prices: Optional[np.ndarray]
    valuations: tuple[CallValuation, ...]


def _is_retained(spot_index: int, vol_index: int, maturity_index: int) -> bool:
    triple = (spot_index, vol_index, maturity_index)
    return triple == _CENTRAL_TRIPLE or detailed_column_index(*triple) is not None


class ScenarioSimulation:
    r"""
    Monte Carlo pricer of a European call over a spot × vol × maturity × strike grid.

    Examples
    --------
    >>> sim = ScenarioSimulation()
    >>> sim.set_seed(7)
    >>> res = sim.run(DEFAULT_PARAMETERS.with_overrides(n_paths=5_000))  # doctest: +SKIP

    Notes
    -----
    **Backends.** ``backend`` can be ``"auto"``, ``"sequential"``, ``"thread"``
    or ``"process"``. ``"auto"`` stays sequential for small grids and otherwise
    prefers threads (processes on Windows), since the per-triple work is
    vectorized NumPy that releases the GIL.

    **Reproducibility.** After :meth:`set_seed`, the ``k``-th triple of a run
    always gets the ``k``-th spawned child sequence, so sequential and
    parallel runs give bit-identical results. Each run spawns new children;
    call :meth:`set_seed` again to replay a run.
    """

    # Minimum number of normal draws (25 * M * n_paths) before "auto" goes parallel
    _PARALLEL_THRESHOLD = 2_000_000
    _VALID_BACKENDS = ("auto", "sequential", "thread", "process")

    def __init__(self, name: str = "Scenario Grid"):
        self.name = name
        self.seed_seq: Optional[np.random.SeedSequence] = None
        self.backend: str = "auto"

    def set_seed(self, seed: int | None) -> None:
        r"""
        Set the random seed for reproducible runs.

        Parameters
        ----------
        seed : int or None
            Seed for :class:`numpy.random.SeedSequence`. ``None`` chooses
            entropy from the OS.
        """
        self.seed_seq = np.random.SeedSequence(seed)

    def simulate_scenario(
        self,
        params: SimulationParameters,
        grid: ScenarioGrid,
        spot_index: int,
        vol_index: int,
        maturity_index: int,
        rng: Generator,
        *,
        position: int = 0,
    ) -> ScenarioOutcome:
        r"""
        Simulate one triple and value every strike on the same sample.

        Parameters
        ----------
        params : SimulationParameters
            Inputs of the run.
        grid : ScenarioGrid
            Axes and maturities.
        spot_index, vol_index, maturity_index : int
            Grid coordinates.
        rng : numpy.random.Generator
            Stream dedicated to this triple.
        position : int, default 0
            Index of the triple in run order.

        Returns
        -------
        ScenarioOutcome
        """
        spot, vol, maturity = grid.values(spot_index, vol_index, maturity_index)
        prices = simulate_terminal_prices(
            spot, vol, maturity, params.rate, params.dividend, params.n_paths, rng
        )
        prices.setflags(write=False)
        valuations = tuple(value_call(prices, k, maturity, params.rate) for k in params.strikes)
        logger.debug(
            "Scenario %d (S=%.4f, vol=%.4f, T=%g) simulated", position, spot, vol, maturity
        )
        return ScenarioOutcome(
            position=position,
            spot_index=spot_index,
            vol_index=vol_index,
            maturity_index=maturity_index,
            terminal_prices=prices if _is_retained(spot_index, vol_index, maturity_index) else None,
            valuations=valuations,
        )

    def _validate_run_params(self, backend: str, n_workers: int | None) -> None:
        """Validate execution options for :meth:`run`."""
        if backend not in self._VALID_BACKENDS:
            raise InvalidParameterError(f"backend must be one of {self._VALID_BACKENDS}, got '{backend}'")
        if n_workers is not None and n_workers <= 0:
            raise InvalidParameterError("n_workers must be positive")

    def run(
        self,
        params: SimulationParameters | Mapping[str, Any],
        *,
        backend: str | None = None,
        n_workers: int | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> SimulationResult:
        r"""
        Price the full grid.

        Parameters
        ----------
        params : SimulationParameters or mapping
            Run inputs. A mapping is converted with
            :meth:`SimulationParameters.from_mapping`.
        backend : {"auto", "sequential", "thread", "process"}, optional
            Execution backend; defaults to :attr:`backend`.
        n_workers : int, optional
            Worker count for parallel backends. Defaults to CPU count.
        progress_callback : callable, optional
            A function ``f(completed: int, total: int)`` counted in triples.

        Returns
        -------
        SimulationResult
            Rows in spot → vol → maturity → strike order, the central
            distribution and the 27 detailed samples.

        Raises
        ------
        InvalidParameterError
            If the inputs or execution options are invalid. Raised before any
            simulation work starts.
        """
        if not isinstance(params, SimulationParameters):
            params = SimulationParameters.from_mapping(params)
        backend = backend or self.backend
        self._validate_run_params(backend, n_workers)

        grid = ScenarioGrid.from_parameters(params)
        tasks = make_tasks(grid.triples(), self.seed_seq)

        t0 = time.time()
        outcomes, resolved, workers = self._execute_with_backend(
            backend, params, grid, tasks, n_workers, progress_callback
        )
        exec_time = time.time() - t0
        logger.info("Priced %d rows in %.2f seconds", params.n_rows, exec_time)

        meta = {
            "simulation_name": self.name,
            "timestamp": time.time(),
            "backend": resolved,
            "n_workers": workers,
            "seed_entropy": self.seed_seq.entropy if self.seed_seq else None,
        }
        return self._create_result(params, grid, outcomes, exec_time, meta)

    def _resolve_backend_type(self, n_scenarios: int, n_paths: int, n_workers: int) -> str:
        """
        Resolve ``"auto"`` to a concrete backend.

        Small grids (fewer than ``_PARALLEL_THRESHOLD`` draws) or a single
        worker run sequentially; otherwise threads on POSIX and processes on
        Windows.
        """
        if n_workers <= 1 or n_scenarios * n_paths < self._PARALLEL_THRESHOLD:
            return "sequential"
        if is_windows_platform():
            logger.info("Backend 'auto' resolved to 'process' on Windows platform.")
            return "process"
        return "thread"

    def _create_backend(
        self, backend: str, n_workers: int
    ) -> SequentialBackend | ThreadBackend | ProcessBackend:
        """Instantiate the execution backend for a resolved backend name."""
        if backend == "sequential":
            return SequentialBackend()
        if backend == "thread":
            return ThreadBackend(n_workers=n_workers)
        return ProcessBackend(n_workers=n_workers)

    def _execute_with_backend(
        self,
        backend: str,
        params: SimulationParameters,
        grid: ScenarioGrid,
        tasks: list,
        n_workers: int | None,
        progress_callback: Callable[[int, int], None] | None,
    ) -> tuple[list[ScenarioOutcome], str, int]:
        """Resolve the backend, log the plan and run every task."""
        if n_workers is None:
            n_workers = mp.cpu_count()  # pragma: no cover
        if backend == "auto":
            backend = self._resolve_backend_type(len(tasks), params.n_paths, n_workers)
        if backend == "sequential":
            n_workers = 1
            logger.info(
                "Simulating %d scenarios x %d paths sequentially...", len(tasks), params.n_paths
            )
        else:
            logger.info(
                "Simulating %d scenarios x %d paths using %s backend with %d workers...",
                len(tasks), params.n_paths, backend, n_workers,
            )
        backend_instance = self._create_backend(backend, n_workers)
        outcomes = backend_instance.run(self, params, grid, tasks, progress_callback)
        return outcomes, backend, n_workers

    @staticmethod
    def _create_result(
        params: SimulationParameters,
        grid: ScenarioGrid,
        outcomes: list[ScenarioOutcome],
        execution_time: float,
        metadata: dict[str, Any],
    ) -> SimulationResult:
        r"""
        Assemble a :class:`SimulationResult` from outcomes in run order.

        Notes
        -----
        The (2, 2, 0) sample becomes the central distribution; samples whose
        triple maps to a detailed column are placed in that slot. Rows are
        emitted per outcome and per strike, which preserves the
        spot → vol → maturity → strike order.
        """
        if len(outcomes) != len(grid):
            raise RuntimeError(f"expected {len(grid)} scenario outcomes, got {len(outcomes)}")

        rows: list[ScenarioRow] = []
        detailed: list[Optional[np.ndarray]] = [None] * DETAILED_COLUMN_COUNT
        central: Optional[np.ndarray] = None

        for expected_pos, out in enumerate(outcomes):
            if out.position != expected_pos:
                raise RuntimeError(f"outcome {out.position} found at position {expected_pos}")
            triple = (out.spot_index, out.vol_index, out.maturity_index)
            if out.terminal_prices is not None:
                # samples coming back from a process pool are unpickled writable
                out.terminal_prices.setflags(write=False)
                if triple == _CENTRAL_TRIPLE:
                    central = out.terminal_prices
                column = detailed_column_index(*triple)
                if column is not None:
                    detailed[column] = out.terminal_prices

            spot, vol, maturity = grid.values(*triple)
            for k, (strike, val) in enumerate(zip(params.strikes, out.valuations)):
                rows.append(
                    ScenarioRow(
                        spot=spot,
                        vol=vol,
                        maturity=maturity,
                        strike=strike,
                        price=val.price,
                        std_error=val.std_error,
                        key=ScenarioKey(out.spot_index, out.vol_index, out.maturity_index, k),
                    )
                )

        if central is None:
            raise RuntimeError("central scenario was not simulated")

        return SimulationResult(
            rows=tuple(rows),
            central_distribution=central,
            detailed_paths=tuple(detailed),
            spots=grid.spots,
            vols=grid.vols,
            parameters=params,
            execution_time=execution_time,
            metadata=metadata,
        )
