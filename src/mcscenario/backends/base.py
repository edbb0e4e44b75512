r"""
Base classes and utilities for execution backends.

This module provides:

Protocol
    :class:`ExecutionBackend` — Interface for scenario execution strategies

Types
    :data:`ScenarioTask` — One unit of work: position, grid indices and seed

Functions
    :func:`make_blocks` — Chunking helper for parallel work distribution
    :func:`make_tasks` — Pair every grid triple with its own seed sequence
    :func:`worker_run_chunk` — Top-level worker for process-based parallelism

Helpers
    :func:`is_windows_platform` — Platform detection for backend selection
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Callable, Iterable, Protocol

import numpy as np

if TYPE_CHECKING:
    from ..grid import ScenarioGrid
    from ..parameters import SimulationParameters
    from ..simulation import ScenarioOutcome, ScenarioSimulation

__all__ = [
    "ExecutionBackend",
    "ScenarioTask",
    "make_blocks",
    "make_tasks",
    "run_tasks",
    "worker_run_chunk",
    "is_windows_platform",
]

# (position in run order, (spot_index, vol_index, maturity_index), seed)
ScenarioTask = tuple[int, tuple[int, int, int], np.random.SeedSequence]


def is_windows_platform() -> bool:
    """Return True when running on a Windows platform."""
    return sys.platform.startswith("win") or (sys.platform == "cli")


def make_blocks(n: int, block_size: int = 10_000) -> list[tuple[int, int]]:
    r"""
    Partition an integer range :math:`[0, n)` into half-open blocks :math:`(i, j)`.

    Parameters
    ----------
    n : int
        Total number of items.
    block_size : int, default: 10_000
        Target block length.

    Returns
    -------
    list of tuple[int, int]
        List of ``(i, j)`` index pairs covering ``[0, n)``.

    Examples
    --------
    >>> make_blocks(5, block_size=2)
    [(0, 2), (2, 4), (4, 5)]
    """
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    blocks = []
    i = 0
    while i < n:
        j = min(i + block_size, n)
        blocks.append((i, j))
        i = j
    return blocks


def make_tasks(
    triples: Iterable[tuple[int, int, int]],
    seed_seq: np.random.SeedSequence | None,
) -> list[ScenarioTask]:
    r"""
    Attach an independent seed sequence to every grid triple.

    Parameters
    ----------
    triples : iterable of tuple[int, int, int]
        ``(spot_index, vol_index, maturity_index)`` in run order.
    seed_seq : SeedSequence or None
        Parent sequence; children come from :meth:`numpy.random.SeedSequence.spawn`.
        ``None`` draws fresh OS entropy for every triple.

    Returns
    -------
    list of ScenarioTask

    Notes
    -----
    Child ``k`` always belongs to the ``k``-th triple, so a seeded run yields
    the same samples whichever backend executes it.
    """
    triples = list(triples)
    if seed_seq is not None:
        children = seed_seq.spawn(len(triples))
    else:
        children = [np.random.SeedSequence() for _ in triples]
    return [(pos, triple, ss) for pos, (triple, ss) in enumerate(zip(triples, children))]


def run_tasks(
    sim: "ScenarioSimulation",
    params: "SimulationParameters",
    grid: "ScenarioGrid",
    tasks: list[ScenarioTask],
) -> list["ScenarioOutcome"]:
    """Simulate and value each task with a Philox stream built from its own seed."""
    out = []
    for pos, (i, j, t), ss in tasks:
        rng = np.random.Generator(np.random.Philox(ss))
        out.append(sim.simulate_scenario(params, grid, i, j, t, rng, position=pos))
    return out


def worker_run_chunk(
    sim: "ScenarioSimulation",
    params: "SimulationParameters",
    grid: "ScenarioGrid",
    tasks: list[ScenarioTask],
) -> list["ScenarioOutcome"]:
    r"""
    Execute a batch of scenarios in a **separate worker process**.

    Parameters
    ----------
    sim : ScenarioSimulation
        Simulation instance; must be pickleable.
    params : SimulationParameters
        Inputs of the run.
    grid : ScenarioGrid
        Axes and maturities of the run.
    tasks : list of ScenarioTask
        Scenarios to compute, each carrying its own seed sequence.

    Returns
    -------
    list of ScenarioOutcome
        One outcome per task, in task order.
    """
    return run_tasks(sim, params, grid, tasks)


class ExecutionBackend(Protocol):
    r"""
    Protocol defining the interface for execution backends.

    Backends compute a list of scenario tasks and return their outcomes in
    task order, handling sequential vs parallel execution and progress
    reporting.
    """

    def run(
        self,
        sim: "ScenarioSimulation",
        params: "SimulationParameters",
        grid: "ScenarioGrid",
        tasks: list[ScenarioTask],
        progress_callback: Callable[[int, int], None] | None,
    ) -> list["ScenarioOutcome"]:
        r"""
        Run every task and return the outcomes.

        Parameters
        ----------
        sim : ScenarioSimulation
            The simulation instance to run.
        params : SimulationParameters
            Inputs of the run.
        grid : ScenarioGrid
            Axes and maturities of the run.
        tasks : list of ScenarioTask
            Work items from :func:`make_tasks`.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` counted in scenarios.

        Returns
        -------
        list of ScenarioOutcome
            Outcomes ordered like ``tasks``.
        """
