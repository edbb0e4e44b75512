r"""
Sequential execution backend for scenario-grid runs.

This module provides a single-threaded execution strategy that computes
scenarios one after another with optional progress reporting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from .base import ScenarioTask, run_tasks

if TYPE_CHECKING:
    from ..grid import ScenarioGrid
    from ..parameters import SimulationParameters
    from ..simulation import ScenarioOutcome, ScenarioSimulation

__all__ = ["SequentialBackend"]


class SequentialBackend:
    r"""
    Sequential (single-threaded) execution backend.

    Computes scenarios one at a time on the calling thread. Suitable for
    small grids or debugging.

    Examples
    --------
    >>> backend = SequentialBackend()
    >>> outcomes = backend.run(sim, params, grid, tasks, progress_callback=None)  # doctest: +SKIP
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
        Run scenarios sequentially on a single thread.

        Returns
        -------
        list of ScenarioOutcome
            Outcomes in task order.
        """
        total = len(tasks)
        outcomes = []
        for k, task in enumerate(tasks):
            outcomes.extend(run_tasks(sim, params, grid, [task]))
            if progress_callback:
                progress_callback(k + 1, total)
        return outcomes
