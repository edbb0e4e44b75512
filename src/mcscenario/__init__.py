"""mcscenario package public API."""

from .columns import DETAILED_COLUMN_COUNT, DETAILED_COLUMNS, DetailedColumn, detailed_column_index
from .core import ScenarioKey, ScenarioRow, SimulationResult
from .diagnostics import (
    HistogramBin,
    black_scholes_call,
    distribution_histogram,
    summarize_distribution,
)
from .grid import ScenarioGrid, arithmetic_axis, geometric_axis
from .parameters import DEFAULT_PARAMETERS, MAX_N_PATHS, InvalidParameterError, SimulationParameters
from .paths import simulate_terminal_prices
from .payoff import CallValuation, value_call
from .sampler import GaussianSampler, box_muller
from .simulation import ScenarioSimulation
from .stats_engine import DEFAULT_ENGINE, FnMetric, StatsContext, StatsEngine
from .utils import autocrit, t_crit, z_crit

__all__ = [
    "SimulationParameters",
    "InvalidParameterError",
    "DEFAULT_PARAMETERS",
    "MAX_N_PATHS",
    "GaussianSampler",
    "box_muller",
    "ScenarioGrid",
    "geometric_axis",
    "arithmetic_axis",
    "simulate_terminal_prices",
    "CallValuation",
    "value_call",
    "DetailedColumn",
    "DETAILED_COLUMNS",
    "DETAILED_COLUMN_COUNT",
    "detailed_column_index",
    "ScenarioKey",
    "ScenarioRow",
    "SimulationResult",
    "ScenarioSimulation",
    "HistogramBin",
    "summarize_distribution",
    "distribution_histogram",
    "black_scholes_call",
    "StatsEngine",
    "StatsContext",
    "FnMetric",
    "DEFAULT_ENGINE",
    "z_crit",
    "t_crit",
    "autocrit",
]

__version__ = "0.1.0"
