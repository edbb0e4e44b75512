import multiprocessing as mp

import numpy as np
import pytest

from mcscenario.grid import ScenarioGrid
from mcscenario.parameters import SimulationParameters
from mcscenario.simulation import ScenarioSimulation


class CountingSimulation(ScenarioSimulation):
    """Simulation that records how many scenarios it was asked to compute."""
    def __init__(self):
        super().__init__("CountingSim")
        self.calls = 0

    def simulate_scenario(self, *args, **kwargs):
        self.calls += 1
        return super().simulate_scenario(*args, **kwargs)


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def small_params():
    """Three maturities, two strikes, few paths: a full-shape but cheap run."""
    return SimulationParameters(
        s0=100.0,
        s0_step=5.0,
        vol=20.0,
        vol_step=2.0,
        r=3.0,
        q=1.0,
        n_paths=2_000,
        maturities=(0.5, 1.0, 2.0),
        strikes=(95.0, 105.0),
    )


@pytest.fixture
def example_params():
    """The reference configuration with 10k paths."""
    return SimulationParameters(
        s0=50_000.0,
        s0_step=2.5,
        vol=20.0,
        vol_step=1.0,
        r=3.0,
        q=0.0,
        n_paths=10_000,
        maturities=(4.0, 5.0, 6.0),
        strikes=(50_000.0, 52_000.0),
    )


@pytest.fixture
def small_grid(small_params):
    return ScenarioGrid.from_parameters(small_params)


@pytest.fixture
def simulation():
    """Seeded simulation instance."""
    sim = ScenarioSimulation(name="TestGrid")
    sim.set_seed(42)
    return sim


@pytest.fixture
def counting_simulation():
    return CountingSimulation()


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def sample_data():
    """Fixture providing sample data for testing"""
    return np.random.default_rng(42).normal(5.0, 2.0, 1000)
