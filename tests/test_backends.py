import numpy as np
import pytest

from mcscenario.backends import (
    ProcessBackend,
    SequentialBackend,
    ThreadBackend,
    make_blocks,
    make_tasks,
    run_tasks,
)
from mcscenario.backends.parallel import _ChunkedBackend
from mcscenario.columns import detailed_column_index
from mcscenario.grid import ScenarioGrid


class TestMakeBlocks:
    @pytest.mark.parametrize(
        "n,size,expected",
        [
            (5, 2, [(0, 2), (2, 4), (4, 5)]),
            (4, 2, [(0, 2), (2, 4)]),
            (3, 10, [(0, 3)]),
            (0, 4, []),
        ],
    )
    def test_blocks(self, n, size, expected):
        assert make_blocks(n, size) == expected

    def test_invalid_block_size(self):
        with pytest.raises(ValueError, match="block_size"):
            make_blocks(10, 0)


class TestMakeTasks:
    """Seed sequence per scenario"""

    def test_positions_and_triples(self, small_grid):
        tasks = make_tasks(small_grid.triples(), np.random.SeedSequence(1))
        assert [t[0] for t in tasks] == list(range(75))
        assert [t[1] for t in tasks] == list(small_grid.triples())

    def test_children_are_deterministic(self, small_grid):
        a = make_tasks(small_grid.triples(), np.random.SeedSequence(7))
        b = make_tasks(small_grid.triples(), np.random.SeedSequence(7))
        for (_, _, sa), (_, _, sb) in zip(a, b):
            assert sa.generate_state(4).tolist() == sb.generate_state(4).tolist()

    def test_children_are_distinct(self, small_grid):
        tasks = make_tasks(small_grid.triples(), np.random.SeedSequence(7))
        states = {tuple(ss.generate_state(2).tolist()) for _, _, ss in tasks}
        assert len(states) == len(tasks)

    def test_unseeded(self, small_grid):
        tasks = make_tasks(small_grid.triples(), None)
        assert len(tasks) == 75
        assert all(isinstance(ss, np.random.SeedSequence) for _, _, ss in tasks)


class TestBackends:
    """Backends return outcomes in task order"""

    @pytest.fixture
    def tasks(self, small_grid):
        return make_tasks(small_grid.triples(), np.random.SeedSequence(3))

    def test_sequential(self, simulation, small_params, small_grid, tasks):
        progress = []
        out = SequentialBackend().run(
            simulation, small_params, small_grid, tasks, lambda d, t: progress.append((d, t))
        )
        assert [o.position for o in out] == list(range(75))
        assert progress[0] == (1, 75)
        assert progress[-1] == (75, 75)
        assert len(progress) == 75

    @pytest.mark.parametrize("n_workers", [1, 2, 8])
    def test_thread_order_and_values(self, simulation, small_params, small_grid, tasks, n_workers):
        expected = run_tasks(simulation, small_params, small_grid, tasks)
        out = ThreadBackend(n_workers=n_workers).run(simulation, small_params, small_grid, tasks, None)
        assert [o.position for o in out] == list(range(75))
        for a, b in zip(expected, out):
            assert (a.spot_index, a.vol_index, a.maturity_index) == (b.spot_index, b.vol_index, b.maturity_index)
            if a.terminal_prices is None:
                assert b.terminal_prices is None
            else:
                np.testing.assert_array_equal(a.terminal_prices, b.terminal_prices)
            assert a.valuations == b.valuations

    def test_outcome_valuations_per_strike(self, simulation, small_params, small_grid, tasks):
        out = SequentialBackend().run(simulation, small_params, small_grid, tasks[:1], None)
        assert len(out[0].valuations) == len(small_params.strikes)

    def test_only_retained_triples_keep_samples(self, simulation, small_params, small_grid, tasks):
        out = SequentialBackend().run(simulation, small_params, small_grid, tasks, None)
        kept = [o for o in out if o.terminal_prices is not None]
        assert len(kept) == 27
        for o in out:
            triple = (o.spot_index, o.vol_index, o.maturity_index)
            mapped = detailed_column_index(*triple) is not None
            assert (o.terminal_prices is not None) == mapped
        for o in kept:
            assert o.terminal_prices.shape == (small_params.n_paths,)
            assert not o.terminal_prices.flags.writeable

    def test_samples_dropped_beyond_third_maturity(self, simulation, small_params):
        params = small_params.with_overrides(maturities=(0.5, 1.0, 2.0, 3.0, 4.0), n_paths=100)
        grid = ScenarioGrid.from_parameters(params)
        tasks = make_tasks(grid.triples(), np.random.SeedSequence(5))
        out = ThreadBackend(n_workers=2).run(simulation, params, grid, tasks, None)
        assert len(out) == 125
        assert sum(o.terminal_prices is not None for o in out) == 27
        assert all(o.terminal_prices is None for o in out if o.maturity_index >= 3)

    @pytest.mark.parametrize("cls", [ThreadBackend, ProcessBackend])
    def test_invalid_workers(self, cls):
        with pytest.raises(ValueError, match="n_workers"):
            cls(n_workers=0)
        with pytest.raises(ValueError, match="chunks_per_worker"):
            cls(n_workers=2, chunks_per_worker=0)

    def test_block_preparation(self):
        backend = ThreadBackend(n_workers=4, chunks_per_worker=2)
        blocks = backend._prepare_blocks(75)
        assert blocks[0] == (0, 9)
        assert blocks[-1][1] == 75
        assert ThreadBackend(n_workers=100)._prepare_blocks(3) == [(0, 1), (1, 2), (2, 3)]

    def test_store_rejects_short_chunk(self):
        slots = [None] * 4
        with pytest.raises(RuntimeError, match="worker returned 1 outcomes"):
            _ChunkedBackend._store(slots, (0, 2), ["x"])
