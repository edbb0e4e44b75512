import numpy as np
import pytest

from mcscenario.stats_engine import (
    CIMethod,
    FnMetric,
    NanPolicy,
    StatsContext,
    StatsEngine,
    _clean,
    _ensure_ctx,
    ci_mean,
    kurtosis,
    mean,
    percentiles,
    skew,
    std,
)
from mcscenario.utils import autocrit, t_crit, z_crit


def test_stats_context_overrides_and_eff_n():
    base = StatsContext(n=20, nan_policy="omit")
    ctx = base.with_overrides(confidence=0.90)
    assert ctx.confidence == 0.90
    assert ctx.nan_policy is NanPolicy.omit
    assert ctx.eff_n(observed_len=100, finite_count=42) == 42

    # Fall back to declared n when nan_policy != "omit"
    ctx2 = ctx.with_overrides(nan_policy="propagate")
    assert ctx2.eff_n(observed_len=11, finite_count=3) == ctx2.n
    assert StatsContext(n=0).eff_n(observed_len=11) == 11


def test_stats_context_coerces_enums():
    ctx = StatsContext(n=1, ci_method="t")
    assert ctx.ci_method is CIMethod.t
    with pytest.raises(ValueError):
        StatsContext(n=1, ci_method="bootstrap")


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"confidence": 1.2}, "confidence"),
        ({"confidence": 0.0}, "confidence"),
        ({"percentiles": (-5, 50)}, "percentiles"),
        ({"percentiles": (50, 101)}, "percentiles"),
        ({"ddof": -1}, "ddof"),
    ],
)
def test_stats_context_validation_errors(kwargs, message):
    with pytest.raises(ValueError, match=message):
        StatsContext(n=1, **kwargs)


def test_stats_engine_available_and_select_branch():
    metrics = [FnMetric("mean", mean), FnMetric("std", std), FnMetric("noop", lambda x, ctx: 0)]
    engine = StatsEngine(metrics)
    assert engine.available() == ("mean", "std", "noop")

    res = engine.compute(np.array([1.0, 2.0, 3.0]), select=("std",), n=3, confidence=0.95)
    assert set(res) == {"std"}


def test_stats_engine_skips_empty_metrics():
    metrics = [FnMetric("mean", mean), FnMetric("empty", lambda x, ctx: {})]
    result = StatsEngine(metrics).compute(np.array([1.0, 2.0, 3.0]), StatsContext(n=3))
    assert result == {"mean": pytest.approx(2.0)}


def test_stats_engine_propagates_metric_errors():
    def boom(x, ctx):
        raise RuntimeError("boom")

    engine = StatsEngine([FnMetric("mean", mean), FnMetric("boom", boom)])
    with pytest.raises(RuntimeError, match="boom"):
        engine.compute(np.array([1.0, 2.0, 3.0]))


def test_ensure_ctx_handles_dict():
    arr = np.array([1.0, 2.0])
    ctx_from_dict = _ensure_ctx({"confidence": 0.9}, arr)
    assert isinstance(ctx_from_dict, StatsContext)
    assert ctx_from_dict.n == arr.size
    assert ctx_from_dict.confidence == 0.9

    existing = StatsContext(n=7)
    assert _ensure_ctx(existing, arr) is existing
    assert _ensure_ctx(None, arr).n == 2


def test_ensure_ctx_rejects_invalid_object():
    with pytest.raises(TypeError):
        _ensure_ctx(42, np.array([1.0, 2.0]))


def test_clean_respects_nan_policy():
    data = np.array([1.0, np.nan, 3.0, np.inf])
    arr, finite = _clean(data, StatsContext(n=4, nan_policy="omit"))
    assert arr.tolist() == [1.0, 3.0]
    assert finite == 2

    arr, finite = _clean(data, StatsContext(n=4))
    assert arr.size == 4
    assert finite == 2


def test_omit_policy_ignores_nans():
    data = np.array([1.0, np.nan, 3.0])
    ctx = StatsContext(n=3, nan_policy="omit")
    assert mean(data, ctx) == 2.0
    assert std(data, ctx) == pytest.approx(np.sqrt(2.0))
    assert np.isnan(mean(data))


def test_percentiles_with_empty_input_returns_nan():
    ctx = StatsContext(n=0, percentiles=(10, 90), nan_policy="omit")
    res = percentiles(np.array([]), ctx)
    assert set(res.keys()) == {10, 90}
    assert all(np.isnan(v) for v in res.values())


def test_small_samples():
    assert np.isnan(mean(np.array([])))
    assert std(np.array([5.0])) == 0.0
    assert skew(np.array([1.0, 2.0])) == 0.0
    assert kurtosis(np.array([1.0, 2.0, 3.0])) == 0.0


def test_ci_mean_handles_edge_cases():
    ctx_empty = StatsContext(n=0)
    empty_res = ci_mean(np.array([]), ctx_empty)
    assert np.isnan(empty_res["low"])
    assert empty_res["method"] == ctx_empty.ci_method.value

    small_res = ci_mean(np.array([1.0]), StatsContext(n=1))
    assert np.isnan(small_res["low"])

    zero_res = ci_mean(np.full(4, 2.0), StatsContext(n=4))
    assert zero_res["low"] == pytest.approx(2.0)
    assert zero_res["high"] == pytest.approx(2.0)
    assert zero_res["se"] == 0.0
    assert zero_res["crit"] >= 0


class TestCriticalValues:
    def test_z_crit(self):
        assert z_crit(0.95) == pytest.approx(1.959964, rel=1e-5)
        assert z_crit(0.99) > z_crit(0.95)

    def test_t_crit_exceeds_z(self):
        assert t_crit(0.95, 4) > z_crit(0.95)
        assert t_crit(0.95, 10_000) == pytest.approx(z_crit(0.95), rel=1e-3)

    @pytest.mark.parametrize("bad", [0.0, 1.0, -0.5, 1.5])
    def test_invalid_confidence(self, bad):
        with pytest.raises(ValueError, match="confidence"):
            z_crit(bad)
        with pytest.raises(ValueError, match="confidence"):
            t_crit(bad, 5)

    def test_invalid_df(self):
        with pytest.raises(ValueError, match="df"):
            t_crit(0.95, 0)

    def test_autocrit(self):
        assert autocrit(0.95, 10)[1] == "t"
        assert autocrit(0.95, 30)[1] == "z"
        assert autocrit(0.95, 10, "z")[1] == "z"
        assert autocrit(0.95, 1000, CIMethod.t)[1] == "t"
        with pytest.raises(ValueError, match="method"):
            autocrit(0.95, 10, "bootstrap")
