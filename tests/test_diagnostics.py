import numpy as np
import pytest

from mcscenario.diagnostics import (
    HistogramBin,
    black_scholes_call,
    distribution_histogram,
    expected_terminal_mean,
    lognormal_median,
    summarize_distribution,
)
from mcscenario.stats_engine import build_default_engine


class TestDistributionHistogram:
    """Equal-width binning of terminal prices"""

    def test_counts_and_frequencies(self, rng):
        sample = rng.lognormal(10.0, 0.3, 5000)
        bins = distribution_histogram(sample, 50)
        assert len(bins) == 50
        assert sum(b.count for b in bins) == sample.size
        assert sum(b.frequency for b in bins) == pytest.approx(1.0)
        assert bins[0].start == sample.min()
        assert bins[-1].end == pytest.approx(sample.max())

    def test_bins_are_contiguous(self, rng):
        bins = distribution_histogram(rng.normal(size=1000), 20)
        for a, b in zip(bins, bins[1:]):
            assert a.end == b.start

    def test_small_example(self):
        bins = distribution_histogram(np.array([0.0, 1.0, 2.0, 3.0]), 2)
        assert [(b.start, b.end, b.count) for b in bins] == [(0.0, 1.5, 2), (1.5, 3.0, 2)]
        assert bins[0].mid == 0.75

    def test_constant_sample_single_bin(self):
        bins = distribution_histogram(np.full(100, 50_000.0), 50)
        assert bins == [HistogramBin(50_000.0, 50_000.0, 100, 1.0)]

    def test_empty_sample(self):
        assert distribution_histogram(np.array([]), 10) == []

    @pytest.mark.parametrize("bad", [0, -3])
    def test_invalid_bin_count(self, bad):
        with pytest.raises(ValueError, match="bin_count"):
            distribution_histogram(np.array([1.0, 2.0]), bad)

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError, match="non-finite"):
            distribution_histogram(np.array([1.0, np.nan]), 5)


class TestSummarizeDistribution:
    def test_keys(self, sample_data):
        summary = summarize_distribution(sample_data)
        assert {"mean", "std", "percentiles", "ci_mean", "skew", "kurtosis", "n", "min", "max"} <= set(summary)
        assert summary["n"] == sample_data.size
        assert summary["min"] == sample_data.min()
        assert summary["ci_mean"]["confidence"] == 0.95

    def test_custom_engine_and_confidence(self, sample_data):
        summary = summarize_distribution(sample_data, 0.9, build_default_engine(include_shape=False))
        assert "skew" not in summary
        assert summary["ci_mean"]["confidence"] == 0.9

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            summarize_distribution(np.array([]))


class TestClosedForms:
    """Reference values for checking simulated output"""

    def test_black_scholes_reference(self):
        assert black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.0, 0.2) == pytest.approx(10.4506, abs=1e-4)

    def test_black_scholes_with_dividend_is_cheaper(self):
        assert black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.02, 0.2) < black_scholes_call(
            100.0, 100.0, 1.0, 0.05, 0.0, 0.2
        )

    def test_black_scholes_degenerate(self):
        assert black_scholes_call(110.0, 100.0, 0.0, 0.05, 0.0, 0.2) == pytest.approx(10.0)
        assert black_scholes_call(90.0, 100.0, 0.0, 0.05, 0.0, 0.2) == 0.0
        assert black_scholes_call(100.0, 100.0, 1.0, 0.05, 0.0, 0.0) == pytest.approx(100.0 - 100.0 * np.exp(-0.05))

    def test_terminal_moments(self):
        assert expected_terminal_mean(50_000.0, 4.0, 0.03, 0.0) == pytest.approx(50_000.0 * np.exp(0.12))
        assert lognormal_median(50_000.0, 0.2, 4.0, 0.03, 0.0) == pytest.approx(50_000.0 * np.exp(0.04))
