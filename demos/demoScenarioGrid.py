"""
Scenario Grid Pricing Demo
==========================

Prices a European call over the 5 x 5 spot/vol grid for every configured
maturity and strike, then plots what the pricing screen shows: the central
terminal-price distribution, a heat map of prices per maturity/strike and the
27 detailed columns.

Features:
    - Full grid run with the stock pricing-screen inputs
    - Histogram of the central distribution with GBM mean and median
    - Price heat maps over spot x vol
    - Detailed column table against Black-Scholes

Example:
    python demoScenarioGrid.py
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from pathlib import Path

import matplotlib

matplotlib.use('Agg')  # Use non-interactive backend for headless environments
import matplotlib.pyplot as plt

from mcscenario import DEFAULT_PARAMETERS, ScenarioSimulation, SimulationResult
from mcscenario.diagnostics import (
    black_scholes_call,
    distribution_histogram,
    expected_terminal_mean,
    lognormal_median,
    summarize_distribution,
)

# =============================================================================
# Configuration Constants
# =============================================================================

OUTPUT_DIR = Path("img/scenario_grid")
DPI = 150
FIGURE_SIZE_LARGE = (10, 6)
BIN_COUNT = 50
GRID_ALPHA = 0.3

SEED = 2024
N_PATHS = 50_000

COLOR_HISTOGRAM = 'steelblue'
COLOR_MEAN = 'red'
COLOR_MEDIAN = 'orange'


def progress(completed: int, total: int):
    step = max(1, total // 10)
    if completed % step == 0 or completed == total:
        print(f"Progress: {completed}/{total} ({100 * completed / total:.0f}%)")


def save_figure(fig: plt.Figure, filename: str) -> None:
    """Save a matplotlib figure to the output directory."""
    filepath = OUTPUT_DIR / filename
    fig.savefig(filepath, dpi=DPI, bbox_inches='tight', pad_inches=0.5)
    print(f"Saved plot to {filepath}")


# =============================================================================
# Plotting Functions
# =============================================================================

def plot_central_distribution(result: SimulationResult) -> None:
    """
    Histogram of the central terminal prices.

    Parameters
    ----------
    result : SimulationResult
        Finished run; its pivot spot, pivot vol and first maturity define the
        reference lines.
    """
    p = result.parameters
    bins = distribution_histogram(result.central_distribution, BIN_COUNT)
    fig, ax = plt.subplots(figsize=FIGURE_SIZE_LARGE)
    ax.bar(
        [b.start for b in bins],
        [b.frequency for b in bins],
        width=[b.end - b.start for b in bins],
        align='edge',
        alpha=0.7,
        color=COLOR_HISTOGRAM,
        edgecolor='black',
    )
    T = p.maturities[0]
    mean = expected_terminal_mean(p.s0, T, p.rate, p.dividend)
    median = lognormal_median(p.s0, p.vol_decimal, T, p.rate, p.dividend)
    ax.axvline(mean, color=COLOR_MEAN, linestyle='--', linewidth=2, label=f'GBM mean = {mean:,.0f}')
    ax.axvline(median, color=COLOR_MEDIAN, linestyle=':', linewidth=2, label=f'GBM median = {median:,.0f}')
    ax.set_xlabel('Terminal price')
    ax.set_ylabel('Frequency')
    ax.set_title(f'Central distribution (S0={p.s0:,.0f}, vol={p.vol:g}%, T={T:g})')
    ax.grid(alpha=GRID_ALPHA)
    ax.legend()
    save_figure(fig, "central_distribution.png")
    plt.close(fig)


def plot_price_surfaces(result: SimulationResult) -> None:
    """One heat map per (maturity, strike) over the spot x vol grid."""
    p = result.parameters
    n_mat, n_strikes = len(p.maturities), len(p.strikes)
    fig, axes = plt.subplots(n_strikes, n_mat, figsize=(4 * n_mat, 3.5 * n_strikes), squeeze=False)
    for t, maturity in enumerate(p.maturities):
        for k, strike in enumerate(p.strikes):
            ax = axes[k, t]
            surface = result.price_surface(t, k)
            im = ax.imshow(surface, origin='lower', cmap='viridis', aspect='auto')
            ax.set_xticks(range(5), [f'{v:.0%}' for v in result.vols])
            ax.set_yticks(range(5), [f'{s:,.0f}' for s in result.spots])
            ax.set_xlabel('Vol')
            ax.set_ylabel('Spot')
            ax.set_title(f'T={maturity:g}, K={strike:,.0f}')
            fig.colorbar(im, ax=ax)
    fig.suptitle('Call price over spot x vol', fontsize=14, fontweight='bold')
    fig.tight_layout()
    save_figure(fig, "price_surfaces.png")
    plt.close(fig)


def print_detailed_table(result: SimulationResult) -> None:
    """Print the detailed columns for the first strike next to Black-Scholes."""
    p = result.parameters
    matrix = result.detailed_price_matrix()
    print(f"\nDetailed columns, K={p.strikes[0]:,.0f}")
    print(f"{'col':>4} {'label':>8} {'spot':>12} {'vol':>6} {'T':>5} {'MC':>12} {'BS':>12}")
    for h in result.detailed_headers():
        if h["spot"] is None:
            continue
        price = matrix[0, h["column"]]
        bs = black_scholes_call(h["spot"], p.strikes[0], h["maturity"], p.rate, p.dividend, h["vol"])
        print(
            f"{h['column']:>4} {h['label']:>8} {h['spot']:>12,.2f} {h['vol']:>6.1%} "
            f"{h['maturity']:>5g} {price:>12,.2f} {bs:>12,.2f}"
        )


# =============================================================================
# Main Execution
# =============================================================================

def main() -> None:
    """Run the grid with the stock inputs and write the plots."""
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    sim = ScenarioSimulation(name="Scenario Grid Demo")
    sim.set_seed(SEED)

    params = DEFAULT_PARAMETERS.with_overrides(n_paths=N_PATHS)
    result = sim.run(params, progress_callback=progress)
    print(result.result_to_string())

    summary = summarize_distribution(result.central_distribution)
    ci = summary["ci_mean"]
    print(
        f"\nCentral distribution: mean={summary['mean']:,.2f} "
        f"[{ci['low']:,.2f}, {ci['high']:,.2f}], median={summary['percentiles'][50]:,.2f}"
    )
    print_detailed_table(result)

    plot_central_distribution(result)
    plot_price_surfaces(result)
    print(f"\nPlots saved to: {OUTPUT_DIR}\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    try:
        mp.set_start_method("spawn", force=True)
    except RuntimeError:
        pass  # Already set

    main()
