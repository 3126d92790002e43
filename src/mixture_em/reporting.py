"""
Reporting for EM fit results.

Textual summaries of a FitResult and matplotlib figures: log-likelihood
history, histogram of the sample by assigned component, and an animated
overlay of the fitted densities for every EM iteration.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Set backend (no GUI required)
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, PillowWriter
from typing import Optional

from .em_method import FitResult
from .mixture_utils import EPSILON, MixtureParams, mixture_density_from_params

# Output formatting
SECTION_WIDTH = 70
COL_NAME_WIDTH = 14
COL_NUM_WIDTH = 16

# ============================================================
# 1) Output formatting functions
# ============================================================

def print_section_header(title: str, width: int = SECTION_WIDTH) -> None:
    """Print a section header with separator lines."""
    print("\n" + "="*width)
    print(title)
    print("="*width)


def print_subsection_header(title: str, width: int = SECTION_WIDTH) -> None:
    """Print a subsection header with separator lines."""
    print("\n" + "-"*width)
    print(title)
    print("-"*width)


def _component_names(n_components: int):
    return [f"component_{k + 1}:" for k in range(n_components)]


def print_mixture_params(params: MixtureParams) -> None:
    """Print a table of mu, sigma and ratio, one row per component."""
    print(f"{'':<{COL_NAME_WIDTH}}{'mu':>{COL_NUM_WIDTH}}{'sigma':>{COL_NUM_WIDTH}}{'ratio':>{COL_NUM_WIDTH}}")
    for name, mu, sigma, ratio in zip(_component_names(params.n_components), params.mu, params.sigma, params.ratio):
        print(f"{name:<{COL_NAME_WIDTH}}{mu:>{COL_NUM_WIDTH}.6f}{sigma:>{COL_NUM_WIDTH}.6f}{ratio:>{COL_NUM_WIDTH}.6f}")


def print_em_results(ll: float, n_iter: int, max_iter: Optional[int] = None, converged: bool = True) -> None:
    """Print EM algorithm results."""
    print(f"Log-likelihood: {ll:.10f}")
    if max_iter is None:
        print(f"Iterations: {n_iter}")
    else:
        print(f"Iterations: {n_iter} / {max_iter}")
    print(f"Convergence: {'Yes' if converged else 'No (max iterations reached)'}")


def print_fit_result(result: FitResult) -> None:
    """Print the fitted parameters and the available result attributes."""
    print("* Parameters of Components:")
    print_mixture_params(result.final_params)
    print("attributes : final_params, log_likelihood, aic, bic, assignments, n_iterations")


def print_fit_summary(result: FitResult) -> None:
    """
    Print a summary of a fit: observations per component, parameters and
    model selection statistics.
    """
    print_section_header("EM FIT SUMMARY")

    print("* Numbers of Components:")
    for name, count in zip(_component_names(result.n_components), result.component_counts()):
        print(f"{name:<{COL_NAME_WIDTH}}{count:>{COL_NUM_WIDTH}d}")

    print("\n* Parameters of Components:")
    print_mixture_params(result.final_params)

    print_subsection_header("MODEL SELECTION")
    print(f"{'log_likelihood':<{COL_NAME_WIDTH}}{result.log_likelihood:>{COL_NUM_WIDTH}.6f}")
    print(f"{'AIC':<{COL_NAME_WIDTH}}{result.aic:>{COL_NUM_WIDTH}.6f}")
    print(f"{'BIC':<{COL_NAME_WIDTH}}{result.bic:>{COL_NUM_WIDTH}.6f}")
    print(f"{'iterations':<{COL_NAME_WIDTH}}{result.n_iterations:>{COL_NUM_WIDTH}d}")
    print(f"Convergence: {'Yes' if result.converged else 'No (max iterations reached)'}")


def print_plot_output(output_file: str) -> None:
    """Print plot output information."""
    print(f"Plot saved: {output_file}")

# ============================================================
# 2) Plotting functions
# ============================================================

def _histogram_bins(x: np.ndarray, binwidth: Optional[float]) -> np.ndarray:
    """Shared bin edges for all histograms of x."""
    if binwidth is None or binwidth <= 0:
        return np.histogram_bin_edges(x, bins='auto')
    edges = np.arange(x.min(), x.max() + binwidth, binwidth)
    if len(edges) < 2:
        return np.histogram_bin_edges(x, bins='auto')
    return edges


def plot_log_likelihood(result: FitResult, output_path: str) -> str:
    """
    Plot the log-likelihood against the iteration number.

    Returns:
    --------
    str
        Path of the saved file, {output_path}.png
    """
    history = result.log_likelihood_history
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(history["iteration"], history["log_likelihood"], 'b-', linewidth=1.5)
    ax.set_xlabel('iteration', fontsize=12)
    ax.set_ylabel('log likelihood', fontsize=12)
    ax.set_title('History of log likelihood', fontsize=12)
    ax.grid(True, alpha=0.3)

    output_file = f'{output_path}.png'
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_file


def plot_components(result: FitResult, output_path: str, binwidth: Optional[float] = None) -> str:
    """
    Plot overlaid histograms of the sample, one colour per assigned component.

    Returns:
    --------
    str
        Path of the saved file, {output_path}.png
    """
    x = result.x
    bins = _histogram_bins(x, binwidth)
    colors = plt.cm.tab10(np.linspace(0, 1, max(result.n_components, 1)))

    fig, ax = plt.subplots(figsize=(8, 5))
    for k in range(result.n_components):
        ax.hist(x[result.assignments == k], bins=bins, alpha=0.3, color=colors[k],
                label=f'component_{k + 1}')
    ax.set_xlabel('x', fontsize=12)
    ax.set_ylabel('count', fontsize=12)
    ax.set_title('Result of component estimation : EM-algorithm', fontsize=12)
    ax.legend(fontsize=10)

    output_file = f'{output_path}.png'
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_file


def plot_history(
    result: FitResult,
    output_path: str,
    binwidth: Optional[float] = 2.0,
    width: float = 5.0,
    height: float = 5.0,
    fps: int = 5,
    n_grid: int = 400,
) -> str:
    """
    Write an animated GIF with one frame per EM iteration.

    Each frame shows the density histogram of the sample, the mixture density
    for that iteration's parameters (solid) and each weighted component
    ratio_k N(x; μ_k, σ²_k) (dashed).

    Parameters:
    -----------
    result : FitResult
        Fit whose params_history is animated
    output_path : str
        Output file path without extension (will add .gif)
    binwidth : float, optional
        Histogram bin width (None: automatic)
    width, height : float
        Figure size in inches
    fps : int
        Frames per second of the GIF
    n_grid : int
        Number of points used to draw the densities

    Returns:
    --------
    str
        Path of the saved file, {output_path}.gif
    """
    x = result.x
    x_min, x_max = float(x.min()), float(x.max())
    span = max(x_max - x_min, EPSILON)
    y_max = 5.0 / span
    bins = _histogram_bins(x, binwidth)
    z = np.linspace(x_min - 0.05 * span, x_max + 0.05 * span, n_grid)
    n_iter = result.n_iterations

    fig, ax = plt.subplots(figsize=(width, height))

    def draw(i):
        record = result.params_history[i]
        density = mixture_density_from_params(z, record.params)
        ax.clear()
        ax.hist(x, bins=bins, density=True, alpha=0.5, color='gray')
        ax.plot(z, density.prob_density, color='blue')
        for k in range(record.params.n_components):
            ax.plot(z, record.params.ratio[k] * density.component_densities[:, k],
                    color='blue', linestyle='--')
        ax.set_ylim(0, y_max)
        ax.set_title(f'History of EM-algorithm, iteration : {i}/{n_iter}.')
        return ax.lines

    anim = FuncAnimation(fig, draw, frames=len(result.params_history), repeat=False)
    output_file = f'{output_path}.gif'
    anim.save(output_file, writer=PillowWriter(fps=fps))
    plt.close(fig)
    return output_file
