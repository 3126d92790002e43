"""
EM Method - Maximum-likelihood fitting of a univariate Gaussian mixture to a sample

This module implements the EM algorithm for a 1D Gaussian mixture with K
components, fitted to an observed sample x[0..N-1].

Main components:
1. EM fitting loop with full parameter and log-likelihood history
2. Hard component assignment and prediction for new points
3. AIC/BIC of the fitted model
4. Random sampling from a mixture and JSON configuration loading
"""

import json
import logging
import numbers
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
from scipy.special import logsumexp

from .mixture_utils import (
    MixtureParams,
    DimensionMismatchError,
    InvalidParameterError,
    DegenerateComponentError,
    EmptySampleError,
    validate_mixture_params,
    information_criteria,
    _log_weighted_densities,
    _log_likelihood,
)

logger = logging.getLogger(__name__)

# ============================================================
# Constants
# ============================================================

# Default values
DEFAULT_N_SAMPLES = 2000
DEFAULT_TRUE_MU = [0.0, 10.0]
DEFAULT_TRUE_SIGMA = [1.0, 1.0]
DEFAULT_TRUE_RATIO = [0.5, 0.5]
DEFAULT_SEED = 1
DEFAULT_INIT_MU = [-1.0, 11.0]
DEFAULT_INIT_SIGMA = [2.0, 2.0]
DEFAULT_INIT_RATIO = [0.5, 0.5]
DEFAULT_MAX_ITER = 500
DEFAULT_TOL = 1e-8
DEFAULT_OUTPUT_PATH = "mixture_em"
DEFAULT_BINWIDTH = None
DEFAULT_PLOT = True
DEFAULT_ANIMATE_HISTORY = False

# Row type of FitResult.log_likelihood_history
LL_HISTORY_DTYPE = np.dtype([("iteration", np.int64), ("log_likelihood", np.float64)])

# ============================================================
# 1) Result containers
# ============================================================

@dataclass(frozen=True)
class IterationRecord:
    """Parameters and log-likelihood after one EM iteration (0 = initial values)."""
    iteration: int
    params: MixtureParams
    log_likelihood: float


@dataclass(frozen=True)
class FitResult:
    """
    Result of fit_mixt_normal_em.

    Attributes:
    -----------
    final_params : MixtureParams
        Parameters after the last iteration (same values as params_history[-1])
    log_likelihood : float
        Log-likelihood at final_params
    aic, bic : float
        Information criteria computed from log_likelihood
    assignments : np.ndarray
        Most probable component (0-based) of each observation, shape (N,)
    n_iterations : int
        Number of EM iterations performed
    converged : bool
        False when the loop stopped because max_iter was reached
    params_history : tuple of IterationRecord
        One record per iteration, including iteration 0
    log_likelihood_history : np.ndarray
        Read-only structured array of LL_HISTORY_DTYPE, fields "iteration" (int)
        and "log_likelihood" (float), shape (n_iterations + 1,)
    x : np.ndarray
        The fitted sample, shape (N,)
    responsibilities : np.ndarray
        Responsibilities from the last E-step, shape (N, K)
    """
    final_params: MixtureParams
    log_likelihood: float
    aic: float
    bic: float
    assignments: np.ndarray
    n_iterations: int
    converged: bool
    params_history: Tuple[IterationRecord, ...] = field(repr=False)
    log_likelihood_history: np.ndarray = field(repr=False)
    x: np.ndarray = field(repr=False)
    responsibilities: np.ndarray = field(repr=False)

    @property
    def n_components(self) -> int:
        return self.final_params.n_components

    @property
    def sample_size(self) -> int:
        return len(self.x)

    def component_counts(self) -> np.ndarray:
        """Number of observations assigned to each component, shape (K,)."""
        return np.bincount(self.assignments, minlength=self.n_components)

# ============================================================
# 2) EM algorithm for a 1D Gaussian mixture
# ============================================================

def _is_count(value) -> bool:
    """True for an integer, or a finite float with an integral value."""
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return isinstance(value, numbers.Real) and bool(np.isfinite(value)) and float(value).is_integer()


def _validate_sample(x) -> np.ndarray:
    x = np.array(x, dtype=float)
    if x.ndim == 0:
        x = x.reshape(1)
    if x.ndim != 1:
        raise DimensionMismatchError(f"sample must be 1D, got shape {x.shape}")
    if x.size == 0:
        raise EmptySampleError("cannot fit a mixture to an empty sample")
    bad = np.flatnonzero(~np.isfinite(x))
    if bad.size:
        i = int(bad[0])
        raise InvalidParameterError(f"x[{i}] = {x[i]} is not finite", parameter="x", index=i)
    x.setflags(write=False)
    return x


def _e_step(x: np.ndarray, params: MixtureParams) -> np.ndarray:
    """
    Compute responsibilities gamma[i, k] = ratio_k N(x_i; μ_k, σ²_k) / f(x_i).

    Computed in log space for numerical stability; shape (N, K).
    """
    log_num = _log_weighted_densities(x, params)
    with np.errstate(divide="ignore", invalid="ignore"):
        log_den = logsumexp(log_num, axis=1, keepdims=True)
        return np.exp(log_num - log_den)


def _m_step(x: np.ndarray, gamma: np.ndarray, iteration: int) -> MixtureParams:
    """
    Closed-form maximum-likelihood estimates for the responsibilities gamma.

    All components are updated from the same responsibility matrix, and
    sigma uses the updated means.
    """
    sum_gamma = gamma.sum(axis=0)  # N_k = Σ_i gamma_ik, shape (K,)
    bad = np.flatnonzero(~(np.isfinite(sum_gamma) & (sum_gamma > 0)))
    if bad.size:
        k = int(bad[0])
        logger.warning(
            "Component %d has responsibility mass %r at iteration %d", k, sum_gamma[k], iteration
        )
        raise DegenerateComponentError(
            f"component {k} collapsed at iteration {iteration}: "
            f"sum of responsibilities is {sum_gamma[k]}",
            component=k,
            iteration=iteration,
        )

    ratio = sum_gamma / len(x)
    mu = (gamma * x[:, None]).sum(axis=0) / sum_gamma
    diff2 = (x[:, None] - mu[None, :])**2
    sigma = np.sqrt((gamma * diff2).sum(axis=0) / sum_gamma)

    bad = np.flatnonzero(~(np.isfinite(sigma) & (sigma > 0)))
    if bad.size:
        k = int(bad[0])
        logger.warning("Component %d has sigma %r at iteration %d", k, sigma[k], iteration)
        raise InvalidParameterError(
            f"sigma[{k}] = {sigma[k]} at iteration {iteration}: "
            f"component collapsed onto identical observations",
            parameter="sigma",
            index=k,
        )

    return MixtureParams(mu=mu, sigma=sigma, ratio=ratio)


def _run_em_iterations(
    x: np.ndarray,
    params: MixtureParams,
    max_iter: int,
    tol: float,
    history: List[IterationRecord],
) -> Tuple[int, np.ndarray, bool]:
    """
    Run E/M steps until |ΔL| < tol or max_iter iterations are done.

    history must already hold the iteration-0 record; one record is appended
    per iteration.

    Returns:
    --------
    n_iter : int
        Number of iterations performed
    gamma : np.ndarray
        Responsibilities from the last E-step, shape (N, K)
    converged : bool
        Whether the tolerance test was satisfied
    """
    prev_ll = history[-1].log_likelihood
    for iteration in range(1, max_iter + 1):
        gamma = _e_step(x, params)
        params = _m_step(x, gamma, iteration)
        ll = _log_likelihood(x, params)
        history.append(IterationRecord(iteration=iteration, params=params, log_likelihood=ll))
        logger.debug("iteration %d: log-likelihood %.10f", iteration, ll)

        if np.abs(ll - prev_ll) < tol:
            return iteration, gamma, True
        prev_ll = ll
    return max_iter, gamma, False


def fit_mixt_normal_em(
    x,
    max_iter: int,
    tol: float,
    init_mu,
    init_sigma,
    init_ratio,
) -> FitResult:
    """
    Fit a univariate Gaussian mixture to a sample with the EM algorithm.

    Maximizes the log-likelihood
        L = Σ_i log(Σ_k ratio_k N(x_i; μ_k, σ²_k))
    starting from the given initial values. EM is deterministic: the same
    sample and initial values always give the same result, and different
    initial values can lead to different local optima.

    Parameters:
    -----------
    x : array_like
        Observed sample, shape (N,), N >= 1
    max_iter : int
        Maximum number of EM iterations (>= 1)
    tol : float
        Stop when the absolute change of log-likelihood is below tol
    init_mu : array_like
        Initial component means, shape (K,)
    init_sigma : array_like
        Initial component standard deviations, shape (K,), all > 0
    init_ratio : array_like
        Initial mixing ratios, shape (K,); normalized to sum to 1

    Returns:
    --------
    FitResult
        Final parameters, log-likelihood, AIC/BIC, assignments and histories.
        Reaching max_iter is not an error: converged is False in that case.

    Raises:
    ------
    EmptySampleError
        If x has no observations
    DimensionMismatchError
        If the initial parameter sequences have different lengths
    InvalidParameterError
        If an initial sigma is not positive, max_iter < 1 or tol < 0, or an
        M-step produces a zero sigma
    DegenerateComponentError
        If a component's responsibility mass collapses to zero
    """
    x = _validate_sample(x)
    params = MixtureParams.from_values(init_mu, init_sigma, init_ratio)
    if not _is_count(max_iter) or max_iter < 1:
        raise InvalidParameterError(f"max_iter must be an integer >= 1, got {max_iter}", parameter="max_iter")
    if not tol >= 0:
        raise InvalidParameterError(f"tol must be >= 0, got {tol}", parameter="tol")
    max_iter = int(max_iter)

    n, K = len(x), params.n_components
    logger.debug("Fitting %d components to %d observations, initial params %s", K, n, params.as_dict())

    ll0 = _log_likelihood(x, params)
    history = [IterationRecord(iteration=0, params=params, log_likelihood=ll0)]

    n_iter, gamma, converged = _run_em_iterations(x, params, max_iter, tol, history)
    if converged:
        logger.info("EM converged after %d iterations (log-likelihood %.10f)", n_iter, history[-1].log_likelihood)
    else:
        logger.info("EM reached max_iter=%d without convergence", max_iter)

    # argmax returns the first maximum, so ties go to the lowest index
    assignments = np.argmax(gamma, axis=1)

    final = history[-1]
    aic, bic = information_criteria(final.log_likelihood, K, n)
    ll_history = np.array([(rec.iteration, rec.log_likelihood) for rec in history], dtype=LL_HISTORY_DTYPE)
    ll_history.setflags(write=False)

    return FitResult(
        final_params=final.params,
        log_likelihood=final.log_likelihood,
        aic=aic,
        bic=bic,
        assignments=assignments,
        n_iterations=n_iter,
        converged=converged,
        params_history=tuple(history),
        log_likelihood_history=ll_history,
        x=x,
        responsibilities=gamma,
    )


def predict_component(params: Union[MixtureParams, FitResult], x) -> np.ndarray:
    """
    Predict the most probable component (0-based) of each point.

    Compares ratio_k * N(x; μ_k, σ²_k) across components; the normalizing
    mixture density is the same for every component and is skipped. Ties go
    to the lowest index.

    Parameters:
    -----------
    params : MixtureParams or FitResult
        Fitted parameters (final_params is used for a FitResult)
    x : array_like
        Points to classify

    Returns:
    --------
    np.ndarray
        Integer component index per point, shape (N,)
    """
    if isinstance(params, FitResult):
        params = params.final_params
    params = MixtureParams.from_values(params.mu, params.sigma, params.ratio)
    x = np.atleast_1d(np.asarray(x, dtype=float))
    if x.ndim != 1:
        raise DimensionMismatchError(f"points must be 1D, got shape {x.shape}")
    return np.argmax(_log_weighted_densities(x, params), axis=1)

# ============================================================
# 3) Sampling
# ============================================================

def random_mixt_normal(
    n: int,
    mu,
    sigma,
    ratio,
    seed: Optional[int] = None,
    return_components: bool = False,
) -> Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]:
    """
    Draw a random sample from a univariate Gaussian mixture.

    Each point first draws its component with probabilities ratio (normalized),
    then a normal value with that component's mean and standard deviation.

    Parameters:
    -----------
    n : int
        Sample size (>= 0)
    mu, sigma, ratio : array_like
        Mixture parameters, each of length K
    seed : int, optional
        Seed for numpy.random.default_rng
    return_components : bool, optional
        Also return the drawn component indices (default: False)

    Returns:
    --------
    x : np.ndarray
        Sample, shape (n,)
    components : np.ndarray
        Component index of each point, only if return_components is True
    """
    mu, sigma, ratio = validate_mixture_params(mu, sigma, ratio)
    if not _is_count(n) or n < 0:
        raise InvalidParameterError(f"n must be a non-negative integer, got {n}", parameter="n")

    rng = np.random.default_rng(seed)
    components = rng.choice(len(mu), size=int(n), p=ratio)
    x = rng.normal(loc=mu[components], scale=sigma[components])
    if return_components:
        return x, components
    return x

# ============================================================
# 4) Configuration
# ============================================================

def load_config(config_path: str) -> Dict:
    """
    Load configuration from JSON file.

    Parameters:
    -----------
    config_path : str
        Path to JSON configuration file

    Returns:
    --------
    dict
        Configuration dictionary with default values applied
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        print(f"Error: Configuration file '{config_path}' not found.")
        print("Using default parameters.")
        config = {}
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON file: {e}")
        raise

    # Apply defaults
    return {
        "data_path": config.get("data_path"),
        "n_samples": config.get("n_samples", DEFAULT_N_SAMPLES),
        "true_mu": config.get("true_mu", DEFAULT_TRUE_MU),
        "true_sigma": config.get("true_sigma", DEFAULT_TRUE_SIGMA),
        "true_ratio": config.get("true_ratio", DEFAULT_TRUE_RATIO),
        "seed": config.get("seed", DEFAULT_SEED),
        "init_mu": config.get("init_mu", DEFAULT_INIT_MU),
        "init_sigma": config.get("init_sigma", DEFAULT_INIT_SIGMA),
        "init_ratio": config.get("init_ratio", DEFAULT_INIT_RATIO),
        "max_iter": config.get("max_iter", DEFAULT_MAX_ITER),
        "tol": config.get("tol", DEFAULT_TOL),
        "output_path": config.get("output_path", DEFAULT_OUTPUT_PATH),
        "binwidth": config.get("binwidth", DEFAULT_BINWIDTH),
        "plot": config.get("plot", DEFAULT_PLOT),
        "animate_history": config.get("animate_history", DEFAULT_ANIMATE_HISTORY),
    }
