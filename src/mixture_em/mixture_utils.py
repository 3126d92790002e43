"""
Common utilities for univariate Gaussian mixtures.

This module provides the parameter container, input validation, the mixture
density evaluator and the log-likelihood shared by the EM fitter, the
predictor, the sampler and the plotting functions.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from scipy.special import logsumexp


# ============================================================
# Numerical Constants
# ============================================================

EPSILON = 1e-10
LOG_2PI = np.log(2.0 * np.pi)


# ============================================================
# Errors
# ============================================================

class MixtureError(ValueError):
    """Base class for errors raised while evaluating or fitting a mixture."""


class DimensionMismatchError(MixtureError):
    """Raised when mu, sigma and ratio do not have the same length."""

    def __init__(self, message: str, lengths: Optional[Dict[str, int]] = None):
        super().__init__(message)
        self.lengths = lengths or {}


class InvalidParameterError(MixtureError):
    """Raised for a non-positive standard deviation or other invalid value."""

    def __init__(self, message: str, parameter: Optional[str] = None, index: Optional[int] = None):
        super().__init__(message)
        self.parameter = parameter
        self.index = index


class DegenerateComponentError(MixtureError):
    """Raised when a component's responsibility mass collapses during EM."""

    def __init__(self, message: str, component: Optional[int] = None, iteration: Optional[int] = None):
        super().__init__(message)
        self.component = component
        self.iteration = iteration


class EmptySampleError(MixtureError):
    """Raised when a sample with no observations is supplied."""


# ============================================================
# Parameters and validation
# ============================================================

def validate_mixture_params(
    mu,
    sigma,
    ratio,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Validate mixture parameters and normalize the mixing ratios.

    Parameters:
    -----------
    mu : array_like
        Component means, shape (K,)
    sigma : array_like
        Component standard deviations, shape (K,), all strictly positive
    ratio : array_like
        Mixing ratios, shape (K,), non-negative (need not sum to 1)

    Returns:
    --------
    mu, sigma, ratio : np.ndarray
        Float arrays of shape (K,); ratio is divided by its sum

    Raises:
    ------
    DimensionMismatchError
        If the three sequences are not 1D or have different lengths
    InvalidParameterError
        If K == 0, a sigma is not strictly positive, or the ratios are
        negative or sum to zero
    """
    mu = np.atleast_1d(np.asarray(mu, dtype=float))
    sigma = np.atleast_1d(np.asarray(sigma, dtype=float))
    ratio = np.atleast_1d(np.asarray(ratio, dtype=float))

    lengths = {"mu": mu.size, "sigma": sigma.size, "ratio": ratio.size}
    if mu.ndim != 1 or sigma.ndim != 1 or ratio.ndim != 1:
        raise DimensionMismatchError("mu, sigma and ratio must be 1D sequences.", lengths)
    if len(set(lengths.values())) != 1:
        raise DimensionMismatchError(
            f"dimension of mu, sigma and ratio must be the same, got "
            f"mu={lengths['mu']}, sigma={lengths['sigma']}, ratio={lengths['ratio']}",
            lengths,
        )
    if mu.size == 0:
        raise InvalidParameterError("at least one component is required", parameter="mu")

    bad = np.flatnonzero(~np.isfinite(mu))
    if bad.size:
        k = int(bad[0])
        raise InvalidParameterError(f"mu[{k}] = {mu[k]} is not finite", parameter="mu", index=k)

    bad = np.flatnonzero(~(np.isfinite(sigma) & (sigma > 0)))
    if bad.size:
        k = int(bad[0])
        raise InvalidParameterError(f"sigma[{k}] = {sigma[k]} is not positive", parameter="sigma", index=k)

    bad = np.flatnonzero(~(np.isfinite(ratio) & (ratio >= 0)))
    if bad.size:
        k = int(bad[0])
        raise InvalidParameterError(f"ratio[{k}] = {ratio[k]} must be non-negative", parameter="ratio", index=k)
    total = float(np.sum(ratio))
    if total <= 0:
        raise InvalidParameterError("sum of ratio must be > 0", parameter="ratio")

    return mu, sigma, ratio / total


@dataclass(frozen=True)
class MixtureParams:
    """
    Parameters for a univariate Gaussian mixture.

    Instances are immutable: the arrays are private read-only copies of the
    values passed in.

    Attributes:
    -----------
    mu : np.ndarray
        Mean of each component, shape (K,)
    sigma : np.ndarray
        Standard deviation of each component, shape (K,)
        Must be positive: sigma[k] > 0 for all k
    ratio : np.ndarray
        Mixing ratio of each component, shape (K,)
        Must satisfy: sum(ratio) = 1, ratio[k] >= 0 for all k
    """
    mu: np.ndarray     # shape (K,)
    sigma: np.ndarray  # shape (K,)
    ratio: np.ndarray  # shape (K,)

    def __post_init__(self):
        for name in ("mu", "sigma", "ratio"):
            values = np.array(getattr(self, name), dtype=float)
            values.setflags(write=False)
            object.__setattr__(self, name, values)

    @classmethod
    def from_values(cls, mu, sigma, ratio) -> "MixtureParams":
        """Build validated parameters; ratio is normalized to sum to 1."""
        mu, sigma, ratio = validate_mixture_params(mu, sigma, ratio)
        return cls(mu=mu, sigma=sigma, ratio=ratio)

    @property
    def n_components(self) -> int:
        return len(self.mu)

    def copy(self) -> "MixtureParams":
        return MixtureParams(mu=self.mu, sigma=self.sigma, ratio=self.ratio)

    def as_dict(self) -> Dict[str, list]:
        return {
            "mu": self.mu.tolist(),
            "sigma": self.sigma.tolist(),
            "ratio": self.ratio.tolist(),
        }


# ============================================================
# PDF and likelihood functions
# ============================================================

def normal_pdf(x: np.ndarray, mu: float, sigma: float) -> np.ndarray:
    """
    Compute the probability density function of a univariate normal distribution.

    Parameters:
    -----------
    x : np.ndarray
        Points at which to evaluate the PDF
    mu : float
        Mean of the normal distribution
    sigma : float
        Standard deviation of the normal distribution (must be positive)

    Returns:
    --------
    np.ndarray
        PDF values at x: N(x; mu, sigma²) = (1/sqrt(2πσ²)) * exp(-(x-μ)²/(2σ²))
    """
    u = (x - mu) / sigma
    return np.exp(-0.5 * u * u) / (np.sqrt(2.0 * np.pi) * sigma)


def _log_normal_pdf_1d(x: np.ndarray, mu: np.ndarray, sigma: np.ndarray) -> np.ndarray:
    """
    Compute log PDF of univariate normal distributions for all components.

    Returns an array of shape (N, K) whose element [i, k] is
    log N(x[i]; mu[k], sigma[k]²).
    """
    x = x[:, None]
    mu = mu[None, :]
    sigma = sigma[None, :]
    return -0.5 * (LOG_2PI + 2.0 * np.log(sigma) + ((x - mu) / sigma)**2)


def _log_weighted_densities(x: np.ndarray, params: MixtureParams) -> np.ndarray:
    """
    Log of the weighted component densities, log(ratio[k] * N(x[i]; mu[k], sigma[k]²)).

    Shape (N, K). Components with zero ratio give -inf.
    """
    with np.errstate(divide="ignore"):
        log_ratio = np.log(params.ratio)
    return log_ratio[None, :] + _log_normal_pdf_1d(x, params.mu, params.sigma)


def _as_sample(x) -> np.ndarray:
    x = np.atleast_1d(np.asarray(x, dtype=float))
    if x.ndim != 1:
        raise DimensionMismatchError(f"sample must be 1D, got shape {x.shape}")
    return x


@dataclass
class MixtureDensity:
    """
    Densities of a Gaussian mixture evaluated at a set of points.

    Attributes:
    -----------
    x : np.ndarray
        Evaluation points, shape (N,)
    prob_density : np.ndarray
        Mixture density at each point, shape (N,)
    component_densities : np.ndarray
        Unweighted density of each component at each point, shape (N, K)
    """
    x: np.ndarray
    prob_density: np.ndarray
    component_densities: np.ndarray


def density_mixt_normal(x, mu, sigma, ratio) -> MixtureDensity:
    """
    Evaluate a univariate Gaussian mixture at the given points.

    The mixture density is the ratio-weighted sum of component densities:
        f(x) = Σ_k ratio_k N(x; μ_k, σ²_k)

    Parameters:
    -----------
    x : array_like
        Points at which to evaluate the densities (a scalar is one point)
    mu, sigma, ratio : array_like
        Mixture parameters, each of length K; ratio is normalized before use

    Returns:
    --------
    MixtureDensity
        Per-component densities, shape (N, K), and mixture density, shape (N,)

    Raises:
    ------
    DimensionMismatchError
        If mu, sigma and ratio have different lengths
    InvalidParameterError
        If any sigma is not strictly positive
    """
    mu, sigma, ratio = validate_mixture_params(mu, sigma, ratio)
    x = _as_sample(x)
    component_densities = normal_pdf(x[:, None], mu[None, :], sigma[None, :])
    prob_density = component_densities @ ratio
    return MixtureDensity(x=x, prob_density=prob_density, component_densities=component_densities)


def mixture_density_from_params(x, params: MixtureParams) -> MixtureDensity:
    """Evaluate the mixture described by ``params`` at ``x``."""
    return density_mixt_normal(x, params.mu, params.sigma, params.ratio)


def log_likelihood_mixt_normal(x, mu, sigma, ratio) -> float:
    """
    Compute the log-likelihood of a sample under a univariate Gaussian mixture.

        L = Σ_i log(Σ_k ratio_k N(x_i; μ_k, σ²_k))

    The inner sum is evaluated with logsumexp so that points far in the tails
    do not underflow to log(0). A mixture density that is exactly zero gives
    -inf, which is returned as is.

    Raises:
    ------
    EmptySampleError
        If x has no observations
    DimensionMismatchError, InvalidParameterError
        Same conditions as density_mixt_normal
    """
    params = MixtureParams.from_values(mu, sigma, ratio)
    x = _as_sample(x)
    if x.size == 0:
        raise EmptySampleError("cannot compute log-likelihood of an empty sample")
    return _log_likelihood(x, params)


def _log_likelihood(x: np.ndarray, params: MixtureParams) -> float:
    # params and x are assumed to be validated already
    with np.errstate(divide="ignore"):
        log_den = logsumexp(_log_weighted_densities(x, params), axis=1)
    return float(np.sum(log_den))


# ============================================================
# Model selection
# ============================================================

def n_free_parameters(n_components: int) -> int:
    """Mean, sd and weight per component, minus one for the weight-sum constraint."""
    return 3 * n_components - 1


def information_criteria(log_likelihood: float, n_components: int, sample_size: int) -> Tuple[float, float]:
    """
    Compute AIC and BIC for a fitted mixture.

    Returns:
    --------
    aic : float
        -2 * L + 2 * (3K - 1)
    bic : float
        -2 * L + (3K - 1) * ln(N)
    """
    p = n_free_parameters(n_components)
    aic = -2.0 * log_likelihood + 2.0 * p
    bic = -2.0 * log_likelihood + p * np.log(sample_size)
    return float(aic), float(bic)
