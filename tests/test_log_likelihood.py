"""
Tests for the mixture log-likelihood.
"""
import numpy as np
import pytest
from mixture_em import (
    DimensionMismatchError,
    EmptySampleError,
    InvalidParameterError,
    density_mixt_normal,
    log_likelihood_mixt_normal,
    normal_pdf,
)


class TestLogLikelihood:
    """Tests for log_likelihood_mixt_normal function."""

    def test_matches_log_of_mixture_density(self):
        """Test that the log-likelihood is the sum of log mixture densities."""
        rng = np.random.default_rng(3)
        x = rng.normal(size=300)
        mu, sigma, ratio = [-1.0, 1.5], [1.0, 0.8], [0.6, 0.4]

        ll = log_likelihood_mixt_normal(x, mu, sigma, ratio)
        expected = np.sum(np.log(density_mixt_normal(x, mu, sigma, ratio).prob_density))

        assert np.isclose(ll, expected, rtol=1e-10)

    def test_single_point_single_component(self):
        """Test log-likelihood of one point under one component."""
        ll = log_likelihood_mixt_normal([0.5], [0.0], [2.0], [1.0])

        assert np.isclose(ll, np.log(normal_pdf(0.5, 0.0, 2.0)))

    def test_unnormalized_ratio(self):
        """Test that ratios are normalized before use."""
        x = np.array([-1.0, 0.0, 3.0])
        a = log_likelihood_mixt_normal(x, [0.0, 2.0], [1.0, 1.0], [1.0, 3.0])
        b = log_likelihood_mixt_normal(x, [0.0, 2.0], [1.0, 1.0], [0.25, 0.75])

        assert np.isclose(a, b)

    def test_far_tail_is_finite(self):
        """Test that a point where the density underflows still has a finite log-likelihood."""
        ll = log_likelihood_mixt_normal([0.0, 50.0], [0.0], [1.0], [1.0])

        assert np.isfinite(ll)
        assert np.isclose(ll, -np.log(2.0 * np.pi) - 1250.0)

    def test_zero_weight_component(self):
        """Test that a component with zero weight does not contribute."""
        x = np.array([0.0, 1.0])
        a = log_likelihood_mixt_normal(x, [0.0, 5.0], [1.0, 1.0], [1.0, 0.0])
        b = log_likelihood_mixt_normal(x, [0.0], [1.0], [1.0])

        assert np.isclose(a, b)

    def test_empty_sample(self):
        """Test that an empty sample is rejected."""
        with pytest.raises(EmptySampleError):
            log_likelihood_mixt_normal([], [0.0], [1.0], [1.0])

    def test_validation(self):
        """Test that validation is delegated to the density checks."""
        with pytest.raises(DimensionMismatchError):
            log_likelihood_mixt_normal([0.0], [0.0, 1.0], [1.0, 1.0], [1.0])
        with pytest.raises(InvalidParameterError):
            log_likelihood_mixt_normal([0.0], [0.0], [-1.0], [1.0])
