"""
Tests for component prediction on new points.
"""
import numpy as np
import pytest
from mixture_em import (
    MixtureParams,
    DimensionMismatchError,
    InvalidParameterError,
    fit_mixt_normal_em,
    predict_component,
    random_mixt_normal,
)


class TestPredictComponent:
    """Tests for predict_component function."""

    def test_well_separated_points(self):
        """Test points close to each component mean."""
        params = MixtureParams.from_values([-5.0, 0.0, 5.0], [1.0, 1.0, 1.0], [1, 1, 1])
        labels = predict_component(params, [-5.2, 0.1, 4.8, -4.0, 6.0])

        assert labels.tolist() == [0, 1, 2, 0, 2]

    def test_weights_are_taken_into_account(self):
        """Test that the mixing ratio, not only the distance, decides the component."""
        params = MixtureParams.from_values([0.0, 0.5], [1.0, 1.0], [0.9, 0.1])

        assert predict_component(params, [0.4]).tolist() == [0]

    def test_tie_goes_to_lowest_index(self):
        """Test that exactly equal weighted densities resolve to the lowest index."""
        params = MixtureParams.from_values([-1.0, 1.0], [1.0, 1.0], [0.5, 0.5])
        assert predict_component(params, [0.0]).tolist() == [0]

        identical = MixtureParams.from_values([2.0, 2.0, 2.0], [1.0, 1.0, 1.0], [1, 1, 1])
        assert np.all(predict_component(identical, np.linspace(-3, 7, 11)) == 0)

    def test_scalar_point(self):
        """Test prediction for a single scalar point."""
        params = MixtureParams.from_values([0.0, 10.0], [1.0, 1.0], [0.5, 0.5])
        labels = predict_component(params, 9.0)

        assert labels.shape == (1,)
        assert labels[0] == 1

    def test_agrees_with_fit_assignments(self):
        """Test that predictions on the fitted sample match the fit's assignments."""
        x = random_mixt_normal(1000, [0.0, 10.0], [1.0, 1.0], [0.3, 0.7], seed=11)
        result = fit_mixt_normal_em(x, max_iter=300, tol=1e-10, init_mu=[1.0, 9.0], init_sigma=[2.0, 2.0], init_ratio=[0.5, 0.5])

        from_result = predict_component(result, x)
        from_params = predict_component(result.final_params, x)

        assert np.array_equal(from_result, from_params)
        assert np.mean(from_result == result.assignments) > 0.99

    def test_validation(self):
        """Test that invalid parameters and 2D input are rejected."""
        params = MixtureParams(mu=np.array([0.0]), sigma=np.array([-1.0]), ratio=np.array([1.0]))
        with pytest.raises(InvalidParameterError):
            predict_component(params, [0.0])

        valid = MixtureParams.from_values([0.0], [1.0], [1.0])
        with pytest.raises(DimensionMismatchError):
            predict_component(valid, np.zeros((2, 2)))
