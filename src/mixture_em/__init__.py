"""EM fitting of univariate Gaussian mixtures.

Fits a K-component 1D Gaussian mixture to an observed sample by maximum
likelihood, keeping the full parameter and log-likelihood history, AIC/BIC
and the most probable component of every observation.
"""

from .mixture_utils import (
    EPSILON,
    MixtureError,
    DimensionMismatchError,
    InvalidParameterError,
    DegenerateComponentError,
    EmptySampleError,
    MixtureParams,
    MixtureDensity,
    validate_mixture_params,
    normal_pdf,
    density_mixt_normal,
    mixture_density_from_params,
    log_likelihood_mixt_normal,
    n_free_parameters,
    information_criteria,
)
from .em_method import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    DEFAULT_N_SAMPLES,
    DEFAULT_INIT_MU,
    DEFAULT_SEED,
    LL_HISTORY_DTYPE,
    IterationRecord,
    FitResult,
    fit_mixt_normal_em,
    predict_component,
    random_mixt_normal,
    load_config,
)
from .reporting import (
    print_section_header,
    print_subsection_header,
    print_mixture_params,
    print_em_results,
    print_fit_result,
    print_fit_summary,
    print_plot_output,
    plot_log_likelihood,
    plot_components,
    plot_history,
)

__all__ = [
    "EPSILON",
    "MixtureError",
    "DimensionMismatchError",
    "InvalidParameterError",
    "DegenerateComponentError",
    "EmptySampleError",
    "MixtureParams",
    "MixtureDensity",
    "validate_mixture_params",
    "normal_pdf",
    "density_mixt_normal",
    "mixture_density_from_params",
    "log_likelihood_mixt_normal",
    "n_free_parameters",
    "information_criteria",
    "DEFAULT_MAX_ITER",
    "DEFAULT_TOL",
    "DEFAULT_N_SAMPLES",
    "DEFAULT_INIT_MU",
    "DEFAULT_SEED",
    "LL_HISTORY_DTYPE",
    "IterationRecord",
    "FitResult",
    "fit_mixt_normal_em",
    "predict_component",
    "random_mixt_normal",
    "load_config",
    "print_section_header",
    "print_subsection_header",
    "print_mixture_params",
    "print_em_results",
    "print_fit_result",
    "print_fit_summary",
    "print_plot_output",
    "plot_log_likelihood",
    "plot_components",
    "plot_history",
]
