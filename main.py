"""
Main execution script for EM fitting of a univariate Gaussian mixture.

This script reads configuration from JSON file, loads a sample from file (or
draws a synthetic one from a known mixture), fits a Gaussian mixture with the
EM algorithm, prints a summary and generates plots.
"""

import argparse
import logging
import sys
import os
import time
import numpy as np

# Add src directory to path to import mixture_em package
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from mixture_em import (
    load_config,
    random_mixt_normal,
    fit_mixt_normal_em,
    print_section_header,
    print_em_results,
    print_fit_summary,
    print_plot_output,
    plot_log_likelihood,
    plot_components,
    plot_history,
)


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Fit a univariate Gaussian mixture to a sample with the EM algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --config configs/config_default.json
  python main.py --config configs/config_default.json --log-level DEBUG
        """
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON configuration file. Example configs are in configs/ directory."
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )

    # If no arguments provided, show help
    if len(sys.argv) == 1:
        parser.print_help()
        sys.exit(0)

    args = parser.parse_args()

    # If --config is not provided, show help
    if args.config is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Load configuration
    config = load_config(args.config)
    print(f"Configuration file: {args.config}")

    # Load or generate the sample
    if config["data_path"] is not None:
        x = np.loadtxt(config["data_path"], dtype=float, ndmin=1)
        print(f"Loaded {len(x)} observations from {config['data_path']}")
    else:
        x = random_mixt_normal(
            config["n_samples"],
            config["true_mu"],
            config["true_sigma"],
            config["true_ratio"],
            seed=config["seed"],
        )
        print(f"Generated {len(x)} observations: mu={config['true_mu']}, "
              f"sigma={config['true_sigma']}, ratio={config['true_ratio']}")

    # Fit (measure execution time)
    start_time = time.time()
    result = fit_mixt_normal_em(
        x,
        max_iter=config["max_iter"],
        tol=config["tol"],
        init_mu=config["init_mu"],
        init_sigma=config["init_sigma"],
        init_ratio=config["init_ratio"],
    )
    em_time = time.time() - start_time

    print_section_header("EM RESULTS")
    print_em_results(result.log_likelihood, result.n_iterations, config["max_iter"], result.converged)
    print(f"EM algorithm: {em_time:.6f} seconds")
    print_fit_summary(result)

    output_path = config["output_path"]
    if config["plot"]:
        print_plot_output(plot_log_likelihood(result, f"{output_path}_log_likelihood"))
        print_plot_output(plot_components(result, f"{output_path}_components", binwidth=config["binwidth"]))
    if config["animate_history"]:
        print_plot_output(plot_history(result, f"{output_path}_history", binwidth=config["binwidth"]))


if __name__ == "__main__":
    main()
