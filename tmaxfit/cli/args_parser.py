"""Argument Parser for the tmaxfit CLI
====================================

Options mirror the host entry points: one input, a seed, and the three
step counts. Anything omitted falls back to the configuration file.
"""

import argparse
from pathlib import Path

from tmaxfit import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``tmaxfit`` command.

    Returns:
        Configured ArgumentParser
    """
    epilog_text = f"""
Examples:
  %(prog)s station.csv                          # Fit with defaults (2 chains, 500+500 steps)
  %(prog)s station.csv --seed 7 --chains 4      # Four chains from seed 7
  %(prog)s USW00094728.csv --output-dir ./out   # Raw GHCN-Daily export
  cat data.txt | %(prog)s -                     # Read from stdin
  %(prog)s station.csv --prepare-only           # Parse and plot the observations only

Model:
  y ~ Normal(intercept + slope * x, exp(log_noise_scale))
  Sampled with NUTS on standardized data; results reported in data units.

Outputs (in --output-dir):
  trace.png       per-chain traces and histograms
  fit.png         observations, posterior mean and credible band
  posterior.csv   thinned posterior draws (intercept,slope,noise_scale)

tmaxfit v{__version__}
        """

    parser = argparse.ArgumentParser(
        prog="tmaxfit",
        description="Bayesian linear regression of daily maximum temperature",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog_text,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"tmaxfit v{__version__}",
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input file (x,y columns or a GHCN-Daily CSV export), or '-' for stdin",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )

    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("./tmaxfit_results"),
        help="Output directory for plots and draws (default: %(default)s)",
    )

    sampling_group = parser.add_argument_group("Sampling Options")
    sampling_group.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed, fanned out into one seed per chain (default: from config or 42)",
    )

    sampling_group.add_argument(
        "--chains",
        type=int,
        default=None,
        help="Number of chains (default: from config or 2)",
    )

    sampling_group.add_argument(
        "--tuning",
        type=int,
        default=None,
        help="Warm-up steps per chain (default: from config or 500)",
    )

    sampling_group.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Retained draws per chain (default: from config or 500)",
    )

    parser.add_argument(
        "--prepare-only",
        action="store_true",
        help="Parse the input and plot the observations without sampling",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output",
    )

    return parser


def validate_args(args) -> bool:
    """Validate parsed command-line arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Returns
    -------
    bool
        True if arguments are valid, False otherwise
    """
    if args.seed is not None and not 0 <= args.seed <= 2**64 - 1:
        print("Error: Seed must fit in an unsigned 64-bit integer")
        return False
    if args.chains is not None and args.chains <= 0:
        print("Error: Chain count must be positive")
        return False
    if args.tuning is not None and args.tuning < 0:
        print("Error: Tuning steps cannot be negative")
        return False
    if args.samples is not None and args.samples < 0:
        print("Error: Sample steps cannot be negative")
        return False
    if args.input != "-" and not Path(args.input).is_file():
        print(f"Error: Input file not found: {args.input}")
        return False
    return True
