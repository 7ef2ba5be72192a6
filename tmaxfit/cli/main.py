"""CLI Entry Point for tmaxfit
===========================

Entry point for console script: tmaxfit [args]
"""

import logging
import sys

from tmaxfit.cli.args_parser import create_parser
from tmaxfit.cli.commands import dispatch_command
from tmaxfit.utils.logging import get_logger

logger = get_logger(__name__)


def main(argv=None) -> None:
    """Main CLI entry point.

    Processes command-line arguments and dispatches to the command handler.
    """
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        if args.verbose:
            logging.getLogger("tmaxfit").setLevel(logging.DEBUG)

        logger.debug(f"Arguments: {vars(args)}")

        result = dispatch_command(args)

        if result and result.get("success", False):
            logger.info("Fit completed successfully")
            sys.exit(0)
        else:
            error_msg = (
                result.get("error", "Unknown error") if result else "Command failed"
            )
            logger.error(f"Fit failed: {error_msg}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
