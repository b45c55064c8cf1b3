"""
Tapedeck - terminal music player

Main entry point. Loads user settings and runs one interactive session.
"""

import argparse
import sys

import constants as cv
import reader
import session
from logging_config import (
    ConfigurationError,
    TerminalSetupError,
    get_logger,
    setup_logging,
)

__version__ = "0.1.0"

logger = get_logger("main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="tapedeck",
        description="Browse a music directory and play tracks with VLC.",
    )
    parser.add_argument(
        "--config",
        default=cv.USER_SPECS_DATA,
        help="settings file (default: %(default)s)",
    )
    parser.add_argument("--library", help="directory to list instead of the configured one")
    parser.add_argument(
        "--rescan-interval",
        type=float,
        help="rescan the library every N seconds instead of once",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--version", action="version", version=f"tapedeck {__version__}")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        if reader.ensure_user_specs(args.config):
            print(f"Created default settings at {args.config}")
        settings = reader.load_settings(
            args.config,
            overrides={
                "library": args.library,
                "rescan_interval": args.rescan_interval,
                "log_level": args.log_level,
            },
        )
    except (ConfigurationError, OSError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    try:
        setup_logging(settings.log_level, settings.log_file)
    except OSError as e:
        print(f"✗ Cannot open log file {settings.log_file}: {e}", file=sys.stderr)
        setup_logging(settings.log_level, None)

    try:
        session.run_session(settings)
    except TerminalSetupError as e:
        logger.error(f"Terminal setup failed: {e}")
        print(f"✗ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
