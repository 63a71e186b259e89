"""Main CLI entry point for cloneeval using command pattern."""

import sys
import argparse
import logging
from typing import Optional

from . import __version__
from .commands import COMMAND_REGISTRY
from .commands.base import CommandContext
from .config import ConfigurationService
from .exceptions import CloneEvalError
from .utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cloneeval",
        description="cloneeval - Recall evaluation of clone detection tools"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--database", help="Benchmark database (overrides configuration)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides configuration)"
    )

    subparsers = parser.add_subparsers(
        title="Available commands",
        dest="command",
        required=True
    )

    for name, command_class in COMMAND_REGISTRY.items():
        subparser = subparsers.add_parser(name, help=command_class.help())
        command_class.add_arguments(subparser)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigurationService(args.config).get_config()
    except CloneEvalError as e:
        setup_logging("WARNING")
        logger.error(f"❌ {e}")
        return 1

    if args.database:
        config.database.db_path = args.database
    if args.log_level:
        config.log_level = args.log_level
    setup_logging(config.log_level)

    command = COMMAND_REGISTRY[args.command](CommandContext(config=config, args=args))

    try:
        return command.execute()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1
    except CloneEvalError as e:
        logger.error(f"❌ {e}")
        return 1
    except OSError as e:
        logger.error(f"❌ {e.strerror or e}: {e.filename}" if e.filename else f"❌ {e}")
        return 1


def cli_main():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
