"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from . import logs
from .config import load_env_file
from .service import Service
from .version import VERSION


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nebula-sync")
    parser.add_argument("--version", action="version", version=f"%(prog)s version {VERSION}")
    commands = parser.add_subparsers(dest="command", metavar="command")
    run = commands.add_parser("run", help="Run sync", description="Run sync")
    run.add_argument("--env-file", default="", metavar=".env", help="Read env from `.env` file")
    return parser


def _run(env_file: str, logger: logging.Logger) -> int:
    if env_file:
        try:
            load_env_file(env_file)
        except Exception as exc:
            logger.critical("Failed to load env file: %s", exc)
            return 1

    try:
        service = Service.from_environment()
    except Exception as exc:
        logger.critical("Failed to initialize service: %s", exc)
        return 1

    try:
        service.run()
    except Exception as exc:
        logger.critical("Sync failed: %s", exc)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the chosen command; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command != "run":
        parser.print_help()
        return 0
    logger = logs.init()
    return _run(args.env_file, logger)


if __name__ == "__main__":
    sys.exit(main())