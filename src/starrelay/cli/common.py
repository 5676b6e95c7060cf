"""
Command-line interface utilities for starrelay.

Maps the shared verbosity flags onto log levels and prints JSON payloads.
"""

import json
import logging
from typing import Any, Dict

import click

from ..logging import set_log_level


def log_level_from_flags(quiet: bool, debug: bool, verbosity: int) -> int:
    """
    Pick a log level from the CLI flags.

    --quiet wins over everything, then --debug; otherwise
    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """
    if quiet:
        return logging.ERROR
    if debug:
        return logging.DEBUG
    if verbosity == 0:
        return logging.WARNING
    elif verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(args: Dict[str, Any]) -> int:
    """
    Configure logging based on command line arguments.

    Args:
        args: Parsed flags with quiet, debug and verbose keys

    Returns:
        The log level applied
    """
    log_level = log_level_from_flags(
        args.get("quiet", False), args.get("debug", False), args.get("verbose", 0)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # Apply log level to all starrelay loggers
    set_log_level(log_level)

    root_logger.debug(
        f"Logging configured with level {logging.getLevelName(log_level)}"
    )
    return log_level


def echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))
