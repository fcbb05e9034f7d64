"""Helper functions for CLI operations."""

import logging
import os
import sys
from typing import Optional

import click

from ...config import PricerConfig
from ...config_paths import ENV_LOG_LEVEL
from ...engine import Pricer
from ...errors import ConfigurationError
from ...logging import LOGGER_NAMESPACE


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    MODEL_NOT_FOUND = 3
    DATA_SOURCE_ERROR = 4


# Accepted spellings for PRICING_LOG_LEVEL
_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    # Auto-detect based on TTY
    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def resolve_log_level(verbose: int = 0, debug: bool = False) -> int:
    """Resolve the log level: ``--debug`` > ``-v`` flags > PRICING_LOG_LEVEL > WARNING."""
    if debug or verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    env_level = os.getenv(ENV_LOG_LEVEL, "").strip().lower()
    return _LOG_LEVELS.get(env_level, logging.WARNING)


def setup_logging(level: int) -> None:
    """Send package log records to stderr at ``level``."""
    logging.basicConfig(stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)


def handle_error(error: Exception, exit_code: int = ExitCode.GENERIC_ERROR) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        error: Exception to handle
        exit_code: Exit code to use
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code)


def get_pricer(ctx: click.Context) -> Pricer:
    """Build (once per invocation) the pricer for the configured data source.

    Exits with ``DATA_SOURCE_ERROR`` when the pricing data cannot be loaded.
    """
    pricer = ctx.obj.get("pricer")
    if pricer is None:
        try:
            pricer = Pricer.from_config(PricerConfig(config_dir=ctx.obj.get("config_dir")))
        except ConfigurationError as e:
            handle_error(e, ExitCode.DATA_SOURCE_ERROR)
        ctx.obj["pricer"] = pricer
    return pricer

