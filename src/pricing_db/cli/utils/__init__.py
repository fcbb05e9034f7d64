"""CLI utilities package."""

from .helpers import (
    ExitCode,
    get_pricer,
    handle_error,
    resolve_format,
    resolve_log_level,
    setup_logging,
)
from .options import batch_option, model_option

__all__ = [
    "ExitCode",
    "get_pricer",
    "handle_error",
    "resolve_format",
    "resolve_log_level",
    "setup_logging",
    "batch_option",
    "model_option",
]
