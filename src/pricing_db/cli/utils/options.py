"""Common CLI options and decorators."""

from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

import click

from ...config_paths import ENV_BATCH_MODE, ENV_DEFAULT_MODEL, env_flag

F = TypeVar("F", bound=Callable[..., Any])


def batch_option(func: F) -> F:
    """Add --batch/--no-batch to a command.

    When neither flag is given, PRICING_BATCH_MODE decides.
    """

    @click.option(
        "--batch/--no-batch",
        "batch",
        default=None,
        help="Apply batch pricing. Defaults to the PRICING_BATCH_MODE environment variable.",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("batch") is None:
            kwargs["batch"] = env_flag(ENV_BATCH_MODE)
        return func(*args, **kwargs)

    return cast(F, wrapper)


def model_option(func: F) -> F:
    """Add --model to a command, defaulting to PRICING_DEFAULT_MODEL."""

    @click.option(
        "--model",
        type=str,
        envvar=ENV_DEFAULT_MODEL,
        help="Model name. Defaults to the PRICING_DEFAULT_MODEL environment variable.",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        model: Optional[str] = kwargs.get("model")
        kwargs["model"] = model.strip() if model else None
        return func(*args, **kwargs)

    return cast(F, wrapper)
