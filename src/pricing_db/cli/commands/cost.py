"""Cost calculation commands for the pricing-db CLI."""

from typing import Optional

import click

from ...config_paths import ENV_DEFAULT_MODEL
from ...pricing import CalculateOptions, TokenUsage
from ..formatters import (
    create_console,
    format_cost_json,
    format_cost_table,
    format_credit_cost_json,
    format_credit_cost_table,
    format_image_cost_json,
    format_image_cost_table,
    format_json,
)
from ..utils import ExitCode, batch_option, get_pricer, handle_error

_COUNT = click.IntRange(min=0)


@click.command()
@click.argument("model", type=str, required=False, envvar=ENV_DEFAULT_MODEL)
@click.option("--input", "input_tokens", type=_COUNT, default=0, show_default=True, help="Input tokens.")
@click.option("--output", "output_tokens", type=_COUNT, default=0, show_default=True, help="Output tokens.")
@click.option("--cached", "cached_tokens", type=_COUNT, default=0, show_default=True, help="Cached input tokens.")
@click.option("--thinking", "thinking_tokens", type=_COUNT, default=0, show_default=True, help="Thinking tokens.")
@click.option(
    "--tool-use", "tool_use_tokens", type=_COUNT, default=0, show_default=True, help="Tool-use prompt tokens."
)
@click.option(
    "--grounding",
    "grounding_units",
    type=_COUNT,
    default=0,
    show_default=True,
    help="Grounding units (search queries or grounded prompts, per the model's billing model).",
)
@batch_option
@click.pass_context
def cost(
    ctx: click.Context,
    model: Optional[str],
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int,
    thinking_tokens: int,
    tool_use_tokens: int,
    grounding_units: int,
    batch: bool,
) -> None:
    """Calculate the cost of a token-based request.

    MODEL defaults to the PRICING_DEFAULT_MODEL environment variable.
    """
    if not model:
        handle_error(click.UsageError("No model given and PRICING_DEFAULT_MODEL is not set"), ExitCode.INVALID_USAGE)
        return

    pricer = get_pricer(ctx)
    try:
        usage = TokenUsage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            cached_tokens=cached_tokens,
            thinking_tokens=thinking_tokens,
            tool_use_tokens=tool_use_tokens,
        )
        breakdown = pricer.calculate_usage(
            model, usage, grounding_units=grounding_units, options=CalculateOptions(batch_mode=batch)
        )
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    if breakdown.unknown:
        handle_error(Exception(f"Model '{model}' not found in pricing data"), ExitCode.MODEL_NOT_FOUND)
        return

    if ctx.obj["format"] == "json":
        format_json(format_cost_json(breakdown))
    else:
        format_cost_table(breakdown, create_console(no_color=ctx.obj["no_color"]))


@click.command()
@click.argument("model", type=str)
@click.option("--count", "image_count", type=_COUNT, default=1, show_default=True, help="Number of images.")
@click.option("--resolution", type=str, help="Resolution label, e.g. 1024x1024.")
@click.pass_context
def image(ctx: click.Context, model: str, image_count: int, resolution: Optional[str] = None) -> None:
    """Calculate the cost of generating images."""
    pricer = get_pricer(ctx)
    result = pricer.calculate_image_cost(model, image_count, resolution=resolution)
    if result.unknown:
        handle_error(Exception(f"Image model '{model}' not found in pricing data"), ExitCode.MODEL_NOT_FOUND)
        return

    if ctx.obj["format"] == "json":
        format_json(format_image_cost_json(result))
    else:
        format_image_cost_table(result, create_console(no_color=ctx.obj["no_color"]))


@click.command()
@click.argument("provider", type=str)
@click.option("--multiplier", type=str, default="", help="Multiplier name, e.g. js_rendering.")
@click.pass_context
def credit(ctx: click.Context, provider: str, multiplier: str = "") -> None:
    """Calculate the credits charged for one request to a credit-based provider.

    An unrecognized multiplier is billed at the base cost and reported as unknown.
    """
    pricer = get_pricer(ctx)
    if provider not in pricer.list_providers():
        handle_error(Exception(f"Provider '{provider}' not found"), ExitCode.MODEL_NOT_FOUND)
        return

    if pricer.catalog.credit_pricing(provider) is None:
        handle_error(Exception(f"Provider '{provider}' has no credit pricing"), ExitCode.MODEL_NOT_FOUND)
        return

    result = pricer.calculate_credit_cost(provider, multiplier)
    if result.unknown:
        click.echo(f"Warning: unknown multiplier '{multiplier}', using base cost", err=True)

    if ctx.obj["format"] == "json":
        format_json(format_credit_cost_json(result))
    else:
        format_credit_cost_table(result, create_console(no_color=ctx.obj["no_color"]))
