"""Gemini response costing command for the pricing-db CLI."""

from typing import Any, Dict, Optional

import click

from ...errors import InvalidResponseError
from ...gemini import calculate_gemini_response_cost, parse_gemini_response
from ...logging import LogEvent, log_debug
from ...pricing import CalculateOptions, CostBreakdown
from ..formatters import create_console, format_cost_human, format_json
from ..utils import ExitCode, batch_option, get_pricer, handle_error, model_option

# Fields written in JSON mode.
_JSON_FIELDS = (
    "standard_input_cost",
    "cached_input_cost",
    "output_cost",
    "thinking_cost",
    "grounding_cost",
    "tier_applied",
    "batch_discount",
    "total_cost",
    "batch_mode",
    "warnings",
    "unknown",
)


def _response_json(cost: CostBreakdown) -> Dict[str, Any]:
    data = cost.to_dict()
    return {name: data[name] for name in _JSON_FIELDS}


@click.command()
@click.option(
    "--file", "-f", "file_path", type=click.Path(dir_okay=False), help="Read JSON from file (default: stdin)."
)
@model_option
@batch_option
@click.option("--human", is_flag=True, help="Human-readable output (default: JSON).")
@click.pass_context
def gemini(ctx: click.Context, file_path: Optional[str], model: Optional[str], batch: bool, human: bool) -> None:
    """Calculate the cost of a Gemini API JSON response.

    The response is read from FILE or stdin. The model comes from --model,
    PRICING_DEFAULT_MODEL, or the response's modelVersion, in that order.

    Examples:
      cat response.json | pricing-db gemini
      pricing-db gemini -f response.json --batch --human
    """
    if file_path:
        try:
            with open(file_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            handle_error(e, ExitCode.GENERIC_ERROR)
            return
    else:
        stdin = click.get_binary_stream("stdin")
        if stdin.isatty():
            click.echo(ctx.get_help())
            ctx.exit(ExitCode.SUCCESS)
        raw = stdin.read()

    if not raw.strip():
        handle_error(Exception("No input provided"), ExitCode.INVALID_USAGE)
        return

    try:
        response = parse_gemini_response(raw)
    except InvalidResponseError as e:
        handle_error(e, ExitCode.INVALID_USAGE)
        return

    log_debug(
        LogEvent.COST_CALCULATION,
        "Costing Gemini response",
        model=model or response.model_version,
        batch_mode=batch,
        search_queries=len(response.web_search_queries),
    )
    pricer = get_pricer(ctx)
    cost = calculate_gemini_response_cost(pricer, response, model=model, options=CalculateOptions(batch_mode=batch))

    if human:
        format_cost_human(cost, create_console(no_color=ctx.obj["no_color"]))
    else:
        format_json(_response_json(cost))
