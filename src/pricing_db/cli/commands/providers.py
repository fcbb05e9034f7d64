"""Provider inspection commands for the pricing-db CLI."""

from typing import Any, Dict, List

import click

from ...engine import Pricer
from ..formatters import (
    create_console,
    format_json,
    format_provider_json,
    format_provider_table,
    format_providers_json,
    format_providers_table,
)
from ..utils import ExitCode, get_pricer, handle_error


def _provider_summaries(pricer: Pricer) -> List[Dict[str, Any]]:
    summaries = []
    for name in pricer.list_providers():
        pricing = pricer.get_provider_metadata(name)
        if pricing is None:
            continue
        summaries.append(
            {
                "provider": name,
                "billing_type": pricing.billing_type,
                "models": len(pricing.models),
                "image_models": len(pricing.image_models),
                "grounding": len(pricing.grounding),
                "credit_pricing": pricing.credit_pricing is not None,
                "updated": pricing.metadata.updated,
            }
        )
    return summaries


@click.group()
def providers() -> None:
    """Inspect loaded providers."""
    pass


@providers.command(name="list")
@click.pass_context
def list_providers(ctx: click.Context) -> None:
    """List all loaded providers."""
    pricer = get_pricer(ctx)
    try:
        summaries = _provider_summaries(pricer)
        if ctx.obj["format"] == "json":
            format_json(format_providers_json(summaries))
        else:
            format_providers_table(summaries, create_console(no_color=ctx.obj["no_color"]))
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@providers.command()
@click.argument("name", type=str)
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show everything loaded for a provider."""
    pricer = get_pricer(ctx)
    pricing = pricer.get_provider_metadata(name)
    if pricing is None:
        handle_error(Exception(f"Provider '{name}' not found"), ExitCode.MODEL_NOT_FOUND)
        return

    if ctx.obj["format"] == "json":
        format_json(format_provider_json(pricing))
    else:
        format_provider_table(pricing, create_console(no_color=ctx.obj["no_color"]))
