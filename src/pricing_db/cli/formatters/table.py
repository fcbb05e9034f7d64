"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...pricing import CostBreakdown, CreditCost, ImageCost, ImagePricing, ModelPricing, ProviderPricing
from ...resolver import Resolution


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    return Console(file=output, no_color=no_color)


def _usd(value: float) -> str:
    return f"${value:.6f}"


def _print_warnings(warnings: List[str], console: Console) -> None:
    if not warnings:
        return
    console.print()
    console.print("[bold yellow]Warnings:[/bold yellow]")
    for warning in warnings:
        console.print(f"  - {warning}", markup=False)


def format_cost_table(cost: CostBreakdown, console: Optional[Console] = None) -> None:
    """Format a cost breakdown as a Rich table.

    Args:
        cost: The cost breakdown
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    if cost.unknown:
        console.print(f"[bold red]Model '{cost.model}' not found in pricing data[/bold red]")
        return

    title = f"Cost: {cost.model}"
    if cost.matched_key and cost.matched_key != cost.model:
        title += f" (priced as {cost.matched_key})"
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Line", style="cyan")
    table.add_column("Cost", justify="right")

    table.add_row("Standard input", _usd(cost.standard_input_cost))
    table.add_row("Cached input", _usd(cost.cached_input_cost))
    table.add_row("Output", _usd(cost.output_cost))
    table.add_row("Thinking", _usd(cost.thinking_cost))
    if cost.grounding_cost:
        table.add_row("Grounding", _usd(cost.grounding_cost))
    if cost.batch_mode:
        table.add_row("Batch discount", Text(f"-{_usd(cost.batch_discount)}", style="green"))
    table.add_row("Total", Text(_usd(cost.total_cost), style="bold"))

    console.print(table)
    console.print(f"[bold]Tier:[/bold] {cost.tier_applied}")
    _print_warnings(cost.warnings, console)


def format_cost_human(cost: CostBreakdown, console: Optional[Console] = None) -> None:
    """Print a cost breakdown as plain labelled lines.

    Args:
        cost: The cost breakdown
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    console.print("[bold]Pricing Breakdown[/bold]")
    if cost.unknown:
        console.print("[bold red]WARNING: Model not found in pricing database[/bold red]")
        console.print()

    console.print(f"Tier: {cost.tier_applied or 'standard'}")
    if cost.batch_mode:
        console.print("Batch Mode: enabled")

    console.print()
    console.print("Input Costs:")
    console.print(f"  Standard:  {_usd(cost.standard_input_cost)}")
    console.print(f"  Cached:    {_usd(cost.cached_input_cost)}")
    console.print()
    console.print("Output Costs:")
    console.print(f"  Output:    {_usd(cost.output_cost)}")
    console.print(f"  Thinking:  {_usd(cost.thinking_cost)}")
    if cost.grounding_cost > 0:
        console.print()
        console.print(f"Grounding:   {_usd(cost.grounding_cost)}")
    console.print()
    console.print(f"Total:       {_usd(cost.total_cost)}")
    _print_warnings(cost.warnings, console)


def format_image_cost_table(cost: ImageCost, console: Optional[Console] = None) -> None:
    """Format an image generation cost as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title=f"Image cost: {cost.model}", show_header=True, header_style="bold magenta")
    table.add_column("Images", justify="right")
    table.add_column("Rate", justify="right")
    table.add_column("Cost", justify="right")
    table.add_row(str(cost.image_count), _usd(cost.rate), Text(_usd(cost.cost), style="bold"))

    console.print(table)
    _print_warnings(cost.warnings, console)


def format_credit_cost_table(cost: CreditCost, console: Optional[Console] = None) -> None:
    """Format a credit cost as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title=f"Credit cost: {cost.provider}", show_header=True, header_style="bold magenta")
    table.add_column("Multiplier", style="cyan")
    table.add_column("Credits", justify="right")
    table.add_column("Known", justify="center")
    status = Text("✗", style="red") if cost.unknown else Text("✓", style="green")
    table.add_row(cost.multiplier or "base", f"{cost.credits:g}", status)

    console.print(table)


def format_providers_table(providers: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """Format the providers summary as a Rich table.

    Args:
        providers: One summary mapping per provider
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    table = Table(title="Providers", show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Billing", style="yellow")
    table.add_column("Models", justify="right")
    table.add_column("Image\nModels", justify="right")
    table.add_column("Grounding", justify="right")
    table.add_column("Updated", style="dim")

    for summary in sorted(providers, key=lambda p: p["provider"]):
        table.add_row(
            summary["provider"],
            summary.get("billing_type") or "N/A",
            str(summary.get("models", 0)),
            str(summary.get("image_models", 0)),
            str(summary.get("grounding", 0)),
            summary.get("updated") or "N/A",
        )

    console.print(table)


def _model_rate_row(name: str, pricing: ModelPricing) -> List[str]:
    if pricing.cached_input_rate is not None:
        cache = f"${pricing.cached_input_rate}"
    else:
        cache = f"{pricing.effective_cache_multiplier:.0%}"
    batch = "N/A" if pricing.batch_multiplier == 1.0 else f"{pricing.batch_multiplier:g}x"
    return [name, f"${pricing.input_rate}", f"${pricing.output_rate}", cache, batch, str(len(pricing.tiers))]


def _image_rate_row(name: str, pricing: ImagePricing) -> List[str]:
    resolutions = ", ".join(sorted(pricing.resolutions)) or "N/A"
    return [name, f"${pricing.per_image_rate}", str(len(pricing.tiers)), resolutions]


def format_provider_table(pricing: ProviderPricing, console: Optional[Console] = None) -> None:
    """Format everything loaded for one provider as Rich tables."""
    if console is None:
        console = create_console()

    console.print(f"[bold]Provider:[/bold] {pricing.provider}")
    console.print(f"[bold]Billing:[/bold] {pricing.billing_type or 'N/A'}")
    console.print(f"[bold]Updated:[/bold] {pricing.metadata.updated or 'N/A'}")
    for url in pricing.metadata.source_urls:
        console.print(f"[bold]Source:[/bold] {url}")

    if pricing.models:
        table = Table(title="Models (per million tokens)", show_header=True, header_style="bold magenta")
        for column in ("Model", "Input", "Output", "Cached", "Batch", "Tiers"):
            table.add_column(column, style="cyan" if column == "Model" else None, no_wrap=True)
        for name in sorted(pricing.models):
            table.add_row(*_model_rate_row(name, pricing.models[name]))
        console.print(table)

    if pricing.image_models:
        table = Table(title="Image models (per image)", show_header=True, header_style="bold magenta")
        for column in ("Model", "Rate", "Tiers", "Resolutions"):
            table.add_column(column, style="cyan" if column == "Model" else None)
        for name in sorted(pricing.image_models):
            table.add_row(*_image_rate_row(name, pricing.image_models[name]))
        console.print(table)

    if pricing.grounding:
        table = Table(title="Grounding (per 1000 units)", show_header=True, header_style="bold magenta")
        for column in ("Prefix", "Rate", "Billing", "Batch OK"):
            table.add_column(column, style="cyan" if column == "Prefix" else None)
        for prefix in sorted(pricing.grounding):
            grounding = pricing.grounding[prefix]
            table.add_row(
                prefix,
                f"${grounding.per_thousand_queries}",
                grounding.billing_model.value,
                "✓" if grounding.batch_grounding_ok else "✗",
            )
        console.print(table)

    if pricing.credit_pricing is not None:
        credit = pricing.credit_pricing
        console.print(f"[bold]Credits per request:[/bold] {credit.base_cost_per_request:g}")
        for name in sorted(credit.multipliers):
            console.print(f"  {name}: x{credit.multipliers[name]:g}")

    if pricing.subscription_tiers:
        table = Table(title="Subscription tiers", show_header=True, header_style="bold magenta")
        table.add_column("Tier", style="cyan")
        table.add_column("Credits", justify="right")
        table.add_column("Price", justify="right")
        for name, tier in sorted(pricing.subscription_tiers.items(), key=lambda item: item[1].price_usd):
            table.add_row(name, f"{tier.credits:,}", f"${tier.price_usd:.2f}")
        console.print(table)

    for note in pricing.metadata.notes:
        console.print(f"[dim]Note: {note}[/dim]")


def format_model_table(
    name: str, resolution: Resolution, owner: Optional[str], console: Optional[Console] = None
) -> None:
    """Format a model lookup as a Rich table."""
    if console is None:
        console = create_console()

    pricing = resolution.pricing
    console.print(f"[bold]Model:[/bold] {name}")
    console.print(f"[bold]Matched:[/bold] {resolution.key} ({resolution.match_kind.value})")
    console.print(f"[bold]Provider:[/bold] {owner or 'N/A'}")

    if isinstance(pricing, ModelPricing):
        table = Table(show_header=True, header_style="bold magenta")
        for column in ("Model", "Input", "Output", "Cached", "Batch", "Tiers"):
            table.add_column(column, style="cyan" if column == "Model" else None, no_wrap=True)
        table.add_row(*_model_rate_row(resolution.key or name, pricing))
        console.print(table)
        for tier in pricing.tiers:
            console.print(f"  >= {tier.min_units:,} input tokens: ${tier.input_rate} / ${tier.output_rate}")
    elif isinstance(pricing, ImagePricing):
        table = Table(show_header=True, header_style="bold magenta")
        for column in ("Model", "Rate", "Tiers", "Resolutions"):
            table.add_column(column, style="cyan" if column == "Model" else None)
        table.add_row(*_image_rate_row(resolution.key or name, pricing))
        console.print(table)
