"""Main CLI application for pricing-db."""

from typing import Optional

import click
import rich_click as rich_click

from ..config_paths import ENV_CONFIG_DIR
from .utils import resolve_format, resolve_log_level, setup_logging

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


@click.group(cls=rich_click.RichGroup, invoke_without_command=True)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    envvar=ENV_CONFIG_DIR,
    help="Directory of *_pricing.yaml files. Defaults to PRICING_DB_CONFIG_DIR, the user config "
    "directory, then the bundled data.",
)
@click.option(
    "--format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print version information.")
@click.pass_context
def app(
    ctx: click.Context,
    config_dir: Optional[str] = None,
    format: Optional[str] = None,
    verbose: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """pricing-db - cost calculator for AI model APIs.

    Computes itemized costs for token, image, grounding and credit usage from
    per-provider pricing files.

    Examples:
      # Cost of a request
      pricing-db cost gpt-4o --input 1000 --output 500 --cached 200

      # Batch pricing for a Gemini response
      pricing-db gemini -f response.json --batch

      # What does a versioned name resolve to?
      pricing-db models get claude-sonnet-4-20250514
    """
    if version:
        from .. import __version__

        click.echo(f"pricing-db version: {__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    setup_logging(resolve_log_level(verbose, debug))

    # Store global options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config_dir": config_dir,
            "format": resolve_format(format),
            "verbose": verbose,
            "debug": debug,
            "no_color": no_color,
        }
    )


# Import and register subcommands (placed after the group is defined to avoid
# circular import issues at runtime.)
from .commands import cost, gemini, models, providers  # noqa: E402

app.add_command(cost.cost)
app.add_command(cost.image)
app.add_command(cost.credit)
app.add_command(gemini.gemini)
app.add_command(providers.providers)
app.add_command(models.models)


if __name__ == "__main__":
    app()
