"""Model inspection commands for the pricing-db CLI."""

from typing import Optional

import click

from ...catalog import Catalog, Namespace
from ..formatters import create_console, format_json, format_model_json, format_model_table
from ..utils import ExitCode, get_pricer, handle_error


def _owner(catalog: Catalog, namespace: Namespace, key: Optional[str]) -> Optional[str]:
    """Provider a resolved key belongs to."""
    if key is None:
        return None
    owner = catalog.owner(namespace, key)
    if owner is None and "/" in key:
        owner = key.split("/", 1)[0]
    return owner


@click.group()
def models() -> None:
    """Inspect model pricing."""
    pass


@models.command()
@click.argument("model_name", type=str)
@click.option("--image", is_flag=True, help="Look the name up among image models.")
@click.pass_context
def get(ctx: click.Context, model_name: str, image: bool = False) -> None:
    """Show the pricing a model identifier resolves to.

    Versioned names resolve to the longest known prefix, e.g.
    gpt-4o-2024-08-06 is priced as gpt-4o.
    """
    pricer = get_pricer(ctx)
    namespace = Namespace.IMAGE_MODELS if image else Namespace.MODELS
    resolution = pricer.resolve_image_model(model_name) if image else pricer.resolve_model(model_name)
    if not resolution.found:
        handle_error(Exception(f"Model '{model_name}' not found"), ExitCode.MODEL_NOT_FOUND)
        return

    owner = _owner(pricer.catalog, namespace, resolution.key)
    if ctx.obj["format"] == "json":
        format_json(format_model_json(model_name, resolution, owner))
    else:
        format_model_table(model_name, resolution, owner, create_console(no_color=ctx.obj["no_color"]))
