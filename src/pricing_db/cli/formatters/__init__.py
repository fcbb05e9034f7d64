"""CLI formatters package."""

from .json import (
    format_cost_json,
    format_credit_cost_json,
    format_image_cost_json,
    format_json,
    format_model_json,
    format_provider_json,
    format_providers_json,
)
from .table import (
    create_console,
    format_cost_human,
    format_cost_table,
    format_credit_cost_table,
    format_image_cost_table,
    format_model_table,
    format_provider_table,
    format_providers_table,
)

__all__ = [
    "format_json",
    "format_cost_json",
    "format_image_cost_json",
    "format_credit_cost_json",
    "format_providers_json",
    "format_provider_json",
    "format_model_json",
    "create_console",
    "format_cost_table",
    "format_cost_human",
    "format_image_cost_table",
    "format_credit_cost_table",
    "format_providers_table",
    "format_provider_table",
    "format_model_table",
]
