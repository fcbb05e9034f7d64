"""JSON output formatter for CLI."""

import json
import sys
from dataclasses import asdict
from enum import Enum as _Enum
from typing import Any, Dict, List, Optional, TextIO

from ...pricing import CostBreakdown, CreditCost, ImageCost, ProviderPricing
from ...resolver import Resolution


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - Enum -> value (fallback to name)
    - tuple/frozenset -> list
    - Fallback -> str(obj)
    """
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    if isinstance(obj, (tuple, frozenset, set)):
        return list(obj)
    return str(obj)


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def format_cost_json(cost: CostBreakdown) -> Dict[str, Any]:
    """Format a cost breakdown for JSON output (warnings are never null)."""
    data = cost.to_dict()
    data["input_cost"] = cost.input_cost
    return data


def format_image_cost_json(cost: ImageCost) -> Dict[str, Any]:
    """Format an image cost for JSON output."""
    return asdict(cost)


def format_credit_cost_json(cost: CreditCost) -> Dict[str, Any]:
    """Format a credit cost for JSON output."""
    return asdict(cost)


def format_providers_json(providers: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Format the providers summary for JSON output.

    Args:
        providers: One summary mapping per provider

    Returns:
        Formatted data structure
    """
    sorted_providers = sorted(providers, key=lambda p: p["provider"])
    return {"providers": sorted_providers, "count": len(providers)}


def format_provider_json(pricing: ProviderPricing) -> Dict[str, Any]:
    """Format everything loaded for one provider for JSON output."""
    return asdict(pricing)


def format_model_json(name: str, resolution: Resolution, owner: Optional[str]) -> Dict[str, Any]:
    """Format a model lookup for JSON output.

    Args:
        name: The identifier that was looked up
        resolution: Result of resolving ``name``
        owner: Provider owning the matched key, if known

    Returns:
        Formatted data structure
    """
    return {
        "name": name,
        "matched_key": resolution.key,
        "match_kind": resolution.match_kind.value,
        "provider": owner,
        "pricing": asdict(resolution.pricing) if resolution.pricing is not None else None,
    }
