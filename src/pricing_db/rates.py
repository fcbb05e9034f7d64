"""Tier and rate selection."""

from dataclasses import dataclass
from typing import Optional, Tuple

from .pricing import DEFAULT_TIER, ImagePricing, ModelPricing


@dataclass(frozen=True)
class RateSelection:
    """Input/output rates chosen for a request, with the tier that supplied them."""

    input_rate: float
    output_rate: float
    tier: str = DEFAULT_TIER


def tier_label(min_units: int) -> str:
    """Human-readable label for a tier threshold.

    >>> tier_label(200000)
    '>200K'
    >>> tier_label(128500)
    '>128.5K'
    """
    if min_units < 1000:
        return f">{min_units}"
    if min_units % 1000 == 0:
        return f">{min_units // 1000}K"
    return f">{min_units / 1000:.1f}K".replace(".0K", "K")


def select_rate(pricing: ModelPricing, total_input_units: int) -> RateSelection:
    """Choose rates for a request of ``total_input_units`` input units.

    Tiers are sorted ascending; the tier with the greatest ``min_units`` not
    above the total applies. Below the first threshold (or without tiers) the
    model's flat rates apply.
    """
    selection = RateSelection(pricing.input_rate, pricing.output_rate, DEFAULT_TIER)
    for tier in pricing.tiers:
        if total_input_units < tier.min_units:
            break
        selection = RateSelection(tier.input_rate, tier.output_rate, tier_label(tier.min_units))
    return selection


def select_image_rate(
    pricing: ImagePricing,
    image_count: int,
    resolution: Optional[str] = None,
) -> Tuple[float, bool]:
    """Choose the per-image rate.

    Returns:
        ``(rate, resolution_matched)``; ``resolution_matched`` is False when a
        resolution was requested but is not configured for the model.
    """
    if resolution is not None and resolution in pricing.resolutions:
        return pricing.resolutions[resolution], True

    rate = pricing.per_image_rate
    for tier in pricing.tiers:
        if image_count < tier.min_images:
            break
        rate = tier.per_image_rate
    return rate, resolution is None
