#!/usr/bin/env python3
"""Example of basic pricing-db usage."""

import json

from pricing_db import CalculateOptions, Pricer, calculate_gemini_response_cost, parse_gemini_response


def print_cost(pricer, model_name, input_tokens, output_tokens, cached_tokens=0, batch_mode=False):
    """Print the itemized cost of a request.

    Args:
        pricer: Pricer to calculate with
        model_name: Name of the model to price
        input_tokens: Total input tokens
        output_tokens: Output tokens
        cached_tokens: Input tokens served from cache
        batch_mode: Whether to apply batch pricing
    """
    cost = pricer.calculate(
        model_name,
        input_tokens,
        output_tokens,
        cached_tokens=cached_tokens,
        options=CalculateOptions(batch_mode=batch_mode),
    )
    if cost.unknown:
        print(f"Model: {model_name} (not in pricing data)")
        print()
        return

    print(f"Model: {model_name} -> {cost.matched_key} ({cost.match_kind})")
    print(f"  Tier: {cost.tier_applied}")
    print(f"  Input: ${cost.input_cost:.6f} (cached ${cost.cached_input_cost:.6f})")
    print(f"  Output: ${cost.output_cost:.6f}")
    if batch_mode:
        print(f"  Batch discount: ${cost.batch_discount:.6f}")
    print(f"  Total: ${cost.total_cost:.6f}")
    for warning in cost.warnings:
        print(f"  Warning: {warning}")
    print()


def main():
    """Run the example."""
    pricer = Pricer.from_bundled()
    print(f"Loaded {pricer.provider_count()} providers: {', '.join(pricer.list_providers())}")
    print()

    # Versioned names are priced through their model family
    print_cost(pricer, "gpt-4o-2024-08-06", 10_000, 2_000, cached_tokens=4_000)
    print_cost(pricer, "claude-sonnet-4-20250514", 250_000, 4_000)
    print_cost(pricer, "claude-sonnet-4-20250514", 250_000, 4_000, batch_mode=True)
    print_cost(pricer, "not-a-model", 1_000, 1_000)

    # Image and credit pricing
    image = pricer.calculate_image_cost("dall-e-3", 4, resolution="1024x1024")
    print(f"4 dall-e-3 images: ${image.cost:.2f}")
    credit = pricer.calculate_credit_cost("scrapedo", "js_rendering")
    print(f"scrapedo js_rendering request: {credit.credits:g} credits")
    print()

    # Costing a raw Gemini response
    body = {
        "modelVersion": "gemini-2.5-flash",
        "candidates": [{"groundingMetadata": {"webSearchQueries": ["weather in Paris"]}}],
        "usageMetadata": {"promptTokenCount": 1200, "candidatesTokenCount": 300, "thoughtsTokenCount": 150},
    }
    cost = calculate_gemini_response_cost(pricer, parse_gemini_response(json.dumps(body)))
    print("Gemini response:")
    print(f"  {cost.format()}")


if __name__ == "__main__":
    main()
