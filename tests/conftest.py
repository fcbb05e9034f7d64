"""Shared fixtures for pricing-db tests."""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Generator
from unittest.mock import patch

import pytest
import yaml

from pricing_db import Pricer, reset_default_pricer

OPENAI_PRICING: Dict[str, Any] = {
    "provider": "openai",
    "billing_type": "token",
    "models": {
        "gpt-4": {"input_rate": 30.0, "output_rate": 60.0},
        "gpt-4-turbo": {"input_rate": 10.0, "output_rate": 30.0},
        "gpt-4o": {"input_rate": 2.50, "output_rate": 10.0, "cache_multiplier": 0.5, "batch_multiplier": 0.5},
    },
    "image_models": {
        "dall-e-3": {"per_image_rate": 0.04, "resolutions": {"1024x1024": 0.04, "1792x1024": 0.08}},
        "dall-e-2": {
            "per_image_rate": 0.02,
            "tiers": [
                {"min_images": 10, "per_image_rate": 0.018},
                {"min_images": 100, "per_image_rate": 0.015},
            ],
        },
    },
    "metadata": {"updated": "2025-10-01", "source_urls": ["https://openai.com/api/pricing"]},
}

GOOGLE_PRICING: Dict[str, Any] = {
    "provider": "google",
    "billing_type": "token",
    "models": {
        "gemini-3-pro-preview": {
            "input_rate": 2.0,
            "output_rate": 12.0,
            "cache_multiplier": 0.10,
            "batch_multiplier": 0.5,
            "batch_cache_rule": "cache_precedence",
            "tiers": [{"min_units": 200000, "input_rate": 4.0, "output_rate": 18.0}],
        },
        "gemini-2.5-flash": {
            "input_rate": 0.30,
            "output_rate": 2.50,
            "cache_multiplier": 0.10,
            "batch_multiplier": 0.5,
            "batch_cache_rule": "cache_precedence",
        },
    },
    "grounding": {
        "gemini-3": {"per_thousand_queries": 14.0, "billing_model": "per_query"},
        "gemini-2.5": {"per_thousand_queries": 35.0, "billing_model": "per_prompt"},
    },
}

XAI_PRICING: Dict[str, Any] = {
    "provider": "xai",
    "models": {
        "grok-3": {"input_rate": 3.0, "output_rate": 15.0, "cached_input_rate": 0.75},
    },
}

# Unit rates that make the batch/cache interaction easy to read in assertions.
RULES_PRICING: Dict[str, Any] = {
    "provider": "rules",
    "models": {
        "independent": {
            "input_rate": 1.0,
            "output_rate": 2.0,
            "cache_multiplier": 0.10,
            "batch_multiplier": 0.5,
            "batch_cache_rule": "independent",
        },
        "batch-first": {
            "input_rate": 1.0,
            "output_rate": 2.0,
            "cache_multiplier": 0.10,
            "batch_multiplier": 0.5,
            "batch_cache_rule": "batch_precedence",
        },
        "cache-first": {
            "input_rate": 1.0,
            "output_rate": 2.0,
            "cache_multiplier": 0.10,
            "batch_multiplier": 0.5,
            "batch_cache_rule": "cache_precedence",
        },
    },
    "grounding": {
        "independent": {"per_thousand_queries": 10.0, "batch_grounding_ok": True},
    },
}

SCRAPEDO_PRICING: Dict[str, Any] = {
    "provider": "scrapedo",
    "billing_type": "credit",
    "credit_pricing": {
        "base_cost_per_request": 1,
        "multipliers": {"js_rendering": 5, "super_proxy": 10},
    },
    "subscription_tiers": {"hobby": {"credits": 250000, "price_usd": 29.0}},
}

ALL_PRICING = [OPENAI_PRICING, GOOGLE_PRICING, XAI_PRICING, RULES_PRICING, SCRAPEDO_PRICING]


def write_pricing_file(directory: Path, data: Dict[str, Any], filename: str = "") -> Path:
    """Write one provider pricing file as YAML and return its path."""
    path = directory / (filename or f"{data['provider']}_pricing.yaml")
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path) -> Generator[None, None, None]:
    """Keep tests away from the real environment and user config directory."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("PRICING_")}
    user_dir = tmp_path / "user-config"
    with patch.dict(os.environ, env, clear=True):
        with patch("pricing_db.config_paths.platformdirs.user_config_dir", return_value=str(user_dir)):
            reset_default_pricer()
            yield
            reset_default_pricer()


@pytest.fixture
def pricing_dir(tmp_path: Path) -> Path:
    """Create a directory holding the test provider files.

    Returns:
        Path to the directory
    """
    directory = tmp_path / "pricing"
    directory.mkdir()
    for data in ALL_PRICING:
        write_pricing_file(directory, data)
    return directory


@pytest.fixture
def pricer(pricing_dir: Path) -> Pricer:
    """Create a pricer over the test provider files."""
    return Pricer.from_directory(pricing_dir)


@pytest.fixture
def write_pricing() -> Callable[..., Path]:
    """Return a helper writing a provider pricing file into a directory."""
    return write_pricing_file
