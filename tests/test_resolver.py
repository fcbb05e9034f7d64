"""Tests for exact and prefix identifier resolution."""

import pytest

from pricing_db import Pricer
from pricing_db.catalog import Catalog, Namespace, ProviderRecord, build_catalog
from pricing_db.resolver import MatchKind, is_boundary_match, resolve


@pytest.fixture
def catalog() -> Catalog:
    """Create a catalog with overlapping model families."""
    raw = {
        "provider": "openai",
        "models": {
            "gpt-4": {"input_rate": 30.0, "output_rate": 60.0},
            "gpt-4-turbo": {"input_rate": 10.0, "output_rate": 30.0},
            "gpt-4o": {"input_rate": 2.5, "output_rate": 10.0},
        },
        "image_models": {"dall-e-3": {"per_image_rate": 0.04}},
    }
    return build_catalog([ProviderRecord(raw=raw, filename="openai_pricing.yaml")])


@pytest.mark.parametrize(
    "query, key, expected",
    [
        ("gpt-4", "gpt-4", True),
        ("gpt-4-0613", "gpt-4", True),
        ("gpt-4.5-preview", "gpt-4", True),
        ("gpt-4/latest", "gpt-4", True),
        ("gpt-45-turbo", "gpt-4", False),
        ("gpt-4o", "gpt-4", False),
        ("gpt-4_custom", "gpt-4", False),
        ("gpt-3", "gpt-4", False),
    ],
)
def test_is_boundary_match(query: str, key: str, expected: bool) -> None:
    """Test that prefixes must end at a separator."""
    assert is_boundary_match(query, key) is expected


def test_exact_match(catalog: Catalog) -> None:
    """Test that known identifiers resolve exactly."""
    resolution = resolve(catalog, Namespace.MODELS, "gpt-4o")

    assert resolution.found
    assert resolution.match_kind is MatchKind.EXACT
    assert resolution.key == "gpt-4o"
    assert resolution.pricing.input_rate == 2.5


def test_qualified_exact_match(catalog: Catalog) -> None:
    """Test that qualified identifiers resolve exactly."""
    resolution = resolve(catalog, Namespace.MODELS, "openai/gpt-4")
    assert resolution.match_kind is MatchKind.EXACT
    assert resolution.pricing.input_rate == 30.0


def test_dated_version_resolves_by_prefix(catalog: Catalog) -> None:
    """Test that dated variants inherit their family's pricing."""
    resolution = resolve(catalog, Namespace.MODELS, "gpt-4o-2024-08-06")

    assert resolution.match_kind is MatchKind.PREFIX
    assert resolution.key == "gpt-4o"


def test_longest_prefix_wins(catalog: Catalog) -> None:
    """Test that the most specific known key is chosen."""
    resolution = resolve(catalog, Namespace.MODELS, "gpt-4-turbo-2024-04-09")

    assert resolution.key == "gpt-4-turbo"
    assert resolution.pricing.input_rate == 10.0


def test_prefix_without_boundary_does_not_match(catalog: Catalog) -> None:
    """Test that ``gpt-4`` does not price ``gpt-45-turbo``."""
    resolution = resolve(catalog, Namespace.MODELS, "gpt-45-turbo")

    assert not resolution.found
    assert resolution.match_kind is MatchKind.UNKNOWN
    assert resolution.pricing is None


def test_qualified_prefix_match(catalog: Catalog) -> None:
    """Test that qualified identifiers can carry version suffixes too."""
    resolution = resolve(catalog, Namespace.MODELS, "openai/gpt-4o-mini-2024-07-18")

    assert resolution.match_kind is MatchKind.PREFIX
    assert resolution.key == "openai/gpt-4o"


@pytest.mark.parametrize("identifier", ["", "claude-3", "gpt", "dall-e-3"])
def test_unknown_identifiers(catalog: Catalog, identifier: str) -> None:
    """Test identifiers that resolve to nothing in the models namespace."""
    assert resolve(catalog, Namespace.MODELS, identifier).match_kind is MatchKind.UNKNOWN


def test_image_namespace(catalog: Catalog) -> None:
    """Test resolution in the image model namespace."""
    resolution = resolve(catalog, Namespace.IMAGE_MODELS, "dall-e-3-hd")

    assert resolution.match_kind is MatchKind.PREFIX
    assert resolution.pricing.per_image_rate == 0.04


def test_returned_pricing_cannot_change_catalog(catalog: Catalog) -> None:
    """Test that editing a resolved entry leaves later costs unchanged."""
    pricer = Pricer(catalog)
    resolution = resolve(catalog, Namespace.IMAGE_MODELS, "dall-e-3")
    resolution.pricing.resolutions["hd"] = 99.0

    assert "hd" not in resolve(catalog, Namespace.IMAGE_MODELS, "dall-e-3").pricing.resolutions
    cost = pricer.calculate_image_cost("dall-e-3", 1, resolution="hd")
    assert cost.cost == pytest.approx(0.04)
    assert cost.warnings
