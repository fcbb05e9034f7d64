"""Tests for provider record validation."""

import copy
from typing import Any, Dict

import pytest

from pricing_db.errors import ConfigurationError, InvalidConfigFormatError, PricingValidationError
from pricing_db.pricing import BatchCacheRule, BillingModel
from pricing_db.validation import ValidationLimits, provider_id_from_filename, validate_provider_record

BASE_RECORD: Dict[str, Any] = {
    "provider": "acme",
    "models": {
        "acme-large": {"input_rate": 3.0, "output_rate": 15.0},
    },
}


def _record(**overrides: Any) -> Dict[str, Any]:
    record = copy.deepcopy(BASE_RECORD)
    record.update(overrides)
    return record


def _model(**fields: Any) -> Dict[str, Any]:
    model = {"input_rate": 1.0, "output_rate": 2.0}
    model.update(fields)
    return _record(models={"m": model})


def test_valid_record_is_converted() -> None:
    """Test that a valid record produces typed pricing."""
    pricing = validate_provider_record(BASE_RECORD, "acme_pricing.yaml")

    assert pricing.provider == "acme"
    model = pricing.models["acme-large"]
    assert model.input_rate == 3.0
    assert model.output_rate == 15.0
    assert model.batch_multiplier == 1.0
    assert model.batch_cache_rule is BatchCacheRule.INDEPENDENT
    assert model.cache_multiplier is None
    assert model.effective_cache_multiplier == pytest.approx(0.10)


def test_provider_inferred_from_filename() -> None:
    """Test that the provider comes from the file name when the record has none."""
    record = _record()
    del record["provider"]

    assert validate_provider_record(record, "acme_pricing.yaml").provider == "acme"
    assert validate_provider_record(record, "x.yaml", provider="override").provider == "override"


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("openai_pricing.yaml", "openai"),
        ("google_pricing.yml", "google"),
        ("xai_pricing.json", "xai"),
        ("/some/dir/groq_pricing.yaml", "groq"),
        ("custom.yaml", "custom"),
    ],
)
def test_provider_id_from_filename(filename: str, expected: str) -> None:
    """Test provider identifiers inferred from file names."""
    assert provider_id_from_filename(filename) == expected


def test_legacy_key_names_accepted() -> None:
    """Test that older key spellings are accepted."""
    record = _record(
        models={
            "legacy": {
                "input_per_million": 2.0,
                "output_per_million": 4.0,
                "cache_read_multiplier": 0.25,
                "tiers": [{"threshold_tokens": 1000, "input_per_million": 3.0, "output_per_million": 6.0}],
            }
        },
        image_models={"img": {"price_per_image": 0.05}},
    )

    pricing = validate_provider_record(record, "acme_pricing.yaml")

    model = pricing.models["legacy"]
    assert model.input_rate == 2.0
    assert model.cache_multiplier == 0.25
    assert model.tiers[0].min_units == 1000
    assert pricing.image_models["img"].per_image_rate == 0.05


def test_empty_record_rejected() -> None:
    """Test that an empty record is a format error."""
    with pytest.raises(InvalidConfigFormatError):
        validate_provider_record(None, "acme_pricing.yaml")


def test_non_mapping_section_rejected() -> None:
    """Test that a section of the wrong shape is a format error."""
    with pytest.raises(InvalidConfigFormatError) as exc_info:
        validate_provider_record(_record(models=["gpt-4"]), "acme_pricing.yaml")

    assert exc_info.value.path == "acme_pricing.yaml"
    assert isinstance(exc_info.value, ConfigurationError)


@pytest.mark.parametrize(
    "fields, bad_field",
    [
        ({"input_rate": -1.0}, "models.m.input_rate"),
        ({"output_rate": float("inf")}, "models.m.output_rate"),
        ({"input_rate": float("nan")}, "models.m.input_rate"),
        ({"input_rate": "cheap"}, "models.m.input_rate"),
        ({"input_rate": True}, "models.m.input_rate"),
        ({"input_rate": 20000.0}, "models.m.input_rate"),
        ({"cache_multiplier": 1.5}, "models.m.cache_multiplier"),
        ({"cache_multiplier": -0.1}, "models.m.cache_multiplier"),
        ({"batch_multiplier": 1.5}, "models.m.batch_multiplier"),
        ({"batch_cache_rule": "whatever"}, "models.m.batch_cache_rule"),
        ({"cached_input_rate": 0.5, "cache_multiplier": 0.1}, "models.m.cached_input_rate"),
    ],
)
def test_invalid_model_values_rejected(fields: Dict[str, Any], bad_field: str) -> None:
    """Test that invalid model values name the file and the field."""
    with pytest.raises(PricingValidationError) as exc_info:
        validate_provider_record(_model(**fields), "acme_pricing.yaml")

    error = exc_info.value
    assert error.field == bad_field
    assert error.path == "acme_pricing.yaml"
    assert "acme_pricing.yaml" in str(error)


def test_missing_required_rate_rejected() -> None:
    """Test that a model without an output rate is rejected."""
    with pytest.raises(PricingValidationError) as exc_info:
        validate_provider_record(_record(models={"m": {"input_rate": 1.0}}), "acme_pricing.yaml")

    assert exc_info.value.field == "models.m.output_rate"


def test_zero_rates_allowed() -> None:
    """Test that free models are valid."""
    pricing = validate_provider_record(_model(input_rate=0, output_rate=0), "acme_pricing.yaml")
    assert pricing.models["m"].input_rate == 0.0


def test_custom_ceiling() -> None:
    """Test that the rate ceiling is configurable."""
    record = _model(input_rate=50.0)
    limits = ValidationLimits(max_token_rate=10.0)

    with pytest.raises(PricingValidationError):
        validate_provider_record(record, "acme_pricing.yaml", limits=limits)
    assert validate_provider_record(record, "acme_pricing.yaml").models["m"].input_rate == 50.0


def test_stack_alias_means_independent() -> None:
    """Test the alternative spelling of the independent rule."""
    pricing = validate_provider_record(_model(batch_cache_rule="stack"), "acme_pricing.yaml")
    assert pricing.models["m"].batch_cache_rule is BatchCacheRule.INDEPENDENT


def test_tiers_must_ascend() -> None:
    """Test that tier thresholds must be strictly ascending."""
    tiers = [
        {"min_units": 200000, "input_rate": 2.0, "output_rate": 4.0},
        {"min_units": 100000, "input_rate": 3.0, "output_rate": 6.0},
    ]
    with pytest.raises(PricingValidationError) as exc_info:
        validate_provider_record(_model(tiers=tiers), "acme_pricing.yaml")

    assert exc_info.value.field == "models.m.tiers[1].min_units"


def test_duplicate_tier_threshold_rejected() -> None:
    """Test that two tiers cannot share a threshold."""
    tiers = [
        {"min_units": 1000, "input_rate": 2.0, "output_rate": 4.0},
        {"min_units": 1000, "input_rate": 3.0, "output_rate": 6.0},
    ]
    with pytest.raises(PricingValidationError):
        validate_provider_record(_model(tiers=tiers), "acme_pricing.yaml")


def test_image_model_validation() -> None:
    """Test image model tiers, resolutions and ceilings."""
    record = _record(
        image_models={
            "img": {
                "per_image_rate": 0.04,
                "tiers": [{"min_images": 10, "per_image_rate": 0.03}],
                "resolutions": {"1024x1024": 0.05},
            }
        }
    )
    image = validate_provider_record(record, "acme_pricing.yaml").image_models["img"]
    assert image.tiers[0].min_images == 10
    assert image.resolutions == {"1024x1024": 0.05}

    with pytest.raises(PricingValidationError):
        validate_provider_record(_record(image_models={"img": {"per_image_rate": 500.0}}), "acme_pricing.yaml")

    unordered = _record(
        image_models={
            "img": {
                "per_image_rate": 0.04,
                "tiers": [
                    {"min_images": 10, "per_image_rate": 0.03},
                    {"min_images": 5, "per_image_rate": 0.02},
                ],
            }
        }
    )
    with pytest.raises(PricingValidationError):
        validate_provider_record(unordered, "acme_pricing.yaml")


def test_grounding_validation() -> None:
    """Test grounding billing models and flags."""
    record = _record(grounding={"acme": {"per_thousand_queries": 35, "billing_model": "per_prompt"}})
    grounding = validate_provider_record(record, "acme_pricing.yaml").grounding["acme"]
    assert grounding.billing_model is BillingModel.PER_PROMPT
    assert grounding.batch_grounding_ok is False

    with pytest.raises(PricingValidationError):
        validate_provider_record(
            _record(grounding={"acme": {"per_thousand_queries": 35, "billing_model": "per_hour"}}),
            "acme_pricing.yaml",
        )
    with pytest.raises(PricingValidationError):
        validate_provider_record(
            _record(grounding={"acme": {"per_thousand_queries": 35, "batch_grounding_ok": "yes"}}),
            "acme_pricing.yaml",
        )


def test_credit_pricing_validation() -> None:
    """Test credit pricing and reserved multiplier names."""
    record = _record(credit_pricing={"base_cost_per_request": 1, "multipliers": {"js_rendering": 5}})
    credit = validate_provider_record(record, "acme_pricing.yaml").credit_pricing
    assert credit is not None
    assert credit.base_cost_per_request == 1.0
    assert credit.multipliers == {"js_rendering": 5.0}

    reserved = _record(credit_pricing={"base_cost_per_request": 1, "multipliers": {"base": 2}})
    with pytest.raises(PricingValidationError) as exc_info:
        validate_provider_record(reserved, "acme_pricing.yaml")
    assert exc_info.value.field == "credit_pricing.multipliers.base"


@pytest.mark.parametrize("provider", ["   ", "acme/eu", 42])
def test_invalid_provider_identifier(provider: Any) -> None:
    """Test that provider identifiers must be non-empty and slash-free."""
    with pytest.raises(PricingValidationError):
        validate_provider_record(_record(provider=provider), "x.yaml")


def test_metadata_legacy_source_folded() -> None:
    """Test that a single legacy source URL joins the source list."""
    record = _record(metadata={"updated": "2025-01-01", "source": "https://a.example", "notes": ["n"]})
    metadata = validate_provider_record(record, "acme_pricing.yaml").metadata

    assert metadata.updated == "2025-01-01"
    assert metadata.source_urls == ["https://a.example"]
    assert metadata.notes == ["n"]


def test_subscription_tiers() -> None:
    """Test subscription tier parsing."""
    record = _record(subscription_tiers={"hobby": {"credits": 250000, "price_usd": 29}})
    tiers = validate_provider_record(record, "acme_pricing.yaml").subscription_tiers

    assert tiers["hobby"].credits == 250000
    assert tiers["hobby"].price_usd == 29.0


@pytest.mark.parametrize(
    "overrides, bad_field",
    [
        ({"grounding": {"acme": {"per_thousand_queries": 35000}}}, "grounding.acme.per_thousand_queries"),
        ({"credit_pricing": {"base_cost_per_request": 5000}}, "credit_pricing.base_cost_per_request"),
        (
            {"credit_pricing": {"base_cost_per_request": 1, "multipliers": {"js": 2500}}},
            "credit_pricing.multipliers.js",
        ),
    ],
)
def test_grounding_and_credit_ceilings(overrides: Dict[str, Any], bad_field: str) -> None:
    """Test that grounding rates and credit costs have sanity ceilings too."""
    with pytest.raises(PricingValidationError) as exc_info:
        validate_provider_record(_record(**overrides), "acme_pricing.yaml")
    assert exc_info.value.field == bad_field

    limits = ValidationLimits(max_grounding_rate=100000.0, max_credit_cost=10000.0)
    assert validate_provider_record(_record(**overrides), "acme_pricing.yaml", limits=limits)
