"""Validation of raw provider pricing records.

A raw record is the mapping parsed from one provider pricing file. Validation
is a pure function: it either returns the typed :class:`ProviderPricing` or
raises :class:`PricingValidationError` / :class:`InvalidConfigFormatError` on
the first problem found, naming the file, the field and the offending value.
"""

import math
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import InvalidConfigFormatError, PricingValidationError
from .pricing import (
    BATCH_CACHE_RULE_ALIASES,
    BatchCacheRule,
    BillingModel,
    CreditPricing,
    GroundingPricing,
    ImagePricing,
    ImageTier,
    ModelPricing,
    PricingTier,
    ProviderMetadata,
    ProviderPricing,
    SubscriptionTier,
)

PRICING_FILE_SUFFIXES = ("_pricing.yaml", "_pricing.yml", "_pricing.json")

# Multiplier names that always mean "no multiplier" in credit calculations.
RESERVED_MULTIPLIER_NAMES = frozenset({"", "base"})


@dataclass(frozen=True)
class ValidationLimits:
    """Sanity ceilings for configured rates.

    Rates above these values are almost always unit mistakes (per-token prices
    entered where per-million prices are expected).
    """

    max_token_rate: float = 10000.0
    max_image_rate: float = 100.0
    max_grounding_rate: float = 1000.0
    max_credit_cost: float = 1000.0


DEFAULT_LIMITS = ValidationLimits()


def provider_id_from_filename(filename: str) -> str:
    """Infer a provider identifier from a pricing file name.

    ``openai_pricing.yaml`` -> ``openai``. Names without a known suffix fall back
    to the file stem.
    """
    name = PurePath(filename).name
    for suffix in PRICING_FILE_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return PurePath(name).stem


class _RecordValidator:
    """Walks one raw record, keeping the file name for error context."""

    def __init__(self, filename: str, limits: ValidationLimits) -> None:
        self.filename = filename
        self.limits = limits

    # ------------------------------------------------------------------
    # Primitive checks
    # ------------------------------------------------------------------

    def fail(self, field: str, value: Any, reason: str) -> PricingValidationError:
        return PricingValidationError(
            f"{self.filename}: {field} {reason}: {value!r}",
            path=self.filename,
            field=field,
            value=value,
        )

    def mapping(self, value: Any, field: str) -> Mapping[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise InvalidConfigFormatError(
                f"{self.filename}: {field} must be a mapping, got {type(value).__name__}",
                path=self.filename,
                expected_type="dict",
            )
        return value

    def sequence(self, value: Any, field: str) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise InvalidConfigFormatError(
                f"{self.filename}: {field} must be a list, got {type(value).__name__}",
                path=self.filename,
                expected_type="list",
            )
        return list(value)

    def number(self, value: Any, field: str) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self.fail(field, value, "must be a number")
        if not math.isfinite(value):
            raise self.fail(field, value, "must be finite")
        if value < 0:
            raise self.fail(field, value, "must not be negative")
        return float(value)

    def rate(self, value: Any, field: str, ceiling: float) -> float:
        rate = self.number(value, field)
        if rate > ceiling:
            raise self.fail(field, value, f"is suspiciously high (max {ceiling})")
        return rate

    def units(self, value: Any, field: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            else:
                raise self.fail(field, value, "must be a whole number")
        if value < 0:
            raise self.fail(field, value, "must not be negative")
        return value

    def required(self, section: Mapping[str, Any], field: str, *keys: str) -> Any:
        for key in keys:
            if key in section and section[key] is not None:
                return section[key]
        raise self.fail(f"{field}.{keys[0]}", None, "is required")

    @staticmethod
    def optional(section: Mapping[str, Any], *keys: str) -> Any:
        for key in keys:
            if section.get(key) is not None:
                return section[key]
        return None

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def model(self, name: str, raw: Any) -> ModelPricing:
        field = f"models.{name}"
        section = self.mapping(raw, field)
        ceiling = self.limits.max_token_rate

        input_rate = self.rate(
            self.required(section, field, "input_rate", "input_per_million"), f"{field}.input_rate", ceiling
        )
        output_rate = self.rate(
            self.required(section, field, "output_rate", "output_per_million"), f"{field}.output_rate", ceiling
        )

        cached_raw = self.optional(section, "cached_input_rate", "cached_input_per_million")
        cached_input_rate = None
        if cached_raw is not None:
            cached_input_rate = self.rate(cached_raw, f"{field}.cached_input_rate", ceiling)

        multiplier_raw = self.optional(section, "cache_multiplier", "cache_read_multiplier")
        cache_multiplier = None
        if multiplier_raw is not None:
            cache_multiplier = self.number(multiplier_raw, f"{field}.cache_multiplier")
            if cache_multiplier > 1.0:
                raise self.fail(
                    f"{field}.cache_multiplier", multiplier_raw, "must be within [0, 1]"
                )
        if cached_input_rate is not None and cache_multiplier is not None:
            raise self.fail(
                f"{field}.cached_input_rate",
                cached_raw,
                "cannot be combined with cache_multiplier",
            )

        batch_raw = self.optional(section, "batch_multiplier")
        batch_multiplier = 1.0
        if batch_raw is not None:
            batch_multiplier = self.number(batch_raw, f"{field}.batch_multiplier")
            if batch_multiplier > 1.0:
                raise self.fail(f"{field}.batch_multiplier", batch_raw, "must not exceed 1.0 (would increase price)")

        rule = BatchCacheRule.INDEPENDENT
        rule_raw = self.optional(section, "batch_cache_rule")
        if rule_raw is not None:
            rule_key = str(rule_raw).strip().lower()
            if rule_key not in BATCH_CACHE_RULE_ALIASES:
                allowed = ", ".join(r.value for r in BatchCacheRule)
                raise self.fail(f"{field}.batch_cache_rule", rule_raw, f"is not one of: {allowed}")
            rule = BATCH_CACHE_RULE_ALIASES[rule_key]

        audio_raw = self.optional(section, "audio_input_rate", "audio_input_per_million")
        audio_input_rate = None
        if audio_raw is not None:
            audio_input_rate = self.rate(audio_raw, f"{field}.audio_input_rate", ceiling)

        return ModelPricing(
            input_rate=input_rate,
            output_rate=output_rate,
            cached_input_rate=cached_input_rate,
            cache_multiplier=cache_multiplier,
            tiers=self.tiers(section.get("tiers"), field),
            batch_multiplier=batch_multiplier,
            batch_cache_rule=rule,
            audio_input_rate=audio_input_rate,
        )

    def tiers(self, raw: Any, field: str) -> Tuple[PricingTier, ...]:
        ceiling = self.limits.max_token_rate
        tiers: List[PricingTier] = []
        for index, raw_tier in enumerate(self.sequence(raw, f"{field}.tiers")):
            tier_field = f"{field}.tiers[{index}]"
            tier = self.mapping(raw_tier, tier_field)
            min_units = self.units(
                self.required(tier, tier_field, "min_units", "threshold_tokens"), f"{tier_field}.min_units"
            )
            if tiers and min_units <= tiers[-1].min_units:
                raise self.fail(
                    f"{tier_field}.min_units",
                    min_units,
                    f"must be greater than the previous tier's {tiers[-1].min_units}",
                )
            tiers.append(
                PricingTier(
                    min_units=min_units,
                    input_rate=self.rate(
                        self.required(tier, tier_field, "input_rate", "input_per_million"),
                        f"{tier_field}.input_rate",
                        ceiling,
                    ),
                    output_rate=self.rate(
                        self.required(tier, tier_field, "output_rate", "output_per_million"),
                        f"{tier_field}.output_rate",
                        ceiling,
                    ),
                )
            )
        return tuple(tiers)

    def image_model(self, name: str, raw: Any) -> ImagePricing:
        field = f"image_models.{name}"
        section = self.mapping(raw, field)
        ceiling = self.limits.max_image_rate

        per_image_rate = self.rate(
            self.required(section, field, "per_image_rate", "price_per_image"), f"{field}.per_image_rate", ceiling
        )

        tiers: List[ImageTier] = []
        for index, raw_tier in enumerate(self.sequence(section.get("tiers"), f"{field}.tiers")):
            tier_field = f"{field}.tiers[{index}]"
            tier = self.mapping(raw_tier, tier_field)
            min_images = self.units(self.required(tier, tier_field, "min_images"), f"{tier_field}.min_images")
            if tiers and min_images <= tiers[-1].min_images:
                raise self.fail(
                    f"{tier_field}.min_images",
                    min_images,
                    f"must be greater than the previous tier's {tiers[-1].min_images}",
                )
            tiers.append(
                ImageTier(
                    min_images=min_images,
                    per_image_rate=self.rate(
                        self.required(tier, tier_field, "per_image_rate", "price_per_image"),
                        f"{tier_field}.per_image_rate",
                        ceiling,
                    ),
                )
            )

        resolutions: Dict[str, float] = {}
        for label, value in self.mapping(section.get("resolutions"), f"{field}.resolutions").items():
            resolutions[str(label)] = self.rate(value, f"{field}.resolutions.{label}", ceiling)

        return ImagePricing(per_image_rate=per_image_rate, tiers=tuple(tiers), resolutions=resolutions)

    def grounding(self, prefix: str, raw: Any) -> GroundingPricing:
        field = f"grounding.{prefix}"
        section = self.mapping(raw, field)

        per_thousand = self.rate(
            self.required(section, field, "per_thousand_queries"),
            f"{field}.per_thousand_queries",
            self.limits.max_grounding_rate,
        )

        billing_model = BillingModel.PER_QUERY
        model_raw = self.optional(section, "billing_model")
        if model_raw is not None:
            try:
                billing_model = BillingModel(str(model_raw).strip().lower())
            except ValueError:
                allowed = ", ".join(m.value for m in BillingModel)
                raise self.fail(f"{field}.billing_model", model_raw, f"is not one of: {allowed}") from None

        batch_ok = section.get("batch_grounding_ok", False)
        if not isinstance(batch_ok, bool):
            raise self.fail(f"{field}.batch_grounding_ok", batch_ok, "must be true or false")

        return GroundingPricing(
            per_thousand_queries=per_thousand,
            billing_model=billing_model,
            batch_grounding_ok=batch_ok,
        )

    def credit_pricing(self, raw: Any) -> Optional[CreditPricing]:
        if raw is None:
            return None
        field = "credit_pricing"
        section = self.mapping(raw, field)
        ceiling = self.limits.max_credit_cost
        base = self.rate(
            self.required(section, field, "base_cost_per_request"), f"{field}.base_cost_per_request", ceiling
        )

        multipliers: Dict[str, float] = {}
        for name, value in self.mapping(section.get("multipliers"), f"{field}.multipliers").items():
            key = str(name)
            if key.strip().lower() in RESERVED_MULTIPLIER_NAMES:
                raise self.fail(f"{field}.multipliers.{key}", value, "uses a reserved multiplier name")
            multipliers[key] = self.rate(value, f"{field}.multipliers.{key}", ceiling)

        return CreditPricing(base_cost_per_request=base, multipliers=multipliers)

    def subscription_tiers(self, raw: Any) -> Dict[str, SubscriptionTier]:
        tiers: Dict[str, SubscriptionTier] = {}
        for name, value in self.mapping(raw, "subscription_tiers").items():
            field = f"subscription_tiers.{name}"
            section = self.mapping(value, field)
            tiers[str(name)] = SubscriptionTier(
                credits=self.units(self.required(section, field, "credits"), f"{field}.credits"),
                price_usd=self.number(self.required(section, field, "price_usd"), f"{field}.price_usd"),
            )
        return tiers

    def metadata(self, raw: Any) -> ProviderMetadata:
        section = self.mapping(raw, "metadata")
        source_urls = [str(url) for url in self.sequence(section.get("source_urls"), "metadata.source_urls")]
        legacy_source = section.get("source")
        if legacy_source and str(legacy_source) not in source_urls:
            source_urls.insert(0, str(legacy_source))
        updated = section.get("updated")
        return ProviderMetadata(
            updated=str(updated) if updated is not None else None,
            source_urls=source_urls,
            notes=[str(note) for note in self.sequence(section.get("notes"), "metadata.notes")],
        )


def validate_provider_record(
    raw: Any,
    filename: str,
    provider: Optional[str] = None,
    limits: ValidationLimits = DEFAULT_LIMITS,
) -> ProviderPricing:
    """Validate one raw provider record and convert it to typed pricing.

    Args:
        raw: Mapping parsed from a provider pricing file
        filename: File name (or other identifier) used in error messages
        provider: Provider identifier to use when the record has no ``provider`` key;
            inferred from ``filename`` when omitted
        limits: Sanity ceilings for rates

    Returns:
        The approved :class:`ProviderPricing`

    Raises:
        InvalidConfigFormatError: If the record or one of its sections has the wrong shape
        PricingValidationError: On the first invalid value
    """
    if raw is None:
        raise InvalidConfigFormatError(f"{filename}: pricing file is empty", path=filename)
    checker = _RecordValidator(filename, limits)
    record = checker.mapping(raw, "record")

    provider_id = record.get("provider") or provider or provider_id_from_filename(filename)
    if not isinstance(provider_id, str) or not provider_id.strip():
        raise checker.fail("provider", provider_id, "must be a non-empty string")
    provider_id = provider_id.strip()
    if "/" in provider_id:
        raise checker.fail("provider", provider_id, "must not contain '/'")

    models = {
        str(name): checker.model(str(name), value)
        for name, value in checker.mapping(record.get("models"), "models").items()
    }
    image_models = {
        str(name): checker.image_model(str(name), value)
        for name, value in checker.mapping(record.get("image_models"), "image_models").items()
    }
    grounding = {
        str(prefix): checker.grounding(str(prefix), value)
        for prefix, value in checker.mapping(record.get("grounding"), "grounding").items()
    }

    billing_type = record.get("billing_type")
    return ProviderPricing(
        provider=provider_id,
        billing_type=str(billing_type) if billing_type is not None else None,
        models=models,
        image_models=image_models,
        grounding=grounding,
        credit_pricing=checker.credit_pricing(record.get("credit_pricing")),
        subscription_tiers=checker.subscription_tiers(record.get("subscription_tiers")),
        metadata=checker.metadata(record.get("metadata")),
    )
