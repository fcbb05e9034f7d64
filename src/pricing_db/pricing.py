"""Pricing data structures for the pricing database.

Rates are expressed in currency units (USD) per million tokens for token
pricing, per image for image pricing, per thousand queries for grounding, and
in credits per request for credit pricing.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# Divisor for per-million token rates.
TOKENS_PER_MILLION = 1_000_000.0

# Divisor for per-thousand grounding rates.
QUERIES_PER_THOUSAND = 1000.0

# Decimal places kept on totals (nano-cents).
COST_PRECISION = 9

# Largest representable unit counter (signed 64-bit, the wire format of usage records).
MAX_UNITS = 2**63 - 1

# Cached-token rate as a fraction of the input rate when a model configures neither
# cache_multiplier nor cached_input_rate.
DEFAULT_CACHE_MULTIPLIER = 0.10

# Tier label reported when no volume tier applies.
DEFAULT_TIER = "default"


class BatchCacheRule(str, Enum):
    """How the batch discount interacts with the cache discount."""

    INDEPENDENT = "independent"
    BATCH_PRECEDENCE = "batch_precedence"
    CACHE_PRECEDENCE = "cache_precedence"


# Configuration spellings accepted for each rule.
BATCH_CACHE_RULE_ALIASES: Dict[str, BatchCacheRule] = {
    "independent": BatchCacheRule.INDEPENDENT,
    "stack": BatchCacheRule.INDEPENDENT,
    "batch_precedence": BatchCacheRule.BATCH_PRECEDENCE,
    "cache_precedence": BatchCacheRule.CACHE_PRECEDENCE,
}


class BillingModel(str, Enum):
    """Unit in which grounding usage is counted."""

    PER_QUERY = "per_query"
    PER_PROMPT = "per_prompt"


@dataclass(frozen=True)
class PricingTier:
    """Volume bracket with its own rates, selected by total input units."""

    min_units: int
    input_rate: float
    output_rate: float


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a model.

    - input_rate / output_rate: cost per million tokens
    - cached_input_rate: absolute rate for cached input tokens (optional)
    - cache_multiplier: fraction of the input rate charged for cached tokens (optional)
    - tiers: volume tiers, strictly ascending by ``min_units``
    - batch_multiplier: factor applied in batch mode (1.0 = no discount)
    - batch_cache_rule: how batch and cache discounts combine
    - audio_input_rate: reference only, never used in calculations
    """

    input_rate: float
    output_rate: float
    cached_input_rate: Optional[float] = None
    cache_multiplier: Optional[float] = None
    tiers: Tuple[PricingTier, ...] = ()
    batch_multiplier: float = 1.0
    batch_cache_rule: BatchCacheRule = BatchCacheRule.INDEPENDENT
    audio_input_rate: Optional[float] = None

    @property
    def effective_cache_multiplier(self) -> float:
        """Cache multiplier applied to the selected input rate."""
        if self.cache_multiplier is not None:
            return self.cache_multiplier
        return DEFAULT_CACHE_MULTIPLIER


@dataclass(frozen=True)
class ImageTier:
    """Volume bracket for image generation, selected by image count."""

    min_images: int
    per_image_rate: float


@dataclass(frozen=True)
class ImagePricing:
    """Per-image pricing for an image generation model.

    ``resolutions`` maps a resolution label (e.g. ``"1024x1024"``) to its own
    per-image rate and takes priority over count tiers.
    """

    per_image_rate: float
    tiers: Tuple[ImageTier, ...] = ()
    resolutions: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class GroundingPricing:
    """Search grounding pricing for a model-name prefix."""

    per_thousand_queries: float
    billing_model: BillingModel = BillingModel.PER_QUERY
    batch_grounding_ok: bool = False


@dataclass(frozen=True)
class CreditPricing:
    """Credit-based pricing for non-token providers (flat cost per request)."""

    base_cost_per_request: float
    multipliers: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SubscriptionTier:
    """A subscription plan offered by a credit-based provider."""

    credits: int
    price_usd: float


@dataclass(frozen=True)
class ProviderMetadata:
    """Source and update information for a provider's pricing data."""

    updated: Optional[str] = None
    source_urls: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderPricing:
    """All pricing data for a single provider."""

    provider: str
    billing_type: Optional[str] = None
    models: Dict[str, ModelPricing] = field(default_factory=dict)
    image_models: Dict[str, ImagePricing] = field(default_factory=dict)
    grounding: Dict[str, GroundingPricing] = field(default_factory=dict)
    credit_pricing: Optional[CreditPricing] = None
    subscription_tiers: Dict[str, SubscriptionTier] = field(default_factory=dict)
    metadata: ProviderMetadata = field(default_factory=ProviderMetadata)


@dataclass(frozen=True)
class CalculateOptions:
    """Options for cost calculations."""

    batch_mode: bool = False


@dataclass(frozen=True)
class TokenUsage:
    """Detailed token breakdown for a single request.

    ``cached_tokens`` is a subset of the input (prompt plus tool-use) tokens.
    ``thinking_tokens`` are billed at the output rate.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    cached_tokens: int = 0
    thinking_tokens: int = 0
    tool_use_tokens: int = 0

    @classmethod
    def from_gemini(cls, usage_metadata: Dict[str, Any]) -> "TokenUsage":
        """Build a usage record from a Gemini ``usageMetadata`` mapping."""

        def _count(key: str) -> int:
            value = usage_metadata.get(key) or 0
            try:
                return int(value)
            except (TypeError, ValueError):
                return 0

        return cls(
            prompt_tokens=_count("promptTokenCount"),
            completion_tokens=_count("candidatesTokenCount"),
            cached_tokens=_count("cachedContentTokenCount"),
            thinking_tokens=_count("thoughtsTokenCount"),
            tool_use_tokens=_count("toolUsePromptTokenCount"),
        )


@dataclass
class CostBreakdown:
    """Itemized cost of a token-based request.

    When ``unknown`` is set no pricing could be resolved and every cost field
    is zero. ``warnings`` lists advisory conditions (clamped counters,
    grounding excluded in batch mode) in the order they were detected.
    """

    model: str = ""
    standard_input_cost: float = 0.0
    cached_input_cost: float = 0.0
    output_cost: float = 0.0
    thinking_cost: float = 0.0
    grounding_cost: float = 0.0
    tier_applied: str = ""
    batch_discount: float = 0.0
    total_cost: float = 0.0
    batch_mode: bool = False
    warnings: List[str] = field(default_factory=list)
    unknown: bool = False
    matched_key: Optional[str] = None
    match_kind: str = "unknown"

    @property
    def input_cost(self) -> float:
        """Standard plus cached input cost."""
        return self.standard_input_cost + self.cached_input_cost

    def format(self) -> str:
        """Return a human-readable one-line summary."""
        if self.unknown:
            return f"Cost: unknown (model {self.model!r} not in pricing data)"
        return (
            f"Input: ${self.input_cost:.4f} | Output: ${self.output_cost + self.thinking_cost:.4f} | "
            f"Grounding: ${self.grounding_cost:.4f} | Total: ${self.total_cost:.4f}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready dictionary (warnings always a list)."""
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return data


@dataclass
class ImageCost:
    """Cost of an image generation request."""

    model: str
    image_count: int = 0
    cost: float = 0.0
    rate: float = 0.0
    unknown: bool = False
    warnings: List[str] = field(default_factory=list)


@dataclass
class GroundingCost:
    """Cost of search grounding units for a model."""

    model: str
    units: int = 0
    cost: float = 0.0
    billing_model: Optional[BillingModel] = None
    unknown: bool = False


@dataclass
class CreditCost:
    """Credits charged for one request to a credit-based provider.

    ``unknown`` is set when the provider or the multiplier name is not
    configured; an unrecognized multiplier is billed at the base cost.
    """

    provider: str
    multiplier: str = ""
    credits: float = 0.0
    unknown: bool = False
