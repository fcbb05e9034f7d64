"""Pricing database and cost calculator for AI model APIs.

This package loads per-provider pricing files into an immutable catalog and
computes itemized costs for token-based, image-generation, search-grounding
and credit-based usage. Model identifiers resolve by exact match first and by
longest boundary-aligned prefix second, so dated or suffixed versions inherit
their family's pricing.
"""

# Version of the package
try:
    from importlib.metadata import version as _version

    __version__ = _version("pricing-db")
except ImportError:
    raise ImportError(
        "Failed to determine package version. This package requires Python 3.8+ "
        "where importlib.metadata is available, or must be installed as a package."
    )

# Import main components for easier access
from .catalog import Catalog, Namespace, ProviderRecord, build_catalog
from .config import PricerConfig
from .default import (
    calculate_cost,
    calculate_credit_cost,
    calculate_grounding_cost,
    get_default_pricer,
    get_pricing,
    init_default_pricer,
    list_providers,
    reset_default_pricer,
)
from .engine import Pricer
from .errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    DuplicateProviderError,
    InvalidConfigFormatError,
    InvalidResponseError,
    PricingError,
    PricingValidationError,
)
from .gemini import GeminiResponse, calculate_gemini_response_cost, parse_gemini_response
from .pricing import (
    BatchCacheRule,
    BillingModel,
    CalculateOptions,
    CostBreakdown,
    CreditCost,
    CreditPricing,
    GroundingCost,
    GroundingPricing,
    ImageCost,
    ImagePricing,
    ImageTier,
    ModelPricing,
    PricingTier,
    ProviderMetadata,
    ProviderPricing,
    SubscriptionTier,
    TokenUsage,
)
from .resolver import MatchKind, Resolution
from .sources import BundledSource, DirectorySource, RecordsSource

# Define public API
__all__ = [
    # Engine
    "Pricer",
    "PricerConfig",
    "Catalog",
    "Namespace",
    "ProviderRecord",
    "build_catalog",
    "MatchKind",
    "Resolution",
    # Sources
    "BundledSource",
    "DirectorySource",
    "RecordsSource",
    # Default instance
    "init_default_pricer",
    "get_default_pricer",
    "reset_default_pricer",
    "calculate_cost",
    "calculate_grounding_cost",
    "calculate_credit_cost",
    "get_pricing",
    "list_providers",
    # Gemini responses
    "GeminiResponse",
    "parse_gemini_response",
    "calculate_gemini_response_cost",
    # Data model
    "BatchCacheRule",
    "BillingModel",
    "CalculateOptions",
    "CostBreakdown",
    "CreditCost",
    "CreditPricing",
    "GroundingCost",
    "GroundingPricing",
    "ImageCost",
    "ImagePricing",
    "ImageTier",
    "ModelPricing",
    "PricingTier",
    "ProviderMetadata",
    "ProviderPricing",
    "SubscriptionTier",
    "TokenUsage",
    # Errors
    "PricingError",
    "ConfigurationError",
    "ConfigFileNotFoundError",
    "InvalidConfigFormatError",
    "PricingValidationError",
    "DuplicateProviderError",
    "InvalidResponseError",
]
