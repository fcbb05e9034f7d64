"""Cost calculation engine.

This module provides the :class:`Pricer` class, which resolves model,
image-model and grounding identifiers against an immutable :class:`Catalog`
and turns usage counters into itemized costs.

Typical usage:

    from pricing_db import Pricer, CalculateOptions

    pricer = Pricer.from_bundled()
    cost = pricer.calculate("gpt-4o-2024-08-06", 1_000, 500, cached_tokens=200)
    batch = pricer.calculate("claude-sonnet-4", 1_000, 500, options=CalculateOptions(batch_mode=True))

No calculation raises for business input. Unknown identifiers, negative or
overflowing counters and grounding excluded in batch mode are reported through
the ``unknown`` flag and ``warnings`` of the returned objects. Only catalog
construction raises (:class:`ConfigurationError`).
"""

from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from .catalog import Catalog, Namespace, ProviderRecord, build_catalog
from .config import PricerConfig
from .logging import LogEvent, log_debug, log_info, log_warning
from .pricing import (
    COST_PRECISION,
    MAX_UNITS,
    QUERIES_PER_THOUSAND,
    TOKENS_PER_MILLION,
    BatchCacheRule,
    CalculateOptions,
    CostBreakdown,
    CreditCost,
    GroundingCost,
    GroundingPricing,
    ImageCost,
    ImagePricing,
    ModelPricing,
    ProviderPricing,
    TokenUsage,
)
from .rates import select_image_rate, select_rate
from .resolver import Resolution, resolve, resolve_shared
from .rwlock import ReadWriteLock
from .sources import BundledSource, DirectorySource, ProviderSource, RecordsSource
from .validation import RESERVED_MULTIPLIER_NAMES

OVERFLOW_WARNING = "token count overflow detected - using clamped value"
GROUNDING_BATCH_WARNING = "grounding cost excluded in batch mode for this model"


def add_units_safe(a: int, b: int) -> Tuple[int, bool]:
    """Add two non-negative unit counters, clamping at :data:`MAX_UNITS`.

    Returns:
        ``(sum, overflowed)``
    """
    total = a + b
    if total > MAX_UNITS:
        return MAX_UNITS, True
    return total, False


def sanitize_units(value: Any) -> Tuple[int, bool]:
    """Clamp a raw counter into ``[0, MAX_UNITS]``.

    Non-numeric values count as zero; positive infinity clamps like any
    other over-range value. Returns ``(units, overflowed)``.
    """
    try:
        units = int(value or 0)
    except OverflowError:
        # Only infinities fail this way.
        return (MAX_UNITS, True) if value > 0 else (0, False)
    except (TypeError, ValueError):
        return 0, False
    if units < 0:
        return 0, False
    if units > MAX_UNITS:
        return MAX_UNITS, True
    return units, False


def round_cost(value: float, precision: int = COST_PRECISION) -> float:
    """Round a cost to ``precision`` decimal places to suppress float noise."""
    return round(value, precision)


class Pricer:
    """Calculates costs across all providers in a catalog.

    Safe for concurrent use: the catalog is immutable and every call reads it
    under the shared side of a reader-writer lock. :meth:`replace_catalog`
    swaps in a new, fully built catalog under the exclusive side.
    """

    def __init__(self, catalog: Catalog) -> None:
        """Initialize a pricer over an already built catalog.

        Args:
            catalog: The catalog to price against
        """
        self._catalog = catalog
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return f"Pricer({self.catalog!r})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_source(cls, source: ProviderSource, config: Optional[PricerConfig] = None) -> "Pricer":
        """Build a pricer from any record source.

        Raises:
            ConfigurationError: If the source cannot be read or any record is invalid
        """
        config = config or PricerConfig()
        records = source.records()
        log_debug(LogEvent.DATA_SOURCE, f"Loaded {len(records)} pricing records from {source!r}")
        return cls(build_catalog(records, limits=config.limits))

    @classmethod
    def from_records(cls, records: List[ProviderRecord], config: Optional[PricerConfig] = None) -> "Pricer":
        """Build a pricer from in-memory raw records."""
        return cls.from_source(RecordsSource(records), config)

    @classmethod
    def from_directory(cls, path: Union[str, Path], config: Optional[PricerConfig] = None) -> "Pricer":
        """Build a pricer from the pricing files in a directory."""
        return cls.from_source(DirectorySource(path), config)

    @classmethod
    def from_bundled(cls, config: Optional[PricerConfig] = None) -> "Pricer":
        """Build a pricer from the pricing files shipped with the package."""
        return cls.from_source(BundledSource(), config)

    @classmethod
    def from_config(cls, config: Optional[PricerConfig] = None) -> "Pricer":
        """Build a pricer from the configured directory, falling back to bundled data."""
        config = config or PricerConfig()
        config_dir = config.resolved_config_dir()
        if config_dir is None:
            return cls.from_bundled(config)
        return cls.from_directory(config_dir, config)

    # ------------------------------------------------------------------
    # Catalog access
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        """The current (immutable) catalog."""
        with self._lock.read():
            return self._catalog

    def replace_catalog(self, catalog: Catalog) -> None:
        """Swap in a new, fully built catalog.

        In-flight calls finish against the catalog they started with.
        """
        with self._lock.write():
            self._catalog = catalog
        log_info(LogEvent.CATALOG_BUILD, f"Replaced pricing catalog: {catalog!r}")

    # ------------------------------------------------------------------
    # Token costs
    # ------------------------------------------------------------------

    def calculate(
        self,
        model: str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int = 0,
        options: Optional[CalculateOptions] = None,
    ) -> CostBreakdown:
        """Calculate the cost of a token-based request.

        Args:
            model: Model identifier; qualified (``provider/model``), bare, or versioned
            input_tokens: Total input tokens, cached ones included
            output_tokens: Output tokens
            cached_tokens: Input tokens served from cache (clamped to ``input_tokens``)
            options: Calculation options (batch mode)

        Returns:
            Itemized cost breakdown; ``unknown`` is set if the model cannot be resolved
        """
        usage = TokenUsage(prompt_tokens=input_tokens, completion_tokens=output_tokens, cached_tokens=cached_tokens)
        return self.calculate_usage(model, usage, options=options)

    def calculate_usage(
        self,
        model: str,
        usage: TokenUsage,
        grounding_units: int = 0,
        options: Optional[CalculateOptions] = None,
    ) -> CostBreakdown:
        """Calculate the cost of a request from a detailed usage record.

        Token math:
            - total input = prompt tokens + tool-use tokens (overflow clamped)
            - standard input = total input - cached tokens
            - thinking tokens are billed at the output rate

        ``grounding_units`` must be counted in the unit of the model's grounding
        entry: search queries for ``per_query``, grounded prompts for ``per_prompt``.

        Args:
            model: Model identifier
            usage: Token counters for the request
            grounding_units: Grounding queries or prompts
            options: Calculation options (batch mode)

        Returns:
            Itemized cost breakdown
        """
        batch_mode = bool(options is not None and options.batch_mode)
        with self._lock.read():
            return self._calculate_usage(self._catalog, model, usage, grounding_units, batch_mode)

    def _calculate_usage(
        self,
        catalog: Catalog,
        model: str,
        usage: TokenUsage,
        grounding_units: Any,
        batch_mode: bool,
    ) -> CostBreakdown:
        resolution = resolve_shared(catalog, Namespace.MODELS, model)
        if not resolution.found:
            log_debug(LogEvent.COST_CALCULATION, f"No pricing for model '{model}'", model=model)
            return CostBreakdown(model=model, batch_mode=batch_mode, unknown=True)
        pricing: ModelPricing = resolution.pricing  # type: ignore[assignment]

        warnings: List[str] = []
        overflowed = False

        prompt, over = sanitize_units(usage.prompt_tokens)
        overflowed |= over
        tool_use, over = sanitize_units(usage.tool_use_tokens)
        overflowed |= over
        requested_cached, over = sanitize_units(usage.cached_tokens)
        overflowed |= over
        output, over = sanitize_units(usage.completion_tokens)
        overflowed |= over
        thinking, over = sanitize_units(usage.thinking_tokens)
        overflowed |= over

        total_input, over = add_units_safe(prompt, tool_use)
        overflowed |= over
        if overflowed:
            warnings.append(OVERFLOW_WARNING)
            log_warning(LogEvent.COST_CALCULATION, f"Token count overflow for model '{model}', clamped", model=model)

        selection = select_rate(pricing, total_input)

        cached = min(requested_cached, total_input)
        if requested_cached > total_input:
            warnings.append(f"cached tokens ({requested_cached}) exceed input tokens ({total_input}) - clamped")
        standard = total_input - cached

        standard_input_cost = standard * selection.input_rate / TOKENS_PER_MILLION
        if pricing.cached_input_rate is not None:
            cached_input_cost = cached * pricing.cached_input_rate / TOKENS_PER_MILLION
        else:
            cached_input_cost = cached * selection.input_rate * pricing.effective_cache_multiplier / TOKENS_PER_MILLION
        output_cost = output * selection.output_rate / TOKENS_PER_MILLION
        thinking_cost = thinking * selection.output_rate / TOKENS_PER_MILLION

        batch_discount = 0.0
        if batch_mode and pricing.batch_multiplier != 1.0:
            multiplier = pricing.batch_multiplier
            undiscounted = standard_input_cost + output_cost + thinking_cost
            standard_input_cost *= multiplier
            output_cost *= multiplier
            thinking_cost *= multiplier
            discounted = standard_input_cost + output_cost + thinking_cost
            if pricing.batch_cache_rule is not BatchCacheRule.CACHE_PRECEDENCE:
                # Independent and batch-precedence also discount the (cache-discounted) cached line.
                undiscounted += cached_input_cost
                cached_input_cost *= multiplier
                discounted += cached_input_cost
            batch_discount = undiscounted - discounted

        grounding_cost = 0.0
        units, over = sanitize_units(grounding_units)
        if units > 0:
            grounding = resolve_shared(catalog, Namespace.GROUNDING, model)
            if not grounding.found:
                warnings.append(f"no grounding pricing for model {model!r} - grounding cost excluded")
            elif batch_mode and not grounding.pricing.batch_grounding_ok:  # type: ignore[union-attr]
                warnings.append(GROUNDING_BATCH_WARNING)
            else:
                grounding_cost = self._grounding_cost(grounding.pricing, units)  # type: ignore[arg-type]
            if over and OVERFLOW_WARNING not in warnings:
                warnings.append(OVERFLOW_WARNING)

        total_cost = round_cost(standard_input_cost + cached_input_cost + output_cost + thinking_cost + grounding_cost)

        return CostBreakdown(
            model=model,
            standard_input_cost=standard_input_cost,
            cached_input_cost=cached_input_cost,
            output_cost=output_cost,
            thinking_cost=thinking_cost,
            grounding_cost=grounding_cost,
            tier_applied=selection.tier,
            batch_discount=batch_discount,
            total_cost=total_cost,
            batch_mode=batch_mode,
            warnings=warnings,
            matched_key=resolution.key,
            match_kind=resolution.match_kind.value,
        )

    # ------------------------------------------------------------------
    # Grounding, image and credit costs
    # ------------------------------------------------------------------

    @staticmethod
    def _grounding_cost(pricing: GroundingPricing, units: int) -> float:
        return units * pricing.per_thousand_queries / QUERIES_PER_THOUSAND

    def calculate_grounding(self, model: str, units: int) -> GroundingCost:
        """Calculate the cost of grounding units for a model, outside any batch.

        Args:
            model: Model identifier, matched against grounding prefixes
            units: Queries (``per_query``) or grounded prompts (``per_prompt``)
        """
        count, _ = sanitize_units(units)
        with self._lock.read():
            resolution = resolve_shared(self._catalog, Namespace.GROUNDING, model)
        if not resolution.found:
            return GroundingCost(model=model, units=count, unknown=True)
        pricing: GroundingPricing = resolution.pricing  # type: ignore[assignment]
        return GroundingCost(
            model=model,
            units=count,
            cost=round_cost(self._grounding_cost(pricing, count)),
            billing_model=pricing.billing_model,
        )

    def calculate_image_cost(self, model: str, image_count: int, resolution: Optional[str] = None) -> ImageCost:
        """Calculate the cost of generating ``image_count`` images.

        Args:
            model: Image model identifier (prefix matching applies)
            image_count: Number of images; zero or negative costs nothing
            resolution: Optional resolution label with its own configured rate
        """
        count, _ = sanitize_units(image_count)
        with self._lock.read():
            match = resolve_shared(self._catalog, Namespace.IMAGE_MODELS, model)
        if not match.found:
            return ImageCost(model=model, image_count=count, unknown=True)
        pricing: ImagePricing = match.pricing  # type: ignore[assignment]

        rate, resolution_matched = select_image_rate(pricing, count, resolution)
        warnings = []
        if not resolution_matched:
            warnings.append(f"resolution {resolution!r} not configured for {model!r} - using default rate")
        return ImageCost(
            model=model,
            image_count=count,
            cost=round_cost(count * rate),
            rate=rate,
            warnings=warnings,
        )

    def calculate_credit_cost(self, provider: str, multiplier: str = "") -> CreditCost:
        """Calculate the credits charged for one request to a credit-based provider.

        ``""`` or ``"base"`` returns the base cost. A configured multiplier name
        multiplies the base cost by its factor. An unrecognized name returns the
        base cost with ``unknown`` set, never zero.

        Args:
            provider: Provider identifier
            multiplier: Multiplier name (e.g. ``"js_rendering"``)
        """
        name = (multiplier or "").strip()
        with self._lock.read():
            credit = self._catalog._credit(provider)
        if credit is None:
            return CreditCost(provider=provider, multiplier=name, unknown=True)

        base = credit.base_cost_per_request
        if name.lower() in RESERVED_MULTIPLIER_NAMES:
            return CreditCost(provider=provider, multiplier=name, credits=base)
        if name not in credit.multipliers:
            log_debug(
                LogEvent.COST_CALCULATION,
                f"Unknown credit multiplier '{name}' for provider '{provider}', billing base cost",
                provider=provider,
                multiplier=name,
            )
            return CreditCost(provider=provider, multiplier=name, credits=base, unknown=True)
        return CreditCost(provider=provider, multiplier=name, credits=base * credit.multipliers[name])

    # ------------------------------------------------------------------
    # Read-only accessors (all return copies)
    # ------------------------------------------------------------------

    def _resolve_copy(self, namespace: Namespace, identifier: str) -> Resolution:
        with self._lock.read():
            return resolve(self._catalog, namespace, identifier)

    def resolve_model(self, model: str) -> Resolution:
        """Resolve a model identifier, returning a copy of its pricing."""
        return self._resolve_copy(Namespace.MODELS, model)

    def resolve_image_model(self, model: str) -> Resolution:
        """Resolve an image model identifier, returning a copy of its pricing."""
        return self._resolve_copy(Namespace.IMAGE_MODELS, model)

    def resolve_grounding(self, model: str) -> Resolution:
        """Resolve a model identifier against grounding prefixes."""
        return self._resolve_copy(Namespace.GROUNDING, model)

    def get_pricing(self, model: str) -> Optional[ModelPricing]:
        """Return a copy of the pricing for a model, if known."""
        return self.resolve_model(model).pricing  # type: ignore[return-value]

    def get_image_pricing(self, model: str) -> Optional[ImagePricing]:
        """Return a copy of the pricing for an image model, if known."""
        return self.resolve_image_model(model).pricing  # type: ignore[return-value]

    def get_grounding_pricing(self, model: str) -> Optional[GroundingPricing]:
        """Return a copy of the grounding pricing that applies to a model, if any."""
        return self.resolve_grounding(model).pricing  # type: ignore[return-value]

    def get_provider_metadata(self, provider: str) -> Optional[ProviderPricing]:
        """Return a deep copy of everything loaded for a provider."""
        return self.catalog.provider(provider)

    def list_providers(self) -> List[str]:
        """Return all loaded provider identifiers in alphabetical order."""
        return self.catalog.providers()

    def ambiguous_models(self) -> List[str]:
        """Return bare model identifiers defined by more than one provider."""
        return sorted(self.catalog.ambiguous(Namespace.MODELS))

    def model_count(self) -> int:
        """Return the number of model keys (qualified and bare)."""
        return self.catalog.count(Namespace.MODELS)

    def image_model_count(self) -> int:
        """Return the number of image model keys (qualified and bare)."""
        return self.catalog.count(Namespace.IMAGE_MODELS)

    def provider_count(self) -> int:
        """Return the number of providers loaded."""
        return len(self.catalog.providers())
