"""Process-wide default pricer and package-level conveniences.

The default instance is built lazily from the configured source (see
:func:`pricing_db.config_paths.resolve_config_dir`) the first time it is
needed. Call :func:`init_default_pricer` at startup to fail fast on broken
configuration instead.
"""

import threading
from typing import List, Optional

from .config import PricerConfig
from .engine import Pricer
from .logging import LogEvent, log_info
from .pricing import CalculateOptions, CostBreakdown, CreditCost, GroundingCost, ModelPricing

_default_pricer: Optional[Pricer] = None
_default_lock = threading.RLock()


def init_default_pricer(config: Optional[PricerConfig] = None) -> Pricer:
    """Build the default pricer now, replacing any existing one.

    Raises:
        ConfigurationError: If the configured pricing data cannot be loaded
    """
    global _default_pricer
    with _default_lock:
        pricer = Pricer.from_config(config)
        _default_pricer = pricer
        log_info(LogEvent.DEFAULT_INSTANCE, f"Initialized default pricer: {pricer.catalog!r}")
        return pricer


def get_default_pricer() -> Pricer:
    """Get the default pricer, initializing it on first use."""
    with _default_lock:
        if _default_pricer is None:
            return init_default_pricer()
        return _default_pricer


def reset_default_pricer() -> None:
    """Drop the default pricer so the next use rebuilds it."""
    global _default_pricer
    with _default_lock:
        _default_pricer = None


def calculate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int = 0,
    batch_mode: bool = False,
) -> CostBreakdown:
    """Calculate a token cost with the default pricer."""
    return get_default_pricer().calculate(
        model,
        input_tokens,
        output_tokens,
        cached_tokens=cached_tokens,
        options=CalculateOptions(batch_mode=batch_mode),
    )


def calculate_grounding_cost(model: str, units: int) -> GroundingCost:
    """Calculate a grounding cost with the default pricer."""
    return get_default_pricer().calculate_grounding(model, units)


def calculate_credit_cost(provider: str, multiplier: str = "") -> CreditCost:
    """Calculate a credit cost with the default pricer."""
    return get_default_pricer().calculate_credit_cost(provider, multiplier)


def get_pricing(model: str) -> Optional[ModelPricing]:
    """Look up model pricing with the default pricer."""
    return get_default_pricer().get_pricing(model)


def list_providers() -> List[str]:
    """List providers known to the default pricer."""
    return get_default_pricer().list_providers()
