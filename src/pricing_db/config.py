"""Configuration for pricer construction."""

from pathlib import Path
from typing import Optional, Union

from .config_paths import resolve_config_dir
from .validation import ValidationLimits


class PricerConfig:
    """Configuration for building a pricer."""

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        max_token_rate: float = 10000.0,
        max_image_rate: float = 100.0,
        max_grounding_rate: float = 1000.0,
        max_credit_cost: float = 1000.0,
    ):
        """Initialize pricer configuration.

        Args:
            config_dir: Directory holding ``*_pricing.yaml`` files. If None, the
                        ``PRICING_DB_CONFIG_DIR`` environment variable, the user
                        config directory and finally the bundled data are tried.
            max_token_rate: Highest accepted rate per million tokens.
            max_image_rate: Highest accepted rate per image.
            max_grounding_rate: Highest accepted grounding rate per thousand queries.
            max_credit_cost: Highest accepted credit base cost or multiplier.
        """
        self.config_dir = config_dir

        # Ceilings catch per-token prices entered as per-million prices; they cannot be disabled.
        for name, value in (
            ("max_token_rate", max_token_rate),
            ("max_image_rate", max_image_rate),
            ("max_grounding_rate", max_grounding_rate),
            ("max_credit_cost", max_credit_cost),
        ):
            if value <= 0:
                raise ValueError(f"{name} must be positive")
        self.max_token_rate = float(max_token_rate)
        self.max_image_rate = float(max_image_rate)
        self.max_grounding_rate = float(max_grounding_rate)
        self.max_credit_cost = float(max_credit_cost)

    @property
    def limits(self) -> ValidationLimits:
        """Validation ceilings derived from this configuration."""
        return ValidationLimits(
            max_token_rate=self.max_token_rate,
            max_image_rate=self.max_image_rate,
            max_grounding_rate=self.max_grounding_rate,
            max_credit_cost=self.max_credit_cost,
        )

    def resolved_config_dir(self) -> Optional[Path]:
        """Directory to load from, or None for bundled data."""
        return resolve_config_dir(self.config_dir)
