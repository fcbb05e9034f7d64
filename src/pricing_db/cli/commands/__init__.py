"""CLI commands package."""

# Import all command modules to make them available
from . import cost, gemini, models, providers

__all__ = ["cost", "gemini", "models", "providers"]
