"""Configuration path handling for the pricing database.

Provider pricing files are looked up following the XDG Base Directory
Specification for user-specific configuration, with an environment override
and the bundled package data as the final fallback.
"""

import os
from pathlib import Path
from typing import Optional, Union

import platformdirs

from .validation import PRICING_FILE_SUFFIXES

# Application name used for directory paths
APP_NAME = "pricing-db"

# Environment variable names
ENV_CONFIG_DIR = "PRICING_DB_CONFIG_DIR"
ENV_DEFAULT_MODEL = "PRICING_DEFAULT_MODEL"
ENV_BATCH_MODE = "PRICING_BATCH_MODE"
ENV_LOG_LEVEL = "PRICING_LOG_LEVEL"


def get_user_config_dir() -> Path:
    """Get the path to the user's config directory for this application."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def is_pricing_file(path: Path) -> bool:
    """Return True if ``path`` names a provider pricing file."""
    return path.is_file() and path.name.endswith(PRICING_FILE_SUFFIXES) and not path.name.startswith(".")


def has_pricing_files(directory: Path) -> bool:
    """Return True if ``directory`` exists and contains at least one pricing file."""
    if not directory.is_dir():
        return False
    return any(is_pricing_file(p) for p in directory.iterdir())


def resolve_config_dir(explicit: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Resolve the directory to load provider pricing files from.

    Precedence:
        1. ``explicit`` argument
        2. ``PRICING_DB_CONFIG_DIR`` environment variable
        3. User config directory, if it contains pricing files

    Returns:
        The directory, or None to use the bundled package data
    """
    if explicit:
        return Path(explicit)

    env_path = os.environ.get(ENV_CONFIG_DIR)
    if env_path:
        return Path(env_path)

    user_dir = get_user_config_dir()
    if has_pricing_files(user_dir):
        return user_dir

    return None


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean environment variable (``1/true/yes/on`` are true)."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")
