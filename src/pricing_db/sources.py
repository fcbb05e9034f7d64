"""Sources of raw provider pricing records.

A source only supplies raw records; validation and indexing happen in
:func:`pricing_db.catalog.build_catalog`. Files are named
``<provider>_pricing.yaml`` (``.yml`` and ``.json`` are accepted too).
"""

import json
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, List, Protocol, Union

import yaml

from .catalog import ProviderRecord
from .config_paths import is_pricing_file
from .errors import ConfigFileNotFoundError, ConfigurationError, InvalidConfigFormatError
from .logging import LogEvent, get_logger, log_debug
from .validation import PRICING_FILE_SUFFIXES

logger = get_logger(__name__)

BUNDLED_DATA_PACKAGE = "pricing_db.data"


class ProviderSource(Protocol):
    """Anything that can supply raw provider records."""

    def records(self) -> List[ProviderRecord]:
        """Return the raw records, one per provider file."""
        ...


def parse_pricing_content(content: str, filename: str) -> Any:
    """Parse the text of one pricing file.

    ``.json`` files are decoded as JSON, everything else as YAML.

    Raises:
        InvalidConfigFormatError: If the content is empty, not YAML/JSON, or not a mapping
    """
    if not content.strip():
        raise InvalidConfigFormatError(f"{filename}: pricing file is empty", path=filename)
    try:
        if filename.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidConfigFormatError(f"{filename}: parse error: {e}", path=filename) from e
    if not isinstance(data, dict):
        raise InvalidConfigFormatError(
            f"{filename}: expected a mapping at the top level, got {type(data).__name__}",
            path=filename,
            expected_type="dict",
        )
    return data


class DirectorySource:
    """Pricing files in a directory on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.path)!r})"

    def records(self) -> List[ProviderRecord]:
        if not self.path.is_dir():
            raise ConfigFileNotFoundError(f"Pricing directory not found: {self.path}", path=str(self.path))

        files = sorted((p for p in self.path.iterdir() if is_pricing_file(p)), key=lambda p: p.name)
        if not files:
            raise ConfigFileNotFoundError(f"No pricing files found in {self.path}", path=str(self.path))

        records = []
        for file_path in files:
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigurationError(f"Failed to read {file_path.name}: {e}", path=str(file_path)) from e
            records.append(ProviderRecord(raw=parse_pricing_content(content, file_path.name), filename=file_path.name))
            log_debug(LogEvent.DATA_SOURCE, f"Read pricing file {file_path.name}", path=str(file_path))
        return records


class BundledSource:
    """Pricing files shipped inside the package."""

    def __init__(self, package: str = BUNDLED_DATA_PACKAGE) -> None:
        self.package = package

    def __repr__(self) -> str:
        return f"BundledSource({self.package!r})"

    def records(self) -> List[ProviderRecord]:
        data_package = resources.files(self.package)
        entries = sorted(
            (e for e in data_package.iterdir() if e.is_file() and e.name.endswith(PRICING_FILE_SUFFIXES)),
            key=lambda e: e.name,
        )
        if not entries:
            raise ConfigFileNotFoundError(f"No bundled pricing files in {self.package}", path=self.package)

        logger.info(f"Using bundled pricing data from {self.package}")
        records = []
        for entry in entries:
            raw = parse_pricing_content(entry.read_text(encoding="utf-8"), entry.name)
            records.append(ProviderRecord(raw=raw, filename=entry.name))
        return records


class RecordsSource:
    """In-memory raw records, for embedding callers and tests."""

    def __init__(self, records: Iterable[ProviderRecord]) -> None:
        self._records = list(records)

    def __repr__(self) -> str:
        return f"RecordsSource({len(self._records)} records)"

    def records(self) -> List[ProviderRecord]:
        return list(self._records)
