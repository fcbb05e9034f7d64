"""Error types for the pricing database.

Only construction-time problems are raised as exceptions. Anomalies in the
usage records passed to cost calculations (unknown models, negative counters,
cached tokens above the input total) are reported in-band on the result
objects and never raise.
"""

from typing import Any, List, Optional


class PricingError(Exception):
    """Base class for all pricing-related errors.

    This is the parent class for all pricing-specific exceptions.
    """

    pass


class ConfigurationError(PricingError):
    """Base class for configuration-related errors.

    This is raised for errors related to loading, parsing, or validating
    provider pricing files. A catalog is never produced when it is raised.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path (or file name) of the pricing file that caused the error
        """
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when no pricing files can be found in a source.

    Examples:
        >>> try:
        ...     Pricer.from_directory("/empty")
        ... except ConfigFileNotFoundError as e:
        ...     print(f"No pricing files in: {e.path}")
    """

    pass


class InvalidConfigFormatError(ConfigurationError):
    """Raised when a pricing file has an invalid structure.

    Examples:
        >>> try:
        ...     Pricer.from_directory("configs")
        ... except InvalidConfigFormatError as e:
        ...     print(f"Invalid pricing file {e.path}: expected {e.expected_type}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_type: str = "dict",
    ) -> None:
        """Initialize invalid format error.

        Args:
            message: Error message
            path: Optional path to the pricing file
            expected_type: Expected type of the offending section
        """
        super().__init__(message, path)
        self.expected_type = expected_type


class PricingValidationError(ConfigurationError):
    """Raised when a pricing value fails validation.

    Carries the file, the dotted field location and the offending value so an
    operator can fix the configuration without re-running under a debugger.

    Examples:
        >>> try:
        ...     validate_provider_record(raw, "openai_pricing.yaml")
        ... except PricingValidationError as e:
        ...     print(f"{e.path}: {e.field} = {e.value!r}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        """Initialize pricing validation error.

        Args:
            message: Error message
            path: Pricing file the value came from
            field: Dotted location of the field (e.g. ``models.gpt-4o.input_rate``)
            value: The value that failed validation
        """
        super().__init__(message, path)
        self.field = field
        self.value = value


class DuplicateProviderError(ConfigurationError):
    """Raised when two pricing files declare the same provider identifier."""

    def __init__(self, message: str, provider: str, paths: Optional[List[str]] = None) -> None:
        """Initialize duplicate provider error.

        Args:
            message: Error message
            provider: The provider identifier declared more than once
            paths: Files that declared it
        """
        super().__init__(message, path=paths[-1] if paths else None)
        self.provider = provider
        self.paths = list(paths or [])


class InvalidResponseError(PricingError):
    """Raised when an API response handed to an adapter cannot be parsed.

    Examples:
        >>> try:
        ...     parse_gemini_response(b"not json")
        ... except InvalidResponseError as e:
        ...     print(f"Bad response: {e}")
    """

    def __init__(self, message: str) -> None:
        """Initialize invalid response error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message
