"""Tests for error classes."""

from pricing_db.errors import (
    ConfigFileNotFoundError,
    ConfigurationError,
    DuplicateProviderError,
    InvalidConfigFormatError,
    InvalidResponseError,
    PricingError,
    PricingValidationError,
)


class TestErrorClasses:
    """Tests for all error classes."""

    def test_configuration_error(self) -> None:
        """Test ConfigurationError."""
        error = ConfigurationError("Bad config", path="/path/to/openai_pricing.yaml")
        assert error.message == "Bad config"
        assert error.path == "/path/to/openai_pricing.yaml"
        assert str(error) == "Bad config"
        assert isinstance(error, PricingError)

    def test_config_file_not_found_error(self) -> None:
        """Test ConfigFileNotFoundError."""
        error = ConfigFileNotFoundError("No pricing files", path="/empty")
        assert error.path == "/empty"
        assert isinstance(error, ConfigurationError)

    def test_invalid_config_format_error(self) -> None:
        """Test InvalidConfigFormatError."""
        error = InvalidConfigFormatError("Wrong shape", path="x_pricing.yaml", expected_type="list")
        assert error.expected_type == "list"
        assert isinstance(error, ConfigurationError)

    def test_pricing_validation_error(self) -> None:
        """Test PricingValidationError."""
        error = PricingValidationError(
            "negative rate",
            path="openai_pricing.yaml",
            field="models.gpt-4o.input_rate",
            value=-1.0,
        )
        assert error.field == "models.gpt-4o.input_rate"
        assert error.value == -1.0
        assert error.path == "openai_pricing.yaml"
        assert isinstance(error, ConfigurationError)

    def test_duplicate_provider_error(self) -> None:
        """Test DuplicateProviderError."""
        error = DuplicateProviderError("twice", provider="openai", paths=["a.yaml", "b.yaml"])
        assert error.provider == "openai"
        assert error.paths == ["a.yaml", "b.yaml"]
        assert error.path == "b.yaml"

        bare = DuplicateProviderError("twice", provider="openai")
        assert bare.path is None
        assert bare.paths == []

    def test_invalid_response_error(self) -> None:
        """Test InvalidResponseError is not a configuration error."""
        error = InvalidResponseError("not json")
        assert error.message == "not json"
        assert isinstance(error, PricingError)
        assert not isinstance(error, ConfigurationError)
