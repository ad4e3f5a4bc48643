"""Unit tests for exception hierarchy."""

from answer_eval.core.exceptions import (
    BaseError,
    ConfigurationError,
    DocumentFetchError,
    ErrorCategory,
    ExternalServiceError,
    NoProviderConfigured,
    ProviderNotFound,
    UnsupportedFormatError,
    UnsupportedProviderError,
)


class TestBaseError:
    """Tests for BaseError class."""

    def test_base_error_creation(self):
        """Test BaseError keeps all structured fields."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.DOCUMENT,
            details={"detail": "Additional info"},
            retryable=True,
        )

        assert str(error) == "Test error"
        assert error.error_code == "TEST_ERROR"
        assert error.category == ErrorCategory.DOCUMENT
        assert error.details == {"detail": "Additional info"}
        assert error.retryable is True

    def test_base_error_to_dict(self):
        """Test conversion to Problem Details style dict."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.CONFIGURATION,
            details={"detail": "Additional info"},
        )

        result = error.to_dict()

        assert result["type"] == "/errors/TEST_ERROR"
        assert result["title"] == "Test error"
        assert result["detail"] == "Additional info"
        assert result["category"] == "configuration"
        assert result["retryable"] is False


class TestConfigurationErrors:
    """Tests for provider configuration errors."""

    def test_no_provider_configured(self):
        """Test NoProviderConfigured names the task."""
        error = NoProviderConfigured("evaluation")

        assert isinstance(error, ConfigurationError)
        assert error.task == "evaluation"
        assert error.error_code == "NO_PROVIDER_CONFIGURED"
        assert "evaluation" in error.message
        assert error.retryable is False

    def test_provider_not_found(self):
        """Test ProviderNotFound records the excluded provider."""
        error = ProviderNotFound("text_extraction", excluding="agentic")

        assert error.details["excluding"] == "agentic"
        assert error.category == ErrorCategory.CONFIGURATION

    def test_unsupported_provider(self):
        """Test UnsupportedProviderError names provider and capability."""
        error = UnsupportedProviderError("mystery", "evaluation")

        assert error.details == {"provider": "mystery", "capability": "evaluation"}
        assert "mystery" in str(error)


class TestExternalServiceError:
    """Tests for provider failure errors."""

    def test_error_code_normalizes_kind(self):
        """Test hyphenated kinds become an upper snake case code."""
        error = ExternalServiceError(service_name="gemini", error_type="rate-limited")

        assert error.error_code == "GEMINI_RATE_LIMITED"
        assert error.service_name == "gemini"
        assert error.error_type == "rate-limited"
        assert error.details["service"] == "gemini"

    def test_retryable_kinds(self):
        """Test transient kinds are retryable and auth failures are not."""
        assert ExternalServiceError("openai", "timeout").retryable is True
        assert ExternalServiceError("openai", "circuit_open").retryable is True
        assert ExternalServiceError("openai", "auth-failed").retryable is False

    def test_keeps_extra_details(self):
        """Test caller details are merged with service info."""
        error = ExternalServiceError("openai", "provider-error", details={"http_code": 502})

        assert error.details["http_code"] == 502
        assert error.details["error_type"] == "provider-error"


class TestDocumentErrors:
    """Tests for document level errors."""

    def test_fetch_error_is_retryable(self):
        error = DocumentFetchError("https://files.example.com/a.png", "HTTP 503")

        assert error.retryable is True
        assert error.category == ErrorCategory.DOCUMENT
        assert "HTTP 503" in error.message

    def test_unsupported_format(self):
        error = UnsupportedFormatError("text/html")

        assert error.details["content_type"] == "text/html"
        assert error.error_code == "UNSUPPORTED_FORMAT"
