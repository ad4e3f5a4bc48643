"""Custom exception hierarchy for the answer evaluation pipeline.

All exceptions inherit from BaseError and carry structured error
information (code, category, retryability) so callers can log or map
them without string matching.

Only configuration errors are meant to escape the public pipeline API.
Provider failures are recovered inside the pipeline through the fallback
provider or the fallback evaluator.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CONFIGURATION = "configuration"
    EXTERNAL_SERVICE = "external_service"
    DOCUMENT = "document"


class BaseError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        details: Additional context (dict)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to a Problem Details style dict.

        Returns:
            Dict containing standardized error information
        """
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "category": self.category.value,
            "retryable": self.retryable,
        }


class ConfigurationError(BaseError):
    """Base for provider configuration errors.

    These are the only errors surfaced to pipeline callers, so that the
    caller can decide whether to block a submission or queue it for later.
    """

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
            **kwargs,
        )


class NoProviderConfigured(ConfigurationError):
    """No active provider is preferred for the requested task.

    Args:
        task: Task name (e.g. "text_extraction")
    """

    def __init__(self, task: str):
        super().__init__(
            message=f"No active AI provider configured for task: {task}",
            error_code="NO_PROVIDER_CONFIGURED",
            details={"task": task},
        )
        self.task = task


class ProviderNotFound(ConfigurationError):
    """No fallback provider exists for the requested task.

    Args:
        task: Task name
        excluding: Name of the provider that was excluded from the search
    """

    def __init__(self, task: str, excluding: Optional[str] = None):
        super().__init__(
            message=f"No fallback AI provider available for task: {task}",
            error_code="PROVIDER_NOT_FOUND",
            details={"task": task, "excluding": excluding},
        )
        self.task = task


class UnsupportedProviderError(ConfigurationError):
    """A configured provider has no adapter for the requested capability.

    Args:
        provider: Provider name from configuration
        capability: Capability that was requested ("extract", "classify", "evaluate")
    """

    def __init__(self, provider: str, capability: str):
        super().__init__(
            message=f"Provider '{provider}' does not support {capability}",
            error_code="UNSUPPORTED_PROVIDER",
            details={"provider": provider, "capability": capability},
        )


class ExternalServiceError(BaseError):
    """External provider failure.

    Raised by classification and evaluation adapters when the provider
    call fails. ``error_kind`` carries the classified failure
    ("timeout", "auth-failed", "rate-limited", ...).

    Args:
        service_name: Name of the external service
        error_type: Type of error ("timeout", "rate-limited", "circuit_open", ...)
        details: Additional error context
    """

    def __init__(self, service_name: str, error_type: str, **kwargs):
        additional_details = kwargs.pop("details", {})
        additional_details.update(
            {
                "service": service_name,
                "error_type": error_type,
            }
        )

        super().__init__(
            message=f"{service_name} service {error_type}",
            error_code=f"{service_name.upper()}_{error_type.upper().replace('-', '_')}",
            category=ErrorCategory.EXTERNAL_SERVICE,
            retryable=error_type in {"timeout", "rate-limited", "provider-error", "circuit_open"},
            details=additional_details,
            **kwargs,
        )
        self.service_name = service_name
        self.error_type = error_type


class DocumentFetchError(BaseError):
    """The answer image itself could not be downloaded or decoded."""

    def __init__(self, location: str, reason: str):
        super().__init__(
            message=f"Failed to fetch document: {reason}",
            error_code="DOCUMENT_FETCH_FAILED",
            category=ErrorCategory.DOCUMENT,
            details={"location": location, "reason": reason},
            retryable=True,
        )


class UnsupportedFormatError(BaseError):
    """The answer document has a content type no provider can read."""

    def __init__(self, content_type: Optional[str]):
        super().__init__(
            message=f"Invalid content type: {content_type}",
            error_code="UNSUPPORTED_FORMAT",
            category=ErrorCategory.DOCUMENT,
            details={"content_type": content_type},
        )
