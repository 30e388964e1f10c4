"""
Analyzer Provider Exceptions - Custom error hierarchy.

These exceptions describe why one analyzer could not produce
a signal. The orchestrator absorbs them into
SignalResult.status; they never reach the caller.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class ProviderError(Exception):
    """Base exception for all analyzer provider errors."""

    def __init__(
        self,
        message: str,
        analyzer_name: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.analyzer_name = analyzer_name
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        super().__init__(self.message)

    @property
    def is_transient(self) -> bool:
        """Whether a retry may succeed."""
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "analyzer_name": self.analyzer_name,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ProviderTimeoutError(ProviderError):
    """The provider did not answer within the allotted time."""
    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded for the provider."""

    def __init__(
        self,
        message: str,
        analyzer_name: str = "",
        retry_after_seconds: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, analyzer_name, details)
        self.retry_after_seconds = retry_after_seconds

    @property
    def is_transient(self) -> bool:
        # Retrying inside the same job only eats into the deadline
        return False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class ProviderUnavailableError(ProviderError):
    """Provider is temporarily or permanently unavailable."""

    def __init__(
        self,
        message: str,
        analyzer_name: str = "",
        status_code: Optional[int] = None,
        is_permanent: bool = False,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, analyzer_name, details)
        self.status_code = status_code
        self.is_permanent = is_permanent

    @property
    def is_transient(self) -> bool:
        return not self.is_permanent

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "is_permanent": self.is_permanent,
        })
        return data


class NormalizationError(ProviderError):
    """Provider payload could not be normalized to a SignalResult."""

    def __init__(
        self,
        message: str,
        analyzer_name: str = "",
        raw_value: Optional[Any] = None,
        target_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, analyzer_name, details)
        self.raw_value = raw_value
        self.target_field = target_field

    @property
    def is_transient(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "raw_value": str(self.raw_value)[:100] if self.raw_value is not None else None,
            "target_field": self.target_field,
        })
        return data
