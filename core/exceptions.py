"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the request-level error taxonomy for the content
risk pipeline.

- Provides clear exception hierarchy
- Separates request failures from configuration failures
- Includes context for debugging

Provider-level failures live in analyzers.exceptions and
never cross the core boundary: they are absorbed into
SignalResult.status and reflected in confidence.

============================================================
EXCEPTION HIERARCHY
============================================================
ContentRiskError (base)
├── ValidationError
└── ConfigurationError
    └── AggregationInconsistency

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels for alerting."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, rejects the request or blocks startup."""

    CRITICAL = "critical"
    """Critical issue, the pipeline cannot run."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class ContentRiskError(Exception):
    """
    Base exception for all content risk pipeline errors.

    All exceptions carry:
    - severity: for alerting
    - context: for debugging
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/transport."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        line = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# REQUEST ERRORS
# ============================================================

class ValidationError(ContentRiskError):
    """
    Malformed or empty analysis job.

    Raised before orchestration begins; the job never
    enters the pipeline.
    """

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if field_name:
            context["field"] = field_name
        if value is not None:
            context["value"] = str(value)[:100]

        super().__init__(message, context=context, **kwargs)
        self.field_name = field_name


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(ContentRiskError):
    """Error in configuration. Raised at startup, not per request."""

    default_severity = Severity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


class AggregationInconsistency(ConfigurationError):
    """
    Internal consistency violation in the aggregation layer.

    Examples: weights not summing to 1.0, a High/Critical
    assessment with no contributing factor.
    """
    pass
