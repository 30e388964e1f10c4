"""
Core Module Package.

This package contains the shared infrastructure that all
pipeline components depend on.

Components:
- exceptions: Request-level and configuration error taxonomy
"""

from .exceptions import (
    AggregationInconsistency,
    ConfigurationError,
    ContentRiskError,
    Severity,
    ValidationError,
)


__all__ = [
    "AggregationInconsistency",
    "ConfigurationError",
    "ContentRiskError",
    "Severity",
    "ValidationError",
]
