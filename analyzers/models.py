"""
Analyzer Models - Adapter metadata, health, and incident records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class AnalyzerStatus(Enum):
    """Health status of an analyzer adapter."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass
class AnalyzerMetadata:
    """Metadata about an analyzer adapter."""
    name: str
    display_name: str
    version: str = "1.0.0"
    provider_url: str = ""
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "version": self.version,
            "provider_url": self.provider_url,
            "tags": self.tags,
        }


@dataclass
class AnalyzerHealth:
    """Health status of an analyzer adapter."""
    status: AnalyzerStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    consecutive_failures: int = 0

    def is_healthy(self) -> bool:
        return self.status == AnalyzerStatus.HEALTHY

    def is_usable(self) -> bool:
        return self.status in (AnalyzerStatus.HEALTHY, AnalyzerStatus.DEGRADED, AnalyzerStatus.UNKNOWN)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "consecutive_failures": self.consecutive_failures,
        }


@dataclass
class AnalyzerIncident:
    """Record of a failed or timed-out analyzer call."""
    analyzer_name: str
    incident_type: str  # "failed" or "timed_out"
    timestamp: datetime
    error_message: str
    job_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "analyzer_name": self.analyzer_name,
            "incident_type": self.incident_type,
            "timestamp": self.timestamp.isoformat(),
            "error_message": self.error_message,
            "job_id": self.job_id,
        }
