"""
Base Analyzer - Abstract interface for all analysis signal adapters.

An adapter wraps one external provider (an ML model behind some
interface), calls it, and normalizes its heterogeneous payload
into a SignalResult with a severity in [0, 100].

Adapters RAISE ProviderError on failure. Absorbing the failure
into a failed/timed-out SignalResult is the orchestrator's job.
"""

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from risk_scoring.config import PipelineConfig
from risk_scoring.types import SignalKind, SignalResult, TextSpan

from .exceptions import NormalizationError, ProviderError, ProviderTimeoutError, RateLimitError
from .models import AnalyzerHealth, AnalyzerMetadata, AnalyzerStatus


logger = logging.getLogger(__name__)


class AnalysisProvider(Protocol):
    """Capability implemented by every external analysis provider."""

    async def analyze(self, content: str, context: dict[str, Any]) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class AnalysisContext:
    """Job context passed to every analyzer alongside the content."""
    job_id: str
    platforms: tuple[str, ...] = ()
    audience_profile: Optional[dict[str, Any]] = None
    content_type: str = "text"
    sections: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def has_media(self) -> bool:
        return self.content_type != "text"

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "platforms": list(self.platforms),
            "audience_profile": self.audience_profile,
            "content_type": self.content_type,
            "sections": list(self.sections),
            **self.extra,
        }


# ─────────────────────────────────────────────────────────────
# Normalization helpers
# ─────────────────────────────────────────────────────────────


def locate_span(
    content: str,
    text: str,
    start: Optional[int] = None,
    end: Optional[int] = None,
) -> TextSpan:
    """
    Build a TextSpan, trusting provider offsets only when they
    are in range; otherwise search the content case-insensitively.
    """
    if (
        isinstance(start, int) and isinstance(end, int)
        and 0 <= start < end <= len(content)
    ):
        return TextSpan(text=content[start:end], start=start, end=end)

    if text:
        idx = content.lower().find(text.lower())
        if idx >= 0:
            return TextSpan(text=content[idx:idx + len(text)], start=idx, end=idx + len(text))

    return TextSpan(text=text)


def read_number(
    value: Any,
    field_name: str,
    analyzer_name: str,
    low: float = 0.0,
    high: float = 100.0,
) -> float:
    """
    Read a finite provider number and clamp it to [low, high].

    Scales are fixed by the provider contract: intensities and
    probabilities in [0, 1], scores, volumes and percentages in
    [0, 100]. NaN and infinities are rejected, never clamped.
    """
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise NormalizationError(
            f"Non-numeric {field_name}: {value!r}",
            analyzer_name=analyzer_name,
            raw_value=value,
            target_field=field_name,
        ) from e

    if not math.isfinite(number):
        raise NormalizationError(
            f"Non-finite {field_name}: {value!r}",
            analyzer_name=analyzer_name,
            raw_value=value,
            target_field=field_name,
        )

    return max(low, min(high, number))


class BaseAnalyzer(ABC):
    """
    Abstract base class for signal analyzers.

    DESIGN PRINCIPLES:
    1. One provider, one signal kind
    2. RAISE ProviderError on any failure
    3. Bounded retries on transient errors only
    4. Track health and statistics

    All subclasses must implement:
    - kind - Signal kind produced
    - metadata - Adapter metadata property
    - _normalize() - Convert the raw payload to a SignalResult
    """

    DEFAULT_MAX_RETRIES = 0
    DEFAULT_RETRY_DELAY = 1.0

    def __init__(
        self,
        provider: AnalysisProvider,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self.provider = provider
        self.config = config or PipelineConfig()
        self.max_retries = self.config.analyzer.max_retries
        self.retry_delay = self.config.analyzer.retry_delay_seconds

        self._health = AnalyzerHealth(
            status=AnalyzerStatus.UNKNOWN,
            last_check=datetime.now(timezone.utc),
        )

        self._stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "retries": 0,
        }

    @property
    @abstractmethod
    def kind(self) -> SignalKind:
        """Signal kind produced by this analyzer."""
        pass

    @property
    @abstractmethod
    def metadata(self) -> AnalyzerMetadata:
        """Return adapter metadata."""
        pass

    @abstractmethod
    def _normalize(
        self,
        raw: dict[str, Any],
        content: str,
        context: AnalysisContext,
    ) -> SignalResult:
        """
        Normalize a raw provider payload.

        May raise NormalizationError, KeyError, TypeError or
        ValueError; the caller wraps the latter three.
        """
        pass

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def analyze(self, content: str, context: AnalysisContext) -> SignalResult:
        """
        Run the provider and normalize its output.

        Raises:
            ProviderError: provider failure, timeout, or bad payload
        """
        self._stats["total_requests"] += 1
        start = time.monotonic()

        try:
            raw = await self._call_with_retry(content, context)
            try:
                result = self._normalize(raw, content, context)
            except NormalizationError:
                raise
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise NormalizationError(
                    f"Malformed {self.kind.value} payload: {e}",
                    analyzer_name=self.metadata.name,
                    raw_value=raw,
                ) from e
        except ProviderError as e:
            self._record_failure(e)
            raise

        latency = (time.monotonic() - start) * 1000
        self._record_success(latency)
        return replace(result, latency_ms=round(latency, 2))

    async def get_health(self) -> AnalyzerHealth:
        """Get current health status."""
        self._health.last_check = datetime.now(timezone.utc)
        return self._health

    def describe(self) -> dict[str, Any]:
        """Adapter metadata, with the provider endpoint when it has one."""
        metadata = self.metadata
        if not metadata.provider_url:
            metadata = replace(metadata, provider_url=getattr(self.provider, "endpoint", ""))
        return metadata.to_dict()

    def get_stats(self) -> dict[str, Any]:
        """Get adapter statistics."""
        total = self._stats["total_requests"]
        error_rate = (
            self._stats["failed_requests"] / total * 100
            if total > 0 else 0
        )
        return {
            **self._stats,
            "error_rate_pct": round(error_rate, 2),
            "analyzer_name": self.metadata.name,
            "kind": self.kind.value,
        }

    async def close(self) -> None:
        """Release provider resources when the provider supports it."""
        closer = getattr(self.provider, "close", None)
        if closer is not None:
            await closer()

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    def _provider_context(self, context: AnalysisContext) -> dict[str, Any]:
        """Context dict handed to the provider. Override to enrich."""
        return context.to_dict()

    async def _call_with_retry(
        self,
        content: str,
        context: AnalysisContext,
    ) -> dict[str, Any]:
        provider_context = self._provider_context(context)
        last_error: Optional[ProviderError] = None

        for attempt in range(self.max_retries + 1):
            try:
                raw = await self.provider.analyze(content, provider_context)
                if not isinstance(raw, dict):
                    raise NormalizationError(
                        f"Provider returned {type(raw).__name__}, expected dict",
                        analyzer_name=self.metadata.name,
                        raw_value=raw,
                    )
                return raw

            except asyncio.TimeoutError as e:
                last_error = ProviderTimeoutError(
                    f"Provider timed out: {e}",
                    analyzer_name=self.metadata.name,
                )

            except ProviderError as e:
                last_error = e

            except Exception as e:
                last_error = ProviderError(
                    f"Unexpected provider error: {e}",
                    analyzer_name=self.metadata.name,
                    details={"exception_type": type(e).__name__},
                )

            logger.warning(
                f"[{self.metadata.name}] Provider error (attempt {attempt + 1}): {last_error}"
            )

            if not last_error.is_transient:
                break

            if attempt < self.max_retries:
                self._stats["retries"] += 1
                await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise last_error

    def _record_success(self, latency_ms: float) -> None:
        self._stats["successful_requests"] += 1
        self._health.latency_ms = latency_ms
        self._health.status = AnalyzerStatus.HEALTHY
        self._health.consecutive_failures = 0

    def _record_failure(self, error: ProviderError) -> None:
        self._stats["failed_requests"] += 1
        self._health.error_count += 1
        self._health.consecutive_failures += 1
        self._health.last_error = str(error)
        self._health.last_error_time = datetime.now(timezone.utc)

        if isinstance(error, RateLimitError):
            self._health.status = AnalyzerStatus.RATE_LIMITED
        elif self._health.consecutive_failures >= 3:
            self._health.status = AnalyzerStatus.UNAVAILABLE
        else:
            self._health.status = AnalyzerStatus.DEGRADED

    def _record_timeout(self) -> None:
        """Called by the orchestrator when its own timeout fires."""
        self._record_failure(ProviderTimeoutError(
            "Analyzer exceeded its timeout",
            analyzer_name=self.metadata.name,
        ))
