"""
Analyzer Adapters - Uniform wrappers around the four analysis signals.

Each adapter calls one external provider (sentiment, controversy,
audience reaction, trend matching) and normalizes its payload into
a SignalResult with a severity in [0, 100].

Usage:
    from analyzers import SentimentAnalyzer, HttpAnalysisProvider, AnalysisContext

    analyzer = SentimentAnalyzer(
        HttpAnalysisProvider("sentiment", "http://models.internal/sentiment"),
    )
    result = await analyzer.analyze(text, AnalysisContext(job_id="job-1"))

Adapters raise ProviderError on failure; the orchestrator turns
that into a failed or timed-out SignalResult.
"""

from .audience import AudienceAnalyzer
from .base import (
    AnalysisContext,
    AnalysisProvider,
    BaseAnalyzer,
    locate_span,
    read_number,
)
from .controversy import ControversyAnalyzer
from .exceptions import (
    NormalizationError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitError,
)
from .models import AnalyzerHealth, AnalyzerIncident, AnalyzerMetadata, AnalyzerStatus
from .providers import HttpAnalysisProvider, HttpTrendFeed
from .sentiment import SentimentAnalyzer
from .trend import TrendAnalyzer, TrendFeed


__all__ = [
    # Base
    "BaseAnalyzer",
    "AnalysisContext",
    "AnalysisProvider",
    "locate_span",
    "read_number",

    # Adapters
    "SentimentAnalyzer",
    "ControversyAnalyzer",
    "AudienceAnalyzer",
    "TrendAnalyzer",
    "TrendFeed",

    # Providers
    "HttpAnalysisProvider",
    "HttpTrendFeed",

    # Models
    "AnalyzerHealth",
    "AnalyzerIncident",
    "AnalyzerMetadata",
    "AnalyzerStatus",

    # Exceptions
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitError",
    "NormalizationError",
]
