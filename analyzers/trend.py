"""
Trend Analyzer - Matches against currently trending phrases.

The trend snapshot comes from an external TrendFeed accessor,
refreshed on its own schedule (every 15 minutes upstream). The
analyzer only reads it and hands it to the provider in
context["trends"].

Expected provider payload:
    {
        "matches": [
            {"phrase": "...", "start": 5, "end": 17, "topic": "...",
             "volume": 85, "sentiment": -0.7}
        ]
    }

Volume is on the 0-100 scale and trend sentiment in [-1, 1];
values outside are clamped, non-finite values rejected.
"""

import logging
from typing import Any, Optional, Protocol

from risk_scoring.config import PipelineConfig
from risk_scoring.reducers import TrendReducer
from risk_scoring.types import SignalKind, SignalResult, TrendDetail, TrendMatch

from .base import AnalysisContext, AnalysisProvider, BaseAnalyzer, locate_span, read_number
from .exceptions import ProviderError
from .models import AnalyzerMetadata


logger = logging.getLogger(__name__)


class TrendFeed(Protocol):
    """Read-only accessor for the current trending topics."""

    async def current_trends(self) -> list[dict[str, Any]]:
        ...


class TrendAnalyzer(BaseAnalyzer):
    """Adapter for the trend-matching provider."""

    def __init__(
        self,
        provider: AnalysisProvider,
        config: Optional[PipelineConfig] = None,
        trend_feed: Optional[TrendFeed] = None,
    ) -> None:
        super().__init__(provider, config)
        self.trend_feed = trend_feed
        self._reducer = TrendReducer(self.config.trend)

    @property
    def kind(self) -> SignalKind:
        return SignalKind.TREND

    @property
    def metadata(self) -> AnalyzerMetadata:
        return AnalyzerMetadata(
            name="trend",
            display_name="Trend Matching Analyzer",
            tags=["trends", "hashtags", "topics"],
        )

    async def analyze(self, content: str, context: AnalysisContext) -> SignalResult:
        trends: list[dict[str, Any]] = []
        if self.trend_feed is not None:
            try:
                trends = list(await self.trend_feed.current_trends())
            except Exception as e:
                error = ProviderError(
                    f"Trend feed unavailable: {e}",
                    analyzer_name=self.metadata.name,
                )
                self._record_failure(error)
                raise error from e

        return await super().analyze(
            content,
            AnalysisContext(
                job_id=context.job_id,
                platforms=context.platforms,
                audience_profile=context.audience_profile,
                content_type=context.content_type,
                sections=context.sections,
                extra={**context.extra, "trends": trends},
            ),
        )

    async def close(self) -> None:
        await super().close()
        closer = getattr(self.trend_feed, "close", None)
        if closer is not None:
            await closer()

    def _normalize(
        self,
        raw: dict[str, Any],
        content: str,
        context: AnalysisContext,
    ) -> SignalResult:
        matches = []
        for item in raw.get("matches") or []:
            phrase = str(item.get("phrase", "")).strip()
            if not phrase:
                continue

            volume = read_number(item.get("volume", 0.0), "matches.volume", self.metadata.name)
            sentiment = read_number(
                item.get("sentiment", 0.0), "matches.sentiment", self.metadata.name, low=-1.0, high=1.0
            )

            matches.append(TrendMatch(
                span=locate_span(content, phrase, item.get("start"), item.get("end")),
                volume=round(volume, 2),
                sentiment=sentiment,
                severity=round(self._reducer.match_severity(volume, sentiment), 2),
                topic=item.get("topic"),
            ))

        matches.sort(key=lambda m: (-m.severity, m.span.text))

        detail = TrendDetail(matches=tuple(matches))
        return SignalResult.ok(self.kind, self._reducer.reduce(detail), detail)
