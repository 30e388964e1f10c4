"""
Audience Analyzer - Predicted audience reaction.

Expected provider payload:
    {
        "reactions": {"positive": 120, "negative": 300, "neutral": 80},
        "segments": [
            {"segment": "parents", "negative": 70, "concern": "child safety"}
        ]
    }

Reactions may be counts, probabilities or percentages; they
are normalized to percentages summing to 100. Segment negativity
is a percentage on the 0-100 scale.

When a job carries neither a platform list nor an audience
profile the provider is not called and a neutral baseline
result is returned instead.
"""

import logging
import math
from typing import Any

from risk_scoring.reducers import AudienceReducer
from risk_scoring.types import (
    AudienceDetail,
    ReactionDistribution,
    SegmentReaction,
    SignalKind,
    SignalResult,
)

from .base import AnalysisContext, BaseAnalyzer, read_number
from .exceptions import NormalizationError
from .models import AnalyzerMetadata


logger = logging.getLogger(__name__)


class AudienceAnalyzer(BaseAnalyzer):
    """Adapter for the audience-reaction provider."""

    _reducer = AudienceReducer()

    @property
    def kind(self) -> SignalKind:
        return SignalKind.AUDIENCE

    @property
    def metadata(self) -> AnalyzerMetadata:
        return AnalyzerMetadata(
            name="audience",
            display_name="Audience Reaction Analyzer",
            tags=["audience", "reaction", "segments"],
        )

    @staticmethod
    def is_applicable(context: AnalysisContext) -> bool:
        return bool(context.platforms) or bool(context.audience_profile)

    def baseline(self) -> SignalResult:
        """Neutral result used when there is no audience to model."""
        detail = AudienceDetail(
            distribution=ReactionDistribution.neutral_baseline(),
            baseline=True,
        )
        return SignalResult.ok(self.kind, 0.0, detail)

    async def analyze(self, content: str, context: AnalysisContext) -> SignalResult:
        if not self.is_applicable(context):
            logger.debug(f"[{self.metadata.name}] No platforms or profile for {context.job_id}; using baseline")
            return self.baseline()
        return await super().analyze(content, context)

    def _normalize(
        self,
        raw: dict[str, Any],
        content: str,
        context: AnalysisContext,
    ) -> SignalResult:
        reactions = raw.get("reactions")
        if not isinstance(reactions, dict):
            raise NormalizationError(
                "Audience payload is missing 'reactions'",
                analyzer_name=self.metadata.name,
                raw_value=raw,
                target_field="reactions",
            )

        name = self.metadata.name
        distribution = ReactionDistribution.from_raw(**{
            bucket: read_number(reactions.get(bucket, 0.0), f"reactions.{bucket}", name, high=math.inf)
            for bucket in ("positive", "negative", "neutral")
        })

        segments = []
        for item in raw.get("segments") or []:
            segment = str(item.get("segment", "")).strip()
            if not segment:
                continue
            negative = read_number(item.get("negative", 0.0), "segments.negative", name)
            segments.append(SegmentReaction(
                segment=segment,
                negative_pct=round(negative, 1),
                concern=item.get("concern"),
            ))

        segments.sort(key=lambda s: (-s.negative_pct, s.segment))

        detail = AudienceDetail(distribution=distribution, segments=tuple(segments))
        return SignalResult.ok(self.kind, self._reducer.reduce(detail), detail)
