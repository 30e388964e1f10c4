"""
Sentiment Analyzer - Emotional tone and intensity.

Expected provider payload:
    {
        "label": "negative",            # optional if "scores" given
        "scores": {"positive": 0.1, "negative": 0.8, "neutral": 0.1},
        "intensity": 0.85,              # 0-1
        "emotional_terms": [
            {"text": "disgraceful", "start": 12, "end": 23, "intensity": 0.9}
        ]
    }

Intensities and scores are on the 0-1 scale; values outside it
are clamped, non-finite values rejected.
"""

import logging
from typing import Any, Optional

from risk_scoring.config import PipelineConfig
from risk_scoring.reducers import SentimentReducer
from risk_scoring.types import (
    EmotionalTerm,
    SentimentDetail,
    SentimentLabel,
    SignalKind,
    SignalResult,
)

from .base import AnalysisContext, AnalysisProvider, BaseAnalyzer, locate_span, read_number
from .exceptions import NormalizationError
from .models import AnalyzerMetadata


logger = logging.getLogger(__name__)


# Both polarities at or above this share read as mixed sentiment
MIXED_THRESHOLD = 0.3


class SentimentAnalyzer(BaseAnalyzer):
    """Adapter for the sentiment provider."""

    def __init__(
        self,
        provider: AnalysisProvider,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        super().__init__(provider, config)
        self._reducer = SentimentReducer(self.config.sentiment)

    @property
    def kind(self) -> SignalKind:
        return SignalKind.SENTIMENT

    @property
    def metadata(self) -> AnalyzerMetadata:
        return AnalyzerMetadata(
            name="sentiment",
            display_name="Sentiment Analyzer",
            tags=["sentiment", "tone", "emotion"],
        )

    def _normalize(
        self,
        raw: dict[str, Any],
        content: str,
        context: AnalysisContext,
    ) -> SignalResult:
        label = self._resolve_label(raw)
        name = self.metadata.name
        intensity = read_number(raw.get("intensity", 0.0), "intensity", name, high=1.0)

        terms = []
        for item in raw.get("emotional_terms") or []:
            text = str(item.get("text", "")).strip()
            if not text:
                continue
            terms.append(EmotionalTerm(
                span=locate_span(content, text, item.get("start"), item.get("end")),
                intensity=read_number(
                    item.get("intensity", intensity), "emotional_terms.intensity", name, high=1.0
                ),
            ))

        detail = SentimentDetail(
            label=label,
            intensity=intensity,
            emotional_terms=tuple(terms),
        )
        return SignalResult.ok(self.kind, self._reducer.reduce(detail), detail)

    def _resolve_label(self, raw: dict[str, Any]) -> SentimentLabel:
        if raw.get("label"):
            try:
                return SentimentLabel(str(raw["label"]).lower())
            except ValueError as e:
                raise NormalizationError(
                    f"Unknown sentiment label: {raw['label']}",
                    analyzer_name=self.metadata.name,
                    raw_value=raw["label"],
                    target_field="label",
                ) from e

        scores = raw.get("scores")
        if not scores:
            raise NormalizationError(
                "Sentiment payload has neither label nor scores",
                analyzer_name=self.metadata.name,
                raw_value=raw,
                target_field="label",
            )

        name = self.metadata.name
        positive = read_number(scores.get("positive", 0.0), "scores.positive", name, high=1.0)
        negative = read_number(scores.get("negative", 0.0), "scores.negative", name, high=1.0)
        neutral = read_number(scores.get("neutral", 0.0), "scores.neutral", name, high=1.0)

        if positive >= MIXED_THRESHOLD and negative >= MIXED_THRESHOLD:
            return SentimentLabel.MIXED
        if negative >= positive and negative >= neutral:
            return SentimentLabel.NEGATIVE
        if positive >= neutral:
            return SentimentLabel.POSITIVE
        return SentimentLabel.NEUTRAL
