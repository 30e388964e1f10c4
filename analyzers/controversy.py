"""
Controversy Analyzer - Five-dimension controversy scoring.

Expected provider payload:
    {
        "dimensions": {"political": 90, "religious": 5, "social": 40,
                       "cultural": 10, "economic": 0},
        "triggers": [
            {"text": "...", "start": 0, "end": 10,
             "dimension": "political", "score": 90}
        ]
    }

Scores are on the 0-100 scale; values outside it are clamped,
non-finite values rejected.
"""

import logging
from typing import Any

from risk_scoring.reducers import ControversyReducer
from risk_scoring.types import (
    ControversyDetail,
    ControversyDimension,
    ControversyTrigger,
    SignalKind,
    SignalResult,
)

from .base import AnalysisContext, BaseAnalyzer, locate_span, read_number
from .models import AnalyzerMetadata


logger = logging.getLogger(__name__)


class ControversyAnalyzer(BaseAnalyzer):
    """Adapter for the controversy provider."""

    _reducer = ControversyReducer()

    @property
    def kind(self) -> SignalKind:
        return SignalKind.CONTROVERSY

    @property
    def metadata(self) -> AnalyzerMetadata:
        return AnalyzerMetadata(
            name="controversy",
            display_name="Controversy Analyzer",
            tags=["controversy", "political", "religious", "social", "cultural", "economic"],
        )

    def _normalize(
        self,
        raw: dict[str, Any],
        content: str,
        context: AnalysisContext,
    ) -> SignalResult:
        raw_dimensions = raw.get("dimensions") or {}
        raw_triggers = raw.get("triggers") or []

        dimension_scores = {}
        for name, value in raw_dimensions.items():
            dimension = self._parse_dimension(name)
            if dimension is None:
                continue
            dimension_scores[dimension] = read_number(
                value, f"dimensions.{dimension.value}", self.metadata.name
            )

        triggers = []
        for item in raw_triggers:
            text = str(item.get("text", "")).strip()
            dimension = self._parse_dimension(item.get("dimension", ""))
            if not text or dimension is None:
                continue
            triggers.append(ControversyTrigger(
                span=locate_span(content, text, item.get("start"), item.get("end")),
                dimension=dimension,
                score=read_number(item.get("score", 0.0), "triggers.score", self.metadata.name),
            ))

        triggers.sort(key=lambda t: -t.score)

        detail = ControversyDetail(
            dimension_scores=dimension_scores,
            triggers=tuple(triggers),
        )
        return SignalResult.ok(self.kind, self._reducer.reduce(detail), detail)

    def _parse_dimension(self, name: Any):
        try:
            return ControversyDimension(str(name).lower())
        except ValueError:
            logger.debug(f"[{self.metadata.name}] Ignoring unknown dimension: {name}")
            return None
