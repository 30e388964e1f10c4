"""
Recommendation Engine - Candidate generation and ranking.

============================================================
PURPOSE
============================================================
Turns an aggregated RiskAssessment and its raw signals into a
prioritized set of content edits.

1. One or more candidates per contributing factor above the
   minimum impact, targeting the spans that factor implicates
2. Impact projection per candidate
3. Broadening with generic suggestions up to the category
   minimum (3 for MODERATE, 5 for HIGH and CRITICAL)
4. Ordering by impact, ties broken by kind priority

============================================================
IMPACT PROJECTION
============================================================
    impact = factor.weighted_impact * share * expected_effect

share           fraction of the signal's severity the targeted
                span or dimension accounts for (capped at 1)
expected_effect fraction of that share the edit kind is
                projected to remove (RecommendationConfig)

This is a heuristic projection of the score delta, not the
result of re-running the analyzers.

============================================================
"""

import logging
import re
from typing import TYPE_CHECKING, Iterable, List, Optional

from risk_scoring.config import PipelineConfig
from risk_scoring.types import (
    AudienceDetail,
    ContributingFactor,
    ControversyDetail,
    RiskAssessment,
    SentimentDetail,
    SentimentLabel,
    SignalKind,
    SignalSet,
    TrendDetail,
)

from .templates import DIMENSION_GUIDANCE, GENERIC_SUGGESTIONS, replacement_for
from .types import Recommendation, RecommendationKind, RecommendationSet

if TYPE_CHECKING:
    from orchestrator.models import AnalysisJob


logger = logging.getLogger(__name__)


WORD_PATTERN = re.compile(r"[A-Za-z']+")

# Segments at or above this negative share get a targeted addition
SEGMENT_CONCERN_PCT = 50.0

# Overall negative share that warrants a context addition
AUDIENCE_CONTEXT_PCT = 40.0

# Sentiment intensity that warrants a whole-post tone adjustment
TONE_INTENSITY = 0.5


class RecommendationEngine:
    """
    Generates a RecommendationSet for one assessed job.

    Stateless between calls: re-analysis of edited content goes
    through the same path as a first submission.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self._rec_config = self.config.recommendations
        self._effects = {
            RecommendationKind.REMOVAL: self._rec_config.removal_effect,
            RecommendationKind.PHRASE_MODIFICATION: self._rec_config.phrase_modification_effect,
            RecommendationKind.WORD_REPLACEMENT: self._rec_config.word_replacement_effect,
            RecommendationKind.TONE_ADJUSTMENT: self._rec_config.tone_adjustment_effect,
            RecommendationKind.ADDITION: self._rec_config.addition_effect,
        }

    def generate(
        self,
        job: Optional["AnalysisJob"],
        assessment: RiskAssessment,
        signals: SignalSet,
    ) -> RecommendationSet:
        """
        Generate recommendations for an assessed job.

        Returns:
            RecommendationSet meeting the category minimum, ordered
            by estimated impact descending
        """
        candidates: List[Recommendation] = []

        for factor in assessment.contributing_factors:
            if factor.weighted_impact < self._rec_config.min_factor_impact:
                continue

            result = signals.get(factor.kind)
            if result is None or not result.is_ok or result.detail is None:
                continue

            if factor.kind == SignalKind.CONTROVERSY:
                candidates.extend(self._for_controversy(factor, result.detail))
            elif factor.kind == SignalKind.SENTIMENT:
                candidates.extend(self._for_sentiment(factor, result.detail))
            elif factor.kind == SignalKind.AUDIENCE:
                candidates.extend(self._for_audience(factor, result.detail))
            elif factor.kind == SignalKind.TREND:
                candidates.extend(self._for_trend(factor, result.detail))

        candidates = self._dedupe(candidates)

        minimum = assessment.risk_category.minimum_recommendations
        if len(candidates) < minimum:
            candidates.extend(self._broaden(assessment, candidates, minimum - len(candidates)))

        ordered = sorted(candidates, key=lambda r: r.sort_key)
        limit = max(self._rec_config.max_recommendations, minimum)
        recommendation_set = RecommendationSet(recommendations=tuple(ordered[:limit]))

        logger.debug(
            f"Generated {len(recommendation_set)} recommendations "
            f"(category={assessment.risk_category.value}, minimum={minimum}"
            f"{', job=' + job.job_id if job is not None else ''})"
        )
        return recommendation_set

    # ─────────────────────────────────────────────────────────────
    # Per-signal candidates
    # ─────────────────────────────────────────────────────────────

    def _for_controversy(
        self,
        factor: ContributingFactor,
        detail: ControversyDetail,
    ) -> List[Recommendation]:
        candidates = []
        triggered = set()

        for trigger in detail.triggers:
            triggered.add(trigger.dimension)
            dimension = trigger.dimension.value
            if trigger.score >= self._rec_config.removal_threshold:
                candidates.append(self._candidate(
                    factor,
                    RecommendationKind.REMOVAL,
                    share=trigger.score / factor.severity,
                    original=trigger.span,
                    suggested_text="",
                    rationale=(
                        f"\"{trigger.span.text}\" scores {trigger.score:.0f}/100 on "
                        f"{dimension} controversy; removing it eliminates the strongest trigger"
                    ),
                ))
            else:
                candidates.append(self._candidate(
                    factor,
                    RecommendationKind.PHRASE_MODIFICATION,
                    share=trigger.score / factor.severity,
                    original=trigger.span,
                    suggested_text=soften(trigger.span.text),
                    rationale=(
                        f"\"{trigger.span.text}\" raises {dimension} controversy "
                        f"({trigger.score:.0f}/100). {DIMENSION_GUIDANCE[trigger.dimension]}"
                    ),
                ))

        for dimension, score in sorted(
            detail.dimension_scores.items(),
            key=lambda item: (-item[1], item[0].value),
        ):
            if dimension in triggered or score <= 0 or score < factor.severity / 2:
                continue
            candidates.append(self._candidate(
                factor,
                RecommendationKind.TONE_ADJUSTMENT,
                share=score / factor.severity,
                suggested_text=DIMENSION_GUIDANCE[dimension],
                rationale=f"The post reads as {dimension.value}ly charged ({score:.0f}/100)",
            ))

        return candidates

    def _for_sentiment(
        self,
        factor: ContributingFactor,
        detail: SentimentDetail,
    ) -> List[Recommendation]:
        candidates = []

        for term in sorted(detail.emotional_terms, key=lambda t: -t.intensity):
            replacement = replacement_for(term.span.text)
            if replacement:
                candidates.append(self._candidate(
                    factor,
                    RecommendationKind.WORD_REPLACEMENT,
                    share=term.intensity,
                    original=term.span,
                    suggested_text=replacement,
                    rationale=(
                        f"\"{term.span.text}\" is emotionally charged; "
                        f"\"{replacement}\" keeps the meaning with less heat"
                    ),
                ))
            else:
                candidates.append(self._candidate(
                    factor,
                    RecommendationKind.TONE_ADJUSTMENT,
                    share=term.intensity,
                    original=term.span,
                    suggested_text=soften(term.span.text),
                    rationale=f"\"{term.span.text}\" carries strong emotion; rephrase it more neutrally",
                ))

        if (
            detail.label in (SentimentLabel.NEGATIVE, SentimentLabel.MIXED)
            and detail.intensity >= TONE_INTENSITY
        ):
            candidates.append(self._candidate(
                factor,
                RecommendationKind.TONE_ADJUSTMENT,
                share=1.0,
                suggested_text="Rewrite the post in a calmer, more measured tone",
                rationale=(
                    f"Overall sentiment is {detail.label.value} at "
                    f"{detail.intensity * 100:.0f}% intensity"
                ),
            ))

        return candidates

    def _for_audience(
        self,
        factor: ContributingFactor,
        detail: AudienceDetail,
    ) -> List[Recommendation]:
        candidates = []

        for segment in detail.segments:
            if segment.negative_pct < SEGMENT_CONCERN_PCT:
                continue
            concern = f" about {segment.concern}" if segment.concern else ""
            candidates.append(self._candidate(
                factor,
                RecommendationKind.ADDITION,
                share=segment.negative_pct / 100.0,
                suggested_text=f"Add context that addresses {segment.segment}{concern}",
                rationale=(
                    f"{segment.negative_pct:.0f}% of {segment.segment} are predicted "
                    f"to react negatively"
                ),
            ))

        if not candidates and detail.distribution.negative >= AUDIENCE_CONTEXT_PCT:
            candidates.append(self._candidate(
                factor,
                RecommendationKind.ADDITION,
                share=1.0,
                suggested_text="Clarify who the post is for and what it is meant to achieve",
                rationale=(
                    f"{detail.distribution.negative:.0f}% of the audience is predicted "
                    f"to react negatively"
                ),
            ))

        return candidates

    def _for_trend(
        self,
        factor: ContributingFactor,
        detail: TrendDetail,
    ) -> List[Recommendation]:
        candidates = []

        for match in detail.matches:
            if match.severity <= 0:
                continue
            topic = match.topic or match.span.text
            share = match.severity / factor.severity

            if match.sentiment < 0:
                kind = (
                    RecommendationKind.REMOVAL
                    if match.severity >= self._rec_config.removal_threshold
                    else RecommendationKind.PHRASE_MODIFICATION
                )
                candidates.append(self._candidate(
                    factor,
                    kind,
                    share=share,
                    original=match.span,
                    suggested_text="" if kind == RecommendationKind.REMOVAL else None,
                    rationale=(
                        f"\"{match.span.text}\" ties the post to the negatively trending "
                        f"topic \"{topic}\" (volume {match.volume:.0f})"
                    ),
                ))
            elif match.severity >= 50:
                candidates.append(self._candidate(
                    factor,
                    RecommendationKind.TONE_ADJUSTMENT,
                    share=share,
                    original=match.span,
                    rationale=(
                        f"\"{match.span.text}\" rides the trending topic \"{topic}\"; "
                        f"make sure the association is deliberate"
                    ),
                ))

        return candidates

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def _candidate(
        self,
        factor: ContributingFactor,
        kind: RecommendationKind,
        share: float,
        rationale: str,
        original=None,
        suggested_text: Optional[str] = None,
    ) -> Recommendation:
        share = max(0.0, min(1.0, share))
        impact = factor.weighted_impact * share * self._effects[kind]
        return Recommendation(
            kind=kind,
            rationale=rationale,
            estimated_impact=round(max(0.0, min(100.0, impact)), 2),
            original=original,
            suggested_text=suggested_text,
            source_signal=factor.kind,
        )

    def _broaden(
        self,
        assessment: RiskAssessment,
        existing: Iterable[Recommendation],
        needed: int,
    ) -> List[Recommendation]:
        """Generic suggestions used when specific triggers run out."""
        taken = {r.suggested_text for r in existing if r.suggested_text}
        dominant = assessment.dominant_factor
        base = dominant.weighted_impact if dominant else assessment.risk_score

        extra = []
        for index, (kind, text, rationale) in enumerate(GENERIC_SUGGESTIONS):
            if len(extra) >= needed:
                break
            if text in taken:
                continue
            impact = base * self._rec_config.generic_effect / (index + 1)
            extra.append(Recommendation(
                kind=kind,
                rationale=rationale,
                estimated_impact=round(max(0.0, min(100.0, impact)), 2),
                suggested_text=text,
                source_signal=dominant.kind if dominant else None,
            ))
        return extra

    @staticmethod
    def _dedupe(candidates: List[Recommendation]) -> List[Recommendation]:
        """Keep the highest-impact candidate per (kind, target)."""
        best = {}
        for candidate in candidates:
            target = (
                candidate.original.text.lower()
                if candidate.original is not None
                else candidate.suggested_text
            )
            key = (candidate.kind, target)
            if key not in best or candidate.estimated_impact > best[key].estimated_impact:
                best[key] = candidate
        return list(best.values())


def soften(text: str) -> Optional[str]:
    """
    Replace charged words inside a phrase with milder ones.

    Returns None when nothing in the phrase has a known replacement.
    """
    changed = False

    def _swap(match: "re.Match") -> str:
        nonlocal changed
        replacement = replacement_for(match.group(0))
        if replacement:
            changed = True
            return replacement
        return match.group(0)

    softened = WORD_PATTERN.sub(_swap, text)
    return softened if changed else None
