"""
Explanation Builder - Human-readable account of an assessment.

============================================================
PURPOSE
============================================================
Assembles, deterministically, from aggregator and
recommendation output:

1. Summary: one sentence with category and dominant factor
2. Rationale: one sentence per contributing factor, plus the
   degraded signals and the best available edit
3. Highlighted issues: one entry per triggering span across
   all signals, overlapping spans merged
4. Historical comparisons: passed through from the incident
   lookup, never invented

============================================================
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from recommendations.types import RecommendationSet
from risk_scoring.types import (
    ContributingFactor,
    ControversyDetail,
    RiskAssessment,
    SentimentDetail,
    SignalKind,
    SignalSet,
    TextSpan,
    TrendDetail,
)

from .types import Explanation, HighlightedIssue, HistoricalComparison


logger = logging.getLogger(__name__)


FACTOR_PHRASES: Dict[SignalKind, str] = {
    SignalKind.SENTIMENT: "emotionally charged tone",
    SignalKind.CONTROVERSY: "controversial content",
    SignalKind.AUDIENCE: "predicted negative audience reaction",
    SignalKind.TREND: "association with trending topics",
}


class ExplanationBuilder:
    """Builds an Explanation. Holds no state between calls."""

    def explain(
        self,
        assessment: RiskAssessment,
        recommendations: RecommendationSet,
        signals: SignalSet,
        comparisons: Optional[Iterable[HistoricalComparison]] = None,
        content: Optional[str] = None,
    ) -> Explanation:
        """
        Build the explanation for one assessment.

        Args:
            assessment: Aggregated risk
            recommendations: Generated recommendations
            signals: The signals the assessment was computed from
            comparisons: Matches from the historical incident lookup
            content: Full job text, used to widen merged spans

        Returns:
            Explanation
        """
        explanation = Explanation(
            summary=self._summary(assessment, signals),
            rationale=self._rationale(assessment, recommendations, signals),
            highlighted_issues=merge_issues(collect_issues(signals), content),
            historical_comparisons=tuple(comparisons or ()),
        )
        logger.debug(
            f"Built explanation with {len(explanation.highlighted_issues)} issues, "
            f"{len(explanation.historical_comparisons)} comparisons"
        )
        return explanation

    # ─────────────────────────────────────────────────────────────
    # Text assembly
    # ─────────────────────────────────────────────────────────────

    def _summary(self, assessment: RiskAssessment, signals: SignalSet) -> str:
        if assessment.total_signal_failure:
            return (
                "Risk could not be assessed because every analysis signal failed; "
                "the Low rating is unverified."
            )

        category = assessment.risk_category.label
        dominant = assessment.dominant_factor
        if dominant is None:
            summary = f"{category} risk ({assessment.risk_score:.0f}/100) with no contributing factor detected."
        else:
            summary = (
                f"{category} risk ({assessment.risk_score:.0f}/100), driven mainly by "
                f"{self._factor_phrase(dominant, signals)}."
            )

        if assessment.low_confidence:
            summary += f" Confidence is low ({assessment.confidence_level:.0f}%)."
        return summary

    def _rationale(
        self,
        assessment: RiskAssessment,
        recommendations: RecommendationSet,
        signals: SignalSet,
    ) -> str:
        sentences = []

        for factor in assessment.contributing_factors:
            sentences.append(
                f"{factor.kind.value.capitalize()} severity {factor.severity:.0f}/100 "
                f"at weight {factor.weight:.2f} adds {factor.weighted_impact:.2f} points "
                f"({self._factor_phrase(factor, signals)})."
            )

        if not assessment.contributing_factors and not assessment.total_signal_failure:
            sentences.append("No signal found anything risky in the content.")

        if assessment.degraded:
            unavailable = ", ".join(k.value for k in assessment.failed_signals)
            sentences.append(
                f"Unavailable signals: {unavailable}; confidence is "
                f"{assessment.confidence_level:.0f}%."
            )

        if len(recommendations):
            top = recommendations[0]
            sentences.append(
                f"The top recommendation ({top.kind.value.replace('_', ' ')}) could lower "
                f"the score by about {top.estimated_impact:.1f} points."
            )

        return " ".join(sentences)

    @staticmethod
    def _factor_phrase(factor: ContributingFactor, signals: SignalSet) -> str:
        phrase = FACTOR_PHRASES[factor.kind]
        result = signals.get(factor.kind)
        if (
            factor.kind == SignalKind.CONTROVERSY
            and result is not None
            and isinstance(result.detail, ControversyDetail)
            and result.detail.top_dimension is not None
        ):
            phrase = f"{result.detail.top_dimension.value} controversy"
        return phrase


# ============================================================
# ISSUE COLLECTION AND MERGING
# ============================================================


Candidate = Tuple[TextSpan, float, str, SignalKind]


def collect_issues(signals: SignalSet) -> List[Candidate]:
    """Every triggering span reported by a successful signal."""
    candidates: List[Candidate] = []

    for result in signals:
        if not result.is_ok or result.detail is None:
            continue
        detail = result.detail

        if isinstance(detail, ControversyDetail):
            for trigger in detail.triggers:
                candidates.append((
                    trigger.span,
                    trigger.score,
                    f"{trigger.dimension.value} controversy trigger ({trigger.score:.0f}/100)",
                    result.kind,
                ))
        elif isinstance(detail, SentimentDetail):
            for term in detail.emotional_terms:
                candidates.append((
                    term.span,
                    round(term.intensity * 100.0, 2),
                    f"emotionally charged ({term.intensity * 100:.0f}% intensity)",
                    result.kind,
                ))
        elif isinstance(detail, TrendDetail):
            for match in detail.matches:
                if match.severity <= 0:
                    continue
                topic = match.topic or match.span.text
                mood = "negative" if match.sentiment < 0 else "non-negative"
                candidates.append((
                    match.span,
                    match.severity,
                    f"matches {mood} trending topic \"{topic}\"",
                    result.kind,
                ))

    return candidates


def merge_issues(
    candidates: Sequence[Candidate],
    content: Optional[str] = None,
) -> Tuple[HighlightedIssue, ...]:
    """
    Merge candidates whose spans overlap.

    The merged issue keeps the maximum severity and every distinct
    reason. Issues are ordered by severity descending, then by
    position in the content.
    """
    ordered = sorted(
        candidates,
        key=lambda c: (
            c[0].start is None,
            c[0].start if c[0].start is not None else 0,
            c[0].text.lower(),
        ),
    )

    issues: List[HighlightedIssue] = []
    for span, severity, reason, kind in ordered:
        if span.is_located:
            # Sorted by start: only the most recent located issue can overlap
            targets = [i for i, issue in enumerate(issues) if issue.span.is_located][-1:]
        else:
            targets = list(range(len(issues)))

        for index in targets:
            issue = issues[index]
            if issue.span.overlaps(span):
                issues[index] = HighlightedIssue(
                    span=_widen(issue.span, span, content),
                    severity=max(issue.severity, severity),
                    reasons=_unique(issue.reasons + (reason,)),
                    sources=tuple(sorted(set(issue.sources) | {kind}, key=lambda k: k.order)),
                )
                break
        else:
            issues.append(HighlightedIssue(
                span=span,
                severity=severity,
                reasons=(reason,),
                sources=(kind,),
            ))

    issues.sort(key=lambda i: (
        -i.severity,
        i.span.start is None,
        i.span.start if i.span.start is not None else 0,
        i.span.text.lower(),
    ))
    return tuple(issues)


def _widen(current: TextSpan, other: TextSpan, content: Optional[str]) -> TextSpan:
    if current.is_located and other.is_located:
        start = min(current.start, other.start)
        end = max(current.end, other.end)
        if content is not None and end <= len(content):
            return TextSpan(text=content[start:end], start=start, end=end)
    # Without the content, keep the wider of the two
    if other.is_located and not current.is_located:
        return other
    if other.is_located and (other.end - other.start) > (current.end - current.start):
        return other
    return current


def _unique(items: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)
