"""
Risk Scoring Engine - Aggregator.

============================================================
PURPOSE
============================================================
The RiskAggregator turns a SignalSet into one bounded,
explainable RiskAssessment.

It performs:
1. Per-signal weighting
2. Score aggregation
3. Category classification
4. Confidence derivation from successful signals
5. Contributing-factor breakdown

============================================================
DESIGN PRINCIPLES
============================================================
- Pure and deterministic: no I/O, no clock, no randomness
- Failed signals contribute 0 and lower confidence
- Total signal failure yields a LOW, zero-confidence result
  rather than an error

============================================================
USAGE
============================================================
    from risk_scoring import RiskAggregator, SignalSet, SignalResult, SignalKind

    aggregator = RiskAggregator()
    assessment = aggregator.aggregate(SignalSet.of(
        SignalResult.ok(SignalKind.SENTIMENT, 80),
        SignalResult.ok(SignalKind.CONTROVERSY, 90),
        SignalResult.ok(SignalKind.AUDIENCE, 60),
        SignalResult.ok(SignalKind.TREND, 30),
    ))

    print(f"Risk: {assessment.risk_category.label} ({assessment.risk_score}/100)")

============================================================
"""

import logging
from typing import List, Optional

from core.exceptions import AggregationInconsistency

from .config import PipelineConfig, WeightConfig
from .types import (
    ContributingFactor,
    RiskAssessment,
    RiskCategory,
    SignalKind,
    SignalSet,
)


logger = logging.getLogger(__name__)


class RiskAggregator:
    """
    Combines the four signal contributions into a RiskAssessment.

    score      = sum(weight_k * severity_k) over successful signals
    confidence = 100 * sum(weight_k) over successful signals
    category   = fixed partition of score
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def aggregate(
        self,
        signals: SignalSet,
        weights: Optional[WeightConfig] = None,
    ) -> RiskAssessment:
        """
        Aggregate a SignalSet.

        Args:
            signals: Collected signals for one job (may be partial)
            weights: Weight vector; the configured one if omitted

        Returns:
            RiskAssessment satisfying the score/category/confidence bounds
        """
        weights = weights or self.config.weights

        raw_score = 0.0
        successful_weight = 0.0
        factors: List[ContributingFactor] = []

        for kind in SignalKind.all_kinds():
            result = signals.get(kind)
            if result is None or not result.is_ok:
                continue

            weight = weights.weight_for(kind)
            impact = weight * result.severity
            raw_score += impact
            successful_weight += weight

            if impact > 0:
                factors.append(ContributingFactor(
                    kind=kind,
                    severity=result.severity,
                    weight=weight,
                    weighted_impact=round(impact, 2),
                ))

        failed = tuple(signals.failed_kinds)

        if len(failed) == len(SignalKind.all_kinds()):
            logger.warning("All signals failed; returning zero-confidence LOW assessment")
            return RiskAssessment(
                risk_score=0.0,
                risk_category=RiskCategory.LOW,
                confidence_level=0.0,
                contributing_factors=(),
                failed_signals=failed,
                low_confidence=True,
                total_signal_failure=True,
            )

        score = round(max(0.0, min(100.0, raw_score)), 2)
        confidence = round(max(0.0, min(100.0, 100.0 * successful_weight)), 2)
        category = RiskCategory.from_score(score)

        factors.sort(key=lambda f: (-f.weighted_impact, f.kind.order))

        if category in (RiskCategory.HIGH, RiskCategory.CRITICAL) and not factors:
            raise AggregationInconsistency(
                f"{category.label} assessment has no contributing factor",
                context={"risk_score": score},
            )

        assessment = RiskAssessment(
            risk_score=score,
            risk_category=category,
            confidence_level=confidence,
            contributing_factors=tuple(factors),
            failed_signals=failed,
            low_confidence=confidence < self.config.low_confidence_threshold,
            total_signal_failure=False,
        )

        logger.debug(
            f"Aggregated score={score} category={category.value} "
            f"confidence={confidence} failed={[k.value for k in failed]}"
        )
        return assessment


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def aggregate(
    signals: SignalSet,
    weights: Optional[WeightConfig] = None,
    config: Optional[PipelineConfig] = None,
) -> RiskAssessment:
    """
    Aggregate a SignalSet in one call.

    For repeated use prefer a persistent RiskAggregator.
    """
    return RiskAggregator(config).aggregate(signals, weights)


def format_risk_summary(assessment: RiskAssessment) -> str:
    """
    Format a human-readable risk summary.

    Useful for logging and operator consoles.
    """
    lines = [
        "=" * 50,
        "CONTENT RISK ASSESSMENT",
        "=" * 50,
        f"Risk Score: {assessment.risk_score:.2f}/100",
        f"Risk Category: {assessment.risk_category.label}",
        f"Confidence: {assessment.confidence_level:.0f}%"
        + (" (LOW CONFIDENCE)" if assessment.low_confidence else ""),
        "",
        "Contributing Factors:",
    ]

    if assessment.contributing_factors:
        for factor in assessment.contributing_factors:
            lines.append(
                f"  {factor.kind.value:<12} severity {factor.severity:6.2f}"
                f"  x {factor.weight:.2f} = {factor.weighted_impact:6.2f}"
            )
    else:
        lines.append("  (none)")

    if assessment.failed_signals:
        lines.append("")
        lines.append(
            "Unavailable Signals: " + ", ".join(k.value for k in assessment.failed_signals)
        )

    lines.append("=" * 50)
    return "\n".join(lines)
