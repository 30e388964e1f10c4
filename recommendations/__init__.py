"""
Recommendation Engine - Package.

Generates prioritized content edits that would lower a draft's
risk score, each with a projected impact.

Usage:
    from recommendations import RecommendationEngine

    engine = RecommendationEngine()
    recommendations = engine.generate(job, assessment, signals)
    for rec in recommendations:
        print(f"[{rec.kind.value}] -{rec.estimated_impact}: {rec.rationale}")
"""

from .engine import RecommendationEngine, soften
from .templates import DIMENSION_GUIDANCE, GENERIC_SUGGESTIONS, WORD_REPLACEMENTS, replacement_for
from .types import Recommendation, RecommendationKind, RecommendationSet


__all__ = [
    "RecommendationEngine",
    "Recommendation",
    "RecommendationKind",
    "RecommendationSet",
    "soften",
    "replacement_for",
    "WORD_REPLACEMENTS",
    "DIMENSION_GUIDANCE",
    "GENERIC_SUGGESTIONS",
]
