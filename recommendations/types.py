"""
Recommendation Engine - Type Definitions.

A Recommendation is one suggested content edit with a projected
risk-score reduction. A RecommendationSet keeps them ordered by
estimated impact, highest first.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from risk_scoring.types import SignalKind, TextSpan


class RecommendationKind(str, Enum):
    """Kinds of content edit, in tie-break priority order."""

    REMOVAL = "removal"
    PHRASE_MODIFICATION = "phrase_modification"
    WORD_REPLACEMENT = "word_replacement"
    TONE_ADJUSTMENT = "tone_adjustment"
    ADDITION = "addition"

    @property
    def priority(self) -> int:
        """Lower sorts first when impacts tie."""
        return list(RecommendationKind).index(self)


@dataclass(frozen=True)
class Recommendation:
    """
    One suggested content edit.

    estimated_impact is the projected risk-score reduction if
    the edit is applied; a heuristic, not a re-analysis.
    """

    kind: RecommendationKind
    rationale: str
    estimated_impact: float
    original: Optional[TextSpan] = None
    suggested_text: Optional[str] = None
    source_signal: Optional[SignalKind] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.estimated_impact <= 100.0:
            raise ValueError(f"estimated_impact {self.estimated_impact} outside [0, 100]")

    @property
    def sort_key(self) -> Tuple[float, int]:
        return (-self.estimated_impact, self.kind.priority)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "original": self.original.to_dict() if self.original else None,
            "suggested_text": self.suggested_text,
            "rationale": self.rationale,
            "estimated_impact": self.estimated_impact,
            "source_signal": self.source_signal.value if self.source_signal else None,
        }


@dataclass(frozen=True)
class RecommendationSet:
    """
    Ordered recommendations, non-increasing by estimated impact.

    Ties are ordered by kind priority:
    removal > phrase_modification > word_replacement > tone_adjustment > addition
    """

    recommendations: Tuple[Recommendation, ...] = ()

    def __post_init__(self) -> None:
        keys = [r.sort_key for r in self.recommendations]
        if any(a > b for a, b in zip(keys, keys[1:])):
            raise ValueError("RecommendationSet must be ordered by impact, then kind priority")

    @classmethod
    def sorted_from(cls, recommendations) -> "RecommendationSet":
        """Build a set, sorting a stable copy of the candidates."""
        return cls(recommendations=tuple(sorted(recommendations, key=lambda r: r.sort_key)))

    def __len__(self) -> int:
        return len(self.recommendations)

    def __iter__(self) -> Iterator[Recommendation]:
        return iter(self.recommendations)

    def __getitem__(self, index: int) -> Recommendation:
        return self.recommendations[index]

    @property
    def total_estimated_impact(self) -> float:
        return round(sum(r.estimated_impact for r in self.recommendations), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommendations": [r.to_dict() for r in self.recommendations],
            "count": len(self.recommendations),
            "total_estimated_impact": self.total_estimated_impact,
        }
