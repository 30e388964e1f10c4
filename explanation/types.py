"""
Explanation Builder - Type Definitions.

An Explanation is the human-facing account of one assessment:
a one-sentence summary, a rationale paragraph, the highlighted
text issues behind the score, and any historical comparisons
supplied by the incident lookup collaborator.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from risk_scoring.types import SignalKind, TextSpan


@dataclass(frozen=True)
class HighlightedIssue:
    """
    One problematic span.

    Overlapping spans flagged by different analyzers are merged
    into a single issue citing every reason.
    """

    span: TextSpan
    severity: float
    reasons: Tuple[str, ...] = ()
    sources: Tuple[SignalKind, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "span": self.span.to_dict(),
            "severity": self.severity,
            "reasons": list(self.reasons),
            "sources": [s.value for s in self.sources],
        }


@dataclass(frozen=True)
class HistoricalComparison:
    """A past incident similar to the content, as reported by the lookup."""

    incident_id: str
    description: str
    similarity: float  # 0-1
    outcome: Optional[str] = None
    occurred_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoricalComparison":
        similarity = float(data.get("similarity", 0.0))
        if not math.isfinite(similarity):
            raise ValueError(f"Non-finite similarity: {similarity}")
        return cls(
            incident_id=str(data["incident_id"]),
            description=str(data.get("description", "")),
            similarity=max(0.0, min(1.0, similarity)),
            outcome=data.get("outcome"),
            occurred_at=data.get("occurred_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "incident_id": self.incident_id,
            "description": self.description,
            "similarity": self.similarity,
            "outcome": self.outcome,
            "occurred_at": self.occurred_at,
        }


@dataclass(frozen=True)
class Explanation:
    summary: str
    rationale: str
    highlighted_issues: Tuple[HighlightedIssue, ...] = ()
    historical_comparisons: Tuple[HistoricalComparison, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.highlighted_issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "rationale": self.rationale,
            "highlighted_issues": [i.to_dict() for i in self.highlighted_issues],
            "historical_comparisons": [c.to_dict() for c in self.historical_comparisons],
        }
