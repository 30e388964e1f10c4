"""
Risk Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the content risk aggregation layer.

This module defines the enums and dataclasses shared by the
analyzer adapters, the aggregator, the recommendation engine
and the explanation builder.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable
- Enums for discrete state values
- Dataclasses for structured data
- No timestamps or random ids on derived outputs, so
  aggregation stays byte-for-byte reproducible

============================================================
SIGNAL KINDS
============================================================
The aggregator consumes exactly four signals:

1. SENTIMENT - Emotional tone and intensity of the draft
2. CONTROVERSY - Five controversy dimensions
3. AUDIENCE - Predicted audience reaction distribution
4. TREND - Matches against currently trending phrases

Each signal is normalized to a severity in [0, 100].

============================================================
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union


# ============================================================
# ENUMS
# ============================================================


class SignalKind(str, Enum):
    """The four analysis signals combined by the aggregator."""

    SENTIMENT = "sentiment"
    CONTROVERSY = "controversy"
    AUDIENCE = "audience"
    TREND = "trend"

    @classmethod
    def all_kinds(cls) -> List["SignalKind"]:
        """Return all signal kinds in evaluation order."""
        return [cls.SENTIMENT, cls.CONTROVERSY, cls.AUDIENCE, cls.TREND]

    @property
    def order(self) -> int:
        return SignalKind.all_kinds().index(self)


class SignalStatus(str, Enum):
    """Outcome of one analyzer invocation."""

    OK = "ok"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class RiskCategory(str, Enum):
    """
    Risk category derived from the risk score.

    Fixed partition:
    - LOW: 0-25
    - MODERATE: 26-50
    - HIGH: 51-75
    - CRITICAL: 76-100
    """

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, score: float) -> "RiskCategory":
        """
        Classify a risk score.

        Boundaries are inclusive on the upper end, so fractional
        scores between buckets (25.5) fall into the higher bucket.
        """
        if score <= 25:
            return cls.LOW
        elif score <= 50:
            return cls.MODERATE
        elif score <= 75:
            return cls.HIGH
        return cls.CRITICAL

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {"low": 0, "moderate": 1, "high": 2, "critical": 3}[self.value]

    @property
    def minimum_recommendations(self) -> int:
        """Minimum recommendation count required for this category."""
        if self.severity_order >= RiskCategory.HIGH.severity_order:
            return 5
        if self.severity_order >= RiskCategory.MODERATE.severity_order:
            return 3
        return 0

    @property
    def label(self) -> str:
        return self.value.capitalize()


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    MIXED = "mixed"
    NEGATIVE = "negative"


class ControversyDimension(str, Enum):
    """The five controversy dimensions scored by the controversy provider."""

    POLITICAL = "political"
    RELIGIOUS = "religious"
    SOCIAL = "social"
    CULTURAL = "cultural"
    ECONOMIC = "economic"


# ============================================================
# SIGNAL DETAIL CONTRACTS
# ============================================================


@dataclass(frozen=True)
class TextSpan:
    """
    A span of the job's full text.

    Offsets are None when the provider named a phrase that
    could not be located in the content.
    """

    text: str
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def is_located(self) -> bool:
        return self.start is not None and self.end is not None

    def overlaps(self, other: "TextSpan") -> bool:
        if self.is_located and other.is_located:
            return self.start < other.end and other.start < self.end
        return self.text.lower() == other.text.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class EmotionalTerm:
    span: TextSpan
    intensity: float  # 0-1


@dataclass(frozen=True)
class SentimentDetail:
    label: SentimentLabel
    intensity: float  # 0-1
    emotional_terms: Tuple[EmotionalTerm, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value,
            "intensity": self.intensity,
            "emotional_terms": [
                {**t.span.to_dict(), "intensity": t.intensity}
                for t in self.emotional_terms
            ],
        }


@dataclass(frozen=True)
class ControversyTrigger:
    span: TextSpan
    dimension: ControversyDimension
    score: float  # 0-100


@dataclass(frozen=True)
class ControversyDetail:
    dimension_scores: Dict[ControversyDimension, float] = field(default_factory=dict)
    triggers: Tuple[ControversyTrigger, ...] = ()

    @property
    def top_dimension(self) -> Optional[ControversyDimension]:
        if not self.dimension_scores:
            return None
        # Enum order breaks ties so the result is stable
        order = list(ControversyDimension)
        return max(
            self.dimension_scores,
            key=lambda d: (self.dimension_scores[d], -order.index(d)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension_scores": {
                d.value: self.dimension_scores[d]
                for d in ControversyDimension
                if d in self.dimension_scores
            },
            "triggers": [
                {**t.span.to_dict(), "dimension": t.dimension.value, "score": t.score}
                for t in self.triggers
            ],
        }


@dataclass(frozen=True)
class ReactionDistribution:
    """
    Predicted audience reaction split, in percent.

    positive + negative + neutral is always 100 (±0.1).
    """

    positive: float
    negative: float
    neutral: float

    TOLERANCE = 0.1

    def __post_init__(self) -> None:
        for name in ("positive", "negative", "neutral"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0 or value > 100:
                raise ValueError(f"{name} reaction {value} outside [0, 100]")
        total = self.positive + self.negative + self.neutral
        if abs(total - 100.0) > self.TOLERANCE:
            raise ValueError(f"Reaction distribution sums to {total}, expected 100")

    @classmethod
    def from_raw(
        cls,
        positive: float,
        negative: float,
        neutral: float,
    ) -> "ReactionDistribution":
        """
        Normalize raw counts, probabilities or percentages.

        Values are scaled to percentages, rounded to one decimal,
        and the rounding residue is folded into the largest
        bucket so the sum is exactly 100.
        """
        raw = [float(positive), float(negative), float(neutral)]
        if not all(math.isfinite(v) for v in raw):
            raise ValueError(f"Non-finite reaction values: {raw}")
        raw = [max(0.0, v) for v in raw]
        total = sum(raw)
        if total <= 0:
            return cls.neutral_baseline()

        pct = [round(v / total * 100.0, 1) for v in raw]
        residue = round(100.0 - sum(pct), 1)
        if residue:
            largest = max(range(3), key=lambda i: (pct[i], -i))
            pct[largest] = round(pct[largest] + residue, 1)

        return cls(positive=pct[0], negative=pct[1], neutral=pct[2])

    @classmethod
    def neutral_baseline(cls) -> "ReactionDistribution":
        return cls(positive=0.0, negative=0.0, neutral=100.0)

    def to_dict(self) -> Dict[str, float]:
        return {
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
        }


@dataclass(frozen=True)
class SegmentReaction:
    segment: str
    negative_pct: float
    concern: Optional[str] = None


@dataclass(frozen=True)
class AudienceDetail:
    distribution: ReactionDistribution
    segments: Tuple[SegmentReaction, ...] = ()
    baseline: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distribution": self.distribution.to_dict(),
            "segments": [
                {"segment": s.segment, "negative_pct": s.negative_pct, "concern": s.concern}
                for s in self.segments
            ],
            "baseline": self.baseline,
        }


@dataclass(frozen=True)
class TrendMatch:
    span: TextSpan
    volume: float  # 0-100, normalized trend popularity
    sentiment: float  # -1 (negative) to +1 (positive)
    severity: float  # 0-100, volume adjusted for trend sentiment
    topic: Optional[str] = None


@dataclass(frozen=True)
class TrendDetail:
    matches: Tuple[TrendMatch, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [
                {
                    **m.span.to_dict(),
                    "topic": m.topic,
                    "volume": m.volume,
                    "sentiment": m.sentiment,
                    "severity": m.severity,
                }
                for m in self.matches
            ],
        }


SignalDetail = Union[SentimentDetail, ControversyDetail, AudienceDetail, TrendDetail]


# ============================================================
# SIGNAL CONTRACTS
# ============================================================


@dataclass(frozen=True)
class SignalResult:
    """
    One analyzer's normalized output.

    severity is the signal's risk contribution in [0, 100].
    Failed and timed-out results always carry severity 0.
    """

    kind: SignalKind
    status: SignalStatus
    severity: float = 0.0
    detail: Optional[SignalDetail] = None
    error: Optional[str] = None
    latency_ms: Optional[float] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.severity) or not 0.0 <= self.severity <= 100.0:
            raise ValueError(f"{self.kind.value} severity {self.severity} outside [0, 100]")
        if self.status != SignalStatus.OK and self.severity != 0.0:
            raise ValueError(f"{self.kind.value} {self.status.value} result must carry severity 0")

    @classmethod
    def ok(
        cls,
        kind: SignalKind,
        severity: float,
        detail: Optional[SignalDetail] = None,
        latency_ms: Optional[float] = None,
    ) -> "SignalResult":
        if not math.isfinite(severity):
            raise ValueError(f"{kind.value} severity {severity} is not finite")
        return cls(
            kind=kind,
            status=SignalStatus.OK,
            severity=round(max(0.0, min(100.0, severity)), 2),
            detail=detail,
            latency_ms=latency_ms,
        )

    @classmethod
    def failed(cls, kind: SignalKind, error: str) -> "SignalResult":
        return cls(kind=kind, status=SignalStatus.FAILED, error=error)

    @classmethod
    def timed_out(cls, kind: SignalKind, error: str = "analyzer timed out") -> "SignalResult":
        return cls(kind=kind, status=SignalStatus.TIMED_OUT, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == SignalStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "status": self.status.value,
            "severity": self.severity,
            "detail": self.detail.to_dict() if self.detail is not None else None,
            "error": self.error,
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class SignalSet:
    """
    The signals collected for one job, at most one per kind.

    Build with SignalSet.of(...) or SignalSet(results=(...)).
    """

    results: Tuple[SignalResult, ...] = ()

    def __post_init__(self) -> None:
        kinds = [r.kind for r in self.results]
        if len(kinds) != len(set(kinds)):
            raise ValueError("SignalSet holds at most one result per signal kind")
        ordered = tuple(sorted(self.results, key=lambda r: r.kind.order))
        object.__setattr__(self, "results", ordered)

    @classmethod
    def of(cls, *results: SignalResult) -> "SignalSet":
        return cls(results=tuple(results))

    @classmethod
    def from_iterable(cls, results: Iterable[SignalResult]) -> "SignalSet":
        return cls(results=tuple(results))

    def get(self, kind: SignalKind) -> Optional[SignalResult]:
        for result in self.results:
            if result.kind == kind:
                return result
        return None

    def __contains__(self, kind: object) -> bool:
        return any(r.kind == kind for r in self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    @property
    def ok_kinds(self) -> List[SignalKind]:
        return [r.kind for r in self.results if r.is_ok]

    @property
    def failed_kinds(self) -> List[SignalKind]:
        """Kinds that failed, timed out, or are missing entirely."""
        ok = set(self.ok_kinds)
        return [k for k in SignalKind.all_kinds() if k not in ok]

    def to_dict(self) -> Dict[str, Any]:
        return {r.kind.value: r.to_dict() for r in self.results}


# ============================================================
# ASSESSMENT CONTRACTS
# ============================================================


@dataclass(frozen=True)
class ContributingFactor:
    """A signal's weighted share of the final risk score."""

    kind: SignalKind
    severity: float
    weight: float
    weighted_impact: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "severity": self.severity,
            "weight": self.weight,
            "weighted_impact": self.weighted_impact,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """
    Aggregated risk for one SignalSet.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - risk_score: Always 0-100
    - confidence_level: Always 0-100
    - risk_category: Always the partition bucket of risk_score
    - contributing_factors: Non-empty for HIGH/CRITICAL,
      sorted by weighted impact descending
    ============================================================
    """

    risk_score: float
    risk_category: RiskCategory
    confidence_level: float
    contributing_factors: Tuple[ContributingFactor, ...] = ()
    failed_signals: Tuple[SignalKind, ...] = ()
    low_confidence: bool = False
    total_signal_failure: bool = False

    @property
    def degraded(self) -> bool:
        """True when any signal failed, timed out, or was missing."""
        return bool(self.failed_signals)

    @property
    def dominant_factor(self) -> Optional[ContributingFactor]:
        return self.contributing_factors[0] if self.contributing_factors else None

    @property
    def is_high_or_critical(self) -> bool:
        return self.risk_category in (RiskCategory.HIGH, RiskCategory.CRITICAL)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": self.risk_score,
            "risk_category": self.risk_category.value,
            "confidence_level": self.confidence_level,
            "contributing_factors": [f.to_dict() for f in self.contributing_factors],
            "failed_signals": [k.value for k in self.failed_signals],
            "degraded": self.degraded,
            "low_confidence": self.low_confidence,
            "total_signal_failure": self.total_signal_failure,
        }
