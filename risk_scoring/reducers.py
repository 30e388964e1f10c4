"""
Risk Scoring Engine - Signal Reducers.

============================================================
PURPOSE
============================================================
Reduce each signal's heterogeneous detail payload to a
single risk contribution in [0, 100].

Each reducer:
1. Takes a typed detail payload
2. Applies a fixed, monotonic mapping
3. Returns a clamped contribution

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input = same output
- Monotonic: raising a risk-bearing input never lowers
  the contribution
- Controversy and trend take the MAX, not the average, so
  one severe item is never diluted by calm ones

============================================================
"""

import math
from abc import ABC, abstractmethod
from typing import Optional

from .config import PipelineConfig, SentimentReductionConfig, TrendReductionConfig
from .types import (
    AudienceDetail,
    ControversyDetail,
    SentimentDetail,
    SignalDetail,
    SignalKind,
    TrendDetail,
)


def clamp_score(value: float) -> float:
    """Clamp to [0, 100]. NaN and infinities are rejected."""
    if not math.isfinite(value):
        raise ValueError(f"Non-finite score: {value}")
    return max(0.0, min(100.0, value))


# ============================================================
# BASE REDUCER
# ============================================================


class BaseSignalReducer(ABC):
    """Abstract base class for signal reducers."""

    @property
    @abstractmethod
    def kind(self) -> SignalKind:
        """Return the signal kind this reducer handles."""
        pass

    @abstractmethod
    def reduce(self, detail: SignalDetail) -> float:
        """Return the 0-100 contribution for a detail payload."""
        pass


# ============================================================
# SENTIMENT
# ============================================================


class SentimentReducer(BaseSignalReducer):
    """
    contribution = 100 * intensity * label_weight

    Intensity is the provider's emotional intensity in [0, 1].
    """

    def __init__(self, config: Optional[SentimentReductionConfig] = None):
        self.config = config or SentimentReductionConfig()

    @property
    def kind(self) -> SignalKind:
        return SignalKind.SENTIMENT

    def reduce(self, detail: SentimentDetail) -> float:
        if not math.isfinite(detail.intensity):
            raise ValueError(f"Non-finite sentiment intensity: {detail.intensity}")
        intensity = max(0.0, min(1.0, detail.intensity))
        return clamp_score(100.0 * intensity * self.config.label_weight(detail.label))


# ============================================================
# CONTROVERSY
# ============================================================


class ControversyReducer(BaseSignalReducer):
    """Maximum severity across the five dimensions and any trigger."""

    @property
    def kind(self) -> SignalKind:
        return SignalKind.CONTROVERSY

    def reduce(self, detail: ControversyDetail) -> float:
        scores = list(detail.dimension_scores.values())
        scores.extend(t.score for t in detail.triggers)
        if not scores:
            return 0.0
        return clamp_score(max(scores))


# ============================================================
# AUDIENCE
# ============================================================


class AudienceReducer(BaseSignalReducer):
    """Percentage of predicted negative reaction."""

    @property
    def kind(self) -> SignalKind:
        return SignalKind.AUDIENCE

    def reduce(self, detail: AudienceDetail) -> float:
        return clamp_score(detail.distribution.negative)


# ============================================================
# TREND
# ============================================================


class TrendReducer(BaseSignalReducer):
    """
    Maximum sentiment-adjusted severity across trend matches.

    A negative-sentiment trend keeps more of its volume than a
    positive one, so for equal volume a negative match always
    contributes strictly more.
    """

    def __init__(self, config: Optional[TrendReductionConfig] = None):
        self.config = config or TrendReductionConfig()

    @property
    def kind(self) -> SignalKind:
        return SignalKind.TREND

    def match_severity(self, volume: float, sentiment: float) -> float:
        volume = clamp_score(volume)
        if not math.isfinite(sentiment):
            raise ValueError(f"Non-finite trend sentiment: {sentiment}")
        sentiment = max(-1.0, min(1.0, sentiment))
        negativity = (1.0 - sentiment) / 2.0
        floor = self.config.positive_floor
        return clamp_score(volume * (floor + (1.0 - floor) * negativity))

    def reduce(self, detail: TrendDetail) -> float:
        if not detail.matches:
            return 0.0
        return clamp_score(max(m.severity for m in detail.matches))


# ============================================================
# DISPATCH
# ============================================================


def build_reducers(config: Optional[PipelineConfig] = None) -> dict:
    """Return one reducer per signal kind."""
    config = config or PipelineConfig()
    reducers = [
        SentimentReducer(config.sentiment),
        ControversyReducer(),
        AudienceReducer(),
        TrendReducer(config.trend),
    ]
    return {r.kind: r for r in reducers}


def reduce_signal(
    kind: SignalKind,
    detail: SignalDetail,
    config: Optional[PipelineConfig] = None,
) -> float:
    """Convenience wrapper: reduce one detail payload."""
    return build_reducers(config)[kind].reduce(detail)
