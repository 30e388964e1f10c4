"""
Risk Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Defines all configuration dataclasses for the content risk
pipeline: signal weights, reduction tuning, analyzer
timeouts, and recommendation thresholds.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations
- Weights are validated when the config is built, never at
  aggregation time
- Environment overrides via CONTENT_RISK_* variables

============================================================
WEIGHT PHILOSOPHY
============================================================
Controversy carries the largest weight: a single severe
controversy dimension is the strongest backlash predictor.
Sentiment and audience reaction share the middle, trend
matching is the weakest, most volatile signal.

    sentiment 0.25 | controversy 0.35 | audience 0.25 | trend 0.15

============================================================
"""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from core.exceptions import AggregationInconsistency, ConfigurationError

from .types import SignalKind, SentimentLabel


logger = logging.getLogger(__name__)


WEIGHT_SUM_TOLERANCE = 1e-6


# ============================================================
# SIGNAL WEIGHTS
# ============================================================


@dataclass(frozen=True)
class WeightConfig:
    """
    Fixed weight vector for the four signals.

    Weights must be non-negative and sum to 1.0. A violation
    raises AggregationInconsistency at construction time.
    """

    sentiment: float = 0.25
    controversy: float = 0.35
    audience: float = 0.25
    trend: float = 0.15

    def __post_init__(self) -> None:
        for kind in SignalKind.all_kinds():
            value = getattr(self, kind.value)
            if not math.isfinite(value) or value < 0:
                raise AggregationInconsistency(
                    f"Weight for {kind.value} must be a finite non-negative number",
                    config_key=f"weights.{kind.value}",
                    actual_value=value,
                )

        total = self.sentiment + self.controversy + self.audience + self.trend
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise AggregationInconsistency(
                f"Signal weights must sum to 1.0, got {total:.6f}",
                config_key="weights",
                actual_value=total,
            )

    def weight_for(self, kind: SignalKind) -> float:
        return getattr(self, kind.value)

    def to_dict(self) -> Dict[str, Any]:
        return {kind.value: self.weight_for(kind) for kind in SignalKind.all_kinds()}


# ============================================================
# REDUCTION TUNING
# ============================================================


@dataclass(frozen=True)
class SentimentReductionConfig:
    """
    Maps a sentiment label and intensity to a 0-100 contribution.

    contribution = 100 * intensity * label_weight

    ============================================================
    LABEL WEIGHT RATIONALE
    ============================================================
    - NEGATIVE 1.0: Intense negativity is the backlash driver
    - MIXED 0.6: Conflicting tone reads as ambivalent or sarcastic
    - NEUTRAL 0.2: Intensity without valence still draws attention
    - POSITIVE 0.1: Effusive content rarely triggers backlash
    ============================================================
    """

    negative_weight: float = 1.0
    mixed_weight: float = 0.6
    neutral_weight: float = 0.2
    positive_weight: float = 0.1

    def label_weight(self, label: SentimentLabel) -> float:
        return {
            SentimentLabel.NEGATIVE: self.negative_weight,
            SentimentLabel.MIXED: self.mixed_weight,
            SentimentLabel.NEUTRAL: self.neutral_weight,
            SentimentLabel.POSITIVE: self.positive_weight,
        }[label]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "negative_weight": self.negative_weight,
            "mixed_weight": self.mixed_weight,
            "neutral_weight": self.neutral_weight,
            "positive_weight": self.positive_weight,
        }


@dataclass(frozen=True)
class TrendReductionConfig:
    """
    Adjusts a trend match's volume by the trend's own sentiment.

    severity = volume * (positive_floor + (1 - positive_floor) * negativity)
    negativity = (1 - trend_sentiment) / 2

    A fully negative trend keeps its whole volume; a fully
    positive trend keeps positive_floor of it.
    """

    positive_floor: float = 0.6

    def __post_init__(self) -> None:
        if not 0.0 <= self.positive_floor < 1.0:
            raise ConfigurationError(
                "positive_floor must be in [0, 1)",
                config_key="trend.positive_floor",
                actual_value=self.positive_floor,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {"positive_floor": self.positive_floor}


# ============================================================
# ANALYZER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Timeouts and worker pool settings for the orchestrator.

    ============================================================
    TIMEOUT RATIONALE
    ============================================================
    - Sentiment/controversy on text: 30s fast path
    - Audience/trend on media-heavy jobs: up to 2 minutes
    - Per-job deadline bounds the whole barrier wait
    ============================================================
    """

    text_timeout_seconds: float = 30.0
    media_timeout_seconds: float = 120.0
    job_deadline_seconds: float = 150.0

    # Shared across all jobs served by one orchestrator
    pool_size: int = 16

    # Retries inside one adapter call, bounded by the timeout above
    max_retries: int = 0
    retry_delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        for name in ("text_timeout_seconds", "media_timeout_seconds", "job_deadline_seconds"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a finite positive number",
                    config_key=f"analyzer.{name}",
                    actual_value=value,
                )
        if not math.isfinite(self.retry_delay_seconds) or self.retry_delay_seconds < 0:
            raise ConfigurationError(
                "retry_delay_seconds must be a finite non-negative number",
                config_key="analyzer.retry_delay_seconds",
                actual_value=self.retry_delay_seconds,
            )
        if self.pool_size < 1:
            raise ConfigurationError(
                "pool_size must be at least 1",
                config_key="analyzer.pool_size",
                actual_value=self.pool_size,
            )
        if self.max_retries < 0:
            raise ConfigurationError(
                "max_retries must be non-negative",
                config_key="analyzer.max_retries",
                actual_value=self.max_retries,
            )

    def timeout_for(self, kind: SignalKind, has_media: bool) -> float:
        """Per-signal timeout for one analyzer call."""
        if has_media and kind in (SignalKind.AUDIENCE, SignalKind.TREND):
            return self.media_timeout_seconds
        return self.text_timeout_seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text_timeout_seconds": self.text_timeout_seconds,
            "media_timeout_seconds": self.media_timeout_seconds,
            "job_deadline_seconds": self.job_deadline_seconds,
            "pool_size": self.pool_size,
            "max_retries": self.max_retries,
            "retry_delay_seconds": self.retry_delay_seconds,
        }


# ============================================================
# RECOMMENDATION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RecommendationConfig:
    """
    Thresholds for recommendation generation.

    expected_effect is the fraction of a signal's contribution
    an edit of that kind is projected to remove.
    """

    # Factors below this weighted impact produce no specific candidates
    min_factor_impact: float = 1.0

    # Trigger spans at or above this score are proposed for removal
    removal_threshold: float = 80.0

    # Upper bound on returned recommendations (never below the category minimum)
    max_recommendations: int = 10

    removal_effect: float = 1.0
    phrase_modification_effect: float = 0.7
    word_replacement_effect: float = 0.5
    tone_adjustment_effect: float = 0.3
    addition_effect: float = 0.2

    # Scale applied to generic broadening suggestions
    generic_effect: float = 0.1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_factor_impact": self.min_factor_impact,
            "removal_threshold": self.removal_threshold,
            "max_recommendations": self.max_recommendations,
            "removal_effect": self.removal_effect,
            "phrase_modification_effect": self.phrase_modification_effect,
            "word_replacement_effect": self.word_replacement_effect,
            "tone_adjustment_effect": self.tone_adjustment_effect,
            "addition_effect": self.addition_effect,
            "generic_effect": self.generic_effect,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class PipelineConfig:
    """
    Master configuration for the content risk pipeline.

    Aggregates all component configs and engine settings.
    """

    weights: WeightConfig = field(default_factory=WeightConfig)
    sentiment: SentimentReductionConfig = field(default_factory=SentimentReductionConfig)
    trend: TrendReductionConfig = field(default_factory=TrendReductionConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)

    # Confidence below this is flagged low_confidence
    low_confidence_threshold: float = 50.0

    # Jobs longer than this are rejected
    max_content_length: int = 50_000

    engine_version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not 0.0 <= self.low_confidence_threshold <= 100.0:
            raise ConfigurationError(
                "low_confidence_threshold must be in [0, 100]",
                config_key="low_confidence_threshold",
                actual_value=self.low_confidence_threshold,
            )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "PipelineConfig":
        """
        Load configuration from environment variables.

        A .env file is read first when present; real environment
        variables take precedence.
        """
        load_dotenv(env_file)

        try:
            weights = WeightConfig(
                sentiment=float(os.getenv("CONTENT_RISK_WEIGHT_SENTIMENT", "0.25")),
                controversy=float(os.getenv("CONTENT_RISK_WEIGHT_CONTROVERSY", "0.35")),
                audience=float(os.getenv("CONTENT_RISK_WEIGHT_AUDIENCE", "0.25")),
                trend=float(os.getenv("CONTENT_RISK_WEIGHT_TREND", "0.15")),
            )
            analyzer = AnalyzerConfig(
                text_timeout_seconds=float(os.getenv("CONTENT_RISK_TEXT_TIMEOUT_SECONDS", "30")),
                media_timeout_seconds=float(os.getenv("CONTENT_RISK_MEDIA_TIMEOUT_SECONDS", "120")),
                job_deadline_seconds=float(os.getenv("CONTENT_RISK_JOB_DEADLINE_SECONDS", "150")),
                pool_size=int(os.getenv("CONTENT_RISK_POOL_SIZE", "16")),
                max_retries=int(os.getenv("CONTENT_RISK_MAX_RETRIES", "0")),
                retry_delay_seconds=float(os.getenv("CONTENT_RISK_RETRY_DELAY_SECONDS", "1.0")),
            )
            config = cls(
                weights=weights,
                analyzer=analyzer,
                low_confidence_threshold=float(
                    os.getenv("CONTENT_RISK_LOW_CONFIDENCE_THRESHOLD", "50")
                ),
                max_content_length=int(os.getenv("CONTENT_RISK_MAX_CONTENT_LENGTH", "50000")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid CONTENT_RISK_* value: {e}", cause=e) from e

        logger.info(f"Loaded pipeline config: weights={weights.to_dict()}")
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": self.weights.to_dict(),
            "sentiment": self.sentiment.to_dict(),
            "trend": self.trend.to_dict(),
            "analyzer": self.analyzer.to_dict(),
            "recommendations": self.recommendations.to_dict(),
            "low_confidence_threshold": self.low_confidence_threshold,
            "max_content_length": self.max_content_length,
            "engine_version": self.engine_version,
        }


# ============================================================
# DEFAULT CONFIGURATION
# ============================================================


def get_default_config() -> PipelineConfig:
    """Return the default pipeline configuration."""
    return PipelineConfig()


def get_conservative_config() -> PipelineConfig:
    """
    Return a more conservative configuration.

    Controversy weighs more, removal is proposed earlier, and
    smaller factors still produce specific recommendations.
    """
    return PipelineConfig(
        weights=WeightConfig(
            sentiment=0.25,
            controversy=0.40,
            audience=0.20,
            trend=0.15,
        ),
        recommendations=RecommendationConfig(
            min_factor_impact=0.5,
            removal_threshold=70.0,
        ),
        low_confidence_threshold=75.0,
    )
