"""
Risk Scoring Engine - Package.

============================================================
PURPOSE
============================================================
Combines the four content analysis signals into a single
bounded, explainable risk score and category.

============================================================
FOUR SIGNALS
============================================================
1. SENTIMENT: Emotional intensity weighted by valence
2. CONTROVERSY: Max severity across five dimensions
3. AUDIENCE: Predicted negative reaction percentage
4. TREND: Max sentiment-adjusted trending phrase match

============================================================
SCORING
============================================================
Each signal: severity 0-100
Score: weighted sum (default 0.25 / 0.35 / 0.25 / 0.15)

Classification:
- LOW (0-25)
- MODERATE (26-50)
- HIGH (51-75)
- CRITICAL (76-100)

Confidence = 100 * sum of weights of successful signals.

============================================================
"""

from .config import (
    AnalyzerConfig,
    PipelineConfig,
    RecommendationConfig,
    SentimentReductionConfig,
    TrendReductionConfig,
    WeightConfig,
    get_conservative_config,
    get_default_config,
)
from .engine import RiskAggregator, aggregate, format_risk_summary
from .reducers import (
    AudienceReducer,
    ControversyReducer,
    SentimentReducer,
    TrendReducer,
    build_reducers,
    reduce_signal,
)
from .types import (
    AudienceDetail,
    ContributingFactor,
    ControversyDetail,
    ControversyDimension,
    ControversyTrigger,
    EmotionalTerm,
    ReactionDistribution,
    RiskAssessment,
    RiskCategory,
    SegmentReaction,
    SentimentDetail,
    SentimentLabel,
    SignalKind,
    SignalResult,
    SignalSet,
    SignalStatus,
    TextSpan,
    TrendDetail,
    TrendMatch,
)


__all__ = [
    # Engine
    "RiskAggregator",
    "aggregate",
    "format_risk_summary",

    # Reducers
    "SentimentReducer",
    "ControversyReducer",
    "AudienceReducer",
    "TrendReducer",
    "build_reducers",
    "reduce_signal",

    # Config
    "PipelineConfig",
    "WeightConfig",
    "AnalyzerConfig",
    "RecommendationConfig",
    "SentimentReductionConfig",
    "TrendReductionConfig",
    "get_default_config",
    "get_conservative_config",

    # Types
    "SignalKind",
    "SignalStatus",
    "SignalResult",
    "SignalSet",
    "RiskCategory",
    "RiskAssessment",
    "ContributingFactor",
    "TextSpan",
    "SentimentLabel",
    "SentimentDetail",
    "EmotionalTerm",
    "ControversyDimension",
    "ControversyDetail",
    "ControversyTrigger",
    "ReactionDistribution",
    "SegmentReaction",
    "AudienceDetail",
    "TrendMatch",
    "TrendDetail",
]


__version__ = "1.0.0"
