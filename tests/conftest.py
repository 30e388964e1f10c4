"""
Shared fixtures for the content risk test suite.

Providers are faked at the AnalysisProvider seam so every test
exercises the real adapters, aggregator, recommendation engine
and explanation builder.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from analyzers import (
    AudienceAnalyzer,
    ControversyAnalyzer,
    SentimentAnalyzer,
    TrendAnalyzer,
)
from orchestrator import AnalysisJob, AnalysisOrchestrator, ContentRiskService
from risk_scoring import PipelineConfig


# ============================================================
# FAKES
# ============================================================

class FakeProvider:
    """Returns a canned payload, raises, or stalls."""

    def __init__(
        self,
        payload: Optional[Dict[str, Any]] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.payload = payload if payload is not None else {}
        self.error = error
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def analyze(self, content: str, context: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append({"content": content, "context": context})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.payload


class FakeTrendFeed:
    def __init__(self, trends: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.trends = trends or []
        self.error = error

    async def current_trends(self) -> List[Dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return self.trends


class FakeIncidentLookup:
    def __init__(self, matches=None, error: Optional[Exception] = None):
        self.matches = matches or []
        self.error = error
        self.queries: List[str] = []

    async def find_similar(self, content: str):
        self.queries.append(content)
        if self.error is not None:
            raise self.error
        return self.matches


# ============================================================
# PAYLOADS
# ============================================================

HIGH_RISK_TEXT = (
    "The corrupt elite are disgraceful and everyone knows it. "
    "Time to stop the steal #ElectionFraud"
)


def high_risk_payloads() -> Dict[str, Dict[str, Any]]:
    """
    Payloads reducing to sentiment 80, controversy 90, audience 60
    and trend 30; weighted score 71.
    """
    return {
        "sentiment": {
            "label": "negative",
            "intensity": 0.8,
            "emotional_terms": [
                {"text": "disgraceful", "intensity": 0.9},
                {"text": "everyone", "intensity": 0.4},
            ],
        },
        "controversy": {
            "dimensions": {
                "political": 90,
                "religious": 0,
                "social": 35,
                "cultural": 5,
                "economic": 10,
            },
            "triggers": [
                {"text": "corrupt elite", "dimension": "political", "score": 90},
                {"text": "stop the steal", "dimension": "political", "score": 60},
            ],
        },
        "audience": {
            "reactions": {"positive": 30, "negative": 60, "neutral": 10},
            "segments": [
                {"segment": "moderate voters", "negative": 72, "concern": "election integrity"},
                {"segment": "loyal followers", "negative": 15},
            ],
        },
        "trend": {
            "matches": [
                {"phrase": "#ElectionFraud", "topic": "election fraud", "volume": 30, "sentiment": -1.0},
            ],
        },
    }


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


@pytest.fixture
def fast_config() -> PipelineConfig:
    """Short timeouts for timeout and cancellation tests."""
    from risk_scoring import AnalyzerConfig

    return PipelineConfig(
        analyzer=AnalyzerConfig(
            text_timeout_seconds=0.2,
            media_timeout_seconds=1.0,
            job_deadline_seconds=2.0,
            pool_size=8,
        ),
    )


@pytest.fixture
def payloads() -> Dict[str, Dict[str, Any]]:
    return high_risk_payloads()


@pytest.fixture
def high_risk_job() -> AnalysisJob:
    return AnalysisJob.from_text(HIGH_RISK_TEXT, platforms=["twitter"], job_id="job-high")


@pytest.fixture
def build_analyzers():
    """Factory: four real adapters over fake providers."""

    def _build(
        payloads: Dict[str, Dict[str, Any]],
        config: Optional[PipelineConfig] = None,
        overrides: Optional[Dict[str, FakeProvider]] = None,
        trend_feed: Optional[FakeTrendFeed] = None,
    ):
        overrides = overrides or {}
        providers = {
            name: overrides.get(name) or FakeProvider(payloads.get(name, {}))
            for name in ("sentiment", "controversy", "audience", "trend")
        }
        analyzers = [
            SentimentAnalyzer(providers["sentiment"], config),
            ControversyAnalyzer(providers["controversy"], config),
            AudienceAnalyzer(providers["audience"], config),
            TrendAnalyzer(providers["trend"], config, trend_feed=trend_feed or FakeTrendFeed()),
        ]
        return analyzers, providers

    return _build


@pytest.fixture
def build_service(build_analyzers):
    """Factory: a ContentRiskService over fake providers."""

    def _build(
        payloads: Dict[str, Dict[str, Any]],
        config: Optional[PipelineConfig] = None,
        overrides: Optional[Dict[str, FakeProvider]] = None,
        incident_lookup=None,
    ) -> ContentRiskService:
        config = config or PipelineConfig()
        analyzers, _ = build_analyzers(payloads, config, overrides)
        orchestrator = AnalysisOrchestrator(analyzers, config)
        return ContentRiskService(orchestrator, config=config, incident_lookup=incident_lookup)

    return _build


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def fake_trend_feed():
    return FakeTrendFeed


@pytest.fixture
def fake_incident_lookup():
    return FakeIncidentLookup
