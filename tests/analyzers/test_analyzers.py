"""
Tests for the four analyzer adapters.

============================================================
PURPOSE
============================================================
Verify payload normalization and failure reporting.

TEST PRINCIPLES:
- Adapters normalize heterogeneous payloads to 0-100 severities
- Malformed payloads raise NormalizationError
- Provider failures raise ProviderError and update health
- Adapters never return a failed SignalResult themselves

============================================================
"""

import asyncio

import pytest

from analyzers import (
    AnalysisContext,
    AnalyzerStatus,
    AudienceAnalyzer,
    ControversyAnalyzer,
    NormalizationError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitError,
    SentimentAnalyzer,
    TrendAnalyzer,
    locate_span,
    read_number,
)
from risk_scoring import (
    AnalyzerConfig,
    ControversyDimension,
    PipelineConfig,
    SentimentLabel,
    SignalKind,
    SignalStatus,
)


TEXT = "The corrupt elite are disgraceful and everyone knows it. Time to stop the steal #ElectionFraud"


@pytest.fixture
def context():
    return AnalysisContext(job_id="job-1", platforms=("twitter",))


class FlakyProvider:
    """Fails a fixed number of times, then returns the payload."""

    def __init__(self, failures, payload, error_factory):
        self.failures = failures
        self.payload = payload
        self.error_factory = error_factory
        self.calls = 0

    async def analyze(self, content, context):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory()
        return self.payload


# ============================================================
# SENTIMENT
# ============================================================

class TestSentimentAnalyzer:
    """Tests for sentiment normalization."""

    @pytest.mark.asyncio
    async def test_label_and_intensity(self, fake_provider, payloads, context):
        analyzer = SentimentAnalyzer(fake_provider(payloads["sentiment"]))

        result = await analyzer.analyze(TEXT, context)

        assert result.kind == SignalKind.SENTIMENT
        assert result.status == SignalStatus.OK
        assert result.severity == pytest.approx(80.0)
        assert result.detail.label == SentimentLabel.NEGATIVE
        assert result.latency_ms is not None

    @pytest.mark.asyncio
    async def test_emotional_terms_are_located(self, fake_provider, payloads, context):
        analyzer = SentimentAnalyzer(fake_provider(payloads["sentiment"]))

        result = await analyzer.analyze(TEXT, context)

        term = result.detail.emotional_terms[0]
        assert term.span.text == "disgraceful"
        assert TEXT[term.span.start:term.span.end] == "disgraceful"
        assert term.intensity == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_intensity_above_one_is_clamped(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider({"label": "mixed", "intensity": 50}))

        result = await analyzer.analyze(TEXT, context)

        assert result.detail.intensity == pytest.approx(1.0)
        assert result.severity == pytest.approx(60.0)

    @pytest.mark.asyncio
    async def test_severity_never_drops_as_intensity_rises(self, fake_provider, context):
        severities = []
        for intensity in (0.5, 1, 1.5, 2, 50):
            analyzer = SentimentAnalyzer(fake_provider({"label": "negative", "intensity": intensity}))
            severities.append((await analyzer.analyze(TEXT, context)).severity)

        assert severities == sorted(severities)
        assert severities == pytest.approx([50.0, 100.0, 100.0, 100.0, 100.0])

    @pytest.mark.asyncio
    async def test_label_from_scores_mixed(self, fake_provider, context):
        payload = {"scores": {"positive": 0.45, "negative": 0.4, "neutral": 0.15}, "intensity": 0.6}
        analyzer = SentimentAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert result.detail.label == SentimentLabel.MIXED

    @pytest.mark.asyncio
    async def test_label_from_scores_positive(self, fake_provider, context):
        payload = {"scores": {"positive": 0.8, "negative": 0.1, "neutral": 0.1}, "intensity": 0.6}
        analyzer = SentimentAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert result.detail.label == SentimentLabel.POSITIVE

    @pytest.mark.asyncio
    async def test_missing_label_raises(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider({"intensity": 0.5}))

        with pytest.raises(NormalizationError):
            await analyzer.analyze(TEXT, context)

    @pytest.mark.asyncio
    async def test_unknown_label_raises(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider({"label": "furious", "intensity": 0.5}))

        with pytest.raises(NormalizationError):
            await analyzer.analyze(TEXT, context)

    @pytest.mark.asyncio
    async def test_non_numeric_intensity_wrapped(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider({"label": "negative", "intensity": "very"}))

        with pytest.raises(NormalizationError) as exc_info:
            await analyzer.analyze(TEXT, context)

        assert exc_info.value.analyzer_name == "sentiment"


# ============================================================
# CONTROVERSY
# ============================================================

class TestControversyAnalyzer:
    """Tests for controversy normalization."""

    @pytest.mark.asyncio
    async def test_max_over_dimensions_and_triggers(self, fake_provider, payloads, context):
        analyzer = ControversyAnalyzer(fake_provider(payloads["controversy"]))

        result = await analyzer.analyze(TEXT, context)

        assert result.severity == pytest.approx(90.0)
        assert result.detail.top_dimension == ControversyDimension.POLITICAL
        assert [t.span.text for t in result.detail.triggers] == ["corrupt elite", "stop the steal"]

    @pytest.mark.asyncio
    async def test_scores_read_as_percentages(self, fake_provider, context):
        payload = {"dimensions": {"religious": 0.7, "social": 20, "political": 140}}
        analyzer = ControversyAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert result.detail.dimension_scores[ControversyDimension.RELIGIOUS] == pytest.approx(0.7)
        assert result.detail.dimension_scores[ControversyDimension.POLITICAL] == pytest.approx(100.0)
        assert result.severity == pytest.approx(100.0)

    @pytest.mark.asyncio
    async def test_severity_never_drops_as_score_rises(self, fake_provider, context):
        severities = []
        for score in (0.5, 1, 1.5, 2, 50):
            analyzer = ControversyAnalyzer(fake_provider({"dimensions": {"political": score}}))
            severities.append((await analyzer.analyze(TEXT, context)).severity)

        assert severities == pytest.approx([0.5, 1.0, 1.5, 2.0, 50.0])

    @pytest.mark.asyncio
    async def test_unknown_dimensions_skipped(self, fake_provider, context):
        payload = {
            "dimensions": {"political": 20, "sporting": 99},
            "triggers": [{"text": "corrupt", "dimension": "sporting", "score": 99}],
        }
        analyzer = ControversyAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert result.severity == pytest.approx(20.0)
        assert result.detail.triggers == ()

    @pytest.mark.asyncio
    async def test_empty_payload_is_zero(self, fake_provider, context):
        analyzer = ControversyAnalyzer(fake_provider({}))

        result = await analyzer.analyze(TEXT, context)

        assert result.status == SignalStatus.OK
        assert result.severity == 0.0


# ============================================================
# AUDIENCE
# ============================================================

class TestAudienceAnalyzer:
    """Tests for audience normalization and the baseline path."""

    @pytest.mark.asyncio
    async def test_negative_percentage(self, fake_provider, payloads, context):
        analyzer = AudienceAnalyzer(fake_provider(payloads["audience"]))

        result = await analyzer.analyze(TEXT, context)

        assert result.severity == pytest.approx(60.0)
        assert [s.segment for s in result.detail.segments] == ["moderate voters", "loyal followers"]

    @pytest.mark.asyncio
    async def test_counts_normalized(self, fake_provider, context):
        payload = {"reactions": {"positive": 120, "negative": 300, "neutral": 80}}
        analyzer = AudienceAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        dist = result.detail.distribution
        assert dist.negative == pytest.approx(60.0)
        assert dist.positive + dist.negative + dist.neutral == pytest.approx(100.0, abs=0.1)

    @pytest.mark.asyncio
    async def test_segment_negativity_is_a_percentage(self, fake_provider, context):
        payload = {
            "reactions": {"positive": 1, "negative": 1, "neutral": 2},
            "segments": [{"segment": "parents", "negative": 0.7}],
        }
        analyzer = AudienceAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert result.detail.segments[0].negative_pct == pytest.approx(0.7)

    @pytest.mark.asyncio
    async def test_missing_reactions_raises(self, fake_provider, context):
        analyzer = AudienceAnalyzer(fake_provider({"segments": []}))

        with pytest.raises(NormalizationError):
            await analyzer.analyze(TEXT, context)

    @pytest.mark.asyncio
    async def test_no_audience_uses_baseline(self, fake_provider, payloads):
        provider = fake_provider(payloads["audience"])
        analyzer = AudienceAnalyzer(provider)

        result = await analyzer.analyze(TEXT, AnalysisContext(job_id="job-2"))

        assert provider.calls == []
        assert result.status == SignalStatus.OK
        assert result.severity == 0.0
        assert result.detail.baseline
        assert result.detail.distribution.neutral == 100.0

    @pytest.mark.asyncio
    async def test_profile_alone_is_enough(self, fake_provider, payloads):
        provider = fake_provider(payloads["audience"])
        analyzer = AudienceAnalyzer(provider)
        context = AnalysisContext(job_id="job-3", audience_profile={"segments": ["parents"]})

        await analyzer.analyze(TEXT, context)

        assert len(provider.calls) == 1


# ============================================================
# TREND
# ============================================================

class TestTrendAnalyzer:
    """Tests for trend matching and the trend feed."""

    @pytest.mark.asyncio
    async def test_negative_match_keeps_volume(self, fake_provider, fake_trend_feed, payloads, context):
        analyzer = TrendAnalyzer(fake_provider(payloads["trend"]), trend_feed=fake_trend_feed())

        result = await analyzer.analyze(TEXT, context)

        assert result.severity == pytest.approx(30.0)
        assert result.detail.matches[0].span.text == "#ElectionFraud"

    @pytest.mark.asyncio
    async def test_feed_snapshot_passed_to_provider(self, fake_provider, fake_trend_feed, context):
        provider = fake_provider({"matches": []})
        trends = [{"phrase": "#ElectionFraud", "volume": 30}]
        analyzer = TrendAnalyzer(provider, trend_feed=fake_trend_feed(trends))

        await analyzer.analyze(TEXT, context)

        assert provider.calls[0]["context"]["trends"] == trends
        assert provider.calls[0]["context"]["job_id"] == "job-1"

    @pytest.mark.asyncio
    async def test_matches_sorted_by_severity(self, fake_provider, context):
        payload = {"matches": [
            {"phrase": "elite", "volume": 20, "sentiment": 0.0},
            {"phrase": "steal", "volume": 80, "sentiment": -0.5},
        ]}
        analyzer = TrendAnalyzer(fake_provider(payload))

        result = await analyzer.analyze(TEXT, context)

        assert [m.span.text for m in result.detail.matches] == ["steal", "elite"]
        assert result.detail.matches[1].volume == pytest.approx(20.0)

    @pytest.mark.asyncio
    async def test_severity_never_drops_as_volume_rises(self, fake_provider, context):
        severities = []
        for volume in (0.5, 1, 1.5, 2, 50):
            payload = {"matches": [{"phrase": "steal", "volume": volume, "sentiment": -1}]}
            analyzer = TrendAnalyzer(fake_provider(payload))
            severities.append((await analyzer.analyze(TEXT, context)).severity)

        assert severities == pytest.approx([0.5, 1.0, 1.5, 2.0, 50.0])

    @pytest.mark.asyncio
    async def test_feed_failure_raises(self, fake_provider, fake_trend_feed, context):
        provider = fake_provider({"matches": []})
        analyzer = TrendAnalyzer(provider, trend_feed=fake_trend_feed(error=OSError("feed down")))

        with pytest.raises(ProviderError):
            await analyzer.analyze(TEXT, context)

        assert provider.calls == []
        health = await analyzer.get_health()
        assert health.status == AnalyzerStatus.DEGRADED


# ============================================================
# FAILURES, RETRIES AND HEALTH
# ============================================================

class TestFailureHandling:
    """Provider failures surface as ProviderError subclasses."""

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider(error=RuntimeError("model crashed")))

        with pytest.raises(ProviderError) as exc_info:
            await analyzer.analyze(TEXT, context)

        assert "model crashed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_provider_timeout_mapped(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider(error=asyncio.TimeoutError()))

        with pytest.raises(ProviderTimeoutError):
            await analyzer.analyze(TEXT, context)

    @pytest.mark.asyncio
    async def test_non_dict_payload_rejected(self, context):
        class ListProvider:
            async def analyze(self, content, context):
                return ["negative"]

        analyzer = SentimentAnalyzer(ListProvider())

        with pytest.raises(NormalizationError):
            await analyzer.analyze(TEXT, context)

    @pytest.mark.asyncio
    async def test_rate_limit_sets_status(self, fake_provider, context):
        error = RateLimitError("slow down", analyzer_name="sentiment", retry_after_seconds=30)
        analyzer = SentimentAnalyzer(fake_provider(error=error))

        with pytest.raises(RateLimitError):
            await analyzer.analyze(TEXT, context)

        health = await analyzer.get_health()
        assert health.status == AnalyzerStatus.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_three_failures_mark_unavailable(self, fake_provider, context):
        analyzer = SentimentAnalyzer(fake_provider(error=RuntimeError("down")))

        for _ in range(3):
            with pytest.raises(ProviderError):
                await analyzer.analyze(TEXT, context)

        health = await analyzer.get_health()
        assert health.status == AnalyzerStatus.UNAVAILABLE
        assert health.consecutive_failures == 3
        assert analyzer.get_stats()["error_rate_pct"] == 100.0

    @pytest.mark.asyncio
    async def test_success_resets_health(self, payloads, context):
        config = PipelineConfig(analyzer=AnalyzerConfig(max_retries=1, retry_delay_seconds=0.0))
        provider = FlakyProvider(
            1,
            payloads["sentiment"],
            lambda: ProviderUnavailableError("blip", analyzer_name="sentiment", status_code=503),
        )
        analyzer = SentimentAnalyzer(provider, config)

        result = await analyzer.analyze(TEXT, context)

        assert result.status == SignalStatus.OK
        assert provider.calls == 2
        assert analyzer.get_stats()["retries"] == 1
        assert (await analyzer.get_health()).status == AnalyzerStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_permanent_errors_not_retried(self, payloads, context):
        config = PipelineConfig(analyzer=AnalyzerConfig(max_retries=3, retry_delay_seconds=0.0))
        provider = FlakyProvider(
            5,
            payloads["sentiment"],
            lambda: ProviderUnavailableError("bad request", status_code=400, is_permanent=True),
        )
        analyzer = SentimentAnalyzer(provider, config)

        with pytest.raises(ProviderUnavailableError):
            await analyzer.analyze(TEXT, context)

        assert provider.calls == 1


class TestLocateSpan:
    def test_trusts_valid_offsets(self):
        span = locate_span(TEXT, "ignored", 4, 11)

        assert span.text == "corrupt"

    def test_searches_case_insensitively(self):
        span = locate_span(TEXT, "CORRUPT ELITE")

        assert (span.start, span.end) == (4, 17)
        assert span.text == "corrupt elite"

    def test_unlocatable_phrase(self):
        span = locate_span(TEXT, "absent phrase")

        assert not span.is_located
        assert span.text == "absent phrase"


# ============================================================
# NON-FINITE PAYLOAD VALUES
# ============================================================

INF = float("inf")
NAN = float("nan")


class TestNonFiniteValues:
    """NaN and infinities are rejected, never clamped into a score."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("analyzer_cls,payload,field_name", [
        (SentimentAnalyzer, {"label": "negative", "intensity": NAN}, "intensity"),
        (
            SentimentAnalyzer,
            {"label": "negative", "intensity": 0.5, "emotional_terms": [{"text": "elite", "intensity": INF}]},
            "emotional_terms.intensity",
        ),
        (SentimentAnalyzer, {"scores": {"positive": 0.2, "negative": NAN}}, "scores.negative"),
        (ControversyAnalyzer, {"dimensions": {"political": NAN}}, "dimensions.political"),
        (
            ControversyAnalyzer,
            {"triggers": [{"text": "elite", "dimension": "social", "score": INF}]},
            "triggers.score",
        ),
        (AudienceAnalyzer, {"reactions": {"positive": 10, "negative": INF, "neutral": 5}}, "reactions.negative"),
        (
            AudienceAnalyzer,
            {"reactions": {"positive": 1, "negative": 1, "neutral": 1}, "segments": [{"segment": "a", "negative": NAN}]},
            "segments.negative",
        ),
        (TrendAnalyzer, {"matches": [{"phrase": "steal", "volume": INF}]}, "matches.volume"),
        (TrendAnalyzer, {"matches": [{"phrase": "steal", "volume": 40, "sentiment": NAN}]}, "matches.sentiment"),
    ])
    async def test_rejected_as_normalization_error(
        self, fake_provider, context, analyzer_cls, payload, field_name
    ):
        analyzer = analyzer_cls(fake_provider(payload))

        with pytest.raises(NormalizationError) as exc_info:
            await analyzer.analyze(TEXT, context)

        assert exc_info.value.target_field == field_name
        health = await analyzer.get_health()
        assert health.consecutive_failures == 1

    @pytest.mark.parametrize("value", [NAN, INF, -INF, "nan"])
    def test_read_number_rejects(self, value):
        with pytest.raises(NormalizationError):
            read_number(value, "volume", "trend")

    def test_read_number_clamps_finite_values(self):
        assert read_number(140, "volume", "trend") == 100.0
        assert read_number(-3, "volume", "trend") == 0.0
        assert read_number("0.4", "intensity", "sentiment", high=1.0) == pytest.approx(0.4)
