"""
Tests for the Analysis Orchestrator.

============================================================
PURPOSE
============================================================
Verify parallel dispatch, timeouts and cancellation.

TEST PRINCIPLES:
- Every signal kind yields exactly one result
- Provider failures never fail the job
- A slow analyzer is cut off at its timeout or the job deadline
- Cancelling the job cancels the in-flight analyzers

============================================================
"""

import asyncio

import pytest

from analyzers import (
    AudienceAnalyzer,
    ControversyAnalyzer,
    ProviderUnavailableError,
    SentimentAnalyzer,
)
from core.exceptions import ConfigurationError
from orchestrator import AnalysisJob, AnalysisOrchestrator
from risk_scoring import AnalyzerConfig, PipelineConfig, SignalKind, SignalStatus


class CancellableProvider:
    """Blocks until cancelled and records that it was."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def analyze(self, content, context):
        self.started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return {}


def job_tasks(job_id):
    """Analyzer tasks of one job that are still pending."""
    return [
        t for t in asyncio.all_tasks()
        if t.get_name().startswith(f"{job_id}:") and not t.done()
    ]


# ============================================================
# HAPPY PATH
# ============================================================

class TestRunAnalysis:
    """Tests for signal collection."""

    @pytest.mark.asyncio
    async def test_all_signals_ok(self, build_analyzers, payloads, high_risk_job):
        analyzers, providers = build_analyzers(payloads)
        orchestrator = AnalysisOrchestrator(analyzers)

        signals = await orchestrator.run_analysis(high_risk_job)

        assert len(signals) == 4
        assert signals.ok_kinds == SignalKind.all_kinds()
        assert [signals.get(k).severity for k in SignalKind.all_kinds()] == [80.0, 90.0, 60.0, 30.0]
        assert all(len(p.calls) == 1 for p in providers.values())

    @pytest.mark.asyncio
    async def test_context_reaches_providers(self, build_analyzers, payloads):
        analyzers, providers = build_analyzers(payloads)
        orchestrator = AnalysisOrchestrator(analyzers)
        job = AnalysisJob.from_text("Hello there", platforms=["instagram"], job_id="job-ctx")

        await orchestrator.run_analysis(job)

        call = providers["controversy"].calls[0]
        assert call["content"] == "Hello there"
        assert call["context"]["job_id"] == "job-ctx"
        assert call["context"]["platforms"] == ["instagram"]

    @pytest.mark.asyncio
    async def test_missing_analyzer_is_failed(self, fake_provider, payloads, high_risk_job):
        orchestrator = AnalysisOrchestrator([SentimentAnalyzer(fake_provider(payloads["sentiment"]))])

        signals = await orchestrator.run_analysis(high_risk_job)

        assert len(signals) == 4
        assert signals.ok_kinds == [SignalKind.SENTIMENT]
        trend = signals.get(SignalKind.TREND)
        assert trend.status == SignalStatus.FAILED
        assert "No trend analyzer registered" in trend.error

    @pytest.mark.asyncio
    async def test_register_overwrites(self, fake_provider, payloads):
        orchestrator = AnalysisOrchestrator()
        orchestrator.register(ControversyAnalyzer(fake_provider({})))
        replacement = ControversyAnalyzer(fake_provider(payloads["controversy"]))

        orchestrator.register(replacement)

        assert orchestrator.analyzers[SignalKind.CONTROVERSY] is replacement

    def test_pool_size_validated(self):
        with pytest.raises(ConfigurationError):
            AnalysisOrchestrator(pool_size=-1)


# ============================================================
# FAILURES
# ============================================================

class TestFailureAbsorption:
    """Provider failures become failed results."""

    @pytest.mark.asyncio
    async def test_provider_error_is_failed_result(self, build_analyzers, fake_provider, payloads, high_risk_job):
        broken = fake_provider(error=ProviderUnavailableError("503", status_code=503))
        analyzers, _ = build_analyzers(payloads, overrides={"audience": broken})
        orchestrator = AnalysisOrchestrator(analyzers)

        signals = await orchestrator.run_analysis(high_risk_job)

        audience = signals.get(SignalKind.AUDIENCE)
        assert audience.status == SignalStatus.FAILED
        assert audience.severity == 0.0
        assert len(signals.ok_kinds) == 3

    @pytest.mark.asyncio
    async def test_malformed_payload_is_failed_result(self, build_analyzers, payloads, high_risk_job):
        payloads["sentiment"] = {"intensity": 0.9}
        analyzers, _ = build_analyzers(payloads)
        orchestrator = AnalysisOrchestrator(analyzers)

        signals = await orchestrator.run_analysis(high_risk_job)

        assert signals.get(SignalKind.SENTIMENT).status == SignalStatus.FAILED

    @pytest.mark.asyncio
    async def test_non_finite_payload_is_failed_result(self, build_analyzers, payloads, high_risk_job):
        payloads["controversy"]["dimensions"]["political"] = float("nan")
        analyzers, _ = build_analyzers(payloads)
        orchestrator = AnalysisOrchestrator(analyzers)

        signals = await orchestrator.run_analysis(high_risk_job)

        controversy = signals.get(SignalKind.CONTROVERSY)
        assert controversy.status == SignalStatus.FAILED
        assert controversy.severity == 0.0
        assert len(signals.ok_kinds) == 3

    @pytest.mark.asyncio
    async def test_every_provider_failing(self, build_analyzers, fake_provider, payloads, high_risk_job):
        overrides = {
            name: fake_provider(error=RuntimeError("boom"))
            for name in ("sentiment", "controversy", "audience", "trend")
        }
        analyzers, _ = build_analyzers(payloads, overrides=overrides)
        orchestrator = AnalysisOrchestrator(analyzers)

        signals = await orchestrator.run_analysis(high_risk_job)

        assert signals.ok_kinds == []
        assert orchestrator.get_stats()["signals_failed"] == 4
        assert len(orchestrator.get_incidents()) == 4

    @pytest.mark.asyncio
    async def test_analyzer_bug_is_absorbed(self, payloads, high_risk_job, fake_provider):
        class BuggyAnalyzer(ControversyAnalyzer):
            async def analyze(self, content, context):
                raise ZeroDivisionError("oops")

        orchestrator = AnalysisOrchestrator([BuggyAnalyzer(fake_provider({}))])

        signals = await orchestrator.run_analysis(high_risk_job)

        controversy = signals.get(SignalKind.CONTROVERSY)
        assert controversy.status == SignalStatus.FAILED
        assert "ZeroDivisionError" in controversy.error


# ============================================================
# TIMEOUTS AND CANCELLATION
# ============================================================

class TestTimeouts:
    """Per-signal timeouts and the job deadline."""

    @pytest.mark.asyncio
    async def test_slow_analyzer_times_out(self, build_analyzers, fake_provider, payloads, fast_config, high_risk_job):
        slow = fake_provider(payloads["controversy"], delay=5.0)
        analyzers, _ = build_analyzers(payloads, fast_config, overrides={"controversy": slow})
        orchestrator = AnalysisOrchestrator(analyzers, fast_config)

        signals = await orchestrator.run_analysis(high_risk_job)

        controversy = signals.get(SignalKind.CONTROVERSY)
        assert controversy.status == SignalStatus.TIMED_OUT
        assert controversy.severity == 0.0
        assert len(signals.ok_kinds) == 3

        incidents = orchestrator.get_incidents(analyzer_name="controversy")
        assert incidents[-1]["incident_type"] == "timed_out"
        assert incidents[-1]["job_id"] == "job-high"

        health = await orchestrator.get_health()
        assert health["controversy"].consecutive_failures == 1

    @pytest.mark.asyncio
    async def test_media_jobs_get_longer_timeout(self, fake_provider, payloads, fast_config):
        provider = fake_provider(payloads["audience"], delay=0.3)
        orchestrator = AnalysisOrchestrator([AudienceAnalyzer(provider, fast_config)], fast_config)
        text_job = AnalysisJob.from_text("A post", platforms=["tiktok"])
        video_job = AnalysisJob.from_text("A post", platforms=["tiktok"], content_type="video")

        text_signals = await orchestrator.run_analysis(text_job)
        video_signals = await orchestrator.run_analysis(video_job)

        assert text_signals.get(SignalKind.AUDIENCE).status == SignalStatus.TIMED_OUT
        assert video_signals.get(SignalKind.AUDIENCE).status == SignalStatus.OK

    @pytest.mark.asyncio
    async def test_job_deadline_cuts_off_stragglers(self, build_analyzers, fake_provider, payloads, high_risk_job):
        config = PipelineConfig(analyzer=AnalyzerConfig(
            text_timeout_seconds=10.0,
            media_timeout_seconds=10.0,
            job_deadline_seconds=0.2,
        ))
        slow = fake_provider(payloads["trend"], delay=5.0)
        analyzers, _ = build_analyzers(payloads, config, overrides={"trend": slow})
        orchestrator = AnalysisOrchestrator(analyzers, config)

        signals = await orchestrator.run_analysis(high_risk_job)

        trend = signals.get(SignalKind.TREND)
        assert trend.status == SignalStatus.TIMED_OUT
        assert "job deadline" in trend.error
        assert len(signals.ok_kinds) == 3

    @pytest.mark.asyncio
    async def test_deadline_stragglers_are_drained(self, build_analyzers, payloads, high_risk_job):
        """Cut-off analyzer tasks have finished cancelling when the call returns."""
        config = PipelineConfig(analyzer=AnalyzerConfig(
            text_timeout_seconds=10.0,
            media_timeout_seconds=10.0,
            job_deadline_seconds=0.2,
        ))
        blocking = CancellableProvider()
        analyzers, _ = build_analyzers(payloads, config, overrides={"trend": blocking})
        orchestrator = AnalysisOrchestrator(analyzers, config)

        signals = await orchestrator.run_analysis(high_risk_job)

        assert signals.get(SignalKind.TREND).status == SignalStatus.TIMED_OUT
        assert blocking.cancelled
        assert job_tasks(high_risk_job.job_id) == []

    @pytest.mark.asyncio
    async def test_per_call_config_overrides(self, build_analyzers, fake_provider, payloads, high_risk_job):
        slow = fake_provider(payloads["sentiment"], delay=0.5)
        analyzers, _ = build_analyzers(payloads, overrides={"sentiment": slow})
        orchestrator = AnalysisOrchestrator(analyzers)
        tight = AnalyzerConfig(text_timeout_seconds=0.1, media_timeout_seconds=0.1, job_deadline_seconds=1.0)

        signals = await orchestrator.run_analysis(high_risk_job, tight)

        assert signals.get(SignalKind.SENTIMENT).status == SignalStatus.TIMED_OUT


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_propagates_to_analyzers(self, build_analyzers, payloads, high_risk_job):
        blocking = CancellableProvider()
        analyzers, _ = build_analyzers(payloads, overrides={"controversy": blocking})
        orchestrator = AnalysisOrchestrator(analyzers)

        job_task = asyncio.create_task(orchestrator.run_analysis(high_risk_job))
        await asyncio.wait_for(blocking.started.wait(), timeout=1.0)
        job_task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await job_task

        assert blocking.cancelled
        assert job_tasks(high_risk_job.job_id) == []
        assert orchestrator.get_stats()["jobs_cancelled"] == 1


# ============================================================
# DIAGNOSTICS
# ============================================================

class TestDiagnostics:
    @pytest.mark.asyncio
    async def test_health_summary(self, build_analyzers, fake_provider, payloads, high_risk_job):
        broken = fake_provider(error=RuntimeError("down"))
        analyzers, _ = build_analyzers(payloads, overrides={"trend": broken})
        orchestrator = AnalysisOrchestrator(analyzers)

        await orchestrator.run_analysis(high_risk_job)
        summary = await orchestrator.get_health_summary()

        assert summary["total_analyzers"] == 4
        assert summary["healthy"] == 3
        assert summary["degraded"] == 1
        assert summary["usable"] == 4
        assert summary["health_pct"] == 75.0
        assert summary["missing"] == []
        assert summary["analyzer_metadata"]["sentiment"]["version"] == "1.0.0"
        assert summary["analyzer_metadata"]["trend"]["display_name"] == "Trend Matching Analyzer"

    @pytest.mark.asyncio
    async def test_missing_listed_in_summary(self, fake_provider):
        orchestrator = AnalysisOrchestrator([SentimentAnalyzer(fake_provider({}))])

        summary = await orchestrator.get_health_summary()

        assert summary["missing"] == ["controversy", "audience", "trend"]

    @pytest.mark.asyncio
    async def test_incident_ring_is_bounded(self, fake_provider):
        orchestrator = AnalysisOrchestrator([
            SentimentAnalyzer(fake_provider(error=RuntimeError("down"))),
        ])
        job = AnalysisJob.from_text("text")

        for _ in range(AnalysisOrchestrator.MAX_INCIDENTS + 5):
            await orchestrator.run_analysis(job)

        assert orchestrator.get_stats()["recent_incidents"] == AnalysisOrchestrator.MAX_INCIDENTS
        assert len(orchestrator.get_incidents(limit=500)) == AnalysisOrchestrator.MAX_INCIDENTS
        assert len(orchestrator.get_incidents(limit=5)) == 5

    @pytest.mark.asyncio
    async def test_close_releases_providers(self):
        class ClosingProvider:
            closed = False

            async def analyze(self, content, context):
                return {}

            async def close(self):
                self.closed = True

        provider = ClosingProvider()
        orchestrator = AnalysisOrchestrator([ControversyAnalyzer(provider)])

        await orchestrator.close()

        assert provider.closed
