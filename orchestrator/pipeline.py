"""
Orchestrator - Analysis Pipeline.

============================================================
RESPONSIBILITY
============================================================
Runs the analyzer adapters for one job concurrently and
collects their results into a SignalSet.

- One task per signal kind, all in parallel
- Shared worker pool across jobs (backpressure, not
  unbounded concurrency)
- Per-signal timeout and per-job deadline
- Provider failures become failed/timed-out results,
  never job failures
- Cancellation propagates to in-flight analyzer tasks

============================================================
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Iterable, List, Optional

from analyzers.base import AnalysisContext, BaseAnalyzer
from analyzers.exceptions import ProviderError, ProviderTimeoutError
from analyzers.models import AnalyzerHealth, AnalyzerIncident, AnalyzerStatus
from core.exceptions import ConfigurationError
from risk_scoring.config import AnalyzerConfig, PipelineConfig
from risk_scoring.types import SignalKind, SignalResult, SignalSet, SignalStatus

from .models import AnalysisJob


logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Dispatches one analyzer call per signal kind and waits at a
    barrier for all of them.

    Every signal kind yields exactly one SignalResult. A kind
    with no registered analyzer yields a failed result.

    Usage:
        orchestrator = AnalysisOrchestrator([
            SentimentAnalyzer(sentiment_provider),
            ControversyAnalyzer(controversy_provider),
            AudienceAnalyzer(audience_provider),
            TrendAnalyzer(trend_provider, trend_feed=feed),
        ])
        signals = await orchestrator.run_analysis(job)
    """

    MAX_INCIDENTS = 100

    def __init__(
        self,
        analyzers: Iterable[BaseAnalyzer] = (),
        config: Optional[PipelineConfig] = None,
        pool_size: Optional[int] = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.pool_size = pool_size or self.config.analyzer.pool_size
        if self.pool_size < 1:
            raise ConfigurationError(
                "pool_size must be at least 1",
                config_key="pool_size",
                actual_value=self.pool_size,
            )

        self._analyzers: Dict[SignalKind, BaseAnalyzer] = {}
        self._pool = asyncio.Semaphore(self.pool_size)
        self._incidents: Deque[AnalyzerIncident] = deque(maxlen=self.MAX_INCIDENTS)

        self._stats = {
            "jobs_started": 0,
            "jobs_completed": 0,
            "jobs_cancelled": 0,
            "signals_failed": 0,
            "signals_timed_out": 0,
        }

        for analyzer in analyzers:
            self.register(analyzer)

    # ─────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────

    def register(self, analyzer: BaseAnalyzer) -> None:
        """Register the analyzer for its signal kind."""
        kind = analyzer.kind
        if kind in self._analyzers:
            logger.warning(f"Overwriting existing {kind.value} analyzer")
        self._analyzers[kind] = analyzer
        logger.info(f"Registered {kind.value} analyzer: {analyzer.metadata.name}")

    @property
    def analyzers(self) -> Dict[SignalKind, BaseAnalyzer]:
        return dict(self._analyzers)

    # ─────────────────────────────────────────────────────────────
    # Analysis
    # ─────────────────────────────────────────────────────────────

    async def run_analysis(
        self,
        job: AnalysisJob,
        config: Optional[AnalyzerConfig] = None,
    ) -> SignalSet:
        """
        Run every analyzer for a job and collect a SignalSet.

        NEVER fails because of a provider: failures and timeouts
        are recorded as results with severity 0.

        Args:
            job: Validated job
            config: Timeouts; the orchestrator's config if omitted

        Returns:
            SignalSet with exactly one result per signal kind

        Raises:
            asyncio.CancelledError: The job was cancelled before
                the barrier resolved
        """
        analyzer_config = config or self.config.analyzer
        content = job.text
        context = job.to_context()
        self._stats["jobs_started"] += 1

        logger.info(
            f"Job {job.job_id} START: {len(self._analyzers)} analyzers, "
            f"content_type={job.content_type}"
        )

        results: Dict[SignalKind, SignalResult] = {}
        tasks: Dict[SignalKind, asyncio.Task] = {}

        for kind in SignalKind.all_kinds():
            analyzer = self._analyzers.get(kind)
            if analyzer is None:
                results[kind] = SignalResult.failed(kind, f"No {kind.value} analyzer registered")
                continue

            timeout = analyzer_config.timeout_for(kind, job.has_media)
            tasks[kind] = asyncio.create_task(
                self._run_one(analyzer, content, context, timeout),
                name=f"{job.job_id}:{kind.value}",
            )

        if tasks:
            try:
                _, pending = await asyncio.wait(
                    tasks.values(),
                    timeout=analyzer_config.job_deadline_seconds,
                )
            except asyncio.CancelledError:
                for task in tasks.values():
                    task.cancel()
                self._stats["jobs_cancelled"] += 1
                logger.info(f"Job {job.job_id} CANCELLED")
                # Shielded so a second cancel cannot orphan the drain
                await asyncio.shield(asyncio.gather(*tasks.values(), return_exceptions=True))
                raise

            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

            for kind, task in tasks.items():
                if task in pending:
                    analyzer = self._analyzers[kind]
                    analyzer._record_timeout()
                    message = (
                        f"{kind.value} analyzer still running at the "
                        f"{analyzer_config.job_deadline_seconds:.0f}s job deadline"
                    )
                    self._record_incident(analyzer, "timed_out", message, job.job_id)
                    results[kind] = SignalResult.timed_out(kind, message)
                else:
                    results[kind] = task.result()

        signals = SignalSet.from_iterable(results.values())

        for result in signals:
            if result.status == SignalStatus.FAILED:
                self._stats["signals_failed"] += 1
            elif result.status == SignalStatus.TIMED_OUT:
                self._stats["signals_timed_out"] += 1
        self._stats["jobs_completed"] += 1

        logger.info(
            f"Job {job.job_id} COMPLETE: ok={[k.value for k in signals.ok_kinds]} "
            f"unavailable={[k.value for k in signals.failed_kinds]}"
        )
        return signals

    async def _run_one(
        self,
        analyzer: BaseAnalyzer,
        content: str,
        context: AnalysisContext,
        timeout: float,
    ) -> SignalResult:
        """Run one analyzer inside a pool slot, absorbing its failure."""
        kind = analyzer.kind

        async with self._pool:
            try:
                return await asyncio.wait_for(
                    analyzer.analyze(content, context),
                    timeout=timeout,
                )

            except asyncio.TimeoutError:
                analyzer._record_timeout()
                message = f"{kind.value} analyzer exceeded {timeout:.0f}s"
                logger.warning(f"[{analyzer.metadata.name}] {message} for job {context.job_id}")
                self._record_incident(analyzer, "timed_out", message, context.job_id)
                return SignalResult.timed_out(kind, message)

            except ProviderTimeoutError as e:
                logger.warning(f"[{analyzer.metadata.name}] Provider timed out for job {context.job_id}: {e}")
                self._record_incident(analyzer, "timed_out", str(e), context.job_id)
                return SignalResult.timed_out(kind, str(e))

            except ProviderError as e:
                logger.warning(f"[{analyzer.metadata.name}] Provider failed for job {context.job_id}: {e}")
                self._record_incident(analyzer, "failed", str(e), context.job_id)
                return SignalResult.failed(kind, str(e))

            except Exception as e:
                logger.exception(f"[{analyzer.metadata.name}] Unexpected analyzer error for job {context.job_id}")
                self._record_incident(analyzer, "failed", f"{type(e).__name__}: {e}", context.job_id)
                return SignalResult.failed(kind, f"Unexpected analyzer error: {type(e).__name__}")

    # ─────────────────────────────────────────────────────────────
    # Diagnostics
    # ─────────────────────────────────────────────────────────────

    def _record_incident(
        self,
        analyzer: BaseAnalyzer,
        incident_type: str,
        error_message: str,
        job_id: Optional[str] = None,
    ) -> None:
        """Record an incident; the ring keeps only the most recent ones."""
        self._incidents.append(AnalyzerIncident(
            analyzer_name=analyzer.metadata.name,
            incident_type=incident_type,
            timestamp=datetime.now(timezone.utc),
            error_message=error_message,
            job_id=job_id,
        ))

    def get_incidents(
        self,
        limit: int = 20,
        analyzer_name: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Get recent incidents, oldest first."""
        incidents = list(self._incidents)

        if analyzer_name:
            incidents = [i for i in incidents if i.analyzer_name == analyzer_name]

        return [i.to_dict() for i in incidents[-limit:]]

    async def get_health(self) -> Dict[str, AnalyzerHealth]:
        """Get health status of all analyzers."""
        health = {}
        for kind, analyzer in self._analyzers.items():
            health[kind.value] = await analyzer.get_health()
        return health

    async def get_health_summary(self) -> Dict[str, Any]:
        """Get summary health information."""
        health = await self.get_health()

        total = len(health)
        healthy = sum(1 for h in health.values() if h.is_healthy())
        degraded = sum(1 for h in health.values() if h.status == AnalyzerStatus.DEGRADED)
        unavailable = sum(1 for h in health.values() if h.status == AnalyzerStatus.UNAVAILABLE)
        usable = sum(1 for h in health.values() if h.is_usable())

        return {
            "total_analyzers": total,
            "healthy": healthy,
            "degraded": degraded,
            "unavailable": unavailable,
            "usable": usable,
            "health_pct": round(healthy / total * 100, 1) if total > 0 else 0,
            "missing": [k.value for k in SignalKind.all_kinds() if k not in self._analyzers],
            "analyzers": {name: h.to_dict() for name, h in health.items()},
            "analyzer_metadata": {k.value: a.describe() for k, a in self._analyzers.items()},
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get orchestrator statistics."""
        return {
            **self._stats,
            "pool_size": self.pool_size,
            "registered_analyzers": [k.value for k in self._analyzers],
            "analyzer_stats": {k.value: a.get_stats() for k, a in self._analyzers.items()},
            "recent_incidents": len(self._incidents),
        }

    async def close(self) -> None:
        """Release analyzer provider resources."""
        for analyzer in self._analyzers.values():
            await analyzer.close()
