"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
ContentRiskService is the single entrypoint the request layer
calls into.

- Validates the job (fail fast, before any analyzer runs)
- Runs the analyzers through the AnalysisOrchestrator
- Aggregates, recommends and explains
- Returns a structurally valid AssessmentResult even when
  every analyzer failed

============================================================
ARCHITECTURAL POSITION
============================================================
- Stateless between calls: no revision history, no cache
- Re-analysis is a fresh submission linked by parent_job_id
- Only ValidationError and ConfigurationError cross this
  boundary; provider problems show up in status fields

============================================================
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from analyzers import (
    AudienceAnalyzer,
    ControversyAnalyzer,
    HttpAnalysisProvider,
    HttpTrendFeed,
    SentimentAnalyzer,
    TrendAnalyzer,
)
from explanation.builder import ExplanationBuilder
from explanation.types import HistoricalComparison
from recommendations.engine import RecommendationEngine
from risk_scoring.config import PipelineConfig
from risk_scoring.engine import RiskAggregator, format_risk_summary

from .collaborators import HistoricalIncidentLookup
from .models import AnalysisJob, AssessmentResult, AudienceProfile, new_job_id
from .pipeline import AnalysisOrchestrator


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
) -> logging.Logger:
    """
    Set up process-wide logging.

    Args:
        level: Log level name
        log_format: Output format (json or text)

    Returns:
        Logger for the service
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("orchestrator")


# ============================================================
# SERVICE
# ============================================================

class ContentRiskService:
    """
    Content risk assessment service.

    Usage:
        service = ContentRiskService(orchestrator, incident_lookup=lookup)
        result = await service.submit_for_analysis(
            AnalysisJob.from_text("Draft post", platforms=["twitter"]),
        )
        print(result.assessment.risk_category.label)
    """

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        config: Optional[PipelineConfig] = None,
        incident_lookup: Optional[HistoricalIncidentLookup] = None,
    ):
        """
        Initialize the service.

        Args:
            orchestrator: Runs the analyzer adapters
            config: Pipeline configuration; the orchestrator's if omitted
            incident_lookup: Optional historical incident collaborator
        """
        self.config = config or orchestrator.config
        self.orchestrator = orchestrator
        self.incident_lookup = incident_lookup

        self._aggregator = RiskAggregator(self.config)
        self._recommender = RecommendationEngine(self.config)
        self._explainer = ExplanationBuilder()
        self._logger = logging.getLogger(__name__)

    async def submit_for_analysis(self, job: AnalysisJob) -> AssessmentResult:
        """
        Analyze one job end to end.

        Raises:
            ValidationError: The job is malformed; nothing was run
        """
        job.validate(self.config.max_content_length)

        signals = await self.orchestrator.run_analysis(job, self.config.analyzer)
        assessment = self._aggregator.aggregate(signals)
        recommendations = self._recommender.generate(job, assessment, signals)
        comparisons = await self._find_comparisons(job)
        explanation = self._explainer.explain(
            assessment,
            recommendations,
            signals,
            comparisons=comparisons,
            content=job.text,
        )

        result = AssessmentResult(
            job_id=job.job_id,
            parent_job_id=job.parent_job_id,
            assessment=assessment,
            recommendations=recommendations,
            explanation=explanation,
            signals=signals,
            submitted_at=job.submitted_at,
            completed_at=datetime.now(timezone.utc),
        )

        self._logger.info(
            f"Assessed {job.job_id} | category={assessment.risk_category.value} | "
            f"score={assessment.risk_score} | confidence={assessment.confidence_level} | "
            f"status={result.status.value} | recommendations={len(recommendations)}"
        )
        return result

    async def reanalyze(
        self,
        modified_content: str,
        previous_job_id: str,
        platforms: Sequence[str] = (),
        audience_profile: Optional[AudienceProfile] = None,
        content_type: str = "text",
    ) -> AssessmentResult:
        """
        Analyze edited content as a fresh submission.

        The previous job id is carried for the caller's records
        only; nothing from the previous run is reused.
        """
        job = AnalysisJob.from_text(
            modified_content,
            platforms=platforms,
            audience_profile=audience_profile,
            content_type=content_type,
            job_id=new_job_id(),
            parent_job_id=previous_job_id,
        )
        self._logger.info(f"Re-analyzing {previous_job_id} as {job.job_id}")
        return await self.submit_for_analysis(job)

    async def _find_comparisons(self, job: AnalysisJob) -> List[HistoricalComparison]:
        """Historical matches; a failing lookup yields none."""
        if self.incident_lookup is None:
            return []

        try:
            matches = await self.incident_lookup.find_similar(job.text)
        except Exception as e:
            self._logger.warning(f"Historical incident lookup failed for {job.job_id}: {e}")
            return []

        comparisons = []
        for match in matches or []:
            try:
                comparisons.append(HistoricalComparison.from_dict(match))
            except (KeyError, TypeError, ValueError) as e:
                self._logger.warning(f"Skipping malformed historical incident {match!r}: {e}")
        return comparisons

    async def health_check(self) -> Dict[str, Any]:
        """Analyzer health plus the running configuration version."""
        summary = await self.orchestrator.get_health_summary()
        return {
            **summary,
            "engine_version": self.config.engine_version,
            "incident_lookup": self.incident_lookup is not None,
        }

    async def close(self) -> None:
        await self.orchestrator.close()


def format_assessment_summary(result: AssessmentResult) -> str:
    """
    Format a human-readable summary of a full result.

    Useful for logging and operator consoles.
    """
    lines = [
        format_risk_summary(result.assessment),
        f"Job: {result.job_id}"
        + (f" (re-analysis of {result.parent_job_id})" if result.parent_job_id else ""),
        f"Status: {result.status.value}",
        "",
        result.explanation.summary,
        "",
        "Recommendations:",
    ]

    if len(result.recommendations):
        for index, rec in enumerate(result.recommendations, start=1):
            target = f" \"{rec.original.text}\"" if rec.original else ""
            lines.append(
                f"  {index}. [{rec.kind.value}]{target} -{rec.estimated_impact:.2f}: {rec.rationale}"
            )
    else:
        lines.append("  (none)")

    if result.explanation.highlighted_issues:
        lines.append("")
        lines.append("Highlighted Issues:")
        for issue in result.explanation.highlighted_issues:
            lines.append(
                f"  \"{issue.span.text}\" ({issue.severity:.0f}): {'; '.join(issue.reasons)}"
            )

    return "\n".join(lines)


def create_service(
    orchestrator: AnalysisOrchestrator,
    config: Optional[PipelineConfig] = None,
    incident_lookup: Optional[HistoricalIncidentLookup] = None,
) -> ContentRiskService:
    """Factory function to create a service."""
    return ContentRiskService(orchestrator, config=config, incident_lookup=incident_lookup)


# ============================================================
# WIRING
# ============================================================

ANALYZER_URL_VARS = {
    "sentiment": "CONTENT_RISK_SENTIMENT_URL",
    "controversy": "CONTENT_RISK_CONTROVERSY_URL",
    "audience": "CONTENT_RISK_AUDIENCE_URL",
    "trend": "CONTENT_RISK_TREND_URL",
}


def build_http_service(
    config: Optional[PipelineConfig] = None,
    incident_lookup: Optional[HistoricalIncidentLookup] = None,
) -> ContentRiskService:
    """
    Wire HTTP providers from CONTENT_RISK_*_URL variables.

    A signal whose URL is unset has no analyzer; every job then
    reports it as failed and confidence drops accordingly.
    """
    config = config or PipelineConfig.from_env()
    api_key = os.getenv("CONTENT_RISK_API_KEY")
    logger = logging.getLogger(__name__)

    def provider(name: str) -> Optional[HttpAnalysisProvider]:
        url = os.getenv(ANALYZER_URL_VARS[name])
        if not url:
            logger.warning(f"{ANALYZER_URL_VARS[name]} not set; {name} signal disabled")
            return None
        return HttpAnalysisProvider(name, url, api_key=api_key)

    analyzers = []
    for name, analyzer_class in (
        ("sentiment", SentimentAnalyzer),
        ("controversy", ControversyAnalyzer),
        ("audience", AudienceAnalyzer),
    ):
        client = provider(name)
        if client is not None:
            analyzers.append(analyzer_class(client, config))

    trend_client = provider("trend")
    if trend_client is not None:
        feed_url = os.getenv("CONTENT_RISK_TREND_FEED_URL")
        feed = HttpTrendFeed(feed_url, api_key=api_key) if feed_url else None
        analyzers.append(TrendAnalyzer(trend_client, config, trend_feed=feed))

    orchestrator = AnalysisOrchestrator(analyzers, config)
    return ContentRiskService(orchestrator, config=config, incident_lookup=incident_lookup)
