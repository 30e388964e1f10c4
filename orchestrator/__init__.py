"""
Orchestrator Package - Analysis Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
This package is the entrypoint of the content risk core. It
runs the four analyzers for a job, then hands the collected
signals to the aggregator, recommendation engine and
explanation builder.

============================================================
CORE PRINCIPLES
============================================================
1. Provider failures degrade confidence, they never abort a job
2. Every signal kind yields exactly one result
3. The core is stateless between calls
4. Only malformed jobs and bad configuration raise

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                 ContentRiskService                  |
    |-----------------------------------------------------|
    |  AnalysisOrchestrator | analyzers in parallel      |
    |  RiskAggregator       | weighted score + category  |
    |  RecommendationEngine | prioritized edits          |
    |  ExplanationBuilder   | summary + highlighted text |
    +-----------------------------------------------------+

============================================================
USAGE
============================================================

    from orchestrator import AnalysisJob, AnalysisOrchestrator, ContentRiskService

    orchestrator = AnalysisOrchestrator(analyzers, config)
    service = ContentRiskService(orchestrator)

    result = await service.submit_for_analysis(
        AnalysisJob.from_text("Draft post", platforms=["twitter"]),
    )
    revised = await service.reanalyze("Edited post", result.job_id)

============================================================
"""

from .collaborators import HistoricalIncidentLookup
from .core import (
    ContentRiskService,
    build_http_service,
    create_service,
    format_assessment_summary,
    setup_logging,
)
from .models import (
    AnalysisJob,
    AssessmentResult,
    AssessmentStatus,
    AudienceProfile,
    ContentSection,
    new_job_id,
)
from .pipeline import AnalysisOrchestrator


__all__ = [
    # Service
    "ContentRiskService",
    "create_service",
    "build_http_service",
    "format_assessment_summary",
    "setup_logging",

    # Pipeline
    "AnalysisOrchestrator",

    # Models
    "AnalysisJob",
    "AssessmentResult",
    "AssessmentStatus",
    "AudienceProfile",
    "ContentSection",
    "new_job_id",

    # Collaborators
    "HistoricalIncidentLookup",
]
