"""
Pydantic Schemas for the Content Risk API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.exceptions import ValidationError
from orchestrator.models import AnalysisJob, AssessmentResult, AudienceProfile, ContentSection


# =============================================================
# REQUEST SCHEMAS
# =============================================================

class AudienceProfileSchema(BaseModel):
    """Who the post is aimed at."""
    segments: List[str] = Field(default_factory=list)
    age_range: Optional[str] = None
    regions: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)

    def to_profile(self) -> AudienceProfile:
        return AudienceProfile(
            segments=tuple(self.segments),
            age_range=self.age_range,
            regions=tuple(self.regions),
            interests=tuple(self.interests),
        )


class ContentSectionSchema(BaseModel):
    name: str = "body"
    text: str


class AnalysisRequest(BaseModel):
    """Schema for submitting a draft. Provide either text or sections."""
    text: Optional[str] = None
    sections: Optional[List[ContentSectionSchema]] = None
    platforms: List[str] = Field(default_factory=list)
    audience_profile: Optional[AudienceProfileSchema] = None
    content_type: str = "text"

    def to_job(self) -> AnalysisJob:
        profile = self.audience_profile.to_profile() if self.audience_profile else None

        if self.sections:
            if self.text:
                raise ValidationError("Provide either text or sections, not both", field_name="text")
            return AnalysisJob.from_sections(
                [ContentSection(name=s.name, text=s.text) for s in self.sections],
                platforms=self.platforms,
                audience_profile=profile,
                content_type=self.content_type,
            )

        if self.text is None:
            raise ValidationError("Either text or sections is required", field_name="text")

        return AnalysisJob.from_text(
            self.text,
            platforms=self.platforms,
            audience_profile=profile,
            content_type=self.content_type,
        )


class ReanalysisRequest(BaseModel):
    """Schema for resubmitting edited content."""
    text: str
    platforms: List[str] = Field(default_factory=list)
    audience_profile: Optional[AudienceProfileSchema] = None
    content_type: str = "text"


# =============================================================
# RESPONSE SCHEMAS
# =============================================================

class TextSpanSchema(BaseModel):
    text: str
    start: Optional[int] = None
    end: Optional[int] = None


class ContributingFactorSchema(BaseModel):
    kind: str
    severity: float
    weight: float
    weighted_impact: float


class RiskAssessmentSchema(BaseModel):
    """Aggregated risk."""
    risk_score: float
    risk_category: str
    confidence_level: float
    contributing_factors: List[ContributingFactorSchema]
    failed_signals: List[str]
    degraded: bool
    low_confidence: bool
    total_signal_failure: bool


class RecommendationSchema(BaseModel):
    kind: str
    original: Optional[TextSpanSchema] = None
    suggested_text: Optional[str] = None
    rationale: str
    estimated_impact: float
    source_signal: Optional[str] = None


class HighlightedIssueSchema(BaseModel):
    span: TextSpanSchema
    severity: float
    reasons: List[str]
    sources: List[str]


class HistoricalComparisonSchema(BaseModel):
    incident_id: str
    description: str
    similarity: float
    outcome: Optional[str] = None
    occurred_at: Optional[str] = None


class ExplanationSchema(BaseModel):
    summary: str
    rationale: str
    highlighted_issues: List[HighlightedIssueSchema]
    historical_comparisons: List[HistoricalComparisonSchema]


class SignalResultSchema(BaseModel):
    kind: str
    status: str
    severity: float
    detail: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    latency_ms: Optional[float] = None


class AssessmentResponse(BaseModel):
    """Schema for a completed assessment."""
    job_id: str
    parent_job_id: Optional[str] = None
    status: str
    assessment: RiskAssessmentSchema
    recommendations: List[RecommendationSchema]
    explanation: ExplanationSchema
    signals: Dict[str, SignalResultSchema]
    submitted_at: datetime
    completed_at: datetime
    duration_seconds: float

    @classmethod
    def from_result(cls, result: AssessmentResult) -> "AssessmentResponse":
        data = result.to_dict()
        data["recommendations"] = data["recommendations"]["recommendations"]
        return cls.model_validate(data)


class HealthResponse(BaseModel):
    """Analyzer health summary."""
    total_analyzers: int
    healthy: int
    degraded: int
    unavailable: int
    usable: int
    health_pct: float
    missing: List[str]
    analyzers: Dict[str, Dict[str, Any]]
    analyzer_metadata: Dict[str, Dict[str, Any]]
    engine_version: str
    incident_lookup: bool

