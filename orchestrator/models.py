"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Defines data models for the analysis orchestrator.

- AnalysisJob: one validated submission, immutable
- Content sections and audience profile
- AssessmentResult: everything returned for one job
- Assessment status labels for degraded operation

============================================================
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from analyzers.base import AnalysisContext
from core.exceptions import ValidationError
from explanation.types import Explanation
from recommendations.types import RecommendationSet
from risk_scoring.types import RiskAssessment, SignalSet


SECTION_SEPARATOR = "\n\n"

MEDIA_CONTENT_TYPES = ("text", "image", "video", "audio", "mixed")


# ============================================================
# JOB INPUTS
# ============================================================


@dataclass(frozen=True)
class ContentSection:
    """One named part of a post (title, body, caption, ...)."""

    name: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "text": self.text}


@dataclass(frozen=True)
class AudienceProfile:
    """
    Who the post is aimed at.

    Supplied by the caller; the core never stores profiles.
    """

    segments: Tuple[str, ...] = ()
    age_range: Optional[str] = None
    regions: Tuple[str, ...] = ()
    interests: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.segments or self.age_range or self.regions or self.interests)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["AudienceProfile"]:
        if not data:
            return None
        return cls(
            segments=tuple(data.get("segments") or ()),
            age_range=data.get("age_range"),
            regions=tuple(data.get("regions") or ()),
            interests=tuple(data.get("interests") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segments": list(self.segments),
            "age_range": self.age_range,
            "regions": list(self.regions),
            "interests": list(self.interests),
        }


@dataclass(frozen=True)
class AnalysisJob:
    """
    One submission under analysis.

    Created when ingestion hands off a submission; immutable
    for its whole lifetime.
    """

    job_id: str
    sections: Tuple[ContentSection, ...]
    platforms: Tuple[str, ...] = ()
    audience_profile: Optional[AudienceProfile] = None
    content_type: str = "text"
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    parent_job_id: Optional[str] = None

    @classmethod
    def from_text(
        cls,
        text: str,
        platforms: Sequence[str] = (),
        audience_profile: Optional[AudienceProfile] = None,
        content_type: str = "text",
        job_id: Optional[str] = None,
        parent_job_id: Optional[str] = None,
    ) -> "AnalysisJob":
        """Build a single-section job."""
        return cls(
            job_id=job_id or new_job_id(),
            sections=(ContentSection(name="body", text=text),),
            platforms=tuple(platforms),
            audience_profile=audience_profile,
            content_type=content_type,
            parent_job_id=parent_job_id,
        )

    @classmethod
    def from_sections(
        cls,
        sections: Sequence[ContentSection],
        platforms: Sequence[str] = (),
        audience_profile: Optional[AudienceProfile] = None,
        content_type: str = "text",
        job_id: Optional[str] = None,
    ) -> "AnalysisJob":
        """Build a multi-section job (title, body, caption, ...)."""
        return cls(
            job_id=job_id or new_job_id(),
            sections=tuple(sections),
            platforms=tuple(platforms),
            audience_profile=audience_profile,
            content_type=content_type,
        )

    @property
    def text(self) -> str:
        """Full text, sections joined by a blank line. Span offsets index into this."""
        return SECTION_SEPARATOR.join(s.text for s in self.sections)

    @property
    def has_media(self) -> bool:
        return self.content_type != "text"

    def validate(self, max_content_length: int) -> None:
        """
        Reject malformed jobs before orchestration.

        Raises:
            ValidationError: Empty content, oversized content,
                or an unknown content type
        """
        if not self.job_id:
            raise ValidationError("Job id is required", field_name="job_id")

        if not self.sections or not self.text.strip():
            raise ValidationError("Content is empty", field_name="sections")

        if len(self.text) > max_content_length:
            raise ValidationError(
                f"Content exceeds {max_content_length} characters",
                field_name="sections",
                value=len(self.text),
            )

        if self.content_type not in MEDIA_CONTENT_TYPES:
            raise ValidationError(
                f"Unknown content type '{self.content_type}'",
                field_name="content_type",
                value=self.content_type,
            )

        for platform in self.platforms:
            if not platform or not platform.strip():
                raise ValidationError("Platform names must be non-empty", field_name="platforms")

    def to_context(self) -> AnalysisContext:
        """Context handed to the analyzer adapters."""
        profile = self.audience_profile
        return AnalysisContext(
            job_id=self.job_id,
            platforms=self.platforms,
            audience_profile=profile.to_dict() if profile and not profile.is_empty else None,
            content_type=self.content_type,
            sections=tuple(s.name for s in self.sections),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "parent_job_id": self.parent_job_id,
            "sections": [s.to_dict() for s in self.sections],
            "platforms": list(self.platforms),
            "audience_profile": self.audience_profile.to_dict() if self.audience_profile else None,
            "content_type": self.content_type,
            "submitted_at": self.submitted_at.isoformat(),
        }


def new_job_id() -> str:
    return f"job-{uuid.uuid4().hex[:16]}"


# ============================================================
# RESULTS
# ============================================================


class AssessmentStatus(Enum):
    """How much of the pipeline's evidence backs a result."""

    COMPLETE = "complete"
    """Every signal succeeded."""

    DEGRADED = "degraded"
    """At least one signal failed or timed out."""

    LOW_CONFIDENCE = "low_confidence"
    """Confidence below threshold; proceed with caution."""


@dataclass(frozen=True)
class AssessmentResult:
    """
    Everything returned for one job.

    Always structurally valid, even when every analyzer failed;
    callers read `status` and `assessment.confidence_level`
    rather than catching exceptions.
    """

    job_id: str
    assessment: RiskAssessment
    recommendations: RecommendationSet
    explanation: Explanation
    signals: SignalSet
    submitted_at: datetime
    completed_at: datetime
    parent_job_id: Optional[str] = None

    @property
    def status(self) -> AssessmentStatus:
        if self.assessment.low_confidence:
            return AssessmentStatus.LOW_CONFIDENCE
        if self.assessment.degraded:
            return AssessmentStatus.DEGRADED
        return AssessmentStatus.COMPLETE

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.submitted_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "parent_job_id": self.parent_job_id,
            "status": self.status.value,
            "assessment": self.assessment.to_dict(),
            "recommendations": self.recommendations.to_dict(),
            "explanation": self.explanation.to_dict(),
            "signals": self.signals.to_dict(),
            "submitted_at": self.submitted_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
        }
