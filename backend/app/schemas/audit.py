"""
Audit schemas.
"""
from datetime import datetime
from urllib.parse import urlparse
from uuid import UUID

from pydantic import Field, field_validator

from app.config import settings
from app.models.audit import IssueStatus
from app.models.crawl import JobStatus
from app.services.audit_types import EffortLevel, ImpactLevel, IssueSeverity
from app.schemas.common import BaseSchema, IDSchema, TimestampSchema


class AuditJobCreate(BaseSchema):
    """Audit submission."""

    seed_url: str = Field(min_length=1, max_length=2048)
    max_pages: int = Field(default_factory=lambda: settings.DEFAULT_MAX_PAGES, ge=1)

    @field_validator("seed_url")
    @classmethod
    def validate_seed_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https"):
            raise ValueError("seed_url must be an http or https URL")
        if not parsed.hostname:
            raise ValueError("seed_url must include a hostname")
        return value

    @field_validator("max_pages")
    @classmethod
    def validate_max_pages(cls, value: int) -> int:
        if value > settings.MAX_PAGES_PER_AUDIT:
            raise ValueError(f"max_pages cannot exceed {settings.MAX_PAGES_PER_AUDIT}")
        return value

    @property
    def hostname(self) -> str:
        return urlparse(self.seed_url).hostname


class AuditRunResponse(IDSchema, TimestampSchema):
    """Audit job response."""

    seed_url: str
    hostname: str
    max_pages: int
    status: JobStatus
    health_score: int | None
    total_pages_crawled: int | None
    critical_count: int | None
    warning_count: int | None
    notice_count: int | None
    performance_score: int | None
    started_at: datetime | None
    completed_at: datetime | None
    error_message: str | None


class PageDetailResponse(IDSchema):
    """Per-page crawl summary."""

    url: str
    status_code: int | None
    title: str | None
    meta_description: str | None
    h1_tags: list[str]
    word_count: int
    load_time: float
    mobile_friendly: bool
    has_schema: bool
    internal_links_count: int
    external_links_count: int
    images_count: int
    images_without_alt: int


class RecommendationResponse(BaseSchema):
    """Fix guidance for an issue."""

    title: str
    description: str | None
    effort_level: EffortLevel
    impact_level: ImpactLevel
    fix_guide: str | None
    external_resources: list[str]


class AuditIssueResponse(IDSchema):
    """Site-wide issue group."""

    issue_type: str
    severity: IssueSeverity
    title: str
    description: str | None
    affected_pages: list[str]
    affected_count: int
    priority: int
    status: IssueStatus
    resolved_at: datetime | None
    recommendation: RecommendationResponse | None = None


class PrioritizedIssue(BaseSchema):
    """Issue category ranked by severity, then by affected pages."""

    category: str
    count: int
    severity: IssueSeverity
    priority: int


class AuditReport(BaseSchema):
    """Full audit report for a completed job."""

    audit_run: AuditRunResponse
    issues: list[AuditIssueResponse]
    pages: list[PageDetailResponse]
    score_breakdown: dict | None = None
    traffic_impact: dict | None = None
    fix_time_estimates: dict | None = None
