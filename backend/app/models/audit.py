"""
Audit models for SEO analysis results.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel, JSONType
from app.models.crawl import JobStatus
from app.services.audit_types import EffortLevel, ImpactLevel, IssueSeverity


class IssueStatus(str, PyEnum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


class AuditRun(Base, BaseModel):
    """Audit job tracking and results."""

    __tablename__ = "audit_runs"

    seed_url = Column(Text, nullable=False)
    hostname = Column(String(255), nullable=False, index=True)
    max_pages = Column(Integer, nullable=False)
    status = Column(
        Enum(JobStatus),
        default=JobStatus.PENDING,
        nullable=False,
        index=True,
    )
    health_score = Column(Integer, nullable=True)
    total_pages_crawled = Column(Integer, default=0)
    critical_count = Column(Integer, default=0)
    warning_count = Column(Integer, default=0)
    notice_count = Column(Integer, default=0)
    performance_score = Column(Integer, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)

    # Relationships
    pages = relationship(
        "CrawlPage",
        back_populates="audit_run",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    issues = relationship(
        "AuditIssue",
        back_populates="audit_run",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AuditIssue.priority",
    )

    def __repr__(self) -> str:
        return f"<AuditRun {self.id} ({self.status.value})>"


class AuditIssue(Base, BaseModel):
    """Site-wide issue group found during an audit."""

    __tablename__ = "audit_issues"

    audit_run_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("audit_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    issue_type = Column(String(100), nullable=False)
    severity = Column(
        Enum(IssueSeverity),
        nullable=False,
    )
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    affected_pages = Column(JSONType, default=list)
    affected_count = Column(Integer, default=0)
    priority = Column(Integer, default=0)
    status = Column(
        Enum(IssueStatus),
        default=IssueStatus.UNRESOLVED,
        nullable=False,
    )
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    audit_run = relationship("AuditRun", back_populates="issues")
    recommendation = relationship(
        "IssueRecommendation",
        back_populates="issue",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<AuditIssue {self.issue_type} ({self.severity.value})>"


class IssueRecommendation(Base, BaseModel):
    """Fix guidance attached to one issue group."""

    __tablename__ = "issue_recommendations"

    issue_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("audit_issues.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    effort_level = Column(Enum(EffortLevel), nullable=False)
    impact_level = Column(Enum(ImpactLevel), nullable=False)
    fix_guide = Column(Text, nullable=True)
    external_resources = Column(JSONType, default=list)

    # Relationships
    issue = relationship("AuditIssue", back_populates="recommendation")

    def __repr__(self) -> str:
        return f"<IssueRecommendation {self.title[:30]}>"
