"""
SQLAlchemy models for SEOPulse.
"""
from app.models.base import Base, BaseModel
from app.models.crawl import CrawlPage, JobStatus
from app.models.audit import AuditRun, AuditIssue, IssueRecommendation, IssueStatus

__all__ = [
    "Base",
    "BaseModel",
    "CrawlPage",
    "JobStatus",
    "AuditRun",
    "AuditIssue",
    "IssueRecommendation",
    "IssueStatus",
]
