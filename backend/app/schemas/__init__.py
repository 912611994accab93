"""
Pydantic schemas for SEOPulse.
"""
from app.schemas.common import (
    BaseSchema,
    IDSchema,
    TimestampSchema,
    PaginationParams,
)
from app.schemas.audit import (
    AuditJobCreate,
    AuditRunResponse,
    PageDetailResponse,
    RecommendationResponse,
    AuditIssueResponse,
    PrioritizedIssue,
    AuditReport,
)

__all__ = [
    "BaseSchema",
    "IDSchema",
    "TimestampSchema",
    "PaginationParams",
    "AuditJobCreate",
    "AuditRunResponse",
    "PageDetailResponse",
    "RecommendationResponse",
    "AuditIssueResponse",
    "PrioritizedIssue",
    "AuditReport",
]
