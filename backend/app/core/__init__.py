"""
Core utilities for SEOPulse.
"""
from app.core.exceptions import (
    SEOPulseError,
    PageRenderError,
    AuditJobNotFound,
    AuditIssueNotFound,
    InvalidStatusTransition,
    InvalidAuditRequest,
)

__all__ = [
    "SEOPulseError",
    "PageRenderError",
    "AuditJobNotFound",
    "AuditIssueNotFound",
    "InvalidStatusTransition",
    "InvalidAuditRequest",
]
