"""
Crawl models: job lifecycle and per-page crawl details.
"""
from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, Enum, Float, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from app.models.base import Base, BaseModel, JSONType


class JobStatus(str, PyEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING, JobStatus.FAILED}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class CrawlPage(Base, BaseModel):
    """Summary row for one page crawled during an audit."""

    __tablename__ = "page_details"

    audit_run_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("audit_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(Text, nullable=False)
    status_code = Column(Integer, nullable=True)
    title = Column(Text, nullable=True)
    meta_description = Column(Text, nullable=True)
    h1_tags = Column(JSONType, default=list)
    word_count = Column(Integer, default=0)
    load_time = Column(Float, default=0.0)  # seconds
    mobile_friendly = Column(Boolean, default=False)
    has_schema = Column(Boolean, default=False)
    internal_links_count = Column(Integer, default=0)
    external_links_count = Column(Integer, default=0)
    images_count = Column(Integer, default=0)
    images_without_alt = Column(Integer, default=0)

    # Relationships
    audit_run = relationship("AuditRun", back_populates="pages")

    def __repr__(self) -> str:
        return f"<CrawlPage {self.url} ({self.status_code})>"
