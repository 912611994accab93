"""
Audit job store.

The audit pipeline talks to storage only through BaseJobStore. AuditJobStore
is the SQLAlchemy implementation and also serves reads for finished audits.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from urllib.parse import urlparse
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import AuditIssueNotFound, AuditJobNotFound, InvalidStatusTransition
from app.models.audit import AuditIssue, AuditRun, IssueRecommendation, IssueStatus
from app.models.crawl import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, CrawlPage, JobStatus
from app.schemas.audit import (
    AuditIssueResponse,
    AuditReport,
    AuditRunResponse,
    PageDetailResponse,
    PrioritizedIssue,
)
from app.schemas.common import PaginationParams
from app.services.audit_types import SEVERITY_RANK, AuditResult, IssueSeverity
from app.services.health_score import HealthScorer

logger = logging.getLogger(__name__)


class BaseJobStore(ABC):
    """What the audit pipeline needs from storage."""

    @abstractmethod
    async def create_job(self, seed_url: str, max_pages: int) -> UUID:
        ...

    @abstractmethod
    async def set_status(self, job_id: UUID, status: JobStatus, error_message: str | None = None) -> None:
        ...

    @abstractmethod
    async def finalize(self, job_id: UUID, result: AuditResult) -> None:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_transition(run: AuditRun, status: JobStatus):
    if status not in ALLOWED_TRANSITIONS[run.status]:
        raise InvalidStatusTransition(run.id, run.status, status)


class AuditJobStore(BaseJobStore):
    """SQLAlchemy-backed job store; every call runs in its own session."""

    def __init__(self, session_maker: async_sessionmaker | None = None, scorer: HealthScorer | None = None):
        if session_maker is None:
            from app.database import AsyncSessionLocal
            session_maker = AsyncSessionLocal
        self.session_maker = session_maker
        self.scorer = scorer or HealthScorer()

    async def _get_run(self, session: AsyncSession, job_id: UUID) -> AuditRun:
        run = await session.get(AuditRun, job_id)
        if run is None:
            raise AuditJobNotFound(job_id)
        return run

    async def create_job(self, seed_url: str, max_pages: int) -> UUID:
        """Create a pending audit job."""
        hostname = (urlparse(seed_url).hostname or "").lower()
        async with self.session_maker() as session:
            run = AuditRun(
                seed_url=seed_url,
                hostname=hostname,
                max_pages=max_pages,
                status=JobStatus.PENDING,
            )
            session.add(run)
            await session.flush()
            job_id = run.id
            await session.commit()

        logger.info(f"Created audit job {job_id} for {seed_url}")
        return job_id

    async def set_status(self, job_id: UUID, status: JobStatus, error_message: str | None = None) -> None:
        """Move a job along its lifecycle."""
        status = JobStatus(status)
        async with self.session_maker() as session:
            run = await self._get_run(session, job_id)
            _check_transition(run, status)

            run.status = status
            if status == JobStatus.RUNNING:
                run.started_at = _utcnow()
            if status in TERMINAL_STATUSES:
                run.completed_at = _utcnow()
            if error_message:
                run.error_message = error_message

            await session.commit()
            logger.debug(f"Audit job {job_id} -> {status.value}")

    async def finalize(self, job_id: UUID, result: AuditResult) -> None:
        """Persist pages, issues and recommendations and mark the job completed."""
        async with self.session_maker() as session:
            run = await self._get_run(session, job_id)
            _check_transition(run, JobStatus.COMPLETED)

            for page in result.pages:
                session.add(CrawlPage(
                    audit_run_id=run.id,
                    url=page.url,
                    status_code=page.status_code,
                    title=page.title,
                    meta_description=page.meta_description,
                    h1_tags=list(page.h1_tags),
                    word_count=page.word_count,
                    load_time=page.load_time_seconds,
                    mobile_friendly=page.mobile_friendly,
                    has_schema=page.has_schema,
                    internal_links_count=page.internal_links_count,
                    external_links_count=page.external_links_count,
                    images_count=page.images_count,
                    images_without_alt=page.images_without_alt,
                ))

            for priority, group in enumerate(result.issues, start=1):
                issue = AuditIssue(
                    audit_run_id=run.id,
                    issue_type=group.type,
                    severity=IssueSeverity(group.severity),
                    title=group.title,
                    description=group.description,
                    affected_pages=list(group.affected_pages),
                    affected_count=group.affected_count,
                    priority=priority,
                    status=IssueStatus.UNRESOLVED,
                )
                if group.recommendation is not None:
                    rec = group.recommendation
                    issue.recommendation = IssueRecommendation(
                        title=rec.title,
                        description=rec.description,
                        effort_level=rec.effort_level,
                        impact_level=rec.impact_level,
                        fix_guide=rec.fix_guide,
                        external_resources=list(rec.external_resources),
                    )
                session.add(issue)

            run.status = JobStatus.COMPLETED
            run.completed_at = _utcnow()
            run.health_score = result.health_score
            run.total_pages_crawled = result.total_pages_crawled
            run.critical_count = result.critical_count
            run.warning_count = result.warning_count
            run.notice_count = result.notice_count
            run.performance_score = int(result.health.performance_score)

            await session.commit()
            logger.info(f"Stored audit {job_id}: {len(result.pages)} pages, {len(result.issues)} issues")

    async def get_job(self, job_id: UUID) -> AuditRun | None:
        async with self.session_maker() as session:
            return await session.get(AuditRun, job_id)

    async def list_jobs(
        self,
        status: JobStatus | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[AuditRun], int]:
        """List audit jobs, newest first, with pagination."""
        params = PaginationParams(page=page, per_page=per_page)
        query = select(AuditRun)
        count_query = select(func.count(AuditRun.id))

        if status:
            query = query.where(AuditRun.status == status)
            count_query = count_query.where(AuditRun.status == status)

        async with self.session_maker() as session:
            total = (await session.execute(count_query)).scalar()

            query = query.order_by(AuditRun.created_at.desc())
            query = query.offset(params.offset).limit(params.per_page)
            result = await session.execute(query)
            return list(result.scalars().all()), total

    async def get_issues(self, job_id: UUID, severity: IssueSeverity | None = None) -> list[AuditIssue]:
        """Issue groups for a job in priority order."""
        query = select(AuditIssue).where(AuditIssue.audit_run_id == job_id)
        if severity:
            query = query.where(AuditIssue.severity == IssueSeverity(severity))
        query = query.order_by(AuditIssue.priority)

        async with self.session_maker() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_prioritized_issues(self, job_id: UUID) -> list[PrioritizedIssue]:
        """Issue categories ranked critical first, then by affected page count."""
        issues = await self.get_issues(job_id)
        ranked = sorted(issues, key=lambda i: (SEVERITY_RANK[i.severity], -(i.affected_count or 0)))
        return [
            PrioritizedIssue(
                category=issue.issue_type,
                count=issue.affected_count or 0,
                severity=issue.severity,
                priority=index,
            )
            for index, issue in enumerate(ranked, start=1)
        ]

    async def get_report(self, job_id: UUID) -> AuditReport | None:
        """Full report for a completed job; None if the job is unknown or not completed."""
        async with self.session_maker() as session:
            run = await session.get(AuditRun, job_id)
            if run is None or run.status != JobStatus.COMPLETED:
                return None

            health = self.scorer.score(
                run.critical_count,
                run.warning_count,
                run.notice_count,
                run.total_pages_crawled,
                run.performance_score,
            )

            return AuditReport(
                audit_run=AuditRunResponse.model_validate(run),
                issues=[AuditIssueResponse.model_validate(issue) for issue in run.issues],
                pages=[PageDetailResponse.model_validate(page) for page in run.pages],
                score_breakdown=health.to_dict(),
                traffic_impact=self.scorer.estimate_traffic_impact(health),
                fix_time_estimates=self.scorer.get_fix_time_estimates(
                    run.critical_count, run.warning_count, run.notice_count
                ),
            )

    async def update_issue_status(self, issue_id: UUID, status: IssueStatus | str) -> AuditIssue:
        """Mark an issue resolved or unresolved."""
        status = IssueStatus(status)
        async with self.session_maker() as session:
            issue = await session.get(AuditIssue, issue_id)
            if issue is None:
                raise AuditIssueNotFound(issue_id)

            issue.status = status
            issue.resolved_at = _utcnow() if status == IssueStatus.RESOLVED else None
            await session.commit()
            return issue
