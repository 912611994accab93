"""
SEOPulse Audit Pipeline

Runs one audit job end to end:
crawl -> per-page issues -> site-wide aggregation -> recommendations ->
health score -> job store.

The job store is the only place progress is visible; a job ends either
completed with a full result or failed with none.
"""

import logging
from dataclasses import replace
from typing import Iterable
from uuid import UUID

from app.models.crawl import JobStatus
from app.services.audit_types import (
    SEVERITY_RANK,
    AggregatedIssue,
    AuditResult,
    Issue,
    IssueSeverity,
    PageDetail,
)
from app.services.crawler import SiteCrawler
from app.services.health_score import HealthScorer
from app.services.recommendations import RecommendationCatalog

logger = logging.getLogger(__name__)


def aggregate_issues(issues: Iterable[Issue]) -> list[AggregatedIssue]:
    """
    Group per-page issues by (type, severity).

    Affected pages are the ordered union of every contributing issue's pages,
    each URL listed once; affected_count is the number of distinct pages.
    Groups come back prioritized: critical, warning, notice, then most
    affected pages first, then type.
    """
    groups: dict[tuple[str, IssueSeverity], dict] = {}

    for issue in issues:
        key = (issue.type, issue.severity)
        group = groups.get(key)
        if group is None:
            group = {"issue": issue, "pages": {}}
            groups[key] = group
        for page in issue.affected_pages:
            group["pages"].setdefault(page, None)

    aggregated = [
        AggregatedIssue(
            type=issue_type,
            severity=severity,
            title=group["issue"].title,
            description=group["issue"].description,
            affected_pages=tuple(group["pages"]),
            affected_count=len(group["pages"]),
        )
        for (issue_type, severity), group in groups.items()
    ]

    aggregated.sort(key=lambda i: (SEVERITY_RANK[i.severity], -i.affected_count, i.type))
    return aggregated


class AuditPipeline:
    """Top-level orchestrator for a single audit job."""

    def __init__(
        self,
        crawler: SiteCrawler,
        store,
        catalog: RecommendationCatalog,
        scorer: HealthScorer | None = None,
        performance_provider=None,
    ):
        self.crawler = crawler
        self.store = store
        self.catalog = catalog
        self.scorer = scorer or HealthScorer()
        self.performance_provider = performance_provider

    async def run_audit(self, job_id: UUID, seed_url: str, max_pages: int) -> AuditResult:
        """
        Run the audit and hand the result to the job store.

        Raises whatever aborted the job, after marking it failed.
        """
        await self.store.set_status(job_id, JobStatus.RUNNING)
        logger.info(f"Audit {job_id} started for {seed_url} (max {max_pages} pages)")

        try:
            result = await self._execute(job_id, seed_url, max_pages)
            await self.store.finalize(job_id, result)
        except Exception as e:
            logger.exception(f"Audit {job_id} failed: {e}")
            await self._mark_failed(job_id, e)
            raise

        logger.info(
            f"Audit {job_id} completed: {result.total_pages_crawled} pages, "
            f"score {result.health_score} ({result.health.grade}), "
            f"{result.critical_count} critical / {result.warning_count} warning / {result.notice_count} notice"
        )
        return result

    async def _execute(self, job_id: UUID, seed_url: str, max_pages: int) -> AuditResult:
        pages = await self.crawler.crawl_site(seed_url, max_pages)

        all_issues: list[Issue] = []
        page_details: list[PageDetail] = []
        for page in pages:
            page_details.append(PageDetail.from_signals(page.signals))
            all_issues.extend(page.issues)

        groups = [
            replace(group, recommendation=self.catalog.lookup(group.type))
            for group in aggregate_issues(all_issues)
        ]

        critical_count = sum(1 for g in groups if g.severity == IssueSeverity.CRITICAL)
        warning_count = sum(1 for g in groups if g.severity == IssueSeverity.WARNING)
        notice_count = sum(1 for g in groups if g.severity == IssueSeverity.NOTICE)

        performance_score = await self._get_performance_score(seed_url)

        health = self.scorer.score(
            critical_count,
            warning_count,
            notice_count,
            len(pages),
            performance_score,
        )

        return AuditResult(
            job_id=job_id,
            health_score=health.overall_score,
            health=health,
            total_pages_crawled=len(pages),
            critical_count=critical_count,
            warning_count=warning_count,
            notice_count=notice_count,
            issues=tuple(groups),
            pages=tuple(page_details),
        )

    async def _get_performance_score(self, seed_url: str) -> int | None:
        if self.performance_provider is None:
            return None
        return await self.performance_provider.get_performance_score(seed_url)

    async def _mark_failed(self, job_id: UUID, error: Exception):
        try:
            await self.store.set_status(job_id, JobStatus.FAILED, error_message=str(error) or type(error).__name__)
        except Exception as store_error:
            logger.error(f"Could not mark audit {job_id} as failed: {store_error}")
