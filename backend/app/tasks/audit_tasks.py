"""
Audit Tasks

Background tasks for SEO audit processing. Submission validates the request,
creates the job record and enqueues `run_audit`; progress is observable only
through the job store.
"""

import asyncio
import logging
from uuid import UUID

from celery import shared_task
from pydantic import ValidationError

from app.config import settings
from app.core.exceptions import InvalidAuditRequest
from app.database import get_sync_compatible_session_maker
from app.integrations.pagespeed import PageSpeedClient
from app.models.crawl import JobStatus
from app.schemas.audit import AuditJobCreate
from app.services.audit_pipeline import AuditPipeline
from app.services.audit_service import AuditJobStore, BaseJobStore
from app.services.crawler import CrawlConfig, SiteCrawler
from app.services.health_score import HealthScorer
from app.services.recommendations import get_recommendation_catalog
from app.services.renderer import BasePageRenderer, get_page_renderer
from app.worker import celery_app  # noqa: F401  configures the current app for producers

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async code in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def build_audit_pipeline(store: BaseJobStore, renderer: BasePageRenderer) -> AuditPipeline:
    """Wire a pipeline for one job from process settings."""
    crawler = SiteCrawler(
        renderer,
        config=CrawlConfig(
            page_timeout_ms=settings.PAGE_TIMEOUT_MS,
            render_grace_ms=settings.RENDER_GRACE_MS,
            request_delay_ms=settings.CRAWL_REQUEST_DELAY_MS,
        ),
    )
    performance_provider = PageSpeedClient() if settings.PAGESPEED_API_KEY else None

    return AuditPipeline(
        crawler=crawler,
        store=store,
        catalog=get_recommendation_catalog(),
        scorer=HealthScorer(),
        performance_provider=performance_provider,
    )


@shared_task(bind=True, max_retries=0)
def run_audit(self, job_id: str, seed_url: str, max_pages: int):
    """Run an SEO audit job."""
    return run_async(_run_audit(job_id, seed_url, max_pages))


async def _run_audit(job_id: str, seed_url: str, max_pages: int) -> dict:
    session_maker = get_sync_compatible_session_maker()
    try:
        return await execute_audit(AuditJobStore(session_maker), UUID(job_id), seed_url, max_pages)
    finally:
        await session_maker.kw["bind"].dispose()


async def execute_audit(
    store: BaseJobStore,
    job_id: UUID,
    seed_url: str,
    max_pages: int,
    renderer: BasePageRenderer | None = None,
) -> dict:
    """Run one job with its own renderer. Marks the job failed if the renderer cannot start."""
    renderer = renderer or get_page_renderer()

    try:
        await renderer.start()
    except Exception as e:
        logger.error(f"Audit {job_id}: renderer unavailable: {e}")
        await store.set_status(job_id, JobStatus.FAILED, error_message=f"Renderer unavailable: {e}")
        raise

    try:
        pipeline = build_audit_pipeline(store, renderer)
        result = await pipeline.run_audit(job_id, seed_url, max_pages)
    finally:
        await renderer.stop()

    return {
        "job_id": str(job_id),
        "status": JobStatus.COMPLETED.value,
        "health_score": result.health_score,
        "total_pages_crawled": result.total_pages_crawled,
        "critical_count": result.critical_count,
        "warning_count": result.warning_count,
        "notice_count": result.notice_count,
    }


async def submit_audit(store: BaseJobStore, seed_url: str, max_pages: int | None = None) -> UUID:
    """
    Validate an audit request, create the job and enqueue it.

    Raises:
        InvalidAuditRequest: seed_url or max_pages failed validation
    """
    payload = {"seed_url": seed_url}
    if max_pages is not None:
        payload["max_pages"] = max_pages

    try:
        request = AuditJobCreate(**payload)
    except ValidationError as e:
        detail = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise InvalidAuditRequest(detail) from e

    job_id = await store.create_job(request.seed_url, request.max_pages)
    run_audit.delay(str(job_id), request.seed_url, request.max_pages)
    logger.info(f"Queued audit {job_id} for {request.seed_url} (max {request.max_pages} pages)")
    return job_id
