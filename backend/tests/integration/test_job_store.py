"""
Integration tests for the SQLAlchemy audit job store.

Runs the audit pipeline against an in-memory SQLite database.
"""
import uuid

import pytest

from app.core.exceptions import AuditIssueNotFound, AuditJobNotFound, InvalidStatusTransition
from app.models.audit import IssueStatus
from app.models.crawl import JobStatus
from app.services.audit_pipeline import AuditPipeline
from app.services.audit_types import EffortLevel, IssueSeverity
from app.services.crawler import CrawlConfig, SiteCrawler
from app.services.recommendations import get_recommendation_catalog

from fixtures.sample_pages import END_TO_END_PAGE_HTML, MULTI_ISSUE_PAGE_HTML


SEED = "https://example.com"


async def run_pipeline(job_store, renderer, job_id, max_pages=1):
    crawler = SiteCrawler(renderer, config=CrawlConfig(request_delay_ms=0))
    pipeline = AuditPipeline(crawler, job_store, get_recommendation_catalog())
    return await pipeline.run_audit(job_id, SEED, max_pages)


class TestJobLifecycle:

    @pytest.mark.asyncio
    async def test_create_job_is_pending(self, job_store):
        job_id = await job_store.create_job("https://Example.com/start", 25)

        run = await job_store.get_job(job_id)
        assert run.status == JobStatus.PENDING
        assert run.hostname == "example.com"
        assert run.max_pages == 25
        assert run.started_at is None

    @pytest.mark.asyncio
    async def test_running_sets_started_at(self, job_store):
        job_id = await job_store.create_job(SEED, 10)

        await job_store.set_status(job_id, JobStatus.RUNNING)

        run = await job_store.get_job(job_id)
        assert run.status == JobStatus.RUNNING
        assert run.started_at is not None
        assert run.completed_at is None

    @pytest.mark.asyncio
    async def test_failed_records_error(self, job_store):
        job_id = await job_store.create_job(SEED, 10)
        await job_store.set_status(job_id, JobStatus.RUNNING)

        await job_store.set_status(job_id, JobStatus.FAILED, error_message="browser crashed")

        run = await job_store.get_job(job_id)
        assert run.status == JobStatus.FAILED
        assert run.error_message == "browser crashed"
        assert run.completed_at is not None

    @pytest.mark.asyncio
    async def test_pending_cannot_complete(self, job_store):
        job_id = await job_store.create_job(SEED, 10)

        with pytest.raises(InvalidStatusTransition):
            await job_store.set_status(job_id, JobStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_terminal_states_are_final(self, job_store):
        job_id = await job_store.create_job(SEED, 10)
        await job_store.set_status(job_id, JobStatus.FAILED)

        with pytest.raises(InvalidStatusTransition):
            await job_store.set_status(job_id, JobStatus.RUNNING)

    @pytest.mark.asyncio
    async def test_unknown_job(self, job_store):
        with pytest.raises(AuditJobNotFound):
            await job_store.set_status(uuid.uuid4(), JobStatus.RUNNING)

        assert await job_store.get_job(uuid.uuid4()) is None


class TestFinalize:

    @pytest.mark.asyncio
    async def test_pipeline_result_is_stored(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        renderer = fake_renderer_factory({SEED: END_TO_END_PAGE_HTML})

        result = await run_pipeline(job_store, renderer, job_id)

        run = await job_store.get_job(job_id)
        assert run.status == JobStatus.COMPLETED
        assert run.health_score == result.health_score
        assert run.total_pages_crawled == 1
        assert (run.critical_count, run.warning_count, run.notice_count) == (1, 1, 1)
        assert run.performance_score == 0
        assert run.completed_at is not None
        assert [page.url for page in run.pages] == [SEED]
        assert run.pages[0].word_count == 10

    @pytest.mark.asyncio
    async def test_issues_stored_in_priority_order(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        await run_pipeline(job_store, fake_renderer_factory({SEED: END_TO_END_PAGE_HTML}), job_id)

        issues = await job_store.get_issues(job_id)

        assert [(i.issue_type, i.priority) for i in issues] == [
            ("missing_meta_description", 1),
            ("long_title", 2),
            ("low_word_count", 3),
        ]
        assert issues[0].affected_pages == [SEED]
        assert issues[0].recommendation.effort_level == EffortLevel.EASY

    @pytest.mark.asyncio
    async def test_filter_issues_by_severity(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        await run_pipeline(job_store, fake_renderer_factory({SEED: MULTI_ISSUE_PAGE_HTML}), job_id)

        warnings = await job_store.get_issues(job_id, severity=IssueSeverity.WARNING)

        assert {i.issue_type for i in warnings} == {
            "short_title",
            "short_meta_description",
            "multiple_h1",
            "images_missing_alt",
        }

    @pytest.mark.asyncio
    async def test_failed_crawl_marks_job_failed(self, job_store):
        job_id = await job_store.create_job(SEED, 1)

        class BrokenRenderer:
            async def render(self, url, timeout_ms):
                raise RuntimeError("renderer crashed")

        with pytest.raises(RuntimeError):
            await run_pipeline(job_store, BrokenRenderer(), job_id)

        run = await job_store.get_job(job_id)
        assert run.status == JobStatus.FAILED
        assert run.error_message == "renderer crashed"
        assert run.health_score is None


class TestReports:

    @pytest.mark.asyncio
    async def test_report_for_completed_job(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        result = await run_pipeline(job_store, fake_renderer_factory({SEED: END_TO_END_PAGE_HTML}), job_id)

        report = await job_store.get_report(job_id)

        assert report.audit_run.id == job_id
        assert report.audit_run.status == JobStatus.COMPLETED
        assert len(report.issues) == 3
        assert report.issues[0].recommendation.title == "Add Meta Description"
        assert len(report.pages) == 1
        assert report.score_breakdown["overall_score"] == result.health_score
        assert report.traffic_impact["potential_gain"] == 100 - result.health_score
        assert report.fix_time_estimates["total_time"] == "4 hours"

    @pytest.mark.asyncio
    async def test_no_report_until_completed(self, job_store):
        job_id = await job_store.create_job(SEED, 1)

        assert await job_store.get_report(job_id) is None
        assert await job_store.get_report(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_prioritized_issues(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        await run_pipeline(job_store, fake_renderer_factory({SEED: END_TO_END_PAGE_HTML}), job_id)

        prioritized = await job_store.get_prioritized_issues(job_id)

        assert [(p.category, p.severity, p.priority) for p in prioritized] == [
            ("missing_meta_description", IssueSeverity.CRITICAL, 1),
            ("long_title", IssueSeverity.WARNING, 2),
            ("low_word_count", IssueSeverity.NOTICE, 3),
        ]
        assert all(p.count == 1 for p in prioritized)

    @pytest.mark.asyncio
    async def test_list_jobs(self, job_store):
        first = await job_store.create_job(SEED, 1)
        second = await job_store.create_job("https://example.org", 1)
        await job_store.set_status(second, JobStatus.FAILED)

        jobs, total = await job_store.list_jobs()
        failed, failed_total = await job_store.list_jobs(status=JobStatus.FAILED)
        page_two, _ = await job_store.list_jobs(page=2, per_page=1)

        assert total == 2
        assert {j.id for j in jobs} == {first, second}
        assert failed_total == 1
        assert [j.id for j in failed] == [second]
        assert len(page_two) == 1


class TestIssueStatus:

    @pytest.mark.asyncio
    async def test_resolve_and_reopen(self, job_store, fake_renderer_factory):
        job_id = await job_store.create_job(SEED, 1)
        await run_pipeline(job_store, fake_renderer_factory({SEED: END_TO_END_PAGE_HTML}), job_id)
        issue_id = (await job_store.get_issues(job_id))[0].id

        resolved = await job_store.update_issue_status(issue_id, IssueStatus.RESOLVED)
        assert resolved.status == IssueStatus.RESOLVED
        assert resolved.resolved_at is not None

        reopened = await job_store.update_issue_status(issue_id, "unresolved")
        assert reopened.status == IssueStatus.UNRESOLVED
        assert reopened.resolved_at is None

    @pytest.mark.asyncio
    async def test_unknown_issue(self, job_store):
        with pytest.raises(AuditIssueNotFound):
            await job_store.update_issue_status(uuid.uuid4(), IssueStatus.RESOLVED)
