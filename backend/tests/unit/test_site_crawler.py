"""
Unit tests for the breadth-first site crawler.

Tests:
- Page budget and distinct URLs
- Same-hostname link following
- Failed pages are skipped and never retried
- Per-page timeout handling
"""
import asyncio
from urllib.parse import urlparse

import pytest

from app.services.audit_types import RenderedPage
from app.services.crawler import CrawlConfig, SiteCrawler
from app.services.renderer import BasePageRenderer

from fixtures.sample_pages import site_page


SEED = "https://example.com/"

SITE = {
    "https://example.com/": site_page("Home", [
        "/a",
        "/b",
        "/a#top",
        "https://other.com/x",
        "https://blog.example.com/",
    ]),
    "https://example.com/a": site_page("Page A", ["/", "/c"]),
    "https://example.com/b": site_page("Page B", ["/missing"]),
    "https://example.com/c": site_page("Page C", ["/a"]),
}


class SlowRenderer(BasePageRenderer):
    """Renderer that never answers within the crawl timeout."""

    async def render(self, url: str, timeout_ms: int) -> RenderedPage:
        await asyncio.sleep(5)
        raise AssertionError("render should have been cancelled")


@pytest.fixture
def renderer(fake_renderer_factory):
    return fake_renderer_factory(SITE)


@pytest.fixture
def crawler(renderer):
    return SiteCrawler(renderer, config=CrawlConfig(request_delay_ms=0))


class TestCrawlBudget:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_pages", [1, 2, 3])
    async def test_never_exceeds_max_pages(self, crawler, max_pages):
        pages = await crawler.crawl_site(SEED, max_pages)

        assert len(pages) <= max_pages

    @pytest.mark.asyncio
    async def test_zero_budget_visits_nothing(self, crawler, renderer):
        pages = await crawler.crawl_site(SEED, 0)

        assert pages == []
        assert renderer.calls == []

    @pytest.mark.asyncio
    async def test_failed_page_counts_toward_budget(self, renderer):
        crawler = SiteCrawler(renderer, config=CrawlConfig(request_delay_ms=0))
        renderer.failing.add("https://example.com/a")

        pages = await crawler.crawl_site(SEED, 2)

        assert [p.url for p in pages] == ["https://example.com/"]
        assert renderer.calls == ["https://example.com/", "https://example.com/a"]


class TestFrontier:

    @pytest.mark.asyncio
    async def test_breadth_first_order(self, crawler):
        pages = await crawler.crawl_site(SEED, 10)

        assert [p.url for p in pages] == [
            "https://example.com/",
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
        ]

    @pytest.mark.asyncio
    async def test_urls_are_distinct(self, crawler, renderer):
        pages = await crawler.crawl_site(SEED, 10)

        urls = [p.url for p in pages]
        assert len(urls) == len(set(urls))
        assert len(renderer.calls) == len(set(renderer.calls))

    @pytest.mark.asyncio
    async def test_stays_on_seed_hostname(self, crawler, renderer):
        pages = await crawler.crawl_site(SEED, 10)

        assert all(urlparse(p.url).hostname == "example.com" for p in pages)
        assert all(urlparse(url).hostname == "example.com" for url in renderer.calls)

    @pytest.mark.asyncio
    async def test_failed_url_skipped_and_not_retried(self, crawler, renderer):
        pages = await crawler.crawl_site(SEED, 10)

        assert "https://example.com/missing" not in [p.url for p in pages]
        assert renderer.calls.count("https://example.com/missing") == 1

    @pytest.mark.asyncio
    async def test_unreachable_seed_gives_empty_result(self, renderer):
        renderer.failing.add(SEED)
        crawler = SiteCrawler(renderer, config=CrawlConfig(request_delay_ms=0))

        pages = await crawler.crawl_site(SEED, 10)

        assert pages == []
        assert renderer.calls == [SEED]

    @pytest.mark.asyncio
    async def test_each_crawl_starts_fresh(self, crawler):
        first = await crawler.crawl_site(SEED, 10)
        second = await crawler.crawl_site(SEED, 10)

        assert [p.url for p in first] == [p.url for p in second]


class TestPageAnalysis:

    @pytest.mark.asyncio
    async def test_pages_carry_signals_and_issues(self, crawler):
        pages = await crawler.crawl_site(SEED, 1)

        page = pages[0]
        assert page.signals.title == "Home"
        assert page.signals.h1 == ["Home"]
        assert {i.type for i in page.issues} >= {"short_title", "missing_meta_description", "not_mobile_friendly"}
        assert all(i.affected_pages == (SEED,) for i in page.issues)


class TestTimeouts:

    @pytest.mark.asyncio
    async def test_render_timeout_is_a_page_failure(self):
        crawler = SiteCrawler(
            SlowRenderer(),
            config=CrawlConfig(page_timeout_ms=10, render_grace_ms=10, request_delay_ms=0),
        )

        pages = await crawler.crawl_site(SEED, 3)

        assert pages == []
