"""
SEOPulse Site Crawler

Breadth-first crawl of one site:
- FIFO frontier seeded with the audit URL
- Same-hostname link following
- One attempt per URL, failures are skipped
- Per-page signal extraction and issue detection
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from urllib.parse import urlparse

from app.config import settings
from app.core.exceptions import PageRenderError
from app.services.audit_types import CrawledPage
from app.services.issue_detector import IssueDetector
from app.services.renderer import BasePageRenderer
from app.services.signal_extractor import SignalExtractor

logger = logging.getLogger(__name__)


@dataclass
class CrawlConfig:
    page_timeout_ms: int = settings.PAGE_TIMEOUT_MS
    render_grace_ms: int = settings.RENDER_GRACE_MS
    request_delay_ms: int = 0


class SiteCrawler:
    """Sequential BFS crawler over a single hostname."""

    def __init__(
        self,
        renderer: BasePageRenderer,
        extractor: SignalExtractor | None = None,
        detector: IssueDetector | None = None,
        config: CrawlConfig | None = None,
    ):
        self.renderer = renderer
        self.extractor = extractor or SignalExtractor()
        self.detector = detector or IssueDetector()
        self.config = config or CrawlConfig()

    async def crawl_site(self, seed_url: str, max_pages: int) -> list[CrawledPage]:
        """
        Crawl from seed_url until the frontier is empty or max_pages URLs were visited.

        Every visited URL counts toward max_pages, including ones that failed
        to render. All crawl state is local to this call.
        """
        seed_host = urlparse(seed_url).hostname
        frontier: deque[str] = deque([seed_url])
        queued: set[str] = {seed_url}
        visited: set[str] = set()
        results: list[CrawledPage] = []
        failures = 0

        logger.info(f"Starting crawl of {seed_url} (max {max_pages} pages)")
        start_time = time.time()

        while frontier and len(visited) < max_pages:
            url = frontier.popleft()
            if url in visited:
                continue
            visited.add(url)

            if len(visited) > 1 and self.config.request_delay_ms > 0:
                await asyncio.sleep(self.config.request_delay_ms / 1000)

            logger.info(f"Crawling {url} ({len(visited)}/{max_pages})")
            page = await self._crawl_url(url)
            if page is None:
                failures += 1
                continue

            results.append(page)

            for link in page.signals.internal_links:
                if link in visited or link in queued:
                    continue
                if urlparse(link).hostname != seed_host:
                    continue
                frontier.append(link)
                queued.add(link)

        elapsed = time.time() - start_time
        logger.info(f"Crawl complete: {len(results)} pages, {failures} failed in {elapsed:.2f}s")
        return results

    async def _crawl_url(self, url: str) -> CrawledPage | None:
        """Render, extract and analyze one URL. Returns None when the page could not be rendered."""
        timeout_ms = self.config.page_timeout_ms
        try:
            rendered = await asyncio.wait_for(
                self.renderer.render(url, timeout_ms),
                timeout=(timeout_ms + self.config.render_grace_ms) / 1000,
            )
        except PageRenderError as e:
            logger.warning(f"Skipping {url}: {e.reason}")
            return None
        except asyncio.TimeoutError:
            logger.warning(f"Skipping {url}: no response within {timeout_ms}ms")
            return None

        signals = self.extractor.extract(rendered, url)
        issues = self.detector.detect(signals)
        return CrawledPage(signals=signals, issues=tuple(issues))
