"""
SEOPulse Page Renderers

Render capability consumed by the site crawler:
- PlaywrightPageRenderer: headless Chromium, reads the rendered DOM
- HttpPageRenderer: static fetch with httpx, no script execution

Both are async context managers. One instance is opened per audit job and
reused for every page of that job, one page at a time.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from app.config import settings
from app.core.exceptions import PageRenderError
from app.services.audit_types import RenderedPage

logger = logging.getLogger(__name__)


@dataclass
class RendererConfig:
    """Configuration for page rendering."""
    wait_until: str = "networkidle"  # load, domcontentloaded, networkidle
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = settings.CRAWLER_USER_AGENT
    block_resources: list[str] = field(default_factory=lambda: ["font", "media"])
    browser_type: str = "chromium"  # chromium, firefox, webkit
    headless: bool = True
    ignore_https_errors: bool = True


class BasePageRenderer(ABC):
    """Abstract base class for page renderers."""

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    async def start(self):
        pass

    async def stop(self):
        pass

    @abstractmethod
    async def render(self, url: str, timeout_ms: int) -> RenderedPage:
        """Render one URL or raise PageRenderError."""


class PlaywrightPageRenderer(BasePageRenderer):
    """
    Headless browser renderer.

    Navigates to the URL, waits for the network to settle and returns the
    rendered HTML, response headers and the body's visible text.
    """

    def __init__(self, config: RendererConfig | None = None):
        self.config = config or RendererConfig()
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._playwright = None

    async def start(self):
        """Start the browser instance."""
        if self._browser is not None:
            return

        logger.info(f"Starting Playwright {self.config.browser_type} browser")
        self._playwright = await async_playwright().start()

        browser_launcher = getattr(self._playwright, self.config.browser_type)
        self._browser = await browser_launcher.launch(
            headless=self.config.headless,
            args=["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
        )

        self._context = await self._browser.new_context(
            viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            user_agent=self.config.user_agent,
            ignore_https_errors=self.config.ignore_https_errors,
            java_script_enabled=True,
        )

        logger.info("Playwright browser started successfully")

    async def stop(self):
        """Stop the browser instance."""
        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Playwright browser stopped")

    async def render(self, url: str, timeout_ms: int) -> RenderedPage:
        if not self._browser:
            await self.start()

        page: Page | None = None
        try:
            page = await self._context.new_page()

            if self.config.block_resources:
                await page.route("**/*", self._handle_route)

            start_time = time.time()
            response = await page.goto(
                url,
                timeout=timeout_ms,
                wait_until=self.config.wait_until,
            )
            load_time_ms = int((time.time() - start_time) * 1000)

            html = await page.content()
            visible_text = await self._get_visible_text(page)

            return RenderedPage(
                url=url,
                final_url=page.url,
                status_code=response.status if response else 0,
                html=html,
                load_time_ms=load_time_ms,
                headers={k.lower(): v for k, v in (response.headers if response else {}).items()},
                visible_text=visible_text,
            )

        except PlaywrightTimeout as e:
            logger.warning(f"Timeout rendering {url}")
            raise PageRenderError(url, f"timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise PageRenderError(url, str(e)) from e

        finally:
            if page:
                await page.close()

    async def _handle_route(self, route):
        """Handle resource blocking."""
        if route.request.resource_type in self.config.block_resources:
            await route.abort()
        else:
            await route.continue_()

    async def _get_visible_text(self, page: Page) -> str | None:
        try:
            return await page.evaluate("() => document.body ? document.body.innerText : ''")
        except PlaywrightError as e:
            logger.debug(f"Could not read innerText for {page.url}: {e}")
            return None


class HttpPageRenderer(BasePageRenderer):
    """Static renderer: fetches HTML over HTTP without executing scripts."""

    def __init__(
        self,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent or settings.CRAWLER_USER_AGENT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )

    async def stop(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def render(self, url: str, timeout_ms: int) -> RenderedPage:
        if self._client is None:
            await self.start()

        try:
            start_time = time.time()
            response = await self._client.get(url, timeout=timeout_ms / 1000)
            load_time_ms = int((time.time() - start_time) * 1000)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout: {url}")
            raise PageRenderError(url, f"timed out after {timeout_ms}ms") from e
        except httpx.HTTPError as e:
            raise PageRenderError(url, str(e)) from e

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type.lower():
            raise PageRenderError(url, f"non-HTML content ({content_type or 'unknown'})")

        return RenderedPage(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=response.text,
            load_time_ms=load_time_ms,
            headers={k.lower(): v for k, v in response.headers.items()},
        )


def get_page_renderer(kind: str | None = None) -> BasePageRenderer:
    """Create the renderer configured for this process."""
    kind = (kind or settings.RENDERER).lower()

    if kind == "http":
        return HttpPageRenderer()
    if kind == "playwright":
        return PlaywrightPageRenderer()

    raise ValueError(f"Unknown renderer: {kind}")
