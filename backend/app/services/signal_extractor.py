"""
SEOPulse Signal Extractor

Turns one rendered page into a PageSignals record. Every field is read by
its own sub-check; a sub-check that fails falls back to an empty value so
one malformed element never costs the rest of the page.
"""

import logging
from typing import Any, Callable
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Comment, Doctype

from app.services.audit_types import Heading, ImageInfo, PageSignals, RenderedPage

logger = logging.getLogger(__name__)

NON_VISIBLE_TAGS = ["script", "style", "noscript", "template"]


class SignalExtractor:
    """Extracts SEO signals from rendered HTML."""

    def __init__(self, parser: str = "lxml"):
        self.parser = parser

    def extract(self, page: RenderedPage, url: str) -> PageSignals:
        soup = self._parse(page.html)
        base_url = page.final_url or url

        title = self._safe("title", lambda: self._extract_title(soup), "")
        meta_description = self._safe("meta_description", lambda: self._extract_meta_description(soup), None)
        internal_links, external_links = self._safe(
            "links", lambda: self._extract_links(soup, base_url), ((), ())
        )

        return PageSignals(
            url=url,
            final_url=base_url,
            status_code=page.status_code,
            title=title,
            title_length=len(title),
            meta_description=meta_description,
            meta_description_length=len(meta_description) if meta_description else 0,
            headings=self._safe("headings", lambda: self._extract_headings(soup), ()),
            word_count=self._safe("word_count", lambda: self._count_words(soup, page.visible_text), 0),
            load_time_ms=page.load_time_ms,
            mobile_friendly=self._safe("mobile_friendly", lambda: self._is_mobile_friendly(soup), False),
            has_schema=self._safe("has_schema", lambda: self._has_schema(soup), False),
            internal_links=internal_links,
            external_links=external_links,
            images=self._safe("images", lambda: self._extract_images(soup, base_url), ()),
        )

    def _parse(self, html: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(html or "", self.parser)
        except Exception as e:
            logger.debug(f"Parser {self.parser} failed ({e}), using html.parser")
            return BeautifulSoup(html or "", "html.parser")

    def _safe(self, name: str, check: Callable[[], Any], default: Any) -> Any:
        try:
            return check()
        except Exception as e:
            logger.debug(f"Signal '{name}' unavailable, using default: {e}")
            return default

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title_tag = soup.find("title")
        if not title_tag:
            return ""
        return " ".join(title_tag.get_text().split())

    def _extract_meta_description(self, soup: BeautifulSoup) -> str | None:
        meta_desc_tag = soup.find("meta", attrs={"name": "description"})
        if meta_desc_tag is None:
            return None
        return meta_desc_tag.get("content", "")

    def _extract_headings(self, soup: BeautifulSoup) -> tuple[Heading, ...]:
        return tuple(
            Heading(level=int(h.name[1]), text=h.get_text().strip())
            for h in soup.find_all(["h1", "h2", "h3"])
        )

    def _count_words(self, soup: BeautifulSoup, visible_text: str | None) -> int:
        if visible_text is None:
            body = soup.find("body") or soup
            visible_text = " ".join(
                text for text in body.find_all(string=True)
                if not isinstance(text, (Comment, Doctype))
                and not any(parent.name in NON_VISIBLE_TAGS for parent in text.parents)
            )
        return len(visible_text.split())

    def _is_mobile_friendly(self, soup: BeautifulSoup) -> bool:
        viewport_meta = soup.find("meta", attrs={"name": "viewport"})
        if viewport_meta is None:
            return False
        return "width=device-width" in viewport_meta.get("content", "")

    def _has_schema(self, soup: BeautifulSoup) -> bool:
        return soup.find("script", attrs={"type": "application/ld+json"}) is not None

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
        page_host = urlparse(base_url).hostname
        internal_links = []
        external_links = []

        for a in soup.find_all("a", href=True):
            try:
                full_url, _ = urldefrag(urljoin(base_url, a["href"].strip()))
                host = urlparse(full_url).hostname
            except ValueError:
                continue

            if host and host == page_host:
                internal_links.append(full_url)
            else:
                external_links.append(full_url)

        return tuple(internal_links), tuple(external_links)

    def _extract_images(self, soup: BeautifulSoup, base_url: str) -> tuple[ImageInfo, ...]:
        images = []
        for img in soup.find_all("img"):
            src = img.get("src", "") or img.get("data-src", "")
            try:
                src = urljoin(base_url, src) if src else ""
            except ValueError:
                pass
            images.append(ImageInfo(
                src=src,
                alt=img.get("alt", "") or "",
                alt_present=img.has_attr("alt"),
            ))
        return tuple(images)
