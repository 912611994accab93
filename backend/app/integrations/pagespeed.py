"""
Google PageSpeed Insights API client.

Supplies the performance component of the health score and a Core Web
Vitals summary for the audited seed URL.
"""
import logging
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class PageSpeedClient:
    """HTTP client for Google PageSpeed Insights API."""

    BASE_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

    # Core Web Vitals thresholds (milliseconds or ratio)
    CWV_THRESHOLDS = {
        "lcp": {"good": 2500, "needs_improvement": 4000},
        "cls": {"good": 0.1, "needs_improvement": 0.25},
        "tbt": {"good": 200, "needs_improvement": 600},
    }

    # Lighthouse audit id -> (metric name, is ratio)
    LAB_METRICS = {
        "largest-contentful-paint": ("lcp_ms", False),
        "total-blocking-time": ("tbt_ms", False),
        "cumulative-layout-shift": ("cls", True),
        "first-contentful-paint": ("fcp_ms", False),
        "server-response-time": ("ttfb_ms", False),
        "speed-index": ("speed_index_ms", False),
        "interactive": ("tti_ms", False),
    }

    def __init__(
        self,
        api_key: str | None = None,
        strategy: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.PAGESPEED_API_KEY
        self.strategy = strategy or settings.PAGESPEED_STRATEGY
        self.timeout = settings.PAGESPEED_TIMEOUT
        self._transport = transport

    async def analyze(self, url: str, strategy: str | None = None) -> dict[str, Any]:
        """
        Analyze a URL with PageSpeed Insights.

        Args:
            url: The URL to analyze
            strategy: 'mobile' or 'desktop'

        Returns:
            Parsed analysis results; failures are reported with success=False
        """
        strategy = strategy or self.strategy

        if not self.api_key:
            logger.warning("PageSpeed API key not configured")
            return self._failure(url, strategy, "PageSpeed API key not configured")

        params = {
            "url": url,
            "strategy": strategy,
            "category": "performance",
            "key": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                logger.info(f"[PSI] Analyzing {url} ({strategy})")
                response = await client.get(self.BASE_URL, params=params)
                response.raise_for_status()
                data = response.json()

            return self._parse_response(data, url, strategy)

        except httpx.TimeoutException:
            logger.error(f"[PSI] Timeout analyzing {url}")
            return self._failure(url, strategy, "Request timeout")
        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP {e.response.status_code}"
            if e.response.status_code == 429:
                error_msg = "Rate limit exceeded"
            elif e.response.status_code == 400:
                error_msg = "Invalid URL or request"
            logger.error(f"[PSI] Error analyzing {url}: {error_msg}")
            return self._failure(url, strategy, error_msg)
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"[PSI] Unexpected error analyzing {url}: {e}")
            return self._failure(url, strategy, str(e))

    async def get_performance_score(self, url: str) -> int | None:
        """Lighthouse performance score (0-100) for the URL, or None when unavailable."""
        result = await self.analyze(url)
        if not result.get("success"):
            return None
        return result.get("performance_score")

    def _failure(self, url: str, strategy: str, error: str) -> dict[str, Any]:
        return {
            "success": False,
            "error": error,
            "url": url,
            "strategy": strategy,
        }

    def _parse_response(
        self,
        data: dict,
        url: str,
        strategy: str,
    ) -> dict[str, Any]:
        """Parse PSI API response into structured format."""
        lighthouse = data.get("lighthouseResult", {})

        categories = lighthouse.get("categories", {})
        score = categories.get("performance", {}).get("score")
        performance_score = int(score * 100 + 0.5) if score is not None else None

        metrics = self._extract_metrics(lighthouse.get("audits", {}))

        return {
            "success": True,
            "url": url,
            "strategy": strategy,
            "performance_score": performance_score,
            "metrics": metrics,
            "cwv_status": self._calculate_cwv_status(metrics),
        }

    def _extract_metrics(self, audits: dict) -> dict[str, Any]:
        """Extract Core Web Vitals and other lab metrics from audits."""
        metrics = {}
        for audit_id, (name, is_ratio) in self.LAB_METRICS.items():
            value = audits.get(audit_id, {}).get("numericValue")
            if value is None:
                continue
            metrics[name] = round(value, 3) if is_ratio else int(value)
        return metrics

    def _rate(self, metric: str, value: float) -> str:
        thresholds = self.CWV_THRESHOLDS[metric]
        if value <= thresholds["good"]:
            return "good"
        if value <= thresholds["needs_improvement"]:
            return "needs_improvement"
        return "poor"

    def _calculate_cwv_status(self, metrics: dict) -> str:
        """
        Calculate overall Core Web Vitals status.

        Returns: 'good', 'needs_improvement', 'poor' or 'unknown'
        """
        statuses = []
        for metric, key in (("lcp", "lcp_ms"), ("cls", "cls"), ("tbt", "tbt_ms")):
            if metrics.get(key) is not None:
                statuses.append(self._rate(metric, metrics[key]))

        if not statuses:
            return "unknown"

        # Overall status is the worst of all metrics
        if "poor" in statuses:
            return "poor"
        elif "needs_improvement" in statuses:
            return "needs_improvement"
        else:
            return "good"
