"""
Unit tests for the PageSpeed Insights client.
"""
import httpx
import pytest

from app.integrations.pagespeed import PageSpeedClient


PSI_RESPONSE = {
    "lighthouseResult": {
        "categories": {"performance": {"score": 0.875}},
        "audits": {
            "largest-contentful-paint": {"numericValue": 2100.6},
            "total-blocking-time": {"numericValue": 350.2},
            "cumulative-layout-shift": {"numericValue": 0.04321},
            "first-contentful-paint": {"numericValue": 900.9},
        },
    }
}


def client_for(handler, api_key="test-key") -> PageSpeedClient:
    return PageSpeedClient(api_key=api_key, strategy="mobile", transport=httpx.MockTransport(handler))


class TestAnalyze:

    @pytest.mark.asyncio
    async def test_parses_score_and_metrics(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=PSI_RESPONSE)

        result = await client_for(handler).analyze("https://example.com")

        assert result["success"] is True
        assert result["performance_score"] == 88
        assert result["metrics"] == {
            "lcp_ms": 2100,
            "tbt_ms": 350,
            "cls": 0.043,
            "fcp_ms": 900,
        }
        assert result["cwv_status"] == "needs_improvement"
        assert seen["url"] == "https://example.com"
        assert seen["strategy"] == "mobile"
        assert seen["key"] == "test-key"

    @pytest.mark.asyncio
    async def test_strategy_override(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["strategy"] == "desktop"
            return httpx.Response(200, json=PSI_RESPONSE)

        result = await client_for(handler).analyze("https://example.com", strategy="desktop")

        assert result["strategy"] == "desktop"

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        result = await client_for(handler, api_key="").analyze("https://example.com")

        assert result["success"] is False
        assert result["error"] == "PageSpeed API key not configured"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,error", [
        (429, "Rate limit exceeded"),
        (400, "Invalid URL or request"),
        (500, "HTTP 500"),
    ])
    async def test_http_errors(self, status, error):
        result = await client_for(lambda request: httpx.Response(status)).analyze("https://example.com")

        assert result["success"] is False
        assert result["error"] == error

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = await client_for(handler).analyze("https://example.com")

        assert result == {
            "success": False,
            "error": "Request timeout",
            "url": "https://example.com",
            "strategy": "mobile",
        }

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        result = await client_for(lambda request: httpx.Response(200, text="not json")).analyze("https://example.com")

        assert result["success"] is False


class TestPerformanceScore:

    @pytest.mark.asyncio
    async def test_returns_score(self):
        client = client_for(lambda request: httpx.Response(200, json=PSI_RESPONSE))

        assert await client.get_performance_score("https://example.com") == 88

    @pytest.mark.asyncio
    async def test_none_on_failure(self):
        client = client_for(lambda request: httpx.Response(503))

        assert await client.get_performance_score("https://example.com") is None


class TestCoreWebVitals:

    @pytest.fixture
    def client(self):
        return PageSpeedClient(api_key="test-key")

    def test_all_good(self, client):
        assert client._calculate_cwv_status({"lcp_ms": 2000, "cls": 0.05, "tbt_ms": 100}) == "good"

    def test_worst_metric_wins(self, client):
        assert client._calculate_cwv_status({"lcp_ms": 2000, "cls": 0.3, "tbt_ms": 300}) == "poor"

    def test_unknown_without_metrics(self, client):
        assert client._calculate_cwv_status({}) == "unknown"
