"""
Tests for RateLimitedHTTPClient.

Requests go through ``httpx.MockTransport`` so no network is touched.
"""

import json
from unittest.mock import MagicMock

import httpx
import pytest

from reddit_dashboard.reddit.exceptions import InternalError, RateLimitError, UpstreamError
from reddit_dashboard.reddit.http import ClientConfig, RateLimitConfig, RateLimitedHTTPClient


def counting_transport(handler):
    """MockTransport that records every request it receives."""
    seen = []

    def _handler(request):
        seen.append(request)
        return handler(request)

    return httpx.MockTransport(_handler), seen


class TestRateLimitedHTTPClient:
    """Test suite for RateLimitedHTTPClient."""

    @pytest.mark.asyncio
    async def test_get_returns_decoded_json(self, clock):
        transport, seen = counting_transport(lambda request: httpx.Response(200, json={"ok": True}))

        async with RateLimitedHTTPClient(transport=transport, clock=clock) as http:
            response = await http.get("https://www.reddit.com/r/test/hot.json")

        assert response.status_code == 200
        assert response.data == {"ok": True}
        assert len(seen) == 1
        assert seen[0].headers["User-Agent"] == "reddit-dashboard/1.0"

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, clock):
        transport, seen = counting_transport(lambda request: httpx.Response(201, json={}))

        async with RateLimitedHTTPClient(transport=transport, clock=clock) as http:
            await http.post("https://example.test/items", data={"name": "x"})

        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"name": "x"}

    @pytest.mark.asyncio
    async def test_non_2xx_raises_upstream_error(self, clock):
        transport, _ = counting_transport(lambda request: httpx.Response(503))

        async with RateLimitedHTTPClient(transport=transport, clock=clock) as http:
            with pytest.raises(UpstreamError) as exc_info:
                await http.get("https://www.reddit.com/r/test/hot.json")

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Service Unavailable"

    @pytest.mark.asyncio
    async def test_transport_failure_raises_internal_error(self, clock):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with RateLimitedHTTPClient(transport=httpx.MockTransport(refuse), clock=clock) as http:
            with pytest.raises(InternalError) as exc_info:
                await http.get("https://www.reddit.com/r/test/hot.json")

        assert exc_info.value.status_code == 500
        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_json_raises_internal_error(self, clock):
        transport, _ = counting_transport(lambda request: httpx.Response(200, content=b"<html>"))

        async with RateLimitedHTTPClient(transport=transport, clock=clock) as http:
            with pytest.raises(InternalError):
                await http.get("https://www.reddit.com/r/test/hot.json")

    @pytest.mark.asyncio
    async def test_denied_request_is_never_sent(self, clock):
        transport, seen = counting_transport(lambda request: httpx.Response(200, json={}))
        config = ClientConfig(rate_limit=RateLimitConfig(max_requests=3, window_ms=60000))

        async with RateLimitedHTTPClient(config, transport=transport, clock=clock) as http:
            for _ in range(3):
                await http.get("https://www.reddit.com/r/test/hot.json")

            with pytest.raises(RateLimitError):
                await http.get("https://www.reddit.com/r/test/hot.json")

            assert len(seen) == 3
            assert http.get_remaining() == 0

            clock.advance(60001)
            await http.get("https://www.reddit.com/r/test/hot.json")

        assert len(seen) == 4

    @pytest.mark.asyncio
    async def test_denied_request_is_not_logged_as_sent(self, clock):
        transport, _ = counting_transport(lambda request: httpx.Response(200, json={}))
        config = ClientConfig(rate_limit=RateLimitConfig(max_requests=1, window_ms=60000))
        logger = MagicMock()

        async with RateLimitedHTTPClient(config, transport=transport, clock=clock, logger=logger) as http:
            await http.get("https://www.reddit.com/r/test/hot.json")
            with pytest.raises(RateLimitError):
                await http.get("https://www.reddit.com/r/test/new.json")

        requests = [c.kwargs["url"] for c in logger.info.call_args_list if c.args == ("api_request",)]
        assert requests == ["https://www.reddit.com/r/test/hot.json"]
        errors = [c.kwargs["code"] for c in logger.error.call_args_list if c.args == ("api_error",)]
        assert errors == ["RATE_LIMIT_EXCEEDED"]

    @pytest.mark.asyncio
    async def test_failed_requests_still_count(self, clock):
        """A request that reached the network consumed a slot even when it failed."""
        transport, _ = counting_transport(lambda request: httpx.Response(500))
        config = ClientConfig(rate_limit=RateLimitConfig(max_requests=5, window_ms=60000))

        async with RateLimitedHTTPClient(config, transport=transport, clock=clock) as http:
            with pytest.raises(UpstreamError):
                await http.get("https://www.reddit.com/r/test/hot.json")

            assert http.get_remaining() == 4
