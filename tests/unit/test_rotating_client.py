"""
Unit tests for RotatingHttpClient.

Tests cover:
- Load spread across identities
- One retry through a different identity on transient failures
- Direct fallback after the retry fails or on non-transient failures
- URL and query passed through unchanged
"""

import httpx
import pytest

from tokenfolio.http import RotatingHttpClient, build_identities, is_transient_error


USER_AGENTS = ["ua-1", "ua-2", "ua-3"]
URL = "https://example.test/api/prices?list_address=a,b"


class ScriptedTransport:
    """
    Records every request and replays scripted outcomes.

    Each outcome is either an int status code or an exception instance.
    Once the script runs out every request gets a 200.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else 200
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"ok": outcome == 200})

    @property
    def user_agents(self) -> list[str]:
        return [r.headers.get("User-Agent", "") for r in self.requests]


def make_client(script: ScriptedTransport, user_agents=USER_AGENTS) -> RotatingHttpClient:
    return RotatingHttpClient(
        build_identities(user_agents),
        request_ceiling=50,
        transport=httpx.MockTransport(script),
    )


# =============================================================================
# TRANSIENT CLASSIFICATION
# =============================================================================


class TestIsTransientError:
    """Tests for transient error classification."""

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("Connection reset by peer"),
            httpx.ConnectError("All connection attempts failed"),
            httpx.ConnectError("[Errno 111] Connection refused"),
            httpx.RemoteProtocolError("Server disconnected without sending a response."),
            httpx.ReadTimeout("read timed out"),
            httpx.ProxyError("proxy refused"),
            httpx.RemoteProtocolError("socket hang up"),
        ],
    )
    def test_transient(self, exc):
        assert is_transient_error(exc)

    def test_http_status_is_not_transient(self):
        request = httpx.Request("GET", "https://example.test")
        response = httpx.Response(500, request=request)
        exc = httpx.HTTPStatusError("Server error", request=request, response=response)

        assert not is_transient_error(exc)


# =============================================================================
# ROTATION, RETRY AND FALLBACK
# =============================================================================


class TestRotation:
    """Tests for normal rotation."""

    async def test_requests_spread_across_identities(self):
        """
        GIVEN three identities and an always-healthy upstream
        WHEN I send six requests
        THEN each identity sends two
        """
        script = ScriptedTransport()
        async with make_client(script) as client:
            for _ in range(6):
                await client.get(URL)

        assert script.user_agents == ["ua-1", "ua-2", "ua-3", "ua-1", "ua-2", "ua-3"]

    async def test_url_passed_through_unchanged(self):
        """
        GIVEN a URL with a literal comma-joined query
        WHEN I GET it
        THEN the upstream sees the same query value
        """
        script = ScriptedTransport()
        async with make_client(script) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert script.requests[0].url.params["list_address"] == "a,b"
        assert script.requests[0].url.host == "example.test"


class TestRetryAndFallback:
    """Tests for failure handling."""

    async def test_transient_failure_retried_via_other_identity(self):
        """
        GIVEN the first request fails with a connection reset
        WHEN I GET
        THEN one retry goes through a different identity and succeeds
        """
        script = ScriptedTransport(httpx.ConnectError("Connection reset by peer"))
        async with make_client(script) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert script.user_agents == ["ua-1", "ua-2"]

    async def test_refused_connection_retried_via_other_identity(self):
        """
        GIVEN the first request cannot connect at all
        WHEN I GET
        THEN the retry goes through a second identity, not the direct client
        """
        script = ScriptedTransport(httpx.ConnectError("[Errno 111] Connection refused"))
        async with make_client(script) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert script.user_agents == ["ua-1", "ua-2"]

    async def test_failed_retry_falls_back_to_direct(self):
        """
        GIVEN the first two attempts time out
        WHEN I GET
        THEN a third, direct request without rotated headers is made
        """
        script = ScriptedTransport(
            httpx.ReadTimeout("timed out"),
            httpx.ReadTimeout("timed out"),
        )
        async with make_client(script) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert len(script.requests) == 3
        assert script.user_agents[:2] == ["ua-1", "ua-2"]
        assert script.user_agents[2] not in USER_AGENTS

    async def test_non_transient_failure_skips_retry(self):
        """
        GIVEN the rotated request gets a 500
        WHEN I GET
        THEN no identity retry happens and the direct request is used
        """
        script = ScriptedTransport(500)
        async with make_client(script) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert len(script.requests) == 2
        assert script.user_agents[1] not in USER_AGENTS

    async def test_single_identity_goes_straight_to_direct(self):
        """
        GIVEN only one identity
        AND a transient failure
        WHEN I GET
        THEN the direct request follows immediately
        """
        script = ScriptedTransport(httpx.ConnectError("Connection reset by peer"))
        async with make_client(script, user_agents=["only"]) as client:
            await client.get(URL)

        assert len(script.requests) == 2
        assert script.user_agents[0] == "only"
        assert script.user_agents[1] != "only"

    async def test_direct_failure_propagates(self):
        """
        GIVEN every attempt returns 503
        WHEN I GET
        THEN HTTPStatusError propagates from the direct attempt
        """
        script = ScriptedTransport(503, 503, 503)
        async with make_client(script) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.get(URL)

        assert len(script.requests) == 2
