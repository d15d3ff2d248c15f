"""HTTP GET through rotating client identities, with retry and direct fallback."""

import logging
from typing import Any, Optional, Sequence

import httpx

from tokenfolio.http.identities import ClientIdentity
from tokenfolio.http.resource_pool import ResourcePool

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

TRANSIENT_ERROR_PATTERNS = (
    "econnreset",
    "connection reset",
    "socket hang up",
    "timeout",
    "timed out",
    "proxy",
)


def is_transient_error(exc: Exception) -> bool:
    """Connection failures, timeouts and proxy failures are worth one retry."""
    transient_types = (
        httpx.TimeoutException,
        httpx.ProxyError,
        httpx.ConnectError,
        httpx.RemoteProtocolError,
    )
    if isinstance(exc, transient_types):
        return True
    text = f"{type(exc).__name__} {exc}".lower()
    return any(pattern in text for pattern in TRANSIENT_ERROR_PATTERNS)


class RotatingHttpClient:
    """
    Drop-in GET client that spreads requests across client identities.

    Flow for each call:
    1. Send through the least-used identity.
    2. On a transient failure, retry once through a different identity.
    3. If that fails too, or the first failure was not transient, send one
       last plain request with no rotation; its errors propagate.

    Only the sending identity changes; URL and query are never altered.
    """

    def __init__(
        self,
        identities: Sequence[ClientIdentity],
        request_ceiling: int = 50,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._pool: ResourcePool[ClientIdentity] = ResourcePool(identities, ceiling=request_ceiling)
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport
        self._clients: dict[str, httpx.AsyncClient] = {}
        self._direct: Optional[httpx.AsyncClient] = None

    @property
    def pool(self) -> ResourcePool[ClientIdentity]:
        return self._pool

    async def get(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        GET a URL and return the successful response.

        Raises httpx.HTTPError (including HTTPStatusError for non-2xx) only
        when the final direct attempt fails.
        """
        identity = self._pool.acquire()
        try:
            return await self._send(self._client_for(identity), url, params)
        except httpx.HTTPError as exc:
            first_error = exc

        if is_transient_error(first_error) and len(self._pool) > 1:
            retry_identity = self._pool.acquire(exclude=identity)
            logger.warning(
                "Request via %s failed (%s); retrying via %s",
                identity.name,
                first_error,
                retry_identity.name,
            )
            try:
                return await self._send(self._client_for(retry_identity), url, params)
            except httpx.HTTPError as exc:
                logger.warning("Retry via %s failed (%s)", retry_identity.name, exc)
        else:
            logger.warning("Request via %s failed (%s)", identity.name, first_error)

        logger.warning("Falling back to direct request for %s", url)
        return await self._send(self._direct_client(), url, params)

    async def aclose(self) -> None:
        """Close every underlying client."""
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()
        if self._direct is not None:
            await self._direct.aclose()
            self._direct = None

    async def __aenter__(self) -> "RotatingHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    async def _send(
        client: httpx.AsyncClient,
        url: str,
        params: Optional[dict[str, Any]],
    ) -> httpx.Response:
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response

    def _client_for(self, identity: ClientIdentity) -> httpx.AsyncClient:
        client = self._clients.get(identity.name)
        if client is None:
            kwargs: dict[str, Any] = {"headers": identity.headers, "timeout": self._timeout}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            elif identity.proxy_url:
                kwargs["proxy"] = identity.proxy_url
            client = httpx.AsyncClient(**kwargs)
            self._clients[identity.name] = client
        return client

    def _direct_client(self) -> httpx.AsyncClient:
        if self._direct is None:
            kwargs: dict[str, Any] = {
                "headers": {"Accept": "application/json"},
                "timeout": self._timeout,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._direct = httpx.AsyncClient(**kwargs)
        return self._direct
