"""Jupiter price and token metadata providers."""

import logging
from typing import Any, Optional

import httpx

from tokenfolio.core.exceptions import UpstreamError
from tokenfolio.domain.models import PriceSource, TokenMetadata, coerce_price
from tokenfolio.domain.views import PriceMap
from tokenfolio.http import RotatingHttpClient

logger = logging.getLogger(__name__)

PRICE_SERVICE = "price service"
METADATA_SERVICE = "metadata service"


def normalize_price_payload(payload: Any) -> PriceMap:
    """
    Normalize either upstream response shape into a PriceMap.

    Accepted shapes:
        {"prices": {"<mint>": 1.23}}
        {"data": {"<mint>": {"price": 1.23}}}

    Anything else yields an empty UNRECOGNIZED map rather than an error.
    """
    if isinstance(payload, dict):
        prices_map = payload.get("prices")
        if isinstance(prices_map, dict):
            prices = {}
            for mint, raw in prices_map.items():
                price = coerce_price(raw)
                if price is not None:
                    prices[mint] = price
            return PriceMap(source=PriceSource.PRICES_MAP, prices=prices)

        data_map = payload.get("data")
        if isinstance(data_map, dict):
            prices = {}
            for mint, entry in data_map.items():
                if not isinstance(entry, dict):
                    continue
                price = coerce_price(entry.get("price"))
                if price is not None:
                    prices[mint] = price
            return PriceMap(source=PriceSource.DATA_MAP, prices=prices)

    keys = sorted(payload.keys()) if isinstance(payload, dict) else type(payload).__name__
    logger.warning("Unrecognized price payload shape: %s", keys)
    return PriceMap.empty()


class JupiterPriceProvider:
    """Fetches batched USD prices from the Jupiter price API."""

    def __init__(
        self,
        http: RotatingHttpClient,
        base_url: str,
        query_param: str = "list_address",
    ):
        self._http = http
        self._base_url = base_url
        self._query_param = query_param

    def build_url(self, mints: list[str]) -> str:
        """Build the request URL with a literal comma-joined mint list."""
        separator = "&" if "?" in self._base_url else "?"
        return f"{self._base_url}{separator}{self._query_param}={','.join(mints)}"

    async def fetch_prices(self, mints: list[str]) -> PriceMap:
        """Fetch prices for one batch of mints."""
        if not mints:
            return PriceMap.empty()
        try:
            response = await self._http.get(self.build_url(mints))
        except httpx.HTTPError as exc:
            raise UpstreamError(PRICE_SERVICE, str(exc) or type(exc).__name__) from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(PRICE_SERVICE, f"invalid JSON: {exc}") from exc
        return normalize_price_payload(payload)


class JupiterTokenMetadataProvider:
    """Looks up symbol, name and logo for a single mint."""

    def __init__(self, http: RotatingHttpClient, url_template: str):
        self._http = http
        self._url_template = url_template

    async def get_metadata(self, mint: str) -> Optional[TokenMetadata]:
        """Return labels for a mint, or None if the token list does not know it."""
        try:
            response = await self._http.get(self._url_template.format(mint=mint))
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                return None
            raise UpstreamError(METADATA_SERVICE, str(exc)) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(METADATA_SERVICE, str(exc) or type(exc).__name__) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(METADATA_SERVICE, f"invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            return None

        symbol = payload.get("symbol")
        name = payload.get("name")
        if not symbol and not name:
            return None
        return TokenMetadata(
            symbol=symbol or None,
            name=name or None,
            icon=payload.get("logoURI") or payload.get("icon") or None,
        )
