"""DexScreener liquidity and pair lookups."""

import logging
from typing import Any, Optional

import httpx

from tokenfolio.core.exceptions import UpstreamError
from tokenfolio.http import RotatingHttpClient

logger = logging.getLogger(__name__)

LIQUIDITY_SERVICE = "liquidity service"
PAIRS_SERVICE = "pair service"


def extract_pairs(payload: Any) -> Optional[list[dict]]:
    """
    Pull the pair list out of a DexScreener response.

    The tokens endpoint answers {"pairs": [...] | null}; the token-pairs
    endpoint answers a bare list. Returns None when there are no pairs.
    Raises ValueError for any other payload.
    """
    if isinstance(payload, list):
        pairs = payload
    elif isinstance(payload, dict):
        pairs = payload.get("pairs")
        if pairs is None:
            return None
        if not isinstance(pairs, list):
            raise ValueError(f"unexpected 'pairs' type: {type(pairs).__name__}")
    else:
        raise ValueError(f"unexpected payload type: {type(payload).__name__}")

    pairs = [p for p in pairs if isinstance(p, dict)]
    return pairs or None


def total_liquidity_usd(pairs: list[dict]) -> float:
    """Sum liquidity.usd across pairs; pairs without a figure count as 0."""
    total = 0.0
    for pair in pairs:
        liquidity = pair.get("liquidity")
        if not isinstance(liquidity, dict):
            continue
        usd = liquidity.get("usd")
        if isinstance(usd, (int, float)) and not isinstance(usd, bool):
            total += float(usd)
    return total


class DexScreenerProvider:
    """Liquidity (deep check) and pair existence (light check) from DexScreener."""

    def __init__(
        self,
        http: RotatingHttpClient,
        liquidity_url_template: str,
        pairs_url_template: str,
    ):
        self._http = http
        self._liquidity_url_template = liquidity_url_template
        self._pairs_url_template = pairs_url_template

    async def get_liquidity(self, mint: str) -> Optional[float]:
        """Total tracked USD liquidity, or None when DexScreener has no pairs at all."""
        payload = await self._get_json(LIQUIDITY_SERVICE, self._liquidity_url_template.format(mint=mint))
        try:
            pairs = extract_pairs(payload)
        except ValueError as exc:
            raise UpstreamError(LIQUIDITY_SERVICE, str(exc)) from exc
        if pairs is None:
            return None
        return total_liquidity_usd(pairs)

    async def has_pairs(self, mint: str) -> bool:
        """True if at least one market pair exists for the mint."""
        payload = await self._get_json(PAIRS_SERVICE, self._pairs_url_template.format(mint=mint))
        try:
            return extract_pairs(payload) is not None
        except ValueError as exc:
            raise UpstreamError(PAIRS_SERVICE, str(exc)) from exc

    async def _get_json(self, service: str, url: str) -> Any:
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as exc:
            raise UpstreamError(service, str(exc) or type(exc).__name__) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(service, f"invalid JSON: {exc}") from exc
