"""DEX Screener market-data gateway.

Thin async client over the public REST endpoints.  Each call either returns
parsed records or raises an ``httpx.HTTPError`` / ``ValueError``; callers
decide how to isolate failures.  The one exception is the batched token
lookup, which isolates failures per chunk so a single bad request does not
discard the rest of the batch.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from config import Settings, settings as default_settings
from models import DexPair, DiscoveryItem
from models.pair import as_list
from utils.logger import dexscreener_logger as logger
from utils.rate_limiter import RateLimiter, endpoint_for_url, rate_limiter


def chunk(items: list, size: int) -> list[list]:
    size = max(1, int(size))
    return [items[i : i + size] for i in range(0, len(items), size)]


class DexScreenerClient:
    """Client for the DEX Screener public API, scoped to one chain."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or default_settings
        self.base_url = self.settings.DEX_API_BASE_URL
        self.chain_id = self.settings.DEX_CHAIN_ID
        self._limiter = limiter or rate_limiter
        self._client: Optional[httpx.AsyncClient] = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.settings.DEX_REQUEST_TIMEOUT_MS / 1000.0,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        await self._limiter.acquire(endpoint_for_url(url))
        client = await self._get_client()
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    def _on_chain(self, raw: object) -> bool:
        return isinstance(raw, dict) and raw.get("chainId") == self.chain_id

    def _parse_pairs(self, payload: Any) -> list[DexPair]:
        return [DexPair.from_api_response(raw) for raw in as_list(payload) if self._on_chain(raw)]

    async def _fetch_discovery_feed(self, path: str) -> list[DiscoveryItem]:
        payload = await self._get_json(f"{self.base_url}{path}")
        items = []
        for raw in as_list(payload):
            if not self._on_chain(raw):
                continue
            item = DiscoveryItem.from_api_response(raw)
            if item is not None:
                items.append(item)
        return items

    # ==================== DISCOVERY FEEDS ====================

    async def fetch_latest_token_profiles(self) -> list[DiscoveryItem]:
        return await self._fetch_discovery_feed("/token-profiles/latest/v1")

    async def fetch_latest_boosts(self) -> list[DiscoveryItem]:
        return await self._fetch_discovery_feed("/token-boosts/latest/v1")

    async def fetch_top_boosts(self) -> list[DiscoveryItem]:
        return await self._fetch_discovery_feed("/token-boosts/top/v1")

    async def fetch_community_takeovers(self) -> list[DiscoveryItem]:
        return await self._fetch_discovery_feed("/community-takeovers/latest/v1")

    # ==================== PAIRS ====================

    async def search_pairs(self, query: str) -> list[DexPair]:
        """Keyword search across pair names/symbols, restricted to our chain."""
        payload = await self._get_json(f"{self.base_url}/latest/dex/search", params={"q": query})
        pairs = payload.get("pairs") if isinstance(payload, dict) else None
        return self._parse_pairs(pairs)

    async def fetch_pairs_by_token_addresses(self, addresses: list[str]) -> list[DexPair]:
        """Fetch every pool for the given base tokens.

        Addresses are de-duplicated and split into requests of at most
        ``DEX_MAX_ADDRESSES_PER_REQUEST``; chunks run concurrently and a
        failed chunk contributes nothing.
        """
        deduped = list(dict.fromkeys(a.strip() for a in addresses if a and a.strip()))
        if not deduped:
            return []

        chunks = chunk(deduped, self.settings.DEX_MAX_ADDRESSES_PER_REQUEST)

        async def fetch_chunk(batch: list[str]) -> list[DexPair]:
            url = f"{self.base_url}/tokens/v1/{self.chain_id}/{','.join(batch)}"
            return self._parse_pairs(await self._get_json(url))

        results = await asyncio.gather(*[fetch_chunk(batch) for batch in chunks], return_exceptions=True)

        pairs: list[DexPair] = []
        for batch, result in zip(chunks, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.warning(
                    "Token batch lookup failed",
                    addresses=len(batch),
                    error=str(result) or type(result).__name__,
                    error_type=type(result).__name__,
                )
                continue
            pairs.extend(result)
        return pairs


dexscreener_client = DexScreenerClient()
