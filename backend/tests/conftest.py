"""Shared fixtures for live-universe tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest

from config import Settings
from models import DexPair, DiscoveryItem, ScoreBreakdown, ScoredCandidate
from utils.clock import FixedClock

NOW_MS = 1_700_000_000_000.0
CHAIN = "solana"


# ---------------------------------------------------------------------------
# Raw API payloads (mimicking DEX Screener responses)
# ---------------------------------------------------------------------------


def raw_pair(
    address: str,
    *,
    now_ms: float = NOW_MS,
    age_minutes: float = 600.0,
    liquidity: float = 60_000.0,
    volume_m5: float = 8_000.0,
    volume_h1: float = 40_000.0,
    volume_h24: float = 250_000.0,
    price_change_m5: float = 1.5,
    price_change_h1: float = 4.0,
    buys_m5: int = 20,
    sells_m5: int = 10,
    buys_h1: int = 200,
    sells_h1: int = 150,
    boosts_active: int = 0,
    chain_id: str = CHAIN,
    pair_address: str = "",
    name: str = "",
    symbol: str = "",
) -> dict:
    payload = {
        "chainId": chain_id,
        "dexId": "raydium",
        "url": f"https://dexscreener.com/{chain_id}/{pair_address or address + '-pool'}",
        "pairAddress": pair_address or f"{address}-pool",
        "baseToken": {
            "address": address,
            "name": name or f"Token {address}",
            "symbol": symbol or address.upper()[:6],
        },
        "quoteToken": {"address": "So11111111111111111111111111111111111111112", "symbol": "SOL"},
        "priceUsd": "0.00123",
        "txns": {
            "m5": {"buys": buys_m5, "sells": sells_m5},
            "h1": {"buys": buys_h1, "sells": sells_h1},
            "h24": {"buys": 2_000, "sells": 1_800},
        },
        "volume": {"m5": volume_m5, "h1": volume_h1, "h6": volume_h24 / 3, "h24": volume_h24},
        "priceChange": {"m5": price_change_m5, "h1": price_change_h1, "h6": 10.0, "h24": 25.0},
        "liquidity": {"usd": liquidity, "base": 1_000_000, "quote": 100},
        "fdv": 1_500_000,
        "marketCap": 1_200_000,
        "pairCreatedAt": int(now_ms - age_minutes * 60_000),
        "info": {
            "imageUrl": f"https://cdn.example/{address}.png",
            "websites": [{"label": "Website", "url": f"https://{address}.example"}],
            "socials": [{"type": "twitter", "url": f"https://x.com/{address}"}],
        },
    }
    if boosts_active:
        payload["boosts"] = {"active": boosts_active}
    return payload


def raw_discovery_item(address: str, chain_id: str = CHAIN, **extra) -> dict:
    item = {
        "chainId": chain_id,
        "tokenAddress": address,
        "url": f"https://dexscreener.com/{chain_id}/{address}",
        "description": f"{address} to the moon",
    }
    item.update(extra)
    return item


@pytest.fixture
def make_raw_pair():
    return raw_pair


@pytest.fixture
def make_raw_discovery_item():
    return raw_discovery_item


@pytest.fixture
def make_pair():
    """Build a parsed ``DexPair`` from the raw payload factory."""

    def _make(address: str, **kwargs) -> DexPair:
        return DexPair.from_api_response(raw_pair(address, **kwargs))

    return _make


@pytest.fixture
def make_discovery_item():
    def _make(address: str, **kwargs) -> DiscoveryItem:
        return DiscoveryItem.from_api_response(raw_discovery_item(address, **kwargs))

    return _make


@pytest.fixture
def make_candidate():
    """Build a scored candidate with an explicit score and age."""

    def _make(
        address: str,
        live_score: float,
        *,
        age_minutes: int = 48 * 60,
        freshness: float = 0.0,
    ) -> ScoredCandidate:
        return ScoredCandidate(
            token_address=address,
            pair_address=f"{address}-pool",
            symbol=address.upper()[:6],
            name=f"Token {address}",
            chain_id=CHAIN,
            live_score=live_score,
            score_breakdown=ScoreBreakdown(freshness=freshness),
            age_minutes=age_minutes,
            pair_created_at=NOW_MS - age_minutes * 60_000,
            updated_at=NOW_MS,
        )

    return _make


# ---------------------------------------------------------------------------
# Settings and clock
# ---------------------------------------------------------------------------


@pytest.fixture
def make_settings():
    """Settings isolated from any .env file on the developer's machine."""

    def _make(**overrides) -> Settings:
        overrides.setdefault("DEX_CHAIN_ID", CHAIN)
        overrides.setdefault("DEX_SEARCH_TERMS", "pump,cat")
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def test_settings(make_settings):
    return make_settings()


@pytest.fixture
def clock():
    return FixedClock(NOW_MS)


# ---------------------------------------------------------------------------
# Fake market-data gateway
# ---------------------------------------------------------------------------


class FakeGateway:
    """In-memory stand-in for ``DexScreenerClient``.

    ``pairs`` maps token address to a list of pools; ``failing`` names the
    methods (or ``search:<term>``) that should raise.
    """

    def __init__(self):
        self.profiles: list[DiscoveryItem] = []
        self.boosts: list[DiscoveryItem] = []
        self.top_boosts: list[DiscoveryItem] = []
        self.community_takeovers: list[DiscoveryItem] = []
        self.search_results: dict[str, list[DexPair]] = {}
        self.pairs: dict[str, list[DexPair]] = {}
        self.failing: set[str] = set()
        self.address_calls: list[list[str]] = []
        self.search_calls: list[str] = []
        self.closed = False

    def set_pairs(self, *pairs: DexPair) -> None:
        for pair in pairs:
            self.pairs.setdefault(pair.base_token_address, []).append(pair)

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise RuntimeError(f"{name} unavailable")

    async def fetch_latest_token_profiles(self):
        self._maybe_fail("fetch_latest_token_profiles")
        return list(self.profiles)

    async def fetch_latest_boosts(self):
        self._maybe_fail("fetch_latest_boosts")
        return list(self.boosts)

    async def fetch_top_boosts(self):
        self._maybe_fail("fetch_top_boosts")
        return list(self.top_boosts)

    async def fetch_community_takeovers(self):
        self._maybe_fail("fetch_community_takeovers")
        return list(self.community_takeovers)

    async def search_pairs(self, query: str):
        self.search_calls.append(query)
        self._maybe_fail(f"search:{query}")
        return list(self.search_results.get(query, []))

    async def fetch_pairs_by_token_addresses(self, addresses):
        self.address_calls.append(list(addresses))
        self._maybe_fail("fetch_pairs_by_token_addresses")
        found: list[DexPair] = []
        for address in addresses:
            found.extend(self.pairs.get(address, []))
        return found

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_gateway():
    return FakeGateway()

