"""
Tracked-set manager: the single owner of live-universe state.

State (tracked coins, weak-cycle counters, discovery hints, candidate pool and
the published snapshot) is private.  Each cycle computes its result from the
state it read at the start and replaces the affected maps wholesale when it
completes, so readers only ever see a complete ``UniverseSnapshot``.
"""

from __future__ import annotations

import time
from typing import Mapping, Optional

from config import Settings, settings as default_settings
from models import DexPair, LiveCoin, ScoredCandidate, UniverseSnapshot
from services.dexscreener import DexScreenerClient, chunk, dexscreener_client
from services.universe.canonical import choose_canonical_pairs, pairs_by_token, passes_keep_filter
from services.universe.discovery import SourceResult, gather_sources, summarize
from services.universe.hints import DiscoveryHintStore
from services.universe.rebalance import select_universe
from services.universe.scoring import ranking_key, score_pair
from services.universe.snapshot import build_snapshot
from utils.clock import Clock, system_clock
from utils.logger import universe_logger as logger

DISCOVERY_FEEDS = ("profiles", "boosts", "top_boosts", "community_takeovers")


class UniverseManager:
    """Maintains the ranked universe of live tokens for one chain."""

    def __init__(
        self,
        client: Optional[DexScreenerClient] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings or default_settings
        self.client = client or dexscreener_client
        self.clock = clock or system_clock

        self._tracked: dict[str, LiveCoin] = {}
        self._weak_cycles: dict[str, int] = {}
        self._hints = DiscoveryHintStore()
        self._candidate_pool: list[ScoredCandidate] = []
        self._last_rebalanced_at: Optional[float] = None
        self._snapshot = build_snapshot([], 0, now_ms=self.clock.now_ms(), cfg=self.settings)

    # ==================== READ-ONLY VIEWS ====================

    def get_snapshot(self) -> UniverseSnapshot:
        return self._snapshot

    @property
    def tracked_addresses(self) -> list[str]:
        return list(self._tracked)

    @property
    def weak_cycles(self) -> Mapping[str, int]:
        return dict(self._weak_cycles)

    @property
    def candidate_pool(self) -> tuple[ScoredCandidate, ...]:
        return tuple(self._candidate_pool)

    @property
    def hints(self) -> DiscoveryHintStore:
        return self._hints

    @property
    def last_rebalanced_at(self) -> Optional[float]:
        return self._last_rebalanced_at

    def _publish(self, now_ms: float) -> None:
        self._snapshot = build_snapshot(
            self._tracked.values(),
            len(self._candidate_pool),
            now_ms=now_ms,
            cfg=self.settings,
        )

    # ==================== CYCLES ====================

    async def initialize(self) -> UniverseSnapshot:
        """Warm up: fill the candidate pool, select a universe, then refresh it."""
        await self.refresh_candidate_pool()
        await self.rebalance_universe(force=True)
        await self.refresh_tracked_universe()
        logger.info(
            "Live universe initialized",
            status=self._snapshot.status,
            tracked=len(self._tracked),
            candidate_pool=len(self._candidate_pool),
        )
        return self._snapshot

    async def refresh_tracked_universe(self) -> UniverseSnapshot:
        """Fast cycle: re-fetch tracked tokens, advance weak-cycle counters, re-score.

        Bucket and rank are preserved until the next rebalance.  A token whose
        candidate cannot be recomputed keeps its stale fields until its counter
        reaches the drop threshold, at which point it is evicted.
        """
        tracked = dict(self._tracked)
        if not tracked:
            self._publish(self.clock.now_ms())
            return self._snapshot

        started = time.monotonic()
        fetched = await self.client.fetch_pairs_by_token_addresses(list(tracked))
        now_ms = self.clock.now_ms()
        canonical = pairs_by_token(fetched)
        threshold = self.settings.DEX_WEAK_CYCLES_BEFORE_DROP

        next_tracked: dict[str, LiveCoin] = {}
        next_weak = dict(self._weak_cycles)
        evicted: list[str] = []

        for token_address, coin in tracked.items():
            pair = canonical.get(token_address)
            if pair is not None and passes_keep_filter(pair, self.settings):
                weak = 0
            else:
                weak = next_weak.get(token_address, 0) + 1

            candidate = None
            if pair is not None:
                candidate = score_pair(
                    pair,
                    self._hints.get(token_address),
                    now_ms=now_ms,
                    is_tracked=True,
                    weak_cycles=weak,
                    cfg=self.settings,
                )

            if candidate is None:
                if weak >= threshold:
                    evicted.append(token_address)
                    next_weak.pop(token_address, None)
                    continue
                next_tracked[token_address] = coin
            else:
                next_tracked[token_address] = candidate.to_live_coin(coin.bucket, coin.rank)
            next_weak[token_address] = weak

        self._tracked = next_tracked
        self._weak_cycles = next_weak
        self._publish(now_ms)

        logger.info(
            "Tracked universe refreshed",
            tracked=len(next_tracked),
            fetched_pairs=len(fetched),
            missing=len(tracked) - len(canonical.keys() & tracked.keys()),
            evicted=len(evicted),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        if evicted:
            logger.debug("Evicted weak tokens", tokens=evicted)
        return self._snapshot

    async def refresh_candidate_pool(self) -> UniverseSnapshot:
        """Discovery cycle: gather every source best-effort and rebuild the pool."""
        started = time.monotonic()
        tracked_addresses = list(self._tracked)

        results = await gather_sources(
            {
                "profiles": self.client.fetch_latest_token_profiles(),
                "boosts": self.client.fetch_latest_boosts(),
                "top_boosts": self.client.fetch_top_boosts(),
                "community_takeovers": self.client.fetch_community_takeovers(),
                "search": self._search_all_terms(),
                "tracked": self._fetch_tracked_pairs(tracked_addresses),
            }
        )

        discovered: list[str] = []
        for source in DISCOVERY_FEEDS:
            items = results[source].value_or([])
            self._hints.record_source(source, items)
            discovered.extend(item.token_address for item in items)

        raw_pairs: list[DexPair] = []
        raw_pairs.extend(results["search"].value_or([]))
        raw_pairs.extend(results["tracked"].value_or([]))

        covered = {pair.base_token_address for pair in raw_pairs if pair.base_token_address}
        to_hydrate = [address for address in dict.fromkeys(discovered) if address and address not in covered]
        raw_pairs.extend(await self._hydrate(to_hydrate))

        now_ms = self.clock.now_ms()
        tracked = set(self._tracked)
        weak_cycles = self._weak_cycles
        scored: list[ScoredCandidate] = []
        for pair in choose_canonical_pairs(raw_pairs):
            candidate = score_pair(
                pair,
                self._hints.get(pair.base_token_address),
                now_ms=now_ms,
                is_tracked=pair.base_token_address in tracked,
                weak_cycles=weak_cycles.get(pair.base_token_address, 0),
                cfg=self.settings,
            )
            if candidate is not None:
                scored.append(candidate)

        scored.sort(key=ranking_key)
        self._candidate_pool = scored[: self.settings.DEX_CANDIDATE_POOL_SIZE]
        self._publish(now_ms)

        logger.info(
            "Candidate pool refreshed",
            pool_size=len(self._candidate_pool),
            scored=len(scored),
            raw_pairs=len(raw_pairs),
            hydrated=len(to_hydrate),
            hints=len(self._hints),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
            **summarize(results),
        )
        return self._snapshot

    async def rebalance_universe(self, force: bool = False) -> bool:
        """Re-select the tracked set from the candidate pool.

        Without ``force`` the call is a no-op until ``DEX_REBALANCE_MS`` has
        passed since the last rebalance.  Returns whether a rebalance ran.
        """
        now_ms = self.clock.now_ms()
        if (
            not force
            and self._last_rebalanced_at is not None
            and now_ms - self._last_rebalanced_at < self.settings.DEX_REBALANCE_MS
        ):
            return False

        # Empty inputs: nothing runs and the throttle stays open.
        if not self._candidate_pool and not self._tracked:
            self._publish(now_ms)
            return False

        result = select_universe(
            list(self._candidate_pool),
            set(self._tracked),
            self._weak_cycles,
            now_ms=now_ms,
            cfg=self.settings,
        )

        tracked = {coin.token_address: coin for coin in result.items}
        self._tracked = tracked
        # Counters only matter while a token is tracked.
        self._weak_cycles = {address: weak for address, weak in result.weak_cycles.items() if address in tracked}
        self._last_rebalanced_at = now_ms
        self._publish(now_ms)

        logger.info(
            "Universe rebalanced",
            tracked=len(result.items),
            candidate_pool=len(self._candidate_pool),
            dropped=len(result.dropped),
            forced=force,
            **result.bucket_counts,
        )
        return True

    # ==================== SOURCES ====================

    async def _search_all_terms(self) -> list[DexPair]:
        terms = self.settings.search_terms
        if not terms:
            return []
        results: dict[str, SourceResult] = await gather_sources(
            {f"search:{term}": self.client.search_pairs(term) for term in terms}
        )
        pairs: list[DexPair] = []
        for result in results.values():
            pairs.extend(result.value_or([]))
        return pairs

    async def _fetch_tracked_pairs(self, addresses: list[str]) -> list[DexPair]:
        if not addresses:
            return []
        return await self.client.fetch_pairs_by_token_addresses(addresses)

    async def _hydrate(self, addresses: list[str]) -> list[DexPair]:
        """Look up pairs for discovery-only tokens, one bounded round at a time."""
        pairs: list[DexPair] = []
        for index, batch in enumerate(chunk(addresses, self.settings.DEX_HYDRATION_CHUNK_SIZE)):
            results = await gather_sources({f"hydrate:{index}": self.client.fetch_pairs_by_token_addresses(batch)})
            for result in results.values():
                pairs.extend(result.value_or([]))
        return pairs


universe_manager = UniverseManager()
