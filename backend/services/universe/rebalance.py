"""
Bucketed selection of the tracked universe from the candidate pool.

Passes run in order and never re-select a token:

  1. persistence  already-tracked, not-yet-weak tokens by live score,
                  up to DEX_PERSISTENCE_SLOTS
  2. fresh        pools younger than DEX_MAX_FRESH_AGE_HOURS by
                  freshness + live score, DEX_FRESH_SLOTS more
  3. trending     the whole pool by live score, DEX_TRENDING_SLOTS more
  4. backfill     the whole pool again, up to DEX_TARGET_UNIVERSE, to use
                  slots an earlier pass left idle

Every pass limit is capped at DEX_TARGET_UNIVERSE.  The selection is then
ranked 1..N by live score (ties by token address).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Collection, Iterable, Mapping, Optional

from config import Settings, settings as default_settings
from models import BucketType, LiveCoin, ScoredCandidate
from services.universe.scoring import ranking_key


@dataclass
class RebalanceResult:
    items: list[LiveCoin]
    weak_cycles: dict[str, int]
    dropped: list[str] = field(default_factory=list)
    bucket_counts: dict[str, int] = field(default_factory=dict)


def _fill(
    selected: list[tuple[ScoredCandidate, BucketType]],
    seen: set[str],
    candidates: Iterable[ScoredCandidate],
    limit: int,
    bucket: BucketType,
    predicate: Optional[Callable[[ScoredCandidate], bool]] = None,
) -> None:
    for candidate in candidates:
        if len(selected) >= limit:
            return
        if candidate.token_address in seen:
            continue
        if predicate is not None and not predicate(candidate):
            continue
        seen.add(candidate.token_address)
        selected.append((candidate, bucket))


def select_universe(
    candidate_pool: list[ScoredCandidate],
    tracked: Collection[str],
    weak_cycles: Mapping[str, int],
    *,
    now_ms: float,
    cfg: Optional[Settings] = None,
) -> RebalanceResult:
    """Choose and rank the next tracked set; inputs are left untouched."""
    cfg = cfg or default_settings
    target = cfg.DEX_TARGET_UNIVERSE
    threshold = cfg.DEX_WEAK_CYCLES_BEFORE_DROP
    max_fresh_age_minutes = cfg.DEX_MAX_FRESH_AGE_HOURS * 60

    pool = sorted(candidate_pool, key=ranking_key)
    selected: list[tuple[ScoredCandidate, BucketType]] = []
    seen: set[str] = set()

    persistence_candidates = [
        c for c in pool if c.token_address in tracked and weak_cycles.get(c.token_address, 0) < threshold
    ]
    _fill(selected, seen, persistence_candidates, min(target, cfg.persistence_slots), BucketType.PERSISTENCE)

    def is_fresh(candidate: ScoredCandidate) -> bool:
        return candidate.age_minutes <= max_fresh_age_minutes

    fresh_candidates = sorted(
        (c for c in pool if is_fresh(c)),
        key=lambda c: (-(c.score_breakdown.freshness + c.live_score), c.token_address),
    )
    _fill(
        selected,
        seen,
        fresh_candidates,
        min(target, len(selected) + cfg.DEX_FRESH_SLOTS),
        BucketType.FRESH,
        is_fresh,
    )

    _fill(selected, seen, pool, min(target, len(selected) + cfg.DEX_TRENDING_SLOTS), BucketType.TRENDING)
    _fill(selected, seen, pool, target, BucketType.TRENDING)

    selected.sort(key=lambda entry: ranking_key(entry[0]))
    items = [
        candidate.to_live_coin(bucket, rank=index, updated_at=now_ms)
        for index, (candidate, bucket) in enumerate(selected, start=1)
    ]

    next_weak = dict(weak_cycles)
    dropped: list[str] = []
    for token_address in tracked:
        if token_address in seen:
            continue
        dropped.append(token_address)
        weak = next_weak.get(token_address, 0) + 1
        if weak >= threshold:
            next_weak.pop(token_address, None)
        else:
            next_weak[token_address] = weak
    for token_address in seen:
        next_weak[token_address] = 0

    bucket_counts = {bucket.value: 0 for bucket in BucketType}
    for coin in items:
        bucket_counts[coin.bucket.value] += 1

    return RebalanceResult(items=items, weak_cycles=next_weak, dropped=dropped, bucket_counts=bucket_counts)
