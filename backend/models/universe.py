from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BucketType(str, Enum):
    TRENDING = "trending"
    FRESH = "fresh"
    PERSISTENCE = "persistence"


class _CamelModel(BaseModel):
    """Immutable record serialised with the camelCase keys consumers expect."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class DiscoveryHint(_CamelModel):
    """Sticky per-token signals gathered from the discovery feeds."""

    has_profile: bool = False
    has_community_takeover: bool = False
    has_boost: bool = False
    has_top_boost: bool = False

    def merged(self, other: "DiscoveryHint") -> "DiscoveryHint":
        """Union of both hints; a flag once set is never cleared."""
        return DiscoveryHint(
            has_profile=self.has_profile or other.has_profile,
            has_community_takeover=self.has_community_takeover or other.has_community_takeover,
            has_boost=self.has_boost or other.has_boost,
            has_top_boost=self.has_top_boost or other.has_top_boost,
        )


class ScoreBreakdown(_CamelModel):
    """Per-term contributions to ``live_score``, rounded for display."""

    liquidity: float = 0.0
    volume: float = 0.0
    momentum: float = 0.0
    freshness: float = 0.0
    discovery: float = 0.0
    hold_bonus: float = 0.0


class ScoredCandidate(_CamelModel):
    token_address: str
    pair_address: str = ""
    symbol: str
    name: str
    chain_id: str = ""
    dex_id: str = ""
    url: str = ""
    image_url: Optional[str] = None

    live_score: float
    score_breakdown: ScoreBreakdown = ScoreBreakdown()

    price_usd: float = 0.0
    market_cap: float = 0.0
    liquidity_usd: float = 0.0
    volume_m5_usd: float = 0.0
    volume_h1_usd: float = 0.0
    volume_h24_usd: float = 0.0
    txns_m5: float = 0.0
    txns_h1: float = 0.0
    price_change_m5: float = 0.0
    price_change_h1: float = 0.0
    price_change_h24: float = 0.0
    boosts_active: float = 0.0

    has_profile: bool = False
    has_community_takeover: bool = False
    has_boost: bool = False
    has_top_boost: bool = False

    age_minutes: int = 0
    pair_created_at: float = 0.0
    updated_at: float = 0.0

    def to_live_coin(self, bucket: BucketType, rank: int = 0, **updates) -> "LiveCoin":
        data = self.model_dump(exclude={"bucket", "rank"})
        data.update(updates)
        return LiveCoin(**data, bucket=bucket, rank=rank)


class LiveCoin(ScoredCandidate):
    """A candidate that made it into the tracked universe."""

    bucket: BucketType
    rank: int = 0


class SnapshotCounts(_CamelModel):
    tracked: int = 0
    candidate_pool: int = 0


class UniverseSnapshot(_CamelModel):
    """Complete read-only view handed to HTTP consumers."""

    updated_at: float
    generated_at: str
    status: Literal["warming_up", "live"]
    config: dict
    counts: SnapshotCounts
    items: tuple[LiveCoin, ...] = ()
