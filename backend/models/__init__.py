from .pair import DexPair, DiscoveryItem, safe_number
from .universe import (
    BucketType,
    DiscoveryHint,
    LiveCoin,
    ScoreBreakdown,
    ScoredCandidate,
    SnapshotCounts,
    UniverseSnapshot,
)

__all__ = [
    "DexPair",
    "DiscoveryItem",
    "safe_number",
    "BucketType",
    "DiscoveryHint",
    "LiveCoin",
    "ScoreBreakdown",
    "ScoredCandidate",
    "SnapshotCounts",
    "UniverseSnapshot",
]
