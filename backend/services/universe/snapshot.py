from __future__ import annotations

from typing import Iterable, Optional

from config import Settings, settings as default_settings
from models import LiveCoin, SnapshotCounts, UniverseSnapshot
from services.universe.scoring import ranking_key
from utils.clock import iso_from_ms


def snapshot_status(tracked_count: int, candidate_pool_count: int) -> str:
    return "live" if tracked_count or candidate_pool_count else "warming_up"


def build_snapshot(
    tracked: Iterable[LiveCoin],
    candidate_pool_count: int,
    *,
    now_ms: float,
    cfg: Optional[Settings] = None,
) -> UniverseSnapshot:
    """Assemble a complete snapshot; callers publish it by swapping one reference."""
    cfg = cfg or default_settings
    items = tuple(sorted(tracked, key=ranking_key))
    return UniverseSnapshot(
        updated_at=now_ms,
        generated_at=iso_from_ms(now_ms),
        status=snapshot_status(len(items), candidate_pool_count),
        config=cfg.snapshot_config(),
        counts=SnapshotCounts(tracked=len(items), candidate_pool=candidate_pool_count),
        items=items,
    )
