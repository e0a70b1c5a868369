from services.universe.canonical import choose_canonical_pairs, passes_entry_filter, passes_keep_filter
from services.universe.hints import DiscoveryHintStore
from services.universe.manager import UniverseManager, universe_manager
from services.universe.rebalance import RebalanceResult, select_universe
from services.universe.scheduler import UniverseScheduler, universe_scheduler
from services.universe.scoring import ranking_key, score_pair
from services.universe.snapshot import build_snapshot

__all__ = [
    "choose_canonical_pairs",
    "passes_entry_filter",
    "passes_keep_filter",
    "DiscoveryHintStore",
    "UniverseManager",
    "universe_manager",
    "RebalanceResult",
    "select_universe",
    "UniverseScheduler",
    "universe_scheduler",
    "ranking_key",
    "score_pair",
    "build_snapshot",
]
