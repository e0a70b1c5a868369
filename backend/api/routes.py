"""Live-universe HTTP surface: snapshot, health and debug views."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from config import settings
from services.universe.manager import UniverseManager, universe_manager
from services.universe.scheduler import UniverseScheduler, universe_scheduler
from utils.clock import iso_from_ms
from utils.logger import SERVICE_NAME, api_logger as logger

router = APIRouter()

DEBUG_TOP_N = 10


def get_universe_manager() -> UniverseManager:
    return universe_manager


def get_universe_scheduler() -> UniverseScheduler:
    return universe_scheduler


@router.get("/live-universe")
async def get_live_universe(manager: UniverseManager = Depends(get_universe_manager)):
    """Current ranked universe snapshot."""
    return manager.get_snapshot().model_dump(mode="json", by_alias=True)


@router.get("/health")
async def health(manager: UniverseManager = Depends(get_universe_manager)):
    return {
        "ok": True,
        "service": SERVICE_NAME,
        "chainId": manager.settings.DEX_CHAIN_ID,
        "now": iso_from_ms(manager.clock.now_ms()),
    }


@router.get("/debug/candidates")
async def debug_candidates(manager: UniverseManager = Depends(get_universe_manager)):
    """Status, counts and the top of the ranked universe."""
    snapshot = manager.get_snapshot()
    top = [coin.model_dump(mode="json", by_alias=True) for coin in snapshot.items[:DEBUG_TOP_N]]
    logger.debug("Debug candidates requested", tracked=snapshot.counts.tracked, status=snapshot.status)
    return {
        "status": snapshot.status,
        "counts": snapshot.counts.model_dump(mode="json", by_alias=True),
        "topTen": top,
    }


@router.get("/debug/cycles")
async def debug_cycles(scheduler: UniverseScheduler = Depends(get_universe_scheduler)):
    """Per-cycle run, skip and failure bookkeeping."""
    return {
        "chainId": settings.DEX_CHAIN_ID,
        **scheduler.get_status(),
    }
