"""Canonical pair selection and the entry/keep threshold filters."""

from __future__ import annotations

from typing import Iterable, Optional

from config import Settings, settings as default_settings
from models import DexPair

# Staying in the universe is deliberately easier than entering it.
KEEP_LIQUIDITY_FACTOR = 0.6
KEEP_VOLUME_H24_FACTOR = 0.4


def choose_canonical_pairs(pairs: Iterable[DexPair]) -> list[DexPair]:
    """Reduce many pools per token to the single deepest pool.

    The pair with strictly greater USD liquidity wins; on a tie the pair seen
    first is kept.  Pairs without a base-token address are dropped.  Output
    order follows first appearance of each token.
    """
    by_token: dict[str, DexPair] = {}
    for pair in pairs:
        token_address = pair.base_token_address
        if not token_address:
            continue
        current = by_token.get(token_address)
        if current is None or pair.liquidity_usd > current.liquidity_usd:
            by_token[token_address] = pair
    return list(by_token.values())


def pairs_by_token(pairs: Iterable[DexPair]) -> dict[str, DexPair]:
    return {pair.base_token_address: pair for pair in choose_canonical_pairs(pairs)}


def passes_entry_filter(pair: DexPair, now_ms: float, cfg: Optional[Settings] = None) -> bool:
    cfg = cfg or default_settings
    return (
        pair.liquidity_usd >= cfg.DEX_MIN_LIQUIDITY_USD
        and pair.volume_h24 >= cfg.DEX_MIN_VOLUME_H24_USD
        and (pair.volume_h1 >= cfg.DEX_MIN_VOLUME_H1_USD or pair.volume_m5 >= cfg.DEX_MIN_VOLUME_M5_USD)
        and pair.age_minutes(now_ms) >= cfg.DEX_MIN_AGE_MINUTES
    )


def passes_keep_filter(pair: DexPair, cfg: Optional[Settings] = None) -> bool:
    cfg = cfg or default_settings
    return (
        pair.liquidity_usd >= cfg.DEX_MIN_LIQUIDITY_USD * KEEP_LIQUIDITY_FACTOR
        and pair.volume_h24 >= cfg.DEX_MIN_VOLUME_H24_USD * KEEP_VOLUME_H24_FACTOR
    )
