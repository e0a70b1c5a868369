"""
Live score for a canonical pair.

    live_score = liquidity + volume + momentum + freshness + discovery + hold_bonus

  liquidity   log10(max(1, liq) + 1) * 7
  volume      log-weighted 5m (x11), 1h (x9) and 24h (x5) volume
  momentum    positive 5m/1h price change, plus volume and trade
              acceleration (5m rate extrapolated to 1h vs. the actual 1h)
  freshness   24 - age_hours for pools younger than the fresh cut-off
  discovery   profile/boost/takeover hints and active boosts
  hold_bonus  14 for tokens already tracked and not yet weak enough to drop

The breakdown is rounded to 2 places for display only; ranking uses the raw
sum.
"""

from __future__ import annotations

import math
from typing import Optional

from config import Settings, settings as default_settings
from models import DexPair, DiscoveryHint, ScoreBreakdown, ScoredCandidate
from services.universe.canonical import passes_entry_filter

LIQUIDITY_WEIGHT = 7.0
VOLUME_M5_WEIGHT = 11.0
VOLUME_H1_WEIGHT = 9.0
VOLUME_H24_WEIGHT = 5.0

PRICE_CHANGE_M5_WEIGHT = 1.6
PRICE_CHANGE_H1_WEIGHT = 1.0
VOLUME_ACCEL_WEIGHT = 10.0
TRADE_ACCEL_WEIGHT = 8.0
ACCEL_CAP = 3.0

FRESHNESS_HORIZON_HOURS = 24.0

PROFILE_POINTS = 6.0
COMMUNITY_TAKEOVER_POINTS = 10.0
BOOST_POINTS = 8.0
TOP_BOOST_POINTS = 10.0
ACTIVE_BOOST_POINTS = 4.0

HOLD_BONUS = 14.0


def clamp(value: float, lo: float = 0.0, hi: float = math.inf) -> float:
    return max(lo, min(hi, value))


def log_score(value: float, weight: float) -> float:
    return math.log10(max(1.0, value) + 1.0) * weight


def acceleration(recent_5m: float, last_1h: float) -> float:
    """Ratio of the 5-minute figure extrapolated to an hour over the actual hour."""
    return (recent_5m * 12.0) / max(1.0, last_1h)


def liquidity_score(pair: DexPair) -> float:
    return log_score(pair.liquidity_usd, LIQUIDITY_WEIGHT)


def volume_score(pair: DexPair) -> float:
    return (
        log_score(pair.volume_m5, VOLUME_M5_WEIGHT)
        + log_score(pair.volume_h1, VOLUME_H1_WEIGHT)
        + log_score(pair.volume_h24, VOLUME_H24_WEIGHT)
    )


def momentum_score(pair: DexPair) -> float:
    volume_accel = acceleration(pair.volume_m5, pair.volume_h1)
    trade_accel = acceleration(pair.txns_m5, pair.txns_h1)
    return (
        clamp(pair.price_change_m5) * PRICE_CHANGE_M5_WEIGHT
        + clamp(pair.price_change_h1) * PRICE_CHANGE_H1_WEIGHT
        + clamp(volume_accel - 1.0, 0.0, ACCEL_CAP) * VOLUME_ACCEL_WEIGHT
        + clamp(trade_accel - 1.0, 0.0, ACCEL_CAP) * TRADE_ACCEL_WEIGHT
    )


def freshness_score(age_hours: float, max_fresh_age_hours: float) -> float:
    if age_hours > max_fresh_age_hours:
        return 0.0
    return clamp(FRESHNESS_HORIZON_HOURS - age_hours, 0.0, FRESHNESS_HORIZON_HOURS)


def discovery_score(hint: DiscoveryHint, boosts_active: float) -> float:
    return (
        (PROFILE_POINTS if hint.has_profile else 0.0)
        + (COMMUNITY_TAKEOVER_POINTS if hint.has_community_takeover else 0.0)
        + (BOOST_POINTS if hint.has_boost else 0.0)
        + (TOP_BOOST_POINTS if hint.has_top_boost else 0.0)
        + boosts_active * ACTIVE_BOOST_POINTS
    )


def hold_bonus(is_tracked: bool, weak_cycles: int, weak_cycles_before_drop: int) -> float:
    return HOLD_BONUS if is_tracked and weak_cycles < weak_cycles_before_drop else 0.0


def score_pair(
    pair: DexPair,
    hint: Optional[DiscoveryHint],
    *,
    now_ms: float,
    is_tracked: bool = False,
    weak_cycles: int = 0,
    cfg: Optional[Settings] = None,
) -> Optional[ScoredCandidate]:
    """Score one canonical pair, or ``None`` when it cannot be a candidate.

    A pair is rejected when it lacks a token address, name or symbol, or
    fails the entry filter.
    """
    cfg = cfg or default_settings

    if not (pair.base_token_address and pair.base_token_name and pair.base_token_symbol):
        return None
    if not passes_entry_filter(pair, now_ms, cfg):
        return None

    hint = hint or DiscoveryHint()
    age_minutes = pair.age_minutes(now_ms)

    liquidity = liquidity_score(pair)
    volume = volume_score(pair)
    momentum = momentum_score(pair)
    freshness = freshness_score(age_minutes / 60.0, cfg.DEX_MAX_FRESH_AGE_HOURS)
    discovery = discovery_score(hint, pair.boosts_active)
    bonus = hold_bonus(is_tracked, weak_cycles, cfg.DEX_WEAK_CYCLES_BEFORE_DROP)

    live_score = liquidity + volume + momentum + freshness + discovery + bonus

    return ScoredCandidate(
        token_address=pair.base_token_address,
        pair_address=pair.pair_address,
        symbol=pair.base_token_symbol,
        name=pair.base_token_name,
        chain_id=pair.chain_id,
        dex_id=pair.dex_id,
        url=pair.url,
        image_url=pair.image_url,
        live_score=live_score,
        score_breakdown=ScoreBreakdown(
            liquidity=round(liquidity, 2),
            volume=round(volume, 2),
            momentum=round(momentum, 2),
            freshness=round(freshness, 2),
            discovery=round(discovery, 2),
            hold_bonus=round(bonus, 2),
        ),
        price_usd=pair.price_usd,
        market_cap=pair.market_cap_usd,
        liquidity_usd=pair.liquidity_usd,
        volume_m5_usd=pair.volume_m5,
        volume_h1_usd=pair.volume_h1,
        volume_h24_usd=pair.volume_h24,
        txns_m5=pair.txns_m5,
        txns_h1=pair.txns_h1,
        price_change_m5=pair.price_change_m5,
        price_change_h1=pair.price_change_h1,
        price_change_h24=pair.price_change_h24,
        boosts_active=pair.boosts_active,
        has_profile=hint.has_profile,
        has_community_takeover=hint.has_community_takeover,
        has_boost=hint.has_boost,
        has_top_boost=hint.has_top_boost,
        age_minutes=math.floor(age_minutes + 0.5),
        pair_created_at=pair.pair_created_at or now_ms,
        updated_at=now_ms,
    )


def ranking_key(candidate: ScoredCandidate) -> tuple[float, str]:
    """Descending live score; equal scores fall back to token address."""
    return (-candidate.live_score, candidate.token_address)
