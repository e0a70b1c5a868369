from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


def safe_number(value: object) -> float:
    """Coerce a loosely-typed provider value to a finite float (0 otherwise).

    DEX Screener sends numbers, numeric strings, nulls, or omits fields
    entirely depending on the pool; every numeric field funnels through here.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def _as_dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


class DexPair(BaseModel):
    """One trading-pool quote from DEX Screener.

    A token usually has several pools; the canonicalizer picks one per base
    token.  Missing optional fields default to zero/empty.
    """

    model_config = ConfigDict(frozen=True)

    chain_id: str = ""
    dex_id: str = ""
    url: str = ""
    pair_address: str = ""

    base_token_address: str = ""
    base_token_name: str = ""
    base_token_symbol: str = ""
    quote_token_symbol: str = ""

    price_usd: float = 0.0
    liquidity_usd: float = 0.0

    volume_m5: float = 0.0
    volume_h1: float = 0.0
    volume_h6: float = 0.0
    volume_h24: float = 0.0

    buys_m5: float = 0.0
    sells_m5: float = 0.0
    buys_h1: float = 0.0
    sells_h1: float = 0.0
    buys_h24: float = 0.0
    sells_h24: float = 0.0

    price_change_m5: float = 0.0
    price_change_h1: float = 0.0
    price_change_h6: float = 0.0
    price_change_h24: float = 0.0

    fdv: float = 0.0
    market_cap: float = 0.0
    pair_created_at: Optional[float] = None  # epoch ms; None when unknown
    image_url: Optional[str] = None
    boosts_active: float = 0.0
    websites: list[str] = []
    socials: list[dict[str, str]] = []

    @property
    def txns_m5(self) -> float:
        return self.buys_m5 + self.sells_m5

    @property
    def txns_h1(self) -> float:
        return self.buys_h1 + self.sells_h1

    @property
    def txns_h24(self) -> float:
        return self.buys_h24 + self.sells_h24

    @property
    def market_cap_usd(self) -> float:
        return self.market_cap or self.fdv

    def age_minutes(self, now_ms: float) -> float:
        """Minutes since pool creation; an unknown creation time reads as brand new."""
        created = self.pair_created_at or now_ms
        return max(0.0, (now_ms - created) / 60_000.0)

    @classmethod
    def from_api_response(cls, data: dict) -> "DexPair":
        """Parse a pair object from the /tokens, /pairs or /search endpoints."""
        base = _as_dict(data.get("baseToken"))
        quote = _as_dict(data.get("quoteToken"))
        liquidity = _as_dict(data.get("liquidity"))
        volume = _as_dict(data.get("volume"))
        price_change = _as_dict(data.get("priceChange"))
        txns = _as_dict(data.get("txns"))
        info = _as_dict(data.get("info"))
        boosts = _as_dict(data.get("boosts"))

        def _txn(window: str, side: str) -> float:
            return safe_number(_as_dict(txns.get(window)).get(side))

        websites: list[str] = []
        for site in info.get("websites") or []:
            url = _as_text(_as_dict(site).get("url"))
            if url:
                websites.append(url)

        socials: list[dict[str, str]] = []
        for social in info.get("socials") or []:
            entry = _as_dict(social)
            platform = _as_text(entry.get("platform") or entry.get("type"))
            handle = _as_text(entry.get("handle") or entry.get("url"))
            if platform and handle:
                socials.append({"platform": platform, "handle": handle})

        created_at = safe_number(data.get("pairCreatedAt"))

        return cls(
            chain_id=_as_text(data.get("chainId")),
            dex_id=_as_text(data.get("dexId")),
            url=_as_text(data.get("url")),
            pair_address=_as_text(data.get("pairAddress")),
            base_token_address=_as_text(base.get("address")),
            base_token_name=_as_text(base.get("name")),
            base_token_symbol=_as_text(base.get("symbol")),
            quote_token_symbol=_as_text(quote.get("symbol")),
            price_usd=safe_number(data.get("priceUsd")),
            liquidity_usd=safe_number(liquidity.get("usd")),
            volume_m5=safe_number(volume.get("m5")),
            volume_h1=safe_number(volume.get("h1")),
            volume_h6=safe_number(volume.get("h6")),
            volume_h24=safe_number(volume.get("h24")),
            buys_m5=_txn("m5", "buys"),
            sells_m5=_txn("m5", "sells"),
            buys_h1=_txn("h1", "buys"),
            sells_h1=_txn("h1", "sells"),
            buys_h24=_txn("h24", "buys"),
            sells_h24=_txn("h24", "sells"),
            price_change_m5=safe_number(price_change.get("m5")),
            price_change_h1=safe_number(price_change.get("h1")),
            price_change_h6=safe_number(price_change.get("h6")),
            price_change_h24=safe_number(price_change.get("h24")),
            fdv=safe_number(data.get("fdv")),
            market_cap=safe_number(data.get("marketCap")),
            pair_created_at=created_at or None,
            image_url=_as_text(info.get("imageUrl")) or None,
            boosts_active=safe_number(boosts.get("active")),
            websites=websites,
            socials=socials,
        )


class DiscoveryItem(BaseModel):
    """An entry from a profile, boost or community-takeover feed."""

    model_config = ConfigDict(frozen=True)

    token_address: str
    chain_id: str = ""
    url: str = ""
    description: str = ""
    amount: float = 0.0
    total_amount: float = 0.0

    @classmethod
    def from_api_response(cls, data: dict) -> Optional["DiscoveryItem"]:
        token_address = _as_text(data.get("tokenAddress"))
        if not token_address:
            return None
        return cls(
            token_address=token_address,
            chain_id=_as_text(data.get("chainId")),
            url=_as_text(data.get("url")),
            description=_as_text(data.get("description")),
            amount=safe_number(data.get("amount")),
            total_amount=safe_number(data.get("totalAmount")),
        )


def as_list(payload: Any) -> list:
    """Provider feeds sometimes return a bare object instead of a list."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]
