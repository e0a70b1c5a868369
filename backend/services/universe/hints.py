from __future__ import annotations

from typing import Iterable

from models import DiscoveryHint, DiscoveryItem

# Which flag each discovery feed raises.
SOURCE_FLAGS = {
    "profiles": "has_profile",
    "boosts": "has_boost",
    "top_boosts": "has_top_boost",
    "community_takeovers": "has_community_takeover",
}

_EMPTY_HINT = DiscoveryHint()


class DiscoveryHintStore:
    """Per-token discovery flags, additive for the life of the process."""

    def __init__(self) -> None:
        self._hints: dict[str, DiscoveryHint] = {}

    def __len__(self) -> int:
        return len(self._hints)

    def __contains__(self, token_address: object) -> bool:
        return token_address in self._hints

    def get(self, token_address: str) -> DiscoveryHint:
        return self._hints.get(token_address, _EMPTY_HINT)

    def upsert(self, token_address: str, **flags: bool) -> DiscoveryHint:
        if not token_address:
            return _EMPTY_HINT
        current = self._hints.get(token_address, _EMPTY_HINT)
        merged = current.merged(DiscoveryHint(**flags))
        self._hints[token_address] = merged
        return merged

    def record_source(self, source: str, items: Iterable[DiscoveryItem]) -> int:
        """Raise the source's flag for every item; returns how many tokens were touched."""
        flag = SOURCE_FLAGS[source]
        touched = 0
        for item in items:
            if item.token_address:
                self.upsert(item.token_address, **{flag: True})
                touched += 1
        return touched
