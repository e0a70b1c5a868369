"""Best-effort fan-out over independent discovery sources.

Every source runs concurrently and settles into a ``SourceResult``; one
source failing neither cancels its siblings nor fails the cycle.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Optional, TypeVar

from utils.logger import universe_logger as logger

T = TypeVar("T")


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    name: str
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    def value_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default


async def settle(name: str, awaitable: Awaitable[T]) -> SourceResult[T]:
    """Await one source and capture its outcome instead of raising."""
    try:
        value = await awaitable
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning(
            "Discovery source failed",
            source=name,
            error=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
        )
        return SourceResult(name=name, ok=False, error=str(exc) or type(exc).__name__)
    return SourceResult(name=name, ok=True, value=value)


async def gather_sources(sources: dict[str, Awaitable[Any]]) -> dict[str, SourceResult]:
    """Run all sources concurrently; the result maps each name to its outcome."""
    names = list(sources)
    results = await asyncio.gather(*[settle(name, sources[name]) for name in names])
    return dict(zip(names, results))


def summarize(results: dict[str, SourceResult]) -> dict[str, Any]:
    failed = sorted(name for name, result in results.items() if not result.ok)
    return {"sources": len(results), "failed": failed}
