"""Two-tier operations: a best-effort primary with a fallback that always answers."""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog

logger = structlog.get_logger()

PRIMARY = "primary"
FALLBACK = "fallback"


@dataclass
class TierResult:
    """Result of one tier. ``tier`` records which tier produced it."""

    ok: bool
    value: Any = None
    error: str | None = None
    tier: str = PRIMARY

    @property
    def degraded(self) -> bool:
        return self.tier == FALLBACK


async def with_fallback(
    primary: Callable[[], Awaitable[TierResult]],
    fallback: Callable[[str | None], Awaitable[TierResult]],
    operation: str = "operation",
) -> TierResult:
    """Run ``primary``; when it reports failure, run ``fallback`` with its error.

    An exception escaping ``primary`` counts as a failed primary tier.
    """
    try:
        result = await primary()
    except Exception as e:
        result = TierResult(ok=False, error=str(e) or type(e).__name__)
    if result.ok:
        result.tier = PRIMARY
        return result
    logger.info("primary_tier_failed_using_fallback", operation=operation, error=result.error)
    fallback_result = await fallback(result.error)
    fallback_result.tier = FALLBACK
    return fallback_result
