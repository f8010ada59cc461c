"""Bounded polling for results the compute unit has not materialized yet.

Used by the ``backoff`` settle strategy. Only :class:`NotFoundError`
means "not computed yet"; any other failure ends the poll at once.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from aoflux.core.errors import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from aoflux.config.schema import SettleConfig

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PollConfig:
    """Backoff bounds for polling one message result, in seconds."""

    max_retries: int = 3
    base_delay: float = 0.1
    max_delay: float = 2.0
    jitter: bool = True

    @classmethod
    def from_settle(cls, settle: SettleConfig) -> PollConfig:
        """Derive bounds from settle config; the settle delay seeds the backoff."""
        return cls(
            max_retries=settle.max_retries,
            base_delay=max(settle.delay_ms, 1) / 1000,
            max_delay=settle.max_delay_ms / 1000,
        )


def backoff_delay(poll: int, config: PollConfig) -> float:
    """Delay before re-polling after the ``poll``-th miss (0-based)."""
    delay: float = min(config.base_delay * (2**poll), config.max_delay)
    if config.jitter:
        delay *= random.uniform(0.5, 1.5)
    return delay


async def poll_until_ready(
    fetch: Callable[[], Awaitable[T]],
    config: PollConfig | None = None,
    on_miss: Callable[[int, float, NotFoundError], None] | None = None,
) -> T:
    """Await ``fetch`` until it stops raising :class:`NotFoundError`.

    Args:
        fetch: Zero-arg callable fetching the result.
        config: Poll bounds. Uses defaults if None.
        on_miss: Optional callback(poll, delay, error) before each re-poll.

    Raises:
        NotFoundError: If the result is still missing after ``max_retries``
            re-polls.
    """
    cfg = config or PollConfig()
    misses = 0
    while True:
        try:
            return await fetch()
        except NotFoundError as e:
            if misses >= cfg.max_retries:
                logger.info(
                    "Result for %s still missing after %d polls", e.message_id, misses + 1
                )
                raise
            delay = backoff_delay(misses, cfg)
            misses += 1
            logger.debug(
                "Result for %s not ready (poll %d), re-polling in %.2fs",
                e.message_id,
                misses,
                delay,
            )
            if on_miss is not None:
                on_miss(misses, delay, e)
            await asyncio.sleep(delay)
