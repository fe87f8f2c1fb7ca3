"""
Telemetry Agent - Offline Buffer

Bounded in-memory FIFO holding envelopes the collector could not accept.
"""

from collections import deque
from typing import Deque, Iterator, Optional

import structlog

from ..models import Envelope

logger = structlog.get_logger(__name__)


class OfflineBuffer:
    """FIFO of undelivered envelopes; the oldest entry is evicted when full."""

    def __init__(self, max_size: int = 1000):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._entries: Deque[Envelope] = deque()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Envelope]:
        return iter(list(self._entries))

    def size(self) -> int:
        return len(self._entries)

    def push(self, envelope: Envelope) -> None:
        """Append an envelope, evicting the oldest one first when at capacity."""
        if len(self._entries) >= self._max_size:
            dropped = self._entries.popleft()
            logger.warning(
                "Offline buffer full, dropping oldest entry",
                dropped_id=dropped.id,
                dropped_tier=dropped.tier.value,
                max_size=self._max_size,
            )

        self._entries.append(envelope)
        logger.info("Buffered telemetry", tier=envelope.tier.value, entries=len(self._entries))

    def peek_oldest(self) -> Optional[Envelope]:
        return self._entries[0] if self._entries else None

    def pop_oldest(self) -> Envelope:
        """Remove and return the oldest entry. Raises IndexError when empty."""
        return self._entries.popleft()
