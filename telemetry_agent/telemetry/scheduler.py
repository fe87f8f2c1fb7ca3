"""
Telemetry Agent - Scheduler

Drives the high/medium/low collection cadences. Each tier has its own loop;
ticks of one tier are serialized, ticks of different tiers are independent.
"""

import asyncio
import time
from typing import Dict, Mapping, Optional, Set

import structlog

from ..models import Envelope, Tier
from ..api.transporter import Transporter
from .aggregator import Aggregator

logger = structlog.get_logger(__name__)

DEFAULT_INTERVALS = {
    Tier.HIGH: 5.0,
    Tier.MEDIUM: 60.0,
    Tier.LOW: 300.0,
}


class Scheduler:
    """Periodic collect-and-send loops, one per tier.

    ``start()`` runs one round of every tier before arming the periodic
    loops. ``stop()`` cancels the loops; a tick already in flight is left to
    finish on its own.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        transporter: Transporter,
        device_id: str,
        intervals: Optional[Mapping[Tier, float]] = None,
    ):
        self._aggregator = aggregator
        self._transporter = transporter
        self._device_id = device_id
        self._intervals: Dict[Tier, float] = dict(DEFAULT_INTERVALS)
        if intervals:
            self._intervals.update({Tier(t): float(v) for t, v in intervals.items()})

        for tier, interval in self._intervals.items():
            if interval <= 0:
                raise ValueError(f"Interval for tier {tier.value} must be positive")

        self._running = False
        self._generation = 0
        self._tasks: Dict[Tier, asyncio.Task] = {}
        self._inflight: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def intervals(self) -> Dict[Tier, float]:
        return dict(self._intervals)

    async def start(self) -> None:
        """Run the initial round of all tiers, then arm the periodic loops."""
        if self._running:
            logger.warning("Scheduler is already running")
            return

        self._running = True
        self._generation += 1
        generation = self._generation
        logger.info(
            "Scheduler starting",
            intervals={t.value: i for t, i in self._intervals.items()},
        )

        logger.info("Running initial collection")
        await asyncio.gather(*(self.run_tier(tier) for tier in Tier))

        # A stop(), or a stop() and a fresh start(), happened during the round
        if not self._running or generation != self._generation:
            logger.info("Scheduler stopped during initial collection")
            return

        for tier in Tier:
            self._tasks[tier] = asyncio.create_task(
                self._tier_loop(tier, self._intervals[tier]),
                name=f"telemetry-{tier.value}",
            )

        logger.info("Scheduler started")

    async def stop(self) -> None:
        """Cancel the periodic loops. In-flight ticks are not interrupted."""
        if not self._running:
            logger.warning("Scheduler is not running")
            return

        self._running = False
        self._generation += 1
        tasks = list(self._tasks.values())
        self._tasks.clear()

        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

        logger.info("Scheduler stopped", inflight=len(self._inflight))

    async def run_tier(self, tier: Tier) -> bool:
        """Collect one tier and send it. Errors are logged, never raised."""
        tier = Tier(tier)
        try:
            logger.debug("Collecting telemetry", tier=tier.value)
            start = time.perf_counter()

            payload = await self._aggregator.collect(tier)
            envelope = Envelope.capture(self._device_id, tier, payload)

            logger.debug(
                "Collection finished",
                tier=tier.value,
                elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
            )

            sent = await self._transporter.send(envelope)
            if not sent:
                logger.warning("Telemetry not delivered", tier=tier.value, id=envelope.id)
            return sent

        except Exception as e:
            logger.exception("Tier task error", tier=tier.value, error=str(e))
            return False

    async def _tier_loop(self, tier: Tier, interval: float) -> None:
        loop = asyncio.get_running_loop()
        next_run = loop.time() + interval

        while self._running:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            if not self._running:
                break

            # Shielded so stop() cancels only the wait, not a tick in flight
            tick = asyncio.ensure_future(self.run_tier(tier))
            self._inflight.add(tick)
            tick.add_done_callback(self._inflight.discard)
            await asyncio.shield(tick)

            # An overrunning tick makes the next one start right away
            next_run = max(next_run + interval, loop.time())
