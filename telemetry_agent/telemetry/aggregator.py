"""
Telemetry Agent - Aggregator

Fans out to the probes of one tier, fans their results back in and fills the
slot of any failed probe with that probe's default fragment.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

import structlog

from ..models import Tier
from ..probes.base import Probe

logger = structlog.get_logger(__name__)


@dataclass
class ProbeResult:
    """Outcome of one probe call."""
    name: str
    fragment: Dict[str, Any]
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class Aggregator:
    """Assembles tier payloads from independent probes.

    Every probe of a tier runs concurrently. An exception or timeout in one
    probe never prevents the others from completing; its slot gets the
    probe's default. Probes are not retried.
    """

    def __init__(self, probes: Mapping[Tier, Sequence[Probe]], probe_timeout: Optional[float] = 5.0):
        self._probes: Dict[Tier, Sequence[Probe]] = {Tier(t): list(p) for t, p in probes.items()}
        self._probe_timeout = probe_timeout

        for tier, tier_probes in self._probes.items():
            names = [p.name for p in tier_probes]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate probe names in tier {tier.value}: {names}")

    def slots(self, tier: Tier) -> list:
        """Payload slot names for a tier, in registration order."""
        return [p.name for p in self._probes.get(Tier(tier), [])]

    async def collect(self, tier: Tier) -> Dict[str, Any]:
        """Collect one tier payload. Never raises for probe failures."""
        tier = Tier(tier)
        probes = self._probes.get(tier, [])
        start = time.perf_counter()

        results = await asyncio.gather(*(self._run_probe(p) for p in probes))

        failed = [r.name for r in results if not r.ok]
        logger.debug(
            "Tier collected",
            tier=tier.value,
            probes=len(results),
            failed=failed,
            elapsed_ms=round((time.perf_counter() - start) * 1000, 1),
        )

        return {r.name: r.fragment for r in results}

    async def collect_all(self) -> Dict[str, Any]:
        """Collect every tier concurrently and merge them into one snapshot."""
        tiers = list(self._probes)
        payloads = await asyncio.gather(*(self.collect(t) for t in tiers))

        snapshot: Dict[str, Any] = {}
        for payload in payloads:
            snapshot.update(payload)
        return snapshot

    async def _run_probe(self, probe: Probe) -> ProbeResult:
        if not probe.enabled:
            return ProbeResult(name=probe.name, fragment=probe.default())

        start = time.perf_counter()
        try:
            if self._probe_timeout:
                fragment = await asyncio.wait_for(probe.collect(), timeout=self._probe_timeout)
            else:
                fragment = await probe.collect()
        except asyncio.TimeoutError:
            logger.warning("Probe timed out, using default", probe=probe.name, timeout=self._probe_timeout)
            return ProbeResult(name=probe.name, fragment=probe.default(), error="timeout")
        except Exception as e:
            logger.warning("Probe failed, using default", probe=probe.name, error=str(e))
            return ProbeResult(name=probe.name, fragment=probe.default(), error=str(e) or type(e).__name__)

        return ProbeResult(
            name=probe.name,
            fragment=fragment,
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )
