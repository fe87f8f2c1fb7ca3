"""
Telemetry Agent - Data Model

Envelope wrapping one tier payload, and the collector's acknowledgement shape.
"""

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class Tier(str, Enum):
    """Collection cadence tier."""
    HIGH = "high"       # power, thermal, cpu, memory, network
    MEDIUM = "medium"   # cpu stats, gpu, storage, processes
    LOW = "low"         # sensors, system


@dataclass(frozen=True)
class Envelope:
    """One tier snapshot addressed to the collector.

    Built once per tick and never mutated afterwards. ``timestamp`` and
    ``timestamp_ms`` come from the same captured instant.
    """
    device_id: str
    timestamp: str
    timestamp_ms: int
    tier: Tier
    payload: Dict[str, Any]
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def capture(
        cls,
        device_id: str,
        tier: Tier,
        payload: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> "Envelope":
        """Stamp a payload with the current instant at millisecond precision."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc)
        now = now.replace(microsecond=(now.microsecond // 1000) * 1000)

        return cls(
            device_id=device_id,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            timestamp_ms=round(now.timestamp() * 1000),
            tier=Tier(tier),
            payload=copy.deepcopy(payload),
        )

    def to_dict(self) -> dict:
        """Convert to the collector's JSON wire shape."""
        return {
            "id": self.id,
            "deviceId": self.device_id,
            "timestamp": self.timestamp,
            "timestampMs": self.timestamp_ms,
            "tier": self.tier.value,
            "payload": copy.deepcopy(self.payload),
        }


class TelemetryAck(BaseModel):
    """Receipt returned by the collector for an accepted envelope."""
    id: str
    received: bool
    timestamp: str


class ApiResponse(BaseModel):
    """Collector response body."""
    success: bool
    data: Optional[TelemetryAck] = None
    error: Optional[str] = None
    timestamp: Optional[str] = None
