"""
Telemetry Agent - Base Probe Interface

A probe produces one telemetry fragment. Probes are independent of each
other, side-effect free and safe to run concurrently. Each probe documents a
default fragment (its zero-value shape) that stands in for it when it fails.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict


class Probe(ABC):
    """Base class for all probes."""

    def __init__(self, enabled: bool = True):
        self._enabled = enabled

    @property
    @abstractmethod
    def name(self) -> str:
        """Payload slot this probe fills (e.g., 'power', 'thermal')."""
        pass

    @property
    def enabled(self) -> bool:
        """Disabled probes are never called; their slot carries the default."""
        return self._enabled

    @abstractmethod
    async def collect(self) -> Dict[str, Any]:
        """Read the fragment. May raise."""
        pass

    @abstractmethod
    def default(self) -> Dict[str, Any]:
        """Fresh zero-value fragment."""
        pass


class FunctionProbe(Probe):
    """Probe backed by a blocking read function and a default factory.

    The read runs in a worker thread so a stalled sysfs or procfs read never
    blocks the event loop and can be abandoned on timeout.
    """

    def __init__(
        self,
        name: str,
        collect: Callable[[], Dict[str, Any]],
        default: Callable[[], Dict[str, Any]],
        enabled: bool = True,
    ):
        super().__init__(enabled)
        self._name = name
        self._collect = collect
        self._default = default

    @property
    def name(self) -> str:
        return self._name

    async def collect(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self._collect)

    def default(self) -> Dict[str, Any]:
        return copy.deepcopy(self._default())

    def __repr__(self) -> str:
        return f"FunctionProbe(name={self._name!r}, enabled={self._enabled})"
