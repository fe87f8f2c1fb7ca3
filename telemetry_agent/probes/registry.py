"""
Telemetry Agent - Probe Registry

Maps each cadence tier to the probes whose output it carries.
"""

import functools
from typing import Dict, List

import structlog

from ..models import Tier
from .base import FunctionProbe, Probe
from .cpu import collect_cpu, collect_cpu_stats, default_cpu, default_cpu_stats
from .gpu import collect_gpu, default_gpu
from .memory import collect_memory, default_memory
from .network import collect_network, default_network
from .power import collect_power, default_power
from .processes import collect_processes, default_processes
from .sensors import collect_sensors, default_sensors
from .storage import collect_storage, default_storage
from .system import collect_system, default_system
from .thermal import collect_thermal, default_thermal

logger = structlog.get_logger(__name__)


def build_probes(settings) -> Dict[Tier, List[Probe]]:
    """Build the tier -> probes table, honoring the per-collector flags.

    Disabled probes stay registered so their slot is still filled with the
    default fragment.
    """
    enabled = settings.collectors

    table: Dict[Tier, List[Probe]] = {
        Tier.HIGH: [
            FunctionProbe("power", collect_power, default_power, enabled["battery"]),
            FunctionProbe("thermal", collect_thermal, default_thermal, enabled["thermal"]),
            FunctionProbe("cpu", collect_cpu, default_cpu, enabled["cpu"]),
            FunctionProbe("memory", collect_memory, default_memory, enabled["memory"]),
            FunctionProbe("network", collect_network, default_network, enabled["network"]),
        ],
        Tier.MEDIUM: [
            FunctionProbe("cpu_stats", collect_cpu_stats, default_cpu_stats, enabled["cpu"]),
            FunctionProbe("gpu", collect_gpu, default_gpu, enabled["gpu"]),
            FunctionProbe("storage", collect_storage, default_storage, enabled["storage"]),
            FunctionProbe(
                "processes",
                functools.partial(collect_processes, settings.max_processes),
                default_processes,
                enabled["processes"],
            ),
        ],
        Tier.LOW: [
            FunctionProbe("sensors", collect_sensors, default_sensors, enabled["sensors"]),
            FunctionProbe("system", collect_system, default_system),
        ],
    }

    disabled = [p.name for probes in table.values() for p in probes if not p.enabled]
    if disabled:
        logger.info("Probes disabled by configuration", probes=disabled)

    return table
