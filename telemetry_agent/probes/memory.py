"""
Telemetry Agent - Memory Probe
"""

from typing import Any, Dict

import psutil

FIELDS = (
    "total", "free", "available", "buffers", "cached", "active", "inactive",
    "shared", "slab",
)


def default_memory() -> Dict[str, Any]:
    fragment = {name: 0 for name in FIELDS}
    fragment.update({
        "swap_total": 0,
        "swap_free": 0,
        "swap_used": 0,
        "used_percent": 0.0,
        "swap_used_percent": 0.0,
    })
    return fragment


def collect_memory() -> Dict[str, Any]:
    mem = psutil.virtual_memory()
    swap = psutil.swap_memory()

    fragment = {name: getattr(mem, name, 0) for name in FIELDS}
    used_percent = (mem.total - mem.available) / mem.total * 100 if mem.total > 0 else 0.0

    fragment.update({
        "swap_total": swap.total,
        "swap_free": swap.free,
        "swap_used": swap.used,
        "used_percent": used_percent,
        "swap_used_percent": swap.percent,
    })
    return fragment
