"""
Telemetry Agent - Storage Probe

Block device I/O counters for the eMMC, SD card and zram devices.
"""

from typing import Any, Dict

import psutil

from .sysfs import read_int

SECTOR_SIZE = 512
DEVICES = ("mmcblk1", "mmcblk2", "zram0")


def default_storage() -> Dict[str, Any]:
    return {
        "devices": [],
        "total_bytes_read": 0,
        "total_bytes_written": 0,
        "total_io_time_ms": 0,
    }


def device_type(name: str) -> str:
    if name.startswith("mmcblk2"):
        return "emmc"
    if name.startswith("mmcblk1"):
        return "sdcard"
    if name.startswith("zram"):
        return "zram"
    if name.startswith("loop"):
        return "loop"
    return "other"


def collect_storage() -> Dict[str, Any]:
    counters = psutil.disk_io_counters(perdisk=True) or {}
    fragment = default_storage()

    for name in DEVICES:
        io = counters.get(name)
        if io is None:
            continue

        io_time_ms = getattr(io, "busy_time", 0)
        fragment["devices"].append({
            "name": name,
            "type": device_type(name),
            "size": (read_int(f"/sys/block/{name}/size") or 0) * SECTOR_SIZE,
            "stats": {
                "reads_completed": io.read_count,
                "reads_merged": getattr(io, "read_merged_count", 0),
                "read_time_ms": io.read_time,
                "writes_completed": io.write_count,
                "writes_merged": getattr(io, "write_merged_count", 0),
                "write_time_ms": io.write_time,
                "io_time_ms": io_time_ms,
            },
            "bytes_read": io.read_bytes,
            "bytes_written": io.write_bytes,
        })
        fragment["total_bytes_read"] += io.read_bytes
        fragment["total_bytes_written"] += io.write_bytes
        fragment["total_io_time_ms"] += io_time_ms

    return fragment
