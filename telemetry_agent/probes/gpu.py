"""
Telemetry Agent - GPU Probe

Mali T860 (Panfrost) devfreq state.
"""

from typing import Any, Dict

from .sysfs import hz_to_mhz, read_int, read_int_list, read_str

DEVFREQ = "/sys/devices/platform/ff9a0000.gpu/devfreq/ff9a0000.gpu"


def default_gpu() -> Dict[str, Any]:
    return {
        "frequency": {
            "current_freq": 0.0,
            "target_freq": 0.0,
            "min_freq": 0.0,
            "max_freq": 0.0,
            "governor": "unknown",
            "available_frequencies": [],
            "polling_interval_ms": 0,
        },
    }


def collect_gpu() -> Dict[str, Any]:
    return {
        "frequency": {
            "current_freq": hz_to_mhz(read_int(f"{DEVFREQ}/cur_freq") or 0),
            "target_freq": hz_to_mhz(read_int(f"{DEVFREQ}/target_freq") or 0),
            "min_freq": hz_to_mhz(read_int(f"{DEVFREQ}/min_freq") or 0),
            "max_freq": hz_to_mhz(read_int(f"{DEVFREQ}/max_freq") or 0),
            "governor": read_str(f"{DEVFREQ}/governor") or "unknown",
            "available_frequencies": [
                hz_to_mhz(f) for f in read_int_list(f"{DEVFREQ}/available_frequencies") if f > 0
            ],
            "polling_interval_ms": read_int(f"{DEVFREQ}/polling_interval") or 0,
        },
    }
