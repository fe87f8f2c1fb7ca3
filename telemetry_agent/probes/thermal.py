"""
Telemetry Agent - Thermal Probe

Thermal zones and cooling devices. Zone 0 is the battery, 1 the CPU and
2 the GPU on the Pinephone Pro.
"""

from typing import Any, Dict, List, Optional

from .sysfs import list_dir, mc_to_c, read_int, read_str

THERMAL = "/sys/class/thermal"
KNOWN_ZONES = (0, 1, 2)


def default_thermal() -> Dict[str, Any]:
    return {
        "zones": [],
        "cooling_devices": [],
        "battery_temp": 0.0,
        "cpu_temp": 0.0,
        "gpu_temp": 0.0,
    }


def _zone(index: int) -> Optional[Dict[str, Any]]:
    base = f"{THERMAL}/thermal_zone{index}"
    temp = read_int(f"{base}/temp")
    if temp is None:
        return None

    return {
        "zone": index,
        "type": read_str(f"{base}/type") or "unknown",
        "temperature": mc_to_c(temp),
    }


def _cooling_device(index: int) -> Optional[Dict[str, Any]]:
    base = f"{THERMAL}/cooling_device{index}"
    device_type = read_str(f"{base}/type")
    if device_type is None:
        return None

    return {
        "index": index,
        "type": device_type,
        "current_state": read_int(f"{base}/cur_state") or 0,
        "max_state": read_int(f"{base}/max_state") or 0,
    }


def collect_thermal() -> Dict[str, Any]:
    zones = [z for z in (_zone(i) for i in KNOWN_ZONES) if z is not None]

    indices: List[int] = []
    for entry in list_dir(THERMAL):
        if entry.startswith("cooling_device"):
            try:
                indices.append(int(entry[len("cooling_device"):]))
            except ValueError:
                continue
    cooling = [c for c in (_cooling_device(i) for i in sorted(indices)) if c is not None]

    temps = {z["zone"]: z["temperature"] for z in zones}
    return {
        "zones": zones,
        "cooling_devices": cooling,
        "battery_temp": temps.get(0, 0.0),
        "cpu_temp": temps.get(1, 0.0),
        "gpu_temp": temps.get(2, 0.0),
    }
