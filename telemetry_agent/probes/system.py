"""
Telemetry Agent - System Probe

Display backlight, LEDs, rfkill switches and the wakeup counter.
"""

import re
from typing import Any, Dict, List, Optional

from .sysfs import list_dir, read_bool, read_int, read_str

BACKLIGHT = "/sys/class/backlight/backlight"
LEDS = "/sys/class/leds"
RFKILL = "/sys/class/rfkill"
WAKEUP_COUNT = "/sys/power/wakeup_count"

RFKILL_TYPES = {"bluetooth": "bluetooth", "wlan": "wifi"}


def default_system() -> Dict[str, Any]:
    return {
        "display": {"brightness": 0, "max_brightness": 1, "brightness_percent": 0.0, "power": False},
        "leds": [],
        "rfkill": [],
        "wakeup_count": 0,
    }


def _display() -> Dict[str, Any]:
    brightness = read_int(f"{BACKLIGHT}/brightness") or 0
    max_brightness = read_int(f"{BACKLIGHT}/max_brightness") or 1
    return {
        "brightness": brightness,
        "max_brightness": max_brightness,
        "brightness_percent": brightness / max_brightness * 100 if max_brightness > 0 else 0.0,
        "power": read_int(f"{BACKLIGHT}/bl_power") == 0,  # 0 = on, 4 = off
    }


def _led(name: str) -> Dict[str, Any]:
    base = f"{LEDS}/{name}"
    trigger = read_str(f"{base}/trigger") or ""
    match = re.search(r"\[([\w-]+)\]", trigger)
    return {
        "name": name,
        "brightness": read_int(f"{base}/brightness") or 0,
        "max_brightness": read_int(f"{base}/max_brightness") or 1,
        "trigger": match.group(1) if match else "none",
    }


def _rfkill(name: str) -> Optional[Dict[str, Any]]:
    base = f"{RFKILL}/{name}"
    kind = read_str(f"{base}/type")
    if not kind:
        return None
    return {
        "type": RFKILL_TYPES.get(kind, "wwan"),
        "name": name,
        "soft_blocked": bool(read_bool(f"{base}/soft")),
        "hard_blocked": bool(read_bool(f"{base}/hard")),
    }


def collect_system() -> Dict[str, Any]:
    leds = [_led(name) for name in list_dir(LEDS) if not name.startswith(".")]
    rfkill: List[Dict[str, Any]] = [
        d for d in (_rfkill(name) for name in list_dir(RFKILL) if name.startswith("rfkill")) if d
    ]
    return {
        "display": _display(),
        "leds": leds,
        "rfkill": rfkill,
        "wakeup_count": read_int(WAKEUP_COUNT) or 0,
    }
