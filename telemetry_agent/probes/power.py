"""
Telemetry Agent - Power Probe

RK818 battery, RK818 USB input, USB-C PD source and Type-C port state.
"""

import re
from typing import Any, Dict, Optional

from .sysfs import read_bool, read_int, read_str, ua_to_a, uv_to_v

BATTERY = "/sys/class/power_supply/rk818-battery"
USB_INPUT = "/sys/class/power_supply/rk818-usb"
USB_C_PD = "/sys/class/power_supply/tcpm-source-psy-4-0022"
TYPE_C_PORT = "/sys/class/typec/port0"


def _bracketed(text: Optional[str], fallback: str) -> str:
    """Pick the selected entry of a '[x] y z' style attribute."""
    if not text:
        return fallback
    match = re.search(r"\[(\w+)\]", text)
    if match:
        return match.group(1)
    return text.split()[0]


def default_power() -> Dict[str, Any]:
    return {
        "battery": {
            "capacity": 0,
            "status": "Unknown",
            "voltage": 0.0,
            "current": 0.0,
            "temperature": 0.0,
            "charge_full": 0.0,
            "charge_full_design": 0.0,
            "health": "Unknown",
            "present": False,
            "charge_type": "Unknown",
            "energy_full_design": 0.0,
        },
        "usb_input": {
            "present": False,
            "health": "Unknown",
            "input_current_limit": 0.0,
            "input_voltage_limit": 0.0,
        },
        "usb_c_pd": {
            "online": False,
            "voltage": 0.0,
            "voltage_min": 0.0,
            "voltage_max": 0.0,
            "current": 0.0,
            "current_max": 0.0,
            "usb_type": "Unknown",
        },
        "type_c_port": {
            "data_role": "device",
            "power_role": "sink",
            "orientation": "unknown",
            "power_operation_mode": "default",
            "vconn_source": False,
        },
    }


def _battery() -> Dict[str, Any]:
    return {
        "capacity": read_int(f"{BATTERY}/capacity") or 0,
        "status": read_str(f"{BATTERY}/status") or "Unknown",
        "voltage": uv_to_v(read_int(f"{BATTERY}/voltage_now") or 0),
        "current": ua_to_a(read_int(f"{BATTERY}/current_now") or 0),
        "temperature": (read_int(f"{BATTERY}/temp") or 0) / 10,  # 0.1 °C units
        "charge_full": (read_int(f"{BATTERY}/charge_full") or 0) / 1000,  # µAh -> mAh
        "charge_full_design": (read_int(f"{BATTERY}/charge_full_design") or 0) / 1000,
        "health": read_str(f"{BATTERY}/health") or "Unknown",
        "present": bool(read_bool(f"{BATTERY}/present")),
        "charge_type": read_str(f"{BATTERY}/charge_type") or "Unknown",
        "energy_full_design": (read_int(f"{BATTERY}/energy_full_design") or 0) / 1_000_000,  # µWh -> Wh
    }


def _usb_input() -> Dict[str, Any]:
    return {
        "present": bool(read_bool(f"{USB_INPUT}/present")),
        "health": read_str(f"{USB_INPUT}/health") or "Unknown",
        "input_current_limit": ua_to_a(read_int(f"{USB_INPUT}/input_current_limit") or 0),
        "input_voltage_limit": uv_to_v(read_int(f"{USB_INPUT}/input_voltage_limit") or 0),
    }


def _usb_c_pd() -> Dict[str, Any]:
    return {
        "online": bool(read_bool(f"{USB_C_PD}/online")),
        "voltage": uv_to_v(read_int(f"{USB_C_PD}/voltage_now") or 0),
        "voltage_min": uv_to_v(read_int(f"{USB_C_PD}/voltage_min") or 0),
        "voltage_max": uv_to_v(read_int(f"{USB_C_PD}/voltage_max") or 0),
        "current": ua_to_a(read_int(f"{USB_C_PD}/current_now") or 0),
        "current_max": ua_to_a(read_int(f"{USB_C_PD}/current_max") or 0),
        "usb_type": _bracketed(read_str(f"{USB_C_PD}/usb_type"), "Unknown"),
    }


def _type_c_port() -> Dict[str, Any]:
    return {
        "data_role": read_str(f"{TYPE_C_PORT}/data_role") or "device",
        "power_role": read_str(f"{TYPE_C_PORT}/power_role") or "sink",
        "orientation": read_str(f"{TYPE_C_PORT}/orientation") or "unknown",
        "power_operation_mode": read_str(f"{TYPE_C_PORT}/power_operation_mode") or "default",
        "vconn_source": bool(read_bool(f"{TYPE_C_PORT}/vconn_source")),
    }


def collect_power() -> Dict[str, Any]:
    return {
        "battery": _battery(),
        "usb_input": _usb_input(),
        "usb_c_pd": _usb_c_pd(),
        "type_c_port": _type_c_port(),
    }
