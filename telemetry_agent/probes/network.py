"""
Telemetry Agent - Network Probe

Per-interface counters and link state.
"""

from typing import Any, Dict

import psutil

from .sysfs import read_bool, read_int, read_str

NET = "/sys/class/net"


def default_network() -> Dict[str, Any]:
    return {"interfaces": [], "total_rx_bytes": 0, "total_tx_bytes": 0}


def interface_type(name: str) -> str:
    if name == "lo":
        return "loopback"
    if name.startswith(("wlan", "wlp")):
        return "wifi"
    if name.startswith(("wwan", "rmnet", "ppp")):
        return "cellular"
    if name.startswith("usb"):
        return "usb"
    return "other"


def collect_network() -> Dict[str, Any]:
    counters = psutil.net_io_counters(pernic=True)
    stats = psutil.net_if_stats()
    addrs = psutil.net_if_addrs()

    interfaces = []
    total_rx = 0
    total_tx = 0

    for name, io in sorted(counters.items()):
        if_stats = stats.get(name)
        mac = next(
            (a.address for a in addrs.get(name, []) if a.family == psutil.AF_LINK),
            "",
        )

        interfaces.append({
            "name": name,
            "type": interface_type(name),
            "address": mac,
            "carrier": bool(read_bool(f"{NET}/{name}/carrier")),
            "carrier_changes": read_int(f"{NET}/{name}/carrier_changes") or 0,
            "operstate": read_str(f"{NET}/{name}/operstate") or ("up" if if_stats and if_stats.isup else "unknown"),
            "mtu": if_stats.mtu if if_stats else 0,
            "stats": {
                "rx_bytes": io.bytes_recv,
                "tx_bytes": io.bytes_sent,
                "rx_packets": io.packets_recv,
                "tx_packets": io.packets_sent,
                "rx_errors": io.errin,
                "tx_errors": io.errout,
                "rx_dropped": io.dropin,
                "tx_dropped": io.dropout,
            },
        })

        if name != "lo":
            total_rx += io.bytes_recv
            total_tx += io.bytes_sent

    return {"interfaces": interfaces, "total_rx_bytes": total_rx, "total_tx_bytes": total_tx}
