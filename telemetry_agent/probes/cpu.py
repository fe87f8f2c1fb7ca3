"""
Telemetry Agent - CPU Probes

Per-core frequency and governor, CPU times, load average and uptime for the
high tier; time-in-state and cpuidle statistics for the medium tier.
"""

import time
from typing import Any, Dict, List, Optional

import psutil

from .sysfs import khz_to_mhz, list_dir, parse_cpu_list, read_int, read_str

CPU_BASE = "/sys/devices/system/cpu"
JIFFY_MS = 10  # USER_HZ=100


def default_cpu() -> Dict[str, Any]:
    return {
        "frequencies": [],
        "cpu_times": [],
        "load_average": {
            "load1": 0.0,
            "load5": 0.0,
            "load15": 0.0,
            "running_processes": 0,
            "total_processes": 0,
        },
        "uptime": 0.0,
        "idle_time": 0.0,
        "online_cpus": [],
        "offline_cpus": [],
    }


def default_cpu_stats() -> Dict[str, Any]:
    return {"frequency_stats": [], "idle_stats": []}


def _cpu_indices() -> List[int]:
    online = parse_cpu_list(read_str(f"{CPU_BASE}/online"))
    if online:
        return online
    return list(range(psutil.cpu_count() or 0))


def _frequency(cpu: int) -> Optional[Dict[str, Any]]:
    base = f"{CPU_BASE}/cpu{cpu}/cpufreq"
    current = read_int(f"{base}/scaling_cur_freq")
    if current is None:
        return None

    return {
        "cpu": cpu,
        "current_freq": khz_to_mhz(current),
        "min_freq": khz_to_mhz(read_int(f"{base}/scaling_min_freq") or 0),
        "max_freq": khz_to_mhz(read_int(f"{base}/scaling_max_freq") or 0),
        "hardware_min_freq": khz_to_mhz(read_int(f"{base}/cpuinfo_min_freq") or 0),
        "hardware_max_freq": khz_to_mhz(read_int(f"{base}/cpuinfo_max_freq") or 0),
        "governor": read_str(f"{base}/scaling_governor") or "unknown",
    }


def _cpu_times() -> List[Dict[str, Any]]:
    def as_ms(label: str, times) -> Dict[str, Any]:
        return {
            "cpu": label,
            "user": round(times.user * 1000),
            "nice": round(getattr(times, "nice", 0.0) * 1000),
            "system": round(times.system * 1000),
            "idle": round(times.idle * 1000),
            "iowait": round(getattr(times, "iowait", 0.0) * 1000),
            "irq": round(getattr(times, "irq", 0.0) * 1000),
            "softirq": round(getattr(times, "softirq", 0.0) * 1000),
            "steal": round(getattr(times, "steal", 0.0) * 1000),
        }

    result = [as_ms("cpu", psutil.cpu_times())]
    for i, times in enumerate(psutil.cpu_times(percpu=True)):
        result.append(as_ms(f"cpu{i}", times))
    return result


def _load_average() -> Dict[str, Any]:
    load1, load5, load15 = psutil.getloadavg()
    running, total = 0, 0

    # /proc/loadavg: "0.52 0.58 0.59 2/412 12345"
    content = read_str("/proc/loadavg")
    if content:
        parts = content.split()
        if len(parts) >= 4 and "/" in parts[3]:
            try:
                running, total = (int(x) for x in parts[3].split("/", 1))
            except ValueError:
                pass

    return {
        "load1": load1,
        "load5": load5,
        "load15": load15,
        "running_processes": running,
        "total_processes": total,
    }


def _uptime() -> Dict[str, float]:
    content = read_str("/proc/uptime")
    if content:
        try:
            uptime, idle = (float(x) for x in content.split()[:2])
            return {"uptime": uptime, "idle_time": idle}
        except ValueError:
            pass
    return {"uptime": max(0.0, time.time() - psutil.boot_time()), "idle_time": 0.0}


def collect_cpu() -> Dict[str, Any]:
    cpus = _cpu_indices()
    frequencies = [f for f in (_frequency(c) for c in cpus) if f is not None]

    return {
        "frequencies": frequencies,
        "cpu_times": _cpu_times(),
        "load_average": _load_average(),
        **_uptime(),
        "online_cpus": cpus,
        "offline_cpus": parse_cpu_list(read_str(f"{CPU_BASE}/offline")),
    }


def _frequency_stats(cpu: int) -> Optional[Dict[str, Any]]:
    base = f"{CPU_BASE}/cpu{cpu}/cpufreq/stats"
    raw = read_str(f"{base}/time_in_state")
    if raw is None:
        return None

    # "freq_khz time_jiffies" per line
    time_in_state = []
    for line in raw.splitlines():
        parts = line.split()
        if len(parts) != 2:
            continue
        try:
            freq, jiffies = int(parts[0]), int(parts[1])
        except ValueError:
            continue
        time_in_state.append({"frequency": khz_to_mhz(freq), "time_ms": jiffies * JIFFY_MS})

    return {
        "cpu": cpu,
        "time_in_state": time_in_state,
        "total_transitions": read_int(f"{base}/total_trans") or 0,
    }


def _idle_stats(cpu: int) -> Optional[Dict[str, Any]]:
    base = f"{CPU_BASE}/cpu{cpu}/cpuidle"
    states = []
    for entry in list_dir(base):
        if not entry.startswith("state"):
            continue
        try:
            index = int(entry[len("state"):])
        except ValueError:
            continue
        state_dir = f"{base}/{entry}"
        states.append({
            "index": index,
            "name": read_str(f"{state_dir}/name") or "",
            "description": read_str(f"{state_dir}/desc") or "",
            "usage": read_int(f"{state_dir}/usage") or 0,
            "time_us": read_int(f"{state_dir}/time") or 0,
            "latency_us": read_int(f"{state_dir}/latency") or 0,
        })

    if not states:
        return None
    states.sort(key=lambda s: s["index"])
    return {"cpu": cpu, "states": states}


def collect_cpu_stats() -> Dict[str, Any]:
    cpus = _cpu_indices()
    return {
        "frequency_stats": [s for s in (_frequency_stats(c) for c in cpus) if s is not None],
        "idle_stats": [s for s in (_idle_stats(c) for c in cpus) if s is not None],
    }
