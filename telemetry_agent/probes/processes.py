"""
Telemetry Agent - Processes Probe

Top processes by accumulated CPU time plus a system-wide state summary.
"""

from typing import Any, Dict, List

import psutil

ATTRS = [
    "pid", "ppid", "name", "status", "cpu_times", "memory_info",
    "memory_percent", "num_threads", "nice", "create_time", "cmdline",
]


def default_processes() -> Dict[str, Any]:
    return {
        "processes": [],
        "summary": {"total": 0, "running": 0, "sleeping": 0, "zombie": 0, "stopped": 0},
        "total_cpu_time": 0,
        "context_switches": 0,
        "processes_created": 0,
    }


def _summarize(statuses: List[str]) -> Dict[str, int]:
    return {
        "total": len(statuses),
        "running": statuses.count(psutil.STATUS_RUNNING),
        "sleeping": sum(1 for s in statuses if s in (psutil.STATUS_SLEEPING, psutil.STATUS_DISK_SLEEP, psutil.STATUS_IDLE)),
        "zombie": statuses.count(psutil.STATUS_ZOMBIE),
        "stopped": sum(1 for s in statuses if s in (psutil.STATUS_STOPPED, psutil.STATUS_TRACING_STOP)),
    }


def _oom_score(pid: int) -> int:
    try:
        with open(f"/proc/{pid}/oom_score", "r") as f:
            return int(f.read().strip())
    except (OSError, ValueError):
        return 0


def collect_processes(max_processes: int = 50) -> Dict[str, Any]:
    entries = []
    statuses = []

    for proc in psutil.process_iter(ATTRS):
        info = proc.info
        statuses.append(info.get("status") or "")

        cpu_times = info.get("cpu_times")
        memory = info.get("memory_info")
        user_ms = round(cpu_times.user * 1000) if cpu_times else 0
        system_ms = round(cpu_times.system * 1000) if cpu_times else 0

        entries.append({
            "pid": info["pid"],
            "ppid": info.get("ppid") or 0,
            "name": info.get("name") or "",
            "state": info.get("status") or "",
            "user_time_ms": user_ms,
            "system_time_ms": system_ms,
            "total_cpu_time_ms": user_ms + system_ms,
            "vsize": memory.vms if memory else 0,
            "rss": memory.rss if memory else 0,
            "memory_percent": info.get("memory_percent") or 0.0,
            "num_threads": info.get("num_threads") or 0,
            "nice": info.get("nice") or 0,
            "start_time": info.get("create_time") or 0.0,
            "cmdline": " ".join(info.get("cmdline") or []),
        })

    entries.sort(key=lambda p: p["total_cpu_time_ms"], reverse=True)
    top = entries[:max_processes]
    for entry in top:
        entry["oom_score"] = _oom_score(entry["pid"])

    stats = psutil.cpu_stats()
    created = 0
    try:
        with open("/proc/stat", "r") as f:
            for line in f:
                if line.startswith("processes "):
                    created = int(line.split()[1])
                    break
    except (OSError, ValueError, IndexError):
        pass

    return {
        "processes": top,
        "summary": _summarize(statuses),
        "total_cpu_time": sum(p["total_cpu_time_ms"] for p in entries),
        "context_switches": stats.ctx_switches,
        "processes_created": created,
    }
