"""
Telemetry Agent - sysfs/procfs Readers

Tolerant readers for kernel attribute files. Missing or unreadable files
yield None (or an empty list) instead of raising.
"""

import os
from typing import List, Optional


def read_str(path: str) -> Optional[str]:
    try:
        with open(path, "r") as f:
            return f.read().strip()
    except (OSError, UnicodeDecodeError):
        return None


def read_int(path: str) -> Optional[int]:
    text = read_str(path)
    if text is None:
        return None
    try:
        return int(text.split()[0])
    except (ValueError, IndexError):
        return None


def read_float(path: str) -> Optional[float]:
    text = read_str(path)
    if text is None:
        return None
    try:
        return float(text.split()[0])
    except (ValueError, IndexError):
        return None


def read_bool(path: str) -> Optional[bool]:
    """Read 0/1, true/false or yes/no."""
    text = read_str(path)
    if text is None:
        return None
    return text == "1" or text.lower() in ("true", "yes")


def read_int_list(path: str) -> List[int]:
    """Read whitespace separated integers."""
    text = read_str(path)
    if text is None:
        return []
    values = []
    for token in text.split():
        try:
            values.append(int(token))
        except ValueError:
            continue
    return values


def list_dir(path: str) -> List[str]:
    try:
        return sorted(os.listdir(path))
    except OSError:
        return []


def parse_cpu_list(text: Optional[str]) -> List[int]:
    """Expand a kernel cpu list like '0-3,5' into [0, 1, 2, 3, 5]."""
    if not text:
        return []
    cpus: List[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = part.split("-", 1)
                cpus.extend(range(int(start), int(end) + 1))
            else:
                cpus.append(int(part))
        except ValueError:
            continue
    return cpus


def ua_to_a(ua: float) -> float:
    return ua / 1_000_000


def uv_to_v(uv: float) -> float:
    return uv / 1_000_000


def mc_to_c(mc: float) -> float:
    """Millidegrees Celsius to Celsius."""
    return mc / 1000


def khz_to_mhz(khz: float) -> float:
    return khz / 1000


def hz_to_mhz(hz: float) -> float:
    return hz / 1_000_000
