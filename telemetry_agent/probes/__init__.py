"""
Telemetry Agent - Probes Package

Probes read one slice of device state each:
- power: battery, USB input, USB-C PD, Type-C port
- thermal: thermal zones and cooling devices
- cpu / cpu_stats: frequencies, times, load; time-in-state and idle states
- gpu: Panfrost devfreq
- memory, network, storage, processes: psutil backed counters
- sensors: IIO light, proximity, IMU, magnetometer, ADC
- system: backlight, LEDs, rfkill, wakeup count
"""

from .base import FunctionProbe, Probe
from .registry import build_probes

__all__ = [
    "FunctionProbe",
    "Probe",
    "build_probes",
]
