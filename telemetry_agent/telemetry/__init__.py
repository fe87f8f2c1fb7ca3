"""
Telemetry Agent - Telemetry Package

Collection pipeline: the aggregator builds tier payloads from probes and the
scheduler drives the three cadences.
"""

from .aggregator import Aggregator, ProbeResult
from .scheduler import Scheduler

__all__ = ["Aggregator", "ProbeResult", "Scheduler"]
