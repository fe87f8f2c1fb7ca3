"""
Telemetry Agent

Samples Pinephone hardware and OS state on three cadence tiers and ships
snapshots to a remote collector over HTTP:
- Probes read power, thermal, CPU, GPU, memory, network, storage, sensors,
  processes and system state
- The aggregator assembles one payload per tier, tolerating probe failures
- The scheduler drives the high/medium/low cadences
- The transporter delivers envelopes with retry and an offline buffer
"""

__version__ = "1.0.0"
