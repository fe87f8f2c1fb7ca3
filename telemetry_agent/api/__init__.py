"""
Telemetry Agent - API Package

Collector delivery:
- Transporter: retrying sender with offline fallback and drain
- OfflineBuffer: bounded FIFO of undelivered envelopes
- HttpTransport: aiohttp session wrapper
"""

from .buffer import OfflineBuffer
from .errors import DeliveryOutcome, TransportError, classify_status
from .http import HttpResponse, HttpTransport
from .transporter import Transporter

__all__ = [
    "DeliveryOutcome",
    "HttpResponse",
    "HttpTransport",
    "OfflineBuffer",
    "Transporter",
    "TransportError",
    "classify_status",
]
