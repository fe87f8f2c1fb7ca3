"""
Telemetry Agent - Delivery Errors

Failure taxonomy for collector deliveries.
"""

from enum import Enum


class TransportError(Exception):
    """Request never produced an HTTP response (connection error, timeout)."""


class DeliveryOutcome(str, Enum):
    """How a single delivery attempt ended."""
    SUCCESS = "success"
    RETRYABLE = "retryable"   # transport failure, 5xx, malformed body
    TERMINAL = "terminal"     # 4xx, retrying will not help


def classify_status(status: int) -> DeliveryOutcome:
    """Classify an HTTP status code for the retry loop."""
    if 200 <= status < 300:
        return DeliveryOutcome.SUCCESS
    if 400 <= status < 500:
        return DeliveryOutcome.TERMINAL
    return DeliveryOutcome.RETRYABLE
