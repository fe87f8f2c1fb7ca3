"""
Telemetry Agent - Test Fixtures

Shared fakes for the pipeline tests.
"""

import itertools
from datetime import datetime, timezone

import pytest

from telemetry_agent.api.http import HttpResponse
from telemetry_agent.models import Envelope, Tier


def ok_response(ack_id: str = "ack-1") -> HttpResponse:
    return HttpResponse(
        status=200,
        reason="OK",
        body={
            "success": True,
            "data": {"id": ack_id, "received": True, "timestamp": "2026-01-01T00:00:00.000Z"},
            "timestamp": "2026-01-01T00:00:00.000Z",
        },
    )


class FakeTransport:
    """In-memory stand-in for HttpTransport.

    ``responses`` is consumed in order; each item is an HttpResponse to return
    or an exception to raise. Once exhausted every call succeeds.
    """

    def __init__(self, responses=None, health=None):
        self.responses = list(responses or [])
        self.health = health if health is not None else HttpResponse(status=200, reason="OK")
        self.calls = []
        self.health_calls = []
        self.closed = False

    async def post(self, url, payload, headers, timeout):
        self.calls.append({"url": url, "payload": payload, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0) if self.responses else ok_response()
        if isinstance(item, Exception):
            raise item
        return item

    async def get(self, url, timeout):
        self.health_calls.append(url)
        if isinstance(self.health, Exception):
            raise self.health
        return self.health

    async def close(self):
        self.closed = True


_counter = itertools.count()


def make_envelope(tier: Tier = Tier.HIGH, **payload) -> Envelope:
    return Envelope.capture(
        "test-device",
        tier,
        payload or {"seq": next(_counter)},
        now=datetime.now(timezone.utc),
    )


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def envelope():
    return make_envelope(Tier.HIGH)
