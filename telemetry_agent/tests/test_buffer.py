"""
Telemetry Agent - Offline Buffer Tests
"""

import pytest

from conftest import make_envelope
from telemetry_agent.api.buffer import OfflineBuffer


class TestOfflineBuffer:
    """Test bounded FIFO behaviour."""

    def test_push_and_pop_in_arrival_order(self):
        """Entries come back oldest first."""
        buffer = OfflineBuffer(max_size=10)
        envelopes = [make_envelope() for _ in range(3)]

        for e in envelopes:
            buffer.push(e)

        assert len(buffer) == 3
        assert buffer.peek_oldest() is envelopes[0]
        assert [buffer.pop_oldest() for _ in range(3)] == envelopes
        assert len(buffer) == 0

    def test_overflow_keeps_most_recent_in_order(self):
        """Pushing max_size + k entries keeps the newest max_size."""
        max_size, extra = 5, 3
        buffer = OfflineBuffer(max_size=max_size)
        envelopes = [make_envelope() for _ in range(max_size + extra)]

        for e in envelopes:
            buffer.push(e)
            assert len(buffer) <= max_size

        assert buffer.size() == max_size
        assert list(buffer) == envelopes[extra:]

    def test_peek_empty(self):
        """Peeking an empty buffer returns None."""
        assert OfflineBuffer().peek_oldest() is None

    def test_pop_empty_raises(self):
        """Popping an empty buffer raises IndexError."""
        with pytest.raises(IndexError):
            OfflineBuffer().pop_oldest()

    def test_default_capacity(self):
        """Default capacity is 1000."""
        assert OfflineBuffer().max_size == 1000

    def test_invalid_capacity(self):
        """Capacity must be positive."""
        with pytest.raises(ValueError):
            OfflineBuffer(max_size=0)

    def test_iteration_does_not_consume(self):
        """Iterating leaves the buffer untouched."""
        buffer = OfflineBuffer(max_size=3)
        buffer.push(make_envelope())
        buffer.push(make_envelope())

        assert len(list(buffer)) == 2
        assert len(buffer) == 2
