"""Unit tests for the periodic metrics pusher."""

import asyncio

import pytest

from httpmeter.adapters.metrics_pusher import FakeMetricsPusher
from httpmeter.core.metrics_pusher import PeriodicMetricsPusher


class TestPeriodicMetricsPusher:
    """Tests for the background push loop."""

    @pytest.mark.asyncio
    async def test_pushes_on_interval(self):
        fake = FakeMetricsPusher()
        pusher = PeriodicMetricsPusher(fake, interval=0.01)

        await pusher.start()
        # Give the loop enough time for at least one tick.
        await asyncio.sleep(0.05)
        await pusher.stop(flush=False)

        assert fake.push_count >= 1

    @pytest.mark.asyncio
    async def test_stop_flushes_once(self):
        fake = FakeMetricsPusher()
        pusher = PeriodicMetricsPusher(fake, interval=60)

        await pusher.start()
        await pusher.stop()

        assert fake.push_count == 1
        assert pusher._task is None
        assert not pusher.running

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self):
        pusher = PeriodicMetricsPusher(FakeMetricsPusher(), interval=60)

        await pusher.start()
        task = pusher._task
        await pusher.start()

        assert pusher._task is task
        await pusher.stop(flush=False)

    @pytest.mark.asyncio
    async def test_stop_is_safe_when_not_started(self):
        fake = FakeMetricsPusher()
        pusher = PeriodicMetricsPusher(fake)

        await pusher.stop()  # no-op

        assert fake.push_count == 0

    @pytest.mark.asyncio
    async def test_push_error_does_not_crash_loop(self):
        """A failing collector is logged; the loop keeps trying."""
        fake = FakeMetricsPusher(fail_with=ConnectionError("gateway down"))
        pusher = PeriodicMetricsPusher(fake, interval=0.01)

        await pusher.start()
        await asyncio.sleep(0.05)
        assert pusher.running
        await pusher.stop()

        assert fake.failed_count >= 2
        assert fake.push_count == 0

    @pytest.mark.asyncio
    async def test_push_once_reports_failure(self):
        pusher = PeriodicMetricsPusher(FakeMetricsPusher(fail_with=OSError("nope")))
        assert await pusher.push_once() is False

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            PeriodicMetricsPusher(FakeMetricsPusher(), interval=0)
