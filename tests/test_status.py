"""Tests for progress reporting."""

import asyncio

import pytest

from slackbot.services.status import StatusReporter


class TestStatusReporter:
    """Tests for the fire-and-forget status sink."""

    def test_no_callback(self):
        StatusReporter().report("nothing listens")

    def test_sync_callback(self):
        received = []
        StatusReporter(received.append).report("Searching...")

        assert received == ["Searching..."]

    def test_sync_callback_failure_swallowed(self):
        """Test that a raising sink never interrupts the caller."""

        def explode(status):
            raise RuntimeError("sink down")

        StatusReporter(explode).report("Searching...")

    @pytest.mark.asyncio
    async def test_async_callback_not_awaited_by_report(self):
        """Test that report returns before a coroutine sink completes."""
        started = asyncio.Event()
        release = asyncio.Event()
        received = []

        async def slow_sink(status):
            started.set()
            await release.wait()
            received.append(status)

        reporter = StatusReporter(slow_sink)
        reporter.report("Fetching tools...")
        assert received == []

        await started.wait()
        release.set()
        await reporter.drain()

        assert received == ["Fetching tools..."]

    @pytest.mark.asyncio
    async def test_async_callback_failure_swallowed(self):
        async def explode(status):
            raise RuntimeError("slack is down")

        reporter = StatusReporter(explode)
        reporter.report("Calling tool...")

        await reporter.drain()
        assert not reporter._pending
