"""Tests for timers and auto-relock scheduling."""

import asyncio

import pytest

from scheduling import AutoRelockScheduler, Timer


class TestTimer:
    """Tests for Timer."""

    @pytest.mark.asyncio
    async def test_fires_once(self):
        """Test a timer fires after its delay."""
        fired = []
        timer = Timer("test")
        timer.arm(0.02, lambda: fired.append(True))

        assert timer.pending
        assert timer.due_at is not None
        await asyncio.sleep(0.06)

        assert fired == [True]
        assert not timer.pending
        assert timer.due_at is None

    @pytest.mark.asyncio
    async def test_rearm_replaces_pending(self):
        """Arming again cancels the earlier firing."""
        fired = []
        timer = Timer("test")
        timer.arm(0.02, lambda: fired.append("first"))
        timer.arm(0.04, lambda: fired.append("second"))
        await asyncio.sleep(0.1)

        assert fired == ["second"]

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test cancelling a pending timer."""
        fired = []
        timer = Timer("test")
        timer.arm(0.02, lambda: fired.append(True))

        assert timer.cancel() is True
        assert timer.cancel() is False
        await asyncio.sleep(0.05)

        assert fired == []

    @pytest.mark.asyncio
    async def test_callback_error_is_contained(self, caplog):
        """A failing callback is logged and the timer stays usable."""
        fired = []
        timer = Timer("test")

        def boom():
            raise RuntimeError("boom")

        timer.arm(0.01, boom)
        await asyncio.sleep(0.03)
        timer.arm(0.01, lambda: fired.append(True))
        await asyncio.sleep(0.03)

        assert "callback failed" in caplog.text
        assert fired == [True]


class TestAutoRelockScheduler:
    """Tests for AutoRelockScheduler."""

    @pytest.mark.asyncio
    async def test_fires_after_duration(self):
        """Test the relock callback runs once."""
        fired = []
        relock = AutoRelockScheduler("Gate", lambda: fired.append(True))
        relock.arm(0.02)
        await asyncio.sleep(0.06)

        assert fired == [True]
        assert relock.fire_count == 1
        assert not relock.pending

    @pytest.mark.asyncio
    async def test_rearm_extends_window(self):
        """The most recent arm wins."""
        relock = AutoRelockScheduler("Gate", lambda: None)
        relock.arm(0.05)
        first_due = relock.due_at
        await asyncio.sleep(0.02)
        relock.arm(0.05)

        assert relock.due_at > first_due
        await asyncio.sleep(0.04)
        assert relock.fire_count == 0
        await asyncio.sleep(0.04)
        assert relock.fire_count == 1

    @pytest.mark.asyncio
    async def test_cancel(self):
        """Test a cancelled relock never fires."""
        relock = AutoRelockScheduler("Gate", lambda: None)
        relock.arm(0.02)
        relock.cancel()
        await asyncio.sleep(0.05)

        assert relock.fire_count == 0
