"""Tests for the debounce scheduler and throttle."""

import asyncio
from unittest.mock import patch

import pytest

from smk_app.scheduling import Debouncer, Throttle, schedule


class TestDebouncer:
    """Test trigger coalescing."""

    def test_burst_coalesces_to_one_call_with_latest_state(self):
        """Many triggers inside the window produce one callback that sees the last state."""
        state = {"value": 0}
        seen = []
        debouncer = Debouncer(lambda: seen.append(state["value"]), wait_ms=20)

        async def run():
            for value in range(1, 6):
                state["value"] = value
                debouncer.trigger()
                await asyncio.sleep(0.001)
            assert debouncer.pending
            await asyncio.sleep(0.1)

        asyncio.run(run())

        assert seen == [5]
        assert not debouncer.pending

    def test_separate_bursts_fire_separately(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), wait_ms=10)

        async def run():
            debouncer.trigger()
            await asyncio.sleep(0.05)
            debouncer.trigger()
            await asyncio.sleep(0.05)

        asyncio.run(run())

        assert len(calls) == 2

    def test_flush_invokes_immediately(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1) or len(calls), wait_ms=1000)

        async def run():
            debouncer.trigger()
            result = debouncer.flush()
            assert not debouncer.pending
            await asyncio.sleep(0.01)
            return result

        assert asyncio.run(run()) == 1
        assert calls == [1]

    def test_flush_without_pending_still_invokes(self):
        calls = []
        Debouncer(lambda: calls.append(1)).flush()
        assert calls == [1]

    def test_cancel_drops_pending_call(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), wait_ms=10)

        async def run():
            debouncer.trigger()
            debouncer.cancel()
            await asyncio.sleep(0.05)

        asyncio.run(run())

        assert calls == []

    def test_trigger_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            Debouncer(lambda: None).trigger()

    def test_callback_exception_logged(self):
        def failing():
            raise ValueError("consumer broke")

        debouncer = Debouncer(failing, wait_ms=1)

        async def run():
            debouncer.trigger()
            await asyncio.sleep(0.05)

        with patch("smk_app.scheduling.debounce.logger") as mock_logger:
            asyncio.run(run())

        mock_logger.exception.assert_called_once()
        assert not debouncer.pending

    def test_schedule_returns_trigger(self):
        calls = []

        async def run():
            trigger = schedule(lambda: calls.append(1), wait_ms=10)
            trigger()
            trigger()
            await asyncio.sleep(0.05)

        asyncio.run(run())

        assert calls == [1]


class TestThrottle:
    """Test at-most-once-per-window calls."""

    def test_calls_inside_window_dropped(self):
        now = {"t": 100.0}
        calls = []
        throttle = Throttle(calls.append, wait_ms=100, clock=lambda: now["t"])

        assert throttle(1) is True
        now["t"] += 0.05
        assert throttle(2) is False
        now["t"] += 0.06
        assert throttle(3) is True

        assert calls == [1, 3]

    def test_reset(self):
        calls = []
        throttle = Throttle(calls.append, wait_ms=1000, clock=lambda: 5.0)

        throttle("a")
        throttle.reset()
        throttle("b")

        assert calls == ["a", "b"]

    def test_zero_window_passes_everything(self):
        calls = []
        throttle = Throttle(calls.append, wait_ms=0, clock=lambda: 1.0)

        throttle(1)
        throttle(2)

        assert calls == [1, 2]
