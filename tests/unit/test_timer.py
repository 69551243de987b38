"""Unit tests for the step countdown timer."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from cookalong.state.timer import StepTimer, TimerStatus, format_time


class TestFormatTime:
    """Test M:SS rendering."""

    @pytest.mark.parametrize("seconds,expected", [(0, "0:00"), (5, "0:05"), (300, "5:00"), (425, "7:05"), (3600, "60:00")])
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected

    def test_negative_clamped(self):
        assert format_time(-3) == "0:00"


class TestManualTicks:
    """Test the timer state machine driven by explicit ticks."""

    def test_runs_to_completion_once(self):
        """Test that a 300s timer notifies exactly once at zero."""
        on_complete = Mock()
        timer = StepTimer(300, on_complete, auto_tick=False)

        assert timer.start()
        for _ in range(300):
            timer.tick()

        assert timer.remaining == 0
        assert timer.status is TimerStatus.EXPIRED
        on_complete.assert_called_once()

        # Further ticks and starts do not re-notify
        timer.tick()
        assert timer.start() is False
        on_complete.assert_called_once()

    def test_pause_and_resume_keeps_remaining(self):
        timer = StepTimer(10, auto_tick=False)
        timer.start()
        timer.tick()
        timer.tick()

        assert timer.pause()
        timer.tick()  # Ignored while paused

        assert timer.remaining == 8
        assert timer.status is TimerStatus.PAUSED
        assert timer.toggle() is True
        assert timer.running

    def test_reset_restores_duration(self):
        on_complete = Mock()
        timer = StepTimer(2, on_complete, auto_tick=False)
        timer.start()
        timer.tick()
        timer.tick()

        timer.reset()

        assert timer.remaining == 2
        assert timer.status is TimerStatus.IDLE
        assert not timer.running

        # A new run notifies again
        timer.start()
        timer.tick()
        timer.tick()
        assert on_complete.call_count == 2

    def test_zero_duration_never_starts(self):
        timer = StepTimer(0, auto_tick=False)

        assert timer.start() is False
        assert timer.status is TimerStatus.IDLE

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            StepTimer(-1)

    def test_dispose_stops_notifications(self):
        on_complete = Mock()
        timer = StepTimer(1, on_complete, auto_tick=False)
        timer.start()

        timer.dispose()
        timer.tick()

        assert timer.start() is False
        on_complete.assert_not_called()


class TestScheduledTicks:
    """Test the per-second asyncio tick task."""

    @pytest.mark.asyncio
    @patch("cookalong.state.timer.asyncio.sleep", new_callable=AsyncMock)
    async def test_task_counts_down_and_fires_once(self, mock_sleep):
        on_complete = Mock()
        timer = StepTimer(300, on_complete)

        timer.start()
        task = timer.task
        await task

        assert timer.remaining == 0
        assert timer.expired
        assert mock_sleep.await_count == 300
        on_complete.assert_called_once()
        assert timer.task is None

    @pytest.mark.asyncio
    async def test_pause_cancels_task(self):
        timer = StepTimer(60)
        timer.start()
        task = timer.task

        timer.pause()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert task.cancelled()
        assert timer.remaining == 60

    @pytest.mark.asyncio
    async def test_dispose_cancels_task(self):
        timer = StepTimer(60)
        timer.start()
        task = timer.task

        timer.dispose()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert task.cancelled()
        assert timer.task is None

    def test_start_without_event_loop_raises(self):
        timer = StepTimer(60)

        with pytest.raises(RuntimeError):
            timer.start()
