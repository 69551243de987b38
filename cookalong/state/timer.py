"""Countdown timer for the active cooking step.

One StepTimer per active step. While running, an asyncio task ticks once per
second; the task is cancelled (never left to fire into stale state) on pause,
reset and dispose. Completion is notified exactly once per run.
"""

import asyncio
from enum import Enum
from typing import Callable, Optional

from cookalong.utils.logger import logger


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"


def format_time(seconds: int) -> str:
    """Render seconds as M:SS (e.g. 425 -> '7:05')."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class StepTimer:
    """Countdown over a single step's duration.

    Args:
        duration: Step time in seconds. 0 means the step has no timer.
        on_complete: Called once when the countdown reaches zero.
        auto_tick: Schedule the per-second tick task on start. Disable to drive
            the timer manually with `tick()`.
    """

    def __init__(
        self,
        duration: int,
        on_complete: Optional[Callable[[], None]] = None,
        *,
        auto_tick: bool = True,
    ) -> None:
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got: {duration}")
        self.duration = duration
        self.remaining = duration
        self.status = TimerStatus.IDLE
        self.on_complete = on_complete
        self.auto_tick = auto_tick
        self._task: Optional[asyncio.Task] = None
        self._disposed = False

    @property
    def running(self) -> bool:
        return self.status is TimerStatus.RUNNING

    @property
    def expired(self) -> bool:
        return self.status is TimerStatus.EXPIRED

    @property
    def task(self) -> Optional[asyncio.Task]:
        """The scheduled tick task, if the timer is running with auto_tick."""
        return self._task

    def start(self) -> bool:
        """Start or resume the countdown.

        Returns:
            False when nothing happened: already running, expired (needs
            `reset()` first), zero duration, or disposed.

        Raises:
            RuntimeError: If auto_tick is on and no event loop is running.
        """
        if self._disposed or self.status in (TimerStatus.RUNNING, TimerStatus.EXPIRED):
            return False
        if self.remaining <= 0:
            return False

        loop = asyncio.get_running_loop() if self.auto_tick else None
        self.status = TimerStatus.RUNNING
        if loop is not None:
            self._task = loop.create_task(self._run())
        return True

    def pause(self) -> bool:
        if self.status is not TimerStatus.RUNNING:
            return False
        self._cancel_task()
        self.status = TimerStatus.PAUSED
        return True

    def toggle(self) -> bool:
        """Start when stopped, pause when running. Returns the new running state."""
        if self.running:
            self.pause()
        else:
            self.start()
        return self.running

    def reset(self) -> None:
        self._cancel_task()
        self.remaining = self.duration
        self.status = TimerStatus.IDLE

    def tick(self) -> None:
        """Account for one elapsed second."""
        if self.status is not TimerStatus.RUNNING:
            return

        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.status = TimerStatus.EXPIRED
            self._cancel_task()
            logger.debug(f"Step timer finished after {self.duration}s")
            if self.on_complete is not None:
                self.on_complete()

    def dispose(self) -> None:
        """Stop ticking for good and drop the completion callback."""
        self._cancel_task()
        self._disposed = True
        self.on_complete = None
        if self.status is TimerStatus.RUNNING:
            self.status = TimerStatus.PAUSED

    async def _run(self) -> None:
        while self.status is TimerStatus.RUNNING:
            await asyncio.sleep(1)
            self.tick()

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # tick() runs inside the task itself on expiry; the loop exits on its own
        if task is not asyncio.current_task():
            task.cancel()
