"""Rest timer used to pace recovery between sets."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

from errors import InvalidStateError
from typedefs import TimerSnapshot

logger = logging.getLogger(__name__)

DEFAULT_REST_SECONDS = 180

Scheduler = Callable[[Coroutine[Any, Any, None]], Any]


def format_time(total_seconds: int) -> str:
    """Format seconds as ``m:ss`` (e.g. 180 -> "3:00", 5 -> "0:05")."""
    minutes, seconds = divmod(max(total_seconds, 0), 60)
    return f"{minutes}:{seconds:02d}"


def loop_scheduler(countdown: Coroutine[Any, Any, None]) -> Optional[asyncio.Task]:
    """Run a countdown as a task on the current event loop.

    Outside of a running loop the countdown is dropped and the timer must be
    ticked by the caller.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        countdown.close()
        logger.warning("No running event loop; rest timer will not tick")
        return None
    return loop.create_task(countdown)


def _log_countdown_failure(task: asyncio.Future) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Rest timer countdown failed", exc_info=task.exception())


class RestTimer:
    """Countdown clock with pause/resume/stop semantics.

    The timer is only mutated from the event loop thread. Every ``start`` and
    ``stop`` bumps a generation counter; a countdown task only ticks while its
    generation is current, so nothing lands after a stop or restart.

    Args:
        default_duration: Seconds used by ``start()`` without an argument and
            restored by ``stop()``
        scheduler: Called with the countdown coroutine whenever the timer
            starts. ``None`` means the owner calls ``tick()`` itself.
        on_finish: Called when the countdown reaches zero on its own
    """

    def __init__(
        self,
        default_duration: int = DEFAULT_REST_SECONDS,
        scheduler: Optional[Scheduler] = None,
        on_finish: Optional[Callable[[], None]] = None,
        tick_interval: float = 1.0,
    ):
        if default_duration <= 0:
            raise ValueError("default_duration must be positive")
        self.default_duration = default_duration
        self.running = False
        self.paused = False
        self.remaining_seconds = default_duration
        self.tick_interval = tick_interval
        self._scheduler = scheduler
        self._on_finish = on_finish
        self._generation = 0
        self._task: Optional[asyncio.Future] = None

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, duration_seconds: Optional[int] = None) -> int:
        """(Re)start the countdown from ``duration_seconds``.

        Restarting a running timer replaces the countdown; remaining time is
        never accumulated.

        Returns:
            The generation of the new countdown
        """
        if duration_seconds is None:
            duration_seconds = self.default_duration
        if duration_seconds <= 0:
            raise ValueError("duration_seconds must be positive")

        self._generation += 1
        self.remaining_seconds = duration_seconds
        self.running = True
        self.paused = False
        logger.debug("Rest timer started for %ss", duration_seconds)

        self._cancel_task()
        if self._scheduler is not None:
            task = self._scheduler(self.run(self._generation))
            if isinstance(task, asyncio.Future):
                task.add_done_callback(_log_countdown_failure)
                self._task = task
        return self._generation

    def pause(self) -> None:
        if not self.running:
            raise InvalidStateError("Rest timer is not running")
        self.paused = True

    def resume(self) -> None:
        if not self.running or not self.paused:
            raise InvalidStateError("Rest timer is not paused")
        self.paused = False

    def stop(self) -> None:
        """Cancel the countdown and reset to the default duration."""
        self._generation += 1
        self._cancel_task()
        self.running = False
        self.paused = False
        self.remaining_seconds = self.default_duration
        logger.debug("Rest timer stopped")

    def tick(self, generation: Optional[int] = None) -> bool:
        """Apply one elapsed second.

        Args:
            generation: Countdown the tick belongs to. Ticks from a stale
                generation are ignored.

        Returns:
            True if the remaining time was decremented
        """
        if generation is not None and generation != self._generation:
            return False
        if not self.running or self.paused:
            return False

        self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            # Auto-stop keeps the zero on display until the next start
            self.remaining_seconds = 0
            self.running = False
            self.paused = False
            self._generation += 1
            logger.info("Rest timer finished")
            if self._on_finish is not None:
                self._on_finish()
        return True

    async def run(self, generation: int, interval: Optional[float] = None) -> None:
        """Tick once per interval until the countdown ends or is replaced."""
        if interval is None:
            interval = self.tick_interval
        while generation == self._generation and self.running:
            await asyncio.sleep(interval)
            self.tick(generation)

    @property
    def task(self) -> Optional[asyncio.Future]:
        """Countdown task of the current start, if one was scheduled."""
        return self._task

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def display(self) -> str:
        return format_time(self.remaining_seconds)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            running=self.running,
            paused=self.paused,
            remaining_seconds=self.remaining_seconds,
            display=self.display(),
        )
