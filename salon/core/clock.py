"""Wall clock that refreshes the salon's current time on a fixed interval.

The clock runs as a single asyncio task owned by whoever started it (the
application lifespan in production). Stopping it cancels the task and waits
for it to finish, so no timer outlives its owner.
"""

import asyncio
from datetime import date, datetime, tzinfo
from types import TracebackType
from zoneinfo import ZoneInfo

from salon.core.logging import get_logger

logger = get_logger(__name__)


def today(tz: tzinfo | str) -> date:
    """Return the current calendar date in the given time zone."""
    if isinstance(tz, str):
        tz = ZoneInfo(tz)
    return datetime.now(tz).date()


class WallClock:
    """Periodically refreshed "now" for display purposes.

    Usage in lifespan:
        app.state.clock = WallClock(interval=1.0, tz="Europe/Warsaw")
        await app.state.clock.start()
        yield
        await app.state.clock.stop()
    """

    def __init__(self, interval: float = 1.0, tz: tzinfo | str = "UTC") -> None:
        if interval <= 0:
            raise ValueError("Clock interval must be positive")
        self.interval = interval
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self._now = datetime.now(self.tz)
        self._ticks = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def now(self) -> datetime:
        """Time captured at the most recent tick."""
        return self._now

    @property
    def ticks(self) -> int:
        """Number of refreshes since the clock was created."""
        return self._ticks

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> datetime:
        """Refresh the current time immediately."""
        self._now = datetime.now(self.tz)
        self._ticks += 1
        return self._now

    async def start(self) -> None:
        """Start the background refresh task. Starting twice is a no-op."""
        if self.running:
            return
        self.tick()
        self._task = asyncio.create_task(self._run(), name="wall-clock")
        logger.info("wall_clock_started", interval=self.interval, tz=str(self.tz))

    async def stop(self) -> None:
        """Cancel the refresh task and wait until it has exited."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("wall_clock_stopped", ticks=self._ticks)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    async def __aenter__(self) -> "WallClock":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()
