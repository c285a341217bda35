import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]
PollFunction = Callable[[], Awaitable[bool]]

class PollState(Enum):
    IDLE = "Idle"
    POLLING = "Polling"
    READY = "Ready"
    FAILED = "Failed"

class StreamPoller:
    """Owns the polling cadence and serializes every directory refresh.

    Refreshes are executed by a single consumer task. Requests arriving while
    a poll is in flight are coalesced into one follow-up poll, so a timer tick
    and a post-mutation refresh never rebuild the directory concurrently.
    """

    def __init__(self, poll_function: PollFunction, interval: int = 0,
                 sleep: Sleeper = asyncio.sleep):
        self.poll_function = poll_function
        self.interval = interval
        self.sleep = sleep
        self.state = PollState.IDLE
        self.last_outcome: Optional[PollState] = None
        self.last_poll: Optional[datetime] = None
        self.last_success: Optional[datetime] = None
        self.poll_count = 0
        self.error_count = 0
        self.timer_task: Optional[asyncio.Task] = None
        self.worker_task: Optional[asyncio.Task] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._lock: Optional[asyncio.Lock] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def _ensure_primitives(self) -> None:
        if self._lock is None:
            self._lock = asyncio.Lock()
            self._wakeup = asyncio.Event()

    async def start(self) -> None:
        """Start the consumer and arm the timer (if the interval is not 0)"""
        if self._running:
            return

        self._ensure_primitives()
        self._running = True
        self.worker_task = asyncio.create_task(self._worker_loop())
        self._arm_timer()
        logger.info(f"Stream poller started (interval: {self.interval or 'disabled'})")

    async def stop(self) -> None:
        """Cancel the timer and the consumer; an in-flight request result is discarded"""
        self._running = False
        await self._cancel(self.timer_task)
        await self._cancel(self.worker_task)
        self.timer_task = None
        self.worker_task = None
        self.state = PollState.IDLE
        logger.info("Stream poller stopped")

    async def reconfigure(self, interval: int) -> None:
        """Replace the interval, cancelling the old timer before arming a new one"""
        self.interval = interval
        await self._cancel(self.timer_task)
        self.timer_task = None
        if self._running:
            self._arm_timer()
        logger.debug(f"Poll interval set to {interval}s")

    def request_refresh(self) -> None:
        """Ask for a poll as soon as possible without waiting for it"""
        if not self._running:
            logger.debug("Refresh requested while poller is stopped, ignoring")
            return
        self._wakeup.set()

    async def poll(self) -> bool:
        """Run one poll now, serialized with the consumer task"""
        self._ensure_primitives()
        async with self._lock:
            return await self._poll_once()

    def _arm_timer(self) -> None:
        if self.interval and self.interval > 0:
            self.timer_task = asyncio.create_task(self._timer_loop(self.interval))

    async def _timer_loop(self, interval: int) -> None:
        while self._running:
            await self.sleep(interval)
            logger.debug("polling timer fired")
            self.request_refresh()

    async def _worker_loop(self) -> None:
        while self._running:
            await self._wakeup.wait()
            self._wakeup.clear()
            async with self._lock:
                await self._poll_once()

    async def _poll_once(self) -> bool:
        self.state = PollState.POLLING
        self.last_poll = datetime.now()
        self.poll_count += 1
        try:
            ok = await self.poll_function()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error while polling: {e}", exc_info=True)
            ok = False

        if ok:
            self.last_outcome = PollState.READY
            self.last_success = datetime.now()
        else:
            self.last_outcome = PollState.FAILED
            self.error_count += 1

        self.state = PollState.IDLE
        return ok

    @staticmethod
    async def _cancel(task: Optional[asyncio.Task]) -> None:
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def get_status(self):
        return {
            "state": self.state.value,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
            "running": self._running,
            "interval": self.interval,
            "last_poll": self.last_poll.isoformat() if self.last_poll else None,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "poll_count": self.poll_count,
            "error_count": self.error_count
        }
