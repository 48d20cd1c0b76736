"""Latest-wins throttle for async callables."""
import asyncio
import logging
import time
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class ThrottleCancelled(Exception):
    """Raised to a pending caller when the throttle is cancelled."""


class CallSuperseded(ThrottleCancelled):
    """Raised to a pending caller whose call was replaced by a newer one."""


class ThrottledCall:
    """
    Serialize calls to an async function to one per interval.

    The first call runs immediately. While a call is in flight, or during
    the cooldown after it completes, newer calls wait in a single pending
    slot. Each new call replaces the previous pending one (latest wins),
    and the replaced caller receives CallSuperseded. When the cooldown
    elapses the pending call runs.

    Construct one instance per wrapped function and share it with every
    call site.

    The cooldown deadline is kept on a monotonic clock, so the instance
    can be reused across event loops (e.g., repeated asyncio.run calls).
    """

    def __init__(self, func: Callable[..., Awaitable[Any]], interval_ms: float):
        """
        Initialize the throttle.

        Args:
            func: Async function to wrap
            interval_ms: Cooldown after each completed call, in milliseconds
        """
        self.func = func
        self.interval = interval_ms / 1000
        self._engaged = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[Tuple[tuple, asyncio.Future]] = None
        self._tasks: set = set()
        self._cooldown_until = 0.0
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    async def __call__(self, *args) -> Any:
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            self._adopt_loop(loop)

        if not self._engaged:
            return await self._execute(args)

        future = loop.create_future()
        self._replace_pending((args, future))
        return await future

    def _adopt_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        # Timers, tasks and waiters from the previous loop will never run
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
        self._tasks.clear()
        self._loop = loop

        remaining = self._cooldown_until - time.monotonic()
        if self._engaged and remaining > 0:
            logger.debug(f"Resuming throttle cooldown ({remaining:.3f}s left) on a new event loop")
            self._timer = loop.call_later(remaining, self._cooldown_elapsed)
        else:
            self._engaged = False

    def _replace_pending(self, pending: Optional[Tuple[tuple, asyncio.Future]]) -> None:
        if self._pending is not None:
            _, superseded = self._pending
            if not superseded.done():
                logger.debug("Pending throttled call superseded by a newer call")
                superseded.set_exception(
                    CallSuperseded("Throttled call superseded by a newer call")
                )
        self._pending = pending

    async def _execute(self, args: tuple) -> Any:
        self._engaged = True
        self._loop = asyncio.get_running_loop()
        try:
            result = await self.func(*args)
        except Exception:
            # Failures never leave the throttle engaged
            self._engaged = False
            self._release_pending()
            raise

        self._cooldown_until = time.monotonic() + self.interval
        self._timer = self._loop.call_later(self.interval, self._cooldown_elapsed)
        return result

    def _cooldown_elapsed(self) -> None:
        self._timer = None
        self._engaged = False
        self._release_pending()

    def _release_pending(self) -> None:
        if self._pending is None:
            return
        args, future = self._pending
        self._pending = None
        if future.done():
            return
        self._engaged = True
        task = asyncio.ensure_future(self._execute(args))
        self._tasks.add(task)
        task.add_done_callback(partial(self._settle, future))

    def _settle(self, future: asyncio.Future, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if future.done():
            return
        if task.cancelled():
            future.cancel()
        elif task.exception() is not None:
            future.set_exception(task.exception())
        else:
            future.set_result(task.result())

    def cancel(self) -> None:
        """Clear the cooldown and reject any pending caller."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._engaged = False
        if self._pending is not None:
            _, future = self._pending
            self._pending = None
            if not future.done():
                future.set_exception(ThrottleCancelled("Throttled function cancelled"))

    async def flush(self) -> Any:
        """
        Run the pending call now, bypassing the cooldown.

        Returns:
            Result of the pending call, or None if nothing was pending
        """
        if self._pending is None:
            return None
        args, future = self._pending
        self._pending = None
        try:
            result = await self.func(*args)
        except Exception as e:
            if not future.done():
                future.set_exception(e)
            raise
        if not future.done():
            future.set_result(result)
        return result
