"""RandomDelayExecutor — run an action once after a random delay.

The delay is drawn uniformly from ``[0, max_duration)`` with a single
``randrange`` call on the configured random source. Draws are serialized by a
lock so one executor can be shared by concurrent executions; the lock covers
the draw only, never the wait.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from .cancellation import CancellationToken
from .config import ExecutorBuilder, ExecutorSettings
from .handle import ExecutionHandle
from .instrumentation import EXECUTE_OPERATION, get_hook_registry
from .primitives.duration import SECOND, format_nanoseconds, from_nanoseconds
from .result import ExecutionResult, ExecutionState, ExecutionTracker

if TYPE_CHECKING:
    from .config import ExecutorOption

Action = Callable[[], Any]

logger = logging.getLogger("random_delay.executor")


class RandomDelayExecutor:
    """Runs caller-supplied actions after a random delay.

    Usage::

        executor = RandomDelayExecutor.create("1h")
        await executor.execute(CancellationToken.with_timeout(30), send_ping)

        handle = executor.execute_async(token, send_ping)
        result = await handle
        if result.error is not None:
            ...

    An action is any zero-argument callable. If it returns an awaitable, the
    awaitable is awaited. Whatever it raises reaches the caller unchanged.
    """

    def __init__(self, settings: ExecutorSettings) -> None:
        self._settings = settings
        self._max_ns = settings.max_duration_ns
        self._random = settings.random_source
        self._lock = threading.Lock()
        self._tasks: set[asyncio.Task[ExecutionResult]] = set()

    @classmethod
    def create(
        cls,
        max_duration: str | timedelta | float,
        *options: ExecutorOption,
    ) -> RandomDelayExecutor:
        """Parse *max_duration*, apply *options* in order and build an executor.

        Raises:
            InvalidConfigurationError: if the duration is unparsable, not
                positive or too large, or an option rejects its input.
        """
        settings = ExecutorBuilder(max_duration).apply(*options).build()
        return cls(settings)

    @property
    def settings(self) -> ExecutorSettings:
        return self._settings

    @property
    def max_duration(self) -> timedelta:
        return self._settings.max_duration

    @property
    def max_duration_ns(self) -> int:
        return self._max_ns

    @property
    def in_flight(self) -> int:
        """Number of ``execute_async`` executions that have not finished."""
        return len(self._tasks)

    def random_delay(self) -> timedelta:
        """Draw one delay in ``[0, max_duration)``."""
        return from_nanoseconds(self._draw_ns())

    def _draw_ns(self) -> int:
        with self._lock:
            return self._random.randrange(self._max_ns)  # type: ignore[no-any-return]

    async def execute(
        self,
        signal: CancellationToken | None,
        action: Action,
    ) -> Any:
        """Wait a random delay, then run *action* unless *signal* fires first.

        Returns:
            The action's return value.

        Raises:
            Exception: the signal's error if it fired before the delay
                elapsed (the action is then never called), otherwise
                whatever the action raised.
        """
        return await self._run(signal, action, ExecutionTracker())

    def execute_async(
        self,
        signal: CancellationToken | None,
        action: Action,
    ) -> ExecutionHandle:
        """Schedule an execution on the running loop and return immediately.

        Must be called from a coroutine or callback running on an event loop.
        The returned handle yields exactly one :class:`ExecutionResult`; errors
        are captured there instead of being raised.
        """
        tracker = ExecutionTracker()
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run_captured(signal, action, tracker))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return ExecutionHandle(task, tracker)

    async def _run_captured(
        self,
        signal: CancellationToken | None,
        action: Action,
        tracker: ExecutionTracker,
    ) -> ExecutionResult:
        start_time = datetime.now(timezone.utc)
        started = time.monotonic()
        error: Exception | None = None
        value: Any = None
        try:
            value = await self._run(signal, action, tracker)
        except Exception as exc:  # noqa: BLE001
            error = exc
        # Monotonic offset keeps end_time >= start_time across clock changes.
        end_time = start_time + timedelta(seconds=time.monotonic() - started)
        return ExecutionResult(
            start_time=start_time,
            end_time=end_time,
            state=tracker.state,
            error=error,
            value=value,
            delay=tracker.delay,
        )

    async def _run(
        self,
        signal: CancellationToken | None,
        action: Action,
        tracker: ExecutionTracker,
    ) -> Any:
        token = signal if signal is not None else CancellationToken.none()
        delay_ns = self._draw_ns()
        tracker.delay = from_nanoseconds(delay_ns)
        attributes: dict[str, Any] = {
            "max_duration": format_nanoseconds(self._max_ns),
            "delay": format_nanoseconds(delay_ns),
            "delay_ns": delay_ns,
        }

        async def _handler() -> Any:
            tracker.state = ExecutionState.WAITING
            try:
                await token.sleep(delay_ns / SECOND)
            except BaseException as exc:
                tracker.state = ExecutionState.CANCELLED
                logger.debug(
                    "Execution cancelled before its %s delay elapsed: %r",
                    attributes["delay"],
                    exc,
                )
                raise

            tracker.state = ExecutionState.EXECUTING
            try:
                return await _invoke(action)
            finally:
                tracker.state = ExecutionState.COMPLETED

        logger.debug(
            "Scheduling action after %s (max %s)",
            attributes["delay"],
            attributes["max_duration"],
        )
        return await get_hook_registry().execute_all(
            EXECUTE_OPERATION, attributes, _handler
        )

    def __repr__(self) -> str:
        return (
            f"<RandomDelayExecutor max_duration={format_nanoseconds(self._max_ns)} "
            f"in_flight={self.in_flight}>"
        )


async def _invoke(action: Action) -> Any:
    result = action()
    if isawaitable(result):
        result = await result
    return result


def new_executor(
    max_duration: str | timedelta | float,
    *options: ExecutorOption,
) -> RandomDelayExecutor:
    """Shorthand for :meth:`RandomDelayExecutor.create`."""
    return RandomDelayExecutor.create(max_duration, *options)
