"""CancellationToken — caller-owned signal observed by running executions.

A token fires either when :meth:`CancellationToken.cancel` is called or when
its deadline passes. Executions only *observe* a token; its lifecycle belongs
to whoever created it, and one token may be shared by many executions.

Tokens are bound to the event loop that first waits on them; ``cancel()``
must be called from that loop's thread (use ``loop.call_soon_threadsafe``
from other threads).
"""

from __future__ import annotations

import asyncio
import contextlib
import time

from .primitives.exceptions import DeadlineExceededError, ExecutionCancelledError


class CancellationToken:
    """Manual or time-bounded cancellation signal.

    Usage::

        token = CancellationToken()                  # manual
        token = CancellationToken.with_timeout(2.0)  # fires after 2 seconds
        token.cancel("shutting down")
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._deadline = deadline
        self._event = asyncio.Event()
        self._error: Exception | None = None

    @classmethod
    def none(cls) -> CancellationToken:
        """A token with no deadline that nobody is expected to cancel."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """A token that fires *seconds* from now."""
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float) -> CancellationToken:
        """A token that fires at *deadline*, a ``time.monotonic()`` timestamp."""
        return cls(deadline=deadline)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self.error is not None

    @property
    def error(self) -> Exception | None:
        """The reason the token fired, or ``None`` while it is still active.

        The same exception object is returned on every access.
        """
        if self._error is None and self._deadline_passed():
            self._fire(DeadlineExceededError("deadline exceeded"))
        return self._error

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: Exception | str | None = None) -> None:
        """Fire the token. Later calls are ignored; the first reason wins."""
        if self._error is not None:
            return
        if reason is None:
            reason = ExecutionCancelledError("cancelled")
        elif isinstance(reason, str):
            reason = ExecutionCancelledError(reason)
        self._fire(reason)

    async def wait(self) -> None:
        """Suspend until the token fires."""
        while not self.cancelled:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._event.wait(), timeout=self.remaining())

    async def sleep(self, seconds: float) -> None:
        """Sleep for *seconds* unless the token fires first.

        Raises:
            Exception: the token's :attr:`error` if it fired before
                *seconds* elapsed, including when it had already fired.
        """
        error = self.error
        if error is not None:
            raise error
        until = time.monotonic() + seconds
        while True:
            remaining = until - time.monotonic()
            if remaining <= 0:
                break
            # Timers may fire slightly early; loop until the clock agrees.
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self.wait(), timeout=remaining)
            error = self.error
            if error is not None:
                raise error
        error = self.error
        if error is not None:
            raise error

    def _deadline_passed(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def _fire(self, error: Exception) -> None:
        self._error = error
        self._event.set()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"<CancellationToken {state} deadline={self._deadline}>"
