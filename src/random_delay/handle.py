"""ExecutionHandle — single-slot result of a background execution."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import ResultAlreadyConsumedError

if TYPE_CHECKING:
    from collections.abc import Generator

    from .result import ExecutionResult, ExecutionState, ExecutionTracker


class ExecutionHandle:
    """Delivers the one :class:`ExecutionResult` of an ``execute_async`` call.

    Reading blocks until the result is ready and may happen once; a second
    read raises :class:`ResultAlreadyConsumedError`. Awaiting the handle is
    the same as awaiting :meth:`result`. Cancelling the reader does not
    cancel the execution; use the execution's cancellation token for that.
    """

    def __init__(
        self,
        task: asyncio.Task[ExecutionResult],
        tracker: ExecutionTracker,
    ) -> None:
        self._task = task
        self._tracker = tracker
        self._consumed = False

    @property
    def state(self) -> ExecutionState:
        return self._tracker.state

    @property
    def consumed(self) -> bool:
        return self._consumed

    def done(self) -> bool:
        """Whether the result is available, without consuming it."""
        return self._task.done()

    async def result(self) -> ExecutionResult:
        if self._consumed:
            raise ResultAlreadyConsumedError("execution result was already read")
        self._consumed = True
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.done():
                # Only the reader was cancelled; the result is still pending.
                self._consumed = False
            raise

    def __await__(self) -> Generator[Any, None, ExecutionResult]:
        return self.result().__await__()

    def __repr__(self) -> str:
        return f"<ExecutionHandle state={self.state.value} consumed={self._consumed}>"
