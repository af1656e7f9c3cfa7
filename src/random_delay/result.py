"""ExecutionResult — the outcome and timing of one execution."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any


class ExecutionState(str, enum.Enum):
    """Lifecycle of a single execution.

    ``CREATED -> WAITING -> CANCELLED`` or
    ``CREATED -> WAITING -> EXECUTING -> COMPLETED``.
    """

    CREATED = "created"
    WAITING = "waiting"
    CANCELLED = "cancelled"
    EXECUTING = "executing"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionState.CANCELLED, ExecutionState.COMPLETED)


@dataclass(frozen=True)
class ExecutionResult:
    """Produced exactly once per execution.

    ``error`` holds the action's exception or the cancellation reason, as the
    same object that was raised. A failing action still ends in
    ``COMPLETED``; only a cancelled wait ends in ``CANCELLED``.
    """

    start_time: datetime
    end_time: datetime
    state: ExecutionState
    error: BaseException | None = None
    value: Any = None
    delay: timedelta | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return self.state is ExecutionState.CANCELLED

    @property
    def elapsed(self) -> timedelta:
        return self.end_time - self.start_time

    def raise_for_error(self) -> Any:
        """Re-raise the captured error, otherwise return the action's value."""
        if self.error is not None:
            raise self.error
        return self.value


@dataclass
class ExecutionTracker:
    """Live, mutable view of an execution that has not produced a result yet."""

    state: ExecutionState = ExecutionState.CREATED
    delay: timedelta | None = None
