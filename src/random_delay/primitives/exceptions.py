"""Configuration and execution exceptions for random-delay."""

from __future__ import annotations

from typing import Any


class RandomDelayError(Exception):
    """Root exception for the random-delay package."""


class InvalidConfigurationError(RandomDelayError, ValueError):
    """Raised when an executor cannot be configured.

    Covers unparsable durations, non-positive or oversized maximum
    durations and unusable random sources. Only raised while building an
    executor, never from a running execution.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)


class ExecutionCancelledError(RandomDelayError):
    """Reason carried by a manually cancelled :class:`CancellationToken`."""


class DeadlineExceededError(ExecutionCancelledError, TimeoutError):
    """Reason carried by a token whose deadline passed before the action ran."""


class ResultAlreadyConsumedError(RandomDelayError):
    """Raised when an :class:`ExecutionHandle` is read a second time."""
