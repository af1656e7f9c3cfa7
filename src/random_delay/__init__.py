"""random-delay — run an action once after a random delay.

Schedules a caller-supplied action at a random point within a maximum
duration, with caller-owned cancellation and both awaited and background
invocation. Useful for jitter injection, load-test pacing, simulated event
arrival and randomized backoff.
"""

from __future__ import annotations

from .cancellation import CancellationToken
from .config import (
    ExecutorBuilder,
    ExecutorOption,
    ExecutorSettings,
    options_from_env,
    with_max_duration,
    with_random_source,
)
from .executor import Action, RandomDelayExecutor, new_executor
from .handle import ExecutionHandle
from .instrumentation import (
    EXECUTE_OPERATION,
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    LoggingHook,
    get_hook_registry,
    set_hook_registry,
)
from .primitives import (
    MAX_DURATION,
    MAX_DURATION_NS,
    DeadlineExceededError,
    ExecutionCancelledError,
    InvalidConfigurationError,
    IRandomSource,
    RandomDelayError,
    ResultAlreadyConsumedError,
    default_random_source,
    duration_to_ns,
    format_duration,
    format_nanoseconds,
    parse_duration,
    seeded_random_source,
)
from .result import ExecutionResult, ExecutionState, ExecutionTracker

__all__ = [
    "EXECUTE_OPERATION",
    "MAX_DURATION",
    "MAX_DURATION_NS",
    "Action",
    "CancellationToken",
    "DeadlineExceededError",
    "ExecutionCancelledError",
    "ExecutionHandle",
    "ExecutionResult",
    "ExecutionState",
    "ExecutionTracker",
    "ExecutorBuilder",
    "ExecutorOption",
    "ExecutorSettings",
    "HookRegistration",
    "HookRegistry",
    "IRandomSource",
    "InstrumentationHook",
    "InvalidConfigurationError",
    "LoggingHook",
    "RandomDelayError",
    "RandomDelayExecutor",
    "ResultAlreadyConsumedError",
    "default_random_source",
    "duration_to_ns",
    "format_duration",
    "format_nanoseconds",
    "get_hook_registry",
    "new_executor",
    "options_from_env",
    "parse_duration",
    "seeded_random_source",
    "set_hook_registry",
    "with_max_duration",
    "with_random_source",
]
