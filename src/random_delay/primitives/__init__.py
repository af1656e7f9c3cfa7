"""Primitives: exceptions, durations, random sources."""

from __future__ import annotations

from .duration import (
    MAX_DURATION,
    MAX_DURATION_NS,
    duration_to_ns,
    format_duration,
    format_nanoseconds,
    from_nanoseconds,
    parse_duration,
    parse_duration_ns,
    to_nanoseconds,
)
from .exceptions import (
    DeadlineExceededError,
    ExecutionCancelledError,
    InvalidConfigurationError,
    RandomDelayError,
    ResultAlreadyConsumedError,
)
from .random_source import IRandomSource, default_random_source, seeded_random_source

__all__ = [
    "MAX_DURATION",
    "MAX_DURATION_NS",
    "DeadlineExceededError",
    "ExecutionCancelledError",
    "IRandomSource",
    "InvalidConfigurationError",
    "RandomDelayError",
    "ResultAlreadyConsumedError",
    "default_random_source",
    "duration_to_ns",
    "format_duration",
    "format_nanoseconds",
    "from_nanoseconds",
    "parse_duration",
    "parse_duration_ns",
    "seeded_random_source",
    "to_nanoseconds",
]
