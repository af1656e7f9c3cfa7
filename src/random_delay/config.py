"""Executor settings, construction options and the builder that applies them.

Options are plain callables that mutate an :class:`ExecutorBuilder`. They are
applied in the order given; the first one that raises aborts construction and
its exception propagates unchanged::

    settings = (
        ExecutorBuilder("1s")
        .apply(with_random_source(seeded_random_source(0)), with_max_duration("2s"))
        .build()
    )
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .primitives.duration import (
    MAX_DURATION_NS,
    duration_to_ns,
    format_nanoseconds,
    from_nanoseconds,
)
from .primitives.exceptions import InvalidConfigurationError
from .primitives.random_source import default_random_source, seeded_random_source

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .primitives.random_source import IRandomSource

ExecutorOption = Callable[["ExecutorBuilder"], None]

ENV_PREFIX = "RANDOM_DELAY_"


def check_max_duration_ns(nanoseconds: int, value: object = None) -> int:
    """Enforce ``0 < nanoseconds <= MAX_DURATION_NS``."""
    value = nanoseconds if value is None else value
    if nanoseconds <= 0:
        raise InvalidConfigurationError(
            f"max duration must be positive, got {format_nanoseconds(nanoseconds)}",
            field="max_duration",
            value=value,
        )
    if nanoseconds > MAX_DURATION_NS:
        raise InvalidConfigurationError(
            f"max duration {format_nanoseconds(nanoseconds)} exceeds the supported "
            f"maximum of {format_nanoseconds(MAX_DURATION_NS)}",
            field="max_duration",
            value=value,
        )
    return nanoseconds


def check_max_duration(value: str | timedelta | float) -> int:
    """Parse *value* into whole nanoseconds and enforce the bounds."""
    return check_max_duration_ns(duration_to_ns(value), value)


def check_random_source(source: Any) -> IRandomSource:
    if not callable(getattr(source, "randrange", None)):
        raise InvalidConfigurationError(
            f"random source {type(source).__name__} has no randrange()",
            field="random_source",
            value=source,
        )
    return source  # type: ignore[no-any-return]


class ExecutorSettings(BaseModel):
    """Validated, immutable configuration of a :class:`RandomDelayExecutor`.

    ``max_duration_ns`` is kept in whole nanoseconds. Integers are taken as
    nanoseconds; strings, timedeltas and floats go through
    :func:`check_max_duration`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    max_duration_ns: int
    random_source: Any = Field(default_factory=default_random_source)

    @field_validator("max_duration_ns", mode="before")
    @classmethod
    def _validate_max_duration(cls, value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return check_max_duration_ns(value)
        return check_max_duration(value)

    @field_validator("random_source")
    @classmethod
    def _validate_random_source(cls, value: Any) -> Any:
        return check_random_source(value)

    @property
    def max_duration(self) -> timedelta:
        """The maximum as a ``timedelta``, truncated to microseconds."""
        return from_nanoseconds(self.max_duration_ns)


class ExecutorBuilder:
    """Mutable staging area consumed by construction options."""

    def __init__(
        self,
        max_duration: str | timedelta | float,
        random_source: IRandomSource | None = None,
    ) -> None:
        self.max_duration_ns = check_max_duration(max_duration)
        self.random_source: IRandomSource = (
            random_source if random_source is not None else default_random_source()
        )

    def apply(self, *options: ExecutorOption) -> ExecutorBuilder:
        for option in options:
            option(self)
        return self

    def build(self) -> ExecutorSettings:
        try:
            return ExecutorSettings(
                max_duration_ns=self.max_duration_ns,
                random_source=self.random_source,
            )
        except PydanticValidationError as exc:
            raise _configuration_error(exc) from exc


def _configuration_error(exc: PydanticValidationError) -> InvalidConfigurationError:
    """Unwrap the first pydantic error into an InvalidConfigurationError."""
    errors = exc.errors()
    if not errors:
        return InvalidConfigurationError(str(exc))
    first = errors[0]
    original = first.get("ctx", {}).get("error")
    if isinstance(original, InvalidConfigurationError):
        return original
    loc = ".".join(str(p) for p in first.get("loc", ("__root__",)))
    return InvalidConfigurationError(
        f"{loc}: {first.get('msg', 'validation error')}",
        field=loc,
        value=first.get("input"),
    )


# ── Options ──────────────────────────────────────────────────────


def with_random_source(source: IRandomSource) -> ExecutorOption:
    """Replace the random source, e.g. with a seeded one for tests."""

    def _option(builder: ExecutorBuilder) -> None:
        builder.random_source = check_random_source(source)

    return _option


def with_max_duration(value: str | timedelta | float) -> ExecutorOption:
    """Re-parse and replace the maximum duration."""

    def _option(builder: ExecutorBuilder) -> None:
        builder.max_duration_ns = check_max_duration(value)

    return _option


def options_from_env(
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> list[ExecutorOption]:
    """Build options from ``<prefix>MAX_DURATION`` and ``<prefix>SEED``.

    Unset variables contribute nothing.
    """
    env = os.environ if environ is None else environ
    options: list[ExecutorOption] = []

    max_duration = env.get(f"{prefix}MAX_DURATION")
    if max_duration:
        options.append(with_max_duration(max_duration))

    seed = env.get(f"{prefix}SEED")
    if seed:
        try:
            options.append(with_random_source(seeded_random_source(int(seed))))
        except ValueError as err:
            raise InvalidConfigurationError(
                f"invalid seed {seed!r}: expected an integer",
                field="seed",
                value=seed,
            ) from err

    return options
