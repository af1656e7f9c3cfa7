"""Instrumentation hooks wrapped around every execution.

Hooks form a pipeline around the timed part of an execution (the wait plus
the action). Each hook receives the operation name, a dict of attributes and
a ``next_handler`` to continue the chain; it must call ``next_handler``
exactly once and return its result, or re-raise its error.
"""

from __future__ import annotations

import fnmatch
import logging
import time
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("random_delay.instrumentation")

EXECUTE_OPERATION = "random_delay.execute"


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks (tracing, metrics, logging)."""

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Wrap an operation with instrumentation."""
        ...


class HookRegistration:
    """A registered hook with an operation filter and priority."""

    def __init__(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.operations = operations or []
        self.enabled = enabled

    def matches(self, operation: str) -> bool:
        if not self.enabled:
            return False
        if not self.operations:
            return True
        return any(fnmatch.fnmatch(operation, pattern) for pattern in self.operations)


class HookRegistry:
    """Ordered collection of hooks; lower priority runs outermost."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        registration = HookRegistration(
            hook, priority=priority, operations=operations, enabled=enabled
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    def unregister(self, registration: HookRegistration) -> None:
        self._registrations.remove(registration)

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run *next_handler* inside every matching hook, in priority order."""
        matching = [r for r in self._registrations if r.matches(operation)]
        if not matching:
            return await next_handler()

        async def pipeline(index: int = 0) -> Any:
            if index >= len(matching):
                return await next_handler()
            return await matching[index].hook(
                operation,
                attributes,
                lambda: pipeline(index + 1),
            )

        return await pipeline()

    def clear(self) -> None:
        self._registrations.clear()

    def __len__(self) -> int:
        return len(self._registrations)


class LoggingHook:
    """Logs each execution's drawn delay, outcome and elapsed time."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        logger.log(
            self._level,
            "%s: waiting %s (max %s)",
            operation,
            attributes.get("delay"),
            attributes.get("max_duration"),
        )
        start = time.perf_counter()
        try:
            result = await next_handler()
        except Exception as exc:
            elapsed = (time.perf_counter() - start) * 1000
            logger.log(
                self._level,
                "%s failed after %.2fms: %s",
                operation,
                elapsed,
                type(exc).__name__,
            )
            raise
        elapsed = (time.perf_counter() - start) * 1000
        logger.log(self._level, "%s completed in %.2fms", operation, elapsed)
        return result


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "random_delay_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    A fresh registry is created on first access within each context.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Install *registry* for the current context."""
    _hook_registry_var.set(registry)
