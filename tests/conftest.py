from __future__ import annotations

from collections.abc import Iterator

import pytest

from random_delay import (
    HookRegistry,
    RandomDelayExecutor,
    seeded_random_source,
    set_hook_registry,
    with_random_source,
)


class FixedSource:
    """Random source that always draws the same fraction of the range."""

    def __init__(self, fraction: float = 0.0) -> None:
        self.fraction = fraction
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        return min(stop - 1, int(stop * self.fraction))


@pytest.fixture(autouse=True)
def hook_registry() -> Iterator[HookRegistry]:
    """Give every test its own empty hook registry."""
    registry = HookRegistry()
    set_hook_registry(registry)
    yield registry
    registry.clear()


@pytest.fixture
def seeded_executor() -> RandomDelayExecutor:
    return RandomDelayExecutor.create("1s", with_random_source(seeded_random_source(0)))


@pytest.fixture
def fast_executor() -> RandomDelayExecutor:
    """Executor whose delays are always zero."""
    return RandomDelayExecutor.create("1s", with_random_source(FixedSource(0.0)))


@pytest.fixture
def slow_executor() -> RandomDelayExecutor:
    """Executor that always waits just under ten seconds."""
    return RandomDelayExecutor.create("10s", with_random_source(FixedSource(0.99)))
