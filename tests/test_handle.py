from __future__ import annotations

import asyncio
import time

import pytest

from random_delay import (
    CancellationToken,
    ExecutionCancelledError,
    ExecutionHandle,
    ExecutionState,
    RandomDelayExecutor,
    ResultAlreadyConsumedError,
)


class TestExecuteAsync:
    @pytest.mark.asyncio
    async def test_successful_async_execution(
        self, seeded_executor: RandomDelayExecutor
    ) -> None:
        handle = seeded_executor.execute_async(CancellationToken(), lambda: None)
        result = await handle.result()

        assert result.error is None
        assert result.ok
        assert result.state is ExecutionState.COMPLETED
        assert result.start_time.tzinfo is not None
        assert result.end_time >= result.start_time
        assert result.delay is not None
        assert result.delay < seeded_executor.max_duration

    @pytest.mark.asyncio
    async def test_async_action_error(self, fast_executor: RandomDelayExecutor) -> None:
        expected = RuntimeError("async action error")

        def action() -> None:
            raise expected

        result = await fast_executor.execute_async(CancellationToken(), action)

        assert result.error is expected
        assert result.state is ExecutionState.COMPLETED
        assert not result.cancelled
        with pytest.raises(RuntimeError) as exc_info:
            result.raise_for_error()
        assert exc_info.value is expected

    @pytest.mark.asyncio
    async def test_returns_without_blocking(
        self, slow_executor: RandomDelayExecutor
    ) -> None:
        token = CancellationToken()

        start = time.monotonic()
        handle = slow_executor.execute_async(token, lambda: None)
        assert time.monotonic() - start < 0.1
        assert not handle.done()

        await asyncio.sleep(0)
        assert handle.state is ExecutionState.WAITING

        token.cancel()
        result = await handle
        assert result.cancelled
        assert result.state is ExecutionState.CANCELLED
        assert isinstance(result.error, ExecutionCancelledError)
        assert result.end_time >= result.start_time
        assert result.elapsed.total_seconds() < 1.0

    @pytest.mark.asyncio
    async def test_value_is_captured(self, fast_executor: RandomDelayExecutor) -> None:
        async def action() -> int:
            return 7

        result = await fast_executor.execute_async(None, action)
        assert result.value == 7
        assert result.raise_for_error() == 7

    @pytest.mark.asyncio
    async def test_result_is_delivered_once(
        self, fast_executor: RandomDelayExecutor
    ) -> None:
        handle = fast_executor.execute_async(CancellationToken(), lambda: None)
        await handle.result()

        assert handle.consumed
        with pytest.raises(ResultAlreadyConsumedError):
            await handle.result()

    @pytest.mark.asyncio
    async def test_cancelled_reader_does_not_consume(
        self, slow_executor: RandomDelayExecutor
    ) -> None:
        token = CancellationToken()
        handle = slow_executor.execute_async(token, lambda: None)

        reader = asyncio.create_task(handle.result())
        await asyncio.sleep(0)
        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader

        assert not handle.consumed
        assert not handle.done()

        token.cancel()
        result = await handle
        assert result.cancelled

    @pytest.mark.asyncio
    async def test_many_executions_in_flight(
        self, fast_executor: RandomDelayExecutor
    ) -> None:
        handles: list[ExecutionHandle] = [
            fast_executor.execute_async(CancellationToken(), lambda i=i: i)
            for i in range(20)
        ]
        results = await asyncio.gather(*(h.result() for h in handles))

        assert [r.value for r in results] == list(range(20))
        await asyncio.sleep(0)
        assert fast_executor.in_flight == 0

    @pytest.mark.asyncio
    async def test_shared_token_cancels_all_pending(
        self, slow_executor: RandomDelayExecutor
    ) -> None:
        token = CancellationToken()
        handles = [slow_executor.execute_async(token, lambda: None) for _ in range(5)]
        await asyncio.sleep(0)
        assert slow_executor.in_flight == 5

        token.cancel()
        results = [await h for h in handles]
        assert all(r.cancelled for r in results)
        assert all(r.error is token.error for r in results)

    def test_requires_running_loop(self, fast_executor: RandomDelayExecutor) -> None:
        with pytest.raises(RuntimeError):
            fast_executor.execute_async(CancellationToken(), lambda: None)
