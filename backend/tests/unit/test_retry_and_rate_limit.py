"""Tests for with_retry/is_transient and the FIFO RateLimiter."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from agentcore.agents.rate_limiter import RateLimiter
from agentcore.agents.retry import RetryOptions, is_transient, retry, with_retry
from agentcore.exceptions import ApiError, ConfigurationError, NetworkError


class TestIsTransient:
    @pytest.mark.parametrize("status", [408, 409, 429, 500, 502, 503, 504])
    def test_transient_statuses(self, status):
        assert is_transient(ApiError("x", status_code=status))

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_permanent_statuses(self, status):
        assert not is_transient(ApiError("x", status_code=status))

    def test_network_and_timeout(self):
        assert is_transient(NetworkError("down"))
        assert is_transient(asyncio.TimeoutError())
        assert not is_transient(ConfigurationError("no key"))
        assert not is_transient(ValueError("bad"))


class TestRetryOptions:
    def test_delay_schedule_is_capped(self):
        options = RetryOptions(initial_delay=1.0, backoff_factor=2.0, max_delay=5.0)
        assert [options.delay_for(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        fn = AsyncMock(side_effect=[NetworkError("a"), NetworkError("b"), "ok"])
        with patch("agentcore.agents.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await with_retry(fn, RetryOptions(max_retries=3, initial_delay=0.5))
        assert result == "ok"
        assert fn.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_reraises_last_error_after_exhaustion(self):
        last = NetworkError("third")
        fn = AsyncMock(side_effect=[NetworkError("first"), NetworkError("second"), last])
        with patch("agentcore.agents.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(NetworkError) as exc_info:
                await with_retry(fn, RetryOptions(max_retries=2))
        assert exc_info.value is last
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_should_retry_false_raises_immediately(self):
        fn = AsyncMock(side_effect=ApiError("unauthorized", status_code=401))
        with patch("agentcore.agents.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ApiError):
                await with_retry(fn, RetryOptions(max_retries=5, should_retry=is_transient))
        assert fn.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_retries_is_single_attempt(self):
        fn = AsyncMock(side_effect=NetworkError("down"))
        with pytest.raises(NetworkError):
            await with_retry(fn, RetryOptions(max_retries=0))
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_decorator(self):
        calls = []

        @retry(RetryOptions(max_retries=1, initial_delay=0))
        async def flaky(value):
            calls.append(value)
            if len(calls) == 1:
                raise NetworkError("once")
            return value * 2

        assert await flaky(21) == 42
        assert calls == [21, 21]


class TestRateLimiter:
    def test_rejects_invalid_arguments(self):
        with pytest.raises(ValueError):
            RateLimiter(max_concurrent=0)
        with pytest.raises(ValueError):
            RateLimiter(min_interval=-1)

    @pytest.mark.asyncio
    async def test_never_exceeds_ceiling(self):
        limiter = RateLimiter(max_concurrent=2, min_interval=0)
        in_flight = 0
        peak = 0

        async def work(i):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return i

        results = await asyncio.gather(*(limiter.execute(work, i) for i in range(6)))
        assert results == list(range(6))
        assert peak == 2
        assert limiter.active == 0
        assert limiter.queued == 0

    @pytest.mark.asyncio
    async def test_fifo_order(self):
        limiter = RateLimiter(max_concurrent=1, min_interval=0)
        started = []

        async def work(i):
            started.append(i)
            await asyncio.sleep(0)

        await asyncio.gather(*(limiter.execute(work, i) for i in range(5)))
        assert started == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_min_interval_between_queued_dispatches(self):
        limiter = RateLimiter(max_concurrent=1, min_interval=0.2)
        loop = asyncio.get_running_loop()
        starts = []

        async def work():
            starts.append(loop.time())

        await asyncio.gather(limiter.execute(work), limiter.execute(work))
        assert starts[1] - starts[0] >= 0.19

    @pytest.mark.asyncio
    async def test_errors_reach_their_caller_and_free_the_slot(self):
        limiter = RateLimiter(max_concurrent=1, min_interval=0)

        async def boom():
            raise RuntimeError("boom")

        async def fine():
            return "fine"

        results = await asyncio.gather(limiter.execute(boom), limiter.execute(fine), return_exceptions=True)
        assert isinstance(results[0], RuntimeError)
        assert results[1] == "fine"
        assert limiter.active == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_leaves_queue(self):
        limiter = RateLimiter(max_concurrent=1, min_interval=0)
        gate = asyncio.Event()

        async def blocker():
            await gate.wait()
            return "blocker"

        first = asyncio.create_task(limiter.execute(blocker))
        await asyncio.sleep(0)
        waiting = asyncio.create_task(limiter.execute(blocker))
        await asyncio.sleep(0)
        assert limiter.queued == 1

        waiting.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiting
        assert limiter.queued == 0

        gate.set()
        assert await first == "blocker"
        assert limiter.active == 0
        assert await limiter.execute(blocker) == "blocker"
