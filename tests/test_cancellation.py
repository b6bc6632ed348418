import asyncio

import pytest

from webapi_client.cancellation import CancellationToken, run_cancellable
from webapi_client.exceptions import RequestTimeoutError


async def answer(value, delay: float = 0):
    await asyncio.sleep(delay)
    return value


class TestCancellationToken:
    def test_token_without_deadline(self):
        token = CancellationToken.none()

        assert token.deadline is None
        assert token.remaining() is None
        assert not token.cancelled

    def test_with_timeout_uses_milliseconds(self):
        token = CancellationToken.with_timeout(30000)

        assert 29 < token.remaining() <= 30

    def test_zero_timeout_is_already_cancelled(self):
        assert CancellationToken.with_timeout(0).cancelled

    def test_explicit_cancel(self):
        token = CancellationToken.none()

        token.cancel()

        assert token.cancelled


class TestRunCancellable:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        result = await run_cancellable(answer(42), CancellationToken.with_timeout(1000))

        assert result == 42

    @pytest.mark.asyncio
    async def test_propagates_errors(self):
        async def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await run_cancellable(fail(), CancellationToken.none())

    @pytest.mark.asyncio
    async def test_deadline_ends_call(self):
        with pytest.raises(RequestTimeoutError) as exc_info:
            await run_cancellable(answer(1, delay=5), CancellationToken.with_timeout(50))

        assert exc_info.value.status_code == 408

    @pytest.mark.asyncio
    async def test_explicit_cancel_ends_call(self):
        token = CancellationToken.none()
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, token.cancel)

        with pytest.raises(RequestTimeoutError):
            await run_cancellable(answer(1, delay=5), token)

    @pytest.mark.asyncio
    async def test_cancelled_token_never_starts_call(self):
        started = []

        async def work():
            started.append(True)

        token = CancellationToken.none()
        token.cancel()

        with pytest.raises(RequestTimeoutError):
            await run_cancellable(work(), token)

        assert started == []

    @pytest.mark.asyncio
    async def test_timed_out_call_is_cancelled(self):
        finished = []

        async def work():
            await asyncio.sleep(5)
            finished.append(True)

        with pytest.raises(RequestTimeoutError):
            await run_cancellable(work(), CancellationToken.with_timeout(20))

        await asyncio.sleep(0)
        assert finished == []
