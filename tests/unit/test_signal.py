"""
Unit Tests for MiddleForge Signals

Tests for:
- First-fire-wins settlement
- Following another future
- Quiet failures
- failure_of()
"""

import asyncio

import pytest

from middleforge.core.signal import Signal, failure_of


class TestSignalSettlement:
    """Tests for succeed/fail/cancel."""

    @pytest.mark.asyncio
    async def test_succeed_resolves_wait_handle(self):
        signal = Signal("outcome")

        assert signal.succeed("value") is True
        assert signal.done
        assert await signal.wait() == "value"

    @pytest.mark.asyncio
    async def test_fail_rejects_wait_handle(self):
        signal = Signal("outcome")

        assert signal.fail(ValueError("boom")) is True
        with pytest.raises(ValueError, match="boom"):
            await signal.wait()

    @pytest.mark.asyncio
    async def test_first_fire_wins(self):
        """Later settle calls are ignored."""
        signal = Signal("outcome")

        signal.fail(ValueError("first"))
        assert signal.succeed() is False
        assert signal.fail(RuntimeError("second")) is False
        assert signal.cancel() is False

        with pytest.raises(ValueError, match="first"):
            await signal.wait()

    @pytest.mark.asyncio
    async def test_fail_with_cancelled_error_cancels(self):
        signal = Signal("outcome")

        signal.fail(asyncio.CancelledError())

        assert signal.future.cancelled()

    @pytest.mark.asyncio
    async def test_wait_handle_can_be_awaited_repeatedly(self):
        signal = Signal("teardown")
        signal.succeed(1)

        assert await signal.wait() == 1
        assert await signal.wait() == 1

    @pytest.mark.asyncio
    async def test_quiet_failure_is_marked_retrieved(self):
        signal = Signal("teardown", quiet=True)
        signal.fail(ValueError("unobserved"))

        # asyncio only logs "exception was never retrieved" while this is set
        assert signal.future._log_traceback is False

    @pytest.mark.asyncio
    async def test_repr_shows_state(self):
        signal = Signal("outcome")
        assert repr(signal) == "Signal('outcome', pending)"

        signal.fail(ValueError())
        signal.future.exception()
        assert repr(signal) == "Signal('outcome', failed)"

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            Signal("outcome")


class TestSignalFollow:
    """Tests for Signal.follow()."""

    @pytest.mark.asyncio
    async def test_follows_success(self):
        source = asyncio.get_running_loop().create_future()
        signal = Signal("outcome")
        signal.follow(source)

        source.set_result("done")

        assert await signal.wait() == "done"

    @pytest.mark.asyncio
    async def test_follows_failure(self):
        async def fails():
            raise KeyError("missing")

        signal = Signal("outcome")
        signal.follow(asyncio.ensure_future(fails()))

        with pytest.raises(KeyError):
            await signal.wait()

    @pytest.mark.asyncio
    async def test_follow_does_not_override_earlier_settlement(self):
        source = asyncio.get_running_loop().create_future()
        signal = Signal("outcome")
        signal.follow(source)

        signal.fail(ValueError("earlier"))
        source.set_result("later")
        await asyncio.sleep(0)

        with pytest.raises(ValueError, match="earlier"):
            await signal.wait()


class TestFailureOf:
    """Tests for failure_of()."""

    @pytest.mark.asyncio
    async def test_success_has_no_failure(self):
        future = asyncio.get_running_loop().create_future()
        future.set_result(None)

        assert failure_of(future) is None

    @pytest.mark.asyncio
    async def test_returns_exception(self):
        future = asyncio.get_running_loop().create_future()
        error = ValueError("x")
        future.set_exception(error)

        assert failure_of(future) is error

    @pytest.mark.asyncio
    async def test_cancelled_reports_cancelled_error(self):
        future = asyncio.get_running_loop().create_future()
        future.cancel()

        assert isinstance(failure_of(future), asyncio.CancelledError)
