"""
MiddleForge Single-Fire Signals

A Signal is a future whose settle operations are exposed to its owner:
whoever holds the Signal decides when it succeeds or fails, while everyone
else only awaits it. The first settle call wins; later calls are ignored.

Usage:
    signal = Signal("outcome")
    signal.succeed()            # True, signal settled
    signal.fail(RuntimeError()) # False, already settled
    await signal.wait()
"""

import asyncio
from typing import Any


def failure_of(future: asyncio.Future) -> BaseException | None:
    """
    Return the error a settled future carries, or None if it succeeded.

    A cancelled future reports a fresh CancelledError. Reading the error
    marks it as retrieved so asyncio does not warn about it.
    """
    if future.cancelled():
        return asyncio.CancelledError()
    return future.exception()


class Signal:
    """
    Single-fire success/failure gate bound to the running event loop.

    Args:
        name: Label used in repr and logs
        quiet: Mark failures as retrieved immediately. Use this for signals
            whose failure is also delivered through another channel, so an
            unobserved failure does not produce an asyncio warning.
    """

    def __init__(self, name: str = "signal", quiet: bool = False):
        self.name = name
        self.quiet = quiet
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.cancelled():
            state = "cancelled"
        elif self._future.exception() is not None:
            state = "failed"
        else:
            state = "succeeded"
        return f"Signal({self.name!r}, {state})"

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def future(self) -> asyncio.Future:
        return self._future

    def succeed(self, value: Any = None) -> bool:
        """Settle as a success. Returns False if already settled."""
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def fail(self, error: BaseException) -> bool:
        """Settle as a failure. Returns False if already settled."""
        if self._future.done():
            return False
        if isinstance(error, asyncio.CancelledError):
            self._future.cancel()
            return True
        self._future.set_exception(error)
        if self.quiet:
            self._future.exception()
        return True

    def cancel(self) -> bool:
        """Settle as cancelled. Returns False if already settled."""
        if self._future.done():
            return False
        return self._future.cancel()

    def follow(self, source: asyncio.Future) -> None:
        """Settle this signal the same way `source` settles."""

        def _copy(done: asyncio.Future) -> None:
            error = failure_of(done)
            if error is None:
                self.succeed(done.result())
            else:
                self.fail(error)

        source.add_done_callback(_copy)

    def wait(self) -> asyncio.Future:
        """
        Return the wait-handle for this signal.

        The handle is the underlying future, so it can be awaited any number
        of times and never triggers "coroutine was never awaited" warnings.
        """
        return self._future
