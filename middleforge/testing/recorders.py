"""
MiddleForge Test Recorders

Middleware and handler factories that write what they do into a shared
CallLog, so tests can assert on the exact interleaving of a chain.
"""

import asyncio
from typing import Any

from middleforge.core.types import Middleware, TerminalHandler


class CallLog:
    """
    Ordered record of chain events.

    Usage:
        log = CallLog()
        chain = use(sync_middleware(log, "a"), async_middleware(log, "b"))
        await chain(recording_handler(log))({}, {})
        assert log.events == ["a:enter", "a:exit", "b:enter", "b:await", "handler", "b:resume"]
    """

    def __init__(self):
        self.events: list[str] = []

    def record(self, event: str) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()

    def count(self, event: str) -> int:
        return self.events.count(event)

    def __iter__(self):
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def __contains__(self, event: str) -> bool:
        return event in self.events

    def __repr__(self) -> str:
        return f"CallLog({self.events!r})"


def sync_middleware(log: CallLog, name: str, call_next: bool = True) -> Middleware:
    """Synchronous middleware recording `<name>:enter` and `<name>:exit`."""

    def middleware(request: Any, response: Any, next) -> None:
        log.record(f"{name}:enter")
        if call_next:
            next()
        log.record(f"{name}:exit")

    middleware.__name__ = name
    middleware.__qualname__ = name
    return middleware


def async_middleware(
    log: CallLog,
    name: str,
    delay_ms: float = 0,
    call_next: bool = True,
) -> Middleware:
    """
    Async middleware recording `<name>:enter`, `<name>:await` before awaiting
    next(), and `<name>:resume` once the rest of the chain has settled.
    """

    async def middleware(request: Any, response: Any, next) -> None:
        log.record(f"{name}:enter")
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)
        if call_next:
            log.record(f"{name}:await")
            await next()
            log.record(f"{name}:resume")

    middleware.__name__ = name
    middleware.__qualname__ = name
    return middleware


def failing_middleware(
    error: BaseException,
    log: CallLog | None = None,
    name: str = "failing",
    is_async: bool = False,
    via_next: bool = False,
) -> Middleware:
    """
    Middleware that fails with `error`.

    Args:
        error: Error to fail with
        log: Optional CallLog; records `<name>:enter`
        name: Middleware name
        is_async: Return a coroutine that fails instead of raising directly
        via_next: Fail through next(error) instead of raising
    """

    def _fail(next) -> None:
        if log is not None:
            log.record(f"{name}:enter")
        if via_next:
            next(error)
        raise error

    if is_async:

        async def middleware(request: Any, response: Any, next) -> None:
            _fail(next)

    else:

        def middleware(request: Any, response: Any, next) -> None:
            _fail(next)

    middleware.__name__ = name
    middleware.__qualname__ = name
    return middleware


def recording_handler(
    log: CallLog,
    name: str = "handler",
    is_async: bool = False,
    error: BaseException | None = None,
) -> TerminalHandler:
    """Terminal handler recording `<name>`, optionally failing afterwards."""

    if is_async:

        async def handler(request: Any, response: Any) -> None:
            await asyncio.sleep(0)
            log.record(name)
            if error is not None:
                raise error

    else:

        def handler(request: Any, response: Any) -> None:
            log.record(name)
            if error is not None:
                raise error

    handler.__name__ = name
    handler.__qualname__ = name
    return handler


def assert_order(log: CallLog, *events: str) -> None:
    """
    Assert that `events` occur in the log in this relative order.

    Other events may appear in between.
    """
    position = 0
    for event in events:
        try:
            position = log.events.index(event, position) + 1
        except ValueError:
            raise AssertionError(
                f"Expected {event!r} after position {position} in {log.events!r}"
            ) from None
