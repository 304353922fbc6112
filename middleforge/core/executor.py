"""
MiddleForge Chain Executor

Runs an ordered list of middleware ahead of a terminal handler.

Each middleware receives (request, response, next). It may:
- call next() and return synchronously,
- return an awaitable that awaits next() before running teardown logic,
- abort the chain with next(error) or by raising.

One ChainFrame covers one middleware and everything after it. Frames are
started by a trampoline and settle through future callbacks, so long chains
grow neither the call stack nor the coroutine stack.

Usage:
    from middleforge import build_chain

    async def timing(request, response, next):
        started = time.perf_counter()
        await next()
        response["elapsed"] = time.perf_counter() - started

    def authenticate(request, response, next):
        if not request.get("user"):
            next(PermissionError("login required"))
        next()

    handler = build_chain([timing, authenticate])(route_handler)
    await handler(request, response)
"""

import asyncio
import inspect
import time
from collections.abc import Sequence
from typing import Any, NoReturn

from middleforge.errors import ChainAbortedError, InvalidMiddlewareError
from middleforge.core.signal import Signal, failure_of
from middleforge.core.types import (
    BoundHandler,
    ChainFactory,
    Middleware,
    TerminalHandler,
    describe,
)
from middleforge.utils.config import get_config
from middleforge.utils.logging import ChainLogger, LogContext
from middleforge.utils.tracing import ChainTracer

# Re-raised once the frame has settled
_INTERPRETER_EXITS = (KeyboardInterrupt, SystemExit)


class Continuation:
    """
    The `next` capability handed to a middleware.

    proceed() returns a handle that settles once the rest of the chain has
    settled; abort(error) raises immediately. Calling the continuation
    directly follows the connect convention: next() proceeds, next(error)
    aborts. A falsy argument such as None, False or "" counts as no error.
    """

    __slots__ = ("_frame",)

    def __init__(self, frame: "ChainFrame"):
        self._frame = frame

    def __call__(self, error: Any = None) -> asyncio.Future:
        if error:
            self.abort(error)
        return self.proceed()

    def proceed(self) -> asyncio.Future:
        return self._frame._on_proceed()

    def abort(self, error: Any) -> NoReturn:
        if isinstance(error, BaseException):
            raise error
        raise ChainAbortedError(error)


class TerminalFrame:
    """The frame for an empty middleware suffix: only the terminal handler runs."""

    def __init__(
        self,
        handler: TerminalHandler,
        request: Any,
        response: Any,
        depth: int = 0,
        log: ChainLogger | None = None,
    ):
        self.handler = handler
        self.request = request
        self.response = response
        self.depth = depth
        self.log = log or ChainLogger("anonymous")
        self.outcome = Signal(f"terminal[{depth}].outcome")

    def start(self) -> None:
        self.log.middleware_enter(describe(self.handler), self.depth)
        try:
            result = self.handler(self.request, self.response)
        except BaseException as e:
            self.log.middleware_failed(describe(self.handler), self.depth, e)
            self.outcome.fail(e)
            if isinstance(e, _INTERPRETER_EXITS):
                raise
            return None

        if inspect.isawaitable(result):
            self.outcome.follow(asyncio.ensure_future(result))
        else:
            self.outcome.succeed()
        return None


class ChainFrame:
    """
    Executes one middleware and, once it lets the chain continue, the rest.

    Frames of one run share the middleware tuple; frame N runs
    middleware[N] and owns everything after it.

    Attributes:
        current: The middleware this frame runs
        result: What `current` returned (None until it has been called)
        outcome: Settles once, when this frame and everything after it is done
        teardown: Released once the remainder has settled; this is what
            `next()` hands back to the middleware
    """

    def __init__(
        self,
        middleware: Sequence[Middleware],
        handler: TerminalHandler,
        request: Any,
        response: Any,
        depth: int = 0,
        log: ChainLogger | None = None,
    ):
        if depth >= len(middleware):
            raise ValueError(
                f"No middleware at position {depth} of {len(middleware)}; use TerminalFrame"
            )

        self.middleware = tuple(middleware)
        self.current = self.middleware[depth]
        self.handler = handler
        self.request = request
        self.response = response
        self.depth = depth
        self.log = log or ChainLogger("anonymous")

        self.result: Any = None
        self.outcome = Signal(f"frame[{depth}].outcome")
        # Its failures also reach the outcome through the head or the parent
        self.teardown = Signal(f"frame[{depth}].teardown", quiet=True)

        self._pending: asyncio.Future | None = None
        self._proceed_called = False
        self._window_closed = False
        self._descended = False

    @property
    def remaining(self) -> tuple[Middleware, ...]:
        """Middleware after `current`"""
        return self.middleware[self.depth + 1 :]

    @property
    def is_async(self) -> bool:
        """True once the middleware has returned an awaitable"""
        return self._pending is not None

    def start(self) -> "ChainFrame | TerminalFrame | None":
        """
        Invoke the middleware and classify what it did.

        Returns the next frame when it must start in this same turn
        (synchronous middleware), otherwise None.
        """
        name = describe(self.current)
        self.log.middleware_enter(name, self.depth)
        try:
            self.result = self.current(self.request, self.response, Continuation(self))
        except BaseException as e:
            self.log.middleware_failed(name, self.depth, e)
            self.outcome.fail(e)
            if isinstance(e, _INTERPRETER_EXITS):
                raise
            return None

        if not inspect.isawaitable(self.result):
            return self._descend()

        self._pending = asyncio.ensure_future(self.result)
        self.outcome.follow(self._pending)
        # The pending work gets one loop pass to fail before the remainder starts
        asyncio.get_running_loop().call_soon(self._close_window)
        return None

    def _on_proceed(self) -> asyncio.Future:
        self._proceed_called = True
        if self._window_closed and not self._descended:
            asyncio.get_running_loop().call_soon(self._descend_later)
        return self.teardown.wait()

    def _close_window(self) -> None:
        self._window_closed = True
        pending = self._pending

        if pending.done():
            error = failure_of(pending)
            if error is not None:
                self.log.middleware_failed(describe(self.current), self.depth, error)
                self.outcome.fail(error)
                return
            if not self._proceed_called:
                # Settled without ever delegating: the remainder never runs
                return

        if self._proceed_called:
            run_frames(self._descend())

    def _descend_later(self) -> None:
        if self._descended:
            return
        run_frames(self._descend())

    def _descend(self) -> "ChainFrame | TerminalFrame":
        self._descended = True
        if self.depth + 1 < len(self.middleware):
            child: ChainFrame | TerminalFrame = ChainFrame(
                self.middleware,
                self.handler,
                self.request,
                self.response,
                depth=self.depth + 1,
                log=self.log,
            )
        else:
            child = TerminalFrame(
                self.handler,
                self.request,
                self.response,
                depth=self.depth + 1,
                log=self.log,
            )
        child.outcome.future.add_done_callback(self._on_remainder_settled)
        return child

    def _on_remainder_settled(self, future: asyncio.Future) -> None:
        self.finish(failure_of(future))

    def finish(self, error: BaseException | None = None) -> None:
        """
        Conclude this frame after its remainder settled.

        Async middleware resumes from its awaited next() and decides the
        outcome itself, catching `error` if it wants to. Sync middleware has
        no teardown phase, so the remainder's result becomes the outcome.
        """
        if error is None:
            self.teardown.succeed()
        else:
            self.teardown.fail(error)

        if self.is_async:
            if error is not None and self.outcome.done:
                self.log.remainder_dropped(describe(self.current), self.depth, error)
            return

        if error is None:
            self.outcome.succeed()
        else:
            self.outcome.fail(error)


def run_frames(frame: "ChainFrame | TerminalFrame | None") -> None:
    """Start `frame` and every frame it hands back for the same turn."""
    while frame is not None:
        frame = frame.start()


async def run_chain(
    middleware: Sequence[Middleware],
    handler: TerminalHandler,
    request: Any,
    response: Any,
    log: ChainLogger | None = None,
) -> None:
    """
    Run `middleware` in order, then `handler`, with the two context values.

    Returns None on success. Raises the first error any stage produced.
    """
    log = log or ChainLogger("anonymous")
    middleware = tuple(middleware)
    if middleware:
        frame: ChainFrame | TerminalFrame = ChainFrame(
            middleware, handler, request, response, log=log
        )
    else:
        frame = TerminalFrame(handler, request, response, log=log)

    run_frames(frame)
    await frame.outcome.wait()


def _validate(middleware: Sequence[Any]) -> tuple[Middleware, ...]:
    for position, fn in enumerate(middleware):
        if not callable(fn):
            raise InvalidMiddlewareError(fn, position)
    return tuple(middleware)


def build_chain(
    middleware: Sequence[Middleware],
    name: str | None = None,
    verbose: bool | None = None,
) -> ChainFactory:
    """
    Curried chain factory.

    build_chain(middleware) returns a function that takes the terminal
    handler and returns the bound handler: an async callable of
    (request, response).

    Args:
        middleware: Middleware to run, in order
        name: Chain name used in logs and trace spans
        verbose: Log every middleware entry at debug level
            (defaults to the configured debug mode)

    Usage:
        handler = build_chain([cors, authenticate])(list_users)
        await handler(request, response)
    """
    middleware = _validate(middleware)

    def attach(handler: TerminalHandler) -> BoundHandler:
        if not callable(handler):
            raise InvalidMiddlewareError(handler)

        chain_name = name or describe(handler)
        if verbose is None:
            chain_verbose = get_config().debug_mode
        else:
            chain_verbose = verbose

        log = ChainLogger(chain_name, verbose=chain_verbose)
        tracer = ChainTracer(chain_name)

        async def bound_handler(request: Any, response: Any) -> None:
            started = time.perf_counter()
            success = False
            log.chain_start(total_middleware=len(middleware))
            try:
                with LogContext(chain=chain_name):
                    with tracer.chain_span(total_middleware=len(middleware)):
                        await run_chain(middleware, handler, request, response, log=log)
                success = True
            finally:
                log.chain_complete(
                    duration_ms=(time.perf_counter() - started) * 1000,
                    success=success,
                )

        bound_handler.__name__ = f"{describe(handler)}_chain"
        bound_handler.__qualname__ = bound_handler.__name__
        bound_handler.middleware = middleware
        bound_handler.handler = handler
        return bound_handler

    return attach
