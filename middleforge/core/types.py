"""
MiddleForge Callable Contracts

Structural types for the callables a chain consumes and produces.
Request and response values are opaque: the executor never looks inside them.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, Union

MaybeAwaitable = Union[None, Awaitable[Any]]


class NextFunction(Protocol):
    """The continuation handed to each middleware."""

    def __call__(self, error: Any = None) -> Awaitable[Any]: ...

    def proceed(self) -> Awaitable[Any]: ...

    def abort(self, error: Any) -> None: ...


class Middleware(Protocol):
    """(request, response, next) -> None | Awaitable"""

    def __call__(self, request: Any, response: Any, next: NextFunction) -> MaybeAwaitable: ...


class TerminalHandler(Protocol):
    """(request, response) -> None | Awaitable"""

    def __call__(self, request: Any, response: Any) -> MaybeAwaitable: ...


class BoundHandler(Protocol):
    """A fully assembled chain: awaits every middleware and the terminal handler."""

    def __call__(self, request: Any, response: Any) -> Awaitable[None]: ...


ChainFactory = Callable[[TerminalHandler], BoundHandler]

# Middleware, or arbitrarily nested lists/tuples of middleware
MiddlewareSpec = Union[Middleware, list, tuple]


def describe(fn: Any) -> str:
    """Readable name for a middleware or handler, used in logs and spans"""
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    if name:
        return name
    return type(fn).__name__
