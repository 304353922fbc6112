"""
MiddleForge: Connect-style Middleware Chains for asyncio

Runs an ordered list of middleware ahead of a terminal handler. Sync and
async middleware mix freely; an async middleware that awaits next() resumes
after the rest of the chain has finished, and the first error anywhere
settles the whole chain.

Usage:
    import middleforge as mf

    async def timing(request, response, next):
        started = time.perf_counter()
        await next()
        response["elapsed_ms"] = (time.perf_counter() - started) * 1000

    def require_user(request, response, next):
        if "user" not in request:
            next(PermissionError("login required"))
        next()

    # Inline
    handler = mf.use(timing, require_user)(list_users)
    await handler(request, response)

    # Labelled, with defaults applied to every route
    with_middleware = mf.label({"timing": timing, "auth": require_user}, defaults=["timing"])
    handler = with_middleware("auth")(list_users)

    # Curried core factory and an external deadline
    handler = mf.with_deadline(mf.build_chain([timing])(list_users), timeout_ms=2000)
"""

# Core
from middleforge.core.compose import flatten, label, use
from middleforge.core.deadline import with_deadline
from middleforge.core.executor import (
    ChainFrame,
    Continuation,
    TerminalFrame,
    build_chain,
    run_chain,
)
from middleforge.core.signal import Signal
from middleforge.core.types import (
    BoundHandler,
    ChainFactory,
    Middleware,
    NextFunction,
    TerminalHandler,
)

# Errors
from middleforge.errors import (
    ChainAbortedError,
    ChainTimeoutError,
    InvalidMiddlewareError,
    MiddleForgeError,
    UnknownMiddlewareError,
)

# Utilities
from middleforge.utils import (
    ConfigError,
    MiddleForgeConfig,
    configure_logging,
    configure_observability,
    configure_tracing,
    get_config,
    get_logger,
    set_config,
)

__version__ = "0.1.0"
__all__ = [
    # Entry points
    "build_chain",
    "run_chain",
    "use",
    "label",
    "flatten",
    "with_deadline",
    # Executor internals
    "ChainFrame",
    "TerminalFrame",
    "Continuation",
    "Signal",
    # Callable contracts
    "Middleware",
    "NextFunction",
    "TerminalHandler",
    "BoundHandler",
    "ChainFactory",
    # Errors
    "MiddleForgeError",
    "ChainAbortedError",
    "ChainTimeoutError",
    "InvalidMiddlewareError",
    "UnknownMiddlewareError",
    "ConfigError",
    # Configuration
    "MiddleForgeConfig",
    "get_config",
    "set_config",
    # Observability
    "configure_logging",
    "configure_tracing",
    "configure_observability",
    "get_logger",
]
