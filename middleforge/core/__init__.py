"""MiddleForge Core Module"""

from middleforge.core.signal import Signal, failure_of
from middleforge.core.types import (
    BoundHandler,
    ChainFactory,
    Middleware,
    MiddlewareSpec,
    NextFunction,
    TerminalHandler,
    describe,
)
from middleforge.core.executor import (
    ChainFrame,
    Continuation,
    TerminalFrame,
    build_chain,
    run_chain,
    run_frames,
)
from middleforge.core.compose import flatten, label, use
from middleforge.core.deadline import with_deadline

__all__ = [
    # Signals
    "Signal",
    "failure_of",
    # Callable contracts
    "Middleware",
    "NextFunction",
    "TerminalHandler",
    "BoundHandler",
    "ChainFactory",
    "MiddlewareSpec",
    "describe",
    # Executor
    "ChainFrame",
    "TerminalFrame",
    "Continuation",
    "build_chain",
    "run_chain",
    "run_frames",
    # Composition
    "use",
    "label",
    "flatten",
    # Deadlines
    "with_deadline",
]
