"""
MiddleForge Exceptions

Errors raised by the chain executor and its composition helpers.
"""

from typing import Any


class MiddleForgeError(Exception):
    """Base class for all MiddleForge errors"""
    pass


class ChainAbortedError(MiddleForgeError):
    """
    Raised when a middleware aborts the chain with a value that is not an exception.

    Usage:
        next("unauthorized")   # raises ChainAbortedError("unauthorized")
    """

    def __init__(self, reason: Any):
        self.reason = reason
        super().__init__(f"Chain aborted: {reason!r}")


class InvalidMiddlewareError(MiddleForgeError, TypeError):
    """Raised when something that is not callable is registered as middleware"""

    def __init__(self, value: Any, position: int | None = None):
        self.value = value
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(
            f"Middleware{where} must be callable, got {type(value).__name__}"
        )


class UnknownMiddlewareError(MiddleForgeError, LookupError):
    """Raised when a label is not present in the labelled middleware mapping"""

    def __init__(self, label: str, available: list[str]):
        self.label = label
        self.available = available
        super().__init__(
            f"Unknown middleware label '{label}'. "
            f"Available: {', '.join(available) or '(none)'}"
        )


class ChainTimeoutError(MiddleForgeError, TimeoutError):
    """Raised when a chain does not settle before its deadline"""

    def __init__(self, timeout_ms: float, chain: str | None = None):
        self.timeout_ms = timeout_ms
        self.chain = chain
        name = f" '{chain}'" if chain else ""
        super().__init__(f"Chain{name} did not settle within {timeout_ms}ms")
