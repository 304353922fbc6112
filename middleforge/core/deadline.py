"""
MiddleForge Deadlines

The executor itself never cancels anything. A deadline wraps a bound
handler from the outside: when the chain has not settled in time the caller
gets ChainTimeoutError, and the chain keeps running unobserved.
"""

import asyncio
from typing import Any

from middleforge.core.types import BoundHandler, describe
from middleforge.errors import ChainTimeoutError
from middleforge.utils.config import get_config
from middleforge.utils.logging import get_logger

logger = get_logger(__name__)


def with_deadline(handler: BoundHandler, timeout_ms: float | None = None) -> BoundHandler:
    """
    Fail a bound handler's outcome if it has not settled within `timeout_ms`.

    Args:
        handler: A bound handler from build_chain/use/label
        timeout_ms: Deadline in milliseconds. None uses the configured
            default_deadline_ms; 0 disables the deadline.

    Usage:
        handler = with_deadline(use(auth)(list_users), timeout_ms=2000)
    """
    if timeout_ms is None:
        timeout_ms = get_config().default_deadline_ms
    if timeout_ms < 0:
        raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")
    if not timeout_ms:
        return handler

    chain_name = describe(handler)

    async def deadline_handler(request: Any, response: Any) -> None:
        outcome = asyncio.ensure_future(handler(request, response))
        # asyncio.wait never cancels: expiry abandons the chain
        done, _ = await asyncio.wait({outcome}, timeout=timeout_ms / 1000)
        if not done:
            outcome.add_done_callback(_discard_late_outcome)
            logger.warning("Chain deadline exceeded", chain=chain_name, timeout_ms=timeout_ms)
            raise ChainTimeoutError(timeout_ms, chain_name)
        # The chain's own error, TimeoutError included, passes through
        outcome.result()

    deadline_handler.__name__ = chain_name
    deadline_handler.__qualname__ = chain_name
    deadline_handler.timeout_ms = timeout_ms
    return deadline_handler


def _discard_late_outcome(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()
