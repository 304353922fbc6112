"""
MiddleForge Testing Utilities

Helpers for testing middleware and the chains built from them:
- CallLog: ordered event log shared by recorders
- sync_middleware / async_middleware: recording middleware factories
- failing_middleware: middleware failing synchronously, asynchronously, or via next(error)
- recording_handler: terminal handler that records, optionally failing
- assert_order: relative-order assertion over a CallLog

Usage:
    from middleforge import use
    from middleforge.testing import CallLog, async_middleware, recording_handler

    async def test_teardown_runs_after_handler():
        log = CallLog()
        handler = use(async_middleware(log, "timing"))(recording_handler(log))
        await handler({}, {})
        assert log.events[-1] == "timing:resume"
"""

from middleforge.testing.recorders import (
    CallLog,
    assert_order,
    async_middleware,
    failing_middleware,
    recording_handler,
    sync_middleware,
)

__all__ = [
    "CallLog",
    "sync_middleware",
    "async_middleware",
    "failing_middleware",
    "recording_handler",
    "assert_order",
]
