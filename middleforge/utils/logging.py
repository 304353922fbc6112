"""
MiddleForge Structured Logging

Provides structured logging using structlog, routed through the standard
logging module so host applications keep control of handlers and levels.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamp: bool = True,
) -> None:
    """
    Configure MiddleForge logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON logs (for production)
        include_timestamp: Include timestamp in logs

    Usage:
        from middleforge.utils.logging import configure_logging
        configure_logging(level="DEBUG", json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    logging.getLogger("middleforge").setLevel(log_level)


def get_logger(name: str) -> Any:
    """
    Get a structlog logger.

    Usage:
        logger = get_logger(__name__)
        logger.info("Chain started", chain="api", total_middleware=3)
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for adding structured context to logs.

    Usage:
        with LogContext(request_id="abc123", chain="api"):
            logger.info("Starting chain")  # Includes request_id and chain
    """

    def __init__(self, **context: Any):
        self.context = context

    def __enter__(self) -> "LogContext":
        bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        unbind_contextvars(*self.context.keys())

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return self.__exit__(exc_type, exc_val, exc_tb)


def bind_context(**context: Any) -> None:
    """
    Bind context variables to all subsequent logs in the current context.

    Usage:
        bind_context(request_id="abc123")
        logger.info("Processing")  # Includes request_id
    """
    bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables"""
    clear_contextvars()


class ChainLogger:
    """
    Logger for one assembled chain, tagging every event with the chain name.

    Chain start and completion are logged at info level and failures are
    always logged. Per-middleware entry is only logged when `verbose` is set,
    so a busy service is not flooded with one line per middleware.

    Usage:
        logger = ChainLogger("api", verbose=True)
        logger.chain_start(total_middleware=3)
        logger.middleware_enter("authenticate", depth=0)
        logger.chain_complete(duration_ms=12.5)
    """

    def __init__(self, chain_name: str, verbose: bool = False):
        self.chain_name = chain_name
        self.verbose = verbose
        self._logger = get_logger(f"middleforge.chain.{chain_name}")

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        kwargs["chain"] = self.chain_name
        log_method = getattr(self._logger, level, self._logger.info)
        log_method(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("info", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("debug", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("error", message, **kwargs)

    def chain_start(self, total_middleware: int) -> None:
        self.info("Chain started", total_middleware=total_middleware)

    def chain_complete(self, duration_ms: float, success: bool = True) -> None:
        log_method = self.info if success else self.error
        log_method("Chain completed", duration_ms=round(duration_ms, 2), success=success)

    def middleware_enter(self, middleware: str, depth: int) -> None:
        if self.verbose:
            self.debug("Middleware entered", middleware=middleware, depth=depth)

    def middleware_failed(self, middleware: str, depth: int, error: BaseException) -> None:
        # Debug: an error boundary further out may still handle it
        self.debug(
            "Middleware failed",
            middleware=middleware,
            depth=depth,
            error=repr(error),
        )

    def remainder_dropped(self, middleware: str, depth: int, error: BaseException) -> None:
        self.warning(
            "Remainder failed after middleware settled",
            middleware=middleware,
            depth=depth,
            error=repr(error),
        )
