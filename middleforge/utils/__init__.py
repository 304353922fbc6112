"""MiddleForge Utilities Module"""

# Configuration
from middleforge.utils.config import (
    ConfigError,
    ConfigField,
    MiddleForgeConfig,
    get_config,
    set_config,
)

# Structured logging
from middleforge.utils.logging import (
    ChainLogger,
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

# Tracing
from middleforge.utils.tracing import (
    ChainTracer,
    configure_tracing,
    get_tracer,
    trace_span,
)


def configure_observability(config: MiddleForgeConfig | None = None) -> MiddleForgeConfig:
    """
    Configure logging and tracing from a MiddleForgeConfig.

    Usage:
        from middleforge.utils import configure_observability
        configure_observability()  # reads the environment
    """
    config = config or get_config()
    configure_logging(
        level=config.log_level,
        json_output=config.log_format == "json",
    )
    if config.otel_enabled:
        configure_tracing(service_name=config.otel_service_name or config.service_name)
    return config


__all__ = [
    # Configuration
    "MiddleForgeConfig",
    "ConfigField",
    "ConfigError",
    "get_config",
    "set_config",
    "configure_observability",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    "bind_context",
    "clear_context",
    "ChainLogger",
    # Tracing
    "configure_tracing",
    "get_tracer",
    "trace_span",
    "ChainTracer",
]
