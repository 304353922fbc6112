"""
MiddleForge Configuration Management

Provides typed configuration loading with:
- Environment variable validation
- Fail-fast on invalid values, reporting every problem at once
- A lazily loaded global instance that tests can replace
"""

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Generic, TypeVar

from middleforge.errors import MiddleForgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")
BOOLEAN_VALUES = ("true", "false", "1", "0", "yes", "no")


class ConfigError(MiddleForgeError):
    """Raised when configuration validation fails"""
    pass


def _is_non_negative_int(value: str) -> bool:
    try:
        return int(value) >= 0
    except ValueError:
        return False


def _is_boolean(value: str) -> bool:
    return value.lower() in BOOLEAN_VALUES


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


@dataclass
class ConfigField(Generic[T]):
    """
    Configuration field definition with validation.

    Usage:
        field = ConfigField(
            name="MIDDLEFORGE_DEFAULT_DEADLINE_MS",
            default="0",
            validator=_is_non_negative_int,
            description="Deadline applied by with_deadline()",
        )
    """
    name: str
    required: bool = False
    default: T | None = None
    description: str = ""
    validator: Any = None  # Callable[[str], bool]

    def load(self) -> T | str | None:
        """Load value from environment."""
        value = os.getenv(self.name, self.default)

        if self.required and not value:
            raise ConfigError(
                f"Required configuration '{self.name}' is missing. "
                f"Description: {self.description}"
            )

        if value and self.validator:
            if not self.validator(value):
                raise ConfigError(
                    f"Configuration '{self.name}' failed validation. Value: {value}"
                )

        return value


@dataclass
class MiddleForgeConfig:
    """
    MiddleForge configuration with typed fields and validation.

    All configuration is loaded from environment variables.

    Usage:
        config = MiddleForgeConfig.from_env()
        configure_logging(config.log_level, json_output=config.log_format == "json")
    """

    # Service identification
    service_name: str = "middleforge"
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # Tracing
    otel_enabled: bool = False
    otel_service_name: str = ""

    # Execution
    default_deadline_ms: int = 0  # 0 disables with_deadline() unless given explicitly

    # Feature flags
    debug_mode: bool = False  # Log every middleware entry

    @classmethod
    def from_env(cls) -> "MiddleForgeConfig":
        """
        Load configuration from environment variables.

        Fails fast with a single ConfigError listing every invalid value.
        """
        fields = [
            # Service
            ConfigField("MIDDLEFORGE_SERVICE_NAME", default="middleforge"),
            ConfigField("MIDDLEFORGE_ENV", default="development"),

            # Logging
            ConfigField(
                "LOG_LEVEL",
                default="INFO",
                validator=lambda v: v.upper() in LOG_LEVELS,
                description=f"One of {', '.join(LOG_LEVELS)}",
            ),
            ConfigField(
                "LOG_FORMAT",
                default="text",
                validator=lambda v: v.lower() in LOG_FORMATS,
                description="text or json",
            ),

            # Tracing
            ConfigField("OTEL_ENABLED", default="false", validator=_is_boolean),
            ConfigField("OTEL_SERVICE_NAME", default=""),

            # Execution
            ConfigField(
                "MIDDLEFORGE_DEFAULT_DEADLINE_MS",
                default="0",
                validator=_is_non_negative_int,
                description="Non-negative integer, 0 disables the default deadline",
            ),

            # Debug
            ConfigField("MIDDLEFORGE_DEBUG", default="false", validator=_is_boolean),
        ]

        values = {}
        errors = []

        for f in fields:
            try:
                values[f.name] = f.load()
            except ConfigError as e:
                errors.append(str(e))

        if errors:
            raise ConfigError(
                "Configuration validation failed:\n" +
                "\n".join(f"  - {e}" for e in errors)
            )

        return cls(
            service_name=values["MIDDLEFORGE_SERVICE_NAME"],
            environment=values["MIDDLEFORGE_ENV"],
            log_level=(values["LOG_LEVEL"] or "INFO").upper(),
            log_format=(values["LOG_FORMAT"] or "text").lower(),
            otel_enabled=_as_bool(values["OTEL_ENABLED"]),
            otel_service_name=values["OTEL_SERVICE_NAME"],
            default_deadline_ms=int(values["MIDDLEFORGE_DEFAULT_DEADLINE_MS"] or 0),
            debug_mode=_as_bool(values["MIDDLEFORGE_DEBUG"]),
        )

    def to_safe_dict(self) -> dict[str, Any]:
        """Return config as a plain dict, safe for logging."""
        return asdict(self)


# Global config instance (lazy loaded)
_config: MiddleForgeConfig | None = None


def get_config() -> MiddleForgeConfig:
    """
    Get the global configuration instance.

    Lazy loads from environment on first access.
    """
    global _config
    if _config is None:
        _config = MiddleForgeConfig.from_env()
        logger.debug("Loaded configuration: %s", _config.to_safe_dict())
    return _config


def set_config(config: MiddleForgeConfig | None) -> None:
    """Set the global configuration instance (for testing). None forces a reload."""
    global _config
    _config = config
