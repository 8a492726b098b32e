"""Configuration management for ledwarden."""

from ledwarden.core.config.loader import (
    create_ledfx_client,
    create_polling_policy,
    detect_format,
    load_app_config,
    load_config,
)
from ledwarden.core.config.models import (
    AppConfig,
    ControllerConfig,
    LoggingConfig,
    PollingConfig,
)

__all__ = [
    "AppConfig",
    "ControllerConfig",
    "LoggingConfig",
    "PollingConfig",
    "create_ledfx_client",
    "create_polling_policy",
    "detect_format",
    "load_app_config",
    "load_config",
]
