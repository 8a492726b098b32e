"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import httpx
import yaml

from ledwarden.core.api.http.client import AsyncApiClient
from ledwarden.core.api.http.config import HttpClientConfig
from ledwarden.core.api.http.retry import RetryPolicy
from ledwarden.core.api.ledfx.client import LedFxClient
from ledwarden.core.config.models import AppConfig, ControllerConfig, LoggingConfig
from ledwarden.core.polling import PollingPolicy

logger = logging.getLogger(__name__)

ENV_HOST = "LEDFX_HOST"
ENV_PORT = "LEDFX_PORT"
ENV_LOG_LEVEL = "LEDFX_LOG_LEVEL"


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("config.json")
        'json'
        >>> detect_format("config.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            with path.open("r", encoding="utf-8") as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                # safe_load returns None for empty files
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root in {path} must be a mapping")
    return content


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration.

    A missing file means all defaults. ``LEDFX_HOST``, ``LEDFX_PORT`` and
    ``LEDFX_LOG_LEVEL`` override whatever the file says.

    Args:
        path: Path to app config file; defaults to config.json

    Returns:
        Validated AppConfig instance

    Raises:
        ValidationError: If config is invalid
    """
    if path is None:
        path = AppConfig.default_path()

    if Path(path).exists():
        config = AppConfig.model_validate(load_config(path))
    else:
        config = AppConfig()

    return _apply_env_overrides(config)


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    controller_updates: dict[str, Any] = {}

    host = os.getenv(ENV_HOST)
    if host:
        logger.debug(f"Loaded {ENV_HOST} from environment")
        controller_updates["host"] = host

    port = os.getenv(ENV_PORT)
    if port:
        try:
            controller_updates["port"] = int(port)
        except ValueError as e:
            raise ValueError(f"{ENV_PORT} must be an integer, got {port!r}") from e

    updates: dict[str, Any] = {}
    if controller_updates:
        # Re-validate so out-of-range values are rejected
        updates["controller"] = ControllerConfig.model_validate(
            {**config.controller.model_dump(), **controller_updates}
        )

    level = os.getenv(ENV_LOG_LEVEL)
    if level:
        updates["logging"] = LoggingConfig.model_validate(
            {**config.logging.model_dump(), "level": level.upper()}
        )

    return config.model_copy(update=updates) if updates else config


def create_polling_policy(config: AppConfig) -> PollingPolicy:
    return PollingPolicy(attempts=config.polling.attempts, delay_s=config.polling.delay_ms / 1000)


def create_ledfx_client(
    config: AppConfig, *, transport: httpx.AsyncBaseTransport | None = None
) -> LedFxClient:
    """Build a controller client from app config.

    Args:
        config: Application config
        transport: Optional custom transport (useful for testing)

    Returns:
        LedFxClient over a fresh AsyncApiClient; close it with
        ``await client.http.aclose()``
    """
    controller = config.controller
    http_config = HttpClientConfig(
        base_url=controller.base_url,
        timeout=httpx.Timeout(
            controller.timeout_seconds, connect=controller.connect_timeout_seconds
        ),
        user_agent=controller.user_agent,
    )
    http = AsyncApiClient(
        http_config,
        retry_policy=RetryPolicy(max_attempts=controller.max_attempts),
        transport=transport,
    )
    logger.debug(f"LedFx client configured for {controller.base_url}")
    return LedFxClient(http)
