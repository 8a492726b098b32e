"""Application configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ControllerConfig(BaseModel):
    """Where and how to reach the LedFx controller."""

    host: str = Field(default="localhost", description="LedFx host name or address")
    port: int = Field(default=8888, ge=1, le=65535, description="LedFx HTTP port")
    api_path: str = Field(default="/api", description="Path of the API root")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Per-request timeout")
    connect_timeout_seconds: float = Field(default=5.0, gt=0, description="Connect timeout")
    max_attempts: int = Field(
        default=2, ge=1, le=10, description="Attempts for transport failures on reads"
    )
    user_agent: str = "ledwarden/0.1"

    @property
    def base_url(self) -> str:
        path = "/" + self.api_path.strip("/") if self.api_path.strip("/") else ""
        return f"http://{self.host}:{self.port}{path}"


class PollingConfig(BaseModel):
    """Budget for confirming that an effect write took hold."""

    attempts: int = Field(default=3, ge=1, le=50, description="Reads before giving up")
    delay_ms: int = Field(default=150, ge=0, le=10000, description="Delay between reads")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")
    filename: str | None = Field(default=None, description="Log file; stdout when unset")


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")

    controller: ControllerConfig = ControllerConfig()
    polling: PollingConfig = PollingConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for application config."""
        return Path("config.json")
