"""
Observability configuration settings.

Settings for log level and output format.

Dependencies: pydantic_settings
System role: Logging configuration
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_format: bool = Field(
        default=False,
        description="Emit one JSON object per log line",
    )
    request_logging: bool = Field(
        default=True,
        description="Log every HTTP request with its latency",
    )

    class Config:
        """Pydantic config for environment variable loading."""

        env_prefix = "LOG_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
