"""
Attachment storage configuration.

Selects the storage backend (local filesystem or S3) and holds upload limits.

Dependencies: pydantic_settings
System role: File storage configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Settings for attachment storage operations."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(default="local", description="Storage backend: local or s3")
    local_root: str = Field(default="./storage", description="Root directory for local storage")
    bucket: str = Field(default="astar-dev-attachments", description="S3 bucket for attachments")
    region: str = Field(default="ap-northeast-1", description="AWS region for the bucket")
    presigned_url_expiry: int = Field(
        default=3600,
        description="Presigned URL expiry in seconds (default 1 hour)",
    )
    max_file_size: int = Field(default=10 * 1024 * 1024, description="Maximum upload size in bytes")
    temporary_expiry_hours: int = Field(
        default=24,
        description="Hours before an unlinked upload is eligible for cleanup",
    )
