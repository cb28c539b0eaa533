"""
Storage backend selection from settings.

Dependencies: astar_backend.configs
System role: Storage backend factory
"""

from pathlib import Path

from astar_backend.boundary.aws.s3_client import S3AttachmentStorage
from astar_backend.boundary.storage.base import FileStorage
from astar_backend.boundary.storage.local_storage import LocalFileStorage
from astar_backend.configs.storage import StorageSettings


def create_file_storage(settings: StorageSettings) -> FileStorage:
    """
    Build the configured storage backend.

    Args:
        settings: Storage settings

    Returns:
        FileStorage: S3AttachmentStorage for backend "s3", LocalFileStorage otherwise

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.backend.lower()
    if backend == "s3":
        return S3AttachmentStorage(bucket=settings.bucket, region=settings.region)
    if backend == "local":
        return LocalFileStorage(Path(settings.local_root))
    raise ValueError(f"Unknown storage backend: {settings.backend}")
