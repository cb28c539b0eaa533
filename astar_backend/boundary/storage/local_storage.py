"""
Local filesystem attachment storage.

Used in development and tests. Objects live under a root directory using
the storage path as relative path; downloads go through the API.

Dependencies: pathlib (stdlib)
System role: Filesystem storage backend
"""

import logging
from pathlib import Path

from astar_backend.boundary.storage.base import FileStorage
from astar_backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Attachment storage on the local filesystem."""

    def __init__(self, root: str | Path, api_prefix: str = "/api/v1") -> None:
        """
        Args:
            root: Directory holding all stored objects
            api_prefix: Prefix of the download endpoint returned by download_url
        """
        self._root = Path(root).resolve()
        self._api_prefix = api_prefix.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if self._root not in target.parents:
            raise StorageError(f"Invalid storage path: {path}", operation="resolve")
        return target

    def store(self, path: str, content: bytes, content_type: str) -> None:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(
                f"{__name__}:store - {type(e).__name__}: {e}",
                extra={"path": path},
            )
            raise StorageError(f"Failed to store file: {path}", operation="store") from e
        logger.debug(
            f"{__name__}:store - Stored object",
            extra={"path": path, "size": len(content), "content_type": content_type},
        )

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise StorageError(f"File not found in storage: {path}", operation="read")
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read file: {path}", operation="read") from e

    def delete(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.is_file():
            return False
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete file: {path}", operation="delete") from e
        return True

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def download_url(self, path: str, attachment_id: str, expires_in: int) -> str:
        return f"{self._api_prefix}/attachments/{attachment_id}/download"
