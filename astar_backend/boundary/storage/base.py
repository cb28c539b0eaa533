"""
Storage backend interface.

Dependencies: abc (stdlib)
System role: Contract shared by local and S3 attachment storage
"""

from abc import ABC, abstractmethod


class FileStorage(ABC):
    """Blob store addressed by storage path."""

    @abstractmethod
    def store(self, path: str, content: bytes, content_type: str) -> None:
        """Write `content` under `path`, replacing any existing object."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Return the object bytes; raises StorageError when missing."""

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Remove the object; returns False when it did not exist."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def download_url(self, path: str, attachment_id: str, expires_in: int) -> str:
        """URL a client can fetch the object from."""
