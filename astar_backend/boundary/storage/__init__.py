"""
Attachment storage backends.

Exports: FileStorage, LocalFileStorage
(S3AttachmentStorage lives in boundary.aws; create_file_storage in .factory)
"""

from astar_backend.boundary.storage.base import FileStorage
from astar_backend.boundary.storage.local_storage import LocalFileStorage

__all__ = ["FileStorage", "LocalFileStorage"]
