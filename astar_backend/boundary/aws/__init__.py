"""
AWS boundary modules.

Exports: S3AttachmentStorage
"""

from .s3_client import S3AttachmentStorage

__all__ = ["S3AttachmentStorage"]
