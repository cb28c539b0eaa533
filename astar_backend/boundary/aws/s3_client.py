"""
S3 attachment storage.

Stores attachment bytes in an S3 bucket and hands out presigned GET URLs
for downloads.

Dependencies: boto3
System role: Production storage backend
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from astar_backend.boundary.storage.base import FileStorage
from astar_backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


class S3AttachmentStorage(FileStorage):
    """S3 backend for attachments."""

    def __init__(self, bucket: str, region: str = "ap-northeast-1", client=None) -> None:
        """
        Initialize S3 storage for the attachment bucket.

        Args:
            bucket: S3 bucket name for attachment storage
            region: AWS region for S3 bucket
            client: Preconfigured boto3 S3 client (tests)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    def store(self, path: str, content: bytes, content_type: str) -> None:
        """
        Upload an object.

        Args:
            path: S3 object key
            content: File bytes
            content_type: MIME type stored as object metadata

        Raises:
            StorageError: If the upload fails
        """
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=path,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"{__name__}:store - {type(e).__name__}: {e}",
                extra={"bucket": self._bucket, "key": path},
            )
            raise StorageError(f"Failed to store file: {path}", operation="store") from e

    def read(self, path: str) -> bytes:
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=path)
            return response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                raise StorageError(f"File not found in storage: {path}", operation="read") from e
            raise StorageError(f"Failed to read file: {path}", operation="read") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to read file: {path}", operation="read") from e

    def delete(self, path: str) -> bool:
        if not self.exists(path):
            return False
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete file: {path}", operation="delete") from e
        return True

    def exists(self, path: str) -> bool:
        """
        Check if a file exists in S3.

        Args:
            path: S3 object key to check

        Returns:
            bool: True if file exists, False otherwise
        """
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                return False
            raise StorageError(f"Failed to check file: {path}", operation="exists") from e

    def download_url(self, path: str, attachment_id: str, expires_in: int) -> str:
        """
        Generate presigned URL for downloading an attachment.

        Args:
            path: S3 object key
            attachment_id: Attachment id (unused by S3)
            expires_in: URL expiry in seconds

        Returns:
            str: Presigned GET URL

        Raises:
            StorageError: If presigned URL generation fails
        """
        try:
            return self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to sign URL: {path}", operation="download_url") from e
