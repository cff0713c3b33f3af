"""S3-compatible object storage for uploaded study material."""

import logging
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from student_power.config import get_settings
from student_power.exceptions import S3ConnectionError, S3OperationError
from student_power.utils.slugify import slugify

logger = logging.getLogger(__name__)

PDF_FOLDER = "pdfs"
PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Result of an upload: where the file lives and how big it is."""

    key: str
    url: str
    size: int


class S3Storage:
    """S3 storage client for PDF files.

    Stored keys look like ``pdfs/{random}__{slugified-name}.pdf`` so that two
    uploads of the same file name never collide.
    """

    def __init__(
        self,
        endpoint_url: str,
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str,
    ) -> None:
        """Initialize S3 storage client.

        Args:
            endpoint_url: S3-compatible storage endpoint URL.
            access_key: Access key ID.
            secret_key: Secret access key.
            bucket_name: Bucket holding all uploads.
            region: Storage region.
        """
        self._bucket_name = bucket_name
        self._endpoint_url = endpoint_url.rstrip("/")
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )
        logger.info(
            "S3 storage client initialized",
            extra={"endpoint": endpoint_url, "bucket": bucket_name},
        )

    def build_key(self, original_name: str, folder: str = PDF_FOLDER) -> str:
        """Build a collision-free object key for a file name.

        Args:
            original_name: Client-supplied file name.
            folder: Key prefix.

        Returns:
            Object key with folder prefix.
        """
        stem, dot, extension = original_name.rpartition(".")
        if not dot:
            stem, extension = original_name, ""
        safe_stem = slugify(stem) or "file"
        suffix = f".{extension.lower()}" if extension else ""
        unique_name = f"{uuid.uuid4().hex[:16]}__{safe_stem}{suffix}"

        folder = folder.strip("/")
        return f"{folder}/{unique_name}" if folder else unique_name

    def upload_pdf(self, file_data: BinaryIO, original_name: str) -> StoredObject:
        """Upload a PDF so browsers display it inline.

        Args:
            file_data: File-like object positioned anywhere.
            original_name: Client-supplied file name.

        Returns:
            StoredObject describing the uploaded file.

        Raises:
            S3OperationError: If the upload fails.
        """
        file_data.seek(0, 2)
        size = file_data.tell()
        file_data.seek(0)

        key = self.build_key(original_name)
        safe_name = original_name.replace('"', "")

        try:
            self._client.put_object(
                Bucket=self._bucket_name,
                Key=key,
                Body=file_data,
                ContentType=PDF_CONTENT_TYPE,
                ContentDisposition=f'inline; filename="{safe_name}"',
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload file to S3: {e}", extra={"key": key})
            raise S3OperationError(f"Failed to upload file: {e}") from e

        logger.info("File uploaded to S3", extra={"key": key, "size": size})
        return StoredObject(key=key, url=self.get_file_url(key), size=size)

    def get_file_url(self, key: str) -> str:
        """Get direct public URL for a stored object."""
        return f"{self._endpoint_url}/{self._bucket_name}/{key}"

    def download_file(self, key: str) -> bytes:
        """Download a stored object.

        Raises:
            S3OperationError: If the object is missing or the download fails.
        """
        try:
            response = self._client.get_object(Bucket=self._bucket_name, Key=key)
            data = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "NoSuchKey":
                logger.error(f"File not found in S3: {key}")
                raise S3OperationError(f"File not found: {key}") from e
            logger.error(f"Failed to download file from S3: {e}")
            raise S3OperationError(f"Failed to download file: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to download file from S3: {e}")
            raise S3OperationError(f"Failed to download file: {e}") from e

        logger.debug("File downloaded from S3", extra={"key": key, "size": len(data)})
        return data

    def delete_file(self, key: str) -> None:
        """Delete a stored object.

        Raises:
            S3OperationError: If deletion fails.
        """
        try:
            self._client.delete_object(Bucket=self._bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete file from S3: {e}", extra={"key": key})
            raise S3OperationError(f"Failed to delete file: {e}") from e
        logger.info("File deleted from S3", extra={"key": key})

    def verify_connection(self) -> bool:
        """Verify S3 connection and bucket access.

        Raises:
            S3ConnectionError: If the bucket cannot be reached.
        """
        try:
            self._client.head_bucket(Bucket=self._bucket_name)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 connection verification failed: {e}")
            raise S3ConnectionError(f"Failed to connect to S3: {e}") from e
        logger.info("S3 connection verified successfully")
        return True


class S3Manager:
    """Manager for S3 storage singleton instance."""

    def __init__(self) -> None:
        """Initialize S3 manager with None storage."""
        self.storage: Optional[S3Storage] = None

    def init_storage(self) -> S3Storage:
        """Create the storage client from settings once."""
        if self.storage is not None:
            return self.storage

        settings = get_settings()
        self.storage = S3Storage(
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key=settings.S3_ACCESS_KEY_ID,
            secret_key=settings.S3_SECRET_ACCESS_KEY,
            bucket_name=settings.S3_BUCKET_NAME,
            region=settings.S3_REGION,
        )
        return self.storage


# Global S3 manager instance
s3_manager = S3Manager()


def init_s3() -> None:
    """Initialize S3 storage and verify the bucket.

    Unlike the database, storage being unreachable at startup is logged
    and tolerated: reads keep working and uploads fail with 500.
    """
    logger.info("Initializing S3 storage connection...")
    storage = s3_manager.init_storage()
    try:
        storage.verify_connection()
    except S3ConnectionError:
        logger.warning("S3 storage unreachable at startup")
        return
    logger.info("S3 storage initialized successfully")


def get_s3_storage() -> S3Storage:
    """Get S3 storage instance.

    Raises:
        S3ConnectionError: If storage is not initialized.
    """
    if s3_manager.storage is None:
        raise S3ConnectionError("S3 storage is not initialized")
    return s3_manager.storage


def close_s3() -> None:
    """Drop the storage client."""
    s3_manager.storage = None
    logger.info("S3 storage connection closed")
