"""Object store for product images, backed by S3."""

import logging
import mimetypes
import uuid
from pathlib import PurePath

from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_s3.client import S3Client

from koperasi_storefront.exceptions import BackendWriteError

logger = logging.getLogger(__name__)


class ObjectStore:
    """Upload, delete and address files in object storage buckets."""

    def __init__(
        self,
        s3_client: S3Client,
        region: str = "us-east-1",
        public_base_urls: dict[str, str] | None = None,
    ) -> None:
        """Initialize the object store.

        Args:
            s3_client: Boto3 S3 client
            region: Region used to build default public URLs
            public_base_urls: Optional bucket name to public base URL (e.g. a CDN)
        """
        self.s3 = s3_client
        self.region = region
        self.public_base_urls = {k: v.rstrip("/") for k, v in (public_base_urls or {}).items()}

    def upload_file(
        self,
        bucket: str,
        data: bytes,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Upload bytes under a fresh, stable key.

        Args:
            bucket: Bucket name
            data: File contents
            filename: Original filename, used only for its extension
            content_type: MIME type, guessed from the filename when omitted

        Returns:
            str: The file reference (object key)

        Raises:
            BackendWriteError: If the upload failed
        """
        suffix = PurePath(filename).suffix.lower() if filename else ""
        file_ref = f"{uuid.uuid4().hex}{suffix}"

        if content_type is None and filename:
            content_type = mimetypes.guess_type(filename)[0]

        try:
            self.s3.put_object(
                Bucket=bucket,
                Key=file_ref,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
            logger.info(f"Uploaded {len(data)} bytes to {bucket}/{file_ref}")
            return file_ref

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to upload file to {bucket}: {e}")
            raise BackendWriteError("Failed to upload image") from e

    def delete_file(self, bucket: str, file_ref: str) -> None:
        """Delete a file.

        Args:
            bucket: Bucket name
            file_ref: File reference returned by upload_file

        Raises:
            BackendWriteError: If the delete failed
        """
        try:
            self.s3.delete_object(Bucket=bucket, Key=file_ref)

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete {bucket}/{file_ref}: {e}")
            raise BackendWriteError("Failed to delete image") from e

    def get_public_url(self, bucket: str, file_ref: str) -> str:
        """Build the public URL of a file.

        Args:
            bucket: Bucket name
            file_ref: File reference returned by upload_file

        Returns:
            str: Publicly readable URL
        """
        if bucket in self.public_base_urls:
            return f"{self.public_base_urls[bucket]}/{file_ref}"
        return f"https://{bucket}.s3.{self.region}.amazonaws.com/{file_ref}"
