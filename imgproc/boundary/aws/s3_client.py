"""
S3 client for the image bucket.

Issues presigned upload/download URLs for clients and performs the
object reads/writes the processing pipeline needs.

Dependencies: boto3
System role: Presigned transfer broker and blob I/O
"""

from datetime import datetime, timedelta, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from imgproc.core.exceptions import StorageError


class S3ImageClient:
    """S3 client for job input/output objects."""

    def __init__(
        self,
        bucket: str,
        region: str = "ap-southeast-2",
        client=None,
    ) -> None:
        """
        Initialize S3 client for the image bucket.

        Args:
            bucket: S3 bucket name for job images
            region: AWS region for S3 bucket
            client: Pre-built boto3 S3 client (tests, custom endpoints)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    def generate_presigned_upload_url(
        self,
        s3_key: str,
        content_type: str = "image/png",
        expires_in: int = 300,
    ) -> tuple[str, datetime]:
        """
        Generate presigned URL for uploading a job input.

        Args:
            s3_key: S3 object key (path in bucket)
            content_type: MIME type the client must upload with
            expires_in: URL expiry in seconds (default 5 minutes)

        Returns:
            tuple[str, datetime]: (presigned_url, expires_at)

        Raises:
            StorageError: If presigned URL generation fails
        """
        try:
            presigned_url = self._s3_client.generate_presigned_url(
                ClientMethod="put_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": s3_key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to presign upload: {e}", s3_key) from e
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return presigned_url, expires_at

    def generate_presigned_download_url(
        self,
        s3_key: str,
        expires_in: int = 300,
    ) -> tuple[str, datetime]:
        """
        Generate presigned URL for downloading a job output.

        Args:
            s3_key: S3 object key (path in bucket)
            expires_in: URL expiry in seconds (default 5 minutes)

        Returns:
            tuple[str, datetime]: (presigned_url, expires_at)

        Raises:
            StorageError: If presigned URL generation fails
        """
        try:
            presigned_url = self._s3_client.generate_presigned_url(
                ClientMethod="get_object",
                Params={
                    "Bucket": self._bucket,
                    "Key": s3_key,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to presign download: {e}", s3_key) from e
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return presigned_url, expires_at

    def read_bytes(self, s3_key: str) -> bytes:
        """
        Read a whole object into memory.

        Raises:
            StorageError: Object missing or read failed
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=s3_key)
            return response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise StorageError(f"Object not found in S3: {s3_key}", s3_key) from e
            raise StorageError(f"Failed to read from S3: {e}", s3_key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to read from S3: {e}", s3_key) from e

    def write_bytes(
        self,
        s3_key: str,
        data: bytes,
        content_type: str = "image/png",
    ) -> None:
        """
        Write an object, replacing any existing one.

        Raises:
            StorageError: Write failed
        """
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=s3_key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to write to S3: {e}", s3_key) from e

