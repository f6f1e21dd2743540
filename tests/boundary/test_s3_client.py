"""
Test suite for S3ImageClient and SQSJobQueue with mocked boto3 clients.

System role: Verification of AWS boundary adapters
"""

import io
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.boundary.aws.sqs_client import SQSJobQueue
from imgproc.core.exceptions import StorageError


def client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def boto_s3() -> MagicMock:
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://bucket.s3.amazonaws.com/signed"
    return client


@pytest.fixture
def s3_client(boto_s3) -> S3ImageClient:
    return S3ImageClient(bucket="images", region="ap-southeast-2", client=boto_s3)


class TestPresignedUrls:
    """Test suite for presigned URL generation."""

    def test_upload_url_should_sign_put_with_content_type(self, s3_client, boto_s3) -> None:
        """Test put_object presign parameters and expiry."""
        # Act
        url, expires_at = s3_client.generate_presigned_upload_url("k/input", "image/jpeg", 300)

        # Assert
        assert url == "https://bucket.s3.amazonaws.com/signed"
        boto_s3.generate_presigned_url.assert_called_once_with(
            ClientMethod="put_object",
            Params={"Bucket": "images", "Key": "k/input", "ContentType": "image/jpeg"},
            ExpiresIn=300,
        )
        remaining = (expires_at - datetime.now(timezone.utc)).total_seconds()
        assert 290 < remaining <= 300

    def test_download_url_should_sign_get(self, s3_client, boto_s3) -> None:
        """Test get_object presign parameters."""
        # Act
        s3_client.generate_presigned_download_url("k/output.png", 120)

        # Assert
        boto_s3.generate_presigned_url.assert_called_once_with(
            ClientMethod="get_object",
            Params={"Bucket": "images", "Key": "k/output.png"},
            ExpiresIn=120,
        )

    def test_presign_failure_should_raise_storage_error(self, s3_client, boto_s3) -> None:
        """Test signing errors."""
        # Arrange
        boto_s3.generate_presigned_url.side_effect = client_error("AccessDenied")

        # Act & Assert
        with pytest.raises(StorageError):
            s3_client.generate_presigned_upload_url("k")


class TestObjectIO:
    """Test suite for read/write."""

    def test_read_bytes_should_return_body(self, s3_client, boto_s3) -> None:
        """Test get_object body is read fully."""
        # Arrange
        boto_s3.get_object.return_value = {"Body": io.BytesIO(b"png-bytes")}

        # Act & Assert
        assert s3_client.read_bytes("k") == b"png-bytes"
        boto_s3.get_object.assert_called_once_with(Bucket="images", Key="k")

    def test_read_missing_object_should_raise_storage_error(self, s3_client, boto_s3) -> None:
        """Test NoSuchKey."""
        # Arrange
        boto_s3.get_object.side_effect = client_error("NoSuchKey")

        # Act & Assert
        with pytest.raises(StorageError) as exc_info:
            s3_client.read_bytes("missing")
        assert exc_info.value.details["s3_key"] == "missing"

    def test_write_bytes_should_put_object(self, s3_client, boto_s3) -> None:
        """Test put_object parameters."""
        # Act
        s3_client.write_bytes("k/output.png", b"data")

        # Assert
        boto_s3.put_object.assert_called_once_with(
            Bucket="images",
            Key="k/output.png",
            Body=b"data",
            ContentType="image/png",
        )

    def test_write_failure_should_raise_storage_error(self, s3_client, boto_s3) -> None:
        """Test put_object errors."""
        # Arrange
        boto_s3.put_object.side_effect = client_error("InternalError", "PutObject")

        # Act & Assert
        with pytest.raises(StorageError):
            s3_client.write_bytes("k", b"data")


class TestSQSJobQueue:
    """Test suite for SQSJobQueue."""

    def test_send_should_serialize_payload(self) -> None:
        """Test send_message body."""
        # Arrange
        boto_sqs = MagicMock()
        boto_sqs.send_message.return_value = {"MessageId": "m-1"}
        queue = SQSJobQueue("https://sqs/queue", client=boto_sqs)

        # Act
        message_id = queue.send({"jobId": "j"})

        # Assert
        assert message_id == "m-1"
        kwargs = boto_sqs.send_message.call_args.kwargs
        assert kwargs["QueueUrl"] == "https://sqs/queue"
        assert json.loads(kwargs["MessageBody"]) == {"jobId": "j"}

    def test_receive_should_long_poll(self) -> None:
        """Test receive_message parameters and empty result."""
        # Arrange
        boto_sqs = MagicMock()
        boto_sqs.receive_message.return_value = {}
        queue = SQSJobQueue("https://sqs/queue", client=boto_sqs)

        # Act
        messages = queue.receive(wait_seconds=20, visibility_timeout=300)

        # Assert
        assert messages == []
        boto_sqs.receive_message.assert_called_once_with(
            QueueUrl="https://sqs/queue",
            MaxNumberOfMessages=1,
            WaitTimeSeconds=20,
            VisibilityTimeout=300,
        )

    def test_delete_failure_should_return_false(self) -> None:
        """Test delete errors are logged, not raised."""
        # Arrange
        boto_sqs = MagicMock()
        boto_sqs.delete_message.side_effect = client_error("ReceiptHandleIsInvalid")
        queue = SQSJobQueue("https://sqs/queue", client=boto_sqs)

        # Act & Assert
        assert queue.delete("receipt") is False
