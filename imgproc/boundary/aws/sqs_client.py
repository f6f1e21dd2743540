"""
SQS client for the processing queue.

Thin wrapper over send/receive/delete used by the queue invoker (API side)
and the queue consumer (worker side).

Dependencies: boto3
System role: Message queue adapter
"""

import json
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class SQSJobQueue:
    """SQS queue carrying processing requests."""

    def __init__(self, queue_url: str, region: str = "ap-southeast-2", client=None) -> None:
        """
        Args:
            queue_url: Full SQS queue URL
            region: AWS region of the queue
            client: Pre-built boto3 SQS client (tests, custom endpoints)
        """
        self._queue_url = queue_url
        self._sqs_client = client or boto3.client("sqs", region_name=region)

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def send(self, payload: dict[str, Any]) -> str:
        """
        Enqueue a JSON payload.

        Returns:
            str: SQS MessageId
        """
        response = self._sqs_client.send_message(
            QueueUrl=self._queue_url,
            MessageBody=json.dumps(payload),
        )
        return response["MessageId"]

    def receive(
        self,
        wait_seconds: int = 20,
        visibility_timeout: int = 300,
        max_messages: int = 1,
    ) -> list[dict[str, Any]]:
        """
        Long-poll for messages.

        Returns:
            list of raw SQS messages (Body, ReceiptHandle, MessageId, ...)
        """
        response = self._sqs_client.receive_message(
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=max_messages,
            WaitTimeSeconds=wait_seconds,
            VisibilityTimeout=visibility_timeout,
        )
        return response.get("Messages", [])

    def delete(self, receipt_handle: str) -> bool:
        """
        Delete a received message; failures are logged, not raised.

        Returns:
            bool: True if the delete call succeeded
        """
        try:
            self._sqs_client.delete_message(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to delete SQS message", extra={"error": str(e)})
            return False
