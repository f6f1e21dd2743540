"""
SQS processing queue consumer.

Long-polls the processing queue, runs each job through the shared completion
path (processing -> done | failed) and deletes the message whatever the
outcome, so a poison message fails one job instead of looping forever.

Run with: python -m imgproc.workers.sqs_consumer

Environment variables:
- PROCESSING_QUEUE_URL: SQS queue URL (required)
- PROCESSING_QUEUE_REGION: Queue region
- S3_BUCKET / S3_REGION: Image bucket
- POSTGRES_*: Job store connection

Dependencies: boto3, sqlalchemy, imgproc.application.services
System role: Queue-driven worker for PROCESSING_MODE=queue
"""

import asyncio
import json
import logging
import signal
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from imgproc.application.services.job_service import JobService
from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.boundary.aws.sqs_client import SQSJobQueue
from imgproc.boundary.cache.list_cache import ListCache, TTLListCache
from imgproc.boundary.db.connection import dispose_engine, get_async_session_factory
from imgproc.configs import Settings, get_settings
from imgproc.core.exceptions import ConfigurationError
from imgproc.core.processing.invoker import LocalInvoker
from imgproc.core.processing.processor import ImageProcessor
from imgproc.models.job import ProcessingMessage
from imgproc.observability.log_utils import log_exception_with_context
from imgproc.observability.logger import configure_logging

logger = logging.getLogger(__name__)


class MessageParseError(Exception):
    """Raised when an SQS message body is not a valid processing payload."""

    pass


def parse_message_body(body: str) -> ProcessingMessage:
    """
    Parse an SQS body into a ProcessingMessage.

    Raises:
        MessageParseError: Body is not JSON or misses required fields
    """
    try:
        payload: Any = json.loads(body)
    except json.JSONDecodeError as e:
        raise MessageParseError(f"Message body is not JSON: {e}") from e
    try:
        return ProcessingMessage.model_validate(payload)
    except ValidationError as e:
        raise MessageParseError(f"Invalid job payload: {e.errors()[0]['msg']}") from e


class SQSJobConsumer:
    """Poll-process-acknowledge loop over the processing queue."""

    def __init__(
        self,
        queue: SQSJobQueue,
        session_factory: async_sessionmaker[AsyncSession],
        s3_client: S3ImageClient,
        settings: Settings,
        cache: ListCache | None = None,
    ) -> None:
        """
        Args:
            queue: Processing queue
            session_factory: Job store session factory
            s3_client: Image bucket client
            settings: Application settings (queue timings)
            cache: Listing cache (local to this process)
        """
        self._queue = queue
        self._session_factory = session_factory
        self._s3 = s3_client
        self._settings = settings
        self._invoker = LocalInvoker(
            ImageProcessor(s3_client, settings.processing.max_output_pixels)
        )
        self._cache = cache or TTLListCache(ttl_seconds=settings.list_cache.ttl_seconds)
        self._stopping = False

    @property
    def stopping(self) -> bool:
        return self._stopping

    def stop(self) -> None:
        """Finish the current message and leave the loop."""
        logger.info("Queue consumer stopping")
        self._stopping = True

    async def handle_message(self, message: dict[str, Any]) -> bool:
        """
        Process one SQS message and delete it.

        Returns:
            True if the job it names was processed successfully
        """
        receipt = message.get("ReceiptHandle")
        body = message.get("Body")
        if not receipt or not body:
            logger.warning(
                "Received message without body or receipt handle; skipping",
                extra={"message_id": message.get("MessageId")},
            )
            return False

        try:
            payload = parse_message_body(body)
        except MessageParseError as e:
            logger.error(
                "Failed to parse message body; deleting",
                extra={"message_id": message.get("MessageId"), "error": str(e)},
            )
            await asyncio.to_thread(self._queue.delete, receipt)
            return False

        processed = False
        try:
            async with self._session_factory() as session:
                service = JobService(
                    db=session,
                    s3_client=self._s3,
                    invoker=self._invoker,
                    cache=self._cache,
                    settings=self._settings,
                )
                processed = await service.process_queued_job(payload)
        except Exception as e:
            log_exception_with_context(
                logger,
                "Error while processing queued job",
                e,
                job_id=payload.job_id,
                message_id=message.get("MessageId"),
            )
        finally:
            await asyncio.to_thread(self._queue.delete, receipt)

        return processed

    async def poll_once(self) -> int:
        """
        Receive up to one message and handle it.

        Returns:
            Number of messages received
        """
        processing = self._settings.processing
        messages = await asyncio.to_thread(
            self._queue.receive,
            processing.queue_wait_seconds,
            processing.queue_visibility_timeout,
            1,
        )
        for message in messages:
            await self.handle_message(message)
        return len(messages)

    async def run(self) -> None:
        """Poll until stop() is called; receive errors back off and retry."""
        logger.info("Queue consumer started", extra={"queue_url": self._queue.queue_url})
        idle_delay = self._settings.processing.queue_idle_delay

        while not self._stopping:
            try:
                received = await self.poll_once()
            except Exception as e:
                log_exception_with_context(logger, "Error while polling queue", e)
                await asyncio.sleep(idle_delay)
                continue
            if received == 0:
                await asyncio.sleep(idle_delay)

        logger.info("Queue consumer stopped")


def build_consumer(settings: Settings) -> SQSJobConsumer:
    """
    Build a consumer from settings.

    Raises:
        ConfigurationError: PROCESSING_QUEUE_URL is not set
    """
    processing = settings.processing
    if not processing.queue_url:
        raise ConfigurationError("PROCESSING_QUEUE_URL is not set; queue consumer cannot run")

    return SQSJobConsumer(
        queue=SQSJobQueue(processing.queue_url, region=processing.queue_region),
        session_factory=get_async_session_factory(),
        s3_client=S3ImageClient(bucket=settings.s3.bucket, region=settings.s3.region),
        settings=settings,
    )


async def _serve(consumer: SQSJobConsumer) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, consumer.stop)
    try:
        await consumer.run()
    finally:
        await dispose_engine()


def main() -> None:
    """Entry point for the queue consumer process."""
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.log_level)
    asyncio.run(_serve(build_consumer(settings)))


if __name__ == "__main__":
    main()
