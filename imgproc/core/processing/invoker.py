"""
Processing invokers.

Select where transforms run: in-process, on a remote HTTP worker, or via an
SQS message picked up by the queue consumer. Synchronous invokers return
once the output is written; the queue invoker returns after enqueueing.

Dependencies: httpx, boto3 (via SQSJobQueue), imgproc.core.processing.processor
System role: Dispatch seam between the job service and the worker tier
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from botocore.exceptions import BotoCoreError, ClientError

from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.boundary.aws.sqs_client import SQSJobQueue
from imgproc.configs.settings import Settings
from imgproc.core.exceptions import ConfigurationError, ProcessingError
from imgproc.core.processing.processor import ImageProcessor
from imgproc.models.job import ProcessingMessage, Step

logger = logging.getLogger(__name__)

WORKER_PROCESS_PATH = "/v1/worker/process"
WORKER_TOKEN_HEADER = "X-Worker-Token"


@dataclass
class ProcessingRequest:
    """One unit of work handed to an invoker."""

    job_id: str
    owner_id: str
    input_key: str
    output_key: str
    steps: list[Step]
    data: bytes | None = None

    def to_message(self) -> ProcessingMessage:
        return ProcessingMessage(
            job_id=self.job_id,
            owner_id=self.owner_id,
            input_key=self.input_key,
            output_key=self.output_key,
            ops=self.steps,
        )

    def to_payload(self) -> dict:
        return self.to_message().to_wire()


class ProcessingInvoker(Protocol):
    """Dispatch contract used by the job service."""

    is_async: bool

    async def dispatch(self, request: ProcessingRequest) -> None: ...


class LocalInvoker:
    """Runs transforms in the API process."""

    is_async = False

    def __init__(self, processor: ImageProcessor) -> None:
        self._processor = processor

    async def dispatch(self, request: ProcessingRequest) -> None:
        if request.data is not None:
            await self._processor.process_bytes(request.data, request.steps, request.output_key)
        else:
            await self._processor.process(request.input_key, request.steps, request.output_key)


class WorkerInvoker:
    """Delegates transforms to the remote HTTP worker and waits for the result."""

    is_async = False

    def __init__(
        self,
        base_url: str,
        token: str,
        http_client: httpx.AsyncClient,
        timeout: float = 120.0,
    ) -> None:
        self._url = base_url.rstrip("/") + WORKER_PROCESS_PATH
        self._token = token
        self._http = http_client
        self._timeout = timeout

    async def dispatch(self, request: ProcessingRequest) -> None:
        payload = {
            "inputKey": request.input_key,
            "outputKey": request.output_key,
            "ops": request.to_payload()["ops"],
        }
        try:
            response = await self._http.post(
                self._url,
                json=payload,
                headers={WORKER_TOKEN_HEADER: self._token},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise ProcessingError(f"Worker request failed: {e}", request.job_id) from e

        if response.status_code >= 300:
            logger.error(
                "Worker rejected job",
                extra={
                    "job_id": request.job_id,
                    "status_code": response.status_code,
                    "body": response.text[:500],
                },
            )
            raise ProcessingError(
                f"Worker returned {response.status_code}", request.job_id
            )


class QueueInvoker:
    """Enqueues the job for the SQS consumer; completion is written there."""

    is_async = True

    def __init__(self, queue: SQSJobQueue) -> None:
        self._queue = queue

    async def dispatch(self, request: ProcessingRequest) -> None:
        try:
            message_id = await asyncio.to_thread(self._queue.send, request.to_payload())
        except (ClientError, BotoCoreError) as e:
            raise ProcessingError(f"Failed to enqueue job: {e}", request.job_id) from e
        logger.info(
            "Job enqueued",
            extra={"job_id": request.job_id, "message_id": message_id},
        )


def build_invoker(
    settings: Settings,
    s3_client: S3ImageClient,
    http_client: httpx.AsyncClient | None = None,
    queue: SQSJobQueue | None = None,
) -> ProcessingInvoker:
    """
    Build the invoker selected by processing.mode.

    Raises:
        ConfigurationError: Mode-specific settings are missing
    """
    processing = settings.processing

    if processing.mode == "local":
        return LocalInvoker(ImageProcessor(s3_client, processing.max_output_pixels))

    if processing.mode == "worker":
        if not processing.worker_base_url or not processing.worker_token:
            raise ConfigurationError(
                "worker mode requires PROCESSING_WORKER_BASE_URL and PROCESSING_WORKER_TOKEN"
            )
        if http_client is None:
            raise ConfigurationError("worker mode requires an HTTP client")
        return WorkerInvoker(
            processing.worker_base_url,
            processing.worker_token,
            http_client,
            timeout=processing.worker_timeout,
        )

    if processing.mode == "queue":
        if queue is None:
            if not processing.queue_url:
                raise ConfigurationError("queue mode requires PROCESSING_QUEUE_URL")
            queue = SQSJobQueue(processing.queue_url, region=processing.queue_region)
        return QueueInvoker(queue)

    raise ConfigurationError(f"Unknown processing mode: {processing.mode}")
