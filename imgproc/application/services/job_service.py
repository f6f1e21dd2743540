"""
Job service orchestrator.

Coordinates the job lifecycle: creation (with presigned upload or inline
image), processing dispatch, completion, ownership-checked reads, cached
listings and download URLs.

State machine:
    (new) -> waiting_upload | processing
    waiting_upload | failed -> processing   (trigger, owner only)
    processing -> done | failed             (completion, idempotent)

Dependencies: imgproc.boundary.db, imgproc.boundary.aws, imgproc.boundary.cache,
              imgproc.core.processing
System role: Job management orchestration
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from imgproc.boundary.auth.cognito_verifier import Principal
from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.boundary.cache.list_cache import ListCache
from imgproc.boundary.db.base import utc_now
from imgproc.boundary.db.CRUD.job_crud import job_crud
from imgproc.boundary.db.models.job_model import (
    TRIGGERABLE_STATUSES,
    JobModel,
    JobSource,
    JobStatus,
)
from imgproc.configs.settings import Settings
from imgproc.core.exceptions import (
    BadRequestError,
    BadStateError,
    ForbiddenError,
    JobNotFoundError,
    ProcessingError,
    StorageError,
)
from imgproc.core.processing.invoker import ProcessingInvoker, ProcessingRequest
from imgproc.core.processing.pipeline import oversized_resize
from imgproc.models.job import (
    JobResponse,
    OutputTarget,
    ProcessingMessage,
    Step,
    UploadTarget,
    dump_steps,
    parse_steps,
)
from imgproc.observability.log_utils import job_log_context, log_exception_with_context

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
ADMIN_LIST_LIMIT = 50


def input_key_for(owner_id: str, job_id: str) -> str:
    return f"users/{owner_id}/jobs/{job_id}/input"


def output_key_for(owner_id: str, job_id: str) -> str:
    return f"users/{owner_id}/jobs/{job_id}/output.png"


@dataclass
class DispatchResult:
    """
    Outcome of handing a job to the invoker.

    accepted is True when the work was queued and completes elsewhere;
    output is set only when a synchronous run finished.
    """

    job: JobModel
    output: OutputTarget | None = None
    accepted: bool = False


@dataclass
class CreateResult:
    """Outcome of job creation: either an upload target or a dispatch result."""

    job: JobModel
    upload: UploadTarget | None = None
    dispatch: DispatchResult | None = None


class JobService:
    """
    Job service orchestrator.

    Every create and status change commits immediately and invalidates the
    owner's list cache entry. Status transitions use the store's conditional
    update, so concurrent triggers dispatch at most once and repeated
    completions are no-ops.
    """

    def __init__(
        self,
        db: AsyncSession,
        s3_client: S3ImageClient,
        invoker: ProcessingInvoker,
        cache: ListCache,
        settings: Settings,
    ) -> None:
        """
        Initialize job service.

        Args:
            db: AsyncSession for job records
            s3_client: Presigned URL broker and blob I/O
            invoker: Where processing runs (local, worker, queue)
            cache: Per-owner listing cache
            settings: Application settings
        """
        self.db = db
        self._s3 = s3_client
        self._invoker = invoker
        self._cache = cache
        self._settings = settings

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_job(
        self,
        principal: Principal,
        steps: list[Step],
        source_id: str = JobSource.UPLOAD.value,
        content_type: str | None = None,
    ) -> CreateResult:
        """
        Create a job.

        Upload-sourced jobs start in waiting_upload and return a presigned
        upload URL. Seed-sourced jobs start in processing and are dispatched
        immediately.

        Args:
            principal: Authenticated caller (becomes the owner)
            steps: Ordered transform steps (at least one)
            source_id: "upload" or "seed"
            content_type: Content type the client will upload with

        Returns:
            CreateResult: Created job plus upload target or dispatch outcome

        Raises:
            BadRequestError: No steps, an oversized resize or unknown source
            ProcessingError: Synchronous processing of a seed job failed
        """
        self._check_steps(steps)
        try:
            source = JobSource(source_id)
        except ValueError as e:
            raise BadRequestError(f"Unknown sourceId: {source_id}", field="sourceId") from e

        owner_id = principal.owner_id
        job_id = str(uuid.uuid4())

        if source is JobSource.SEED:
            input_key = self._settings.s3.seed_key
            status = JobStatus.PROCESSING
        else:
            input_key = input_key_for(owner_id, job_id)
            status = JobStatus.WAITING_UPLOAD

        job = await self._insert(job_id, owner_id, source, steps, status, input_key)

        if source is JobSource.SEED:
            return CreateResult(job=job, dispatch=await self._run(job, steps))

        upload_type = self._normalize_content_type(content_type)
        url, expires_at = await asyncio.to_thread(
            self._s3.generate_presigned_upload_url,
            input_key,
            upload_type,
            self._settings.s3.upload_url_expiry,
        )
        return CreateResult(
            job=job,
            upload=UploadTarget(
                url=url,
                key=input_key,
                content_type=upload_type,
                expires_at=expires_at,
            ),
        )

    async def create_job_with_upload(
        self,
        principal: Principal,
        steps: list[Step],
        data: bytes,
        content_type: str | None,
    ) -> CreateResult:
        """
        Create a job whose input image arrives with the request.

        The record starts in processing, the bytes are stored at the job's
        input key, then the job is dispatched.

        Raises:
            BadRequestError: No steps, empty/oversized image or unsupported type
            ProcessingError: Storing the input or synchronous processing failed
        """
        self._check_steps(steps)
        if not data:
            raise BadRequestError("Uploaded image is empty", field="image")
        if len(data) > self._settings.s3.max_inline_upload_bytes:
            raise BadRequestError("Uploaded image is too large", field="image")
        if content_type not in self._settings.s3.allowed_upload_types:
            raise BadRequestError(
                f"Unsupported image type: {content_type}", field="image"
            )

        owner_id = principal.owner_id
        job_id = str(uuid.uuid4())
        input_key = input_key_for(owner_id, job_id)

        job = await self._insert(
            job_id, owner_id, JobSource.UPLOAD, steps, JobStatus.PROCESSING, input_key
        )

        try:
            await asyncio.to_thread(self._s3.write_bytes, input_key, data, content_type)
        except StorageError as e:
            logger.error(
                "Failed to store inline upload",
                extra={"job_id": job_id, "error": str(e)},
            )
            await self.complete_job(job_id, succeeded=False)
            raise ProcessingError("Image processing failed", job_id) from e

        return CreateResult(job=job, dispatch=await self._run(job, steps, data=data))

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    async def trigger_processing(self, principal: Principal, job_id: str) -> DispatchResult:
        """
        Move a waiting_upload or failed job to processing and dispatch it.

        Only the owner may trigger processing.

        Raises:
            JobNotFoundError: Unknown job
            ForbiddenError: Caller does not own the job
            BadStateError: Job is not waiting_upload or failed
            ProcessingError: Synchronous processing failed (job is now failed)
        """
        job = await self._get_or_404(job_id)
        if job.owner_id != principal.owner_id:
            raise ForbiddenError("You do not own this job", {"job_id": job_id})
        if job.status not in TRIGGERABLE_STATUSES:
            raise BadStateError(f"Job is {job.status.value}", job_id, job.status.value)

        moved = await job_crud.transition(
            self.db, job_id, TRIGGERABLE_STATUSES, JobStatus.PROCESSING
        )
        await self.db.commit()
        if not moved:
            # Another trigger won the race
            current = await self._get_or_404(job_id)
            raise BadStateError(f"Job is {current.status.value}", job_id, current.status.value)

        self._cache.invalidate(job.owner_id)
        job = await self._get_or_404(job_id)
        logger.info("Job processing triggered", extra=job_log_context(job))

        return await self._run(job, parse_steps(job.ops))

    async def complete_job(self, job_id: str, succeeded: bool) -> bool:
        """
        Record the terminal outcome of a processing run.

        Applies only to jobs currently in processing, so a duplicate
        completion (e.g. redelivered queue message) is a no-op.

        Returns:
            True if the job changed state
        """
        status = JobStatus.DONE if succeeded else JobStatus.FAILED
        changed = await job_crud.transition(
            self.db,
            job_id,
            {JobStatus.PROCESSING},
            status,
            finished_at=utc_now(),
        )
        await self.db.commit()

        if changed:
            job = await job_crud.get_by_id(self.db, job_id)
            if job is not None:
                self._cache.invalidate(job.owner_id)
            logger.info("Job finished", extra={"job_id": job_id, "status": status.value})
        else:
            logger.info(
                "Job completion ignored; job not processing",
                extra={"job_id": job_id, "status": status.value},
            )
        return changed

    async def process_queued_job(self, message: ProcessingMessage) -> bool:
        """
        Run a job received from the processing queue.

        Uses the stored record's keys and ops. Skips jobs that no longer
        exist or are not in processing (duplicate delivery).

        Returns:
            True if the job was processed successfully
        """
        if not message.job_id:
            logger.warning("Queue message without jobId; skipping")
            return False

        job = await job_crud.get_by_id(self.db, message.job_id)
        if job is None:
            logger.warning("No job found for queue message", extra={"job_id": message.job_id})
            return False
        if message.owner_id and job.owner_id != message.owner_id:
            logger.warning(
                "Job owner mismatch",
                extra={
                    "job_id": job.id,
                    "expected_owner": job.owner_id,
                    "message_owner": message.owner_id,
                },
            )
        if job.status is not JobStatus.PROCESSING:
            logger.info(
                "Skipping queue message; job not processing",
                extra={"job_id": job.id, "status": job.status.value},
            )
            return False

        request = ProcessingRequest(
            job_id=job.id,
            owner_id=job.owner_id,
            input_key=job.input_key or message.input_key,
            output_key=job.output_key or message.output_key,
            steps=parse_steps(job.ops),
        )
        try:
            await self._invoker.dispatch(request)
        except Exception as e:
            logger.error(
                "Queued job failed",
                extra={"job_id": job.id, "error_type": type(e).__name__, "error": str(e)},
            )
            await self.complete_job(job.id, succeeded=False)
            return False

        await self.complete_job(job.id, succeeded=True)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_job(self, principal: Principal, job_id: str) -> JobModel:
        """
        Fetch a job readable by the principal (owner or administrator).

        Raises:
            JobNotFoundError: Unknown job
            ForbiddenError: Caller neither owns the job nor is an administrator
        """
        job = await self._get_or_404(job_id)
        if job.owner_id != principal.owner_id and not self._is_admin(principal):
            raise ForbiddenError("You do not own this job", {"job_id": job_id})
        return job

    async def list_jobs(
        self,
        principal: Principal,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[dict, bool]:
        """
        One page of the caller's jobs, newest first.

        Args:
            principal: Authenticated caller
            page: 1-based page (clamped to >= 1)
            limit: Page size (clamped to 1..100)

        Returns:
            (data, cache_hit) where data is {items, page, limit, total}
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        owner_id = principal.owner_id

        cached = self._cache.get(owner_id)
        if cached is not None and cached["page"] == page and cached["limit"] == limit:
            return cached, True

        items, total = await job_crud.list_by_owner(self.db, owner_id, page, limit)
        data = {
            "items": [JobResponse.model_validate(job).to_wire() for job in items],
            "page": page,
            "limit": limit,
            "total": total,
        }
        self._cache.put(owner_id, data)
        return data, False

    async def get_download_url(self, principal: Principal, job_id: str) -> str:
        """
        Presigned download URL for a finished job's output.

        Raises:
            JobNotFoundError, ForbiddenError: As get_job
            BadStateError: Job is not done
        """
        job = await self.get_job(principal, job_id)
        if job.status is not JobStatus.DONE or not job.output_key:
            raise BadStateError("Output not ready", job_id, job.status.value)
        url, _ = await asyncio.to_thread(
            self._s3.generate_presigned_download_url,
            job.output_key,
            self._settings.s3.download_url_expiry,
        )
        return url

    async def list_all_jobs(self, principal: Principal, limit: int = ADMIN_LIST_LIMIT) -> dict:
        """
        Administrative listing across every owner, capped at 50.

        Raises:
            ForbiddenError: Caller is not an administrator
        """
        if not self._is_admin(principal):
            raise ForbiddenError("Administrator access required")
        limit = min(max(limit, 1), ADMIN_LIST_LIMIT)
        items, total = await job_crud.list_all(self.db, limit)
        return {
            "items": [JobResponse.model_validate(job).to_wire() for job in items],
            "limit": limit,
            "total": total,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _insert(
        self,
        job_id: str,
        owner_id: str,
        source: JobSource,
        steps: list[Step],
        status: JobStatus,
        input_key: str,
    ) -> JobModel:
        job = await job_crud.create(
            self.db,
            id=job_id,
            owner_id=owner_id,
            source_id=source,
            ops=dump_steps(steps),
            status=status,
            input_key=input_key,
            output_key=output_key_for(owner_id, job_id),
        )
        await self.db.commit()
        self._cache.invalidate(owner_id)
        logger.info(
            "Job created",
            extra={"job_id": job_id, "owner_id": owner_id, "status": status.value},
        )
        return job

    async def _run(
        self,
        job: JobModel,
        steps: list[Step],
        data: bytes | None = None,
    ) -> DispatchResult:
        """Dispatch a processing job and, for synchronous invokers, complete it."""
        request = ProcessingRequest(
            job_id=job.id,
            owner_id=job.owner_id,
            input_key=job.input_key,
            output_key=job.output_key,
            steps=steps,
            data=data,
        )
        try:
            await self._invoker.dispatch(request)
        except Exception as e:
            log_exception_with_context(logger, "Job processing failed", e, job_id=job.id)
            await self.complete_job(job.id, succeeded=False)
            raise ProcessingError("Image processing failed", job.id) from e

        if self._invoker.is_async:
            return DispatchResult(job=job, accepted=True)

        await self.complete_job(job.id, succeeded=True)
        job = await self._get_or_404(job.id)
        url, _ = await asyncio.to_thread(
            self._s3.generate_presigned_download_url,
            job.output_key,
            self._settings.s3.download_url_expiry,
        )
        return DispatchResult(job=job, output=OutputTarget(image_id=job.id, url=url))

    async def _get_or_404(self, job_id: str) -> JobModel:
        job = await job_crud.get_by_id(self.db, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _is_admin(self, principal: Principal) -> bool:
        return principal.has_group(self._settings.auth.admin_group)

    def _check_steps(self, steps: list[Step]) -> None:
        if not steps:
            raise BadRequestError("Provide ops array", field="ops")
        max_pixels = self._settings.processing.max_output_pixels
        too_large = oversized_resize(steps, max_pixels)
        if too_large is not None:
            raise BadRequestError(
                f"Resize to {too_large.width}x{too_large.height} exceeds {max_pixels} pixels",
                field="ops",
            )

    def _normalize_content_type(self, content_type: str | None) -> str:
        allowed = self._settings.s3.allowed_upload_types
        if content_type in allowed:
            return content_type
        return "image/png"
