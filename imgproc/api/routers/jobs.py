"""
Job API endpoints.

Routes:
- POST /jobs - Create job (presigned upload, or immediate processing for seed)
- POST /jobs/upload - Create job with the image uploaded inline (multipart)
- GET /jobs - List caller's jobs (cached, X-Cache: HIT|MISS)
- GET /jobs/admin/all - List every job (admin group only)
- GET /jobs/{id} - Get job
- POST /jobs/{id}/process - Trigger processing
- GET /jobs/{id}/download - Presigned download URL for the output

Dependencies: fastapi, imgproc.application.services, imgproc.models
System role: Job HTTP API
"""

import json
import logging
import re

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from imgproc.api.deps import (
    get_current_principal,
    get_job_service,
    get_settings_dependency,
    require_admin,
)
from imgproc.application.services.job_service import (
    ADMIN_LIST_LIMIT,
    DEFAULT_PAGE_SIZE,
    CreateResult,
    DispatchResult,
    JobService,
)
from imgproc.boundary.auth.cognito_verifier import Principal
from imgproc.configs import Settings
from imgproc.core.exceptions import BadRequestError
from imgproc.models.common import ErrorResponse
from imgproc.models.job import CreateJobRequest, JobResponse, Step, parse_steps

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

UPLOAD_MESSAGE = (
    "Upload your image to the provided URL, then call the processing endpoint when ready."
)


def _dispatch_body(result: DispatchResult) -> dict:
    if result.accepted:
        return {"id": result.job.id, "status": result.job.status.value}
    return {"id": result.job.id, "output": result.output.model_dump(by_alias=True)}


def _create_body(result: CreateResult) -> dict:
    if result.upload is not None:
        return {
            "id": result.job.id,
            "inputKey": result.job.input_key,
            "outputKey": result.job.output_key,
            "upload": result.upload.model_dump(by_alias=True, mode="json"),
            "message": UPLOAD_MESSAGE,
        }
    return _dispatch_body(result.dispatch)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _query_int(raw: str | None, default: int) -> int:
    """Leading integer of a query value; missing, unparsable or zero means default."""
    match = _LEADING_INT.match(raw or "")
    return (int(match.group(1)) if match else 0) or default


def _parse_form_ops(raw: str) -> list[Step]:
    try:
        candidate = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BadRequestError("Invalid ops JSON payload", field="ops") from e
    if not isinstance(candidate, list) or not candidate:
        raise BadRequestError("Provide ops array", field="ops")
    try:
        return parse_steps(candidate)
    except ValidationError as e:
        first = e.errors()[0]
        raise BadRequestError(f"Invalid ops: {first['msg']}", field="ops") from e


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job(
    request: CreateJobRequest,
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
) -> dict:
    """
    Create a job.

    Upload-sourced jobs return a presigned upload target; seed jobs are
    processed immediately (or queued) and return the output reference.
    """
    result = await job_service.create_job(
        principal,
        request.ops,
        source_id=request.source_id,
        content_type=request.content_type,
    )
    return _create_body(result)


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def create_job_with_upload(
    image: UploadFile = File(...),
    ops: str = Form(...),
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
    settings: Settings = Depends(get_settings_dependency),
) -> dict:
    """Create a job with the source image in the same multipart request."""
    steps = _parse_form_ops(ops)
    max_bytes = settings.s3.max_inline_upload_bytes
    # One byte past the cap is enough to reject without buffering the rest
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise BadRequestError("Uploaded image is too large", field="image")
    result = await job_service.create_job_with_upload(
        principal,
        steps,
        data,
        image.content_type,
    )
    return _create_body(result)


@router.get("")
async def list_jobs(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
) -> dict:
    """List the caller's jobs, newest first."""
    data, hit = await job_service.list_jobs(
        principal,
        _query_int(page, 1),
        _query_int(limit, DEFAULT_PAGE_SIZE),
    )
    response.headers["X-Cache"] = "HIT" if hit else "MISS"
    return data


@router.get("/admin/all")
async def list_all_jobs(
    limit: str | None = Query(default=None),
    principal: Principal = Depends(require_admin),
    job_service: JobService = Depends(get_job_service),
) -> dict:
    """List jobs across every owner (capped)."""
    return await job_service.list_all_jobs(principal, _query_int(limit, ADMIN_LIST_LIMIT))


@router.get("/{job_id}")
async def get_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
) -> dict:
    """Get a single job owned by the caller."""
    job = await job_service.get_job(principal, job_id)
    return JobResponse.model_validate(job).to_wire()


@router.post("/{job_id}/process")
async def process_job(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
):
    """
    Trigger processing of a waiting_upload or failed job.

    200 with the output reference when processed synchronously,
    202 when handed to the queue.
    """
    result = await job_service.trigger_processing(principal, job_id)
    status_code = status.HTTP_202_ACCEPTED if result.accepted else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=_dispatch_body(result))


@router.get("/{job_id}/download")
async def download_job_output(
    job_id: str,
    principal: Principal = Depends(get_current_principal),
    job_service: JobService = Depends(get_job_service),
) -> dict:
    """Presigned download URL for a finished job."""
    url = await job_service.get_download_url(principal, job_id)
    return {"downloadUrl": url}
