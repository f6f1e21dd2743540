"""
Remote processing worker (HTTP).

Routes:
- GET / - Liveness ("worker-ok")
- POST /v1/worker/process - Run transforms between two S3 keys

Serve with: uvicorn imgproc.workers.worker_app:app

Dependencies: fastapi, imgproc.core.processing
System role: CPU-bound processing offloaded from the API tier
"""

import hmac
import logging

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import PlainTextResponse

from imgproc.api.error_handlers import register_exception_handlers
from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.configs import Settings, get_settings
from imgproc.core.exceptions import BadRequestError, UnauthenticatedError
from imgproc.core.processing.invoker import WORKER_PROCESS_PATH
from imgproc.core.processing.pipeline import oversized_resize
from imgproc.core.processing.processor import ImageProcessor
from imgproc.models.job import ProcessingMessage
from imgproc.observability.logger import configure_logging
from imgproc.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

load_dotenv()

logger = logging.getLogger(__name__)


def get_worker_processor(request: Request) -> ImageProcessor:
    return request.app.state.processor


def verify_worker_token(
    request: Request,
    x_worker_token: str | None = Header(default=None),
) -> None:
    """
    Shared-secret check; open when no token is configured.

    Raises:
        UnauthenticatedError: Configured token does not match the header
    """
    expected = request.app.state.worker_token
    if not expected:
        return
    if not x_worker_token or not hmac.compare_digest(x_worker_token, expected):
        raise UnauthenticatedError("unauthorised")


def create_worker_app(
    settings: Settings | None = None,
    processor: ImageProcessor | None = None,
) -> FastAPI:
    """
    Create the worker application.

    Args:
        settings: Settings (defaults to get_settings())
        processor: Image processor (defaults to one backed by the configured bucket)

    Returns:
        FastAPI: Worker application
    """
    settings = settings or get_settings()
    if processor is None:
        processor = ImageProcessor(
            S3ImageClient(bucket=settings.s3.bucket, region=settings.s3.region),
            settings.processing.max_output_pixels,
        )

    app = FastAPI(title="Image Processing Worker", version="0.1.0")
    app.state.processor = processor
    app.state.worker_token = settings.processing.worker_token

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    async def liveness() -> str:
        return "worker-ok"

    @app.post(WORKER_PROCESS_PATH, dependencies=[Depends(verify_worker_token)])
    async def process(
        message: ProcessingMessage,
        image_processor: ImageProcessor = Depends(get_worker_processor),
    ) -> dict:
        """Run the transform pipeline; 200 once the output object is written."""
        max_pixels = settings.processing.max_output_pixels
        if oversized_resize(message.ops, max_pixels) is not None:
            raise BadRequestError(f"Resize exceeds {max_pixels} pixels", field="ops")
        await image_processor.process(message.input_key, message.ops, message.output_key)
        logger.info(
            "Worker processed image",
            extra={"input_key": message.input_key, "output_key": message.output_key},
        )
        return {"ok": True, "outputKey": message.output_key}

    return app


def _build_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    return create_worker_app(settings)


app = _build_default_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("imgproc.workers.worker_app:app", host="0.0.0.0", port=3001)
