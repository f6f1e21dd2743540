"""
S3-backed image processor.

Reads the input object, runs the Pillow pipeline off the event loop and
writes the PNG output object.

Dependencies: imgproc.boundary.aws, imgproc.core.processing.pipeline
System role: Processing contract shared by the API, worker and consumer
"""

import asyncio
import logging

from imgproc.boundary.aws.s3_client import S3ImageClient
from imgproc.core.exceptions import ProcessingError, StorageError
from imgproc.core.processing.pipeline import apply_steps
from imgproc.models.job import Step

logger = logging.getLogger(__name__)

OUTPUT_CONTENT_TYPE = "image/png"


class ImageProcessor:
    """Runs transform steps between two S3 locations."""

    def __init__(self, s3_client: S3ImageClient, max_pixels: int | None = None) -> None:
        """
        Args:
            s3_client: Image bucket client
            max_pixels: Largest resize output allowed (None for no limit)
        """
        self._s3 = s3_client
        self._max_pixels = max_pixels

    async def process(self, input_key: str, steps: list[Step], output_key: str) -> None:
        """
        Read input_key, apply steps, write PNG to output_key.

        Raises:
            ProcessingError: Read, transform or write failed
        """
        try:
            data = await asyncio.to_thread(self._s3.read_bytes, input_key)
        except StorageError as e:
            raise ProcessingError(f"Failed to read input: {e.message}") from e
        await self.process_bytes(data, steps, output_key)

    async def process_bytes(self, data: bytes, steps: list[Step], output_key: str) -> None:
        """
        Apply steps to already-loaded bytes and write PNG to output_key.

        Raises:
            ProcessingError: Transform or write failed
        """
        result = await asyncio.to_thread(apply_steps, data, steps, self._max_pixels)
        try:
            await asyncio.to_thread(
                self._s3.write_bytes, output_key, result, OUTPUT_CONTENT_TYPE
            )
        except StorageError as e:
            raise ProcessingError(f"Failed to write output: {e.message}") from e

        logger.info(
            "Image processed",
            extra={"output_key": output_key, "steps": len(steps), "bytes": len(result)},
        )
