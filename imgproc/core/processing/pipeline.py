"""
Pillow transform pipeline.

Decodes an image, applies resize/blur/sharpen steps strictly in order and
re-encodes the result as PNG regardless of the input format.

Dependencies: Pillow
System role: Pure transform stage of the processing pipeline
"""

import io
import logging

from PIL import Image, ImageFilter, UnidentifiedImageError

from imgproc.core.exceptions import ProcessingError
from imgproc.models.job import BlurStep, ResizeStep, SharpenStep, Step

logger = logging.getLogger(__name__)

# Modes that survive every filter and PNG encoding unchanged
_NATIVE_MODES = {"L", "RGB", "RGBA"}


def oversized_resize(steps: list[Step], max_pixels: int | None) -> ResizeStep | None:
    """First resize step whose output would exceed max_pixels, if any."""
    if max_pixels is None:
        return None
    for step in steps:
        if isinstance(step, ResizeStep) and step.width * step.height > max_pixels:
            return step
    return None


def _apply_step(image: Image.Image, step: Step) -> Image.Image:
    if isinstance(step, ResizeStep):
        # Exact target size, aspect ratio not preserved
        return image.resize((step.width, step.height))
    if isinstance(step, BlurStep):
        return image.filter(ImageFilter.GaussianBlur(radius=step.sigma))
    if isinstance(step, SharpenStep):
        if step.sigma is None:
            return image.filter(ImageFilter.SHARPEN)
        return image.filter(ImageFilter.UnsharpMask(radius=step.sigma))
    raise ProcessingError(f"Unsupported step: {step!r}")


def apply_steps(
    image_bytes: bytes,
    steps: list[Step],
    max_pixels: int | None = None,
) -> bytes:
    """
    Apply transform steps to an encoded image.

    Args:
        image_bytes: Encoded input (any format Pillow can read)
        steps: Ordered transform steps
        max_pixels: Largest resize output allowed (None for no limit)

    Returns:
        bytes: PNG-encoded result

    Raises:
        ProcessingError: Input cannot be decoded, a resize exceeds
            max_pixels or a transform fails
    """
    if not image_bytes:
        raise ProcessingError("Input image is empty")
    too_large = oversized_resize(steps, max_pixels)
    if too_large is not None:
        raise ProcessingError(
            f"Resize to {too_large.width}x{too_large.height} exceeds {max_pixels} pixels"
        )

    try:
        with Image.open(io.BytesIO(image_bytes)) as source:
            source.load()
            image = source if source.mode in _NATIVE_MODES else source.convert("RGBA")

            for step in steps:
                image = _apply_step(image, step)

            output = io.BytesIO()
            image.save(output, format="PNG")
    except ProcessingError:
        raise
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("Image transform failed", extra={"error": str(e)})
        raise ProcessingError(f"Image transform failed: {e}") from e

    return output.getvalue()
