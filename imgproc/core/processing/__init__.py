"""
Image processing module.

Exports: apply_steps, ImageProcessor, ProcessingRequest, ProcessingInvoker,
LocalInvoker, WorkerInvoker, QueueInvoker, build_invoker
"""

from .invoker import (
    LocalInvoker,
    ProcessingInvoker,
    ProcessingRequest,
    QueueInvoker,
    WorkerInvoker,
    build_invoker,
)
from .pipeline import apply_steps
from .processor import ImageProcessor

__all__ = [
    "apply_steps",
    "ImageProcessor",
    "ProcessingRequest",
    "ProcessingInvoker",
    "LocalInvoker",
    "WorkerInvoker",
    "QueueInvoker",
    "build_invoker",
]
