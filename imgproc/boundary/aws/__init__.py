"""
AWS boundary modules.

Exports: S3ImageClient, SQSJobQueue
"""

from .s3_client import S3ImageClient
from .sqs_client import SQSJobQueue

__all__ = ["S3ImageClient", "SQSJobQueue"]
