"""
Worker tier.

Two ways to run image processing outside the API process:
- worker_app: HTTP worker called synchronously by the API (PROCESSING_MODE=worker)
- sqs_consumer: long-poll loop draining the processing queue (PROCESSING_MODE=queue)
"""
