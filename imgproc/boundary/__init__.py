"""
Boundary layer for external system integrations.

Handles all interactions with external systems (job database, S3, SQS,
Cognito) plus the in-process list cache. Provides adapters and clients
for infrastructure dependencies.
"""
