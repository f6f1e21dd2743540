"""
Authentication dependencies.

Resolves the bearer token on each request to a verified Principal.

Dependencies: fastapi, imgproc.boundary.auth
System role: Request authentication
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from imgproc.boundary.auth.cognito_verifier import Principal, TokenVerifier
from imgproc.configs import Settings
from imgproc.core.exceptions import ForbiddenError, UnauthenticatedError

from .dependencies import get_settings_dependency, get_token_verifier

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Principal:
    """
    Verify the Authorization: Bearer token.

    Raises:
        UnauthenticatedError: Header missing, not a bearer token, or invalid token
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthenticatedError("Missing bearer token")
    # JWKS fetch on first use is blocking I/O
    return await run_in_threadpool(verifier.verify, credentials.credentials)


async def require_admin(
    principal: Principal = Depends(get_current_principal),
    settings: Settings = Depends(get_settings_dependency),
) -> Principal:
    """
    Require the administrator group.

    Raises:
        ForbiddenError: Principal is not in the admin group
    """
    if not principal.has_group(settings.auth.admin_group):
        raise ForbiddenError("Administrator access required")
    return principal
