"""
Cognito bearer token verification.

Verifies RS256 tokens issued by a Cognito user pool against the pool's JWKS
and turns the claims into a Principal.

Dependencies: PyJWT (with cryptography)
System role: Identity verification for every job route
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient

from imgproc.core.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller."""

    sub: str
    username: str | None = None
    email: str | None = None
    groups: tuple[str, ...] = field(default_factory=tuple)

    @property
    def owner_id(self) -> str:
        return self.sub or self.username or ""

    def has_group(self, group: str) -> bool:
        return group in self.groups


class TokenVerifier(Protocol):
    """Anything that can turn a bearer token into a Principal."""

    def verify(self, token: str) -> Principal: ...


class CognitoTokenVerifier:
    """Verifies Cognito user pool tokens (ID tokens by default)."""

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        region: str = "ap-southeast-2",
        token_use: str = "id",
        jwks_client: PyJWKClient | None = None,
    ) -> None:
        """
        Args:
            user_pool_id: Cognito user pool ID
            client_id: App client ID expected in aud / client_id claim
            region: Pool region
            token_use: Expected token_use claim ("id" or "access")
            jwks_client: Pre-built JWKS client (tests)
        """
        self._client_id = client_id
        self._token_use = token_use
        self._issuer = f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
        self._jwks_client = jwks_client or PyJWKClient(
            f"{self._issuer}/.well-known/jwks.json",
            cache_keys=True,
        )

    @property
    def issuer(self) -> str:
        return self._issuer

    def verify(self, token: str) -> Principal:
        """
        Verify signature, expiry, issuer, audience and token_use.

        Raises:
            UnauthenticatedError: Token is invalid for any reason
        """
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            # Access tokens carry client_id instead of aud
            check_aud = self._token_use == "id"
            claims: dict[str, Any] = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self._client_id if check_aud else None,
                issuer=self._issuer,
                options={"verify_aud": check_aud},
            )
        except jwt.PyJWTError as e:
            logger.info("Token verification failed", extra={"error": str(e)})
            raise UnauthenticatedError("Invalid or expired token") from e

        if claims.get("token_use") != self._token_use:
            raise UnauthenticatedError("Invalid or expired token")
        if not check_aud and claims.get("client_id") != self._client_id:
            raise UnauthenticatedError("Invalid or expired token")

        sub = claims.get("sub")
        username = claims.get("cognito:username") or claims.get("username")
        if not sub and not username:
            raise UnauthenticatedError("Invalid or expired token")

        return Principal(
            sub=sub or username,
            username=username,
            email=claims.get("email"),
            groups=tuple(claims.get("cognito:groups") or ()),
        )
