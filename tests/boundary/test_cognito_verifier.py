"""
Test suite for CognitoTokenVerifier.

Signs tokens with a throwaway RSA key and serves the public key through a
stub JWKS client.

System role: Verification of bearer token checks
"""

import time
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from imgproc.boundary.auth.cognito_verifier import CognitoTokenVerifier, Principal
from imgproc.core.exceptions import UnauthenticatedError

POOL_ID = "ap-southeast-2_TESTPOOL"
CLIENT_ID = "client-123"
ISSUER = f"https://cognito-idp.ap-southeast-2.amazonaws.com/{POOL_ID}"


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(private_key) -> CognitoTokenVerifier:
    jwks_client = MagicMock()
    jwks_client.get_signing_key_from_jwt.return_value = MagicMock(key=private_key.public_key())
    return CognitoTokenVerifier(
        user_pool_id=POOL_ID,
        client_id=CLIENT_ID,
        region="ap-southeast-2",
        jwks_client=jwks_client,
    )


@pytest.fixture
def sign(private_key):
    def _sign(**overrides) -> str:
        now = int(time.time())
        claims = {
            "sub": "sub-1",
            "cognito:username": "alice",
            "email": "alice@example.com",
            "cognito:groups": ["imgproc-admins"],
            "aud": CLIENT_ID,
            "iss": ISSUER,
            "token_use": "id",
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        claims = {key: value for key, value in claims.items() if value is not None}
        return jwt.encode(claims, private_key, algorithm="RS256")

    return _sign


class TestCognitoTokenVerifier:
    """Test suite for CognitoTokenVerifier.verify()."""

    def test_valid_id_token_should_yield_principal(self, verifier, sign) -> None:
        """Test claims mapping."""
        # Act
        principal = verifier.verify(sign())

        # Assert
        assert principal == Principal(
            sub="sub-1",
            username="alice",
            email="alice@example.com",
            groups=("imgproc-admins",),
        )
        assert principal.owner_id == "sub-1"
        assert principal.has_group("imgproc-admins")

    def test_issuer_should_follow_pool(self, verifier) -> None:
        """Test issuer URL."""
        # Assert
        assert verifier.issuer == ISSUER

    @pytest.mark.parametrize(
        "overrides",
        [
            {"aud": "other-client"},
            {"iss": "https://evil.example.com"},
            {"token_use": "access"},
            {"exp": int(time.time()) - 10},
        ],
    )
    def test_invalid_claims_should_raise_unauthenticated(self, verifier, sign, overrides) -> None:
        """Test audience, issuer, token_use and expiry checks."""
        # Act & Assert
        with pytest.raises(UnauthenticatedError) as exc_info:
            verifier.verify(sign(**overrides))
        assert exc_info.value.message == "Invalid or expired token"

    def test_wrong_signing_key_should_raise_unauthenticated(self, verifier) -> None:
        """Test signature verification."""
        # Arrange
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = jwt.encode(
            {"sub": "x", "aud": CLIENT_ID, "iss": ISSUER, "token_use": "id",
             "exp": int(time.time()) + 60},
            other_key,
            algorithm="RS256",
        )

        # Act & Assert
        with pytest.raises(UnauthenticatedError):
            verifier.verify(token)

    def test_garbage_token_should_raise_unauthenticated(self, private_key) -> None:
        """Test malformed tokens fail in the JWKS lookup."""
        # Arrange
        jwks_client = MagicMock()
        jwks_client.get_signing_key_from_jwt.side_effect = jwt.DecodeError("bad token")
        verifier = CognitoTokenVerifier(POOL_ID, CLIENT_ID, jwks_client=jwks_client)

        # Act & Assert
        with pytest.raises(UnauthenticatedError):
            verifier.verify("not-a-jwt")

    def test_missing_groups_should_yield_empty_tuple(self, verifier, sign) -> None:
        """Test tokens without cognito:groups."""
        # Act
        principal = verifier.verify(sign(**{"cognito:groups": None}))

        # Assert
        assert principal.groups == ()
        assert not principal.has_group("imgproc-admins")
