"""
Identity boundary.

Exports: Principal, TokenVerifier, CognitoTokenVerifier
"""

from .cognito_verifier import CognitoTokenVerifier, Principal, TokenVerifier

__all__ = ["CognitoTokenVerifier", "Principal", "TokenVerifier"]
