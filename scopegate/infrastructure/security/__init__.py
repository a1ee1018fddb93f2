"""Security adapters: bearer-token verification, signing keys and webhook signatures."""

from scopegate.infrastructure.security.jwks import JwksService
from scopegate.infrastructure.security.jwt import create_access_token, verify_token
from scopegate.infrastructure.security.signature import compute_signature, verify_signature

__all__ = [
    "JwksService",
    "compute_signature",
    "create_access_token",
    "verify_signature",
    "verify_token",
]
