"""JWT verification for bearer tokens.

Standalone mode verifies HS256 tokens signed with SECRET_KEY. Console mode
verifies tokens signed by the console against its published key set
(JwksService). create_access_token exists for local tooling and tests;
token issuance for end users lives in the identity provider.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JOSEError, jwt

from scopegate.core.config import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create an HS256 access token with the given claims (sub = user id)."""
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta is not None:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode["exp"] = expire
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str, jwks: dict[str, Any] | None = None) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    With jwks (console mode) the token must be RS256-signed by one of those
    keys; otherwise it is checked against SECRET_KEY. exp and sub are required.

    Raises:
        ValueError: If token is invalid, expired, or missing required claims.
    """
    settings = get_settings()
    if jwks is not None:
        key: Any = jwks
        algorithms = ["RS256"]
    else:
        key = settings.secret_key.get_secret_value()
        algorithms = [settings.algorithm]
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            options={"require_exp": True, "require_sub": True, "verify_aud": False},
        )
    except JOSEError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload
