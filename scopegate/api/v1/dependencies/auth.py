"""Authentication dependencies: bearer token to UserResult."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from scopegate.application.dtos.user import UserResult
from scopegate.domain.enums import AuthMode
from scopegate.domain.exceptions import AuthenticationException
from scopegate.infrastructure.persistence.repositories import UserRepository
from scopegate.infrastructure.persistence.repositories.user_repo import user_to_result
from scopegate.infrastructure.security import JwksService, verify_token

from .db import get_jwks_service, get_user_repo_for_write

logger = logging.getLogger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> str | None:
    """Raw bearer token, forwarded to the console on access checks."""
    return credentials.credentials if credentials else None


async def _verify(token: str, mode: AuthMode, jwks: JwksService) -> dict:
    if mode is AuthMode.CONSOLE:
        keys = await jwks.get_keys()
        if not keys:
            raise AuthenticationException("No signing keys available")
        return verify_token(token, keys)
    return verify_token(token)


async def get_current_user(
    token: Annotated[str | None, Depends(get_bearer_token)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
    jwks: Annotated[JwksService, Depends(get_jwks_service)],
) -> UserResult:
    """Return the authenticated user; raise AuthenticationException (401) otherwise.

    Standalone tokens carry a local user id as sub. Console tokens carry the
    console user id; that user is mirrored locally (name and email claims)
    on first sight and kept in sync afterwards.
    """
    if not token:
        raise AuthenticationException("Not authenticated")
    mode = AuthMode.current()
    try:
        payload = await _verify(token, mode, jwks)
    except ValueError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise AuthenticationException("Invalid or expired token") from None
    subject = str(payload["sub"])

    if mode is AuthMode.CONSOLE:
        email = payload.get("email")
        if not email:
            raise AuthenticationException("Token missing required claim: email")
        user = await user_repo.upsert_console_user(
            subject,
            name=payload.get("name") or email,
            email=email,
        )
    else:
        user = await user_repo.get_by_subject(subject)

    if user is None or not user.is_active:
        raise AuthenticationException("User not found or inactive")
    return user_to_result(user)
