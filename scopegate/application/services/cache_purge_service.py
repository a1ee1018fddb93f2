"""Cache purge requested by the console when roles, teams or signing keys change."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scopegate.application.services.authorization_service import AuthorizationService
from scopegate.infrastructure.security.jwks import JwksService

if TYPE_CHECKING:
    from scopegate.infrastructure.persistence.repositories import UserRepository

logger = logging.getLogger(__name__)


class CachePurgeService:
    """Clears per-(user, organization) caches and the signing-key cache."""

    def __init__(
        self,
        authorization: AuthorizationService,
        jwks: JwksService,
        user_repo: UserRepository,
    ) -> None:
        self._authorization = authorization
        self._jwks = jwks
        self._users = user_repo

    async def purge(self, organization_id: str, user_id: str | None = None) -> None:
        """user_id may be a local id or a console user id; both spellings are purged."""
        if user_id:
            user_ids = {user_id}
            user = await self._users.get_by_subject(user_id)
            if user is not None:
                user_ids.add(user.id)
            for uid in sorted(user_ids):
                await self._authorization.purge_user_organization(uid, organization_id)
        await self._jwks.clear_cache()
        logger.info("Cache purge for organization %s (user=%s)", organization_id, user_id)
