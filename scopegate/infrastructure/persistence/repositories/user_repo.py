"""User repository. Interface methods return application DTOs."""

from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.dtos.user import UserResult
from scopegate.domain.exceptions import DuplicateEmailException
from scopegate.infrastructure.persistence.models.team import Team, TeamMember
from scopegate.infrastructure.persistence.models.user import User
from scopegate.infrastructure.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def user_to_result(u: User) -> UserResult:
    """Map ORM User to application UserResult."""
    return UserResult(
        id=u.id,
        name=u.name,
        email=u.email,
        organization_id=u.organization_id,
        is_active=u.is_active,
        is_standalone=u.is_standalone,
    )


class UserRepository(BaseRepository[User]):
    """User repository. Soft-deleted users are invisible to every lookup."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_active_entity(self, user_id: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_result(self, user_id: str) -> UserResult | None:
        user = await self.get_active_entity(user_id)
        return user_to_result(user) if user else None

    async def get_by_subject(self, subject: str) -> User | None:
        """Resolve a token subject: a local user id or a console user id."""
        result = await self.db.execute(
            select(User).where(
                or_(User.id == subject, User.console_user_id == subject),
                User.deleted_at.is_(None),
            )
        )
        return result.scalars().first()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        name: str,
        email: str,
        organization_id: str | None = None,
        console_user_id: str | None = None,
    ) -> UserResult:
        """Create user; raise DuplicateEmailException when the email is taken."""
        user = User(
            name=name,
            email=email,
            organization_id=organization_id,
            console_user_id=console_user_id,
            is_active=True,
        )
        try:
            async with self.db.begin_nested():
                created = await self.create(user)
        except IntegrityError:
            raise DuplicateEmailException(email) from None
        return user_to_result(created)

    async def upsert_console_user(
        self,
        console_user_id: str,
        name: str,
        email: str,
        organization_id: str | None = None,
    ) -> User:
        """Mirror an identity-provider user locally, updating name/email when they changed."""
        result = await self.db.execute(
            select(User).where(User.console_user_id == console_user_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                console_user_id=console_user_id,
                name=name,
                email=email,
                organization_id=organization_id,
                is_active=True,
            )
            try:
                async with self.db.begin_nested():
                    user = await self.create(user)
            except IntegrityError:
                raise DuplicateEmailException(email) from None
            logger.info("Mirrored console user %s as %s", console_user_id, user.id)
            return user
        if user.name != name or user.email != email:
            user.name = name
            user.email = email
            try:
                async with self.db.begin_nested():
                    user = await self.update(user)
            except IntegrityError:
                raise DuplicateEmailException(email) from None
        return user

    async def is_member_of(self, user_id: str, organization_id: str) -> bool:
        """Default organization of the user, or membership of one of its teams."""
        result = await self.db.execute(
            select(User.id).where(
                User.id == user_id,
                User.organization_id == organization_id,
                User.deleted_at.is_(None),
            )
        )
        if result.first() is not None:
            return True
        result = await self.db.execute(
            select(TeamMember.id)
            .join(Team, Team.id == TeamMember.team_id)
            .where(TeamMember.user_id == user_id, Team.organization_id == organization_id)
            .limit(1)
        )
        return result.first() is not None
