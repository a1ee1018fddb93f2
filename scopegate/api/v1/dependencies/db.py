"""Repository and service dependencies (composition root).

Read endpoints get repositories on a plain session (get_db); writes get
the transactional session (get_db_transactional). FastAPI caches each
dependency per request, so every write-side dependency of one request
shares one session and one transaction.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scopegate.application.services import (
    AuthorizationService,
    CachePurgeService,
    PermissionService,
    RoleService,
    UserRoleService,
)
from scopegate.core.config import get_settings
from scopegate.infrastructure.persistence.database import get_db, get_db_transactional
from scopegate.infrastructure.persistence.repositories import (
    BranchRepository,
    OrganizationRepository,
    PermissionRepository,
    RoleAssignmentRepository,
    RolePermissionRepository,
    RoleRepository,
    TeamRepository,
    UserRepository,
)
from scopegate.infrastructure.security import JwksService
from scopegate.infrastructure.services import PermissionResolver


def get_cache(request: Request):
    """Cache set in app lifespan when Redis is enabled; None otherwise."""
    return getattr(request.app.state, "cache", None)


def get_console(request: Request):
    """Console client set in app lifespan in console mode; None otherwise."""
    return getattr(request.app.state, "console", None)


def build_authorization_service(db: AsyncSession, cache) -> AuthorizationService:
    settings = get_settings()
    return AuthorizationService(
        assignment_store=RoleAssignmentRepository(db),
        permission_resolver=PermissionResolver(db),
        cache=cache,
        role_permissions_ttl=settings.cache_ttl_role_permissions,
        team_permissions_ttl=settings.cache_ttl_team_permissions,
        user_teams_ttl=settings.cache_ttl_user_teams,
    )


async def get_authorization_service(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthorizationService:
    """AuthorizationService for gates and reads.

    Without a cache every check resolves from the database.
    """
    return build_authorization_service(db, get_cache(request))


async def get_authorization_service_for_write(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> AuthorizationService:
    """AuthorizationService on the write session (sees the request's own changes)."""
    return build_authorization_service(db, get_cache(request))


async def get_jwks_service(request: Request) -> JwksService:
    return JwksService(
        get_console(request),
        get_cache(request),
        ttl=get_settings().cache_ttl_jwks,
    )


# ---- Repositories ----


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    return UserRepository(db)


async def get_user_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> UserRepository:
    """User repository on the write session (console users are mirrored on login)."""
    return UserRepository(db)


async def get_role_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RoleRepository:
    return RoleRepository(db)


async def get_role_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> RoleRepository:
    return RoleRepository(db)


async def get_permission_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PermissionRepository:
    return PermissionRepository(db)


async def get_permission_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> PermissionRepository:
    return PermissionRepository(db)


async def get_role_permission_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RolePermissionRepository:
    return RolePermissionRepository(db)


async def get_role_permission_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> RolePermissionRepository:
    return RolePermissionRepository(db)


async def get_organization_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> OrganizationRepository:
    """Organization repository on the write session (console organizations are mirrored)."""
    return OrganizationRepository(db)


async def get_branch_repo_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> BranchRepository:
    return BranchRepository(db)


# ---- Services ----


def _user_role_service(db: AsyncSession, authorization: AuthorizationService) -> UserRoleService:
    role_repo = RoleRepository(db)
    return UserRoleService(
        assignment_repo=RoleAssignmentRepository(db, role_repo),
        role_repo=role_repo,
        user_repo=UserRepository(db),
        organization_repo=OrganizationRepository(db),
        branch_repo=BranchRepository(db),
        team_repo=TeamRepository(db),
        authorization=authorization,
    )


async def get_user_role_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
) -> UserRoleService:
    """UserRoleService for listings and the permission breakdown."""
    return _user_role_service(db, authorization)


async def get_user_role_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    authorization: Annotated[
        AuthorizationService, Depends(get_authorization_service_for_write)
    ],
) -> UserRoleService:
    """UserRoleService for assign/sync/remove (transactional)."""
    return _user_role_service(db, authorization)


async def get_role_service(
    role_repo: Annotated[RoleRepository, Depends(get_role_repo)],
    permission_repo: Annotated[PermissionRepository, Depends(get_permission_repo)],
    role_permission_repo: Annotated[
        RolePermissionRepository, Depends(get_role_permission_repo)
    ],
) -> RoleService:
    """Role service for reads."""
    return RoleService(
        role_repo=role_repo,
        permission_repo=permission_repo,
        role_permission_repo=role_permission_repo,
        system_role_slugs=get_settings().system_role_slugs,
    )


async def get_role_service_for_write(
    role_repo: Annotated[RoleRepository, Depends(get_role_repo_for_write)],
    permission_repo: Annotated[
        PermissionRepository, Depends(get_permission_repo_for_write)
    ],
    role_permission_repo: Annotated[
        RolePermissionRepository, Depends(get_role_permission_repo_for_write)
    ],
    authorization: Annotated[
        AuthorizationService, Depends(get_authorization_service_for_write)
    ],
) -> RoleService:
    """Role service for create/update/delete and permission sync."""
    return RoleService(
        role_repo=role_repo,
        permission_repo=permission_repo,
        role_permission_repo=role_permission_repo,
        authorization=authorization,
        system_role_slugs=get_settings().system_role_slugs,
    )


async def get_permission_service(
    permission_repo: Annotated[PermissionRepository, Depends(get_permission_repo)],
    role_repo: Annotated[RoleRepository, Depends(get_role_repo)],
    role_permission_repo: Annotated[
        RolePermissionRepository, Depends(get_role_permission_repo)
    ],
) -> PermissionService:
    return PermissionService(permission_repo, role_repo, role_permission_repo)


async def get_permission_service_for_write(
    permission_repo: Annotated[
        PermissionRepository, Depends(get_permission_repo_for_write)
    ],
    role_repo: Annotated[RoleRepository, Depends(get_role_repo_for_write)],
    role_permission_repo: Annotated[
        RolePermissionRepository, Depends(get_role_permission_repo_for_write)
    ],
) -> PermissionService:
    return PermissionService(permission_repo, role_repo, role_permission_repo)


async def get_cache_purge_service(
    authorization: Annotated[AuthorizationService, Depends(get_authorization_service)],
    jwks: Annotated[JwksService, Depends(get_jwks_service)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> CachePurgeService:
    return CachePurgeService(authorization, jwks, user_repo)
