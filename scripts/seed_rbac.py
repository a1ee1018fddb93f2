"""Seed the RBAC catalogue (permissions and global roles), optionally granting admin.

Usage:
    python -m scripts.seed_rbac [admin_email [organization_id]]

With an email, that user receives the admin role, globally or org-wide in
organization_id. Safe to run repeatedly.
"""

import asyncio
import sys

from scopegate.core.config import get_settings
from scopegate.infrastructure.persistence import database
from scopegate.infrastructure.services import RbacInitializationService
from scopegate.shared.telemetry.logging import setup_logging


async def main() -> None:
    """Seed RBAC and grant admin when asked."""
    args = sys.argv[1:]
    if len(args) > 2:
        print(
            "Usage: python -m scripts.seed_rbac [admin_email [organization_id]]",
            file=sys.stderr,
        )
        sys.exit(1)

    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            service = RbacInitializationService(session, settings.role_levels)
            await service.initialize()
            if args:
                email = args[0]
                organization_id = args[1] if len(args) > 1 else None
                created = await service.assign_admin_role(email, organization_id)
                scope = organization_id or "global"
                state = "granted" if created else "already held"
                print(f"Admin role {state} for {email} ({scope})")
    await database.dispose_engine()
    print("RBAC catalogue seeded")


if __name__ == "__main__":
    asyncio.run(main())
