"""Roles and permissions API: visibility, admin writes and the role/permission matrix."""

import pytest
from httpx import AsyncClient

from scopegate.infrastructure.cache.keys import role_permissions_key


@pytest.fixture
async def world(seed, global_roles):
    acme = await seed.organization("acme")
    globex = await seed.organization("globex")
    admin = await seed.user("root@example.com", organization_id=acme.id)
    await seed.assign(admin.id, "admin")
    member = await seed.user("ann@example.com", organization_id=acme.id)
    await seed.assign(member.id, "member", acme.id)
    for slug in ("orders.view", "orders.approve", "reports.view"):
        await seed.permission(slug)
    return {"acme": acme, "globex": globex, "admin": admin, "member": member}


class TestRolesApi:
    @pytest.mark.requires_db
    async def test_list_shows_global_and_own_roles(
        self, client: AsyncClient, headers, seed, world
    ) -> None:
        await seed.role("auditor", 30, organization_id=world["acme"].id)
        await seed.role("courier", 5, organization_id=world["globex"].id)

        response = await client.get(
            "/api/v1/roles", headers=headers(world["member"].id, world["acme"].id)
        )
        assert response.status_code == 200
        assert [r["slug"] for r in response.json()] == ["admin", "manager", "auditor", "member"]

        owned = await client.get(
            "/api/v1/roles",
            params={"scope": "org"},
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert [r["slug"] for r in owned.json()] == ["auditor"]
        assert owned.json()[0]["is_global"] is False

    @pytest.mark.requires_db
    async def test_foreign_role_is_404(self, client: AsyncClient, headers, seed, world) -> None:
        courier = await seed.role("courier", 5, organization_id=world["globex"].id)
        response = await client.get(
            f"/api/v1/roles/{courier.id}",
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert response.status_code == 404

    @pytest.mark.requires_db
    async def test_create_requires_admin(self, client: AsyncClient, headers, world) -> None:
        response = await client.post(
            "/api/v1/roles",
            json={"name": "Clerk", "slug": "clerk", "level": 20},
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert response.status_code == 403

    @pytest.mark.requires_db
    async def test_create_with_permissions(self, client: AsyncClient, headers, world) -> None:
        admin_headers = headers(world["admin"].id)
        response = await client.post(
            "/api/v1/roles",
            json={
                "name": "Clerk",
                "slug": "clerk",
                "level": 20,
                "organization_id": world["acme"].id,
                "permissions": ["orders.view"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        role = response.json()
        assert role["organization_id"] == world["acme"].id
        assert role["is_global"] is False

        listed = await client.get(
            f"/api/v1/roles/{role['id']}/permissions",
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert [p["slug"] for p in listed.json()] == ["orders.view"]

        duplicate = await client.post(
            "/api/v1/roles",
            json={"name": "Clerk", "slug": "clerk", "organization_id": world["acme"].id},
            headers=admin_headers,
        )
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "DUPLICATE_ROLE"

    @pytest.mark.requires_db
    async def test_level_below_one_is_422(self, client: AsyncClient, headers, world) -> None:
        response = await client.post(
            "/api/v1/roles",
            json={"name": "Nobody", "slug": "nobody", "level": 0},
            headers=headers(world["admin"].id),
        )
        assert response.status_code == 422

    @pytest.mark.requires_db
    async def test_system_role_delete_is_409(
        self, client: AsyncClient, headers, world, global_roles
    ) -> None:
        response = await client.delete(
            f"/api/v1/roles/{global_roles['member'].id}", headers=headers(world["admin"].id)
        )
        assert response.status_code == 409
        assert response.json()["error"] == "SYSTEM_ROLE_PROTECTED"

    @pytest.mark.requires_db
    async def test_update_and_delete_custom_role(
        self, client: AsyncClient, headers, seed, world
    ) -> None:
        clerk = await seed.role("clerk", 20)
        admin_headers = headers(world["admin"].id)
        updated = await client.patch(
            f"/api/v1/roles/{clerk.id}", json={"level": 25}, headers=admin_headers
        )
        assert updated.status_code == 200
        assert updated.json()["level"] == 25
        assert updated.json()["slug"] == "clerk"

        deleted = await client.delete(f"/api/v1/roles/{clerk.id}", headers=admin_headers)
        assert deleted.status_code == 204
        missing = await client.get(f"/api/v1/roles/{clerk.id}", headers=admin_headers)
        assert missing.status_code == 404

    @pytest.mark.requires_db
    async def test_sync_permissions(
        self, client: AsyncClient, headers, seed, world, fake_cache
    ) -> None:
        clerk = await seed.role("clerk", 20, permissions=["orders.view"])
        fake_cache.store[role_permissions_key(clerk.id)] = ["orders.view"]
        url = f"/api/v1/roles/{clerk.id}/permissions"

        response = await client.put(
            url,
            json={"permissions": ["orders.approve", "reports.view"]},
            headers=headers(world["admin"].id),
        )
        assert response.status_code == 200
        assert response.json() == {"attached": 2, "detached": 1}
        assert role_permissions_key(clerk.id) not in fake_cache.store

        unknown = await client.put(
            url, json={"permissions": ["ghost.perm"]}, headers=headers(world["admin"].id)
        )
        assert unknown.status_code == 400
        assert unknown.json()["error"] == "VALIDATION_ERROR"


class TestPermissionsApi:
    @pytest.mark.requires_db
    async def test_list_and_groups(self, client: AsyncClient, headers, world) -> None:
        member_headers = headers(world["member"].id)
        listed = await client.get(
            "/api/v1/permissions", params={"search": "orders"}, headers=member_headers
        )
        assert listed.status_code == 200
        assert [p["slug"] for p in listed.json()] == ["orders.approve", "orders.view"]

        groups = await client.get("/api/v1/permissions/groups", headers=member_headers)
        assert groups.json() == ["orders", "reports"]

    @pytest.mark.requires_db
    async def test_list_requires_authentication(self, client: AsyncClient, world) -> None:
        response = await client.get("/api/v1/permissions")
        assert response.status_code == 401

    @pytest.mark.requires_db
    async def test_matrix_keyed_by_role_id(
        self, client: AsyncClient, headers, seed, world, global_roles
    ) -> None:
        local_manager = await seed.role(
            "manager", 60, organization_id=world["acme"].id, permissions=["orders.approve"]
        )
        response = await client.get(
            "/api/v1/permissions/matrix",
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert response.status_code == 200
        data = response.json()
        assert local_manager.id in data["matrix"]
        assert global_roles["manager"].id in data["matrix"]
        assert data["matrix"][local_manager.id] == ["orders.approve"]
        assert data["matrix"][global_roles["manager"].id] == []
        assert data["groups"] == ["orders", "reports"]

    @pytest.mark.requires_db
    async def test_create_and_delete(
        self, client: AsyncClient, headers, seed, world, fake_cache
    ) -> None:
        admin_headers = headers(world["admin"].id)
        created = await client.post(
            "/api/v1/permissions",
            json={"name": "Export orders", "slug": "orders.export", "group": "orders"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        permission_id = created.json()["id"]

        duplicate = await client.post(
            "/api/v1/permissions",
            json={"name": "Export", "slug": "orders.export"},
            headers=admin_headers,
        )
        assert duplicate.status_code == 409

        exporter = await seed.role("exporter", 20, permissions=["orders.export"])
        fake_cache.store[role_permissions_key(exporter.id)] = ["orders.export"]
        deleted = await client.delete(
            f"/api/v1/permissions/{permission_id}", headers=admin_headers
        )
        assert deleted.status_code == 204
        assert role_permissions_key(exporter.id) not in fake_cache.store

    @pytest.mark.requires_db
    async def test_create_requires_admin(self, client: AsyncClient, headers, world) -> None:
        response = await client.post(
            "/api/v1/permissions",
            json={"name": "Export", "slug": "orders.export"},
            headers=headers(world["member"].id, world["acme"].id),
        )
        assert response.status_code == 403
