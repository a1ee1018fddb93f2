"""Console cache-purge webhook: signature check and purge."""

import json

import pytest
from httpx import AsyncClient

from scopegate.infrastructure.cache.keys import jwks_key, org_access_key, user_teams_key
from scopegate.infrastructure.security import compute_signature

URL = "/api/v1/webhooks/cache-purge"


def _signed(payload: dict, secret: str = "test-service-secret") -> tuple[bytes, dict[str, str]]:
    body = json.dumps(payload).encode()
    return body, {
        "Content-Type": "application/json",
        "X-Signature-256": compute_signature(body, secret),
    }


@pytest.mark.requires_db
async def test_valid_signature_purges(client: AsyncClient, seed, fake_cache) -> None:
    user = await seed.user("ann@example.com")
    fake_cache.store[org_access_key(user.id, "org1")] = {"organization_id": "org1"}
    fake_cache.store[user_teams_key(user.id, "org1")] = ["t1"]
    fake_cache.store[org_access_key(user.id, "org2")] = {"organization_id": "org2"}
    fake_cache.store[jwks_key()] = {"keys": []}

    body, request_headers = _signed({"organization_id": "org1", "user_id": user.id})
    response = await client.post(URL, content=body, headers=request_headers)
    assert response.status_code == 200
    assert response.json() == {
        "status": "cleared",
        "organization_id": "org1",
        "user_id": user.id,
    }
    assert list(fake_cache.store) == [org_access_key(user.id, "org2")]


@pytest.mark.requires_db
async def test_wrong_secret_is_403(client: AsyncClient, fake_cache) -> None:
    fake_cache.store[jwks_key()] = {"keys": []}
    body, request_headers = _signed({"organization_id": "org1"}, secret="other-secret")
    response = await client.post(URL, content=body, headers=request_headers)
    assert response.status_code == 403
    assert jwks_key() in fake_cache.store


@pytest.mark.requires_db
async def test_missing_signature_is_403(client: AsyncClient) -> None:
    response = await client.post(URL, json={"organization_id": "org1"})
    assert response.status_code == 403
    assert response.json()["error"] == "HTTP_ERROR"


@pytest.mark.requires_db
async def test_body_altered_after_signing_is_403(client: AsyncClient) -> None:
    _, request_headers = _signed({"organization_id": "org1"})
    tampered = json.dumps({"organization_id": "org2"}).encode()
    response = await client.post(URL, content=tampered, headers=request_headers)
    assert response.status_code == 403
