"""Tests for webhook signatures, bearer tokens, signing keys and cache keys."""

from datetime import timedelta

import pytest

from scopegate.infrastructure.cache.keys import (
    org_access_key,
    org_access_pattern,
    role_permissions_key,
    user_org_access_pattern,
)
from scopegate.infrastructure.security import (
    JwksService,
    compute_signature,
    create_access_token,
    verify_signature,
    verify_token,
)


class TestSignature:
    def test_valid_signature(self) -> None:
        body = b'{"organization_id":"org1"}'
        header = compute_signature(body, "s3cret")
        assert header.startswith("sha256=")
        assert verify_signature(body, header, "s3cret")

    def test_tampered_body_rejected(self) -> None:
        header = compute_signature(b"original", "s3cret")
        assert not verify_signature(b"tampered", header, "s3cret")

    def test_wrong_secret_rejected(self) -> None:
        header = compute_signature(b"body", "other")
        assert not verify_signature(b"body", header, "s3cret")

    def test_missing_or_malformed_header_rejected(self) -> None:
        assert not verify_signature(b"body", None, "s3cret")
        assert not verify_signature(b"body", "md5=abc", "s3cret")

    def test_unset_secret_never_matches(self) -> None:
        header = compute_signature(b"body", "")
        assert not verify_signature(b"body", header, None)
        assert not verify_signature(b"body", header, "")


class TestTokens:
    def test_round_trip(self) -> None:
        token = create_access_token({"sub": "user-1"})
        assert verify_token(token)["sub"] == "user-1"

    def test_expired_token_rejected(self) -> None:
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
        with pytest.raises(ValueError, match="Invalid token"):
            verify_token(token)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            verify_token("not-a-jwt")

    def test_missing_sub_rejected(self) -> None:
        token = create_access_token({"name": "no subject"})
        with pytest.raises(ValueError):
            verify_token(token)


class TestCacheKeys:
    def test_formats(self) -> None:
        assert role_permissions_key("r1") == "role_permissions:r1"
        assert org_access_key("u1", "org1") == "org_access:u1:org1"
        assert org_access_pattern("org1") == "org_access:*:org1"
        assert user_org_access_pattern("u1") == "org_access:u1:*"

    def test_separator_in_component_rejected(self) -> None:
        with pytest.raises(ValueError, match="separator"):
            org_access_key("u:1", "org1")


class FakeConsole:
    def __init__(self) -> None:
        self.calls = 0

    async def get_jwks(self):
        self.calls += 1
        return {"keys": [{"kid": "k1", "kty": "RSA"}]}

    async def get_organization_access(self, bearer_token, organization_id):
        return None


class TestJwksService:
    async def test_no_console_means_no_keys(self) -> None:
        assert await JwksService(None).get_keys() == {}

    async def test_keys_are_cached_until_cleared(self, fake_cache) -> None:
        console = FakeConsole()
        service = JwksService(console, fake_cache, ttl=60)
        await service.get_keys()
        keys = await service.get_keys()
        assert keys["keys"][0]["kid"] == "k1"
        assert console.calls == 1
        await service.clear_cache()
        await service.get_keys()
        assert console.calls == 2
