"""HMAC-SHA256 webhook signatures: header value "sha256=<hex digest of the raw body>"."""

import hashlib
import hmac

_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    digest = hmac.HMAC(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{_PREFIX}{digest}"


def verify_signature(body: bytes, signature_header: str | None, secret: str | None) -> bool:
    """True if the header matches HMAC-SHA256(secret, body). An unset secret never matches."""
    if not secret or not signature_header or not signature_header.startswith(_PREFIX):
        return False
    expected = compute_signature(body, secret)
    return hmac.compare_digest(signature_header.strip(), expected)
