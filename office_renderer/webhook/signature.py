"""Sign outbound webhook payloads so receivers can verify their origin."""
from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


class SignatureError(ValueError):
    """Raised when a secret cannot be used as an HMAC key."""


def _digest(secret: str, payload_json: str) -> str:
    if not secret:
        raise SignatureError("Webhook secret must be a non-empty string")
    return hmac.new(secret.encode("utf-8"), payload_json.encode("utf-8"), hashlib.sha256).hexdigest()


def sign_payload(secret: str, payload_json: str) -> str:
    """Return ``sha256=<hex HMAC-SHA256 of the payload keyed by secret>``."""
    return f"{SIGNATURE_PREFIX}{_digest(secret, payload_json)}"


def verify_signature(secret: str, payload_json: str, signature: str) -> bool:
    """Check a received signature header in constant time."""
    return hmac.compare_digest(sign_payload(secret, payload_json), signature or "")
