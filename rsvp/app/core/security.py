"""Password hashing and signed session tokens.

Passwords are stored as `sha256$<salt>$<hexdigest>`. Rows created before
salting hold a bare SHA-256 hex digest; those still verify.

Session tokens are `<b64(payload)>.<b64(sig)>` signed with HMAC-SHA256 and
carry their expiry (`exp`) inside the payload.
"""
# app/core/security.py
import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Optional
from rsvp.app.core.config import settings

HASH_SCHEME = "sha256"


def hash_password(password: str, salt: str | None = None) -> str:
    salt = salt if salt is not None else secrets.token_hex(8)
    digest = hashlib.sha256(f"{salt}{password or ''}".encode()).hexdigest()
    return f"{HASH_SCHEME}${salt}${digest}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    if not stored_hash:
        return False
    if stored_hash.startswith(f"{HASH_SCHEME}$"):
        try:
            _, salt, _ = stored_hash.split("$", 2)
        except ValueError:
            return False
        return hmac.compare_digest(hash_password(password, salt), stored_hash)
    # legacy unsalted digest
    legacy = hashlib.sha256((password or "").encode()).hexdigest()
    return hmac.compare_digest(legacy, stored_hash)


def _b64u_encode(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode()


def _b64u_decode(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + pad)


def sign_token(payload: dict, ttl_sec: int) -> str:
    """Sign a session token with TTL.

    Args:
        payload: Session claims (`sub`, `role`, ...).
        ttl_sec: Lifetime in seconds (recorded in the `exp` field).

    Returns:
        str: A token of the form `<b64(data)>.<b64(sig)>`.
    """
    data = payload | {"exp": int(time.time()) + int(ttl_sec)}
    raw = json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode()
    sig = hmac.new(settings.SECRET_KEY.encode(), raw, hashlib.sha256).digest()
    return f"{_b64u_encode(raw)}.{_b64u_encode(sig)}"


def read_token(token: str) -> Optional[dict]:
    """Check the signature of a token and decode it.

    Expiry is not checked here: callers decide whether an expired token
    means "expired session" or "no session".

    Returns:
        dict | None: Decoded claims when the signature matches, otherwise None.
    """
    try:
        raw_b64, sig_b64 = token.split(".", 1)
        raw = _b64u_decode(raw_b64)
        sig = _b64u_decode(sig_b64)
    except (ValueError, AttributeError):
        return None

    expected = hmac.new(settings.SECRET_KEY.encode(), raw, hashlib.sha256).digest()
    if not hmac.compare_digest(sig, expected):
        return None
    try:
        return json.loads(raw.decode())
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def is_expired(claims: dict, now: float | None = None) -> bool:
    now = time.time() if now is None else now
    return claims.get("exp", 0) < int(now)
