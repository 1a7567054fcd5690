"""
Password hashing (scrypt) and session cookie signing (JWT).

Stored password format is ``<digest hex>.<salt hex>``: a 64-byte scrypt
digest (N=16384, r=8, p=1) keyed on the hex text of a 16-byte random salt.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime
from typing import Final

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

HASH_DELIMITER: Final[str] = "."
SALT_BYTES: Final[int] = 16
SCRYPT_N: Final[int] = 16384
SCRYPT_R: Final[int] = 8
SCRYPT_P: Final[int] = 1
SCRYPT_DKLEN: Final[int] = 64
_SCRYPT_MAXMEM: Final[int] = 64 * 1024 * 1024


# ── Passwords ───────────────────────────────────────────────────────
def _derive(plain: str, salt_hex: str) -> bytes:
    return hashlib.scrypt(
        plain.encode("utf-8"),
        salt=salt_hex.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=_SCRYPT_MAXMEM,
        dklen=SCRYPT_DKLEN,
    )


def get_password_hash(plain: str) -> str:
    salt_hex = secrets.token_hex(SALT_BYTES)
    return f"{_derive(plain, salt_hex).hex()}{HASH_DELIMITER}{salt_hex}"


def verify_password(plain: str, hashed: str) -> bool:
    """Check *plain* against a stored hash. Malformed hashes never match."""
    digest_hex, _, salt_hex = hashed.partition(HASH_DELIMITER)
    if not digest_hex or not salt_hex:
        logger.error("Invalid password hash format (missing digest or salt)")
        return False
    try:
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        logger.error("Invalid password hash format (digest is not hex)")
        return False
    return hmac.compare_digest(expected, _derive(plain, salt_hex))


# ── Session cookies ─────────────────────────────────────────────────
def sign_session_id(session_id: str, expires_at: datetime) -> str:
    return jwt.encode(
        {"sid": session_id, "exp": expires_at},
        settings.SESSION_SECRET,
        algorithm=settings.SESSION_SIGNING_ALGORITHM,
    )


def unsign_session_id(cookie_value: str) -> str | None:
    """Return the session id if the cookie signature is valid, else ``None``."""
    try:
        payload = jwt.decode(
            cookie_value,
            settings.SESSION_SECRET,
            algorithms=[settings.SESSION_SIGNING_ALGORITHM],
        )
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None
