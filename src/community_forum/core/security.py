"""Comment secrets and moderator tokens."""
from __future__ import annotations

import hashlib
import hmac
from datetime import timedelta

from jose import JWTError, jwt

from community_forum.core.settings import settings
from community_forum.db.time import utcnow

MODERATOR_ROLE = "admin"


def hash_secret(secret: str) -> str:
    """Return a SHA-256 hex digest of a comment password."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def verify_secret(secret: str, secret_hash: str) -> bool:
    """Compare a supplied password against the stored digest in constant time."""
    return hmac.compare_digest(hash_secret(secret), secret_hash)


def create_moderator_token(subject: str, expires_minutes: int | None = None) -> str:
    """Issue a signed token that grants access to the moderation endpoints.

    Args:
        subject: Free-form moderator identifier recorded in the ``sub`` claim.
        expires_minutes: Lifetime override; defaults to the configured value.

    Returns:
        Encoded JWT string.
    """
    minutes = expires_minutes or settings.moderator_token_expire_minutes
    claims: dict[str, object] = {
        "sub": subject,
        "role": MODERATOR_ROLE,
        "exp": utcnow() + timedelta(minutes=minutes),
    }
    encoded: str = jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)
    return encoded


def decode_moderator_token(token: str) -> str:
    """Return the moderator subject if the token is valid and privileged.

    Raises:
        JWTError: If the token is malformed, expired, or lacks the moderator role.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    if payload.get("role") != MODERATOR_ROLE or not subject:
        raise JWTError("Token does not carry moderator privileges")
    return str(subject)
