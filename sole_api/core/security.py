"""Password hashing and JWT helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from sole_api.core.config import AuthSettings, settings
from sole_api.core.errors import AuthenticationAppError


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain password against a bcrypt hash; malformed hashes never match."""
    if not plain:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(
    user_id: str,
    email: str,
    *,
    auth_settings: AuthSettings | None = None,
    now: datetime | None = None,
) -> str:
    """Issue a signed access token for ``user_id``."""
    cfg = auth_settings or settings.auth
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": issued_at + timedelta(minutes=cfg.jwt_expire_minutes),
    }
    return jwt.encode(payload, cfg.jwt_secret, algorithm=cfg.jwt_algorithm)


def decode_access_token(token: str, *, auth_settings: AuthSettings | None = None) -> dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        AuthenticationAppError: If the token is malformed, forged or expired.
    """
    cfg = auth_settings or settings.auth
    try:
        payload = jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationAppError(
            code="invalid_token",
            message="Invalid or expired token",
        ) from exc

    if not payload.get("sub"):
        raise AuthenticationAppError(code="invalid_token", message="Invalid or expired token")
    return payload
