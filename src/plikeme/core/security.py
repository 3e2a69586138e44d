"""Password hashing and session token helpers."""
from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from plikeme.core import limits
from plikeme.core.settings import settings

__all__ = [
    "JWTError",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "validate_password",
    "verify_password",
]


def validate_password(password: str) -> list[str]:
    """Return every password rule the candidate violates (empty when valid)."""
    errors: list[str] = []
    if len(password) < limits.PASSWORD_MIN:
        errors.append(f"密码至少需要 {limits.PASSWORD_MIN} 个字符")
    if not re.search(r"[A-Z]", password):
        errors.append("密码需要包含至少一个大写字母")
    if not re.search(r"[a-z]", password):
        errors.append("密码需要包含至少一个小写字母")
    if not re.search(r"[0-9]", password):
        errors.append("密码需要包含至少一个数字")
    if not any(ch in limits.PASSWORD_SPECIALS for ch in password):
        errors.append("密码需要包含至少一个特殊字符 (!@#$%^&*等)")
    return errors


def hash_password(password: str) -> str:
    """Return a salted hash suitable for storage."""
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against its stored hash."""
    return check_password_hash(password_hash, password)


def create_access_token(user_id: int, username: str, expires_minutes: int | None = None) -> str:
    """Sign a session token for the given user.

    Args:
        user_id: Primary key of the authenticated user.
        username: Username embedded for convenience; the id is authoritative.
        expires_minutes: Optional override of the configured lifetime.

    Returns:
        Encoded JWT string.
    """
    lifetime = expires_minutes or settings.access_token_expire_minutes
    payload = {
        "sub": str(user_id),
        "username": username,
        "exp": datetime.now(UTC) + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a session token.

    Raises:
        JWTError: If the signature, expiry or structure is invalid.
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
