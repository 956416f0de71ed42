from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class Role(str, Enum):
    """Closed set of account roles; each one owns a full row in the capability matrix."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    ATTENDANT = "attendant"
    CONSULTANT = "consultant"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}

    @classmethod
    def parse(cls, value: Role | str | None) -> Role | None:
        """Return the matching role, or ``None`` for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def create_access_token(
    subject: str,
    *,
    role: Role | str,
    supervisor_id: str | None = None,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token for a single-role actor."""
    settings = get_settings()

    role_value = role.value if isinstance(role, Role) else role
    if role_value not in settings.allowed_roles:
        raise TokenError(f"Unsupported role: {role_value}")

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload = {
        "sub": subject,
        "role": role_value,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if supervisor_id:
        payload["supervisor_id"] = supervisor_id
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    if not Role.contains(payload.get("role", "")):
        raise TokenError(f"Unsupported role: {payload.get('role')}")
    return payload


def role_name(role: Role | str | None) -> str:
    """Plain string form of a role for logs and payloads."""
    if isinstance(role, Role):
        return role.value
    return str(role)
