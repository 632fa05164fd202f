"""Authentication for the EstiMate Pro API.

bcrypt password hashes, opaque session tokens and one-time password reset
tokens stored in Redis. Falls back to in-process storage when Redis is
unreachable (development).
"""

from __future__ import annotations

import json
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt
import redis
import structlog

from estimatepro.config import get_config

logger = structlog.get_logger(__name__)

SESSION_PREFIX = "session:"
RESET_PREFIX = "password_reset:"

# In-memory fallback for development when Redis is missing
_memory_sessions: dict[str, dict] = {}
_memory_reset_tokens: dict[str, dict] = {}

_REDIS_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def get_redis_client() -> redis.Redis:
    """Get Redis client for session storage."""
    return redis.from_url(get_config().auth.redis_url, decode_responses=True)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt check; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _expired(data: dict) -> bool:
    expires_at = datetime.fromisoformat(data["expires_at"])
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return _utcnow() > expires_at


def _sweep(fallback: dict[str, dict]) -> None:
    """Drop expired in-memory entries; Redis expires its own keys."""
    for token in [token for token, data in fallback.items() if _expired(data)]:
        fallback.pop(token, None)


def _store(prefix: str, token: str, data: dict, ttl_seconds: int, fallback: dict[str, dict]) -> None:
    try:
        get_redis_client().setex(f"{prefix}{token}", ttl_seconds, json.dumps(data))
    except _REDIS_ERRORS:
        logger.warning("redis_unavailable_using_memory", store=prefix.rstrip(":"))
        _sweep(fallback)
        fallback[token] = data


def _decode(raw: str | None) -> dict | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return None if _expired(data) else data
    except (json.JSONDecodeError, KeyError, TypeError, ValueError):
        return None


def _load(prefix: str, token: str | None, fallback: dict[str, dict]) -> dict | None:
    if not token:
        return None

    try:
        client = get_redis_client()
        raw = client.get(f"{prefix}{token}")
    except _REDIS_ERRORS:
        data = fallback.get(token)
        if data and _expired(data):
            fallback.pop(token, None)
            return None
        return data

    data = _decode(raw)
    if raw and data is None:
        # Redis TTL should handle expiry; stale or malformed entries are removed
        client.delete(f"{prefix}{token}")
    return data


def _take(prefix: str, token: str | None, fallback: dict[str, dict]) -> dict | None:
    """Read and delete an entry in one step so it can be used only once."""
    if not token:
        return None

    key = f"{prefix}{token}"
    try:
        pipe = get_redis_client().pipeline(transaction=True)
        pipe.get(key)
        pipe.delete(key)
        raw, _ = pipe.execute()
    except _REDIS_ERRORS:
        data = fallback.pop(token, None)
        return None if data is None or _expired(data) else data
    return _decode(raw)


def _discard(prefix: str, token: str, fallback: dict[str, dict]) -> None:
    try:
        get_redis_client().delete(f"{prefix}{token}")
    except _REDIS_ERRORS:
        pass
    fallback.pop(token, None)


def create_session(builder_id: str, email: str, role: str = "builder") -> str:
    """Create a session for an authenticated builder and return its token."""
    hours = get_config().auth.session_expiry_hours
    token = secrets.token_urlsafe(32)
    now = _utcnow()
    data = {
        "builder_id": builder_id,
        "email": email,
        "role": role,
        "created_at": now.isoformat(),
        "expires_at": (now + timedelta(hours=hours)).isoformat(),
    }
    _store(SESSION_PREFIX, token, data, hours * 3600, _memory_sessions)
    return token


def validate_session(session_token: str | None) -> dict | None:
    """Session data (builder_id, email, role) if the token is valid."""
    return _load(SESSION_PREFIX, session_token, _memory_sessions)


def logout(session_token: str | None) -> None:
    if session_token:
        _discard(SESSION_PREFIX, session_token, _memory_sessions)


def create_reset_token(builder_id: str) -> str:
    """Issue a one-time password reset token."""
    minutes = get_config().auth.reset_token_expiry_minutes
    token = secrets.token_urlsafe(32)
    data = {
        "builder_id": builder_id,
        "expires_at": (_utcnow() + timedelta(minutes=minutes)).isoformat(),
    }
    _store(RESET_PREFIX, token, data, minutes * 60, _memory_reset_tokens)
    return token


def consume_reset_token(token: str | None) -> str | None:
    """Return the builder id for a valid reset token and invalidate it.

    Of two concurrent confirms with the same token only one gets the id.
    """
    data = _take(RESET_PREFIX, token, _memory_reset_tokens)
    return data.get("builder_id") if data else None
