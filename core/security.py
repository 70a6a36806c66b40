"""
Password hashing and bearer-token sessions.

Tokens live in Redis with an expiry when it is reachable and fall back to a
process-local dict otherwise.
"""

import bcrypt
import secrets
import json
import logging
from datetime import datetime, timedelta
from typing import Optional

from core.config import get_settings
from core.redis_client import get_redis_client, is_redis_available

logger = logging.getLogger(__name__)

# Fallback in-memory session storage (only used if Redis is unavailable)
user_sessions = {}

SESSION_KEY_PREFIX = 'tenderly_session:'


def _session_ttl() -> timedelta:
    return timedelta(days=get_settings().session_expire_days)


def hash_password(password: str) -> str:
    """Hash password using bcrypt with automatic salt generation."""
    salt = bcrypt.gensalt(rounds=12)
    pwd_hash = bcrypt.hashpw(password.encode('utf-8'), salt)
    return pwd_hash.decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(
            password.encode('utf-8'),
            hashed.encode('utf-8')
        )
    except ValueError:
        # Malformed hash in the users table
        return False


def create_session(user_id: str) -> str:
    """Create user session and return the bearer token."""
    session_token = secrets.token_urlsafe(32)
    ttl = _session_ttl()
    session_data = {
        'user_id': user_id,
        'created_at': datetime.utcnow().isoformat(),
        'expires_at': (datetime.utcnow() + ttl).isoformat(),
    }

    redis_client = get_redis_client()
    if redis_client and is_redis_available():
        try:
            redis_client.setex(
                f'{SESSION_KEY_PREFIX}{session_token}',
                ttl,
                json.dumps(session_data)
            )
            return session_token
        except Exception as e:
            logger.warning(f"⚠ Redis session storage failed: {e}, falling back to in-memory")

    user_sessions[session_token] = {
        'user_id': user_id,
        'created_at': datetime.utcnow(),
        'expires_at': datetime.utcnow() + ttl,
    }
    return session_token


def get_session(session_token: str) -> Optional[dict]:
    """Get session data from token."""
    if not session_token:
        return None

    redis_client = get_redis_client()
    if redis_client and is_redis_available():
        try:
            session_data = redis_client.get(f'{SESSION_KEY_PREFIX}{session_token}')
            if session_data:
                return json.loads(session_data)
            return None
        except Exception as e:
            logger.warning(f"⚠ Redis session retrieval failed: {e}, checking in-memory")

    session_data = user_sessions.get(session_token)
    if not session_data:
        return None

    if session_data['expires_at'] < datetime.utcnow():
        del user_sessions[session_token]
        return None

    return session_data


def delete_session(session_token: str) -> None:
    """Delete a session."""
    if not session_token:
        return

    redis_client = get_redis_client()
    if redis_client and is_redis_available():
        try:
            redis_client.delete(f'{SESSION_KEY_PREFIX}{session_token}')
            return
        except Exception as e:
            logger.warning(f"⚠ Redis session deletion failed: {e}, checking in-memory")

    user_sessions.pop(session_token, None)
