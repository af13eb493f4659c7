"""
JWT session credential for Tako.

Provides token generation, validation, and cookie settings for the
stateless session issued at login.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID
from django.conf import settings


JWT_ALGORITHM = 'HS256'
SESSION_COOKIE_NAME = 'token'


def _secret() -> str:
    return settings.JWT_SECRET


def session_ttl_seconds() -> int:
    return settings.SESSION_TTL_SECONDS


def create_session_token(account_id: UUID, role: str) -> str:
    """
    Create a signed session token.

    Contains the account id and role; expires after SESSION_TTL_SECONDS.
    """
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(account_id),
        'role': str(role),
        'iat': now,
        'exp': now + timedelta(seconds=session_ttl_seconds()),
        'type': 'session',
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload if valid, None if invalid/expired.
    """
    try:
        return jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def get_account_id_from_token(token: str) -> Optional[UUID]:
    """
    Extract the account id from a valid session token.

    Returns:
        UUID of the account if the token is valid, None otherwise.
    """
    payload = decode_token(token)
    if payload and payload.get('type') == 'session' and 'sub' in payload:
        try:
            return UUID(payload['sub'])
        except ValueError:
            return None
    return None


def get_session_cookie_settings(is_production: bool = False) -> dict:
    """
    Cookie settings for the session token.

    HttpOnly, SameSite=Strict, Secure outside development, fixed lifetime.
    """
    return {
        'httponly': True,
        'secure': is_production,
        'samesite': 'Strict',
        'path': '/',
        'max_age': session_ttl_seconds(),
    }
