"""
Auth utilities for the SalonPro API.

Issues and validates HS256 bearer tokens and extracts the owning user id
from the request. Every salon record is scoped by that id.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt
from fastapi import Request

from backend.core.config import settings
from backend.core.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

# Used only when JWT_SECRET is unset outside production (validate_env blocks that in prod)
_DEV_FALLBACK_SECRET = "salonpro-dev-secret"


def _secret() -> str:
    return settings.JWT_SECRET or _DEV_FALLBACK_SECRET


def issue_access_token(user_id: str, now: Optional[datetime] = None) -> str:
    """
    Issue a signed access token for user_id.

    Args:
        user_id: Owner identifier embedded in the user claim (and `sub`)
        now: Fixed issue time for deterministic tests

    Returns:
        Encoded JWT string
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    payload = {
        settings.JWT_USER_CLAIM: user_id,
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.JWT_EXPIRES_SECONDS)).timestamp()),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verify token and extract user_id.

    Raises:
        UnauthenticatedError (invalid_token): bad signature, expired, or no user claim
    """
    try:
        payload = jwt.decode(
            token,
            _secret(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_signature": True, "verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired", code="invalid_token")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise UnauthenticatedError("Invalid token", code="invalid_token")

    user_id = payload.get(settings.JWT_USER_CLAIM) or payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise UnauthenticatedError("Invalid token", code="invalid_token")
    return user_id


async def get_current_user_id(request: Request) -> str:
    """
    Extract current user ID from the Authorization header.

    Raises:
        UnauthenticatedError: missing header, wrong scheme, or invalid token
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise UnauthenticatedError("Missing Authorization (Bearer token) header")

    token = auth_header[7:].strip()
    if not token:
        raise UnauthenticatedError("Missing Authorization (Bearer token) header")

    user_id = decode_access_token(token)
    request.state.user_id = user_id
    return user_id
