"""
User domain service.
- register_user(request)
- authenticate_user(email, password)

Passwords are bcrypt-hashed before storage and never logged.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import bcrypt

from backend.core.errors import UnauthenticatedError
from backend.core.logging import log_event
from backend.features.store.record_store import RecordStore, get_store
from backend.models.user import User, RegisterRequest

_INVALID_CREDENTIALS = "Invalid email or password"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def register_user(request: RegisterRequest, now: Optional[datetime] = None, store: Optional[RecordStore] = None) -> User:
    """Create an account; duplicate emails raise ConflictError from the store."""
    user = User(
        user_id=str(uuid4()),
        email=User.normalized_email(request.email),
        name=request.name.strip() if request.name else None,
        password_hash=hash_password(request.password),
        created_at=now or datetime.now(timezone.utc),
    )
    (store or get_store()).add_user(user)
    log_event("info", "user.registered", user_id=user.user_id, event_type="auth")
    return user


def authenticate_user(email: str, password: str, store: Optional[RecordStore] = None) -> User:
    """Return the matching user or raise UnauthenticatedError (same message for every failure)."""
    user = (store or get_store()).get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        log_event("warning", "user.login_failed", event_type="auth")
        raise UnauthenticatedError(_INVALID_CREDENTIALS, code="invalid_credentials")
    return user
