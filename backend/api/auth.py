"""
backend/api/auth.py
Account registration and login. Both return a bearer token for the other routes.
"""

from typing import Any, Dict

from fastapi import APIRouter

from backend.core.auth import issue_access_token
from backend.features.users.service import register_user, authenticate_user
from backend.models.user import RegisterRequest, LoginRequest

router = APIRouter()


@router.post("/register", status_code=201, response_model=Dict[str, Any])
def register(body: RegisterRequest) -> Dict[str, Any]:
    """Create an account and sign it in."""
    user = register_user(body)
    return {"token": issue_access_token(user.user_id), "user": user.public()}


@router.post("/login", response_model=Dict[str, Any])
def login(body: LoginRequest) -> Dict[str, Any]:
    """Exchange email + password for a bearer token."""
    user = authenticate_user(body.email, body.password)
    return {"token": issue_access_token(user.user_id), "user": user.public()}
