from __future__ import annotations

from fastapi import HTTPException, Request

from .users import ROLE_ADMIN


def get_current_user(request: Request) -> dict | None:
    """Session payload of the signed-in account, or ``None``."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Sign in to use this endpoint")
    return user


def require_admin(request: Request) -> dict:
    """Any signed-in account is checked first (401), then the admin role (403)."""
    user = require_user(request)
    if user.get("role") != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Directory admin role required")
    return user
