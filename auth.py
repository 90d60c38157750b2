"""
Authentication dependencies.
Users sign in through the hosted identity provider; this service only verifies the issued JWT.
"""

import logging
from typing import Optional
from fastapi import HTTPException, Header, Cookie

from auth_utils import decode_jwt

logger = logging.getLogger(__name__)


async def get_current_user(
    auth_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> dict:
    """
    Dependency function to get current authenticated user.

    Authentication priority:
    1. Check auth_token cookie first (httpOnly cookie set by the front end)
    2. Fallback to Authorization header (Bearer token) for API consumers
    3. Raise 401 if neither is found
    """
    # Extract token: check cookie first, then Authorization header
    token = None

    if auth_token:
        token = auth_token
    elif authorization and authorization.startswith("Bearer "):
        token = authorization.replace("Bearer ", "").strip()

    if not token:
        raise HTTPException(status_code=401, detail="Missing authentication token")

    try:
        payload = decode_jwt(token)
    except ValueError as e:
        logger.error(f"Cannot verify token: {e}")
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return {
        "user_id": str(user_id),
        "email": payload.get("email"),
    }
