"""
Token helpers for tests, standing in for the identity provider that issues JWTs
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from auth_utils import ALGORITHM
from config.settings import settings


def create_jwt(user_id: str, email: Optional[str] = None) -> str:
    """Create a JWT token for a user"""
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(days=7)
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def create_expired_jwt(user_id: str, expired_seconds_ago: int = 1) -> str:
    """Create a JWT token that expired `expired_seconds_ago` seconds ago"""
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) - timedelta(seconds=expired_seconds_ago)
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)
