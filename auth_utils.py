"""
Authentication utilities: JWT verification.
Tokens are issued by the identity provider; this service only decodes them.
"""

import jwt
from config.settings import settings

# JWT configuration
ALGORITHM = "HS256"


def decode_jwt(token: str):
    """Decode a JWT token. Returns None if invalid."""
    if not settings.jwt_secret_key:
        raise ValueError("JWT_SECRET_KEY is not set. Cannot decode JWT token.")

    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
