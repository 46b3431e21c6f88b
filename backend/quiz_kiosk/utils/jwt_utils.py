"""
JWT Token utilities for admin authentication
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict
import jwt
from jwt.exceptions import InvalidTokenError


# Load JWT configuration from environment
SECRET_KEY = os.environ.get("JWT_SECRET")
ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
EXPIRATION_HOURS = int(os.environ.get("JWT_EXPIRATION_HOURS", 24))


def _secret_key() -> str:
    # Read lazily so a .env loaded after import is still honoured
    secret = SECRET_KEY or os.environ.get("JWT_SECRET")
    if not secret:
        raise ValueError("JWT_SECRET environment variable is not set")
    return secret


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token

    Args:
        data: Dictionary containing admin data to encode
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=EXPIRATION_HOURS)

    to_encode.update({
        "exp": expire,
        "iat": now,  # Issued at
    })

    return jwt.encode(to_encode, _secret_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """
    Decode and verify a JWT token

    Returns:
        Decoded token data or None if invalid
    """
    try:
        return jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
    except InvalidTokenError:
        return None
