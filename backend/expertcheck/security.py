"""
Password hashing and bearer token utilities.

Passwords are hashed with PBKDF2-HMAC-SHA256 and a per-user random salt.
Tokens are HS256 JWTs carrying the user id (sub), email and role.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt

from expertcheck.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_DAYS
from expertcheck.errors import Unauthorized

PBKDF2_ITERATIONS = 100000


def hash_password(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """
    Hash a password, generating a new salt when none is given.

    Returns:
        A tuple of (hashed_password, salt), both hex strings
    """
    if salt is None:
        salt = secrets.token_hex(16)

    key = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode(),
        salt.encode(),
        PBKDF2_ITERATIONS,
        dklen=32
    )
    return key.hex(), salt


def verify_password(password: str, hashed_password: str, salt: str) -> bool:
    """Check a password against a stored hash in constant time."""
    candidate, _ = hash_password(password, salt)
    return hmac.compare_digest(candidate, hashed_password)


def create_access_token(user_id: int, email: str, role: str,
                        expires_in_days: Optional[int] = None) -> str:
    """
    Issue a signed access token for a user.

    Args:
        user_id: Subject of the token
        email: Copied into the claims for display purposes
        role: "admin" or "user"; trusted by the authorization boundary
        expires_in_days: Overrides JWT_EXPIRES_DAYS
    """
    now = datetime.now(timezone.utc)
    days = expires_in_days if expires_in_days is not None else JWT_EXPIRES_DAYS
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Validate a token and return its claims.

    Raises:
        Unauthorized: If the token is expired, tampered with or malformed
    """
    try:
        return jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
