"""
Password hashing and JSON Web Token helpers.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from bson import ObjectId
from jose import JWTError, jwt

from core.config import settings
from core.exceptions import AuthenticationError


def get_password_hash(password: str) -> str:
    """Hash password with bcrypt (BCRYPT_ROUNDS in .env)."""
    # Bcrypt has a 72 byte limit
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(
    user_id: str,
    name: str,
    email: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed token carrying the user's id, name and email.

    Tokens expire after JWT_EXPIRES_DAYS unless expires_delta is given.
    There is no refresh or revocation.
    """
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expires_days)

    claims = {
        "id": user_id,
        "name": name,
        "email": email,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        AuthenticationError: bad signature, expired, or the id claim is not
            a valid ObjectId string.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise AuthenticationError("Invalid token.")

    user_id = payload.get("id")
    if not isinstance(user_id, str) or not ObjectId.is_valid(user_id):
        raise AuthenticationError("Invalid token.")

    return payload
