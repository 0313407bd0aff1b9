"""
Password hashing (bcrypt) and bearer-token handling (PyJWT).

Tokens are stateless HS256 JWTs whose ``sub`` claim is the user id; logout is
a client-side concern.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import aiosqlite
import bcrypt
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from qubrain.config import settings
from qubrain.db.sqlite import get_db, get_user
from qubrain.models.user import User

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


# bcrypt only reads the first 72 bytes; newer releases reject longer input.
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode()[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=10)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


def create_token(user_id: str, ttl_minutes: int, now: datetime | None = None) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": issued,
        "exp": issued + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> str:
    """Return the user id carried by ``token``. Raises ``jwt.PyJWTError`` if invalid or expired."""
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )
    return payload["sub"]


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: aiosqlite.Connection = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        user_id = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = await get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user
