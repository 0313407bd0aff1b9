import logging

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException

from qubrain.config import settings
from qubrain.db.sqlite import create_user, get_db, get_user_by_email
from qubrain.models.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    User,
    UserPublic,
)
from qubrain.services.auth import (
    create_token,
    get_current_user,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _public(user: User) -> UserPublic:
    return UserPublic(id=user.id, name=user.name, email=user.email)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, db: aiosqlite.Connection = Depends(get_db)):
    if await get_user_by_email(db, body.email):
        raise HTTPException(status_code=400, detail="Email already in use")

    user = await create_user(db, body.name, body.email, hash_password(body.password))
    logger.info("Registered user %s", user.id)
    token = create_token(user.id, settings.register_token_ttl_minutes)
    return AuthResponse(token=token, user=_public(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: aiosqlite.Connection = Depends(get_db)):
    user = await get_user_by_email(db, body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    logger.info("User %s logged in", user.id)
    token = create_token(user.id, settings.login_token_ttl_minutes)
    return AuthResponse(token=token, user=_public(user))


@router.get("/me", response_model=UserPublic)
async def me(user: User = Depends(get_current_user)):
    return _public(user)


@router.post("/logout")
async def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    logger.info("User %s logged out", user.id)
    return {"message": "Logged out successfully"}
