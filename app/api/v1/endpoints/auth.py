"""Auth endpoints: register, login, refresh."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_current_user
from app.core.exceptions import ValidationError
from app.core.security import REFRESH_TOKEN, user_id_from_token
from app.models.user import User
from app.schemas.user import UserCreate, UserResponse, Token, LoginRequest, TokenRefresh
from app.services.auth_service import (
    create_user,
    get_user_by_email,
    get_user_by_username,
    get_user_by_id,
    authenticate_user,
    user_to_response,
    create_tokens_for_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> Token:
    access_token, refresh_token = create_tokens_for_user(user)
    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        user=user_to_response(user, include_email=True),
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Register attempt: %s", data.username)
    if await get_user_by_email(db, data.email):
        raise ValidationError("Email already registered", field="email")
    if await get_user_by_username(db, data.username):
        raise ValidationError("Username already taken", field="username")
    user = await create_user(db, data)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return _token_response(user)


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, data.email, data.password)
    if not user:
        logger.info("Login failed for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info("Login success: %s", user.id)
    return _token_response(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: TokenRefresh,
    db: AsyncSession = Depends(get_db),
):
    user_id = user_id_from_token(body.refresh_token, expected_type=REFRESH_TOKEN)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    user = await get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return user_to_response(current_user, include_email=True)
