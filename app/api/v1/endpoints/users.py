"""User profile endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_current_user_optional, get_current_user
from app.core.exceptions import NotFoundError
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.auth_service import get_user_by_id, user_to_response

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return user_to_response(current_user, include_email=True)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    is_self = current_user is not None and current_user.id == user.id
    return user_to_response(user, include_email=is_self)
