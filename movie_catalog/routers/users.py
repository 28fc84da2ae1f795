import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.dependencies.database import get_db
from movie_catalog.models.user import User
from movie_catalog.roles import create_user
from movie_catalog.schemas.schemas import (
    MessageResponse,
    UserCreate,
    UserDeleteRequest,
    UserResponse,
    UserUpdate,
)
from movie_catalog.services.user_service import (
    admin_required,
    apply_user_changes,
    get_active_user,
    list_active_users,
    soft_delete_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


async def get_active_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await get_active_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def read_payload(request: Request, schema: type[BaseModel]):
    """Decodes the JSON body only after the admin check has passed."""
    try:
        raw = await request.json()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON body",
        )

    try:
        return schema.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


# 📋 All users (admin only), soft-deleted ones are hidden
@router.get("", response_model=List[UserResponse])
async def get_all_users(
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_required),
):
    return await list_active_users(db)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def add_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_required),
):
    data = await read_payload(request, UserCreate)
    return await create_user(
        db,
        email=str(data.email),
        password=data.password,
        role=data.role,
        avatar=request.app.state.default_avatar,
    )


@router.put("", response_model=UserResponse)
async def update_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_required),
):
    """Admin edit of any user: email, role, avatar, password."""
    data = await read_payload(request, UserUpdate)
    user = await get_active_user_or_404(db, data.id)
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    return await apply_user_changes(db, user, changes)


@router.delete("", response_model=MessageResponse)
async def delete_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_required),
):
    """🗑 Soft delete: the row stays, email is released, avatar cleared."""
    data = await read_payload(request, UserDeleteRequest)
    if data.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account.",
        )

    user = await get_active_user_or_404(db, data.id)
    await soft_delete_user(db, user)
    return {"message": "User deleted"}
