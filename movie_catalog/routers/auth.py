import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.config import config
from movie_catalog.dependencies.database import get_db
from movie_catalog.models.favorite import Favorite
from movie_catalog.models.user import User, UserRole
from movie_catalog.oauth2 import verify_password
from movie_catalog.roles import create_user
from movie_catalog.schemas.schemas import (
    FavoriteRef,
    LoginRequest,
    MeResponse,
    MessageResponse,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)
from movie_catalog.services.user_service import (
    apply_user_changes,
    get_current_user,
    get_user_by_email,
)
from movie_catalog.utils import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def set_token_cookie(response: Response, token: str):
    response.set_cookie(
        key=config.TOKEN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.is_production,
        samesite="lax",
        path="/",
        max_age=config.token_max_age,
    )


# 🔑 Login (JWT in an HTTP-only cookie)
@router.post("/login", status_code=status.HTTP_200_OK)
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_by_email(db, str(login_data.email))
    if not user or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    if not verify_password(login_data.password, user.hashed_password):
        logger.warning(f"Failed login for {user.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
        )

    response = JSONResponse(content={"message": "Login successful"})
    set_token_cookie(response, create_access_token(user))
    return response


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: Request,
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Open registration; always creates a regular USER."""
    return await create_user(
        db,
        email=str(data.email),
        password=data.password,
        role=UserRole.USER,
        avatar=request.app.state.default_avatar,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """🔓 Clears the session cookie. Tokens are not revoked server-side."""
    response.delete_cookie(
        config.TOKEN_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=config.is_production,
        samesite="lax",
    )
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=MeResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(Favorite.movie_id)
        .where(Favorite.user_id == user.id)
        .order_by(Favorite.id),
    )

    return MeResponse(
        id=user.id,
        email=user.email,
        role=user.role,
        avatar=user.avatar,
        favorites=[FavoriteRef(movie_id=movie_id) for movie_id in result.scalars()],
    )


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Self-service profile edit: email, password, avatar of the caller only."""
    changes = data.model_dump(exclude_unset=True)
    return await apply_user_changes(db, user, changes)
