import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from movie_catalog.config import config
from movie_catalog.dependencies.database import get_db
from movie_catalog.models.user import User
from movie_catalog.oauth2 import hash_password
from movie_catalog.utils import decode_jwt_token

logger = logging.getLogger(__name__)

DELETED_EMAIL_DOMAIN = "deleted.local"


@dataclass
class RequestContext:
    """Identity of the caller for a single request."""

    user: Optional[User] = None
    auth_error: Optional[str] = "Not authenticated"

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin


# Get user by email
async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_active_user(db: AsyncSession, user_id: int) -> User | None:
    user = await db.get(User, user_id)
    if not user or user.is_deleted:
        return None
    return user


async def get_request_context(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> RequestContext:
    """Resolves the `token` cookie into a RequestContext; never raises."""
    token = request.cookies.get(config.TOKEN_COOKIE_NAME)
    if not token:
        return RequestContext()

    try:
        token_data = decode_jwt_token(token)
    except HTTPException as e:
        return RequestContext(auth_error=e.detail)

    user = await get_active_user(db, token_data["id"])
    if not user:
        return RequestContext(auth_error="User not found")

    return RequestContext(user=user, auth_error=None)


async def get_current_user(
    ctx: RequestContext = Depends(get_request_context),
) -> User:
    if not ctx.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ctx.auth_error or "Not authenticated",
        )
    return ctx.user


async def admin_required(user: User = Depends(get_current_user)) -> User:
    """Allows only administrators through."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return user


async def list_active_users(db: AsyncSession) -> list[User]:
    result = await db.execute(
        select(User).where(User.is_deleted.is_(False)).order_by(User.id),
    )
    return list(result.scalars().all())


async def ensure_email_available(
    db: AsyncSession,
    email: str,
    exclude_user_id: int | None = None,
):
    existing = await get_user_by_email(db, email)
    if existing and existing.id != exclude_user_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )


async def apply_user_changes(db: AsyncSession, user: User, changes: dict) -> User:
    """Applies profile/admin edits; password is re-hashed, email normalised."""
    if changes.get("email") is not None:
        email = str(changes["email"]).lower()
        if email != user.email:
            await ensure_email_available(db, email, exclude_user_id=user.id)
            user.email = email

    if changes.get("password") is not None:
        user.hashed_password = hash_password(changes["password"])

    if "avatar" in changes:
        user.avatar = changes["avatar"]

    if changes.get("role") is not None:
        user.role = changes["role"]

    await db.commit()
    await db.refresh(user)
    logger.info(f"User {user.id} updated: {sorted(changes)}")
    return user


def deleted_email_for(user: User) -> str:
    stamp = int(datetime.now(timezone.utc).timestamp())
    return f"deleted_{user.id}_{stamp}@{DELETED_EMAIL_DOMAIN}"


async def soft_delete_user(db: AsyncSession, user: User) -> User:
    """Keeps the row (and its ratings/favorites) but frees the email."""
    user.email = deleted_email_for(user)
    user.avatar = None
    user.is_deleted = True

    await db.commit()
    await db.refresh(user)
    logger.info(f"🗑 User {user.id} soft-deleted")
    return user
