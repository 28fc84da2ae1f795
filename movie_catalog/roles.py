import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.config import config
from movie_catalog.models.user import User, UserRole
from movie_catalog.oauth2 import hash_password
from movie_catalog.services.user_service import get_user_by_email

logger = logging.getLogger(__name__)


async def create_admin(db: AsyncSession, avatar: str | None = None):
    """Creates the bootstrap administrator during server startup."""

    admin_email = config.ADMIN_EMAIL
    admin_password = config.ADMIN_PASS

    if not admin_email or not admin_password:
        logger.warning(
            "⚠️ ADMIN_EMAIL or ADMIN_PASS is not set. Skipping admin creation.",
        )
        return None

    existing_admin = await get_user_by_email(db, admin_email)
    if existing_admin:
        logger.info(f"✅ Admin {admin_email} already exists. Skipping creation.")
        return existing_admin

    admin = User(
        email=admin_email.lower(),
        hashed_password=hash_password(admin_password),
        role=UserRole.ADMIN,
        avatar=avatar,
        is_deleted=False,
    )

    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    logger.info(f"🆕 Admin {admin_email} created")
    return admin


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
    avatar: str | None = None,
) -> User:
    """Creates a user; the password is validated by the request schema."""

    existing_user = await get_user_by_email(db, email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    user = User(
        email=email.lower(),
        hashed_password=hash_password(password),
        role=role,
        avatar=avatar,
        is_deleted=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"🆕 User {user.email} created with role {user.role.value}")
    return user
