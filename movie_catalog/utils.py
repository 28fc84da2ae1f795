from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import ExpiredSignatureError, JWTError, jwt

from movie_catalog.config import config
from movie_catalog.models.user import User


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Signed session token carrying the user's id and email."""
    if expires_delta is None:
        expires_delta = timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = {
        "id": str(user.id),
        "email": user.email,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }

    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_jwt_token(token: str) -> dict:
    """Decodes the session token, checking signature and expiry."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
    )

    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except JWTError:
        raise credentials_exception

    token_data = {
        "id": payload.get("id"),
        "email": payload.get("email"),
        "exp": payload.get("exp"),
    }
    if None in token_data.values():
        raise credentials_exception

    try:
        token_data["id"] = int(token_data["id"])
    except (TypeError, ValueError):
        raise credentials_exception

    return token_data
