from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, StrictInt, field_validator

from movie_catalog.models.user import UserRole
from movie_catalog.oauth2 import validate_password_schema


# Base schema with automatic snake_case -> camelCase conversion
class BaseSchema(BaseModel):
    class Config:
        @staticmethod
        def alias_generator(string: str) -> str:
            """snake_case → camelCase"""
            return "".join(
                word.capitalize() if i else word
                for i, word in enumerate(string.split("_"))
            )

        populate_by_name = True
        from_attributes = True


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: str):
        return validate_password_schema(password)


class UserCreate(RegisterRequest):
    role: UserRole = UserRole.USER


class ProfileUpdate(BaseSchema):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = None

    @field_validator("email", "password", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        """Forms send "" for untouched fields."""
        return _blank_to_none(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: Optional[str]):
        if password is None:
            return None
        return validate_password_schema(password)


class UserUpdate(ProfileUpdate):
    id: int
    role: Optional[UserRole] = None


class UserDeleteRequest(BaseModel):
    id: int


class UserResponse(BaseSchema):
    id: int
    email: str
    role: UserRole
    avatar: Optional[str] = None


class FavoriteRef(BaseSchema):
    movie_id: int


class MeResponse(UserResponse):
    favorites: List[FavoriteRef] = []


class MovieResponse(BaseSchema):
    id: int
    title: str
    description: str
    genre: str
    release_date: datetime
    image_url: str
    average_rating: Optional[float] = None
    favorites_count: int = 0
    user_rating: Optional[int] = None


class RateMovie(BaseModel):
    value: StrictInt = Field(..., ge=1, le=5)


class RatingResponse(BaseSchema):
    id: int
    user_id: int
    movie_id: int
    value: int
    average_rating: float


class FavoriteResponse(BaseSchema):
    id: int
    user_id: int
    movie_id: int


class UploadResponse(BaseModel):
    url: str


class MessageResponse(BaseModel):
    message: str
