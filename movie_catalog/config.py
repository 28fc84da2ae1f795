import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./movie_catalog.db")
    DATABASE_SSL = _as_bool(os.getenv("DATABASE_SSL"))
    DB_ECHO = _as_bool(os.getenv("DB_ECHO"))

    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
    TOKEN_COOKIE_NAME = "token"

    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
    ADMIN_PASS = os.getenv("ADMIN_PASS")

    MEDIA_BUCKET = os.getenv("MEDIA_BUCKET", "")
    MEDIA_REGION = os.getenv("MEDIA_REGION", "us-east-1")
    MEDIA_ENDPOINT_URL = os.getenv("MEDIA_ENDPOINT_URL")
    MEDIA_PUBLIC_URL = os.getenv("MEDIA_PUBLIC_URL")
    AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")

    DEFAULT_AVATAR_URL = os.getenv(
        "DEFAULT_AVATAR_URL",
        "https://greekherald.com.au/wp-content/uploads/2020/07/default-avatar.png",
    )
    MIRROR_DEFAULT_AVATAR = _as_bool(os.getenv("MIRROR_DEFAULT_AVATAR"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")

    @property
    def allowed_origins(self) -> list[str]:
        return [
            origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()
        ]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def token_max_age(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60


config = Config()


class LogConfig(BaseModel):
    """Logging configuration passed to `logging.config.dictConfig`."""

    LOGGER_NAME: str = "movie_catalog"
    LOG_FORMAT: str = "%(levelprefix)s | %(asctime)s | %(name)s | %(message)s"
    LOG_LEVEL: str = config.LOG_LEVEL

    version: int = 1
    disable_existing_loggers: bool = False
    formatters: dict = {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": LOG_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    }
    handlers: dict = {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
    }
    loggers: dict = {
        LOGGER_NAME: {"handlers": ["default"], "level": LOG_LEVEL},
    }
