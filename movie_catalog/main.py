import logging
from contextlib import asynccontextmanager
from logging.config import dictConfig

from fastapi import FastAPI

from movie_catalog.config import LogConfig
from movie_catalog.dependencies.database import SessionLocal, init_db
from movie_catalog.dependencies.storage import resolve_default_avatar
from movie_catalog.exceptions.handlers import setup_exception_handlers
from movie_catalog.middlewares.middlewares import setup_middlewares
from movie_catalog.roles import create_admin
from movie_catalog.routers import auth, movies, upload, users

dictConfig(LogConfig().model_dump())
logger = logging.getLogger("movie_catalog")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: tables, default avatar, bootstrap admin."""

    try:
        await init_db()

        # resolved once here and handed to every user-creation call
        app.state.default_avatar = await resolve_default_avatar()
        logger.info(f"🖼 Default avatar: {app.state.default_avatar}")

        async with SessionLocal() as db:
            await create_admin(db, avatar=app.state.default_avatar)

        yield

    except Exception as e:
        logger.error(f"❌ Server startup failed: {e}")
        raise

    finally:
        logger.info("🔴 Movie Catalog API stopped")


app = FastAPI(
    lifespan=lifespan,
    title="Movie Catalog API",
    description="Movies, ratings and favorites",
    version="1.0",
)

setup_middlewares(app)
setup_exception_handlers(app)

app.include_router(auth.router)
app.include_router(movies.router)
app.include_router(users.router)
app.include_router(upload.router)


logger.info("✅ Movie Catalog API is ready")
