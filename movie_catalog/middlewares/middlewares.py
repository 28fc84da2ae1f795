import logging

from fastapi.middleware.cors import CORSMiddleware

from movie_catalog.config import config

logger = logging.getLogger(__name__)


def setup_middlewares(app):
    allow_origins = config.allowed_origins
    logger.info(f"Allowed CORS origins: {allow_origins}")

    # cookies need credentials, so origins must be explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
