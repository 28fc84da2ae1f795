import asyncio
import os
from logging.config import fileConfig

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from movie_catalog.config import config as app_config
from movie_catalog.models import Base, Favorite, Movie, Rating, User  # noqa: F401

load_dotenv()
ALEMBIC_DATABASE_URL = os.getenv("ALEMBIC_DATABASE_URL", app_config.DATABASE_URL)
if not ALEMBIC_DATABASE_URL:
    raise ValueError("❌ DATABASE_URL is not set in the environment variables!")

config = context.config

config.set_main_option("sqlalchemy.url", ALEMBIC_DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL and emits the SQL to the
    script output instead of executing it.
    """
    context.configure(
        url=ALEMBIC_DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=ALEMBIC_DATABASE_URL.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=ALEMBIC_DATABASE_URL.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connect_args = {"ssl": True} if app_config.DATABASE_SSL else {}
    connectable = create_async_engine(
        ALEMBIC_DATABASE_URL,
        connect_args=connect_args,
        execution_options={"compiled_cache": None},
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
