from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from movie_catalog.config import config

engine_options = {
    "echo": config.DB_ECHO,
    "future": True,
    "execution_options": {"compiled_cache": None},
}
if config.DATABASE_SSL:
    engine_options["connect_args"] = {"ssl": True}
if config.DATABASE_URL.startswith("sqlite"):
    # SQLite connections must not outlive the event loop that opened them
    engine_options["poolclass"] = NullPool

engine = create_async_engine(config.DATABASE_URL, **engine_options)

SessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with SessionLocal() as session:
        yield session


async def init_db():
    # models must be registered on Base.metadata before create_all
    import movie_catalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    import movie_catalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
