"""Demo data: `python -m movie_catalog.seed`."""

import asyncio
import logging
import random
from datetime import datetime
from logging.config import dictConfig

from sqlalchemy import func, select

from movie_catalog.config import LogConfig, config
from movie_catalog.dependencies.database import SessionLocal, init_db
from movie_catalog.models.favorite import Favorite
from movie_catalog.models.movie import Movie
from movie_catalog.models.rating import Rating
from movie_catalog.models.user import User, UserRole
from movie_catalog.oauth2 import hash_password

logger = logging.getLogger("movie_catalog.seed")

PLACEHOLDER_IMAGE = config.DEFAULT_AVATAR_URL

DEMO_USERS = [
    ("admin@gmail.com", "admin@gmail.com", UserRole.ADMIN),
    ("user1@gmail.com", "password123", UserRole.USER),
    ("user2@gmail.com", "password123", UserRole.USER),
    ("user3@gmail.com", "password123", UserRole.USER),
    ("user4@gmail.com", "password123", UserRole.USER),
]

DEMO_MOVIES = [
    ("Interstellar", "An expedition through a wormhole.", "Sci-Fi", "2014-11-07"),
    ("Inception", "Diving into the world of dreams.", "Action", "2010-07-16"),
    ("The Matrix", "Choosing between the blue and the red pill.", "Sci-Fi", "1999-03-31"),
    ("The Dark Knight", "Batman versus the Joker.", "Action", "2008-07-18"),
    ("Avatar", "The world of Pandora.", "Fantasy", "2009-12-18"),
]


async def seed(rng: random.Random | None = None):
    rng = rng or random.Random()
    await init_db()

    async with SessionLocal() as db:
        if await db.scalar(select(func.count()).select_from(Movie)):
            logger.info("Movies already present, skipping seed")
            return

        users = []
        for email, password, role in DEMO_USERS:
            user = await db.scalar(select(User).where(User.email == email))
            if not user:
                user = User(
                    email=email,
                    hashed_password=hash_password(password),
                    role=role,
                    avatar=config.DEFAULT_AVATAR_URL,
                )
                db.add(user)
            users.append(user)

        movies = [
            Movie(
                title=title,
                description=description,
                genre=genre,
                release_date=datetime.fromisoformat(release_date),
                image_url=PLACEHOLDER_IMAGE,
            )
            for title, description, genre, release_date in DEMO_MOVIES
        ]
        db.add_all(movies)
        await db.flush()

        # one favorite and one rating per user, on neighbouring movies
        for i, user in enumerate(users):
            db.add(Favorite(user_id=user.id, movie_id=movies[i % len(movies)].id))
            db.add(
                Rating(
                    user_id=user.id,
                    movie_id=movies[(i + 1) % len(movies)].id,
                    value=rng.randint(1, 5),
                ),
            )

        await db.commit()
        logger.info(f"✅ Seed completed: {len(users)} users, {len(movies)} movies")


if __name__ == "__main__":
    dictConfig(LogConfig().model_dump())
    asyncio.run(seed())
