import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.models.favorite import Favorite
from movie_catalog.models.movie import Movie
from movie_catalog.models.rating import Rating
from movie_catalog.schemas.schemas import MovieResponse

logger = logging.getLogger(__name__)


def average_rating(values: Iterable[int]) -> Optional[float]:
    """Arithmetic mean of the given ratings, None when there are none."""
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


def parse_release_date(value: str) -> datetime:
    """Accepts `YYYY-MM-DD` or a full ISO-8601 timestamp."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date",
        )
    # stored naive, as UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


async def get_movie_or_404(db: AsyncSession, movie_id: int) -> Movie:
    movie = await db.get(Movie, movie_id)
    if not movie:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Movie not found",
        )
    return movie


def format_movie(
    movie: Movie,
    average: Optional[float] = None,
    favorites_count: int = 0,
    user_rating: Optional[int] = None,
) -> MovieResponse:
    return MovieResponse(
        id=movie.id,
        title=movie.title,
        description=movie.description,
        genre=movie.genre,
        release_date=movie.release_date,
        image_url=movie.image_url,
        average_rating=float(average) if average is not None else None,
        favorites_count=int(favorites_count or 0),
        user_rating=user_rating,
    )


async def get_movies_with_stats(
    db: AsyncSession,
    user_id: int | None = None,
) -> list[MovieResponse]:
    rating_stats = (
        select(
            Rating.movie_id,
            func.avg(Rating.value).label("average_rating"),
        )
        .group_by(Rating.movie_id)
        .subquery()
    )
    favorite_stats = (
        select(
            Favorite.movie_id,
            func.count(Favorite.id).label("favorites_count"),
        )
        .group_by(Favorite.movie_id)
        .subquery()
    )

    stmt = (
        select(
            Movie,
            rating_stats.c.average_rating,
            func.coalesce(favorite_stats.c.favorites_count, 0),
        )
        .outerjoin(rating_stats, rating_stats.c.movie_id == Movie.id)
        .outerjoin(favorite_stats, favorite_stats.c.movie_id == Movie.id)
        .order_by(Movie.id)
    )
    rows = (await db.execute(stmt)).all()

    user_ratings: dict[int, int] = {}
    if user_id is not None:
        result = await db.execute(
            select(Rating.movie_id, Rating.value).where(Rating.user_id == user_id),
        )
        user_ratings = {movie_id: value for movie_id, value in result.all()}

    return [
        format_movie(movie, average, favorites_count, user_ratings.get(movie.id))
        for movie, average, favorites_count in rows
    ]


async def get_movie_average(db: AsyncSession, movie_id: int) -> Optional[float]:
    result = await db.execute(select(Rating.value).where(Rating.movie_id == movie_id))
    return average_rating(result.scalars().all())


async def upsert_rating(
    db: AsyncSession,
    user_id: int,
    movie_id: int,
    value: int,
) -> tuple[Rating, float]:
    """One rating per (user, movie): overwrite if present, insert otherwise."""
    rating = await db.scalar(
        select(Rating).where(Rating.user_id == user_id, Rating.movie_id == movie_id),
    )
    if rating:
        rating.value = value
    else:
        rating = Rating(user_id=user_id, movie_id=movie_id, value=value)
        db.add(rating)

    await db.commit()
    await db.refresh(rating)

    average = await get_movie_average(db, movie_id)
    logger.info(f"⭐ User {user_id} rated movie {movie_id}: {value} (avg {average})")
    return rating, average
