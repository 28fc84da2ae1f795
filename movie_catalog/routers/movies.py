import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.dependencies.database import get_db
from movie_catalog.dependencies.storage import MediaStorage, get_storage
from movie_catalog.models.favorite import Favorite
from movie_catalog.models.movie import Movie
from movie_catalog.models.user import User
from movie_catalog.schemas.schemas import (
    FavoriteResponse,
    MessageResponse,
    MovieResponse,
    RateMovie,
    RatingResponse,
)
from movie_catalog.services.movies_service import (
    format_movie,
    get_movie_or_404,
    get_movies_with_stats,
    parse_release_date,
    upsert_rating,
)
from movie_catalog.services.user_service import (
    RequestContext,
    admin_required,
    get_current_user,
    get_request_context,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["Movies"])

# ids outside the INTEGER column range are rejected before reaching the driver
MovieId = Annotated[int, Path(ge=1, le=2**31 - 1)]


@router.get("", response_model=List[MovieResponse])
async def list_movies(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    """All movies with average rating, favorites count and the caller's own rating."""
    user_id = ctx.user.id if ctx.is_authenticated else None
    return await get_movies_with_stats(db, user_id)


@router.post("", response_model=MovieResponse, status_code=status.HTTP_200_OK)
async def create_movie(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    genre: Optional[str] = Form(None),
    release_date: Optional[str] = Form(None, alias="releaseDate"),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_storage),
    _: User = Depends(admin_required),
):
    """🎬 Admin only. The image goes to media storage, its URL is stored."""
    fields = [title, description, genre, release_date]
    if any(not (value and value.strip()) for value in fields) or image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing fields",
        )

    parsed_release_date = parse_release_date(release_date)

    data = await image.read()
    image_url = await storage.upload(
        data,
        folder="movies",
        filename=image.filename,
        content_type=image.content_type,
    )

    movie = Movie(
        title=title.strip(),
        description=description.strip(),
        genre=genre.strip(),
        release_date=parsed_release_date,
        image_url=image_url,
    )
    db.add(movie)
    try:
        await db.commit()
    except SQLAlchemyError:
        logger.error(f"❌ Movie '{movie.title}' not saved, discarding {image_url}")
        await storage.discard(image_url)
        raise
    await db.refresh(movie)

    logger.info(f"🎬 Movie {movie.id} '{movie.title}' created")
    return format_movie(movie)


@router.post("/{movie_id}/rating", response_model=RatingResponse)
async def rate_movie(
    movie_id: MovieId,
    data: RateMovie,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await get_movie_or_404(db, movie_id)

    rating, average = await upsert_rating(db, user.id, movie_id, data.value)

    return RatingResponse(
        id=rating.id,
        user_id=rating.user_id,
        movie_id=rating.movie_id,
        value=rating.value,
        average_rating=average,
    )


@router.post(
    "/{movie_id}/favorite",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_to_favorite(
    movie_id: MovieId,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    A repeated request for a pair already stored answers 400. Two concurrent
    requests for the same pair can both pass the check below; the loser then
    hits the unique constraint and answers 409 Conflict. Clients should treat
    both codes as "already a favorite".
    """
    await get_movie_or_404(db, movie_id)

    # already in favorites?
    existing = await db.scalar(
        select(Favorite).where(
            Favorite.user_id == user.id,
            Favorite.movie_id == movie_id,
        ),
    )
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Movie already in favorites",
        )

    favorite = Favorite(user_id=user.id, movie_id=movie_id)
    db.add(favorite)
    await db.commit()
    await db.refresh(favorite)
    return favorite


@router.delete("/{movie_id}/favorite", response_model=MessageResponse)
async def remove_from_favorite(
    movie_id: MovieId,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    favorite = await db.scalar(
        select(Favorite).where(
            Favorite.user_id == user.id,
            Favorite.movie_id == movie_id,
        ),
    )
    if not favorite:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not in favorites",
        )

    await db.delete(favorite)
    await db.commit()
    return {"message": "Removed from favorites"}
