from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from movie_catalog.dependencies.database import Base


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    genre = Column(String, nullable=False, index=True)
    release_date = Column(DateTime, nullable=False)
    image_url = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    ratings = relationship(
        "Rating",
        back_populates="movie",
        cascade="all, delete-orphan",
    )
    favorites = relationship(
        "Favorite",
        back_populates="movie",
        cascade="all, delete-orphan",
    )
