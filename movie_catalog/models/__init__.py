# Import all models here
# This way when we import Base to alembic env.py all models are also imported
# and changes are applied to the migration script

from movie_catalog.dependencies.database import Base
from .favorite import Favorite
from .movie import Movie
from .rating import Rating
from .user import User, UserRole
