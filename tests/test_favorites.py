import pytest
from conftest import create_movie, login, login_admin, register
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from movie_catalog.models.favorite import Favorite


@pytest.fixture
def movie(client):
    login_admin(client)
    movie = create_movie(client)
    register(client, "a@x.com")
    login(client, "a@x.com")
    return movie


def count_favorites(run_db):
    async def count(db):
        return await db.scalar(select(func.count()).select_from(Favorite))

    return run_db(count)


def test_favorite_requires_authentication(client):
    assert client.post("/movies/1/favorite").status_code == 401
    assert client.delete("/movies/1/favorite").status_code == 401


def test_add_favorite(client, movie):
    response = client.post(f"/movies/{movie['id']}/favorite")

    assert response.status_code == 201
    assert response.json()["movieId"] == movie["id"]
    assert client.get("/auth/me").json()["favorites"] == [{"movieId": movie["id"]}]
    assert client.get("/movies").json()[0]["favoritesCount"] == 1


def test_duplicate_favorite_is_rejected(client, movie, run_db):
    client.post(f"/movies/{movie['id']}/favorite")

    response = client.post(f"/movies/{movie['id']}/favorite")

    assert response.status_code == 400
    assert response.json() == {"error": "Movie already in favorites"}
    assert count_favorites(run_db) == 1


def test_remove_favorite(client, movie, run_db):
    client.post(f"/movies/{movie['id']}/favorite")

    response = client.delete(f"/movies/{movie['id']}/favorite")

    assert response.status_code == 200
    assert response.json() == {"message": "Removed from favorites"}
    assert count_favorites(run_db) == 0


def test_remove_missing_favorite_is_not_found(client, movie, run_db):
    response = client.delete(f"/movies/{movie['id']}/favorite")

    assert response.status_code == 404
    assert response.json() == {"error": "Not in favorites"}
    assert count_favorites(run_db) == 0


def test_favorite_unknown_movie(client, movie):
    assert client.post("/movies/999/favorite").status_code == 404


def test_favorites_counted_per_movie(client, movie):
    client.post(f"/movies/{movie['id']}/favorite")
    register(client, "b@x.com")
    login(client, "b@x.com")
    client.post(f"/movies/{movie['id']}/favorite")

    assert client.get("/movies").json()[0]["favoritesCount"] == 2


@pytest.mark.parametrize("method", ["POST", "DELETE"])
def test_favorite_out_of_range_movie_id(client, movie, method):
    response = client.request(method, "/movies/99999999999999999999/favorite")

    assert response.status_code == 400


def test_concurrent_duplicate_favorite_is_conflict(client, movie, run_db, monkeypatch):
    assert client.post(f"/movies/{movie['id']}/favorite").status_code == 201

    async def no_existing_row(self, *args, **kwargs):
        return None

    # a second request that already passed the existence check
    monkeypatch.setattr(AsyncSession, "scalar", no_existing_row)

    response = client.post(f"/movies/{movie['id']}/favorite")

    assert response.status_code == 409
    assert response.json() == {"error": "Conflict"}
    monkeypatch.undo()
    assert count_favorites(run_db) == 1
