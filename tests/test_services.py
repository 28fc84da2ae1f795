import asyncio
from datetime import datetime

import pytest
from fastapi import HTTPException

from movie_catalog.dependencies.storage import MediaStorage, UploadError, resolve_default_avatar
from movie_catalog.services.movies_service import average_rating, parse_release_date
from movie_catalog.utils import decode_jwt_token


@pytest.mark.parametrize(
    "values, expected",
    [
        ([], None),
        ([4], 4.0),
        ([3, 5], 4.0),
        ([1, 2, 2], 5 / 3),
    ],
)
def test_average_rating(values, expected):
    assert average_rating(values) == expected


def test_parse_release_date_accepts_plain_date():
    assert parse_release_date("1999-03-31") == datetime(1999, 3, 31)


def test_parse_release_date_normalises_timezone():
    assert parse_release_date("2008-07-18T02:00:00+02:00") == datetime(2008, 7, 18, 0, 0)


def test_parse_release_date_rejects_garbage():
    with pytest.raises(HTTPException) as exc:
        parse_release_date("31/03/1999")

    assert exc.value.status_code == 400


def test_decode_rejects_token_signed_with_other_key():
    from jose import jwt

    token = jwt.encode({"id": "1", "email": "a@x.com", "exp": 9999999999}, "other", algorithm="HS256")

    with pytest.raises(HTTPException) as exc:
        decode_jwt_token(token)

    assert exc.value.status_code == 401


def test_storage_url_for_public_base():
    storage = MediaStorage("posters", "eu-west-1", public_url="https://cdn.example.com/")

    assert storage.url_for("movies/a.png") == "https://cdn.example.com/movies/a.png"


def test_storage_url_for_bucket_host():
    storage = MediaStorage("posters", "eu-west-1")

    assert storage.url_for("movies/a.png") == "https://posters.s3.eu-west-1.amazonaws.com/movies/a.png"


def test_storage_key_keeps_extension():
    storage = MediaStorage("posters", "eu-west-1")

    key = storage.build_key("avatars", "Me.JPG", "image/jpeg")

    assert key.startswith("avatars/")
    assert key.endswith(".jpg")


def test_storage_without_bucket_fails():
    storage = MediaStorage("", "eu-west-1")

    with pytest.raises(UploadError):
        asyncio.run(storage.upload(b"img", "movies", "a.png"))


def test_default_avatar_not_mirrored_by_default():
    assert asyncio.run(resolve_default_avatar()) == "https://cdn.test/avatars/default.png"


def test_storage_key_for_round_trips_own_urls():
    storage = MediaStorage("posters", "eu-west-1", public_url="https://cdn.example.com")

    assert storage.key_for("https://cdn.example.com/movies/a.png") == "movies/a.png"
    assert storage.key_for("https://elsewhere.com/movies/a.png") is None


def test_storage_discard_ignores_foreign_urls():
    storage = MediaStorage("posters", "eu-west-1")

    assert asyncio.run(storage.discard("https://elsewhere.com/a.png")) is False
