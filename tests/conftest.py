import asyncio
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="movie_catalog_tests_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASS"] = "adminpass"
os.environ["DEFAULT_AVATAR_URL"] = "https://cdn.test/avatars/default.png"
os.environ["MIRROR_DEFAULT_AVATAR"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from movie_catalog.dependencies.database import SessionLocal, drop_db, init_db  # noqa: E402
from movie_catalog.dependencies.storage import UploadError, get_storage  # noqa: E402
from movie_catalog.main import app  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASS = "adminpass"


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.discarded = []

    async def upload(self, data, folder, filename=None, content_type=None):
        self.uploads.append((folder, filename, content_type, data))
        return f"https://cdn.test/{folder}/{len(self.uploads)}-{filename}"

    async def discard(self, url):
        self.discarded.append(url)
        return True


class FailingStorage(FakeStorage):
    async def upload(self, data, folder, filename=None, content_type=None):
        raise UploadError("bucket unavailable")


async def _reset_db():
    await drop_db()
    await init_db()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    asyncio.run(_reset_db())
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def run_db():
    """Runs a coroutine function against a fresh session."""

    def _run(fn):
        async def _wrapped():
            async with SessionLocal() as db:
                return await fn(db)

        return asyncio.run(_wrapped())

    return _run


def register(client, email, password="secret1"):
    response = client.post("/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def login(client, email, password="secret1"):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


def login_admin(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASS)


def create_movie(client, title="Interstellar", release_date="2014-11-07"):
    response = client.post(
        "/movies",
        data={
            "title": title,
            "description": "An expedition through a wormhole.",
            "genre": "Sci-Fi",
            "releaseDate": release_date,
        },
        files={"image": ("poster.png", b"\x89PNG fake", "image/png")},
    )
    assert response.status_code == 200, response.text
    return response.json()
