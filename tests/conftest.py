"""Root conftest — shared test configuration, fakes and the ASGI test client.

Invariants:
    - No test talks to a real MongoDB or Redis: services are swapped through
      app.dependency_overrides and repositories are in-memory fakes
    - The application lifespan is not run (ASGITransport sends no lifespan events)
"""

import os
from datetime import datetime, timezone

# Settings are read at import time; make sure tests never pick up real secrets
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/magicstream-test")
os.environ.setdefault("SECRET_KEY", "test-access-secret")
os.environ.setdefault("SECRET_REFRESH_KEY", "test-refresh-secret")
os.environ.pop("REDIS_URL", None)

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from magicstream.core.security import create_access_token
from magicstream.data_access.mongo_client import DuplicateDocumentError
from magicstream.models.user import Role, UserRead
from magicstream.server import app as fastapi_app


# -- In-memory fakes -----------------------------------------------------------

class FakeMovieRepository:
    """Stands in for MovieRepository; documents keyed by imdb_id."""

    def __init__(self, docs=None):
        self.docs = {}
        self.lookups = []
        for doc in docs or []:
            self.docs[doc["imdb_id"]] = {"_id": ObjectId(), **doc}

    async def find_by_imdb_id(self, imdb_id):
        self.lookups.append(imdb_id)
        return self.docs.get(imdb_id)

    async def find_all(self, limit=100):
        return list(self.docs.values())[:limit]

    async def insert(self, movie_doc):
        if movie_doc["imdb_id"] in self.docs:
            raise DuplicateDocumentError("movies", "imdb_id", movie_doc["imdb_id"])
        doc = {"_id": ObjectId(), **movie_doc}
        self.docs[doc["imdb_id"]] = doc
        return doc


class FakeUserRepository:
    """Stands in for UserRepository; documents keyed by email."""

    def __init__(self):
        self.docs = {}

    async def find_by_email(self, email):
        return self.docs.get(email)

    async def insert(self, user_doc):
        if user_doc["email"] in self.docs:
            raise DuplicateDocumentError("users", "email", user_doc["email"])
        doc = {"_id": ObjectId(), **user_doc}
        self.docs[doc["email"]] = doc
        return doc


class FakeCache:
    """Stands in for CacheRepository; records every key touched."""

    def __init__(self):
        self.store = {}
        self.deleted = []

    async def get_json(self, key):
        return self.store.get(key)

    async def set_json(self, key, value, ttl_seconds=None):
        self.store[key] = value
        return True

    async def delete(self, key):
        self.deleted.append(key)
        return self.store.pop(key, None) is not None


# -- Fixtures -----------------------------------------------------------------

@pytest.fixture
def movie_payload():
    return {
        "imdb_id": "tt0111161",
        "title": "The Shawshank Redemption",
        "poster_path": "https://image.tmdb.org/t/p/w500/shawshank.jpg",
        "youtube_id": "PLl99DlL6b4",
        "genre": [{"genre_id": 1, "genre_name": "Drama"}],
        "admin_review": "A story of hope.",
        "ranking": {"ranking_value": 1, "ranking_name": "Excellent"},
    }


@pytest.fixture
def movie_repository(movie_payload):
    return FakeMovieRepository([movie_payload])


@pytest.fixture
def user_repository():
    return FakeUserRepository()


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def user():
    now = datetime.now(timezone.utc)
    return UserRead(
        user_id="3f2b9c0d5e6a4b7c8d9e0f1a2b3c4d5e",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        role=Role.USER,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def app():
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
