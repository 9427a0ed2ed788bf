"""Register/login flow — tokens from /login open the protected routes."""

import asyncio
import time

import pytest

from magicstream.api.endpoints.auth import get_auth_service
from magicstream.services import auth_service as auth_service_module
from magicstream.api.endpoints.movies import get_movie_service
from magicstream.services.auth_service import AuthService, AuthServiceError
from magicstream.services.movie_service import MovieService
from magicstream.models.auth import UserLogin
from magicstream.models.user import Role, UserCreate


@pytest.fixture
def registration():
    return {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "Grace@Example.com",
        "password": "cobol-1959",
        "favourite_genres": [{"genre_id": 3, "genre_name": "Sci-Fi"}],
    }


@pytest.fixture
def auth_service(app, user_repository):
    service = AuthService(user_repository)
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


# -- Service -------------------------------------------------------------------

async def test_register_stores_only_password_hash(auth_service, user_repository, registration):
    user = await auth_service.register_user(UserCreate(**registration))

    stored = user_repository.docs["grace@example.com"]
    assert user.email == "grace@example.com"
    assert user.role == Role.USER
    assert "password" not in stored
    assert stored["password_hash"].startswith("$2")
    assert stored["password_hash"] != registration["password"]


async def test_register_duplicate_email_conflicts(auth_service, registration):
    await auth_service.register_user(UserCreate(**registration))

    with pytest.raises(AuthServiceError) as exc:
        await auth_service.register_user(UserCreate(**{**registration, "email": "grace@example.com"}))
    assert exc.value.status_code == 409


async def test_login_wrong_password(auth_service, registration):
    await auth_service.register_user(UserCreate(**registration))

    with pytest.raises(AuthServiceError) as exc:
        await auth_service.login_user(UserLogin(email=registration["email"], password="wrong-password"))
    assert exc.value.status_code == 401


async def _longest_loop_stall(work):
    """Awaits work alongside a ticker and returns the longest gap between ticks."""
    gaps = []
    done = asyncio.Event()

    async def ticker():
        last = time.perf_counter()
        while not done.is_set():
            await asyncio.sleep(0.01)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    tick = asyncio.create_task(ticker())
    try:
        await work
    finally:
        done.set()
        await tick
    return max(gaps)


async def test_password_hashing_does_not_block_event_loop(auth_service, registration, monkeypatch):
    def slow_hash(password):
        time.sleep(0.3)
        return "$2b$12$" + "x" * 53

    monkeypatch.setattr(auth_service_module, "hash_password", slow_hash)

    registrations = asyncio.gather(*(
        auth_service.register_user(UserCreate(**{**registration, "email": f"user{i}@example.com"}))
        for i in range(4)
    ))

    assert await _longest_loop_stall(registrations) < 0.2


async def test_password_check_does_not_block_event_loop(auth_service, registration, monkeypatch):
    await auth_service.register_user(UserCreate(**registration))

    def slow_verify(password, password_hash):
        time.sleep(0.3)
        return False

    monkeypatch.setattr(auth_service_module, "verify_password", slow_verify)

    async def failed_login():
        with pytest.raises(AuthServiceError):
            await auth_service.login_user(UserLogin(email=registration["email"], password="wrong-password"))

    assert await _longest_loop_stall(failed_login()) < 0.2


# -- Endpoints -----------------------------------------------------------------

async def test_register_endpoint(client, auth_service, registration):
    res = await client.post("/register", json=registration)

    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "grace@example.com"
    assert body["favourite_genres"][0]["genre_name"] == "Sci-Fi"
    assert "password" not in body and "password_hash" not in body


async def test_register_endpoint_duplicate_returns_409(client, auth_service, registration):
    await client.post("/register", json=registration)

    res = await client.post("/register", json=registration)

    assert res.status_code == 409
    assert res.json()["detail"] == "User already exists"


@pytest.mark.parametrize("change", [
    {"email": "not-an-email"},
    {"password": "123"},
    {"role": "SUPERUSER"},
    {"first_name": "G"},
])
async def test_register_endpoint_rejects_invalid_input(client, auth_service, registration, change):
    res = await client.post("/register", json={**registration, **change})
    assert res.status_code == 422


async def test_login_endpoint_unknown_email_returns_401(client, auth_service):
    res = await client.post("/login", json={"email": "nobody@example.com", "password": "whatever"})

    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid email or password"


async def test_login_token_opens_protected_routes(
    client, app, auth_service, registration, movie_repository,
):
    app.dependency_overrides[get_movie_service] = lambda: MovieService(movie_repository)
    await client.post("/register", json=registration)

    res = await client.post("/login", json={"email": "grace@example.com", "password": registration["password"]})
    assert res.status_code == 200
    session = res.json()["session"]
    assert session["token_type"] == "bearer"
    assert session["expires_in"] > 0

    res = await client.get(
        "/movie/tt0111161",
        headers={"Authorization": f"Bearer {session['access_token']}"},
    )
    assert res.status_code == 200

    res = await client.get(
        "/movie/tt0111161",
        headers={"Authorization": f"Bearer {session['refresh_token']}"},
    )
    assert res.status_code == 401
