import os
import re
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from bizboost.core import db as db_module
from bizboost.core.security import hash_password
from bizboost.main import app
from bizboost.models.business import Business
from bizboost.models.user import User
from bizboost.services.kv_factory import kv_store


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL

QUESTION_RE = re.compile(r"^What is (\d+) ([+-]) (\d+)\?$")


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture(autouse=True)
def clean_kv_store():
    """Captchas and rate-limit counters must not leak between tests."""
    kv_store.clear()
    yield
    kv_store.clear()


@pytest_asyncio.fixture
async def db():
    """A fresh database without an HTTP client (service-level tests)."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


def _solve(question: str) -> int:
    """Answer an arithmetic captcha question the way a human would."""
    m = QUESTION_RE.match(question)
    assert m, f"unexpected captcha question: {question!r}"
    a, op, b = int(m.group(1)), m.group(2), int(m.group(3))
    return a + b if op == "+" else a - b


def _send_session(client: AsyncClient, session_id: str | None) -> None:
    """Make the client send exactly this session cookie (or none)."""
    client.cookies.clear()
    if session_id:
        client.cookies.set("session_id", session_id)


@pytest.fixture
def solve_captcha():
    return _solve


@pytest.fixture
def use_session(client):
    """Switch the client between sessions (several devices of one user, or anonymous)."""

    def _use(session_id: str | None) -> None:
        _send_session(client, session_id)

    return _use


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM.
    """

    async def _create_user(role: str = "user", password: str = "UserPass!23") -> tuple[User, str]:
        tag = uuid.uuid4().hex[:8]
        user = await User.create(
            username=f"{role}_{tag}",
            email=f"{role}_{tag}@example.com",
            password_hash=hash_password(password),
            role=role,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(create_user):
    async def _create_admin(password: str = "AdminPass!23") -> tuple[User, str]:
        return await create_user(role="admin", password=password)

    return _create_admin


@pytest_asyncio.fixture
async def create_owner(create_user):
    async def _create_owner(password: str = "OwnerPass!23") -> tuple[User, str]:
        return await create_user(role="business_owner", password=password)

    return _create_owner


@pytest_asyncio.fixture
async def login_as(client):
    """
    Log a user in through the API and make the client use that session.
    Returns the session id.
    """

    async def _login(user: User, password: str) -> str:
        resp = await client.post("/api/auth/login", json={"email": user.email, "password": password})
        assert resp.status_code == 200, resp.text
        session_id = resp.cookies.get("session_id")
        assert session_id
        _send_session(client, session_id)
        return session_id

    return _login


@pytest_asyncio.fixture
async def create_business(db):
    """Factory fixture for businesses owned by a given user."""

    async def _create_business(owner: User | None = None, **overrides) -> Business:
        fields = {
            "name": f"Shop {uuid.uuid4().hex[:6]}",
            "category": "food",
            "address": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "description": "A friendly neighborhood place.",
            "verified": True,
        }
        fields.update(overrides)
        return await Business.create(owner=owner, **fields)

    return _create_business
