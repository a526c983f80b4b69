import pytest

from bizboost.core.bootstrap import ensure_default_admin
from bizboost.core.security import verify_password
from bizboost.models.user import User


pytestmark = pytest.mark.asyncio


async def test_skips_without_admin_password(db, monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    assert await ensure_default_admin() is None
    assert not await User.filter(role="admin").exists()


async def test_creates_admin_once(db, monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "BootAdmin!23")
    monkeypatch.setenv("ADMIN_EMAIL", "Root@Example.com")

    admin = await ensure_default_admin()
    assert admin is not None
    assert admin.role == "admin"
    assert admin.email == "root@example.com"
    assert verify_password("BootAdmin!23", admin.password_hash)

    assert await ensure_default_admin() is None
    assert await User.filter(role="admin").count() == 1


async def test_picks_free_username(create_user, monkeypatch):
    taken, _ = await create_user()
    monkeypatch.setenv("ADMIN_PASSWORD", "BootAdmin!23")
    monkeypatch.setenv("ADMIN_USERNAME", taken.username)
    monkeypatch.delenv("ADMIN_EMAIL", raising=False)

    admin = await ensure_default_admin()
    assert admin.username == f"{taken.username}2"


async def test_does_not_take_over_existing_email(create_user, monkeypatch):
    user, _ = await create_user()
    monkeypatch.setenv("ADMIN_PASSWORD", "BootAdmin!23")
    monkeypatch.setenv("ADMIN_EMAIL", user.email)

    assert await ensure_default_admin() is None
    await user.refresh_from_db()
    assert user.role == "user"
