import datetime as dt
import uuid

import pytest
import pytest_asyncio
from tortoise.exceptions import OperationalError

from bizboost.config import settings
from bizboost.models.session import Session
from bizboost.services.captcha import captcha_service
from bizboost.services.ratelimit import auth_rate_limiter, general_rate_limiter
from bizboost.services.sessions import create_session


pytestmark = pytest.mark.asyncio


async def new_captcha(client):
    resp = await client.get("/api/auth/captcha/generate")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert set(data) == {"captchaId", "question"}
    return data


@pytest_asyncio.fixture
async def signup(client, solve_captcha):
    """Sign up a fresh user with a solved captcha; keyword arguments override the payload."""

    async def _signup(**overrides):
        tag = uuid.uuid4().hex[:6]
        captcha = await new_captcha(client)
        payload = {
            "email": f"user_{tag}@example.com",
            "username": f"user_{tag}",
            "password": "StrongPass!23",
            "captchaId": captcha["captchaId"],
            "captchaAnswer": solve_captcha(captcha["question"]),
        }
        payload.update(overrides)
        return await client.post("/api/auth/signup", json=payload)

    return _signup


async def login(client, email: str, password: str):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


async def test_signup_sets_session_cookie_and_me_works(client, signup):
    resp = await signup(email="Mixed.Case@Example.com", username="mixed")
    body = resp.json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "mixed.case@example.com"
    assert body["data"]["user"]["role"] == "user"
    assert "password" not in str(body)

    cookie = resp.headers["set-cookie"]
    assert cookie.startswith("session_id=")
    assert "HttpOnly" in cookie
    assert "Max-Age=604800" in cookie
    assert "samesite=strict" in cookie.lower()

    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["user"]["username"] == "mixed"

    # Email match is case-insensitive on login
    again = await login(client, "MIXED.case@example.com", "StrongPass!23")
    assert again.status_code == 200


async def test_signup_as_business_owner(client, signup):
    resp = await signup(role="business_owner")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == "business_owner"


@pytest.mark.parametrize(
    "overrides,code",
    [
        ({"role": "admin"}, "INVALID_ROLE"),
        ({"role": "superuser"}, "INVALID_ROLE"),
        ({"password": "short"}, "WEAK_PASSWORD"),
        ({"email": ""}, "BAD_REQUEST"),
        ({"username": None}, "BAD_REQUEST"),
        ({"password": None}, "BAD_REQUEST"),
    ],
)
async def test_signup_rejections(signup, overrides, code):
    resp = await signup(**overrides)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == code


async def test_signup_duplicates(client, signup):
    first = await signup(email="dup@example.com", username="dup_user")
    assert first.status_code == 201

    dup_email = await signup(email="DUP@example.com", username="other_user")
    assert dup_email.status_code == 400
    assert dup_email.json()["detail"]["code"] == "EMAIL_EXISTS"

    dup_username = await signup(email="other@example.com", username="dup_user")
    assert dup_username.status_code == 400
    assert dup_username.json()["detail"]["code"] == "USERNAME_EXISTS"


async def test_signup_captcha_required_and_checked(client, signup, solve_captcha):
    missing = await signup(captchaId=None)
    assert missing.status_code == 400
    assert missing.json()["detail"]["code"] == "CAPTCHA_REQUIRED"

    captcha = await new_captcha(client)
    wrong = await signup(
        captchaId=captcha["captchaId"],
        captchaAnswer=solve_captcha(captcha["question"]) + 1,
    )
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == {"code": "CAPTCHA_INVALID", "message": "Incorrect answer"}

    # The failed attempt consumed the challenge
    retry = await signup(
        captchaId=captcha["captchaId"],
        captchaAnswer=solve_captcha(captcha["question"]),
    )
    assert retry.status_code == 400
    assert retry.json()["detail"]["message"] == "Captcha not found or expired"


async def test_captcha_is_consumed_even_when_signup_fails_later(client, signup, solve_captcha):
    captcha = await new_captcha(client)
    answer = solve_captcha(captcha["question"])
    weak = await signup(password="short", captchaId=captcha["captchaId"], captchaAnswer=answer)
    assert weak.json()["detail"]["code"] == "WEAK_PASSWORD"

    replay = await signup(captchaId=captcha["captchaId"], captchaAnswer=answer)
    assert replay.status_code == 400
    assert replay.json()["detail"]["code"] == "CAPTCHA_INVALID"


async def test_signup_without_captcha_when_disabled(signup, monkeypatch):
    monkeypatch.setattr(settings, "signup_captcha_required", False)
    resp = await signup(captchaId=None, captchaAnswer=None)
    assert resp.status_code == 201


async def test_login_invalid_credentials(client, create_user):
    user, password = await create_user()

    wrong_password = await login(client, user.email, "wrong-password")
    assert wrong_password.status_code == 401
    assert wrong_password.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"

    unknown = await login(client, "nobody@example.com", password)
    assert unknown.status_code == 401
    assert unknown.json()["detail"] == wrong_password.json()["detail"]

    missing = await client.post("/api/auth/login", json={"email": user.email})
    assert missing.status_code == 400


async def test_each_login_creates_a_session(client, create_user):
    user, password = await create_user()
    first = await login(client, user.email, password)
    second = await login(client, user.email, password)
    assert first.cookies["session_id"] != second.cookies["session_id"]
    assert await Session.filter(user_id=user.id).count() == 2

    await user.refresh_from_db()
    assert user.last_login_at is not None


async def test_logout_only_ends_current_session(client, create_user, login_as, use_session):
    user, password = await create_user()
    laptop = await login_as(user, password)
    phone = await login_as(user, password)

    use_session(laptop)
    out = await client.post("/api/auth/logout")
    assert out.status_code == 200
    assert "session_id=" in out.headers["set-cookie"]

    use_session(laptop)
    assert (await client.get("/api/auth/me")).status_code == 401

    use_session(phone)
    me = await client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == str(user.id)


async def test_logout_requires_session(client):
    resp = await client.post("/api/auth/logout")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "AUTH_REQUIRED"


async def test_missing_unknown_and_expired_sessions_look_the_same(client, create_user, use_session):
    user, _ = await create_user()
    expired = await create_session(user, ttl=dt.timedelta(seconds=-1))

    use_session(None)
    no_cookie = await client.get("/api/auth/me")

    use_session("not-a-real-session")
    unknown = await client.get("/api/auth/me")

    use_session(expired.id)
    stale = await client.get("/api/auth/me")

    assert no_cookie.status_code == unknown.status_code == stale.status_code == 401
    assert no_cookie.json() == unknown.json() == stale.json()


async def test_storage_failure_is_500_not_anonymous(client, monkeypatch, use_session):
    async def broken(session_id):
        raise OperationalError("database is unavailable")

    monkeypatch.setattr("bizboost.api.deps.resolve_session", broken)
    use_session("some-session")

    resp = await client.get("/api/auth/me")
    assert resp.status_code == 500
    assert resp.json()["detail"]["code"] == "INTERNAL_ERROR"

    # Optional-auth routes must not silently fall back to anonymous either
    listing = await client.get("/api/businesses")
    assert listing.status_code == 500


async def test_auth_attempts_are_rate_limited(client, monkeypatch):
    monkeypatch.setattr(auth_rate_limiter, "max_hits", 2)
    for _ in range(2):
        resp = await login(client, "nobody@example.com", "whatever-pass")
        assert resp.status_code == 401

    limited = await login(client, "nobody@example.com", "whatever-pass")
    assert limited.status_code == 429
    assert limited.json()["detail"]["code"] == "RATE_LIMITED"


async def test_malformed_body_is_400(client):
    resp = await client.post("/api/auth/login", content="not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


async def test_boolean_captcha_answer_is_rejected_at_signup(client):
    challenge = captcha_service.issue("What is 2 - 1?", 1)
    resp = await client.post(
        "/api/auth/signup",
        json={
            "email": "bool@example.com",
            "username": "bool_user",
            "password": "StrongPass!23",
            "captchaId": challenge.captcha_id,
            "captchaAnswer": True,
        },
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == {"code": "CAPTCHA_INVALID", "message": "Invalid answer format"}


async def test_every_api_route_shares_the_general_rate_limit(client, monkeypatch):
    monkeypatch.setattr(general_rate_limiter, "max_hits", 3)
    assert (await client.get("/api/businesses")).status_code == 200
    assert (await client.get("/api/deals")).status_code == 200
    assert (await client.get("/api/auth/me")).status_code == 401

    limited = await client.get("/api/businesses/meta/categories")
    assert limited.status_code == 429
    assert limited.json()["detail"]["code"] == "RATE_LIMITED"

    # Outside /api
    assert (await client.get("/healthz")).status_code == 200
