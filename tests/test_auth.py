import datetime
import fastapi
import jwt
import lectern.config
import lectern.middleware.auth
import lectern.middleware.rate_limit
import pytest
from tests.conftest import make_token


class _Credentials:
    def __init__(self, token):
        self.credentials = token


@pytest.mark.asyncio
async def test_valid_token():
    user = await lectern.middleware.auth.get_current_user_optional(_Credentials(make_token(7, "admin")))
    assert user == {"user_id": 7, "role": "admin"}


@pytest.mark.asyncio
async def test_missing_credentials():
    assert await lectern.middleware.auth.get_current_user_optional(None) is None


@pytest.mark.asyncio
async def test_expired_token():
    payload = {
        "sub": "7",
        "role": "user",
        "exp": datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=1)
    }
    token = jwt.encode(payload, lectern.config.settings.jwt_secret_key, algorithm="HS256")
    assert await lectern.middleware.auth.get_current_user_optional(_Credentials(token)) is None


@pytest.mark.asyncio
async def test_wrong_secret():
    token = jwt.encode({"sub": "7", "role": "user"}, "other-secret", algorithm="HS256")
    assert await lectern.middleware.auth.get_current_user_optional(_Credentials(token)) is None


@pytest.mark.asyncio
async def test_token_without_role():
    token = jwt.encode({"sub": "7"}, lectern.config.settings.jwt_secret_key, algorithm="HS256")
    assert await lectern.middleware.auth.get_current_user_optional(_Credentials(token)) is None


@pytest.mark.asyncio
async def test_require_admin_rejects_user():
    with pytest.raises(fastapi.HTTPException) as exc_info:
        await lectern.middleware.auth.require_admin({"user_id": 1, "role": "user"})
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_non_numeric_subject():
    token = jwt.encode(
        {
            "sub": "reader-7",
            "role": "user",
            "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=5)
        },
        lectern.config.settings.jwt_secret_key,
        algorithm="HS256"
    )
    assert await lectern.middleware.auth.get_current_user_optional(_Credentials(token)) is None


@pytest.mark.asyncio
async def test_unknown_role():
    assert await lectern.middleware.auth.get_current_user_optional(
        _Credentials(make_token(7, "superuser"))
    ) is None


def _request(headers=None):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/v1/books/1",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("10.0.0.5", 5000),
    }
    return fastapi.Request(scope)


def test_rate_limit_key_per_user():
    request = _request({"Authorization": f"Bearer {make_token(42)}"})
    assert lectern.middleware.rate_limit.rate_limit_key(request) == "user:42"


def test_rate_limit_key_anonymous_uses_address():
    assert lectern.middleware.rate_limit.rate_limit_key(_request()) == "ip:10.0.0.5"


def test_rate_limit_key_invalid_token_uses_address():
    request = _request({"Authorization": "Bearer not-a-token"})
    assert lectern.middleware.rate_limit.rate_limit_key(request) == "ip:10.0.0.5"
