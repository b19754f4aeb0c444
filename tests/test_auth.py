# tests/test_auth.py

from __future__ import annotations

import time

import pytest
from fastapi import HTTPException
from jose import jwt

from app import config
from app.middleware.auth import get_current_user_id, require_roles, verify_token
from app.models.user import Actor, UserRole

SECRET = "test-secret"


@pytest.fixture(autouse=True)
def shared_secret(monkeypatch) -> None:
    monkeypatch.setattr(config, "JWT_SECRET", SECRET)
    monkeypatch.setattr(config, "AUTH_JWT_AUDIENCE", None)
    monkeypatch.setattr(config, "AUTH_JWT_ISSUER", None)


def _token(claims: dict, secret: str = SECRET) -> str:
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.mark.asyncio
async def test_valid_token_yields_subject() -> None:
    token = _token({"sub": "user-42", "exp": int(time.time()) + 60})

    assert await get_current_user_id(authorization=f"Bearer {token}") == "user-42"


@pytest.mark.asyncio
async def test_token_with_audience_is_accepted_when_none_configured() -> None:
    payload = await verify_token(_token({"sub": "user-42", "aud": "authenticated"}))

    assert payload["sub"] == "user-42"


@pytest.mark.asyncio
async def test_wrong_signature_is_unauthorized() -> None:
    with pytest.raises(HTTPException) as excinfo:
        await verify_token(_token({"sub": "user-42"}, secret="other"))

    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_unauthorized() -> None:
    with pytest.raises(HTTPException) as excinfo:
        await verify_token(_token({"sub": "user-42", "exp": int(time.time()) - 60}))

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Token has expired"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer"])
async def test_missing_or_malformed_header_is_unauthorized(header) -> None:
    with pytest.raises(HTTPException) as excinfo:
        await get_current_user_id(authorization=header)

    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_token_without_subject_is_unauthorized() -> None:
    with pytest.raises(HTTPException) as excinfo:
        await get_current_user_id(authorization=f"Bearer {_token({'role': 'admin'})}")

    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_role_gate() -> None:
    admin_only = require_roles(UserRole.ADMIN)
    admin = Actor(id="a", role=UserRole.ADMIN)

    assert await admin_only(actor=admin) == admin

    with pytest.raises(HTTPException) as excinfo:
        await admin_only(actor=Actor(id="m", role=UserRole.MANAGER))
    assert excinfo.value.status_code == 403
