# =============================================================================
# tests/test_auth.py - Token Verification Tests
# =============================================================================

import time
import uuid

import pytest
from fastapi import HTTPException
from jose import jwt

from app.auth.dependencies import decode_token
from app.auth.models import AuthUser
from app.config import settings

SECRET = "test-jwt-secret"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", SECRET)


def make_token(secret: str = SECRET, **overrides) -> str:
    claims = {
        "sub": str(uuid.uuid4()),
        "email": "ada@example.com",
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, secret, algorithm="HS256")


class TestDecodeToken:
    def test_valid_token(self):
        user_id = str(uuid.uuid4())
        user = decode_token(make_token(sub=user_id))

        assert isinstance(user, AuthUser)
        assert str(user.id) == user_id
        assert user.email == "ada@example.com"
        assert user.role == "authenticated"

    def test_expired_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(exp=int(time.time()) - 60))
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(aud="anon"))
        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(secret="someone-else"))
        assert exc_info.value.status_code == 401

    def test_missing_subject(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(sub=None))
        assert exc_info.value.status_code == 401

    def test_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-jwt")
        assert exc_info.value.status_code == 401

    def test_secret_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "")
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token())
        assert exc_info.value.status_code == 401
