"""Tests for security module: bearer token handling."""
import jwt
import pytest

from contapyme.core.config import settings
from contapyme.core.security import (
    ALGORITHM,
    TokenExpiredError,
    TokenValidationError,
    create_access_token,
    decode_token,
)


class TestAccessTokens:
    def test_round_trip_subject(self):
        payload = decode_token(create_access_token("42"))
        assert payload["sub"] == "42"
        assert payload["type"] == "access"

    def test_expired_token(self):
        token = create_access_token("42", expires_minutes=-1)
        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_tampered_token(self):
        token = create_access_token("42")
        with pytest.raises(TokenValidationError):
            decode_token(token[:-2] + "xx")

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "42", "type": "access"}, "another-secret", algorithm=ALGORITHM)
        with pytest.raises(TokenValidationError):
            decode_token(token)

    def test_refresh_tokens_are_not_access_tokens(self):
        token = jwt.encode({"sub": "42", "type": "refresh"}, settings.JWT_SECRET, algorithm=ALGORITHM)
        with pytest.raises(TokenValidationError, match="mismatch"):
            decode_token(token)


class TestBearerDependency:
    def test_expired_token_is_401(self, client, business):
        token = create_access_token(str(business.user_id), expires_minutes=-5)
        resp = client.get("/business", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Token expired"

    def test_non_numeric_subject_is_401(self, client):
        token = create_access_token("not-a-number")
        resp = client.get("/business", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
