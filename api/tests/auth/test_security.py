"""Tests for password hashing and access tokens."""

from datetime import timedelta

import pytest
from jose import JWTError, jwt

from coursehub.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from coursehub.config.settings import get_settings


class TestPasswordHashing:
    def test_hash_is_argon2id(self) -> None:
        hashed = hash_password("correct horse")
        assert hashed.startswith("$argon2id$")
        assert hashed != hash_password("correct horse")

    def test_verify(self) -> None:
        hashed = hash_password("correct horse")
        assert verify_password("correct horse", hashed) == (True, None)
        assert verify_password("wrong horse", hashed) == (False, None)

    def test_verify_garbage_hash(self) -> None:
        assert verify_password("anything", "not-a-hash") == (False, None)


class TestAccessToken:
    def test_round_trip_claims(self) -> None:
        token = create_access_token({"sub": "abc", "role": "student"})
        payload = decode_access_token(token)
        assert payload["sub"] == "abc"
        assert payload["role"] == "student"
        assert payload["type"] == "access"

    def test_expired_token(self) -> None:
        token = create_access_token(
            {"sub": "abc", "role": "student"}, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_type(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": "abc", "role": "student", "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_missing_role(self) -> None:
        token = create_access_token({"sub": "abc"})
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_foreign_signature(self) -> None:
        token = jwt.encode(
            {"sub": "abc", "role": "admin", "type": "access"},
            "another-secret-key-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(JWTError):
            decode_access_token(token)
