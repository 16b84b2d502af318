"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens, principal resolution
"""
import pytest
from datetime import timedelta
from jose import jwt

from taskflow.core.config import settings
from taskflow.core.exceptions import InvalidTokenError
from taskflow.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    principal_from_token,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("testpassword123")
        assert hashed != "testpassword123"

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")
        assert verify_password("wrongpassword", hashed) is False

    def test_hash_long_password_truncated(self):
        # Bcrypt has 72 byte limit
        long_password = "a" * 100
        assert verify_password(long_password, get_password_hash(long_password)) is True


class TestTokens:

    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1"})
        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_principal_from_token(self):
        assert principal_from_token(create_access_token({"sub": "user-1"})) == "user-1"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidTokenError):
            principal_from_token(token)

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "other-key", algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(InvalidTokenError):
            principal_from_token(token)

    def test_wrong_token_type_rejected(self):
        token = jwt.encode({"sub": "user-1", "type": "refresh"}, settings.JWT_SECRET_KEY,
                           algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(InvalidTokenError):
            principal_from_token(token)

    def test_missing_subject_rejected(self):
        with pytest.raises(InvalidTokenError):
            principal_from_token(create_access_token({}))

    def test_garbage_rejected(self):
        with pytest.raises(InvalidTokenError):
            principal_from_token("not-a-jwt")
