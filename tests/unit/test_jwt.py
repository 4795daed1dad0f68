# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and token operations.
"""

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from jose import jwt
from pydantic import SecretStr

from academia.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPayload,
)


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_decode_access_token_returns_payload(self, jwt_manager: JWTManager) -> None:
        """Test that decode_token returns the claims that were encoded."""
        user_id = str(uuid4())
        school_id = str(uuid4())

        token = jwt_manager.create_access_token(
            user_id=user_id,
            roles=["school_admin"],
            school_id=school_id,
        )
        payload = jwt_manager.decode_token(token)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == user_id
        assert payload.type == "access"
        assert payload.roles == ["school_admin"]
        assert payload.school_id == school_id
        assert payload.exp - payload.iat == 30 * 60

    def test_defaults_for_optional_claims(self, jwt_manager: JWTManager) -> None:
        payload = jwt_manager.decode_token(jwt_manager.create_access_token("user-1"))

        assert payload.roles == []
        assert payload.school_id is None

    def test_expired_token_raises(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token("user-1", expires_delta=timedelta(minutes=-5))

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)

    def test_wrong_secret_raises(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"sub": "user-1", "type": "access", "exp": 9999999999, "iat": 0, "jti": "x"},
            "another-secret",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_wrong_token_type_raises(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"sub": "user-1", "type": "refresh", "exp": 9999999999, "iat": 0, "jti": "x"},
            "test-secret-key-for-jwt-testing",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

        assert jwt_manager.decode_token(token, expected_type=None).type == "refresh"

    def test_missing_claims_raise(self, jwt_manager: JWTManager) -> None:
        token = jwt.encode(
            {"type": "access", "exp": 9999999999},
            "test-secret-key-for-jwt-testing",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_garbage_token_raises(self, jwt_manager: JWTManager) -> None:
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not.a.token")
