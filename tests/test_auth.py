"""
Unit tests for the admin access guard.
Tests bearer token issuance, verification failures and the FastAPI dependency.
"""

import time

import pytest
from fastapi import HTTPException
from jose import jwt

from app.auth.dependencies import extract_bearer_token, require_admin
from app.auth.models import AuthErrorReason
from app.auth.tokens import (
    AuthenticationError,
    check_admin_credentials,
    create_access_token,
    verify_access_token,
)
from app.config import settings


class TestTokenRoundTrip:
    """Test issued tokens verify back to the admin identity."""

    def test_issued_token_verifies_to_email(self):
        token, expires_in = create_access_token("admin@example.com")

        identity = verify_access_token(token)

        assert identity.email == "admin@example.com"
        assert expires_in == 24 * 3600

    def test_token_expires_after_one_day(self):
        token, _ = create_access_token("admin@example.com")

        claims = jwt.get_unverified_claims(token)

        assert claims["exp"] - claims["iat"] == 24 * 3600


class TestVerificationFailures:
    """Test each typed failure of verify_access_token."""

    def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(None)

        assert exc_info.value.reason == AuthErrorReason.MISSING_CREDENTIAL

    def test_wrong_signature(self):
        token, _ = create_access_token("admin@example.com", secret="some-other-secret")

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(token)

        assert exc_info.value.reason == AuthErrorReason.INVALID_OR_EXPIRED

    def test_garbage_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token("not.a.jwt")

        assert exc_info.value.reason == AuthErrorReason.INVALID_OR_EXPIRED

    def test_expired_token(self):
        expired = jwt.encode(
            {"sub": "admin@example.com", "email": "admin@example.com", "exp": int(time.time()) - 60},
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(expired)

        assert exc_info.value.reason == AuthErrorReason.INVALID_OR_EXPIRED
        assert "expired" in exc_info.value.message.lower()

    def test_token_without_email(self):
        token = jwt.encode({"exp": int(time.time()) + 60}, settings.jwt_secret_key, algorithm="HS256")

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(token)

        assert exc_info.value.reason == AuthErrorReason.INVALID_OR_EXPIRED

    def test_token_without_subject(self):
        token = jwt.encode(
            {"email": "admin@example.com", "exp": int(time.time()) + 60},
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(token)

        assert exc_info.value.message == "Invalid token payload"

    def test_token_with_non_string_email(self):
        token = jwt.encode(
            {"sub": "admin@example.com", "email": 42, "exp": int(time.time()) + 60},
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(token)

        assert exc_info.value.reason == AuthErrorReason.INVALID_OR_EXPIRED

    def test_extra_claims_are_ignored(self):
        token = jwt.encode(
            {
                "sub": "admin@example.com",
                "email": "admin@example.com",
                "exp": int(time.time()) + 60,
                "scope": "admin",
            },
            settings.jwt_secret_key,
            algorithm="HS256",
        )

        assert verify_access_token(token).email == "admin@example.com"

    def test_missing_secret_is_infrastructure_failure(self, monkeypatch):
        token, _ = create_access_token("admin@example.com")
        monkeypatch.setattr(settings, "jwt_secret_key", None)

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(token)

        assert exc_info.value.reason == AuthErrorReason.VERIFICATION_UNAVAILABLE


class TestRequireAdmin:
    """Test the FastAPI dependency's status mapping."""

    @pytest.mark.asyncio
    async def test_valid_bearer_returns_identity(self):
        token, _ = create_access_token("admin@example.com")

        identity = await require_admin(f"Bearer {token}")

        assert identity.email == "admin@example.com"

    @pytest.mark.asyncio
    async def test_missing_header_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_bearer_prefix_raises_401(self):
        token, _ = create_access_token("admin@example.com")

        with pytest.raises(HTTPException) as exc_info:
            await require_admin(token)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_raises_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin("Bearer invalid.jwt.token")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unconfigured_secret_raises_500(self, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret_key", None)

        with pytest.raises(HTTPException) as exc_info:
            await require_admin("Bearer whatever.jwt.token")

        assert exc_info.value.status_code == 500

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer abc") == "abc"
        assert extract_bearer_token("bearer abc") is None
        assert extract_bearer_token("Bearer ") is None
        assert extract_bearer_token(None) is None


class TestAdminCredentials:
    """Test the fixed admin identity check used by login."""

    def test_correct_credentials(self):
        assert check_admin_credentials("admin@example.com", "correct-horse")

    def test_email_is_case_insensitive(self):
        assert check_admin_credentials("Admin@Example.com", "correct-horse")

    def test_wrong_password(self):
        assert not check_admin_credentials("admin@example.com", "wrong")

    def test_wrong_email(self):
        assert not check_admin_credentials("other@example.com", "correct-horse")

    def test_no_configured_password_disables_login(self, monkeypatch):
        monkeypatch.setattr(settings, "admin_password", None)

        assert not check_admin_credentials("admin@example.com", "correct-horse")
