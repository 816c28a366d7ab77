# app/auth/tokens.py
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from jose import jwt, JWTError, ExpiredSignatureError
from app.config import settings
from pydantic import ValidationError
from app.auth.models import AdminIdentity, AuthErrorReason, TokenData
import logging

logger = logging.getLogger(__name__)

class AuthenticationError(Exception):
    def __init__(self, reason: AuthErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

def _require_secret(secret: Optional[str]) -> str:
    secret = secret or settings.jwt_secret_key
    if not secret:
        raise AuthenticationError(
            AuthErrorReason.VERIFICATION_UNAVAILABLE,
            "Token signing secret is not configured"
        )
    return secret

def check_admin_credentials(email: str, password: str) -> bool:
    """Compare against the configured admin identity in constant time"""
    if not settings.admin_password:
        logger.error("ADMIN_PASSWORD is not set - admin login is disabled")
        return False

    email_ok = hmac.compare_digest(email.strip().lower().encode(), settings.admin_email.strip().lower().encode())
    password_ok = hmac.compare_digest(password.encode(), settings.admin_password.encode())
    return email_ok and password_ok

def create_access_token(email: str, secret: Optional[str] = None) -> Tuple[str, int]:
    """Issue a signed admin token; returns (token, lifetime in seconds)"""
    secret = _require_secret(secret)
    expires_in = settings.access_token_expire_hours * 3600
    now = datetime.now(timezone.utc)

    claims = {
        "sub": email,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(claims, secret, algorithm=settings.jwt_algorithm)
    return token, expires_in

def verify_access_token(token: Optional[str], secret: Optional[str] = None) -> AdminIdentity:
    """Verify a bearer credential and return the admin identity it proves"""
    if not token:
        raise AuthenticationError(AuthErrorReason.MISSING_CREDENTIAL, "No token provided")

    secret = _require_secret(secret)

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError(AuthErrorReason.INVALID_OR_EXPIRED, "Token expired")
    except JWTError:
        raise AuthenticationError(AuthErrorReason.INVALID_OR_EXPIRED, "Invalid token")

    try:
        token_data = TokenData(**payload)
    except ValidationError:
        raise AuthenticationError(AuthErrorReason.INVALID_OR_EXPIRED, "Invalid token payload")
    if not token_data.email:
        raise AuthenticationError(AuthErrorReason.INVALID_OR_EXPIRED, "Invalid token payload")

    return AdminIdentity(email=token_data.email)
