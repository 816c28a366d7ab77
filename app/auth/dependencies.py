# app/auth/dependencies.py
from fastapi import HTTPException, Header, status
from typing import Optional
from app.auth.models import AdminIdentity, AuthErrorReason
from app.auth.tokens import AuthenticationError, verify_access_token
import logging

logger = logging.getLogger(__name__)

def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the credential from a "Bearer <token>" header, if any"""
    if not authorization:
        return None

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]

async def require_admin(
    authorization: Optional[str] = Header(None)
) -> AdminIdentity:
    """Gate for mutating newsletter operations - REQUIRED authentication"""
    try:
        return verify_access_token(extract_bearer_token(authorization))
    except AuthenticationError as e:
        if e.reason == AuthErrorReason.VERIFICATION_UNAVAILABLE:
            logger.error(f"Token verification unavailable: {e.message}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Authentication is not configured"
            )

        logger.warning(f"Rejected admin credential: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"}
        )
