# app/auth/routes.py
from fastapi import APIRouter, HTTPException, status
from app.auth.models import LoginRequest, TokenResponse
from app.auth.tokens import AuthenticationError, check_admin_credentials, create_access_token
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["Admin"])

@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """Exchange the admin email and password for a bearer token"""
    logger.info(f"Admin login request for email: {request.email}")

    if not check_admin_credentials(request.email, request.password):
        logger.warning(f"Invalid admin credentials for: {request.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    try:
        token, expires_in = create_access_token(request.email.lower())
    except AuthenticationError as e:
        logger.error(f"Admin login failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

    logger.info(f"Admin login successful for: {request.email}")
    return TokenResponse(token=token, expires_in=expires_in)
