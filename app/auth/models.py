from pydantic import BaseModel, EmailStr
from typing import Optional
from enum import Enum

class AuthErrorReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_OR_EXPIRED = "invalid_or_expired"
    VERIFICATION_UNAVAILABLE = "verification_unavailable"

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_in: int

class AdminIdentity(BaseModel):
    email: str

class TokenData(BaseModel):
    sub: str
    email: str
    exp: Optional[int] = None
    iat: Optional[int] = None
