# app/utils/validation.py
import re
import html
from typing import Optional
from email_validator import EmailNotValidError, validate_email as check_email_address

def normalize_email(email: Optional[str]) -> str:
    """Canonical form used as the subscriber identity"""
    if not email:
        return ""
    return email.strip().lower()

def validate_email(email: str) -> bool:
    """Same rules as the EmailStr check at the HTTP boundary"""
    if not email:
        return False

    try:
        check_email_address(email, check_deliverability=False)
    except EmailNotValidError:
        return False

    return True

def sanitize_name(text: Optional[str]) -> str:
    """Sanitize a display name before it is stored and echoed into emails"""
    if not text:
        return ""

    text = html.unescape(text.strip())

    # Remove markup characters and control characters
    text = re.sub(r'[<>"\x00-\x1f\x7f-\x9f]', '', text)

    # Limit length to the column size
    return text[:100].strip()
