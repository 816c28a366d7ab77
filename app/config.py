from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    environment: str = "development"

    # Database Settings
    database_url: Optional[str] = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    # AWS
    aws_region: str = "us-east-1"

    # Email Settings (SES) - no from_email means no mail transport
    from_email: Optional[str] = None
    from_name: str = "VisionTech Newsletter"
    support_email: Optional[str] = None
    ses_configuration_set: Optional[str] = None
    newsletter_name: str = "VisionTech Newsletter"

    # Image Storage (S3) - falls back to uploads_dir when no bucket is set
    image_bucket_name: Optional[str] = None
    image_public_base_url: Optional[str] = None
    image_folder: str = "newsletter-images"
    uploads_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # App Settings
    frontend_url: str = "http://localhost:3000"
    backend_url: str = "http://localhost:8000"
    # Comma separated, e.g. the admin editor when hosted apart from the site
    extra_cors_origins: str = ""

    # Admin bearer tokens
    jwt_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    admin_email: str = "admin@example.com"
    admin_password: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"  # This line allows extra env vars without errors

settings = Settings()
