from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import List
from app.config import settings

def allowed_origins() -> List[str]:
    origins = [settings.frontend_url]
    if settings.environment == "development":
        origins.append("http://localhost:3000")  # Next.js dev server
    origins.extend(
        origin.strip().rstrip('/') for origin in settings.extra_cors_origins.split(',') if origin.strip()
    )
    # Keep order, drop duplicates
    return list(dict.fromkeys(origins))

def setup_cors(app: FastAPI):
    """Let the site and the admin editor call the API from the browser"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
