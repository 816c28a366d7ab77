# app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from app.config import settings
from app.middleware.cors import setup_cors
from app.database.connection import DatabaseConnection
from app.database.schema import init_schema
from app.services.email_service import email_service
from app.services.storage_service import LOCAL_URL_PREFIX


import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Newsletter API...")
    db = DatabaseConnection(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size
    )
    app.state.db = db
    try:
        async with db.acquire() as connection:
            await init_schema(connection)
        logger.info("Database connection pool initialized")
    except Exception as e:
        if settings.environment == "development":
            logger.warning(f"Database connection failed (development mode): {e}")
        else:
            logger.error(f"Failed to initialize database: {e}")
            raise

    yield

    # Shutdown
    logger.info("Shutting down Newsletter API...")
    try:
        await db.close_pool()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database connections: {e}")

app = FastAPI(
    title="Newsletter API",
    description="Newsletter publishing and subscriber management API",
    version="1.0.0",
    lifespan=lifespan
)

# Setup CORS
setup_cors(app)

from app.auth.routes import router as auth_router
app.include_router(auth_router)

from app.routes.subscribers import router as subscribers_router
app.include_router(subscribers_router)

from app.routes.newsletters import router as newsletters_router
app.include_router(newsletters_router)

from app.routes.uploads import router as uploads_router
app.include_router(uploads_router)

# Local fallback for images when no S3 bucket is configured
app.mount(
    LOCAL_URL_PREFIX,
    StaticFiles(directory=settings.uploads_dir, check_dir=False),
    name="uploads"
)

@app.get("/")
async def root():
    return {"message": "Newsletter API", "status": "healthy"}

@app.get("/health")
async def health_check():
    """Health check including database and mail transport"""
    try:
        db: DatabaseConnection = app.state.db
        async with db.acquire() as connection:
            await connection.fetchval('SELECT 1')
        db_healthy = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_healthy = False

    return {
        "status": "healthy" if db_healthy else "degraded",
        "environment": settings.environment,
        "database_healthy": db_healthy,
        "email_configured": email_service.is_configured
    }

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
