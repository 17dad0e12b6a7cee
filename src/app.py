"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from core.logging_config import setup_logging
from config import (
    ADMIN_EMAIL,
    ADMIN_NAME,
    ADMIN_PASSWORD,
    API_HOST,
    API_PORT,
    CORS_ALLOWED_ORIGINS,
    UPLOAD_DIR,
)
from api.routes import auth, chat, project
from core.database import SessionLocal
from utils.file_storage import UPLOAD_URL_PREFIX
from utils.user_manager import UserManager

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI application
app = FastAPI(
    title="52 Projects API",
    description="Backend API for the 52 projects in 52 weeks challenge.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Chat attachments
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(UPLOAD_DIR)), name="uploads")

# Register route handlers
app.include_router(auth.router)
app.include_router(project.router)
app.include_router(chat.router)


@app.on_event("startup")
def startup_tasks() -> None:
    """Seed the admin account when ADMIN_PASSWORD is configured."""
    if not ADMIN_PASSWORD:
        logger.info("ADMIN_PASSWORD not set, skipping admin account seeding")
        return
    db = SessionLocal()
    try:
        UserManager(db).ensure_admin(ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD)
    finally:
        db.close()


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returns API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": "52 Projects API",
        "version": "1.0.0",
        "description": "Backend API for the 52 projects in 52 weeks challenge.",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    logger.info("Starting 52 Projects API on http://%s:%s", API_HOST, API_PORT)
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
