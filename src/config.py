"""Configuration module for the 52 Projects tracker.

This module provides centralized configuration management, including directory
paths, API server settings, authentication, GitHub OAuth and upload limits.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / DATA_DIR_NAME)))

# Uploaded chat attachments, served back under /uploads
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(ROOT_DIR / "uploads")))

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/projects52.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", os.getenv("PORT", "3000")))

# CORS allowed origins (comma-separated list)
# Default is the Vite dev server. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Authentication Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))  # 7 days
)

# Admin account seeded at startup. Nothing is seeded unless a password is set.
ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@52projects.com")
ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Admin")
ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

# --- GitHub OAuth Configuration ---

GITHUB_CLIENT_ID: Optional[str] = os.getenv("GITHUB_CLIENT_ID")
GITHUB_CLIENT_SECRET: Optional[str] = os.getenv("GITHUB_CLIENT_SECRET")
GITHUB_REDIRECT_URI: Optional[str] = os.getenv("GITHUB_REDIRECT_URI")
GITHUB_OAUTH_URL: str = "https://github.com/login/oauth/access_token"
GITHUB_API_URL: str = "https://api.github.com"
GITHUB_TIMEOUT: float = float(os.getenv("GITHUB_TIMEOUT", "10"))

# When true, a first GitHub login whose verified primary email matches an
# existing account is attached to that account instead of failing.
GITHUB_LINK_BY_EMAIL: bool = os.getenv("GITHUB_LINK_BY_EMAIL", "true").lower() == "true"

# --- Project Configuration ---

MIN_WEEK: int = 1
MAX_WEEK: int = 52

# --- Chat Configuration ---

MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))  # 10MB

# Recipient value the client sends when the admin addresses everybody
BROADCAST_RECIPIENT: str = "everyone"
