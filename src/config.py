"""Configuration module for the Bimbel marketplace service.

This module provides centralized configuration management, including directory
paths, API server settings, database connection, JWT and upload settings.
All configuration values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name (local SQLite database lives here)
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# Uploaded files (thumbnails) directory, served under UPLOAD_URL_PREFIX
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(ROOT_DIR / "uploads")))
UPLOAD_URL_PREFIX = "/uploads"
THUMBNAIL_SUBDIR = "thumbnails"

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("APP_PORT") or os.getenv("API_PORT") or "8000")

# Prefix shared by every business route
API_PREFIX: str = os.getenv("API_PREFIX", "/api/v1")

# CORS allowed origins (comma-separated list)
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Database Configuration ---

DB_HOST: str = os.getenv("DB_HOST", "")
DB_PORT: str = os.getenv("DB_PORT", "3306")
DB_USER: str = os.getenv("DB_USER", "")
DB_PASS: str = os.getenv("DB_PASS", "")
DB_NAME: str = os.getenv("DB_NAME", "")


def _build_database_url() -> str:
    """Resolve the SQLAlchemy URL.

    DATABASE_URL wins when set. Otherwise a MySQL URL is assembled from the
    DB_* variables, and without a DB_HOST a local SQLite file is used.
    """
    explicit = os.getenv("DATABASE_URL", "").strip()
    if explicit:
        return explicit
    if DB_HOST:
        return (
            f"mysql+pymysql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
            "?charset=utf8mb4"
        )
    return f"sqlite:///{DATA_DIR}/bimbel.db"


DATABASE_URL: str = _build_database_url()

# --- Authentication Configuration ---

JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM: str = "HS256"
DEFAULT_JWT_EXP_HOURS = 24


def _parse_exp_hours(raw: Optional[str]) -> int:
    try:
        hours = int(raw) if raw is not None else DEFAULT_JWT_EXP_HOURS
    except ValueError:
        return DEFAULT_JWT_EXP_HOURS
    return hours if hours > 0 else DEFAULT_JWT_EXP_HOURS


JWT_EXP_HOURS: int = _parse_exp_hours(os.getenv("JWT_EXP_HOURS"))

# Bcrypt cost factor (higher = more secure but slower)
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Optional shared secret required to self-register an admin account.
# When unset, any role may register.
ADMIN_REGISTRATION_TOKEN: Optional[str] = os.getenv("ADMIN_REGISTRATION_TOKEN") or None

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Upload Configuration ---

ALLOWED_THUMBNAIL_EXTENSIONS = (".jpg", ".jpeg", ".png")


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings handed to the services at startup."""

    jwt_secret: str
    jwt_exp_hours: int = DEFAULT_JWT_EXP_HOURS
    jwt_algorithm: str = JWT_ALGORITHM
    bcrypt_rounds: int = 12
    upload_dir: Path = UPLOAD_DIR
    upload_url_prefix: str = UPLOAD_URL_PREFIX
    api_prefix: str = "/api/v1"
    admin_registration_token: Optional[str] = None


def load_settings() -> Settings:
    """Freeze the environment-derived values into a Settings object."""
    return Settings(
        jwt_secret=JWT_SECRET,
        jwt_exp_hours=JWT_EXP_HOURS,
        jwt_algorithm=JWT_ALGORITHM,
        bcrypt_rounds=BCRYPT_ROUNDS,
        upload_dir=UPLOAD_DIR,
        upload_url_prefix=UPLOAD_URL_PREFIX,
        api_prefix=API_PREFIX,
        admin_registration_token=ADMIN_REGISTRATION_TOKEN,
    )
